"""Read-side systems: quota validation and crime classification."""
