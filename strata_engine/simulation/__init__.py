"""Session and runner layered on the pure orchestrator."""
