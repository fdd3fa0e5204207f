"""Trajectory analysis: aggregate metrics, snapshot logging and invariant checks."""
