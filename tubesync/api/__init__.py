"""HTTP API for triggering and monitoring sync runs."""
