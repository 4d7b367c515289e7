"""Shared utilities: HTTP pool, logging setup and status reporting."""
