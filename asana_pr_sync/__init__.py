"""asana-pr-sync: link pull requests to Asana tasks and keep them in sync."""

__version__ = "0.1.0"
