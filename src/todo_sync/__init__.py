"""Local task list with review-task reconciliation."""

__version__ = "0.1.0"
