# src/todo_sync/tasks/errors.py

from __future__ import annotations


class TodoSyncError(Exception):
    """Base class for errors raised by the task core."""


class ValidationError(TodoSyncError, ValueError):
    """User input rejected (e.g. empty task text). State is unchanged."""


class EmptySelectionError(TodoSyncError):
    """A clear operation found nothing to remove. State is unchanged."""


class MalformedDataError(TodoSyncError):
    """A persisted blob is not valid JSON or does not have the expected shape."""


class MalformedExternalData(MalformedDataError):
    """The review-task collection is unusable; sync degrades to a no-op."""
