# tasks/task_errors.py

"""
Error taxonomy for the task subsystem.

Id-based "not found" is reported as a False/None return, never raised.
"""

from __future__ import annotations


class TaskManagerError(Exception):
    """Base class for errors the command surface reports as a plain message."""


class ValidationError(TaskManagerError, ValueError):
    """Invalid input to a mutating operation. Raised before any state change."""


class PersistenceError(TaskManagerError):
    """Task snapshot could not be read, written or parsed."""


class FormatError(TaskManagerError, ValueError):
    """Import/export codec was given malformed input."""


class NotFoundError(TaskManagerError, FileNotFoundError):
    """Import source file does not exist."""
