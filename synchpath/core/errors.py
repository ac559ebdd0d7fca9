"""
Exception hierarchy for synchronization runs.

Configuration and path errors stop a run before it starts.
SyncError subclasses abort the reconciliation at any depth and
propagate unchanged up to the caller of the top-level call.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SynchpathError(Exception):
    """Base class for all errors raised by synchpath."""


class ConfigurationError(SynchpathError):
    """Invalid arguments, settings file or log file target."""


class PathAccessError(SynchpathError):
    """A top-level source or target path is missing or unreadable."""

    def __init__(self, role: str, path: Path | str):
        self.role = role
        self.path = Path(path)
        super().__init__(f"Cannot access {role} path: {self.path}")


class SyncError(SynchpathError):
    """
    A reconciliation failure.

    Carries the path the failing operation was working on and the
    underlying cause, if any.
    """

    operation = "synchronize"

    def __init__(self, path: Path | str, cause: Optional[BaseException] = None, message: str = ""):
        self.path = Path(path)
        self.cause = cause
        if not message:
            message = f"Cannot {self.operation}: {self.path}"
            if cause is not None:
                message += f" ({cause})"
        super().__init__(message)


class ListingError(SyncError):
    """A directory could not be listed."""
    operation = "list directory"


class CopyError(SyncError):
    """A file or directory could not be copied."""
    operation = "copy"


class DeleteError(SyncError):
    """A file or directory could not be deleted."""
    operation = "delete"


class PolicyConflictError(SyncError):
    """A type mismatch needs a deletion but deletion is disabled."""
    operation = "replace"
