"""
Core data models for the tree synchronizer.

This module defines the data structures shared by the engine,
the filesystem service, the worker layer and the command line:
- Directory listing models
- Synchronization options
- Matching state
- Run statistics
- Sync events reported to observers

All models are UI-agnostic and carry no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Optional


# =============================================================================
# Enumerations
# =============================================================================

class MatchState(Enum):
    """Matching state of a source entry within one reconciliation call."""
    UNMATCHED = auto()  # No target entry with the same name (yet)
    MATCHED = auto()    # A target entry was found and the pair was processed


class SyncAction(Enum):
    """Decision taken by the engine for one entry."""
    RECURSE = auto()                       # Both sides are directories
    UPDATE = auto()                        # Source file newer than the time window
    UNCHANGED = auto()                     # File pair within the time window
    REPLACE_FILE_WITH_DIRECTORY = auto()   # Source dir, target file
    REPLACE_DIRECTORY_WITH_FILE = auto()   # Source file, target dir
    SKIP_SYMLINK = auto()                  # Suppressed by skip_symlinks
    DELETE = auto()                        # Target entry absent from source, removed
    KEEP_UNDELETED = auto()                # Target entry absent from source, deletion disabled
    NEW = auto()                           # Source entry absent from target, copied


# =============================================================================
# Listing Models
# =============================================================================

@dataclass(frozen=True)
class DirectoryEntry:
    """
    One filesystem object seen in a single directory listing.

    ``is_directory`` follows symbolic links, so a link to a directory
    has both ``is_directory`` and ``is_symlink`` set.
    """
    name: str
    full_path: Path
    access_time: float
    modify_time: float
    is_directory: bool
    is_symlink: bool = False

    @property
    def kind(self) -> str:
        """Short label used in log lines."""
        return "DIR" if self.is_directory else "FILE"


DirectoryListing = list[DirectoryEntry]


# =============================================================================
# Options
# =============================================================================

@dataclass(frozen=True)
class SyncOptions:
    """Options for one synchronization run. Read-only to the engine."""
    allow_delete: bool = False
    verbose: bool = False
    time_window: int = 0  # Seconds the source must be newer by to trigger an update
    skip_symlinks: bool = False

    def __post_init__(self) -> None:
        if self.time_window < 0:
            raise ValueError(f"time_window must be non-negative, got {self.time_window}")


# =============================================================================
# Statistics
# =============================================================================

@dataclass
class RunStatistics:
    """
    Counters accumulated across a whole recursive run.

    Owned by the top-level caller and passed by reference through
    every reconciliation call. Only the engine increments them.
    """
    compared_files: int = 0
    updated_files: int = 0
    new_files: int = 0
    removed_files: int = 0

    @property
    def total_changes(self) -> int:
        """Number of filesystem changes made by the run."""
        return self.updated_files + self.new_files + self.removed_files

    def reset(self) -> None:
        """Zero all counters before a new run."""
        self.compared_files = 0
        self.updated_files = 0
        self.new_files = 0
        self.removed_files = 0

    def report_lines(self) -> list[str]:
        return [
            f"Compared files: {self.compared_files}",
            f"Updated files : {self.updated_files}",
            f"New files     : {self.new_files}",
            f"Removed files : {self.removed_files}",
        ]


# =============================================================================
# Matching Models
# =============================================================================

@dataclass
class MatchPartition:
    """
    Result of matching one directory level.

    ``pairs`` follows source listing order. ``states`` is parallel to the
    source listing. ``remaining_target`` keeps target listing order.
    """
    pairs: list[tuple[DirectoryEntry, DirectoryEntry]] = field(default_factory=list)
    states: list[MatchState] = field(default_factory=list)
    unmatched_source: list[DirectoryEntry] = field(default_factory=list)
    remaining_target: list[DirectoryEntry] = field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return len(self.pairs)


# =============================================================================
# Events
# =============================================================================

@dataclass(frozen=True)
class SyncEvent:
    """A single decision reported by the engine to its observer."""
    action: SyncAction
    name: str
    source_path: Optional[Path] = None
    target_path: Optional[Path] = None
    count: int = 0  # Files copied or deleted by the action

    @property
    def is_change(self) -> bool:
        return self.action in (
            SyncAction.UPDATE,
            SyncAction.REPLACE_FILE_WITH_DIRECTORY,
            SyncAction.REPLACE_DIRECTORY_WITH_FILE,
            SyncAction.DELETE,
            SyncAction.NEW,
        )
