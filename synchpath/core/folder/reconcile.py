"""
Recursive tree reconciliation engine.

Makes a target directory tree match a source tree, one level at a time:
- Matched subdirectories are reconciled recursively
- Type mismatches are resolved by replacing the target entry
- Files newer than the time window are copied over the target
- Target entries absent from the source are deleted (or reported)
- Source entries absent from the target are copied as new

The source always wins. The first failure at any depth aborts the run.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from synchpath.core.errors import PolicyConflictError
from synchpath.core.folder.matcher import partition_entries
from synchpath.core.formatting import format_duration
from synchpath.core.models import (
    DirectoryEntry,
    RunStatistics,
    SyncAction,
    SyncEvent,
    SyncOptions,
)
from synchpath.services.fs_access import FileSystemService


SyncObserver = Callable[[SyncEvent], None]


class _DirectoryHeader:
    """Logs the directory pair being synchronized, at most once per call."""

    def __init__(self, source_path: Path, target_path: Path):
        self.source_path = source_path
        self.target_path = target_path
        self.shown = False

    def show(self) -> None:
        if self.shown:
            return
        logging.info(f"= SYNCHRONIZING: {self.source_path}")
        logging.info(f"============ TO: {self.target_path}")
        self.shown = True


class Reconciler:
    """
    Reconciles a target directory with a source directory.

    Usage:
        stats = RunStatistics()
        Reconciler(SyncOptions(allow_delete=True), stats).reconcile(src, dst)

    Counters are accumulated into ``stats`` across the whole recursion.
    Any SyncError propagates unchanged to the caller.
    """

    def __init__(
        self,
        options: Optional[SyncOptions] = None,
        stats: Optional[RunStatistics] = None,
        fs: Optional[FileSystemService] = None,
        observer: Optional[SyncObserver] = None
    ):
        self.options = options or SyncOptions()
        self.stats = stats if stats is not None else RunStatistics()
        self.fs = fs or FileSystemService()
        self.observer = observer

    def run(self, source_path: Path | str, target_path: Path | str) -> RunStatistics:
        """Reset the counters, reconcile the two trees and return the counters."""
        self.stats.reset()
        self.reconcile(source_path, target_path)
        return self.stats

    def reconcile(self, source_path: Path | str, target_path: Path | str) -> None:
        """
        Reconcile one directory pair and, recursively, its matched subdirectories.

        Raises:
            SyncError: On the first listing, copy, delete or policy failure.
        """
        source_path, target_path = Path(source_path), Path(target_path)
        header = _DirectoryHeader(source_path, target_path)

        if self.options.verbose:
            header.show()

        source_listing = self.fs.list_directory(source_path)
        target_listing = self.fs.list_directory(target_path)

        self.stats.compared_files += len(source_listing)

        partition = partition_entries(source_listing, target_listing)

        for source_entry, target_entry in partition.pairs:
            self._process_pair(source_entry, target_entry, header)

        self._process_remaining(partition.remaining_target, target_path, header)
        self._process_new(partition.unmatched_source, target_path, header)

    # -------------------------------------------------------------------------
    # Matched pairs
    # -------------------------------------------------------------------------

    def _process_pair(
        self,
        source_entry: DirectoryEntry,
        target_entry: DirectoryEntry,
        header: _DirectoryHeader
    ) -> None:
        """Classify a matched pair and act on it."""
        if self.options.skip_symlinks and (source_entry.is_symlink or target_entry.is_symlink):
            self._skip_symlink(source_entry, target_entry)
            return

        if source_entry.is_directory and target_entry.is_directory:
            self._notify(SyncAction.RECURSE, source_entry, target_entry.full_path)
            self.reconcile(source_entry.full_path, target_entry.full_path)
        elif source_entry.is_directory:
            self._replace_file_with_directory(source_entry, target_entry, header)
        elif target_entry.is_directory:
            self._replace_directory_with_file(source_entry, target_entry, header)
        else:
            self._update_file(source_entry, target_entry, header)

    def _replace_file_with_directory(
        self,
        source_entry: DirectoryEntry,
        target_entry: DirectoryEntry,
        header: _DirectoryHeader
    ) -> None:
        header.show()
        logging.info(f"Copy: DIR {source_entry.name} --> FILE {target_entry.name}")
        self._require_delete(target_entry, "file")

        self.stats.removed_files += self.fs.delete_path(target_entry.full_path)
        copied = self.fs.copy_directory(source_entry.full_path, target_entry.full_path)
        self.stats.new_files += copied

        self._notify(
            SyncAction.REPLACE_FILE_WITH_DIRECTORY, source_entry,
            target_entry.full_path, copied
        )

    def _replace_directory_with_file(
        self,
        source_entry: DirectoryEntry,
        target_entry: DirectoryEntry,
        header: _DirectoryHeader
    ) -> None:
        header.show()
        logging.info(f"Copy: FILE {source_entry.name} --> DIR {target_entry.name}")
        self._require_delete(target_entry, "directory")

        self.stats.removed_files += self.fs.delete_path(target_entry.full_path)
        self.fs.copy_file(source_entry.full_path, target_entry.full_path)
        self.stats.new_files += 1

        self._notify(
            SyncAction.REPLACE_DIRECTORY_WITH_FILE, source_entry,
            target_entry.full_path, 1
        )

    def _require_delete(self, target_entry: DirectoryEntry, kind: str) -> None:
        """Refuse a type-mismatch replacement when deletion is disabled."""
        if self.options.allow_delete:
            return
        message = (
            f"Deleting the existing target {kind} {target_entry.full_path} is needed, "
            f"but deletion is disabled. Aborting."
        )
        logging.error(f"Reconciler - {message}")
        raise PolicyConflictError(target_entry.full_path, message=message)

    def _update_file(
        self,
        source_entry: DirectoryEntry,
        target_entry: DirectoryEntry,
        header: _DirectoryHeader
    ) -> None:
        """Copy the source file over the target if it is newer than the window."""
        # Whole seconds on both sides
        diff_seconds = int(source_entry.modify_time) - int(target_entry.modify_time)

        self._detail(
            f"Diff time for {source_entry.name} is {diff_seconds} seconds "
            f"({format_duration(diff_seconds)})"
        )

        if diff_seconds <= self.options.time_window:
            self._notify(SyncAction.UNCHANGED, source_entry, target_entry.full_path)
            return

        header.show()
        logging.info(f"Update: FILE {source_entry.name} ({format_duration(diff_seconds)} newer)")
        logging.debug(
            f"Reconciler - Source times: access {_timestamp(source_entry.access_time)}, "
            f"modification {_timestamp(source_entry.modify_time)}; "
            f"target times: access {_timestamp(target_entry.access_time)}, "
            f"modification {_timestamp(target_entry.modify_time)}"
        )

        self.fs.copy_file(source_entry.full_path, target_entry.full_path)
        self.stats.updated_files += 1

        self._notify(SyncAction.UPDATE, source_entry, target_entry.full_path, 1)

    # -------------------------------------------------------------------------
    # Leftovers
    # -------------------------------------------------------------------------

    def _process_remaining(
        self,
        remaining: list[DirectoryEntry],
        target_path: Path,
        header: _DirectoryHeader
    ) -> None:
        """Delete (or report) target entries with no source counterpart."""
        if not remaining:
            return

        if not self.options.allow_delete:
            logging.warning(
                f"{len(remaining)} files should be deleted in {target_path} "
                f"but deletion has not been enabled."
            )
            for entry in remaining:
                self._notify(SyncAction.KEEP_UNDELETED, entry, entry.full_path)
            return

        header.show()
        for entry in remaining:
            logging.info(f"Remove: {entry.kind} {entry.name}")
            deleted = self.fs.delete_path(entry.full_path)
            self.stats.removed_files += deleted
            self._notify(SyncAction.DELETE, entry, entry.full_path, deleted)

    def _process_new(
        self,
        unmatched: list[DirectoryEntry],
        target_path: Path,
        header: _DirectoryHeader
    ) -> None:
        """Copy source entries with no target counterpart."""
        for entry in unmatched:
            if self.options.skip_symlinks and entry.is_symlink:
                self._skip_symlink(entry)
                continue

            header.show()
            logging.info(f"New: {entry.kind} {entry.name}")
            destination = target_path / entry.name

            if entry.is_directory:
                copied = self.fs.copy_directory(entry.full_path, destination)
            else:
                self.fs.copy_file(entry.full_path, destination)
                copied = 1
            self.stats.new_files += copied

            self._notify(SyncAction.NEW, entry, destination, copied)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _skip_symlink(
        self,
        source_entry: DirectoryEntry,
        target_entry: Optional[DirectoryEntry] = None
    ) -> None:
        self._detail(f"Skipping symbolic link: {source_entry.name}")
        self._notify(
            SyncAction.SKIP_SYMLINK, source_entry,
            target_entry.full_path if target_entry else None
        )

    def _detail(self, message: str) -> None:
        """Per-entry detail, shown only in verbose mode."""
        if self.options.verbose:
            logging.info(message)
        else:
            logging.debug(f"Reconciler - {message}")

    def _notify(
        self,
        action: SyncAction,
        entry: DirectoryEntry,
        target_path: Optional[Path] = None,
        count: int = 0
    ) -> None:
        if self.observer is None:
            return
        # Leftover target entries have no source side
        source_path = None if action in (SyncAction.DELETE, SyncAction.KEEP_UNDELETED) else entry.full_path
        self.observer(SyncEvent(
            action=action,
            name=entry.name,
            source_path=source_path,
            target_path=target_path,
            count=count,
        ))


def _timestamp(value: float) -> str:
    return f"({int(value)}) {datetime.fromtimestamp(value).ctime()}"


def reconcile(
    source_path: Path | str,
    target_path: Path | str,
    options: SyncOptions,
    stats: RunStatistics,
    fs: Optional[FileSystemService] = None,
    observer: Optional[SyncObserver] = None
) -> None:
    """
    Reconcile ``target_path`` with ``source_path``.

    Counters are added to ``stats``; the caller owns and resets them.

    Raises:
        SyncError: On the first failure, with the failing path.
    """
    Reconciler(options, stats, fs, observer).reconcile(source_path, target_path)
