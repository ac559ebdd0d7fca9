"""
Worker for folder synchronization runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QObject

from synchpath.core.folder.reconcile import Reconciler
from synchpath.core.models import RunStatistics, SyncEvent, SyncOptions
from synchpath.services.fs_access import FileSystemService
from synchpath.workers.base_worker import BaseWorker


class SyncWorker(BaseWorker):
    """
    Worker that reconciles a target tree with a source tree.

    Emits `entry_synced` for each engine decision and finishes
    with the RunStatistics of the run. A SyncError is reported
    through the `error` signal; the statistics are then partial.
    """

    def __init__(
        self,
        source_path: str | Path,
        target_path: str | Path,
        options: Optional[SyncOptions] = None,
        fs: Optional[FileSystemService] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.source_path = Path(source_path)
        self.target_path = Path(target_path)
        self.options = options or SyncOptions()
        self.fs = fs
        self.stats = RunStatistics()

    def do_work(self) -> RunStatistics:
        """Run the synchronization."""
        self.report_status(f"Synchronizing {self.source_path} to {self.target_path}...")

        reconciler = Reconciler(
            self.options,
            self.stats,
            self.fs,
            observer=self._on_event,
        )
        stats = reconciler.run(self.source_path, self.target_path)

        self.report_status("Synchronization finished")
        return stats

    def _on_event(self, event: SyncEvent) -> None:
        self.signals.entry_synced.emit(event)
