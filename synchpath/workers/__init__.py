"""
Background workers for non-blocking synchronization.

Provides QThread-based workers that run the reconciliation
engine off the caller's thread. All workers use Qt signals
for thread-safe communication.
"""

from synchpath.workers.base_worker import (
    BaseWorker,
    WorkerSignals,
    WorkerState,
    WorkerThread,
)
from synchpath.workers.sync_worker import (
    SyncWorker,
)

__all__ = [
    # Base
    'BaseWorker',
    'WorkerSignals',
    'WorkerState',
    'WorkerThread',
    # Sync
    'SyncWorker',
]
