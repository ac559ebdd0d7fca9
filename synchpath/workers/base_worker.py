"""
Base worker classes for background synchronization.

Provides common functionality for workers:
- Status reporting
- Error reporting
- State management
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, Qt, pyqtSignal, pyqtSlot, QMutex, QMutexLocker


class WorkerState(Enum):
    """State of a worker."""
    PENDING = auto()
    RUNNING = auto()
    COMPLETED = auto()
    FAILED = auto()


class WorkerSignals(QObject):
    """
    Signals for worker communication.

    Used to pass results from the worker thread
    to the thread that owns the receivers.
    """
    # Worker started
    started = pyqtSignal()

    # Status message
    status = pyqtSignal(str)

    # One engine decision: SyncEvent
    entry_synced = pyqtSignal(object)

    # Worker finished successfully with result
    finished = pyqtSignal(object)

    # Worker failed with error
    error = pyqtSignal(str, str)  # (error_type, message)

    # State changed
    state_changed = pyqtSignal(object)  # WorkerState


class BaseWorker(QObject):
    """
    Base class for workers that run in a QThread.

    Subclasses implement `do_work`.

    Usage:
        thread = WorkerThread(MyWorker(args))
        thread.start()
        thread.wait()
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._state = WorkerState.PENDING
        self._mutex = QMutex()
        self._result: Any = None
        self._error: Optional[tuple[str, str]] = None

    @property
    def state(self) -> WorkerState:
        """Current worker state."""
        with QMutexLocker(self._mutex):
            return self._state

    @state.setter
    def state(self, value: WorkerState) -> None:
        with QMutexLocker(self._mutex):
            self._state = value
        self.signals.state_changed.emit(value)

    @property
    def result(self) -> Any:
        """Get the result (after completion)."""
        return self._result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        """Get error info (after failure)."""
        return self._error

    @pyqtSlot()
    def run(self) -> None:
        """
        Main worker execution method.

        Called when the thread starts. Subclasses override
        `do_work`, not this method.
        """
        self.state = WorkerState.RUNNING
        self.signals.started.emit()

        try:
            result = self.do_work()
        except Exception as e:
            self._error = (type(e).__name__, str(e))
            self.state = WorkerState.FAILED
            self.signals.error.emit(type(e).__name__, str(e))
            return

        self._result = result
        self.state = WorkerState.COMPLETED
        self.signals.finished.emit(result)

    def do_work(self) -> Any:
        """Perform the actual work and return its result."""
        raise NotImplementedError

    def report_status(self, message: str) -> None:
        """Report a status message."""
        self.signals.status.emit(message)


class WorkerThread(QThread):
    """
    Convenience class for running a worker in its own thread.

    Usage:
        thread = WorkerThread(my_worker)
        thread.start()
        thread.wait()
    """

    def __init__(
        self,
        worker: BaseWorker,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.worker = worker
        self.worker.moveToThread(self)

        self.started.connect(self.worker.run)
        # The owning thread may be blocked in wait()
        direct = Qt.ConnectionType.DirectConnection
        self.worker.signals.finished.connect(self.quit, direct)
        self.worker.signals.error.connect(self.quit, direct)

    @property
    def result(self) -> Any:
        """Get the worker's result."""
        return self.worker.result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        """Get error info if failed."""
        return self.worker.error
