"""SyncWorker signals and state, run synchronously and on a WorkerThread."""

from __future__ import annotations

from conftest import write_file
from synchpath.core.models import RunStatistics, SyncAction, SyncOptions
from synchpath.workers import SyncWorker, WorkerState, WorkerThread


def connect_recorder(worker: SyncWorker) -> dict[str, list]:
    received: dict[str, list] = {
        "started": [], "status": [], "entry": [], "finished": [], "error": [], "state": [],
    }
    worker.signals.started.connect(lambda: received["started"].append(True))
    worker.signals.status.connect(lambda message: received["status"].append(message))
    worker.signals.entry_synced.connect(lambda event: received["entry"].append(event))
    worker.signals.finished.connect(lambda result: received["finished"].append(result))
    worker.signals.error.connect(lambda kind, message: received["error"].append((kind, message)))
    worker.signals.state_changed.connect(lambda state: received["state"].append(state))
    return received


def test_worker_synchronizes_and_reports(qapp, trees):
    source, target = trees
    write_file(source / "a.txt", "a")
    write_file(target / "old.txt", "old")
    worker = SyncWorker(source, target, SyncOptions(allow_delete=True))
    received = connect_recorder(worker)

    worker.run()

    assert worker.state is WorkerState.COMPLETED
    assert received["started"] == [True]
    assert received["state"] == [WorkerState.RUNNING, WorkerState.COMPLETED]
    assert received["error"] == []
    assert received["status"][-1] == "Synchronization finished"

    [stats] = received["finished"]
    assert isinstance(stats, RunStatistics)
    assert stats.new_files == 1
    assert stats.removed_files == 1
    assert worker.result is stats

    actions = sorted(event.action.name for event in received["entry"])
    assert actions == [SyncAction.DELETE.name, SyncAction.NEW.name]
    assert (target / "a.txt").exists()
    assert not (target / "old.txt").exists()


def test_worker_reports_sync_errors(qapp, trees):
    source, target = trees
    write_file(source / "sub" / "f.txt")
    write_file(target / "sub", "file")
    worker = SyncWorker(source, target)
    received = connect_recorder(worker)

    worker.run()

    assert worker.state is WorkerState.FAILED
    assert received["finished"] == []
    [(kind, message)] = received["error"]
    assert kind == "PolicyConflictError"
    assert "deletion is disabled" in message
    assert worker.error == (kind, message)


def test_worker_thread_runs_worker(qapp, trees):
    source, target = trees
    write_file(source / "a.txt", "a")
    thread = WorkerThread(SyncWorker(str(source), str(target)))

    thread.start()
    assert thread.wait(10_000)

    assert thread.error is None
    assert thread.result.new_files == 1
    assert (target / "a.txt").exists()
