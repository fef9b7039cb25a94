"""Background dispatch of network jobs onto Qt worker threads."""

from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, Tuple

from PySide6.QtCore import QObject, QThread, Signal

from core.session import JobOutcome, run_job
from services.logger import get_logger


logger = get_logger("task_manager")


class JobWorker(QThread):
    """Run a single job off the GUI thread and report its outcome."""

    job_finished = Signal(int, object)

    def __init__(self, token: int, job: Callable[[], Any]) -> None:
        super().__init__()
        self._token = token
        self._job = job

    def run(self) -> None:
        """Entry point executed by QThread.start; run_job never raises."""
        self.job_finished.emit(self._token, run_job(self._job))


class TaskManager(QObject):
    """Dispatcher that runs jobs on worker threads and calls back on the GUI thread.

    The manager lives on the GUI thread, so the queued ``job_finished``
    connection delivers every outcome there. Jobs cannot be cancelled; callers
    that no longer care about a result simply ignore it.
    """

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._tokens = itertools.count(1)
        self._jobs: Dict[int, Tuple[JobWorker, Callable[[JobOutcome], None]]] = {}

    def dispatch(self, job: Callable[[], Any], callback: Callable[[JobOutcome], None]) -> None:
        """Start ``job`` on a new worker; ``callback`` receives its JobOutcome."""
        token = next(self._tokens)
        worker = JobWorker(token, job)
        worker.job_finished.connect(self._on_job_finished)
        self._jobs[token] = (worker, callback)
        logger.debug("Dispatching job %d (%d active)", token, len(self._jobs))
        worker.start()

    def has_active_jobs(self) -> bool:
        return any(worker.isRunning() for worker, _ in self._jobs.values())

    def shutdown(self, timeout_ms: int = 5000) -> None:
        """Wait for outstanding workers so no thread outlives the application.

        Workers that are still running after ``timeout_ms`` stay referenced;
        dropping a running QThread aborts the process.
        """
        for token, (worker, _) in list(self._jobs.items()):
            if worker.wait(timeout_ms):
                continue
            logger.warning("Job %d still running at shutdown", token)

    def _on_job_finished(self, token: int, outcome: JobOutcome) -> None:
        entry = self._jobs.pop(token, None)
        if entry is None:
            return
        worker, callback = entry
        # run() returns right after emitting, so this wait is brief.
        worker.wait()
        worker.deleteLater()
        callback(outcome)
