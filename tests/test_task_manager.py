"""Tests for the Qt dispatcher that runs jobs on worker threads."""

import threading
import time

from core.models import HttpError
from services.task_manager import TaskManager


def _pump_until(app, condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not condition() and time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.01)
    return condition()


def test_outcome_is_delivered_on_the_dispatching_thread(qt_app):
    manager = TaskManager()
    job_threads = []
    received = []

    def job():
        job_threads.append(threading.get_ident())
        return 42

    manager.dispatch(job, lambda outcome: received.append((threading.get_ident(), outcome)))

    assert _pump_until(qt_app, lambda: received)
    callback_thread, outcome = received[0]
    assert outcome.ok
    assert outcome.value == 42
    assert callback_thread == threading.get_ident()
    assert job_threads[0] != threading.get_ident()
    assert not manager.has_active_jobs()


def test_job_errors_arrive_as_failed_outcomes(qt_app):
    manager = TaskManager()
    received = []

    def job():
        raise HttpError(502, "Bad gateway")

    manager.dispatch(job, received.append)

    assert _pump_until(qt_app, lambda: received)
    assert not received[0].ok
    assert received[0].error.status_code == 502


def test_shutdown_keeps_workers_that_outlive_the_timeout(qt_app):
    manager = TaskManager()
    release = threading.Event()
    received = []
    manager.dispatch(lambda: release.wait(5) and "done", received.append)

    manager.shutdown(timeout_ms=10)
    assert manager.has_active_jobs()

    release.set()
    assert _pump_until(qt_app, lambda: received)
    assert received[0].value == "done"
