import threading

import pytest

from extshim.core import scheduler as scheduler_module
from extshim.core.scheduler import ApsTaskScheduler, get_scheduler, init_scheduler, shutdown_scheduler


@pytest.fixture
def running_scheduler():
    sched = init_scheduler()
    yield sched
    shutdown_scheduler()


def test_schedule_requires_initialized_scheduler():
    shutdown_scheduler()
    with pytest.raises(RuntimeError):
        ApsTaskScheduler().schedule("t", 1, lambda: None)


def test_init_is_idempotent(running_scheduler):
    assert init_scheduler() is running_scheduler
    assert get_scheduler() is running_scheduler


def test_task_fires_after_delay(running_scheduler):
    fired = threading.Event()
    ApsTaskScheduler().schedule("notification_dismiss", 0.05, fired.set)
    assert fired.wait(timeout=5)


def test_same_task_id_replaces_pending_job(running_scheduler):
    tasks = ApsTaskScheduler()
    tasks.schedule("notification_dismiss", 60, lambda: None)
    tasks.schedule("notification_dismiss", 60, lambda: None)
    assert len(running_scheduler.get_jobs()) == 1


def test_cancel_removes_job_and_tolerates_repeats(running_scheduler):
    tasks = ApsTaskScheduler()
    job = tasks.schedule("notification_dismiss", 60, lambda: None)
    tasks.cancel(job)
    assert running_scheduler.get_job("notification_dismiss") is None
    tasks.cancel(job)


def test_shutdown_clears_module_state(running_scheduler):
    shutdown_scheduler()
    assert scheduler_module.get_scheduler() is None
