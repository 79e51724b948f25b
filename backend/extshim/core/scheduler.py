import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

_scheduler: Optional[BackgroundScheduler] = None


def init_scheduler() -> BackgroundScheduler:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        return _scheduler
    _scheduler = BackgroundScheduler(timezone=timezone.utc)
    _scheduler.start()
    logger.info("Background Scheduler initialized.")
    return _scheduler


def get_scheduler() -> Optional[BackgroundScheduler]:
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Background Scheduler stopped.")
    _scheduler = None


def schedule_task(func, trigger, task_id, replace=True) -> Job:
    if not _scheduler:
        raise RuntimeError("Scheduler not initialized")

    job = _scheduler.add_job(
        func,
        trigger,
        id=task_id,
        replace_existing=replace
    )
    logger.info(f"Scheduled task '{task_id}' with trigger: {trigger}")
    return job


class ApsTaskScheduler:
    """One-shot deferred callbacks on the shared background scheduler."""

    def schedule(self, task_id: str, delay_seconds: float, func: Callable[[], None]) -> Job:
        run_date = datetime.now(timezone.utc) + timedelta(seconds=delay_seconds)
        return schedule_task(func, DateTrigger(run_date=run_date), task_id)

    def cancel(self, handle: Job) -> None:
        try:
            handle.remove()
        except JobLookupError:
            # Already fired or removed
            logger.debug("Task %s no longer scheduled", handle.id)


__all__ = [
    "ApsTaskScheduler",
    "get_scheduler",
    "init_scheduler",
    "schedule_task",
    "shutdown_scheduler",
]
