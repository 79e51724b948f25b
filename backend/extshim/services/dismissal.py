import functools
import logging
import threading
from typing import Any, Callable, Optional

from extshim.core.collaborators import TaskScheduler
from extshim.services.eligibility import EligibilityScheduler
from extshim.services.viewed_state import ViewedStateStore

logger = logging.getLogger(__name__)

DISMISS_DELAY_SECONDS = 30
DISMISS_TASK_ID = "notification_dismiss"


class DismissalHandler:
    """
    Marks the held notification as viewed, either now or after a delay.
    Only one delayed dismissal is pending at a time; a new request replaces it.
    """

    def __init__(
        self,
        eligibility: EligibilityScheduler,
        store: ViewedStateStore,
        task_scheduler: TaskScheduler,
        refresh_indicator: Callable[[], None],
        delay_seconds: float = DISMISS_DELAY_SECONDS,
        lock: Optional[threading.RLock] = None,
    ):
        self.eligibility = eligibility
        self.store = store
        self.task_scheduler = task_scheduler
        self.refresh_indicator = refresh_indicator
        self.delay_seconds = delay_seconds
        self._lock = lock or threading.RLock()
        self._pending: Optional[Any] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def dismiss(self, immediate: bool) -> bool:
        """Returns True when a notification was marked viewed right away."""
        with self._lock:
            self._cancel_pending()
            if immediate:
                return self._execute()
            self._pending = self.task_scheduler.schedule(
                DISMISS_TASK_ID, self.delay_seconds, functools.partial(self._fire, self._generation)
            )
            logger.debug("Dismissal scheduled in %ss", self.delay_seconds)
            return False

    def cancel(self) -> None:
        with self._lock:
            self._cancel_pending()

    def _cancel_pending(self) -> None:
        # A callback already handed to a worker cannot be cancelled; bumping
        # the generation makes it a no-op when it runs
        self._generation += 1
        if self._pending is None:
            return
        handle, self._pending = self._pending, None
        self.task_scheduler.cancel(handle)

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("Stale dismissal timer ignored")
                return
            self._pending = None
            self._execute()

    def _execute(self) -> bool:
        candidate = self.eligibility.current
        if candidate is None:
            return False
        if self.store.is_viewed(candidate.id):
            return False
        if not self.store.mark_viewed(candidate.id):
            # Store write failed; the notification may show again on the next scan
            return False
        self.eligibility.clear_current()
        try:
            self.refresh_indicator()
        except Exception:
            logger.exception("Indicator refresh failed")
        return True


__all__ = ["DISMISS_DELAY_SECONDS", "DISMISS_TASK_ID", "DismissalHandler"]
