import logging
import threading
from typing import Any, Optional

from extshim.core.collaborators import Clock, KeyValueStore
from extshim.models.campaign import ViewedState

logger = logging.getLogger(__name__)

VIEWED_NOTIFICATIONS = "viewed-notifications"
LAST_NOTIFICATION_TIME = "viewed-notification-time"
FIRST_SEEN_TIME = "viewed-notification-first-seen"


def _as_timestamp(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value == value and value > 0:
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


def _as_id_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    ids: list[str] = []
    for item in value:
        if isinstance(item, str) and item and item not in ids:
            ids.append(item)
    return ids


class ViewedStateStore:
    """
    Tracks which campaigns were shown and when checks ran.

    Reads never raise: an unreadable or malformed value counts as absent.
    Writes are serialized and failures are logged, not propagated.
    """

    def __init__(self, store: KeyValueStore, clock: Clock):
        self.store = store
        self.clock = clock
        self._lock = threading.RLock()

    def _read(self, key: str) -> Any:
        try:
            return self.store.get_item(key)
        except Exception as exc:
            logger.warning("Failed to read '%s' from store, treating as absent: %s", key, exc)
            return None

    def _write(self, key: str, value: Any) -> bool:
        try:
            self.store.set_item(key, value)
            return True
        except Exception as exc:
            logger.warning("Failed to write '%s' to store: %s", key, exc)
            return False

    def viewed_ids(self) -> list[str]:
        return _as_id_list(self._read(VIEWED_NOTIFICATIONS))

    def is_viewed(self, campaign_id: str) -> bool:
        return campaign_id in self.viewed_ids()

    def mark_viewed(self, campaign_id: str) -> bool:
        """Appends the id if absent. Returns True when it was newly recorded."""
        with self._lock:
            try:
                raw = self.store.get_item(VIEWED_NOTIFICATIONS)
            except Exception as exc:
                # Never overwrite ids that could not be read
                logger.warning("Failed to read '%s', not marking '%s': %s", VIEWED_NOTIFICATIONS, campaign_id, exc)
                return False
            ids = _as_id_list(raw)
            if campaign_id in ids:
                return False
            ids.append(campaign_id)
            if not self._write(VIEWED_NOTIFICATIONS, ids):
                return False
            logger.info("Notification '%s' marked as viewed", campaign_id)
            return True

    def get_last_check_time(self) -> int:
        """Stored last check time; the first ever call stores and returns now."""
        with self._lock:
            last = _as_timestamp(self._read(LAST_NOTIFICATION_TIME))
            if last is not None:
                return last
            now = self.clock.now()
            self._write(LAST_NOTIFICATION_TIME, now)
            if _as_timestamp(self._read(FIRST_SEEN_TIME)) is None:
                self._write(FIRST_SEEN_TIME, now)
            return now

    def record_check(self, now: int) -> None:
        with self._lock:
            if _as_timestamp(self._read(FIRST_SEEN_TIME)) is None:
                self._write(FIRST_SEEN_TIME, now)
            self._write(LAST_NOTIFICATION_TIME, now)

    def load(self) -> ViewedState:
        return ViewedState(
            viewed_ids=self.viewed_ids(),
            last_check_timestamp=_as_timestamp(self._read(LAST_NOTIFICATION_TIME)),
            first_seen_timestamp=_as_timestamp(self._read(FIRST_SEEN_TIME)),
        )


__all__ = [
    "FIRST_SEEN_TIME",
    "LAST_NOTIFICATION_TIME",
    "VIEWED_NOTIFICATIONS",
    "ViewedStateStore",
]
