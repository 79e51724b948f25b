import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]


@dataclass(frozen=True)
class Subscription:
    topic: str
    callback: Listener
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class EventChannels:
    """
    Named publish/subscribe topics.

    `subscribe` hands back a Subscription; passing it to `unsubscribe`
    detaches exactly that listener even if the same callback is registered
    on the topic more than once.
    """

    def __init__(self):
        self._topics: Dict[str, List[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, callback: Listener) -> Subscription:
        sub = Subscription(topic=topic, callback=callback)
        with self._lock:
            self._topics.setdefault(topic, []).append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription) -> bool:
        with self._lock:
            subs = self._topics.get(subscription.topic)
            if not subs:
                return False
            remaining = [s for s in subs if s.id != subscription.id]
            removed = len(remaining) != len(subs)
            if remaining:
                self._topics[subscription.topic] = remaining
            else:
                del self._topics[subscription.topic]
            return removed

    def has_listeners(self, topic: str) -> bool:
        with self._lock:
            return bool(self._topics.get(topic))

    def publish(self, topic: str, payload: Any = None) -> int:
        with self._lock:
            subs = list(self._topics.get(topic, ()))
        delivered = 0
        for sub in subs:
            try:
                sub.callback(topic, payload)
                delivered += 1
            except Exception:
                logger.exception("Listener %s on topic '%s' failed", sub.id, topic)
        return delivered


INDICATOR_REFRESH_TOPIC = "indicator.refresh"

channels = EventChannels()
