import logging
import threading
from typing import Any, Callable, Optional

from extshim.core.collaborators import (
    Clock,
    ContextProbe,
    KeyValueStore,
    LocaleProvider,
    ProductDetectedProbe,
    StaticLocaleProvider,
    SystemClock,
    TaskScheduler,
)
from extshim.core.events import INDICATOR_REFRESH_TOPIC, EventChannels, channels
from extshim.core.settings import Settings
from extshim.models.campaign import ResolvedNotification, ViewedState
from extshim.services.campaign_registry import CampaignRegistry
from extshim.services.dismissal import DismissalHandler
from extshim.services.eligibility import EligibilityScheduler, EligibilityState
from extshim.services.viewed_state import ViewedStateStore

logger = logging.getLogger(__name__)


class NotificationEngine:
    """Entry point used by the host: one current notification, and a way to dismiss it."""

    def __init__(
        self,
        registry: CampaignRegistry,
        store: KeyValueStore,
        task_scheduler: TaskScheduler,
        clock: Optional[Clock] = None,
        locale_provider: Optional[LocaleProvider] = None,
        probe: Optional[ContextProbe] = None,
        refresh_indicator: Optional[Callable[[], None]] = None,
        events: Optional[EventChannels] = None,
        min_period_ms: int = 30 * 60 * 1000,
        check_timeout_ms: int = 10 * 60 * 1000,
        dismiss_delay_seconds: float = 30,
    ):
        self.clock = clock or SystemClock()
        self.events = events or channels
        self.refresh_indicator = refresh_indicator or self._publish_refresh
        self.viewed_state = ViewedStateStore(store, self.clock)
        self._lock = threading.RLock()
        self.eligibility = EligibilityScheduler(
            registry=registry,
            store=self.viewed_state,
            probe=probe or ProductDetectedProbe(),
            locale_provider=locale_provider or StaticLocaleProvider(),
            clock=self.clock,
            min_period_ms=min_period_ms,
            check_timeout_ms=check_timeout_ms,
            refresh_indicator=self.refresh_indicator,
        )
        self.dismissal = DismissalHandler(
            eligibility=self.eligibility,
            store=self.viewed_state,
            task_scheduler=task_scheduler,
            refresh_indicator=self.refresh_indicator,
            delay_seconds=dismiss_delay_seconds,
            lock=self._lock,
        )

    def _publish_refresh(self) -> None:
        self.events.publish(INDICATOR_REFRESH_TOPIC)

    def get_current_notification(self, context: Any = None) -> Optional[ResolvedNotification]:
        with self._lock:
            return self.eligibility.check_eligibility(context)

    def set_notification_viewed(self, immediate: bool) -> bool:
        return self.dismissal.dismiss(immediate)

    @property
    def state(self) -> EligibilityState:
        return self.eligibility.state

    def viewed_state_snapshot(self) -> ViewedState:
        return self.viewed_state.load()

    def close(self) -> None:
        self.dismissal.cancel()


def build_registry(settings: Settings) -> CampaignRegistry:
    campaigns_file = settings.notifications.campaigns_file
    if campaigns_file:
        registry = CampaignRegistry.from_file(campaigns_file)
        logger.info("Loaded %d campaigns from %s", len(registry), campaigns_file)
        return registry
    return CampaignRegistry.default()


def build_engine(
    settings: Settings,
    store: KeyValueStore,
    task_scheduler: TaskScheduler,
    **overrides: Any,
) -> NotificationEngine:
    registry = overrides.pop("registry", None) or build_registry(settings)
    conf = settings.notifications
    return NotificationEngine(
        registry=registry,
        store=store,
        task_scheduler=task_scheduler,
        locale_provider=overrides.pop("locale_provider", None)
        or StaticLocaleProvider(settings.locale.default_locale),
        min_period_ms=conf.min_period_ms,
        check_timeout_ms=conf.check_timeout_ms,
        dismiss_delay_seconds=conf.dismiss_delay_seconds,
        **overrides,
    )


_engine: Optional[NotificationEngine] = None


def set_engine(engine: Optional[NotificationEngine]) -> None:
    global _engine
    _engine = engine


def get_engine() -> NotificationEngine:
    if _engine is None:
        raise RuntimeError("Notification engine not initialized")
    return _engine


def peek_engine() -> Optional[NotificationEngine]:
    return _engine


__all__ = [
    "NotificationEngine",
    "build_engine",
    "build_registry",
    "get_engine",
    "peek_engine",
    "set_engine",
]
