"""
Decides whether a promotional notification should be shown right now.

States:
    IDLE        no candidate held
    HOLDING     a candidate was selected and waits to be viewed/dismissed
    SUPPRESSED  a conflicting context was seen; nothing is shown again
                for the rest of the session

A check runs these guards in order:
    1. rate limit: nothing within `min_period_ms` of the last shown notification
    2. suppression: a conflicting context purges every remaining campaign
    3. debounce: within `check_timeout_ms` of the last scan the held candidate
       is returned unchanged
    4. full scan: first campaign (declaration order) that is active and not viewed
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from extshim.core.collaborators import Clock, ContextProbe, LocaleProvider
from extshim.models.campaign import Campaign, LocalizedText, ResolvedNotification
from extshim.services.campaign_registry import CampaignRegistry
from extshim.services.locale_resolver import resolve
from extshim.services.viewed_state import ViewedStateStore

logger = logging.getLogger(__name__)

MIN_PERIOD_MS = 30 * 60 * 1000
CHECK_TIMEOUT_MS = 10 * 60 * 1000


class EligibilityState(str, enum.Enum):
    IDLE = "idle"
    HOLDING = "holding"
    SUPPRESSED = "suppressed"


@dataclass(frozen=True)
class _RuntimeCampaign:
    campaign: Campaign
    text: LocalizedText


class EligibilityScheduler:
    def __init__(
        self,
        registry: CampaignRegistry,
        store: ViewedStateStore,
        probe: ContextProbe,
        locale_provider: LocaleProvider,
        clock: Clock,
        min_period_ms: int = MIN_PERIOD_MS,
        check_timeout_ms: int = CHECK_TIMEOUT_MS,
        refresh_indicator: Optional[Callable[[], None]] = None,
    ):
        self.registry = registry
        self.store = store
        self.probe = probe
        self.locale_provider = locale_provider
        self.clock = clock
        self.min_period_ms = min_period_ms
        self.check_timeout_ms = check_timeout_ms
        self.refresh_indicator = refresh_indicator

        self._state = EligibilityState.IDLE
        self._current: Optional[ResolvedNotification] = None
        self._last_show: Optional[int] = None
        self._last_scan: Optional[int] = None
        self._campaigns = self._prepare(clock.now())

    def _prepare(self, now: int) -> list[_RuntimeCampaign]:
        locale = self.locale_provider.current_locale()
        prepared: list[_RuntimeCampaign] = []
        for campaign in self.registry.list_unexpired(now):
            text = resolve(campaign, locale)
            if text is None:
                logger.debug("Campaign '%s' has no text for locale %r, skipped", campaign.id, locale)
                continue
            prepared.append(_RuntimeCampaign(campaign, text))
        logger.info("Prepared %d of %d campaigns for locale %r", len(prepared), len(self.registry), locale)
        return prepared

    @property
    def state(self) -> EligibilityState:
        return self._state

    @property
    def current(self) -> Optional[ResolvedNotification]:
        return self._current

    @property
    def campaign_ids(self) -> list[str]:
        return [entry.campaign.id for entry in self._campaigns]

    def invalidate(self) -> None:
        """Forces the next check past the debounce window into a full scan."""
        self._last_scan = None

    def clear_current(self) -> None:
        if self._state is EligibilityState.HOLDING:
            self._state = EligibilityState.IDLE
        self._current = None

    def check_eligibility(self, context: Any = None, now: Optional[int] = None) -> Optional[ResolvedNotification]:
        if now is None:
            now = self.clock.now()

        # Just a check to not show the notification too often
        if self._last_show is not None and now - self._last_show < self.min_period_ms:
            return None

        if self._state is EligibilityState.SUPPRESSED:
            return None

        if self.probe.inspect(context).conflict_signal:
            self._suppress()
            return None

        if self._last_scan is not None and now - self._last_scan <= self.check_timeout_ms:
            result = self._current
        else:
            result = self._scan(now)

        if result is not None:
            self._last_show = now
        return result

    def _suppress(self) -> None:
        newly_viewed = [entry.campaign.id for entry in self._campaigns if self.store.mark_viewed(entry.campaign.id)]
        self._campaigns = []
        self._current = None
        self._state = EligibilityState.SUPPRESSED
        logger.info("Conflicting context detected, suppressed campaigns: %s", newly_viewed or "none")
        if newly_viewed and self.refresh_indicator is not None:
            try:
                self.refresh_indicator()
            except Exception:
                logger.exception("Indicator refresh failed")

    def _scan(self, now: int) -> Optional[ResolvedNotification]:
        self._last_scan = now
        self.store.get_last_check_time()
        self.store.record_check(now)

        self._campaigns = [entry for entry in self._campaigns if not entry.campaign.is_expired(now)]
        viewed = set(self.store.viewed_ids())

        for entry in self._campaigns:
            campaign = entry.campaign
            if campaign.is_active(now) and campaign.id not in viewed:
                self._current = ResolvedNotification.from_campaign(campaign, entry.text)
                self._state = EligibilityState.HOLDING
                logger.debug("Selected notification '%s'", campaign.id)
                return self._current

        self._current = None
        self._state = EligibilityState.IDLE
        return None


__all__ = ["CHECK_TIMEOUT_MS", "EligibilityScheduler", "EligibilityState", "MIN_PERIOD_MS"]
