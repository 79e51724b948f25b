import itertools
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT,):
    str_path = str(path)
    if str_path not in sys.path:
        sys.path.insert(0, str_path)

from extshim.core.datastore import MemoryKeyValueStore  # noqa: E402
from extshim.core.events import EventChannels  # noqa: E402
from extshim.models.campaign import Campaign  # noqa: E402
from extshim.services.campaign_registry import CampaignRegistry  # noqa: E402

T0 = 1_700_000_000_000
MINUTE = 60 * 1000

EN_TEXT = {"title": "Sale", "description": "save up to 60%", "button_text": "Upgrade"}


class FakeClock:
    def __init__(self, now: int = T0):
        self._now = now

    def now(self) -> int:
        return self._now

    def set(self, value: int) -> None:
        self._now = value

    def advance(self, ms: int) -> None:
        self._now += ms


class FakeTaskScheduler:
    """Runs scheduled callbacks when the fake clock is advanced past their due time."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.tasks: dict[int, tuple[int, str, object]] = {}
        self.cancelled: list[int] = []
        self._ids = itertools.count(1)

    def schedule(self, task_id, delay_seconds, func):
        handle = next(self._ids)
        self.tasks[handle] = (self.clock.now() + int(delay_seconds * 1000), task_id, func)
        return handle

    def cancel(self, handle):
        if self.tasks.pop(handle, None) is not None:
            self.cancelled.append(handle)

    def advance(self, ms: int) -> None:
        target = self.clock.now() + ms
        while True:
            due = sorted((due_at, handle) for handle, (due_at, _, _) in self.tasks.items() if due_at <= target)
            if not due:
                break
            due_at, handle = due[0]
            _, _, func = self.tasks.pop(handle)
            self.clock.set(due_at)
            func()
        self.clock.set(target)


def make_campaign(campaign_id="c1", start=T0, end=T0 + 1000, locales=None, **extra) -> Campaign:
    return Campaign(
        id=campaign_id,
        locales=locales if locales is not None else {"en": EN_TEXT},
        url=f"https://example.com/{campaign_id}",
        active_from=start,
        active_to=end,
        **extra,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def task_scheduler(clock):
    return FakeTaskScheduler(clock)


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def events():
    return EventChannels()


@pytest.fixture
def registry():
    return CampaignRegistry(
        [
            make_campaign("c1", T0, T0 + 24 * 60 * MINUTE),
            make_campaign("c2", T0, T0 + 24 * 60 * MINUTE),
        ]
    )
