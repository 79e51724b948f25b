"""
Host-side collaborators consumed by the notification engine.

The engine never talks to the host directly: persistence, time, locale,
context inspection, UI refresh and deferred execution all come in through
the small interfaces below so they can be swapped for fakes in tests.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Any: ...

    def set_item(self, key: str, value: Any) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class Clock(Protocol):
    def now(self) -> int: ...


class LocaleProvider(Protocol):
    def current_locale(self) -> Optional[str]: ...


class TaskScheduler(Protocol):
    def schedule(self, task_id: str, delay_seconds: float, func: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


@dataclass(frozen=True)
class ProbeResult:
    conflict_signal: bool = False


class ContextProbe(Protocol):
    def inspect(self, context: Any) -> ProbeResult: ...


class SystemClock:
    """Wall clock in milliseconds since epoch."""

    def now(self) -> int:
        return int(time.time() * 1000)


@dataclass
class StaticLocaleProvider:
    locale: Optional[str] = None

    def current_locale(self) -> Optional[str]:
        return self.locale


CONFLICT_KEYS = ("product_detected", "adguardDetected", "adguard_detected")


class ProductDetectedProbe:
    """
    Reports a conflict when the inspected frame already shows the product
    running. Accepts mappings (query params, frame info dicts) or objects.
    """

    def inspect(self, context: Any) -> ProbeResult:
        if context is None:
            return ProbeResult(False)
        for key in CONFLICT_KEYS:
            if isinstance(context, Mapping):
                value = context.get(key)
            else:
                value = getattr(context, key, None)
            if value:
                return ProbeResult(True)
        return ProbeResult(False)


__all__ = [
    "Clock",
    "ContextProbe",
    "KeyValueStore",
    "LocaleProvider",
    "ProbeResult",
    "ProductDetectedProbe",
    "StaticLocaleProvider",
    "SystemClock",
    "TaskScheduler",
]
