from __future__ import annotations

import logging
from typing import Any, Optional, Union

from extshim.core.collaborators import KeyValueStore
from extshim.core.events import EventChannels, Listener, Subscription, channels

logger = logging.getLogger(__name__)

PrefValue = Union[str, int, bool]


class PreferenceTypeError(TypeError):
    pass


def branch_prefix(extension_id: str) -> str:
    return f"extensions.{extension_id}.sdk."


class Preferences:
    """
    Typed preference branch. Only strings, integers and booleans are stored;
    every change is published on a topic named after the preference.
    """

    def __init__(self, store: KeyValueStore, extension_id: str, events: Optional[EventChannels] = None):
        self.store = store
        self.prefix = branch_prefix(extension_id)
        self.events = events or channels

    def _key(self, name: str) -> str:
        if not name:
            raise ValueError("Preference name is empty")
        return self.prefix + name

    def get(self, name: str, default: Any = None) -> Any:
        value = self.store.get_item(self._key(name))
        if value is None:
            return default
        if isinstance(value, (str, int)):
            return value
        logger.warning("Preference '%s' holds unsupported %s, using default", name, type(value).__name__)
        return default

    def set(self, name: str, value: PrefValue) -> None:
        if value is None or not isinstance(value, (str, int, bool)):
            raise PreferenceTypeError(
                f"can't set pref {name} to value {value!r}; it isn't a string, integer, or boolean"
            )
        self.store.set_item(self._key(name), value)
        self.events.publish(name, value)

    def has(self, name: str) -> bool:
        return self.store.get_item(self._key(name)) is not None

    def remove(self, name: str) -> None:
        key = self._key(name)
        if self.store.get_item(key) is None:
            return
        self.store.remove_item(key)
        self.events.publish(name, None)

    def names(self) -> list[str]:
        return [key[len(self.prefix):] for key in self.store.keys() if key.startswith(self.prefix)]

    def clear(self) -> None:
        for name in self.names():
            self.remove(name)

    def add_listener(self, name: str, callback: Listener) -> Subscription:
        return self.events.subscribe(name, callback)

    def remove_listener(self, subscription: Subscription) -> bool:
        return self.events.unsubscribe(subscription)


_preferences: Optional[Preferences] = None


def set_preferences(preferences: Optional[Preferences]) -> None:
    global _preferences
    _preferences = preferences


def get_preferences() -> Preferences:
    if _preferences is None:
        raise RuntimeError("Preferences not initialized")
    return _preferences


__all__ = [
    "PrefValue",
    "PreferenceTypeError",
    "Preferences",
    "branch_prefix",
    "get_preferences",
    "set_preferences",
]
