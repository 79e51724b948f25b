import json
import logging
import re
from pathlib import Path
from typing import Any, Optional, Sequence

from extshim.services.locale_resolver import match_locale

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$(\d+)")


def format_message(text: Optional[str], args: Optional[Sequence[Any]] = None) -> str:
    """Replaces $1..$n with args; placeholders without an argument stay as they are."""
    if not text:
        return ""
    if not args:
        return text

    def _sub(match: re.Match) -> str:
        idx = int(match.group(1)) - 1
        if 0 <= idx < len(args) and args[idx] is not None:
            return str(args[idx])
        return match.group(0)

    return _PLACEHOLDER.sub(_sub, text)


def _flatten(raw: dict[str, Any]) -> dict[str, str]:
    messages: dict[str, str] = {}
    for key, value in raw.items():
        # Chrome-style bundles wrap the text: {"key": {"message": "..."}}
        if isinstance(value, dict):
            value = value.get("message")
        if isinstance(value, str):
            messages[key] = value
    return messages


class MessageBundle:
    def __init__(self, messages: Optional[dict[str, str]] = None, locale: Optional[str] = None):
        self.messages = dict(messages or {})
        self.locale = locale

    @classmethod
    def from_file(cls, path: Path, locale: Optional[str] = None) -> "MessageBundle":
        with path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, dict):
            raise ValueError(f"Message bundle {path} must be a JSON object")
        return cls(_flatten(raw), locale=locale)

    def get_message(self, key: str, args: Optional[Sequence[Any]] = None) -> str:
        if key not in self.messages:
            # Key not found, simply return it as a translation
            return key
        return format_message(self.messages[key], args)


def available_locales(messages_dir: Path) -> dict[str, Path]:
    """Maps locale tag -> bundle file for `<dir>/<locale>/messages.json` or `<dir>/<locale>.json`."""
    found: dict[str, Path] = {}
    if not messages_dir.is_dir():
        return found
    for entry in sorted(messages_dir.iterdir()):
        if entry.is_dir() and (entry / "messages.json").is_file():
            found[entry.name] = entry / "messages.json"
        elif entry.is_file() and entry.suffix == ".json":
            found[entry.stem] = entry
    return found


def load_bundle(messages_dir: Optional[Path], locale: Optional[str], default_locale: str = "en") -> MessageBundle:
    """Best bundle for the locale, falling back to the default locale, else an empty bundle."""
    if messages_dir is None:
        return MessageBundle(locale=locale)
    bundles = available_locales(messages_dir)
    for candidate in (locale, default_locale):
        path = match_locale(bundles, candidate)
        if path is None:
            continue
        try:
            return MessageBundle.from_file(path, locale=candidate)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load message bundle %s: %s", path, exc)
    return MessageBundle(locale=locale)


_bundle: Optional[MessageBundle] = None


def set_bundle(bundle: Optional[MessageBundle]) -> None:
    global _bundle
    _bundle = bundle


def get_bundle() -> MessageBundle:
    if _bundle is None:
        return MessageBundle()
    return _bundle


__all__ = [
    "MessageBundle",
    "available_locales",
    "format_message",
    "get_bundle",
    "load_bundle",
    "set_bundle",
]
