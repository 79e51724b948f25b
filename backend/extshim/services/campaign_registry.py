"""
Static table of promotional campaigns.

Campaign data is configuration only: it is loaded once, validated, and then
served as read-only views. Declaration order is significant because the
eligibility scan picks the first match.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Union

from pydantic import ValidationError

from extshim.models.campaign import Campaign

logger = logging.getLogger(__name__)

# Accepted spellings for campaign fields, first one is canonical
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "active_from": ("active_from", "activeFrom", "from"),
    "active_to": ("active_to", "activeTo", "to"),
    "presentation_type": ("presentation_type", "presentationType", "type"),
    "badge_text": ("badge_text", "badgeText"),
    "badge_color": ("badge_color", "badgeColor", "badgeBgColor"),
}

DATE_FORMATS = (
    "%d %B %Y %H:%M:%S",
    "%d %B %Y",
    "%B %d, %Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
)

DEFAULT_CAMPAIGNS: list[dict[str, Any]] = [
    {
        "id": "blackFriday2019",
        "locales": {
            "en": {"title": "BLACK FRIDAY SALE ", "desc": "(save up to 60%)", "btn": "Upgrade protection"},
            "de": {"title": "BLACK FRIDAY SALE", "desc": "(bis zu 60% Rabatt)", "btn": "Den Schutz upgraden"},
            "ru": {"title": "ЧЁРНАЯ ПЯТНИЦА:", "desc": "СКИДКИ до 60%!", "btn": "Улучшить защиту"},
            "fr": {"title": "PROMO BLACK FRIDAY", "desc": "(jusqu’à -60%)", "btn": "Améliorer la protection"},
            "it": {"title": "SCONTI BLACK FRIDAY", "desc": "(fino a -60%)", "btn": "Migliora la protezione"},
            "ja": {"title": "BLACK FRIDAY SALE", "desc": "(最大60%OFF)", "btn": "パワーアップ"},
            "ko": {"title": "BLACK FRIDAY SALE", "desc": "(60% 할인)", "btn": "보호 업그레이드"},
        },
        "url": "https://adguard.com/forward.html?action=bf2019_notify&from=popup&app=browser_extension",
        "from": "29 November 2019 00:00:00",
        "to": "2 December 2019 00:00:00",
        "type": "animated",
        "badgeText": "%",
        "badgeBgColor": "#ff0000",
    },
]


class CampaignLoadError(ValueError):
    pass


def parse_timestamp(value: Any) -> int:
    """
    Converts a campaign date into ms since epoch.
    Accepts ints (already ms), ISO 8601 strings and "29 November 2019 00:00:00".
    Naive dates are UTC.
    """
    if isinstance(value, bool):
        raise CampaignLoadError(f"Invalid date: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value:  # NaN
            raise CampaignLoadError("Invalid date: NaN")
        return int(value)
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        dt = None
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            for fmt in DATE_FORMATS:
                try:
                    dt = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
        if dt is None:
            raise CampaignLoadError(f"Invalid date: {value!r}")
    else:
        raise CampaignLoadError(f"Invalid date: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def _normalize_entry(raw: dict[str, Any]) -> dict[str, Any]:
    entry = dict(raw)
    for canonical, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if alias in entry:
                value = entry.pop(alias)
                entry.setdefault(canonical, value)
    # Legacy tables carry a precomputed `text` slot, it is resolved at runtime instead
    entry.pop("text", None)
    entry["active_from"] = parse_timestamp(entry.get("active_from"))
    entry["active_to"] = parse_timestamp(entry.get("active_to"))
    return entry


def load_campaigns(raw_entries: Iterable[Any]) -> list[Campaign]:
    """
    Builds campaigns from raw config entries. Invalid entries are dropped
    with a warning rather than failing the whole table.
    """
    campaigns: list[Campaign] = []
    seen: set[str] = set()
    for idx, raw in enumerate(raw_entries):
        if not isinstance(raw, dict):
            logger.warning("Skipping campaign #%d: expected an object, got %s", idx, type(raw).__name__)
            continue
        label = raw.get("id") or f"#{idx}"
        try:
            campaign = Campaign.model_validate(_normalize_entry(raw))
        except (CampaignLoadError, ValidationError) as exc:
            logger.warning("Skipping campaign %s: %s", label, exc)
            continue
        if campaign.id in seen:
            logger.warning("Skipping campaign %s: duplicate id", campaign.id)
            continue
        seen.add(campaign.id)
        campaigns.append(campaign)
    return campaigns


class CampaignRegistry:
    """Read-only id -> Campaign table that keeps declaration order."""

    def __init__(self, campaigns: Iterable[Campaign] = ()):
        self._campaigns: dict[str, Campaign] = {}
        for campaign in campaigns:
            if campaign.id in self._campaigns:
                raise ValueError(f"Duplicate campaign id: {campaign.id}")
            self._campaigns[campaign.id] = campaign

    @classmethod
    def from_entries(cls, raw_entries: Iterable[Any]) -> "CampaignRegistry":
        return cls(load_campaigns(raw_entries))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "CampaignRegistry":
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"Invalid JSON campaigns file at {path}") from exc
        if isinstance(data, dict):
            data = data.get("campaigns", [])
        if not isinstance(data, list):
            raise RuntimeError(f"Campaigns file {path} must hold a list of campaigns")
        return cls.from_entries(data)

    @classmethod
    def default(cls) -> "CampaignRegistry":
        return cls.from_entries(DEFAULT_CAMPAIGNS)

    def __iter__(self) -> Iterator[Campaign]:
        return iter(self._campaigns.values())

    def __len__(self) -> int:
        return len(self._campaigns)

    def __contains__(self, campaign_id: object) -> bool:
        return campaign_id in self._campaigns

    def get(self, campaign_id: str) -> Optional[Campaign]:
        return self._campaigns.get(campaign_id)

    def ids(self) -> list[str]:
        return list(self._campaigns.keys())

    def list_unexpired(self, now: int) -> list[Campaign]:
        return [c for c in self._campaigns.values() if not c.is_expired(now)]


__all__ = [
    "CampaignLoadError",
    "CampaignRegistry",
    "DEFAULT_CAMPAIGNS",
    "load_campaigns",
    "parse_timestamp",
]
