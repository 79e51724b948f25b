from typing import Mapping, Optional, TypeVar

from extshim.models.campaign import Campaign, LocalizedText

T = TypeVar("T")


def normalize_tag(tag: Optional[str]) -> Optional[str]:
    """'en_US' -> 'en-US'. Returns None for empty tags."""
    if not tag:
        return None
    tag = tag.strip().replace("_", "-")
    return tag or None


def primary_subtag(tag: Optional[str]) -> Optional[str]:
    tag = normalize_tag(tag)
    if not tag:
        return None
    return tag.split("-", 1)[0] or None


def match_locale(variants: Mapping[str, T], locale_tag: Optional[str]) -> Optional[T]:
    """Exact tag first, then the primary subtag, else None."""
    tag = normalize_tag(locale_tag)
    if not tag:
        return None
    primary = primary_subtag(tag)
    if not primary:
        return None

    exact = variants.get(tag)
    if exact is not None:
        return exact
    # Config keys may use a different case or separator than the runtime tag
    lowered = tag.lower()
    for key, value in variants.items():
        key_tag = normalize_tag(key)
        if key_tag and key_tag.lower() == lowered:
            return value
    return variants.get(primary)


def resolve(campaign: Campaign, locale_tag: Optional[str]) -> Optional[LocalizedText]:
    return match_locale(campaign.locales, locale_tag)


__all__ = ["match_locale", "normalize_tag", "primary_subtag", "resolve"]
