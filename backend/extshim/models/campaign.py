from __future__ import annotations

import enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class PresentationType(str, enum.Enum):
    ANIMATED = "animated"
    STATIC = "static"


class LocalizedText(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    description: str = Field(default="", validation_alias=AliasChoices("description", "desc"))
    button_text: str = Field(default="", validation_alias=AliasChoices("button_text", "btn", "buttonText"))


class Campaign(BaseModel):
    """A promotional notification definition. Timestamps are ms since epoch."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    locales: dict[str, LocalizedText] = Field(default_factory=dict)
    url: str = ""
    active_from: int
    active_to: int
    presentation_type: PresentationType = PresentationType.STATIC
    badge_text: str = ""
    badge_color: str = ""

    @model_validator(mode="after")
    def _check_window(self) -> "Campaign":
        if self.active_from >= self.active_to:
            raise ValueError(f"active_from must be before active_to (campaign '{self.id}')")
        return self

    def is_active(self, now: int) -> bool:
        return self.active_from <= now < self.active_to

    def is_expired(self, now: int) -> bool:
        return now >= self.active_to


class ResolvedNotification(Campaign):
    resolved_text: LocalizedText
    viewed: bool = False

    @classmethod
    def from_campaign(cls, campaign: Campaign, text: LocalizedText, viewed: bool = False) -> "ResolvedNotification":
        return cls(**campaign.model_dump(), resolved_text=text, viewed=viewed)


class ViewedState(BaseModel):
    viewed_ids: list[str] = Field(default_factory=list)
    last_check_timestamp: Optional[int] = None
    first_seen_timestamp: Optional[int] = None