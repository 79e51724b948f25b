from typing import Optional, Union

from pydantic import BaseModel

from extshim.models.campaign import PresentationType, ResolvedNotification


class NotificationOut(BaseModel):
    id: str
    title: str
    description: str
    button_text: str
    url: str
    presentation_type: PresentationType
    badge_text: str
    badge_color: str
    viewed: bool = False

    @classmethod
    def from_resolved(cls, notification: ResolvedNotification) -> "NotificationOut":
        text = notification.resolved_text
        return cls(
            id=notification.id,
            title=text.title,
            description=text.description,
            button_text=text.button_text,
            url=notification.url,
            presentation_type=notification.presentation_type,
            badge_text=notification.badge_text,
            badge_color=notification.badge_color,
            viewed=notification.viewed,
        )


class MarkViewedRequest(BaseModel):
    immediate: bool = False


class MarkViewedResponse(BaseModel):
    ok: bool = True
    marked: bool = False
    pending: bool = False


class PreferenceIn(BaseModel):
    value: Union[bool, int, str]


class PreferenceOut(BaseModel):
    name: str
    value: Optional[Union[bool, int, str]] = None
    exists: bool = False


class MessageOut(BaseModel):
    key: str
    message: str
    locale: Optional[str] = None
