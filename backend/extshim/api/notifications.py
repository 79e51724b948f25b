from typing import Optional

from fastapi import APIRouter, Depends

from extshim.api.notification_schemas import MarkViewedRequest, MarkViewedResponse, NotificationOut
from extshim.services.notification_service import NotificationEngine, get_engine

router = APIRouter()


@router.get("/current", response_model=Optional[NotificationOut])
def get_current(
    product_detected: bool = False,
    engine: NotificationEngine = Depends(get_engine),
):
    notification = engine.get_current_notification({"product_detected": product_detected})
    if notification is None:
        return None
    return NotificationOut.from_resolved(notification)


@router.post("/viewed", response_model=MarkViewedResponse)
def mark_viewed(
    payload: MarkViewedRequest,
    engine: NotificationEngine = Depends(get_engine),
):
    marked = engine.set_notification_viewed(payload.immediate)
    return MarkViewedResponse(ok=True, marked=marked, pending=engine.dismissal.pending)
