from typing import Optional

from fastapi import APIRouter, Depends, Query

from extshim.api.notification_schemas import MessageOut
from extshim.services.i18n import MessageBundle, get_bundle

router = APIRouter()


@router.get("/{key}", response_model=MessageOut)
def get_message(
    key: str,
    args: Optional[list[str]] = Query(default=None),
    bundle: MessageBundle = Depends(get_bundle),
):
    return MessageOut(key=key, message=bundle.get_message(key, args), locale=bundle.locale)
