from dataclasses import asdict
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, Request

from extshim import __version__
from extshim.core.settings import get_settings, Settings
from extshim.services.notification_service import peek_engine
from extshim.services.runtime import ExtensionInfo, get_platform

router = APIRouter()

_start_time = datetime.now(timezone.utc)


def _uptime_seconds() -> float:
    return (datetime.now(timezone.utc) - _start_time).total_seconds()


@router.api_route("/", methods=["GET", "HEAD"], summary="Liveness probe", response_model=None)
def health(request: Request):
    if request.method == "HEAD":
        return Response(status_code=200)
    return {"ok": True}


@router.get("/full", summary="Full health check")
def full_health(
    settings: Settings = Depends(get_settings),
) -> dict:
    status: dict[str, object] = {
        "ok": True,
        "uptime_seconds": _uptime_seconds(),
        "version": __version__,
        "extension": asdict(ExtensionInfo.from_settings(settings)),
        "platform": get_platform(),
        "storage_backend": settings.storage.backend,
    }

    engine = peek_engine()
    if engine is None:
        status["engine"] = {"ready": False}
        return status

    snapshot = engine.viewed_state_snapshot()
    status["engine"] = {
        "ready": True,
        "state": engine.state.value,
        "campaigns": engine.eligibility.campaign_ids,
        "viewed_ids": snapshot.viewed_ids,
        "last_check_timestamp": snapshot.last_check_timestamp,
        "dismissal_pending": engine.dismissal.pending,
    }
    return status
