import logging
from pathlib import Path

from fastapi import FastAPI

from extshim import __version__
from extshim.api import api_router
from extshim.core.logging import configure_logging
from extshim.core.settings import get_settings

configure_logging()
settings = get_settings()
logger = logging.getLogger(__name__)

app = FastAPI(title="Extension Shim", version=__version__)

app.include_router(api_router, prefix="/api")


@app.on_event("startup")
def startup_event() -> None:
    data_dir = Path(settings.data.data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Using data directory: %s", data_dir)

    from extshim.core.scheduler import ApsTaskScheduler, init_scheduler
    from extshim.services.i18n import load_bundle, set_bundle
    from extshim.services.notification_service import build_engine, set_engine
    from extshim.services.preferences import Preferences, set_preferences
    from extshim.storage import build_store

    init_scheduler()
    store = build_store(settings)

    set_preferences(Preferences(store, settings.extension.id))
    set_bundle(
        load_bundle(
            settings.locale.messages_dir,
            settings.locale.default_locale,
        )
    )
    engine = build_engine(settings, store=store, task_scheduler=ApsTaskScheduler())
    set_engine(engine)
    logger.info("Notification engine ready (state=%s)", engine.state.value)


@app.on_event("shutdown")
def shutdown_event() -> None:
    from extshim.core.scheduler import shutdown_scheduler
    from extshim.services.notification_service import peek_engine, set_engine

    engine = peek_engine()
    if engine is not None:
        engine.close()
        set_engine(None)
    shutdown_scheduler()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_config=None)


if __name__ == "__main__":
    run()
