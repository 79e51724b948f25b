import logging
import os
from logging.config import dictConfig
from typing import Optional

# Chatty third-party loggers and the level they are held at
_QUIET_LOGGERS = {
    "apscheduler": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "uvicorn.access": "WARNING",
}


def configure_logging(level: Optional[str] = None) -> None:
    """
    Console logging for the service.

    `extshim.*` loggers follow `level` (default: LOG_LEVEL env, else INFO).
    Scheduler, SQL and access logs stay at WARNING unless running at DEBUG.
    """
    app_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    quiet = {name: ("DEBUG" if app_level == "DEBUG" else floor) for name, floor in _QUIET_LOGGERS.items()}

    loggers: dict[str, dict] = {"extshim": {"level": app_level}}
    loggers.update({name: {"level": lvl} for name, lvl in quiet.items()})

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "service": {
                    "format": "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "service",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": loggers,
            "root": {"handlers": ["stderr"], "level": "WARNING" if app_level != "DEBUG" else "DEBUG"},
        }
    )
    logging.getLogger("extshim").debug("Logging configured at %s", app_level)


__all__ = ["configure_logging"]
