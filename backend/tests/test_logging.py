import logging

import pytest

from extshim.core.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_levels():
    names = ["extshim", "apscheduler", "sqlalchemy.engine", "uvicorn.access", None]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_service_loggers_follow_log_level_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    configure_logging()
    assert logging.getLogger("extshim").level == logging.WARNING
    assert logging.getLogger("extshim.services.eligibility").getEffectiveLevel() == logging.WARNING


def test_third_party_loggers_stay_quiet_at_info():
    configure_logging("info")
    assert logging.getLogger("extshim").level == logging.INFO
    assert logging.getLogger("apscheduler").level == logging.WARNING
    assert logging.getLogger("uvicorn.access").level == logging.WARNING


def test_debug_opens_up_everything():
    configure_logging("DEBUG")
    assert logging.getLogger("apscheduler").level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG
