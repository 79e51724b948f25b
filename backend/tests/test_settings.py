import json

import pytest

from extshim.core.settings import Settings, get_settings, merge_settings

ENV_VARS = (
    "CONFIG_PATH",
    "EXTSHIM_LOCALE",
    "LANG",
    "NOTIFICATION_MIN_PERIOD_MINUTES",
    "STORAGE_BACKEND",
    "DATA_DIR",
    "SERVER_PORT",
    "EXTENSION_ID",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "absent.json"))
    settings = get_settings()
    assert settings.notifications.min_period_ms == 30 * 60 * 1000
    assert settings.notifications.check_timeout_ms == 10 * 60 * 1000
    assert settings.notifications.dismiss_delay_seconds == 30
    assert settings.notifications.campaigns_file is None
    assert settings.locale.default_locale == "en"
    assert settings.storage.backend == "json"


def test_env_overrides_file(monkeypatch, tmp_path):
    config = tmp_path / "config.json"
    config.write_text(
        json.dumps(
            {
                "notifications": {"min_period_minutes": 15, "check_timeout_minutes": 2},
                "extension": {"id": "from-file"},
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("CONFIG_PATH", str(config))
    monkeypatch.setenv("NOTIFICATION_MIN_PERIOD_MINUTES", "45")
    monkeypatch.setenv("STORAGE_BACKEND", "SQL")
    monkeypatch.setenv("LANG", "de_DE.UTF-8")

    settings = get_settings()
    assert settings.notifications.min_period_minutes == 45
    assert settings.notifications.check_timeout_minutes == 2
    assert settings.extension.id == "from-file"
    assert settings.storage.backend == "sql"
    assert settings.locale.default_locale == "de_DE"


def test_explicit_locale_beats_lang(monkeypatch, tmp_path):
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "absent.json"))
    monkeypatch.setenv("LANG", "C.UTF-8")
    assert get_settings().locale.default_locale == "en"

    get_settings.cache_clear()
    monkeypatch.setenv("EXTSHIM_LOCALE", "ja")
    assert get_settings().locale.default_locale == "ja"


def test_invalid_json_config_raises(monkeypatch, tmp_path):
    config = tmp_path / "config.json"
    config.write_text("{", encoding="utf-8")
    monkeypatch.setenv("CONFIG_PATH", str(config))
    with pytest.raises(RuntimeError):
        get_settings()


@pytest.mark.parametrize(
    "name, value",
    [("SERVER_PORT", "not-a-port"), ("STORAGE_BACKEND", "redis"), ("SERVER_PORT", "70000")],
)
def test_invalid_values_raise_runtime_error(monkeypatch, tmp_path, name, value):
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "absent.json"))
    monkeypatch.setenv(name, value)
    with pytest.raises(RuntimeError):
        get_settings()


def test_merge_settings_prefers_env():
    merged = merge_settings({"server": {"port": 9000}}, {"server": {"port": 8000, "host": "0.0.0.0"}})
    assert merged["server"] == {"port": 9000, "host": "0.0.0.0"}
    assert Settings.model_validate(merged).server.port == 9000
