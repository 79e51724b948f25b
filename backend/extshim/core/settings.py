import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class NotificationConfig(BaseModel):
    min_period_minutes: int = Field(default=30, ge=0)
    check_timeout_minutes: int = Field(default=10, ge=0)
    dismiss_delay_seconds: int = Field(default=30, ge=0)
    campaigns_file: Optional[Path] = None

    @field_validator("campaigns_file", mode="before")
    def _expand_campaigns(cls, v: Optional[str | Path]) -> Optional[Path]:
        if v in (None, ""):
            return None
        return Path(v).expanduser()

    @property
    def min_period_ms(self) -> int:
        return self.min_period_minutes * 60 * 1000

    @property
    def check_timeout_ms(self) -> int:
        return self.check_timeout_minutes * 60 * 1000


class LocaleConfig(BaseModel):
    default_locale: str = Field(default="en")
    messages_dir: Optional[Path] = None

    @field_validator("messages_dir", mode="before")
    def _expand_messages(cls, v: Optional[str | Path]) -> Optional[Path]:
        if v in (None, ""):
            return None
        return Path(v).expanduser()


class StorageConfig(BaseModel):
    backend: Literal["json", "sql", "memory"] = "json"
    database_url: Optional[str] = None
    filename: str = Field(default="storage.json")


class DataConfig(BaseModel):
    data_dir: Path = Field(default=Path("backend/data"))

    @field_validator("data_dir", mode="before")
    def _expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()


class ServerConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)


class ExtensionConfig(BaseModel):
    id: str = Field(default="adguard", min_length=1)
    version: str = Field(default="0.0.0")


class Settings(BaseModel):
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    locale: LocaleConfig = Field(default_factory=LocaleConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    extension: ExtensionConfig = Field(default_factory=ExtensionConfig)

    model_config = ConfigDict(arbitrary_types_allowed=True)


SECTIONS = ("notifications", "locale", "storage", "data", "server", "extension")


def _config_path() -> Path:
    return Path(os.environ.get("CONFIG_PATH", "config/config.json"))


def _load_file_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid JSON configuration at {path}") from exc


def _env_locale() -> Optional[str]:
    explicit = os.environ.get("EXTSHIM_LOCALE")
    if explicit:
        return explicit
    # LANG looks like "de_DE.UTF-8"
    lang = os.environ.get("LANG", "")
    lang = lang.split(".", 1)[0]
    if lang and lang not in ("C", "POSIX"):
        return lang
    return None


def _load_env() -> dict[str, Any]:
    env_config: dict[str, Any] = {}

    min_period = os.environ.get("NOTIFICATION_MIN_PERIOD_MINUTES")
    if min_period:
        env_config.setdefault("notifications", {})["min_period_minutes"] = int(min_period)

    check_timeout = os.environ.get("NOTIFICATION_CHECK_TIMEOUT_MINUTES")
    if check_timeout:
        env_config.setdefault("notifications", {})["check_timeout_minutes"] = int(check_timeout)

    dismiss_delay = os.environ.get("NOTIFICATION_DISMISS_DELAY_SECONDS")
    if dismiss_delay:
        env_config.setdefault("notifications", {})["dismiss_delay_seconds"] = int(dismiss_delay)

    campaigns_file = os.environ.get("CAMPAIGNS_FILE")
    if campaigns_file:
        env_config.setdefault("notifications", {})["campaigns_file"] = campaigns_file

    locale = _env_locale()
    if locale:
        env_config.setdefault("locale", {})["default_locale"] = locale

    messages_dir = os.environ.get("MESSAGES_DIR")
    if messages_dir:
        env_config.setdefault("locale", {})["messages_dir"] = messages_dir

    backend = os.environ.get("STORAGE_BACKEND")
    if backend:
        env_config.setdefault("storage", {})["backend"] = backend.lower()

    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        env_config.setdefault("storage", {})["database_url"] = database_url

    data_dir = os.environ.get("DATA_DIR")
    if data_dir:
        env_config.setdefault("data", {})["data_dir"] = data_dir

    host = os.environ.get("SERVER_HOST")
    if host:
        env_config.setdefault("server", {})["host"] = host

    port = os.environ.get("SERVER_PORT")
    if port:
        env_config.setdefault("server", {})["port"] = int(port)

    extension_id = os.environ.get("EXTENSION_ID")
    if extension_id:
        env_config.setdefault("extension", {})["id"] = extension_id

    extension_version = os.environ.get("EXTENSION_VERSION")
    if extension_version:
        env_config.setdefault("extension", {})["version"] = extension_version

    return env_config


def merge_settings(env_config: dict[str, Any], file_config: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for section in SECTIONS:
        merged[section] = {**file_config.get(section, {}), **env_config.get(section, {})}
    return merged


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    try:
        env_config = _load_env()
    except ValueError as exc:
        raise RuntimeError(f"Configuration error: {exc}") from exc
    file_config = _load_file_config(_config_path())
    merged = merge_settings(env_config=env_config, file_config=file_config)
    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        raise RuntimeError(f"Configuration error: {exc}") from exc


__all__ = ["Settings", "get_settings", "merge_settings"]
