import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def create_db_engine(url: str) -> Engine:
    # Sanitized log
    safe_url = url.split("@")[-1] if "@" in url else url
    logger.info("Connecting to key-value database: %s", safe_url)
    connect_args: dict[str, Any] = {}
    if url.startswith("sqlite"):
        # The delayed dismissal fires on the scheduler thread
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=False, pool_pre_ping=True, connect_args=connect_args)


class SqlKeyValueStore:
    """KeyValueStore over a single `extension_kv` table."""

    def __init__(self, url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None:
            if not url:
                raise ValueError("SqlKeyValueStore needs a database url or an engine")
            engine = create_db_engine(url)
        self.engine = engine
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)
        self.create_tables()

    def create_tables(self) -> None:
        # Ensure models are registered before creating tables
        from extshim.models.storage import ExtensionKeyValue  # noqa: F401

        Base.metadata.create_all(self.engine)

    def get_item(self, key: str) -> Any:
        from extshim.models.storage import ExtensionKeyValue

        with self._session_factory() as session:
            row = session.get(ExtensionKeyValue, key)
            return row.value if row else None

    def set_item(self, key: str, value: Any) -> None:
        from extshim.models.storage import ExtensionKeyValue

        with self._session_factory.begin() as session:
            row = session.get(ExtensionKeyValue, key)
            if row:
                row.value = value
                row.updated_at = datetime.now(timezone.utc)
            else:
                session.add(ExtensionKeyValue(key=key, value=value))

    def remove_item(self, key: str) -> None:
        from extshim.models.storage import ExtensionKeyValue

        with self._session_factory.begin() as session:
            session.execute(delete(ExtensionKeyValue).where(ExtensionKeyValue.key == key))

    def keys(self) -> list[str]:
        from extshim.models.storage import ExtensionKeyValue

        with self._session_factory() as session:
            return list(session.execute(select(ExtensionKeyValue.key)).scalars().all())

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ["Base", "SqlKeyValueStore", "create_db_engine"]
