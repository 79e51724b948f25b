import logging
from pathlib import Path

from extshim.core.collaborators import KeyValueStore
from extshim.core.datastore import JsonKeyValueStore, MemoryKeyValueStore
from extshim.core.settings import Settings

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> KeyValueStore:
    backend = settings.storage.backend
    data_dir = Path(settings.data.data_dir)

    if backend == "memory":
        logger.warning("Using in-memory storage. Viewed notifications will be lost on restart.")
        return MemoryKeyValueStore()

    if backend == "sql":
        from extshim.core.db import SqlKeyValueStore

        url = settings.storage.database_url or f"sqlite:///{data_dir / 'extshim.db'}"
        if url.startswith("sqlite:///"):
            data_dir.mkdir(parents=True, exist_ok=True)
        return SqlKeyValueStore(url=url)

    path = data_dir / settings.storage.filename
    logger.info("Using JSON storage at %s", path)
    return JsonKeyValueStore(path)


__all__ = ["build_store"]
