from __future__ import annotations

import json
import logging
import os
import threading
import time
from contextlib import contextmanager
from copy import deepcopy
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class StoreFileError(ValueError):
    """The JSON store file exists but does not hold a JSON object."""


class JsonKeyValueStore:
    """
    Key-value persistence backed by a single JSON object on disk.

    Every call re-reads the file so several processes sharing the data
    directory see each other's writes. Access is guarded by a `<file>.lock`
    created with O_EXCL. A file that fails to parse reads as empty but is
    never rewritten: writes raise StoreFileError until it is repaired.
    """

    def __init__(self, path: Path, lock_timeout: float = 5.0):
        self.path = path
        self.lock_path = Path(str(path) + ".lock")
        self.lock_timeout = lock_timeout
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        deadline = time.monotonic() + self.lock_timeout
        while True:
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_RDWR)
                break
            except FileExistsError:
                if time.monotonic() > deadline:
                    raise TimeoutError(f"Store {self.path} is locked by {self.lock_path}")
                time.sleep(0.05)
        try:
            yield
        finally:
            os.close(fd)
            self.lock_path.unlink(missing_ok=True)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise StoreFileError(f"Malformed store file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreFileError(f"Store file {self.path} holds {type(data).__name__}, expected an object")
        return data

    def _load_lenient(self) -> dict[str, Any]:
        try:
            return self._load()
        except StoreFileError as exc:
            logger.warning("Reading store as empty: %s", exc)
            return {}

    def _dump(self, data: dict[str, Any]) -> None:
        tmp = self.path.with_suffix(".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)
        tmp.replace(self.path)

    def get_item(self, key: str) -> Any:
        with self._locked():
            return self._load_lenient().get(key)

    def set_item(self, key: str, value: Any) -> None:
        with self._locked():
            data = self._load()
            data[key] = value
            self._dump(data)

    def remove_item(self, key: str) -> None:
        with self._locked():
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)

    def keys(self) -> list[str]:
        with self._locked():
            return list(self._load_lenient().keys())


class MemoryKeyValueStore:
    """Process-local store; values are deep-copied in and out like a real backend."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Any:
        with self._lock:
            return deepcopy(self._data.get(key))

    def set_item(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = deepcopy(value)

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data.keys())


__all__ = ["JsonKeyValueStore", "MemoryKeyValueStore", "StoreFileError"]
