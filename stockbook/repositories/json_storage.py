"""
JSON-file persistence adapter.

Every key lives in a single JSON object on disk. Writes go through a temp file
followed by os.replace, so a crash leaves either the old or the new file.

An unreadable file fails every read and write. Removing keys is the one way
out: the damaged contents are logged and the file starts over empty.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Optional
import json
import logging
import os
import tempfile
import threading

from stockbook.core.errors import StorageIOError

logger = logging.getLogger("stockbook.storage")


class CorruptFileError(StorageIOError):
    """The data file exists but does not hold a JSON object."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


class JsonFileStorage:
    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            payload = self.path.read_bytes()
        except OSError as exc:
            raise StorageIOError(f"Cannot read {self.path}: {exc}") from exc
        try:
            data = json.loads(payload.decode("utf-8"))
        except (ValueError, RecursionError) as exc:
            raw = payload.decode("utf-8", errors="replace")
            raise CorruptFileError(f"Cannot read {self.path}: {exc}", raw) from exc
        if not isinstance(data, dict):
            raise CorruptFileError(f"{self.path} does not hold a JSON object", payload.decode("utf-8"))
        return data

    def save(self, db: dict) -> None:
        payload = json.dumps(db, ensure_ascii=False, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StorageIOError(f"Cannot write {self.path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self.load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def remove(self, key: str) -> None:
        self.remove_many([key])

    def set_many(self, entries: Mapping[str, str]) -> None:
        with self._lock:
            db = self.load()
            db.update(entries)
            self.save(db)

    def remove_many(self, keys: Iterable[str]) -> None:
        with self._lock:
            try:
                db = self.load()
            except CorruptFileError as exc:
                logger.warning(
                    "Discarding unreadable data file %s: %s",
                    self.path,
                    exc,
                    extra={"storage_key": str(self.path), "error": str(exc), "discarded": exc.raw},
                )
                self.save({})
                return
            removed = [key for key in keys if db.pop(key, None) is not None]
            if removed:
                self.save(db)
