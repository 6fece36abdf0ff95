"""Key-value storage adapter backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from stockbook.core.errors import StorageIOError
from stockbook.db.create_tables import create_all
from stockbook.db.models import StorageEntry
from stockbook.db.session import get_session


class SQLStorage:
    """Stores each key as one row; multi-key writes share a single commit."""

    def __init__(self, database_url: str, *, create_schema: bool = True) -> None:
        self.database_url = database_url
        if create_schema:
            try:
                create_all(database_url)
            except SQLAlchemyError as exc:
                raise StorageIOError(f"Cannot prepare storage schema: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        try:
            with get_session(self.database_url) as session:
                entry = session.get(StorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as exc:
            raise StorageIOError(f"Cannot read {key}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def remove(self, key: str) -> None:
        self.remove_many([key])

    def set_many(self, entries: Mapping[str, str]) -> None:
        now = datetime.now(timezone.utc)
        try:
            with get_session(self.database_url) as session:
                for key, value in entries.items():
                    entry = session.get(StorageEntry, key)
                    if entry is None:
                        session.add(StorageEntry(key=key, value=value, updated_at=now))
                    else:
                        entry.value = value
                        entry.updated_at = now
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageIOError(f"Cannot write {', '.join(entries)}: {exc}") from exc

    def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        try:
            with get_session(self.database_url) as session:
                session.execute(delete(StorageEntry).where(StorageEntry.key.in_(keys)))
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageIOError(f"Cannot remove {', '.join(keys)}: {exc}") from exc

    def keys(self) -> list[str]:
        try:
            with get_session(self.database_url) as session:
                return list(session.execute(select(StorageEntry.key).order_by(StorageEntry.key)).scalars())
        except SQLAlchemyError as exc:
            raise StorageIOError(f"Cannot list keys: {exc}") from exc
