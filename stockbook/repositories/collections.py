"""
Shared access to the persisted collections.

Repositories built on the same ``Collections`` share one lock per storage key.
Every read-modify-write cycle runs while holding the locks of the keys it
touches, and multi-key writes go through a single ``set_many`` call.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, Mapping, Optional, Sequence, Type, TypeVar
import logging
import threading

from stockbook.core.errors import InvalidFieldError, StorageIOError
from stockbook.core.utils import to_iso_z, utcnow
from stockbook.domain.records import Record, RecordShapeError
from stockbook.repositories import codec
from stockbook.repositories.storage import KeyValueStorage

logger = logging.getLogger("stockbook.storage")

R = TypeVar("R", bound=Record)


@dataclass(frozen=True)
class StorageKeys:
    users: str
    products: str
    transactions: str
    auth_token: str
    current_user: str

    @classmethod
    def with_prefix(cls, prefix: str) -> "StorageKeys":
        return cls(
            users=f"{prefix}users",
            products=f"{prefix}products",
            transactions=f"{prefix}transactions",
            auth_token=f"{prefix}auth_token",
            current_user=f"{prefix}current_user",
        )

    def all(self) -> list[str]:
        return [self.users, self.products, self.transactions, self.auth_token, self.current_user]


def resolve_changes(record_type: Type[Record], changes: Mapping[str, object]) -> dict[str, object]:
    """Map attribute or wire field names to attributes; ``id`` is never changed."""
    resolved = {}
    for name, value in changes.items():
        try:
            resolved[record_type.attribute_for(name)] = value
        except KeyError:
            raise InvalidFieldError(name, f"Unknown {record_type.__name__} field '{name}'") from None
    resolved.pop("id", None)
    return resolved


def checked(record: R) -> R:
    """Run the record's shape rules before it is written."""
    try:
        record.check()
    except RecordShapeError as exc:
        raise InvalidFieldError(exc.field or "", str(exc)) from None
    return record


class Collections:
    def __init__(
        self,
        storage: KeyValueStorage,
        keys: StorageKeys,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.storage = storage
        self.keys = keys
        self._clock = clock
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    # -------------------------------------- helpers --------------------------------------
    def now(self) -> str:
        return to_iso_z(self._clock())

    def _lock_for(self, key: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    @contextmanager
    def locked(self, *keys: str) -> Iterator[None]:
        """Hold the writer lock of every key, acquired in sorted order."""
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self._lock_for(key))
            yield

    # -------------------------------------- reads --------------------------------------
    def read(self, key: str, record_type: Type[R], *, strict: bool = False) -> list[R]:
        """
        Decode the collection stored at ``key``.

        Device failures and undecodable data degrade to an empty list unless
        ``strict`` is set. Mutations read strictly, so both raise StorageIOError
        and an unreadable collection is never overwritten.
        """
        try:
            raw = self.storage.get(key)
        except StorageIOError as exc:
            if strict:
                raise
            logger.warning(
                "Storage read failed for %s: %s",
                key,
                exc,
                extra={"storage_key": key, "error": str(exc)},
            )
            return []
        if not strict:
            return codec.decode(raw, [], record_type, key=key)
        if not raw:
            return []
        try:
            return codec.loads(raw, record_type)
        except codec.DECODE_ERRORS as exc:
            codec.report(key, record_type, exc)
            raise StorageIOError(f"Refusing to overwrite unreadable data at {key}: {exc}") from exc

    def read_value(self, key: str) -> Optional[str]:
        try:
            return self.storage.get(key)
        except StorageIOError as exc:
            logger.warning(
                "Storage read failed for %s: %s",
                key,
                exc,
                extra={"storage_key": key, "error": str(exc)},
            )
            return None

    def read_record(self, key: str, record_type: Type[R]) -> Optional[R]:
        return codec.decode_record(self.read_value(key), record_type, key=key)

    # -------------------------------------- writes --------------------------------------
    def write(self, collections: Mapping[str, Sequence[Record]]) -> None:
        """Encode every collection first, then persist them in one atomic write."""
        encoded = {key: codec.encode(items) for key, items in collections.items()}
        self.storage.set_many(encoded)
