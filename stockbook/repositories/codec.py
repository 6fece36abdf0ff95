"""
JSON codec for persisted record collections.

Decoding never raises: unreadable data is logged on ``stockbook.storage`` with
the storage key and the parse error, and the caller's default is returned.
Encoding failures surface as StorageWriteError.
"""

from __future__ import annotations

from typing import Iterable, Optional, Type, TypeVar
import json
import logging

from stockbook.core.errors import StorageWriteError
from stockbook.domain.records import Record, RecordShapeError

logger = logging.getLogger("stockbook.storage")

R = TypeVar("R", bound=Record)


def report(key: Optional[str], record_type: Type[Record], exc: Exception) -> None:
    logger.warning(
        "Unreadable %s data at %s: %s",
        record_type.__name__,
        key or "<unknown key>",
        exc,
        extra={"storage_key": key, "record_type": record_type.__name__, "error": str(exc)},
    )


DECODE_ERRORS = (ValueError, TypeError, RecursionError, RecordShapeError)


def loads(raw: str, record_type: Type[R]) -> list[R]:
    """Parse a stored collection, raising one of DECODE_ERRORS on bad data."""
    data = json.loads(raw)
    if not isinstance(data, list):
        raise RecordShapeError(f"expected a JSON array, got {type(data).__name__}")
    return [record_type.from_dict(item) for item in data]


def decode(raw: Optional[str], default: list[R], record_type: Type[R], key: Optional[str] = None) -> list[R]:
    if not raw:
        return default
    try:
        return loads(raw, record_type)
    except DECODE_ERRORS as exc:
        report(key, record_type, exc)
        return default


def decode_record(raw: Optional[str], record_type: Type[R], key: Optional[str] = None) -> Optional[R]:
    if not raw:
        return None
    try:
        return record_type.from_dict(json.loads(raw))
    except DECODE_ERRORS as exc:
        report(key, record_type, exc)
        return None


def encode(items: Iterable[Record]) -> str:
    try:
        return json.dumps([item.to_dict() for item in items], ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise StorageWriteError(f"Cannot serialize records: {exc}") from exc


def encode_record(item: Record) -> str:
    try:
        return json.dumps(item.to_dict(), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise StorageWriteError(f"Cannot serialize record: {exc}") from exc
