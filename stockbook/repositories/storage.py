"""Key-value persistence port shared by every storage adapter."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStorage(Protocol):
    """
    Durable get/set/remove of string blobs.

    ``set_many`` and ``remove_many`` are atomic: either every entry is applied
    or none is. Device failures raise StorageIOError.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...

    def set_many(self, entries: Mapping[str, str]) -> None:
        ...

    def remove_many(self, keys: Iterable[str]) -> None:
        ...
