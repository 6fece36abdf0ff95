"""Bulk maintenance over the persisted collections (reset, counts, first run)."""
from __future__ import annotations

from dataclasses import dataclass
import logging

from stockbook.core.errors import StorageError
from stockbook.domain.records import Product, Transaction, User
from stockbook.repositories.collections import Collections

logger = logging.getLogger("stockbook.maintenance")


@dataclass(frozen=True)
class StorageInfo:
    users: int
    products: int
    transactions: int


class MaintenanceService:
    def __init__(self, collections: Collections) -> None:
        self.collections = collections

    def clear_all(self) -> None:
        """Remove every collection and the current session."""
        keys = self.collections.keys.all()
        with self.collections.locked(*keys):
            self.collections.storage.remove_many(keys)
        logger.info("Cleared all stored data")

    def storage_info(self) -> StorageInfo:
        keys = self.collections.keys
        return StorageInfo(
            users=len(self.collections.read(keys.users, User)),
            products=len(self.collections.read(keys.products, Product)),
            transactions=len(self.collections.read(keys.transactions, Transaction)),
        )

    def initialize(self) -> None:
        """Write empty collections on first run. Failures are logged, not raised."""
        keys = self.collections.keys
        try:
            with self.collections.locked(keys.users, keys.products, keys.transactions):
                if self.collections.read(keys.users, User, strict=True):
                    return
                self.collections.write({keys.users: [], keys.products: [], keys.transactions: []})
        except StorageError as exc:
            logger.error("Error initializing storage: %s", exc, extra={"error": str(exc)})
