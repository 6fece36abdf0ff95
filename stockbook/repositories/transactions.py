"""Read side of the append-only stock transaction log."""
from __future__ import annotations

from stockbook.domain.records import Transaction
from stockbook.repositories.collections import Collections


def newest_first(items: list[Transaction]) -> list[Transaction]:
    # sorted() is stable with reverse=True, so equal timestamps keep insertion order.
    return sorted(items, key=lambda t: t.timestamp, reverse=True)


class TransactionRepository:
    """
    Transactions are written only by ProductRepository, together with the
    product change they describe. This repository never updates or deletes.
    """

    def __init__(self, collections: Collections) -> None:
        self.collections = collections
        self.key = collections.keys.transactions

    def list(self) -> list[Transaction]:
        return newest_first(self.collections.read(self.key, Transaction))

    def list_by_product(self, product_id: str) -> list[Transaction]:
        return newest_first([t for t in self.collections.read(self.key, Transaction) if t.product_id == product_id])

    def list_by_user(self, user_id: str) -> list[Transaction]:
        return newest_first([t for t in self.collections.read(self.key, Transaction) if t.user_id == user_id])
