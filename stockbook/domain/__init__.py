"""Record types shared by repositories and services."""

from .records import (
    TRANSACTION_CREATE,
    TRANSACTION_DECREASE,
    TRANSACTION_INCREASE,
    TRANSACTION_TYPES,
    Product,
    RecordShapeError,
    Transaction,
    User,
)

__all__ = [
    "TRANSACTION_CREATE",
    "TRANSACTION_DECREASE",
    "TRANSACTION_INCREASE",
    "TRANSACTION_TYPES",
    "Product",
    "RecordShapeError",
    "Transaction",
    "User",
]
