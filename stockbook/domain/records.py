"""
Record shapes persisted by the store.

Attributes are snake_case; the persisted form keeps the camelCase field names
used by the mobile app so existing data stays readable.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar

TRANSACTION_CREATE = "create"
TRANSACTION_INCREASE = "increase"
TRANSACTION_DECREASE = "decrease"
TRANSACTION_TYPES = (TRANSACTION_CREATE, TRANSACTION_INCREASE, TRANSACTION_DECREASE)


class RecordShapeError(ValueError):
    """A persisted dict does not match the expected record shape."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class Record:
    WIRE_NAMES: ClassVar[dict[str, str]] = {}

    def to_dict(self) -> dict[str, Any]:
        return {self.WIRE_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Any):
        if not isinstance(data, dict):
            raise RecordShapeError(f"{cls.__name__} must be an object, got {type(data).__name__}")
        values = {}
        for f in fields(cls):
            wire = cls.WIRE_NAMES[f.name]
            if wire not in data:
                raise RecordShapeError(f"{cls.__name__} is missing '{wire}'")
            values[f.name] = data[wire]
        record = cls(**values)
        record.check()
        return record

    @classmethod
    def attribute_for(cls, name: str) -> str:
        """Accept either the attribute or the wire name of a field."""
        if name in cls.WIRE_NAMES:
            return name
        for attr, wire in cls.WIRE_NAMES.items():
            if wire == name:
                return attr
        raise KeyError(name)

    def check(self) -> None:
        pass


@dataclass
class User(Record):
    id: str
    email: str
    full_name: str
    password_hash: str
    created_at: str

    WIRE_NAMES: ClassVar[dict[str, str]] = {
        "id": "id",
        "email": "email",
        "full_name": "fullName",
        "password_hash": "passwordHash",
        "created_at": "createdAt",
    }

    def check(self) -> None:
        for name in ("id", "email", "full_name", "password_hash", "created_at"):
            if not isinstance(getattr(self, name), str):
                raise RecordShapeError(f"User.{name} must be a string", name)


@dataclass
class Product(Record):
    id: str
    sku: str
    name: str
    price: float
    quantity: int
    last_updated: str
    created_by: str

    WIRE_NAMES: ClassVar[dict[str, str]] = {
        "id": "id",
        "sku": "sku",
        "name": "name",
        "price": "price",
        "quantity": "quantity",
        "last_updated": "lastUpdated",
        "created_by": "createdBy",
    }

    def check(self) -> None:
        for name in ("id", "sku", "name", "last_updated", "created_by"):
            if not isinstance(getattr(self, name), str):
                raise RecordShapeError(f"Product.{name} must be a string", name)
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise RecordShapeError("Product.quantity must be an integer", "quantity")
        if isinstance(self.price, bool) or not isinstance(self.price, (int, float)):
            raise RecordShapeError("Product.price must be a number", "price")


@dataclass
class Transaction(Record):
    id: str
    product_id: str
    product_sku: str
    product_name: str
    type: str
    quantity: int
    previous_quantity: int
    new_quantity: int
    timestamp: str
    user_id: str

    WIRE_NAMES: ClassVar[dict[str, str]] = {
        "id": "id",
        "product_id": "productId",
        "product_sku": "productSku",
        "product_name": "productName",
        "type": "type",
        "quantity": "quantity",
        "previous_quantity": "previousQuantity",
        "new_quantity": "newQuantity",
        "timestamp": "timestamp",
        "user_id": "userId",
    }

    def check(self) -> None:
        if self.type not in TRANSACTION_TYPES:
            raise RecordShapeError(f"Unknown transaction type {self.type!r}", "type")
        for name in ("quantity", "previous_quantity", "new_quantity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise RecordShapeError(f"Transaction.{name} must be an integer", name)
