"""Exceptions raised by the Stockbook repositories and services."""

from __future__ import annotations


class StockbookError(Exception):
    """Base class for every error raised by the store."""


class StorageError(StockbookError):
    """Base class for persistence failures."""


class StorageIOError(StorageError):
    """The underlying storage device could not be read or written."""


class StorageWriteError(StorageError):
    """Records could not be serialized for writing."""


class DuplicateEmailError(StockbookError):
    def __init__(self, email: str):
        super().__init__("Email already registered")
        self.email = email


class DuplicateSkuError(StockbookError):
    def __init__(self, sku: str):
        super().__init__(f"SKU {sku} already exists")
        self.sku = sku


class InvalidCredentialsError(StockbookError):
    pass


class NotFoundError(StockbookError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class NegativeQuantityError(StockbookError):
    def __init__(self, current: int, delta: int):
        super().__init__("Quantity cannot be negative")
        self.current = current
        self.delta = delta
        self.resulting = current + delta


class InvalidFieldError(StockbookError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class WeakPasswordError(StockbookError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
