"""
Product collection.

Every stock change (create and quantity adjustments) appends a transaction to
the audit log in the same atomic write as the product itself.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional

from stockbook.core.errors import DuplicateSkuError, InvalidFieldError, NegativeQuantityError, NotFoundError
from stockbook.core.security import generate_id
from stockbook.domain.records import (
    TRANSACTION_CREATE,
    TRANSACTION_DECREASE,
    TRANSACTION_INCREASE,
    Product,
    Transaction,
)
from stockbook.repositories.collections import Collections, checked, resolve_changes


def normalize_sku(sku: str) -> str:
    return (sku or "").strip().upper()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_price(price: Any) -> None:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise InvalidFieldError("price", "Price must be a number")
    if price < 0:
        raise InvalidFieldError("price", "Price cannot be negative")


def _check_quantity(quantity: Any, field: str = "quantity") -> None:
    if not _is_int(quantity):
        raise InvalidFieldError(field, f"{field.capitalize()} must be an integer")


class ProductRepository:
    def __init__(self, collections: Collections) -> None:
        self.collections = collections
        self.key = collections.keys.products
        self.log_key = collections.keys.transactions

    # -------------------------------------- reads --------------------------------------
    def list(self) -> list[Product]:
        return self.collections.read(self.key, Product)

    def get_by_id(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.list() if p.id == product_id), None)

    def get_by_sku(self, sku: str) -> Optional[Product]:
        wanted = normalize_sku(sku)
        return next((p for p in self.list() if normalize_sku(p.sku) == wanted), None)

    # -------------------------------------- helpers --------------------------------------
    def _record(self, product: Product, kind: str, previous: int, user_id: str, timestamp: str) -> Transaction:
        return Transaction(
            id=generate_id(),
            product_id=product.id,
            product_sku=product.sku,
            product_name=product.name,
            type=kind,
            quantity=abs(product.quantity - previous),
            previous_quantity=previous,
            new_quantity=product.quantity,
            timestamp=timestamp,
            user_id=user_id,
        )

    def _index_of(self, products: list[Product], product_id: str) -> int:
        index = next((i for i, p in enumerate(products) if p.id == product_id), None)
        if index is None:
            raise NotFoundError("Product", product_id)
        return index

    # -------------------------------------- mutations --------------------------------------
    def create(self, sku: str, name: str, price: float, quantity: int, user_id: str) -> Product:
        for field, value in (("sku", sku), ("name", name)):
            if not isinstance(value, str):
                raise InvalidFieldError(field, f"{field.capitalize()} must be a string")
        _check_quantity(quantity)
        if quantity < 0:
            raise NegativeQuantityError(0, quantity)
        _check_price(price)
        with self.collections.locked(self.key, self.log_key):
            products = self.collections.read(self.key, Product, strict=True)
            normalized = normalize_sku(sku)
            if any(normalize_sku(p.sku) == normalized for p in products):
                raise DuplicateSkuError(normalized)
            now = self.collections.now()
            product = checked(Product(
                id=generate_id(),
                sku=normalized,
                name=name.strip(),
                price=price,
                quantity=quantity,
                last_updated=now,
                created_by=user_id,
            ))
            log = self.collections.read(self.log_key, Transaction, strict=True)
            products.append(product)
            log.append(self._record(product, TRANSACTION_CREATE, 0, user_id, now))
            self.collections.write({self.key: products, self.log_key: log})
        return product

    def adjust_quantity(self, product_id: str, delta: int, user_id: str) -> Product:
        _check_quantity(delta, "delta")
        with self.collections.locked(self.key, self.log_key):
            products = self.collections.read(self.key, Product, strict=True)
            index = self._index_of(products, product_id)
            current = products[index]
            new_quantity = current.quantity + delta
            if new_quantity < 0:
                raise NegativeQuantityError(current.quantity, delta)
            now = self.collections.now()
            updated = replace(current, quantity=new_quantity, last_updated=now)
            kind = TRANSACTION_INCREASE if delta > 0 else TRANSACTION_DECREASE
            log = self.collections.read(self.log_key, Transaction, strict=True)
            products[index] = updated
            log.append(self._record(updated, kind, current.quantity, user_id, now))
            self.collections.write({self.key: products, self.log_key: log})
        return updated

    def update(self, product_id: str, changes: Mapping[str, Any]) -> Product:
        """Direct edit; stamps lastUpdated but does not touch the audit log."""
        fields = resolve_changes(Product, changes)
        if "quantity" in fields:
            _check_quantity(fields["quantity"])
            if fields["quantity"] < 0:
                raise NegativeQuantityError(0, fields["quantity"])
        if "price" in fields:
            _check_price(fields["price"])
        if isinstance(fields.get("name"), str):
            fields["name"] = fields["name"].strip()
        with self.collections.locked(self.key):
            products = self.collections.read(self.key, Product, strict=True)
            index = self._index_of(products, product_id)
            if isinstance(fields.get("sku"), str):
                fields["sku"] = normalize_sku(fields["sku"])
                if any(normalize_sku(p.sku) == fields["sku"] for p in products if p.id != product_id):
                    raise DuplicateSkuError(fields["sku"])
            fields["last_updated"] = self.collections.now()
            updated = checked(replace(products[index], **fields))
            products[index] = updated
            self.collections.write({self.key: products})
        return updated

    def delete(self, product_id: str) -> None:
        with self.collections.locked(self.key):
            products = self.collections.read(self.key, Product, strict=True)
            remaining = [p for p in products if p.id != product_id]
            if len(remaining) != len(products):
                self.collections.write({self.key: remaining})
