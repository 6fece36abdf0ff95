from __future__ import annotations

import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make the stockbook package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stockbook.app_factory import create_store
from stockbook.core.config import get_settings
from stockbook.core.errors import (
    DuplicateEmailError,
    DuplicateSkuError,
    InvalidFieldError,
    NegativeQuantityError,
    NotFoundError,
    StorageIOError,
)
from stockbook.repositories.memory_storage import MemoryStorage


class StepClock:
    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture()
def store():
    return create_store(get_settings(), storage=MemoryStorage(), clock=StepClock())


def test_create_normalizes_and_logs_creation(store):
    product = store.products.create(" sku1 ", "  Widget ", 9.99, 10, "user-1")
    assert product.sku == "SKU1"
    assert product.name == "Widget"
    assert product.created_by == "user-1"

    log = store.transactions.list()
    assert len(log) == 1
    entry = log[0]
    assert (entry.type, entry.quantity, entry.previous_quantity, entry.new_quantity) == ("create", 10, 0, 10)
    assert (entry.product_id, entry.product_sku, entry.product_name) == (product.id, "SKU1", "Widget")
    assert entry.timestamp == product.last_updated


def test_duplicate_sku_any_case_is_rejected(store):
    store.products.create("SKU1", "Widget", 9.99, 10, "u")
    with pytest.raises(DuplicateSkuError):
        store.products.create("sku1", "Other", 1.0, 1, "u")
    assert len(store.products.list()) == 1
    assert len(store.transactions.list()) == 1


def test_create_rejects_negative_values(store):
    with pytest.raises(NegativeQuantityError):
        store.products.create("SKU1", "Widget", 1.0, -1, "u")
    with pytest.raises(InvalidFieldError):
        store.products.create("SKU1", "Widget", -0.01, 1, "u")
    assert store.products.list() == []
    assert store.transactions.list() == []


def test_lookup_by_id_and_sku(store):
    product = store.products.create("SKU1", "Widget", 9.99, 10, "u")
    assert store.products.get_by_id(product.id) == product
    assert store.products.get_by_sku("sku1") == product
    assert store.products.get_by_sku("nope") is None


def test_inventory_scenario(store):
    user = store.users.create("a@x.com", "Alice", "secret1")
    product = store.products.create("SKU1", "Widget", 9.99, 10, user.id)
    assert [t.new_quantity for t in store.transactions.list()] == [10]

    increased = store.products.adjust_quantity(product.id, 5, user.id)
    assert increased.quantity == 15
    latest = store.transactions.list()[0]
    assert (latest.type, latest.quantity, latest.previous_quantity, latest.new_quantity) == ("increase", 5, 10, 15)
    assert latest.user_id == user.id

    with pytest.raises(NegativeQuantityError):
        store.products.adjust_quantity(product.id, -20, user.id)
    unchanged = store.products.get_by_id(product.id)
    assert unchanged.quantity == 15
    assert unchanged.last_updated == increased.last_updated
    assert len(store.transactions.list()) == 2

    with pytest.raises(DuplicateEmailError):
        store.users.create("A@x.com", "Alice Again", "secret1")
    assert len(store.users.list()) == 1


@pytest.mark.parametrize("delta, kind", [(3, "increase"), (-4, "decrease"), (-10, "decrease")])
def test_adjust_appends_exactly_one_transaction(store, delta, kind):
    product = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    updated = store.products.adjust_quantity(product.id, delta, "u2")
    log = store.transactions.list_by_product(product.id)
    assert len(log) == 2
    entry = log[0]
    assert entry.type == kind
    assert entry.quantity == abs(delta)
    assert entry.previous_quantity == 10
    assert entry.new_quantity == 10 + delta == updated.quantity
    assert updated.last_updated > product.last_updated


def test_adjust_unknown_product(store):
    with pytest.raises(NotFoundError) as exc:
        store.products.adjust_quantity("missing", 1, "u")
    assert exc.value.entity == "Product"
    assert store.transactions.list() == []


def test_update_edits_without_logging(store):
    product = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    updated = store.products.update(product.id, {"name": " Big Widget ", "price": 2.5, "sku": "sku9", "id": "x"})
    assert updated.id == product.id
    assert (updated.name, updated.price, updated.sku) == ("Big Widget", 2.5, "SKU9")
    assert updated.last_updated > product.last_updated
    assert len(store.transactions.list()) == 1


def test_update_enforces_invariants(store):
    first = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    store.products.create("SKU2", "Gadget", 1.0, 10, "u")
    with pytest.raises(NotFoundError):
        store.products.update("missing", {"name": "x"})
    with pytest.raises(DuplicateSkuError):
        store.products.update(first.id, {"sku": "sku2"})
    with pytest.raises(NegativeQuantityError):
        store.products.update(first.id, {"quantity": -1})
    with pytest.raises(InvalidFieldError):
        store.products.update(first.id, {"price": -1})
    assert store.products.get_by_id(first.id) == first


def test_delete_is_idempotent(store):
    product = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    store.products.delete(product.id)
    store.products.delete(product.id)
    assert store.products.list() == []
    assert len(store.transactions.list()) == 1


class FailingWrites(MemoryStorage):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def set_many(self, entries):
        if self.fail:
            raise StorageIOError("disk full")
        super().set_many(entries)


def test_failed_write_leaves_product_and_log_untouched():
    storage = FailingWrites()
    store = create_store(get_settings(), storage=storage)
    product = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    storage.fail = True
    with pytest.raises(StorageIOError):
        store.products.adjust_quantity(product.id, 5, "u")
    with pytest.raises(StorageIOError):
        store.products.create("SKU2", "Gadget", 1.0, 1, "u")
    storage.fail = False
    assert [p.quantity for p in store.products.list()] == [10]
    assert len(store.transactions.list()) == 1


def test_concurrent_adjustments_never_oversell(store):
    product = store.products.create("SKU1", "Widget", 1.0, 20, "u")
    failures = []

    def take_one():
        try:
            store.products.adjust_quantity(product.id, -1, "u")
        except NegativeQuantityError:
            failures.append(1)

    threads = [threading.Thread(target=take_one) for _ in range(30)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert store.products.get_by_id(product.id).quantity == 0
    assert len(failures) == 10
    assert len(store.transactions.list()) == 21


@pytest.mark.parametrize(
    "changes",
    [
        {"quantity": 3.0},
        {"quantity": True},
        {"quantity": "7"},
        {"price": "9.99"},
        {"price": None},
        {"name": None},
        {"sku": 42},
        {"createdBy": None},
    ],
)
def test_update_rejects_wrongly_typed_values(store, changes):
    first = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    second = store.products.create("SKU2", "Gadget", 2.0, 5, "u")
    with pytest.raises(InvalidFieldError):
        store.products.update(first.id, changes)
    assert store.products.list() == [first, second]


@pytest.mark.parametrize("delta", [0.5, 2.0, True, "3", None])
def test_adjust_rejects_non_integer_delta(store, delta):
    first = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    second = store.products.create("SKU2", "Gadget", 2.0, 5, "u")
    with pytest.raises(InvalidFieldError):
        store.products.adjust_quantity(first.id, delta, "u")
    assert store.products.list() == [first, second]
    assert len(store.transactions.list()) == 2


@pytest.mark.parametrize(
    "args",
    [("SKU1", "Widget", 1.0, 2.5, "u"), ("SKU1", "Widget", "1.0", 1, "u"), ("SKU1", None, 1.0, 1, "u"), (None, "Widget", 1.0, 1, "u")],
)
def test_create_rejects_wrongly_typed_values(store, args):
    with pytest.raises(InvalidFieldError):
        store.products.create(*args)
    assert store.products.list() == []


@pytest.mark.parametrize("key", ["@inventory_app:products", "@inventory_app:transactions"])
def test_mutations_leave_undecodable_collections_untouched(store, key):
    product = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    garbage = '[{"id": "half-written"'
    store.storage.set(key, garbage)

    with pytest.raises(StorageIOError):
        store.products.create("SKU2", "Gadget", 1.0, 1, "u")
    with pytest.raises(StorageIOError):
        store.products.adjust_quantity(product.id, 1, "u")
    assert store.storage.get(key) == garbage


def test_edits_leave_undecodable_product_collection_untouched(store):
    product = store.products.create("SKU1", "Widget", 1.0, 10, "u")
    garbage = '[{"id": "p", "quantity": 1.5}]'
    store.storage.set("@inventory_app:products", garbage)

    with pytest.raises(StorageIOError):
        store.products.update(product.id, {"name": "New"})
    with pytest.raises(StorageIOError):
        store.products.delete(product.id)
    assert store.storage.get("@inventory_app:products") == garbage
    assert store.products.list() == []
