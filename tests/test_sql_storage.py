"""
Smoke tests for the SQL storage adapter against a temporary SQLite database.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the stockbook package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stockbook.app_factory import create_store
from stockbook.core import config as core_config
from stockbook.db import models
from stockbook.db import session as db_session
from stockbook.repositories.sql_storage import SQLStorage


@pytest.fixture()
def db_url(tmp_path, monkeypatch):
    """Point the SQL backend at a temporary SQLite file and reset cached settings/engines."""
    db_file = tmp_path / "test.db"
    url = f"sqlite:///{db_file}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("STOCKBOOK_STORAGE", "sql")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    yield url

    engine = db_session.get_engine(url)
    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


def test_key_value_round_trip(db_url):
    storage = SQLStorage(db_url)
    assert storage.get("k") is None
    storage.set("k", "v1")
    storage.set("k", "v2")
    assert storage.get("k") == "v2"
    storage.set_many({"a": "1", "b": "2"})
    assert storage.keys() == ["a", "b", "k"]
    storage.remove_many(["a", "k"])
    storage.remove("missing")
    assert storage.keys() == ["b"]


def test_factory_builds_sql_backed_store(db_url):
    store = create_store()
    assert isinstance(store.storage, SQLStorage)
    user = store.users.create("a@x.com", "Alice", "secret1")
    product = store.products.create("SKU1", "Widget", 9.99, 10, user.id)
    store.products.adjust_quantity(product.id, 5, user.id)

    reopened = create_store()
    assert reopened.products.get_by_sku("sku1").quantity == 15
    assert [t.type for t in reopened.transactions.list_by_product(product.id)] == ["increase", "create"]
