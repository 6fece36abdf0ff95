"""Build a fully wired store from Settings."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from stockbook.core.config import Settings, get_settings
from stockbook.core.utils import utcnow
from stockbook.repositories.collections import Collections, StorageKeys
from stockbook.repositories.json_storage import JsonFileStorage
from stockbook.repositories.memory_storage import MemoryStorage
from stockbook.repositories.products import ProductRepository
from stockbook.repositories.sql_storage import SQLStorage
from stockbook.repositories.storage import KeyValueStorage
from stockbook.repositories.transactions import TransactionRepository
from stockbook.repositories.users import UserRepository
from stockbook.services.auth_service import AuthService
from stockbook.services.maintenance_service import MaintenanceService
from stockbook.services.session_service import SessionStore


@dataclass
class Inventory:
    storage: KeyValueStorage
    users: UserRepository
    products: ProductRepository
    transactions: TransactionRepository
    sessions: SessionStore
    auth: AuthService
    maintenance: MaintenanceService


def build_storage(settings: Settings) -> KeyValueStorage:
    if settings.storage_backend == "memory":
        return MemoryStorage()
    if settings.storage_backend == "sql":
        return SQLStorage(settings.database_url)
    return JsonFileStorage(settings.data_file)


def create_store(
    settings: Optional[Settings] = None,
    *,
    storage: Optional[KeyValueStorage] = None,
    clock: Callable[[], datetime] = utcnow,
) -> Inventory:
    settings = settings or get_settings()
    storage = storage if storage is not None else build_storage(settings)
    collections = Collections(storage, StorageKeys.with_prefix(settings.key_prefix), clock=clock)
    users = UserRepository(collections)
    sessions = SessionStore(collections)
    return Inventory(
        storage=storage,
        users=users,
        products=ProductRepository(collections),
        transactions=TransactionRepository(collections),
        sessions=sessions,
        auth=AuthService(users=users, sessions=sessions),
        maintenance=MaintenanceService(collections),
    )
