"""
Stockbook: local persistent store for a small inventory-tracking app.

Callers normally build everything through ``stockbook.app_factory.create_store``.
"""

from stockbook.app_factory import Inventory, create_store

__all__ = ["Inventory", "create_store"]
