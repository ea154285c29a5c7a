"""Backing stores for error records."""

from typing import Optional

from error_monitor.stores.base import ErrorStore, StoreNotInitializedError
from error_monitor.stores.memory import MemoryErrorStore
from error_monitor.stores.mysql import MySQLErrorStore


def create_error_store(database_url: Optional[str] = None, max_memory_errors: int = 1000) -> ErrorStore:
    """
    Build the store matching the configuration.

    Args:
        database_url: MySQL URL; the in-memory store is used when empty
        max_memory_errors: Capacity of the in-memory store

    Returns:
        Uninitialized ErrorStore
    """
    if database_url:
        return MySQLErrorStore(database_url)
    return MemoryErrorStore(max_errors=max_memory_errors)


__all__ = [
    'ErrorStore',
    'StoreNotInitializedError',
    'MemoryErrorStore',
    'MySQLErrorStore',
    'create_error_store',
]
