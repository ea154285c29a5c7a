"""Backing store interface for error records."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from error_monitor.models.error import ErrorRecord


class StoreNotInitializedError(RuntimeError):
    """Raised when a store is used before initialize() was awaited."""
    pass


class ErrorStore(ABC):
    """
    Source of truth for error records.

    Implementations return records newest first (timestamp descending).
    ``update`` and ``delete`` report a missing record by returning False;
    infrastructure failures propagate as exceptions.
    """

    async def initialize(self) -> None:
        """Acquire resources. Called once during application startup."""

    async def close(self) -> None:
        """Release resources. Called once during application shutdown."""

    @abstractmethod
    async def fetch_all(self) -> List[ErrorRecord]:
        """Return every stored record, newest first."""

    @abstractmethod
    async def create(self, record: ErrorRecord) -> ErrorRecord:
        """Persist a new record and return it as stored."""

    @abstractmethod
    async def update(self, error_id: str, updates: Dict[str, Any]) -> bool:
        """Apply a partial update (snake_case field names)."""

    @abstractmethod
    async def delete(self, error_id: str) -> bool:
        """Remove one record."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every record."""
