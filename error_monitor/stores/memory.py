"""In-process error store, used when no database is configured."""

import logging
from typing import Any, Dict, List

from error_monitor.models.error import ErrorRecord
from error_monitor.stores.base import ErrorStore


logger = logging.getLogger(__name__)


class MemoryErrorStore(ErrorStore):
    """
    Keeps the most recent errors in a list, newest first.

    The list is capped at ``max_errors``; the oldest records are dropped
    when it grows past the cap. Contents are lost on restart.
    """

    def __init__(self, max_errors: int = 1000):
        self._errors: List[ErrorRecord] = []
        self._max_errors = max_errors

    async def fetch_all(self) -> List[ErrorRecord]:
        return [record.model_copy(deep=True) for record in self._errors]

    async def create(self, record: ErrorRecord) -> ErrorRecord:
        stored = record.model_copy(deep=True)

        # Insert before the first record that is not newer, keeping the sort stable
        index = 0
        while index < len(self._errors) and self._errors[index].timestamp > stored.timestamp:
            index += 1
        self._errors.insert(index, stored)

        if len(self._errors) > self._max_errors:
            dropped = len(self._errors) - self._max_errors
            self._errors = self._errors[:self._max_errors]
            logger.debug(f"Memory store at capacity, dropped {dropped} oldest error(s)")

        return stored.model_copy(deep=True)

    async def update(self, error_id: str, updates: Dict[str, Any]) -> bool:
        for index, record in enumerate(self._errors):
            if record.id == error_id:
                merged = record.model_dump()
                merged.update(updates)
                merged["id"] = record.id
                updated = ErrorRecord.model_validate(merged)

                self._errors.pop(index)
                await self.create(updated)
                return True
        return False

    async def delete(self, error_id: str) -> bool:
        for index, record in enumerate(self._errors):
            if record.id == error_id:
                del self._errors[index]
                return True
        return False

    async def clear(self) -> None:
        self._errors = []
