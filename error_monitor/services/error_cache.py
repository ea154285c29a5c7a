"""
Read-through cache for the error listing.

The dashboard polls the listing every few seconds from every open page. The
cache keeps one snapshot of the full listing and serves it for ``ttl_seconds``
before going back to the store. Any successful write marks the snapshot
stale so the next read refetches.

State of the single entry:

    EMPTY --fetch ok--> FRESH --TTL elapsed / invalidate()--> STALE
    STALE --fetch ok--> FRESH
    STALE --fetch failed--> STALE (previous snapshot still served)
    any   --clear_all()--> EMPTY
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from error_monitor.models.error import ErrorRecord
from error_monitor.stores.base import ErrorStore
from error_monitor.utils.logging import get_logger, log_error_with_context

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 5.0


class CacheState(str, Enum):
    """State of the cached listing."""
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


@dataclass
class PersistenceResult:
    """Outcome of persisting a batch of records."""

    created: List[ErrorRecord] = field(default_factory=list)
    failed: List[Tuple[ErrorRecord, str]] = field(default_factory=list)


class ErrorCache:
    """
    Single-entry, time-bounded cache in front of an ErrorStore.

    Reads never raise because of a store failure: the last good snapshot is
    served instead, or an empty list when there is none. Writes go straight
    to the store and invalidate the snapshot on success.
    """

    def __init__(
        self,
        store: ErrorStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            store: Backing store, the source of truth
            ttl_seconds: Maximum age of a snapshot served without refetching
            clock: Monotonic time source in seconds
        """
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[List[ErrorRecord]] = None
        self._fetched_at: Optional[float] = None
        self._invalidated = False
        # Bumped by every invalidate(); a refresh only counts if none happened during its fetch
        self._generation = 0

    @property
    def state(self) -> CacheState:
        if self._snapshot is None:
            return CacheState.EMPTY
        if self._invalidated or self._age() >= self.ttl_seconds:
            return CacheState.STALE
        return CacheState.FRESH

    def _age(self) -> float:
        if self._fetched_at is None:
            return float("inf")
        return self._clock() - self._fetched_at

    async def list_errors(self) -> List[ErrorRecord]:
        """
        Return the full listing, newest first.

        Returns:
            Cached snapshot when fresh, otherwise a refetched listing; on
            refetch failure the previous snapshot, or [] when there is none
        """
        if self.state is CacheState.FRESH:
            return list(self._snapshot)

        generation = self._generation
        try:
            errors = await self.store.fetch_all()
        except Exception as e:
            if self._snapshot is not None:
                logger.warning(
                    f"Error listing refresh failed, serving stale snapshot of {len(self._snapshot)} error(s): {e}"
                )
                return list(self._snapshot)

            log_error_with_context(logger, "Error listing refresh failed with no snapshot to serve", e)
            return []

        self._snapshot = list(errors)
        self._fetched_at = self._clock()
        self._invalidated = self._generation != generation
        if self._invalidated:
            logger.debug("Error listing changed during refresh, snapshot stays stale")
        logger.debug(f"Error listing refreshed: {len(errors)} error(s)")
        return list(self._snapshot)

    def invalidate(self) -> None:
        """Force the next list_errors() to refetch. The snapshot is kept for failover."""
        self._invalidated = True
        self._generation += 1

    async def create_error(self, record: ErrorRecord) -> ErrorRecord:
        """
        Persist one record.

        Raises:
            Exception: Whatever the store raised; the cache is left untouched
        """
        created = await self.store.create(record)
        self.invalidate()
        return created

    async def create_errors(self, records: List[ErrorRecord]) -> PersistenceResult:
        """
        Persist records concurrently; one failed write never affects the others.

        Args:
            records: Records to persist

        Returns:
            PersistenceResult with created records and per-record failures
        """
        outcomes = await asyncio.gather(
            *(self.create_error(record) for record in records),
            return_exceptions=True
        )

        result = PersistenceResult()
        for record, outcome in zip(records, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                log_error_with_context(
                    logger,
                    f"Failed to persist error {record.id}",
                    outcome,
                    error_id=record.id,
                    workflow_id=record.workflow_id,
                )
                result.failed.append((record, str(outcome)))
            else:
                result.created.append(outcome)

        return result

    async def update_error(self, error_id: str, updates: Dict[str, Any]) -> bool:
        """
        Apply a partial update.

        Returns:
            True when the store reported success; False when the record was
            not found or the store failed (the cache is then left untouched)
        """
        try:
            updated = await self.store.update(error_id, updates)
        except Exception as e:
            log_error_with_context(logger, f"Failed to update error {error_id}", e, error_id=error_id)
            return False

        if updated:
            self.invalidate()
        return updated

    async def delete_error(self, error_id: str) -> bool:
        """Delete one record; same contract as update_error()."""
        try:
            deleted = await self.store.delete(error_id)
        except Exception as e:
            log_error_with_context(logger, f"Failed to delete error {error_id}", e, error_id=error_id)
            return False

        if deleted:
            self.invalidate()
        return deleted

    async def clear_all(self) -> None:
        """Delete every record and drop the snapshot."""
        await self.store.clear()
        self._snapshot = None
        self._fetched_at = None
        self._invalidated = False
        self._generation += 1
