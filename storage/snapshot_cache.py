"""
Snapshot Cache & Rate Gate

Owns the single cached PriceSnapshot and the rate-limit clock.

Rules:
    - can_fetch() is True iff now - last_fetch_time >= min_request_interval.
      Only automatic / non-forced fetches consult it.
    - last_fetch_time moves only through mark_fetched(), which the
      aggregator calls after a price payload has passed validation.
    - write() replaces the stored snapshot only with a strictly newer one,
      so re-writing a cached fallback is a no-op.
    - read() degrades to None on unreadable or invalid stored data.

There is a single writer (the orchestrator), so no locking is needed beyond
the store's atomic replace.
"""

from typing import Callable, Optional

from pydantic import ValidationError

from core.logging import get_logger
from core.schemas import PriceSnapshot
from core.utils.time import current_utc_timestamp
from storage.kv_store import KeyValueStore


def _wall_clock_ms() -> int:
    return current_utc_timestamp(milliseconds=True)


class SnapshotCache:
    """
    Cached snapshot plus rate-limit state.

    Example:
        >>> cache = SnapshotCache(InMemoryKeyValueStore())
        >>> if cache.can_fetch():
        ...     ...
        >>> await cache.write(snapshot)
        >>> current = await cache.read()
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "cryptoData",
        min_request_interval_ms: int = 5_000,
        freshness_threshold_ms: int = 45_000,
        clock: Callable[[], int] = _wall_clock_ms
    ):
        """
        Args:
            store: Key-value store holding the snapshot slot
            key: Slot name
            min_request_interval_ms: Rate gate interval
            freshness_threshold_ms: Age after which a snapshot is stale
            clock: Callable returning the current time in milliseconds
        """
        self.store = store
        self.key = key
        self.min_request_interval_ms = min_request_interval_ms
        self.freshness_threshold_ms = freshness_threshold_ms
        self.clock = clock
        self.last_fetch_time: int = 0
        self.logger = get_logger(__name__)

    # ============================================
    # Rate Gate
    # ============================================

    def now(self) -> int:
        return self.clock()

    def can_fetch(self) -> bool:
        """True if enough time has passed since the last successful fetch."""
        elapsed = self.now() - self.last_fetch_time
        if elapsed < self.min_request_interval_ms:
            self.logger.debug(f"Request throttled - {elapsed}ms since last fetch")
            return False
        return True

    def mark_fetched(self) -> None:
        """Record a successful, validated price fetch."""
        self.last_fetch_time = self.now()

    # ============================================
    # Snapshot Slot
    # ============================================

    async def read(self) -> Optional[PriceSnapshot]:
        """Return the persisted snapshot, or None if there is none usable."""
        try:
            raw = await self.store.get(self.key)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Failed to read cached snapshot: {e}")
            return None

        if raw is None:
            return None

        try:
            return PriceSnapshot.model_validate(raw)
        except ValidationError as e:
            self.logger.warning(f"Discarding invalid cached snapshot: {e.error_count()} error(s)")
            return None

    async def write(self, snapshot: PriceSnapshot) -> bool:
        """
        Persist snapshot if it is strictly newer than the current one.

        Returns:
            True if the stored snapshot was replaced
        """
        current = await self.read()
        if current is not None and snapshot.timestamp <= current.timestamp:
            self.logger.debug(
                f"Snapshot {snapshot.timestamp} not newer than cached {current.timestamp}; keeping cache"
            )
            return False

        await self.store.set(self.key, snapshot.to_storage())
        self.logger.debug(f"Cached snapshot {snapshot.timestamp}")
        return True

    # ============================================
    # Staleness
    # ============================================

    def is_stale(self, snapshot: Optional[PriceSnapshot]) -> bool:
        """True if there is no snapshot or it is older than the freshness threshold."""
        if snapshot is None:
            return True
        age = self.now() - snapshot.timestamp
        return age > self.freshness_threshold_ms
