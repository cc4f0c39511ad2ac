"""
Update Orchestrator

Drives the aggregator from external triggers and fans results out to the
cache, the badge surface and observers.

Triggers:
    - periodic alarm ("crypto-update")   -> forced fetch; skipped while busy
    - explicit request (handle_message)  -> fetch with the caller's forceRefresh;
                                            joins an in-flight pass if there is one
    - process start                      -> forced fetch after a short delay

States:
    IDLE -> FETCHING -> IDLE

Only one aggregation pass is in flight at a time; the in-flight task doubles
as the busy flag. On success the snapshot is written to the cache, the badge
is refreshed and a CRYPTO_DATA_UPDATE event is published. On failure nothing
is persisted and the error goes back to the caller.

handle_message() is the message-channel boundary and never raises.
"""

import asyncio
import contextlib
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError

from core.config import Settings, settings
from core.exceptions import CoinPeekError
from core.logging import get_logger
from core.schemas import (
    BITCOIN,
    CRYPTO_DATA_UPDATE,
    FETCH_CRYPTO_DATA,
    MessageRequest,
    PriceSnapshot,
)
from providers.http_client import TimedFetchClient
from services.badge import BusBadgeSurface, DisplaySurface, build_badge
from services.event_bus import EventBus, TOPIC_DATA_UPDATE, bus
from services.price_aggregator import PriceAggregator
from services.scheduler import AlarmScheduler
from storage.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from storage.snapshot_cache import SnapshotCache


API_FAILED = "Unable to fetch cryptocurrency data"


class OrchestratorState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"


class UpdateOrchestrator:
    """
    Single owner of the update cycle.

    Example:
        >>> orchestrator = build_orchestrator()
        >>> await orchestrator.start()
        >>> response = await orchestrator.handle_message({"type": "FETCH_CRYPTO_DATA"})
        >>> await orchestrator.stop()
    """

    def __init__(
        self,
        aggregator: PriceAggregator,
        cache: SnapshotCache,
        display: DisplaySurface,
        event_bus: EventBus = None,
        scheduler: AlarmScheduler = None,
        config: Settings = None,
        client: Optional[TimedFetchClient] = None
    ):
        """
        Args:
            aggregator: PriceAggregator producing snapshots
            cache: SnapshotCache the snapshots are written to
            display: Surface receiving badge updates
            event_bus: Bus for observer notifications
            scheduler: Alarm registry for the periodic trigger
            config: Settings (alarm name, interval, initial delay)
            client: HTTP client whose session start()/stop() manage
        """
        self.aggregator = aggregator
        self.cache = cache
        self.display = display
        self.bus = event_bus or bus
        self.scheduler = scheduler or AlarmScheduler()
        self.config = config or settings
        self.client = client
        self.logger = get_logger(__name__)

        self._inflight: Optional[asyncio.Task] = None
        self._initial_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> OrchestratorState:
        if self._inflight is not None and not self._inflight.done():
            return OrchestratorState.FETCHING
        return OrchestratorState.IDLE

    @property
    def is_busy(self) -> bool:
        return self.state is OrchestratorState.FETCHING

    # ============================================
    # Lifecycle
    # ============================================

    async def start(self) -> None:
        """Open the HTTP session, register the alarm and schedule the first fetch."""
        if self.client is not None and self.client.session is None:
            await self.client.__aenter__()

        alarm_name = self.config.alarm_name
        if self.scheduler.get(alarm_name) is None:
            self.scheduler.create(alarm_name, self.config.update_interval_seconds, self.on_alarm)

        self._initial_task = asyncio.create_task(self._initial_fetch(), name="initial_fetch")
        self.logger.info("Update orchestrator started")

    async def stop(self) -> None:
        """Cancel timers and the in-flight pass, then close the HTTP session."""
        self.logger.info("Stopping update orchestrator...")
        await self.scheduler.clear_all()

        for task in (self._initial_task, self._inflight):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError, Exception):
                    await task
        self._initial_task = None
        self._inflight = None

        if self.client is not None:
            await self.client.__aexit__(None, None, None)

    # ============================================
    # Triggers
    # ============================================

    async def on_alarm(self, name: str) -> None:
        """Periodic trigger: forced refresh, skipped while a pass is running."""
        if name != self.config.alarm_name:
            return
        if self.is_busy:
            self.logger.info("Alarm fired while a fetch is in progress; skipping")
            return

        self.logger.info("Alarm triggered, fetching data...")
        try:
            await self.update(force_refresh=True)
        except CoinPeekError as e:
            self.logger.error(f"Alarm fetch failed: {e}")

    async def _initial_fetch(self) -> None:
        await asyncio.sleep(self.config.initial_delay_ms / 1000)
        self.logger.info("Initial data fetch...")
        try:
            await self.update(force_refresh=True)
        except CoinPeekError as e:
            self.logger.error(f"Initial fetch failed: {e}")
            cached = await self.cache.read()
            if cached is not None:
                await self._push_badge(cached)
                self.logger.info("Using cached data as fallback")

    # ============================================
    # Update Cycle
    # ============================================

    async def update(self, force_refresh: bool = False) -> PriceSnapshot:
        """
        Run one aggregation pass, or join the one already in flight.

        Raises:
            InvalidDataError / AggregationError: No fresh or cached data
        """
        if self._inflight is not None and not self._inflight.done():
            self.logger.debug("Joining in-flight fetch")
            return await asyncio.shield(self._inflight)

        self._inflight = asyncio.create_task(self._run_update(force_refresh), name="price_update")
        return await asyncio.shield(self._inflight)

    async def _run_update(self, force_refresh: bool) -> PriceSnapshot:
        snapshot = await self.aggregator.fetch_prices(force_refresh)
        await self._publish(snapshot)
        return snapshot

    async def _publish(self, snapshot: PriceSnapshot) -> None:
        try:
            await self.cache.write(snapshot)
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to save data: {e}")

        await self._push_badge(snapshot)
        await self.bus.publish(TOPIC_DATA_UPDATE, {"type": CRYPTO_DATA_UPDATE, "data": snapshot.to_storage()})

    async def _push_badge(self, snapshot: PriceSnapshot) -> None:
        badge = build_badge(snapshot.price_of(BITCOIN), self.config)
        if badge is not None:
            await self.display.set_badge(badge)

    async def get_current(self, force_refresh: bool = False) -> PriceSnapshot:
        """
        Snapshot for a display request: the cached one while it is fresh,
        otherwise the result of an update.
        """
        cached = await self.cache.read()
        if not force_refresh and not self.cache.is_stale(cached):
            self.logger.debug("Using fresh cached data, skipping API call")
            return cached
        return await self.update(force_refresh)

    # ============================================
    # Message Channel
    # ============================================

    async def handle_message(self, message: Any) -> Dict[str, Any]:
        """
        Answer one display-layer request.

        Returns:
            {"success": True, "data": <snapshot>} or {"success": False, "error": <str>}
        """
        try:
            request = MessageRequest.model_validate(message)
        except ValidationError as e:
            self.logger.warning(f"Malformed message: {e.error_count()} error(s)")
            return {"success": False, "error": "Malformed message"}

        self.logger.info(f"Message received: {request.type}")
        if request.type != FETCH_CRYPTO_DATA:
            return {"success": False, "error": "Unknown message type"}

        try:
            snapshot = await self.update(request.force_refresh)
        except CoinPeekError as e:
            self.logger.error(f"Fetch failed: {e}")
            return {"success": False, "error": str(e) or API_FAILED}
        except Exception as e:
            self.logger.exception(f"Unexpected error handling {request.type}: {e}")
            return {"success": False, "error": API_FAILED}

        return {"success": True, "data": snapshot.to_storage()}


# ============================================
# Factory
# ============================================

def build_orchestrator(config: Settings = None, event_bus: EventBus = None) -> UpdateOrchestrator:
    """
    Wire the production object graph from configuration.

    One client, one cache and one aggregator per process, all owned by the
    returned orchestrator.
    """
    config = config or settings
    event_bus = event_bus or bus

    client = TimedFetchClient()
    store = (
        JsonFileKeyValueStore(config.storage_path)
        if config.use_file_storage
        else InMemoryKeyValueStore()
    )
    cache = SnapshotCache(
        store,
        key=config.storage_key,
        min_request_interval_ms=config.min_request_interval_ms,
        freshness_threshold_ms=config.data_freshness_threshold_ms
    )
    aggregator = PriceAggregator(client, cache, config)

    return UpdateOrchestrator(
        aggregator=aggregator,
        cache=cache,
        display=BusBadgeSurface(event_bus),
        event_bus=event_bus,
        config=config,
        client=client
    )
