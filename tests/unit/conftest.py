"""
Shared fixtures for unit tests.
"""

import pytest

from core.config import Settings
from storage.kv_store import InMemoryKeyValueStore
from storage.snapshot_cache import SnapshotCache
from tests.unit.helpers import BLOCKNATIVE_PAYLOAD, MEMPOOL_PAYLOAD, PRICE_PAYLOAD, FakeClock, FakeFetcher


@pytest.fixture
def test_settings():
    """Default settings, isolated from any local .env file"""
    return Settings(_env_file=None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def cache(store, clock):
    return SnapshotCache(store, key="cryptoData", min_request_interval_ms=5_000,
                         freshness_threshold_ms=45_000, clock=clock)


@pytest.fixture
def healthy_fetcher():
    """Every provider answers correctly"""
    return FakeFetcher({
        "simple/price": PRICE_PAYLOAD,
        "fees/recommended": MEMPOOL_PAYLOAD,
        "blockprices": BLOCKNATIVE_PAYLOAD,
    })
