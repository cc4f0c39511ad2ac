"""
Shared test doubles and payload fixtures for unit tests.

FakeFetcher stands in for TimedFetchClient: responses are keyed by a URL
fragment and every call is recorded, so tests can assert exactly which
providers were contacted and how often.
"""

from core.exceptions import NetworkError
from core.schemas import AssetPrice, FeeEstimate, GasFees, PriceSnapshot


T0 = 1_700_000_000_000


class FakeFetcher:
    """
    Scripted fetcher.

    responses maps a URL fragment to either a JSON body, an exception
    instance to raise, or a list of those consumed one call at a time.
    Unknown URLs raise NetworkError.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    async def fetch_json(self, url, timeout_ms):
        self.calls.append((url, timeout_ms))
        for fragment, response in self.responses.items():
            if fragment in url:
                if isinstance(response, list):
                    response = response.pop(0) if len(response) > 1 else response[0]
                if isinstance(response, Exception):
                    raise response
                return response
        raise NetworkError(f"No route to {url}", url)

    def count(self, fragment):
        return sum(1 for url, _ in self.calls if fragment in url)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


PRICE_PAYLOAD = {
    "bitcoin": {"usd": 65000.5, "usd_24h_change": 1.25},
    "ethereum": {"usd": 3200.25, "usd_24h_change": -0.75},
}

MEMPOOL_PAYLOAD = {"fastestFee": 12, "halfHourFee": 8, "hourFee": 5, "economyFee": 3, "minimumFee": 1}

BLOCKNATIVE_PAYLOAD = {
    "blockPrices": [
        {
            "blockNumber": 19000000,
            "estimatedPrices": [
                {"confidence": 99, "price": 31.0},
                {"confidence": 95, "price": 28.0},
                {"confidence": 90, "price": 26.0},
                {"confidence": 80, "price": 24.5},
                {"confidence": 70, "price": 22.0},
            ],
        }
    ]
}


def make_snapshot(timestamp=T0, btc=60000.0, eth=3000.0, btc_fees=None):
    return PriceSnapshot(
        prices={
            "bitcoin": AssetPrice(price=btc, change_24h=2.0),
            "ethereum": AssetPrice(price=eth, change_24h=-1.0),
        },
        gas=GasFees(ethereum=FeeEstimate(low=15, standard=20, fast=25), bitcoin=btc_fees),
        timestamp=timestamp,
    )
