"""
Price Aggregator

Builds one PriceSnapshot from a spot-price call plus two fee sub-fetches.

Flow of fetch_prices(force_refresh):
    1. Not forced and the rate gate is closed -> return the cached snapshot
       if there is one (cache hit, no network call).
    2. GET the spot-price endpoint for both assets (price timeout).
    3. Validate the payload; on failure return the cached snapshot, or raise
       InvalidDataError if there is none.
    4. Tick the rate gate, then run the Ethereum gas estimator and the
       Bitcoin fee chain concurrently. Neither can fail the fetch.
    5. Return a new snapshot stamped with the completion time.
    6. Any other failure: cached snapshot if present, else AggregationError.

The aggregator never writes the cache; the orchestrator does.
"""

import asyncio
from typing import Optional

from core.config import Settings, settings
from core.exceptions import AggregationError, InvalidDataError
from core.logging import get_logger
from core.schemas import GasFees, PriceSnapshot
from providers.bitcoin_fees import BitcoinFeeChain, default_bitcoin_providers
from providers.coingecko import parse_price_payload, spot_price_url, validate_price_payload
from providers.ethereum_gas import EthereumGasEstimator
from storage.snapshot_cache import SnapshotCache


class PriceAggregator:
    """
    Aggregates spot prices and fee estimates into snapshots.

    Attributes:
        fetcher: TimedFetchClient (or anything with `async fetch_json(url, timeout_ms)`)
        cache: SnapshotCache providing the rate gate and fallback snapshot
        eth_gas: EthereumGasEstimator
        btc_fees: BitcoinFeeChain

    Example:
        >>> aggregator = PriceAggregator(client, cache)
        >>> snapshot = await aggregator.fetch_prices(force_refresh=True)
    """

    def __init__(
        self,
        fetcher,
        cache: SnapshotCache,
        config: Settings = None,
        eth_gas: Optional[EthereumGasEstimator] = None,
        btc_fees: Optional[BitcoinFeeChain] = None
    ):
        config = config or settings
        self.fetcher = fetcher
        self.cache = cache
        self.price_url = spot_price_url(config.coingecko_base_url)
        self.timeout_ms = config.price_fetch_timeout_ms
        self.eth_gas = eth_gas or EthereumGasEstimator(fetcher, config)
        self.btc_fees = btc_fees or BitcoinFeeChain(
            fetcher,
            default_bitcoin_providers(config),
            timeout_ms=config.fee_fetch_timeout_ms
        )
        self.logger = get_logger(__name__)

    async def fetch_prices(self, force_refresh: bool = False) -> PriceSnapshot:
        """
        Return a fresh snapshot, or the cached one where policy allows.

        Args:
            force_refresh: Bypass the rate gate

        Raises:
            InvalidDataError: Payload invalid and nothing cached
            AggregationError: Fetch failed and nothing cached
        """
        if not force_refresh and not self.cache.can_fetch():
            cached = await self.cache.read()
            if cached is not None:
                self.logger.debug("Rate gate closed, serving cached snapshot")
                return cached

        self.logger.info("Fetching prices and gas fees...")

        try:
            data = await self.fetcher.fetch_json(self.price_url, self.timeout_ms)
        except Exception as e:
            return await self._fallback(e)

        if not validate_price_payload(data):
            self.logger.error(f"Invalid API response format: {str(data)[:200]}")
            cached = await self.cache.read()
            if cached is not None:
                self.logger.info("Using cached data due to invalid API response")
                return cached
            raise InvalidDataError("Invalid data format received")

        try:
            prices = parse_price_payload(data)
            self.cache.mark_fetched()

            eth_gas, btc_gas = await asyncio.gather(
                self.eth_gas.estimate(),
                self.btc_fees.estimate()
            )

            return PriceSnapshot(
                prices=prices,
                gas=GasFees(ethereum=eth_gas, bitcoin=btc_gas),
                timestamp=self.cache.now()
            )

        except Exception as e:
            return await self._fallback(e)

    async def _fallback(self, error: Exception) -> PriceSnapshot:
        """Cached snapshot after a failed fetch, or AggregationError if there is none."""
        self.logger.error(f"Error fetching prices: {type(error).__name__}: {error}")
        cached = await self.cache.read()
        if cached is not None:
            self.logger.info("Returning cached data due to fetch error")
            return cached
        raise AggregationError(f"Unable to fetch cryptocurrency data: {error}") from error
