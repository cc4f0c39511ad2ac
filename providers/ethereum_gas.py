"""
Ethereum Gas Estimator

Single-provider estimator backed by Blocknative's block prices.

Blocknative Endpoint:
    GET /gasprices/blockprices?chainid=1

Response Format:
    {
      "blockPrices": [
        {
          "blockNumber": 19000000,
          "estimatedPrices": [
            {"confidence": 99, "price": 31.2, ...},
            {"confidence": 95, "price": 28.0, ...},
            {"confidence": 80, "price": 24.5, ...},
            {"confidence": 70, "price": 22.1, ...}
          ]
        }
      ]
    }

The low / standard / fast tiers are the entries at the configured confidence
levels. Any missing tier falls back to its static default, and any failure
at all yields the full default estimate: this estimator never raises.
"""

import math
from typing import Any, Dict, Optional

from core.config import Settings, settings
from core.logging import get_logger, log_provider_failure
from core.schemas import FeeEstimate


def default_ethereum_gas(config: Settings = None) -> FeeEstimate:
    """Static fallback estimate from configuration."""
    config = config or settings
    return FeeEstimate(
        low=config.default_eth_gas_low,
        standard=config.default_eth_gas_standard,
        fast=config.default_eth_gas_fast
    )


def _prices_by_confidence(data: Any) -> Optional[Dict[float, float]]:
    """
    Extract {confidence: price} from the first block, or None if the
    payload does not have the expected nesting.
    """
    if not isinstance(data, dict):
        return None
    blocks = data.get("blockPrices")
    if not isinstance(blocks, list) or not blocks or not isinstance(blocks[0], dict):
        return None
    estimated = blocks[0].get("estimatedPrices")
    if not isinstance(estimated, list):
        return None

    result: Dict[float, float] = {}
    for entry in estimated:
        if not isinstance(entry, dict):
            continue
        confidence = entry.get("confidence")
        price = entry.get("price")
        if isinstance(confidence, bool) or isinstance(price, bool):
            continue
        if not isinstance(confidence, (int, float)) or not isinstance(price, (int, float)):
            continue
        if math.isfinite(price) and price > 0:
            result.setdefault(confidence, price)
    return result


def parse_blocknative(
    data: Any,
    confidence_levels: tuple = (70, 80, 95),
    defaults: FeeEstimate = None
) -> Optional[FeeEstimate]:
    """
    Pick the tiers at the given confidence levels; missing tiers take the
    matching default. Returns None if the payload is not recognizable.
    """
    defaults = defaults or default_ethereum_gas()
    prices = _prices_by_confidence(data)
    if prices is None:
        return None

    low_level, standard_level, fast_level = confidence_levels
    return FeeEstimate(
        low=prices.get(low_level, defaults.low),
        standard=prices.get(standard_level, defaults.standard),
        fast=prices.get(fast_level, defaults.fast)
    )


class EthereumGasEstimator:
    """
    Ethereum gas estimate with static fallback.

    Example:
        >>> estimator = EthereumGasEstimator(client)
        >>> gas = await estimator.estimate()   # always a FeeEstimate
    """

    NAME = "blocknative"

    def __init__(self, fetcher, config: Settings = None, timeout_ms: Optional[int] = None):
        """
        Args:
            fetcher: Object with `async fetch_json(url, timeout_ms)` (TimedFetchClient)
            config: Settings providing endpoint, confidence levels and defaults
            timeout_ms: Request timeout (defaults to the fee timeout)
        """
        config = config or settings
        self.fetcher = fetcher
        self.endpoint = f"{config.blocknative_base_url.rstrip('/')}/gasprices/blockprices?chainid=1"
        self.timeout_ms = timeout_ms or config.fee_fetch_timeout_ms
        self.confidence_levels = (
            config.gas_confidence_low,
            config.gas_confidence_standard,
            config.gas_confidence_fast,
        )
        self.defaults = default_ethereum_gas(config)
        self.logger = get_logger(__name__)

    async def estimate(self) -> FeeEstimate:
        """Live estimate, or the static defaults if anything goes wrong."""
        try:
            data = await self.fetcher.fetch_json(self.endpoint, self.timeout_ms)
        except Exception as e:
            log_provider_failure(self.NAME, f"{type(e).__name__}: {e}")
            return self.defaults

        result = parse_blocknative(data, self.confidence_levels, self.defaults)
        if result is None:
            log_provider_failure(self.NAME, "invalid gas data structure")
            return self.defaults

        self.logger.debug(f"Ethereum gas: low={result.low} standard={result.standard} fast={result.fast}")
        return result
