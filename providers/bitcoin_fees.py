"""
Bitcoin Fee Provider Chain

Bitcoin fee estimates come from low-reliability public APIs, so several
independent providers are tried in order until one yields a plausible
estimate. The first accepted result wins; no further providers are called.

Providers (default order):
    1. mempool.space    GET /fees/recommended
       {"fastestFee": 12, "halfHourFee": 8, "hourFee": 5, ...}
    2. blockchain.info  GET /mempool/fees
       {"regular": 5, "priority": 8, "limits": {...}}
    3. blockchair.com   GET /bitcoin/stats
       {"data": {"suggested_transaction_fee_per_byte_sat": 6, ...}}

Providers that report fewer than three tiers derive the missing ones from
configured multipliers (FeeMultipliers).

A parser never raises: it returns None for anything it cannot read, which
the chain treats as "try the next provider". If every provider fails the
chain returns None, which is a normal outcome (the snapshot simply carries
no Bitcoin fee estimate).
"""

import math
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, List, Optional

from core.config import Settings, settings
from core.logging import get_logger, log_provider_failure
from core.schemas import FeeEstimate


@dataclass(frozen=True)
class FeeMultipliers:
    """Factors deriving standard / fast tiers from a single base fee rate."""
    standard: float = 1.5
    fast: float = 2.0


@dataclass(frozen=True)
class ProviderSpec:
    """
    One fee provider: a name, the endpoint to GET, and a pure parser
    turning the decoded JSON body into a FeeEstimate (or None).
    """
    name: str
    endpoint: str
    parse: Callable[[Any], Optional[FeeEstimate]]


# ============================================
# Parsers
# ============================================

def _positive(container: Any, key: str) -> Optional[float]:
    """container[key] as a finite number > 0, or None."""
    if not isinstance(container, dict):
        return None
    value = container.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_mempool_space(data: Any) -> Optional[FeeEstimate]:
    """hourFee / halfHourFee / fastestFee map directly onto the three tiers."""
    hour = _positive(data, "hourFee")
    half_hour = _positive(data, "halfHourFee")
    fastest = _positive(data, "fastestFee")
    if hour is None or half_hour is None or fastest is None:
        return None
    return FeeEstimate(low=_round(hour), standard=_round(half_hour), fast=_round(fastest))


def parse_blockchain_info(data: Any, multipliers: FeeMultipliers = FeeMultipliers()) -> Optional[FeeEstimate]:
    """regular -> low, priority -> standard, fast is priority scaled by the standard multiplier."""
    regular = _positive(data, "regular")
    priority = _positive(data, "priority")
    if regular is None or priority is None:
        return None
    return FeeEstimate(
        low=_round(regular),
        standard=_round(priority),
        fast=_round(priority * multipliers.standard)
    )


def parse_blockchair(data: Any, multipliers: FeeMultipliers = FeeMultipliers()) -> Optional[FeeEstimate]:
    """A single suggested fee per byte, scaled into standard and fast tiers."""
    stats = data.get("data") if isinstance(data, dict) else None
    fee = _positive(stats, "suggested_transaction_fee_per_byte_sat")
    if fee is None:
        return None
    return FeeEstimate(
        low=_round(fee),
        standard=_round(fee * multipliers.standard),
        fast=_round(fee * multipliers.fast)
    )


def default_bitcoin_providers(config: Settings = None) -> List[ProviderSpec]:
    """
    The default provider order, with endpoints and multipliers taken from
    configuration.
    """
    config = config or settings
    multipliers = FeeMultipliers(
        standard=config.fee_multiplier_standard,
        fast=config.fee_multiplier_fast
    )
    return [
        ProviderSpec(
            name="mempool.space",
            endpoint=f"{config.mempool_base_url.rstrip('/')}/fees/recommended",
            parse=parse_mempool_space
        ),
        ProviderSpec(
            name="blockchain.info",
            endpoint=f"{config.blockchain_info_base_url.rstrip('/')}/mempool/fees",
            parse=partial(parse_blockchain_info, multipliers=multipliers)
        ),
        ProviderSpec(
            name="blockchair.com",
            endpoint=f"{config.blockchair_base_url.rstrip('/')}/bitcoin/stats",
            parse=partial(parse_blockchair, multipliers=multipliers)
        ),
    ]


# ============================================
# Provider Chain
# ============================================

class BitcoinFeeChain:
    """
    Ordered fallback chain of Bitcoin fee providers.

    Providers are tried strictly sequentially. Each gets one request with
    the (short) fee timeout; fetch errors, unparseable payloads and
    non-positive tiers all count as a provider failure.

    Example:
        >>> chain = BitcoinFeeChain(client, default_bitcoin_providers())
        >>> fees = await chain.estimate()   # FeeEstimate or None
    """

    def __init__(self, fetcher, providers: List[ProviderSpec], timeout_ms: int = 5_000):
        """
        Args:
            fetcher: Object with `async fetch_json(url, timeout_ms)` (TimedFetchClient)
            providers: Providers in the order they should be tried
            timeout_ms: Per-provider request timeout
        """
        if not providers:
            raise ValueError("BitcoinFeeChain needs at least one provider")
        self.fetcher = fetcher
        self.providers = list(providers)
        self.timeout_ms = timeout_ms
        self.logger = get_logger(__name__)

    async def estimate(self) -> Optional[FeeEstimate]:
        """
        Return the first acceptable estimate, or None if every provider failed.
        """
        for provider in self.providers:
            try:
                data = await self.fetcher.fetch_json(provider.endpoint, self.timeout_ms)
            except Exception as e:
                log_provider_failure(provider.name, f"{type(e).__name__}: {e}")
                continue

            try:
                result = provider.parse(data)
            except Exception as e:
                log_provider_failure(provider.name, f"parser raised {type(e).__name__}: {e}")
                continue

            if result is None:
                log_provider_failure(provider.name, "unrecognized payload")
                continue

            if not result.is_valid():
                log_provider_failure(
                    provider.name,
                    f"non-positive tiers (low={result.low}, standard={result.standard}, fast={result.fast})"
                )
                continue

            self.logger.info(f"Bitcoin fees from {provider.name}")
            return result

        self.logger.warning("All Bitcoin fee providers failed")
        return None
