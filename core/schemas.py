"""
Normalized Data Schemas

This module defines Pydantic models for everything the aggregation layer
produces or exchanges with its collaborators.

Key Principle:
    Regardless of which provider the data comes from (CoinGecko, mempool.space,
    Blocknative, ...), it gets normalized into these schemas. A PriceSnapshot is
    an immutable value: it is replaced wholesale, never updated in place.

Models:
    - AssetPrice: USD price and 24h change of one asset
    - FeeEstimate: low / standard / fast fee tiers
    - GasFees: per-network fee estimates (either may be missing)
    - PriceSnapshot: the aggregated result of one successful fetch cycle
    - MessageRequest / MessageResponse: the display-layer message contract
    - BadgeUpdate: compact status indicator pushed to the display surface
    - SnapshotSummary: display-ready strings for one snapshot
    - ConversionResult: output of the currency converter

Serialization:
    Field names on the wire follow the external contract (change24h,
    forceRefresh). Always dump with by_alias=True.
"""

import math
from typing import Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


BITCOIN = "bitcoin"
ETHEREUM = "ethereum"
USD = "usd"

ASSET_IDS = (BITCOIN, ETHEREUM)
CURRENCY_IDS = (BITCOIN, ETHEREUM, USD)

FETCH_CRYPTO_DATA = "FETCH_CRYPTO_DATA"
CRYPTO_DATA_UPDATE = "CRYPTO_DATA_UPDATE"
UPDATE_BADGE = "UPDATE_BADGE"


# ============================================
# Price Schemas
# ============================================

class AssetPrice(BaseModel):
    """
    Spot price of a single asset.

    Attributes:
        price: USD price, positive and finite
        change_24h: 24h change in percent (serialized as "change24h")
    """

    price: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Spot price in USD"
    )

    change_24h: float = Field(
        default=0.0,
        alias="change24h",
        allow_inf_nan=False,
        description="24h change in percent"
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ============================================
# Fee Schemas
# ============================================

class FeeEstimate(BaseModel):
    """
    Fee rate tiers for one network.

    Bitcoin tiers are whole sat/vB; Ethereum tiers are gwei and may be
    fractional. Tier ordering (low <= standard <= fast) is expected from
    providers but not enforced.

    Example:
        >>> FeeEstimate(low=5, standard=10, fast=20).is_valid()
        True
        >>> FeeEstimate(low=5, standard=0, fast=10).is_valid()
        False
    """

    low: float = Field(..., description="Slow / economy fee rate")
    standard: float = Field(..., description="Normal fee rate")
    fast: float = Field(..., description="Priority fee rate")

    model_config = ConfigDict(frozen=True)

    def is_valid(self) -> bool:
        """True if every tier is a finite number greater than zero."""
        return all(
            math.isfinite(value) and value > 0
            for value in (self.low, self.standard, self.fast)
        )


class GasFees(BaseModel):
    """
    Per-network fee estimates.

    ethereum is always present after a fetch (live or static defaults);
    bitcoin is None when every provider in the chain failed.
    """

    ethereum: Optional[FeeEstimate] = None
    bitcoin: Optional[FeeEstimate] = None

    model_config = ConfigDict(frozen=True)


# ============================================
# Snapshot Schema
# ============================================

class PriceSnapshot(BaseModel):
    """
    Aggregated result of one successful fetch cycle.

    Attributes:
        prices: Asset id ("bitcoin", "ethereum") -> AssetPrice
        gas: Fee estimates for both networks
        timestamp: Completion time in milliseconds since epoch

    Example:
        >>> snapshot = PriceSnapshot(
        ...     prices={
        ...         "bitcoin": AssetPrice(price=65000.0, change_24h=1.2),
        ...         "ethereum": AssetPrice(price=3200.0, change_24h=-0.4),
        ...     },
        ...     gas=GasFees(ethereum=FeeEstimate(low=15, standard=20, fast=25)),
        ...     timestamp=1704110400000,
        ... )
    """

    prices: Dict[str, AssetPrice] = Field(
        ...,
        description="Spot prices keyed by asset id"
    )

    gas: GasFees = Field(
        default_factory=GasFees,
        description="Network fee estimates"
    )

    timestamp: int = Field(
        ...,
        ge=0,
        description="Fetch completion time, milliseconds since epoch"
    )

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "prices": {
                    "bitcoin": {"price": 65000.0, "change24h": 1.2},
                    "ethereum": {"price": 3200.0, "change24h": -0.4}
                },
                "gas": {
                    "ethereum": {"low": 15, "standard": 20, "fast": 25},
                    "bitcoin": {"low": 4, "standard": 6, "fast": 9}
                },
                "timestamp": 1704110400000
            }
        }
    )

    def price_of(self, asset: str) -> Optional[float]:
        """USD price of an asset, or None if it is not in the snapshot."""
        entry = self.prices.get(asset)
        return entry.price if entry else None

    def to_storage(self) -> dict:
        """JSON-compatible dict in the external field naming."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================
# Message Channel Schemas
# ============================================

class MessageRequest(BaseModel):
    """Request sent by the display layer over the message channel."""

    type: str = Field(..., description="Message type tag", examples=[FETCH_CRYPTO_DATA])
    force_refresh: Optional[bool] = Field(
        default=False,
        alias="forceRefresh",
        description="Bypass the rate gate (missing or null means false)"
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("force_refresh", mode="before")
    @classmethod
    def _null_means_false(cls, value):
        return False if value is None else value


class MessageResponse(BaseModel):
    """
    Response to a MessageRequest.

    Exactly one of data (success=True) or error (success=False) is set.
    """

    success: bool
    data: Optional[PriceSnapshot] = None
    error: Optional[str] = None


# ============================================
# Display Schemas
# ============================================

class BadgeUpdate(BaseModel):
    """Compact status indicator pushed to the display surface."""

    text: str = Field(..., description="Short badge text", examples=["65K"])
    color: str = Field(..., description="Badge background colour", examples=["#667eea"])
    tooltip: str = Field(..., description="Hover text", examples=["Bitcoin: $65,000.00"])

    model_config = ConfigDict(frozen=True)


class SnapshotSummary(BaseModel):
    """Display-ready rendering of a snapshot."""

    bitcoin_price: str
    bitcoin_change: str
    ethereum_price: str
    ethereum_change: str
    bitcoin_fees: Dict[str, str]
    ethereum_fees: Dict[str, str]
    last_updated: str
    is_stale: bool
    timestamp: Optional[int] = None


class ConversionResult(BaseModel):
    """Result of converting an amount between bitcoin, ethereum and usd."""

    amount: float
    from_currency: str
    to_currency: str
    result: float
