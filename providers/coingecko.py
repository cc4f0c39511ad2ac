"""
CoinGecko Spot Prices

Builds the single spot-price request for both assets and validates the
untrusted response before anything is built from it.

CoinGecko Endpoint:
    GET /simple/price?ids=bitcoin,ethereum&vs_currencies=usd&include_24hr_change=true

Response Format:
    {
      "bitcoin":  {"usd": 65000.12, "usd_24h_change": 1.23},
      "ethereum": {"usd": 3200.5,   "usd_24h_change": -0.45}
    }
"""

import math
from typing import Any, Dict, Optional

from core.exceptions import InvalidDataError
from core.schemas import ASSET_IDS, AssetPrice


def spot_price_url(base_url: str) -> str:
    """URL requesting USD price and 24h change for both assets in one call."""
    return (
        f"{base_url.rstrip('/')}/simple/price"
        f"?ids={','.join(ASSET_IDS)}&vs_currencies=usd&include_24hr_change=true"
    )


def _coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def validate_price_payload(data: Any) -> bool:
    """
    True if data is an object holding both assets with a usable USD price.

    Both "usd" values must coerce to finite numbers greater than zero.
    """
    if not isinstance(data, dict):
        return False
    for asset in ASSET_IDS:
        entry = data.get(asset)
        if not isinstance(entry, dict):
            return False
        price = _coerce_number(entry.get("usd"))
        if price is None or price <= 0:
            return False
    return True


def parse_price_payload(data: Any) -> Dict[str, AssetPrice]:
    """
    Normalize a spot-price response.

    Missing or non-finite 24h changes become 0.

    Raises:
        InvalidDataError: If the payload fails validate_price_payload
    """
    if not validate_price_payload(data):
        raise InvalidDataError("Invalid data format received")

    prices = {}
    for asset in ASSET_IDS:
        entry = data[asset]
        change = _coerce_number(entry.get("usd_24h_change"))
        prices[asset] = AssetPrice(
            price=_coerce_number(entry["usd"]),
            change_24h=change if change is not None else 0.0
        )
    return prices
