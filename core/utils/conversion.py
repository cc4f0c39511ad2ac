"""
Currency Conversion

Converts amounts between bitcoin, ethereum and usd using the prices of a
snapshot. Everything goes through USD first; a missing or zero price makes
the conversion yield 0 rather than dividing by zero.
"""

from typing import Mapping, Optional

from core.schemas import AssetPrice, USD, CURRENCY_IDS


DECIMAL_PLACES_USD = 2
DECIMAL_PLACES_CRYPTO = 8


def _price(prices: Mapping[str, AssetPrice], asset: str) -> Optional[float]:
    entry = prices.get(asset)
    if entry is None or entry.price <= 0:
        return None
    return entry.price


def convert_currency(
    amount: float,
    from_currency: str,
    to_currency: str,
    prices: Mapping[str, AssetPrice]
) -> float:
    """
    Convert amount from one currency to another.

    Args:
        amount: Amount in from_currency (non-positive amounts convert to 0)
        from_currency: "bitcoin", "ethereum" or "usd"
        to_currency: "bitcoin", "ethereum" or "usd"
        prices: Snapshot prices keyed by asset id

    Returns:
        Converted amount, unrounded

    Raises:
        ValueError: If either currency is unsupported

    Example:
        >>> convert_currency(0.5, "bitcoin", "usd", snapshot.prices)
        32500.0
    """
    for currency in (from_currency, to_currency):
        if currency not in CURRENCY_IDS:
            raise ValueError(
                f"Unsupported currency: '{currency}'. "
                f"Must be one of: {', '.join(CURRENCY_IDS)}"
            )

    if amount <= 0:
        return 0.0

    if from_currency == USD:
        usd_amount = amount
    else:
        from_price = _price(prices, from_currency)
        if from_price is None:
            return 0.0
        usd_amount = amount * from_price

    if to_currency == USD:
        return usd_amount

    to_price = _price(prices, to_currency)
    if to_price is None:
        return 0.0
    return usd_amount / to_price


def round_for_currency(value: float, currency: str) -> float:
    """Round to 2 places for usd, 8 for bitcoin/ethereum."""
    places = DECIMAL_PLACES_USD if currency == USD else DECIMAL_PLACES_CRYPTO
    return round(value, places)


__all__ = ["convert_currency", "round_for_currency"]
