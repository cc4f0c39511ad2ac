"""
Snapshot Summary

Renders a snapshot into display strings. Formatting happens here, at
display time only; snapshots themselves always carry raw numbers.
"""

from typing import Dict, Optional

from core.schemas import BITCOIN, ETHEREUM, FeeEstimate, PriceSnapshot, SnapshotSummary
from core.utils.formatters import (
    MISSING_FEE,
    format_fee,
    format_percent_change,
    format_price,
    format_time_ago,
)


def _fee_tiers(estimate: Optional[FeeEstimate]) -> Dict[str, str]:
    if estimate is None:
        return {"low": MISSING_FEE, "standard": MISSING_FEE, "fast": MISSING_FEE}
    return {
        "low": format_fee(estimate.low),
        "standard": format_fee(estimate.standard),
        "fast": format_fee(estimate.fast),
    }


def summarize_snapshot(snapshot: PriceSnapshot, now: int, is_stale: bool) -> SnapshotSummary:
    """
    Args:
        snapshot: Snapshot to render
        now: Reference time in milliseconds for the "updated ... ago" text
        is_stale: Staleness verdict from the cache
    """
    btc = snapshot.prices.get(BITCOIN)
    eth = snapshot.prices.get(ETHEREUM)
    return SnapshotSummary(
        bitcoin_price=format_price(btc.price if btc else None),
        bitcoin_change=format_percent_change(btc.change_24h if btc else None),
        ethereum_price=format_price(eth.price if eth else None),
        ethereum_change=format_percent_change(eth.change_24h if eth else None),
        bitcoin_fees=_fee_tiers(snapshot.gas.bitcoin),
        ethereum_fees=_fee_tiers(snapshot.gas.ethereum),
        last_updated=format_time_ago(snapshot.timestamp, now=now),
        is_stale=is_stale,
        timestamp=snapshot.timestamp
    )
