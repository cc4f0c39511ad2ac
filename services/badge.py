"""
Badge / Display Surface

The display surface shows a compact indicator: short text, a background
colour and a tooltip. build_badge() derives it from the Bitcoin price;
BusBadgeSurface keeps the latest one and publishes it to observers.

Invalid prices never raise here: the update is skipped with a warning.
"""

from typing import Any, Optional, Protocol

from core.config import Settings, settings
from core.logging import get_logger
from core.schemas import BadgeUpdate, UPDATE_BADGE
from core.utils.formatters import format_badge_price, format_price, validate_price
from services.event_bus import EventBus, TOPIC_BADGE, bus


logger = get_logger(__name__)


class DisplaySurface(Protocol):
    async def set_badge(self, badge: BadgeUpdate) -> None:
        ...


def build_badge(price: Any, config: Settings = None) -> Optional[BadgeUpdate]:
    """
    Badge for a Bitcoin price, or None if the price is not valid.

    Example:
        >>> build_badge(65432.1)
        BadgeUpdate(text='65K', color='#667eea', tooltip='Bitcoin: $65,432.10')
    """
    config = config or settings
    if not validate_price(price):
        logger.warning(f"Invalid price for badge: {price!r}")
        return None
    return BadgeUpdate(
        text=format_badge_price(price),
        color=config.badge_color,
        tooltip=f"{config.badge_tooltip_prefix}{format_price(price)}"
    )


class BusBadgeSurface:
    """Display surface that remembers the latest badge and publishes it."""

    def __init__(self, event_bus: EventBus = None):
        self.bus = event_bus or bus
        self.current: Optional[BadgeUpdate] = None

    async def set_badge(self, badge: BadgeUpdate) -> None:
        self.current = badge
        await self.bus.publish(TOPIC_BADGE, {"type": UPDATE_BADGE, **badge.model_dump()})
        logger.info(f"Badge updated: {badge.text}")
