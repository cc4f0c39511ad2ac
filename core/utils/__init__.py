"""
Core Utilities Package

This package contains utility functions and helpers used throughout the application.

Modules:
    - time: Millisecond timestamp helpers
    - formatters: Display formatting and numeric validation
    - conversion: bitcoin / ethereum / usd conversion
"""

from core.utils.time import to_utc_datetime, current_utc_timestamp

__all__ = ["to_utc_datetime", "current_utc_timestamp"]
