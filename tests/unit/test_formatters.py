"""
Unit Tests for Display Formatters and Validators

Run with:
    pytest tests/unit/test_formatters.py -v
"""

import math

import pytest

from core.utils.formatters import (
    format_badge_price,
    format_fee,
    format_percent_change,
    format_price,
    format_time_ago,
    validate_percent_change,
    validate_price,
)
from core.utils.time import to_local_time_string, to_utc_datetime


NOW = 1_700_000_000_000


class TestFormatPrice:
    """Tests for format_price"""

    def test_formats_with_thousands_separator_and_two_decimals(self):
        assert format_price(65432.1) == "$65,432.10"

    def test_small_price(self):
        assert format_price(0.5) == "$0.50"

    def test_numeric_string_is_coerced(self):
        assert format_price("1234.5") == "$1,234.50"

    @pytest.mark.parametrize("value", [0, -5, float("nan"), float("inf"), None, "abc"])
    def test_invalid_input_gives_zero(self, value):
        assert format_price(value) == "$0.00"


class TestFormatPercentChange:
    """Tests for format_percent_change"""

    def test_positive_has_plus_sign(self):
        assert format_percent_change(1.234) == "+1.23%"

    def test_negative_has_minus_sign(self):
        assert format_percent_change(-0.5) == "-0.50%"

    def test_zero_is_positive(self):
        assert format_percent_change(0) == "+0.00%"

    @pytest.mark.parametrize("value", [float("nan"), float("-inf"), None, "x"])
    def test_non_finite_gives_neutral(self, value):
        assert format_percent_change(value) == "0.00%"


class TestFormatBadgePrice:
    """Tests for format_badge_price"""

    def test_millions(self):
        assert format_badge_price(1_500_000) == "2M"

    def test_thousands(self):
        assert format_badge_price(45000) == "45K"

    def test_rounds_thousands(self):
        assert format_badge_price(65_499) == "65K"
        assert format_badge_price(65_500) == "66K"

    def test_small_values_are_integers(self):
        assert format_badge_price(87.4) == "87"

    def test_half_rounds_up(self):
        assert format_badge_price(2_500_000) == "3M"

    @pytest.mark.parametrize("value", [-5, 0, float("nan"), float("inf"), None])
    def test_invalid_input_gives_empty(self, value):
        assert format_badge_price(value) == ""


class TestFormatTimeAgo:
    """Tests for format_time_ago"""

    def test_seconds(self):
        assert format_time_ago(NOW - 30_000, now=NOW) == "30 seconds ago"

    def test_zero_seconds(self):
        assert format_time_ago(NOW, now=NOW) == "0 seconds ago"

    def test_minutes(self):
        assert format_time_ago(NOW - 125_000, now=NOW) == "2 min ago"

    def test_older_than_an_hour_shows_wall_clock(self):
        ts = NOW - 2 * 60 * 60 * 1000
        assert format_time_ago(ts, now=NOW) == to_local_time_string(ts)

    def test_timestamp_before_2001_shows_wall_clock(self):
        """Millisecond values below 1e12 are still milliseconds"""
        ts = 946_684_800_000
        result = format_time_ago(ts, now=ts + 2 * 60 * 60 * 1000)
        assert result != "never"
        assert result == to_local_time_string(ts)

    def test_future_timestamp_is_just_now(self):
        assert format_time_ago(NOW + 5_000, now=NOW) == "just now"

    @pytest.mark.parametrize("value", [None, 0, "garbage", float("nan")])
    def test_missing_or_invalid_is_never(self, value):
        assert format_time_ago(value, now=NOW) == "never"


class TestValidators:
    """Tests for validate_price and validate_percent_change"""

    @pytest.mark.parametrize("value", [1, 0.01, 65000.5])
    def test_valid_prices(self, value):
        assert validate_price(value) is True

    @pytest.mark.parametrize("value", [0, -1, math.nan, math.inf, "100", None, True])
    def test_invalid_prices(self, value):
        assert validate_price(value) is False

    def test_percent_change_accepts_negative(self):
        assert validate_percent_change(-3.5) is True

    @pytest.mark.parametrize("value", [math.nan, math.inf, "1", None, False])
    def test_percent_change_rejects_non_finite(self, value):
        assert validate_percent_change(value) is False


class TestFormatFee:
    """Tests for format_fee"""

    def test_whole_number(self):
        assert format_fee(20.0) == "20"

    def test_fractional_gwei(self):
        assert format_fee(0.75) == "0.75"

    def test_missing(self):
        assert format_fee(None) == "—"


class TestTimeHelpers:
    """Tests for core.utils.time"""

    def test_to_utc_datetime_reads_milliseconds(self):
        assert to_utc_datetime(1_704_110_400_000).isoformat() == "2024-01-01T12:00:00+00:00"

    def test_to_utc_datetime_small_millisecond_value(self):
        assert to_utc_datetime(946_684_800_000).year == 2000

    def test_to_utc_datetime_rejects_negative(self):
        with pytest.raises(ValueError):
            to_utc_datetime(-1)
