"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Default values match the documented provider endpoints and timings
- Validation catches invalid configurations
- Property methods work as expected

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest
from core.config import Settings, settings, validate_configuration


class TestConfigurationLoading:
    """Test that configuration loads with usable values"""

    def test_coingecko_base_url_loaded(self):
        """Verify CoinGecko API URL is set"""
        assert settings.coingecko_base_url is not None
        assert "coingecko" in settings.coingecko_base_url.lower()
        assert settings.coingecko_base_url.startswith("http")

    def test_app_port_is_valid_integer(self):
        """Verify app port is a valid integer"""
        assert isinstance(settings.app_port, int)
        assert 1 <= settings.app_port <= 65535

    def test_debug_mode_is_boolean(self):
        """Verify debug setting is a boolean"""
        assert isinstance(settings.debug, bool)

    def test_log_level_is_set(self):
        """Verify log level is configured"""
        assert settings.log_level is not None
        assert isinstance(settings.log_level, str)
        assert len(settings.log_level) > 0


class TestDefaults:
    """Defaults of an isolated Settings instance"""

    def test_timeouts(self, test_settings):
        assert test_settings.price_fetch_timeout_ms == 10_000
        assert test_settings.fee_fetch_timeout_ms == 5_000

    def test_rate_gate_and_freshness(self, test_settings):
        assert test_settings.min_request_interval_ms == 5_000
        assert test_settings.data_freshness_threshold_ms == 45_000

    def test_schedule(self, test_settings):
        assert test_settings.alarm_name == "crypto-update"
        assert test_settings.update_interval_seconds == 60
        assert test_settings.initial_delay_ms == 2_000

    def test_fee_defaults(self, test_settings):
        assert (test_settings.default_eth_gas_low,
                test_settings.default_eth_gas_standard,
                test_settings.default_eth_gas_fast) == (15, 20, 25)
        assert test_settings.fee_multiplier_standard == 1.5
        assert test_settings.fee_multiplier_fast == 2.0

    def test_storage_defaults_to_memory(self, test_settings):
        assert test_settings.storage_key == "cryptoData"
        assert test_settings.use_file_storage is False

    def test_file_storage_when_path_given(self):
        config = Settings(_env_file=None, storage_path="/tmp/coinpeek.json")
        assert config.use_file_storage is True


class TestLogLevel:
    """Tests for effective_log_level"""

    def test_configured_level_when_not_debugging(self):
        config = Settings(_env_file=None, log_level="warning", debug=False)
        assert config.effective_log_level == "WARNING"

    def test_debug_forces_debug_level(self):
        config = Settings(_env_file=None, log_level="ERROR", debug=True)
        assert config.effective_log_level == "DEBUG"


class TestCorsOriginsParsing:
    """Test that CORS origins are parsed from a comma-separated string"""

    def test_origins_are_split_and_stripped(self):
        config = Settings(_env_file=None, cors_origins=" http://a.test , http://b.test ,")
        assert config.cors_origins_list == ["http://a.test", "http://b.test"]


class TestConfigurationValidation:
    """Test configuration validation logic"""

    def test_validate_configuration_succeeds(self, test_settings):
        """Verify the default configuration passes validation"""
        validate_configuration(test_settings)

    @pytest.mark.parametrize("field", ["price_fetch_timeout_ms", "fee_fetch_timeout_ms", "initial_delay_ms"])
    def test_non_positive_timeouts_rejected(self, field):
        config = Settings(_env_file=None, **{field: 0})
        with pytest.raises(ValueError, match=field.upper()):
            validate_configuration(config)

    def test_negative_rate_gate_rejected(self):
        config = Settings(_env_file=None, min_request_interval_ms=-1)
        with pytest.raises(ValueError, match="MIN_REQUEST_INTERVAL_MS"):
            validate_configuration(config)

    def test_zero_rate_gate_allowed(self):
        validate_configuration(Settings(_env_file=None, min_request_interval_ms=0))

    def test_multiplier_below_one_rejected(self):
        config = Settings(_env_file=None, fee_multiplier_fast=0.5)
        with pytest.raises(ValueError, match="multipliers"):
            validate_configuration(config)

    def test_confidence_out_of_range_rejected(self):
        config = Settings(_env_file=None, gas_confidence_fast=100)
        with pytest.raises(ValueError, match="confidence"):
            validate_configuration(config)

    def test_invalid_port_rejected(self):
        config = Settings(_env_file=None, app_port=70000)
        with pytest.raises(ValueError, match="port"):
            validate_configuration(config)

    def test_invalid_log_level_rejected(self):
        config = Settings(_env_file=None, log_level="VERBOSE")
        with pytest.raises(ValueError, match="LOG_LEVEL"):
            validate_configuration(config)
