"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Provider endpoints, timeouts and rate-limit intervals in one place
- Fee multipliers and gas confidence levels are configuration, not code
- Handles optional settings with sensible defaults

Usage:
    from core.config import settings

    # Access configuration values
    print(settings.coingecko_base_url)
    print(settings.min_request_interval_ms)
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application Settings

    This class defines all configuration parameters for the application.
    Values are automatically loaded from environment variables or .env file.

    Attributes:
        coingecko_base_url: Spot price API (both assets in one call)
        blocknative_base_url: Ethereum gas price API
        mempool_base_url / blockchain_info_base_url / blockchair_base_url:
            Bitcoin fee providers, tried in that order
        price_fetch_timeout_ms: Timeout for the spot price request
        fee_fetch_timeout_ms: Timeout for each fee provider request
        min_request_interval_ms: Rate gate between automatic fetches
        data_freshness_threshold_ms: Snapshot age after which it is stale
        update_interval_minutes: Period of the background alarm
        initial_delay_ms: Delay before the first fetch after startup
        storage_path: JSON file for the cached snapshot (empty = in-memory)
    """

    # ============================================
    # Provider API Configuration
    # ============================================

    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL (spot prices)"
    )

    blocknative_base_url: str = Field(
        default="https://api.blocknative.com",
        description="Blocknative API base URL (Ethereum gas)"
    )

    mempool_base_url: str = Field(
        default="https://mempool.space/api/v1",
        description="mempool.space API base URL (Bitcoin fees)"
    )

    blockchain_info_base_url: str = Field(
        default="https://api.blockchain.info",
        description="blockchain.info API base URL (Bitcoin fees)"
    )

    blockchair_base_url: str = Field(
        default="https://api.blockchair.com",
        description="Blockchair API base URL (Bitcoin fees)"
    )

    # ============================================
    # Timeouts & Rate Limiting
    # ============================================

    price_fetch_timeout_ms: int = Field(
        default=10_000,
        description="Timeout for the spot price request (milliseconds)"
    )

    fee_fetch_timeout_ms: int = Field(
        default=5_000,
        description="Timeout for each fee provider request (milliseconds)"
    )

    min_request_interval_ms: int = Field(
        default=5_000,
        description="Minimum interval between non-forced price fetches (milliseconds)"
    )

    data_freshness_threshold_ms: int = Field(
        default=45_000,
        description="Snapshot age after which display requests trigger a refresh"
    )

    # ============================================
    # Scheduling
    # ============================================

    update_interval_minutes: float = Field(
        default=1,
        description="Background refresh period (minutes)"
    )

    initial_delay_ms: int = Field(
        default=2_000,
        description="Delay before the first fetch after startup (milliseconds)"
    )

    alarm_name: str = Field(
        default="crypto-update",
        description="Name of the recurring refresh alarm"
    )

    # ============================================
    # Fee Estimation
    # ============================================

    gas_confidence_low: int = Field(default=70, description="Blocknative confidence for the low tier")
    gas_confidence_standard: int = Field(default=80, description="Blocknative confidence for the standard tier")
    gas_confidence_fast: int = Field(default=95, description="Blocknative confidence for the fast tier")

    default_eth_gas_low: float = Field(default=15, description="Fallback Ethereum low gas (gwei)")
    default_eth_gas_standard: float = Field(default=20, description="Fallback Ethereum standard gas (gwei)")
    default_eth_gas_fast: float = Field(default=25, description="Fallback Ethereum fast gas (gwei)")

    fee_multiplier_standard: float = Field(
        default=1.5,
        description="Multiplier deriving the standard tier from a single base fee"
    )

    fee_multiplier_fast: float = Field(
        default=2.0,
        description="Multiplier deriving the fast tier from a single base fee"
    )

    # ============================================
    # Storage Configuration
    # ============================================

    storage_key: str = Field(
        default="cryptoData",
        description="Key of the single cached snapshot slot"
    )

    storage_path: str = Field(
        default="",
        description="JSON file for the cached snapshot (empty = in-memory store)"
    )

    # ============================================
    # Badge Configuration
    # ============================================

    badge_color: str = Field(default="#667eea", description="Badge background colour")
    badge_tooltip_prefix: str = Field(default="Bitcoin: ", description="Badge tooltip prefix")

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode (forces DEBUG logging and FastAPI debug responses)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    # ============================================
    # Derived Properties
    # ============================================

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Convert comma-separated CORS origins string to a list.

        Example:
            >>> settings.cors_origins_list
            ['http://localhost:3000', 'http://localhost:5173']
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def use_file_storage(self) -> bool:
        """True if the snapshot should survive restarts in a JSON file."""
        return bool(self.storage_path)

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, otherwise the configured LOG_LEVEL."""
        return "DEBUG" if self.debug else self.log_level.upper()

    @property
    def update_interval_seconds(self) -> float:
        return self.update_interval_minutes * 60


# ============================================
# Global Settings Instance
# ============================================

settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate critical configuration settings on application startup.

    Args:
        config: Settings to check (defaults to the global instance)

    Raises:
        ValueError: If required configuration is missing or invalid
    """
    # logging.py imports config.py, so import lazily
    from core.logging import logger

    config = config or settings

    for name in (
        "price_fetch_timeout_ms",
        "fee_fetch_timeout_ms",
        "initial_delay_ms",
        "data_freshness_threshold_ms",
    ):
        if getattr(config, name) <= 0:
            raise ValueError(f"{name.upper()} must be positive, got {getattr(config, name)}")

    if config.min_request_interval_ms < 0:
        raise ValueError(f"MIN_REQUEST_INTERVAL_MS cannot be negative: {config.min_request_interval_ms}")

    if config.update_interval_minutes <= 0:
        raise ValueError(f"UPDATE_INTERVAL_MINUTES must be positive, got {config.update_interval_minutes}")

    if config.fee_multiplier_standard < 1 or config.fee_multiplier_fast < 1:
        raise ValueError(
            f"Fee multipliers must be >= 1 "
            f"(standard={config.fee_multiplier_standard}, fast={config.fee_multiplier_fast})"
        )

    for level in (config.gas_confidence_low, config.gas_confidence_standard, config.gas_confidence_fast):
        if not (1 <= level <= 99):
            raise ValueError(f"Invalid gas confidence level: {level}. Must be between 1 and 99")

    if not (1 <= config.app_port <= 65535):
        raise ValueError(f"Invalid port number: {config.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Spot prices: {config.coingecko_base_url}")
    logger.info(f"Refresh every {config.update_interval_minutes} min, rate gate {config.min_request_interval_ms}ms")
    logger.info(f"Storage: {config.storage_path if config.use_file_storage else 'In-Memory'}")
    logger.info(f"Environment: {config.environment}")
    logger.info(f"Log level: {config.effective_log_level}")
