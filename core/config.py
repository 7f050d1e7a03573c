"""
Configuration Management Module

This module handles loading, validating, and providing access to application
configuration from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Venue base URLs and request timeouts
- Pagination bounds for trade/fill listings
- Public-estimation multipliers (approximate, tunable)
- Degraded placeholder behaviour for total outages
- Default credentials injected from the environment (never hard-coded)
- Snapshot storage backend selection (in-memory or Supabase)

Usage:
    from core.config import settings

    print(settings.woox_base_url)
    print(settings.woox_markets_list)  # ["SPOT_BTC_USDT", ...]
"""

from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.
    Field names map to upper-case environment variables
    (e.g. ``woox_public_volume_multiplier`` -> ``WOOX_PUBLIC_VOLUME_MULTIPLIER``).
    """

    # ============================================
    # Venue API Configuration
    # ============================================

    woox_base_url: str = Field(
        default="https://api.woo.org",
        description="WOO X REST API base URL"
    )

    paradex_base_url: str = Field(
        default="https://api.prod.paradex.trade/v1",
        description="Paradex REST API base URL (including version prefix)"
    )

    request_timeout: float = Field(
        default=10.0,
        description="Per-request HTTP timeout in seconds"
    )

    aggregation_timeout: float = Field(
        default=60.0,
        description="Upper bound for one venue's whole tier chain, in seconds"
    )

    # ============================================
    # Pagination
    # ============================================

    page_size: int = Field(
        default=100,
        description="Records requested per trade/fill page"
    )

    max_pages: int = Field(
        default=10,
        description="Hard cap on page requests per pagination run"
    )

    # ============================================
    # Public Estimation (approximate)
    # ============================================

    woox_public_markets: str = Field(
        default="SPOT_BTC_USDT,SPOT_ETH_USDT,PERP_BTC_USDT",
        description="Comma-separated WOO X markets sampled for public estimates"
    )

    woox_public_volume_multiplier: float = Field(
        default=10.0,
        description="Scales sampled WOO X markets up to a whole-exchange figure"
    )

    paradex_public_volume_multiplier: float = Field(
        default=1.0,
        description="Scaling applied to the Paradex all-market 24h figure"
    )

    woox_sample_size: int = Field(
        default=50,
        description="Maximum public WOO X trades returned as display sample"
    )

    paradex_sample_page_size: int = Field(
        default=20,
        description="Fills fetched for display when account volume is known"
    )

    # ============================================
    # Aggregation Windows & History
    # ============================================

    full_history_days: int = Field(
        default=730,
        description="Length of the 'full-history' window in days"
    )

    recent_days: int = Field(
        default=30,
        description="Length of the 'recent' window in days"
    )

    snapshot_history_limit: int = Field(
        default=100,
        description="Stored snapshots read back per aggregation run"
    )

    # ============================================
    # Degraded Placeholder
    # ============================================

    degraded_volume_mode: Literal["random", "zero"] = Field(
        default="zero",
        description="Placeholder used when every tier fails (always tagged 'error')"
    )

    woox_placeholder_ceiling: float = Field(
        default=1_000_000.0,
        description="Upper bound of the random WOO X placeholder"
    )

    paradex_placeholder_ceiling: float = Field(
        default=500_000.0,
        description="Upper bound of the random Paradex placeholder"
    )

    # ============================================
    # Default Credentials (injected, optional)
    # ============================================

    woox_default_api_key: str = Field(
        default="",
        description="WOO X API key used when the credential store has none"
    )

    woox_default_api_secret: str = Field(
        default="",
        description="WOO X API secret used when the credential store has none"
    )

    paradex_default_token: str = Field(
        default="",
        description="Paradex JWT used when the credential store has none"
    )

    # ============================================
    # Storage
    # ============================================

    supabase_url: str = Field(
        default="",
        description="Supabase project URL (empty = in-memory stores)"
    )

    supabase_key: str = Field(
        default="",
        description="Supabase API key"
    )

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
        default=True,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    # ============================================
    # Derived Properties
    # ============================================

    @property
    def woox_markets_list(self) -> List[str]:
        """
        Sampled WOO X markets as a list.

        Example:
            >>> settings.woox_markets_list
            ['SPOT_BTC_USDT', 'SPOT_ETH_USDT', 'PERP_BTC_USDT']
        """
        return [m.strip().upper() for m in self.woox_public_markets.split(",") if m.strip()]

    @property
    def cors_origins_list(self) -> List[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def use_supabase(self) -> bool:
        """True when both Supabase URL and key are configured."""
        return bool(self.supabase_url and self.supabase_key)


settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate critical configuration settings on application startup.

    Raises:
        ValueError: If configuration is missing or invalid
    """
    # logging.py imports config.py, so import lazily here
    from core.logging import logger

    config = config or settings

    if not (1 <= config.app_port <= 65535):
        raise ValueError(f"Invalid port number: {config.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    if config.page_size <= 0 or config.max_pages <= 0:
        raise ValueError("PAGE_SIZE and MAX_PAGES must be positive")

    if config.request_timeout <= 0 or config.aggregation_timeout <= 0:
        raise ValueError("REQUEST_TIMEOUT and AGGREGATION_TIMEOUT must be positive")

    if config.woox_public_volume_multiplier < 0 or config.paradex_public_volume_multiplier < 0:
        raise ValueError("Public volume multipliers cannot be negative")

    if config.woox_placeholder_ceiling < 0 or config.paradex_placeholder_ceiling < 0:
        raise ValueError("Placeholder ceilings cannot be negative")

    if config.full_history_days <= 0 or config.recent_days <= 0:
        raise ValueError("FULL_HISTORY_DAYS and RECENT_DAYS must be positive")

    if not config.woox_markets_list:
        raise ValueError("WOOX_PUBLIC_MARKETS must contain at least one market")

    if bool(config.woox_default_api_key) != bool(config.woox_default_api_secret):
        logger.warning("Only one of WOOX_DEFAULT_API_KEY / WOOX_DEFAULT_API_SECRET is set; ignoring both")

    logger.info("Configuration validated successfully")
    logger.info(f"WOO X API: {config.woox_base_url}")
    logger.info(f"Paradex API: {config.paradex_base_url}")
    logger.info(f"Sampled WOO X markets: {', '.join(config.woox_markets_list)}")
    logger.info(f"Degraded mode: {config.degraded_volume_mode}")
    logger.info(f"Storage: {'Supabase' if config.use_supabase else 'In-Memory'}")
    logger.info(f"Log level: {config.log_level.upper()}")
