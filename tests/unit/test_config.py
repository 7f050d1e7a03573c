"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Default values are applied when nothing is configured
- Environment variables override defaults
- Validation catches invalid configurations
- Property methods work as expected

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest

from core.config import Settings, settings, validate_configuration


class TestConfigurationLoading:
    """Test that configuration loads with sane values"""

    def test_venue_base_urls_loaded(self):
        """Verify both venue URLs are set"""
        assert settings.woox_base_url.startswith("http")
        assert settings.paradex_base_url.startswith("http")

    def test_app_port_is_valid_integer(self):
        """Verify app port is a valid integer"""
        assert isinstance(settings.app_port, int)
        assert 1 <= settings.app_port <= 65535

    def test_debug_mode_is_boolean(self):
        """Verify debug setting is a boolean"""
        assert isinstance(settings.debug, bool)


class TestDefaults:
    """Test documented defaults"""

    def test_pagination_defaults(self, test_settings):
        assert test_settings.page_size == 100
        assert test_settings.max_pages == 10

    def test_public_estimate_defaults(self, test_settings):
        assert test_settings.woox_public_volume_multiplier == 10.0
        assert test_settings.paradex_public_volume_multiplier == 1.0

    def test_window_defaults(self, test_settings):
        assert test_settings.full_history_days == 730
        assert test_settings.recent_days == 30

    def test_default_credentials_are_empty(self):
        """No credential is baked into the code"""
        config = Settings(_env_file=None)
        assert config.woox_default_api_key == ""
        assert config.woox_default_api_secret == ""
        assert config.paradex_default_token == ""
        assert config.degraded_volume_mode == "zero"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("WOOX_PUBLIC_VOLUME_MULTIPLIER", "4")
        monkeypatch.setenv("DEGRADED_VOLUME_MODE", "random")

        config = Settings(_env_file=None)

        assert config.woox_public_volume_multiplier == 4.0
        assert config.degraded_volume_mode == "random"


class TestDerivedProperties:
    """Test that comma-separated settings are parsed"""

    def test_woox_markets_list(self):
        config = Settings(_env_file=None, woox_public_markets=" spot_btc_usdt, PERP_BTC_USDT ,,")
        assert config.woox_markets_list == ["SPOT_BTC_USDT", "PERP_BTC_USDT"]

    def test_default_markets(self, test_settings):
        assert test_settings.woox_markets_list == ["SPOT_BTC_USDT", "SPOT_ETH_USDT", "PERP_BTC_USDT"]

    def test_cors_origins_list(self):
        config = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")
        assert config.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_use_supabase_requires_url_and_key(self, test_settings):
        assert test_settings.use_supabase is False
        assert test_settings.model_copy(update={"supabase_url": "https://x.supabase.co"}).use_supabase is False
        assert test_settings.model_copy(
            update={"supabase_url": "https://x.supabase.co", "supabase_key": "k"}
        ).use_supabase is True


class TestConfigurationValidation:
    """Test validate_configuration"""

    def test_validate_configuration_succeeds(self, test_settings):
        validate_configuration(test_settings)

    @pytest.mark.parametrize("update, message", [
        ({"app_port": 0}, "Invalid port"),
        ({"log_level": "VERBOSE"}, "Invalid LOG_LEVEL"),
        ({"page_size": 0}, "PAGE_SIZE"),
        ({"aggregation_timeout": 0}, "AGGREGATION_TIMEOUT"),
        ({"woox_public_volume_multiplier": -1}, "multipliers"),
        ({"paradex_placeholder_ceiling": -1}, "ceilings"),
        ({"recent_days": 0}, "RECENT_DAYS"),
        ({"woox_public_markets": " , "}, "WOOX_PUBLIC_MARKETS"),
    ])
    def test_validation_catches_invalid_values(self, test_settings, update, message):
        with pytest.raises(ValueError, match=message):
            validate_configuration(test_settings.model_copy(update=update))

    def test_half_configured_default_only_warns(self, test_settings):
        validate_configuration(test_settings.model_copy(update={"woox_default_api_key": "k"}))
