"""Tests for Settings: environment loading and the API-key requirement."""

import pytest
from pydantic import ValidationError

from Swing_Scout.config import (
    DEFAULT_DB_PATH,
    DEFAULT_MAX_TICKERS,
    DEFAULT_MIN_DOLLAR_VOL,
    DEFAULT_SCORE_THRESHOLD,
    Settings,
)
from Swing_Scout.utils.exceptions import ConfigurationError


class TestFromEnv:
    """Tests for Settings.from_env()."""

    def test_defaults_when_unset(self) -> None:
        settings = Settings.from_env({})
        assert settings.polygon_api_key is None
        assert settings.db_path == DEFAULT_DB_PATH
        assert settings.score_threshold == DEFAULT_SCORE_THRESHOLD
        assert settings.min_dollar_vol_20d == DEFAULT_MIN_DOLLAR_VOL
        assert settings.max_tickers == DEFAULT_MAX_TICKERS

    def test_reads_overrides(self) -> None:
        settings = Settings.from_env(
            {
                "POLYGON_API_KEY": "abc",
                "SWING_SCOUT_DB_PATH": "/tmp/x.db",
                "SWING_SCOUT_SCORE_THRESHOLD": "60",
                "SWING_SCOUT_MIN_DOLLAR_VOL": "10000000",
                "SWING_SCOUT_MAX_TICKERS": "25",
                "POLYGON_REQUESTS_PER_SECOND": "2.5",
            }
        )
        assert settings.polygon_api_key == "abc"
        assert settings.db_path == "/tmp/x.db"
        assert settings.score_threshold == 60.0
        assert settings.min_dollar_vol_20d == 10_000_000.0
        assert settings.max_tickers == 25
        assert settings.polygon_requests_per_second == 2.5

    def test_empty_key_treated_as_missing(self) -> None:
        assert Settings.from_env({"POLYGON_API_KEY": ""}).polygon_api_key is None

    def test_threshold_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings.from_env({"SWING_SCOUT_SCORE_THRESHOLD": "150"})


class TestRequirePolygonApiKey:
    def test_returns_key(self) -> None:
        assert Settings(polygon_api_key="abc").require_polygon_api_key() == "abc"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="POLYGON_API_KEY") as exc_info:
            Settings().require_polygon_api_key()
        assert exc_info.value.setting == "POLYGON_API_KEY"
