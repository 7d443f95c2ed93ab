"""Runtime settings loaded once from the environment.

Settings are passed explicitly into the data provider, news service and
scan parameters; nothing downstream reads ``os.environ`` directly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from Swing_Scout.utils.exceptions import ConfigurationError

DEFAULT_DB_PATH: Final[str] = "data/swing_scout.db"
DEFAULT_SCORE_THRESHOLD: Final[float] = 75.0
DEFAULT_MIN_DOLLAR_VOL: Final[float] = 5_000_000.0
DEFAULT_MAX_TICKERS: Final[int] = 200
DEFAULT_POLYGON_RPS: Final[float] = 5.0

POLYGON_API_KEY_ENV: Final[str] = "POLYGON_API_KEY"


class Settings(BaseModel):
    """Process-wide configuration.

    ``polygon_api_key`` is optional at load time so that commands which never
    touch the provider (``watchlist list``) still work without it. Anything
    that builds a provider calls :meth:`require_polygon_api_key`.
    """

    model_config = ConfigDict(frozen=True)

    polygon_api_key: str | None = None
    db_path: str = DEFAULT_DB_PATH
    score_threshold: float = Field(default=DEFAULT_SCORE_THRESHOLD, ge=0.0, le=100.0)
    min_dollar_vol_20d: float = Field(default=DEFAULT_MIN_DOLLAR_VOL, ge=0.0)
    max_tickers: int = Field(default=DEFAULT_MAX_TICKERS, ge=1)
    polygon_requests_per_second: float = Field(default=DEFAULT_POLYGON_RPS, gt=0.0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        return cls(
            polygon_api_key=env.get(POLYGON_API_KEY_ENV) or None,
            db_path=env.get("SWING_SCOUT_DB_PATH", DEFAULT_DB_PATH),
            score_threshold=float(
                env.get("SWING_SCOUT_SCORE_THRESHOLD", DEFAULT_SCORE_THRESHOLD)
            ),
            min_dollar_vol_20d=float(
                env.get("SWING_SCOUT_MIN_DOLLAR_VOL", DEFAULT_MIN_DOLLAR_VOL)
            ),
            max_tickers=int(env.get("SWING_SCOUT_MAX_TICKERS", DEFAULT_MAX_TICKERS)),
            polygon_requests_per_second=float(
                env.get("POLYGON_REQUESTS_PER_SECOND", DEFAULT_POLYGON_RPS)
            ),
        )

    def require_polygon_api_key(self) -> str:
        """Return the Polygon API key or raise ConfigurationError if missing."""
        if not self.polygon_api_key:
            raise ConfigurationError(
                f"Missing {POLYGON_API_KEY_ENV}; set it in the environment before scanning",
                setting=POLYGON_API_KEY_ENV,
            )
        return self.polygon_api_key
