"""Backtest-specific configuration.

Loaded from BACKTEST_* environment variables (or a .env file).
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.models.signal import Market


class BacktestSettings(BaseSettings):
    """Backtest configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BACKTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    initial_capital: float = Field(10_000.0, gt=0)

    # Date range used when the caller gives none: the N days ending now
    default_lookback_days: int = 30

    # Candle request sent to the market data source
    candle_limit: int = 1000
    crypto_timeframe: str = "1day"
    forex_timeframe: str = "1d"

    # Worker processes for the optimizer grid (1 = sequential)
    optimizer_workers: int = 1

    def timeframe_for(self, market: Market) -> str:
        """Daily candle granularity name for a market's data source."""
        if Market(market) == Market.CRYPTO:
            return self.crypto_timeframe
        return self.forex_timeframe


_settings: BacktestSettings | None = None


def get_backtest_settings() -> BacktestSettings:
    """Get cached backtest settings instance."""
    global _settings
    if _settings is None:
        _settings = BacktestSettings()
    return _settings
