"""Live trading configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from core.models.signal import Market


class LiveSettings(BaseSettings):
    """Live trading settings loaded from environment variables (LIVE_*)."""

    model_config = SettingsConfigDict(
        env_prefix="LIVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Exit rules (fractions: 0.05 = 5%)
    target_profit: float = 0.05
    stop_loss: float = 0.03
    # Trailing stop distance in percent; None disables it
    trailing_percent: float | None = None

    # Position sizing
    sizing_stop_loss_percent: float = 2

    # Tradable symbols per market
    major_pairs: dict[Market, list[str]] = {
        Market.CRYPTO: [
            "BTC-USDT", "ETH-USDT", "BNB-USDT", "SOL-USDT", "ADA-USDT",
            "XRP-USDT", "DOGE-USDT", "AVAX-USDT", "MATIC-USDT", "DOT-USDT",
        ],
        Market.FOREX: [
            "EURUSD", "USDJPY", "GBPUSD", "USDCHF", "AUDUSD",
            "USDCAD", "NZDUSD", "EURJPY", "GBPJPY", "EURGBP",
        ],
    }

    def is_major_pair(self, market: Market, symbol: str) -> bool:
        return symbol in self.major_pairs.get(Market(market), [])


@lru_cache
def get_live_settings() -> LiveSettings:
    """Get cached live settings instance."""
    return LiveSettings()
