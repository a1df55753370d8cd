"""Strategy configuration models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StrategyKind(str, Enum):
    """Closed set of signal strategies."""

    EMA_RSI = "ema-rsi"
    MACD = "macd"
    VOLUME = "volume"
    TRIPLE_EMA = "triple-ema"


class StrategyParams(BaseModel):
    """Strategy parameters for one run.

    Field names are snake_case; the camelCase aliases are the wire keys used
    by callers and in backtest reports. Both spellings are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    strategy: StrategyKind = StrategyKind.EMA_RSI

    # ema-rsi
    ema_fast: int = Field(7, alias="emaFast", ge=1)
    ema_slow: int = Field(14, alias="emaSlow", ge=1)
    rsi_period: int = Field(14, alias="rsiPeriod", ge=1)

    # macd
    macd_fast: int = Field(12, alias="macdFast", ge=1)
    macd_slow: int = Field(26, alias="macdSlow", ge=1)
    macd_signal: int = Field(9, alias="macdSignal", ge=1)

    # Shifts the RSI band: 70/30 at level 1, 60/40 at level 2, ...
    risk_level: int = Field(1, alias="riskLevel")

    # triple-ema
    triple_fast: int = Field(5, alias="tripleFast", ge=1)
    triple_mid: int = Field(15, alias="tripleMid", ge=1)
    triple_slow: int = Field(30, alias="tripleSlow", ge=1)

    def to_wire(self) -> dict:
        """Serialize with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
