"""Tests for candle sources."""

from datetime import datetime, timezone

import pytest

from backtest.storage import CsvCandleSource, InMemoryCandleSource, load_candles_csv

from helpers import make_candles

CSV = """timestamp,open,high,low,close,volume
2025-01-02,101,103,100,102,1500
2025-01-01,100,102,99,101,1000
2025-01-03,102,104,101,103,1200
"""


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "BTC-USDT.csv"
    path.write_text(CSV)
    return path


class TestLoadCsv:
    def test_sorted_and_typed(self, csv_file):
        candles = load_candles_csv(csv_file, "BTC-USDT")
        assert [c.close for c in candles] == [101.0, 102.0, 103.0]
        assert candles[0].timestamp == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert candles[0].symbol == "BTC-USDT"
        assert candles[1].volume == 1500.0

    def test_unix_seconds(self, tmp_path):
        path = tmp_path / "x.csv"
        path.write_text("timestamp,open,high,low,close,volume\n1735689600,1,2,0.5,1.5,10\n")
        candles = load_candles_csv(path)
        assert candles[0].timestamp == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_header_case_insensitive(self, tmp_path):
        path = tmp_path / "x.csv"
        path.write_text("Timestamp,Open,High,Low,Close,Volume\n2025-01-01,1,2,0.5,1.5,10\n")
        assert load_candles_csv(path)[0].close == 1.5

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("timestamp,close\n2025-01-01,1\n")
        with pytest.raises(ValueError, match="missing columns"):
            load_candles_csv(path)


class TestCsvCandleSource:
    @pytest.mark.asyncio
    async def test_single_file(self, csv_file):
        source = CsvCandleSource(csv_file)
        candles = await source.get_historical_data("ANY", "1day", 1000)
        assert len(candles) == 3

    @pytest.mark.asyncio
    async def test_directory_and_limit(self, csv_file):
        source = CsvCandleSource(csv_file.parent)
        candles = await source.get_historical_data("BTC-USDT", "1day", 2)
        assert [c.close for c in candles] == [102.0, 103.0]

    @pytest.mark.asyncio
    async def test_current_price(self, csv_file):
        source = CsvCandleSource(csv_file.parent)
        assert await source.get_current_price("BTC-USDT") == 103.0


class TestInMemoryCandleSource:
    @pytest.mark.asyncio
    async def test_history_and_price(self):
        candles = make_candles([1.0, 2.0, 3.0])
        source = InMemoryCandleSource({"BTC-USDT": list(reversed(candles))})
        history = await source.get_historical_data("BTC-USDT", "1day", 1000)
        assert [c.close for c in history] == [1.0, 2.0, 3.0]
        assert await source.get_current_price("BTC-USDT") == 3.0

    @pytest.mark.asyncio
    async def test_unknown_symbol(self):
        source = InMemoryCandleSource()
        assert await source.get_historical_data("ETH-USDT", "1day", 10) == []
        assert await source.get_current_price("ETH-USDT") is None

    @pytest.mark.asyncio
    async def test_add(self):
        source = InMemoryCandleSource()
        source.add("EURUSD", make_candles([1.1, 1.2], symbol="EURUSD"))
        assert await source.get_current_price("EURUSD") == 1.2
