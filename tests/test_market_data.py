from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from topwallets_bot.config import Settings
from topwallets_bot.market_data import (
    COARSE_GRANULARITY,
    FINE_GRANULARITY,
    MarketDataClient,
    candle_granularity,
)
from topwallets_bot.utils.formatting import DAY_MS, HOUR_MS

NOW = 1_700_000_000_000


def test_candle_granularity_by_pair_age():
    assert candle_granularity(NOW - 2 * HOUR_MS, NOW) == FINE_GRANULARITY
    assert candle_granularity(NOW - DAY_MS, NOW) == COARSE_GRANULARITY
    assert candle_granularity(NOW - 30 * DAY_MS, NOW) == COARSE_GRANULARITY
    assert candle_granularity(None, NOW) == COARSE_GRANULARITY


@pytest.mark.asyncio
async def test_market_data_delegates_to_service_clients():
    topwallets = SimpleNamespace(
        fetch_token_snapshot=AsyncMock(return_value="snapshot"),
        fetch_wallet_profile=AsyncMock(return_value="profile"),
        fetch_trending_tokens=AsyncMock(return_value="trending"),
        close=AsyncMock(),
    )
    birdeye = SimpleNamespace(
        fetch_candles=AsyncMock(return_value=["candle"]),
        fetch_top_holder_shares=AsyncMock(return_value=[1.0]),
        close=AsyncMock(),
    )
    dexscreener = SimpleNamespace(
        fetch_pair=AsyncMock(return_value="pair"), close=AsyncMock()
    )
    market_data = MarketDataClient(topwallets, birdeye, dexscreener)

    assert await market_data.fetch_token_snapshot("A") == "snapshot"
    assert await market_data.fetch_wallet_profile("W") == "profile"
    assert await market_data.fetch_trending_tokens("1h", 3) == "trending"
    assert await market_data.fetch_candles("A", "15m") == ["candle"]
    assert await market_data.fetch_top_holder_shares("A") == [1.0]
    assert await market_data.fetch_pair("A") == "pair"

    topwallets.fetch_trending_tokens.assert_awaited_once_with("1h", 3)
    birdeye.fetch_candles.assert_awaited_once_with("A", "15m")
    birdeye.fetch_top_holder_shares.assert_awaited_once_with("A", 10)

    await market_data.close()
    topwallets.close.assert_awaited_once()
    birdeye.close.assert_awaited_once()
    dexscreener.close.assert_awaited_once()


def test_from_settings_builds_configured_clients():
    settings = Settings(
        TOPWALLETS_API_KEY="tw",
        BIRDEYE_API_KEY="be",
        GEMINI_API_KEY="gm",
        BIRDEYE_API_URL="https://birdeye.example",
        HTTP_TIMEOUT_SECONDS=7,
        _env_file=None,
    )

    market_data = MarketDataClient.from_settings(settings)

    assert market_data.topwallets.headers["Authorization"] == "Bearer tw"
    assert market_data.birdeye.headers["X-API-KEY"] == "be"
    assert market_data.birdeye.base_url.startswith("https://birdeye.example")
    assert market_data.dexscreener.timeout == 7
