"""Single entry point over the TopWallets, Birdeye and DexScreener clients."""

from __future__ import annotations

import asyncio
from typing import List, Optional

from topwallets_bot.clients.birdeye import BirdeyeClient
from topwallets_bot.clients.dexscreener import DexScreenerClient
from topwallets_bot.clients.topwallets import TopWalletsClient
from topwallets_bot.config import Settings
from topwallets_bot.models import Candle, DexPair, TokenSnapshot, TrendingTokenSet, WalletProfile
from topwallets_bot.utils.formatting import DAY_MS

FINE_GRANULARITY = "15m"
COARSE_GRANULARITY = "1D"


def candle_granularity(pair_created_at_ms: Optional[int], now_ms: int) -> str:
    """15-minute candles for pairs younger than a day, daily candles otherwise.

    An unknown creation time is treated as an old pair.
    """
    if pair_created_at_ms is None:
        return COARSE_GRANULARITY
    if now_ms - pair_created_at_ms < DAY_MS:
        return FINE_GRANULARITY
    return COARSE_GRANULARITY


class MarketDataClient:
    """Shared registry for the configured market-data services."""

    def __init__(
        self,
        topwallets: TopWalletsClient,
        birdeye: BirdeyeClient,
        dexscreener: DexScreenerClient,
    ) -> None:
        self.topwallets = topwallets
        self.birdeye = birdeye
        self.dexscreener = dexscreener

    @classmethod
    def from_settings(cls, settings: Settings) -> "MarketDataClient":
        timeout = settings.http_timeout_seconds
        return cls(
            topwallets=TopWalletsClient(
                settings.topwallets_api_key,
                base_url=str(settings.topwallets_api_url),
                timeout=timeout,
            ),
            birdeye=BirdeyeClient(
                settings.birdeye_api_key,
                base_url=str(settings.birdeye_api_url),
                timeout=timeout,
            ),
            dexscreener=DexScreenerClient(
                base_url=str(settings.dexscreener_api_url),
                timeout=timeout,
            ),
        )

    async def close(self) -> None:
        await asyncio.gather(
            self.topwallets.close(),
            self.birdeye.close(),
            self.dexscreener.close(),
        )

    async def fetch_token_snapshot(self, address: str) -> TokenSnapshot:
        return await self.topwallets.fetch_token_snapshot(address)

    async def fetch_wallet_profile(self, address: str) -> WalletProfile:
        return await self.topwallets.fetch_wallet_profile(address)

    async def fetch_trending_tokens(
        self, timeframe: str = "24h", count: int = 5
    ) -> TrendingTokenSet:
        return await self.topwallets.fetch_trending_tokens(timeframe, count)

    async def fetch_candles(self, address: str, granularity: str = COARSE_GRANULARITY) -> List[Candle]:
        return await self.birdeye.fetch_candles(address, granularity)

    async def fetch_top_holder_shares(self, address: str, limit: int = 10) -> List[float]:
        return await self.birdeye.fetch_top_holder_shares(address, limit)

    async def fetch_pair(self, address: str) -> DexPair:
        return await self.dexscreener.fetch_pair(address)


__all__ = [
    "COARSE_GRANULARITY",
    "FINE_GRANULARITY",
    "MarketDataClient",
    "candle_granularity",
]
