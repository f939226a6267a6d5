"""HTTP clients for the remote market-data services."""

from topwallets_bot.clients.base import ServiceClient
from topwallets_bot.clients.birdeye import BirdeyeClient
from topwallets_bot.clients.dexscreener import DexScreenerClient
from topwallets_bot.clients.topwallets import TopWalletsClient

__all__ = [
    "BirdeyeClient",
    "DexScreenerClient",
    "ServiceClient",
    "TopWalletsClient",
]
