"""Birdeye public API: OHLCV candles and holder concentration."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from topwallets_bot.clients.base import DEFAULT_TIMEOUT_SECONDS, ServiceClient
from topwallets_bot.errors import UpstreamError
from topwallets_bot.models import Candle
from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BIRDEYE_URL = "https://public-api.birdeye.so"

# Whole history: Birdeye clamps the range to what it has.
OHLCV_TIME_FROM = 0
OHLCV_TIME_TO = 10_000_000_000


class BirdeyeClient(ServiceClient):
    name = "birdeye"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BIRDEYE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("Missing BIRDEYE_API_KEY; set it in your .env file")
        super().__init__(
            base_url,
            headers={"X-API-KEY": api_key, "x-chain": "solana"},
            timeout=timeout,
            transport=transport,
        )

    async def fetch_candles(self, address: str, granularity: str = "1D") -> List[Candle]:
        """OHLCV history at ``granularity`` (``15m``, ``1D``, ...).

        Raises:
            UpstreamError: The request failed or no candles came back.
        """
        data = await self._request_envelope(
            "GET",
            "/defi/ohlcv",
            params={
                "address": address,
                "type": granularity,
                "time_from": OHLCV_TIME_FROM,
                "time_to": OHLCV_TIME_TO,
            },
        )
        items = data.get("items") if isinstance(data, dict) else None
        if not items:
            logger.warning("candles_empty", address=address, granularity=granularity)
            raise UpstreamError("No price history available", service=self.name)
        try:
            return [Candle.model_validate(item) for item in items]
        except PydanticValidationError as exc:
            raise UpstreamError(
                "birdeye returned malformed candle data", service=self.name
            ) from exc

    async def fetch_holders(self, address: str, limit: int = 10) -> List[float]:
        """UI amounts of the largest holders, largest first."""
        data = await self._request_envelope(
            "GET",
            "/defi/v3/token/holder",
            params={"address": address, "offset": 0, "limit": limit},
        )
        items = data.get("items") if isinstance(data, dict) else None
        return [
            _as_float(item.get("ui_amount"))
            for item in (items if isinstance(items, list) else [])
            if isinstance(item, dict)
        ]

    async def fetch_circulating_supply(self, address: str) -> Optional[float]:
        data = await self._request_envelope(
            "GET", "/defi/v3/token/market-data", params={"address": address}
        )
        if not isinstance(data, dict):
            return None
        supply = data.get("circulating_supply")
        return _as_float(supply) if supply is not None else None

    async def fetch_top_holder_shares(self, address: str, limit: int = 10) -> List[float]:
        """Percent of circulating supply held by each top holder.

        Any failure in either call degrades to an empty list.
        """
        try:
            amounts, supply = await asyncio.gather(
                self.fetch_holders(address, limit),
                self.fetch_circulating_supply(address),
            )
        except Exception as exc:
            logger.warning("holder_shares_unavailable", address=address, error=str(exc))
            return []

        if not supply:
            logger.warning(
                "holder_shares_unavailable",
                address=address,
                error="missing circulating supply",
            )
            return []
        return [round(amount / supply * 100, 2) for amount in amounts]


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


__all__ = ["BirdeyeClient", "DEFAULT_BIRDEYE_URL"]
