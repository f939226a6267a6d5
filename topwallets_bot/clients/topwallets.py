"""TopWallets analytics API: token snapshots, wallet scans, trending tokens."""

from __future__ import annotations

from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from topwallets_bot.clients.base import DEFAULT_TIMEOUT_SECONDS, ServiceClient
from topwallets_bot.errors import UpstreamError, ValidationError
from topwallets_bot.models import (
    MAX_TRENDING_COUNT,
    MIN_TRENDING_COUNT,
    TRENDING_TIMEFRAMES,
    TokenSnapshot,
    TrendingToken,
    TrendingTokenSet,
    WalletProfile,
)
from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TOPWALLETS_URL = "https://www.topwallets.ai"

ModelT = TypeVar("ModelT", bound=BaseModel)


def clamp_count(count: int) -> int:
    """Keep a requested token count inside [1, 20]."""
    return min(max(MIN_TRENDING_COUNT, int(count)), MAX_TRENDING_COUNT)


def validate_timeframe(timeframe: str) -> str:
    if timeframe not in TRENDING_TIMEFRAMES:
        raise ValidationError(
            f"Invalid timeframe. Must be one of: {', '.join(TRENDING_TIMEFRAMES)}"
        )
    return timeframe


class TopWalletsClient(ServiceClient):
    """Client for the ``/api/bot/solana`` endpoints."""

    name = "topwallets"

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_TOPWALLETS_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("Missing TOPWALLETS_API_KEY; set it in your .env file")
        super().__init__(
            base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    async def fetch_token_snapshot(self, address: str) -> TokenSnapshot:
        data = await self._request_envelope(
            "GET", "/api/bot/solana/token", params={"address": address}
        )
        if isinstance(data, dict):
            data = {"address": address, **data}
        return self._parse(TokenSnapshot, data)

    async def fetch_wallet_profile(self, address: str) -> WalletProfile:
        data = await self._request_envelope(
            "POST", "/api/bot/solana/scan/wallet", json={"address": address}
        )
        if isinstance(data, dict):
            data = {"address": address, **data}
        return self._parse(WalletProfile, data)

    async def fetch_trending_tokens(
        self, timeframe: str = "24h", count: int = 5
    ) -> TrendingTokenSet:
        """Fetch trending tokens; an unknown timeframe never reaches the network."""
        validate_timeframe(timeframe)
        count = clamp_count(count)
        data = await self._request_envelope(
            "GET",
            "/api/bot/solana/trending-tokens",
            params={"timeframe": timeframe, "count": count},
        )
        raw_tokens = data.get("tokens") if isinstance(data, dict) else None
        tokens = tuple(
            self._parse(TrendingToken, token) for token in (raw_tokens or [])
        )
        logger.debug(
            "trending_tokens_fetched",
            timeframe=timeframe,
            count=count,
            received=len(tokens),
        )
        return TrendingTokenSet(timeframe=timeframe, count=count, tokens=tokens)

    def _parse(self, model: Type[ModelT], data: object) -> ModelT:
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            logger.error(
                "upstream_payload_invalid",
                service=self.name,
                model=model.__name__,
                error=str(exc),
            )
            raise UpstreamError(
                f"{self.name} returned malformed {model.__name__} data",
                service=self.name,
            ) from exc


__all__ = [
    "DEFAULT_TOPWALLETS_URL",
    "TopWalletsClient",
    "clamp_count",
    "validate_timeframe",
]
