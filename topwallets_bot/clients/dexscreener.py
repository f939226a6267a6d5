"""DexScreener pair lookup (no authentication)."""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from topwallets_bot.clients.base import DEFAULT_TIMEOUT_SECONDS, ServiceClient
from topwallets_bot.errors import UpstreamError
from topwallets_bot.models import DexPair
from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DEXSCREENER_URL = "https://api.dexscreener.com"


class DexScreenerClient(ServiceClient):
    name = "dexscreener"

    def __init__(
        self,
        base_url: str = DEFAULT_DEXSCREENER_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, transport=transport)

    async def fetch_pair(self, address: str) -> DexPair:
        """Return the first (most liquid) pair DexScreener lists for a token."""
        payload = await self._request_json("GET", f"/latest/dex/tokens/{address}")
        pairs = payload.get("pairs") if isinstance(payload, dict) else None
        if not pairs:
            logger.warning("dex_pair_missing", address=address)
            raise UpstreamError("No trading pair found", service=self.name)
        try:
            return DexPair.from_payload(pairs[0])
        except (PydanticValidationError, AttributeError) as exc:
            raise UpstreamError(
                "dexscreener returned malformed pair data", service=self.name
            ) from exc


__all__ = ["DEFAULT_DEXSCREENER_URL", "DexScreenerClient"]
