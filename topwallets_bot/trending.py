"""Trending tokens: LLM intent detection, parameter extraction and caching."""

from __future__ import annotations

import textwrap
from string import Template
from typing import Optional, Sequence

from topwallets_bot.cache import CacheStore
from topwallets_bot.clients.topwallets import clamp_count
from topwallets_bot.intent_matcher import extract_first_address
from topwallets_bot.llm import IntentClassifier, StructuredExtractor
from topwallets_bot.market_data import MarketDataClient
from topwallets_bot.models import (
    SHORT_TRENDING_TIMEFRAMES,
    TRENDING_TIMEFRAMES,
    InboundMessage,
    TrendingParams,
    TrendingTokenSet,
)
from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)

SHORT_EXPIRY_SECONDS = 60
LONG_EXPIRY_SECONDS = 300

SHOULD_SHOW_TRENDING_PROMPT = Template(
    textwrap.dedent(
        """
        # Task: Determine if the user is requesting trending or popular tokens information.

        Look for messages that:
        - Ask about trending tokens
        - Request popular tokens list
        - Ask about hot or new tokens
        - Want to see what's trending
        - Ask about market movements
        - Request top performing tokens

        Based on the last message, is this a request for trending tokens? YES or NO

        Last Message:
        $last_message

        Should I show trending tokens? YES or NO
        """
    ).strip()
)

EXTRACT_PARAMS_PROMPT = Template(
    textwrap.dedent(
        """
        # Task: Extract trending tokens request parameters from the conversation.

        Look for:
        - Time period mentions ($timeframes)
        - Number of tokens requested (1-20)
        - Default to 24h timeframe and 5 tokens if not specified

        Valid timeframes: $timeframes

        Recent Messages:
        $recent_messages

        Respond strictly as JSON with this schema:
        {"timeframe": "<one of the valid timeframes>", "count": <number 1-20>}
        """
    ).strip()
)


def cache_key(timeframe: str, count: int) -> str:
    return f"trending-tokens-{timeframe}-{count}"


def expiry_for(timeframe: str) -> int:
    """One minute for short windows, five minutes otherwise."""
    if timeframe in SHORT_TRENDING_TIMEFRAMES:
        return SHORT_EXPIRY_SECONDS
    return LONG_EXPIRY_SECONDS


class TrendingTokensGate:
    """Read-through cache in front of the trending-tokens endpoint.

    Concurrent misses for the same key each fetch; the last write wins.
    """

    def __init__(self, cache: CacheStore, market_data: MarketDataClient) -> None:
        self.cache = cache
        self.market_data = market_data

    async def resolve(self, timeframe: str, count: int) -> TrendingTokenSet:
        count = clamp_count(count)
        key = cache_key(timeframe, count)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("trending_cache_hit", key=key)
            return cached

        logger.debug("trending_cache_miss", key=key)
        token_set = await self.market_data.fetch_trending_tokens(timeframe, count)
        self.cache.set(key, token_set, expires_in=expiry_for(timeframe))
        return token_set


class TrendingTokensProvider:
    """Decides whether a message asks for trending tokens and answers it."""

    def __init__(
        self,
        gate: TrendingTokensGate,
        classifier: IntentClassifier,
        extractor: StructuredExtractor,
    ) -> None:
        self.gate = gate
        self.classifier = classifier
        self.extractor = extractor

    async def wants_trending(self, last_message: str) -> bool:
        prompt = SHOULD_SHOW_TRENDING_PROMPT.safe_substitute(last_message=last_message)
        return await self.classifier.classify(prompt)

    async def extract_params(self, recent_messages: Sequence[str]) -> TrendingParams:
        """Raises ``ValidationError`` when the model output is unusable."""
        prompt = EXTRACT_PARAMS_PROMPT.safe_substitute(
            timeframes=", ".join(TRENDING_TIMEFRAMES),
            recent_messages="\n".join(recent_messages),
        )
        return await self.extractor.extract(prompt, TrendingParams)

    async def lookup(self, message: InboundMessage) -> Optional[TrendingTokenSet]:
        """Trending tokens for ``message``, or None when it is not a trending request."""
        if extract_first_address(message.text):
            return None
        if not await self.wants_trending(message.text):
            return None

        params = await self.extract_params([*message.history, message.text])
        logger.info(
            "trending_requested", timeframe=params.timeframe, count=params.count
        )
        return await self.gate.resolve(params.timeframe, params.count)


__all__ = [
    "EXTRACT_PARAMS_PROMPT",
    "SHOULD_SHOW_TRENDING_PROMPT",
    "TrendingTokensGate",
    "TrendingTokensProvider",
    "cache_key",
    "expiry_for",
]
