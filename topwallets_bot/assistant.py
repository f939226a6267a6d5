"""Request orchestration: route a message, gather data, compose the reply."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, List, Optional

from topwallets_bot.analysis import (
    build_analysis_context,
    compute_all_time_high,
    compute_observations,
)
from topwallets_bot.commentary import CommentaryAdapter
from topwallets_bot.composer import (
    NO_TOKEN_ADDRESS,
    NO_WALLET_ADDRESS,
    TRENDING_UNAVAILABLE,
    UNEXPECTED_TOKEN_ERROR,
    UNEXPECTED_WALLET_ERROR,
    compose_token_reply,
    compose_trending_reply,
    compose_wallet_reply,
    policy_for,
)
from topwallets_bot.errors import UpstreamError
from topwallets_bot.intent_matcher import Intent, match_intent
from topwallets_bot.market_data import MarketDataClient, candle_granularity
from topwallets_bot.models import (
    AllTimeHigh,
    AnalysisContext,
    AssistantReply,
    Channel,
    DexPair,
    InboundMessage,
    TokenSnapshot,
)
from topwallets_bot.trending import TrendingTokensProvider
from topwallets_bot.utils.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

SCAN_TOKEN = "SCAN_TOKEN"
WALLET_SCAN_RESPONSE = "WALLET_SCAN_RESPONSE"
TRENDING_TOKENS = "TRENDING_TOKENS"

ReplySink = Callable[[AssistantReply], Awaitable[None]]


class TokenAssistant:
    """Answers token, wallet and trending questions.

    Every collaborator is injected. ``trending`` and ``commentary`` are
    optional; without them trending requests fall back to guidance and token
    replies carry no commentary.
    """

    def __init__(
        self,
        market_data: MarketDataClient,
        trending: Optional[TrendingTokensProvider] = None,
        commentary: Optional[CommentaryAdapter] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.market_data = market_data
        self.trending = trending
        self.commentary = commentary
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def handle(self, message: InboundMessage, sink: ReplySink) -> bool:
        """Deliver the reply for ``message`` to ``sink``; False when not handled."""
        reply = await self.respond(message)
        if reply is None:
            return False
        if not reply.silent:
            await sink(reply)
        return True

    async def respond(self, message: InboundMessage) -> Optional[AssistantReply]:
        clear_context()
        channel = Channel.parse(message.channel)
        bind_context(channel=channel.value)

        matched = match_intent(message.text)
        logger.debug("intent_matched", intent=matched.intent.value)

        if matched.intent is Intent.TOKEN_SCAN and matched.address:
            return await self.scan_token(matched.address, channel)
        if matched.intent is Intent.WALLET_SCAN and matched.address:
            return await self.scan_wallet(matched.address)
        if matched.intent is Intent.WALLET_GUIDANCE:
            return AssistantReply(text=NO_WALLET_ADDRESS, action=WALLET_SCAN_RESPONSE)
        if matched.intent in (Intent.TOKEN_GUIDANCE, Intent.TRENDING_CANDIDATE):
            reply = await self.trending_reply(message)
            if reply is not None:
                return reply
            if matched.intent is Intent.TOKEN_GUIDANCE:
                return AssistantReply(text=NO_TOKEN_ADDRESS, action=SCAN_TOKEN)
        return None

    async def scan_token(self, address: str, channel: Channel) -> AssistantReply:
        bind_context(address=address)
        policy = policy_for(channel)
        try:
            text = await self._token_report(address, channel)
        except UpstreamError as exc:
            logger.error(
                "token_scan_failed",
                service=exc.service,
                status=exc.status_code,
                error=exc.message,
            )
            text = f"Failed to scan token: {exc.message}" if policy.show_errors else ""
        except Exception as exc:
            logger.exception("token_scan_unexpected_error", error=str(exc))
            text = UNEXPECTED_TOKEN_ERROR if policy.show_errors else ""
        return AssistantReply(text=text, action=SCAN_TOKEN)

    async def _token_report(self, address: str, channel: Channel) -> str:
        snapshot = await self.market_data.fetch_token_snapshot(address)
        logger.info("token_snapshot_received", symbol=snapshot.symbol)

        pair = await self._optional_pair(address)
        if pair is not None:
            snapshot = _enrich_snapshot(snapshot, pair)

        now_ms = self._now_ms()
        granularity = candle_granularity(snapshot.pair_created_at, now_ms)
        observations = compute_observations(snapshot)
        context = build_analysis_context(snapshot)

        ath, holder_shares, commentary = await asyncio.gather(
            self._optional_ath(address, granularity),
            self.market_data.fetch_top_holder_shares(address),
            self._optional_commentary(snapshot, context),
        )

        return compose_token_reply(
            snapshot,
            observations,
            ath,
            holder_shares,
            channel,
            commentary=commentary,
            now_ms=now_ms,
        )

    async def _optional_pair(self, address: str) -> Optional[DexPair]:
        try:
            return await self.market_data.fetch_pair(address)
        except UpstreamError as exc:
            logger.warning("dex_pair_unavailable", error=exc.message)
            return None

    async def _optional_ath(self, address: str, granularity: str) -> Optional[AllTimeHigh]:
        try:
            candles = await self.market_data.fetch_candles(address, granularity)
        except UpstreamError as exc:
            logger.warning("candles_unavailable", granularity=granularity, error=exc.message)
            return None
        return compute_all_time_high(candles)

    async def _optional_commentary(
        self, snapshot: TokenSnapshot, context: AnalysisContext
    ) -> Optional[str]:
        if self.commentary is None:
            return None
        return await self.commentary.generate(snapshot, context)

    async def scan_wallet(self, address: str) -> AssistantReply:
        bind_context(address=address)
        try:
            profile = await self.market_data.fetch_wallet_profile(address)
        except UpstreamError as exc:
            logger.error("wallet_scan_failed", service=exc.service, error=exc.message)
            return AssistantReply(
                text=f"Failed to scan wallet: {exc.message}",
                action=WALLET_SCAN_RESPONSE,
            )
        except Exception as exc:
            logger.exception("wallet_scan_unexpected_error", error=str(exc))
            return AssistantReply(text=UNEXPECTED_WALLET_ERROR, action=WALLET_SCAN_RESPONSE)

        logger.info("wallet_scan_succeeded", recent_tokens=len(profile.recent_tokens))
        return AssistantReply(
            text=compose_wallet_reply(profile, address), action=WALLET_SCAN_RESPONSE
        )

    async def trending_reply(self, message: InboundMessage) -> Optional[AssistantReply]:
        """Trending list, the fixed unavailable text on failure, or None."""
        if self.trending is None:
            return None
        try:
            token_set = await self.trending.lookup(message)
        except Exception as exc:
            logger.error("trending_tokens_failed", error=str(exc))
            return AssistantReply(text=TRENDING_UNAVAILABLE, action=TRENDING_TOKENS)
        if token_set is None:
            return None
        return AssistantReply(
            text=compose_trending_reply(token_set), action=TRENDING_TOKENS
        )


def _enrich_snapshot(snapshot: TokenSnapshot, pair: DexPair) -> TokenSnapshot:
    """Fill gaps in the snapshot from the DexScreener pair."""
    updates = {}
    if snapshot.fdv is None and pair.fdv is not None:
        updates["fdv"] = pair.fdv
    if snapshot.volume_24h is None and pair.volume_24h is not None:
        updates["volume_24h"] = pair.volume_24h
    if snapshot.pair_created_at is None and pair.pair_created_at is not None:
        updates["pair_created_at"] = pair.pair_created_at
    return snapshot.model_copy(update=updates) if updates else snapshot


__all__: List[str] = [
    "ReplySink",
    "SCAN_TOKEN",
    "TRENDING_TOKENS",
    "TokenAssistant",
    "WALLET_SCAN_RESPONSE",
]
