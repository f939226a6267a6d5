"""Pure heuristics over token snapshots and candle history."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from topwallets_bot.models import (
    PRICE_CHANGE_TIMEFRAMES,
    AllTimeHigh,
    AnalysisContext,
    Candle,
    LiquidityStatus,
    MarketCapCategory,
    PriceMove,
    TokenSnapshot,
)

SIGNIFICANT_MOVE_THRESHOLD = 5.0

# Liquidity bands (USD).
LIQUIDITY_CRITICAL = 10_000
LIQUIDITY_LOW = 50_000
LIQUIDITY_MODERATE = 100_000

# Market cap bands (USD).
MARKET_CAP_MICRO = 100_000
MARKET_CAP_NANO = 1_000_000
MARKET_CAP_SMALL = 5_000_000

RISK_HIGH = 7
RISK_MODERATE = 5

RUG_OBSERVATION = "🚨 WARNING: This token has been identified as potentially rugged!"

TWITTER_HANDLE_PATTERN = re.compile(r"(?:twitter|x)\.com/([^/?#\s]+)", re.IGNORECASE)


def significant_moves(snapshot: TokenSnapshot) -> List[PriceMove]:
    """Price changes above the threshold, in canonical timeframe order."""
    moves: List[PriceMove] = []
    for timeframe in PRICE_CHANGE_TIMEFRAMES:
        change = snapshot.change_for(timeframe)
        if change is None or abs(change) <= SIGNIFICANT_MOVE_THRESHOLD:
            continue
        moves.append(
            PriceMove(
                timeframe=timeframe,
                change=abs(change),
                direction="gain" if change > 0 else "loss",
            )
        )
    return moves


def compute_observations(snapshot: TokenSnapshot) -> List[str]:
    """Qualitative observations in a fixed order.

    Rug flag first, then one line per significant move, then the liquidity
    band, then the risk band.
    """
    observations: List[str] = []

    if snapshot.is_rugged:
        observations.append(RUG_OBSERVATION)

    for move in significant_moves(snapshot):
        icon = "📈" if move.direction == "gain" else "📉"
        observations.append(
            f"{icon} {move.change:.2f}% {move.direction} in {move.timeframe}"
        )

    liquidity = snapshot.liquidity
    if liquidity is not None:
        if liquidity < LIQUIDITY_CRITICAL:
            observations.append("🚨 Very low liquidity - high risk of price impact")
        elif liquidity < LIQUIDITY_LOW:
            observations.append("⚠️ Low liquidity - moderate risk of price impact")
        elif liquidity < LIQUIDITY_MODERATE:
            observations.append("ℹ️ Moderate liquidity")

    if snapshot.risk_score >= RISK_HIGH:
        observations.append("🚨 High risk score - exercise extreme caution")
    elif snapshot.risk_score >= RISK_MODERATE:
        observations.append("⚠️ Moderate risk score - proceed with caution")

    return observations


def compute_all_time_high(candles: Sequence[Candle]) -> AllTimeHigh:
    """Highest candle high and when it happened (ms); first maximum wins."""
    best = AllTimeHigh()
    for candle in candles:
        if candle.high > best.high:
            best = AllTimeHigh(high=candle.high, timestamp=candle.unix_time * 1000)
    return best


def liquidity_status(liquidity: Optional[float]) -> LiquidityStatus:
    if not liquidity or liquidity < LIQUIDITY_CRITICAL:
        return "CRITICAL"
    if liquidity < LIQUIDITY_LOW:
        return "LOW"
    if liquidity < LIQUIDITY_MODERATE:
        return "DECENT"
    return "SOLID"


def market_cap_category(market_cap: Optional[float]) -> MarketCapCategory:
    if not market_cap or market_cap < MARKET_CAP_MICRO:
        return "MICRO_CAP"
    if market_cap < MARKET_CAP_NANO:
        return "NANO_CAP"
    if market_cap < MARKET_CAP_SMALL:
        return "SMALL_CAP"
    return "BASED"


def extract_twitter_handle(url: Optional[str]) -> Optional[str]:
    """``https://twitter.com/foo`` -> ``@foo``."""
    if not url:
        return None
    match = TWITTER_HANDLE_PATTERN.search(url)
    return f"@{match.group(1)}" if match else None


def build_analysis_context(snapshot: TokenSnapshot) -> AnalysisContext:
    kol_names = [
        extract_twitter_handle(wallet.twitter_url) or wallet.name or wallet.address
        for wallet in snapshot.top_wallets
        if wallet.is_kol
    ]
    return AnalysisContext(
        liquidity_status=liquidity_status(snapshot.liquidity),
        market_cap_category=market_cap_category(snapshot.market_cap),
        significant_moves=significant_moves(snapshot),
        kol_names=[name for name in kol_names if name],
    )


__all__ = [
    "build_analysis_context",
    "compute_all_time_high",
    "compute_observations",
    "extract_twitter_handle",
    "liquidity_status",
    "market_cap_category",
    "significant_moves",
]
