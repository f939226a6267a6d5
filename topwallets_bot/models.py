"""Typed views of the TopWallets, Birdeye and DexScreener payloads.

Upstream JSON is camelCase; every field declares its wire alias and
``populate_by_name`` lets internal code and tests use the snake_case names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Canonical order matters: observations are emitted in this order.
PRICE_CHANGE_TIMEFRAMES: Tuple[str, ...] = (
    "1m",
    "5m",
    "15m",
    "30m",
    "1h",
    "2h",
    "3h",
    "4h",
    "5h",
    "6h",
    "12h",
    "24h",
)

TrendingTimeframe = Literal[
    "5m", "15m", "30m", "1h", "2h", "3h", "4h", "5h", "6h", "12h", "24h"
]
TRENDING_TIMEFRAMES: Tuple[str, ...] = (
    "5m",
    "15m",
    "30m",
    "1h",
    "2h",
    "3h",
    "4h",
    "5h",
    "6h",
    "12h",
    "24h",
)
SHORT_TRENDING_TIMEFRAMES = frozenset({"5m", "15m", "30m", "1h"})

MIN_TRENDING_COUNT = 1
MAX_TRENDING_COUNT = 20

LiquidityStatus = Literal["CRITICAL", "LOW", "DECENT", "SOLID"]
MarketCapCategory = Literal["MICRO_CAP", "NANO_CAP", "SMALL_CAP", "BASED"]


class Channel(str, Enum):
    """Messaging surface a request arrived on."""

    TELEGRAM = "telegram"
    TWITTER = "twitter"
    DISCORD = "discord"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Channel":
        """Map free-form source tags onto a channel, defaulting to UNKNOWN."""
        if isinstance(value, Channel):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ApiEnvelope(_ApiModel):
    """``{success, message, data}`` wrapper used by TopWallets and Birdeye."""

    success: bool = False
    message: Optional[str] = None
    data: Any = None


class SocialLinks(_ApiModel):
    twitter: Optional[str] = None
    telegram: Optional[str] = None
    website: Optional[str] = None


class Historic30d(_ApiModel):
    realized_pnl: Optional[str] = Field(default=None, alias="realizedPnl")
    realized_pnl_raw: Optional[float] = Field(default=None, alias="realizedPnlRaw")
    total_change: Optional[float] = Field(default=None, alias="totalChange")
    percentage_change: float = Field(default=0.0, alias="percentageChange")


class TopWalletEntry(_ApiModel):
    """A ranked wallet trading a token; ``kols`` marks known traders."""

    address: str
    name: Optional[str] = None
    twitter_url: Optional[str] = None
    picture_url: Optional[str] = None
    category: str = Field(default="normal", alias="type")
    winrate: float = 0.0
    score: float = 0.0
    realized_pnl: Optional[str] = Field(default=None, alias="realizedPnl")
    historic_30d: Optional[Historic30d] = Field(default=None, alias="historic30d")

    @property
    def is_kol(self) -> bool:
        return self.category == "kols"


class TokenSnapshot(_ApiModel):
    """Point-in-time market and risk metrics for one token."""

    address: str
    name: str = ""
    symbol: str = ""
    decimals: int = 0
    description: Optional[str] = None
    image: Optional[str] = None
    social: SocialLinks = Field(default_factory=SocialLinks)
    price: Optional[float] = None
    market_cap: Optional[float] = Field(default=None, alias="marketCap")
    fdv: Optional[float] = None
    liquidity: Optional[float] = None
    volume_24h: Optional[float] = Field(default=None, alias="volume24h")
    price_change: Dict[str, Optional[float]] = Field(
        default_factory=dict, alias="priceChange"
    )
    risk_score: float = Field(default=0.0, alias="riskScore", ge=0, le=10)
    is_rugged: bool = Field(default=False, alias="isRugged")
    pair_created_at: Optional[int] = Field(default=None, alias="pairCreatedAt")
    top_wallets: List[TopWalletEntry] = Field(
        default_factory=list, alias="topWallets"
    )

    @field_validator("price_change", mode="before")
    @classmethod
    def _known_timeframes_only(cls, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        return {k: v for k, v in value.items() if k in PRICE_CHANGE_TIMEFRAMES}

    @field_validator("social", mode="before")
    @classmethod
    def _social_or_empty(cls, value: Any) -> Any:
        return value or {}

    @field_validator("top_wallets", mode="before")
    @classmethod
    def _wallets_or_empty(cls, value: Any) -> Any:
        return value or []

    def change_for(self, timeframe: str) -> Optional[float]:
        return self.price_change.get(timeframe)


class RecentTokenActivity(_ApiModel):
    symbol: str = ""
    name: str = ""
    holding: Union[int, float, str, None] = None
    roi: Optional[str] = None
    realized_pnl: Optional[str] = Field(default=None, alias="realizedPnl")
    timestamp: Optional[str] = None


class WalletProfile(_ApiModel):
    """Aggregated 30-day trading profile of one wallet."""

    address: str
    name: Optional[str] = None
    twitter_url: Optional[str] = None
    picture_url: Optional[str] = None
    category: str = Field(default="normal", alias="type")
    winrate: float = 0.0
    token_traded: int = Field(default=0, alias="tokenTraded")
    realized_pnl: Optional[str] = Field(default=None, alias="realizedPnl")
    combined_roi: Optional[str] = Field(default=None, alias="combinedRoi")
    total_invested_formatted: Optional[str] = Field(
        default=None, alias="totalInvestedFormatted"
    )
    average_holding_time: Optional[str] = Field(
        default=None, alias="averageHoldingTime"
    )
    total_wins: Union[int, str, None] = Field(default=None, alias="totalWins")
    total_losses: Union[int, str, None] = Field(default=None, alias="totalLosses")
    recent_tokens: List[RecentTokenActivity] = Field(
        default_factory=list, alias="recentTokens"
    )

    @field_validator("recent_tokens", mode="before")
    @classmethod
    def _recent_or_empty(cls, value: Any) -> Any:
        return value or []

    @property
    def is_kol(self) -> bool:
        return self.category == "kols"


class TrendingToken(_ApiModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str = ""
    symbol: str = ""
    address: str = ""
    decimals: int = 0
    description: Optional[str] = None
    risk_score: float = Field(default=0.0, alias="riskScore")
    liquidity: Optional[float] = None
    price: Optional[float] = None
    market_cap: Optional[float] = Field(default=None, alias="marketCap")


class TrendingTokenSet(_ApiModel):
    """Result of one trending query; immutable so it can be cached as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    timeframe: str
    count: int
    tokens: Tuple[TrendingToken, ...] = ()


class TrendingParams(BaseModel):
    """Validation schema for parameters extracted from a trending request."""

    timeframe: TrendingTimeframe = "24h"
    count: int = Field(default=5, ge=MIN_TRENDING_COUNT, le=MAX_TRENDING_COUNT)


class Candle(_ApiModel):
    open: float = Field(default=0.0, alias="o")
    high: float = Field(default=0.0, alias="h")
    low: float = Field(default=0.0, alias="l")
    close: float = Field(default=0.0, alias="c")
    volume: float = Field(default=0.0, alias="v")
    unix_time: int = Field(default=0, alias="unixTime")


class AllTimeHigh(BaseModel):
    high: float = 0.0
    timestamp: int = 0  # milliseconds


class DexPair(_ApiModel):
    """The subset of a DexScreener pair this bot uses."""

    pair_address: str = Field(default="", alias="pairAddress")
    dex_id: Optional[str] = Field(default=None, alias="dexId")
    url: Optional[str] = None
    fdv: Optional[float] = None
    market_cap: Optional[float] = Field(default=None, alias="marketCap")
    volume_24h: Optional[float] = None
    liquidity_usd: Optional[float] = None
    pair_created_at: Optional[int] = Field(default=None, alias="pairCreatedAt")

    @classmethod
    def from_payload(cls, pair: Dict[str, Any]) -> "DexPair":
        volume = pair.get("volume") or {}
        liquidity = pair.get("liquidity") or {}
        return cls.model_validate(
            {
                **pair,
                "volume_24h": volume.get("h24") if isinstance(volume, dict) else None,
                "liquidity_usd": (
                    liquidity.get("usd") if isinstance(liquidity, dict) else None
                ),
            }
        )


class PriceMove(BaseModel):
    timeframe: str
    change: float  # absolute value
    direction: Literal["gain", "loss"]


class AnalysisContext(BaseModel):
    """Normalized view of a snapshot that drives heuristics and prompts."""

    liquidity_status: LiquidityStatus
    market_cap_category: MarketCapCategory
    significant_moves: List[PriceMove] = Field(default_factory=list)
    kol_names: List[str] = Field(default_factory=list)

    @property
    def has_kols(self) -> bool:
        return bool(self.kol_names)


@dataclass
class InboundMessage:
    """What the bot reads from an incoming chat message.

    Attributes:
        text: Raw message text.
        channel: Surface the message arrived on.
        history: Recent message texts in the conversation, oldest first.
    """

    text: str
    channel: Channel = Channel.UNKNOWN
    history: List[str] = field(default_factory=list)


@dataclass
class AssistantReply:
    """Text to deliver plus an optional action label for the host runtime.

    An empty ``text`` means the request was handled but nothing should be
    shown (failed scans on channels that hide errors).
    """

    text: str
    action: Optional[str] = None

    @property
    def silent(self) -> bool:
        return not self.text


__all__ = [
    "AllTimeHigh",
    "AnalysisContext",
    "ApiEnvelope",
    "AssistantReply",
    "Candle",
    "Channel",
    "DexPair",
    "Historic30d",
    "InboundMessage",
    "MAX_TRENDING_COUNT",
    "MIN_TRENDING_COUNT",
    "PRICE_CHANGE_TIMEFRAMES",
    "PriceMove",
    "RecentTokenActivity",
    "SHORT_TRENDING_TIMEFRAMES",
    "SocialLinks",
    "TRENDING_TIMEFRAMES",
    "TokenSnapshot",
    "TopWalletEntry",
    "TrendingParams",
    "TrendingToken",
    "TrendingTokenSet",
    "WalletProfile",
]
