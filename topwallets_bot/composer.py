"""Reply text for token scans, wallet scans and trending lists.

Channel differences live in ``CHANNEL_POLICIES``; the compose functions read
the policy once and never branch on the channel name themselves.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from topwallets_bot.models import (
    AllTimeHigh,
    Channel,
    TokenSnapshot,
    TopWalletEntry,
    TrendingTokenSet,
    WalletProfile,
)
from topwallets_bot.utils.formatting import (
    NOT_AVAILABLE,
    format_change,
    format_magnitude,
    format_number,
    format_percentile_list,
    format_price,
    join_messages,
    relative_age,
    truncate_address,
)

TOKEN_INTRO = "Here are some details I found about it:"
WALLET_INTRO = "I've analyzed the wallet here is my report:"
RUG_WARNING = "• 🚨 RUG PULL WARNING: This token has been flagged as potentially rugged!"

NO_TOKEN_ADDRESS = (
    "I couldn't find a valid token address. Please provide a valid Solana token address."
)
NO_WALLET_ADDRESS = (
    "I couldn't find a valid Solana address in your message. Please provide a valid address."
)
TRENDING_UNAVAILABLE = "Trending token information temporarily unavailable"
UNEXPECTED_TOKEN_ERROR = "An unexpected error occurred while scanning the token."
UNEXPECTED_WALLET_ERROR = "An unexpected error occurred while scanning the wallet."

TOPWALLETS_TOKEN_URL = "https://www.topwallets.ai/solana/token/{address}"
TOPWALLETS_WALLET_URL = "https://www.topwallets.ai/solana/wallet/{address}"
DEXSCREENER_CHART_URL = "https://dexscreener.com/solana/{address}"

MEDALS = ("🥇", "🥈", "🥉")
MAX_RECENT_TOKENS = 3


@dataclass(frozen=True)
class ChannelPolicy:
    """How much detail a channel gets.

    ``verbose`` additionally requires the token to have a description.
    """

    verbose: bool
    include_24h_change: bool
    max_wallets: int
    show_address: bool
    show_errors: bool


_COMPACT = ChannelPolicy(
    verbose=False,
    include_24h_change=True,
    max_wallets=1,
    show_address=False,
    show_errors=False,
)

CHANNEL_POLICIES: Dict[Channel, ChannelPolicy] = {
    Channel.TELEGRAM: ChannelPolicy(
        verbose=True,
        include_24h_change=False,
        max_wallets=5,
        show_address=True,
        show_errors=True,
    ),
    Channel.TWITTER: _COMPACT,
    Channel.DISCORD: _COMPACT,
    Channel.UNKNOWN: _COMPACT,
}


def policy_for(channel: Channel) -> ChannelPolicy:
    return CHANNEL_POLICIES.get(Channel.parse(channel), _COMPACT)


def wallet_display_name(wallet: TopWalletEntry) -> str:
    name = wallet.name or truncate_address(wallet.address)
    return f"⭐ {name}" if wallet.is_kol else name


def medal_for(index: int) -> str:
    return MEDALS[index] if index < len(MEDALS) else "•"


def pick_compact_wallet(wallets: Sequence[TopWalletEntry]) -> Optional[TopWalletEntry]:
    """First KOL in ranking order, else the top-ranked wallet."""
    for wallet in wallets:
        if wallet.is_kol:
            return wallet
    return wallets[0] if wallets else None


def _ranked_wallet_lines(wallets: Sequence[TopWalletEntry], limit: int) -> List[str]:
    lines = ["📊 Top Wallets Trading This Token:"]
    for index, wallet in enumerate(wallets[:limit]):
        lines.append(f"{medal_for(index)} {wallet_display_name(wallet)}")
        lines.append(f"   • Win Rate: {format_number(wallet.winrate)}%")
        historic = wallet.historic_30d
        if historic is not None:
            lines.append(f"   • 30d PnL: {historic.realized_pnl or NOT_AVAILABLE}")
            lines.append(
                f"   • 30d Change: {_change_1dp(historic.percentage_change)}"
            )
    return lines


def _compact_wallet_line(wallet: TopWalletEntry) -> str:
    line = f"• Top Wallet: {wallet_display_name(wallet)} ({format_number(wallet.winrate)}% WR)"
    if wallet.historic_30d is not None:
        line += f" {_change_1dp(wallet.historic_30d.percentage_change)}"
    return line


def _change_1dp(change: float) -> str:
    icon = "📈" if change >= 0 else "📉"
    return f"{icon} {change:.1f}%"


def compose_token_reply(
    snapshot: TokenSnapshot,
    observations: Sequence[str],
    ath: Optional[AllTimeHigh],
    holder_shares: Sequence[float],
    channel: Channel,
    commentary: Optional[str] = None,
    now_ms: Optional[int] = None,
) -> str:
    """Render a token analysis for ``channel``.

    Price, market cap, liquidity and risk score are always present, as are
    the rug warning (when flagged) and the closing links.
    """
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    policy = policy_for(channel)
    verbose = policy.verbose and bool(snapshot.description)
    address = snapshot.address

    intro = f"{commentary} {TOKEN_INTRO}" if commentary else TOKEN_INTRO

    metrics: List[str] = ["📊 Token Analysis:"]
    if verbose:
        metrics.append("Token Information:")
        metrics.append(f"• Name: {snapshot.name}")
        if policy.show_address:
            metrics.append(f"• Address: {address}")
        metrics.append(f"• Description: {snapshot.description}")
        metrics.append("")
        metrics.append("Financial Metrics:")

    metrics.append(f"• Price: ${format_price(snapshot.price)}")
    metrics.append(f"• Market Cap: ${format_magnitude(snapshot.market_cap)}")
    metrics.append(f"• Liquidity: ${format_magnitude(snapshot.liquidity)}")
    metrics.append(f"• Risk Score: {format_number(snapshot.risk_score)}/10")

    if verbose:
        if snapshot.volume_24h:
            metrics.append(f"• 24h Volume: ${format_magnitude(snapshot.volume_24h)}")
        if snapshot.fdv:
            metrics.append(f"• FDV: ${format_magnitude(snapshot.fdv)}")
        if snapshot.pair_created_at:
            metrics.append(
                f"• Pair Created: {relative_age(snapshot.pair_created_at, now_ms)}"
            )

    if policy.include_24h_change:
        metrics.append(f"• 24h Change: {format_change(snapshot.change_for('24h'))}")

    if ath is not None and ath.high > 0:
        metrics.append(
            f"• ATH: ${format_price(ath.high)} ({relative_age(ath.timestamp, now_ms)})"
        )
    if holder_shares:
        metrics.append(f"• Top Holders: {format_percentile_list(holder_shares)}")

    if snapshot.is_rugged:
        metrics.append(RUG_WARNING)

    sections: List[str] = [intro, "\n".join(metrics)]

    if verbose:
        if observations:
            sections.append(
                "\n".join(["Key Observations:", *(f"• {line}" for line in observations)])
            )
        socials = _social_lines(snapshot)
        if socials:
            sections.append("\n".join(["Social Links:", *socials]))
        if snapshot.top_wallets:
            sections.append(
                "\n".join(_ranked_wallet_lines(snapshot.top_wallets, policy.max_wallets))
            )
    else:
        wallet = pick_compact_wallet(snapshot.top_wallets)
        if wallet is not None:
            sections[-1] += "\n" + _compact_wallet_line(wallet)

    sections.append(
        "\n".join(
            [
                f"🔍 View more top wallets: {TOPWALLETS_TOKEN_URL.format(address=address)}",
                f"🔍 View detailed chart: {DEXSCREENER_CHART_URL.format(address=address)}",
            ]
        )
    )
    return join_messages(sections)


def _social_lines(snapshot: TokenSnapshot) -> List[str]:
    social = snapshot.social
    lines = []
    if social.telegram:
        lines.append(f"• Telegram: {social.telegram}")
    if social.twitter:
        lines.append(f"• Twitter: {social.twitter}")
    if social.website:
        lines.append(f"• Website: {social.website}")
    return lines


def compose_wallet_reply(profile: WalletProfile, address: str) -> str:
    profile_lines = [
        line
        for line in (
            profile.name and f"• Name: {profile.name}",
            profile.twitter_url and f"• Twitter: {profile.twitter_url}",
            profile.is_kol and "• Known Trader 🌟",
        )
        if line
    ]
    profile_block = "\n".join(["👤 Profile:", *profile_lines]) if profile_lines else ""

    performance_block = "\n".join(
        [
            "💰 Performance Analysis (Last 30 Days):",
            f"• Win Rate: {format_number(profile.winrate)}%",
            f"• Tokens Traded: {profile.token_traded}",
            f"• Realized PnL: {profile.realized_pnl or 'Unknown'}",
            f"• Combined ROI: {profile.combined_roi or 'Unknown'}",
            f"• Total Invested: {profile.total_invested_formatted or 'Unknown'}",
        ]
    )

    recent_lines: List[str] = []
    for token in profile.recent_tokens[:MAX_RECENT_TOKENS]:
        recent_lines.append(f"• {token.name} ({token.symbol})")
        recent_lines.append(f"  Holding: {token.holding}")
        recent_lines.append(f"  ROI: {token.roi}")
    recent_block = (
        "\n".join(["🔄 Recent Token Activity:", *recent_lines]) if recent_lines else ""
    )

    return join_messages(
        [
            WALLET_INTRO,
            profile_block,
            performance_block,
            recent_block,
            f"🔍 View complete analysis: {TOPWALLETS_WALLET_URL.format(address=address)}",
        ]
    )


def compose_trending_reply(
    token_set: TrendingTokenSet, now: Optional[datetime] = None
) -> str:
    if not token_set.tokens:
        return f"No trending tokens found for {token_set.timeframe}."

    now = now or datetime.now()
    entries = []
    for index, token in enumerate(token_set.tokens, start=1):
        price = f"${format_price(token.price, 4)}" if token.price else "N/A"
        entries.append(
            "\n".join(
                [
                    f"{index}. {token.name} (${token.symbol})",
                    f"    • Price: {price}",
                    f"    • Market Cap: ${format_magnitude(token.market_cap)}",
                    f"    • Liquidity: ${format_magnitude(token.liquidity)}",
                    f"    • Risk Score: {format_number(token.risk_score)}/10",
                    f"    • Chart: {DEXSCREENER_CHART_URL.format(address=token.address)}",
                ]
            )
        )

    return join_messages(
        [
            f"🔥 Top {token_set.count} Trending Solana Tokens ({token_set.timeframe})",
            *entries,
            f"Last updated: {now.strftime('%H:%M:%S')}",
        ]
    )


__all__ = [
    "CHANNEL_POLICIES",
    "ChannelPolicy",
    "NO_TOKEN_ADDRESS",
    "NO_WALLET_ADDRESS",
    "TRENDING_UNAVAILABLE",
    "UNEXPECTED_TOKEN_ERROR",
    "UNEXPECTED_WALLET_ERROR",
    "compose_token_reply",
    "compose_trending_reply",
    "compose_wallet_reply",
    "pick_compact_wallet",
    "policy_for",
    "wallet_display_name",
]
