"""Number, percentage and time helpers for chat replies."""

from __future__ import annotations

from typing import Optional, Sequence

NOT_AVAILABLE = "N/A"

MINUTE_MS = 60_000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


def format_magnitude(value: Optional[float]) -> str:
    """Format a dollar amount with K/M suffixes; missing or zero is N/A."""
    if not value:
        return NOT_AVAILABLE
    num = float(value)
    if num >= 1_000_000:
        return f"{num / 1_000_000:.2f}M"
    if num >= 1_000:
        return f"{num / 1_000:.2f}K"
    return f"{num:.2f}"


def format_price(value: Optional[float], decimals: int = 6) -> str:
    """Fixed-point price, e.g. ``0.000123``."""
    if value is None:
        return NOT_AVAILABLE
    return f"{float(value):.{decimals}f}"


def format_change(change: Optional[float]) -> str:
    """Percentage change with a trend emoji, e.g. ``📈 6.00%``."""
    pct = float(change or 0.0)
    icon = "📈" if pct >= 0 else "📉"
    return f"{icon} {pct:.2f}%"


def format_number(value: Optional[float]) -> str:
    """Render counts and percentages without a trailing ``.0``."""
    if value is None:
        return NOT_AVAILABLE
    return f"{float(value):g}"


def format_percentile_list(values: Sequence[float]) -> str:
    """Render every supplied share, e.g. ``12.50%, 8.10%``."""
    if not values:
        return NOT_AVAILABLE
    return ", ".join(f"{float(value):.2f}%" for value in values)


def relative_age(timestamp_ms: int, now_ms: int) -> str:
    """Coarse "time ago" label for a millisecond timestamp."""
    elapsed = now_ms - timestamp_ms
    if elapsed < MINUTE_MS:
        return "just now"
    if elapsed < HOUR_MS:
        minutes = elapsed // MINUTE_MS
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    if elapsed < DAY_MS:
        hours = elapsed // HOUR_MS
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    if elapsed < 2 * DAY_MS:
        return "1 day ago"
    return f"{elapsed // DAY_MS} days ago"


def truncate_address(address: str) -> str:
    """Shorten an address to ``abcd...wxyz``."""
    if len(address) <= 8:
        return address
    return f"{address[:4]}...{address[-4:]}"


def join_messages(parts: Sequence[str]) -> str:
    """Join sections with blank lines, skipping empty ones."""
    return "\n\n".join(part for part in parts if part)


__all__ = [
    "NOT_AVAILABLE",
    "format_change",
    "format_magnitude",
    "format_number",
    "format_percentile_list",
    "format_price",
    "join_messages",
    "relative_age",
    "truncate_address",
]
