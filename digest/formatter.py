"""
Display formatting for digest messages.

All helpers are pure and return "N/A" for absent input. escape_markdown
targets Telegram MarkdownV2 and must be applied once per interpolated value.
"""
import re
from datetime import datetime, timezone
from typing import Optional

NA = "N/A"

# Telegram MarkdownV2 reserved characters (backslash first)
MARKDOWN_V2_SPECIAL = "\\_*[]()~`>#+-=|{}.!"

_ESCAPE_RE = re.compile("([" + re.escape(MARKDOWN_V2_SPECIAL) + "])")
_LINK_ESCAPE_RE = re.compile(r"([\\)])")


def format_magnitude(value: Optional[float]) -> str:
    """Dollar amount with B/M/K suffix: 1_230_000_000 -> $1.23B, 950 -> $950.00."""
    if value is None:
        return NA
    sign = "-" if value < 0 else ""
    amount = abs(value)
    if amount >= 1e9:
        return f"{sign}${amount / 1e9:.2f}B"
    if amount >= 1e6:
        return f"{sign}${amount / 1e6:.2f}M"
    if amount >= 1e3:
        return f"{sign}${amount / 1e3:.2f}K"
    return f"{sign}${amount:.2f}"


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return NA
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}%"


def format_price(value: Optional[float]) -> str:
    """
    Price with precision scaled to magnitude.

    < 0.00001 -> scientific ($1.23e-06)
    < 0.01    -> 6 decimals
    < 1       -> 4 decimals
    otherwise -> 2 decimals
    """
    if value is None:
        return NA
    if value < 0.00001:
        return f"${value:.2e}"
    if value < 0.01:
        return f"${value:.6f}"
    if value < 1:
        return f"${value:.4f}"
    return f"${value:.2f}"


def format_age(created_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Compact age since creation: 45m, 5h, 3d, 2mo, 1y.

    Units truncate; months are 30 days. A creation time in the future
    renders as 0m.
    """
    if created_at is None:
        return NA
    now = now or datetime.now(timezone.utc)
    hours = max(0.0, (now - created_at).total_seconds() / 3600)

    if hours < 1:
        return f"{int(hours * 60)}m"
    if hours < 24:
        return f"{int(hours)}h"
    if hours < 24 * 30:
        return f"{int(hours // 24)}d"
    if hours < 24 * 365:
        return f"{int(hours // (24 * 30))}mo"
    return f"{int(hours // (24 * 365))}y"


def escape_markdown(text) -> str:
    """Backslash-escape every MarkdownV2 reserved character."""
    return _ESCAPE_RE.sub(r"\\\1", str(text))


def escape_link_url(url: str) -> str:
    """Escape the characters MarkdownV2 reserves inside (...) link targets."""
    return _LINK_ESCAPE_RE.sub(r"\\\1", url)
