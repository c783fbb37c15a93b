"""
Digest Alert - MarkdownV2 message bodies for the four digest categories

Format (one block per ranked pair):

    ⚡ *TOP 3 GAINERS \\- 1 HOUR* \\- 14:05 UTC

    *1\\. BONK* \\| $0\\.000021
    📈 1h: \\+12\\.50% \\| 6h: \\+30\\.10% \\| 24h: \\-4\\.20%
    💰 MCap: $1\\.20M
    📊 Vol 1h: $5\\.00K \\| 6h: $40\\.00K
    ⏰ Age: 3d
    🔗 [DexScreener](...) \\| [Axiom](...) \\| [Twitter](...)
"""
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote

from .formatter import (
    escape_link_url,
    escape_markdown,
    format_age,
    format_magnitude,
    format_percent,
    format_price,
)
from .models import AlertCategory, PairRecord


class DigestAlert:
    """
    Renders a ranked list into a single Telegram MarkdownV2 message.
    """

    DEXSCREENER_URL = "https://dexscreener.com/{chain}/{address}"
    AXIOM_URL = "https://axiom.trade/t/{address}"
    TWITTER_URL = "https://twitter.com/search?q=%24{symbol}"

    def __init__(self, chain: str = "solana"):
        self.chain = chain

    def render(
        self,
        category: AlertCategory,
        ranked: List[PairRecord],
        now: Optional[datetime] = None,
    ) -> str:
        """
        Build the message body.

        Args:
            category: Alert being rendered
            ranked: Non-empty ranked list from RankingEngine
            now: Render time (header timestamp and ages), defaults to UTC now

        Returns:
            MarkdownV2 text
        """
        now = now or datetime.now(timezone.utc)
        header = self._format_header(category, len(ranked), now)
        blocks = [self._format_pair(index, pair, now) for index, pair in enumerate(ranked, start=1)]
        return header + "\n\n" + "\n\n".join(blocks)

    def _format_header(self, category: AlertCategory, count: int, now: datetime) -> str:
        timestamp = escape_markdown(now.astimezone(timezone.utc).strftime("%H:%M") + " UTC")
        if category.is_gainers:
            title = f"*TOP {count} GAINERS \\- {escape_markdown(category.title)}*"
        else:
            title = f"*TOP {count} {escape_markdown(category.title)} \\(<24hrs\\)*"
        return f"{category.emoji} {title} \\- {timestamp}"

    def _format_pair(self, index: int, pair: PairRecord, now: datetime) -> str:
        symbol = escape_markdown(pair.base_symbol)
        price = escape_markdown(format_price(pair.price_usd))
        change_1h = escape_markdown(format_percent(pair.change("1h")))
        change_6h = escape_markdown(format_percent(pair.change("6h")))
        change_24h = escape_markdown(format_percent(pair.change("24h")))
        market_cap = escape_markdown(format_magnitude(pair.market_cap_usd))
        vol_1h = escape_markdown(format_magnitude(pair.volume.get("1h")))
        vol_6h = escape_markdown(format_magnitude(pair.volume.get("6h")))
        age = escape_markdown(format_age(pair.created_at, now))

        lines = [
            f"*{index}\\. {symbol}* \\| {price}",
            f"📈 1h: {change_1h} \\| 6h: {change_6h} \\| 24h: {change_24h}",
            f"💰 MCap: {market_cap}",
            f"📊 Vol 1h: {vol_1h} \\| 6h: {vol_6h}",
            f"⏰ Age: {age}",
            self._format_links(pair),
        ]
        return "\n".join(lines)

    def _format_links(self, pair: PairRecord) -> str:
        address = quote(pair.base_address, safe="")
        dex_link = self.DEXSCREENER_URL.format(chain=self.chain, address=address)
        axiom_link = self.AXIOM_URL.format(address=address)
        twitter_link = self.TWITTER_URL.format(symbol=quote(pair.base_symbol, safe=""))
        return (
            f"🔗 [DexScreener]({escape_link_url(dex_link)}) \\| "
            f"[Axiom]({escape_link_url(axiom_link)}) \\| "
            f"[Twitter]({escape_link_url(twitter_link)})"
        )
