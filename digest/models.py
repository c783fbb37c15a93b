"""
Digest data model.

PairRecord is built fresh every cycle from a DexScreener snapshot and is only
read, filtered and reordered afterwards.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

# Window name -> DexScreener field key
WINDOWS = {
    "1h": "h1",
    "6h": "h6",
    "24h": "h24",
}


@dataclass(frozen=True)
class PairRecord:
    """A single DEX pair snapshot. Optional fields are None when the API omits them."""
    pair_address: str
    chain_id: str
    base_symbol: str = "UNKNOWN"
    base_address: str = ""
    price_usd: Optional[float] = None
    price_change: Dict[str, float] = field(default_factory=dict)
    liquidity_usd: Optional[float] = None
    market_cap_usd: Optional[float] = None
    volume: Dict[str, float] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    def age_hours(self, now: datetime) -> float:
        """Hours since pair creation; unknown age counts as infinitely old."""
        if self.created_at is None:
            return math.inf
        return (now - self.created_at).total_seconds() / 3600

    def change(self, window: str) -> Optional[float]:
        return self.price_change.get(window)

    def volume_for(self, window: str) -> float:
        return self.volume.get(window) or 0.0


@dataclass
class SourceResult:
    """Outcome of one discovery request: success with data, or failure with a reason."""
    source: str
    ok: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, source: str, data: Any) -> "SourceResult":
        return cls(source=source, ok=True, data=data)

    @classmethod
    def failure(cls, source: str, error: str) -> "SourceResult":
        return cls(source=source, ok=False, error=error)


class AlertCategory(Enum):
    """The four digest alerts, in delivery order."""
    GAINERS_1H = ("1h", "1 HOUR", "⚡")
    GAINERS_6H = ("6h", "6 HOUR", "📈")
    GAINERS_24H = ("24h", "24 HOUR", "🔥")
    NEW_LAUNCHES = (None, "NEW LAUNCHES", "🆕")

    def __init__(self, window: Optional[str], title: str, emoji: str):
        self.window = window
        self.title = title
        self.emoji = emoji

    @property
    def is_gainers(self) -> bool:
        return self is not AlertCategory.NEW_LAUNCHES
