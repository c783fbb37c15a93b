"""
ELIGIBILITY & RANKING ENGINE

Four independent filter -> sort -> truncate pipelines over one CandidateSet.

GAINERS (1h / 6h / 24h):
    age > 24h, price change for the window present,
    liquidity >= $50k, $300k <= market cap <= $50M
    sorted by that window's change, descending

NEW LAUNCHES:
    0 < age <= 24h, liquidity >= $25k, market cap >= $300k
    sorted by 6h volume, descending

Unknown age counts as infinitely old: such pairs can be gainers but never
new launches. Missing liquidity / market cap count as 0.
"""

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Union

from .digest_config import DigestSettings
from .models import AlertCategory, PairRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RankingEngine:
    """
    Ranks candidates per AlertCategory. Never mutates its input.
    """

    def __init__(self, settings: DigestSettings, clock: Optional[Clock] = None):
        self.settings = settings
        self.clock = clock or utc_now

    def is_eligible(self, pair: PairRecord, category: AlertCategory, now: datetime) -> bool:
        s = self.settings
        age = pair.age_hours(now)
        liquidity = pair.liquidity_usd or 0
        market_cap = pair.market_cap_usd or 0

        if category is AlertCategory.NEW_LAUNCHES:
            return (
                0 < age <= s.max_age_new_hours
                and liquidity >= s.min_liquidity_new
                and market_cap >= s.min_market_cap
            )

        return (
            age > s.max_age_new_hours
            and pair.change(category.window) is not None
            and liquidity >= s.min_liquidity_established
            and s.min_market_cap <= market_cap <= s.max_market_cap_established
        )

    def sort_key(self, pair: PairRecord, category: AlertCategory) -> float:
        if category is AlertCategory.NEW_LAUNCHES:
            return pair.volume_for("6h")
        return pair.change(category.window) or 0.0

    def rank(
        self,
        candidates: Union[Dict[str, PairRecord], Iterable[PairRecord]],
        category: AlertCategory,
    ) -> Optional[List[PairRecord]]:
        """
        Rank candidates for one alert.

        Args:
            candidates: CandidateSet (dict) or any iterable of PairRecord
            category: Which alert to build

        Returns:
            Up to top_n records, best first, or None if nothing qualifies
        """
        now = self.clock()
        pool = candidates.values() if isinstance(candidates, dict) else candidates

        eligible = [p for p in pool if self.is_eligible(p, category, now)]
        # sorted() is stable: ties keep candidate order
        ranked = sorted(eligible, key=lambda p: self.sort_key(p, category), reverse=True)
        ranked = ranked[:self.settings.top_n]

        logger.debug(f"[RANKING] {category.name}: {len(eligible)} eligible, {len(ranked)} kept")
        return ranked or None

    def rank_all(
        self, candidates: Union[Dict[str, PairRecord], Iterable[PairRecord]]
    ) -> "OrderedDict[AlertCategory, Optional[List[PairRecord]]]":
        """Rank every category in delivery order."""
        pool = list(candidates.values()) if isinstance(candidates, dict) else list(candidates)
        results = OrderedDict()
        for category in AlertCategory:
            results[category] = self.rank(pool, category)
        return results
