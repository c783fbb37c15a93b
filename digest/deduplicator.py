"""
DEDUPLICATOR

Collapses the raw per-cycle pair list into a CandidateSet keyed by pair
address. The first record seen for a pair wins; later copies (the same pair
returned by a search and by a detail lookup, for instance) are dropped.

Stateless across cycles: nothing is remembered between build() calls
except the stats of the last one.
"""

import logging
from typing import Dict, Iterable

from .models import PairRecord

logger = logging.getLogger(__name__)

CandidateSet = Dict[str, PairRecord]


class Deduplicator:
    """
    Builds one record per distinct pair_address.
    """

    def __init__(self):
        self.stats = {
            'total_in': 0,
            'duplicates': 0,
            'unique': 0,
        }

    def build(self, pairs: Iterable[PairRecord]) -> CandidateSet:
        """
        Deduplicate by pair identity.

        Args:
            pairs: Raw records in collection order

        Returns:
            Dict pair_address -> PairRecord, in first-seen order
        """
        candidates: CandidateSet = {}
        total = 0
        duplicates = 0

        for pair in pairs:
            total += 1
            if not pair.pair_address:
                continue
            if pair.pair_address in candidates:
                duplicates += 1
                continue
            candidates[pair.pair_address] = pair

        self.stats = {
            'total_in': total,
            'duplicates': duplicates,
            'unique': len(candidates),
        }
        logger.debug(f"[DEDUP] {total} in, {duplicates} duplicates, {len(candidates)} unique")
        return candidates

    def get_stats(self) -> Dict:
        return self.stats
