"""
CANDIDATE COLLECTOR

Gathers every candidate pair for one digest cycle.

Flow:
    listings (profiles, boosts_latest, boosts_top) -> token identifiers
    keyword searches                               -> inline pairs
    identifiers (deduped, minus inline tokens, capped) -> tokens/v1 batches -> pairs

All requests are sequential with a pacing delay between them. A failing
source is recorded and treated as empty; it never aborts the collection.
"""

import logging
from typing import Awaitable, Dict, List, Optional

from .base_screener import BaseScreener
from .digest_config import DigestSettings
from .models import PairRecord, SourceResult
from .normalizer import PairNormalizer
from .pacing import PacingPolicy

logger = logging.getLogger(__name__)


class CandidateCollector:
    """
    Queries all discovery sources and returns the raw (non-deduplicated)
    list of PairRecords on the configured chain.
    """

    def __init__(
        self,
        api: BaseScreener,
        settings: DigestSettings,
        source_pacing: Optional[PacingPolicy] = None,
        batch_pacing: Optional[PacingPolicy] = None,
        normalizer: Optional[PairNormalizer] = None,
    ):
        self.api = api
        self.settings = settings
        self.chain = settings.chain
        self.source_pacing = source_pacing or PacingPolicy(settings.source_delay_seconds)
        self.batch_pacing = batch_pacing or PacingPolicy(settings.batch_delay_seconds)
        self.normalizer = normalizer or PairNormalizer()

        # SourceResults of the most recent collect()
        self.last_results: List[SourceResult] = []

        self.stats = self._empty_stats()

    def _empty_stats(self) -> Dict:
        return {
            'sources_ok': 0,
            'sources_failed': 0,
            'identifiers_found': 0,
            'identifiers_dropped': 0,
            'pairs_collected': 0,
        }

    async def collect(self) -> List[PairRecord]:
        """
        Run one full collection pass.

        Returns:
            List of PairRecord (may contain the same pair more than once);
            empty when every source failed
        """
        self.last_results = []
        self.stats = self._empty_stats()
        self.source_pacing.reset()
        self.batch_pacing.reset()

        identifiers: List[str] = []
        seen_identifiers = set()
        pairs: List[PairRecord] = []

        # 1. Listings -> identifiers
        for source, path in self.settings.listing_sources:
            await self.source_pacing.wait()
            result = await self._call(source, self.api.fetch_listing(source, path))
            if not result.ok:
                continue
            for token_address in self._extract_identifiers(result.data):
                if token_address not in seen_identifiers:
                    seen_identifiers.add(token_address)
                    identifiers.append(token_address)

        # 2. Keyword searches -> inline pairs
        for term in self.settings.search_terms:
            await self.source_pacing.wait()
            result = await self._call(f"search:{term}", self.api.search_pairs(term))
            if result.ok:
                pairs.extend(self.normalizer.normalize_many(result.data, chain=self.chain))

        # 3. Identifiers -> detail batches
        inline_tokens = {p.base_address for p in pairs if p.base_address}
        pending = [addr for addr in identifiers if addr not in inline_tokens]
        self.stats['identifiers_found'] = len(pending)

        cap = self.settings.max_identifiers
        if len(pending) > cap:
            dropped = len(pending) - cap
            self.stats['identifiers_dropped'] = dropped
            logger.info(f"[COLLECTOR] {len(pending)} identifiers, dropping {dropped} over cap of {cap}")
            pending = pending[:cap]

        batch_size = self.settings.detail_batch_size
        for start in range(0, len(pending), batch_size):
            batch = pending[start:start + batch_size]
            if start == 0:
                # the first batch still follows the last discovery request
                await self.source_pacing.wait()
            await self.batch_pacing.wait()
            result = await self._call(
                f"detail:{start // batch_size + 1}",
                self.api.fetch_token_pairs(self.chain, batch),
            )
            if result.ok:
                pairs.extend(self.normalizer.normalize_many(result.data, chain=self.chain))

        self.stats['pairs_collected'] = len(pairs)
        logger.info(
            f"[COLLECTOR] {len(pairs)} pairs from {self.stats['sources_ok']} sources "
            f"({self.stats['sources_failed']} failed, {len(pending)} identifiers resolved)"
        )
        return pairs

    async def _call(self, source: str, request: Awaitable[SourceResult]) -> SourceResult:
        """Await one source request and record its outcome."""
        try:
            result = await request
        except Exception as e:
            logger.exception(f"[COLLECTOR] {source} raised: {e}")
            result = SourceResult.failure(source, f"{type(e).__name__}: {e}")

        self.last_results.append(result)
        if result.ok:
            self.stats['sources_ok'] += 1
        else:
            self.stats['sources_failed'] += 1
        return result

    def _extract_identifiers(self, entries) -> List[str]:
        """Token addresses of listing entries on our chain, malformed entries skipped."""
        out = []
        for entry in entries or []:
            if not isinstance(entry, dict):
                continue
            if str(entry.get('chainId') or '').lower() != self.chain:
                continue
            token_address = entry.get('tokenAddress')
            if token_address and isinstance(token_address, str):
                out.append(token_address)
        return out

    def get_failures(self) -> List[SourceResult]:
        return [r for r in self.last_results if not r.ok]
