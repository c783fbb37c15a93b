"""
DIGEST CYCLE

One full pass of the digest pipeline:

    CandidateCollector.collect()
        -> Deduplicator.build()
        -> for each AlertCategory (1h, 6h, 24h, new launches):
               RankingEngine.rank() -> DigestAlert.render() -> notifier.send_message_async()
               (message pacing delay between categories)

Every step is isolated: an exception is logged, counted and the cycle moves
on. run_cycle() never raises.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, Optional

from .collector import CandidateCollector
from .deduplicator import Deduplicator
from .digest_alert import DigestAlert
from .digest_config import DigestSettings
from .models import AlertCategory
from .pacing import PacingPolicy
from .ranking import RankingEngine

logger = logging.getLogger(__name__)


class DigestCycle:
    """
    Orchestrates collect -> dedup -> rank x4 -> deliver.
    """

    def __init__(
        self,
        collector: CandidateCollector,
        deduplicator: Deduplicator,
        engine: RankingEngine,
        renderer: DigestAlert,
        notifier,
        settings: DigestSettings,
        message_pacing: Optional[PacingPolicy] = None,
    ):
        """
        Args:
            notifier: Anything with `async send_message_async(text) -> bool`
        """
        self.collector = collector
        self.deduplicator = deduplicator
        self.engine = engine
        self.renderer = renderer
        self.notifier = notifier
        self.settings = settings
        self.message_pacing = message_pacing or PacingPolicy(settings.message_delay_seconds)

        self.cycles_completed = 0
        self.last_report: Optional[Dict] = None

    async def run_cycle(self) -> Dict:
        """
        Run one cycle.

        Returns:
            CycleReport dict: pairs_raw, candidates, sent, skipped, failed,
            started_at, duration_seconds, stats (collector / dedup / delivery
            counters of this cycle)
        """
        started = time.monotonic()
        report = {
            'pairs_raw': 0,
            'candidates': 0,
            'sent': [],
            'skipped': [],
            'failed': [],
            'started_at': datetime.now(timezone.utc).isoformat(),
            'duration_seconds': 0.0,
            'stats': {},
        }
        logger.info("=" * 50)
        logger.info(f"[CYCLE] Digest cycle started at {report['started_at']}")

        delivery_before = dict(getattr(self.notifier, 'stats', {}))
        try:
            await self._run(report)
        except Exception as e:
            logger.exception(f"[CYCLE] Unexpected error: {e}")

        report['stats'] = self._component_stats(report, delivery_before)
        report['duration_seconds'] = round(time.monotonic() - started, 3)
        self.cycles_completed += 1
        self.last_report = report
        logger.info(
            f"[CYCLE] Completed in {report['duration_seconds']:.1f}s: "
            f"{len(report['sent'])} sent, {len(report['skipped'])} skipped, "
            f"{len(report['failed'])} failed"
        )
        logger.info(f"[CYCLE] Stats: {report['stats']}")
        return report

    def _component_stats(self, report: Dict, delivery_before: Dict) -> Dict:
        # dedup only ran when pairs were collected; delivery counters are cumulative
        dedup = dict(getattr(self.deduplicator, 'stats', {})) if report['pairs_raw'] else {}
        delivery = {
            key: value - delivery_before.get(key, 0)
            for key, value in getattr(self.notifier, 'stats', {}).items()
        }
        return {
            'collector': dict(getattr(self.collector, 'stats', {})),
            'dedup': dedup,
            'delivery': delivery,
        }

    async def _run(self, report: Dict):
        try:
            pairs = await self.collector.collect()
        except Exception as e:
            logger.exception(f"[CYCLE] Collection failed: {e}")
            pairs = []

        report['pairs_raw'] = len(pairs)
        if not pairs:
            logger.info("[CYCLE] No pairs fetched, skipping this cycle")
            return

        candidates = self.deduplicator.build(pairs)
        report['candidates'] = len(candidates)
        logger.info(f"[CYCLE] {len(pairs)} pairs -> {len(candidates)} unique candidates")

        self.message_pacing.reset()
        for category in AlertCategory:
            await self.message_pacing.wait()
            await self._deliver_category(category, candidates, report)

    async def _deliver_category(self, category: AlertCategory, candidates, report: Dict):
        name = category.name
        try:
            ranked = self.engine.rank(candidates, category)
            if ranked is None:
                logger.info(f"[CYCLE] No pairs for {name}, skipping")
                report['skipped'].append(name)
                return

            message = self.renderer.render(category, ranked)
            logger.info(f"[CYCLE] Sending {name} ({len(ranked)} pairs)")
            delivered = await self.notifier.send_message_async(message)
        except Exception as e:
            logger.exception(f"[CYCLE] {name} failed: {e}")
            report['failed'].append(name)
            return

        if delivered:
            report['sent'].append(name)
        else:
            logger.warning(f"[CYCLE] {name} was not delivered")
            report['failed'].append(name)
