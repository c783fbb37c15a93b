"""
DIGEST MODULE - Periodic DexScreener top-gainers / new-launches digest

Architecture:
    DexScreenerAPI -> CandidateCollector -> Deduplicator -> RankingEngine
                   -> DigestAlert -> TelegramNotifier
    DigestScheduler drives DigestCycle.run_cycle() on a fixed period.

Alerts (in order):
- Top gainers 1h / 6h / 24h (established pairs, > 24h old)
- Top new launches (< 24h old, by 6h volume)
"""

from .collector import CandidateCollector
from .deduplicator import Deduplicator
from .dex_screener import DexScreenerAPI
from .digest_alert import DigestAlert
from .digest_config import DigestSettings, build_settings, get_digest_config
from .digest_cycle import DigestCycle
from .models import AlertCategory, PairRecord, SourceResult
from .normalizer import PairNormalizer
from .pacing import PacingPolicy
from .ranking import RankingEngine
from .scheduler import DigestScheduler

__all__ = [
    'AlertCategory',
    'CandidateCollector',
    'Deduplicator',
    'DexScreenerAPI',
    'DigestAlert',
    'DigestCycle',
    'DigestScheduler',
    'DigestSettings',
    'PacingPolicy',
    'PairNormalizer',
    'PairRecord',
    'RankingEngine',
    'SourceResult',
    'build_settings',
    'get_digest_config',
]
