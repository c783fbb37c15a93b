"""
Digest Configuration

Thresholds, collector limits, pacing delays and DexScreener endpoints for the
digest pipeline.

Eligibility:
- Established pairs (> 24h): liquidity >= $50k, market cap $300k - $50M
- New launches (<= 24h): liquidity >= $25k, market cap >= $300k
"""
import copy
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Digest Configuration
DIGEST_CONFIG = {
    # Network scope (chainId on DexScreener)
    "chain": "solana",

    # Number of pairs per alert
    "top_n": 5,

    # Eligibility thresholds
    "thresholds": {
        # Pairs at or below this age count as new launches
        "max_age_new_hours": 24,

        "min_liquidity_established": 50000,   # $50k for pairs > 24h
        "min_liquidity_new": 25000,           # $25k for pairs <= 24h
        "min_market_cap": 300000,             # $300k floor for everything
        "max_market_cap_established": 50000000,  # $50M ceiling for pairs > 24h
    },

    # Candidate collector limits
    "collector": {
        # DexScreener accepts up to 30 addresses per tokens/v1 call
        "detail_batch_size": 30,

        # Identifiers past this cap are dropped, not resolved
        "max_identifiers": 150,

        "request_timeout_seconds": 10,
    },

    # Pacing (seconds)
    "pacing": {
        "source_delay_seconds": 0.25,   # between discovery sources
        "batch_delay_seconds": 0.2,     # between detail batches
        "message_delay_seconds": 2.0,   # between Telegram messages
    },

    # DexScreener API
    "api": {
        "base_url": "https://api.dexscreener.com",
        "listing_sources": {
            "profiles": "/token-profiles/latest/v1",
            "boosts_latest": "/token-boosts/latest/v1",
            "boosts_top": "/token-boosts/top/v1",
        },
        "search_path": "/latest/dex/search",
        "detail_path": "/tokens/v1",
        "search_terms": [
            "raydium solana",
            "jupiter solana",
            "orca solana",
            "SOL",
        ],
    },
}


@dataclass(frozen=True)
class DigestSettings:
    """Immutable view of DIGEST_CONFIG handed to the collector, ranking engine and cycle."""
    chain: str
    top_n: int
    max_age_new_hours: float
    min_liquidity_established: float
    min_liquidity_new: float
    min_market_cap: float
    max_market_cap_established: float
    detail_batch_size: int
    max_identifiers: int
    request_timeout_seconds: float
    source_delay_seconds: float
    batch_delay_seconds: float
    message_delay_seconds: float
    base_url: str
    listing_sources: Tuple[Tuple[str, str], ...]
    search_path: str
    detail_path: str
    search_terms: Tuple[str, ...]

    def validate(self) -> "DigestSettings":
        if self.top_n <= 0:
            raise ValueError(f"top_n must be positive, got {self.top_n}")
        if not 1 <= self.detail_batch_size <= 30:
            raise ValueError(f"detail_batch_size must be within 1..30, got {self.detail_batch_size}")
        if self.max_identifiers < 0:
            raise ValueError(f"max_identifiers must be >= 0, got {self.max_identifiers}")
        if self.min_market_cap > self.max_market_cap_established:
            raise ValueError(
                f"min_market_cap ({self.min_market_cap:,.0f}) exceeds "
                f"max_market_cap_established ({self.max_market_cap_established:,.0f})"
            )
        if self.max_age_new_hours <= 0:
            raise ValueError(f"max_age_new_hours must be positive, got {self.max_age_new_hours}")
        for name in ("source_delay_seconds", "batch_delay_seconds", "message_delay_seconds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if not self.chain:
            raise ValueError("chain must not be empty")
        return self


def get_digest_config() -> Dict:
    """Get a deep copy of the digest configuration."""
    return copy.deepcopy(DIGEST_CONFIG)


def merge_config(base: Dict, overrides: Optional[Dict]) -> Dict:
    """Recursively merge overrides into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def build_settings(overrides: Optional[Dict] = None) -> DigestSettings:
    """
    Build validated DigestSettings from DIGEST_CONFIG plus overrides.

    Args:
        overrides: Partial config dict (same shape as DIGEST_CONFIG)

    Returns:
        Frozen DigestSettings

    Raises:
        ValueError: if a threshold or limit is out of range
    """
    cfg = merge_config(DIGEST_CONFIG, overrides)
    thresholds = cfg["thresholds"]
    collector = cfg["collector"]
    pacing = cfg["pacing"]
    api = cfg["api"]

    settings = DigestSettings(
        chain=str(cfg["chain"]).lower(),
        top_n=int(cfg["top_n"]),
        max_age_new_hours=float(thresholds["max_age_new_hours"]),
        min_liquidity_established=float(thresholds["min_liquidity_established"]),
        min_liquidity_new=float(thresholds["min_liquidity_new"]),
        min_market_cap=float(thresholds["min_market_cap"]),
        max_market_cap_established=float(thresholds["max_market_cap_established"]),
        detail_batch_size=int(collector["detail_batch_size"]),
        max_identifiers=int(collector["max_identifiers"]),
        request_timeout_seconds=float(collector["request_timeout_seconds"]),
        source_delay_seconds=float(pacing["source_delay_seconds"]),
        batch_delay_seconds=float(pacing["batch_delay_seconds"]),
        message_delay_seconds=float(pacing["message_delay_seconds"]),
        base_url=str(api["base_url"]).rstrip("/"),
        listing_sources=tuple((str(k), str(v)) for k, v in api["listing_sources"].items()),
        search_path=str(api["search_path"]),
        detail_path=str(api["detail_path"]),
        search_terms=tuple(str(t) for t in api["search_terms"]),
    )
    return settings.validate()
