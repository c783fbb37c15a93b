"""
BASE SCREENER - Abstract base class for market-data sources

Defines the interface the candidate collector relies on. Every call returns a
SourceResult so that failures stay visible to the caller instead of turning
into silent empty lists.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List

from .models import SourceResult


class BaseScreener(ABC):
    """
    Abstract base class for off-chain screeners.

    Subclasses implement one request per call; pacing between calls is the
    caller's job.
    """

    def __init__(self, config: Dict = None):
        """
        Initialize base screener.

        Args:
            config: Optional dict (timeouts, base URL overrides)
        """
        self.config = config or {}
        self.last_request_time = None
        self.request_count = 0
        self.failure_count = 0

    @abstractmethod
    async def fetch_listing(self, source: str, path: str) -> SourceResult:
        """
        Fetch a token listing (profiles, boosts).

        Args:
            source: Source label used in logs and reports
            path: Endpoint path relative to the base URL

        Returns:
            SourceResult whose data is a list of listing entries
        """
        pass

    @abstractmethod
    async def search_pairs(self, term: str) -> SourceResult:
        """
        Keyword search for pairs.

        Returns:
            SourceResult whose data is a list of raw pair dicts
        """
        pass

    @abstractmethod
    async def fetch_token_pairs(self, chain: str, token_addresses: List[str]) -> SourceResult:
        """
        Resolve token addresses into their pairs.

        Returns:
            SourceResult whose data is a list of raw pair dicts
        """
        pass

    def _update_rate_limit(self):
        """Update internal request tracking."""
        self.last_request_time = datetime.now()
        self.request_count += 1

    def _normalize_chain_name(self, chain: str) -> str:
        """Lowercase a chain name, mapping common aliases."""
        chain_map = {
            'sol': 'solana',
            'eth': 'ethereum',
        }
        return chain_map.get(chain.lower(), chain.lower())

    def get_stats(self) -> Dict:
        """
        Get screener statistics.

        Returns:
            Dict with request count, failures and last request time
        """
        return {
            'request_count': self.request_count,
            'failure_count': self.failure_count,
            'last_request': self.last_request_time.isoformat() if self.last_request_time else None,
            'source': self.__class__.__name__,
        }
