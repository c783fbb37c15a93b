"""
DEXSCREENER API CLIENT

Public market-data source for the digest (FREE, NO API KEY REQUIRED).
One GET per call, no retries. Pacing between calls is applied by the
collector.

Endpoints used:
- /token-profiles/latest/v1       -> [{chainId, tokenAddress, ...}]
- /token-boosts/latest/v1         -> [{chainId, tokenAddress, ...}]
- /token-boosts/top/v1            -> [{chainId, tokenAddress, ...}]
- /latest/dex/search?q=<term>     -> {"pairs": [...]}
- /tokens/v1/<chain>/<a,b,c>      -> [pair, pair, ...]  (max 30 addresses)
"""

import asyncio
import logging
from typing import Dict, List, Optional

import aiohttp

from .base_screener import BaseScreener
from .models import SourceResult

logger = logging.getLogger(__name__)


class DexScreenerAPI(BaseScreener):
    """
    DexScreener API client.

    The aiohttp session is created lazily, or injected (tests pass a stub).
    """

    BASE_URL = "https://api.dexscreener.com"
    SEARCH_PATH = "/latest/dex/search"
    DETAIL_PATH = "/tokens/v1"
    MAX_ADDRESSES_PER_CALL = 30

    def __init__(self, config: Dict = None, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize DexScreener API client.

        Args:
            config: Optional dict with base_url, search_path, detail_path,
                    request_timeout_seconds
            session: Optional pre-built aiohttp session (not closed by close())
        """
        super().__init__(config)
        self.base_url = str(self.config.get('base_url', self.BASE_URL)).rstrip('/')
        self.search_path = self.config.get('search_path', self.SEARCH_PATH)
        self.detail_path = self.config.get('detail_path', self.DETAIL_PATH)
        self.timeout_seconds = float(self.config.get('request_timeout_seconds', 10))
        self.session = session
        self._owns_session = session is None

    async def _ensure_session(self):
        """Ensure aiohttp session exists."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={'Accept': 'application/json'},
            )
            self._owns_session = True

    async def close(self):
        """Close the aiohttp session if this client created it."""
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    async def _get_json(self, source: str, path: str, params: Dict = None) -> SourceResult:
        """
        Single GET against the API.

        Args:
            source: Label for logs and the returned SourceResult
            path: Path relative to base_url
            params: Optional query parameters

        Returns:
            SourceResult with the decoded JSON, or a failure with the reason
        """
        await self._ensure_session()
        url = f"{self.base_url}{path}"

        try:
            async with self.session.get(url, params=params) as response:
                self._update_rate_limit()

                if response.status == 200:
                    data = await response.json(content_type=None)
                    return SourceResult.success(source, data)
                elif response.status == 429:
                    return self._failure(source, "rate limited (HTTP 429)")
                else:
                    return self._failure(source, f"HTTP {response.status}")

        except asyncio.TimeoutError:
            return self._failure(source, f"timeout after {self.timeout_seconds:.0f}s")
        except aiohttp.ClientError as e:
            return self._failure(source, f"request error: {e}")
        except ValueError as e:
            # Body was not valid JSON
            return self._failure(source, f"invalid JSON: {e}")

    def _failure(self, source: str, reason: str) -> SourceResult:
        self.failure_count += 1
        logger.warning(f"[DEXSCREENER] {source} failed: {reason}")
        return SourceResult.failure(source, reason)

    def _expect_list(self, result: SourceResult, key: str = None) -> SourceResult:
        """Unwrap result.data (optionally under `key`) and require a list."""
        if not result.ok:
            return result
        data = result.data
        if key is not None:
            data = data.get(key) if isinstance(data, dict) else None
            if data is None and isinstance(result.data, dict):
                # {"pairs": null} is a valid empty search
                data = []
        if not isinstance(data, list):
            return self._failure(result.source, f"unexpected response shape ({type(result.data).__name__})")
        return SourceResult.success(result.source, data)

    async def fetch_listing(self, source: str, path: str) -> SourceResult:
        """Fetch a profiles / boosts listing."""
        result = await self._get_json(source, path)
        return self._expect_list(result)

    async def search_pairs(self, term: str) -> SourceResult:
        """Keyword search; data is the list under "pairs"."""
        result = await self._get_json(f"search:{term}", self.search_path, params={'q': term})
        return self._expect_list(result, key='pairs')

    async def fetch_token_pairs(self, chain: str, token_addresses: List[str]) -> SourceResult:
        """
        Resolve up to 30 token addresses into their pairs.

        Raises:
            ValueError: if more than 30 addresses are passed
        """
        if len(token_addresses) > self.MAX_ADDRESSES_PER_CALL:
            raise ValueError(
                f"at most {self.MAX_ADDRESSES_PER_CALL} addresses per call, got {len(token_addresses)}"
            )
        chain = self._normalize_chain_name(chain)
        path = f"{self.detail_path}/{chain}/{','.join(token_addresses)}"
        result = await self._get_json(f"detail:{len(token_addresses)}", path)
        return self._expect_list(result)
