"""
PAIR NORMALIZER

Converts raw DexScreener pair objects (search results and tokens/v1 detail
arrays share the same pair shape) into immutable PairRecord instances.

Every nested field is optional. Missing or unparsable values become None
rather than 0 so that consumers decide their own fallback.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .models import PairRecord, WINDOWS

logger = logging.getLogger(__name__)


class PairNormalizer:
    """
    Normalizes DexScreener pair data into PairRecord.

    RAW PAIR (relevant subset):
    {
      "chainId": "solana",
      "pairAddress": "...",
      "baseToken": {"address": "...", "symbol": "..."},
      "priceUsd": "0.001234",
      "priceChange": {"h1": 12.5, "h6": 30.1, "h24": -4.2},
      "volume": {"h1": 5000, "h6": 40000, "h24": 90000},
      "liquidity": {"usd": 85000},
      "marketCap": 1200000,
      "fdv": 1500000,
      "pairCreatedAt": 1735461600000
    }
    """

    def normalize_dexscreener(self, raw_pair: Dict) -> Optional[PairRecord]:
        """
        Normalize one DexScreener pair.

        Returns:
            PairRecord, or None when the object is not a pair or has no pairAddress
        """
        if not isinstance(raw_pair, dict):
            return None

        pair_address = raw_pair.get('pairAddress')
        if not pair_address or not isinstance(pair_address, str):
            return None

        base_token = self._dict(raw_pair.get('baseToken'))
        price_change = self._dict(raw_pair.get('priceChange'))
        volume = self._dict(raw_pair.get('volume'))
        liquidity = self._dict(raw_pair.get('liquidity'))

        # marketCap || fdv: a zero primary falls back as well
        market_cap = self._safe_float(raw_pair.get('marketCap'))
        if not market_cap:
            market_cap = self._safe_float(raw_pair.get('fdv'))

        return PairRecord(
            pair_address=pair_address,
            chain_id=self._normalize_chain(raw_pair.get('chainId')),
            base_symbol=str(base_token.get('symbol') or 'UNKNOWN'),
            base_address=str(base_token.get('address') or ''),
            price_usd=self._safe_float(raw_pair.get('priceUsd')),
            price_change=self._windowed(price_change),
            liquidity_usd=self._safe_float(liquidity.get('usd')),
            market_cap_usd=market_cap,
            volume=self._windowed(volume),
            created_at=self._parse_timestamp_ms(raw_pair.get('pairCreatedAt')),
        )

    def normalize_many(self, raw_pairs: List[Dict], chain: Optional[str] = None) -> List[PairRecord]:
        """Normalize a list of raw pairs, keeping only those on `chain` (when given)."""
        records = []
        for raw in raw_pairs or []:
            record = self.normalize_dexscreener(raw)
            if record is None:
                continue
            if chain and record.chain_id != chain:
                continue
            records.append(record)
        return records

    def _windowed(self, data: Dict) -> Dict[str, float]:
        """Map {h1, h6, h24} fields onto {1h, 6h, 24h}, skipping absent windows."""
        out = {}
        for window, key in WINDOWS.items():
            value = self._safe_float(data.get(key))
            if value is not None:
                out[window] = value
        return out

    def _normalize_chain(self, chain_id) -> str:
        return str(chain_id or 'unknown').lower()

    def _dict(self, value) -> Dict:
        return value if isinstance(value, dict) else {}

    def _safe_float(self, value) -> Optional[float]:
        """Safely convert to float; None for missing, non-numeric or NaN input."""
        if value is None or isinstance(value, bool):
            return None
        try:
            result = float(value)
        except (ValueError, TypeError):
            return None
        if result != result:  # NaN
            return None
        return result

    def _parse_timestamp_ms(self, value) -> Optional[datetime]:
        """Epoch milliseconds -> aware UTC datetime."""
        millis = self._safe_float(value)
        if not millis or millis <= 0:
            return None
        try:
            return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug(f"[NORMALIZER] Unusable pairCreatedAt: {value!r}")
            return None
