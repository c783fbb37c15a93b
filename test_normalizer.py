import math
import unittest
from datetime import datetime, timedelta, timezone

from digest.normalizer import PairNormalizer

RAW_PAIR = {
    "chainId": "solana",
    "dexId": "raydium",
    "url": "https://dexscreener.com/solana/pair111",
    "pairAddress": "pair111",
    "baseToken": {"address": "Mint111", "name": "Bonk", "symbol": "BONK"},
    "quoteToken": {"address": "So11111111111111111111111111111111111111112", "symbol": "SOL"},
    "priceUsd": "0.00002134",
    "priceChange": {"m5": 0.4, "h1": 12.5, "h6": 30.1, "h24": -4.2},
    "volume": {"h1": 5000, "h6": 40000, "h24": 90000},
    "liquidity": {"usd": 85000.5, "base": 1, "quote": 2},
    "marketCap": 1200000,
    "fdv": 1500000,
    "pairCreatedAt": 1735461600000,
}


class TestPairNormalizer(unittest.TestCase):

    def setUp(self):
        self.normalizer = PairNormalizer()

    def test_full_pair(self):
        print("\nTesting full pair normalization...")
        record = self.normalizer.normalize_dexscreener(RAW_PAIR)

        self.assertEqual(record.pair_address, "pair111")
        self.assertEqual(record.chain_id, "solana")
        self.assertEqual(record.base_symbol, "BONK")
        self.assertEqual(record.base_address, "Mint111")
        self.assertAlmostEqual(record.price_usd, 0.00002134)
        self.assertEqual(record.price_change, {"1h": 12.5, "6h": 30.1, "24h": -4.2})
        self.assertEqual(record.volume, {"1h": 5000.0, "6h": 40000.0, "24h": 90000.0})
        self.assertEqual(record.liquidity_usd, 85000.5)
        self.assertEqual(record.market_cap_usd, 1200000.0)
        self.assertEqual(record.created_at, datetime(2024, 12, 29, 8, 40, tzinfo=timezone.utc))

    def test_only_ranked_and_rendered_fields_kept(self):
        record = self.normalizer.normalize_dexscreener(RAW_PAIR)
        for unused in ("dex_id", "url", "base_name"):
            self.assertFalse(hasattr(record, unused), unused)

    def test_market_cap_falls_back_to_fdv(self):
        raw = dict(RAW_PAIR, marketCap=None)
        self.assertEqual(self.normalizer.normalize_dexscreener(raw).market_cap_usd, 1500000.0)

        raw = dict(RAW_PAIR, marketCap=0)
        self.assertEqual(self.normalizer.normalize_dexscreener(raw).market_cap_usd, 1500000.0)

        raw = {k: v for k, v in RAW_PAIR.items() if k not in ("marketCap", "fdv")}
        self.assertIsNone(self.normalizer.normalize_dexscreener(raw).market_cap_usd)

    def test_missing_optional_fields(self):
        print("\nTesting sparse pair normalization...")
        record = self.normalizer.normalize_dexscreener({"pairAddress": "bare", "chainId": "solana"})

        self.assertEqual(record.base_symbol, "UNKNOWN")
        self.assertEqual(record.base_address, "")
        self.assertIsNone(record.price_usd)
        self.assertIsNone(record.liquidity_usd)
        self.assertIsNone(record.created_at)
        self.assertEqual(record.price_change, {})
        self.assertIsNone(record.change("1h"))
        self.assertEqual(record.volume_for("6h"), 0.0)
        self.assertEqual(record.age_hours(datetime.now(timezone.utc)), math.inf)

    def test_malformed_nested_fields(self):
        raw = dict(
            RAW_PAIR,
            priceUsd="not-a-number",
            priceChange="oops",
            liquidity=[1, 2],
            baseToken=None,
            pairCreatedAt="garbage",
        )
        record = self.normalizer.normalize_dexscreener(raw)

        self.assertIsNotNone(record)
        self.assertIsNone(record.price_usd)
        self.assertEqual(record.price_change, {})
        self.assertIsNone(record.liquidity_usd)
        self.assertEqual(record.base_symbol, "UNKNOWN")
        self.assertIsNone(record.created_at)

    def test_rejects_non_pairs(self):
        self.assertIsNone(self.normalizer.normalize_dexscreener(None))
        self.assertIsNone(self.normalizer.normalize_dexscreener("pair"))
        self.assertIsNone(self.normalizer.normalize_dexscreener({"chainId": "solana"}))
        self.assertIsNone(self.normalizer.normalize_dexscreener(dict(RAW_PAIR, pairAddress="")))

    def test_normalize_many_filters_chain(self):
        raws = [
            RAW_PAIR,
            dict(RAW_PAIR, pairAddress="eth1", chainId="ethereum"),
            dict(RAW_PAIR, pairAddress="upper", chainId="SOLANA"),
            {"garbage": True},
            42,
        ]
        records = self.normalizer.normalize_many(raws, chain="solana")
        self.assertEqual([r.pair_address for r in records], ["pair111", "upper"])

    def test_age_hours(self):
        record = self.normalizer.normalize_dexscreener(RAW_PAIR)
        now = record.created_at + timedelta(hours=30)
        self.assertAlmostEqual(record.age_hours(now), 30.0)


if __name__ == '__main__':
    unittest.main()
