import os
import shutil
import tempfile
import unittest

import config
from digest.digest_config import DIGEST_CONFIG, build_settings, get_digest_config, merge_config


class TestDigestSettings(unittest.TestCase):

    def test_defaults(self):
        print("\nTesting default settings...")
        settings = build_settings()
        self.assertEqual(settings.chain, "solana")
        self.assertEqual(settings.top_n, 5)
        self.assertEqual(settings.max_age_new_hours, 24)
        self.assertEqual(settings.min_liquidity_established, 50000)
        self.assertEqual(settings.min_liquidity_new, 25000)
        self.assertEqual(settings.min_market_cap, 300000)
        self.assertEqual(settings.max_market_cap_established, 50000000)
        self.assertEqual(settings.detail_batch_size, 30)
        self.assertEqual(settings.max_identifiers, 150)
        self.assertEqual(settings.message_delay_seconds, 2.0)
        self.assertEqual(settings.search_terms, ("raydium solana", "jupiter solana", "orca solana", "SOL"))
        self.assertEqual(dict(settings.listing_sources)["boosts_top"], "/token-boosts/top/v1")

    def test_overrides_deep_merge(self):
        settings = build_settings({"top_n": 3, "thresholds": {"min_liquidity_new": 10000}})
        self.assertEqual(settings.top_n, 3)
        self.assertEqual(settings.min_liquidity_new, 10000)
        self.assertEqual(settings.min_liquidity_established, 50000)

    def test_merge_does_not_touch_defaults(self):
        merged = merge_config(DIGEST_CONFIG, {"pacing": {"source_delay_seconds": 9}})
        self.assertEqual(merged["pacing"]["source_delay_seconds"], 9)
        self.assertEqual(DIGEST_CONFIG["pacing"]["source_delay_seconds"], 0.25)
        copy = get_digest_config()
        copy["top_n"] = 99
        self.assertEqual(DIGEST_CONFIG["top_n"], 5)

    def test_invalid_values(self):
        print("\nTesting settings validation...")
        for overrides in (
            {"top_n": 0},
            {"collector": {"detail_batch_size": 31}},
            {"collector": {"detail_batch_size": 0}},
            {"thresholds": {"min_market_cap": 6e7}},
            {"pacing": {"message_delay_seconds": -1}},
            {"chain": ""},
        ):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    build_settings(overrides)

    def test_settings_are_frozen(self):
        settings = build_settings()
        with self.assertRaises(Exception):
            settings.top_n = 10


class TestConfigModule(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def write(self, name, text):
        path = os.path.join(self.tmpdir, name)
        with open(path, "w") as f:
            f.write(text)
        return path

    def test_yaml_overrides(self):
        print("\nTesting YAML overrides...")
        path = self.write("digest.yaml", "top_n: 3\nthresholds:\n  min_market_cap: 500000\n")
        settings = config.get_settings(path, chain="solana")
        self.assertEqual(settings.top_n, 3)
        self.assertEqual(settings.min_market_cap, 500000)

    def test_missing_or_empty_yaml(self):
        self.assertEqual(config.load_digest_overrides(os.path.join(self.tmpdir, "absent.yaml")), {})
        self.assertEqual(config.load_digest_overrides(self.write("empty.yaml", "")), {})

    def test_yaml_must_be_mapping(self):
        path = self.write("list.yaml", "- a\n- b\n")
        with self.assertRaises(ValueError):
            config.load_digest_overrides(path)

    def test_chain_argument_wins(self):
        path = self.write("digest.yaml", "chain: base\n")
        self.assertEqual(config.get_settings(path, chain="SOLANA").chain, "solana")

    def test_alert_interval(self):
        self.assertEqual(config.get_alert_interval_seconds("10"), 600)
        self.assertEqual(config.get_alert_interval_seconds("0.5"), 30)
        for bad in ("0", "-5", "ten"):
            with self.subTest(value=bad):
                with self.assertRaises(ValueError):
                    config.get_alert_interval_seconds(bad)


if __name__ == '__main__':
    unittest.main()
