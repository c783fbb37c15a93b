import unittest

from digest.deduplicator import Deduplicator
from digest.models import PairRecord


def make_pair(address, symbol="TKN", liquidity=100000.0):
    return PairRecord(pair_address=address, chain_id="solana", base_symbol=symbol, liquidity_usd=liquidity)


class TestDeduplicator(unittest.TestCase):

    def setUp(self):
        self.dedup = Deduplicator()

    def test_first_seen_wins(self):
        print("\nTesting first-seen deduplication...")
        first = make_pair("P1", symbol="FIRST", liquidity=1.0)
        second = make_pair("P1", symbol="SECOND", liquidity=2.0)
        other = make_pair("P2")

        candidates = self.dedup.build([first, other, second])

        self.assertEqual(list(candidates.keys()), ["P1", "P2"])
        self.assertIs(candidates["P1"], first)
        self.assertEqual(candidates["P1"].base_symbol, "FIRST")

    def test_stats(self):
        self.dedup.build([make_pair("A"), make_pair("B"), make_pair("A"), make_pair("A")])
        self.assertEqual(self.dedup.get_stats(), {'total_in': 4, 'duplicates': 2, 'unique': 2})

    def test_empty_identity_skipped(self):
        candidates = self.dedup.build([make_pair(""), make_pair("X")])
        self.assertEqual(list(candidates), ["X"])

    def test_empty_input(self):
        self.assertEqual(self.dedup.build([]), {})
        self.assertEqual(self.dedup.stats['unique'], 0)

    def test_no_state_between_builds(self):
        self.dedup.build([make_pair("A")])
        candidates = self.dedup.build([make_pair("A")])
        self.assertIn("A", candidates)
        self.assertEqual(self.dedup.stats['duplicates'], 0)


if __name__ == '__main__':
    unittest.main()
