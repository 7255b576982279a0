"""
Unit tests for curriculum topic selection
"""

import unittest
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from services.research.curriculum import CURRICULUM, STRATEGIC_CYCLES, next_topic


class TestNextTopic(unittest.TestCase):
    """Test cases for next_topic"""

    def setUp(self):
        self.curriculum = ["alpha", "beta", "gamma"]

    def test_nothing_covered_starts_at_beginning(self):
        self.assertEqual(next_topic(self.curriculum, []), "alpha")

    def test_first_uncovered_in_curriculum_order(self):
        self.assertEqual(next_topic(self.curriculum, ["alpha", "gamma"]), "beta")

    def test_history_order_does_not_matter(self):
        self.assertEqual(next_topic(self.curriculum, ["beta", "alpha"]), "gamma")

    def test_off_curriculum_topics_are_ignored(self):
        self.assertEqual(next_topic(self.curriculum, ["custom topic", "alpha"]), "beta")

    def test_cycles_after_last_topic_when_exhausted(self):
        covered = ["alpha", "beta", "gamma"]
        self.assertEqual(next_topic(self.curriculum, covered, last_topic="alpha"), "beta")
        self.assertEqual(next_topic(self.curriculum, covered, last_topic="gamma"), "alpha")

    def test_exhausted_with_unknown_last_topic_restarts(self):
        covered = ["alpha", "beta", "gamma"]
        self.assertEqual(next_topic(self.curriculum, covered), "alpha")
        self.assertEqual(next_topic(self.curriculum, covered, last_topic="custom"), "alpha")

    def test_empty_curriculum_rejected(self):
        with self.assertRaises(ValueError):
            next_topic([], [])

    def test_default_curriculum_shape(self):
        self.assertEqual(len(STRATEGIC_CYCLES), 4)
        self.assertEqual(len(CURRICULUM), 28)
        self.assertEqual(len(set(CURRICULUM)), 28)


if __name__ == '__main__':
    unittest.main()
