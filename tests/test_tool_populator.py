"""
Unit tests for ToolPopulator
"""

import unittest
import sys
import os
from datetime import date
from unittest.mock import patch

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from schemas.domain import SignupStatus, TechStackEntry
from services.affiliates.tool_populator import ToolPopulator, current_week_number
from utils.errors import NotFoundError, StorageError, ValidationError
from fakes import TempStoreMixin, seed_paths, tool_card


class TestCurrentWeekNumber(unittest.TestCase):
    """Calendar day to 1-4 cycle"""

    def test_days_map_to_cycle(self):
        expected = {1: 1, 7: 1, 8: 2, 14: 2, 15: 3, 21: 3, 22: 4, 28: 4, 29: 1, 31: 1}
        for day, week in expected.items():
            self.assertEqual(current_week_number(date(2026, 1, day)), week, day)


class TestToolPopulator(TempStoreMixin, unittest.TestCase):
    """Test cases for ToolPopulator.populate"""

    def setUp(self):
        super().setUp()
        self.path_a, self.path_b = seed_paths(self.store)
        self.trend = self.store.insert("trends", {
            "path_id": self.path_a["id"],
            "topic": "No-code CRMs",
            "tools_detailed": [
                tool_card("Zapier", affiliate_program="Yes - 25% recurring"),
                tool_card("Airtable", affiliate_program="Affiliate program available"),
                tool_card("Carrd", affiliate_program="No"),
            ],
            "tools_populated": False,
        })

    def _catalog(self, path_id=None):
        filters = {"path_id": path_id} if path_id else None
        return self.store.select("tech_stacks", filters=filters, order_by="name", descending=False)

    def test_new_tools_inserted(self):
        result = ToolPopulator(self.store).populate(self.trend["id"], today=date(2026, 5, 9))

        self.assertTrue(result["success"])
        self.assertEqual(result["message"], "Populated 3 tools for Week 2")
        self.assertEqual(result["summary"], {
            "total": 3,
            "new_tools": 3,
            "reused_tools": 0,
            "needs_affiliate_signup": 2,
            "ready_to_use": 0,
            "needs_affiliate_links": 0,
        })
        self.assertEqual(result["errors"], [])
        self.assertEqual(result["next_steps"], ["Sign up for 2 new affiliate programs"])

        catalog = {row["name"]: row for row in self._catalog()}
        self.assertEqual(catalog["Zapier"]["signup_status"], "pending")
        self.assertEqual(catalog["Airtable"]["signup_status"], "pending")
        self.assertEqual(catalog["Carrd"]["signup_status"], "declined")
        zapier = catalog["Zapier"]
        self.assertEqual(zapier["path_id"], self.path_a["id"])
        self.assertEqual(zapier["category"], "No-code and low-code tools")
        self.assertEqual(zapier["priority_score"], 70)
        self.assertTrue(zapier["auto_populated"])
        self.assertTrue(zapier["selected_for_week"])
        self.assertEqual(zapier["week_number"], 2)
        self.assertIsNone(zapier["affiliate_url"])

        trend = self.store.get("trends", self.trend["id"])
        self.assertTrue(trend["tools_populated"])
        self.assertEqual(trend["week_number"], 2)

    def test_existing_tool_is_reused_not_duplicated(self):
        existing = self.store.insert("tech_stacks", {
            "path_id": self.path_a["id"],
            "name": "Zapier",
            "affiliate_url": "https://zapier.com/?ref=me",
            "selected_for_week": False,
        })
        # Same name under the other path is a different catalog row
        self.store.insert("tech_stacks", {"path_id": self.path_b["id"], "name": "Airtable"})

        result = ToolPopulator(self.store).populate(self.trend["id"], week_number=3, today=date(2026, 5, 9))

        self.assertEqual(result["summary"]["reused_tools"], 1)
        self.assertEqual(result["summary"]["new_tools"], 2)
        self.assertEqual(result["summary"]["ready_to_use"], 1)
        self.assertIn("1 tools ready with existing affiliate links", result["next_steps"])

        path_a_rows = self._catalog(self.path_a["id"])
        self.assertEqual([r["name"] for r in path_a_rows], ["Airtable", "Carrd", "Zapier"])
        zapier = self.store.get("tech_stacks", existing["id"])
        self.assertTrue(zapier["selected_for_week"])
        self.assertEqual(zapier["week_number"], 3)
        self.assertEqual(zapier["last_used_week"], "2026-05-09")
        self.assertEqual(zapier["tools_detailed_source"]["name"], "Zapier")
        self.assertEqual(len(self._catalog(self.path_b["id"])), 1)

    def test_reused_without_link_needs_links(self):
        self.store.insert("tech_stacks", {"path_id": self.path_a["id"], "name": "Carrd", "affiliate_url": None})
        result = ToolPopulator(self.store).populate(self.trend["id"])

        self.assertEqual(result["summary"]["needs_affiliate_links"], 1)
        self.assertIn("Add affiliate links for 1 existing tools", result["next_steps"])

    def test_second_run_rejected_without_mutation(self):
        populator = ToolPopulator(self.store)
        populator.populate(self.trend["id"])
        before = self._catalog()

        with self.assertRaises(ValidationError):
            populator.populate(self.trend["id"])

        self.assertEqual(self._catalog(), before)

    def test_missing_trend(self):
        with self.assertRaises(NotFoundError):
            ToolPopulator(self.store).populate("missing")

    def test_new_catalog_row_is_a_valid_entry(self):
        ToolPopulator(self.store).populate(self.trend["id"], week_number=1)

        row = self.store.find_one("tech_stacks", {"name": "Zapier"})
        entry = TechStackEntry.model_validate(row)
        self.assertEqual(entry.id, row["id"])
        self.assertEqual(entry.signup_status, SignupStatus.PENDING)
        self.assertEqual(row["website_url"], "https://zapier.com")
        self.assertEqual(row["pricing_model"], "Free tier, Pro at $20/month")
        self.assertEqual(row["key_features"], ["Templates", "Integrations"])
        self.assertEqual(row["affiliate_notes"], "Yes - 25% recurring")

    def test_week_number_out_of_range_rejected_before_writes(self):
        with self.assertRaises(ValidationError):
            ToolPopulator(self.store).populate(self.trend["id"], week_number=5)

        self.assertEqual(self._catalog(), [])
        self.assertFalse(self.store.get("trends", self.trend["id"])["tools_populated"])

    def test_blank_trend_id(self):
        with self.assertRaises(ValidationError):
            ToolPopulator(self.store).populate("")

    def test_trend_without_tool_cards(self):
        bare = self.store.insert("trends", {"topic": "t", "tools_detailed": [], "tools_populated": False})
        with self.assertRaises(ValidationError):
            ToolPopulator(self.store).populate(bare["id"])
        self.assertFalse(self.store.get("trends", bare["id"])["tools_populated"])

    def test_trend_without_path_is_uncategorized(self):
        loose = self.store.insert("trends", {
            "topic": "t",
            "tools_detailed": [tool_card("Make")],
            "tools_populated": False,
        })
        ToolPopulator(self.store).populate(loose["id"])

        row = self.store.find_one("tech_stacks", {"name": "Make"})
        self.assertEqual(row["category"], "Uncategorized")
        self.assertIsNone(row["path_id"])

    def test_per_tool_failures_are_collected(self):
        original_insert = self.store.insert

        def flaky_insert(table, row):
            if table == "tech_stacks" and row.get("name") == "Airtable":
                raise StorageError("Database error: constraint failed")
            return original_insert(table, row)

        with patch.object(self.store, "insert", side_effect=flaky_insert):
            result = ToolPopulator(self.store).populate(self.trend["id"])

        self.assertEqual(result["summary"]["total"], 2)
        self.assertEqual(len(result["errors"]), 1)
        self.assertIn("Airtable", result["errors"][0])
        self.assertEqual([r["name"] for r in self._catalog()], ["Carrd", "Zapier"])
        self.assertTrue(self.store.get("trends", self.trend["id"])["tools_populated"])

    def test_invalid_card_is_an_error_not_an_abort(self):
        self.store.update("trends", self.trend["id"], {
            "tools_detailed": [{"name": ""}, tool_card("Glide")],
        })
        result = ToolPopulator(self.store).populate(self.trend["id"])

        self.assertEqual(result["summary"]["total"], 1)
        self.assertEqual(len(result["errors"]), 1)


if __name__ == '__main__':
    unittest.main()
