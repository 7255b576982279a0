"""
Unit tests for the model response extractor
"""

import json
import unittest
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from services.ai.response_extractor import (
    FALLBACK_SUMMARY_CHARS,
    extract_contract_analysis,
    extract_html_body,
    extract_json_object,
    extract_research_payload,
)
from schemas.domain import RiskLevel
from utils.errors import ModelOutputError
from fakes import contract_completion, research_completion


class TestExtractJsonObject(unittest.TestCase):
    """Brace-region JSON parsing"""

    def test_pure_json_is_returned_unchanged(self):
        original = {"summary": "s", "tools": ["A", "B"], "nested": {"k": [1, 2, {"x": None}]}}
        text = json.dumps(original)

        self.assertEqual(extract_json_object(text), original)
        # Re-serializing and extracting again changes nothing
        self.assertEqual(extract_json_object(json.dumps(extract_json_object(text))), original)

    def test_prose_and_fences_are_ignored(self):
        text = 'Sure!\n```json\n{"a": {"b": 1}}\n```\nThanks'
        self.assertEqual(extract_json_object(text), {"a": {"b": 1}})

    def test_no_brace_region_returns_none(self):
        for text in ["", "plain words", "only } closing {", "{ unterminated"]:
            self.assertIsNone(extract_json_object(text), text)

    def test_invalid_json_returns_none(self):
        self.assertIsNone(extract_json_object("{not: valid, json}"))

    def test_two_separate_objects_do_not_parse(self):
        self.assertIsNone(extract_json_object('{"a": 1}, {"b": 2}'))


class TestExtractResearchPayload(unittest.TestCase):
    """Degrade-never-raise research parsing"""

    def test_well_formed_completion(self):
        payload = extract_research_payload(research_completion())

        self.assertFalse(payload.degraded)
        self.assertEqual(payload.tools, ["Zapier", "Airtable"])
        self.assertEqual(len(payload.tools_detailed), 2)
        self.assertTrue(payload.tools_detailed[0].has_affiliate_program())
        self.assertFalse(payload.tools_detailed[1].has_affiliate_program())
        self.assertEqual(len(payload.blog_ideas), 7)
        self.assertEqual(payload.blog_ideas[0].category, "Build")

    def test_text_without_braces_falls_back(self):
        for text in ["The model refused.", "x" * 2000, "", "line one\nline two"]:
            payload = extract_research_payload(text)
            self.assertTrue(payload.degraded)
            self.assertEqual(payload.summary, text[:FALLBACK_SUMMARY_CHARS])
            self.assertEqual(payload.tools, [])
            self.assertEqual(payload.tools_detailed, [])
            self.assertEqual(payload.key_insights, [])
            self.assertEqual(payload.blog_ideas, [])

    def test_unparseable_braces_fall_back(self):
        payload = extract_research_payload("Summary {broken json here}")
        self.assertTrue(payload.degraded)
        self.assertEqual(payload.summary, "Summary {broken json here}")

    def test_legacy_day_key_is_read_as_category(self):
        text = json.dumps({"summary": "s", "blog_ideas": [{"day": "build", "title": "t", "description": "d"}]})
        payload = extract_research_payload(text)
        self.assertEqual(payload.blog_ideas[0].category, "Build")

    def test_malformed_items_are_dropped(self):
        text = json.dumps({
            "summary": "s",
            "tools_detailed": [{"name": "  "}, {"description": "no name"}, {"name": "Make"}],
            "blog_ideas": ["not an object", {"category": "Rest", "title": "Recharge"}],
        })
        payload = extract_research_payload(text)

        self.assertEqual([c.name for c in payload.tools_detailed], ["Make"])
        self.assertEqual(payload.tools, ["Make"])
        self.assertEqual(len(payload.blog_ideas), 1)

    def test_empty_or_missing_summary_stays_empty(self):
        for text in (json.dumps({"tools": ["A"]}), '{"summary": "", "tools": ["A"]}'):
            payload = extract_research_payload(text)
            self.assertEqual(payload.summary, "", text)
            self.assertEqual(payload.tools, ["A"])
            self.assertFalse(payload.degraded)


class TestExtractContractAnalysis(unittest.TestCase):
    """Strict contract parsing"""

    def test_happy_path_coerces_loose_values(self):
        analysis = extract_contract_analysis(contract_completion())

        self.assertEqual(analysis.commission_structure.primary_rate, "20%")
        self.assertEqual(analysis.commission_structure.cookie_duration_days, 30)
        self.assertEqual(analysis.payment_terms.threshold, 50.0)
        self.assertEqual(analysis.analysis.risk_level, RiskLevel.LOW)
        self.assertEqual(analysis.monitoring_setup.recommended_frequency, "weekly")
        self.assertEqual(len(analysis.key_action_items), 2)

    def test_no_json_is_fatal(self):
        with self.assertRaises(ModelOutputError):
            extract_contract_analysis("I could not analyze this contract.")

    def test_missing_required_section_is_fatal(self):
        text = json.dumps({"commission_structure": {}, "payment_terms": {}})
        with self.assertRaises(ModelOutputError):
            extract_contract_analysis(text)

    def test_rating_clamped_and_unknown_risk_defaults_to_medium(self):
        text = contract_completion(analysis={"rating": 14, "risk_level": "extreme"})
        analysis = extract_contract_analysis(text)
        self.assertEqual(analysis.analysis.rating, 10.0)
        self.assertEqual(analysis.analysis.risk_level, RiskLevel.MEDIUM)

    def test_null_optional_sections_get_defaults(self):
        analysis = extract_contract_analysis(contract_completion(analysis=None, monitoring_setup=None))
        self.assertEqual(analysis.analysis.summary, "")
        self.assertEqual(analysis.monitoring_setup.recommended_frequency, "daily")


class TestExtractHtmlBody(unittest.TestCase):
    """Best-effort article isolation"""

    def test_fenced_html_block_wins(self):
        text = "Here you go:\n```html\n<h2>Intro</h2><p>Body</p>\n```\nExcerpt: short"
        self.assertEqual(extract_html_body(text), "<h2>Intro</h2><p>Body</p>")

    def test_body_preferred_over_article(self):
        text = "<html><body><article><p>A</p></article><p>B</p></body></html>"
        self.assertEqual(extract_html_body(text), "<article><p>A</p></article><p>B</p>")

    def test_article_used_without_body(self):
        text = "Preamble\n<article><p>Only this</p></article>\nExcerpt: x"
        self.assertEqual(extract_html_body(text), "<p>Only this</p>")

    def test_trims_at_trailing_markers(self):
        cases = [
            "<p>Article</p>\nExcerpt: A short teaser",
            "<p>Article</p>\n**Excerpt:** teaser",
            "<p>Article</p>\n## Affiliate Link Suggestions\n1. Zapier",
            "<p>Article</p>\n<h2>Excerpt</h2>\n<p>teaser</p>",
            "<p>Article</p>\n2. Affiliate Suggestions:\n- Make",
        ]
        for text in cases:
            self.assertEqual(extract_html_body(text), "<p>Article</p>", text)

    def test_marker_at_start_is_not_trimmed(self):
        text = "Excerpt: everything is postamble"
        self.assertEqual(extract_html_body(text), text)

    def test_marker_inside_article_mis_trims(self):
        # Known limitation: a content line starting with a marker word is
        # indistinguishable from the postamble and gets cut.
        text = "<p>Intro</p>\nAffiliate marketing is how we fund this.\n<p>More article</p>"
        self.assertEqual(extract_html_body(text), "<p>Intro</p>")

    def test_marker_mid_line_is_kept(self):
        text = "<p>Join an affiliate program today.</p>\n<p>End</p>"
        self.assertEqual(extract_html_body(text), text)


if __name__ == '__main__':
    unittest.main()
