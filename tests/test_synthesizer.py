"""
Unit tests for ResearchSynthesizer
"""

import random
import unittest
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

from schemas.domain import BLOG_CATEGORIES, TREND_SOURCE, BlogIdea, Path, ResearchTrend
from services.ai.prompts import RESEARCH_TEMPERATURE
from services.research.curriculum import CURRICULUM
from services.research.synthesizer import ResearchSynthesizer, blog_idea_problems, order_blog_ideas
from utils.errors import NotFoundError, UpstreamProviderError, ValidationError
from fakes import FakeLLM, TempStoreMixin, blog_ideas, research_completion, seed_paths


class TestBlogIdeaFramework(unittest.TestCase):
    """Weekly category framework checks"""

    def _ideas(self, categories):
        return [BlogIdea.model_validate(i) for i in blog_ideas(categories)]

    def test_full_permutation_conforms(self):
        shuffled = list(BLOG_CATEGORIES)
        random.Random(7).shuffle(shuffled)
        ideas = self._ideas(shuffled)

        self.assertEqual(blog_idea_problems(ideas), [])
        self.assertEqual([i.category for i in order_blog_ideas(ideas)], BLOG_CATEGORIES)

    def test_repeated_and_missing_category_reported(self):
        categories = BLOG_CATEGORIES[:-1] + ["Build"]
        problems = blog_idea_problems(self._ideas(categories))

        self.assertEqual(problems, ["repeated categories: Build", "missing categories: Rest"])

    def test_wrong_count_and_unknown_category_reported(self):
        problems = blog_idea_problems(self._ideas(["Build", "Attract", "Monday"]))

        self.assertIn("expected 7 blog ideas, got 3", problems)
        self.assertIn("unknown categories: Monday", problems)


class TestResearchForPath(TempStoreMixin, unittest.TestCase):
    """Single research cycle"""

    def setUp(self):
        super().setUp()
        path_a, path_b = seed_paths(self.store)
        self.path_a = Path.model_validate(path_a)
        self.path_b = Path.model_validate(path_b)

    def test_successful_cycle_persists_trend(self):
        llm = FakeLLM(research_completion())
        result = ResearchSynthesizer(self.store, llm).research_for_path(self.path_a, "Email automation")

        self.assertEqual(result["topic"], "Email automation")
        self.assertEqual(result["path"], "Path A")
        self.assertEqual(result["tool_count"], 2)
        self.assertEqual(result["warnings"], [])

        trend = self.store.get("trends", result["trend_id"])
        self.assertEqual(trend["path_id"], self.path_a.id)
        self.assertEqual(trend["source"], TREND_SOURCE)
        self.assertFalse(trend["tools_populated"])
        self.assertEqual(trend["tools_mentioned"], ["Zapier", "Airtable"])
        self.assertEqual(len(trend["tools_detailed"]), 2)
        self.assertEqual(sorted(i["category"] for i in trend["blog_ideas"]), sorted(BLOG_CATEGORIES))
        self.assertEqual(len(trend["blog_ideas"]), 7)

        call = llm.calls[0]
        self.assertEqual(call["temperature"], RESEARCH_TEMPERATURE)
        self.assertIn("NO-CODE", call["prompt"])
        self.assertIn("No-code and low-code tools", call["system"])

    def test_persisted_trend_is_a_valid_trend(self):
        result = ResearchSynthesizer(self.store, FakeLLM(research_completion())).research_for_path(
            self.path_b, "Agent frameworks")

        row = self.store.get("trends", result["trend_id"])
        trend = ResearchTrend.model_validate(row)
        self.assertEqual(trend.id, result["trend_id"])
        self.assertEqual(trend.path_id, self.path_b.id)
        self.assertEqual([card.name for card in trend.tools_detailed], ["Zapier", "Airtable"])
        self.assertNotIn("week_number", row)

    def test_conforming_ideas_stored_in_canonical_order(self):
        shuffled = list(reversed(BLOG_CATEGORIES))
        llm = FakeLLM(research_completion(ideas=blog_ideas(shuffled)))
        result = ResearchSynthesizer(self.store, llm).research_for_path(self.path_b, "Vector search")

        trend = self.store.get("trends", result["trend_id"])
        self.assertEqual([i["category"] for i in trend["blog_ideas"]], BLOG_CATEGORIES)

    def test_non_conforming_ideas_are_flagged(self):
        categories = ["Build", "Build", "Attract", "Convert", "Deliver", "Support", "Profit"]
        llm = FakeLLM(research_completion(ideas=blog_ideas(categories)))
        result = ResearchSynthesizer(self.store, llm).research_for_path(self.path_a, "Funnels")

        self.assertIn("blog ideas: repeated categories: Build", result["warnings"])
        self.assertIn("blog ideas: missing categories: Rest", result["warnings"])
        trend = self.store.get("trends", result["trend_id"])
        self.assertEqual([i["category"] for i in trend["blog_ideas"]], categories)

    def test_degraded_completion_still_persists(self):
        llm = FakeLLM("The model rambled without any JSON at all.")
        result = ResearchSynthesizer(self.store, llm).research_for_path(self.path_a, "Chatbots")

        self.assertTrue(result["degraded"])
        self.assertEqual(result["tool_count"], 0)
        trend = self.store.get("trends", result["trend_id"])
        self.assertEqual(trend["summary"], "The model rambled without any JSON at all.")
        self.assertEqual(trend["blog_ideas"], [])

    def test_topic_defaults_to_next_uncovered_for_path(self):
        self.store.insert("trends", {"path_id": self.path_a.id, "topic": CURRICULUM[0]})
        self.store.insert("trends", {"path_id": self.path_b.id, "topic": CURRICULUM[1]})
        synthesizer = ResearchSynthesizer(self.store, FakeLLM())

        self.assertEqual(synthesizer.choose_topic(self.path_a), CURRICULUM[1])
        self.assertEqual(synthesizer.choose_topic(self.path_b), CURRICULUM[0])
        self.assertEqual(synthesizer.choose_topic(self.path_a, "  Custom  "), "Custom")

    def test_previous_research_is_prompt_context(self):
        self.store.insert("trends", {
            "path_id": self.path_a.id,
            "topic": "Earlier topic",
            "summary": "s",
            "tools_mentioned": ["Glide"],
        })
        llm = FakeLLM(research_completion())
        ResearchSynthesizer(self.store, llm).research_for_path(self.path_a, "Next topic")

        self.assertIn("Previous research for Path A", llm.calls[0]["prompt"])
        self.assertIn("Earlier topic (Tools: Glide)", llm.calls[0]["prompt"])

    def test_provider_failure_persists_nothing(self):
        def fail(system, prompt):
            raise UpstreamProviderError("AI request failed (500): boom", status=500, body="boom")

        with self.assertRaises(UpstreamProviderError):
            ResearchSynthesizer(self.store, FakeLLM(responder=fail)).research_for_path(self.path_a, "x")
        self.assertEqual(self.store.select("trends"), [])


class TestRunModes(TempStoreMixin, unittest.TestCase):
    """Single, unconstrained and dual-path runs"""

    def test_dual_path_success(self):
        seed_paths(self.store)
        llm = FakeLLM(responder=lambda system, prompt: research_completion())
        result = ResearchSynthesizer(self.store, llm).run(topic="Shared topic")

        self.assertTrue(result["success"])
        self.assertEqual([r["status"] for r in result["results"]], ["ok", "ok"])
        self.assertEqual([r["path"] for r in result["results"]], ["Path A", "Path B"])
        self.assertEqual(len(self.store.select("trends")), 2)
        self.assertEqual(len(llm.calls), 2)

    def test_dual_path_partial_success(self):
        seed_paths(self.store)

        def respond(system, prompt):
            if '"Path B"' in prompt:
                raise UpstreamProviderError("AI request failed (529): overloaded", status=529, body="overloaded")
            return research_completion()

        result = ResearchSynthesizer(self.store, FakeLLM(responder=respond)).run_dual_path("Topic")

        self.assertFalse(result["success"])
        ok, failed = result["results"]
        self.assertEqual(ok["status"], "ok")
        self.assertEqual(failed["status"], "error")
        self.assertEqual(failed["path"], "Path B")
        self.assertIn("overloaded", failed["error"])
        trends = self.store.select("trends")
        self.assertEqual(len(trends), 1)
        self.assertEqual(trends[0]["id"], ok["trend_id"])

    def test_dual_path_total_failure_raises_first_error(self):
        seed_paths(self.store)

        def fail(system, prompt):
            raise UpstreamProviderError("AI request failed (401): bad key", status=401, body="bad key")

        with self.assertRaises(UpstreamProviderError):
            ResearchSynthesizer(self.store, FakeLLM(responder=fail)).run_dual_path()

    def test_dual_path_requires_both_paths(self):
        self.store.insert("paths", {"slug": "a", "name": "Path A"})
        with self.assertRaises(ValidationError):
            ResearchSynthesizer(self.store, FakeLLM()).run_dual_path()

    def test_single_path_by_id(self):
        path_a, _ = seed_paths(self.store)
        result = ResearchSynthesizer(self.store, FakeLLM(research_completion())).run(path_id=path_a["id"], topic="T")

        self.assertTrue(result["success"])
        self.assertEqual(len(result["results"]), 1)
        self.assertEqual(result["results"][0]["path_id"], path_a["id"])

    def test_unknown_path_id(self):
        with self.assertRaises(NotFoundError):
            ResearchSynthesizer(self.store, FakeLLM()).run(path_id="missing")

    def test_unconstrained_cycle(self):
        llm = FakeLLM(research_completion())
        result = ResearchSynthesizer(self.store, llm).run(dual_path=False)

        self.assertEqual(result["results"][0]["path"], "General")
        self.assertEqual(result["results"][0]["topic"], CURRICULUM[0])
        self.assertIsNone(self.store.select("trends")[0]["path_id"])
        self.assertNotIn("CRITICAL", llm.calls[0]["prompt"])


if __name__ == '__main__':
    unittest.main()
