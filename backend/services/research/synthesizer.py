"""
Research Synthesizer
Runs one LLM research cycle per content path and persists the result as a trend.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from data.store import Store
from integrations.anthropic_client import LLMClient
from schemas.domain import BLOG_CATEGORIES, BlogIdea, Path, ResearchTrend
from services.ai import prompts
from services.ai.response_extractor import extract_research_payload
from services.research.curriculum import CURRICULUM, next_topic
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

PREVIOUS_CONTEXT_LIMIT = 5
DUAL_PATH_SLUGS = ("a", "b")


def blog_idea_problems(ideas: List[BlogIdea]) -> List[str]:
    """Ways a list of blog ideas breaks the one-per-category weekly framework."""
    problems = []
    if len(ideas) != len(BLOG_CATEGORIES):
        problems.append(f"expected {len(BLOG_CATEGORIES)} blog ideas, got {len(ideas)}")

    seen = [idea.category for idea in ideas]
    unknown = sorted({c for c in seen if c not in BLOG_CATEGORIES})
    if unknown:
        problems.append(f"unknown categories: {', '.join(unknown)}")

    repeated = sorted({c for c in seen if seen.count(c) > 1})
    if repeated:
        problems.append(f"repeated categories: {', '.join(repeated)}")

    missing = [c for c in BLOG_CATEGORIES if c not in seen]
    if missing:
        problems.append(f"missing categories: {', '.join(missing)}")

    return problems


def order_blog_ideas(ideas: List[BlogIdea]) -> List[BlogIdea]:
    """Sort conforming ideas into Build..Rest order."""
    return sorted(ideas, key=lambda idea: BLOG_CATEGORIES.index(idea.category))


def _error_text(exc: BaseException) -> str:
    return str(exc.detail) if isinstance(exc, HTTPException) else str(exc)


class ResearchSynthesizer:
    """Builds research prompts, calls the model, and stores one trend per cycle."""

    def __init__(self, store: Store, llm: LLMClient, curriculum: Optional[List[str]] = None):
        self.store = store
        self.llm = llm
        self.curriculum = curriculum or CURRICULUM

    def get_path(self, path_id: str) -> Path:
        row = self.store.get("paths", path_id)
        if not row:
            raise NotFoundError(f"Path not found: {path_id}")
        return Path.model_validate(row)

    def get_dual_paths(self) -> List[Path]:
        rows = self.store.select("paths", order_by="slug", descending=False)
        by_slug = {row.get("slug"): row for row in rows}
        if any(slug not in by_slug for slug in DUAL_PATH_SLUGS):
            raise ValidationError("Both paths (A and B) must be configured in the database")
        return [Path.model_validate(by_slug[slug]) for slug in DUAL_PATH_SLUGS]

    def choose_topic(self, path: Optional[Path], requested: Optional[str] = None) -> str:
        if requested and requested.strip():
            return requested.strip()

        history = self.store.select(
            "trends",
            filters={"path_id": path.id if path else None},
            columns=["topic"],
        )
        covered = [row.get("topic") for row in history]
        last_topic = covered[0] if covered else None
        return next_topic(self.curriculum, covered, last_topic)

    def research_for_path(self, path: Optional[Path], topic: Optional[str] = None) -> Dict[str, Any]:
        """One full cycle: context, prompt, completion, extraction, persistence."""
        path_id = path.id if path else None
        label = path.name if path else "General"

        previous = self.store.select(
            "trends",
            filters={"path_id": path_id},
            limit=PREVIOUS_CONTEXT_LIMIT,
            columns=["topic", "summary", "tools_mentioned", "created_at"],
        )
        research_topic = self.choose_topic(path, topic)
        logger.info(f"Researching '{research_topic}' for {label} ({len(previous)} prior cycles as context)")

        prompt = prompts.research_prompt(
            research_topic, path, prompts.previous_research_context(previous, path)
        )
        text = self.llm.complete(prompts.research_system_prompt(path), prompt, prompts.RESEARCH_TEMPERATURE)
        payload = extract_research_payload(text)

        warnings = []
        if payload.degraded:
            warnings.append("model output was not valid JSON; stored a summary-only fallback")

        blog_ideas = payload.blog_ideas
        problems = blog_idea_problems(blog_ideas)
        if problems:
            logger.warning(f"Non-conforming blog ideas for {label}: {'; '.join(problems)}")
            warnings.extend(f"blog ideas: {p}" for p in problems)
        else:
            blog_ideas = order_blog_ideas(blog_ideas)

        trend = ResearchTrend(
            path_id=path_id,
            topic=research_topic,
            summary=payload.summary,
            tools_mentioned=payload.tools,
            tools_detailed=payload.tools_detailed,
            key_insights=payload.key_insights,
            blog_ideas=blog_ideas,
        )
        saved = self.store.insert("trends", trend.to_record())
        logger.info(f"Saved trend {saved['id']} for {label} with {len(payload.tools)} tools")

        return {
            "path": label,
            "path_id": path_id,
            "topic": research_topic,
            "trend_id": saved["id"],
            "tool_count": len(payload.tools),
            "degraded": payload.degraded,
            "warnings": warnings,
        }

    def run_dual_path(self, topic: Optional[str] = None) -> Dict[str, Any]:
        """
        Research both paths concurrently and report each unit separately.

        A failure in one path does not discard the other; when every path
        fails, the first failure is raised.
        """
        paths = self.get_dual_paths()

        with ThreadPoolExecutor(max_workers=len(paths)) as pool:
            futures = [pool.submit(self.research_for_path, path, topic) for path in paths]

        results = []
        failures = []
        for path, future in zip(paths, futures):
            exc = future.exception()
            if exc is None:
                results.append({**future.result(), "status": "ok"})
            else:
                logger.error(f"Research failed for {path.name}: {_error_text(exc)}")
                failures.append(exc)
                results.append({
                    "path": path.name,
                    "path_id": path.id,
                    "status": "error",
                    "error": _error_text(exc),
                })

        if len(failures) == len(paths):
            raise failures[0]

        succeeded = len(paths) - len(failures)
        return {
            "success": not failures,
            "message": "Research completed for both paths" if not failures
            else f"Research completed for {succeeded} of {len(paths)} paths",
            "results": results,
        }

    def run(self, path_id: Optional[str] = None, topic: Optional[str] = None,
            dual_path: bool = True) -> Dict[str, Any]:
        """Entry point: a single named path, both paths, or one unconstrained cycle."""
        if path_id:
            result = self.research_for_path(self.get_path(path_id), topic)
        elif dual_path:
            return self.run_dual_path(topic)
        else:
            result = self.research_for_path(None, topic)

        return {
            "success": True,
            "message": f"Research completed for {result['path']}",
            "results": [{**result, "status": "ok"}],
        }
