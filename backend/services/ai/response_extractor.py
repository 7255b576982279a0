"""
Model Response Extractor
Recovers structured data from free-text LLM completions.

Research and copy completions never fail extraction: malformed output
degrades to an impoverished but valid result. Contract analysis is the
exception, since a half-parsed contract would be misleading.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from schemas.domain import BlogIdea, ContractAnalysis, ResearchPayload, ToolCard, as_text, as_text_list
from utils.errors import ModelOutputError

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY_CHARS = 500

FENCED_HTML_RE = re.compile(r"```html[^\n]*\n(.*?)```", re.DOTALL | re.IGNORECASE)
BODY_RE = re.compile(r"<body[^>]*>(.*?)</body>", re.DOTALL | re.IGNORECASE)
ARTICLE_RE = re.compile(r"<article[^>]*>(.*?)</article>", re.DOTALL | re.IGNORECASE)

# A line that opens the model's postamble: "Excerpt:", "**Affiliate Link Suggestions**",
# "## 2. Affiliate ...", "<h2>Excerpt</h2>" and similar.
TRAILING_MARKER_RE = re.compile(
    r"^[ \t#*>_\-]*(?:<[^>]+>[ \t]*)*(?:\d+[.)][ \t]*)?(?:\*\*|__)?[ \t]*(?:excerpt|affiliate)\b",
    re.IGNORECASE | re.MULTILINE,
)


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse the largest brace-delimited region of `text` as a JSON object.

    Scans from the first "{" to the last "}" so prose and markdown fences
    around the object are ignored. Returns None when there is no such
    region or it does not parse to an object.
    """
    if not text:
        return None

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None

    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        logger.warning(f"Model JSON did not parse: {e}")
        return None

    return parsed if isinstance(parsed, dict) else None


def fallback_research_payload(text: str) -> ResearchPayload:
    """Degraded result: a prefix of the raw text as summary, nothing else."""
    return ResearchPayload(summary=(text or "")[:FALLBACK_SUMMARY_CHARS], degraded=True)


def _validate_items(items: Any, model: type, label: str) -> List[BaseModel]:
    """Validate list items one by one, dropping the ones that don't fit."""
    if not isinstance(items, list):
        return []

    valid = []
    for item in items:
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping malformed {label}: {e.errors()[0].get('msg', e)}")
    return valid


def extract_research_payload(text: str) -> ResearchPayload:
    """Turn a research completion into a ResearchPayload, degrading instead of raising."""
    data = extract_json_object(text)
    if data is None:
        logger.warning("No JSON object in research completion, using fallback payload")
        return fallback_research_payload(text)

    tools_detailed = _validate_items(data.get("tools_detailed"), ToolCard, "tool card")
    tools = as_text_list(data.get("tools"))
    if not tools and tools_detailed:
        tools = [card.name for card in tools_detailed]

    return ResearchPayload(
        summary=as_text(data.get("summary")).strip(),
        tools=tools,
        tools_detailed=tools_detailed,
        key_insights=as_text_list(data.get("key_insights")),
        blog_ideas=_validate_items(data.get("blog_ideas"), BlogIdea, "blog idea"),
    )


def extract_contract_analysis(text: str) -> ContractAnalysis:
    """Strict parse of a contract analysis; raises ModelOutputError on any shape problem."""
    data = extract_json_object(text)
    if data is None:
        raise ModelOutputError("AI did not return valid analysis")

    try:
        return ContractAnalysis.model_validate(data)
    except ValidationError as e:
        raise ModelOutputError(f"Failed to parse AI analysis: {e.error_count()} field error(s)")


def extract_html_body(text: str) -> str:
    """
    Isolate the article body from a copywriting completion.

    In order: the first ```html fenced block, the inside of <body>, the
    inside of <article>, else everything before the first postamble marker
    ("Excerpt", "Affiliate"). Best effort only: an article that itself
    starts a line with one of those words is cut there.
    """
    if not text:
        return ""

    candidate = text
    fenced = FENCED_HTML_RE.search(candidate)
    if fenced:
        candidate = fenced.group(1)

    body = BODY_RE.search(candidate)
    if body:
        return body.group(1).strip()

    article = ARTICLE_RE.search(candidate)
    if article:
        return article.group(1).strip()

    marker = TRAILING_MARKER_RE.search(candidate)
    if marker and marker.start() > 0:
        candidate = candidate[:marker.start()]

    return candidate.strip()
