"""
Copy Generator
Turns a (category, topic) pair into a blog article HTML fragment, an excerpt
and placeholder affiliate suggestions.
"""
import html
import logging
import re
from typing import Any, Dict, List, Optional

from integrations.anthropic_client import LLMClient
from schemas.domain import BLOG_CATEGORIES
from services.ai import prompts
from services.ai.response_extractor import extract_html_body
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "AI automation for solopreneurs"
EXCERPT_MAX_CHARS = 150
MAX_AFFILIATE_SUGGESTIONS = 5

HEAD_RE = re.compile(r"<head[^>]*>.*?</head>", re.DOTALL | re.IGNORECASE)
TITLE_RE = re.compile(r"<title[^>]*>.*?</title>", re.DOTALL | re.IGNORECASE)
LEADING_H1_RE = re.compile(r"^\s*<h1[^>]*>.*?</h1>", re.DOTALL | re.IGNORECASE)
DOCTYPE_RE = re.compile(r"<!doctype[^>]*>|</?html[^>]*>", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
PARAGRAPH_RE = re.compile(r"<p[^>]*>(.*?)</p>", re.DOTALL | re.IGNORECASE)

# Tried in order; the first match wins
EXCERPT_PATTERNS = [
    # Excerpt: text on the same line
    re.compile(r"excerpt(?:\s*\([^)]*\))?\s*(?:\*\*|__)?\s*:\s*(?:\*\*|__)?[ \t]*(\S[^\n]*)", re.IGNORECASE),
    # Excerpt heading with the text on the next non-empty line
    re.compile(r"excerpt[^\n]*\n\s*(?:<p[^>]*>)?\s*(\S[^\n]*)", re.IGNORECASE),
    # Excerpt marked up as HTML
    re.compile(r"<(?:p|div)[^>]*class=[\"'][^\"']*excerpt[^\"']*[\"'][^>]*>(.*?)</(?:p|div)>",
               re.DOTALL | re.IGNORECASE),
]

AFFILIATE_HEADING_RE = re.compile(
    r"^[ \t#*>_\-]*(?:<[^>]+>[ \t]*)*(?:\d+[.)][ \t]*)?(?:\*\*|__)?[ \t]*affiliate[^\n]*\n",
    re.IGNORECASE | re.MULTILINE,
)
LIST_ITEM_RE = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s+(.+?)\s*$", re.MULTILINE)
HTML_LIST_ITEM_RE = re.compile(r"<li[^>]*>(.*?)</li>", re.DOTALL | re.IGNORECASE)


def strip_tags(text: str) -> str:
    return html.unescape(TAG_RE.sub("", text or "")).strip()


def _clean_inline(text: str) -> str:
    """Strip tags, markdown emphasis and surrounding quotes from one extracted line."""
    cleaned = strip_tags(text).replace("**", "").replace("__", "")
    return cleaned.strip().strip("\"'").strip()


def tidy_article(body: str) -> str:
    """Drop document chrome and the leading title, and wrap bare prose in paragraphs."""
    content = HEAD_RE.sub("", body)
    content = TITLE_RE.sub("", content)
    content = DOCTYPE_RE.sub("", content)
    content = LEADING_H1_RE.sub("", content, count=1).strip()

    if content and not TAG_RE.search(content):
        blocks = [b.strip() for b in re.split(r"\n\s*\n", content) if b.strip()]
        content = "\n".join(f"<p>{html.escape(b)}</p>" for b in blocks)

    return content


def truncate(text: str, limit: int = EXCERPT_MAX_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3].rstrip() + "..."


def extract_excerpt(completion: str, content: str) -> str:
    for pattern in EXCERPT_PATTERNS:
        match = pattern.search(completion)
        if match:
            excerpt = _clean_inline(match.group(1))
            if excerpt:
                return truncate(excerpt)

    paragraph = PARAGRAPH_RE.search(content)
    first = strip_tags(paragraph.group(1)) if paragraph else strip_tags(content)
    return truncate(" ".join(first.split()))


def extract_affiliate_suggestions(completion: str) -> List[Dict[str, str]]:
    """
    Numbered or bulleted items following an "Affiliate" heading.

    URLs are left blank: they are placeholders for an operator to fill in.
    """
    headings = list(AFFILIATE_HEADING_RE.finditer(completion or ""))
    if not headings:
        return []

    # The postamble comes last, so the final heading is the one that counts
    tail = completion[headings[-1].end():]
    items = [m.group(1) for m in HTML_LIST_ITEM_RE.finditer(tail)]
    if not items:
        items = []
        for line in tail.splitlines():
            if not line.strip():
                if items:
                    break
                continue
            match = LIST_ITEM_RE.match(line)
            if match:
                items.append(match.group(1))
            elif items:
                break

    suggestions = []
    for item in items[:MAX_AFFILIATE_SUGGESTIONS]:
        description = _clean_inline(item)
        if description:
            suggestions.append({"url": "", "description": description})
    return suggestions


class CopyGenerator:
    def __init__(self, llm: LLMClient):
        self.llm = llm

    def generate(self, category: str, topic: Optional[str] = None) -> Dict[str, Any]:
        normalized = next((c for c in BLOG_CATEGORIES if c.lower() == (category or "").strip().lower()), None)
        if normalized is None:
            raise ValidationError(f"category must be one of: {', '.join(BLOG_CATEGORIES)}")

        subject = (topic or "").strip() or DEFAULT_TOPIC
        logger.info(f"Generating {normalized} article on '{subject}'")

        completion = self.llm.complete(
            prompts.COPY_SYSTEM_PROMPT,
            prompts.copy_prompt(normalized, subject),
            prompts.COPY_TEMPERATURE,
        )

        content = tidy_article(extract_html_body(completion))
        excerpt = extract_excerpt(completion, content)
        suggestions = extract_affiliate_suggestions(completion)
        logger.info(f"Article ready: {len(content)} chars, {len(suggestions)} affiliate suggestions")

        return {
            "content": content,
            "excerpt": excerpt,
            "affiliate_suggestions": suggestions,
        }
