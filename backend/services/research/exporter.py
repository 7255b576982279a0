"""
Research Exporter
Renders stored research trends as JSON, Markdown, CSV or printable HTML.
"""
import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from data.store import Store
from schemas.domain import as_text, as_text_list
from services.research.html_generator import ResearchHTMLGenerator, blog_idea_category, format_timestamp
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "markdown", "csv", "pdf")
CSV_HEADER = ["Date", "Topic", "Summary", "Tools", "Blog Ideas Count"]


@dataclass
class ExportDocument:
    content: str
    media_type: str
    filename: Optional[str] = None

    @property
    def headers(self) -> Dict[str, str]:
        if not self.filename:
            return {}
        return {"Content-Disposition": f'attachment; filename="{self.filename}"'}


def parse_ids(ids: Any) -> Optional[List[str]]:
    """Accept a list or a comma separated string; None or empty means no filter."""
    if ids is None:
        return None
    if isinstance(ids, str):
        ids = ids.split(",")
    cleaned = [str(i).strip() for i in ids if str(i).strip()]
    return cleaned or None


def render_json(trends: List[Dict[str, Any]], generated_at: datetime) -> str:
    return json.dumps({
        "generated_at": generated_at.isoformat(),
        "total_entries": len(trends),
        "research": trends,
    }, indent=2, default=str)


def render_markdown(trends: List[Dict[str, Any]], generated_at: datetime) -> str:
    # Free text is written as-is; markdown characters in model output are not escaped
    lines = [
        "# AI Automation Research Export",
        "",
        f"Generated: {generated_at.isoformat()}",
        "",
        f"Total Research Entries: {len(trends)}",
        "",
        "---",
        "",
    ]

    for i, trend in enumerate(trends, 1):
        lines += [
            f"## {i}. {as_text(trend.get('topic'))}",
            "",
            f"**Date:** {format_timestamp(trend.get('created_at'), '%Y-%m-%d')}",
            "",
            "### Summary",
            as_text(trend.get("summary")),
            "",
        ]

        tools = as_text_list(trend.get("tools_mentioned"))
        if tools:
            lines.append("### Tools Mentioned")
            lines += [f"- {tool}" for tool in tools]
            lines.append("")

        ideas = [idea for idea in trend.get("blog_ideas") or [] if isinstance(idea, dict)]
        if ideas:
            lines += [f"### Blog Ideas ({len(ideas)})", ""]
            for idea in ideas:
                lines += [
                    f"#### {blog_idea_category(idea)}: {as_text(idea.get('title'))}",
                    as_text(idea.get("description")),
                    "",
                ]

        lines += ["---", ""]

    return "\n".join(lines)


def render_csv(trends: List[Dict[str, Any]]) -> str:
    """One row per trend; insights, tool cards and idea bodies are dropped."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for trend in trends:
        writer.writerow([
            as_text(trend.get("created_at")),
            as_text(trend.get("topic")),
            as_text(trend.get("summary")),
            ", ".join(as_text_list(trend.get("tools_mentioned"))),
            len(trend.get("blog_ideas") or []),
        ])
    return buffer.getvalue()


class ResearchExporter:
    def __init__(self, store: Store):
        self.store = store

    def fetch(self, ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Trends newest-first, optionally restricted to `ids`."""
        return self.store.select("trends", ids=ids, order_by="created_at", descending=True)

    def export(self, format: str = "json", ids: Any = None,
               generated_at: Optional[datetime] = None) -> ExportDocument:
        format = (format or "json").strip().lower()
        if format not in EXPORT_FORMATS:
            raise ValidationError(f"format must be one of: {', '.join(EXPORT_FORMATS)}")

        trends = self.fetch(parse_ids(ids))
        generated_at = generated_at or datetime.now(timezone.utc)
        logger.info(f"Exporting {len(trends)} research entries as {format}")

        if format == "pdf":
            return ExportDocument(
                ResearchHTMLGenerator().generate_html_export(trends, generated_at), "text/html"
            )
        if format == "markdown":
            return ExportDocument(render_markdown(trends, generated_at), "text/markdown", "research-export.md")
        if format == "csv":
            return ExportDocument(render_csv(trends), "text/csv", "research-export.csv")
        return ExportDocument(render_json(trends, generated_at), "application/json")
