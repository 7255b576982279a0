"""
HTML Research Export Generator
Creates print-optimized HTML of research trends for client-side "print to PDF".
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import html
from urllib.parse import urlparse

from schemas.domain import BLOG_CATEGORIES, ToolCard, as_text, as_text_list


def safe_link(url: str) -> Optional[str]:
    """The URL itself when it is a plain http(s) link, else None."""
    url = (url or "").strip()
    if urlparse(url).scheme.lower() in ("http", "https"):
        return url
    return None


def format_timestamp(value: Any, fmt: str = "%A, %B %d, %Y") -> str:
    """Render an ISO timestamp for humans, falling back to the raw value."""
    text = as_text(value)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).strftime(fmt)
    except ValueError:
        return text


def blog_idea_category(idea: Dict[str, Any]) -> str:
    """Category of a stored blog idea; older rows use "day"."""
    return as_text(idea.get("category") or idea.get("day"))


class ResearchHTMLGenerator:
    """
    Renders research trends as one styled HTML document.

    Every piece of model text is escaped. Each trend gets its own page when
    printed.
    """

    def generate_html_export(self, trends: List[Dict[str, Any]],
                             generated_at: Optional[datetime] = None) -> str:
        generated_at = generated_at or datetime.now()
        entries = "".join(self._get_entry(i, trend) for i, trend in enumerate(trends, 1))

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>AI Automation Research Export - {generated_at.strftime("%B %d, %Y")}</title>
    {self._get_css_styles()}
</head>
<body>
    {self._get_header(len(trends), generated_at)}
    {entries}
</body>
</html>"""

    def _get_css_styles(self) -> str:
        """Teal report theme with per-category badge colors and print page breaks."""
        category_rules = "\n".join(
            f"        .category-{category.lower()} {{ background: {color}; }}"
            for category, color in zip(BLOG_CATEGORIES, [
                "#3b82f6", "#14b8a6", "#f97316", "#eab308", "#ec4899", "#22c55e", "#64748b",
            ])
        )
        return """<style>
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }

        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif;
            line-height: 1.6;
            color: #1a1a1a;
            background: white;
            padding: 40px;
            max-width: 1000px;
            margin: 0 auto;
        }

        .header {
            border-bottom: 4px solid #14b8a6;
            padding-bottom: 20px;
            margin-bottom: 30px;
        }

        h1 {
            color: #14b8a6;
            font-size: 32px;
            margin-bottom: 10px;
        }

        .meta {
            color: #666;
            font-size: 14px;
            display: flex;
            gap: 20px;
            flex-wrap: wrap;
        }

        .research-entry {
            margin-bottom: 50px;
        }

        h2 {
            color: #0d9488;
            font-size: 24px;
            margin-bottom: 15px;
            padding-top: 20px;
        }

        h3 {
            color: #0f766e;
            font-size: 18px;
            margin: 20px 0 10px 0;
        }

        .entry-meta {
            color: #888;
            font-size: 13px;
            margin-bottom: 15px;
        }

        .summary {
            background: #f8f9fa;
            padding: 15px;
            border-radius: 8px;
            margin-bottom: 20px;
            line-height: 1.8;
        }

        .tool-badge {
            display: inline-block;
            background: #e0f2fe;
            color: #0369a1;
            padding: 6px 14px;
            border-radius: 16px;
            margin: 5px 5px 5px 0;
            font-size: 13px;
            font-weight: 600;
        }

        .tool-detailed {
            border: 2px solid #e0f2fe;
            border-radius: 8px;
            padding: 15px;
            margin: 15px 0;
            page-break-inside: avoid;
        }

        .tool-name {
            font-size: 16px;
            font-weight: 700;
            color: #0369a1;
            margin-bottom: 8px;
        }

        .tool-description {
            color: #4b5563;
            margin-bottom: 10px;
        }

        .tool-meta {
            display: flex;
            flex-wrap: wrap;
            gap: 15px;
            margin-bottom: 10px;
            font-size: 13px;
        }

        .tool-meta-label {
            font-weight: 600;
            color: #6b7280;
        }

        .tool-website {
            color: #0369a1;
            text-decoration: none;
            word-break: break-all;
        }

        .tool-affiliate {
            background: #dcfce7;
            color: #166534;
            padding: 4px 10px;
            border-radius: 4px;
            font-weight: 600;
            font-size: 12px;
        }

        .tool-affiliate-unknown {
            color: #6b7280;
            font-size: 12px;
        }

        .tool-features ul, .insights-section ul {
            margin: 5px 0 0 20px;
        }

        .insights-section {
            background: #fffbeb;
            border-left: 5px solid #f59e0b;
            padding: 15px 20px;
            margin: 20px 0;
            border-radius: 4px;
        }

        .insights-section li {
            color: #92400e;
            margin: 8px 0;
        }

        .blog-idea {
            background: #f8fafc;
            border-left: 5px solid #14b8a6;
            padding: 15px 20px;
            margin: 12px 0;
            page-break-inside: avoid;
            border-radius: 4px;
        }

        .blog-idea-header {
            display: flex;
            align-items: center;
            gap: 12px;
            margin-bottom: 8px;
        }

        .category-badge {
            display: inline-block;
            padding: 5px 12px;
            border-radius: 6px;
            font-size: 11px;
            font-weight: 700;
            color: white;
            background: #94a3b8;
            text-transform: uppercase;
            letter-spacing: 0.5px;
        }

""" + category_rules + """

        .blog-title {
            font-weight: 600;
            font-size: 15px;
        }

        .blog-description {
            color: #4b5563;
            font-size: 14px;
        }

        @media print {
            body {
                padding: 20px;
            }
            .research-entry {
                page-break-after: always;
            }
            .research-entry:last-child {
                page-break-after: auto;
            }
            h2 {
                page-break-after: avoid;
            }
        }

        @page {
            margin: 2cm;
        }
        </style>"""

    def _get_header(self, total: int, generated_at: datetime) -> str:
        return f"""<div class="header">
        <h1>AI Automation Research Export</h1>
        <div class="meta">
            <div><strong>Generated:</strong> {generated_at.strftime("%A, %B %d, %Y %H:%M")}</div>
            <div><strong>Total Research Entries:</strong> {total}</div>
        </div>
    </div>"""

    def _get_entry(self, index: int, trend: Dict[str, Any]) -> str:
        """One trend: summary, tools, insights and blog ideas."""
        return f"""
    <div class="research-entry">
        <h2>{index}. {html.escape(as_text(trend.get("topic")))}</h2>
        <p class="entry-meta">{html.escape(format_timestamp(trend.get("created_at")))}</p>
        <h3>Summary</h3>
        <div class="summary">{html.escape(as_text(trend.get("summary")))}</div>
        {self._get_tools_section(trend)}
        {self._get_insights_section(as_text_list(trend.get("key_insights")))}
        {self._get_blog_ideas_section(trend.get("blog_ideas") or [])}
    </div>"""

    def _get_tools_section(self, trend: Dict[str, Any]) -> str:
        """Detailed tool cards, or plain name badges when no cards were stored."""
        cards = []
        for raw in trend.get("tools_detailed") or []:
            try:
                cards.append(ToolCard.model_validate(raw))
            except ValueError:
                continue

        if cards:
            tools_html = "".join(self._get_tool_card(card) for card in cards)
            return f"""<div class="tools-section">
            <h3>Tools &amp; Platforms for Affiliate Sign-Up ({len(cards)})</h3>
            {tools_html}
        </div>"""

        names = as_text_list(trend.get("tools_mentioned"))
        if not names:
            return ""

        badges = "".join(f'<span class="tool-badge">{html.escape(name)}</span>' for name in names)
        return f"""<div class="tools-section">
            <h3>Tools &amp; Platforms ({len(names)})</h3>
            <div>{badges}</div>
        </div>"""

    def _get_tool_card(self, card: ToolCard) -> str:
        if card.has_affiliate_program():
            affiliate = f'<span class="tool-affiliate">AFFILIATE PROGRAM: {html.escape(card.affiliate_program)}</span>'
        else:
            affiliate = f'<span class="tool-affiliate-unknown">Affiliate: {html.escape(card.affiliate_program or "Unknown")}</span>'

        features = ""
        if card.key_features:
            items = "".join(f"<li>{html.escape(feature)}</li>" for feature in card.key_features)
            features = f'<div class="tool-features"><strong>Key Features:</strong><ul>{items}</ul></div>'

        website = html.escape(card.website, quote=True)
        link = safe_link(card.website)
        if link:
            website = f'<a href="{html.escape(link, quote=True)}" class="tool-website" target="_blank">{website}</a>'
        return f"""<div class="tool-detailed">
                <div class="tool-name">{html.escape(card.name)}</div>
                <div class="tool-description">{html.escape(card.description)}</div>
                <div class="tool-meta">
                    <div><span class="tool-meta-label">Website:</span>
                        {website}</div>
                    <div><span class="tool-meta-label">Pricing:</span> {html.escape(card.pricing)}</div>
                </div>
                <div>{affiliate}</div>
                {features}
            </div>"""

    def _get_insights_section(self, insights: List[str]) -> str:
        if not insights:
            return ""

        items = "".join(f"<li>{html.escape(insight)}</li>" for insight in insights)
        return f"""<div class="insights-section">
            <h3>Key Actionable Insights</h3>
            <ul>{items}</ul>
        </div>"""

    def _get_blog_ideas_section(self, ideas: List[Dict[str, Any]]) -> str:
        ideas = [idea for idea in ideas if isinstance(idea, dict)]
        if not ideas:
            return ""

        cards = ""
        for idea in ideas:
            category = blog_idea_category(idea)
            css_class = f"category-{category.lower()}" if category in BLOG_CATEGORIES else ""
            cards += f"""<div class="blog-idea">
                <div class="blog-idea-header">
                    <span class="{css_class} category-badge">{html.escape(category)}</span>
                    <span class="blog-title">{html.escape(as_text(idea.get("title")))}</span>
                </div>
                <p class="blog-description">{html.escape(as_text(idea.get("description")))}</p>
            </div>"""

        return f"""<div class="blog-ideas-section">
            <h3>Blog Content Ideas ({len(ideas)})</h3>
            {cards}
        </div>"""
