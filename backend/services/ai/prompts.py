"""Prompt templates for research, copywriting and contract analysis"""

from typing import Dict, List, Optional

from schemas.domain import BLOG_CATEGORIES, Path

RESEARCH_TEMPERATURE = 0.6
COPY_TEMPERATURE = 0.7
CONTRACT_TEMPERATURE = 0.3

DEFAULT_FOCUS = "AI automation tools"

# Day label shown to the model for each blog category
CATEGORY_DESCRIPTIONS = {
    "Build": "Foundation/Setup/Infrastructure",
    "Attract": "Marketing/Outreach/Visibility",
    "Convert": "Sales/Persuasion/Closing",
    "Deliver": "Fulfillment/Product/Service Delivery",
    "Support": "Customer Success/Retention",
    "Profit": "Revenue/Optimization/Growth",
    "Rest": "Strategic Planning/Reflection/Recovery",
}

# Permitted tool vocabulary per path slug
PATH_CONSTRAINTS = {
    "a": """ONLY recommend NO-CODE and LOW-CODE tools such as:
- Visual builders: Bubble, Webflow, Framer, Softr, Glide
- Automation: Zapier, Make (Integromat), n8n, Tray.io
- Databases: Airtable, NocoDB, Baserow
- Forms: Typeform, Jotform, Tally
- Landing pages: Carrd, Unbounce, Instapage
- Email: Brevo, Mailchimp, ConvertKit
- Payment: Stripe (no-code), Gumroad, Lemon Squeezy
- Auth: Memberstack, Outseta

DO NOT include: Code-based solutions, AI APIs requiring programming, developer tools""",
    "b": """ONLY recommend AI API and DEVELOPER tools such as:
- AI APIs: OpenAI, Anthropic (Claude), Groq, Cohere, Replicate
- AI Platforms: HuggingFace, LangChain, LlamaIndex
- Development: Vercel, Railway, Render, Fly.io
- Databases: Supabase, Firebase, PlanetScale, Neon
- Vector DBs: Pinecone, Weaviate, Qdrant, Chroma
- Monitoring: Sentry, PostHog, LogRocket
- APIs: RapidAPI, Apify
- Backend: FastAPI, Express, Next.js API routes

DO NOT include: No-code builders, visual tools without APIs, drag-and-drop solutions""",
}


def research_system_prompt(path: Optional[Path]) -> str:
    focus = path.tech_stack_focus if path and path.tech_stack_focus else DEFAULT_FOCUS
    prompt = f"You are an AI research assistant specializing in {focus} for solopreneurs."
    if path:
        prompt += " You MUST ONLY recommend tools that match this specific path's focus."
    return prompt


def previous_research_context(previous: List[Dict], path: Optional[Path]) -> str:
    """Advisory summary of recent cycles so the model avoids repeating itself."""
    if not previous:
        return ""

    label = path.name if path else "this track"
    lines = []
    for i, row in enumerate(previous, 1):
        tools = ", ".join(row.get("tools_mentioned") or []) or "none recorded"
        lines.append(f"{i}. {row.get('topic', 'Unknown topic')} (Tools: {tools})")

    return (
        f"Previous research for {label}:\n" + "\n".join(lines)
        + "\n\nBuild upon these topics with fresh insights."
    )


def research_prompt(topic: str, path: Optional[Path], previous_context: str = "") -> str:
    focus = path.tech_stack_focus if path and path.tech_stack_focus else DEFAULT_FOCUS
    intro = f'You are researching for "{path.name}" which is focused on {focus}.' if path else \
        f"You are researching {focus} for solopreneurs."

    constraints = ""
    if path and path.slug in PATH_CONSTRAINTS:
        constraints = f"CRITICAL: {path.name} focuses on {focus}.\n\n{PATH_CONSTRAINTS[path.slug]}"

    framework = "\n".join(
        f"   - Day {i} ({category}): {CATEGORY_DESCRIPTIONS[category]}"
        for i, category in enumerate(BLOG_CATEGORIES, 1)
    )
    blog_lines = ",\n".join(
        f'    {{"category": "{category}", "title": "...", "description": "..."}}'
        for category in BLOG_CATEGORIES
    )

    return f"""{intro}

Research Topic: {topic}

{constraints}

Your task:
1. Provide a compelling 200-300 word summary of the TOP 3 most impactful trends happening RIGHT NOW for {focus} in this area.

2. Identify 4-6 specific, real tools that match this focus. For EACH tool provide:
   - Tool name
   - Brief description (1-2 sentences) explaining how it fits {focus}
   - Official website URL
   - Affiliate program information (check if they have partner/affiliate programs)
   - Pricing tier (Free/Freemium/Paid with approximate pricing)
   - Top 2-3 key features

3. Provide 3-5 actionable insights specifically for solopreneurs using {focus}.

4. Create EXACTLY 7 blog post ideas, one per category, in this order:
{framework}

Each blog idea must reference {focus} tools.

{previous_context}

Format as JSON:
{{
  "summary": "...",
  "tools": ["Tool Name 1", "Tool Name 2"],
  "tools_detailed": [
    {{
      "name": "Tool Name",
      "description": "Brief description highlighting {focus} fit",
      "website": "https://...",
      "affiliate_program": "Yes - details or No or Unknown",
      "pricing": "Free tier available, Pro at $X/month",
      "key_features": ["Feature 1", "Feature 2", "Feature 3"]
    }}
  ],
  "key_insights": ["Actionable insight 1", "Actionable insight 2", "Actionable insight 3"],
  "blog_ideas": [
{blog_lines}
  ]
}}"""


COPY_SYSTEM_PROMPT = (
    "You are an expert content writer for solopreneurs, specializing in AI automation "
    "and business growth strategies."
)


def copy_prompt(category: str, topic: str) -> str:
    return f"""Write an engaging, actionable blog post for solopreneurs about {topic} in the "{category}" phase of business development.

The post should:
- Be 800-1200 words
- Include practical, hands-on advice
- Mention 2-3 specific AI tools relevant to this topic
- Use a friendly, direct tone
- Include actionable takeaways
- Format in HTML with proper headings, paragraphs, and lists

After the article, also provide:
1. Excerpt: a compelling 150-character excerpt
2. Affiliate Suggestions: 2-3 affiliate link suggestions as a numbered list, each 'Tool name - why it fits'"""


CONTRACT_SYSTEM_PROMPT = (
    "You are an elite affiliate marketing consultant specializing in contract analysis. "
    "Provide detailed, actionable insights."
)


def contract_prompt(tool_name: str, website_url: str, contract_text: str,
                    affiliate_network: Optional[str] = None) -> str:
    return f"""You are an elite affiliate marketing expert with 20+ years of experience analyzing affiliate contracts.
Your specialty is extracting key terms, identifying risks, and providing strategic recommendations.

ANALYZE THIS AFFILIATE CONTRACT:

Tool: {tool_name}
Network: {affiliate_network or 'Direct'}
Website: {website_url or 'Unknown'}

CONTRACT TEXT:
{contract_text}

PROVIDE COMPREHENSIVE ANALYSIS IN THIS EXACT JSON FORMAT:

{{
  "commission_structure": {{
    "type": "percentage|flat_rate|hybrid|tiered",
    "primary_rate": "e.g., 20% or $50",
    "recurring_rate": "if applicable, or null",
    "tiers": [
      {{"threshold": "sales count or amount", "rate": "commission at this tier"}}
    ],
    "cookie_duration_days": 30
  }},
  "payment_terms": {{
    "frequency": "monthly|bi-weekly|weekly|on_demand",
    "threshold": 50.00,
    "methods": ["PayPal", "Bank Transfer", "Wire"],
    "payout_delay_days": 30
  }},
  "restrictions": {{
    "geographic": ["US only", "Worldwide except X"],
    "traffic": ["No PPC on brand terms", "No incentivized traffic"],
    "promotional": ["No coupon sites", "No email spam"],
    "compliance": ["Must disclose affiliate relationship", "GDPR compliant"],
    "prohibited_keywords": ["brand name + coupon", "free", "discount"]
  }},
  "analysis": {{
    "summary": "2-3 sentence executive summary of this contract",
    "rating": 8.5,
    "pros": ["..."],
    "cons": ["..."],
    "risk_level": "low|medium|high",
    "recommendations": ["..."]
  }},
  "monitoring_setup": {{
    "benchmarks": {{
      "target_conversion_rate": 2.5,
      "target_epc": 1.50,
      "target_monthly_revenue": 500
    }},
    "alert_thresholds": {{
      "low_conversion_alert": 1.0,
      "high_bounce_alert": 70,
      "payment_due_alert": 7
    }},
    "recommended_frequency": "daily|weekly|monthly"
  }},
  "key_action_items": ["..."]
}}

BE THOROUGH. Extract every relevant detail. If information is missing, note it in recommendations."""
