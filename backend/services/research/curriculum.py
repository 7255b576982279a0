"""30-day research curriculum and topic selection"""

from typing import Dict, Iterable, List, Optional

# Strategic research cycles organized by business phase
STRATEGIC_CYCLES: Dict[str, List[str]] = {
    "Week 1: Foundation Building": [
        "AI-powered no-code development platforms for rapid MVP creation",
        "Automated business infrastructure setup (legal, accounting, compliance)",
        "AI tools for market research and competitor analysis",
        "Intelligent product roadmap planning and feature prioritization",
        "Automated tech stack selection and integration planning",
        "AI-driven brand identity and positioning tools",
        "Smart business model validation and pivot detection",
    ],
    "Week 2: Audience Attraction": [
        "AI automation for social media outreach and engagement",
        "Advanced SEO automation and content optimization tools",
        "AI-powered influencer discovery and partnership automation",
        "Intelligent paid advertising optimization and budget allocation",
        "Automated email list building and lead magnet creation",
        "AI-driven content distribution and cross-platform syndication",
        "Smart community building and engagement automation",
    ],
    "Week 3: Conversion & Delivery": [
        "AI sales funnel optimization and A/B testing automation",
        "Intelligent pricing strategy and dynamic pricing tools",
        "Automated onboarding and user activation sequences",
        "AI-powered product recommendation engines",
        "Smart checkout optimization and cart abandonment recovery",
        "Automated course and digital product delivery systems",
        "AI-driven upsell and cross-sell automation",
    ],
    "Week 4: Support, Profit & Growth": [
        "AI customer support automation and chatbot intelligence",
        "Automated financial forecasting and profit optimization",
        "Intelligent churn prediction and retention automation",
        "AI-powered analytics dashboards and insight generation",
        "Automated referral programs and viral growth loops",
        "Smart resource allocation and burnout prevention tools",
        "AI-driven strategic planning and goal tracking systems",
    ],
}

CURRICULUM: List[str] = [topic for topics in STRATEGIC_CYCLES.values() for topic in topics]


def next_topic(curriculum: List[str], already_covered: Iterable[str],
               last_topic: Optional[str] = None) -> str:
    """
    Pick the next topic to research.

    The first curriculum topic not in `already_covered` wins. Once every
    topic has been covered, selection continues cyclically from the entry
    after `last_topic` (or from the start when that is unknown).
    """
    if not curriculum:
        raise ValueError("Curriculum cannot be empty")

    covered = set(already_covered)
    for topic in curriculum:
        if topic not in covered:
            return topic

    if last_topic in curriculum:
        return curriculum[(curriculum.index(last_topic) + 1) % len(curriculum)]
    return curriculum[0]
