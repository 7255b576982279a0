"""Domain models and entities"""

import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

# Weekly content framework, one blog idea per day in this order
BLOG_CATEGORIES = ["Build", "Attract", "Convert", "Deliver", "Support", "Profit", "Rest"]

TREND_SOURCE = "anthropic-api"


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]


def as_number(value: Any) -> Optional[float]:
    """Pull the first number out of loose model output like "$50.00" or "30 days"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = re.search(r"-?\d+(?:\.\d+)?", str(value).replace(",", ""))
    return float(match.group(0)) if match else None


class SignupStatus(str, Enum):
    PENDING = "pending"
    REGISTERED = "registered"
    ACTIVE = "active"
    DECLINED = "declined"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Path(BaseModel):
    """A parallel content track with its own permitted tool vocabulary"""
    id: str
    slug: str
    name: str
    tech_stack_focus: str = ""


class ToolCard(BaseModel):
    """Tool recommendation as the model describes it"""
    name: str
    description: str = ""
    website: str = ""
    affiliate_program: str = ""
    pricing: str = ""
    key_features: List[str] = []

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("tool name cannot be empty")
        return v

    @field_validator("description", "website", "affiliate_program", "pricing", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_text(v)

    @field_validator("key_features", mode="before")
    @classmethod
    def _features(cls, v: Any) -> List[str]:
        return as_text_list(v)

    def has_affiliate_program(self) -> bool:
        """Loose match on the free-text affiliate status."""
        text = self.affiliate_program.lower()
        return "yes" in text or "available" in text


class BlogIdea(BaseModel):
    # Older completions label the category as "day"
    category: str = Field(validation_alias=AliasChoices("category", "day"))
    title: str = ""
    description: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, v: Any) -> str:
        text = as_text(v).strip()
        for category in BLOG_CATEGORIES:
            if text.lower() == category.lower():
                return category
        return text

    @field_validator("title", "description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_text(v)


class ResearchPayload(BaseModel):
    """Structured content recovered from one research completion"""
    summary: str = ""
    tools: List[str] = []
    tools_detailed: List[ToolCard] = []
    key_insights: List[str] = []
    blog_ideas: List[BlogIdea] = []
    degraded: bool = False


class ResearchTrend(BaseModel):
    """One persisted research cycle; the store assigns id and created_at"""
    id: Optional[str] = None
    path_id: Optional[str] = None
    topic: str
    summary: str = ""
    tools_mentioned: List[str] = []
    tools_detailed: List[ToolCard] = []
    key_insights: List[str] = []
    blog_ideas: List[BlogIdea] = []
    source: str = TREND_SOURCE
    tools_populated: bool = False
    week_number: Optional[int] = None
    created_at: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"id", "created_at", "week_number"})


class TechStackEntry(BaseModel):
    """Catalog row; (path_id, name) is unique"""
    id: Optional[str] = None
    path_id: Optional[str] = None
    name: str
    category: str = "Uncategorized"
    description: str = ""
    website_url: str = ""
    affiliate_url: Optional[str] = None
    pricing_model: str = ""
    key_features: List[str] = []
    signup_status: SignupStatus = SignupStatus.PENDING
    affiliate_notes: str = ""
    tools_detailed_source: Dict[str, Any] = {}
    priority_score: int = 70
    selected_for_week: bool = False
    auto_populated: bool = False
    week_number: Optional[int] = Field(None, ge=1, le=4)
    created_at: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude={"id", "created_at"})


# Contract analysis: the model must return all three of commission,
# payment and restrictions objects; the rest may be missing.

class CommissionTier(BaseModel):
    threshold: str = ""
    rate: str = ""

    @field_validator("threshold", "rate", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return as_text(v)


class CommissionStructure(BaseModel):
    type: Optional[str] = None
    primary_rate: Optional[str] = None
    recurring_rate: Optional[str] = None
    tiers: List[CommissionTier] = []
    cookie_duration_days: Optional[int] = None

    @field_validator("type", "primary_rate", "recurring_rate", mode="before")
    @classmethod
    def _rate_text(cls, v: Any) -> Optional[str]:
        return None if v is None else as_text(v)

    @field_validator("tiers", mode="before")
    @classmethod
    def _tiers(cls, v: Any) -> List[Any]:
        return [t for t in v if isinstance(t, dict)] if isinstance(v, list) else []

    @field_validator("cookie_duration_days", mode="before")
    @classmethod
    def _days(cls, v: Any) -> Optional[int]:
        number = as_number(v)
        return int(number) if number is not None else None


class PaymentTerms(BaseModel):
    frequency: Optional[str] = None
    threshold: Optional[float] = None
    methods: List[str] = []
    payout_delay_days: Optional[int] = None

    @field_validator("frequency", mode="before")
    @classmethod
    def _frequency(cls, v: Any) -> Optional[str]:
        return None if v is None else as_text(v)

    @field_validator("threshold", mode="before")
    @classmethod
    def _threshold(cls, v: Any) -> Optional[float]:
        return as_number(v)

    @field_validator("payout_delay_days", mode="before")
    @classmethod
    def _days(cls, v: Any) -> Optional[int]:
        number = as_number(v)
        return int(number) if number is not None else None

    @field_validator("methods", mode="before")
    @classmethod
    def _methods(cls, v: Any) -> List[str]:
        return as_text_list(v)


class Restrictions(BaseModel):
    geographic: List[str] = []
    traffic: List[str] = []
    promotional: List[str] = []
    compliance: List[str] = []
    prohibited_keywords: List[str] = []

    @field_validator("*", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        return as_text_list(v)


class QualitativeAnalysis(BaseModel):
    summary: str = ""
    rating: Optional[float] = None
    pros: List[str] = []
    cons: List[str] = []
    risk_level: RiskLevel = RiskLevel.MEDIUM
    recommendations: List[str] = []

    @field_validator("rating", mode="before")
    @classmethod
    def _rating(cls, v: Any) -> Optional[float]:
        number = as_number(v)
        if number is None:
            return None
        return min(10.0, max(0.0, number))

    @field_validator("risk_level", mode="before")
    @classmethod
    def _risk(cls, v: Any) -> str:
        text = as_text(v).strip().lower()
        return text if text in {r.value for r in RiskLevel} else RiskLevel.MEDIUM.value

    @field_validator("pros", "cons", "recommendations", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        return as_text_list(v)


class MonitoringSetup(BaseModel):
    benchmarks: Dict[str, Any] = {}
    alert_thresholds: Dict[str, Any] = {}
    recommended_frequency: str = "daily"

    @field_validator("benchmarks", "alert_thresholds", mode="before")
    @classmethod
    def _mapping(cls, v: Any) -> Dict[str, Any]:
        return v if isinstance(v, dict) else {}

    @field_validator("recommended_frequency", mode="before")
    @classmethod
    def _frequency(cls, v: Any) -> str:
        return as_text(v).strip() or "daily"


class ContractAnalysis(BaseModel):
    commission_structure: CommissionStructure
    payment_terms: PaymentTerms
    restrictions: Restrictions
    analysis: QualitativeAnalysis = Field(default_factory=QualitativeAnalysis)
    monitoring_setup: MonitoringSetup = Field(default_factory=MonitoringSetup)
    key_action_items: List[str] = []

    @field_validator("analysis", "monitoring_setup", mode="before")
    @classmethod
    def _optional_section(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("key_action_items", mode="before")
    @classmethod
    def _items(cls, v: Any) -> List[str]:
        return as_text_list(v)


class MonitoringAlert(BaseModel):
    tech_stack_id: str
    contract_id: str
    alert_type: str = "optimization"
    severity: str = "info"
    status: str = "open"
    title: str = "Action Required"
    description: str
    ai_recommendations: List[str] = []
    suggested_actions: List[str] = []
