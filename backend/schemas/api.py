"""API request and response schemas"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


# Research schemas
class SynthesizeRequest(BaseModel):
    topic: Optional[str] = None  # Next curriculum topic when absent
    path_id: Optional[str] = None
    dual_path: bool = True  # Only consulted when path_id is absent


class PathResult(BaseModel):
    path: Optional[str] = None
    path_id: Optional[str] = None
    status: str
    topic: Optional[str] = None
    trend_id: Optional[str] = None
    tool_count: int = 0
    degraded: bool = False
    warnings: List[str] = []
    error: Optional[str] = None


class SynthesizeResponse(BaseModel):
    success: bool
    message: str
    results: List[PathResult]


class ExportRequest(BaseModel):
    format: str = "json"
    ids: Optional[List[str]] = None


# Content schemas
class CopyRequest(BaseModel):
    category: str
    topic: Optional[str] = None


class AffiliateSuggestion(BaseModel):
    url: str = ""
    description: str


class CopyResponse(BaseModel):
    content: str
    excerpt: str
    affiliate_suggestions: List[AffiliateSuggestion]


# Affiliate schemas
class ContractAnalysisRequest(BaseModel):
    # Presence is checked by the analyzer so blanks get the same 400 as omissions
    tech_stack_id: Optional[str] = None
    contract_text: Optional[str] = None
    contract_url: Optional[str] = None
    affiliate_network: Optional[str] = None
    tracking_id: Optional[str] = None


class PopulateRequest(BaseModel):
    trend_id: Optional[str] = None
    week_number: Optional[int] = Field(None, ge=1, le=4)


class PopulateResponse(BaseModel):
    success: bool
    message: str
    summary: Dict[str, int]
    tools: List[Dict[str, Any]]
    errors: List[str]
    next_steps: List[str]
