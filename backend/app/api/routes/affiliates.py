"""Affiliate contract analysis routes"""

import logging

from fastapi import APIRouter, Depends, Request

from config import config
from data.store import Store
from integrations.anthropic_client import LLMClient
from schemas.api import ContractAnalysisRequest
from services.affiliates.contract_analyzer import ContractAnalyzer
from shared_services import get_llm, get_store, require_credentials
from utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/contracts/analyze", dependencies=[Depends(require_credentials(require_llm=True))])
@limiter.limit(config.CONTENT_RATE_LIMIT)
def analyze_contract(request: Request,
                     body: ContractAnalysisRequest,
                     store: Store = Depends(get_store),
                     llm: LLMClient = Depends(get_llm)):
    """
    Analyze a pasted affiliate contract.

    Submitting a contract marks the referenced tool as an active affiliate.
    """
    return ContractAnalyzer(store, llm).analyze(
        body.tech_stack_id,
        body.contract_text,
        contract_url=body.contract_url,
        affiliate_network=body.affiliate_network,
        tracking_id=body.tracking_id,
    )
