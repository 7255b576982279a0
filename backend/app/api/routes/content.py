"""Blog copywriting routes"""

import logging

from fastapi import APIRouter, Depends, Request

from config import config
from integrations.anthropic_client import LLMClient
from schemas.api import CopyRequest, CopyResponse
from services.content.copywriter import CopyGenerator
from shared_services import get_llm, require_credentials
from utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/copy",
    response_model=CopyResponse,
    dependencies=[Depends(require_credentials(require_llm=True))],
)
@limiter.limit(config.CONTENT_RATE_LIMIT)
def generate_copy(request: Request, body: CopyRequest, llm: LLMClient = Depends(get_llm)):
    """Write an article for one framework category; affiliate URLs come back blank."""
    return CopyGenerator(llm).generate(body.category, body.topic)
