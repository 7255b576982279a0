"""Tech stack catalog routes"""

from fastapi import APIRouter, Depends, Request

from config import config
from data.store import Store
from schemas.api import PopulateRequest, PopulateResponse
from services.affiliates.tool_populator import ToolPopulator
from shared_services import get_store, require_credentials
from utils.rate_limit import limiter

router = APIRouter()


@router.post(
    "/populate",
    response_model=PopulateResponse,
    dependencies=[Depends(require_credentials(require_llm=False))],
)
@limiter.limit(config.DEFAULT_RATE_LIMIT)
def populate_tech_stacks(request: Request, body: PopulateRequest, store: Store = Depends(get_store)):
    """Copy a research trend's tool cards into the catalog (once per trend)."""
    return ToolPopulator(store).populate(body.trend_id, body.week_number)
