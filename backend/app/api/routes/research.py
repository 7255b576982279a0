"""Research synthesis and export routes"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from config import config
from data.store import Store
from integrations.anthropic_client import LLMClient
from middleware.auth_dependencies import get_authenticated_user
from schemas.api import ExportRequest, SynthesizeRequest, SynthesizeResponse
from services.research.exporter import ResearchExporter
from services.research.synthesizer import ResearchSynthesizer
from shared_services import get_llm, get_store, require_credentials
from utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/synthesize",
    response_model=SynthesizeResponse,
    dependencies=[Depends(require_credentials(require_llm=True))],
)
@limiter.limit(config.RESEARCH_RATE_LIMIT)
def synthesize(request: Request,
               body: Optional[SynthesizeRequest] = None,
               store: Store = Depends(get_store),
               llm: LLMClient = Depends(get_llm)):
    """
    Run a research cycle.

    With `path_id` one path is researched; otherwise both configured paths
    run concurrently (or a single unconstrained cycle when `dual_path` is
    false). Per-path outcomes are reported individually.
    """
    body = body or SynthesizeRequest()
    logger.info(f"Research requested: path_id={body.path_id} dual_path={body.dual_path} topic={body.topic!r}")
    return ResearchSynthesizer(store, llm).run(body.path_id, body.topic, body.dual_path)


def _export_response(store: Store, format: str, ids: Any, user: Dict[str, Any]) -> Response:
    logger.info(f"Export requested by {user.get('email') or user.get('id')} as {format}")
    document = ResearchExporter(store).export(format, ids)
    return Response(content=document.content, media_type=document.media_type, headers=document.headers)


@router.get("/export", dependencies=[Depends(require_credentials(require_llm=False))])
@limiter.limit(config.DEFAULT_RATE_LIMIT)
def export_research(request: Request,
                    format: str = Query("json"),
                    ids: Optional[str] = Query(None, description="Comma separated trend ids"),
                    user: Dict[str, Any] = Depends(get_authenticated_user),
                    store: Store = Depends(get_store)):
    """Export research trends newest-first as json, markdown, csv or printable html (pdf)."""
    return _export_response(store, format, ids, user)


@router.post("/export", dependencies=[Depends(require_credentials(require_llm=False))])
@limiter.limit(config.DEFAULT_RATE_LIMIT)
def export_research_post(request: Request,
                         body: Optional[ExportRequest] = None,
                         user: Dict[str, Any] = Depends(get_authenticated_user),
                         store: Store = Depends(get_store)):
    body = body or ExportRequest()
    return _export_response(store, body.format, body.ids, user)
