from __future__ import annotations

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from tripscout.agents.orchestrator import QueryPlan, SearchOrchestrator
from tripscout.api.deps import ensure_model_credentials, resolve_search_api_key
from tripscout.config import settings
from tripscout.models.schemas import EnvStatusResponse, SearchRequest
from tripscout.services import logger as log_service

router = APIRouter(prefix="/api/search", tags=["search"])

STREAM_VERSION_HEADER = "x-tripscout-stream"
STREAM_VERSION = "v1"


@router.post("")
async def search(request: SearchRequest):
    """Stream search progress, sources and the cited answer as SSE events."""
    query = request.resolve_query()
    if not query:
        raise HTTPException(status_code=400, detail="Query is required")

    search_api_key = resolve_search_api_key(request)
    ensure_model_credentials(request.model_provider)

    plan = QueryPlan.from_request(request, query=query, search_api_key=search_api_key)
    orchestrator = SearchOrchestrator(request.model_provider)
    log_service.log_event(
        event_type="search_request",
        message="Search request accepted",
        request_id=plan.request_id,
        query=query[:100],
    )

    async def event_generator():
        async for event in orchestrator.run(plan):
            yield event.to_sse()

    return EventSourceResponse(
        event_generator(),
        headers={STREAM_VERSION_HEADER: STREAM_VERSION},
    )


@router.get("/check-env", response_model=EnvStatusResponse)
async def check_env():
    """Report which server-side credentials are configured."""
    return EnvStatusResponse(
        has_firecrawl_key=bool(settings.firecrawl_api_key),
        has_openai_key=bool(settings.openai_api_key),
        has_deepseek_key=bool(settings.deepseek_api_key),
    )
