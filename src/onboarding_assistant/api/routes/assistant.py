"""API routes for the embedded assistant widget."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...context import ContextResolver, normalize_route
from ...schemas import QueryRequest, QueryResponse, RouteContext
from ...service import AssistantService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_assistant_service(request: Request) -> AssistantService:
    return request.app.state.assistant_service


def get_context_resolver(request: Request) -> ContextResolver:
    return request.app.state.context_resolver


@router.post("/query", response_model=QueryResponse, response_model_exclude_none=True)
async def query(
    payload: QueryRequest,
    service: AssistantService = Depends(get_assistant_service),
    resolver: ContextResolver = Depends(get_context_resolver),
):
    """Answer a question about the page the user is on."""
    logger.info(
        "[API] Received query for route '%s' with thread id '%s'",
        payload.route,
        payload.thread_id or "<none>",
    )

    if not payload.query or not payload.query.strip():
        logger.warning("[API] Rejected empty query request")
        raise HTTPException(status_code=400, detail="Query cannot be empty")

    context = await resolver.resolve(normalize_route(payload.route))
    response = await service.process_query(payload.query, context, payload.thread_id)

    logger.info(
        "[API] Query processed. Thread id '%s', message length %d",
        response.thread_id,
        len(response.message),
    )
    return response


@router.get("/context", response_model=RouteContext)
async def get_context(
    route: str = Query(default=""),
    resolver: ContextResolver = Depends(get_context_resolver),
):
    """Return the context known for a route."""
    if not route or not route.strip():
        raise HTTPException(status_code=400, detail="Route cannot be empty")

    return await resolver.resolve(route)
