import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from skillsync.api.deps import get_recommendation_gateway
from skillsync.core.ratelimit import ai_rate_limiter
from skillsync.services.recommendations import (
    ENDPOINT_DESCRIPTION,
    RecommendationGateway,
    RecommendationRequestHandler,
)

router = APIRouter()


async def read_json_body(request: Request) -> tuple[Any, JSONResponse | None]:
    try:
        return await request.json(), None
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None, JSONResponse(
            status_code=400,
            content={"success": False, "error": "Request body must be valid JSON"},
        )


@router.post("/recommend-pathways")
async def recommend_pathways(
    request: Request,
    gateway: RecommendationGateway = Depends(get_recommendation_gateway),
):
    payload, invalid = await read_json_body(request)
    if invalid is not None:
        return invalid
    handler = RecommendationRequestHandler(gateway, limiter=ai_rate_limiter)
    status, envelope = await handler.handle(payload)
    return JSONResponse(status_code=status, content=envelope)


@router.get("/recommend-pathways")
def describe_recommend_pathways():
    return ENDPOINT_DESCRIPTION
