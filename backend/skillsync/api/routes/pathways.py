from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from skillsync.api.deps import get_recommendation_gateway
from skillsync.api.routes.recommendations import read_json_body
from skillsync.core.ratelimit import ai_rate_limiter
from skillsync.services.recommendations import RecommendationGateway, RoadmapRequestHandler

router = APIRouter()


@router.post("/generate-pathway")
async def generate_pathway(
    request: Request,
    gateway: RecommendationGateway = Depends(get_recommendation_gateway),
):
    payload, invalid = await read_json_body(request)
    if invalid is not None:
        return invalid
    status, envelope = await RoadmapRequestHandler(gateway, limiter=ai_rate_limiter).handle(payload)
    return JSONResponse(status_code=status, content=envelope)
