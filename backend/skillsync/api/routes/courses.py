from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from skillsync.api.deps import get_courses_gateway, get_recommendation_gateway
from skillsync.api.routes.recommendations import read_json_body
from skillsync.core.ratelimit import ai_rate_limiter
from skillsync.services.course_generation import CourseGenerationHandler
from skillsync.services.gateway import CollectionGateway
from skillsync.services.recommendations import RecommendationGateway

router = APIRouter(prefix="/courses")


@router.post("/generate")
async def generate_courses(
    request: Request,
    gateway: RecommendationGateway = Depends(get_recommendation_gateway),
    courses: CollectionGateway = Depends(get_courses_gateway),
):
    payload, invalid = await read_json_body(request)
    if invalid is not None:
        return invalid
    handler = CourseGenerationHandler(gateway, courses, limiter=ai_rate_limiter)
    status, envelope = await handler.handle(payload)
    return JSONResponse(status_code=status, content=envelope)
