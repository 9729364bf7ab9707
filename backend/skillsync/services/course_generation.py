"""
AI course generation for ``POST /courses/generate``.

Asks the model for a handful of courses in a domain, normalizes whatever it
returns into ``Course`` records, and saves each one to the user's course
collection as an unbookmarked row. A course that fails to save is skipped;
the request only fails when none could be saved.
"""

import json
import logging
import re
from typing import Any
from uuid import uuid4

from skillsync.core.errors import GatewayResponseError, RemoteStoreError, ValidationError
from skillsync.core.ratelimit import RateLimiter
from skillsync.schemas.api import Course, SkillLevel
from skillsync.services.ai import COURSE_COUNT
from skillsync.services.gateway import CollectionGateway
from skillsync.services.recommendations import AIRequestHandler, RecommendationGateway, failure_envelope

logger = logging.getLogger(__name__)

FIELDS_REQUIRED = "userId and domain are required"
GENERATION_FAILURE = "Failed to generate courses from AI"
COURSE_PARSE_FAILURE = "Failed to parse AI response"
INVALID_COURSES = "Invalid course data generated"
NOTHING_SAVED = "Failed to save any courses"

JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def course_row_data(course: Course) -> dict[str, Any]:
    return {
        "courseId": course.id,
        "title": course.title,
        "platform": course.platform,
        "instructor": course.instructor,
        "duration": course.duration,
        "difficulty": course.difficulty.value,
        "price": course.price,
        "rating": course.rating,
        "url": course.url,
        "category": course.category,
        "bookmarked": course.bookmarked,
        "completed": course.completed,
    }


def _number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_generated_courses(raw: str) -> list[Any]:
    # Web-aware models sometimes wrap the array in prose.
    match = JSON_ARRAY.search(raw or "")
    try:
        if match is None:
            raise ValueError("no JSON array in response")
        courses = json.loads(match.group(0))
    except ValueError as exc:
        logger.error("Failed to parse AI course response: %r", raw)
        raise GatewayResponseError(COURSE_PARSE_FAILURE) from exc
    if not isinstance(courses, list) or not courses:
        raise GatewayResponseError(INVALID_COURSES)
    return courses


def normalize_generated_course(item: dict[str, Any], domain: str) -> Course:
    difficulty = item.get("difficulty")
    if not isinstance(difficulty, str) or difficulty not in SkillLevel.__members__:
        difficulty = SkillLevel.intermediate
    rating = item.get("rating")
    return Course(
        id=f"gen_{uuid4().hex[:12]}",
        title=str(item.get("title") or "Untitled Course"),
        platform=str(item.get("platform") or "Unknown"),
        difficulty=difficulty,
        price=item["price"] if _number(item.get("price")) else 0.0,
        rating=min(5.0, max(0.0, rating)) if _number(rating) else 4.0,
        url=str(item.get("url") or "#"),
        category=str(item.get("category") or domain),
        bookmarked=False,
    )


class CourseGenerationHandler(AIRequestHandler):
    scope = "courses"

    def __init__(
        self,
        gateway: RecommendationGateway,
        courses: CollectionGateway,
        *,
        limiter: RateLimiter | None = None,
    ):
        super().__init__(gateway, limiter=limiter)
        self.courses = courses

    async def generate(self, payload: Any) -> dict[str, Any]:
        body = payload if isinstance(payload, dict) else {}
        user_id = body.get("userId")
        domain = body.get("domain")
        if not isinstance(user_id, str) or not user_id.strip() or not isinstance(domain, str) or not domain.strip():
            raise ValidationError(FIELDS_REQUIRED)
        user_id, domain = user_id.strip(), domain.strip()
        self.admit(user_id)

        raw = await self.gateway.generate_courses(domain)
        items = [item for item in parse_generated_courses(raw)[:COURSE_COUNT] if isinstance(item, dict)]
        if not items:
            raise GatewayResponseError(INVALID_COURSES)

        saved: list[dict[str, Any]] = []
        for item in items:
            course = normalize_generated_course(item, domain)
            try:
                row = await self.courses.add(user_id, course_row_data(course))
            except RemoteStoreError as exc:
                logger.warning("Failed to save generated course '%s': %s", course.title, exc.message)
                continue
            stored = course.model_copy(update={"db_id": row.get("$id"), "created_at": row.get("$createdAt")})
            saved.append(stored.to_wire())

        if not saved:
            raise GatewayResponseError(NOTHING_SAVED)
        return {"courses": saved, "count": len(saved)}

    async def handle(self, payload: Any) -> tuple[int, dict[str, Any]]:
        try:
            data = await self.generate(payload)
        except Exception as exc:
            return failure_envelope(exc, generic=GENERATION_FAILURE)
        return 200, {"success": True, "data": data}
