"""
Recommendation request handling.

Turns a client-submitted profile into validated AI output or a structured
error. Validation failures never reach the gateway, raw provider text is only
logged, and ``handle`` always returns a ``(status, envelope)`` pair.
"""

import json
import logging
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError

from skillsync.core.config import settings
from skillsync.core.errors import (
    ConfigurationError,
    GatewayResponseError,
    RateLimitedError,
    SkillSyncError,
    ValidationError,
)
from skillsync.core.ratelimit import RateLimiter
from skillsync.schemas.api import CareerRecommendation, Education, Experience, Profile, Skill

logger = logging.getLogger(__name__)

PROFILE_REQUIRED = "Profile data is required"
USER_ID_REQUIRED = "Profile must include userId"
INSUFFICIENT_PROFILE = (
    "Profile must include at least one of: skills, education, experience, or assessment scores"
)
PATHWAY_TITLE_REQUIRED = "pathwayTitle is required and must be a non-empty string"
PARSE_FAILURE = "Failed to parse AI response. Please try again."
INVALID_FORMAT = "Invalid response format from AI"
INVALID_STEP = "Invalid step format in AI response"
INVALID_RESOURCE = "Invalid resource format in AI response"
GENERIC_FAILURE = "Failed to generate recommendations. Please try again."
UNEXPECTED_FAILURE = "An unexpected error occurred"

ENDPOINT_DESCRIPTION = {
    "endpoint": "/recommend-pathways",
    "method": "POST",
    "description": "Generate AI-powered career pathway recommendations based on user profile",
    "requiredFields": ["profile"],
    "profileFields": {
        "required": ["userId"],
        "recommended": ["skills", "education", "experience", "assessmentScores", "bio"],
    },
}


class RecommendationGateway(Protocol):
    async def generate_recommendations(self, profile: Profile) -> str: ...

    async def generate_pathway_roadmap(self, profile: Profile, pathway_title: str) -> str: ...

    async def generate_courses(self, domain: str) -> str: ...


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def _profile_present(raw: Any) -> bool:
    # An empty object still counts as present.
    return isinstance(raw, dict) or bool(raw)


LIST_FIELDS = (("education", Education), ("skills", Skill), ("experience", Experience))


def _readable(model, item: Any) -> bool:
    try:
        model.model_validate(item)
    except PydanticValidationError:
        return False
    return True


def _drop_unreadable_items(raw: dict[str, Any]) -> dict[str, Any]:
    cleaned = dict(raw)
    for name, model in LIST_FIELDS:
        items = cleaned.get(name)
        if items is None:
            continue
        if not isinstance(items, list):
            logger.warning("Ignoring profile %s: expected a list, got %s", name, type(items).__name__)
            cleaned.pop(name)
            continue
        kept = [item for item in items if _readable(model, item)]
        if len(kept) != len(items):
            logger.warning("Dropped %d unreadable %s entries from profile", len(items) - len(kept), name)
        cleaned[name] = kept
    return cleaned


def validate_profile_payload(payload: Any) -> Profile:
    """
    Presence and sufficiency checks, then decode into a ``Profile``.

    Unreadable education, skill and experience entries are dropped rather than
    rejected; only top-level fields of the wrong type fail the request.
    """
    raw = payload.get("profile") if isinstance(payload, dict) else None
    if not _profile_present(raw):
        raise ValidationError(PROFILE_REQUIRED)
    if not isinstance(raw, dict):
        raise ValidationError("Profile must be an object")

    user_id = raw.get("userId") or raw.get("user_id")
    if not user_id or not str(user_id).strip():
        raise ValidationError(USER_ID_REQUIRED)

    scores = raw.get("assessmentScores", raw.get("assessment_scores"))
    has_enough_data = (
        _non_empty_list(raw.get("skills"))
        or _non_empty_list(raw.get("education"))
        or _non_empty_list(raw.get("experience"))
        or scores is not None
    )
    if not has_enough_data:
        raise ValidationError(INSUFFICIENT_PROFILE)

    try:
        return Profile.model_validate(_drop_unreadable_items(raw))
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"Invalid profile field '{location}': {first.get('msg')}") from exc


def parse_ai_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        logger.error("Failed to parse AI response: %r", raw)
        raise GatewayResponseError(PARSE_FAILURE) from exc


def failure_envelope(exc: Exception, generic: str = GENERIC_FAILURE) -> tuple[int, dict[str, Any]]:
    if isinstance(exc, ValidationError):
        return 400, {"success": False, "error": exc.message}
    if isinstance(exc, RateLimitedError):
        return 429, {"success": False, "error": exc.message, "retryAfterSeconds": exc.retry_after_seconds}
    if isinstance(exc, (ConfigurationError, GatewayResponseError)):
        logger.error("Recommendation request failed: %s", exc.message)
        return 500, {"success": False, "error": exc.message}
    if isinstance(exc, SkillSyncError):
        logger.error("Recommendation provider failed: %s", exc.message)
        return 500, {"success": False, "error": generic}
    logger.exception("Unexpected error while generating recommendations")
    return 500, {"success": False, "error": UNEXPECTED_FAILURE}


class AIRequestHandler:
    """Shared gateway and per-user rate limiting for the AI-backed handlers."""

    scope = "ai"

    def __init__(self, gateway: RecommendationGateway, *, limiter: RateLimiter | None = None):
        self.gateway = gateway
        self.limiter = limiter

    def admit(self, user_id: str) -> None:
        # Only requests that passed validation count against the limit.
        if self.limiter is not None:
            self.limiter.check(f"user:{user_id}:{self.scope}")


class RecommendationRequestHandler(AIRequestHandler):
    scope = "recommend"

    def __init__(
        self,
        gateway: RecommendationGateway,
        *,
        strict_items: bool | None = None,
        limiter: RateLimiter | None = None,
    ):
        super().__init__(gateway, limiter=limiter)
        self.strict_items = settings.strict_recommendation_items if strict_items is None else strict_items

    async def recommend(self, payload: Any) -> dict[str, Any]:
        profile = validate_profile_payload(payload)
        self.admit(profile.user_id)
        raw = await self.gateway.generate_recommendations(profile)
        parsed = parse_ai_json(raw)

        recommendations = parsed.get("recommendations") if isinstance(parsed, dict) else None
        if not isinstance(recommendations, list):
            logger.error("AI response missing recommendations list: %r", raw)
            raise GatewayResponseError(INVALID_FORMAT)

        if self.strict_items:
            try:
                recommendations = [
                    CareerRecommendation.model_validate(item).model_dump() for item in recommendations
                ]
            except PydanticValidationError as exc:
                logger.error("AI recommendation item failed validation: %s", exc)
                raise GatewayResponseError(INVALID_FORMAT) from exc

        return {"recommendations": recommendations}

    async def handle(self, payload: Any) -> tuple[int, dict[str, Any]]:
        try:
            data = await self.recommend(payload)
        except Exception as exc:
            return failure_envelope(exc)
        return 200, {"success": True, "data": data}


def _valid_step(step: Any) -> bool:
    return (
        isinstance(step, dict)
        and bool(step.get("stage"))
        and bool(step.get("duration"))
        and isinstance(step.get("skills"), list)
        and isinstance(step.get("milestones"), list)
        and bool(step.get("description"))
    )


def _valid_resource(resource: Any) -> bool:
    return (
        isinstance(resource, dict)
        and bool(resource.get("type"))
        and bool(resource.get("title"))
        and bool(resource.get("description"))
    )


class RoadmapRequestHandler(AIRequestHandler):
    """Validates ``/generate-pathway`` requests and the roadmap the AI returns."""

    scope = "roadmap"

    async def generate(self, payload: Any) -> dict[str, Any]:
        if not isinstance(payload, dict) or not _profile_present(payload.get("profile")):
            raise ValidationError(PROFILE_REQUIRED)
        title = payload.get("pathwayTitle")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError(PATHWAY_TITLE_REQUIRED)
        profile = validate_profile_payload(payload)
        self.admit(profile.user_id)

        raw = await self.gateway.generate_pathway_roadmap(profile, title.strip())
        roadmap = parse_ai_json(raw)

        steps = roadmap.get("steps") if isinstance(roadmap, dict) else None
        if not isinstance(roadmap, dict) or not roadmap.get("pathway_title") or not _non_empty_list(steps):
            logger.error("Invalid AI roadmap structure: %r", raw)
            raise GatewayResponseError(INVALID_FORMAT)
        if not all(_valid_step(step) for step in steps):
            raise GatewayResponseError(INVALID_STEP)

        resources = roadmap.get("resources")
        if isinstance(resources, list) and not all(_valid_resource(item) for item in resources):
            raise GatewayResponseError(INVALID_RESOURCE)

        return roadmap

    async def handle(self, payload: Any) -> tuple[int, dict[str, Any]]:
        try:
            data = await self.generate(payload)
        except Exception as exc:
            return failure_envelope(exc)
        return 200, {"success": True, "data": data}
