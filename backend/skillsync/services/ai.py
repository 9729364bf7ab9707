import logging
from typing import Any

import httpx

from skillsync.core.config import settings
from skillsync.core.errors import ConfigurationError, ProviderError
from skillsync.schemas.api import Profile

logger = logging.getLogger(__name__)

PROVIDER = "openrouter"
RECOMMENDATION_TEMPERATURE = 0.7
RECOMMENDATION_MAX_TOKENS = 2000
ROADMAP_MAX_TOKENS = 3000
COURSE_COUNT = 5

RECOMMENDATIONS_SYSTEM_PROMPT = """You are an expert career advisor AI that analyzes student profiles and recommends suitable career pathways.

Your task is to analyze the provided profile and recommend 3-4 career pathways that align well with the person's education, skills, experience, and assessment scores.

For each recommendation, provide:
1. title: A clear, specific career pathway title
2. reasoning: A 2-3 sentence explanation of why this pathway suits the profile
3. summary: A brief 1-2 sentence overview of what this career path entails

Consider:
- Educational background and current knowledge level
- Technical and soft skills
- Assessment scores (technical, creative, analytical, leadership, communication)
- Work experience and projects
- Growth potential and market demand
- Realistic progression paths

Return your response ONLY as a valid JSON object with this exact structure:
{
  "recommendations": [
    {
      "title": "Career Pathway Title",
      "reasoning": "Why this pathway fits...",
      "summary": "Brief overview..."
    }
  ]
}"""

ROADMAP_SYSTEM_PROMPT = """You are an expert career development advisor that creates detailed, personalized career roadmaps.

Create a step-by-step roadmap for the requested career pathway, tailored to the individual's current profile. Start from where they are now, not from scratch.

Return your response ONLY as a valid JSON object with this exact structure:
{
  "pathway_title": "Career Pathway",
  "description": "2-3 sentence overview",
  "steps": [
    {
      "stage": "Foundation",
      "duration": "3-6 months",
      "skills": ["skill1", "skill2"],
      "milestones": ["milestone1", "milestone2"],
      "description": "What you'll learn..."
    }
  ],
  "resources": [
    {
      "type": "course | book | certification | project | community",
      "title": "Resource Name",
      "url": "https://example.com or null",
      "description": "What this resource provides"
    }
  ],
  "estimatedDuration": "12-18 months"
}"""


COURSES_SYSTEM_PROMPT = """You are a course recommendation expert. Based on the provided domain/topic, recommend exactly 5 high-quality online courses.

For each course, provide:
- title: Full course title
- platform: Platform name (e.g., Coursera, Udemy, edX, LinkedIn Learning, Pluralsight)
- difficulty: One of "beginner", "intermediate", or "advanced"
- price: Approximate price in USD (use 0 for free courses)
- rating: Rating out of 5 (e.g., 4.5)
- url: Valid course URL (use real URLs from platforms)
- category: Course category (e.g., "Web Development", "Data Science")

Return ONLY a valid JSON array with exactly 5 courses. No additional text or explanation."""

def ai_is_configured() -> bool:
    return bool(settings.ai_enabled and settings.openrouter_api_key and settings.openrouter_model)


def get_active_ai_provider() -> str:
    return PROVIDER


def get_active_ai_model() -> str:
    return settings.openrouter_model


def format_profile_for_prompt(profile: Profile) -> str:
    parts: list[str] = [f"Name: {profile.user_id or 'Not provided'}"]
    if profile.bio:
        parts.append(f"Bio: {profile.bio}")

    if profile.education:
        parts.append("\nEducation:")
        for edu in profile.education:
            gpa = f", GPA: {edu.gpa}" if edu.gpa else ""
            parts.append(f"- {edu.degree} from {edu.school} ({edu.year}){gpa}")

    if profile.skills:
        parts.append("\nSkills:")
        for skill in profile.skills:
            parts.append(f"- {skill.name} ({skill.level.value})")

    if profile.experience:
        parts.append("\nExperience:")
        for exp in profile.experience:
            parts.append(f"- {exp.title} ({exp.duration})")
            parts.append(f"  Description: {exp.description}")
            if exp.tech_stack:
                parts.append(f"  Tech Stack: {', '.join(exp.tech_stack)}")

    scores = profile.assessment_scores
    if scores is not None:
        parts.append("\nAssessment Scores:")
        parts.append(f"- Technical: {scores.technical}")
        parts.append(f"- Creative: {scores.creative}")
        parts.append(f"- Analytical: {scores.analytical}")
        parts.append(f"- Leadership: {scores.leadership}")
        parts.append(f"- Communication: {scores.communication}")
        if profile.dominant_type:
            parts.append(f"- Dominant Type: {profile.dominant_type}")

    return "\n".join(parts)


class OpenRouterGateway:
    """Recommendation Gateway backed by the OpenRouter chat completions API."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self.model = model or settings.openrouter_model
        self.api_base = (api_base or settings.openrouter_api_base).rstrip("/")
        self.timeout = timeout or settings.ai_request_timeout_seconds
        self.transport = transport

    async def _complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        model: str | None = None,
        json_mode: bool = True,
    ) -> str:
        if not self.api_key:
            raise ConfigurationError("OpenRouter API key is not configured")
        if not settings.ai_enabled:
            raise ConfigurationError("AI is disabled")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": settings.public_app_base_url,
            "X-Title": settings.openrouter_app_title,
        }
        body: dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(f"{self.api_base}/chat/completions", headers=headers, json=body)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("OpenRouter API error (%s): %s", status, exc.response.text[:500])
            raise ProviderError(f"OpenRouter API error ({status})") from exc
        except httpx.HTTPError as exc:
            logger.error("OpenRouter call failed: %s", exc)
            raise ProviderError("Failed to reach OpenRouter") from exc
        except ValueError as exc:
            raise ProviderError("OpenRouter returned a non-JSON envelope") from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise ProviderError("No response from OpenRouter API")
        return choices[0].get("message", {}).get("content") or ""

    async def generate_recommendations(self, profile: Profile) -> str:
        user_prompt = (
            "Please analyze this profile and recommend 3-4 suitable career pathways:\n\n"
            + format_profile_for_prompt(profile)
        )
        return await self._complete(
            [
                {"role": "system", "content": RECOMMENDATIONS_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=RECOMMENDATION_TEMPERATURE,
            max_tokens=RECOMMENDATION_MAX_TOKENS,
        )

    async def generate_pathway_roadmap(self, profile: Profile, pathway_title: str) -> str:
        user_prompt = (
            f'Create a personalized roadmap for this career pathway: "{pathway_title}"\n\n'
            f"Based on this profile:\n{format_profile_for_prompt(profile)}\n\n"
            "Generate a detailed, step-by-step roadmap tailored to their current level and background."
        )
        return await self._complete(
            [
                {"role": "system", "content": ROADMAP_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=RECOMMENDATION_TEMPERATURE,
            max_tokens=ROADMAP_MAX_TOKENS,
        )

    async def generate_courses(self, domain: str) -> str:
        # A JSON array is expected, so json_object mode stays off.
        user_prompt = (
            f'Generate {COURSE_COUNT} course recommendations for the domain: "{domain}". '
            "Include recent, popular courses from major platforms. Use real course data and URLs."
        )
        return await self._complete(
            [
                {"role": "system", "content": COURSES_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=RECOMMENDATION_TEMPERATURE,
            max_tokens=RECOMMENDATION_MAX_TOKENS,
            model=settings.openrouter_course_model,
            json_mode=False,
        )
