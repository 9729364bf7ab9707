from pathlib import Path
import asyncio
import json
import sys

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from skillsync.core.errors import ConfigurationError, ProviderError
from skillsync.schemas.api import Profile
from skillsync.services.ai import OpenRouterGateway, format_profile_for_prompt

PROFILE = Profile.model_validate(
    {
        "userId": "user-1",
        "bio": "Career switcher",
        "skills": [{"name": "SQL", "level": "intermediate"}],
        "experience": [{"title": "Analyst intern", "duration": "6 months", "techStack": "Excel, SQL"}],
        "assessmentScores": {"technical": 4, "analytical": 4.5},
        "dominantType": "analytical",
    }
)


def test_prompt_lists_profile_sections():
    prompt = format_profile_for_prompt(PROFILE)
    assert "Bio: Career switcher" in prompt
    assert "- SQL (intermediate)" in prompt
    assert "Tech Stack: Excel, SQL" in prompt
    assert "- Analytical: 4.5" in prompt
    assert "- Dominant Type: analytical" in prompt


def test_gateway_posts_single_json_mode_completion():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": '{"recommendations": []}'}}]})

    gateway = OpenRouterGateway(
        api_key="sk-test",
        model="test/model",
        api_base="https://router.test/api/v1/",
        transport=httpx.MockTransport(handler),
    )
    reply = asyncio.run(gateway.generate_recommendations(PROFILE))

    assert reply == '{"recommendations": []}'
    assert captured["url"] == "https://router.test/api/v1/chat/completions"
    assert captured["auth"] == "Bearer sk-test"
    assert captured["body"]["model"] == "test/model"
    assert captured["body"]["response_format"] == {"type": "json_object"}
    assert [message["role"] for message in captured["body"]["messages"]] == ["system", "user"]


def test_missing_key_is_a_configuration_error():
    gateway = OpenRouterGateway(api_key="", transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    with pytest.raises(ConfigurationError) as exc:
        asyncio.run(gateway.generate_recommendations(PROFILE))
    assert exc.value.message == "OpenRouter API key is not configured"


def test_provider_failures_become_provider_errors():
    failing = OpenRouterGateway(
        api_key="sk-test",
        transport=httpx.MockTransport(lambda request: httpx.Response(503, text="overloaded")),
    )
    with pytest.raises(ProviderError):
        asyncio.run(failing.generate_recommendations(PROFILE))

    empty = OpenRouterGateway(
        api_key="sk-test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []})),
    )
    with pytest.raises(ProviderError):
        asyncio.run(empty.generate_pathway_roadmap(PROFILE, "Data Analyst"))


def test_course_generation_uses_course_model_without_json_mode():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "[]"}}]})

    gateway = OpenRouterGateway(api_key="sk-test", transport=httpx.MockTransport(handler))
    assert asyncio.run(gateway.generate_courses("Cloud")) == "[]"

    assert captured["body"]["model"] == "perplexity/sonar"
    assert "response_format" not in captured["body"]
    assert '"Cloud"' in captured["body"]["messages"][1]["content"]
