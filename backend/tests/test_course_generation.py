from pathlib import Path
import asyncio
import json
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from skillsync.core.errors import ProviderError, RemoteStoreError
from skillsync.services.course_generation import (
    CourseGenerationHandler,
    normalize_generated_course,
    parse_generated_courses,
)


class StubGateway:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.domains = []

    async def generate_courses(self, domain):
        self.domains.append(domain)
        if self.error:
            raise self.error
        return self.reply


class CourseRows:
    """Course collection that can refuse specific titles."""

    def __init__(self, refuse=()):
        self.refuse = set(refuse)
        self.rows = []

    async def add(self, user_id, data):
        if data["title"] in self.refuse:
            raise RemoteStoreError("write rejected", operation="add")
        row = {"$id": f"r{len(self.rows) + 1}", "$createdAt": "2026-01-01T00:00:00", "userId": user_id, **data}
        self.rows.append(row)
        return row


COURSES = [
    {"title": f"Course {i}", "platform": "edX", "difficulty": "advanced", "price": 49.0, "rating": 4.5, "url": "https://edx.org"}
    for i in range(7)
]


def _handle(reply, rows=None, payload=None, error=None):
    rows = rows or CourseRows()
    handler = CourseGenerationHandler(StubGateway(reply, error), rows)
    payload = payload or {"userId": "user-1", "domain": "Cloud"}
    return asyncio.run(handler.handle(payload)), rows


def test_saves_at_most_five_courses():
    (status, body), rows = _handle(json.dumps(COURSES))
    assert status == 200
    assert body["data"]["count"] == 5
    assert len(rows.rows) == 5
    assert all(row["bookmarked"] is False for row in rows.rows)
    assert body["data"]["courses"][0]["$dbId"] == "r1"


def test_array_wrapped_in_prose_is_extracted():
    reply = "Here are some courses:\n" + json.dumps(COURSES[:2]) + "\nEnjoy!"
    (status, body), _ = _handle(reply)
    assert status == 200
    assert body["data"]["count"] == 2


def test_unparseable_reply_is_a_parse_failure():
    (status, body), rows = _handle("I could not find any courses.")
    assert (status, body) == (500, {"success": False, "error": "Failed to parse AI response"})
    assert rows.rows == []


def test_empty_or_non_object_course_data_is_invalid():
    (status, body), _ = _handle("[]")
    assert (status, body["error"]) == (500, "Invalid course data generated")
    (status, body), _ = _handle('["just a title"]')
    assert (status, body["error"]) == (500, "Invalid course data generated")


def test_partial_save_returns_only_saved_courses():
    rows = CourseRows(refuse={"Course 1"})
    (status, body), _ = _handle(json.dumps(COURSES[:3]), rows)
    assert status == 200
    assert [course["title"] for course in body["data"]["courses"]] == ["Course 0", "Course 2"]


def test_nothing_saved_is_a_failure():
    rows = CourseRows(refuse={"Course 0"})
    (status, body), _ = _handle(json.dumps(COURSES[:1]), rows)
    assert (status, body["error"]) == (500, "Failed to save any courses")


def test_missing_domain_and_provider_failure():
    (status, body), _ = _handle("[]", payload={"userId": "user-1", "domain": "  "})
    assert (status, body["error"]) == (400, "userId and domain are required")

    (status, body), _ = _handle(None, error=ProviderError("OpenRouter API error (502)"))
    assert (status, body["error"]) == (500, "Failed to generate courses from AI")


def test_generated_course_fields_are_normalized():
    course = normalize_generated_course({"difficulty": ["advanced"], "price": True, "rating": -2}, "Security")
    assert course.title == "Untitled Course"
    assert course.platform == "Unknown"
    assert course.difficulty.value == "intermediate"
    assert course.price == 0.0
    assert course.rating == 0.0
    assert course.url == "#"
    assert course.category == "Security"
    assert course.id.startswith("gen_")
    assert parse_generated_courses('[{"title": "x"}]') == [{"title": "x"}]
