from pathlib import Path
import asyncio
import json
import sys
from uuid import uuid4

sys.path.append(str(Path(__file__).resolve().parents[1]))

from skillsync.core.errors import RemoteStoreError
from skillsync.schemas.api import CatalogPathway, Course, Education, Profile, Skill
from skillsync.services.gateway import COURSES, PATHWAYS, PROFILES
from skillsync.services.preferences import STORAGE_KEYS, PreferenceCache
from skillsync.stores.container import build_stores
from skillsync.stores.courses import CoursesStore
from skillsync.stores.pathways import PathwaysStore
from skillsync.stores.profile import ProfileStore


class FakeGateway:
    """In-memory collection with switchable failures."""

    def __init__(self, collection: str):
        self.collection = collection
        self.rows: dict[str, dict] = {}
        self.fail: set[str] = set()
        self.delay = 0.0
        self.calls: list[tuple] = []

    async def _maybe_fail(self, operation: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if operation in self.fail:
            raise RemoteStoreError(f"{operation} unavailable", operation=operation)

    async def get_by_user_id(self, user_id):
        self.calls.append(("load", user_id))
        await self._maybe_fail("load")
        return [dict(row) for row in self.rows.values() if row["userId"] == user_id]

    async def add(self, user_id, data):
        self.calls.append(("add", user_id, data))
        await self._maybe_fail("add")
        row_id = uuid4().hex
        row = {"$id": row_id, "$createdAt": "2026-01-01T00:00:00", "userId": user_id, **data}
        self.rows[row_id] = row
        return dict(row)

    async def update(self, row_id, fields):
        self.calls.append(("update", row_id, fields))
        await self._maybe_fail("update")
        self.rows[row_id].update(fields)
        return dict(self.rows[row_id])

    async def delete(self, row_id):
        self.calls.append(("delete", row_id))
        await self._maybe_fail("delete")
        if row_id not in self.rows:
            raise RemoteStoreError("missing", operation="delete", not_found=True)
        del self.rows[row_id]


def _course(course_id: str = "c1") -> Course:
    return Course(id=course_id, title=f"Course {course_id}", platform="Coursera")


def _courses(tmp_path, gateway=None, **kwargs) -> CoursesStore:
    return CoursesStore(gateway or FakeGateway(COURSES), PreferenceCache(tmp_path / "prefs.json"), **kwargs)


def test_load_replaces_items_and_writes_cache(tmp_path):
    store = _courses(tmp_path)
    asyncio.run(store.gateway.add("user-1", {"courseId": "c1", "title": "SQL", "bookmarked": True}))

    asyncio.run(store.load("user-1"))

    assert [course.id for course in store.items] == ["c1"]
    assert store.items[0].db_id
    assert store.state.is_loading is False
    assert store.state.error is None
    assert store.cache.get(STORAGE_KEYS["bookmarked_courses"])[0]["id"] == "c1"


def test_failed_load_keeps_stale_items(tmp_path):
    store = _courses(tmp_path)
    asyncio.run(store.add("user-1", _course()))
    store.gateway.fail.add("load")

    asyncio.run(store.load("user-1"))

    assert [course.id for course in store.items] == ["c1"]
    assert store.is_loading is False
    assert store.error == "Failed to load your courses. Please try again."


def test_add_waits_for_remote_row(tmp_path):
    store = _courses(tmp_path)
    store.gateway.fail.add("add")

    assert asyncio.run(store.add("user-1", _course())) is None
    assert store.items == []
    assert store.error == "Failed to bookmark course. Please try again."

    store.gateway.fail.clear()
    created = asyncio.run(store.add("user-1", _course()))
    assert created.db_id in store.gateway.rows
    assert store.items == [created]


def test_toggle_twice_returns_to_start(tmp_path):
    store = _courses(tmp_path)

    assert asyncio.run(store.toggle_bookmark("user-1", _course())) is True
    assert store.is_bookmarked("c1")
    assert asyncio.run(store.toggle_bookmark("user-1", _course())) is False

    assert store.items == []
    assert store.gateway.rows == {}
    assert store.get_bookmarked_courses([_course(), _course("c2")]) == []


def test_failed_remove_is_not_rolled_back_and_drift_is_reported(tmp_path, caplog):
    store = _courses(tmp_path)
    asyncio.run(store.add("user-1", _course()))
    store.gateway.fail.add("delete")

    assert asyncio.run(store.remove("c1")) is True
    assert store.items == []
    assert store.error == "Failed to remove bookmark. Please try again."
    assert "c1" in store.pending

    store.gateway.fail.clear()
    asyncio.run(store.load("user-1"))

    assert [course.id for course in store.items] == ["c1"]
    assert store.drifted == ["c1"]
    assert store.pending == {}
    assert "never reached the remote store" in caplog.text


def test_remove_of_already_deleted_row_succeeds(tmp_path):
    store = _courses(tmp_path)
    created = asyncio.run(store.add("user-1", _course()))
    del store.gateway.rows[created.db_id]

    assert asyncio.run(store.remove("c1")) is True
    assert store.error is None
    assert store.pending == {}


def test_update_is_optimistic_and_kept_on_failure(tmp_path):
    store = _courses(tmp_path)
    asyncio.run(store.add("user-1", _course()))
    store.gateway.fail.add("update")

    updated = asyncio.run(store.toggle_completed("c1"))

    assert updated.completed is True
    assert store.find("c1").completed is True
    assert store.error == "Failed to update course. Please try again."
    assert store.pending["c1"].fields == {"completed": True}


def test_update_without_remote_row_stays_local(tmp_path, caplog):
    store = _courses(tmp_path)
    store.items = [_course()]

    updated = asyncio.run(store.update("c1", {"completed": True}))

    assert updated.completed is True
    assert not [call for call in store.gateway.calls if call[0] == "update"]
    assert store.pending["c1"].operation == "update"
    assert "update kept in memory only" in caplog.text


def test_slow_gateway_times_out_instead_of_hanging(tmp_path):
    gateway = FakeGateway(COURSES)
    gateway.delay = 0.5
    store = _courses(tmp_path, gateway, timeout=0.05)

    asyncio.run(store.load("user-1"))

    assert store.is_loading is False
    assert store.error == "Failed to load your courses. Please try again."


def test_unexpected_row_shape_fails_closed(tmp_path):
    store = _courses(tmp_path)
    store.gateway.rows["r1"] = {"$id": "r1", "userId": "user-1", "courseId": "c1", "title": "SQL", "colour": "red"}

    asyncio.run(store.load("user-1"))

    assert store.items == []
    assert store.error == "Failed to load your courses. Please try again."


def test_latest_load_wins(tmp_path):
    store = _courses(tmp_path)
    gateway = store.gateway
    asyncio.run(gateway.add("user-1", {"courseId": "old", "title": "Old"}))
    asyncio.run(gateway.add("user-2", {"courseId": "new", "title": "New"}))
    original = gateway.get_by_user_id

    async def slow_for_first_user(user_id):
        if user_id == "user-1":
            await asyncio.sleep(0.05)
        return await original(user_id)

    gateway.get_by_user_id = slow_for_first_user

    async def scenario():
        await asyncio.gather(store.load("user-1"), store.load("user-2"))

    asyncio.run(scenario())
    assert [course.id for course in store.items] == ["new"]


def _pathways(tmp_path, catalog=None) -> PathwaysStore:
    return PathwaysStore(FakeGateway(PATHWAYS), PreferenceCache(tmp_path / "prefs.json"), catalog=catalog)


def test_pathway_completion_toggles_and_reports_progress(tmp_path):
    catalog = [
        CatalogPathway(id=f"p{i}", name=f"Pathway {i}") for i in range(8)
    ]
    store = _pathways(tmp_path, catalog)

    first = asyncio.run(store.toggle_completion("user-1", "p0"))
    assert first.completed is True
    assert first.completed_at
    assert store.get_progress() == 13

    flipped = asyncio.run(store.toggle_completion("user-1", "p0"))
    assert flipped.completed is False
    assert flipped.completed_at is None
    assert store.is_pathway_completed("p0") is False
    assert store.get_progress() == 0


def test_pathway_progress_ignores_memberships_outside_catalog(tmp_path):
    store = _pathways(tmp_path, [CatalogPathway(id="p1", name="One")])
    asyncio.run(store.toggle_completion("user-1", "p1"))
    store.set_catalog([])
    assert store.get_progress() == 0

    assert asyncio.run(store.toggle_completion("user-1", "missing")) is None
    assert store.error == "Unknown pathway 'missing'"


def _profiles(tmp_path, gateway=None) -> ProfileStore:
    return ProfileStore(gateway or FakeGateway(PROFILES), PreferenceCache(tmp_path / "prefs.json"))


def test_profile_create_adopts_existing_remote_row(tmp_path):
    store = _profiles(tmp_path)
    asyncio.run(store.gateway.add("user-1", {"bio": "already here"}))

    profile = asyncio.run(store.create("user-1"))

    assert profile.bio == "already here"
    assert len(store.gateway.rows) == 1


def test_profile_mutations_recompute_completion_and_persist(tmp_path):
    store = _profiles(tmp_path)
    asyncio.run(store.create("user-1"))
    assert store.get_completion_percentage() == 0

    asyncio.run(store.update_profile({"bio": "Aspiring analyst"}))
    asyncio.run(store.add_skill(Skill(name="SQL", level="intermediate")))
    asyncio.run(store.add_education(Education(school="State", degree="BSc", year="2025")))

    assert store.get_completion_percentage() == 75
    row = next(iter(store.gateway.rows.values()))
    assert row["bio"] == "Aspiring analyst"
    assert row["skills"] == [{"name": "SQL", "level": "intermediate"}]
    assert row["completionPercentage"] == 75

    last_update = [call for call in store.gateway.calls if call[0] == "update"][-1]
    assert set(last_update[2]) == {"education", "completionPercentage"}

    asyncio.run(store.remove_skill(0))
    assert store.profile.skills == []
    assert store.get_completion_percentage() == 50


def test_profile_edits_before_remote_row_are_pending(tmp_path):
    store = _profiles(tmp_path)
    store.gateway.fail.add("add")
    assert asyncio.run(store.create("user-1")) is None

    store.set_profile(Profile(user_id="user-1"))
    asyncio.run(store.update_profile({"bio": "offline"}))

    assert store.profile.bio == "offline"
    assert store.pending["user-1"].fields["bio"] == "offline"


def test_profile_snake_case_updates_map_to_wire_keys(tmp_path):
    store = _profiles(tmp_path)
    asyncio.run(store.create("user-1"))
    asyncio.run(store.update_profile({"dominant_type": "creative"}))

    assert store.profile.dominant_type == "creative"
    row = next(iter(store.gateway.rows.values()))
    assert row["dominantType"] == "creative"


def test_build_stores_hydrates_from_cache_and_loads(tmp_path):
    gateways = {}

    def factory(collection):
        gateways[collection] = FakeGateway(collection)
        return gateways[collection]

    cache = PreferenceCache(tmp_path / "prefs.json")
    cache.set(STORAGE_KEYS["career_goals"], {"careerGoals": ["data-analyst"], "selectedCareer": None})
    stores = build_stores(cache=cache, gateway_factory=factory)
    assert stores.careers.career_goals == ["data-analyst"]

    asyncio.run(gateways[COURSES].add("user-1", {"courseId": "c1", "title": "SQL"}))
    asyncio.run(stores.load("user-1"))

    assert [course.id for course in stores.courses.items] == ["c1"]
    assert stores.profile.profile is None
    assert stores.pathways.items == []


def test_toggle_bookmarks_a_saved_but_unbookmarked_course(tmp_path):
    store = _courses(tmp_path)
    saved = asyncio.run(store.add("user-1", _course().model_copy(update={"bookmarked": False})))
    assert store.is_bookmarked("c1") is False

    assert asyncio.run(store.toggle_bookmark("user-1", _course())) is True
    assert store.is_bookmarked("c1") is True
    assert store.gateway.rows[saved.db_id]["bookmarked"] is True

    assert asyncio.run(store.toggle_bookmark("user-1", _course())) is False
    assert store.items == []
    assert store.gateway.rows == {}


def test_update_accepts_snake_case_field_names(tmp_path):
    store = _pathways(tmp_path, [CatalogPathway(id="p1", name="One")])
    asyncio.run(store.toggle_completion("user-1", "p1"))

    updated = asyncio.run(store.update("p1", {"completed": False, "completed_at": None}))

    assert updated.completed_at is None
    row = next(iter(store.gateway.rows.values()))
    assert row["completedAt"] is None
    assert store.error is None


ROADMAP = {
    "pathway_title": "Data Engineer",
    "description": "Pipelines and warehouses.",
    "steps": [
        {
            "stage": "Foundation",
            "duration": "3 months",
            "skills": ["SQL", "Python"],
            "milestones": ["First pipeline"],
            "description": "Core tooling.",
        }
    ],
    "resources": [{"type": "book", "title": "Designing Data-Intensive Applications", "description": "Theory"}],
    "estimatedDuration": "9 months",
}


def test_save_roadmap_persists_and_rebuilds_it(tmp_path):
    store = _pathways(tmp_path, [CatalogPathway(id="p1", name="One")])

    saved = asyncio.run(store.save_roadmap("user-1", ROADMAP, is_custom=True))

    assert saved.pathway_id.startswith("ai-")
    assert saved.category == "Custom Skill"
    assert saved.is_custom is True
    row = store.gateway.rows[saved.db_id]
    assert row["stepsData"][0]["stage"] == "Foundation"
    assert row["estimatedTime"] == "9 months"

    roadmap = store.get_roadmap(saved.pathway_id)
    assert roadmap.pathway_title == "Data Engineer"
    assert roadmap.steps[0].skills == ["SQL", "Python"]
    assert roadmap.resources[0].url is None
    assert roadmap.to_wire()["estimatedDuration"] == "9 months"
    assert store.roadmap_exists("Data Engineer")
    assert store.get_progress() == 0


def test_save_roadmap_does_not_duplicate_titles(tmp_path):
    store = _pathways(tmp_path, [])
    first = asyncio.run(store.save_roadmap("user-1", ROADMAP))
    second = asyncio.run(store.save_roadmap("user-1", ROADMAP))

    assert second == first
    assert len(store.gateway.rows) == 1
    assert [item.category for item in store.get_ai_pathways()] == ["AI Recommended"]


def test_saved_roadmap_completion_toggles_by_id(tmp_path):
    store = _pathways(tmp_path, [])
    saved = asyncio.run(store.save_roadmap("user-1", ROADMAP))

    toggled = asyncio.run(store.toggle_completion("user-1", saved.pathway_id))

    assert toggled.completed is True
    assert store.is_pathway_completed(saved.pathway_id)


def test_roadmap_rows_with_json_string_steps_decode(tmp_path):
    store = _pathways(tmp_path, [])
    store.gateway.rows["r1"] = {
        "$id": "r1",
        "userId": "user-1",
        "pathwayId": "ai-legacy",
        "name": "Legacy",
        "category": "AI Recommended",
        "stepsData": [json.dumps(ROADMAP["steps"][0])],
        "resourcesData": [json.dumps(ROADMAP["resources"][0])],
    }

    asyncio.run(store.load("user-1"))

    assert store.get_roadmap("ai-legacy").steps[0].stage == "Foundation"


def test_roadmap_rows_with_broken_steps_fail_closed(tmp_path):
    store = _pathways(tmp_path, [])
    store.gateway.rows["r1"] = {
        "$id": "r1",
        "userId": "user-1",
        "pathwayId": "ai-broken",
        "name": "Broken",
        "stepsData": ["{not json"],
    }

    asyncio.run(store.load("user-1"))

    assert store.items == []
    assert store.error == "Failed to load your pathway progress. Please try again."
