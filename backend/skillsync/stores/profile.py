import logging
from typing import Any

from skillsync.core.errors import RemoteStoreError
from skillsync.schemas.api import AssessmentResult, Education, Experience, Profile, ProfileRow, Skill, wire_key
from skillsync.services.preferences import STORAGE_KEYS
from skillsync.services.profile import calculate_profile_completion
from skillsync.stores.base import StoreState, SyncedStore

logger = logging.getLogger(__name__)

# Wire keys the remote profile row accepts on update.
PROFILE_FIELDS = (
    "bio",
    "education",
    "skills",
    "experience",
    "assessmentScores",
    "dominantType",
    "assessmentCompletedAt",
    "completionPercentage",
)


class ProfileStore(SyncedStore[Profile]):
    """
    The signed-in user's profile.

    Every mutation recomputes ``completion_percentage``, writes the cache and
    then sends only the changed fields to the remote row. A profile that has
    not been created remotely yet keeps its changes in memory and records
    them as pending.
    """

    model = Profile
    row_model = ProfileRow
    cache_key = STORAGE_KEYS["user_profile"]
    load_error_message = "Failed to load your profile. Please try again."
    add_error_message = "Failed to create your profile. Please try again."
    update_error_message = "Failed to save your profile. Please try again."

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.profile: Profile | None = None

    @property
    def state(self) -> StoreState[Profile]:
        items = [self.profile] if self.profile else []
        return StoreState(items=items, is_loading=self.is_loading, error=self.error)

    def key_of(self, entity: Profile) -> str:
        return entity.user_id

    def from_row(self, row: ProfileRow) -> Profile:
        profile = Profile(
            user_id=row.user_id,
            bio=row.bio,
            education=row.education,
            skills=row.skills,
            experience=row.experience,
            assessment_scores=row.assessment_scores,
            dominant_type=row.dominant_type,
            assessment_completed_at=row.assessment_completed_at,
            db_id=row.id,
        )
        return self._with_completion(profile)

    def to_row_data(self, profile: Profile) -> dict[str, Any]:
        wire = profile.to_wire()
        return {key: wire[key] for key in PROFILE_FIELDS if key in wire}

    def snapshot(self) -> dict[str, Any] | None:
        return self.profile.to_wire() if self.profile else None

    def restore(self, data: Any) -> None:
        self.profile = Profile.model_validate(data) if data else None

    @staticmethod
    def _with_completion(profile: Profile) -> Profile:
        return profile.model_copy(update={"completion_percentage": calculate_profile_completion(profile)})

    async def load(self, user_id: str) -> None:
        profiles = await self._fetch(user_id)
        if profiles is None:
            return
        self.profile = next((p for p in profiles if p.user_id == user_id), None)
        self.flush()

    async def create(self, user_id: str, profile: Profile | None = None) -> Profile | None:
        """Create the remote profile, or adopt the existing one instead of duplicating it."""
        draft = (profile or Profile(user_id=user_id)).model_copy(update={"user_id": user_id})
        draft = self._with_completion(draft)
        try:
            rows = await self._call("load", self.gateway.get_by_user_id(user_id))
            if rows:
                logger.info("Profile already exists for user %s", user_id)
                created = self.decode_row(rows[0])
            else:
                row = await self._call("add", self.gateway.add(user_id, self.to_row_data(draft)))
                created = self.decode_row(row)
        except RemoteStoreError as exc:
            self._fail(self.add_error_message, exc)
            return None
        self.profile = created
        self.flush()
        return created

    def set_profile(self, profile: Profile) -> Profile:
        self.profile = self._with_completion(profile)
        self.flush()
        return self.profile

    async def update_profile(self, updates: dict[str, Any]) -> Profile | None:
        if self.profile is None:
            return None
        updates = {wire_key(key): value for key, value in updates.items()}
        merged = self._with_completion(self._patched(self.profile, updates))
        self.profile = merged
        self.flush()

        wire = merged.to_wire()
        changed = {key: wire[key] for key in PROFILE_FIELDS if key in updates}
        changed["completionPercentage"] = merged.completion_percentage
        await self._persist(changed)
        return self.profile

    async def _persist(self, fields: dict[str, Any]) -> None:
        key = self.profile.user_id
        if not self.profile.db_id:
            logger.warning("Profile for %s has no remote row yet; changes kept in memory only", key)
            self._mark_pending(key, "update", fields)
            return
        try:
            await self._call("update", self.gateway.update(self.profile.db_id, fields))
        except RemoteStoreError as exc:
            self._mark_pending(key, "update", fields)
            self._fail(self.update_error_message, exc)
            return
        self.pending.pop(key, None)

    async def _set_list(self, name: str, values: list[Any]) -> Profile | None:
        return await self.update_profile({name: [value.to_wire() for value in values]})

    async def add_education(self, education: Education) -> Profile | None:
        if self.profile is None:
            return None
        return await self._set_list("education", [*self.profile.education, education])

    async def remove_education(self, index: int) -> Profile | None:
        if self.profile is None:
            return None
        remaining = [edu for i, edu in enumerate(self.profile.education) if i != index]
        return await self._set_list("education", remaining)

    async def add_skill(self, skill: Skill) -> Profile | None:
        if self.profile is None:
            return None
        return await self._set_list("skills", [*self.profile.skills, skill])

    async def remove_skill(self, index: int) -> Profile | None:
        if self.profile is None:
            return None
        remaining = [skill for i, skill in enumerate(self.profile.skills) if i != index]
        return await self._set_list("skills", remaining)

    async def add_experience(self, experience: Experience) -> Profile | None:
        if self.profile is None:
            return None
        return await self._set_list("experience", [*self.profile.experience, experience])

    async def remove_experience(self, index: int) -> Profile | None:
        if self.profile is None:
            return None
        remaining = [exp for i, exp in enumerate(self.profile.experience) if i != index]
        return await self._set_list("experience", remaining)

    async def apply_assessment(self, result: AssessmentResult) -> Profile | None:
        return await self.update_profile(
            {
                "assessmentScores": result.scores.to_wire(),
                "dominantType": result.dominant_type,
                "assessmentCompletedAt": result.completed_at,
            }
        )

    def get_completion_percentage(self) -> int:
        return self.profile.completion_percentage if self.profile else 0
