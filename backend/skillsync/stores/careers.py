from typing import Any

from skillsync.schemas.api import Career
from skillsync.services.preferences import STORAGE_KEYS, PreferenceCache
from skillsync.stores.base import PersistedStore


class CareersStore(PersistedStore):
    """Career goals and the career currently open for detail. Local only."""

    cache_key = STORAGE_KEYS["career_goals"]

    def __init__(self, cache: PreferenceCache):
        super().__init__(cache)
        self.career_goals: list[str] = []
        self.selected_career: Career | None = None

    def snapshot(self) -> dict[str, Any]:
        return {
            "careerGoals": list(self.career_goals),
            "selectedCareer": self.selected_career.to_wire() if self.selected_career else None,
        }

    def restore(self, data: Any) -> None:
        goals = data.get("careerGoals") or []
        selected = data.get("selectedCareer")
        self.career_goals = [str(goal) for goal in goals]
        self.selected_career = Career.model_validate(selected) if selected else None

    def set_selected_career(self, career: Career | None) -> None:
        self.selected_career = career
        self.flush()

    def add_goal(self, career_id: str) -> None:
        if career_id not in self.career_goals:
            self.career_goals = [*self.career_goals, career_id]
            self.flush()

    def remove_goal(self, career_id: str) -> None:
        self.career_goals = [goal for goal in self.career_goals if goal != career_id]
        self.flush()

    def toggle_goal(self, career_id: str) -> bool:
        if self.is_goal(career_id):
            self.remove_goal(career_id)
            return False
        self.add_goal(career_id)
        return True

    def is_goal(self, career_id: str) -> bool:
        return career_id in self.career_goals

    def get_goal_careers(self, catalog: list[Career]) -> list[Career]:
        return [career for career in catalog if self.is_goal(career.id)]
