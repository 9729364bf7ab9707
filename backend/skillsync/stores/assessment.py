from typing import Any

from skillsync.core.errors import ValidationError
from skillsync.data.catalog import ASSESSMENT_CATEGORIES, quiz_questions
from skillsync.schemas.api import AssessmentResult
from skillsync.services.assessment import answer_key, calculate_assessment_result
from skillsync.services.preferences import STORAGE_KEYS, PreferenceCache
from skillsync.stores.base import PersistedStore


class AssessmentStore(PersistedStore):
    """Quiz progress and the latest result. Local only."""

    cache_key = STORAGE_KEYS["assessment_results"]

    def __init__(self, cache: PreferenceCache, *, question_count: int | None = None):
        super().__init__(cache)
        self.question_count = len(quiz_questions()) if question_count is None else question_count
        self.current_question = 0
        self.answers: dict[str, float] = {}
        self.result: AssessmentResult | None = None
        self.is_completed = False

    def snapshot(self) -> dict[str, Any]:
        return {
            "currentQuestion": self.current_question,
            "answers": dict(self.answers),
            "result": self.result.to_wire() if self.result else None,
            "isCompleted": self.is_completed,
        }

    def restore(self, data: Any) -> None:
        self.current_question = int(data.get("currentQuestion", 0))
        self.answers = {str(key): float(value) for key, value in (data.get("answers") or {}).items()}
        result = data.get("result")
        self.result = AssessmentResult.model_validate(result) if result else None
        self.is_completed = bool(data.get("isCompleted", False))

    def set_answer(self, question_id: str, value: float, category: str) -> None:
        if category not in ASSESSMENT_CATEGORIES:
            raise ValidationError(f"Unknown assessment category '{category}'")
        self.answers = {**self.answers, answer_key(question_id, category): value}
        self.flush()

    def next_question(self) -> int:
        self.current_question = min(self.current_question + 1, max(self.question_count - 1, 0))
        self.flush()
        return self.current_question

    def previous_question(self) -> int:
        self.current_question = max(0, self.current_question - 1)
        self.flush()
        return self.current_question

    def calculate_results(self, user_id: str) -> AssessmentResult:
        self.result = calculate_assessment_result(user_id, self.answers)
        self.is_completed = True
        self.flush()
        return self.result

    def reset(self) -> None:
        self.current_question = 0
        self.answers = {}
        self.result = None
        self.is_completed = False
        self.flush()
