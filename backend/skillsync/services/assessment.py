from datetime import datetime, timezone

from skillsync.core.errors import ValidationError
from skillsync.data.catalog import ASSESSMENT_CATEGORIES
from skillsync.schemas.api import AssessmentResult, AssessmentScores


def answer_key(question_id: str, category: str) -> str:
    return f"{question_id}:{category}"


def calculate_assessment_scores(answers: dict[str, float]) -> AssessmentScores:
    """Average the answers per category, rounded to two decimals."""
    totals = {category: 0.0 for category in ASSESSMENT_CATEGORIES}
    counts = {category: 0 for category in ASSESSMENT_CATEGORIES}

    for key, value in answers.items():
        _, _, category = key.partition(":")
        if category not in totals:
            raise ValidationError(f"Unknown assessment category in answer '{key}'")
        totals[category] += float(value)
        counts[category] += 1

    averages = {
        category: round(totals[category] / counts[category], 2) if counts[category] else 0.0
        for category in ASSESSMENT_CATEGORIES
    }
    return AssessmentScores(**averages)


def dominant_type(scores: AssessmentScores) -> str:
    # Ties resolve to the later category.
    best_category = ASSESSMENT_CATEGORIES[0]
    best_score = getattr(scores, best_category)
    for category in ASSESSMENT_CATEGORIES[1:]:
        score = getattr(scores, category)
        if score >= best_score:
            best_category, best_score = category, score
    return best_category


def calculate_assessment_result(user_id: str, answers: dict[str, float]) -> AssessmentResult:
    scores = calculate_assessment_scores(answers)
    return AssessmentResult(
        user_id=user_id,
        scores=scores,
        dominant_type=dominant_type(scores),
        completed_at=datetime.now(timezone.utc).isoformat(),
    )
