from typing import Any, Iterable

COMPLETION_WEIGHT = 25
MAX_COMPLETION = 100


def parse_tech_stack(value: str | Iterable[Any] | None) -> list[str]:
    """
    Normalize technology tags from a comma-separated string or a list.

    Entries are trimmed, blanks dropped and duplicates removed while keeping
    the first occurrence, so "React, , Node.js ," becomes ["React", "Node.js"].
    """
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.split(",")
    else:
        raw = [str(item) for item in value if item is not None]

    tags: list[str] = []
    seen: set[str] = set()
    for item in raw:
        tag = item.strip()
        if not tag or tag in seen:
            continue
        seen.add(tag)
        tags.append(tag)
    return tags


def calculate_profile_completion(profile: Any) -> int:
    completion = 0
    if getattr(profile, "bio", ""):
        completion += COMPLETION_WEIGHT
    if getattr(profile, "education", None):
        completion += COMPLETION_WEIGHT
    if getattr(profile, "skills", None):
        completion += COMPLETION_WEIGHT
    if getattr(profile, "experience", None):
        completion += COMPLETION_WEIGHT
    return min(completion, MAX_COMPLETION)


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; progress uses 12.5 -> 13.
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def calculate_progress(completed_count: int, total: int) -> int:
    if total <= 0:
        return 0
    completed_count = max(0, min(completed_count, total))
    return round_half_up(completed_count / total * 100)
