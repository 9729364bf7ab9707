import json
import logging
import os
from pathlib import Path
from typing import Any

from skillsync.core.config import settings
from skillsync.core.errors import ValidationError
from skillsync.schemas.api import Theme

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "theme": "skillsync_theme_preference",
    "user_profile": "skillsync_user_profile",
    "assessment_results": "skillsync_assessment_results",
    "skill_progress": "skillsync_skill_progress",
    "bookmarked_courses": "skillsync_bookmarked_courses",
    "career_goals": "skillsync_career_goals",
}


class PreferenceCache:
    """
    Small key/value cache persisted as one JSON file.

    Holds the serializable slice of each store so a restarted session can
    render before the remote store answers. Values must be JSON-serializable.

    Every ``set`` rewrites the whole file synchronously, and stores call it from
    async code. That holds while the cache stays at one small entry per store;
    a larger cache should move ``_save`` onto ``asyncio.to_thread``.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or settings.preference_cache_path)
        self._data = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            logger.warning("Preference cache at %s is unreadable; starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Preference cache at %s is not an object; starting empty", self.path)
            return {}
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._save()


def get_theme(cache: PreferenceCache) -> Theme:
    raw = cache.get(STORAGE_KEYS["theme"])
    try:
        return Theme(raw) if raw else Theme.system
    except ValueError:
        return Theme.system


def set_theme(cache: PreferenceCache, theme: str) -> Theme:
    try:
        value = Theme(theme)
    except ValueError as exc:
        raise ValidationError(f"Unsupported theme '{theme}'") from exc
    cache.set(STORAGE_KEYS["theme"], value.value)
    return value
