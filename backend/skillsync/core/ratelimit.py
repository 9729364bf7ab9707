from datetime import datetime, timedelta
from typing import Dict, List

from skillsync.core.config import settings
from skillsync.core.errors import RateLimitedError

RATE_LIMITED = "Too many AI requests. Please wait and try again."


class RateLimiter:
    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window = timedelta(seconds=window_seconds)
        self.hits: Dict[str, List[datetime]] = {}

    def check(self, key: str) -> None:
        now = datetime.utcnow()
        window_start = now - self.window
        entries = [ts for ts in self.hits.get(key, []) if ts >= window_start]

        if len(entries) >= self.limit:
            oldest_in_window = min(entries)
            retry_after = int(max(1, (oldest_in_window + self.window - now).total_seconds()))
            raise RateLimitedError(RATE_LIMITED, retry_after_seconds=retry_after)

        entries.append(now)
        self.hits[key] = entries

    def clear(self, key: str) -> None:
        self.hits.pop(key, None)

    def reset(self) -> None:
        self.hits.clear()


ai_rate_limiter = RateLimiter(limit=settings.ai_rate_limit_per_minute, window_seconds=60)
