from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = "sqlite:///./skillsync.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    public_app_base_url: str = "http://localhost:3000"
    ai_enabled: bool = True
    openrouter_api_key: str | None = None
    openrouter_model: str = "google/gemini-2.5-flash-lite"
    openrouter_course_model: str = "perplexity/sonar"
    openrouter_api_base: str = "https://openrouter.ai/api/v1"
    openrouter_app_title: str = "SkillSync Career Pathways"
    ai_request_timeout_seconds: float = 45.0
    ai_rate_limit_per_minute: int = 20
    strict_recommendation_items: bool = False
    preference_cache_path: str = "data/preferences.json"
    remote_api_base_url: str = "http://127.0.0.1:8000"
    store_call_timeout_seconds: float | None = 30.0

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        # Render/Postgres providers often expose postgres:// URLs.
        if isinstance(value, str) and value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://"):]
        return value

settings = Settings()
