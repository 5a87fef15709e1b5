"""Configuration for the Idea Advisor FastAPI service."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    # OpenAI (optional: without a key only local scoring is possible)
    OPENAI_API_KEY: str = ""
    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    OPENAI_MAX_ATTEMPTS: int = 3

    # Similarity
    SIMILARITY_FALLBACK_TO_LOCAL: bool = False
    SIMILARITY_ALERT_THRESHOLD: float = 0.7

    # Storage: empty selects the in-memory store
    DATABASE_URL: str = ""
    CORPUS_PATH: str = "data/projects-local.json"

    # Auth
    API_KEY: str

    # Logging
    LOG_JSON: bool = True
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
