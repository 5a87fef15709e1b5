"""
Configuration management for the Idea Advisor service.

Loads settings from environment variables with sensible defaults.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / '.env'
if _env_file.exists():
    load_dotenv(_env_file)


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Configuration settings loaded from environment."""

    # OpenAI
    OPENAI_API_KEY: str = os.getenv('OPENAI_API_KEY', '').strip()
    OPENAI_CHAT_MODEL: str = os.getenv('OPENAI_CHAT_MODEL', 'gpt-4o-mini')
    OPENAI_TEMPERATURE: float = float(os.getenv('OPENAI_TEMPERATURE', '0.3'))
    OPENAI_MAX_ATTEMPTS: int = int(os.getenv('OPENAI_MAX_ATTEMPTS', '3'))

    # Similarity
    SIMILARITY_FALLBACK_TO_LOCAL: bool = _env_flag('SIMILARITY_FALLBACK_TO_LOCAL')
    SIMILARITY_ALERT_THRESHOLD: float = float(os.getenv('SIMILARITY_ALERT_THRESHOLD', '0.7'))

    # Storage: an empty DATABASE_URL selects the in-memory store
    DATABASE_URL: str = os.getenv('DATABASE_URL', '')
    CORPUS_PATH: str = os.getenv('CORPUS_PATH', 'data/projects-local.json')

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls) -> list[str]:
        """
        Validate that required configuration is present.

        Only the delegated similarity mode needs a key; everything else has
        a working default.

        Returns:
            List of missing required configuration keys
        """
        missing = []
        if not cls.OPENAI_API_KEY and not cls.SIMILARITY_FALLBACK_TO_LOCAL:
            missing.append('OPENAI_API_KEY')
        return missing


# Singleton config instance
config = Config()
