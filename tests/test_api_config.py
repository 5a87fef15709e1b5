"""Tests for API configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from idea_advisor.api.config import Settings


class TestApiConfig:
    def test_config_loads_from_env(self):
        env = {
            "OPENAI_API_KEY": "sk-test-key",
            "API_KEY": "portal-secret-123",
            "DATABASE_URL": "postgresql://u:p@host/db",
            "SIMILARITY_FALLBACK_TO_LOCAL": "true",
            "SIMILARITY_ALERT_THRESHOLD": "0.75",
        }
        with patch.dict(os.environ, env, clear=False):
            settings = Settings()
            assert settings.OPENAI_API_KEY == "sk-test-key"
            assert settings.API_KEY == "portal-secret-123"
            assert settings.DATABASE_URL == "postgresql://u:p@host/db"
            assert settings.SIMILARITY_FALLBACK_TO_LOCAL is True
            assert settings.SIMILARITY_ALERT_THRESHOLD == 0.75

    def test_config_defaults(self, monkeypatch):
        for name in (
            "OPENAI_API_KEY",
            "OPENAI_CHAT_MODEL",
            "DATABASE_URL",
            "CORPUS_PATH",
            "SIMILARITY_FALLBACK_TO_LOCAL",
            "SIMILARITY_ALERT_THRESHOLD",
        ):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("API_KEY", "portal-key")

        settings = Settings()
        assert settings.OPENAI_API_KEY == ""
        assert settings.OPENAI_CHAT_MODEL == "gpt-4o-mini"
        assert settings.DATABASE_URL == ""
        assert settings.CORPUS_PATH == "data/projects-local.json"
        assert settings.SIMILARITY_FALLBACK_TO_LOCAL is False
        assert settings.SIMILARITY_ALERT_THRESHOLD == 0.7

    def test_api_key_is_required(self, monkeypatch):
        monkeypatch.delenv("API_KEY", raising=False)

        with pytest.raises(ValidationError):
            Settings()
