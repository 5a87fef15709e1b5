"""Tests for the FastAPI app startup/shutdown and route wiring."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from idea_advisor.clients.store import InMemoryStore
from idea_advisor.pipeline.scorer import DelegatedSimilarityScorer, FallbackSimilarityScorer
from idea_advisor.repository import PortalRepository

BUNDLED_CORPUS = str(Path(__file__).parent.parent / "data" / "projects-local.json")


def _settings(**overrides) -> MagicMock:
    values = {
        "OPENAI_API_KEY": "",
        "OPENAI_CHAT_MODEL": "gpt-4o-mini",
        "OPENAI_MAX_ATTEMPTS": 1,
        "SIMILARITY_FALLBACK_TO_LOCAL": False,
        "SIMILARITY_ALERT_THRESHOLD": 0.7,
        "DATABASE_URL": "",
        "CORPUS_PATH": BUNDLED_CORPUS,
        "API_KEY": "key",
        "LOG_JSON": False,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return MagicMock(**values)


class TestAppLifespan:
    @patch("idea_advisor.api.main.get_settings")
    def test_in_memory_wiring_without_openai(self, mock_settings):
        mock_settings.return_value = _settings()

        from idea_advisor.api.main import app

        with TestClient(app) as client:
            resp = client.get("/health")
            assert resp.status_code == 200
            assert resp.json()["delegated_scoring"] is False
            assert isinstance(app.state.store, InMemoryStore)
            assert isinstance(app.state.repository, PortalRepository)
            assert isinstance(app.state.scorer, DelegatedSimilarityScorer)
            assert app.state.openai is None

    @patch("idea_advisor.api.main.get_settings")
    @patch("idea_advisor.api.main.OpenAIClient")
    def test_openai_client_built_and_closed(self, mock_openai, mock_settings):
        mock_settings.return_value = _settings(OPENAI_API_KEY="sk-test", SIMILARITY_FALLBACK_TO_LOCAL=True)
        openai_instance = MagicMock()
        openai_instance.close = AsyncMock()
        mock_openai.return_value = openai_instance

        from idea_advisor.api.main import app

        with TestClient(app) as client:
            assert client.get("/health").json()["delegated_scoring"] is True
            assert isinstance(app.state.scorer, FallbackSimilarityScorer)

        mock_openai.assert_called_once_with(api_key="sk-test", chat_model="gpt-4o-mini", max_attempts=1)
        openai_instance.close.assert_awaited_once()


class TestAppRouteWiring:
    @patch("idea_advisor.api.main.get_settings")
    def test_submission_route_requires_auth(self, mock_settings):
        mock_settings.return_value = _settings()

        from idea_advisor.api.main import app

        with TestClient(app) as client:
            resp = client.post("/submissions", json={})
            # Missing header is rejected before the body is processed
            assert resp.status_code in (401, 422)

    @patch("idea_advisor.api.auth.get_settings")
    @patch("idea_advisor.api.main.get_settings")
    def test_submission_end_to_end_with_local_fallback(self, mock_settings, mock_auth_settings):
        mock_settings.return_value = _settings(SIMILARITY_FALLBACK_TO_LOCAL=True)
        mock_auth_settings.return_value = _settings()

        from idea_advisor.api.main import app

        with TestClient(app) as client:
            resp = client.post(
                "/submissions",
                json={
                    "project_name": "ML App",
                    "project_description": "machine learning python tensorflow",
                    "bootcamp_supervisor": "Dr. Sami",
                    "bootcamp_name": "AI Bootcamp",
                    "tools_technologies": ["Python", "TensorFlow"],
                    "team": [{"full_name": "Reem Khalid"}],
                    "submitted_by": "USER-student-1",
                },
                headers={"Authorization": "Bearer key"},
            )

            assert resp.status_code == 200
            body = resp.json()
            assert body["success"] is True
            assert body["corpus_error"] is None
            assert body["similarity_results"][0]["project"]["id"] == "1"
            assert body["notifications_sent"] == 1

            inbox = client.get(
                "/notifications/USER-student-1",
                headers={"Authorization": "Bearer key"},
            ).json()
            assert inbox["unread_count"] == 1
