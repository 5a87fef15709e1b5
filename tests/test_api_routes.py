"""Tests for the submission, project and notification endpoints."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from idea_advisor.api.auth import verify_api_token
from idea_advisor.api.routes.notifications import router as notifications_router
from idea_advisor.api.routes.submissions import router as submissions_router
from idea_advisor.clients.store import InMemoryStore
from idea_advisor.errors import MalformedResponse, NotAvailable, SimilarityError
from idea_advisor.models import Notification, NotificationType
from idea_advisor.pipeline.notifier import Notifier
from idea_advisor.pipeline.orchestrator import SubmissionWorkflow
from idea_advisor.pipeline.scorer import LocalSimilarityScorer
from idea_advisor.repository import PortalRepository

BUNDLED_CORPUS = Path(__file__).parent.parent / "data" / "projects-local.json"

VALID_SUBMISSION = {
    "project_name": "Parking Spotter",
    "project_description": "A mobile app that shows free parking spots in real time",
    "bootcamp_supervisor": "Dr. Huda",
    "bootcamp_name": "Mobile Development Bootcamp",
    "tools_technologies": ["Flutter", "Firebase"],
    "team": [{"full_name": "Reem Khalid", "academic_id": "441100"}],
    "submitted_by": "USER-student-1",
}


def _make_app(scorer=None, corpus_path=BUNDLED_CORPUS) -> FastAPI:
    """Build a test app over an in-memory repository."""
    app = FastAPI()
    app.include_router(submissions_router)
    app.include_router(notifications_router)

    # Override auth dependency so it never hits real Settings
    async def _noop_auth():
        return None

    app.dependency_overrides[verify_api_token] = _noop_auth

    repository = PortalRepository(InMemoryStore())
    scorer = scorer or LocalSimilarityScorer()
    notifier = Notifier(repository)
    app.state.repository = repository
    app.state.scorer = scorer
    app.state.notifier = notifier
    app.state.workflow = SubmissionWorkflow(repository, scorer, notifier=notifier)
    app.state.corpus_path = corpus_path
    return app


def _failing_scorer(error: Exception) -> MagicMock:
    scorer = MagicMock()
    scorer.score = AsyncMock(side_effect=error)
    return scorer


@pytest.fixture
def app() -> FastAPI:
    return _make_app()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


class TestSubmissionsRoute:
    def test_valid_submission_returns_200(self, client):
        response = client.post("/submissions", json=VALID_SUBMISSION)

        assert response.status_code == 200
        body = response.json()
        assert body["project"]["project_name"] == "Parking Spotter"
        assert body["project"]["status"] == "pending_review"
        assert body["corpus_error"] is None
        assert body["similarity_results"][0]["project"]["title"] == "Smart Parking Finder"
        assert body["stages"][0]["stage"] == "submit"

    def test_missing_fields_return_422(self, client):
        payload = dict(VALID_SUBMISSION, project_description="", team=[])

        response = client.post("/submissions", json=payload)

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["missing_fields"] == ["project_description", "team"]

    def test_invalid_body_returns_422(self, client):
        response = client.post("/submissions", json={"team": "not a list"})

        assert response.status_code == 422

    def test_scoring_failure_still_persists(self):
        app = _make_app(scorer=_failing_scorer(NotAvailable("no key")))
        client = TestClient(app)

        response = client.post("/submissions", json=VALID_SUBMISSION)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        project_id = body["project"]["id"]
        assert client.get(f"/projects/{project_id}").status_code == 200

    def test_corpus_error_is_reported(self, tmp_path):
        client = TestClient(_make_app(corpus_path=tmp_path / "missing.json"))

        body = client.post("/submissions", json=VALID_SUBMISSION).json()

        assert "missing.json" in body["corpus_error"]
        assert body["similarity_results"] == []


class TestSimilarityRoute:
    def test_scores_idea_against_corpus(self, client):
        response = client.post("/similarity", json={"idea": "machine learning app using python"})

        assert response.status_code == 200
        body = response.json()
        assert body["corpus_size"] == 4
        assert body["results"][0]["project"]["id"] == "1"
        assert body["corpus_error"] is None

    def test_empty_idea_rejected(self, client):
        assert client.post("/similarity", json={"idea": ""}).status_code == 422

    @pytest.mark.parametrize(
        "error,status",
        [
            (NotAvailable("not configured"), 503),
            (MalformedResponse("prose"), 502),
            (SimilarityError("timeout"), 502),
        ],
    )
    def test_scoring_errors(self, error, status):
        client = TestClient(_make_app(scorer=_failing_scorer(error)))

        response = client.post("/similarity", json={"idea": "anything"})

        assert response.status_code == status
        assert response.json()["error"] == error.message


class TestProjectsRoutes:
    def test_list_and_filter(self, client):
        client.post("/submissions", json=VALID_SUBMISSION)
        client.post("/submissions", json=dict(VALID_SUBMISSION, project_name="Other", bootcamp_supervisor="Dr. Sami"))

        all_projects = client.get("/projects").json()["projects"]
        by_supervisor = client.get("/projects", params={"supervisor": "Dr. Sami"}).json()["projects"]
        approved = client.get("/projects", params={"status": "approved"}).json()["projects"]

        assert [p["project_name"] for p in all_projects] == ["Parking Spotter", "Other"]
        assert [p["project_name"] for p in by_supervisor] == ["Other"]
        assert approved == []

    def test_unknown_status_rejected(self, client):
        assert client.get("/projects", params={"status": "archived"}).status_code == 422

    def test_get_missing_project(self, client):
        assert client.get("/projects/PRJ-missing").status_code == 404

    def test_upload_extends_corpus(self, client):
        response = client.post(
            "/projects/upload",
            json=[{"name": "Campus Lost and Found", "desc": "report and find lost items on campus"}],
        )

        assert response.json() == {"added": 1}
        body = client.post("/similarity", json={"idea": "find lost items on campus"}).json()
        assert body["corpus_size"] == 5
        assert body["results"][0]["project"]["title"] == "Campus Lost and Found"

    def test_supervisor_response(self, client):
        project_id = client.post("/submissions", json=VALID_SUBMISSION).json()["project"]["id"]

        response = client.post(
            f"/projects/{project_id}/responses",
            json={
                "supervisor_id": "USER-sup",
                "supervisor_name": "Dr. Huda",
                "message": "Looks good",
                "response_type": "approval",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "approved"
        assert body["supervisor_responses"][0]["message"] == "Looks good"

    def test_response_to_missing_project(self, client):
        response = client.post(
            "/projects/PRJ-missing/responses",
            json={"supervisor_id": "USER-sup", "supervisor_name": "Dr. Huda"},
        )

        assert response.status_code == 404


class TestNotificationsRoutes:
    def _seed(self, app, recipient: str) -> Notification:
        notification = Notification(
            type=NotificationType.SIMILARITY_ALERT,
            recipient_id=recipient,
            title="Similarity alert: 90%",
            message="Your project is similar",
        )
        return asyncio.run(app.state.repository.create_notification(notification))

    def test_list_and_mark_read(self, app, client):
        first = self._seed(app, "USER-1")
        self._seed(app, "USER-1")
        self._seed(app, "USER-2")

        inbox = client.get("/notifications/USER-1").json()
        assert inbox["unread_count"] == 2
        assert len(inbox["notifications"]) == 2

        response = client.post(f"/notifications/{first.id}/read", params={"recipient_id": "USER-1"})
        assert response.json() == {"id": first.id, "status": "read"}

        unread = client.get("/notifications/USER-1", params={"unread_only": True}).json()
        assert unread["unread_count"] == 1
        assert len(unread["notifications"]) == 1

    def test_mark_read_wrong_recipient(self, app, client):
        note = self._seed(app, "USER-1")

        response = client.post(f"/notifications/{note.id}/read", params={"recipient_id": "USER-2"})

        assert response.status_code == 404
