"""Tests for notification fan-out."""

import pytest

from idea_advisor.models import (
    NotificationType,
    Project,
    ResponseType,
    Severity,
    SimilarityResult,
    SubmissionStatus,
    TeamMember,
    UserRole,
)
from idea_advisor.pipeline.merge_advisor import MergeAdvisor
from idea_advisor.pipeline.notifier import DEFAULT_WARNING_MESSAGE, Notifier


@pytest.fixture
def notifier(repository):
    return Notifier(repository)


def _result(score: float, pid: str = "1", title: str = "ML App") -> SimilarityResult:
    return SimilarityResult(project=Project(id=pid, title=title), similarity_score=score)


class TestNotifyStudents:
    @pytest.mark.asyncio
    async def test_one_notification_per_member_per_strong_match(self, notifier, repository, make_input):
        submission = await repository.submit_project(make_input())

        created = await notifier.notify_students(submission, [_result(0.85), _result(0.72, "2", "Other"), _result(0.5)])

        assert len(created) == 4
        stored = await repository.get_notifications("USER-student-1")
        assert [n.id for n in stored] == [n.id for n in created]
        first = created[0]
        assert first.type == NotificationType.SIMILARITY_ALERT
        assert first.title == "Similarity alert: 85%"
        assert first.severity == Severity.HIGH
        assert first.metadata == {
            "similarity_score": 0.85,
            "matched_project_id": "1",
            "matched_project_name": "ML App",
        }
        assert created[2].severity == Severity.MEDIUM

    @pytest.mark.asyncio
    async def test_threshold_is_inclusive(self, notifier, make_submission):
        created = await notifier.notify_students(make_submission(), [_result(0.7)])

        assert len(created) == 1

    @pytest.mark.asyncio
    async def test_custom_threshold(self, repository, make_submission):
        created = await Notifier(repository, alert_threshold=0.9).notify_students(make_submission(), [_result(0.85)])

        assert created == []


class TestNotifySupervisors:
    @pytest.mark.asyncio
    async def test_cross_bootcamp_merge_notifies_both_supervisors(self, notifier, repository, make_submission):
        sami = await repository.create_user("sami@example.com", "pw", "Dr. Sami", UserRole.SUPERVISOR, "AI Bootcamp")
        huda = await repository.create_user("huda@example.com", "pw", "Dr. Huda", UserRole.SUPERVISOR, "Web Bootcamp")
        await repository.create_user("other@example.com", "pw", "Dr. Other", UserRole.SUPERVISOR, "Data Bootcamp")
        await repository.create_user("student@example.com", "pw", "Dr. Huda", UserRole.STUDENT)

        a = make_submission(project_name="Crop Doctor", bootcamp_name="AI Bootcamp", bootcamp_supervisor="Dr. Sami")
        b = make_submission(project_name="Leaf Scanner", bootcamp_name="Web Bootcamp", bootcamp_supervisor="Dr. Huda")
        analysis = MergeAdvisor().analyze(a, b, similarity=0.9)

        created = await notifier.notify_supervisors(analysis)

        assert sorted(n.recipient_id for n in created) == sorted([sami.id, huda.id])
        note = created[0]
        assert note.type == NotificationType.MERGE_OPPORTUNITY
        assert note.title == "Merge opportunity: similar projects from two bootcamps"
        assert "Crop Doctor (AI Bootcamp)" in note.message
        assert note.metadata["cross_bootcamp"] is True
        assert note.metadata["matched_project_id"] == b.id

    @pytest.mark.asyncio
    async def test_same_bootcamp_title(self, notifier, repository, make_submission):
        await repository.create_user("huda@example.com", "pw", "Dr. Huda", UserRole.SUPERVISOR)
        analysis = MergeAdvisor().analyze(make_submission(), make_submission(), similarity=0.9)

        created = await notifier.notify_supervisors(analysis)

        assert len(created) == 1
        assert created[0].title == "Merge opportunity: similar projects"

    @pytest.mark.asyncio
    async def test_no_matching_supervisors(self, notifier, make_submission):
        analysis = MergeAdvisor().analyze(make_submission(), make_submission(), similarity=0.9)

        assert await notifier.notify_supervisors(analysis) == []


class TestRespondToSubmission:
    @pytest.mark.asyncio
    async def test_blank_warning_uses_default_message(self, notifier, repository, make_input):
        submission = await repository.submit_project(make_input())

        project = await notifier.respond_to_submission(
            submission.id, "USER-sup", "Dr. Huda", "  ", ResponseType.SIMILARITY_WARNING
        )

        assert project.supervisor_responses[0].message == DEFAULT_WARNING_MESSAGE
        assert project.status == SubmissionStatus.PENDING_REVIEW
        notes = await repository.get_notifications("USER-student-1")
        assert len(notes) == 2
        assert {n.type for n in notes} == {NotificationType.SUPERVISOR_RESPONSE}
        assert notes[0].title == "Response from supervisor: Dr. Huda"
        assert notes[0].severity == Severity.HIGH

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response_type,status,notification_type",
        [
            (ResponseType.APPROVAL, SubmissionStatus.APPROVED, NotificationType.PROJECT_APPROVED),
            (ResponseType.REJECTION, SubmissionStatus.REJECTED, NotificationType.PROJECT_REJECTED),
            (ResponseType.REVISION_REQUEST, SubmissionStatus.NEEDS_REVISION, NotificationType.PROJECT_NEEDS_REVISION),
        ],
    )
    async def test_status_changing_responses(
        self, notifier, repository, make_input, response_type, status, notification_type
    ):
        submission = await repository.submit_project(make_input(team=[TeamMember(full_name="Reem")]))

        project = await notifier.respond_to_submission(submission.id, "USER-sup", "Dr. Huda", "Noted", response_type)

        assert project.status == status
        assert (await repository.get_project(submission.id)).status == status
        notes = await repository.get_notifications("USER-student-1")
        assert [n.type for n in notes] == [notification_type]
        assert notes[0].message == "Noted"

    @pytest.mark.asyncio
    async def test_missing_project(self, notifier, repository):
        result = await notifier.respond_to_submission(
            "PRJ-missing", "USER-sup", "Dr. Huda", "Hi", ResponseType.APPROVAL
        )

        assert result is None
        assert await repository.get_notifications("USER-student-1") == []
