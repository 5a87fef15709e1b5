"""
Notification fan-out.

- Students hear about strong similarity matches for their submission
- Supervisors hear about merge opportunities involving their projects
- Students hear about supervisor responses, which may also move the
  project's review status
"""

from ..logging import get_logger
from ..models.analysis import MergeAnalysis, RecommendationStrength, SimilarityResult
from ..models.notification import Notification, NotificationType, Severity
from ..models.project import (
    ProjectSubmission,
    ResponseType,
    SubmissionStatus,
    SupervisorResponse,
)
from ..repository import PortalRepository

logger = get_logger(__name__)

ALERT_THRESHOLD = 0.7
HIGH_SEVERITY_THRESHOLD = 0.8

DEFAULT_WARNING_MESSAGE = (
    'We would like to inform you that your project idea is similar to another existing '
    'project. Please review and modify your idea to make it unique.'
)

RESPONSE_STATUS = {
    ResponseType.APPROVAL: SubmissionStatus.APPROVED,
    ResponseType.REJECTION: SubmissionStatus.REJECTED,
    ResponseType.REVISION_REQUEST: SubmissionStatus.NEEDS_REVISION,
}

RESPONSE_NOTIFICATION_TYPE = {
    ResponseType.SIMILARITY_WARNING: NotificationType.SUPERVISOR_RESPONSE,
    ResponseType.APPROVAL: NotificationType.PROJECT_APPROVED,
    ResponseType.REJECTION: NotificationType.PROJECT_REJECTED,
    ResponseType.REVISION_REQUEST: NotificationType.PROJECT_NEEDS_REVISION,
}

HIGH_SEVERITY_RESPONSES = {ResponseType.SIMILARITY_WARNING, ResponseType.REJECTION}


class Notifier:
    """Creates notifications through the portal repository."""

    def __init__(self, repository: PortalRepository, alert_threshold: float = ALERT_THRESHOLD):
        self.repository = repository
        self.alert_threshold = alert_threshold

    async def notify_students(
        self,
        submission: ProjectSubmission,
        results: list[SimilarityResult],
    ) -> list[Notification]:
        """
        Alert the submitting student about strong similarity matches.

        One notification is created per team member for each result at or
        above the alert threshold; all of them go to ``submitted_by``.
        """
        created: list[Notification] = []
        for result in results:
            if result.similarity_score < self.alert_threshold:
                continue

            percent = f'{result.similarity_score:.0%}'
            for _member in submission.team:
                notification = Notification(
                    type=NotificationType.SIMILARITY_ALERT,
                    recipient_id=submission.submitted_by,
                    project_id=submission.id,
                    title=f'Similarity alert: {percent}',
                    message=(
                        f'Your project "{submission.project_name}" is {percent} similar '
                        f'to the project "{result.project.title}"'
                    ),
                    severity=(
                        Severity.HIGH
                        if result.similarity_score >= HIGH_SEVERITY_THRESHOLD
                        else Severity.MEDIUM
                    ),
                    metadata={
                        'similarity_score': result.similarity_score,
                        'matched_project_id': result.project.id,
                        'matched_project_name': result.project.title,
                    },
                )
                created.append(await self.repository.create_notification(notification))

        logger.info('notifier.students_notified', project_id=submission.id, notifications=len(created))
        return created

    async def notify_supervisors(self, analysis: MergeAnalysis) -> list[Notification]:
        """Notify the supervisors of either project about a merge opportunity."""
        supervisor_names = {analysis.project_a.supervisor, analysis.project_b.supervisor}
        supervisors = [s for s in await self.repository.get_all_supervisors() if s.name in supervisor_names]

        a, b = analysis.project_a, analysis.project_b
        similarity = f'{analysis.viability_scores.similarity:.0%}'
        strength = analysis.recommendation_strength.value

        if analysis.cross_bootcamp:
            title = 'Merge opportunity: similar projects from two bootcamps'
            message = (
                'Two similar projects from different bootcamps were detected:\n\n'
                f'Project 1: {a.name} ({a.bootcamp})\n'
                f'Project 2: {b.name} ({b.bootcamp})\n\n'
                f'Similarity: {similarity}\n'
                f'Recommendation strength: {strength}\n\n'
                'Merging them could produce a stronger idea that combines the expertise of both bootcamps.'
            )
        else:
            title = 'Merge opportunity: similar projects'
            message = (
                'Two similar projects were detected:\n\n'
                f'Project 1: {a.name}\n'
                f'Project 2: {b.name}\n\n'
                f'Similarity: {similarity}\n'
                f'Recommendation strength: {strength}\n\n'
                'Consider reviewing whether they can be merged.'
            )

        created: list[Notification] = []
        for supervisor in supervisors:
            notification = Notification(
                type=NotificationType.MERGE_OPPORTUNITY,
                recipient_id=supervisor.id,
                project_id=a.id,
                title=title,
                message=message,
                severity=(
                    Severity.HIGH
                    if analysis.recommendation_strength == RecommendationStrength.STRONG
                    else Severity.MEDIUM
                ),
                metadata={
                    'matched_project_id': b.id,
                    'matched_project_name': b.name,
                    'similarity_score': analysis.viability_scores.similarity,
                    'cross_bootcamp': analysis.cross_bootcamp,
                },
            )
            created.append(await self.repository.create_notification(notification))

        logger.info(
            'notifier.supervisors_notified',
            project_id=a.id,
            matched_project_id=b.id,
            notifications=len(created),
        )
        return created

    async def respond_to_submission(
        self,
        project_id: str,
        supervisor_id: str,
        supervisor_name: str,
        message: str,
        response_type: ResponseType,
    ) -> ProjectSubmission | None:
        """
        Record a supervisor response and notify the submitting students.

        Approval, rejection and revision requests also move the project to
        the matching review status.

        Returns:
            The updated submission, or None if the project does not exist
        """
        text = message.strip()
        if not text and response_type == ResponseType.SIMILARITY_WARNING:
            text = DEFAULT_WARNING_MESSAGE

        response = SupervisorResponse(
            supervisor_id=supervisor_id,
            supervisor_name=supervisor_name,
            message=text,
            response_type=response_type,
        )
        project = await self.repository.add_supervisor_response(project_id, response)
        if project is None:
            logger.warning('notifier.response_project_missing', project_id=project_id)
            return None

        new_status = RESPONSE_STATUS.get(response_type)
        if new_status is not None:
            await self.repository.update_project_status(project_id, new_status)
            project.status = new_status

        for _member in project.team:
            await self.repository.create_notification(
                Notification(
                    type=RESPONSE_NOTIFICATION_TYPE[response_type],
                    recipient_id=project.submitted_by,
                    project_id=project.id,
                    title=f'Response from supervisor: {supervisor_name}',
                    message=text,
                    severity=Severity.HIGH if response_type in HIGH_SEVERITY_RESPONSES else Severity.MEDIUM,
                    metadata={
                        'matched_project_name': project.project_name,
                        'response_type': response_type.value,
                    },
                )
            )

        logger.info(
            'notifier.response_recorded',
            project_id=project_id,
            response_type=response_type.value,
            status=project.status.value,
        )
        return project
