"""
Portal repository for high-level CRUD operations.

Provides:
- Project submissions (submit, status, similarity alerts, supervisor responses)
- Uploaded corpus projects
- Notifications (append-only per recipient, read/unread tracking)
- Users (supervisor lookup for notification routing)

All state goes through an injected DocumentStore; nothing here knows
whether it is in memory or in Postgres.
"""

import base64
import hashlib
from typing import Any

import structlog

from .clients.store import DocumentStore
from .models.notification import Notification, NotificationStatus, User, UserRole
from .models.project import (
    Project,
    ProjectSubmission,
    SimilarityAlert,
    SubmissionInput,
    SubmissionStatus,
    SupervisorResponse,
)
from .utils import utcnow

logger = structlog.get_logger(__name__)

PROJECTS = 'projects'
UPLOADED_PROJECTS = 'uploaded_projects'
NOTIFICATIONS = 'notifications'
USERS = 'users'


def hash_password(password: str) -> str:
    """Obfuscate a password for storage. Not a security boundary."""
    digest = hashlib.sha256(password.encode('utf-8')).digest()
    return base64.b64encode(digest).decode('ascii')


class PortalRepository:
    """
    High-level portal operations over a document store.

    Lookups that miss return None/False instead of raising; store failures
    surface as StorageError.
    """

    def __init__(self, store: DocumentStore):
        """
        Initialize the repository.

        Args:
            store: Connected document store
        """
        self.store = store

    # =========================================================================
    # Project Submissions
    # =========================================================================

    async def submit_project(self, data: SubmissionInput) -> ProjectSubmission:
        """Persist a new submission in pending_review state."""
        submission = ProjectSubmission.from_input(data)
        await self.store.put(PROJECTS, submission.id, submission.to_document())
        logger.info('repository.project_submitted', project_id=submission.id)
        return submission

    async def save_project(self, submission: ProjectSubmission) -> None:
        await self.store.put(PROJECTS, submission.id, submission.to_document())

    async def get_submitted_projects(self) -> list[ProjectSubmission]:
        docs = await self.store.all(PROJECTS)
        return [ProjectSubmission.model_validate(d) for d in docs]

    async def get_project(self, project_id: str) -> ProjectSubmission | None:
        doc = await self.store.get(PROJECTS, project_id)
        return ProjectSubmission.model_validate(doc) if doc is not None else None

    async def update_project_status(self, project_id: str, status: SubmissionStatus) -> bool:
        project = await self.get_project(project_id)
        if project is None:
            return False
        project.status = status
        await self.save_project(project)
        logger.info('repository.status_updated', project_id=project_id, status=status.value)
        return True

    async def add_similarity_alert(self, project_id: str, alert: SimilarityAlert) -> bool:
        project = await self.get_project(project_id)
        if project is None:
            return False
        project.similarity_alerts.append(alert)
        await self.save_project(project)
        return True

    async def add_supervisor_response(
        self,
        project_id: str,
        response: SupervisorResponse,
    ) -> ProjectSubmission | None:
        """Append a supervisor response; returns the updated project or None."""
        project = await self.get_project(project_id)
        if project is None:
            return None
        project.supervisor_responses.append(response)
        await self.save_project(project)
        return project

    async def get_projects_by_supervisor(self, supervisor_name: str) -> list[ProjectSubmission]:
        return [
            p for p in await self.get_submitted_projects()
            if p.bootcamp_supervisor == supervisor_name
        ]

    async def get_projects_by_status(self, status: SubmissionStatus) -> list[ProjectSubmission]:
        return [p for p in await self.get_submitted_projects() if p.status == status]

    # =========================================================================
    # Uploaded Corpus Projects
    # =========================================================================

    async def add_uploaded_projects(self, raw_projects: list[dict[str, Any]]) -> int:
        """
        Store raw (un-normalized) project records from a bulk upload.

        Records are kept as-is; normalization happens when the corpus is
        loaded so field-name fallbacks apply uniformly.
        """
        existing = len(await self.store.all(UPLOADED_PROJECTS))
        for offset, raw in enumerate(raw_projects):
            await self.store.put(UPLOADED_PROJECTS, f'local-{existing + offset}', raw)
        return len(raw_projects)

    async def get_uploaded_projects(self) -> list[dict[str, Any]]:
        return await self.store.all(UPLOADED_PROJECTS)

    async def get_submitted_corpus(self) -> list[Project]:
        return [p.to_project() for p in await self.get_submitted_projects()]

    # =========================================================================
    # Notifications
    # =========================================================================

    async def create_notification(self, notification: Notification) -> Notification:
        await self.store.put(
            NOTIFICATIONS, notification.id, notification.model_dump(mode='json')
        )
        return notification

    async def get_notifications(self, recipient_id: str) -> list[Notification]:
        docs = await self.store.all(NOTIFICATIONS)
        return [
            Notification.model_validate(d) for d in docs
            if d.get('recipient_id') == recipient_id
        ]

    async def get_unread_count(self, recipient_id: str) -> int:
        return sum(
            1 for n in await self.get_notifications(recipient_id)
            if n.status == NotificationStatus.UNREAD
        )

    async def mark_as_read(self, notification_id: str, recipient_id: str) -> bool:
        doc = await self.store.get(NOTIFICATIONS, notification_id)
        if doc is None or doc.get('recipient_id') != recipient_id:
            return False
        notification = Notification.model_validate(doc)
        notification.status = NotificationStatus.READ
        notification.read_at = utcnow()
        await self.store.put(
            NOTIFICATIONS, notification.id, notification.model_dump(mode='json')
        )
        return True

    async def mark_all_as_read(self, recipient_id: str) -> int:
        """Mark every unread notification for a recipient; returns how many changed."""
        changed = 0
        for notification in await self.get_notifications(recipient_id):
            if notification.status == NotificationStatus.UNREAD:
                notification.status = NotificationStatus.READ
                notification.read_at = utcnow()
                await self.store.put(
                    NOTIFICATIONS, notification.id, notification.model_dump(mode='json')
                )
                changed += 1
        return changed

    async def delete_notification(self, notification_id: str, recipient_id: str) -> bool:
        doc = await self.store.get(NOTIFICATIONS, notification_id)
        if doc is None or doc.get('recipient_id') != recipient_id:
            return False
        return await self.store.delete(NOTIFICATIONS, notification_id)

    # =========================================================================
    # Users
    # =========================================================================

    async def get_all_users(self) -> list[User]:
        return [User.model_validate(d) for d in await self.store.all(USERS)]

    async def get_user_by_email(self, email: str) -> User | None:
        wanted = email.lower()
        for user in await self.get_all_users():
            if user.email.lower() == wanted:
                return user
        return None

    async def create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
        bootcamp_name: str | None = None,
    ) -> User | None:
        """Create a user; returns None if the email is already registered."""
        if await self.get_user_by_email(email) is not None:
            return None
        user = User(
            email=email.lower(),
            name=name,
            password_hash=hash_password(password),
            role=role,
            bootcamp_name=bootcamp_name,
        )
        await self.store.put(USERS, user.id, user.model_dump(mode='json'))
        return user

    async def verify_login(self, email: str, password: str, role: UserRole) -> User | None:
        user = await self.get_user_by_email(email)
        if user is None or user.role != role:
            return None
        if user.password_hash != hash_password(password):
            return None
        return user

    async def get_all_supervisors(self) -> list[User]:
        return [u for u in await self.get_all_users() if u.role == UserRole.SUPERVISOR]

    async def get_supervisors_by_bootcamp(self, bootcamp_name: str) -> list[User]:
        wanted = bootcamp_name.lower()
        return [
            u for u in await self.get_all_supervisors()
            if u.bootcamp_name and u.bootcamp_name.lower() == wanted
        ]

    async def get_all_bootcamps(self) -> list[str]:
        bootcamps: list[str] = []
        for supervisor in await self.get_all_supervisors():
            if supervisor.bootcamp_name and supervisor.bootcamp_name not in bootcamps:
                bootcamps.append(supervisor.bootcamp_name)
        return bootcamps
