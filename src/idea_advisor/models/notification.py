"""
Notification and user models.

Notifications are an append-only per-recipient record, filtered client side.
Users exist so supervisor notifications can be routed by supervisor name and
bootcamp.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..utils import new_id, utcnow


class NotificationType(str, Enum):
    SIMILARITY_ALERT = 'similarity_alert'
    MERGE_OPPORTUNITY = 'merge_opportunity'
    SUPERVISOR_RESPONSE = 'supervisor_response'
    PROJECT_APPROVED = 'project_approved'
    PROJECT_REJECTED = 'project_rejected'
    PROJECT_NEEDS_REVISION = 'project_needs_revision'


class Severity(str, Enum):
    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'


class NotificationStatus(str, Enum):
    UNREAD = 'unread'
    READ = 'read'


class Notification(BaseModel):
    """A message delivered to one recipient."""

    id: str = Field(default_factory=lambda: new_id('NOTIF'))
    type: NotificationType
    recipient_id: str
    project_id: str | None = None
    title: str
    message: str
    severity: Severity = Severity.MEDIUM
    status: NotificationStatus = NotificationStatus.UNREAD
    created_at: datetime = Field(default_factory=utcnow)
    read_at: datetime | None = None
    metadata: dict[str, Any] | None = Field(
        default=None,
        description='Optional match details (similarity_score, matched_project_id, ...)',
    )


class UserRole(str, Enum):
    STUDENT = 'student'
    SUPERVISOR = 'supervisor'


class User(BaseModel):
    """Portal account."""

    id: str = Field(default_factory=lambda: new_id('USER'))
    email: str
    name: str
    password_hash: str
    role: UserRole
    bootcamp_name: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
