"""
Project models for the submission portal.

Two shapes coexist:
- Project: the normalized corpus entry that new ideas are compared against.
  Corpus entries come from the static JSON resource, uploaded batches and
  earlier submissions.
- ProjectSubmission: the persisted aggregate a student submits. It is only
  ever mutated to append alerts/responses or change status.
"""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from ..utils import new_id, utcnow
from .team import TeamMember


class SubmissionStatus(str, Enum):
    """Review lifecycle of a submitted project."""

    PENDING_REVIEW = 'pending_review'
    APPROVED = 'approved'
    NEEDS_REVISION = 'needs_revision'
    REJECTED = 'rejected'


class AlertStatus(str, Enum):
    PENDING = 'pending'
    REVIEWED = 'reviewed'


class ResponseType(str, Enum):
    """Kinds of supervisor response to a submission."""

    SIMILARITY_WARNING = 'similarity_warning'
    APPROVAL = 'approval'
    REJECTION = 'rejection'
    REVISION_REQUEST = 'revision_request'


class Project(BaseModel):
    """
    Normalized corpus project.

    Identity is the opaque ``id``; ``title`` is the de-duplication key used
    when corpora from different sources are merged.
    """

    id: str
    title: str
    description: str = ''
    bootcamp: str | None = None
    technologies: list[str] = Field(default_factory=list)
    team_members: list[str] = Field(default_factory=list)
    status: str = 'pending'

    def search_text(self) -> str:
        """Text the local scorer compares an idea against."""
        parts = [self.title, self.description, self.bootcamp or '', ' '.join(self.technologies)]
        return ' '.join(p for p in parts if p)


class SimilarityAlert(BaseModel):
    """Record of a high-similarity match attached to a submission."""

    matched_project_id: str
    matched_project_name: str
    similarity_score: float = Field(..., ge=0.0, le=1.0)
    similarity_reasons: list[str] = Field(default_factory=list)
    alert_status: AlertStatus = AlertStatus.PENDING


class SupervisorResponse(BaseModel):
    """A supervisor's response appended to a submission."""

    id: str = Field(default_factory=lambda: new_id('RESP'))
    supervisor_id: str
    supervisor_name: str
    message: str
    response_type: ResponseType
    created_at: datetime = Field(default_factory=utcnow)


class SubmissionInput(BaseModel):
    """Form payload for a new project submission."""

    project_name: str = ''
    project_description: str = ''
    bootcamp_supervisor: str = ''
    bootcamp_name: str = ''
    tools_technologies: list[str] = Field(default_factory=list)
    team: list[TeamMember] = Field(default_factory=list)
    submitted_by: str = ''

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        'project_name',
        'project_description',
        'bootcamp_supervisor',
        'bootcamp_name',
        'submitted_by',
    )

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent or blank."""
        missing = [name for name in self.REQUIRED_FIELDS if not str(getattr(self, name)).strip()]
        if not self.team:
            missing.append('team')
        return missing

    @property
    def idea_text(self) -> str:
        """Text submitted to the similarity scorer."""
        return f'{self.project_name} {self.project_description}'.strip()


class ProjectSubmission(BaseModel):
    """Persisted project submission."""

    id: str = Field(default_factory=lambda: new_id('PRJ'))
    project_name: str
    project_description: str
    bootcamp_supervisor: str
    bootcamp_name: str
    tools_technologies: list[str] = Field(default_factory=list)
    team: list[TeamMember] = Field(default_factory=list)
    submitted_by: str
    submitted_at: datetime = Field(default_factory=utcnow)
    status: SubmissionStatus = SubmissionStatus.PENDING_REVIEW
    similarity_alerts: list[SimilarityAlert] = Field(default_factory=list)
    supervisor_responses: list[SupervisorResponse] = Field(default_factory=list)

    @classmethod
    def from_input(cls, data: SubmissionInput) -> 'ProjectSubmission':
        return cls(
            project_name=data.project_name.strip(),
            project_description=data.project_description.strip(),
            bootcamp_supervisor=data.bootcamp_supervisor.strip(),
            bootcamp_name=data.bootcamp_name.strip(),
            tools_technologies=list(data.tools_technologies),
            team=list(data.team),
            submitted_by=data.submitted_by,
        )

    def to_project(self) -> Project:
        """Convert to a corpus entry."""
        return Project(
            id=self.id,
            title=self.project_name,
            description=self.project_description,
            bootcamp=self.bootcamp_name or None,
            technologies=list(self.tools_technologies),
            team_members=[m.full_name for m in self.team],
            status=self.status.value,
        )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode='json')
