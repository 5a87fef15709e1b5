"""
Analysis models produced by the advisory pipeline.

- ProjectElements / IngestedProject: structured view of a submission
- SimilarityResult: one scored corpus match for an idea
- RoleAssignment / TeamGap / RoleRecommendationResult: role matcher output
- MergeAnalysis: pairwise merge viability with a merged-project proposal

All of these are ephemeral: recomputed per workflow run, never persisted.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from ..utils import utcnow
from .project import Project


class ProjectElements(BaseModel):
    """Structured elements extracted from a project description."""

    goals: list[str] = Field(default_factory=list)
    problem_statement: str = ''
    technology_stack: list[str] = Field(default_factory=list)
    domain: str = 'General'
    scope: str = ''
    target_audience: str | None = None
    expected_outcomes: list[str] = Field(default_factory=list)


class IngestedProjectMetadata(BaseModel):
    name: str
    bootcamp: str
    supervisor: str
    submission_date: datetime = Field(default_factory=utcnow)


class IngestedProject(BaseModel):
    """A submission after structured-element extraction."""

    project_id: str
    metadata: IngestedProjectMetadata
    structured_elements: ProjectElements
    extracted_by: str = Field(
        default='heuristic',
        description='"llm" when the model produced the elements, "heuristic" otherwise',
    )


class SimilarityResult(BaseModel):
    """A corpus project scored against an idea."""

    project: Project
    similarity_score: float = Field(..., ge=0.0, le=1.0)
    reasoning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'project': {'id': self.project.id, 'title': self.project.title},
            'similarity_score': self.similarity_score,
            'reasoning': self.reasoning,
        }


# =============================================================================
# Role recommendation
# =============================================================================


class GapImportance(str, Enum):
    HIGH = 'high'
    MEDIUM = 'medium'
    LOW = 'low'


class AlternativeRole(BaseModel):
    role: str
    score: float
    reason: str


class RoleAssignment(BaseModel):
    """A role claimed by one team member."""

    member_id: str
    member_name: str
    assigned_role: str
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    reasoning: str = ''
    alternative_roles: list[AlternativeRole] = Field(default_factory=list, max_length=2)
    responsibilities: list[str] = Field(default_factory=list)


class TeamGap(BaseModel):
    """A required role no team member claimed."""

    missing_role: str
    importance: GapImportance
    recommendation: str


class RoleRecommendationResult(BaseModel):
    required_roles: list[str] = Field(default_factory=list)
    role_assignments: list[RoleAssignment] = Field(default_factory=list)
    team_gaps: list[TeamGap] = Field(default_factory=list)

    @property
    def assigned_roles(self) -> list[str]:
        return [a.assigned_role for a in self.role_assignments]


# =============================================================================
# Merge analysis
# =============================================================================


MERGE_SIMILARITY_THRESHOLD = 0.8
MERGE_SCOPE_THRESHOLD = 0.7


class RecommendationStrength(str, Enum):
    WEAK = 'weak'
    MEDIUM = 'medium'
    STRONG = 'strong'


class ProjectRef(BaseModel):
    id: str
    name: str
    bootcamp: str
    supervisor: str


class ViabilityScores(BaseModel):
    """The five independent merge viability sub-scores."""

    similarity: float = Field(..., ge=0.0, le=1.0)
    skill_complementarity: float = Field(..., ge=0.0, le=1.0)
    scope_compatibility: float = Field(..., ge=0.0, le=1.0)
    timeline_alignment: float = Field(..., ge=0.0, le=1.0)
    supervisor_compatibility: float = Field(..., ge=0.0, le=1.0)

    @property
    def mean(self) -> float:
        return (
            self.similarity
            + self.skill_complementarity
            + self.scope_compatibility
            + self.timeline_alignment
            + self.supervisor_compatibility
        ) / 5


class MergedProjectProposal(BaseModel):
    suggested_name: str
    combined_scope: str
    merged_team_structure: list[str] = Field(default_factory=list)
    expected_benefits: list[str] = Field(default_factory=list)


class MergeAnalysis(BaseModel):
    """
    Merge viability of two projects.

    ``merge_recommended`` holds only when similarity >= 0.8 and
    scope_compatibility >= 0.7; construction fails otherwise.
    """

    project_a: ProjectRef
    project_b: ProjectRef
    merge_recommended: bool
    recommendation_strength: RecommendationStrength
    viability_scores: ViabilityScores
    merged_project_proposal: MergedProjectProposal
    cross_bootcamp: bool

    @model_validator(mode='after')
    def _check_recommendation(self) -> 'MergeAnalysis':
        scores = self.viability_scores
        if self.merge_recommended and not (
            scores.similarity >= MERGE_SIMILARITY_THRESHOLD
            and scores.scope_compatibility >= MERGE_SCOPE_THRESHOLD
        ):
            raise ValueError(
                'merge_recommended requires similarity >= 0.8 and scope_compatibility >= 0.7'
            )
        return self
