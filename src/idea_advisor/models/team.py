"""
Team models: submitted team members and their derived profiles.

TeamMember is the authoritative input carried on a submission.
TeamMemberProfile and TeamProfile are recomputed on every workflow run and
never persisted.
"""

from enum import Enum

from pydantic import BaseModel, Field


class SkillLevel(str, Enum):
    """Self-reported proficiency for a technical skill."""

    BEGINNER = 'beginner'
    INTERMEDIATE = 'intermediate'
    ADVANCED = 'advanced'


class CoverageLevel(str, Enum):
    """How well a team covers a skill area."""

    WEAK = 'weak'
    MODERATE = 'moderate'
    STRONG = 'strong'


class TechnicalSkill(BaseModel):
    """A single technical skill with its level."""

    skill: str = Field(..., description='Skill or technology name (e.g., "React")')
    level: SkillLevel = Field(default=SkillLevel.INTERMEDIATE)
    years: float | None = Field(default=None, description='Years of experience, if known')


class TeamMember(BaseModel):
    """A team member as entered on the submission form."""

    full_name: str = Field(..., description='Display name of the member')
    academic_id: str | None = Field(default=None)
    phone_number: str | None = Field(default=None)
    email: str | None = Field(default=None)

    # Optional enrichment; profiling falls back to a generic skill when empty
    skills: list[TechnicalSkill] = Field(default_factory=list)
    preferred_roles: list[str] = Field(default_factory=list)
    previous_projects: int = Field(default=0, ge=0)


class MemberContact(BaseModel):
    email: str | None = None
    phone: str | None = None
    academic_id: str | None = None


class TeamMemberProfile(BaseModel):
    """Derived profile of a team member used for role matching."""

    member_id: str
    full_name: str
    contact: MemberContact = Field(default_factory=MemberContact)
    technical_skills: list[TechnicalSkill] = Field(default_factory=list)
    soft_skills: list[str] = Field(default_factory=list)
    previous_projects: int = 0
    preferred_roles: list[str] = Field(default_factory=list)
    role_fit: dict[str, float] = Field(
        default_factory=dict,
        description='Heuristic fit score per role name, each in [0, 1]',
    )

    @property
    def skill_names(self) -> set[str]:
        return {s.skill.lower() for s in self.technical_skills}


class TeamProfile(BaseModel):
    """Aggregate profile of a submitting team."""

    team_id: str
    size: int
    members: list[TeamMemberProfile] = Field(default_factory=list)
    skill_coverage: dict[str, CoverageLevel] = Field(default_factory=dict)
    gaps: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)

    @property
    def all_skills(self) -> set[str]:
        """Lower-cased union of every member's technical skills."""
        skills: set[str] = set()
        for member in self.members:
            skills |= member.skill_names
        return skills
