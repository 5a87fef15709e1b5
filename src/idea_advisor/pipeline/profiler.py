"""
Team profiling.

Derives a TeamMemberProfile per submitted member (role fit, skills) and a
TeamProfile for the whole team (coverage per skill area, gaps, strengths).
Profiles are recomputed on every run and never persisted.
"""

from collections import defaultdict

from ..logging import get_logger
from ..models.team import (
    CoverageLevel,
    MemberContact,
    SkillLevel,
    TeamMember,
    TeamMemberProfile,
    TeamProfile,
    TechnicalSkill,
)
from ..text import mentions
from ..utils import new_id

logger = get_logger(__name__)

DEFAULT_SKILL = TechnicalSkill(skill='General Programming', level=SkillLevel.INTERMEDIATE)
DEFAULT_SOFT_SKILLS = ['Communication', 'Teamwork', 'Problem-solving']
DEFAULT_STRENGTH = 'Strong technical foundation'
MAX_STRENGTHS = 3

BASE_ROLE_FIT = {
    'Full-stack Developer': 0.5,
    'Backend Engineer': 0.5,
    'Frontend Engineer': 0.5,
}

# Bonus a skill adds to the roles it evidences
FIT_BONUS = {
    SkillLevel.ADVANCED: 0.3,
    SkillLevel.INTERMEDIATE: 0.2,
    SkillLevel.BEGINNER: 0.1,
}

ROLE_FIT_KEYWORDS: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (('python', 'java', 'node', 'backend'), ('Backend Engineer',)),
    (('react', 'vue', 'angular', 'frontend'), ('Frontend Engineer',)),
    (('ml', 'ai', 'data', 'tensorflow'), ('ML Engineer', 'Data Scientist')),
]

COVERAGE_AREAS: dict[str, tuple[str, ...]] = {
    'ML/AI': ('ml', 'ai', 'tensorflow', 'pytorch'),
    'Backend': ('backend', 'server', 'api', 'node', 'python', 'java'),
    'Frontend': ('frontend', 'react', 'vue', 'angular', 'ui'),
    'DevOps': ('devops', 'docker', 'kubernetes', 'ci', 'cd'),
    'Design': ('design', 'ui', 'ux', 'figma'),
}

# Roles commonly missing from student teams, with the skills that evidence them
COMMON_GAP_ROLES: dict[str, tuple[str, ...]] = {
    'DevOps Engineer': ('devops', 'docker', 'kubernetes', 'ci', 'cd'),
    'UI/UX Designer': ('design', 'ui', 'ux', 'figma'),
    'QA Engineer': ('qa', 'testing', 'quality', 'selenium'),
}

STRENGTH_WEIGHT = {
    SkillLevel.ADVANCED: 2.0,
    SkillLevel.INTERMEDIATE: 1.0,
    SkillLevel.BEGINNER: 0.5,
}


def upgrade_coverage(current: CoverageLevel, level: SkillLevel) -> CoverageLevel:
    """Raise coverage for one skill: advanced makes it strong, intermediate lifts weak to moderate."""
    if current == CoverageLevel.STRONG or level == SkillLevel.ADVANCED:
        return CoverageLevel.STRONG
    if level == SkillLevel.INTERMEDIATE and current == CoverageLevel.WEAK:
        return CoverageLevel.MODERATE
    return current


def calculate_role_fit(skills: list[TechnicalSkill]) -> dict[str, float]:
    role_fit = dict(BASE_ROLE_FIT)
    for skill in skills:
        bonus = FIT_BONUS[skill.level]
        for keywords, roles in ROLE_FIT_KEYWORDS:
            if not mentions(skill.skill, keywords):
                continue
            for role in roles:
                role_fit[role] = min(1.0, role_fit.get(role, 0.0) + bonus)
    return role_fit


class TeamProfiler:
    """Builds member and team profiles from submitted team members."""

    def profile_member(self, member: TeamMember) -> TeamMemberProfile:
        skills = list(member.skills) or [DEFAULT_SKILL]
        member_id = member.academic_id or member.email or member.phone_number or new_id('MEMBER')

        return TeamMemberProfile(
            member_id=member_id,
            full_name=member.full_name,
            contact=MemberContact(
                email=member.email,
                phone=member.phone_number,
                academic_id=member.academic_id,
            ),
            technical_skills=skills,
            soft_skills=list(DEFAULT_SOFT_SKILLS),
            previous_projects=member.previous_projects,
            preferred_roles=list(member.preferred_roles),
            role_fit=calculate_role_fit(skills),
        )

    def profile_team(self, members: list[TeamMember], project_id: str) -> TeamProfile:
        """
        Profile a whole team.

        Args:
            members: Submitted team members, in form order
            project_id: Owning project id, used to derive the team id

        Returns:
            TeamProfile with per-member profiles and team composition
        """
        profiles = [self.profile_member(m) for m in members]
        profile = TeamProfile(
            team_id=f'TEAM-{project_id}',
            size=len(members),
            members=profiles,
            skill_coverage=self.skill_coverage(profiles),
            gaps=self.identify_gaps(profiles),
            strengths=self.identify_strengths(profiles),
        )

        logger.info(
            'profiler.team_profiled',
            team_id=profile.team_id,
            size=profile.size,
            gaps=profile.gaps,
        )
        return profile

    def skill_coverage(self, profiles: list[TeamMemberProfile]) -> dict[str, CoverageLevel]:
        coverage = {area: CoverageLevel.WEAK for area in COVERAGE_AREAS}
        for profile in profiles:
            for skill in profile.technical_skills:
                for area, keywords in COVERAGE_AREAS.items():
                    if mentions(skill.skill, keywords):
                        coverage[area] = upgrade_coverage(coverage[area], skill.level)
        return coverage

    def identify_gaps(self, profiles: list[TeamMemberProfile]) -> list[str]:
        skills = [s.skill for p in profiles for s in p.technical_skills]
        return [
            role
            for role, keywords in COMMON_GAP_ROLES.items()
            if not any(mentions(skill, keywords) for skill in skills)
        ]

    def identify_strengths(self, profiles: list[TeamMemberProfile]) -> list[str]:
        # Insertion order is preserved, so equal weights keep first-seen order
        weights: dict[str, float] = defaultdict(float)
        for profile in profiles:
            for skill in profile.technical_skills:
                weights[skill.skill] += STRENGTH_WEIGHT[skill.level]

        ranked = sorted(weights.items(), key=lambda item: item[1], reverse=True)
        return [skill for skill, _ in ranked[:MAX_STRENGTHS]] or [DEFAULT_STRENGTH]
