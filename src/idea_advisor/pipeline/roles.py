"""
Role recommendation.

Required roles come from a declarative trigger table evaluated against the
project's domain, technologies and goals. Team members then claim roles in
team-list order: each member takes their best-scoring role that nobody has
claimed yet, provided the score exceeds ASSIGNMENT_THRESHOLD. First come,
first served; there is no global optimisation. Roles nobody claims become
team gaps.
"""

from collections.abc import Callable
from dataclasses import dataclass

import pydantic

from ..errors import RoleRecommendationError
from ..logging import get_logger
from ..models.analysis import (
    AlternativeRole,
    GapImportance,
    ProjectElements,
    RoleAssignment,
    RoleRecommendationResult,
    TeamGap,
)
from ..models.team import SkillLevel, TeamMemberProfile, TeamProfile
from ..text import mentions

logger = get_logger(__name__)

ML_ENGINEER = 'ML Engineer'
DATA_ENGINEER = 'Data Engineer'
BACKEND_ENGINEER = 'Backend Engineer'
FRONTEND_ENGINEER = 'Frontend Engineer'
FULL_STACK_DEVELOPER = 'Full-stack Developer'
PRODUCT_MANAGER = 'Product Manager'

ASSIGNMENT_THRESHOLD = 0.3
MAX_ALTERNATIVES = 2
PREFERENCE_BONUS = 0.15
EXPERIENCE_BONUS_PER_PROJECT = 0.02
MAX_EXPERIENCE_BONUS = 0.1
PRODUCT_MANAGER_GOAL_COUNT = 3

SKILL_BONUS = {
    SkillLevel.ADVANCED: 0.2,
    SkillLevel.INTERMEDIATE: 0.1,
    SkillLevel.BEGINNER: 0.05,
}

ML_KEYWORDS = ('ai', 'ml', 'tensorflow', 'pytorch')
FRONTEND_KEYWORDS = ('react', 'vue', 'angular', 'frontend', 'html', 'css')
BACKEND_KEYWORDS = ('node', 'python', 'java', 'backend', 'api', 'server')

# Keys are lower-cased role names
ROLE_SKILLS: dict[str, tuple[str, ...]] = {
    'ml engineer': ('python', 'tensorflow', 'pytorch', 'ml', 'ai', 'neural', 'deep learning'),
    'data engineer': ('python', 'sql', 'data', 'etl', 'pipeline', 'spark'),
    'backend engineer': ('node', 'python', 'java', 'api', 'server', 'backend', 'database'),
    'frontend engineer': ('react', 'vue', 'angular', 'javascript', 'html', 'css', 'frontend'),
    'full-stack developer': ('react', 'node', 'python', 'javascript', 'full', 'stack'),
    'ui/ux designer': ('design', 'figma', 'ui', 'ux', 'prototype', 'wireframe'),
    'devops engineer': ('docker', 'kubernetes', 'ci', 'cd', 'aws', 'azure', 'devops'),
    'qa engineer': ('testing', 'qa', 'quality', 'automation', 'selenium'),
    'data scientist': ('python', 'data', 'analytics', 'pandas', 'numpy', 'statistics'),
}

RESPONSIBILITIES: dict[str, list[str]] = {
    ML_ENGINEER: [
        'Design and implement ML models',
        'Improve model performance',
        'Prepare training data',
    ],
    BACKEND_ENGINEER: [
        'Build the APIs',
        'Manage the database',
        'Implement server-side logic',
    ],
    FRONTEND_ENGINEER: [
        'Build the user interface',
        'Improve the user experience',
        'Integrate with the APIs',
    ],
    FULL_STACK_DEVELOPER: [
        'Build both frontend and backend',
        'Integrate the components',
        'Manage the database',
    ],
    PRODUCT_MANAGER: [
        'Plan the project',
        'Manage requirements',
        'Coordinate the team',
    ],
}

GAP_IMPORTANCE = {
    ML_ENGINEER: GapImportance.HIGH,
    BACKEND_ENGINEER: GapImportance.HIGH,
    FRONTEND_ENGINEER: GapImportance.MEDIUM,
}


@dataclass(frozen=True)
class RoleTrigger:
    """Roles implied by a project when ``applies`` holds."""

    name: str
    roles: tuple[str, ...]
    applies: Callable[[ProjectElements], bool]


def _mentions_any(technologies: list[str], keywords: tuple[str, ...]) -> bool:
    return any(mentions(tech, keywords) for tech in technologies)


def _has_ml_signal(elements: ProjectElements) -> bool:
    return mentions(elements.domain, ('ai', 'ml')) or _mentions_any(elements.technology_stack, ML_KEYWORDS)


ROLE_TRIGGERS: list[RoleTrigger] = [
    RoleTrigger('ml', (ML_ENGINEER, DATA_ENGINEER), _has_ml_signal),
    RoleTrigger(
        'frontend',
        (FRONTEND_ENGINEER,),
        lambda e: _mentions_any(e.technology_stack, FRONTEND_KEYWORDS),
    ),
    RoleTrigger(
        'backend',
        (BACKEND_ENGINEER,),
        lambda e: _mentions_any(e.technology_stack, BACKEND_KEYWORDS),
    ),
]


def identify_required_roles(elements: ProjectElements) -> list[str]:
    """
    Required roles for a project, in trigger-table order.

    Frontend and Backend Engineer together collapse into a single
    Full-stack Developer. More than three goals add a Product Manager.
    A project that triggers nothing needs a Full-stack Developer.
    """
    roles: list[str] = []
    for trigger in ROLE_TRIGGERS:
        if trigger.applies(elements):
            roles.extend(r for r in trigger.roles if r not in roles)

    if FRONTEND_ENGINEER in roles and BACKEND_ENGINEER in roles:
        roles = [r for r in roles if r not in (FRONTEND_ENGINEER, BACKEND_ENGINEER)]
        roles.append(FULL_STACK_DEVELOPER)

    if len(elements.goals) > PRODUCT_MANAGER_GOAL_COUNT and PRODUCT_MANAGER not in roles:
        roles.append(PRODUCT_MANAGER)

    return roles or [FULL_STACK_DEVELOPER]


def skill_matches_role(skill: str, role: str) -> bool:
    return mentions(skill, ROLE_SKILLS.get(role.lower(), ()))


def role_score(member: TeamMemberProfile, role: str) -> float:
    """Fit of one member for one role, clamped to [0, 1]."""
    score = member.role_fit.get(role, 0.0)

    for skill in member.technical_skills:
        if skill_matches_role(skill.skill, role):
            score += SKILL_BONUS[skill.level]

    if role in member.preferred_roles:
        score += PREFERENCE_BONUS

    if member.previous_projects > 0:
        score += min(MAX_EXPERIENCE_BONUS, member.previous_projects * EXPERIENCE_BONUS_PER_PROJECT)

    return min(1.0, max(0.0, score))


def explain_assignment(member: TeamMemberProfile, role: str, score: float) -> str:
    reasons = []

    base_fit = member.role_fit.get(role, 0.0)
    if base_fit > 0.7:
        reasons.append(f'High fit for the role ({base_fit:.0%})')

    relevant = [s.skill for s in member.technical_skills if skill_matches_role(s.skill, role)]
    if relevant:
        reasons.append(f'Has relevant skills: {", ".join(relevant)}')

    if role in member.preferred_roles:
        reasons.append('Role is among the stated preferences')

    if not reasons:
        return f'Fit score {score:.0%} based on the member profile'
    return '. '.join(reasons)


class RoleMatcher:
    """
    Assigns required project roles to team members.

    Usage:
        matcher = RoleMatcher()
        result = matcher.recommend_roles(team_profile, project_elements)
    """

    def recommend_roles(self, team: TeamProfile, elements: ProjectElements) -> RoleRecommendationResult:
        """
        Recommend a role for each team member.

        Args:
            team: Profiled team; members are processed in list order
            elements: Structured project elements

        Returns:
            RoleRecommendationResult with assignments and unclaimed-role gaps

        Raises:
            RoleRecommendationError: If a computed assignment is out of range
        """
        try:
            return self._assign(team, elements)
        except pydantic.ValidationError as e:
            raise RoleRecommendationError(
                f'Role recommendation failed: {e.error_count()} invalid field(s)',
                context={'team_id': team.team_id},
            ) from e

    def _assign(self, team: TeamProfile, elements: ProjectElements) -> RoleRecommendationResult:
        required = identify_required_roles(elements)
        claimed: set[str] = set()
        assignments: list[RoleAssignment] = []

        for member in team.members:
            open_roles = [r for r in required if r not in claimed]
            if not open_roles:
                logger.debug('roles.member_unassigned', member_id=member.member_id, reason='no_open_roles')
                continue

            scored = [(role, role_score(member, role)) for role in open_roles]
            # sorted() is stable, so ties keep required-role order
            scored.sort(key=lambda item: item[1], reverse=True)
            best_role, best_score = scored[0]

            if best_score <= ASSIGNMENT_THRESHOLD:
                logger.debug(
                    'roles.member_unassigned',
                    member_id=member.member_id,
                    reason='below_threshold',
                    best_score=best_score,
                )
                continue

            assignments.append(
                RoleAssignment(
                    member_id=member.member_id,
                    member_name=member.full_name,
                    assigned_role=best_role,
                    confidence_score=best_score,
                    reasoning=explain_assignment(member, best_role, best_score),
                    alternative_roles=[
                        AlternativeRole(role=role, score=score, reason=f'Fit score {score:.0%}')
                        for role, score in scored[1 : 1 + MAX_ALTERNATIVES]
                    ],
                    responsibilities=RESPONSIBILITIES.get(best_role, [f'Carry out the {best_role} tasks']),
                )
            )
            claimed.add(best_role)

        gaps = [
            TeamGap(
                missing_role=role,
                importance=GAP_IMPORTANCE.get(role, GapImportance.LOW),
                recommendation=f'Consider adding a {role} to the team to improve coverage',
            )
            for role in required
            if role not in claimed
        ]

        logger.info(
            'roles.recommended',
            required_roles=required,
            assigned=len(assignments),
            gaps=[g.missing_role for g in gaps],
        )
        return RoleRecommendationResult(
            required_roles=required,
            role_assignments=assignments,
            team_gaps=gaps,
        )

    def recommend_for_stack(self, team: TeamProfile, tech_stack: list[str]) -> RoleRecommendationResult:
        """Recommend roles from a bare technology list."""
        return self.recommend_roles(team, ProjectElements(technology_stack=list(tech_stack)))
