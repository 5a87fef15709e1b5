"""
Merge opportunity analysis.

Scores the viability of merging two submitted projects on five independent
axes and synthesizes a merged-project proposal. Low skill overlap is
treated as complementary and scores high.

A merge is recommended only when similarity >= 0.8 and scope
compatibility >= 0.7; the recommendation strength is derived from the mean
of all five scores.
"""

from ..errors import MergeAnalysisError
from ..logging import get_logger
from ..models.analysis import (
    MERGE_SCOPE_THRESHOLD,
    MERGE_SIMILARITY_THRESHOLD,
    IngestedProject,
    MergeAnalysis,
    MergedProjectProposal,
    ProjectElements,
    ProjectRef,
    RecommendationStrength,
    SimilarityResult,
    ViabilityScores,
)
from ..models.project import ProjectSubmission
from ..models.team import TeamProfile
from ..text import jaccard, text_similarity

logger = get_logger(__name__)

OPPORTUNITY_THRESHOLD = 0.7

DEFAULT_SKILL_COMPLEMENTARITY = 0.5
DEFAULT_SCOPE_COMPATIBILITY = 0.7
COMPLEMENTARITY_BONUS = 0.2
MIN_SKILL_COMPLEMENTARITY = 0.3

# (days strictly below, score)
TIMELINE_STEPS = [(30, 0.9), (60, 0.7), (90, 0.5)]
TIMELINE_FLOOR = 0.3

SAME_SUPERVISOR = 1.0
DIFFERENT_SUPERVISOR = 0.5

SCOPE_EXCERPT_LENGTH = 200

BASE_BENEFITS = [
    'Larger team with more diverse skills',
    'Broader and stronger project scope',
    'Better use of shared resources',
]
CROSS_BOOTCAMP_BENEFIT = 'Combines expertise from two different bootcamps'


def skill_complementarity(team_a: TeamProfile | None, team_b: TeamProfile | None) -> float:
    if team_a is None or team_b is None:
        return DEFAULT_SKILL_COMPLEMENTARITY

    overlap = jaccard(team_a.all_skills, team_b.all_skills)
    return max(MIN_SKILL_COMPLEMENTARITY, min(1.0, 1 - overlap + COMPLEMENTARITY_BONUS))


def _goals_overlap(goals_a: list[str], goals_b: list[str]) -> float:
    if not goals_a or not goals_b:
        return 0.0

    lowered_b = [g.lower() for g in goals_b]
    common = [
        goal
        for goal in (g.lower() for g in goals_a)
        if any(goal in other or other in goal for other in lowered_b)
    ]
    return len(common) / max(len(goals_a), len(goals_b))


def scope_compatibility(elements_a: ProjectElements | None, elements_b: ProjectElements | None) -> float:
    """
    Weighted scope match: 0.4 domain, 0.4 goals, 0.2 problem statement.

    Exact domain equality earns the full 0.4; one domain containing the
    other (case-insensitive) earns 0.2.
    """
    if elements_a is None or elements_b is None:
        return DEFAULT_SCOPE_COMPATIBILITY

    score = 0.0

    domain_a, domain_b = elements_a.domain, elements_b.domain
    if domain_a and domain_b:
        if domain_a == domain_b:
            score += 0.4
        elif domain_a.lower() in domain_b.lower() or domain_b.lower() in domain_a.lower():
            score += 0.2

    score += 0.4 * _goals_overlap(elements_a.goals, elements_b.goals)

    if elements_a.problem_statement and elements_b.problem_statement:
        score += 0.2 * text_similarity(elements_a.problem_statement, elements_b.problem_statement)

    return min(1.0, score)


def timeline_alignment(a: ProjectSubmission, b: ProjectSubmission) -> float:
    days = abs((a.submitted_at - b.submitted_at).total_seconds()) / 86400
    for limit, score in TIMELINE_STEPS:
        if days < limit:
            return score
    return TIMELINE_FLOOR


def recommendation_strength(scores: ViabilityScores) -> RecommendationStrength:
    mean = scores.mean
    if mean >= 0.8:
        return RecommendationStrength.STRONG
    if mean >= 0.6:
        return RecommendationStrength.MEDIUM
    return RecommendationStrength.WEAK


def _project_ref(project: ProjectSubmission) -> ProjectRef:
    return ProjectRef(
        id=project.id,
        name=project.project_name,
        bootcamp=project.bootcamp_name,
        supervisor=project.bootcamp_supervisor,
    )


def _scope_excerpt(project: ProjectSubmission, ingested: IngestedProject | None) -> str:
    if ingested is not None and ingested.structured_elements.scope:
        return ingested.structured_elements.scope
    return project.project_description[:SCOPE_EXCERPT_LENGTH]


def _member_names(project: ProjectSubmission, team: TeamProfile | None) -> list[str]:
    if team is not None:
        return [m.full_name for m in team.members]
    return [m.full_name for m in project.team]


class MergeAdvisor:
    """
    Decides whether two projects are merge candidates.

    Usage:
        advisor = MergeAdvisor()
        analysis = advisor.analyze(project_a, project_b, similarity=0.85)
    """

    def analyze(
        self,
        project_a: ProjectSubmission,
        project_b: ProjectSubmission,
        similarity: float,
        ingested_a: IngestedProject | None = None,
        ingested_b: IngestedProject | None = None,
        team_a: TeamProfile | None = None,
        team_b: TeamProfile | None = None,
    ) -> MergeAnalysis:
        """
        Analyze the merge viability of two projects.

        Args:
            project_a: The newly submitted project
            project_b: The existing project it resembles
            similarity: Similarity score from the scorer, passed through
            ingested_a: Structured elements of project_a, if available
            ingested_b: Structured elements of project_b, if available
            team_a: Team profile of project_a, if available
            team_b: Team profile of project_b, if available

        Returns:
            MergeAnalysis with viability scores and a merged proposal

        Raises:
            MergeAnalysisError: If the similarity score is outside [0, 1]
        """
        if not 0.0 <= similarity <= 1.0:
            raise MergeAnalysisError(
                f'Similarity score out of range: {similarity}',
                context={'project_a': project_a.id, 'project_b': project_b.id},
            )

        scores = ViabilityScores(
            similarity=similarity,
            skill_complementarity=skill_complementarity(team_a, team_b),
            scope_compatibility=scope_compatibility(
                ingested_a.structured_elements if ingested_a else None,
                ingested_b.structured_elements if ingested_b else None,
            ),
            timeline_alignment=timeline_alignment(project_a, project_b),
            supervisor_compatibility=(
                SAME_SUPERVISOR
                if project_a.bootcamp_supervisor == project_b.bootcamp_supervisor
                else DIFFERENT_SUPERVISOR
            ),
        )
        cross_bootcamp = project_a.bootcamp_name != project_b.bootcamp_name

        return MergeAnalysis(
            project_a=_project_ref(project_a),
            project_b=_project_ref(project_b),
            merge_recommended=(
                scores.similarity >= MERGE_SIMILARITY_THRESHOLD
                and scores.scope_compatibility >= MERGE_SCOPE_THRESHOLD
            ),
            recommendation_strength=recommendation_strength(scores),
            viability_scores=scores,
            merged_project_proposal=self.propose(
                project_a, project_b, ingested_a, ingested_b, team_a, team_b, cross_bootcamp
            ),
            cross_bootcamp=cross_bootcamp,
        )

    def propose(
        self,
        project_a: ProjectSubmission,
        project_b: ProjectSubmission,
        ingested_a: IngestedProject | None,
        ingested_b: IngestedProject | None,
        team_a: TeamProfile | None,
        team_b: TeamProfile | None,
        cross_bootcamp: bool,
    ) -> MergedProjectProposal:
        scope_a = _scope_excerpt(project_a, ingested_a)
        scope_b = _scope_excerpt(project_b, ingested_b)

        merged_team: list[str] = []
        for name in _member_names(project_a, team_a) + _member_names(project_b, team_b):
            if name not in merged_team:
                merged_team.append(name)

        benefits = list(BASE_BENEFITS)
        if cross_bootcamp:
            benefits.append(CROSS_BOOTCAMP_BENEFIT)

        return MergedProjectProposal(
            suggested_name=f'{project_a.project_name} & {project_b.project_name} - Integrated Platform',
            combined_scope=(
                f'{scope_a}\n\n{scope_b}\n\n'
                'The merged project combines the strengths of both projects.'
            ),
            merged_team_structure=merged_team,
            expected_benefits=benefits,
        )

    def find_merge_opportunities(
        self,
        new_project: ProjectSubmission,
        results: list[SimilarityResult],
        submitted: list[ProjectSubmission],
        threshold: float = OPPORTUNITY_THRESHOLD,
    ) -> list[MergeAnalysis]:
        """
        Analyze every strong match that is another submitted project.

        Args:
            new_project: The submission being processed
            results: Similarity results for its idea
            submitted: All submitted projects (corpus entries that are not
                submissions are ignored)
            threshold: Minimum similarity for a match to be analyzed

        Returns:
            Analyses that recommend a merge or span two bootcamps
        """
        by_id = {p.id: p for p in submitted}
        opportunities: list[MergeAnalysis] = []

        for result in results:
            if result.similarity_score < threshold:
                continue
            existing = by_id.get(result.project.id)
            if existing is None or existing.id == new_project.id:
                continue

            analysis = self.analyze(new_project, existing, result.similarity_score)
            if analysis.merge_recommended or analysis.cross_bootcamp:
                opportunities.append(analysis)

        logger.info(
            'merge.opportunities_found',
            candidates=sum(1 for r in results if r.similarity_score >= threshold),
            opportunities=len(opportunities),
        )
        return opportunities
