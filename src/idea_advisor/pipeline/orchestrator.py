"""
Submission workflow orchestrator.

Runs a new submission through the advisory stages:
1. Submit: validate and persist the submission
2. Ingest: extract structured project elements
3. Profile team: derive member and team profiles
4. Recommend roles: assign required roles to members
5. Score similarity: compare the idea against the corpus
6. Record alerts: attach strong matches to the submission
7. Find merge opportunities: analyze strong matches against other submissions
8. Notify students: alert the submitter about strong matches
9. Notify supervisors: tell supervisors about merge opportunities

The submission is persisted before any analysis, so it is never lost.
Every later stage yields a StageOutcome. A similarity failure skips every
stage after it; ingest/profile failures skip role recommendation;
notification failures are recorded. Analysis failures never propagate out
of ``execute``.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from ..errors import StageLog, StageOutcome, ValidationError
from ..logging import PipelineTimer, get_logger, logging_context
from ..models.analysis import (
    IngestedProject,
    MergeAnalysis,
    RoleRecommendationResult,
    SimilarityResult,
)
from ..models.notification import Notification
from ..models.project import Project, ProjectSubmission, SimilarityAlert, SubmissionInput
from ..models.team import TeamProfile
from ..repository import PortalRepository
from .ingestion import ProjectIngestor
from .merge_advisor import MergeAdvisor
from .notifier import ALERT_THRESHOLD, Notifier
from .profiler import TeamProfiler
from .roles import RoleMatcher
from .scorer import SimilarityScorer

logger = get_logger(__name__)

T = TypeVar('T')

STAGE_SUBMIT = 'submit'
STAGE_INGEST = 'ingest'
STAGE_PROFILE_TEAM = 'profile_team'
STAGE_RECOMMEND_ROLES = 'recommend_roles'
STAGE_SCORE_SIMILARITY = 'score_similarity'
STAGE_RECORD_ALERTS = 'record_alerts'
STAGE_FIND_MERGES = 'find_merge_opportunities'
STAGE_NOTIFY_STUDENTS = 'notify_students'
STAGE_NOTIFY_SUPERVISORS = 'notify_supervisors'

AFTER_SIMILARITY = (
    STAGE_RECORD_ALERTS,
    STAGE_FIND_MERGES,
    STAGE_NOTIFY_STUDENTS,
    STAGE_NOTIFY_SUPERVISORS,
)


@dataclass
class WorkflowResult:
    """Result of running one submission through the workflow."""

    project: ProjectSubmission
    ingested: IngestedProject | None = None
    team_profile: TeamProfile | None = None
    role_recommendations: RoleRecommendationResult | None = None
    similarity_results: list[SimilarityResult] = field(default_factory=list)
    merge_opportunities: list[MergeAnalysis] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)

    stages: StageLog = field(default_factory=StageLog)
    processing_time_ms: int | None = None
    stage_timings: dict[str, float] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """True if every stage completed."""
        return self.stages.all_ok

    @property
    def analyzed(self) -> bool:
        """True if similarity scoring ran, i.e. the submission was not submitted without analysis."""
        outcome = self.stages.get(STAGE_SCORE_SIMILARITY)
        return outcome is not None and outcome.ok

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'project': self.project.model_dump(mode='json'),
            'ingested': self.ingested.model_dump(mode='json') if self.ingested else None,
            'team_profile': self.team_profile.model_dump(mode='json') if self.team_profile else None,
            'role_recommendations': (
                self.role_recommendations.model_dump(mode='json') if self.role_recommendations else None
            ),
            'similarity_results': [r.to_dict() for r in self.similarity_results],
            'merge_opportunities': [m.model_dump(mode='json') for m in self.merge_opportunities],
            'notifications_sent': len(self.notifications),
            'stages': self.stages.to_list(),
            'success': self.success,
            'processing_time_ms': self.processing_time_ms,
            'stage_timings': self.stage_timings,
        }


class SubmissionWorkflow:
    """
    Sequences the advisory stages over a new submission.

    Usage:
        workflow = SubmissionWorkflow(repository, scorer)
        result = await workflow.execute(submission_input, corpus)
    """

    def __init__(
        self,
        repository: PortalRepository,
        scorer: SimilarityScorer,
        ingestor: ProjectIngestor | None = None,
        profiler: TeamProfiler | None = None,
        matcher: RoleMatcher | None = None,
        advisor: MergeAdvisor | None = None,
        notifier: Notifier | None = None,
        alert_threshold: float = ALERT_THRESHOLD,
    ):
        """
        Initialize the workflow.

        Args:
            repository: Portal repository used for persistence
            scorer: Similarity scorer, constructed once from configuration
            ingestor: Project ingestor (heuristic-only if omitted)
            profiler: Team profiler
            matcher: Role matcher
            advisor: Merge advisor
            notifier: Notifier (built on ``repository`` if omitted)
            alert_threshold: Minimum score for alerts and merge analysis
        """
        self.repository = repository
        self.scorer = scorer
        self.ingestor = ingestor or ProjectIngestor()
        self.profiler = profiler or TeamProfiler()
        self.matcher = matcher or RoleMatcher()
        self.advisor = advisor or MergeAdvisor()
        self.notifier = notifier or Notifier(repository, alert_threshold=alert_threshold)
        self.alert_threshold = alert_threshold

    async def execute(self, submission_input: SubmissionInput, corpus: list[Project]) -> WorkflowResult:
        """
        Persist a submission and run the advisory stages over it.

        Args:
            submission_input: Form payload of the new project
            corpus: Existing projects to compare against

        Returns:
            WorkflowResult with the persisted project and per-stage outcomes

        Raises:
            ValidationError: If required fields are missing (nothing is persisted)
        """
        missing = submission_input.missing_fields()
        if missing:
            raise ValidationError(
                f'Missing required fields: {", ".join(missing)}',
                context={'missing_fields': missing},
            )

        timer = PipelineTimer()
        with timer.stage(STAGE_SUBMIT):
            submission = await self.repository.submit_project(submission_input)

        result = WorkflowResult(project=submission)
        result.stages.add(StageOutcome.succeeded(STAGE_SUBMIT, timer.stages[STAGE_SUBMIT]))

        with logging_context(project_id=submission.id, user_id=submission.submitted_by):
            logger.info(
                'workflow.started',
                corpus_size=len(corpus),
                team_size=len(submission.team),
            )

            await self._analyze(submission, corpus, result, timer)

            result.processing_time_ms = int(timer.total_ms)
            result.stage_timings = timer.stages.copy()
            logger.info(
                'workflow.complete',
                success=result.success,
                failed_stages=result.stages.failed_stages,
                skipped_stages=result.stages.skipped_stages,
                **timer.summary(),
            )

        return result

    async def _analyze(
        self,
        submission: ProjectSubmission,
        corpus: list[Project],
        result: WorkflowResult,
        timer: PipelineTimer,
    ) -> None:
        result.ingested = await self._run_stage(
            STAGE_INGEST, result, timer, lambda: self.ingestor.ingest(submission)
        )
        result.team_profile = await self._run_stage(
            STAGE_PROFILE_TEAM,
            result,
            timer,
            lambda: self.profiler.profile_team(submission.team, submission.id),
        )

        if result.ingested is None or result.team_profile is None:
            result.stages.add(
                StageOutcome.skip(STAGE_RECOMMEND_ROLES, 'ingest or profile_team did not complete')
            )
        else:
            ingested, team = result.ingested, result.team_profile
            result.role_recommendations = await self._run_stage(
                STAGE_RECOMMEND_ROLES,
                result,
                timer,
                lambda: self.matcher.recommend_roles(team, ingested.structured_elements),
            )

        candidates = [p for p in corpus if p.id != submission.id]
        scored = await self._run_stage(
            STAGE_SCORE_SIMILARITY,
            result,
            timer,
            lambda: self.scorer.score(f'{submission.project_name} {submission.project_description}', candidates),
        )
        if scored is None:
            for stage in AFTER_SIMILARITY:
                result.stages.add(StageOutcome.skip(stage, 'score_similarity failed'))
            return
        result.similarity_results = scored

        await self._run_stage(STAGE_RECORD_ALERTS, result, timer, lambda: self._record_alerts(submission, scored))

        merges = await self._run_stage(
            STAGE_FIND_MERGES,
            result,
            timer,
            lambda: self._find_merges(submission, scored),
        )
        result.merge_opportunities = merges or []

        student_notes = await self._run_stage(
            STAGE_NOTIFY_STUDENTS,
            result,
            timer,
            lambda: self.notifier.notify_students(submission, scored),
        )
        result.notifications.extend(student_notes or [])

        if merges is None:
            result.stages.add(StageOutcome.skip(STAGE_NOTIFY_SUPERVISORS, 'find_merge_opportunities failed'))
            return

        supervisor_notes = await self._run_stage(
            STAGE_NOTIFY_SUPERVISORS,
            result,
            timer,
            lambda: self._notify_supervisors(merges),
        )
        result.notifications.extend(supervisor_notes or [])

    async def _run_stage(
        self,
        name: str,
        result: WorkflowResult,
        timer: PipelineTimer,
        action: Callable[[], T | Awaitable[T]],
    ) -> T | None:
        """
        Run one stage, recording its outcome.

        Returns:
            The stage's output, or None if it failed
        """
        try:
            with timer.stage(name):
                value = action()
                if inspect.isawaitable(value):
                    value = await value
        except Exception as e:
            logger.error(
                'workflow.stage_failed',
                stage=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            result.stages.add(StageOutcome.failed(name, e))
            return None

        result.stages.add(StageOutcome.succeeded(name, timer.stages.get(name)))
        return value

    async def _record_alerts(self, submission: ProjectSubmission, results: list[SimilarityResult]) -> int:
        recorded = 0
        for r in results:
            if r.similarity_score < self.alert_threshold:
                continue

            if r.reasoning:
                reasons = [r.reasoning]
            else:
                reasons = [
                    f'Similarity: {r.similarity_score:.0%}',
                    f'Technology overlap: {", ".join(r.project.technologies) or "N/A"}',
                ]
            alert = SimilarityAlert(
                matched_project_id=r.project.id,
                matched_project_name=r.project.title,
                similarity_score=r.similarity_score,
                similarity_reasons=reasons,
            )
            if await self.repository.add_similarity_alert(submission.id, alert):
                submission.similarity_alerts.append(alert)
                recorded += 1

        logger.info('workflow.alerts_recorded', alerts=recorded)
        return recorded

    async def _find_merges(
        self,
        submission: ProjectSubmission,
        results: list[SimilarityResult],
    ) -> list[MergeAnalysis]:
        submitted = await self.repository.get_submitted_projects()
        return self.advisor.find_merge_opportunities(
            submission, results, submitted, threshold=self.alert_threshold
        )

    async def _notify_supervisors(self, merges: list[MergeAnalysis]) -> list[Notification]:
        sent: list[Notification] = []
        for analysis in merges:
            sent.extend(await self.notifier.notify_supervisors(analysis))
        return sent
