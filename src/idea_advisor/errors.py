"""
Custom exceptions and error handling for the Idea Advisor service.

Provides:
- Typed exception hierarchy for different failure modes
- Error context preservation for debugging
- Per-stage outcome tracking for the submission workflow
"""

from dataclasses import dataclass, field
from typing import Any

import openai


class IdeaAdvisorError(Exception):
    """Base exception for all idea advisor errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Client Errors
# =============================================================================


class ClientError(IdeaAdvisorError):
    """Base class for client-related errors."""

    pass


class OpenAIError(ClientError):
    """Error from OpenAI API calls."""

    pass


class OpenAIRateLimitError(OpenAIError):
    """Rate limit exceeded on OpenAI API."""

    pass


class OpenAIModelError(OpenAIError):
    """Model refused request or returned invalid response."""

    pass


class StorageError(IdeaAdvisorError):
    """Read, parse or write failure against the backing store or corpus."""

    pass


# =============================================================================
# Pipeline Errors
# =============================================================================


class PipelineError(IdeaAdvisorError):
    """Base class for pipeline-related errors."""

    pass


class ValidationError(PipelineError):
    """A required submission field is missing or empty."""

    pass


class SimilarityError(PipelineError):
    """Base class for similarity scoring failures."""

    pass


class MalformedResponse(SimilarityError):
    """The ranking model returned output that is not the expected JSON array."""

    pass


class NotAvailable(SimilarityError):
    """The delegated ranking capability is not configured."""

    pass


class IngestionError(PipelineError):
    """Error while extracting structured project elements."""

    pass


class RoleRecommendationError(PipelineError):
    """Error while recommending team roles."""

    pass


class MergeAnalysisError(PipelineError):
    """Error while analyzing merge opportunities."""

    pass


# =============================================================================
# Stage Outcomes
# =============================================================================


@dataclass
class StageOutcome:
    """
    Result of a single workflow stage.

    A stage either completes (``ok``) or fails with a reason; skipped stages
    are recorded as failed with ``skipped=True`` so the caller can tell the
    two apart.
    """

    stage: str
    ok: bool
    reason: str | None = None
    skipped: bool = False
    duration_ms: float | None = None

    @classmethod
    def succeeded(cls, stage: str, duration_ms: float | None = None) -> 'StageOutcome':
        return cls(stage=stage, ok=True, duration_ms=duration_ms)

    @classmethod
    def failed(cls, stage: str, error: Exception | str) -> 'StageOutcome':
        return cls(stage=stage, ok=False, reason=str(error))

    @classmethod
    def skip(cls, stage: str, reason: str) -> 'StageOutcome':
        return cls(stage=stage, ok=False, reason=reason, skipped=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            'stage': self.stage,
            'ok': self.ok,
            'reason': self.reason,
            'skipped': self.skipped,
            'duration_ms': self.duration_ms,
        }


@dataclass
class StageLog:
    """Ordered collection of stage outcomes for one workflow run."""

    outcomes: list[StageOutcome] = field(default_factory=list)

    def add(self, outcome: StageOutcome) -> StageOutcome:
        self.outcomes.append(outcome)
        return outcome

    def get(self, stage: str) -> StageOutcome | None:
        for outcome in self.outcomes:
            if outcome.stage == stage:
                return outcome
        return None

    @property
    def all_ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def failed_stages(self) -> list[str]:
        return [o.stage for o in self.outcomes if not o.ok and not o.skipped]

    @property
    def skipped_stages(self) -> list[str]:
        return [o.stage for o in self.outcomes if o.skipped]

    def to_list(self) -> list[dict[str, Any]]:
        return [o.to_dict() for o in self.outcomes]


# =============================================================================
# Error Handling Utilities
# =============================================================================


def wrap_openai_error(exc: Exception, context: dict[str, Any] | None = None) -> OpenAIError:
    """
    Map an exception raised by the OpenAI SDK onto OpenAIError subclasses.

    SDK types decide first; the message text is checked for errors that
    arrive untyped (e.g. from a proxy).
    """
    ctx = {**(context or {}), 'original_error': str(exc), 'error_type': type(exc).__name__}
    text = str(exc).lower()

    if isinstance(exc, openai.RateLimitError) or 'rate limit' in text or 'rate_limit' in text:
        return OpenAIRateLimitError(f"OpenAI rate limit exceeded: {exc}", context=ctx)
    if isinstance(exc, openai.ContentFilterFinishReasonError) or 'content policy' in text or 'refused' in text:
        return OpenAIModelError(f"OpenAI model refused request: {exc}", context=ctx)
    return OpenAIError(f"OpenAI API error: {exc}", context=ctx)
