"""
Idea Advisor

Advisory pipeline for a bootcamp project-submission portal: flags ideas
that duplicate existing projects, recommends team roles, detects merge
opportunities across bootcamps and notifies students and supervisors.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .pipeline import (
    SubmissionWorkflow,
    WorkflowResult,
    LocalSimilarityScorer,
    DelegatedSimilarityScorer,
    FallbackSimilarityScorer,
    build_similarity_scorer,
    ProjectIngestor,
    TeamProfiler,
    RoleMatcher,
    MergeAdvisor,
    Notifier,
)
from .repository import PortalRepository
from .corpus import CorpusLoadResult, load_corpus
from .logging import (
    configure_logging,
    get_logger,
    logging_context,
    PipelineTimer,
)
from .errors import (
    IdeaAdvisorError,
    PipelineError,
    ValidationError,
    SimilarityError,
    MalformedResponse,
    NotAvailable,
    StorageError,
    OpenAIError,
    StageOutcome,
)

__all__ = [
    # Version
    '__version__',
    # Workflow
    'SubmissionWorkflow',
    'WorkflowResult',
    # Components
    'LocalSimilarityScorer',
    'DelegatedSimilarityScorer',
    'FallbackSimilarityScorer',
    'build_similarity_scorer',
    'ProjectIngestor',
    'TeamProfiler',
    'RoleMatcher',
    'MergeAdvisor',
    'Notifier',
    # Storage
    'PortalRepository',
    'CorpusLoadResult',
    'load_corpus',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    'PipelineTimer',
    # Errors
    'IdeaAdvisorError',
    'PipelineError',
    'ValidationError',
    'SimilarityError',
    'MalformedResponse',
    'NotAvailable',
    'StorageError',
    'OpenAIError',
    'StageOutcome',
]
