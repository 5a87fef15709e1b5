"""
Advisory pipeline components.

- scorer: idea similarity against the project corpus
- ingestion: structured element extraction
- profiler: team and member profiles
- roles: required-role inference and first-come role assignment
- merge_advisor: pairwise merge viability
- notifier: student and supervisor notifications
- orchestrator: the submission workflow tying the stages together
"""

from .ingestion import ProjectIngestor, heuristic_elements
from .merge_advisor import MergeAdvisor
from .notifier import Notifier
from .orchestrator import SubmissionWorkflow, WorkflowResult
from .profiler import TeamProfiler
from .roles import RoleMatcher, identify_required_roles
from .scorer import (
    DelegatedSimilarityScorer,
    FallbackSimilarityScorer,
    LocalSimilarityScorer,
    SimilarityScorer,
    build_similarity_scorer,
    local_similarity,
    parse_ranking_response,
)

__all__ = [
    # Similarity
    'SimilarityScorer',
    'LocalSimilarityScorer',
    'DelegatedSimilarityScorer',
    'FallbackSimilarityScorer',
    'build_similarity_scorer',
    'local_similarity',
    'parse_ranking_response',
    # Analysis stages
    'ProjectIngestor',
    'heuristic_elements',
    'TeamProfiler',
    'RoleMatcher',
    'identify_required_roles',
    'MergeAdvisor',
    'Notifier',
    # Orchestration
    'SubmissionWorkflow',
    'WorkflowResult',
]
