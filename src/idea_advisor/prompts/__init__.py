"""
LLM prompts for the Idea Advisor service.
"""

from .similarity import (
    MAX_PROMPT_CANDIDATES,
    RankedCandidate,
    SIMILARITY_SYSTEM_PROMPT,
    build_similarity_prompt,
)
from .ingestion import (
    EXTRACTION_SYSTEM_PROMPT,
    ExtractedProjectElements,
    build_extraction_prompt,
)

__all__ = [
    # Similarity ranking
    'MAX_PROMPT_CANDIDATES',
    'RankedCandidate',
    'SIMILARITY_SYSTEM_PROMPT',
    'build_similarity_prompt',
    # Element extraction
    'EXTRACTION_SYSTEM_PROMPT',
    'ExtractedProjectElements',
    'build_extraction_prompt',
]
