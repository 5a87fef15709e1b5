"""
Idea similarity scoring.

Two interchangeable scorers share one contract,
``await scorer.score(idea, corpus) -> list[SimilarityResult]``:

- LocalSimilarityScorer: Jaccard overlap of token sets. Pure and always
  available.
- DelegatedSimilarityScorer: asks the chat model to rank the first 20
  candidates and parses its JSON answer. Fails loudly (NotAvailable,
  MalformedResponse) instead of silently degrading.

FallbackSimilarityScorer chains a primary scorer to the local one when
explicitly enabled, logging every degradation.

Results are always filtered to scores above MIN_SCORE, stably sorted by
descending score (ties keep corpus order) and capped at MAX_RESULTS.
"""

import json
import re
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..clients.openai_client import OpenAIClient
from ..errors import MalformedResponse, NotAvailable, OpenAIError, SimilarityError
from ..logging import get_logger
from ..models.analysis import SimilarityResult
from ..models.project import Project
from ..prompts.similarity import (
    MAX_PROMPT_CANDIDATES,
    RankedCandidate,
    build_similarity_prompt,
)
from ..text import jaccard, text_similarity, tokenize

logger = get_logger(__name__)

MIN_SCORE = 0.1
MAX_RESULTS = 5

_FENCE_OPEN = re.compile(r'^```(?:json)?\s*', re.IGNORECASE)
_FENCE_CLOSE = re.compile(r'\s*```$')
_JSON_ARRAY = re.compile(r'\[[\s\S]*\]')
_RANKED_LIST = TypeAdapter(list[RankedCandidate])


class SimilarityScorer(Protocol):
    async def score(self, idea: str, corpus: list[Project]) -> list[SimilarityResult]: ...


def rank_results(results: list[SimilarityResult]) -> list[SimilarityResult]:
    """Keep scores above MIN_SCORE, sort descending (stable), cap at MAX_RESULTS."""
    kept = [r for r in results if r.similarity_score > MIN_SCORE]
    kept.sort(key=lambda r: r.similarity_score, reverse=True)
    return kept[:MAX_RESULTS]


def local_similarity(idea: str, other: str) -> float:
    """Jaccard similarity of two free texts. Symmetric; 1.0 for identical non-empty text."""
    return text_similarity(idea, other)


class LocalSimilarityScorer:
    """Token-set Jaccard scorer. No I/O, deterministic."""

    name = 'local'

    async def score(self, idea: str, corpus: list[Project]) -> list[SimilarityResult]:
        return self.score_sync(idea, corpus)

    def score_sync(self, idea: str, corpus: list[Project]) -> list[SimilarityResult]:
        idea_tokens = tokenize(idea)
        results = [
            SimilarityResult(
                project=project,
                similarity_score=jaccard(idea_tokens, tokenize(project.search_text())),
            )
            for project in corpus
        ]
        return rank_results(results)


def parse_ranking_response(content: str) -> list[RankedCandidate]:
    """
    Parse the ranking model's answer into RankedCandidate entries.

    Code fences and any prose around the outermost JSON array are stripped
    before parsing.

    Raises:
        MalformedResponse: If no valid JSON array of ranking entries is found
    """
    cleaned = content.strip()
    if cleaned.startswith('```'):
        cleaned = _FENCE_CLOSE.sub('', _FENCE_OPEN.sub('', cleaned))

    match = _JSON_ARRAY.search(cleaned)
    if not match:
        raise MalformedResponse(
            'Ranking response contains no JSON array',
            context={'response_preview': cleaned[:200]},
        )

    try:
        raw = json.loads(match.group(0))
        return _RANKED_LIST.validate_python(raw)
    except (ValueError, PydanticValidationError) as e:
        raise MalformedResponse(
            f'Ranking response is not a valid JSON ranking array: {e}',
            context={'response_preview': cleaned[:200]},
        ) from e


class DelegatedSimilarityScorer:
    """
    Chat-model ranking scorer.

    Only the first MAX_PROMPT_CANDIDATES corpus entries are sent; any corpus
    entry the model does not score (including those beyond the prompt
    limit) gets 0 and is dropped by the MIN_SCORE filter.
    """

    name = 'delegated'

    def __init__(self, openai_client: OpenAIClient | None):
        """
        Initialize the scorer.

        Args:
            openai_client: Configured OpenAI client, or None when no API key
                is available (every call then raises NotAvailable)
        """
        self.openai_client = openai_client

    @property
    def available(self) -> bool:
        return self.openai_client is not None

    async def score(self, idea: str, corpus: list[Project]) -> list[SimilarityResult]:
        """
        Score an idea against the corpus via the chat model.

        Raises:
            NotAvailable: No OpenAI client is configured
            MalformedResponse: The model's answer could not be parsed
            SimilarityError: The API call itself failed
        """
        if self.openai_client is None:
            raise NotAvailable('Similarity ranking is not available: OPENAI_API_KEY is not configured')
        if not corpus:
            return []

        messages = build_similarity_prompt(idea, corpus)
        candidates_sent = min(len(corpus), MAX_PROMPT_CANDIDATES)
        logger.info('similarity.delegated_request', candidates=candidates_sent)

        try:
            content = await self.openai_client.chat_completion(messages=messages)
        except OpenAIError as e:
            raise SimilarityError(f'Similarity ranking call failed: {e}', context=e.context) from e

        ranked = parse_ranking_response(content)

        by_id: dict[str, RankedCandidate] = {}
        for entry in ranked:
            by_id.setdefault(entry.project_id, entry)

        results = []
        for index, project in enumerate(corpus):
            entry = by_id.get(project.id) if index < MAX_PROMPT_CANDIDATES else None
            results.append(
                SimilarityResult(
                    project=project,
                    similarity_score=entry.similarity_score if entry else 0.0,
                    reasoning=entry.reasoning if entry else None,
                )
            )

        ranked_results = rank_results(results)
        logger.info(
            'similarity.delegated_complete',
            returned=len(ranked),
            kept=len(ranked_results),
        )
        return ranked_results


class FallbackSimilarityScorer:
    """Primary scorer with an explicit, logged fallback to local scoring."""

    name = 'fallback'

    def __init__(self, primary: SimilarityScorer, fallback: LocalSimilarityScorer | None = None):
        self.primary = primary
        self.fallback = fallback or LocalSimilarityScorer()

    async def score(self, idea: str, corpus: list[Project]) -> list[SimilarityResult]:
        try:
            return await self.primary.score(idea, corpus)
        except SimilarityError as e:
            logger.warning(
                'similarity.degraded',
                error=str(e),
                error_type=type(e).__name__,
                fallback='local',
            )
            return await self.fallback.score(idea, corpus)


def build_similarity_scorer(settings: Any, openai_client: OpenAIClient | None) -> SimilarityScorer:
    """
    Construct the scorer once from configuration.

    Args:
        settings: Object exposing SIMILARITY_FALLBACK_TO_LOCAL
        openai_client: Client for delegated mode, or None if unconfigured

    Returns:
        DelegatedSimilarityScorer, wrapped in FallbackSimilarityScorer when
        fallback is enabled
    """
    delegated = DelegatedSimilarityScorer(openai_client)
    if getattr(settings, 'SIMILARITY_FALLBACK_TO_LOCAL', False):
        return FallbackSimilarityScorer(delegated)
    return delegated
