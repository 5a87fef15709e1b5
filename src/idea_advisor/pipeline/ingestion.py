"""
Project ingestion service.

Turns a submission into structured elements (goals, problem statement,
domain, scope). Uses OpenAI structured output when a client is configured
and falls back to a keyword heuristic on any model failure.
"""

import re

from ..clients.openai_client import OpenAIClient
from ..errors import IngestionError, OpenAIError
from ..logging import get_logger
from ..models.analysis import IngestedProject, IngestedProjectMetadata, ProjectElements
from ..models.project import ProjectSubmission
from ..prompts.ingestion import ExtractedProjectElements, build_extraction_prompt
from ..text import mentions

logger = get_logger(__name__)

SCOPE_LENGTH = 200
PROBLEM_FALLBACK_LENGTH = 100

DEFAULT_GOAL = 'Improve the process targeted by the project'
DEFAULT_OUTCOMES = ['Improved performance', 'Stated goals achieved']

GOAL_MARKERS = (
    'aim',
    'goal',
    'objective',
    'purpose',
    'يهدف',
    'الهدف',
    'نهدف',
    'نسعى',
    'نطمح',
)

# Checked in order; first matching domain wins
DOMAIN_RULES: list[tuple[str, tuple[str, ...]]] = [
    ('AI/ML', ('ai', 'ml', 'tensorflow', 'pytorch', 'nlp')),
    ('Web Development', ('react', 'vue', 'angular', 'frontend')),
    ('Data Science', ('data', 'analytics', 'pandas')),
]
DEFAULT_DOMAIN = 'General'

_SENTENCE_SPLIT = re.compile(r'[.!?]\s+')


def detect_domain(technologies: list[str]) -> str:
    for domain, keywords in DOMAIN_RULES:
        if any(mentions(tech, keywords) for tech in technologies):
            return domain
    return DEFAULT_DOMAIN


def heuristic_elements(description: str, technologies: list[str]) -> ProjectElements:
    """
    Extract project elements without a model.

    Goals are the sentences carrying a goal marker; the problem statement is
    the first sentence; scope is the first 200 characters of the description.
    """
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(description) if s.strip()]
    goals = [s for s in sentences if any(marker in s.lower() for marker in GOAL_MARKERS)]

    return ProjectElements(
        goals=goals or [DEFAULT_GOAL],
        problem_statement=sentences[0] if sentences else description[:PROBLEM_FALLBACK_LENGTH],
        technology_stack=list(technologies),
        domain=detect_domain(technologies),
        scope=description[:SCOPE_LENGTH],
        expected_outcomes=list(DEFAULT_OUTCOMES),
    )


class ProjectIngestor:
    """
    Extracts structured elements from submissions.

    Without an OpenAI client every submission goes through the heuristic.
    """

    def __init__(self, openai_client: OpenAIClient | None = None):
        """
        Initialize the ingestor.

        Args:
            openai_client: Optional OpenAI client for model-based extraction
        """
        self.openai_client = openai_client

    async def ingest(self, submission: ProjectSubmission) -> IngestedProject:
        """
        Ingest a persisted submission.

        Args:
            submission: The submission to analyze

        Returns:
            IngestedProject with metadata and structured elements

        Raises:
            IngestionError: If the submission has no description
        """
        if not submission.project_description.strip():
            raise IngestionError(
                'Submission has no description to ingest',
                context={'project_id': submission.id},
            )

        elements, extracted_by = await self.extract_elements(
            name=submission.project_name,
            description=submission.project_description,
            technologies=submission.tools_technologies,
        )

        return IngestedProject(
            project_id=submission.id,
            metadata=IngestedProjectMetadata(
                name=submission.project_name,
                bootcamp=submission.bootcamp_name,
                supervisor=submission.bootcamp_supervisor,
                submission_date=submission.submitted_at,
            ),
            structured_elements=elements,
            extracted_by=extracted_by,
        )

    async def extract_elements(
        self,
        name: str,
        description: str,
        technologies: list[str],
    ) -> tuple[ProjectElements, str]:
        """
        Extract elements, returning them with the method used ("llm" or "heuristic").
        """
        if self.openai_client is None:
            return heuristic_elements(description, technologies), 'heuristic'

        messages = build_extraction_prompt(name, description, technologies)
        try:
            extracted = await self.openai_client.chat_completion_structured(
                messages=messages,
                response_model=ExtractedProjectElements,
            )
        except (OpenAIError, ValueError) as e:
            logger.warning(
                'ingestion.llm_extraction_failed',
                error=str(e),
                error_type=type(e).__name__,
            )
            return heuristic_elements(description, technologies), 'heuristic'

        elements = ProjectElements(
            goals=extracted.goals,
            problem_statement=extracted.problem_statement,
            technology_stack=extracted.technology_stack or list(technologies),
            domain=extracted.domain or DEFAULT_DOMAIN,
            scope=extracted.scope or description[:SCOPE_LENGTH],
            target_audience=extracted.target_audience,
            expected_outcomes=extracted.expected_outcomes,
        )
        return elements, 'llm'
