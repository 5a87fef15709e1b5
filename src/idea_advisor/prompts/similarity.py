"""
Similarity ranking prompts and response models.

The ranking model receives a new idea plus up to MAX_PROMPT_CANDIDATES
candidate summaries and must answer with a bare JSON array of
``{project_id, similarity_score, reasoning}`` objects. The response is
parsed as text (not via structured output) because the array is keyed by
corpus ids the model must echo back.
"""

from pydantic import BaseModel, Field, field_validator

from ..models.project import Project

MAX_PROMPT_CANDIDATES = 20


# =============================================================================
# Response Models
# =============================================================================


class RankedCandidate(BaseModel):
    """One entry of the ranking model's JSON array."""

    project_id: str = Field(..., description='Id of the candidate project, echoed from the prompt')
    similarity_score: float = Field(..., description='Similarity between the idea and the project, 0-1')
    reasoning: str | None = Field(default=None, description='Short explanation of the score')

    @field_validator('project_id', mode='before')
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # Models sometimes echo numeric-looking ids as numbers
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator('similarity_score')
    @classmethod
    def _clamp_score(cls, value: float) -> float:
        return min(1.0, max(0.0, value))


# =============================================================================
# Prompt Templates
# =============================================================================


SIMILARITY_SYSTEM_PROMPT = """You are an expert reviewer of student graduation projects. Your task is to compare a NEW PROJECT IDEA against EXISTING PROJECTS and score how similar each one is, from 0 to 1.

Consider:
- Project goals and objectives
- Technologies used
- Target domain or sector
- The problem the project solves
- Team composition

Return a JSON array with one entry per existing project, in this format:
[{"project_id": "id", "similarity_score": 0.85, "reasoning": "short explanation"}]

Important: return ONLY a valid JSON array. No markdown, no code blocks, no extra text.

If the idea is identical to an existing project, give it similarity_score = 1.0."""


SIMILARITY_USER_PROMPT_TEMPLATE = """Compare this new idea with the existing projects:

<new_idea>
{idea}
</new_idea>

<existing_projects>
{projects}
</existing_projects>

Return only the JSON array of similarity scores for each project."""


CANDIDATE_TEMPLATE = """Project {index} (ID: {id}):
Title: {title}
Description: {description}
Technologies: {technologies}
Bootcamp: {bootcamp}"""


def format_candidate(index: int, project: Project) -> str:
    return CANDIDATE_TEMPLATE.format(
        index=index,
        id=project.id,
        title=project.title,
        description=project.description,
        technologies=', '.join(project.technologies) or 'Not specified',
        bootcamp=project.bootcamp or 'Not specified',
    )


def build_similarity_prompt(idea: str, candidates: list[Project]) -> list[dict[str, str]]:
    """
    Build the similarity ranking prompt messages for OpenAI.

    Args:
        idea: Free text of the new idea
        candidates: Corpus projects; only the first MAX_PROMPT_CANDIDATES are sent

    Returns:
        List of message dicts for OpenAI chat completion
    """
    projects_text = '\n\n'.join(
        format_candidate(i + 1, p) for i, p in enumerate(candidates[:MAX_PROMPT_CANDIDATES])
    )
    user_prompt = SIMILARITY_USER_PROMPT_TEMPLATE.format(idea=idea, projects=projects_text)

    return [
        {'role': 'system', 'content': SIMILARITY_SYSTEM_PROMPT},
        {'role': 'user', 'content': user_prompt},
    ]
