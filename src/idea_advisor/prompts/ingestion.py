"""
Project element extraction prompts and response models.

Used by the ingestor to turn a free-text submission into goals, problem
statement, domain and scope. Structured output is requested directly as the
ExtractedProjectElements model.
"""

from pydantic import BaseModel, Field


class ExtractedProjectElements(BaseModel):
    """Structured elements of a project, as returned by the model."""

    goals: list[str] = Field(
        default_factory=list,
        description='Concrete goals the project aims to achieve, one short sentence each.',
    )
    problem_statement: str = Field(
        ...,
        description='One or two sentences describing the problem the project solves.',
    )
    technology_stack: list[str] = Field(
        default_factory=list,
        description='Technologies, frameworks and tools the project uses.',
    )
    domain: str = Field(
        ...,
        description='Project domain, e.g. "AI/NLP", "Web Development", "Data Science".',
    )
    scope: str = Field(..., description='Short description of what is in scope.')
    target_audience: str | None = Field(default=None, description='Who the project is for.')
    expected_outcomes: list[str] = Field(
        default_factory=list,
        description='Expected results or deliverables.',
    )


EXTRACTION_SYSTEM_PROMPT = """You extract structured elements from student project descriptions.

Given a project name, description and technology list, identify:
- goals: what the project aims to achieve
- problem_statement: the problem it solves
- technology_stack: technologies used (include the listed ones)
- domain: the project's field (e.g. "AI/NLP", "Web Development", "Data Science")
- scope: what the project covers
- target_audience: who it is for, if stated
- expected_outcomes: expected results

Only use information present in the input. Do not invent goals."""


EXTRACTION_USER_PROMPT_TEMPLATE = """Extract the elements of this project:

Name: {name}
Description: {description}
Technologies: {technologies}"""


def build_extraction_prompt(
    name: str,
    description: str,
    technologies: list[str],
) -> list[dict[str, str]]:
    """
    Build the element extraction prompt messages for OpenAI.

    Returns:
        List of message dicts for OpenAI chat completion
    """
    user_prompt = EXTRACTION_USER_PROMPT_TEMPLATE.format(
        name=name,
        description=description,
        technologies=', '.join(technologies) or 'Not specified',
    )
    return [
        {'role': 'system', 'content': EXTRACTION_SYSTEM_PROMPT},
        {'role': 'user', 'content': user_prompt},
    ]
