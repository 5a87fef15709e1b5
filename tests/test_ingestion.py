"""Tests for project ingestion (heuristic and model-backed extraction)."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from idea_advisor.errors import IngestionError, OpenAIError
from idea_advisor.pipeline.ingestion import (
    DEFAULT_GOAL,
    DEFAULT_OUTCOMES,
    ProjectIngestor,
    detect_domain,
    heuristic_elements,
)
from idea_advisor.prompts.ingestion import ExtractedProjectElements


DESCRIPTION = (
    "We aim to help students find parking near campus. "
    "The app shows free spots on a live map! "
    "Our goal is to cut the time spent searching."
)


class TestHeuristicElements:
    def test_goals_are_marker_sentences(self):
        elements = heuristic_elements(DESCRIPTION, ["React"])

        assert elements.goals == [
            "We aim to help students find parking near campus",
            "Our goal is to cut the time spent searching.",
        ]

    def test_problem_statement_is_first_sentence(self):
        elements = heuristic_elements(DESCRIPTION, [])

        assert elements.problem_statement == "We aim to help students find parking near campus"

    def test_scope_is_truncated_description(self):
        long_description = "word " * 100

        elements = heuristic_elements(long_description, [])

        assert elements.scope == long_description[:200]

    def test_defaults_without_goal_markers(self):
        elements = heuristic_elements("A parking finder. It shows free spots.", ["Flutter"])

        assert elements.goals == [DEFAULT_GOAL]
        assert elements.expected_outcomes == DEFAULT_OUTCOMES
        assert elements.domain == "General"
        assert elements.technology_stack == ["Flutter"]

    def test_arabic_goal_marker(self):
        elements = heuristic_elements("تطبيق لمواقف السيارات. يهدف المشروع إلى تقليل الزحام.", [])

        assert elements.goals == ["يهدف المشروع إلى تقليل الزحام."]

    def test_empty_description(self):
        elements = heuristic_elements("", [])

        assert elements.problem_statement == ""
        assert elements.scope == ""
        assert elements.goals == [DEFAULT_GOAL]


class TestDetectDomain:
    @pytest.mark.parametrize(
        "technologies,expected",
        [
            (["Python", "TensorFlow"], "AI/ML"),
            (["React", "Node.js"], "Web Development"),
            (["Pandas"], "Data Science"),
            (["Django"], "General"),
            (["OpenAI", "FastAPI"], "AI/ML"),
            ([], "General"),
        ],
    )
    def test_domain_rules(self, technologies, expected):
        assert detect_domain(technologies) == expected

    def test_first_matching_rule_wins(self):
        assert detect_domain(["React", "PyTorch"]) == "AI/ML"


class TestProjectIngestor:
    @pytest.mark.asyncio
    async def test_heuristic_without_client(self, make_submission):
        submission = make_submission(project_description=DESCRIPTION)

        ingested = await ProjectIngestor().ingest(submission)

        assert ingested.project_id == submission.id
        assert ingested.extracted_by == "heuristic"
        assert ingested.metadata.name == submission.project_name
        assert ingested.metadata.supervisor == "Dr. Huda"
        assert ingested.metadata.submission_date == submission.submitted_at
        assert ingested.structured_elements.domain == "Web Development"

    @pytest.mark.asyncio
    async def test_blank_description_raises(self, make_submission):
        submission = make_submission(project_description="   ")

        with pytest.raises(IngestionError) as exc_info:
            await ProjectIngestor().ingest(submission)

        assert exc_info.value.context == {"project_id": submission.id}

    @pytest.mark.asyncio
    async def test_model_extraction(self, make_submission):
        client = MagicMock()
        client.chat_completion_structured = AsyncMock(
            return_value=ExtractedProjectElements(
                goals=["Reduce parking search time"],
                problem_statement="Students waste time looking for parking",
                domain="Smart Cities",
                scope="Campus parking availability",
                target_audience="Students",
            )
        )

        ingested = await ProjectIngestor(client).ingest(make_submission())

        elements = ingested.structured_elements
        assert ingested.extracted_by == "llm"
        assert elements.domain == "Smart Cities"
        assert elements.target_audience == "Students"
        # An empty stack from the model falls back to the submitted technologies
        assert elements.technology_stack == ["React", "Node.js"]
        call = client.chat_completion_structured.call_args
        assert call.kwargs["response_model"] is ExtractedProjectElements

    @pytest.mark.asyncio
    async def test_model_failure_falls_back_to_heuristic(self, make_submission):
        client = MagicMock()
        client.chat_completion_structured = AsyncMock(side_effect=OpenAIError("OpenAI API error: 500"))

        ingested = await ProjectIngestor(client).ingest(make_submission(project_description=DESCRIPTION))

        assert ingested.extracted_by == "heuristic"
        assert len(ingested.structured_elements.goals) == 2

    @pytest.mark.asyncio
    async def test_unparsed_response_falls_back_to_heuristic(self, make_submission):
        client = MagicMock()
        client.chat_completion_structured = AsyncMock(side_effect=ValueError("Failed to parse structured response"))

        ingested = await ProjectIngestor(client).ingest(make_submission())

        assert ingested.extracted_by == "heuristic"
