#!/usr/bin/env python3
"""
Example: Submit a project idea through the advisory workflow.

This script demonstrates:
1. Loading the comparison corpus from data/projects-local.json
2. Submitting a new project with a two-member team
3. Inspecting similarity results, role recommendations and stage outcomes

Runs entirely in memory. With OPENAI_API_KEY set, similarity is ranked by
the chat model; otherwise local token-overlap scoring is used.

Usage:
    python examples/submit_project.py
"""

import asyncio
import os
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from dotenv import load_dotenv

# Load environment variables
env_file = Path(__file__).parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)

from idea_advisor.clients.openai_client import OpenAIClient
from idea_advisor.clients.store import InMemoryStore
from idea_advisor.corpus import load_corpus
from idea_advisor.models import SubmissionInput, TeamMember, TechnicalSkill
from idea_advisor.pipeline import (
    LocalSimilarityScorer,
    ProjectIngestor,
    SubmissionWorkflow,
    build_similarity_scorer,
)
from idea_advisor.repository import PortalRepository

CORPUS_PATH = Path(__file__).parent.parent / 'data' / 'projects-local.json'


class _Settings:
    SIMILARITY_FALLBACK_TO_LOCAL = True


async def main():
    """Run the example workflow."""
    print("=" * 60)
    print("Idea Advisor Example")
    print("=" * 60)

    openai = OpenAIClient() if os.getenv('OPENAI_API_KEY') else None
    scorer = build_similarity_scorer(_Settings, openai) if openai else LocalSimilarityScorer()
    print(f"\nScoring mode: {'delegated with local fallback' if openai else 'local'}")

    repository = PortalRepository(InMemoryStore())
    workflow = SubmissionWorkflow(repository, scorer, ingestor=ProjectIngestor(openai))

    try:
        corpus = await load_corpus(repository, CORPUS_PATH)
        print(f"Corpus: {len(corpus.projects)} projects")
        if corpus.error:
            print(f"  Corpus warning: {corpus.error}")

        submission = SubmissionInput(
            project_name="ML Study Helper",
            project_description=(
                "I want to build a machine learning app with Python and TensorFlow. "
                "The goal is to recommend study material to students."
            ),
            bootcamp_supervisor="Dr. Huda",
            bootcamp_name="AI Bootcamp",
            tools_technologies=["Python", "TensorFlow", "React"],
            team=[
                TeamMember(
                    full_name="Reem Khalid",
                    academic_id="441100",
                    skills=[TechnicalSkill(skill="TensorFlow", level="advanced")],
                ),
                TeamMember(
                    full_name="Faisal Omar",
                    email="faisal@example.com",
                    skills=[TechnicalSkill(skill="React", level="intermediate")],
                ),
            ],
            submitted_by="USER-demo",
        )

        result = await workflow.execute(submission, corpus.projects)

        print("\n" + "-" * 60)
        print(f"Submitted: {result.project.id} ({result.project.status.value})")
        print("-" * 60)

        print("\nSimilar projects:")
        for r in result.similarity_results:
            print(f"  {r.similarity_score:.2f}  {r.project.title}")

        if result.role_recommendations:
            print("\nRole assignments:")
            for a in result.role_recommendations.role_assignments:
                print(f"  {a.member_name}: {a.assigned_role} ({a.confidence_score:.2f})")
            for gap in result.role_recommendations.team_gaps:
                print(f"  gap: {gap.missing_role} [{gap.importance.value}]")

        print("\nStages:")
        for outcome in result.stages.outcomes:
            state = 'ok' if outcome.ok else ('skipped' if outcome.skipped else 'FAILED')
            print(f"  {outcome.stage:<26} {state} {outcome.reason or ''}")

        print(f"\nProcessing time: {result.processing_time_ms}ms")

    finally:
        if openai is not None:
            await openai.close()


if __name__ == '__main__':
    asyncio.run(main())
