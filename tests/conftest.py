"""
Pytest configuration and shared fixtures.

Key fixtures:
- repository: PortalRepository over a fresh in-memory store
- make_input: factory for valid SubmissionInput payloads
- make_submission: factory for persisted-shape ProjectSubmission objects
- openai_api_key: OpenAI API key from environment (live tests only)

Unit tests never touch the network; live tests skip without a key.
"""

import os
import sys
from datetime import timedelta
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

# Load environment variables
from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)

from idea_advisor.clients.store import InMemoryStore
from idea_advisor.models import (
    Project,
    ProjectSubmission,
    SubmissionInput,
    TeamMember,
    TechnicalSkill,
)
from idea_advisor.repository import PortalRepository
from idea_advisor.utils import utcnow


@pytest.fixture
def openai_api_key() -> str:
    """Get OpenAI API key from environment."""
    key = os.getenv('OPENAI_API_KEY')
    if not key:
        pytest.skip('OPENAI_API_KEY not set')
    return key


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def repository(store: InMemoryStore) -> PortalRepository:
    """Repository over a fresh in-memory store."""
    return PortalRepository(store)


@pytest.fixture
def make_input():
    """Factory for a valid SubmissionInput with a two-member team."""

    def _make(**overrides) -> SubmissionInput:
        data = {
            'project_name': 'Study Buddy',
            'project_description': 'A web app that matches students into study groups',
            'bootcamp_supervisor': 'Dr. Huda',
            'bootcamp_name': 'Web Development Bootcamp',
            'tools_technologies': ['React', 'Node.js'],
            'team': [
                TeamMember(full_name='Reem Khalid', academic_id='441100'),
                TeamMember(full_name='Faisal Omar', email='faisal@example.com'),
            ],
            'submitted_by': 'USER-student-1',
        }
        data.update(overrides)
        return SubmissionInput(**data)

    return _make


@pytest.fixture
def make_submission():
    """Factory for ProjectSubmission objects, submitted ``days_ago`` days in the past."""

    def _make(days_ago: float = 0, **overrides) -> ProjectSubmission:
        data = {
            'project_name': 'Study Buddy',
            'project_description': 'A web app that matches students into study groups',
            'bootcamp_supervisor': 'Dr. Huda',
            'bootcamp_name': 'Web Development Bootcamp',
            'tools_technologies': ['React', 'Node.js'],
            'team': [TeamMember(full_name='Reem Khalid')],
            'submitted_by': 'USER-student-1',
            'submitted_at': utcnow() - timedelta(days=days_ago),
        }
        data.update(overrides)
        return ProjectSubmission(**data)

    return _make


@pytest.fixture
def ml_corpus() -> list[Project]:
    """Small corpus with one obvious machine-learning match."""
    return [
        Project(
            id='1',
            title='ML App',
            description='machine learning python tensorflow',
            technologies=[],
        ),
        Project(
            id='2',
            title='Clinic Booking Portal',
            description='Web portal for booking clinic appointments',
            bootcamp='Web Development Bootcamp',
            technologies=['React', 'Node.js'],
        ),
    ]


@pytest.fixture
def skilled_member():
    """Factory for a TeamMember with the given (skill, level) pairs."""

    def _make(name: str, *skills: tuple[str, str], **extra) -> TeamMember:
        return TeamMember(
            full_name=name,
            skills=[TechnicalSkill(skill=s, level=level) for s, level in skills],
            **extra,
        )

    return _make
