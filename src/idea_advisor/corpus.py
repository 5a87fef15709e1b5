"""
Corpus loading and normalization.

Existing projects come from three sources, concatenated in this order:
1. A static JSON resource (array, or object with a ``projects`` array)
2. Raw records uploaded in bulk and kept in the repository
3. Earlier submissions

Source files in the wild use inconsistent key names, so each field is
resolved through a priority-ordered list of candidate keys. The merged
corpus is de-duplicated by title, first occurrence wins.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from .errors import StorageError
from .models.project import Project
from .repository import PortalRepository

logger = structlog.get_logger(__name__)

TITLE_KEYS = ('title', 'name', 'project_title', 'project_name_ar', 'project_name_en')
DESCRIPTION_KEYS = ('description', 'desc', 'project_description', 'description_ar', 'description_en')
BOOTCAMP_KEYS = ('bootcamp', 'bootcamp_name', 'program', 'bootcamp_name_ar', 'Bootcamp')
TECHNOLOGY_KEYS = ('technologies', 'tech', 'tech_stack', 'tools')
TEAM_KEYS = ('team_members', 'team', 'members')
MEMBER_NAME_KEYS = ('name_ar', 'name_en', 'fullName', 'full_name')
STATUS_KEYS = ('status', 'Status')

UNKNOWN_MEMBER = 'Unknown member'


def _first(raw: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Value of the first key present with a truthy value."""
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def _member_name(member: Any) -> str:
    if isinstance(member, str):
        return member
    if isinstance(member, dict):
        return str(_first(member, MEMBER_NAME_KEYS) or UNKNOWN_MEMBER)
    return UNKNOWN_MEMBER


def normalize_project(raw: dict[str, Any], fallback_id: str) -> Project:
    """
    Map a raw corpus record onto a Project.

    Args:
        raw: Record with any of the supported key spellings
        fallback_id: Positional id used when neither id nor title is present

    Returns:
        Normalized Project
    """
    title = _first(raw, TITLE_KEYS) or f'Project {fallback_id}'
    technologies = _first(raw, TECHNOLOGY_KEYS)
    team = _first(raw, TEAM_KEYS)
    bootcamp = _first(raw, BOOTCAMP_KEYS)

    return Project(
        id=str(raw.get('id') or title or fallback_id),
        title=str(title),
        description=str(_first(raw, DESCRIPTION_KEYS) or ''),
        bootcamp=str(bootcamp) if bootcamp else None,
        technologies=[str(t) for t in technologies] if isinstance(technologies, list) else [],
        team_members=[_member_name(m) for m in team] if isinstance(team, list) else [],
        status=str(_first(raw, STATUS_KEYS) or 'pending'),
    )


def read_corpus_file(path: str | Path) -> list[dict[str, Any]]:
    """
    Read raw project records from a JSON resource.

    Raises:
        StorageError: If the file cannot be read, is not valid JSON, or holds no
            project list
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        raise StorageError(f'Could not load projects from {path}: {e}', context={'path': str(path)}) from e

    if isinstance(data, list):
        return [r for r in data if isinstance(r, dict)]
    if isinstance(data, dict) and isinstance(data.get('projects'), list):
        return [r for r in data['projects'] if isinstance(r, dict)]
    raise StorageError(
        f'Unrecognized corpus format in {path}: expected a JSON array or an object with a "projects" array',
        context={'path': str(path)},
    )


def dedupe_by_title(projects: list[Project]) -> list[Project]:
    seen: set[str] = set()
    unique: list[Project] = []
    for project in projects:
        if project.title in seen:
            continue
        seen.add(project.title)
        unique.append(project)
    return unique


@dataclass
class CorpusLoadResult:
    """Merged corpus plus any per-source load errors."""

    projects: list[Project] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def error(self) -> str | None:
        return '; '.join(self.errors) if self.errors else None

    @property
    def ok(self) -> bool:
        return not self.errors


async def load_corpus(
    repository: PortalRepository | None = None,
    path: str | Path | None = None,
) -> CorpusLoadResult:
    """
    Load and merge every corpus source.

    A failing source contributes nothing and its error is reported on the
    result; loading never raises.
    """
    result = CorpusLoadResult()
    merged: list[Project] = []

    if path is not None:
        try:
            raw = read_corpus_file(path)
            merged.extend(normalize_project(r, str(i + 1)) for i, r in enumerate(raw))
        except StorageError as e:
            logger.warning('corpus.file_load_failed', path=str(path), error=str(e))
            result.errors.append(str(e))

    if repository is not None:
        try:
            uploaded = await repository.get_uploaded_projects()
            merged.extend(normalize_project(r, f'local-{i}') for i, r in enumerate(uploaded))
        except Exception as e:
            logger.warning('corpus.uploaded_load_failed', error=str(e))
            result.errors.append(f'Could not load uploaded projects: {e}')

        try:
            merged.extend(await repository.get_submitted_corpus())
        except Exception as e:
            logger.warning('corpus.submitted_load_failed', error=str(e))
            result.errors.append(f'Could not load submitted projects: {e}')

    result.projects = dedupe_by_title(merged)
    logger.info('corpus.loaded', projects=len(result.projects), errors=len(result.errors))
    return result
