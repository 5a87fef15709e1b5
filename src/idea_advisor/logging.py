"""
Structured logging for the Idea Advisor service.

structlog renders JSON in production and coloured console lines in
development. Request-scoped identifiers (trace, project, user) live in
context variables and are merged into every entry emitted while they are
bound, so a workflow run can be followed across stages.
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from .config import config

CONTEXT_FIELDS = ('trace_id', 'project_id', 'user_id')

_context_vars: dict[str, ContextVar[str | None]] = {
    field: ContextVar(field, default=None) for field in CONTEXT_FIELDS
}


def current_context() -> dict[str, str]:
    """Identifiers currently bound, omitting unset ones."""
    bound = {field: var.get() for field, var in _context_vars.items()}
    return {k: v for k, v in bound.items() if v}


def get_trace_id() -> str | None:
    return _context_vars['trace_id'].get()


def get_project_id() -> str | None:
    return _context_vars['project_id'].get()


def get_user_id() -> str | None:
    return _context_vars['user_id'].get()


def add_request_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """structlog processor merging the bound identifiers into the entry."""
    for key, value in current_context().items():
        event_dict.setdefault(key, value)
    return event_dict


def configure_logging(json_output: bool = False, log_level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        json_output: Render JSON lines instead of the development console format
        log_level: Level name; falls back to config.LOG_LEVEL
    """
    level = logging.getLevelName((log_level or config.LOG_LEVEL).upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format='%(message)s', stream=sys.stdout, level=level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_request_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso', utc=True),
    ]
    if json_output:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def logging_context(**identifiers: str | None) -> Iterator[None]:
    """
    Bind trace_id, project_id and/or user_id for the duration of the block.

    None values leave the outer binding in place. Previous values are
    restored on exit, including when the block raises.

    Usage:
        with logging_context(project_id=submission.id, user_id=submission.submitted_by):
            logger.info('workflow.started')
    """
    unknown = set(identifiers) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f'Unknown logging context fields: {sorted(unknown)}')

    tokens = [
        (_context_vars[field], _context_vars[field].set(value))
        for field, value in identifiers.items()
        if value is not None
    ]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


class PipelineTimer:
    """
    Wall-clock durations, in milliseconds, for each workflow stage.

    A stage that raises is still recorded.
    """

    def __init__(self) -> None:
        self.stages: dict[str, float] = {}
        self._created = time.perf_counter()

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            self.stages[name] = (time.perf_counter() - started) * 1000

    def record(self, name: str, duration_ms: float) -> None:
        self.stages[name] = duration_ms

    @property
    def total_ms(self) -> float:
        return (time.perf_counter() - self._created) * 1000

    def summary(self) -> dict[str, Any]:
        return {
            'total_ms': round(self.total_ms, 2),
            'stages': {name: round(ms, 2) for name, ms in self.stages.items()},
        }


# Development defaults until the service configures production output
configure_logging()
