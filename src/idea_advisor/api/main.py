"""FastAPI application for the Idea Advisor service."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from idea_advisor.clients.openai_client import OpenAIClient
from idea_advisor.clients.store import create_store
from idea_advisor.logging import configure_logging
from idea_advisor.pipeline.ingestion import ProjectIngestor
from idea_advisor.pipeline.notifier import Notifier
from idea_advisor.pipeline.orchestrator import SubmissionWorkflow
from idea_advisor.pipeline.scorer import build_similarity_scorer
from idea_advisor.repository import PortalRepository

from .config import get_settings
from .routes.health import router as health_router
from .routes.notifications import router as notifications_router
from .routes.submissions import router as submissions_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store, clients and workflow once at startup, clean up at shutdown."""
    settings = get_settings()
    configure_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)

    logger.info(
        "lifespan.startup",
        persistent_store=bool(settings.DATABASE_URL),
        delegated_scoring=bool(settings.OPENAI_API_KEY),
        fallback_to_local=settings.SIMILARITY_FALLBACK_TO_LOCAL,
    )

    store = await create_store(settings.DATABASE_URL)

    # OpenAI is optional; without it delegated scoring raises NotAvailable
    openai: OpenAIClient | None = None
    if settings.OPENAI_API_KEY:
        openai = OpenAIClient(
            api_key=settings.OPENAI_API_KEY,
            chat_model=settings.OPENAI_CHAT_MODEL,
            max_attempts=settings.OPENAI_MAX_ATTEMPTS,
        )
    else:
        logger.warning("lifespan.openai_not_configured")

    repository = PortalRepository(store)
    scorer = build_similarity_scorer(settings, openai)
    notifier = Notifier(repository, alert_threshold=settings.SIMILARITY_ALERT_THRESHOLD)
    workflow = SubmissionWorkflow(
        repository,
        scorer,
        ingestor=ProjectIngestor(openai),
        notifier=notifier,
        alert_threshold=settings.SIMILARITY_ALERT_THRESHOLD,
    )

    # Store on app.state for request handlers
    app.state.store = store
    app.state.openai = openai
    app.state.repository = repository
    app.state.scorer = scorer
    app.state.notifier = notifier
    app.state.workflow = workflow
    app.state.corpus_path = settings.CORPUS_PATH

    logger.info("lifespan.ready")
    yield

    # Shutdown
    logger.info("lifespan.shutdown")
    await store.close()
    if openai is not None:
        await openai.close()


app = FastAPI(
    title="idea-advisor",
    description="Bootcamp project submissions: idea similarity, role recommendations and merge advisory",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(submissions_router)
app.include_router(notifications_router)
