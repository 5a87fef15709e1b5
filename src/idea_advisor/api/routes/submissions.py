"""Submission, similarity and project review endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from idea_advisor.corpus import load_corpus
from idea_advisor.errors import MalformedResponse, NotAvailable, SimilarityError, ValidationError
from idea_advisor.models.project import ResponseType, SubmissionInput, SubmissionStatus

from ..auth import verify_api_token

logger = structlog.get_logger(__name__)

router = APIRouter()


class SimilarityRequest(BaseModel):
    idea: str = Field(..., min_length=1)


class SupervisorResponseRequest(BaseModel):
    supervisor_id: str
    supervisor_name: str
    message: str = ""
    response_type: ResponseType = ResponseType.SIMILARITY_WARNING


@router.post("/submissions")
async def submit_project(
    submission: SubmissionInput,
    request: Request,
    _auth: None = Depends(verify_api_token),
):
    """Persist a submission and run the advisory workflow over it."""
    state = request.app.state
    corpus = await load_corpus(state.repository, state.corpus_path)

    try:
        result = await state.workflow.execute(submission, corpus.projects)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": e.message, "missing_fields": e.context.get("missing_fields", [])},
        )

    body = result.to_dict()
    body["corpus_error"] = corpus.error
    return body


@router.post("/similarity")
async def score_idea(
    payload: SimilarityRequest,
    request: Request,
    _auth: None = Depends(verify_api_token),
):
    """Score a free-text idea against the corpus without submitting it."""
    state = request.app.state
    corpus = await load_corpus(state.repository, state.corpus_path)

    try:
        results = await state.scorer.score(payload.idea, corpus.projects)
    except NotAvailable as e:
        logger.warning("similarity.not_available", error=str(e))
        return JSONResponse(status_code=503, content={"error": e.message})
    except MalformedResponse as e:
        logger.error("similarity.malformed_response", error=str(e))
        return JSONResponse(status_code=502, content={"error": e.message})
    except SimilarityError as e:
        logger.error("similarity.failed", error=str(e))
        return JSONResponse(status_code=502, content={"error": e.message})

    return {
        "results": [r.to_dict() for r in results],
        "corpus_size": len(corpus.projects),
        "corpus_error": corpus.error,
    }


@router.get("/projects")
async def list_projects(
    request: Request,
    status: SubmissionStatus | None = None,
    supervisor: str | None = None,
    _auth: None = Depends(verify_api_token),
):
    """List submitted projects, optionally filtered by status or supervisor."""
    repository = request.app.state.repository
    if supervisor is not None:
        projects = await repository.get_projects_by_supervisor(supervisor)
    else:
        projects = await repository.get_submitted_projects()

    if status is not None:
        projects = [p for p in projects if p.status == status]

    return {"projects": [p.model_dump(mode="json") for p in projects]}


@router.post("/projects/upload")
async def upload_projects(
    records: list[dict[str, Any]],
    request: Request,
    _auth: None = Depends(verify_api_token),
):
    """Add raw project records to the comparison corpus."""
    added = await request.app.state.repository.add_uploaded_projects(records)
    return {"added": added}


@router.get("/projects/{project_id}")
async def get_project(
    project_id: str,
    request: Request,
    _auth: None = Depends(verify_api_token),
):
    project = await request.app.state.repository.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project.model_dump(mode="json")


@router.post("/projects/{project_id}/responses")
async def respond_to_project(
    project_id: str,
    payload: SupervisorResponseRequest,
    request: Request,
    _auth: None = Depends(verify_api_token),
):
    """Record a supervisor response and notify the project's students."""
    project = await request.app.state.notifier.respond_to_submission(
        project_id=project_id,
        supervisor_id=payload.supervisor_id,
        supervisor_name=payload.supervisor_name,
        message=payload.message,
        response_type=payload.response_type,
    )
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project.model_dump(mode="json")
