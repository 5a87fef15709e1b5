"""Health check endpoint."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Check document store connectivity and report the scoring mode."""
    try:
        healthy = await request.app.state.store.verify_connectivity()
    except Exception:
        healthy = False

    if not healthy:
        return JSONResponse(status_code=503, content={"status": "unhealthy"})

    return {
        "status": "ok",
        "delegated_scoring": request.app.state.openai is not None,
    }
