"""Bearer token authentication for the Idea Advisor API."""

from fastapi import Header, HTTPException

from .config import get_settings


async def verify_api_token(authorization: str = Header(...)) -> None:
    """Validate the bearer token sent by the portal front end."""
    expected = f"Bearer {get_settings().API_KEY}"
    if authorization != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing bearer token")
