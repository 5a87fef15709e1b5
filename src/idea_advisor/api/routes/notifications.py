"""Notification inbox endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from idea_advisor.models.notification import NotificationStatus

from ..auth import verify_api_token

router = APIRouter()


@router.get("/notifications/{recipient_id}")
async def list_notifications(
    recipient_id: str,
    request: Request,
    unread_only: bool = False,
    _auth: None = Depends(verify_api_token),
):
    """List a recipient's notifications in creation order."""
    repository = request.app.state.repository
    notifications = await repository.get_notifications(recipient_id)
    if unread_only:
        notifications = [n for n in notifications if n.status == NotificationStatus.UNREAD]

    return {
        "recipient_id": recipient_id,
        "unread_count": await repository.get_unread_count(recipient_id),
        "notifications": [n.model_dump(mode="json") for n in notifications],
    }


@router.post("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    recipient_id: str,
    request: Request,
    _auth: None = Depends(verify_api_token),
):
    """Mark one of the recipient's notifications as read."""
    updated = await request.app.state.repository.mark_as_read(notification_id, recipient_id)
    if not updated:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"id": notification_id, "status": "read"}
