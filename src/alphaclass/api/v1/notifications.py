"""
Notification API Endpoints

Listing and the idempotent read transition.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from alphaclass.auth.identity import Principal, get_principal
from alphaclass.core.database import get_db
from alphaclass.core.schemas import MarkReadResponse, NotificationListResponse, NotificationSchema
from alphaclass.notifications import list_notifications, mark_read

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    unread_only: bool = Query(False),
    limit: int | None = Query(None, description="Maximum rows (defaults to 20)"),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    """List the caller's notifications, newest first."""
    rows = await list_notifications(db, principal, unread_only=unread_only, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationSchema.model_validate(n) for n in rows]
    )


@router.put("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_notification_read(
    notification_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> MarkReadResponse:
    """Mark a notification read. Repeating the call is a no-op success."""
    notification = await mark_read(db, notification_id, principal)
    return MarkReadResponse(notification=NotificationSchema.model_validate(notification))
