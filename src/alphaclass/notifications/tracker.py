"""
Notification State Tracker

Read/unread transitions for notifications. The transition is one-way and
idempotent: the first successful call stamps ``read_at``; later calls are
no-op successes that leave the original timestamp alone.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import select, update

from alphaclass.access.scoping import NotificationFilter, ResourceKind, scope
from alphaclass.config import settings
from alphaclass.core.database import store_guard
from alphaclass.core.errors import InvalidResource, NotFound, Unauthorized
from alphaclass.core.models import Notification
from alphaclass.core.models.base import utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from alphaclass.auth.identity import Principal

logger = logging.getLogger(__name__)


async def list_notifications(
    db: AsyncSession,
    principal: Principal,
    *,
    unread_only: bool = False,
    limit: int | None = None,
) -> Sequence[Notification]:
    """The principal's own notifications, newest first."""
    limit = settings.NOTIFICATIONS_DEFAULT_LIMIT if limit is None else limit
    if not 1 <= limit <= settings.NOTIFICATIONS_MAX_LIMIT:
        raise InvalidResource(
            f"limit must be between 1 and {settings.NOTIFICATIONS_MAX_LIMIT}, got {limit}"
        )

    stmt = (
        select(Notification)
        .where(
            scope(principal, ResourceKind.NOTIFICATION, NotificationFilter(unread_only=unread_only))
        )
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
    )
    async with store_guard("list_notifications"):
        result = await db.execute(stmt)
        return result.scalars().all()


async def mark_read(db: AsyncSession, notification_id: UUID, principal: Principal) -> Notification:
    """Mark a notification read on behalf of its owner.

    Args:
        db: Database session
        notification_id: Notification to transition
        principal: Caller; must own the notification

    Returns:
        The notification in its final (read) state

    Raises:
        NotFound: notification does not exist
        Unauthorized: notification belongs to someone else (nothing is changed)
    """
    async with store_guard("mark_read.load"):
        notification = await db.get(Notification, notification_id)

    if notification is None:
        raise NotFound(f"Notification not found with ID: {notification_id}")

    if notification.user_id != principal.id:
        logger.warning(
            f"User {principal.id} attempted to mark notification {notification_id} "
            f"owned by {notification.user_id}"
        )
        raise Unauthorized("Notification belongs to another user")

    if notification.is_read:
        return notification

    # Conditional on is_read so a concurrent first transition keeps its timestamp
    async with store_guard("mark_read.update"):
        await db.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.user_id == principal.id,
                Notification.is_read.is_(False),
            )
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        await db.refresh(notification)

    return notification
