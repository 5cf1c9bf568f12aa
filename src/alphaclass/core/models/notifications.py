"""
Notification Model

Rows are created by external processes (reminders, grade releases, etc.).
This service only ever flips the read state, and never deletes.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .users import User

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alphaclass.core.enums import NotificationPriority, sql_in

from .base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Notification(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """A message addressed to a single user."""

    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint(f"priority IN ({sql_in(NotificationPriority)})", name="check_priority"),
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(30), default="general", comment="reminder, schedule_change, grade, general, ..."
    )
    priority: Mapped[str] = mapped_column(String(10), default=NotificationPriority.MEDIUM.value)
    action_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Read state: set once, never cleared
    is_read: Mapped[bool] = mapped_column(default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="notifications")
