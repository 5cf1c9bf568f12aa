"""
Notification Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from alphaclass.core.enums import NotificationPriority


class NotificationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    message: str
    type: str
    priority: NotificationPriority
    is_read: bool
    read_at: datetime | None
    action_url: str | None
    created_at: datetime


class NotificationListResponse(BaseModel):
    notifications: list[NotificationSchema]


class MarkReadResponse(BaseModel):
    success: bool = True
    notification: NotificationSchema
