"""Pydantic schemas for API validation."""

from .academics import ClassListResponse, ClassSectionSchema, ScheduleEventSchema, ScheduleResponse
from .chat import (
    ChatRequest,
    ChatResponse,
    ConversationSchema,
    ConversationTurnSchema,
    TranscriptResponse,
)
from .notifications import MarkReadResponse, NotificationListResponse, NotificationSchema
from .users import RoleBadge, UserProfileSchema

__all__ = [
    # Academics
    "ScheduleEventSchema",
    "ScheduleResponse",
    "ClassSectionSchema",
    "ClassListResponse",
    # Chat
    "ChatRequest",
    "ChatResponse",
    "ConversationSchema",
    "ConversationTurnSchema",
    "TranscriptResponse",
    # Notifications
    "NotificationSchema",
    "NotificationListResponse",
    "MarkReadResponse",
    # Users
    "RoleBadge",
    "UserProfileSchema",
]
