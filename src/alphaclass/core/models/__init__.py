"""
AlphaClass SQLAlchemy Models
"""

from .academics import ClassSection, Enrollment, ScheduleEvent, Subject
from .base import Base, CreatedAtMixin, TimestampMixin, UUIDPrimaryKeyMixin
from .conversations import Conversation, ConversationTurn
from .notifications import Notification
from .users import Institution, User

__all__ = [
    # Base
    "Base",
    "UUIDPrimaryKeyMixin",
    "CreatedAtMixin",
    "TimestampMixin",
    # Tenancy and identity
    "Institution",
    "User",
    # Academics
    "Subject",
    "ClassSection",
    "Enrollment",
    "ScheduleEvent",
    # Notifications
    "Notification",
    # Assistant
    "Conversation",
    "ConversationTurn",
]
