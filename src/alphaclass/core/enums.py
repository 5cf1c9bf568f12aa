"""Enumerations shared by models, schemas and the access layer."""

from enum import StrEnum


class Role(StrEnum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class EnrollmentStatus(StrEnum):
    """Only ACTIVE grants visibility into a class and its events."""

    ACTIVE = "active"
    DROPPED = "dropped"
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"


class EventType(StrEnum):
    CLASS = "class"
    EXAM = "exam"
    ASSIGNMENT = "assignment"
    MEETING = "meeting"
    HOLIDAY = "holiday"
    CUSTOM = "custom"


class NotificationPriority(StrEnum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TurnSender(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


def sql_in(values: type[StrEnum]) -> str:
    """Render enum values for a CHECK ... IN (...) constraint."""
    return ", ".join(f"'{v.value}'" for v in values)
