"""
Role-scoped data access.
"""

from .queries import list_classes, list_schedule
from .scoping import NotificationFilter, ResourceKind, ScheduleWindow, scope

__all__ = [
    "NotificationFilter",
    "ResourceKind",
    "ScheduleWindow",
    "list_classes",
    "list_schedule",
    "scope",
]
