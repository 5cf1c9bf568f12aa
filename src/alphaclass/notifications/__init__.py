"""Notification read-state tracking."""

from .tracker import list_notifications, mark_read

__all__ = ["list_notifications", "mark_read"]
