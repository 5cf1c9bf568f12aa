"""
Access-Scoping Engine

Builds the WHERE predicate that restricts a base query to the rows a
principal may see. Every schedule, roster and notification query in the
service goes through ``scope``; nothing reads those tables unscoped.

Rules:
    student  events/classes reachable through an *active* enrollment
    teacher  events they created or whose class they teach; classes they teach
    admin    everything inside their institution
    any role notifications they own, and nothing else

Caller filters are always ANDed onto the role predicate, so they can narrow
a result set but never widen it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from enum import StrEnum
from typing import Any

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import ColumnElement, and_, or_, select

from alphaclass.auth.identity import Principal
from alphaclass.core.enums import EnrollmentStatus, Role
from alphaclass.core.errors import InvalidResource
from alphaclass.core.models import ClassSection, Enrollment, Notification, ScheduleEvent


class ResourceKind(StrEnum):
    SCHEDULE_EVENT = "schedule_event"
    CLASS_SECTION = "class_section"
    NOTIFICATION = "notification"


@dataclass(frozen=True, slots=True)
class ScheduleWindow:
    """Window on event start time. Either bound may be open.

    ``start`` is inclusive. ``end`` is inclusive unless ``end_inclusive`` is
    False, which is how a date-only end bound covers its whole day.
    """

    start: datetime | None = None
    end: datetime | None = None
    end_inclusive: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _as_utc(self.start))
        object.__setattr__(self, "end", _as_utc(self.end))
        if self.start and self.end and self.start > self.end:
            raise InvalidResource("Schedule window start must not be after its end")

    @classmethod
    def from_query(cls, start: str | None = None, end: str | None = None) -> ScheduleWindow:
        """Build a window from raw query values.

        Accepts ISO dates or datetimes. A date-only ``start`` means midnight
        UTC of that day; a date-only ``end`` runs up to (not including) the
        following midnight, so ``[today, tomorrow]`` includes all of tomorrow.

        Raises:
            InvalidResource: a bound is not an ISO date or datetime
        """
        lower = _parse_bound("start", start)
        upper = _parse_bound("end", end)

        end_inclusive = True
        if isinstance(upper, date) and not isinstance(upper, datetime):
            upper = _midnight(upper) + timedelta(days=1)
            end_inclusive = False
        if isinstance(lower, date) and not isinstance(lower, datetime):
            lower = _midnight(lower)

        if lower is not None and upper is not None and not end_inclusive and lower >= upper:
            raise InvalidResource("Schedule window start must not be after its end")
        return cls(start=lower, end=upper, end_inclusive=end_inclusive)


@dataclass(frozen=True, slots=True)
class NotificationFilter:
    unread_only: bool = False


_DATETIME = TypeAdapter(datetime)


def _parse_bound(name: str, value: str | None) -> date | datetime | None:
    if value is None or not value.strip():
        return None
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return _DATETIME.validate_python(value)
    except ValidationError as e:
        raise InvalidResource(f"{name} must be an ISO date or datetime, got {value!r}") from e


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=UTC)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# ============================================================================
# Relationship subqueries
# ============================================================================


def active_class_ids(student_id: Any) -> Any:
    """Class ids the student holds an active enrollment in."""
    return select(Enrollment.class_id).where(
        Enrollment.student_id == student_id,
        Enrollment.status == EnrollmentStatus.ACTIVE.value,
    )


def taught_class_ids(teacher_id: Any) -> Any:
    """Class ids taught by the teacher."""
    return select(ClassSection.id).where(ClassSection.teacher_id == teacher_id)


# ============================================================================
# Role predicates per resource kind
# ============================================================================


def _schedule_event_predicate(principal: Principal) -> ColumnElement[bool]:
    tenant = ScheduleEvent.institution_id == principal.tenant_id

    if principal.role is Role.STUDENT:
        return and_(tenant, ScheduleEvent.class_id.in_(active_class_ids(principal.id)))
    if principal.role is Role.TEACHER:
        return and_(
            tenant,
            or_(
                ScheduleEvent.creator_id == principal.id,
                ScheduleEvent.class_id.in_(taught_class_ids(principal.id)),
            ),
        )
    if principal.role is Role.ADMIN:
        return tenant
    raise InvalidResource(f"No schedule scope defined for role {principal.role!r}")


def _class_section_predicate(principal: Principal) -> ColumnElement[bool]:
    tenant = ClassSection.institution_id == principal.tenant_id

    if principal.role is Role.STUDENT:
        return and_(tenant, ClassSection.id.in_(active_class_ids(principal.id)))
    if principal.role is Role.TEACHER:
        return and_(tenant, ClassSection.teacher_id == principal.id)
    if principal.role is Role.ADMIN:
        return tenant
    raise InvalidResource(f"No class scope defined for role {principal.role!r}")


def _notification_predicate(principal: Principal) -> ColumnElement[bool]:
    return Notification.user_id == principal.id


_ROLE_PREDICATES: dict[ResourceKind, Callable[[Principal], ColumnElement[bool]]] = {
    ResourceKind.SCHEDULE_EVENT: _schedule_event_predicate,
    ResourceKind.CLASS_SECTION: _class_section_predicate,
    ResourceKind.NOTIFICATION: _notification_predicate,
}


# ============================================================================
# Caller filters
# ============================================================================


def _filter_clauses(kind: ResourceKind, filters: object | None) -> list[ColumnElement[bool]]:
    if filters is None:
        return []

    if isinstance(filters, ScheduleWindow) and kind is ResourceKind.SCHEDULE_EVENT:
        clauses: list[ColumnElement[bool]] = []
        if filters.start is not None:
            clauses.append(ScheduleEvent.start_at >= filters.start)
        if filters.end is not None:
            if filters.end_inclusive:
                clauses.append(ScheduleEvent.start_at <= filters.end)
            else:
                clauses.append(ScheduleEvent.start_at < filters.end)
        return clauses

    if isinstance(filters, NotificationFilter) and kind is ResourceKind.NOTIFICATION:
        return [Notification.is_read.is_(False)] if filters.unread_only else []

    raise InvalidResource(f"Filter {type(filters).__name__} does not apply to {kind.value}")


def resolve_kind(kind: ResourceKind | str) -> ResourceKind:
    """Coerce a kind name, failing loudly on anything unrecognized."""
    try:
        return ResourceKind(kind)
    except ValueError as e:
        raise InvalidResource(f"Unknown resource kind: {kind!r}") from e


def scope(
    principal: Principal,
    kind: ResourceKind | str,
    filters: object | None = None,
) -> ColumnElement[bool]:
    """Build the access predicate for ``principal`` reading ``kind``.

    Args:
        principal: Authenticated caller
        kind: Resource kind being queried
        filters: Optional ScheduleWindow / NotificationFilter, ANDed on

    Returns:
        SQLAlchemy boolean expression for a WHERE clause

    Raises:
        InvalidResource: unknown kind, or a filter that does not fit the kind
    """
    resource_kind = resolve_kind(kind)
    predicate = _ROLE_PREDICATES[resource_kind](principal)
    return and_(predicate, *_filter_clauses(resource_kind, filters))
