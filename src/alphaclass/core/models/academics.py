"""
Academic Models

Subjects, class sections, enrollments and the schedule events hanging off them.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from .users import User

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alphaclass.core.enums import EnrollmentStatus, EventType, sql_in

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow


class Subject(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Course catalogue entry (e.g. CS101 Introduction to Programming)."""

    __tablename__ = "subjects"
    __table_args__ = (UniqueConstraint("institution_id", "code", name="uq_subject_code"),)

    institution_id: Mapped[UUID] = mapped_column(ForeignKey("institutions.id"), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    credits: Mapped[int] = mapped_column(SmallInteger, default=3)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)

    classes: Mapped[list[ClassSection]] = relationship(back_populates="subject")


class ClassSection(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A taught section of a subject. Owned by exactly one teacher."""

    __tablename__ = "classes"
    __table_args__ = (
        Index("idx_classes_teacher", "teacher_id"),
        Index("idx_classes_institution", "institution_id"),
    )

    institution_id: Mapped[UUID] = mapped_column(ForeignKey("institutions.id"), nullable=False)
    subject_id: Mapped[UUID] = mapped_column(ForeignKey("subjects.id"), nullable=False)
    teacher_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)

    section_name: Mapped[str] = mapped_column(String(50), nullable=False)
    room: Mapped[str | None] = mapped_column(String(100), nullable=True)
    schedule_pattern: Mapped[dict[str, Any] | None] = mapped_column(
        JSON,
        nullable=True,
        comment='Recurrence, e.g. {"days": ["MON", "WED"], "start": "09:00", "end": "10:30"}',
    )
    max_students: Mapped[int] = mapped_column(SmallInteger, default=30, comment="Capacity")

    is_active: Mapped[bool] = mapped_column(default=True)

    # Relationships
    subject: Mapped[Subject] = relationship(back_populates="classes")
    teacher: Mapped[User] = relationship(back_populates="taught_classes")
    enrollments: Mapped[list[Enrollment]] = relationship(
        back_populates="class_section", cascade="all, delete-orphan"
    )
    events: Mapped[list[ScheduleEvent]] = relationship(back_populates="class_section")


class Enrollment(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Student membership in a class section.

    Status transitions happen outside this service; only ``active`` rows
    grant the student visibility.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        CheckConstraint(f"status IN ({sql_in(EnrollmentStatus)})", name="check_enrollment_status"),
        UniqueConstraint("student_id", "class_id", name="uq_enrollment_student_class"),
        Index("idx_enrollments_student_status", "student_id", "status"),
    )

    student_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    class_id: Mapped[UUID] = mapped_column(ForeignKey("classes.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=EnrollmentStatus.ACTIVE.value)
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    student: Mapped[User] = relationship(back_populates="enrollments")
    class_section: Mapped[ClassSection] = relationship(back_populates="enrollments")


class ScheduleEvent(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Anything with a start time on somebody's calendar."""

    __tablename__ = "schedule_events"
    __table_args__ = (
        CheckConstraint(f"event_type IN ({sql_in(EventType)})", name="check_event_type"),
        CheckConstraint("end_at >= start_at", name="check_event_time_order"),
        Index("idx_events_institution_start", "institution_id", "start_at"),
        Index("idx_events_class", "class_id"),
        Index("idx_events_creator", "creator_id"),
    )

    institution_id: Mapped[UUID] = mapped_column(ForeignKey("institutions.id"), nullable=False)
    class_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("classes.id"), nullable=True, comment="NULL for events not tied to a class"
    )
    creator_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, comment="NULL when generated from a class pattern"
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_type: Mapped[str] = mapped_column(String(20), default=EventType.CLASS.value)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_cancelled: Mapped[bool] = mapped_column(default=False)

    class_section: Mapped[ClassSection | None] = relationship(back_populates="events")
    creator: Mapped[User | None] = relationship()
