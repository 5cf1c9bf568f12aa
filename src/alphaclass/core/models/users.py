"""
Institution and User Models

Tenants (institutions) and the people who sign in: students, teachers, admins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from .academics import ClassSection, Enrollment
    from .conversations import Conversation
    from .notifications import Notification

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alphaclass.core.enums import Role, sql_in

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Institution(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Tenant boundary. Every user, class and event belongs to exactly one."""

    __tablename__ = "institutions"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True)

    users: Mapped[list[User]] = relationship(back_populates="institution")


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A person who authenticates against AlphaClass."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(f"role IN ({sql_in(Role)})", name="check_user_role"),
        Index("idx_users_institution", "institution_id"),
    )

    institution_id: Mapped[UUID] = mapped_column(ForeignKey("institutions.id"), nullable=False)

    # Identity
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, comment="student, teacher, admin")
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    timezone: Mapped[str] = mapped_column(String(50), default="UTC", comment="IANA timezone name")

    # Institution-specific identifiers
    student_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    employee_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)

    is_active: Mapped[bool] = mapped_column(default=True)

    # Relationships
    institution: Mapped[Institution] = relationship(back_populates="users")
    taught_classes: Mapped[list[ClassSection]] = relationship(back_populates="teacher")
    enrollments: Mapped[list[Enrollment]] = relationship(back_populates="student")
    notifications: Mapped[list[Notification]] = relationship(back_populates="user")
    conversations: Mapped[list[Conversation]] = relationship(back_populates="user")
