"""
User Schemas

Pydantic models for API request/response validation.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from alphaclass.core.enums import Role


class RoleBadge(BaseModel):
    icon: str
    color: str


class UserProfileSchema(BaseModel):
    """The signed-in user's own profile."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: Role
    phone: str | None
    timezone: str
    institution_id: UUID
    student_number: str | None
    employee_number: str | None
    department: str | None
    badge: RoleBadge | None = Field(None, description="Presentation hint for the role")
