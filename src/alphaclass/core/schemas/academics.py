"""
Schedule and Class Roster Schemas

Pydantic models for API responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator

from alphaclass.core.enums import EventType


class ScheduleEventSchema(BaseModel):
    """A schedule entry, flattened with its class/subject labels."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str | None
    event_type: EventType
    start_at: datetime
    end_at: datetime
    location: str | None
    is_cancelled: bool
    class_id: UUID | None
    section_name: str | None = None
    subject_code: str | None = None
    subject_name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def flatten_class_section(cls, data: Any) -> Any:
        """Pull section/subject labels off an ORM ScheduleEvent."""
        section = getattr(data, "class_section", None)
        if section is None or isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "title": data.title,
            "description": data.description,
            "event_type": data.event_type,
            "start_at": data.start_at,
            "end_at": data.end_at,
            "location": data.location,
            "is_cancelled": data.is_cancelled,
            "class_id": data.class_id,
            "section_name": section.section_name,
            "subject_code": section.subject.code if section.subject else None,
            "subject_name": section.subject.name if section.subject else None,
        }


class ScheduleResponse(BaseModel):
    events: list[ScheduleEventSchema]


class ClassSectionSchema(BaseModel):
    """A class section as shown on a roster."""

    id: UUID
    section_name: str
    room: str | None
    schedule_pattern: dict[str, Any] | None
    max_students: int
    subject_code: str
    subject_name: str
    credits: int
    department: str | None
    teacher_name: str
    teacher_email: str

    @model_validator(mode="before")
    @classmethod
    def flatten_relations(cls, data: Any) -> Any:
        """Pull subject and teacher fields off an ORM ClassSection."""
        if isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "section_name": data.section_name,
            "room": data.room,
            "schedule_pattern": data.schedule_pattern,
            "max_students": data.max_students,
            "subject_code": data.subject.code,
            "subject_name": data.subject.name,
            "credits": data.subject.credits,
            "department": data.subject.department,
            "teacher_name": data.teacher.name,
            "teacher_email": data.teacher.email,
        }


class ClassListResponse(BaseModel):
    classes: list[ClassSectionSchema]
