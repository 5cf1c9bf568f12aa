"""
Scoped read queries for the schedule and class roster.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from alphaclass.access.scoping import ResourceKind, ScheduleWindow, scope
from alphaclass.core.database import store_guard
from alphaclass.core.models import ClassSection, ScheduleEvent, Subject

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from alphaclass.auth.identity import Principal


async def list_schedule(
    db: AsyncSession, principal: Principal, window: ScheduleWindow | None = None
) -> Sequence[ScheduleEvent]:
    """Events visible to ``principal``, ascending by start time.

    Cancelled events are included; callers render them with their flag.
    """
    stmt = (
        select(ScheduleEvent)
        .where(scope(principal, ResourceKind.SCHEDULE_EVENT, window))
        .options(selectinload(ScheduleEvent.class_section).selectinload(ClassSection.subject))
        .order_by(ScheduleEvent.start_at.asc(), ScheduleEvent.id.asc())
    )
    async with store_guard("list_schedule"):
        result = await db.execute(stmt)
        return result.scalars().all()


async def list_classes(db: AsyncSession, principal: Principal) -> Sequence[ClassSection]:
    """Active class sections visible to ``principal``, by subject code then section."""
    stmt = (
        select(ClassSection)
        .join(ClassSection.subject)
        .where(ClassSection.is_active.is_(True), scope(principal, ResourceKind.CLASS_SECTION))
        .options(selectinload(ClassSection.subject), selectinload(ClassSection.teacher))
        .order_by(Subject.code.asc(), ClassSection.section_name.asc())
    )
    async with store_guard("list_classes"):
        result = await db.execute(stmt)
        return result.scalars().all()
