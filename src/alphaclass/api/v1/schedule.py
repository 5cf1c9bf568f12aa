"""
Schedule API Endpoints

Role-scoped schedule, filterable by a start-time window.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from alphaclass.access import ScheduleWindow, list_schedule
from alphaclass.auth.identity import Principal, get_principal
from alphaclass.core.database import get_db
from alphaclass.core.schemas import ScheduleEventSchema, ScheduleResponse

router = APIRouter()


@router.get("", response_model=ScheduleResponse)
async def get_schedule(
    start: str | None = Query(
        None, description="Earliest event start (inclusive); ISO date or datetime"
    ),
    end: str | None = Query(
        None,
        description="Latest event start; a datetime is inclusive, a date covers that whole day",
    ),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> ScheduleResponse:
    """List the caller's schedule, ascending by start time."""
    events = await list_schedule(db, principal, ScheduleWindow.from_query(start, end))
    return ScheduleResponse(events=[ScheduleEventSchema.model_validate(e) for e in events])
