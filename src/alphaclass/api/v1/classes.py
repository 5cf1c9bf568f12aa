"""
Class Roster API Endpoints
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from alphaclass.access import list_classes
from alphaclass.auth.identity import Principal, get_principal
from alphaclass.core.database import get_db
from alphaclass.core.schemas import ClassListResponse, ClassSectionSchema

router = APIRouter()


@router.get("", response_model=ClassListResponse)
async def get_classes(
    principal: Principal = Depends(get_principal), db: AsyncSession = Depends(get_db)
) -> ClassListResponse:
    """List active classes the caller is enrolled in, teaches, or administers."""
    sections = await list_classes(db, principal)
    return ClassListResponse(classes=[ClassSectionSchema.model_validate(s) for s in sections])
