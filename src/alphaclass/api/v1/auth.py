"""
Auth API Endpoints

Profile of the signed-in user. Token issuance is handled by the external
auth service.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from alphaclass.auth.identity import Principal, get_principal
from alphaclass.core.database import get_db, store_guard
from alphaclass.core.errors import NotFound
from alphaclass.core.models import User
from alphaclass.core.presentation import role_badge
from alphaclass.core.schemas import RoleBadge, UserProfileSchema

router = APIRouter()


@router.get("/me", response_model=UserProfileSchema)
async def get_me(
    principal: Principal = Depends(get_principal), db: AsyncSession = Depends(get_db)
) -> UserProfileSchema:
    """Get the current user's profile."""
    async with store_guard("get_me"):
        user = await db.get(User, principal.id)

    if user is None or not user.is_active or user.institution_id != principal.tenant_id:
        raise NotFound(f"User not found with ID: {principal.id}")

    profile = UserProfileSchema.model_validate(user)
    profile.role = principal.role
    profile.badge = RoleBadge(**role_badge(principal.role))
    return profile
