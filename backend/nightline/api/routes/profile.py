"""
Profile endpoints for the signed-in user.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from nightline.db.session import get_db
from nightline.schemas.user import ProfileUpdate, ProfileUpdateResponse, UserResponse
from nightline.services.auth_service import update_profile
from nightline.core.security import get_current_user
from nightline.models.user import User

router = APIRouter(tags=["Profile"])


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile_endpoint(
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await update_profile(db, user, data)
    return ProfileUpdateResponse(user=UserResponse.model_validate(updated))


@router.post("/upload", status_code=status.HTTP_410_GONE)
async def upload_endpoint():
    """Profile picture uploads are not supported."""
    raise HTTPException(
        status_code=status.HTTP_410_GONE,
        detail="Profile picture uploads are disabled",
    )
