"""
User management endpoints for admins and owners.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from nightline.db.session import get_db
from nightline.schemas.user import UserAdminUpdate, UserResponse
from nightline.services import user_service
from nightline.services.cache_service import commit_and_invalidate
from nightline.core.permissions import Capability
from nightline.api.deps import require_capability
from nightline.models.user import User

router = APIRouter(prefix="/users", tags=["User Management"])


@router.get("/", response_model=list[UserResponse])
async def list_users_endpoint(
    user: User = Depends(require_capability(Capability.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.list_users(db)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user_endpoint(
    user_id: int,
    data: UserAdminUpdate,
    user: User = Depends(require_capability(Capability.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    """Edit contact fields or role. Owner accounts and the owner role are owner-only."""
    return await user_service.update_user(db, user, user_id, data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_endpoint(
    user_id: int,
    user: User = Depends(require_capability(Capability.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    await user_service.delete_user(db, user, user_id)
    # The organizer's events go with the account
    await commit_and_invalidate(db)
