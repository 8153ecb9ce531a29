"""
User management for admins and owners.

Owner accounts are protected here, at the store-access boundary: admins can
neither edit an owner nor hand out the owner role, and no one can delete an
owner account or their own.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from nightline.core.permissions import Capability, can_delete_user, can_modify_user
from nightline.core.security import deny_access
from nightline.core.logging import get_logger
from nightline.models.user import User
from nightline.schemas.user import UserAdminUpdate

logger = get_logger(__name__)


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )
    return user


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def update_user(db: AsyncSession, actor: User, user_id: int, data: UserAdminUpdate) -> User:
    target = await _get_user_or_404(db, user_id)

    if not can_modify_user(actor.role, target.role, data.role):
        raise deny_access(
            Capability.MODIFY_OWNER_ACCOUNTS.value,
            actor,
            detail="Admins cannot modify owner accounts or assign owner role",
        )

    changes = data.model_dump(exclude_unset=True)
    if "email" in changes:
        target.email = data.email or None
    if "phone" in changes:
        target.phone = data.phone or None
    if data.role is not None:
        target.role = data.role.value

    await db.flush()
    await db.refresh(target)

    logger.info(
        "user_updated",
        user_id=target.id,
        updated_by=actor.id,
        fields=sorted(changes),
        role=target.role,
    )
    return target


async def delete_user(db: AsyncSession, actor: User, user_id: int) -> None:
    target = await _get_user_or_404(db, user_id)

    if not can_delete_user(actor.id, actor.role, target.id, target.role):
        raise deny_access(
            Capability.MANAGE_USERS.value,
            actor,
            detail="Owner accounts and your own account cannot be deleted",
        )

    await db.delete(target)
    await db.flush()
    logger.info("user_deleted", user_id=user_id, deleted_by=actor.id)
