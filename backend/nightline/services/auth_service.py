"""
Authentication service handling signup, login, logout and profile updates.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from nightline.core.permissions import Role
from nightline.core.security import hash_password, verify_password
from nightline.core.metrics import record_login
from nightline.core.logging import get_logger
from nightline.models.user import User
from nightline.schemas.user import UserCreate, ProfileUpdate

logger = get_logger(__name__)


def _conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new account with role `user`.
    Raises 409 if the username or email is already taken.
    """
    result = await db.execute(select(User).where(User.username == user_data.username))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="username_exists", username=user_data.username)
        raise _conflict("Username already exists")

    if user_data.email:
        result = await db.execute(select(User).where(User.email == user_data.email))
        if result.scalar_one_or_none():
            logger.warning("registration_failed", reason="email_exists", email=user_data.email)
            raise _conflict("Email already registered")

    user = User(
        username=user_data.username,
        email=user_data.email or None,
        phone=user_data.phone or None,
        hashed_password=hash_password(user_data.password),
        role=Role.USER.value,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same username/email
        await db.rollback()
        logger.warning("registration_failed", reason="unique_violation", username=user_data.username)
        raise _conflict("Username already exists")
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, username=user.username)
    return user


async def authenticate_user(db: AsyncSession, username: str, password: str) -> Optional[User]:
    """Return the user when the password matches, otherwise None."""
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.hashed_password):
        record_login(success=False)
        logger.warning("login_failed", username=username)
        return None

    record_login(success=True)
    logger.info("user_logged_in", user_id=user.id)
    return user


async def logout_user(db: AsyncSession, user: User) -> None:
    """Invalidate every token issued to this user so far."""
    user.session_version = user.session_version + 1
    await db.flush()
    await db.refresh(user)
    logger.info("user_logged_out", user_id=user.id)


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    """Write the caller's own contact fields. Blank values clear the field."""
    email = data.email or None
    if email and email != user.email:
        result = await db.execute(select(User).where(User.email == email, User.id != user.id))
        if result.scalar_one_or_none():
            raise _conflict("Email already registered")

    user.email = email
    user.phone = data.phone or None
    await db.flush()
    await db.refresh(user)

    logger.info("profile_updated", user_id=user.id)
    return user
