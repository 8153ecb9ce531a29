"""
Authentication endpoints: register, login, logout and the current identity.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from nightline.db.session import get_db
from nightline.core.security import create_user_token, get_current_user
from nightline.models.user import User
from nightline.schemas.user import MessageResponse, UserCreate, UserResponse, UserLogin, Token
from nightline.services.auth_service import register_user, authenticate_user, logout_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create an account. New accounts always start with the `user` role."""
    user = await register_user(db, user_data)
    return user


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Check credentials and receive an access token plus the signed-in identity."""
    user = await authenticate_user(db, login_data.username, login_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=create_user_token(user), user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """End every session of the current user."""
    await logout_user(db, user)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return user
