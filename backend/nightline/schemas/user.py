"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, computed_field

from nightline.core.permissions import Role, badge_for


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_.]+$")
    password: str = Field(..., min_length=6, max_length=72)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=32)


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: Optional[str]
    phone: Optional[str]
    role: Role
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def badge_type(self) -> Optional[str]:
        return badge_for(self.role)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ProfileUpdate(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=32)


class ProfileUpdateResponse(BaseModel):
    success: bool = True
    user: UserResponse


class UserAdminUpdate(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=32)
    role: Optional[Role] = None


class MessageResponse(BaseModel):
    message: str
