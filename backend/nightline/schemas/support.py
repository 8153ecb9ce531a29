"""
Pydantic schemas for support tickets and promoter applications.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from nightline.core.lifecycle import EntryKind, TicketCategory, TicketStatus
from nightline.schemas.validators import require_text


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=10000)

    @field_validator("subject", "message")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return require_text(value)


class TicketReply(BaseModel):
    message: str = Field(..., min_length=1, max_length=10000)

    @field_validator("message")
    @classmethod
    def strip_message(cls, value: str) -> str:
        return require_text(value)


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class PromoterApplication(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    instagram: str = Field(..., min_length=1, max_length=100)
    expected_attendees: str = Field(..., min_length=1, max_length=50)
    experience: str = Field(..., min_length=1, max_length=2000)
    message: str = Field(..., min_length=1, max_length=5000)

    @field_validator("name", "instagram", "expected_attendees", "experience", "message")
    @classmethod
    def strip_answers(cls, value: str) -> str:
        return require_text(value)


class TicketEntryResponse(BaseModel):
    id: int
    author_user_id: Optional[int]
    kind: EntryKind
    body: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TicketResponse(BaseModel):
    id: int
    sender_user_id: int
    subject: str
    category: TicketCategory
    status: TicketStatus
    handled_by_admin_id: Optional[int]
    message_body: str
    entries: list[TicketEntryResponse]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
