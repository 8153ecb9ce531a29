"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import date as date_type, datetime, time
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from nightline.core.lifecycle import EventStatus
from nightline.schemas.validators import require_text

REQUIRED_TEXT_FIELDS = ("name", "venue_name", "venue_address", "city")


class EventDetails(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    date: date_type
    start_time: time
    end_time: Optional[time] = None
    venue_name: str = Field(..., min_length=1, max_length=255)
    venue_address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=120)
    ticket_button_label: Optional[str] = Field(None, max_length=100)
    ticket_url: Optional[str] = Field(None, max_length=2048)

    @field_validator(*REQUIRED_TEXT_FIELDS)
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        return require_text(value)


class EventCreate(EventDetails):
    # Promoters only: keep the submission out of review for now
    save_as_draft: bool = False


class EventUpdate(EventDetails):
    pass


class EventModeration(BaseModel):
    """Partial update from the event-management surface. Unset fields are left alone."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    date: Optional[date_type] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    venue_name: Optional[str] = Field(None, min_length=1, max_length=255)
    venue_address: Optional[str] = Field(None, min_length=1, max_length=500)
    city: Optional[str] = Field(None, min_length=1, max_length=120)
    ticket_button_label: Optional[str] = Field(None, max_length=100)
    ticket_url: Optional[str] = Field(None, max_length=2048)
    status: Optional[EventStatus] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None
    featured_rank: Optional[int] = Field(None, ge=1, le=100)

    @field_validator(*REQUIRED_TEXT_FIELDS)
    @classmethod
    def strip_required_text(cls, value: Optional[str]) -> Optional[str]:
        return require_text(value)


class EventResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    date: date_type
    start_time: time
    end_time: Optional[time]
    venue_name: str
    venue_address: str
    city: str
    organizer_user_id: int
    submitted_by_promoter_id: Optional[int]
    ticket_button_label: str
    ticket_url: Optional[str]
    is_published: bool
    status: EventStatus
    is_featured: bool
    featured_rank: Optional[int]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
