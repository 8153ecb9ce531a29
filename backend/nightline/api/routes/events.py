"""
Public event listings and the organizer-facing event endpoints.
Public list views are cached in Redis; every write invalidates them.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nightline.db.session import get_db
from nightline.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from nightline.services import event_service
from nightline.services.cache_service import (
    cached_listing,
    commit_and_invalidate,
    make_event_list_key,
    make_featured_key,
)
from nightline.core.config import get_settings
from nightline.core.permissions import Capability
from nightline.core.security import get_current_user, get_optional_user
from nightline.api.deps import require_capability
from nightline.models.user import User

settings = get_settings()
router = APIRouter(prefix="/events", tags=["Events"])


def _serialize(events) -> list[dict]:
    return [EventResponse.model_validate(e).model_dump(mode="json") for e in events]


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.EVENTS_PAGE_SIZE, ge=1, le=settings.EVENTS_MAX_PAGE_SIZE),
    upcoming_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
):
    """Published events, soonest first."""

    async def load() -> dict:
        events, total = await event_service.list_public_events(db, page, page_size, upcoming_only)
        return {"events": _serialize(events), "total": total, "page": page, "page_size": page_size}

    payload, from_cache = await cached_listing(
        make_event_list_key(page, page_size, upcoming_only), load
    )
    return EventListResponse(**payload, cached=from_cache)


@router.get("/featured", response_model=list[EventResponse])
async def featured_events_endpoint(db: AsyncSession = Depends(get_db)):
    """Landing view: published featured events, lowest rank first."""

    async def load() -> dict:
        return {"events": _serialize(await event_service.list_featured_events(db))}

    payload, _ = await cached_listing(make_featured_key(settings.FEATURED_EVENTS_LIMIT), load)
    return payload["events"]


@router.get("/mine", response_model=list[EventResponse])
async def my_events_endpoint(
    status_filter: str = Query("all", alias="filter", description="all, published, or an event status"),
    user: User = Depends(require_capability(Capability.VIEW_OWN_SUBMISSIONS)),
    db: AsyncSession = Depends(get_db),
):
    """The calling promoter's own submissions."""
    return await event_service.list_promoter_events(db, user, status_filter)


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    user: User = Depends(require_capability(Capability.CREATE_EVENTS)),
    db: AsyncSession = Depends(get_db),
):
    """Create an event. Promoter submissions go straight to review unless saved as a draft."""
    event = await event_service.create_event(db, user, event_data)
    await commit_and_invalidate(db)
    return event


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: int,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """A single event. Not cached; unpublished events only reach their editors."""
    return await event_service.get_event(db, event_id, viewer)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: int,
    details: EventUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    event = await event_service.update_event_details(db, user, event_id, details)
    await commit_and_invalidate(db)
    return event


@router.post("/{event_id}/submit", response_model=EventResponse)
async def submit_event_endpoint(
    event_id: int,
    user: User = Depends(require_capability(Capability.CREATE_EVENTS)),
    db: AsyncSession = Depends(get_db),
):
    """Move a draft into review."""
    event = await event_service.submit_event(db, user, event_id)
    await commit_and_invalidate(db)
    return event
