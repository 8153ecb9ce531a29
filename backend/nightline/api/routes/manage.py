"""
Event-management endpoints for admins and owners.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nightline.db.session import get_db
from nightline.schemas.event import EventModeration, EventResponse
from nightline.services import event_service
from nightline.services.cache_service import commit_and_invalidate
from nightline.core.permissions import Capability
from nightline.api.deps import require_capability
from nightline.models.user import User

router = APIRouter(prefix="/manage/events", tags=["Event Management"])


@router.get("/", response_model=list[EventResponse])
async def list_managed_events_endpoint(
    status_filter: str = Query("all", alias="filter", description="all, published, or an event status"),
    user: User = Depends(require_capability(Capability.MANAGE_EVENTS)),
    db: AsyncSession = Depends(get_db),
):
    return await event_service.list_managed_events(db, user, status_filter)


@router.patch("/{event_id}", response_model=EventResponse)
async def moderate_event_endpoint(
    event_id: int,
    data: EventModeration,
    user: User = Depends(require_capability(Capability.MANAGE_EVENTS)),
    db: AsyncSession = Depends(get_db),
):
    """Review, publish or feature an event, and edit its details in the same write."""
    event = await event_service.moderate_event(db, user, event_id, data)
    await commit_and_invalidate(db)
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_endpoint(
    event_id: int,
    user: User = Depends(require_capability(Capability.DELETE_EVENTS)),
    db: AsyncSession = Depends(get_db),
):
    await event_service.delete_event(db, user, event_id)
    await commit_and_invalidate(db)
