"""
Event service: creation, editing, moderation and the public listings.

Every write is a single row update flushed in the request's session. Role
checks happen here as well as at the route, so no caller can reach the store
without passing them.
"""

from datetime import date
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from nightline.core.config import get_settings
from nightline.core.lifecycle import (
    EventStatus,
    apply_featured,
    can_set_event_status,
    initial_event_state,
)
from nightline.core.logging import get_logger
from nightline.core.metrics import record_event_transition
from nightline.core.permissions import Capability, can_edit_event, permission
from nightline.core.security import deny_access
from nightline.models.event import Event
from nightline.models.user import User
from nightline.schemas.event import EventCreate, EventDetails, EventModeration

logger = get_logger(__name__)
settings = get_settings()

DETAIL_FIELDS = (
    "name",
    "description",
    "date",
    "start_time",
    "end_time",
    "venue_name",
    "venue_address",
    "city",
    "ticket_button_label",
    "ticket_url",
)

NULLABLE_DETAIL_FIELDS = {"description", "end_time", "ticket_button_label", "ticket_url"}

# Listing filter values besides the statuses themselves
FILTER_ALL = "all"
FILTER_PUBLISHED = "published"


def _not_found(event_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Event {event_id} not found",
    )


async def _get_event_or_404(db: AsyncSession, event_id: int) -> Event:
    event = await db.get(Event, event_id)
    if not event:
        raise _not_found(event_id)
    return event


def _check_date(event_date: date) -> None:
    if event_date < date.today():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Event date must not be in the past",
        )


def _apply_details(event: Event, details: dict) -> None:
    for field in DETAIL_FIELDS:
        if field in details:
            setattr(event, field, details[field])
    if "ticket_button_label" in details and not details["ticket_button_label"]:
        event.ticket_button_label = settings.DEFAULT_TICKET_BUTTON_LABEL
    if "description" in details:
        event.description = details["description"] or None
    if "ticket_url" in details:
        event.ticket_url = details["ticket_url"] or None


def apply_listing_filter(query, listing_filter: str):
    """Narrow a select(Event) by 'all', 'published' (the flag) or a status value."""
    if listing_filter == FILTER_ALL:
        return query
    if listing_filter == FILTER_PUBLISHED:
        return query.where(Event.is_published.is_(True))
    try:
        event_status = EventStatus(listing_filter)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown filter '{listing_filter}'",
        )
    return query.where(Event.status == event_status.value)


async def create_event(db: AsyncSession, actor: User, event_data: EventCreate) -> Event:
    """
    Create an event owned by the caller.

    Promoters' events go to review (or stay drafts on request) and record the
    promoter as submitter. Staff events start as drafts with no submitter.
    """
    if not permission(actor.role, Capability.CREATE_EVENTS):
        raise deny_access(Capability.CREATE_EVENTS.value, actor)

    _check_date(event_data.date)

    event = Event(**initial_event_state(actor.role, actor.id, as_draft=event_data.save_as_draft))
    _apply_details(event, event_data.model_dump(exclude={"save_as_draft"}))
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info(
        "event_created",
        event_id=event.id,
        organizer_id=actor.id,
        status=event.status,
        promoter_submission=event.submitted_by_promoter_id is not None,
    )
    return event


async def get_event(db: AsyncSession, event_id: int, viewer: Optional[User] = None) -> Event:
    """
    A single event. Unpublished events are only visible to those who may
    edit or moderate them; everyone else gets 404.
    """
    event = await _get_event_or_404(db, event_id)
    if event.is_published:
        return event

    if viewer is not None and (
        permission(viewer.role, Capability.MANAGE_EVENTS)
        or can_edit_event(viewer.id, viewer.role, event)
    ):
        return event
    raise _not_found(event_id)


async def update_event_details(
    db: AsyncSession, actor: User, event_id: int, details: EventDetails
) -> Event:
    event = await _get_event_or_404(db, event_id)

    if not can_edit_event(actor.id, actor.role, event):
        raise deny_access(Capability.CREATE_EVENTS.value, actor, detail="You cannot edit this event")

    _apply_details(event, details.model_dump())
    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, updated_by=actor.id)
    return event


async def submit_event(db: AsyncSession, actor: User, event_id: int) -> Event:
    """Promoter hands a draft over for review."""
    event = await _get_event_or_404(db, event_id)

    if not can_edit_event(actor.id, actor.role, event):
        raise deny_access(Capability.CREATE_EVENTS.value, actor, detail="You cannot edit this event")

    target = EventStatus.PENDING_REVIEW
    if not can_set_event_status(actor.role, event.status, target):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only draft events can be submitted for review (current status: {event.status})",
        )

    previous = event.status
    event.status = target.value
    await db.flush()
    await db.refresh(event)

    record_event_transition(previous, event.status)
    logger.info("event_submitted", event_id=event.id, promoter_id=actor.id)
    return event


async def moderate_event(
    db: AsyncSession, actor: User, event_id: int, data: EventModeration
) -> Event:
    """
    Event-management write: details, status, publication and featured fields
    in one update. Admins and owners only; any status may follow any other.
    """
    if not permission(actor.role, Capability.MANAGE_EVENTS):
        raise deny_access(Capability.MANAGE_EVENTS.value, actor)

    event = await _get_event_or_404(db, event_id)
    changes = data.model_dump(exclude_unset=True)

    previous_status = event.status
    if data.status is not None:
        if not can_set_event_status(actor.role, event.status, data.status):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot move event from {event.status} to {data.status.value}",
            )
        event.status = data.status.value

    if data.is_published is not None:
        event.is_published = data.is_published

    if "is_featured" in changes or "featured_rank" in changes:
        if not permission(actor.role, Capability.FEATURE_EVENTS):
            raise deny_access(Capability.FEATURE_EVENTS.value, actor)
        apply_featured(event, data.is_featured, data.featured_rank)

    _apply_details(event, {
        k: v for k, v in changes.items()
        if k in DETAIL_FIELDS and (v is not None or k in NULLABLE_DETAIL_FIELDS)
    })

    await db.flush()
    await db.refresh(event)

    if event.status != previous_status:
        record_event_transition(previous_status, event.status)
    logger.info(
        "event_moderated",
        event_id=event.id,
        moderator_id=actor.id,
        from_status=previous_status,
        to_status=event.status,
        is_published=event.is_published,
        is_featured=event.is_featured,
    )
    return event


async def delete_event(db: AsyncSession, actor: User, event_id: int) -> None:
    if not permission(actor.role, Capability.DELETE_EVENTS):
        raise deny_access(Capability.DELETE_EVENTS.value, actor)

    event = await _get_event_or_404(db, event_id)
    await db.delete(event)
    await db.flush()
    logger.info("event_deleted", event_id=event_id, deleted_by=actor.id)


async def list_public_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    upcoming_only: bool = True,
) -> tuple[list[Event], int]:
    """Published events by date, paginated."""
    query = select(Event).where(Event.is_published.is_(True))

    if upcoming_only:
        query = query.where(Event.date >= date.today())

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.date.asc(), Event.start_time.asc(), Event.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total


async def list_featured_events(db: AsyncSession, limit: Optional[int] = None) -> list[Event]:
    """
    Landing view: published and featured, lowest rank first.
    The cap is a display limit; more events may be flagged featured.
    """
    limit = settings.FEATURED_EVENTS_LIMIT if limit is None else limit
    result = await db.execute(
        select(Event)
        .where(Event.is_published.is_(True), Event.is_featured.is_(True))
        .order_by(Event.featured_rank.asc().nulls_last(), Event.id.asc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_promoter_events(
    db: AsyncSession, actor: User, listing_filter: str = FILTER_ALL
) -> list[Event]:
    """The caller's own submissions, newest first."""
    if not permission(actor.role, Capability.VIEW_OWN_SUBMISSIONS):
        raise deny_access(Capability.VIEW_OWN_SUBMISSIONS.value, actor)

    query = select(Event).where(Event.submitted_by_promoter_id == actor.id)
    query = apply_listing_filter(query, listing_filter)
    result = await db.execute(query.order_by(Event.created_at.desc(), Event.id.desc()))
    return list(result.scalars().all())


async def list_managed_events(
    db: AsyncSession, actor: User, listing_filter: str = FILTER_ALL
) -> list[Event]:
    """Every event, for the moderation surface."""
    if not permission(actor.role, Capability.MANAGE_EVENTS):
        raise deny_access(Capability.MANAGE_EVENTS.value, actor)

    query = apply_listing_filter(select(Event), listing_filter)
    result = await db.execute(query.order_by(Event.created_at.desc(), Event.id.desc()))
    return list(result.scalars().all())
