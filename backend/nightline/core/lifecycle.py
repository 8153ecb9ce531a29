"""
Status lifecycles for events and support tickets.

EVENTS
======

    draft -> pending_review -> approved | rejected
                                  \\-> published

Moderators (admin/owner) may write any status over any other; there is no
enforced forward progression. Public visibility is the `is_published` flag,
not the status: an event can be `approved` and still unpublished.
Promoters only move their own draft into review.

SUPPORT TICKETS
===============

    open -> in_progress -> resolved

- A reply from the original sender forces `open`, whatever the prior status.
  The handler is left as it was.
- A reply from staff sets `in_progress` and records the replying admin as handler.
- A direct status change by staff sets the handler to the acting admin when the
  new status is not `open`, and clears it when it is.
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from nightline.core.permissions import Role, Capability, permission


class EventStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    PUBLISHED = "published"


class TicketStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class TicketCategory(str, enum.Enum):
    GENERAL = "general"
    PROMOTER_APPLICATION = "promoter_application"


class EntryKind(str, enum.Enum):
    MESSAGE = "message"
    USER_REPLY = "user_reply"
    ADMIN_REPLY = "admin_reply"


# Moderators: every status may follow every status
MODERATOR_EVENT_TRANSITIONS = {
    current: frozenset(EventStatus) for current in EventStatus
}

PROMOTER_EVENT_TRANSITIONS = {
    EventStatus.DRAFT: frozenset({EventStatus.PENDING_REVIEW}),
}

ADMIN_TICKET_TRANSITIONS = {
    current: frozenset(s for s in TicketStatus if s != current) for current in TicketStatus
}

REPLY_DELIMITERS = {
    EntryKind.USER_REPLY: "--- User Reply ---",
    EntryKind.ADMIN_REPLY: "--- Admin Reply ---",
}

PROMOTER_APPLICATION_SUBJECT = "Promoter Application"


def can_set_event_status(role: Role, current: EventStatus, target: EventStatus) -> bool:
    current, target = EventStatus(current), EventStatus(target)
    if permission(role, Capability.MANAGE_EVENTS):
        return target in MODERATOR_EVENT_TRANSITIONS[current]
    if Role(role) == Role.PROMOTER:
        return target in PROMOTER_EVENT_TRANSITIONS.get(current, frozenset())
    return False


def initial_event_state(role: Role, actor_id: int, as_draft: bool = False) -> dict:
    """
    Column values a freshly created event starts with.

    Promoter submissions enter moderation unless saved as a draft.
    Events created by staff start as unsubmitted drafts.
    """
    if Role(role) == Role.PROMOTER:
        status = EventStatus.DRAFT if as_draft else EventStatus.PENDING_REVIEW
        submitted_by = actor_id
    else:
        status = EventStatus.DRAFT
        submitted_by = None

    return {
        "status": status.value,
        "is_published": False,
        "is_featured": False,
        "featured_rank": None,
        "organizer_user_id": actor_id,
        "submitted_by_promoter_id": submitted_by,
    }


def apply_featured(event, is_featured: Optional[bool], featured_rank: Optional[int]) -> None:
    """Write the featured flag and rank together; unfeaturing drops the rank."""
    if is_featured is not None:
        event.is_featured = is_featured
    if featured_rank is not None:
        event.featured_rank = featured_rank
    if not event.is_featured:
        event.featured_rank = None


def apply_sender_reply(ticket) -> None:
    ticket.status = TicketStatus.OPEN.value


def apply_admin_reply(ticket, admin_id: int) -> None:
    ticket.status = TicketStatus.IN_PROGRESS.value
    ticket.handled_by_admin_id = admin_id


def apply_status_change(ticket, new_status: TicketStatus, admin_id: int) -> None:
    new_status = TicketStatus(new_status)
    ticket.status = new_status.value
    ticket.handled_by_admin_id = None if new_status == TicketStatus.OPEN else admin_id


def render_transcript(entries) -> str:
    """Flatten ordered entries into the delimited single-text form."""
    parts = []
    for entry in entries:
        delimiter = REPLY_DELIMITERS.get(EntryKind(entry.kind))
        if delimiter is None:
            parts.append(entry.body)
        else:
            parts.append(f"{delimiter}\n{entry.body}")
    return "\n\n".join(parts)


def promoter_application_body(
    *,
    name: str,
    instagram: str,
    expected_attendees: str,
    experience: str,
    message: str,
    username: str,
    email: Optional[str],
    phone: Optional[str],
    submitted_at: Optional[datetime] = None,
) -> str:
    submitted_at = submitted_at or datetime.now(timezone.utc)
    lines = [
        "Promoter Application Details:",
        f"Name: {name.strip()}",
        f"Instagram: {instagram.strip()}",
        f"Expected Attendees per Event: {expected_attendees.strip()}",
        f"Experience: {experience.strip()}",
        f"Message: {message.strip()}",
        "",
        f"Applicant Username: {username}",
        f"Applicant Email: {email or 'Not provided'}",
        f"Applicant Phone: {phone or 'Not provided'}",
        f"Application Date: {submitted_at.date().isoformat()}",
    ]
    return "\n".join(lines)
