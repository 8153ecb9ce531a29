"""
Support ticket service: the user-facing support page and the staff inbox.

Replies are stored as new entry rows rather than by rewriting the ticket
text, so a reply written while someone else was reading the thread is never
lost. Status and handler changes are plain field writes on the ticket row.
"""

from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from nightline.core.lifecycle import (
    ADMIN_TICKET_TRANSITIONS,
    PROMOTER_APPLICATION_SUBJECT,
    EntryKind,
    TicketCategory,
    TicketStatus,
    apply_admin_reply,
    apply_sender_reply,
    apply_status_change,
    promoter_application_body,
)
from nightline.core.logging import get_logger
from nightline.core.metrics import record_ticket_transition
from nightline.core.permissions import Capability, permission
from nightline.core.security import deny_access
from nightline.models.support import SupportTicket, SupportTicketEntry
from nightline.models.user import User
from nightline.schemas.support import PromoterApplication, TicketCreate

logger = get_logger(__name__)

FILTER_ALL = "all"


def _ticket_query():
    return select(SupportTicket).options(selectinload(SupportTicket.entries))


async def _load_ticket(db: AsyncSession, ticket_id: int) -> SupportTicket:
    """Fetch a ticket with its thread, refreshing any copy already in the session."""
    result = await db.execute(
        _ticket_query()
        .where(SupportTicket.id == ticket_id)
        .execution_options(populate_existing=True)
    )
    ticket = result.scalar_one_or_none()
    if not ticket:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Ticket {ticket_id} not found",
        )
    return ticket


def _apply_status_filter(query, status_filter: str):
    if status_filter == FILTER_ALL:
        return query
    try:
        ticket_status = TicketStatus(status_filter)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown filter '{status_filter}'",
        )
    return query.where(SupportTicket.status == ticket_status.value)


async def _open_ticket(
    db: AsyncSession,
    sender: User,
    subject: str,
    body: str,
    category: TicketCategory,
) -> SupportTicket:
    ticket = SupportTicket(
        sender_user_id=sender.id,
        subject=subject,
        category=category.value,
        status=TicketStatus.OPEN.value,
        handled_by_admin_id=None,
    )
    db.add(ticket)
    await db.flush()

    db.add(SupportTicketEntry(
        ticket_id=ticket.id,
        author_user_id=sender.id,
        kind=EntryKind.MESSAGE.value,
        body=body,
    ))
    await db.flush()
    return await _load_ticket(db, ticket.id)


async def create_ticket(db: AsyncSession, sender: User, data: TicketCreate) -> SupportTicket:
    if not permission(sender.role, Capability.SUBMIT_SUPPORT_TICKET):
        raise deny_access(Capability.SUBMIT_SUPPORT_TICKET.value, sender)

    ticket = await _open_ticket(
        db, sender, data.subject.strip(), data.message.strip(), TicketCategory.GENERAL
    )
    logger.info("ticket_created", ticket_id=ticket.id, sender_id=sender.id)
    return ticket


async def submit_promoter_application(
    db: AsyncSession, sender: User, application: PromoterApplication
) -> SupportTicket:
    """
    File a promoter application as a support ticket. The applicant's account
    details are copied into the body as they are at submission time.
    """
    if not permission(sender.role, Capability.APPLY_FOR_PROMOTER):
        raise deny_access(Capability.APPLY_FOR_PROMOTER.value, sender)

    body = promoter_application_body(
        name=application.name,
        instagram=application.instagram,
        expected_attendees=application.expected_attendees,
        experience=application.experience,
        message=application.message,
        username=sender.username,
        email=sender.email,
        phone=sender.phone,
    )
    ticket = await _open_ticket(
        db, sender, PROMOTER_APPLICATION_SUBJECT, body, TicketCategory.PROMOTER_APPLICATION
    )
    logger.info("promoter_application_submitted", ticket_id=ticket.id, sender_id=sender.id)
    return ticket


async def get_ticket(db: AsyncSession, actor: User, ticket_id: int) -> SupportTicket:
    ticket = await _load_ticket(db, ticket_id)
    if ticket.sender_user_id != actor.id and not permission(actor.role, Capability.VIEW_SUPPORT_INBOX):
        raise deny_access(Capability.VIEW_SUPPORT_INBOX.value, actor)
    return ticket


async def list_own_tickets(
    db: AsyncSession, sender: User, status_filter: str = FILTER_ALL
) -> list[SupportTicket]:
    if not permission(sender.role, Capability.SUBMIT_SUPPORT_TICKET):
        raise deny_access(Capability.SUBMIT_SUPPORT_TICKET.value, sender)

    query = _ticket_query().where(SupportTicket.sender_user_id == sender.id)
    query = _apply_status_filter(query, status_filter)
    result = await db.execute(
        query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
    )
    return list(result.scalars().all())


async def list_inbox(
    db: AsyncSession, actor: User, status_filter: str = FILTER_ALL
) -> list[SupportTicket]:
    if not permission(actor.role, Capability.VIEW_SUPPORT_INBOX):
        raise deny_access(Capability.VIEW_SUPPORT_INBOX.value, actor)

    query = _apply_status_filter(_ticket_query(), status_filter)
    result = await db.execute(
        query.order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
    )
    return list(result.scalars().all())


async def add_reply(db: AsyncSession, actor: User, ticket_id: int, message: str) -> SupportTicket:
    """
    Append a reply to the thread.

    The original sender's reply reopens the ticket whatever its status.
    A staff reply moves it to in_progress and makes the replier its handler.
    """
    ticket = await _load_ticket(db, ticket_id)

    if ticket.sender_user_id == actor.id:
        kind = EntryKind.USER_REPLY
        apply_sender_reply(ticket)
    elif permission(actor.role, Capability.VIEW_SUPPORT_INBOX):
        kind = EntryKind.ADMIN_REPLY
        apply_admin_reply(ticket, actor.id)
    else:
        raise deny_access(Capability.VIEW_SUPPORT_INBOX.value, actor)

    db.add(SupportTicketEntry(
        ticket_id=ticket.id,
        author_user_id=actor.id,
        kind=kind.value,
        body=message.strip(),
    ))
    await db.flush()

    record_ticket_transition(ticket.status, kind.value)
    logger.info(
        "ticket_reply_added",
        ticket_id=ticket.id,
        author_id=actor.id,
        kind=kind.value,
        status=ticket.status,
    )
    return await _load_ticket(db, ticket.id)


async def change_status(
    db: AsyncSession, actor: User, ticket_id: int, new_status: TicketStatus
) -> SupportTicket:
    if not permission(actor.role, Capability.VIEW_SUPPORT_INBOX):
        raise deny_access(Capability.VIEW_SUPPORT_INBOX.value, actor)

    ticket = await _load_ticket(db, ticket_id)
    new_status = TicketStatus(new_status)

    if new_status not in ADMIN_TICKET_TRANSITIONS[TicketStatus(ticket.status)]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Ticket is already {new_status.value}",
        )

    previous = ticket.status
    apply_status_change(ticket, new_status, actor.id)
    await db.flush()

    record_ticket_transition(ticket.status, "admin_status")
    logger.info(
        "ticket_status_changed",
        ticket_id=ticket.id,
        admin_id=actor.id,
        from_status=previous,
        to_status=ticket.status,
    )
    return await _load_ticket(db, ticket.id)
