"""
Support endpoints: tickets for users and promoters, the inbox for staff.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nightline.db.session import get_db
from nightline.schemas.support import (
    PromoterApplication,
    TicketCreate,
    TicketReply,
    TicketResponse,
    TicketStatusUpdate,
)
from nightline.services import support_service
from nightline.core.permissions import Capability
from nightline.core.security import get_current_user
from nightline.api.deps import require_capability
from nightline.models.user import User

router = APIRouter(prefix="/support", tags=["Support"])


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket_endpoint(
    data: TicketCreate,
    user: User = Depends(require_capability(Capability.SUBMIT_SUPPORT_TICKET)),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.create_ticket(db, user, data)


@router.get("/tickets", response_model=list[TicketResponse])
async def list_my_tickets_endpoint(
    status_filter: str = Query("all", alias="filter", description="all or a ticket status"),
    user: User = Depends(require_capability(Capability.SUBMIT_SUPPORT_TICKET)),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.list_own_tickets(db, user, status_filter)


@router.get("/tickets/{ticket_id}", response_model=TicketResponse)
async def get_ticket_endpoint(
    ticket_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.get_ticket(db, user, ticket_id)


@router.post("/tickets/{ticket_id}/replies", response_model=TicketResponse)
async def reply_endpoint(
    ticket_id: int,
    data: TicketReply,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Reply as the sender (reopens the ticket) or as staff (marks it in progress)."""
    return await support_service.add_reply(db, user, ticket_id, data.message)


@router.post(
    "/promoter-applications",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
)
async def promoter_application_endpoint(
    application: PromoterApplication,
    user: User = Depends(require_capability(Capability.APPLY_FOR_PROMOTER)),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.submit_promoter_application(db, user, application)


@router.get("/inbox", response_model=list[TicketResponse])
async def inbox_endpoint(
    status_filter: str = Query("all", alias="filter", description="all or a ticket status"),
    user: User = Depends(require_capability(Capability.VIEW_SUPPORT_INBOX)),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.list_inbox(db, user, status_filter)


@router.patch("/inbox/{ticket_id}/status", response_model=TicketResponse)
async def change_status_endpoint(
    ticket_id: int,
    data: TicketStatusUpdate,
    user: User = Depends(require_capability(Capability.VIEW_SUPPORT_INBOX)),
    db: AsyncSession = Depends(get_db),
):
    return await support_service.change_status(db, user, ticket_id, data.status)
