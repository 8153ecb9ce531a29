from nightline.schemas.user import (
    UserCreate, UserResponse, UserLogin, Token, ProfileUpdate, UserAdminUpdate,
)
from nightline.schemas.event import (
    EventCreate, EventUpdate, EventModeration, EventResponse, EventListResponse,
)
from nightline.schemas.support import (
    TicketCreate, TicketReply, TicketStatusUpdate, PromoterApplication, TicketResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token", "ProfileUpdate", "UserAdminUpdate",
    "EventCreate", "EventUpdate", "EventModeration", "EventResponse", "EventListResponse",
    "TicketCreate", "TicketReply", "TicketStatusUpdate", "PromoterApplication", "TicketResponse",
]
