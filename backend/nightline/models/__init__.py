from nightline.models.user import User
from nightline.models.event import Event
from nightline.models.support import SupportTicket, SupportTicketEntry

__all__ = ["User", "Event", "SupportTicket", "SupportTicketEntry"]
