"""
Support ticket models.

A ticket is a thread; each message in it is its own row, so replies from
both sides are inserts and never overwrite one another. `message_body`
renders the thread back into the single delimited text the inbox shows.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from nightline.core.lifecycle import render_transcript
from nightline.db.base import Base, TimestampMixin


class SupportTicket(Base, TimestampMixin):
    __tablename__ = "support_messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject = Column(String(200), nullable=False)
    category = Column(String(30), nullable=False, default="general")
    status = Column(String(20), nullable=False, default="open")
    handled_by_admin_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    entries = relationship(
        "SupportTicketEntry",
        back_populates="ticket",
        order_by="SupportTicketEntry.id",
        cascade="all, delete-orphan",
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint("status IN ('open', 'in_progress', 'resolved')", name="check_ticket_status"),
        CheckConstraint("category IN ('general', 'promoter_application')", name="check_ticket_category"),
        Index("ix_support_messages_sender", "sender_user_id"),
        Index("ix_support_messages_status", "status"),
    )

    @property
    def message_body(self) -> str:
        return render_transcript(self.entries)

    def __repr__(self) -> str:
        return f"<SupportTicket(id={self.id}, sender={self.sender_user_id}, status={self.status})>"


class SupportTicketEntry(Base, TimestampMixin):
    __tablename__ = "support_ticket_entries"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(
        Integer, ForeignKey("support_messages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    kind = Column(String(20), nullable=False)
    body = Column(Text, nullable=False)

    ticket = relationship("SupportTicket", back_populates="entries", lazy="raise")

    __table_args__ = (
        CheckConstraint("kind IN ('message', 'user_reply', 'admin_reply')", name="check_entry_kind"),
    )

    def __repr__(self) -> str:
        return f"<SupportTicketEntry(id={self.id}, ticket={self.ticket_id}, kind={self.kind})>"
