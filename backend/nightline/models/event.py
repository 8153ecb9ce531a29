"""
Event model for promotable listings.

Key design decisions:
- Public visibility is `is_published`, independent of `status`
- `featured_rank` only orders events that are also `is_featured`
- `submitted_by_promoter_id` is null for events created directly by staff
- Composite index on (is_published, is_featured, featured_rank) serves the landing query
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)

from nightline.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=True)
    venue_name = Column(String(255), nullable=False)
    venue_address = Column(String(500), nullable=False)
    city = Column(String(120), nullable=False)

    organizer_user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    submitted_by_promoter_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    ticket_button_label = Column(String(100), nullable=False, default="Purchase tickets")
    ticket_url = Column(String(2048), nullable=True)

    is_published = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="draft")
    is_featured = Column(Boolean, nullable=False, default=False)
    featured_rank = Column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'pending_review', 'approved', 'rejected', 'published')",
            name="check_event_status",
        ),
        CheckConstraint("featured_rank IS NULL OR featured_rank > 0", name="check_featured_rank_positive"),
        Index("ix_events_date", "date"),
        Index("ix_events_featured", "is_published", "is_featured", "featured_rank"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, status={self.status}, published={self.is_published})>"
