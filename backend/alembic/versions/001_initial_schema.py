"""Initial schema: users, events, support tickets and their entries.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("session_version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('user', 'promoter', 'admin', 'owner')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    # NULL emails are allowed more than once; unique only among set values
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Events table
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=True),
        sa.Column("venue_name", sa.String(255), nullable=False),
        sa.Column("venue_address", sa.String(500), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column(
            "organizer_user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "submitted_by_promoter_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "ticket_button_label", sa.String(100), nullable=False,
            server_default=sa.text("'Purchase tickets'"),
        ),
        sa.Column("ticket_url", sa.String(2048), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("featured_rank", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('draft', 'pending_review', 'approved', 'rejected', 'published')",
            name="check_event_status",
        ),
        sa.CheckConstraint("featured_rank IS NULL OR featured_rank > 0", name="check_featured_rank_positive"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_date", "events", ["date"])
    op.create_index("ix_events_organizer_user_id", "events", ["organizer_user_id"])
    op.create_index("ix_events_submitted_by_promoter_id", "events", ["submitted_by_promoter_id"])
    # Landing query: WHERE is_published AND is_featured ORDER BY featured_rank LIMIT n
    op.create_index("ix_events_featured", "events", ["is_published", "is_featured", "featured_rank"])

    # Support tickets
    op.create_table(
        "support_messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "sender_user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("subject", sa.String(200), nullable=False),
        sa.Column("category", sa.String(30), nullable=False, server_default=sa.text("'general'")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'open'")),
        sa.Column(
            "handled_by_admin_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint("status IN ('open', 'in_progress', 'resolved')", name="check_ticket_status"),
        sa.CheckConstraint("category IN ('general', 'promoter_application')", name="check_ticket_category"),
    )
    op.create_index("ix_support_messages_id", "support_messages", ["id"])
    op.create_index("ix_support_messages_sender", "support_messages", ["sender_user_id"])
    op.create_index("ix_support_messages_status", "support_messages", ["status"])

    # One row per message in a ticket thread
    op.create_table(
        "support_ticket_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "ticket_id", sa.Integer(),
            sa.ForeignKey("support_messages.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "author_user_id", sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("kind IN ('message', 'user_reply', 'admin_reply')", name="check_entry_kind"),
    )
    op.create_index("ix_support_ticket_entries_id", "support_ticket_entries", ["id"])
    op.create_index("ix_support_ticket_entries_ticket_id", "support_ticket_entries", ["ticket_id"])


def downgrade() -> None:
    op.drop_table("support_ticket_entries")
    op.drop_table("support_messages")
    op.drop_table("events")
    op.drop_table("users")
