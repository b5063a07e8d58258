"""Initial schema — journal entries, intake responses, reframing sessions, summaries.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "journal_entries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.Integer, nullable=True),
        sa.Column("entry", sa.Text, nullable=False),
        sa.Column("summary", sa.Text, nullable=False, server_default=""),
        sa.Column("detected_thoughts", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_journal_entries_user_id", "journal_entries", ["user_id"])

    op.create_table(
        "intake_responses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("personal_concerns", sa.Text, nullable=False),
        sa.Column("responsibility_challenges", sa.Text, nullable=False),
        sa.Column("ideal_life", sa.Text, nullable=False),
        sa.Column("sources_of_joy", sa.Text, nullable=False),
        sa.Column("core_values", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_intake_responses_user_id", "intake_responses", ["user_id"])

    op.create_table(
        "reframing_sessions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("journal_entry_id", UUID(as_uuid=True), sa.ForeignKey("journal_entries.id"), nullable=True),
        sa.Column("selected_thought", sa.Text, nullable=False),
        sa.Column("distortion_type", sa.String(100), nullable=False),
        sa.Column("method", sa.String(40), nullable=False),
        sa.Column("status", sa.String(30), nullable=False, server_default="active"),
        sa.Column("history", sa.JSON, nullable=False),
        sa.Column("turn_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_turns", sa.Integer, nullable=False, server_default="12"),
        sa.Column("draft_reframed_thought", sa.Text, nullable=True),
        sa.Column("final_reframed_thought", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_reframing_sessions_user_id", "reframing_sessions", ["user_id"])

    op.create_table(
        "reframe_summaries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("session_id", UUID(as_uuid=True), sa.ForeignKey("reframing_sessions.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("original_thought", sa.Text, nullable=False),
        sa.Column("distortion_type", sa.String(100), nullable=False),
        sa.Column("final_reframed_thought", sa.Text, nullable=False),
        sa.Column("affirmation", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_reframe_summaries_user_id", "reframe_summaries", ["user_id"])


def downgrade() -> None:
    op.drop_table("reframe_summaries")
    op.drop_table("reframing_sessions")
    op.drop_table("intake_responses")
    op.drop_table("journal_entries")
