"""ReframingSession ORM — persists one guided reframing dialogue about a single thought.

Invariants:
    - id is UUID primary key
    - selected_thought, distortion_type, method are written once at creation
    - history stores [{role, text, timestamp}] in strict user/assistant alternation
    - status transitions: active <-> awaiting_pacing_choice -> completed (terminal)

Design Decisions:
    - JSON column for history: read and written whole on every turn, never queried by field
    - turn_count denormalized (== len(history) // 2): cheap listing without parsing history
    - Completed rows are archived, never deleted by the application
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Text, Integer, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from mindful_reframe.db.base import Base


class ReframingSessionRecord(Base):
    """Reframing session row — the aggregate root for one thought's dialogue."""
    __tablename__ = "reframing_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    journal_entry_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("journal_entries.id"), nullable=True,
    )
    selected_thought: Mapped[str] = mapped_column(Text, nullable=False)
    distortion_type: Mapped[str] = mapped_column(String(100), nullable=False)
    method: Mapped[str] = mapped_column(String(40), nullable=False)
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default="active",
    )
    history: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    turn_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_turns: Mapped[int] = mapped_column(Integer, nullable=False, default=12)
    draft_reframed_thought: Mapped[str | None] = mapped_column(
        Text, nullable=True,
    )
    final_reframed_thought: Mapped[str | None] = mapped_column(
        Text, nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # Relationships
    summary: Mapped[Optional["ReframeSummaryRecord"]] = relationship(
        "ReframeSummaryRecord", back_populates="session",
        cascade="all, delete-orphan", uselist=False, lazy="selectin",
    )
