"""ReframeSummary ORM — completion card appended to a user's history when a session completes.

Invariants:
    - At most one summary per reframing session (unique session_id)
    - Copies original thought and distortion: the card stays readable on its own
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from mindful_reframe.db.base import Base


class ReframeSummaryRecord(Base):
    __tablename__ = "reframe_summaries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("reframing_sessions.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    original_thought: Mapped[str] = mapped_column(Text, nullable=False)
    distortion_type: Mapped[str] = mapped_column(String(100), nullable=False)
    final_reframed_thought: Mapped[str] = mapped_column(Text, nullable=False)
    affirmation: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    session: Mapped["ReframingSessionRecord"] = relationship(
        "ReframingSessionRecord", back_populates="summary",
    )
