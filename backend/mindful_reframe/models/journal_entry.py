"""JournalEntry ORM — an analysed journal entry and the negative thoughts found in it.

Invariants:
    - detected_thoughts stores [{thought, distortion, explanation}] exactly as analysed
    - user_id nullable: anonymous analysis is allowed, reframing is not

Design Decisions:
    - JSON column for detected thoughts: always read as a whole list
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from mindful_reframe.db.base import Base


class JournalEntryRecord(Base):
    """Journal entry row with its model analysis."""
    __tablename__ = "journal_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True,
    )
    entry: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    detected_thoughts: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
