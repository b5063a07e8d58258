"""IntakeResponse ORM — the five background answers a user gives once at onboarding.

Invariants:
    - Latest row per user_id is the one used as prompt context
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from mindful_reframe.db.base import Base


class IntakeResponseRecord(Base):
    __tablename__ = "intake_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    personal_concerns: Mapped[str] = mapped_column(Text, nullable=False)
    responsibility_challenges: Mapped[str] = mapped_column(Text, nullable=False)
    ideal_life: Mapped[str] = mapped_column(Text, nullable=False)
    sources_of_joy: Mapped[str] = mapped_column(Text, nullable=False)
    core_values: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
