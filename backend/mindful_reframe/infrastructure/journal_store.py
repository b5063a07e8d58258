"""Journal Store — persistence for analysed journal entries and intake profiles.

Invariants:
    - get_entry enforces ownership for entries that have an owner
    - latest_intake returns the newest profile or None (intake is optional context)
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mindful_reframe.core.errors import (
    AccessDeniedError, ErrorContext, ResourceNotFoundError,
)
from mindful_reframe.core.journal_analysis import JournalAnalysis
from mindful_reframe.models.intake_response import IntakeResponseRecord
from mindful_reframe.models.journal_entry import JournalEntryRecord


class JournalStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_entries(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(JournalEntryRecord).where(
                JournalEntryRecord.user_id == user_id,
            ),
        )
        return result.scalar_one()

    async def add_entry(
        self, entry: str, analysis: JournalAnalysis, user_id: int | None,
    ) -> JournalEntryRecord:
        record = JournalEntryRecord(
            user_id=user_id,
            entry=entry,
            summary=analysis.summary,
            detected_thoughts=[t.to_dict() for t in analysis.detected_thoughts],
        )
        self.db.add(record)
        await self.db.flush()
        return record

    async def get_entry(
        self, entry_id: UUID, user_id: int | None,
    ) -> JournalEntryRecord:
        result = await self.db.execute(
            select(JournalEntryRecord).where(JournalEntryRecord.id == entry_id),
        )
        record = result.scalar_one_or_none()
        ctx = ErrorContext(user_id=user_id)
        if record is None:
            raise ResourceNotFoundError("JournalEntry", str(entry_id), ctx)
        if record.user_id is not None and record.user_id != user_id:
            raise AccessDeniedError("journal entry", ctx)
        return record

    async def list_entries(
        self, user_id: int, limit: int = 20, offset: int = 0,
    ) -> list[JournalEntryRecord]:
        result = await self.db.execute(
            select(JournalEntryRecord)
            .where(JournalEntryRecord.user_id == user_id)
            .order_by(JournalEntryRecord.created_at.desc())
            .limit(limit).offset(offset),
        )
        return list(result.scalars().all())

    async def add_intake(self, user_id: int, answers: dict) -> IntakeResponseRecord:
        record = IntakeResponseRecord(user_id=user_id, **answers)
        self.db.add(record)
        await self.db.flush()
        return record

    async def latest_intake(self, user_id: int) -> IntakeResponseRecord | None:
        result = await self.db.execute(
            select(IntakeResponseRecord)
            .where(IntakeResponseRecord.user_id == user_id)
            .order_by(IntakeResponseRecord.created_at.desc())
            .limit(1),
        )
        return result.scalar_one_or_none()
