"""SQL Session Store — SessionStore implementation over the reframing_sessions table.

Invariants:
    - load_session enforces ownership: another user's session raises AccessDeniedError
    - save_session writes only the mutable fields; identity, thought and method are
      written once by create_session
    - No method commits: the caller commits once per turn so session row and summary
      land atomically

Design Decisions:
    - Store maps ORM rows to the core ReframingSession dataclass: core never sees ORM objects
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mindful_reframe import models  # noqa: F401  (registers all mappers)
from mindful_reframe.core.dialogue_state import CompletionSummary
from mindful_reframe.core.domain_types import ReframingMethod, SessionStatus
from mindful_reframe.core.errors import (
    AccessDeniedError, ErrorContext, ResourceNotFoundError,
)
from mindful_reframe.core.reframing_session import (
    ReframingSession, history_from_snapshot,
)
from mindful_reframe.models.reframe_summary import ReframeSummaryRecord
from mindful_reframe.models.reframing_session import ReframingSessionRecord

logger = logging.getLogger(__name__)


def record_to_session(record: ReframingSessionRecord) -> ReframingSession:
    return ReframingSession(
        id=record.id,
        user_id=record.user_id,
        journal_entry_id=record.journal_entry_id,
        selected_thought=record.selected_thought,
        distortion_type=record.distortion_type,
        method=ReframingMethod(record.method),
        history=history_from_snapshot(record.history),
        turn_count=record.turn_count,
        max_turns=record.max_turns,
        status=SessionStatus(record.status),
        draft_reframed_thought=record.draft_reframed_thought,
        final_reframed_thought=record.final_reframed_thought,
        created_at=record.created_at,
        completed_at=record.completed_at,
    )


class SqlSessionStore:
    """Persists ReframingSession aggregates with an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_record(self, session_id: UUID) -> ReframingSessionRecord | None:
        result = await self.db.execute(
            select(ReframingSessionRecord).where(
                ReframingSessionRecord.id == session_id,
            ),
        )
        return result.scalar_one_or_none()

    async def _get_owned_record(
        self, session_id: UUID, user_id: int,
    ) -> ReframingSessionRecord:
        record = await self._get_record(session_id)
        ctx = ErrorContext(session_id=str(session_id), user_id=user_id)
        if record is None:
            raise ResourceNotFoundError("ReframingSession", str(session_id), ctx)
        if record.user_id != user_id:
            logger.warning(
                "Ownership check failed",
                extra={"session_id": str(session_id), "user_id": user_id},
            )
            raise AccessDeniedError("reframing session", ctx)
        return record

    async def load_session(
        self, session_id: UUID, user_id: int,
    ) -> ReframingSession:
        return record_to_session(await self._get_owned_record(session_id, user_id))

    async def create_session(self, session: ReframingSession) -> None:
        self.db.add(ReframingSessionRecord(
            id=session.id,
            user_id=session.user_id,
            journal_entry_id=session.journal_entry_id,
            selected_thought=session.selected_thought,
            distortion_type=session.distortion_type,
            method=session.method.value,
            status=session.status.value,
            history=session.history_snapshot(),
            turn_count=session.turn_count,
            max_turns=session.max_turns,
            created_at=session.created_at,
        ))
        await self.db.flush()

    async def save_session(self, session: ReframingSession) -> None:
        record = await self._get_owned_record(session.id, session.user_id)
        record.history = session.history_snapshot()
        record.turn_count = session.turn_count
        record.status = session.status.value
        record.draft_reframed_thought = session.draft_reframed_thought
        record.final_reframed_thought = session.final_reframed_thought
        record.completed_at = session.completed_at
        await self.db.flush()

    async def append_summary(
        self, session: ReframingSession, summary: CompletionSummary,
    ) -> None:
        existing = await self.db.execute(
            select(ReframeSummaryRecord.id).where(
                ReframeSummaryRecord.session_id == session.id,
            ),
        )
        if existing.scalar_one_or_none() is not None:
            return
        self.db.add(ReframeSummaryRecord(
            session_id=session.id,
            user_id=session.user_id,
            original_thought=summary.original_thought,
            distortion_type=summary.distortion_type,
            final_reframed_thought=summary.final_reframed_thought,
            affirmation=summary.affirmation,
        ))
        await self.db.flush()

    async def commit(self) -> None:
        await self.db.commit()

    async def list_summaries(
        self, user_id: int, limit: int = 20, offset: int = 0,
    ) -> list[ReframeSummaryRecord]:
        result = await self.db.execute(
            select(ReframeSummaryRecord)
            .where(ReframeSummaryRecord.user_id == user_id)
            .order_by(ReframeSummaryRecord.created_at.desc())
            .limit(limit).offset(offset),
        )
        return list(result.scalars().all())

    async def completed_thoughts(
        self, journal_entry_id: UUID, user_id: int,
    ) -> list[str]:
        """Thoughts from this journal entry whose sessions already completed."""
        result = await self.db.execute(
            select(ReframingSessionRecord.selected_thought).where(
                ReframingSessionRecord.journal_entry_id == journal_entry_id,
                ReframingSessionRecord.user_id == user_id,
                ReframingSessionRecord.status == SessionStatus.COMPLETED.value,
            ),
        )
        return list(result.scalars().all())
