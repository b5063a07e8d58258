"""Journal — analyse an entry for distorted thoughts and read stored entries.

Invariants:
    - Entry validated (length, no markup) before any model call
    - Saved-entry cap enforced per user before any model call (429 SessionLimitError)
    - Crisis entries are answered in-band and never stored

Design Decisions:
    - Anonymous analysis (no user_id) is stored without an owner and is not capped
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mindful_reframe.core.errors import (
    ErrorContext, ReframeValidationError, SessionLimitError,
)
from mindful_reframe.core.journal_analysis import validate_journal_entry
from mindful_reframe.core.user_context import profile_from_record
from mindful_reframe.infrastructure.database import get_db
from mindful_reframe.infrastructure.journal_store import JournalStore
from mindful_reframe.schemas.journal import (
    DetectedThoughtOut, JournalAnalysisOut, JournalAnalyzeIn, JournalEntryOut,
)
from mindful_reframe.services.journal_analyzer import JournalAnalyzer
from mindful_reframe.api.dependencies import get_journal_analyzer

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/journal", tags=["journal"])


@router.post(
    "/analyze", response_model=JournalAnalysisOut,
    status_code=status.HTTP_201_CREATED,
)
async def analyze_entry(
    body: JournalAnalyzeIn,
    db: AsyncSession = Depends(get_db),
    analyzer: JournalAnalyzer = Depends(get_journal_analyzer),
):
    violations = validate_journal_entry(body.entry, analyzer.rules)
    if violations:
        raise ReframeValidationError("; ".join(violations), "entry")

    store = JournalStore(db)
    intake = None
    if body.user_id is not None:
        count = await store.count_entries(body.user_id)
        limit = analyzer.rules.max_saved_entries_per_user
        if count >= limit:
            raise SessionLimitError(count, limit, ErrorContext(user_id=body.user_id))
        intake = profile_from_record(await store.latest_intake(body.user_id))

    analysis = await analyzer.analyze(body.entry, intake)
    thoughts = [DetectedThoughtOut(**t.to_dict()) for t in analysis.detected_thoughts]
    if analysis.crisis_detected:
        return JournalAnalysisOut(
            id=None, summary=analysis.summary, detected_thoughts=[],
            crisis_detected=True,
        )

    record = await store.add_entry(body.entry.strip(), analysis, body.user_id)
    await db.commit()
    logger.info(
        f"Journal entry analysed: {len(thoughts)} thoughts",
        extra={"user_id": body.user_id},
    )
    return JournalAnalysisOut(
        id=record.id, summary=analysis.summary, detected_thoughts=thoughts,
    )


@router.get("/user/{user_id}", response_model=list[JournalEntryOut])
async def list_entries(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """A user's analysed entries, newest first."""
    records = await JournalStore(db).list_entries(user_id, limit, offset)
    return [JournalEntryOut.model_validate(r) for r in records]


@router.get("/{entry_id}", response_model=JournalEntryOut)
async def get_entry(
    entry_id: UUID,
    user_id: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    record = await JournalStore(db).get_entry(entry_id, user_id)
    return JournalEntryOut.model_validate(record)
