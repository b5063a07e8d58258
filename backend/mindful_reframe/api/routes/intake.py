"""Intake — store and read the user's onboarding answers (optional prompt context)."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mindful_reframe.core.errors import ErrorContext, ResourceNotFoundError
from mindful_reframe.infrastructure.database import get_db
from mindful_reframe.infrastructure.journal_store import JournalStore
from mindful_reframe.schemas.journal import IntakeIn, IntakeOut

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/intake", tags=["intake"])


@router.post("", response_model=IntakeOut, status_code=status.HTTP_201_CREATED)
async def save_intake(body: IntakeIn, db: AsyncSession = Depends(get_db)):
    answers = body.model_dump(exclude={"user_id"})
    record = await JournalStore(db).add_intake(body.user_id, answers)
    await db.commit()
    logger.info("Intake saved", extra={"user_id": body.user_id})
    return IntakeOut.model_validate(record)


@router.get("/{user_id}", response_model=IntakeOut)
async def get_intake(user_id: int, db: AsyncSession = Depends(get_db)):
    record = await JournalStore(db).latest_intake(user_id)
    if record is None:
        raise ResourceNotFoundError(
            "IntakeProfile", str(user_id), ErrorContext(user_id=user_id),
        )
    return IntakeOut.model_validate(record)
