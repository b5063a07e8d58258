"""Reframing — start sessions, exchange messages, resolve pacing menus, list summaries.

Invariants:
    - Turn endpoints run under the per-session lock (services/chat_turns)
    - Turns are shielded from client disconnects (run_detached): an abandoned request
      still persists, and a failure after the disconnect is logged
    - Ownership: another user's session → 403, unknown id → 404

Design Decisions:
    - /summaries/{user_id} registered before /{session_id}: the literal path segment
      must win over the UUID parameter
    - Session creation makes no model call; the templated starter prompt is returned
      so the client can show the first question immediately
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mindful_reframe.core.method_guidance import build_starter_prompt
from mindful_reframe.infrastructure.database import get_db
from mindful_reframe.infrastructure.session_store import SqlSessionStore
from mindful_reframe.schemas.reframing import (
    ChatMessageIn, PacingChoiceIn, PacingOutcomeOut, ReframeReplyOut,
    ReframingStart, SessionDetail, SummaryOut,
)
from mindful_reframe.services.chat_turns import (
    run_detached, run_message_turn, run_pacing_turn, start_reframing,
)
from mindful_reframe.services.reframe_controller import ReframeController
from mindful_reframe.api.dependencies import get_reframe_controller

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/reframing", tags=["reframing"])


@router.post("", response_model=SessionDetail, status_code=status.HTTP_201_CREATED)
async def create_session(
    body: ReframingStart,
    db: AsyncSession = Depends(get_db),
    controller: ReframeController = Depends(get_reframe_controller),
):
    session = await start_reframing(
        controller, db,
        user_id=body.user_id,
        selected_thought=body.selected_thought,
        distortion_type=body.distortion_type,
        method=body.method,
        journal_entry_id=body.journal_entry_id,
    )
    return SessionDetail.from_session(
        session, build_starter_prompt(session.method, session.selected_thought),
    )


@router.get("/summaries/{user_id}", response_model=list[SummaryOut])
async def list_summaries(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    records = await SqlSessionStore(db).list_summaries(user_id, limit, offset)
    return [SummaryOut.model_validate(r) for r in records]


@router.get("/{session_id}", response_model=SessionDetail)
async def get_session(
    session_id: UUID,
    user_id: int = Query(ge=1),
    db: AsyncSession = Depends(get_db),
):
    session = await SqlSessionStore(db).load_session(session_id, user_id)
    return SessionDetail.from_session(
        session, build_starter_prompt(session.method, session.selected_thought),
    )


@router.post("/{session_id}/messages", response_model=ReframeReplyOut)
async def send_message(
    session_id: UUID,
    body: ChatMessageIn,
    controller: ReframeController = Depends(get_reframe_controller),
):
    reply = await run_detached(
        run_message_turn(controller, session_id, body.user_id, body.message),
    )
    return ReframeReplyOut.from_reply(reply)


@router.post("/{session_id}/pacing", response_model=PacingOutcomeOut)
async def choose_pacing(
    session_id: UUID,
    body: PacingChoiceIn,
    controller: ReframeController = Depends(get_reframe_controller),
):
    outcome = await run_detached(
        run_pacing_turn(controller, session_id, body.user_id, body.choice),
    )
    return PacingOutcomeOut.from_outcome(outcome)
