"""Chat Turns — load, run and persist one reframing turn under the session lock.

Invariants:
    - Lock covers load → controller → save → commit: no two turns interleave on a session
    - Each turn opens its own DB session from db_manager, so a turn whose HTTP request
      was abandoned (client disconnect under asyncio.shield) still commits
    - Screened replies (crisis / injection) are never written: the session is unchanged
    - Session row and completion summary are committed together
    - A turn detached from its request by a disconnect still has its failure
      collected and logged

Design Decisions:
    - db_manager read from the module at call time (same as background tasks reading
      it directly): tests swap in an in-memory SQLite manager
    - has_alternative_thoughts computed here, not in core: it needs the journal entry
      and the user's completed sessions, both IO
    - Turn runners write through the SessionStore protocol; SqlSessionStore is the
      default factory
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from mindful_reframe.core.dialogue_state import PacingOutcome, ReframeReply
from mindful_reframe.core.domain_types import PacingChoice, ReplyKind
from mindful_reframe.core.errors import ReframeError
from mindful_reframe.core.reframing_session import ReframingSession
from mindful_reframe.core.repository_protocols import SessionStore
from mindful_reframe.core.thought_selection import has_alternative_thoughts
from mindful_reframe.core.user_context import IntakeProfile, profile_from_record
from mindful_reframe.infrastructure import database
from mindful_reframe.infrastructure.journal_store import JournalStore
from mindful_reframe.infrastructure.session_store import SqlSessionStore
from mindful_reframe.services.reframe_controller import ReframeController
from mindful_reframe.services.session_locks import SessionLockRegistry, session_locks

logger = logging.getLogger(__name__)

_SCREENED = (ReplyKind.CRISIS, ReplyKind.INJECTION)

StoreFactory = Callable[[AsyncSession], SessionStore]


async def alternatives_remaining(
    db: AsyncSession, session: ReframingSession,
) -> bool:
    """True when the originating journal entry still has unreframed thoughts."""
    if session.journal_entry_id is None:
        return True
    entry = await JournalStore(db).get_entry(session.journal_entry_id, session.user_id)
    completed = await SqlSessionStore(db).completed_thoughts(
        session.journal_entry_id, session.user_id,
    )
    return has_alternative_thoughts(
        entry.detected_thoughts, completed, session.selected_thought,
    )


async def load_user_context(db: AsyncSession, user_id: int) -> IntakeProfile | None:
    return profile_from_record(await JournalStore(db).latest_intake(user_id))


async def start_reframing(
    controller: ReframeController,
    db: AsyncSession,
    *,
    user_id: int,
    selected_thought: str,
    distortion_type: str,
    method: str,
    journal_entry_id: UUID | None = None,
    store_factory: StoreFactory = SqlSessionStore,
) -> ReframingSession:
    """Validate, create and commit a new session. No model call."""
    session = controller.start_session(
        selected_thought, distortion_type, method,
        user_id=user_id, journal_entry_id=journal_entry_id,
    )
    if journal_entry_id is not None:
        await JournalStore(db).get_entry(journal_entry_id, user_id)
    store = store_factory(db)
    await store.create_session(session)
    await store.commit()
    return session


async def run_message_turn(
    controller: ReframeController,
    session_id: UUID,
    user_id: int,
    message: str,
    locks: SessionLockRegistry = session_locks,
    store_factory: StoreFactory = SqlSessionStore,
) -> ReframeReply:
    async with locks.hold(session_id):
        async with database.get_db_manager().session() as db:
            store = store_factory(db)
            session = await store.load_session(session_id, user_id)
            reply = await controller.receive_message(
                session, message,
                has_alternative_thoughts=await alternatives_remaining(db, session),
                user_context=await load_user_context(db, user_id),
            )
            if reply.kind in _SCREENED:
                return reply
            await store.save_session(session)
            if reply.summary is not None:
                await store.append_summary(session, reply.summary)
            await store.commit()
            return reply


async def run_pacing_turn(
    controller: ReframeController,
    session_id: UUID,
    user_id: int,
    choice: str | PacingChoice,
    locks: SessionLockRegistry = session_locks,
    store_factory: StoreFactory = SqlSessionStore,
) -> PacingOutcome:
    async with locks.hold(session_id):
        async with database.get_db_manager().session() as db:
            store = store_factory(db)
            session = await store.load_session(session_id, user_id)
            outcome = controller.choose_pacing(
                session, choice,
                has_alternative_thoughts=await alternatives_remaining(db, session),
            )
            await store.save_session(session)
            if outcome.summary is not None:
                await store.append_summary(session, outcome.summary)
            await store.commit()
            return outcome


def _log_abandoned_turn(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        return
    if isinstance(exc, ReframeError):
        logger.warning(
            f"Abandoned turn failed: {exc.message}",
            extra={"error_code": exc.code, "session_id": exc.context.session_id},
        )
    else:
        logger.error(
            "Abandoned turn failed", exc_info=(type(exc), exc, exc.__traceback__),
        )


async def run_detached(turn: Awaitable):
    """Await a turn under asyncio.shield. If the caller is cancelled the turn keeps
    running, and any failure it ends with is retrieved and logged."""
    task = asyncio.ensure_future(turn)
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        task.add_done_callback(_log_abandoned_turn)
        raise
