"""Chat Turns — turn runners against any SessionStore implementation.

Invariants:
    - Screened replies skip save and commit entirely
    - A completing turn saves the session, appends its summary, then commits once
    - A turn abandoned by its caller keeps running and its failure is logged
"""

import asyncio
import logging
from uuid import UUID

import pytest

from mindful_reframe.core.dialogue_state import CompletionSummary
from mindful_reframe.core.domain_types import ReplyKind, SessionStatus
from mindful_reframe.core.errors import ErrorContext, ResourceNotFoundError
from mindful_reframe.core.reframing_session import ReframingSession
from mindful_reframe.services.chat_turns import (
    run_detached, run_message_turn, run_pacing_turn, start_reframing,
)
from mindful_reframe.services.session_locks import SessionLockRegistry

from tests.services.fake_model import completing


class InMemorySessionStore:
    """Dict-backed SessionStore; shared state survives across turns."""

    def __init__(self, sessions, log):
        self.sessions = sessions
        self.log = log

    async def load_session(self, session_id: UUID, user_id: int) -> ReframingSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise ResourceNotFoundError(
                "ReframingSession", str(session_id), ErrorContext(user_id=user_id),
            )
        return session

    async def create_session(self, session: ReframingSession) -> None:
        self.sessions[session.id] = session
        self.log.append("create")

    async def save_session(self, session: ReframingSession) -> None:
        self.log.append(("save", session.turn_count))

    async def append_summary(
        self, session: ReframingSession, summary: CompletionSummary,
    ) -> None:
        self.log.append(("summary", summary.final_reframed_thought))

    async def commit(self) -> None:
        self.log.append("commit")


def _factory(sessions, log):
    return lambda db: InMemorySessionStore(sessions, log)


async def _start(controller, db_manager, factory):
    async with db_manager.session() as db:
        return await start_reframing(
            controller, db, user_id=3, selected_thought="Nobody likes me",
            distortion_type="Mind Reading", method="compassionateSelf",
            store_factory=factory,
        )


async def test_screened_turn_writes_nothing(controller, fake_model, db_manager):
    sessions, log = {}, []
    factory = _factory(sessions, log)
    session = await _start(controller, db_manager, factory)
    log.clear()

    reply = await run_message_turn(
        controller, session.id, 3, "I want to <b></b>die",
        SessionLockRegistry(), store_factory=factory,
    )

    assert reply.kind == ReplyKind.CRISIS
    assert log == []
    assert fake_model.bundles == []


async def test_completing_turn_saves_summary_then_commits(
    controller, fake_model, db_manager,
):
    sessions, log = {}, []
    factory = _factory(sessions, log)
    session = await _start(controller, db_manager, factory)
    assert log == ["create", "commit"]
    log.clear()
    fake_model.queue(completing("Some people enjoy my company."))

    reply = await run_message_turn(
        controller, session.id, 3, "My friend invited me out",
        SessionLockRegistry(), store_factory=factory,
    )

    assert reply.is_complete
    assert sessions[session.id].status == SessionStatus.COMPLETED
    assert log == [
        ("save", 1), ("summary", "Some people enjoy my company."), "commit",
    ]


async def test_pacing_turn_uses_injected_store(controller, db_manager):
    sessions, log = {}, []
    factory = _factory(sessions, log)
    session = await _start(controller, db_manager, factory)
    registry = SessionLockRegistry()
    for i in range(3):
        await run_message_turn(
            controller, session.id, 3, f"message {i}", registry,
            store_factory=factory,
        )
    log.clear()

    outcome = await run_pacing_turn(
        controller, session.id, 3, "keep_reframing", registry,
        store_factory=factory,
    )

    assert outcome.status == SessionStatus.ACTIVE
    assert log == [("save", 3), "commit"]


async def test_detached_turn_returns_result():
    async def turn():
        return "done"

    assert await run_detached(turn()) == "done"


async def test_abandoned_turn_failure_is_logged(caplog):
    caplog.set_level(logging.WARNING, logger="mindful_reframe.services.chat_turns")
    release = asyncio.Event()
    finished = asyncio.Event()

    async def turn():
        try:
            await release.wait()
            raise ResourceNotFoundError(
                "ReframingSession", "gone", ErrorContext(session_id="gone"),
            )
        finally:
            finished.set()

    caller = asyncio.ensure_future(run_detached(turn()))
    await asyncio.sleep(0.01)
    caller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await caller

    release.set()
    await asyncio.wait_for(finished.wait(), timeout=1)
    await asyncio.sleep(0.01)

    logged = [r for r in caplog.records if r.getMessage().startswith("Abandoned turn")]
    assert len(logged) == 1
    assert logged[0].error_code == "RESOURCE_NOT_FOUND"
