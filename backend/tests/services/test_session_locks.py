"""Session Locks — per-session serialization of turns, independent sessions in parallel.

Invariants:
    - Two concurrent turns on one session run one after the other: turn counts 1 and 2,
      history of length 4 in arrival order
    - Registry drops a lock once nobody holds or waits for it
"""

import asyncio
from uuid import uuid4

from sqlalchemy import select

from mindful_reframe.core.model_output import ModelCompletion
from mindful_reframe.models.reframing_session import ReframingSessionRecord
from mindful_reframe.services.chat_turns import run_message_turn, start_reframing
from mindful_reframe.services.session_locks import SessionLockRegistry

from tests.services.fake_model import DEFAULT_REPLY


async def test_same_session_is_serialized():
    registry = SessionLockRegistry()
    sid = uuid4()
    order = []

    async def work(tag):
        async with registry.hold(sid):
            order.append(f"{tag}-in")
            await asyncio.sleep(0.01)
            order.append(f"{tag}-out")

    await asyncio.gather(work("a"), work("b"))
    assert order == ["a-in", "a-out", "b-in", "b-out"]
    assert registry.active_count == 0


async def test_different_sessions_overlap():
    registry = SessionLockRegistry()
    inside = asyncio.Event()
    release = asyncio.Event()

    async def first():
        async with registry.hold(uuid4()):
            inside.set()
            await release.wait()

    async def second():
        await inside.wait()
        async with registry.hold(uuid4()):
            release.set()

    await asyncio.wait_for(asyncio.gather(first(), second()), timeout=1)
    assert registry.active_count == 0


async def test_lock_released_on_error():
    registry = SessionLockRegistry()
    sid = uuid4()
    try:
        async with registry.hold(sid):
            raise RuntimeError("turn failed")
    except RuntimeError:
        pass
    assert registry.active_count == 0


async def test_concurrent_turns_on_one_session(
    controller, fake_model, db_manager, test_db,
):
    # Slow first reply so the second request waits on the lock mid-turn
    fake_model.queue(0.05, ModelCompletion(message="Second answer."))
    async with db_manager.session() as db:
        session = await start_reframing(
            controller, db, user_id=5, selected_thought="I ruin everything",
            distortion_type="Magnification/Minimization", method="balancedThinking",
        )
    registry = SessionLockRegistry()

    first, second = await asyncio.gather(
        run_message_turn(controller, session.id, 5, "first message", registry),
        run_message_turn(controller, session.id, 5, "second message", registry),
    )

    assert (first.turn_count, second.turn_count) == (1, 2)
    record = (await test_db.execute(
        select(ReframingSessionRecord).where(ReframingSessionRecord.id == session.id),
    )).scalar_one()
    assert record.turn_count == 2
    assert [h["text"] for h in record.history] == [
        "first message", DEFAULT_REPLY.message,
        "second message", "Second answer.",
    ]
    assert registry.active_count == 0
