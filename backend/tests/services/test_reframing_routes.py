"""Reframing Routes — HTTP flow for sessions, messages, pacing and summaries.

Invariants:
    - Unknown method → 400 INVALID_METHOD, nothing stored
    - Another user's session → 403, unknown session → 404
    - Completed session → 409 SESSION_CLOSED
    - Completion writes exactly one summary row
"""

from uuid import uuid4

from sqlalchemy import func, select

from mindful_reframe.models.journal_entry import JournalEntryRecord
from mindful_reframe.models.reframe_summary import ReframeSummaryRecord
from mindful_reframe.models.reframing_session import ReframingSessionRecord

from tests.services.fake_model import completing

THOUGHT = "I never finish anything I start"


async def _start(client, **overrides):
    body = {
        "user_id": 1,
        "selected_thought": THOUGHT,
        "distortion_type": "Overgeneralization",
        "method": "evidenceCheck",
        **overrides,
    }
    return await client.post("/api/v1/reframing", json=body)


async def _say(client, session_id, message, user_id=1):
    return await client.post(
        f"/api/v1/reframing/{session_id}/messages",
        json={"user_id": user_id, "message": message},
    )


async def _pace(client, session_id, choice, user_id=1):
    return await client.post(
        f"/api/v1/reframing/{session_id}/pacing",
        json={"user_id": user_id, "choice": choice},
    )


# ==============================================================================
# Session creation
# ==============================================================================


async def test_create_session_returns_starter_prompt(client, fake_model):
    res = await _start(client)
    assert res.status_code == 201
    data = res.json()
    assert data["status"] == "active"
    assert data["turn_count"] == 0
    assert data["history"] == []
    assert data["starter_prompt"].startswith('Evidence Check: "')
    assert fake_model.bundles == []


async def test_unknown_method_rejected(client, test_db):
    res = await _start(client, method="telepathy")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_METHOD"
    count = await test_db.scalar(
        select(func.count()).select_from(ReframingSessionRecord),
    )
    assert count == 0


async def test_blank_thought_rejected(client):
    res = await _start(client, selected_thought="   ")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_unknown_journal_entry_rejected(client):
    res = await _start(client, journal_entry_id=str(uuid4()))
    assert res.status_code == 404


# ==============================================================================
# Messages
# ==============================================================================


async def test_message_round_trip(client, fake_model):
    session_id = (await _start(client)).json()["id"]

    res = await _say(client, session_id, "I dropped my course last week")
    assert res.status_code == 200
    data = res.json()
    assert data["kind"] == "reframe"
    assert data["turn_count"] == 1
    assert data["max_turns"] == 12
    assert data["show_pacing_menu"] is False

    detail = (await client.get(
        f"/api/v1/reframing/{session_id}", params={"user_id": 1},
    )).json()
    assert [h["role"] for h in detail["history"]] == ["user", "assistant"]
    assert detail["history"][0]["text"] == "I dropped my course last week"


async def test_other_users_session_forbidden(client):
    session_id = (await _start(client)).json()["id"]
    res = await _say(client, session_id, "hello", user_id=2)
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "ACCESS_DENIED"

    res = await client.get(f"/api/v1/reframing/{session_id}", params={"user_id": 2})
    assert res.status_code == 403


async def test_unknown_session_not_found(client):
    res = await _say(client, uuid4(), "hello")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_crisis_message_not_persisted(client):
    session_id = (await _start(client)).json()["id"]
    res = await _say(client, session_id, "honestly I want to die")
    data = res.json()
    assert data["kind"] == "crisis"
    assert "findahelpline.com" in data["message"]
    assert data["turn_count"] == 0

    detail = (await client.get(
        f"/api/v1/reframing/{session_id}", params={"user_id": 1},
    )).json()
    assert detail["history"] == []


async def test_pacing_flow_and_pending_guard(client):
    session_id = (await _start(client)).json()["id"]
    for i in range(2):
        await _say(client, session_id, f"message {i}")
    third = (await _say(client, session_id, "message 2")).json()

    assert third["show_pacing_menu"] is True
    assert third["status"] == "awaiting_pacing_choice"
    assert [o["choice"] for o in third["pacing_menu"]["options"]] == [
        "keep_reframing", "different_thought", "visualization",
    ]

    blocked = await _say(client, session_id, "one more")
    assert blocked.status_code == 409
    assert blocked.json()["error"]["code"] == "PACING_CHOICE_PENDING"

    kept = await _pace(client, session_id, "keep_reframing")
    assert kept.status_code == 200
    assert kept.json()["status"] == "active"

    fourth = (await _say(client, session_id, "message 3")).json()
    assert fourth["turn_count"] == 4


async def test_pacing_choice_without_menu_conflicts(client):
    session_id = (await _start(client)).json()["id"]
    res = await _pace(client, session_id, "visualization")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "PACING_CHOICE_NOT_EXPECTED"


async def test_turn_limit_completes_and_closes(client, test_db):
    session_id = (await _start(client)).json()["id"]
    last = None
    for i in range(6):
        if last and last["status"] == "awaiting_pacing_choice":
            await _pace(client, session_id, "keep_reframing")
        last = (await _say(client, session_id, f"message {i}")).json()

    assert last["reached_turn_limit"] is True
    assert last["is_complete"] is True
    assert last["final_reframed_thought"]
    assert last["summary"]["original_thought"] == THOUGHT

    closed = await _say(client, session_id, "still there?")
    assert closed.status_code == 409
    assert closed.json()["error"]["code"] == "SESSION_CLOSED"

    count = await test_db.scalar(
        select(func.count()).select_from(ReframeSummaryRecord),
    )
    assert count == 1


async def test_model_completion_listed_in_summaries(client, fake_model):
    session_id = (await _start(client)).json()["id"]
    fake_model.queue(completing("I finish the things that matter most to me."))

    reply = (await _say(client, session_id, "I did finish my thesis")).json()
    assert reply["is_complete"] is True

    res = await client.get("/api/v1/reframing/summaries/1")
    assert res.status_code == 200
    summaries = res.json()
    assert len(summaries) == 1
    assert summaries[0]["session_id"] == session_id
    assert summaries[0]["final_reframed_thought"] == (
        "I finish the things that matter most to me."
    )
    assert (await client.get("/api/v1/reframing/summaries/2")).json() == []


# ==============================================================================
# Alternatives from the journal entry
# ==============================================================================


async def _seed_entry(test_db, thoughts):
    entry = JournalEntryRecord(
        user_id=1, entry="A long day of feeling behind at everything.",
        summary="A hard day.",
        detected_thoughts=[
            {"thought": t, "distortion": "Labeling", "explanation": "..."}
            for t in thoughts
        ],
    )
    test_db.add(entry)
    await test_db.commit()
    return entry


async def test_menu_omits_different_thought_when_none_left(client, test_db):
    entry = await _seed_entry(test_db, [THOUGHT])
    session_id = (await _start(client, journal_entry_id=str(entry.id))).json()["id"]
    for i in range(3):
        reply = (await _say(client, session_id, f"message {i}")).json()

    assert "different_thought" not in [
        o["choice"] for o in reply["pacing_menu"]["options"]
    ]
    res = await _pace(client, session_id, "different_thought")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_PACING_CHOICE"


async def test_different_thought_completes_when_one_remains(client, test_db):
    entry = await _seed_entry(test_db, [THOUGHT, "Everyone is ahead of me"])
    session_id = (await _start(client, journal_entry_id=str(entry.id))).json()["id"]
    for i in range(3):
        await _say(client, session_id, f"message {i}")

    res = await _pace(client, session_id, "different_thought")
    assert res.status_code == 200
    data = res.json()
    assert data["status"] == "completed"
    assert data["summary"]["original_thought"] == THOUGHT
