"""Reframing Session — dataclass invariants and JSON-safe history snapshots."""

from datetime import datetime, timezone

import pytest

from mindful_reframe.core.domain_types import ReframingMethod, SessionStatus, TurnRole
from mindful_reframe.core.reframing_session import (
    ReframingSession, history_from_snapshot,
)

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def _session():
    return ReframingSession(
        user_id=7, selected_thought="I am a burden",
        distortion_type="Personalization",
        method=ReframingMethod.SELF_COMPASSION,
    )


def test_append_exchange_keeps_alternation():
    session = _session()
    session.append_exchange("hi", "hello", NOW)
    session.append_exchange("again", "yes?", NOW)
    assert [t.role for t in session.history] == [
        TurnRole.USER, TurnRole.ASSISTANT, TurnRole.USER, TurnRole.ASSISTANT,
    ]
    assert session.turn_count == 2
    assert len(session.assistant_turns) == 2


def test_turn_limit_is_half_of_max_turns():
    session = _session()
    assert session.max_user_turns == 6
    session.turn_count = 6
    assert session.reached_turn_limit


def test_mark_completed_requires_text():
    session = _session()
    with pytest.raises(ValueError):
        session.mark_completed("  ", NOW)
    assert session.status == SessionStatus.ACTIVE


def test_mark_completed_sets_terminal_state():
    session = _session()
    session.mark_completed("  I matter to people.  ", NOW)
    assert session.is_completed
    assert session.final_reframed_thought == "I matter to people."
    assert session.completed_at == NOW


def test_snapshot_survives_json_column():
    session = _session()
    session.append_exchange("hi", "hello", NOW)
    restored = history_from_snapshot(session.history_snapshot())
    assert restored == session.history
    assert history_from_snapshot(None) == []
