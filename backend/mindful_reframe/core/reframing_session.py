"""Reframing Session — per-thought dialogue state, pure dataclass, no IO.

Invariants:
    - history strictly alternates user/assistant, starting with a user turn
    - len(history) == 2 * turn_count
    - turn_count <= max_turns // 2
    - status == COMPLETED implies final_reframed_thought non-empty and completed_at set
    - method and selected_thought are never reassigned after construction

Design Decisions:
    - Dataclass with computed properties: testable without mocks
    - history_snapshot/history_from_snapshot produce JSON-safe history entries
      (ISO timestamps, enum values) so the store can keep history in a JSON column
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from mindful_reframe.core.domain_types import (
    ReframingMethod, SessionStatus, TurnRole,
)


@dataclass(frozen=True)
class HistoryTurn:
    role: TurnRole
    text: str
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryTurn":
        return cls(
            role=TurnRole(data["role"]),
            text=data["text"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class ReframingSession:
    """One guided reframing dialogue about a single thought."""

    user_id: int
    selected_thought: str
    distortion_type: str
    method: ReframingMethod
    id: UUID = field(default_factory=uuid4)
    journal_entry_id: UUID | None = None
    history: list[HistoryTurn] = field(default_factory=list)
    turn_count: int = 0
    max_turns: int = 12
    status: SessionStatus = SessionStatus.ACTIVE
    draft_reframed_thought: str | None = None
    final_reframed_thought: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    @property
    def max_user_turns(self) -> int:
        return self.max_turns // 2

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def reached_turn_limit(self) -> bool:
        return self.turn_count >= self.max_user_turns

    @property
    def assistant_turns(self) -> list[HistoryTurn]:
        return [t for t in self.history if t.role == TurnRole.ASSISTANT]

    def append_exchange(
        self, user_text: str, assistant_text: str, now: datetime,
    ) -> None:
        """Append one user/assistant pair and count the turn."""
        self.history.append(HistoryTurn(TurnRole.USER, user_text, now))
        self.history.append(HistoryTurn(TurnRole.ASSISTANT, assistant_text, now))
        self.turn_count += 1

    def mark_completed(self, final_reframed_thought: str, now: datetime) -> None:
        if not final_reframed_thought.strip():
            raise ValueError("final_reframed_thought must be non-empty")
        self.status = SessionStatus.COMPLETED
        self.final_reframed_thought = final_reframed_thought.strip()
        self.completed_at = now

    def history_snapshot(self) -> list[dict]:
        return [t.to_dict() for t in self.history]


def history_from_snapshot(entries: list[dict] | None) -> list[HistoryTurn]:
    return [HistoryTurn.from_dict(e) for e in entries or []]
