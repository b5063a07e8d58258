"""Reframing Schemas — request/response models for the reframing dialogue API.

Invariants:
    - Request text fields are stripped and non-empty; length caps mirror ReframeRules
    - method is accepted as a raw string: unknown values are rejected by the domain
      (InvalidMethodError, code INVALID_METHOD) rather than by Pydantic
    - Response builders are the only place core dataclasses become JSON

Design Decisions:
    - Explicit from_* builders over from_attributes: reply descriptors nest frozen
      dataclasses and enums, the mapping stays readable in one place
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mindful_reframe.core.dialogue_state import (
    CompletionSummary, PacingMenu, PacingOutcome, ReframeReply,
)
from mindful_reframe.core.reframing_session import ReframingSession


class ReframingStart(BaseModel):
    user_id: int = Field(ge=1)
    journal_entry_id: UUID | None = None
    selected_thought: str = Field(min_length=1, max_length=5000)
    distortion_type: str = Field(min_length=1, max_length=100)
    method: str = Field(min_length=1, max_length=40)

    @field_validator("selected_thought", "distortion_type", "method")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty or whitespace")
        return v


class ChatMessageIn(BaseModel):
    user_id: int = Field(ge=1)
    # Not trimmed here: crisis screening runs on the raw text first
    message: str = Field(min_length=1, max_length=20_000)


class PacingChoiceIn(BaseModel):
    user_id: int = Field(ge=1)
    choice: str = Field(min_length=1, max_length=40)


# --- Responses ----------------------------------------------------------------

class PacingOptionOut(BaseModel):
    choice: str
    label: str


class PacingMenuOut(BaseModel):
    title: str
    prompt: str
    options: list[PacingOptionOut]
    at_limit: bool

    @classmethod
    def from_menu(cls, menu: PacingMenu) -> "PacingMenuOut":
        return cls(
            title=menu.title,
            prompt=menu.prompt,
            options=[
                PacingOptionOut(choice=o.choice.value, label=o.label)
                for o in menu.options
            ],
            at_limit=menu.at_limit,
        )


class CompletionSummaryOut(BaseModel):
    original_thought: str
    distortion_type: str
    final_reframed_thought: str
    affirmation: str

    @classmethod
    def from_summary(cls, summary: CompletionSummary) -> "CompletionSummaryOut":
        return cls(**summary.to_dict())


class ReframeReplyOut(BaseModel):
    message: str
    kind: str
    turn_count: int
    max_turns: int
    status: str
    is_complete: bool
    final_reframed_thought: str | None = None
    next_suggestion: str | None = None
    show_pacing_menu: bool = False
    pacing_menu: PacingMenuOut | None = None
    reached_turn_limit: bool = False
    summary: CompletionSummaryOut | None = None

    @classmethod
    def from_reply(cls, reply: ReframeReply) -> "ReframeReplyOut":
        return cls(
            message=reply.message,
            kind=reply.kind.value,
            turn_count=reply.turn_count,
            max_turns=reply.max_turns,
            status=reply.status.value,
            is_complete=reply.is_complete,
            final_reframed_thought=reply.final_reframed_thought,
            next_suggestion=reply.next_suggestion,
            show_pacing_menu=reply.show_pacing_menu,
            pacing_menu=(
                PacingMenuOut.from_menu(reply.pacing_menu)
                if reply.pacing_menu else None
            ),
            reached_turn_limit=reply.reached_turn_limit,
            summary=(
                CompletionSummaryOut.from_summary(reply.summary)
                if reply.summary else None
            ),
        )


class PacingOutcomeOut(BaseModel):
    choice: str
    status: str
    final_reframed_thought: str | None = None
    summary: CompletionSummaryOut | None = None

    @classmethod
    def from_outcome(cls, outcome: PacingOutcome) -> "PacingOutcomeOut":
        return cls(
            choice=outcome.choice.value,
            status=outcome.status.value,
            final_reframed_thought=outcome.final_reframed_thought,
            summary=(
                CompletionSummaryOut.from_summary(outcome.summary)
                if outcome.summary else None
            ),
        )


class HistoryEntryOut(BaseModel):
    role: str
    text: str
    timestamp: datetime


class SessionDetail(BaseModel):
    id: UUID
    user_id: int
    journal_entry_id: UUID | None
    selected_thought: str
    distortion_type: str
    method: str
    status: str
    turn_count: int
    max_turns: int
    final_reframed_thought: str | None
    history: list[HistoryEntryOut]
    starter_prompt: str | None = None
    created_at: datetime
    completed_at: datetime | None

    @classmethod
    def from_session(
        cls, session: ReframingSession, starter_prompt: str | None = None,
    ) -> "SessionDetail":
        return cls(
            id=session.id,
            user_id=session.user_id,
            journal_entry_id=session.journal_entry_id,
            selected_thought=session.selected_thought,
            distortion_type=session.distortion_type,
            method=session.method.value,
            status=session.status.value,
            turn_count=session.turn_count,
            max_turns=session.max_turns,
            final_reframed_thought=session.final_reframed_thought,
            history=[
                HistoryEntryOut(
                    role=t.role.value, text=t.text, timestamp=t.timestamp,
                )
                for t in session.history
            ],
            starter_prompt=starter_prompt,
            created_at=session.created_at,
            completed_at=session.completed_at,
        )


class SummaryOut(BaseModel):
    """Archived completion summary row."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    session_id: UUID
    original_thought: str
    distortion_type: str
    final_reframed_thought: str
    affirmation: str
    created_at: datetime
