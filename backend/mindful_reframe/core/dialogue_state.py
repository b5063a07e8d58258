"""Dialogue State Machine — pure transitions for guided reframing sessions.

States: ACTIVE → AWAITING_PACING_CHOICE → (ACTIVE | COMPLETED); ACTIVE → COMPLETED.

Invariants:
    - COMPLETED is terminal: every entry point calls ensure_open first
    - Screened replies (crisis / injection) never mutate the session
    - A processed message always appends exactly one user/assistant pair, even when
      the model failed (the attempt counts, the fallback text is recorded)
    - Pacing menu shown iff turn_count is a positive multiple of pacing_interval_turns
    - Reaching max_user_turns always completes, with or without model agreement
    - Every transition into COMPLETED produces a CompletionSummary

Design Decisions:
    - Functions return a reply descriptor and mutate only the session passed in;
      the shell awaits the model and persists the result (ADR: impureim sandwich)
    - `now` is a parameter: deterministic tests, no clock inside core
    - Forced completion without a model reframe synthesizes a placeholder from the
      original thought and the latest declarative assistant sentence, never an empty field
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from mindful_reframe.core.domain_types import (
    PacingChoice, ReframingMethod, ReplyKind, ScreenVerdict, SessionStatus,
)
from mindful_reframe.core.errors import (
    ErrorContext, InvalidPacingChoiceError, PacingChoiceNotExpectedError,
    PacingChoicePendingError, ReframeValidationError, SessionClosedError,
)
from mindful_reframe.core.method_guidance import parse_method
from mindful_reframe.core.model_output import ModelCompletion
from mindful_reframe.core.reframe_rules import ReframeRules
from mindful_reframe.core.reframing_session import ReframingSession

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_MAX_GUIDANCE_CHARS = 200


# ─── Reply descriptors ───────────────────────────────────────────

@dataclass(frozen=True)
class PacingOption:
    choice: PacingChoice
    label: str


@dataclass(frozen=True)
class PacingMenu:
    title: str
    prompt: str
    options: tuple[PacingOption, ...]
    at_limit: bool = False


@dataclass(frozen=True)
class CompletionSummary:
    original_thought: str
    distortion_type: str
    final_reframed_thought: str
    affirmation: str

    def to_dict(self) -> dict:
        return {
            "original_thought": self.original_thought,
            "distortion_type": self.distortion_type,
            "final_reframed_thought": self.final_reframed_thought,
            "affirmation": self.affirmation,
        }


@dataclass(frozen=True)
class ReframeReply:
    message: str
    kind: ReplyKind
    turn_count: int
    max_turns: int
    status: SessionStatus
    is_complete: bool = False
    final_reframed_thought: str | None = None
    next_suggestion: str | None = None
    show_pacing_menu: bool = False
    pacing_menu: PacingMenu | None = None
    reached_turn_limit: bool = False
    summary: CompletionSummary | None = None


@dataclass(frozen=True)
class PacingOutcome:
    choice: PacingChoice
    status: SessionStatus
    final_reframed_thought: str | None = None
    summary: CompletionSummary | None = field(default=None)


# ─── Session creation ────────────────────────────────────────────

def start_session(
    selected_thought: str,
    distortion_type: str,
    method: str | ReframingMethod,
    *,
    user_id: int,
    rules: ReframeRules,
    journal_entry_id: UUID | None = None,
) -> ReframingSession:
    """Validate inputs and build a fresh ACTIVE session. No model call."""
    parsed_method = parse_method(method)
    thought = (selected_thought or "").strip()
    if not thought:
        raise ReframeValidationError(
            "selected_thought cannot be empty", "selected_thought",
        )
    if len(thought) > rules.max_input_length:
        raise ReframeValidationError(
            f"selected_thought cannot exceed {rules.max_input_length} characters",
            "selected_thought",
        )
    distortion = (distortion_type or "").strip()
    if not distortion:
        raise ReframeValidationError(
            "distortion_type cannot be empty", "distortion_type",
        )
    return ReframingSession(
        user_id=user_id,
        selected_thought=thought,
        distortion_type=distortion,
        method=parsed_method,
        journal_entry_id=journal_entry_id,
        max_turns=rules.max_turns,
    )


# ─── Guards ──────────────────────────────────────────────────────

def _ctx(session: ReframingSession) -> ErrorContext:
    return ErrorContext(
        session_id=str(session.id), user_id=session.user_id,
        turn_count=session.turn_count,
    )


def ensure_open(session: ReframingSession) -> None:
    if session.is_completed:
        raise SessionClosedError(_ctx(session))


def ensure_accepting_messages(session: ReframingSession) -> None:
    ensure_open(session)
    if session.status == SessionStatus.AWAITING_PACING_CHOICE:
        raise PacingChoicePendingError(_ctx(session))


# ─── Screened replies ────────────────────────────────────────────

def screened_reply(
    session: ReframingSession, verdict: ScreenVerdict, rules: ReframeRules,
) -> ReframeReply:
    """Fixed policy reply for a screened message. Session untouched."""
    if verdict == ScreenVerdict.CRISIS:
        message, kind = rules.crisis_response, ReplyKind.CRISIS
    elif verdict == ScreenVerdict.INJECTION:
        message, kind = rules.injection_response, ReplyKind.INJECTION
    else:
        raise ValueError(f"{verdict} is not a screened verdict")
    return ReframeReply(
        message=message,
        kind=kind,
        turn_count=session.turn_count,
        max_turns=session.max_turns,
        status=session.status,
        reached_turn_limit=session.reached_turn_limit,
    )


# ─── Exchange transition ─────────────────────────────────────────

def apply_exchange(
    session: ReframingSession,
    user_text: str,
    completion: ModelCompletion | None,
    rules: ReframeRules,
    now: datetime,
    *,
    has_alternative_thoughts: bool = True,
) -> ReframeReply:
    """Record one processed exchange and advance the state machine.

    completion=None means the model call failed; the fallback text is recorded.
    """
    ensure_accepting_messages(session)

    if completion is None:
        assistant_text, kind = rules.fallback_response, ReplyKind.FALLBACK
    else:
        assistant_text, kind = completion.message, ReplyKind.REFRAME
    session.append_exchange(user_text, assistant_text, now)

    proposed = _proposed_reframe(completion)
    if proposed:
        session.draft_reframed_thought = proposed
    model_done = bool(completion and completion.is_complete and proposed)
    show_menu = _is_pacing_checkpoint(session.turn_count, rules)

    if model_done:
        session.mark_completed(proposed, now)
    elif session.reached_turn_limit:
        session.mark_completed(best_available_reframe(session, rules), now)
    elif show_menu:
        session.status = SessionStatus.AWAITING_PACING_CHOICE

    menu = None
    if show_menu:
        menu = build_pacing_menu(
            session.turn_count, session.max_user_turns, rules,
            has_alternative_thoughts=has_alternative_thoughts,
            at_limit=session.is_completed,
        )
    summary = (
        build_completion_summary(session, rules) if session.is_completed else None
    )
    return ReframeReply(
        message=assistant_text,
        kind=kind,
        turn_count=session.turn_count,
        max_turns=session.max_turns,
        status=session.status,
        is_complete=session.is_completed,
        final_reframed_thought=session.final_reframed_thought,
        next_suggestion=completion.next_suggestion if completion else None,
        show_pacing_menu=show_menu,
        pacing_menu=menu,
        reached_turn_limit=session.reached_turn_limit,
        summary=summary,
    )


def _proposed_reframe(completion: ModelCompletion | None) -> str | None:
    if completion is None or not completion.final_reframed_thought:
        return None
    text = completion.final_reframed_thought.strip()
    return text or None


def _is_pacing_checkpoint(turn_count: int, rules: ReframeRules) -> bool:
    return turn_count > 0 and turn_count % rules.pacing_interval_turns == 0


# ─── Pacing choice transition ────────────────────────────────────

def apply_pacing_choice(
    session: ReframingSession,
    choice: PacingChoice,
    rules: ReframeRules,
    now: datetime,
    *,
    has_alternative_thoughts: bool = True,
) -> PacingOutcome:
    """Resolve an open pacing menu. No model call on any branch."""
    ensure_open(session)
    if session.status != SessionStatus.AWAITING_PACING_CHOICE:
        raise PacingChoiceNotExpectedError(_ctx(session))

    if choice == PacingChoice.KEEP_REFRAMING:
        session.status = SessionStatus.ACTIVE
        return PacingOutcome(choice=choice, status=session.status)

    if choice == PacingChoice.DIFFERENT_THOUGHT and not has_alternative_thoughts:
        raise InvalidPacingChoiceError(choice.value, _ctx(session))

    session.mark_completed(best_available_reframe(session, rules), now)
    return PacingOutcome(
        choice=choice,
        status=session.status,
        final_reframed_thought=session.final_reframed_thought,
        summary=build_completion_summary(session, rules),
    )


# ─── Builders ────────────────────────────────────────────────────

def build_pacing_menu(
    turn_count: int,
    max_user_turns: int,
    rules: ReframeRules,
    *,
    has_alternative_thoughts: bool = True,
    at_limit: bool = False,
) -> PacingMenu:
    """Templated pacing menu. 'Different thought' only when one remains."""
    options: list[PacingOption] = []
    if not at_limit:
        options.append(
            PacingOption(PacingChoice.KEEP_REFRAMING, rules.keep_reframing_label),
        )
    if has_alternative_thoughts:
        options.append(
            PacingOption(PacingChoice.DIFFERENT_THOUGHT, rules.different_thought_label),
        )
    options.append(
        PacingOption(PacingChoice.VISUALIZATION, rules.visualization_label),
    )
    if at_limit:
        title = rules.pacing_limit_title
        prompt = rules.pacing_limit_prompt.format(
            turns=turn_count, max_turns=max_user_turns,
        )
    else:
        title = rules.pacing_title
        prompt = rules.pacing_prompt.format(exchanges=turn_count)
    return PacingMenu(
        title=title, prompt=prompt, options=tuple(options), at_limit=at_limit,
    )


def build_completion_summary(
    session: ReframingSession, rules: ReframeRules,
) -> CompletionSummary:
    if not session.is_completed or not session.final_reframed_thought:
        raise ValueError("summary requires a completed session")
    return CompletionSummary(
        original_thought=session.selected_thought,
        distortion_type=session.distortion_type,
        final_reframed_thought=session.final_reframed_thought,
        affirmation=rules.affirmation,
    )


def best_available_reframe(
    session: ReframingSession, rules: ReframeRules,
) -> str:
    """Latest model-proposed reframe, else a synthesized placeholder."""
    if session.draft_reframed_thought:
        return session.draft_reframed_thought
    return synthesize_reframe(session, rules)


def synthesize_reframe(session: ReframingSession, rules: ReframeRules) -> str:
    base = rules.forced_reframe_template.format(
        thought=session.selected_thought,
    )
    guidance = _recent_guidance(session, rules)
    return f"{base} {guidance}" if guidance else base


def _recent_guidance(session: ReframingSession, rules: ReframeRules) -> str | None:
    """Newest declarative (non-question) assistant sentence, skipping fallback turns."""
    for turn in reversed(session.assistant_turns):
        if turn.text == rules.fallback_response:
            continue
        for sentence in _SENTENCE_SPLIT.split(turn.text.strip()):
            sentence = sentence.strip()
            if sentence and not sentence.endswith("?"):
                return sentence[:_MAX_GUIDANCE_CHARS]
    return None
