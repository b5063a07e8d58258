"""Reframe Controller — imperative shell around the pure dialogue state machine.

Invariants:
    - Screening happens before any guard on pacing state: a crisis message always gets
      the crisis reply, even while a pacing choice is pending
    - Model failures (ModelAdapterError, timeout) never escape receive_message: the
      exchange degrades to the fallback message and still counts
    - The controller never persists: the caller saves the mutated session
    - User text is never logged

Design Decisions:
    - Rules injected at construction, never read from ambient globals
      (ADR: one immutable rules object per process, tests pass their own)
    - asyncio.wait_for around the adapter call: the single suspension point inside a
      turn is bounded by model_timeout_seconds
"""

import asyncio
import logging
from datetime import datetime, timezone
from uuid import UUID

from mindful_reframe.core.dialogue_state import (
    PacingOutcome, ReframeReply, apply_exchange, apply_pacing_choice,
    ensure_accepting_messages, ensure_open, screened_reply, start_session,
)
from mindful_reframe.core.domain_types import (
    PacingChoice, ReframingMethod, ScreenVerdict,
)
from mindful_reframe.core.errors import (
    ErrorContext, InvalidPacingChoiceError, ModelAdapterError,
    ReframeValidationError,
)
from mindful_reframe.core.model_output import ModelCompletion
from mindful_reframe.core.reframe_rules import ReframeRules
from mindful_reframe.core.reframing_session import ReframingSession
from mindful_reframe.core.repository_protocols import ModelAdapter
from mindful_reframe.core.safety_screen import screen_input
from mindful_reframe.core.user_context import IntakeProfile
from mindful_reframe.services.system_prompt import build_reframe_bundle

logger = logging.getLogger(__name__)


def parse_pacing_choice(raw: str | PacingChoice) -> PacingChoice:
    if isinstance(raw, PacingChoice):
        return raw
    try:
        return PacingChoice(raw)
    except ValueError:
        raise InvalidPacingChoiceError(str(raw))


class ReframeController:
    """Drives one reframing session per call: screen, prompt, model, transition."""

    def __init__(
        self,
        adapter: ModelAdapter,
        rules: ReframeRules,
        *,
        model_timeout_seconds: float = 10.0,
        max_tokens: int = 600,
    ):
        self.adapter = adapter
        self.rules = rules
        self.model_timeout_seconds = model_timeout_seconds
        self.max_tokens = max_tokens

    def start_session(
        self,
        selected_thought: str,
        distortion_type: str,
        method: str | ReframingMethod,
        *,
        user_id: int,
        journal_entry_id: UUID | None = None,
    ) -> ReframingSession:
        session = start_session(
            selected_thought, distortion_type, method,
            user_id=user_id, rules=self.rules,
            journal_entry_id=journal_entry_id,
        )
        logger.info(
            "Reframing session started",
            extra={"session_id": str(session.id), "user_id": user_id},
        )
        return session

    async def receive_message(
        self,
        session: ReframingSession,
        raw_text: str,
        *,
        has_alternative_thoughts: bool = True,
        user_context: IntakeProfile | None = None,
    ) -> ReframeReply:
        ensure_open(session)

        screened = screen_input(raw_text or "", self.rules)
        if screened.verdict != ScreenVerdict.CLEAN:
            logger.warning(
                "Message screened",
                extra={
                    "session_id": str(session.id),
                    "reply_kind": screened.verdict.value,
                },
            )
            return screened_reply(session, screened.verdict, self.rules)

        if not screened.text:
            raise ReframeValidationError(
                "message cannot be empty", "message",
                ErrorContext(session_id=str(session.id), user_id=session.user_id),
            )
        ensure_accepting_messages(session)

        completion = await self._complete(session, screened.text, user_context)
        reply = apply_exchange(
            session, screened.text, completion, self.rules,
            datetime.now(timezone.utc),
            has_alternative_thoughts=has_alternative_thoughts,
        )
        logger.info(
            "Exchange processed",
            extra={
                "session_id": str(session.id),
                "turn_count": reply.turn_count,
                "status": reply.status.value,
                "reply_kind": reply.kind.value,
            },
        )
        return reply

    async def _complete(
        self,
        session: ReframingSession,
        user_text: str,
        user_context: IntakeProfile | None,
    ) -> ModelCompletion | None:
        """Model completion for this exchange, or None when the call failed."""
        bundle = build_reframe_bundle(
            session, user_text, self.rules,
            user_context=user_context, max_tokens=self.max_tokens,
        )
        try:
            return await asyncio.wait_for(
                self.adapter.complete(bundle), timeout=self.model_timeout_seconds,
            )
        except ModelAdapterError as e:
            logger.warning(
                f"Model call failed, using fallback: {e.api_error_type}",
                extra={"session_id": str(session.id), "error_code": e.code},
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Model call exceeded {self.model_timeout_seconds}s, using fallback",
                extra={"session_id": str(session.id)},
            )
        return None

    def choose_pacing(
        self,
        session: ReframingSession,
        choice: str | PacingChoice,
        *,
        has_alternative_thoughts: bool = True,
    ) -> PacingOutcome:
        outcome = apply_pacing_choice(
            session, parse_pacing_choice(choice), self.rules,
            datetime.now(timezone.utc),
            has_alternative_thoughts=has_alternative_thoughts,
        )
        logger.info(
            f"Pacing choice applied: {outcome.choice.value}",
            extra={"session_id": str(session.id), "status": outcome.status.value},
        )
        return outcome
