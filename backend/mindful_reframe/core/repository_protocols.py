"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE their results are never async themselves —
      the shell orchestrates the async calls around the pure logic
"""

from typing import Protocol
from uuid import UUID

from mindful_reframe.core.dialogue_state import CompletionSummary
from mindful_reframe.core.model_output import ModelCompletion, PromptBundle
from mindful_reframe.core.reframing_session import ReframingSession


class ModelAdapter(Protocol):
    """Structured prompt → structured completion. Raises ModelAdapterError."""
    async def complete(self, bundle: PromptBundle) -> ModelCompletion: ...


class SessionStore(Protocol):
    """Contract for reframing session persistence — implemented by shell."""
    async def load_session(
        self, session_id: UUID, user_id: int,
    ) -> ReframingSession: ...
    async def create_session(self, session: ReframingSession) -> None: ...
    async def save_session(self, session: ReframingSession) -> None: ...
    async def append_summary(
        self, session: ReframingSession, summary: CompletionSummary,
    ) -> None: ...
    async def commit(self) -> None: ...
