"""Domain Types — enums that replace bare strings across the codebase.

Invariants:
    - All valid states encoded as Enums — no raw string matching
    - ReframingMethod wire values match the values clients already send

Design Decisions:
    - str Enums: serialize to JSON without custom encoders (session history is a JSON column)
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class ReframingMethod(str, Enum):
    """The five guided reframing methods. Immutable once a session starts."""
    EVIDENCE_CHECK = "evidenceCheck"
    ALTERNATIVE_PERSPECTIVES = "alternativePerspectives"
    BALANCED_THINKING = "balancedThinking"
    SELF_COMPASSION = "compassionateSelf"
    ACTION_ORIENTED = "actionOriented"


class SessionStatus(str, Enum):
    """Reframing session lifecycle — maps to DB `status` column."""
    ACTIVE = "active"
    AWAITING_PACING_CHOICE = "awaiting_pacing_choice"
    COMPLETED = "completed"


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class PacingChoice(str, Enum):
    """Options offered by the pacing menu."""
    KEEP_REFRAMING = "keep_reframing"
    DIFFERENT_THOUGHT = "different_thought"
    VISUALIZATION = "visualization"


class ScreenVerdict(str, Enum):
    """Outcome of screening one user message before the model sees it."""
    CLEAN = "clean"
    CRISIS = "crisis"
    INJECTION = "injection"


class ReplyKind(str, Enum):
    """Where the assistant text of a reply came from."""
    REFRAME = "reframe"
    FALLBACK = "fallback"
    CRISIS = "crisis"
    INJECTION = "injection"
