"""Reframe Rules — process-wide immutable behaviour policy for the dialogue controller.

Invariants:
    - ReframeRules is frozen: built once at startup, injected at construction, never mutated
    - Phrase lists are stored lowercase (screening compares against lowercased input)
    - max_user_turns == max_turns // 2 (one history entry per role per exchange)

Design Decisions:
    - Dataclass over module-level dict: the controller receives its policy explicitly
      instead of importing ambient global state
    - Env-tunable numbers live in Settings (config.py); wording and phrase lists live here
      because they are product copy, not deployment knobs
"""

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Persona:
    name: str = "Reframe"
    voice: str = "compassionate, curious, growth-oriented"
    energy: str = "supportive big sister energy"
    approach: str = "guide through questions, not directive advice"


_PREFERRED_TONE: tuple[str, ...] = (
    "supportive and warm",
    "curious and exploratory",
    "uses metaphors and affirming questions",
    "growth-oriented language",
    "validates feelings while exploring patterns",
)

_PROHIBITED_PHRASES: tuple[str, ...] = (
    "Just get over it",
    "You're being irrational",
    "You should just...",
    "That's not logical",
    "Stop thinking that way",
    "You're overreacting",
)

_CRISIS_PHRASES: tuple[str, ...] = (
    "want to die",
    "kill myself",
    "end my life",
    "not worth living",
    "suicide",
    "hurt myself",
)

_INJECTION_PHRASES: tuple[str, ...] = (
    "ignore previous instructions",
    "pretend to be a therapist",
    "act as a doctor",
    "forget your guidelines",
    "you are now a",
    "system prompt:",
)


@dataclass(frozen=True)
class ReframeRules:
    """Immutable policy consulted by screening, prompting and pacing."""

    persona: Persona = field(default_factory=Persona)
    preferred_tone: tuple[str, ...] = _PREFERRED_TONE
    prohibited_phrases: tuple[str, ...] = _PROHIBITED_PHRASES

    # Turn pacing
    max_turns: int = 12
    pacing_interval_turns: int = 3

    # Screening
    crisis_detection_enabled: bool = True
    crisis_phrases: tuple[str, ...] = _CRISIS_PHRASES
    injection_blocking_enabled: bool = True
    injection_phrases: tuple[str, ...] = _INJECTION_PHRASES
    sanitize_before_model: bool = True
    max_input_length: int = 5000

    # Fixed reply copy
    crisis_response: str = (
        "I'm really sorry you're feeling this way. You are not alone. "
        "Please reach out to a professional or visit https://findahelpline.com "
        "to find a support service in your region."
    )
    injection_response: str = (
        "Let's keep our focus on the thought we're exploring together. "
        "Could you share a little more about how it feels to you right now?"
    )
    fallback_response: str = (
        "I'm having a little trouble responding right now. Take a breath, "
        "and when you're ready, tell me more about what comes up for you "
        "when you sit with this thought."
    )
    affirmation: str = (
        "You've done great work on this thought - Here's what you're "
        "learning to believe instead."
    )
    forced_reframe_template: str = (
        'The thought "{thought}" is one way of seeing things, not the whole '
        "picture, and I can hold it with more balance and kindness."
    )

    # Pacing menu copy
    pacing_title: str = "How would you like to continue?"
    pacing_prompt: str = "After {exchanges} exchanges, you have these options:"
    pacing_limit_title: str = "You've reached the limit for this thought"
    pacing_limit_prompt: str = (
        "You've put thoughtful energy into shifting this belief "
        "({turns}/{max_turns} exchanges). Let's take a moment to reflect."
    )
    keep_reframing_label: str = "Keep Reframing This Thought"
    different_thought_label: str = "Reframe a Different Thought"
    visualization_label: str = "Create Visualization"

    # Journal storage policy
    max_saved_entries_per_user: int = 20

    def __post_init__(self):
        if self.max_turns < 2 or self.max_turns % 2:
            raise ValueError("max_turns must be a positive even number")
        if self.pacing_interval_turns < 1:
            raise ValueError("pacing_interval_turns must be >= 1")
        object.__setattr__(
            self, "crisis_phrases", tuple(p.lower() for p in self.crisis_phrases),
        )
        object.__setattr__(
            self, "injection_phrases",
            tuple(p.lower() for p in self.injection_phrases),
        )

    @property
    def max_user_turns(self) -> int:
        return self.max_turns // 2


DEFAULT_RULES = ReframeRules()


def build_rules(
    *,
    max_turns: int = DEFAULT_RULES.max_turns,
    pacing_interval_turns: int = DEFAULT_RULES.pacing_interval_turns,
    max_input_length: int = DEFAULT_RULES.max_input_length,
    max_saved_entries_per_user: int = DEFAULT_RULES.max_saved_entries_per_user,
) -> ReframeRules:
    """Derive the process rules from deployment settings."""
    return replace(
        DEFAULT_RULES,
        max_turns=max_turns,
        pacing_interval_turns=pacing_interval_turns,
        max_input_length=max_input_length,
        max_saved_entries_per_user=max_saved_entries_per_user,
    )
