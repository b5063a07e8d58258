"""Journal Analysis — detected-thought types, distortion catalogue, entry validation.

Invariants:
    - validate_journal_entry is pure and returns every violated rule, not just the first
    - A JournalAnalysis with crisis_detected=True never carries detected thoughts
"""

from dataclasses import dataclass, field

from mindful_reframe.core.reframe_rules import ReframeRules
from mindful_reframe.core.safety_screen import contains_markup

MIN_ENTRY_LENGTH = 10

COGNITIVE_DISTORTIONS: dict[str, str] = {
    "All-or-Nothing Thinking": "Seeing things in extremes",
    "Overgeneralization": "Making sweeping conclusions from one event",
    "Mental Filtering": "Focusing only on negatives, ignoring positives",
    "Disqualifying the Positive": "Rejecting compliments or successes",
    "Jumping to Conclusions": "Mind reading or fortune telling",
    "Magnification/Minimization": "Catastrophizing or downplaying",
    "Emotional Reasoning": "\"I feel it, therefore it's true\"",
    "Should Statements": "Harsh self-expectations",
    "Labeling": "Defining yourself by mistakes",
    "Personalization": "Taking blame for things outside your control",
}


@dataclass(frozen=True)
class DetectedThought:
    thought: str
    distortion: str
    explanation: str

    def to_dict(self) -> dict:
        return {
            "thought": self.thought,
            "distortion": self.distortion,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class JournalAnalysis:
    summary: str
    detected_thoughts: list[DetectedThought] = field(default_factory=list)
    crisis_detected: bool = False


def validate_journal_entry(entry: str, rules: ReframeRules) -> list[str]:
    """Return human-readable violations; empty list means valid."""
    errors: list[str] = []
    if not entry or not entry.strip():
        errors.append("Journal entry cannot be empty")
    elif len(entry.strip()) < MIN_ENTRY_LENGTH:
        errors.append(
            f"Journal entry must be at least {MIN_ENTRY_LENGTH} characters",
        )
    if entry and len(entry) > rules.max_input_length:
        errors.append(
            f"Journal entry cannot exceed {rules.max_input_length} characters",
        )
    if entry and contains_markup(entry):
        errors.append("HTML tags are not allowed in journal entries")
    return errors
