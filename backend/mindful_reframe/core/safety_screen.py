"""Safety Screen — pure checks consulted before any user text reaches the model.

Invariants:
    - Priority order is fixed: crisis, then prompt injection, then sanitize
    - Matching is case-insensitive substring over ReframeRules phrase lists
    - Phrases are matched against the raw text and its tag-stripped form: markup
      inside a phrase cannot hide it from the screen
    - sanitize never lengthens its input

Design Decisions:
    - Pure functions over the rules object (no IO, no model calls): a screened message
      must be decided without spending a model round-trip
"""

import re
from dataclasses import dataclass

from mindful_reframe.core.domain_types import ScreenVerdict
from mindful_reframe.core.reframe_rules import ReframeRules

_MARKUP_TAG = re.compile(r"<[^>]*>")


@dataclass(frozen=True)
class ScreenResult:
    verdict: ScreenVerdict
    text: str


def _matches_any(text: str, phrases: tuple[str, ...]) -> bool:
    lowered = text.lower()
    stripped = _MARKUP_TAG.sub("", lowered)
    return any(phrase in lowered or phrase in stripped for phrase in phrases)


def is_crisis(text: str, rules: ReframeRules) -> bool:
    """True if text contains any configured crisis indicator."""
    if not rules.crisis_detection_enabled:
        return False
    return _matches_any(text, rules.crisis_phrases)


def is_injection(text: str, rules: ReframeRules) -> bool:
    """True if text looks like a jailbreak / prompt-injection attempt."""
    if not rules.injection_blocking_enabled:
        return False
    return _matches_any(text, rules.injection_phrases)


def contains_markup(text: str) -> bool:
    return bool(_MARKUP_TAG.search(text))


def sanitize(text: str, rules: ReframeRules) -> str:
    """Strip markup tags, clamp to max_input_length, trim whitespace."""
    if not rules.sanitize_before_model:
        return text
    cleaned = _MARKUP_TAG.sub("", text)
    if len(cleaned) > rules.max_input_length:
        cleaned = cleaned[: rules.max_input_length]
    return cleaned.strip()


def screen_input(text: str, rules: ReframeRules) -> ScreenResult:
    """Run the full screening pipeline. CLEAN results carry sanitized text."""
    if is_crisis(text, rules):
        return ScreenResult(ScreenVerdict.CRISIS, "")
    if is_injection(text, rules):
        return ScreenResult(ScreenVerdict.INJECTION, "")
    return ScreenResult(ScreenVerdict.CLEAN, sanitize(text, rules))
