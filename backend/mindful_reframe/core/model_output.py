"""Model Output — structured completion type and pure JSON extraction from model text.

Invariants:
    - extract_json_object returns a dict or None, never raises
    - ModelCompletion.message is non-empty (validated at the adapter boundary)

Design Decisions:
    - Extraction is lenient about wrapping (markdown fences, leading prose) because models
      occasionally add them even when asked for bare JSON; field validation stays strict
"""

import json
import re
from dataclasses import dataclass

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass(frozen=True)
class PromptBundle:
    """Everything the adapter sends: system directive + alternating chat messages.

    messages end with the current user turn.
    """
    system: str
    messages: list[dict]
    max_tokens: int = 600


@dataclass(frozen=True)
class ModelCompletion:
    message: str
    is_complete: bool = False
    final_reframed_thought: str | None = None
    next_suggestion: str | None = None


def extract_json_object(text: str) -> dict | None:
    """Pull the first top-level JSON object out of a model reply."""
    if not text:
        return None
    candidate = _FENCE.sub("", text.strip())
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        start, end = candidate.find("{"), candidate.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            parsed = json.loads(candidate[start:end + 1])
        except json.JSONDecodeError:
            return None
    return parsed if isinstance(parsed, dict) else None
