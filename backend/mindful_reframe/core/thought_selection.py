"""Thought Selection — which detected thoughts are still waiting to be reframed.

Invariants:
    - Comparison is on normalized thought text (trimmed, case-folded)
    - The current session's thought is never counted as an alternative
"""


def _normalize(text: str) -> str:
    return " ".join(text.split()).casefold()


def outstanding_thoughts(
    detected: list[dict], completed_thoughts: list[str], current_thought: str,
) -> list[dict]:
    """Detected thoughts not yet reframed and not the one in progress."""
    done = {_normalize(t) for t in completed_thoughts}
    done.add(_normalize(current_thought))
    return [
        d for d in detected
        if d.get("thought") and _normalize(d["thought"]) not in done
    ]


def has_alternative_thoughts(
    detected: list[dict], completed_thoughts: list[str], current_thought: str,
) -> bool:
    return bool(outstanding_thoughts(detected, completed_thoughts, current_thought))
