"""Thought Selection — detected thoughts still waiting to be reframed."""

from mindful_reframe.core.thought_selection import (
    has_alternative_thoughts, outstanding_thoughts,
)

DETECTED = [
    {"thought": "I always mess up", "distortion": "Overgeneralization"},
    {"thought": "Nobody likes me", "distortion": "Jumping to Conclusions"},
    {"thought": "I should be perfect", "distortion": "Should Statements"},
]


def test_current_and_completed_thoughts_excluded():
    remaining = outstanding_thoughts(DETECTED, ["Nobody likes me"], "I always mess up")
    assert [d["thought"] for d in remaining] == ["I should be perfect"]


def test_comparison_ignores_case_and_spacing():
    remaining = outstanding_thoughts(
        DETECTED, ["  nobody   LIKES me "], "i always mess up",
    )
    assert len(remaining) == 1


def test_no_alternatives_when_all_done():
    assert not has_alternative_thoughts(
        DETECTED, ["Nobody likes me", "I should be perfect"], "I always mess up",
    )


def test_entries_without_thought_text_ignored():
    assert not has_alternative_thoughts([{"distortion": "Labeling"}], [], "x")
