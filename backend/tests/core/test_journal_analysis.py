"""Journal Analysis — entry validation and distortion catalogue."""

from dataclasses import replace

from mindful_reframe.core.journal_analysis import (
    COGNITIVE_DISTORTIONS, DetectedThought, validate_journal_entry,
)
from mindful_reframe.core.reframe_rules import DEFAULT_RULES


def test_catalogue_has_ten_distortions():
    assert len(COGNITIVE_DISTORTIONS) == 10
    assert "Should Statements" in COGNITIVE_DISTORTIONS


def test_valid_entry_has_no_violations():
    assert validate_journal_entry(
        "Today I felt like I let my whole team down again.", DEFAULT_RULES,
    ) == []


def test_empty_entry():
    assert validate_journal_entry("   ", DEFAULT_RULES) == [
        "Journal entry cannot be empty",
    ]


def test_short_entry():
    assert validate_journal_entry("too short", DEFAULT_RULES) == [
        "Journal entry must be at least 10 characters",
    ]


def test_reports_every_violation():
    rules = replace(DEFAULT_RULES, max_input_length=20)
    errors = validate_journal_entry("<b>this entry is far too long</b>", rules)
    assert len(errors) == 2


def test_detected_thought_to_dict():
    thought = DetectedThought("I am useless", "Labeling", "One mistake is not you.")
    assert thought.to_dict() == {
        "thought": "I am useless",
        "distortion": "Labeling",
        "explanation": "One mistake is not you.",
    }
