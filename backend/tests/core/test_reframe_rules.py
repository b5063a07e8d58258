"""Reframe Rules — immutable policy object and its derivation from settings."""

from dataclasses import FrozenInstanceError

import pytest

from mindful_reframe.core.reframe_rules import DEFAULT_RULES, ReframeRules, build_rules


def test_defaults_match_dialogue_constants():
    assert DEFAULT_RULES.max_turns == 12
    assert DEFAULT_RULES.max_user_turns == 6
    assert DEFAULT_RULES.pacing_interval_turns == 3
    assert DEFAULT_RULES.max_input_length == 5000


def test_rules_are_frozen():
    with pytest.raises(FrozenInstanceError):
        DEFAULT_RULES.max_turns = 20


def test_phrase_lists_are_lowercased():
    rules = ReframeRules(crisis_phrases=("Want To Die",), injection_phrases=("IGNORE ME",))
    assert rules.crisis_phrases == ("want to die",)
    assert rules.injection_phrases == ("ignore me",)


@pytest.mark.parametrize("max_turns", [0, 7, -2])
def test_rejects_odd_or_non_positive_max_turns(max_turns):
    with pytest.raises(ValueError):
        ReframeRules(max_turns=max_turns)


def test_rejects_zero_pacing_interval():
    with pytest.raises(ValueError):
        ReframeRules(pacing_interval_turns=0)


def test_build_rules_overrides_numbers_and_keeps_copy():
    rules = build_rules(max_turns=8, pacing_interval_turns=2, max_input_length=100)
    assert rules.max_user_turns == 4
    assert rules.pacing_interval_turns == 2
    assert rules.max_input_length == 100
    assert rules.crisis_response == DEFAULT_RULES.crisis_response
