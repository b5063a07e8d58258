"""Model Output — lenient JSON extraction from model text."""

from mindful_reframe.core.model_output import extract_json_object


def test_bare_json_object():
    assert extract_json_object('{"message": "hi"}') == {"message": "hi"}


def test_fenced_json_object():
    text = '```json\n{"message": "hi", "isComplete": false}\n```'
    assert extract_json_object(text) == {"message": "hi", "isComplete": False}


def test_json_with_leading_prose():
    text = 'Here is my reply:\n{"message": "What do you notice?"}\nHope that helps.'
    assert extract_json_object(text) == {"message": "What do you notice?"}


def test_non_object_json_returns_none():
    assert extract_json_object("[1, 2, 3]") is None


def test_garbage_returns_none():
    assert extract_json_object("I cannot answer in JSON today") is None
    assert extract_json_object("") is None
    assert extract_json_object("{not json}") is None
