import json

import pytest

from extraction.response_parser import extract_json_array, parse_task_candidates
from task_organizer.errors import ParseError
from task_organizer.models import CategoryName, Priority


def test_bare_array():
    assert extract_json_array('[{"title": "A"}]') == [{"title": "A"}]


def test_array_wrapped_in_prose():
    raw = 'Sure! Here are your tasks:\n[{"title":"Call mom"}]\nLet me know if you need more.'
    assert extract_json_array(raw) == [{"title": "Call mom"}]


def test_array_inside_object_wrapper():
    raw = '{"tasks": [{"title": "A"}, {"title": "B"}]}'
    assert extract_json_array(raw) == [{"title": "A"}, {"title": "B"}]


def test_nested_arrays_and_brackets_in_strings():
    items = [{"title": "Review [draft] doc", "tags": ["a", "b]"]}, {"title": "B"}]
    raw = "Result: " + json.dumps(items) + " trailing ] noise"
    assert extract_json_array(raw) == items


def test_prose_brackets_before_real_array_are_skipped():
    raw = 'Here are [the tasks] you asked for: [{"title": "A"}]'
    assert extract_json_array(raw) == [{"title": "A"}]


def test_citation_arrays_before_real_array_are_skipped():
    raw = (
        'Per rule [1] here is the list: '
        '[{"title":"Call the dentist","priority":"Low","category":"Personal"}]'
    )
    assert extract_json_array(raw) == [
        {"title": "Call the dentist", "priority": "Low", "category": "Personal"}
    ]


@pytest.mark.parametrize("raw", ["[1, 2]", "See [1] and [\"a\"]", "[] [3]"])
def test_arrays_without_objects_give_empty(raw):
    assert extract_json_array(raw) == []
    assert extract_json_array(raw, strict=True) == []


@pytest.mark.parametrize("raw", ["", "I could not find any tasks.", "{}", "[ unterminated"])
def test_no_array_gives_empty(raw):
    assert extract_json_array(raw) == []
    assert extract_json_array(raw, strict=True) == []


def test_malformed_array_falls_back_to_empty():
    raw = "[{'title': 'single quotes are not JSON'}]"
    assert extract_json_array(raw) == []


def test_malformed_array_raises_in_strict_mode():
    raw = "[{'title': 'single quotes are not JSON'}]"
    with pytest.raises(ParseError):
        extract_json_array(raw, strict=True)


def test_candidates_preserve_order_and_clamp_fields():
    raw = json.dumps([
        {"title": "First", "priority": "High", "category": "Work"},
        {"title": "x", "priority": "Urgent", "category": "Bogus"},
        {"title": "Third", "priority": "Low", "category": "Personal"},
    ])
    out = parse_task_candidates(raw)

    assert [c.title for c in out] == ["First", "x", "Third"]
    assert out[1].priority is Priority.MEDIUM
    assert out[1].category is CategoryName.OTHER
    assert out[2].priority is Priority.LOW


def test_long_titles_truncated_to_500():
    raw = json.dumps([{"title": "a" * 501}, {"title": "b" * 500}, {"title": "c" * 2000}])
    assert [len(c.title) for c in parse_task_candidates(raw)] == [500, 500, 500]


def test_unusable_elements_are_skipped():
    raw = json.dumps(["loose string", {"priority": "High"}, {"title": "Keep me"}, 3])
    out = parse_task_candidates(raw)
    assert [c.title for c in out] == ["Keep me"]


def test_strict_flag_propagates_from_candidates():
    with pytest.raises(ParseError):
        parse_task_candidates("[not json]", strict=True)
    assert parse_task_candidates("[not json]") == []
