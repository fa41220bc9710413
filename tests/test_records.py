import json
from datetime import datetime

import pytest

from csv_json_converter import records as records_module
from csv_json_converter.errors import EmptyInputError, UnexpectedParseError
from csv_json_converter.records import (
    ConversionSession,
    build_record,
    convert_session,
    convert_text,
    fit_row,
)
from csv_json_converter.sections import SectionRegistry

SIMPLE = "name,age\nAlice,30\nBob,25"


def fixed_clock():
    return datetime(2024, 1, 2, 3, 4, 5)


def test_default_pattern_without_title_column():
    headers, records = convert_text(SIMPLE, SectionRegistry(), "{title}")

    assert headers == ["name", "age"]
    assert records == [
        {"title": "", "content": "", "data": {"main": {"name": "Alice", "age": "30"}}},
        {"title": "-1", "content": "", "data": {"main": {"name": "Bob", "age": "25"}}},
    ]


def test_column_and_index_pattern():
    _, records = convert_text(SIMPLE, SectionRegistry(), "{column:name}-{index}")
    assert [r["title"] for r in records] == ["Alice-1", "Bob-2"]


def test_base_fields_are_promoted_out_of_sections():
    _, records = convert_text("Title,Content,Tag\nHello,Body,x", SectionRegistry(), "{title}")
    assert records == [{"title": "Hello", "content": "Body", "data": {"main": {"tag": "x"}}}]


def test_short_rows_are_padded_and_long_rows_truncated():
    _, records = convert_text("name,age\nAlice\nBob,25,extra", SectionRegistry(), "x")
    assert records[0]["data"]["main"] == {"name": "Alice", "age": ""}
    assert records[1]["data"]["main"] == {"name": "Bob", "age": "25"}


def test_fit_row():
    assert fit_row(["a"], 3) == ["a", "", ""]
    assert fit_row(["a", "b", "c"], 2) == ["a", "b"]


def test_record_count_matches_non_blank_lines():
    text = "a\r\n\r\n1\n   \n2\n3\n\n"
    _, records = convert_text(text, SectionRegistry(), "{index}")
    assert len(records) == 3
    assert [r["title"] for r in records] == ["1", "2", "3"]


def test_columns_route_to_assigned_sections():
    registry = SectionRegistry()
    meta = registry.add("meta")
    registry.assign("age", meta.id)

    _, records = convert_text(SIMPLE, registry, "{name}")

    assert records[0]["data"] == {"main": {"name": "Alice"}, "meta": {"age": "30"}}


def test_empty_sections_still_appear():
    registry = SectionRegistry()
    registry.add("unused")
    _, records = convert_text(SIMPLE, registry, "{name}")
    assert records[0]["data"]["unused"] == {}


def test_sections_sharing_a_name_merge():
    registry = SectionRegistry()
    meta = registry.add("meta")
    registry.assign("age", meta.id)
    registry.rename(meta.id, "main")

    _, records = convert_text(SIMPLE, registry, "{name}")

    assert records[0]["data"] == {"main": {"name": "Alice", "age": "30"}}


def test_empty_registry_gets_fallback_before_rows():
    registry = SectionRegistry(sections=[])
    _, records = convert_text(SIMPLE, registry, "{name}")
    assert records[0]["data"] == {"main": {"name": "Alice", "age": "30"}}


def test_build_record_without_deduplicator():
    record = build_record(["title", "v"], ["Same", "1"], SectionRegistry(), "{title}", 1)
    assert record["title"] == "Same"


def test_convert_is_idempotent_with_fixed_clock():
    session = ConversionSession(title_pattern="{name}-{timestamp}")
    first = json.dumps(convert_session(session, SIMPLE, fixed_clock))
    second = json.dumps(convert_session(session, SIMPLE, fixed_clock))
    assert first == second


def test_empty_input_keeps_previous_records():
    session = ConversionSession()
    previous = convert_session(session, SIMPLE)

    with pytest.raises(EmptyInputError):
        convert_session(session, "\n \n")

    assert session.records == previous
    assert session.headers == ["name", "age"]


def test_unexpected_failure_is_wrapped_and_state_kept(monkeypatch):
    session = ConversionSession()
    previous = convert_session(session, SIMPLE)

    def boom(*args, **kwargs):
        raise RuntimeError("bad row")

    monkeypatch.setattr(records_module, "build_record", boom)

    with pytest.raises(UnexpectedParseError):
        convert_session(session, "x,y\n1,2")

    assert session.records == previous
    assert session.headers == ["name", "age"]


def test_load_file_resets_assignments_but_keeps_sections():
    session = ConversionSession()
    extra = session.registry.add("extra")
    session.registry.assign("age", extra.id)

    headers = session.load_file("people.csv", "/tmp/people.csv", "\nName,Age\n")

    assert headers == ["name", "age"]
    assert session.registry.assignments == {}
    assert session.registry.ids() == ["main", extra.id]


def test_reset_restores_defaults():
    session = ConversionSession(title_pattern="{index}")
    session.registry.add("extra")
    convert_session(session, SIMPLE)

    session.reset()

    assert session.title_pattern == "{title}"
    assert session.records == []
    assert session.registry.ids() == ["main"]
