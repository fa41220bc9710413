import pytest

from csv_json_converter.headers import extract_headers, non_blank_lines, resolve_headers
from csv_json_converter.lines import parse_csv_line


@pytest.mark.parametrize(
    "line, expected",
    [
        ("a,b,c", ["a", "b", "c"]),
        ('"a,b",c', ["a,b", "c"]),
        ('"say ""hi""",x', ['say "hi"', "x"]),
        (" a , b ", ["a", "b"]),
        ("a,", ["a", ""]),
        ("", [""]),
        ('"x",""', ["x", ""]),
    ],
)
def test_parse_csv_line(line, expected):
    assert parse_csv_line(line) == expected


def test_parse_csv_line_keeps_unbalanced_quote_content():
    """An unterminated quote swallows the rest of the line into one field."""
    assert parse_csv_line('a,"b,c') == ["a", "b,c"]


def test_extract_headers_skips_blank_lines_and_names_blank_columns():
    text = "\n  \n Name,,AGE\r\nx,y,z\r\n"
    assert extract_headers(text) == ["name", "column_2", "age"]


def test_extract_headers_without_content_is_empty():
    assert extract_headers("  \n\n\t\n") == []
    assert extract_headers("") == []


def test_resolve_headers_lowercases_quoted_names():
    assert resolve_headers('"First Name",Last') == ["first name", "last"]


def test_non_blank_lines_normalizes_crlf():
    assert non_blank_lines("a,b\r\n\r\n1,2\r\n") == ["a,b", "1,2"]
