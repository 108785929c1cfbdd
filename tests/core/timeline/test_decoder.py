"""
Tests for the backslash-escaped line decoder (src/core/timeline/decoder.py).
"""

import pytest

from core.exceptions import ResourceLimitExceeded
from core.timeline.decoder import (
    MAX_FIELD_LENGTH,
    MAX_FIELDS_PER_LINE,
    MAX_LINE_LENGTH,
    parse_line,
)


class TestParseLine:
    def test_simple_fields(self):
        assert parse_line("a,b,c") == ["a", "b", "c"]

    def test_quoted_comma_is_not_a_separator(self):
        assert parse_line('a,"b,c",d') == ["a", "b,c", "d"]

    def test_backslash_escaped_comma(self):
        assert parse_line("a\\,b,c") == ["a,b", "c"]

    def test_quotes_are_stripped_not_preserved(self):
        assert parse_line('"quoted"') == ["quoted"]
        assert parse_line('pre"mid"post') == ["premidpost"]

    def test_escaped_quote_is_literal(self):
        assert parse_line('say \\"hi\\"') == ['say "hi"']

    def test_escaped_backslash(self):
        assert parse_line("C:\\\\Windows,x") == ["C:\\Windows", "x"]

    def test_doubled_quotes_are_not_an_escape(self):
        # "a""b" toggles quoting twice; no quote characters survive
        assert parse_line('"a""b",c') == ["ab", "c"]

    def test_empty_line_yields_one_empty_field(self):
        assert parse_line("") == [""]

    def test_trailing_separator_yields_empty_final_field(self):
        assert parse_line("a,b,") == ["a", "b", ""]

    def test_empty_fields_are_kept(self):
        assert parse_line(",,") == ["", "", ""]

    def test_unterminated_quote_is_not_an_error(self):
        assert parse_line('a,"b,c') == ["a", "b,c"]

    def test_trailing_backslash_is_dropped(self):
        assert parse_line("a,b\\") == ["a", "b"]

    def test_unicode_content(self):
        assert parse_line("é,日本,🙂") == ["é", "日本", "🙂"]


class TestParseLineLimits:
    def test_field_at_limit_is_accepted(self):
        fields = parse_line("x" * MAX_FIELD_LENGTH + ",y")
        assert len(fields[0]) == MAX_FIELD_LENGTH

    def test_field_over_limit_fails(self):
        with pytest.raises(ResourceLimitExceeded):
            parse_line("a," + "x" * (MAX_FIELD_LENGTH + 1))

    def test_first_field_over_limit_fails(self):
        with pytest.raises(ResourceLimitExceeded):
            parse_line("x" * (MAX_FIELD_LENGTH + 1) + ",b")

    def test_escapes_do_not_count_towards_field_length(self):
        fields = parse_line("\\x" * MAX_FIELD_LENGTH)
        assert fields == ["x" * MAX_FIELD_LENGTH]

    def test_max_fields_accepted(self):
        assert len(parse_line(",".join(["f"] * MAX_FIELDS_PER_LINE))) == MAX_FIELDS_PER_LINE

    def test_too_many_fields_fails(self):
        with pytest.raises(ResourceLimitExceeded) as excinfo:
            parse_line(",".join(["f"] * (MAX_FIELDS_PER_LINE + 1)))
        assert excinfo.value.limit_name == "field count"

    def test_quoted_commas_do_not_count_as_fields(self):
        line = '"' + "," * (MAX_FIELDS_PER_LINE + 10) + '"'
        assert parse_line(line) == ["," * (MAX_FIELDS_PER_LINE + 10)]

    def test_line_over_limit_rejected_before_parsing(self):
        # Escapes produce no field content, so only the whole-line check can trip
        prefix = "ab," * 10
        line = prefix + "\\" * (MAX_LINE_LENGTH + 1 - len(prefix))
        with pytest.raises(ResourceLimitExceeded) as excinfo:
            parse_line(line)
        assert excinfo.value.limit_name == "line length"
