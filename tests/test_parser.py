"""
Tests for the delimited-text parser.

These tests verify:
    - The concrete people-table scenarios
    - Quoting, doubled escapes and multi-character delimiters
    - End-of-input rules (trailing line break, trailing separator, open quote)
    - Ragged input
    - File and stream entry points, and the CsvBuilder front-end
"""

import io

import pytest

from csvgrid import (
    CsvBuilder,
    CsvFormat,
    InvalidHeaderError,
    UnknownHeaderError,
    parse_file,
    parse_stream,
    parse_string,
)
from csvgrid.parser import split_records


NO_HEADERS = CsvFormat(first_line_is_headers=False)


class TestScenarios:
    """Test the reference people-table inputs."""

    def test_without_headers(self):
        """Should build a 2x4 grid with typed access."""
        doc = parse_string(
            "Mario,Rossi,1.76,10/22/2000\nJohn,Doe,1.82,08/16/1996",
            NO_HEADERS,
        )
        assert doc.columns_count == 4
        assert doc.rows_count == 2
        assert doc.cell(0, 0).string_value == "Mario"
        assert doc.cell(1, 2).float_value == pytest.approx(1.82)
        assert not doc.has_headers

    def test_with_headers(self):
        """Should use the first line as headers and create no row for it."""
        doc = parse_string("Name,Height\nMario,1.76")
        assert doc.rows_count == 1
        assert doc.column_headers == ["Name", "Height"]
        assert doc.get_column("Height")[0].string_value == "1.76"
        with pytest.raises(UnknownHeaderError):
            doc.get_column("Weight")

    def test_quoted_separator(self):
        """Should keep a quoted separator inside the value."""
        doc = parse_string('"Rossi,Jr",Mario', NO_HEADERS)
        assert doc.get_row(0).values() == ["Rossi,Jr", "Mario"]

    def test_duplicate_header_line(self):
        """Should refuse a header line that repeats a header."""
        with pytest.raises(InvalidHeaderError):
            parse_string("Name,Name\nMario,Rossi")


class TestTokenizer:
    """Test split_records on its own."""

    def test_empty_input(self):
        """Should produce no lines, and an empty document."""
        assert split_records("") == []
        doc = parse_string("")
        assert doc.rows_count == 0
        assert doc.columns_count == 0

    def test_doubled_escape(self):
        """Should decode a doubled escape character to one literal."""
        assert split_records('a""b,"say ""hi"""') == [['a"b', 'say "hi"']]

    def test_quoted_line_break(self):
        """Should keep a quoted line break inside the value."""
        assert split_records('"one\ntwo",x\ny,z') == [["one\ntwo", "x"], ["y", "z"]]

    def test_quote_mid_value(self):
        """Should toggle quoting anywhere, not only at field start."""
        assert split_records('ab"c,d"e,f') == [["abc,de", "f"]]

    def test_multi_character_delimiters(self):
        """Should split on multi-character separators and line breaks."""
        fmt = CsvFormat(separator="::", line_break="\r\n")
        assert split_records("a::b\r\nc::d", fmt) == [["a", "b"], ["c", "d"]]

    def test_lone_colon_is_data(self):
        """Should only split on the full separator."""
        fmt = CsvFormat(separator="::")
        assert split_records("a:b::c", fmt) == [["a:b", "c"]]

    def test_quoted_prefix_cannot_complete_delimiter(self):
        """Should not let a quoted character start a delimiter."""
        fmt = CsvFormat(separator="::")
        assert split_records('"a:"::b', fmt) == [["a:", "b"]]

    def test_carriage_return_kept_with_lf_line_break(self):
        """Should treat a lone CR as data when the line break is LF."""
        assert split_records("a,b\r\nc,d") == [["a", "b\r"], ["c", "d"]]

    def test_custom_escape_character(self):
        """Should quote with the configured escape character."""
        fmt = CsvFormat(escape_character="'")
        assert split_records("'a,b','it''s'", fmt) == [["a,b", "it's"]]

    def test_blank_line(self):
        """Should turn a blank line into a single empty value."""
        assert split_records("a\n\nb") == [["a"], [""], ["b"]]


class TestEndOfInput:
    """Test the canonical end-of-input rule."""

    def test_trailing_line_break_adds_no_row(self):
        """Should not create a row after a final line break."""
        doc = parse_string("a,b\nc,d\n", NO_HEADERS)
        assert doc.rows_count == 2

    def test_trailing_separator_adds_empty_cell(self):
        """Should commit an empty final cell."""
        assert split_records("a,b,") == [["a", "b", ""]]

    def test_last_line_without_line_break(self):
        """Should commit the last line without a terminator."""
        assert split_records("a\nb") == [["a"], ["b"]]

    def test_unterminated_quote(self):
        """Should commit the open quoted buffer as-is."""
        assert split_records('a,"b,c\nd') == [["a", "b,c\nd"]]

    def test_escape_as_last_character(self):
        """Should toggle on a final escape and still commit the line."""
        assert split_records('a,b"') == [["a", "b"]]

    def test_only_a_line_break(self):
        """Should read a lone line break as one empty line."""
        assert split_records("\n") == [[""]]


class TestShape:
    """Test ragged input."""

    def test_short_lines_are_padded(self):
        """Should pad short rows with empty cells."""
        doc = parse_string("A,B,C\n1\n1,2,3")
        assert doc.get_row(0).values() == ["1", "", ""]
        assert doc.cells_count == 6

    def test_wide_line_grows_columns(self):
        """Should add header-less columns and pad earlier rows."""
        doc = parse_string("A,B\n1,2\n1,2,3,4")
        assert doc.columns_count == 4
        assert doc.column_headers == ["A", "B"]
        assert doc.get_row(0).values() == ["1", "2", "", ""]
        assert doc.get_row(1)[3].string_value == "4"


class TestEntryPoints:
    """Test file, stream and builder entry points."""

    def test_parse_file(self, tmp_path):
        """Should read a file, keeping CRLF line breaks untranslated."""
        path = tmp_path / "people.csv"
        path.write_bytes(b"Name;Height\r\nMario;1,76\r\nJohn;1,82")
        fmt = CsvFormat(separator=";", line_break="\r\n")
        doc = parse_file(path, fmt)
        assert doc.rows_count == 2
        assert doc[1, "Name"].string_value == "John"

    def test_parse_missing_file(self, tmp_path):
        """Should raise FileNotFoundError naming the path."""
        with pytest.raises(FileNotFoundError, match="missing.csv"):
            parse_file(tmp_path / "missing.csv")

    def test_parse_text_stream(self):
        """Should read a text stream."""
        doc = parse_stream(io.StringIO("A,B\n1,2"))
        assert doc.to_lists() == [["1", "2"]]

    def test_parse_binary_stream(self):
        """Should decode a binary stream."""
        doc = parse_stream(io.BytesIO("Città,Ä\nRoma,x".encode("utf-8")))
        assert doc.column_headers == ["Città", "Ä"]

    def test_builder_parse(self):
        """Should apply every builder setting."""
        doc = (
            CsvBuilder()
            .using_separator("|")
            .using_line_break(";")
            .with_first_line_as_headers(False)
            .using_parsing_culture("it-IT")
            .parse("Mario|1,76;John|1,82")
        )
        assert doc.rows_count == 2
        assert doc.cell(1, 1).float_value == pytest.approx(1.82)

    def test_builder_is_immutable(self):
        """Should return new builders instead of changing the original."""
        base = CsvBuilder()
        semicolon = base.using_separator(";")
        assert base.build().separator == ","
        assert semicolon.build().separator == ";"

    def test_builder_from_file_and_stream(self, tmp_path):
        """Should read files and streams with the built format."""
        path = tmp_path / "data.txt"
        path.write_text("a\tb\nc\td", encoding="utf-8")
        builder = CsvBuilder().using_separator("\t")
        assert builder.from_file(path).to_lists() == [["c", "d"]]
        assert builder.from_stream(io.StringIO("x\ty")).column_headers == ["x", "y"]
