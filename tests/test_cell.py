"""
Tests for Cell values and typed accessors.

These tests verify:
    - String value semantics (never None, "" means empty)
    - Typed views parsed and formatted through the document's culture
    - try_get_* variants
    - ParsingCulture parsing rules and registry
"""

import math
from datetime import date, datetime
from enum import Enum

import pytest

from csvgrid import (
    CsvBuilder,
    Document,
    InvalidConfigurationError,
    OrphanError,
    ParsingCulture,
    get_culture,
    register_culture,
)
from csvgrid.culture import INVARIANT_CULTURE


class Color(Enum):
    RED = 1
    GREEN = 2
    BLUE = 3


def single_cell(culture="invariant"):
    doc = CsvBuilder().using_parsing_culture(culture).empty()
    doc.create_column("Value")
    return doc.create_row()[0]


class TestStringValue:
    """Test the raw string value."""

    def test_new_cell_is_empty(self):
        """Should start as the empty string."""
        cell = single_cell()
        assert cell.string_value == ""
        assert cell.is_empty

    def test_none_becomes_empty(self):
        """Should store None as the empty string."""
        cell = single_cell()
        cell.string_value = "x"
        cell.string_value = None
        assert cell.string_value == ""

    def test_rejects_non_strings(self):
        """Should not silently convert other types."""
        cell = single_cell()
        with pytest.raises(TypeError):
            cell.string_value = 12

    def test_clear_and_copy_into(self):
        """Should copy raw values between cells and clear them."""
        doc = Document()
        doc.create_column()
        doc.create_column()
        row = doc.create_row()
        row[0].string_value = "hello"
        row[0].copy_into(row[1])
        assert row[1].string_value == "hello"
        row.clear()
        assert row.values() == ["", ""]

    def test_indices_follow_owners(self):
        """Should report the current position after the grid shifts."""
        doc = Document()
        doc.create_column("A")
        doc.create_column("B")
        doc.create_row()
        cell = doc.create_row()["B"]
        assert cell.indices == (1, 1)
        doc.remove_row(0)
        doc.create_column("Z", index=0)
        assert cell.row_index == 0
        assert cell.column_index == 2


class TestTypedViews:
    """Test the typed accessors under the invariant culture."""

    def test_int(self):
        """Should parse and format integers, including big ones."""
        cell = single_cell()
        cell.string_value = " -42 "
        assert cell.int_value == -42
        cell.int_value = 2 ** 40
        assert cell.string_value == "1099511627776"

    def test_int_invalid(self):
        """Should raise ValueError on text that isn't an integer."""
        cell = single_cell()
        cell.string_value = "4.2"
        with pytest.raises(ValueError):
            cell.int_value
        assert cell.try_get_int() is None

    def test_float(self):
        """Should parse decimals, exponents and thousands groups."""
        cell = single_cell()
        cell.string_value = "1.82"
        assert cell.float_value == pytest.approx(1.82)
        cell.string_value = "1,234.5"
        assert cell.float_value == pytest.approx(1234.5)
        cell.string_value = "-2.5e3"
        assert cell.float_value == -2500.0
        cell.float_value = 0.1
        assert cell.string_value == "0.1"

    def test_float_special_values(self):
        """Should accept nan and infinities."""
        cell = single_cell()
        cell.string_value = "NaN"
        assert math.isnan(cell.float_value)
        cell.string_value = "-Infinity"
        assert cell.float_value == float("-inf")

    def test_float_invalid(self):
        """Should refuse misplaced group separators and plain text."""
        cell = single_cell()
        for text in ("1,23.4", "abc", ""):
            cell.string_value = text
            assert cell.try_get_float() is None
        with pytest.raises(ValueError):
            cell.float_value

    def test_datetime(self):
        """Should parse the invariant month/day/year layout."""
        cell = single_cell()
        cell.string_value = "10/22/2000"
        assert cell.datetime_value == datetime(2000, 10, 22)
        cell.string_value = "2000-10-22T08:30:00"
        assert cell.datetime_value == datetime(2000, 10, 22, 8, 30)

    def test_datetime_write(self):
        """Should format datetimes and promote plain dates."""
        cell = single_cell()
        cell.datetime_value = datetime(1996, 8, 16, 7, 5, 9)
        assert cell.string_value == "08/16/1996 07:05:09"
        cell.datetime_value = date(1996, 8, 16)
        assert cell.datetime_value == datetime(1996, 8, 16)

    def test_datetime_invalid(self):
        """Should return None from the try variant on bad dates."""
        cell = single_cell()
        cell.string_value = "22/10/2000"
        assert cell.try_get_datetime() is None

    def test_enum(self):
        """Should match enum names case-insensitively, or by value."""
        cell = single_cell()
        cell.string_value = "green"
        assert cell.get_enum(Color) is Color.GREEN
        cell.string_value = "3"
        assert cell.get_enum(Color) is Color.BLUE
        cell.set_enum(Color.RED)
        assert cell.string_value == "RED"

    def test_enum_case_sensitive(self):
        """Should honour ignore_case=False."""
        cell = single_cell()
        cell.string_value = "green"
        assert cell.try_get_enum(Color, ignore_case=False) is None
        with pytest.raises(ValueError):
            cell.get_enum(Color, ignore_case=False)

    def test_values_are_not_cached(self):
        """Should re-parse after the string changes."""
        cell = single_cell()
        cell.string_value = "1"
        assert cell.int_value == 1
        cell.string_value = "2"
        assert cell.int_value == 2

    def test_try_variant_still_raises_on_orphan(self):
        """Should not hide orphan errors behind None."""
        cell = single_cell()
        doc = cell.column.document
        doc.remove_row(0)
        with pytest.raises(OrphanError):
            cell.try_get_int()


class TestCultures:
    """Test ParsingCulture rules and the registry."""

    def test_italian_decimals(self):
        """Should read and write a comma decimal separator."""
        cell = single_cell("it-IT")
        cell.string_value = "1.234,56"
        assert cell.float_value == pytest.approx(1234.56)
        cell.float_value = 1.76
        assert cell.string_value == "1,76"

    def test_italian_dates(self):
        """Should read day/month/year dates."""
        cell = single_cell("it-IT")
        cell.string_value = "22/10/2000"
        assert cell.datetime_value == datetime(2000, 10, 22)
        cell.datetime_value = datetime(2000, 10, 22)
        assert cell.string_value == "22/10/2000 00:00:00"

    def test_german_dates(self):
        """Should read dotted dates."""
        culture = get_culture("de-DE")
        assert culture.parse_datetime("16.08.1996") == datetime(1996, 8, 16)

    def test_french_group_separator(self):
        """Should accept a space between digit groups."""
        assert get_culture("fr-FR").parse_float("12 345,5") == pytest.approx(12345.5)

    def test_lookup_is_case_insensitive(self):
        """Should find registered cultures regardless of case."""
        assert get_culture("IT-it") is get_culture("it-IT")
        assert get_culture("invariant") is INVARIANT_CULTURE

    def test_unknown_culture(self):
        """Should raise a configuration error."""
        with pytest.raises(InvalidConfigurationError, match="Unknown parsing culture"):
            get_culture("xx-XX")

    def test_register_culture(self):
        """Should make a new culture available by name."""
        culture = register_culture(ParsingCulture(
            name="test-Swiss", decimal_separator=".", group_separator="'",
        ))
        assert get_culture("test-swiss") is culture
        assert culture.parse_float("1'000.25") == pytest.approx(1000.25)

    def test_invalid_culture(self):
        """Should reject identical decimal and group separators."""
        with pytest.raises(InvalidConfigurationError):
            ParsingCulture(name="bad", decimal_separator=",", group_separator=",")
        with pytest.raises(InvalidConfigurationError):
            ParsingCulture(name="bad", date_formats=())
