"""
Cell: a single textual value inside a Document.

A Cell stores its string value and the handles of its owning Row and Column.
It has no position of its own: its indices are always read through the
owners, so renumbering a row or column moves every cell it contains.

Typed views (int, float, datetime, enum) are parsed from the string through
the owning Document's ParsingCulture on every access, and written back
through the same culture's formatting. Nothing is cached.

A Cell is orphan as soon as its Row or its Column is orphan. Every value or
positional operation on an orphan cell raises OrphanError.
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple, Type, TypeVar, Union, TYPE_CHECKING

from csvgrid.exceptions import OrphanError

if TYPE_CHECKING:
    from csvgrid.culture import ParsingCulture
    from csvgrid.model import Column, Row


E = TypeVar("E", bound=Enum)


class Cell:
    """
    One value of the grid.

    Properties:
        row / column:
            Owning handles. Always available, even on an orphan cell, so the
            caller can inspect what the cell used to belong to.

        string_value:
            The raw text. Never None; "" means "no value".

    Typed accessors raise ValueError when the text can't be parsed under the
    document's culture; the try_get_* variants return None instead.
    """

    def __init__(self, row: "Row", column: "Column", value: str = ""):
        self._row = row
        self._column = column
        self._value = value

    @property
    def row(self) -> "Row":
        return self._row

    @property
    def column(self) -> "Column":
        return self._column

    @property
    def is_orphan(self) -> bool:
        return self._row.is_orphan or self._column.is_orphan

    def _ensure_live(self) -> None:
        if self.is_orphan:
            raise OrphanError("Can't access a cell whose row or column was removed")

    @property
    def _culture(self) -> "ParsingCulture":
        self._ensure_live()
        return self._column.document.culture

    # Position

    @property
    def row_index(self) -> int:
        self._ensure_live()
        return self._row.index

    @property
    def column_index(self) -> int:
        self._ensure_live()
        return self._column.index

    @property
    def indices(self) -> Tuple[int, int]:
        """(row index, column index)"""
        self._ensure_live()
        return self._row.index, self._column.index

    # Raw value

    @property
    def string_value(self) -> str:
        self._ensure_live()
        return self._value

    @string_value.setter
    def string_value(self, value: Optional[str]) -> None:
        self._ensure_live()
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise TypeError(f"Cell values are strings, got {type(value).__name__}")
        self._value = value

    @property
    def is_empty(self) -> bool:
        return self.string_value == ""

    def clear(self) -> None:
        self.string_value = ""

    def copy_into(self, cell: "Cell") -> None:
        """Copy this cell's raw value into another cell."""
        cell.string_value = self.string_value

    # Typed views

    @property
    def int_value(self) -> int:
        return self._culture.parse_int(self._value)

    @int_value.setter
    def int_value(self, value: int) -> None:
        self.string_value = self._culture.format_int(value)

    @property
    def float_value(self) -> float:
        return self._culture.parse_float(self._value)

    @float_value.setter
    def float_value(self, value: float) -> None:
        self.string_value = self._culture.format_float(value)

    @property
    def datetime_value(self) -> datetime:
        return self._culture.parse_datetime(self._value)

    @datetime_value.setter
    def datetime_value(self, value: Union[datetime, date]) -> None:
        self.string_value = self._culture.format_datetime(value)

    def get_enum(self, enum_type: Type[E], ignore_case: bool = True) -> E:
        return self._culture.parse_enum(enum_type, self._value, ignore_case)

    def set_enum(self, value: Enum) -> None:
        self.string_value = self._culture.format_enum(value)

    def try_get_int(self) -> Optional[int]:
        culture = self._culture
        try:
            return culture.parse_int(self._value)
        except ValueError:
            return None

    def try_get_float(self) -> Optional[float]:
        culture = self._culture
        try:
            return culture.parse_float(self._value)
        except ValueError:
            return None

    def try_get_datetime(self) -> Optional[datetime]:
        culture = self._culture
        try:
            return culture.parse_datetime(self._value)
        except ValueError:
            return None

    def try_get_enum(self, enum_type: Type[E], ignore_case: bool = True) -> Optional[E]:
        culture = self._culture
        try:
            return culture.parse_enum(enum_type, self._value, ignore_case)
        except ValueError:
            return None

    def __repr__(self) -> str:
        if self.is_orphan:
            return f"Cell({self._value!r}, orphan)"
        return f"Cell({self._value!r}, ({self._row.index}, {self._column.index}))"
