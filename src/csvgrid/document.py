"""
Document: the rows-by-columns grid.

The Document owns the ordered Columns (which own the cells) and the ordered
Rows, and is the only place where structure changes.

INVARIANTS:
    - Rectangularity: every column holds rows_count cells and every row
      spans columns_count cells, after any sequence of mutations.
    - Index contiguity: row and column indices form a dense 0..N-1 range
      matching storage order. Inserting or removing renumbers only the
      siblings at or after the mutation point.
    - Header uniqueness: non-empty headers are unique among columns.
    - Orphan lifecycle: a removed Row or Column (and every Cell in it) is
      permanently orphan; it is never reattached or renumbered.

Every mutation validates its arguments before touching storage, so a call
that raises leaves the document unmodified.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from csvgrid.cell import Cell
from csvgrid.config import DEFAULT_FORMAT, CsvFormat
from csvgrid.culture import ParsingCulture
from csvgrid.exceptions import (
    IndexOutOfRangeError,
    InvalidHeaderError,
    NoColumnsError,
    OrphanError,
    UnknownHeaderError,
)
from csvgrid.model import Column, Row


ColumnKey = Union[int, str]


def _check_int(value: object, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an integer, got {type(value).__name__}")


class Document:
    """
    Mutable in-memory table.

    Created empty (Document(), optionally with a CsvFormat), by the parser
    (csvgrid.parser.parse_string and friends), or by copy().

    Access:
        document[i]            column at index i
        document["Name"]       column with header "Name"
        document[r, c]         cell at row r, column c (index or header)
        iter(document)         columns, in order
    """

    def __init__(self, fmt: Optional[CsvFormat] = None):
        if fmt is not None and not isinstance(fmt, CsvFormat):
            raise TypeError(f"Expected a CsvFormat, got {type(fmt).__name__}")
        self._format = fmt or DEFAULT_FORMAT
        self._columns: List[Column] = []
        self._rows: List[Row] = []

    # Format

    @property
    def format(self) -> CsvFormat:
        return self._format

    @property
    def culture(self) -> ParsingCulture:
        return self._format.culture

    @property
    def separator(self) -> str:
        return self._format.separator

    @property
    def line_break(self) -> str:
        return self._format.line_break

    @property
    def escape_character(self) -> str:
        return self._format.escape_character

    # Shape

    @property
    def rows_count(self) -> int:
        return len(self._rows)

    @property
    def columns_count(self) -> int:
        return len(self._columns)

    @property
    def cells_count(self) -> int:
        return sum(len(column._cells) for column in self._columns)

    @property
    def column_headers(self) -> List[str]:
        """Non-empty headers, in column order."""
        return [c._header for c in self._columns if c._header]

    @property
    def has_headers(self) -> bool:
        return any(c._header for c in self._columns)

    def has_header(self, header: str) -> bool:
        return self._find_column(header) is not None

    # Lookup

    def _find_column(self, header: str) -> Optional[Column]:
        if not header:
            return None
        for column in self._columns:
            if column._header == header:
                return column
        return None

    def _check_header(self, header: str, exclude: Optional[Column] = None) -> None:
        if not isinstance(header, str):
            raise TypeError(f"Headers are strings, got {type(header).__name__}")
        existing = self._find_column(header)
        if existing is not None and existing is not exclude:
            raise InvalidHeaderError(f"Another column called {header!r} already exists")

    def get_column(self, key: ColumnKey) -> Column:
        """
        Column by index or by header.

        Raises:
            IndexOutOfRangeError: If the index is outside 0..columns_count-1
            UnknownHeaderError: If no column has that header
        """
        if isinstance(key, str):
            column = self._find_column(key)
            if column is None:
                raise UnknownHeaderError(f"Unknown column with header {key!r}")
            return column
        _check_int(key, "Column index")
        if key < 0 or key >= len(self._columns):
            raise IndexOutOfRangeError(
                f"Column index {key} out of range (columns_count={len(self._columns)})"
            )
        return self._columns[key]

    def try_get_column(self, key: ColumnKey) -> Optional[Column]:
        if isinstance(key, str):
            return self._find_column(key)
        _check_int(key, "Column index")
        if 0 <= key < len(self._columns):
            return self._columns[key]
        return None

    def get_columns(self) -> List[Column]:
        return list(self._columns)

    def get_row(self, index: int) -> Row:
        """
        Row by index.

        Raises:
            IndexOutOfRangeError: If the index is outside 0..rows_count-1
        """
        _check_int(index, "Row index")
        if index < 0 or index >= len(self._rows):
            raise IndexOutOfRangeError(
                f"Row index {index} out of range (rows_count={len(self._rows)})"
            )
        return self._rows[index]

    def try_get_row(self, index: int) -> Optional[Row]:
        _check_int(index, "Row index")
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def get_rows(self) -> List[Row]:
        return list(self._rows)

    @property
    def rows(self) -> Iterator[Row]:
        return iter(list(self._rows))

    def cell(self, row_index: int, column: ColumnKey) -> Cell:
        target = self.get_column(column)
        row = self.get_row(row_index)
        return target._cells[row._index]

    def __getitem__(self, key: Union[ColumnKey, Tuple[int, ColumnKey]]):
        if isinstance(key, tuple):
            if len(key) != 2:
                raise TypeError("Cell access takes exactly (row, column)")
            return self.cell(key[0], key[1])
        return self.get_column(key)

    def __iter__(self) -> Iterator[Column]:
        return iter(list(self._columns))

    # Structural mutation

    @staticmethod
    def _check_insert_position(index: int, count: int, what: str) -> None:
        _check_int(index, f"{what} index")
        if index < 0 or index > count:
            raise IndexOutOfRangeError(
                f"{what} index must be between 0 and {count}, got {index}"
            )

    def create_column(self, header: Optional[str] = None, index: Optional[int] = None) -> Column:
        """
        Insert a new column.

        Args:
            header: Optional header; must not be used by another column
            index: Insert position, 0..columns_count (default: append)

        Returns:
            The new Column. Every existing row gains an empty cell in it.

        Raises:
            IndexOutOfRangeError: If index is outside 0..columns_count
            InvalidHeaderError: If header is already used
        """
        header = header or ""
        if index is None:
            index = len(self._columns)
        self._check_insert_position(index, len(self._columns), "Column")
        self._check_header(header)

        column = Column(self, index, header)
        column._cells = [Cell(row, column) for row in self._rows]
        self._columns.insert(index, column)
        for i in range(index + 1, len(self._columns)):
            self._columns[i]._index = i
        return column

    def create_row(self, index: Optional[int] = None) -> Row:
        """
        Insert a new row of empty cells.

        Raises:
            NoColumnsError: If the document has no columns
            IndexOutOfRangeError: If index is outside 0..rows_count
        """
        if not self._columns:
            raise NoColumnsError("Can't create a row in a document without columns")
        if index is None:
            index = len(self._rows)
        self._check_insert_position(index, len(self._rows), "Row")

        row = Row(self, index)
        for column in self._columns:
            column._cells.insert(index, Cell(row, column))
        self._rows.insert(index, row)
        for i in range(index + 1, len(self._rows)):
            self._rows[i]._index = i
        return row

    def _resolve_column(self, target: Union[Column, ColumnKey]) -> Optional[Column]:
        if isinstance(target, Column):
            if target.is_orphan:
                raise OrphanError("Can't remove a column that was already removed")
            return target if target.document is self else None
        if isinstance(target, str):
            return self._find_column(target)
        return self.try_get_column(target)

    def _resolve_row(self, target: Union[Row, int]) -> Optional[Row]:
        if isinstance(target, Row):
            if target.is_orphan:
                raise OrphanError("Can't remove a row that was already removed")
            return target if target.document is self else None
        return self.try_get_row(target)

    def remove_column(self, target: Union[Column, ColumnKey]) -> bool:
        """
        Remove a column given as a Column, a header or an index.

        The column and its cells become orphan; later columns shift down by
        one.

        Returns:
            False if no such column exists in this document

        Raises:
            OrphanError: If target is a Column that was already removed
        """
        column = self._resolve_column(target)
        if column is None:
            return False
        index = column._index
        del self._columns[index]
        column._orphan()
        for i in range(index, len(self._columns)):
            self._columns[i]._index = i
        if not self._columns:
            # A grid with no columns can't hold rows.
            for row in self._rows:
                row._orphan()
            self._rows.clear()
        return True

    def remove_row(self, target: Union[Row, int]) -> bool:
        """
        Remove a row given as a Row or an index.

        The row and its cells become orphan; later rows shift up by one.

        Returns:
            False if no such row exists in this document

        Raises:
            OrphanError: If target is a Row that was already removed
        """
        row = self._resolve_row(target)
        if row is None:
            return False
        index = row._index
        for column in self._columns:
            del column._cells[index]
        del self._rows[index]
        row._orphan()
        for i in range(index, len(self._rows)):
            self._rows[i]._index = i
        return True

    def clear(self, keep_headers: bool = False) -> None:
        """
        Remove every row, and every column unless keep_headers is True.
        """
        for row in self._rows:
            row._orphan()
        self._rows.clear()
        for column in self._columns:
            column._cells.clear()
        if not keep_headers:
            for column in self._columns:
                column._orphan()
            self._columns.clear()

    # Whole-document operations

    def copy(self) -> "Document":
        """Deep copy: same format, headers and values, new handles."""
        clone = Document(self._format)
        for column in self._columns:
            clone.create_column(column._header)
        for r in range(len(self._rows)):
            clone.create_row()
            for source, target in zip(self._columns, clone._columns):
                target._cells[r]._value = source._cells[r]._value
        return clone

    def to_lists(self) -> List[List[str]]:
        """Row-major raw values (headers excluded)."""
        return [
            [column._cells[r]._value for column in self._columns]
            for r in range(len(self._rows))
        ]

    def dump(self, separator: Optional[str] = None, line_break: Optional[str] = None) -> str:
        from csvgrid.serialization import dump
        return dump(self, separator=separator, line_break=line_break)

    def dump_to_file(self, path: Union[str, Path], encoding: str = "utf-8") -> None:
        from csvgrid.serialization import dump_to_file
        dump_to_file(self, path, encoding=encoding)

    def map_to_type(self, record_type: type, start_row_index: int = 0,
                    limit: Optional[int] = None) -> list:
        """Map rows to records (see csvgrid.mapping.map_document)."""
        from csvgrid.mapping import map_document
        return map_document(self, record_type, start_row_index=start_row_index, limit=limit)

    def __repr__(self) -> str:
        return f"Document({self.rows_count}x{self.columns_count})"
