"""
Row and Column: the indexed cell collections of a Document.

Both are handles owned by a Document. A handle holds its document and its
current index; the Document renumbers the index on every structural
mutation and sets it to None when the handle is removed.

ARCHITECTURAL RULE:
    _live_index() is the only liveness gate. Every positional or value
    operation on a Row, a Column, or (transitively) a Cell goes through it,
    so an orphan handle can never report a stale index or value.

Handles are created only by the Document's mutation API.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Union, TYPE_CHECKING

from csvgrid.cell import Cell
from csvgrid.exceptions import IndexOutOfRangeError, OrphanError

if TYPE_CHECKING:
    from csvgrid.document import Document


class IndexedCellsCollection(ABC):
    """
    Ordered, 0-based collection of cells with a position in its Document.

    Properties:
        document: Owning document (kept after the handle is orphaned)
        index: Position among siblings (raises OrphanError once removed)
        count: Number of cells
    """

    _kind = "collection"

    def __init__(self, document: "Document", index: int):
        self._document = document
        self._index: Optional[int] = index

    @property
    def document(self) -> "Document":
        return self._document

    @property
    def is_orphan(self) -> bool:
        return self._index is None

    def _live_index(self) -> int:
        if self._index is None:
            raise OrphanError(f"Can't access a {self._kind} that was removed from its document")
        return self._index

    def _orphan(self) -> None:
        self._index = None

    @property
    def index(self) -> int:
        return self._live_index()

    @property
    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def _cell_at(self, safe_index: int) -> Cell:
        ...

    def __len__(self) -> int:
        return self.count

    def _check_position(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Cell positions are integers, got {type(index).__name__}")
        count = self.count
        if index < 0 or index >= count:
            raise IndexOutOfRangeError(
                f"Index {index} out of range for {self._kind} with {count} cells"
            )

    def __getitem__(self, index: int) -> Cell:
        self._check_position(index)
        return self._cell_at(index)

    def __iter__(self) -> Iterator[Cell]:
        for i in range(self.count):
            yield self._cell_at(i)

    @abstractmethod
    def __contains__(self, cell: object) -> bool:
        ...

    def values(self) -> List[str]:
        """Raw string values, in order."""
        return [cell.string_value for cell in self]

    def clear(self) -> None:
        """Empty every cell of the collection (the cells themselves stay)."""
        for cell in self:
            cell.clear()


class Row(IndexedCellsCollection):
    """
    A row of the grid.

    A Row owns no storage: cell i of the row is cell `row.index` of column i.
    Cells can be addressed by column index or by column header.
    """

    _kind = "row"

    @property
    def count(self) -> int:
        self._live_index()
        return self._document.columns_count

    def _cell_at(self, safe_index: int) -> Cell:
        return self._document._columns[safe_index]._cells[self._live_index()]

    def __getitem__(self, key: Union[int, str]) -> Cell:
        if isinstance(key, str):
            index = self._live_index()
            return self._document.get_column(key)._cells[index]
        return super().__getitem__(key)

    def __contains__(self, cell: object) -> bool:
        return isinstance(cell, Cell) and cell.row is self and not cell.is_orphan

    def has_header(self, header: str) -> bool:
        return self._document.has_header(header)

    def map(self, record_type: type):
        """Map this row to a record (see csvgrid.mapping.map_row)."""
        from csvgrid.mapping import map_row
        return map_row(self, record_type)

    def try_map(self, record_type: type):
        from csvgrid.mapping import try_map_row
        return try_map_row(self, record_type)

    def __repr__(self) -> str:
        if self.is_orphan:
            return "Row(orphan)"
        return f"Row({self._index}, {self.count})"


class Column(IndexedCellsCollection):
    """
    A column of the grid. Owns the cells it contains, one per row.

    Properties:
        header:
            Optional name. "" means no header. A non-empty header must be
            unique within the document; assigning a duplicate raises
            InvalidHeaderError and leaves the header unchanged.
    """

    _kind = "column"

    def __init__(self, document: "Document", index: int, header: str = ""):
        super().__init__(document, index)
        self._header = header
        self._cells: List[Cell] = []

    @property
    def header(self) -> str:
        self._live_index()
        return self._header

    @header.setter
    def header(self, value: Optional[str]) -> None:
        self._live_index()
        value = value or ""
        self._document._check_header(value, exclude=self)
        self._header = value

    @property
    def count(self) -> int:
        self._live_index()
        return len(self._cells)

    def _cell_at(self, safe_index: int) -> Cell:
        return self._cells[safe_index]

    def __contains__(self, cell: object) -> bool:
        return isinstance(cell, Cell) and cell.column is self and not cell.is_orphan

    def __repr__(self) -> str:
        if self.is_orphan:
            return f"Column(orphan, {self._header!r})"
        return f"Column({self._index}, {self._header!r}, {len(self._cells)})"
