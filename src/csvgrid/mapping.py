"""
Mapping protocol: converting between Rows and structured records.

A RowMapper is a pluggable strategy with two directions:

    try_map_row(row)                  -> record, or None on failure
    try_map_record(record, document)  -> list of column-aligned strings, or None

The default strategy, RecordMapper, is driven by an explicit descriptor
table (one FieldMapping per record field) built once per record type. It
resolves fields to columns in two passes:

    1. exact field-name or declared-alias match against column headers;
    2. remaining fields paired with remaining columns, in declaration order.

RecordMapper.for_dataclass() builds the table from a dataclass:

    @dataclass
    class Person:
        appellative: str = field(default="", metadata={"csv_header": "Name"})
        height: float = 0.0
        notes: str = field(default="", metadata={"csv_ignore": True})

Custom mappers are attached to a record type with register_mapper(), or
with the csv_mapper() class decorator.

This layer only reads headers and row cells; the Document does not depend
on it beyond the map_to_type() convenience.
"""
from __future__ import annotations

import dataclasses
import logging
import types
import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from csvgrid.culture import ParsingCulture
from csvgrid.exceptions import IndexOutOfRangeError, RowMappingError

if TYPE_CHECKING:
    from csvgrid.cell import Cell
    from csvgrid.document import Document
    from csvgrid.model import Row


logger = logging.getLogger(__name__)


class RowMapper(ABC):
    """Strategy converting a Row to a record and a record back to row values."""

    @abstractmethod
    def try_map_row(self, row: "Row") -> Optional[Any]:
        ...

    @abstractmethod
    def try_map_record(self, record: Any, document: "Document") -> Optional[List[str]]:
        ...


@dataclass(frozen=True)
class FieldMapping:
    """
    One entry of a descriptor table.

    Properties:
        name: Record field (also the constructor keyword)
        parse: Reads the field value from a Cell
        format: Writes a field value as text under a culture
        aliases: Extra header names matched in the first pass
    """

    name: str
    parse: Callable[["Cell"], Any]
    format: Callable[[Any, ParsingCulture], str]
    aliases: Tuple[str, ...] = ()


_READERS: Dict[type, Callable[["Cell"], Any]] = {
    str: lambda cell: cell.string_value,
    int: lambda cell: cell.int_value,
    float: lambda cell: cell.float_value,
    datetime: lambda cell: cell.datetime_value,
    date: lambda cell: cell.datetime_value.date(),
}

_WRITERS: Dict[type, Callable[[Any, ParsingCulture], str]] = {
    str: lambda value, culture: str(value),
    int: lambda value, culture: culture.format_int(value),
    float: lambda value, culture: culture.format_float(value),
    datetime: lambda value, culture: culture.format_datetime(value),
    date: lambda value, culture: culture.format_datetime(value),
}


def _unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    if typing.get_origin(tp) in (typing.Union, getattr(types, "UnionType", typing.Union)):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return tp, False


def field_mapping_for_type(name: str, tp: Any, aliases: Iterable[str] = ()) -> FieldMapping:
    """
    Build the FieldMapping of a field typed `tp`.

    Supported: str, int, float, datetime, date, Enum subclasses, and
    Optional[...] of those (an empty cell reads as None, None writes "").

    Raises:
        RowMappingError: If the type has no cell conversion
    """
    inner, optional = _unwrap_optional(tp)

    if isinstance(inner, type) and issubclass(inner, Enum):
        enum_type = inner
        parse = lambda cell: cell.get_enum(enum_type)
        fmt = lambda value, culture: culture.format_enum(value)
    elif inner in _READERS:
        parse = _READERS[inner]
        fmt = _WRITERS[inner]
    else:
        raise RowMappingError(f"Field {name!r}: no cell conversion for type {tp!r}")

    if optional:
        required_parse, required_fmt = parse, fmt
        parse = lambda cell: None if cell.is_empty else required_parse(cell)
        fmt = lambda value, culture: "" if value is None else required_fmt(value, culture)

    return FieldMapping(name=name, parse=parse, format=fmt, aliases=tuple(aliases))


class RecordMapper(RowMapper):
    """
    Default two-pass mapper over an explicit descriptor table.

    Args:
        factory: Called with the mapped fields as keyword arguments
        fields: Descriptor table, in declaration order

    Resolution of fields to columns depends only on the document's headers
    and is cached per distinct header tuple.
    """

    def __init__(self, factory: Callable[..., Any], fields: Sequence[FieldMapping]):
        self._factory = factory
        self._fields: Tuple[FieldMapping, ...] = tuple(fields)
        self._by_name: Dict[str, FieldMapping] = {}
        self._by_alias: Dict[str, FieldMapping] = {}
        for fm in self._fields:
            if fm.name in self._by_name:
                raise RowMappingError(f"Duplicate field {fm.name!r} in mapping table")
            self._by_name[fm.name] = fm
            for alias in fm.aliases:
                if alias:
                    self._by_alias[alias] = fm
        self._resolved: Dict[Tuple[str, ...], Dict[int, FieldMapping]] = {}

    @classmethod
    def for_dataclass(cls, record_type: type) -> "RecordMapper":
        """
        Build the descriptor table of a dataclass.

        Field metadata:
            csv_header: header alias matched in the first pass
            csv_ignore: skip the field entirely
        """
        if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
            raise RowMappingError(f"{record_type!r} is not a dataclass")
        hints = typing.get_type_hints(record_type)
        table = []
        for f in dataclasses.fields(record_type):
            if not f.init or f.metadata.get("csv_ignore"):
                continue
            header = f.metadata.get("csv_header")
            table.append(field_mapping_for_type(f.name, hints.get(f.name, str),
                                                (header,) if header else ()))
        return cls(record_type, table)

    @property
    def field_names(self) -> List[str]:
        return [fm.name for fm in self._fields]

    def resolve(self, document: "Document") -> Dict[int, FieldMapping]:
        """Column index -> FieldMapping for the document's current headers."""
        headers = tuple(column.header for column in document)
        cached = self._resolved.get(headers)
        if cached is not None:
            return cached

        mapping: Dict[int, FieldMapping] = {}
        used = set()

        # First pass - headers against aliases, then field names
        for index, header in enumerate(headers):
            if not header:
                continue
            fm = self._by_alias.get(header) or self._by_name.get(header)
            if fm is None or fm.name in used:
                continue
            mapping[index] = fm
            used.add(fm.name)

        # Second pass - declaration order
        remaining = iter([fm for fm in self._fields if fm.name not in used])
        for index in range(len(headers)):
            if index in mapping:
                continue
            fm = next(remaining, None)
            if fm is None:
                break
            mapping[index] = fm

        logger.debug(
            "Resolved %s columns: %s",
            getattr(self._factory, "__name__", self._factory),
            {i: fm.name for i, fm in sorted(mapping.items())},
        )
        self._resolved[headers] = mapping
        return mapping

    def try_map_row(self, row: "Row") -> Optional[Any]:
        mapping = self.resolve(row.document)
        kwargs = {}
        for index, fm in mapping.items():
            try:
                kwargs[fm.name] = fm.parse(row[index])
            except ValueError as e:
                logger.debug("Row %d, field %s: %s", row.index, fm.name, e)
                return None
        try:
            return self._factory(**kwargs)
        except (TypeError, ValueError) as e:
            logger.debug("Row %d: can't build record: %s", row.index, e)
            return None

    def try_map_record(self, record: Any, document: "Document") -> Optional[List[str]]:
        values = [""] * document.columns_count
        culture = document.culture
        for index, fm in self.resolve(document).items():
            try:
                values[index] = fm.format(getattr(record, fm.name), culture)
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug("Field %s: can't write value: %s", fm.name, e)
                return None
        return values


_REGISTERED: Dict[type, RowMapper] = {}
_DEFAULTS: Dict[type, RowMapper] = {}


def register_mapper(record_type: type, mapper: RowMapper) -> None:
    """Attach a custom mapper to a record type."""
    if not isinstance(mapper, RowMapper):
        raise TypeError(f"Expected a RowMapper, got {type(mapper).__name__}")
    _REGISTERED[record_type] = mapper


def csv_mapper(mapper_factory: Callable[[], RowMapper]):
    """
    Class decorator registering mapper_factory() as the type's mapper.

    Example:
        @csv_mapper(PersonMapper)
        class Person: ...
    """
    def decorate(record_type: type) -> type:
        register_mapper(record_type, mapper_factory())
        return record_type
    return decorate


def get_mapper(record_type: type) -> RowMapper:
    """
    Registered mapper of record_type, or the default dataclass mapper.

    Raises:
        RowMappingError: If nothing is registered and record_type is not a dataclass
    """
    mapper = _REGISTERED.get(record_type) or _DEFAULTS.get(record_type)
    if mapper is None:
        mapper = RecordMapper.for_dataclass(record_type)
        _DEFAULTS[record_type] = mapper
    return mapper


def try_map_row(row: "Row", record_type: type) -> Optional[Any]:
    return get_mapper(record_type).try_map_row(row)


def map_row(row: "Row", record_type: type) -> Any:
    """
    Map a row to a record_type instance.

    Raises:
        RowMappingError: If the mapper fails
    """
    record = get_mapper(record_type).try_map_row(row)
    if record is None:
        raise RowMappingError(f"Unable to map row {row.index} to type {record_type.__name__}")
    return record


def map_document(document: "Document", record_type: type, start_row_index: int = 0,
                 limit: Optional[int] = None) -> List[Any]:
    """
    Map consecutive rows, starting at start_row_index, to records.

    Raises:
        IndexOutOfRangeError: If start_row_index is outside 0..rows_count
        RowMappingError: For the first row that can't be mapped
    """
    if start_row_index < 0 or start_row_index > document.rows_count:
        raise IndexOutOfRangeError(
            f"Start row {start_row_index} out of range (rows_count={document.rows_count})"
        )
    mapper = get_mapper(record_type)
    end = document.rows_count
    if limit is not None:
        end = min(end, start_row_index + max(limit, 0))

    records = []
    for i in range(start_row_index, end):
        record = mapper.try_map_row(document.get_row(i))
        if record is None:
            raise RowMappingError(f"Unable to map row {i} to type {record_type.__name__}")
        records.append(record)
    return records


def write_records(document: "Document", records: Iterable[Any],
                  record_type: Optional[type] = None) -> List["Row"]:
    """
    Append one row per record, using the inverse mapping.

    A document with no columns first gets one column per mapped field,
    headed by the field name. Every record is converted before the first
    row is created, so a failing record leaves the document as it was.

    Raises:
        RowMappingError: If a record can't be converted
    """
    records = list(records)
    if not records:
        return []
    mappers = [get_mapper(record_type or type(record)) for record in records]

    added = []
    if document.columns_count == 0 and isinstance(mappers[0], RecordMapper):
        added = [document.create_column(name) for name in mappers[0].field_names]

    lines = []
    for record, mapper in zip(records, mappers):
        values = mapper.try_map_record(record, document)
        if values is None:
            for column in added:
                document.remove_column(column)
            raise RowMappingError(f"Unable to map record {record!r} to a row")
        lines.append(values)

    rows = []
    for values in lines:
        row = document.create_row()
        for cell, value in zip(row, values):
            cell.string_value = value
        rows.append(row)
    return rows


__all__ = [
    "RowMapper",
    "FieldMapping",
    "RecordMapper",
    "field_mapping_for_type",
    "register_mapper",
    "csv_mapper",
    "get_mapper",
    "map_row",
    "try_map_row",
    "map_document",
    "write_records",
]
