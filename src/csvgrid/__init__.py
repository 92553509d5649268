"""
csvgrid: a mutable in-memory table for delimited text.

The Document is the hub:

    parser          text  -> Document   (parse_string, parse_file, parse_stream)
    Document        rows, columns and cells, addressable by index or header
    serialization   Document -> text    (dump, dump_to_file)
    mapping         Row <-> record      (map_row, map_document, write_records)

ARCHITECTURAL GUARANTEE:
------------------------
The grid stays rectangular, its indices stay contiguous, and its non-empty
headers stay unique across any sequence of mutations. Removed rows, columns
and cells are orphaned for good and fail loudly when used.
"""

from csvgrid.cell import Cell
from csvgrid.config import (
    CsvBuilder,
    CsvFormat,
    DEFAULT_FORMAT,
    format_from_dict,
    format_from_yaml,
    load_format,
)
from csvgrid.culture import INVARIANT_CULTURE, ParsingCulture, get_culture, register_culture
from csvgrid.document import Document
from csvgrid.exceptions import (
    CsvError,
    IndexOutOfRangeError,
    InvalidConfigurationError,
    InvalidHeaderError,
    NoColumnsError,
    OrphanError,
    RowMappingError,
    StructuralAccessError,
    UnknownHeaderError,
)
from csvgrid.mapping import (
    FieldMapping,
    RecordMapper,
    RowMapper,
    csv_mapper,
    map_document,
    map_row,
    register_mapper,
    try_map_row,
    write_records,
)
from csvgrid.model import Column, IndexedCellsCollection, Row
from csvgrid.parser import parse_file, parse_stream, parse_string
from csvgrid.serialization import dump, dump_to_file, dump_to_stream

__version__ = "0.1.0"

__all__ = [
    "Cell",
    "Column",
    "CsvBuilder",
    "CsvError",
    "CsvFormat",
    "DEFAULT_FORMAT",
    "Document",
    "FieldMapping",
    "INVARIANT_CULTURE",
    "IndexOutOfRangeError",
    "IndexedCellsCollection",
    "InvalidConfigurationError",
    "InvalidHeaderError",
    "NoColumnsError",
    "OrphanError",
    "ParsingCulture",
    "RecordMapper",
    "Row",
    "RowMapper",
    "RowMappingError",
    "StructuralAccessError",
    "UnknownHeaderError",
    "csv_mapper",
    "dump",
    "dump_to_file",
    "dump_to_stream",
    "format_from_dict",
    "format_from_yaml",
    "get_culture",
    "load_format",
    "map_document",
    "map_row",
    "parse_file",
    "parse_stream",
    "parse_string",
    "register_culture",
    "register_mapper",
    "try_map_row",
    "write_records",
]
