"""
Delimited-text parser (raw text → Document).

A single left-to-right pass over the input with one character of lookahead:

    - Escape character followed by another escape character:
        one literal escape character is appended, both are consumed.
    - Lone escape character:
        toggles the "inside quoted region" flag; nothing is appended.
    - Any other character:
        appended to the cell buffer. Outside a quoted region, the buffer tail
        is then compared with the separator and the line break (both may be
        multi-character). A separator commits the cell; a line break commits
        the cell and the line.

Quoted text protects the buffer prefix it produced: a delimiter only matches
when it lies entirely after the last closing quote, so a quoted character
can never complete a separator or a line break.

End of input:
    The pending line is committed if at least one character was consumed
    since the last line break. A trailing line break therefore adds no row,
    while a trailing separator adds a final empty cell. An unterminated
    quoted region is committed as-is.

Shape:
    Lines shorter than the document width are padded with empty cells; a
    line wider than every previous one grows the document with header-less
    columns.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, List, Optional, Union

from csvgrid.config import DEFAULT_FORMAT, CsvFormat
from csvgrid.document import Document


logger = logging.getLogger(__name__)


def _ends_with(buffer: List[str], token: str, protected: int) -> bool:
    """True if buffer ends with token and the match starts at or after `protected`."""
    start = len(buffer) - len(token)
    if start < protected:
        return False
    for offset, ch in enumerate(token):
        if buffer[start + offset] != ch:
            return False
    return True


def split_records(content: str, fmt: Optional[CsvFormat] = None) -> List[List[str]]:
    """
    Tokenize content into lines of decoded field values.

    This is the parsing pass on its own; parse_string() feeds its output
    into a Document.

    Args:
        content: Raw delimited text
        fmt: Dialect (defaults to DEFAULT_FORMAT)

    Returns:
        One list of field values per logical line. Lines are never empty:
        a blank line yields [""].
    """
    if not isinstance(content, str):
        raise TypeError(f"Expected text content, got {type(content).__name__}")
    fmt = fmt or DEFAULT_FORMAT
    separator = fmt.separator
    line_break = fmt.line_break
    escape = fmt.escape_character

    records: List[List[str]] = []
    record: List[str] = []
    buffer: List[str] = []
    quoted = False
    protected = 0
    pending = False

    i = 0
    n = len(content)
    while i < n:
        ch = content[i]
        pending = True

        if ch == escape:
            if i + 1 < n and content[i + 1] == escape:
                buffer.append(escape)
                i += 2
            else:
                quoted = not quoted
                if not quoted:
                    protected = len(buffer)
                i += 1
            continue

        buffer.append(ch)
        i += 1
        if quoted:
            continue

        if _ends_with(buffer, separator, protected):
            del buffer[len(buffer) - len(separator):]
            record.append("".join(buffer))
        elif _ends_with(buffer, line_break, protected):
            del buffer[len(buffer) - len(line_break):]
            record.append("".join(buffer))
            records.append(record)
            record = []
            pending = False
        else:
            continue

        buffer.clear()
        protected = 0

    if pending:
        record.append("".join(buffer))
        records.append(record)

    return records


def _build_document(records: List[List[str]], fmt: CsvFormat) -> Document:
    document = Document(fmt)
    if not records:
        return document

    if fmt.first_line_is_headers:
        headers, records = records[0], records[1:]
        for header in headers:
            document.create_column(header)

    for values in records:
        while document.columns_count < len(values):
            document.create_column()
        row = document.create_row()
        for cell, value in zip(row, values):
            cell.string_value = value

    return document


def parse_string(content: str, fmt: Optional[CsvFormat] = None) -> Document:
    """
    Parse delimited text into a Document.

    Args:
        content: Raw text
        fmt: Dialect (defaults to DEFAULT_FORMAT: ",", "\\n", '"', headers on)

    Returns:
        Populated Document. An empty input gives an empty Document.

    Raises:
        InvalidHeaderError: If the header line repeats a non-empty header
    """
    fmt = fmt or DEFAULT_FORMAT
    records = split_records(content, fmt)
    document = _build_document(records, fmt)
    logger.debug(
        "Parsed %d characters into %d rows x %d columns",
        len(content), document.rows_count, document.columns_count,
    )
    return document


def parse_file(path: Union[str, Path], fmt: Optional[CsvFormat] = None,
               encoding: str = "utf-8") -> Document:
    """
    Parse a delimited-text file into a Document.

    Line endings are read untranslated, so "\\r\\n" line breaks survive.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    logger.debug("Reading CSV file %s", path)
    try:
        with open(path, "r", encoding=encoding, newline="") as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"CSV file not found: {path}")
    return parse_string(content, fmt)


def parse_stream(stream: IO, fmt: Optional[CsvFormat] = None,
                 encoding: str = "utf-8") -> Document:
    """
    Parse the remaining contents of a text or binary stream.

    Binary content is decoded with `encoding`.
    """
    if stream is None:
        raise TypeError("Stream cannot be None")
    content = stream.read()
    if isinstance(content, (bytes, bytearray)):
        content = bytes(content).decode(encoding)
    return parse_string(content, fmt)


__all__ = [
    "split_records",
    "parse_string",
    "parse_file",
    "parse_stream",
]
