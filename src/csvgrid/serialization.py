"""
Serialization of a Document back to delimited text.

Row-major: a header line, then one line per row. The header line is written
when some column has a header, or when the format reads its first line as
headers (even if every header is empty, so the first row is not taken for
headers on re-parse). Fields are separator-joined and lines are
line-break-joined, with no trailing line break after the last row.

Quoting is added only where the parser needs it to read the value back:

    - every escape character inside a value is doubled;
    - a value is wrapped in escape characters when it contains the
      separator or the line break, or when its tail and the delimiter that
      follows it would together spell a delimiter early.

Under these rules parse(dump(doc), doc.format) reproduces doc value-for-value,
with two exceptions:

    - in a single-column document an empty last line (the last row, or an
      empty header with no rows) can't be told from no line at all;
    - named headers under a format without a header line come back as an
      extra first row.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import IO, Iterable, List, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from csvgrid.document import Document


logger = logging.getLogger(__name__)


def _straddles(value: str, following: str, token: str) -> bool:
    """True if token would match across the end of value and the start of following."""
    if not following:
        return False
    joined = value + following
    pos = joined.find(token, max(0, len(value) - len(token) + 1))
    return pos != -1 and pos < len(value)


def encode_value(value: str, separator: str, line_break: str, escape: str,
                 following: str = "") -> str:
    """
    Encode one field value.

    Args:
        value: Raw cell value
        separator / line_break / escape: Dialect
        following: Delimiter emitted right after this field ("" at end of text)
    """
    must_quote = (
        separator in value
        or line_break in value
        or _straddles(value, following, separator)
        or _straddles(value, following, line_break)
    )
    if escape in value:
        value = value.replace(escape, escape * 2)
    if must_quote:
        return f"{escape}{value}{escape}"
    return value


def _encode_line(values: List[str], separator: str, line_break: str, escape: str,
                 is_last: bool) -> str:
    parts = []
    last = len(values) - 1
    for i, value in enumerate(values):
        if i < last:
            following = separator
        else:
            following = "" if is_last else line_break
        parts.append(encode_value(value, separator, line_break, escape, following))
    return separator.join(parts)


def iter_lines(document: "Document", separator: Optional[str] = None,
               line_break: Optional[str] = None) -> Iterable[str]:
    """Yield encoded lines (without line breaks), header line first."""
    fmt = document.format
    if separator or line_break:
        # Validates the overridden dialect before anything is written.
        fmt = fmt.replace(separator=separator or fmt.separator,
                          line_break=line_break or fmt.line_break)
    separator = fmt.separator
    line_break = fmt.line_break
    escape = fmt.escape_character

    rows = document.to_lists()
    if document.has_headers or (fmt.first_line_is_headers and document.columns_count):
        headers = [column.header for column in document]
        yield _encode_line(headers, separator, line_break, escape, is_last=not rows)
    for r, values in enumerate(rows):
        yield _encode_line(values, separator, line_break, escape, is_last=r == len(rows) - 1)


def dump(document: "Document", separator: Optional[str] = None,
         line_break: Optional[str] = None) -> str:
    """
    Serialize a Document to text.

    Args:
        document: Document to serialize
        separator: Override the document's separator
        line_break: Override the document's line break

    Returns:
        Delimited text without a trailing line break
    """
    line_break = line_break or document.line_break
    text = line_break.join(iter_lines(document, separator, line_break))
    logger.debug(
        "Dumped %d rows x %d columns into %d characters",
        document.rows_count, document.columns_count, len(text),
    )
    return text


def dump_to_file(document: "Document", path: Union[str, Path], encoding: str = "utf-8") -> None:
    """Write dump(document) to path. Line breaks are written untranslated."""
    path = Path(path)
    logger.debug("Writing CSV file %s", path)
    with open(path, "w", encoding=encoding, newline="") as f:
        f.write(dump(document))


def dump_to_stream(document: "Document", stream: IO, encoding: str = "utf-8") -> None:
    """Write dump(document) to a text stream, or encoded to a binary one."""
    text = dump(document)
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        stream.write(text.encode(encoding))
    else:
        stream.write(text)


__all__ = [
    "encode_value",
    "iter_lines",
    "dump",
    "dump_to_file",
    "dump_to_stream",
]
