"""
Format configuration for csvgrid.

CsvFormat is the single, validated description of a delimited-text dialect:

    separator              field separator (any non-empty string)
    line_break             record separator (any non-empty string)
    escape_character       the one character used to quote fields
    first_line_is_headers  whether the first line holds column headers
    culture                ParsingCulture used by typed cell accessors

Validation happens when the CsvFormat is constructed, so a bad combination
is reported before any text is parsed.

Formats can be built directly, through the fluent CsvBuilder, or loaded from
dict / JSON / YAML. The dict layout is explicit and stable, mirroring the
to_dict / from_dict layering used for every serialized object.
"""
from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union, TYPE_CHECKING

import yaml

from csvgrid.culture import INVARIANT_CULTURE, ParsingCulture, get_culture
from csvgrid.exceptions import InvalidConfigurationError

if TYPE_CHECKING:
    from csvgrid.document import Document


logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = ","
DEFAULT_LINE_BREAK = "\n"
DEFAULT_ESCAPE_CHARACTER = '"'


@dataclass(frozen=True)
class CsvFormat:
    """
    Validated dialect description.

    INVARIANTS (checked in __post_init__):
        - separator and line_break are non-empty strings
        - escape_character is exactly one character
        - separator != line_break, and neither contains the other
        - neither delimiter contains the escape character

    Raises:
        InvalidConfigurationError: If any invariant does not hold
    """

    separator: str = DEFAULT_SEPARATOR
    line_break: str = DEFAULT_LINE_BREAK
    escape_character: str = DEFAULT_ESCAPE_CHARACTER
    first_line_is_headers: bool = True
    culture: ParsingCulture = field(default=INVARIANT_CULTURE)

    def __post_init__(self):
        if not isinstance(self.separator, str) or not self.separator:
            raise InvalidConfigurationError("Can't use a null or empty separator")
        if not isinstance(self.line_break, str) or not self.line_break:
            raise InvalidConfigurationError("Can't use a null or empty line break")
        if not isinstance(self.escape_character, str) or len(self.escape_character) != 1:
            raise InvalidConfigurationError(
                f"Escape character must be a single character, got {self.escape_character!r}"
            )
        if self.separator == self.line_break:
            raise InvalidConfigurationError("Separator and line break cannot be the same value")
        if self.separator in self.line_break or self.line_break in self.separator:
            raise InvalidConfigurationError(
                f"Separator {self.separator!r} and line break {self.line_break!r} cannot contain each other"
            )
        if self.escape_character in self.separator:
            raise InvalidConfigurationError("Separator cannot contain the escape character")
        if self.escape_character in self.line_break:
            raise InvalidConfigurationError("Line break cannot contain the escape character")
        if not isinstance(self.culture, ParsingCulture):
            raise InvalidConfigurationError(
                f"Culture must be a ParsingCulture, got {type(self.culture).__name__}"
            )

    def replace(self, **changes: Any) -> "CsvFormat":
        """Return a validated copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


DEFAULT_FORMAT = CsvFormat()


class CsvBuilder:
    """
    Fluent front-end over CsvFormat.

    Each using_*/with_* call returns a new builder, so partially configured
    builders can be shared. Empty delimiters are rejected by the call that
    sets them; cross-field checks run when build() creates the CsvFormat,
    which every terminal operation does before touching the input.

    Example:
        doc = CsvBuilder().using_separator(";").with_first_line_as_headers(False).parse(text)
    """

    def __init__(self, fmt: Optional[CsvFormat] = None):
        fmt = fmt or DEFAULT_FORMAT
        self._settings: Dict[str, Any] = {
            f.name: getattr(fmt, f.name) for f in dataclasses.fields(fmt)
        }

    def _with(self, **changes: Any) -> "CsvBuilder":
        builder = CsvBuilder.__new__(CsvBuilder)
        builder._settings = {**self._settings, **changes}
        return builder

    def using_separator(self, separator: str) -> "CsvBuilder":
        if not separator:
            raise InvalidConfigurationError("Can't use a null or empty separator")
        return self._with(separator=separator)

    def using_line_break(self, line_break: str) -> "CsvBuilder":
        if not line_break:
            raise InvalidConfigurationError("Can't use a null or empty line break")
        return self._with(line_break=line_break)

    def using_escape_character(self, escape_character: str) -> "CsvBuilder":
        return self._with(escape_character=escape_character)

    def using_parsing_culture(self, culture: Union[ParsingCulture, str]) -> "CsvBuilder":
        if culture is None:
            raise InvalidConfigurationError("Parsing culture cannot be None")
        if isinstance(culture, str):
            culture = get_culture(culture)
        return self._with(culture=culture)

    def with_first_line_as_headers(self, first_line_is_headers: bool) -> "CsvBuilder":
        return self._with(first_line_is_headers=bool(first_line_is_headers))

    def build(self) -> CsvFormat:
        return CsvFormat(**self._settings)

    def empty(self) -> "Document":
        from csvgrid.document import Document
        return Document(self.build())

    def parse(self, content: str) -> "Document":
        from csvgrid.parser import parse_string
        return parse_string(content, self.build())

    def from_file(self, path: Union[str, Path], encoding: str = "utf-8") -> "Document":
        from csvgrid.parser import parse_file
        return parse_file(path, self.build(), encoding=encoding)

    def from_stream(self, stream, encoding: str = "utf-8") -> "Document":
        from csvgrid.parser import parse_stream
        return parse_stream(stream, self.build(), encoding=encoding)


# Dict / JSON / YAML layering

def culture_to_dict(c: ParsingCulture) -> Dict[str, Any]:
    return {
        "name": c.name,
        "decimal_separator": c.decimal_separator,
        "group_separator": c.group_separator,
        "date_formats": list(c.date_formats),
        "datetime_format": c.datetime_format,
    }


def culture_from_dict(d: Union[str, Dict[str, Any], None]) -> ParsingCulture:
    if d is None:
        return INVARIANT_CULTURE
    if isinstance(d, str):
        return get_culture(d)
    if not isinstance(d, dict) or "name" not in d:
        raise InvalidConfigurationError(f"Culture must be a name or a mapping with a name, got {d!r}")
    try:
        return ParsingCulture(
            name=d["name"],
            decimal_separator=d.get("decimal_separator", "."),
            group_separator=d.get("group_separator", ","),
            date_formats=tuple(d.get("date_formats", ParsingCulture.date_formats)),
            datetime_format=d.get("datetime_format", ParsingCulture.datetime_format),
        )
    except TypeError as e:
        raise InvalidConfigurationError(f"Invalid culture definition: {e}") from e


def format_to_dict(fmt: CsvFormat) -> Dict[str, Any]:
    try:
        registered = get_culture(fmt.culture.name) == fmt.culture
    except InvalidConfigurationError:
        registered = False
    return {
        "separator": fmt.separator,
        "line_break": fmt.line_break,
        "escape_character": fmt.escape_character,
        "first_line_is_headers": fmt.first_line_is_headers,
        "culture": fmt.culture.name if registered else culture_to_dict(fmt.culture),
    }


_FORMAT_KEYS = {"separator", "line_break", "escape_character", "first_line_is_headers", "culture"}


def format_from_dict(d: Optional[Dict[str, Any]]) -> CsvFormat:
    if d is None:
        return DEFAULT_FORMAT
    if not isinstance(d, dict):
        raise InvalidConfigurationError(f"Format definition must be a mapping, got {type(d).__name__}")
    unknown = set(d) - _FORMAT_KEYS
    if unknown:
        raise InvalidConfigurationError(f"Unknown format settings: {sorted(unknown)}")
    return CsvFormat(
        separator=d.get("separator", DEFAULT_SEPARATOR),
        line_break=d.get("line_break", DEFAULT_LINE_BREAK),
        escape_character=d.get("escape_character", DEFAULT_ESCAPE_CHARACTER),
        first_line_is_headers=bool(d.get("first_line_is_headers", True)),
        culture=culture_from_dict(d.get("culture")),
    )


def format_to_json(fmt: CsvFormat) -> str:
    return json.dumps(format_to_dict(fmt), sort_keys=True)


def format_from_json(s: str) -> CsvFormat:
    return format_from_dict(json.loads(s))


def format_to_yaml(fmt: CsvFormat) -> str:
    return yaml.safe_dump(format_to_dict(fmt))


def format_from_yaml(s: str) -> CsvFormat:
    return format_from_dict(yaml.safe_load(s))


def load_format(path: Union[str, Path]) -> CsvFormat:
    """
    Load a CsvFormat from a YAML or JSON file.

    Files ending in .json are read as JSON; everything else as YAML.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidConfigurationError: If the settings are inconsistent
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    logger.debug("Loading CSV format from %s", path)
    if path.suffix.lower() == ".json":
        return format_from_json(text)
    return format_from_yaml(text)


__all__ = [
    "CsvFormat",
    "CsvBuilder",
    "DEFAULT_FORMAT",
    "DEFAULT_SEPARATOR",
    "DEFAULT_LINE_BREAK",
    "DEFAULT_ESCAPE_CHARACTER",
    "culture_to_dict",
    "culture_from_dict",
    "format_to_dict",
    "format_from_dict",
    "format_to_json",
    "format_from_json",
    "format_to_yaml",
    "format_from_yaml",
    "load_format",
]
