"""
Parsing cultures: the locale/format profile behind a Cell's typed views.

A ParsingCulture decides how numbers and dates are spelled inside cell text.
Typed accessors parse the cell string through the document's culture on
every read, and format through it on every write.

Several profiles are registered out of the box ("invariant", "en-US",
"it-IT", "de-DE", "fr-FR"); more can be added with register_culture().
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from functools import lru_cache
from typing import Dict, Tuple, Type, TypeVar, Union

from csvgrid.exceptions import InvalidConfigurationError


E = TypeVar("E", bound=Enum)

_INT_RE = re.compile(r"[+-]?\d+")
_SPECIAL_FLOATS = {
    "nan": float("nan"),
    "+nan": float("nan"),
    "-nan": float("nan"),
    "inf": float("inf"),
    "+inf": float("inf"),
    "-inf": float("-inf"),
    "infinity": float("inf"),
    "+infinity": float("inf"),
    "-infinity": float("-inf"),
}


@lru_cache(maxsize=None)
def _float_pattern(decimal_separator: str, group_separator: str) -> "re.Pattern[str]":
    """Build the float grammar for a decimal/group separator pair."""
    dec = re.escape(decimal_separator)
    if group_separator:
        grp = re.escape(group_separator)
        integer = rf"(?:\d{{1,3}}(?:{grp}\d{{3}})+|\d+)"
    else:
        integer = r"\d+"
    return re.compile(rf"[+-]?(?:{integer}(?:{dec}\d*)?|{dec}\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class ParsingCulture:
    """
    A culture/format profile.

    Properties:
        name:
            Identifier used by the registry and by configuration files
            (e.g. "it-IT").

        decimal_separator:
            Separator between the integral and fractional digits.

        group_separator:
            Thousands separator. Accepted on input between groups of three
            digits, never produced on output. May be empty.

        date_formats:
            strptime formats tried in order when reading a date-time.

        datetime_format:
            strftime format used when writing a date-time.
    """

    name: str
    decimal_separator: str = "."
    group_separator: str = ","
    date_formats: Tuple[str, ...] = (
        "%m/%d/%Y %H:%M:%S",
        "%m/%d/%Y %H:%M",
        "%m/%d/%Y",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d",
    )
    datetime_format: str = "%m/%d/%Y %H:%M:%S"

    def __post_init__(self):
        if not self.name:
            raise InvalidConfigurationError("Culture name cannot be empty")
        if not self.decimal_separator:
            raise InvalidConfigurationError("Decimal separator cannot be empty")
        if self.decimal_separator == self.group_separator:
            raise InvalidConfigurationError(
                f"Culture {self.name}: decimal and group separators must differ"
            )
        formats = tuple(self.date_formats)
        if not formats:
            raise InvalidConfigurationError(f"Culture {self.name} declares no date formats")
        object.__setattr__(self, "date_formats", formats)

    # Integers

    def parse_int(self, text: str) -> int:
        s = text.strip()
        if not _INT_RE.fullmatch(s):
            raise ValueError(f"Invalid integer literal for culture {self.name}: {text!r}")
        return int(s)

    def format_int(self, value: int) -> str:
        return str(int(value))

    # Floating point

    def parse_float(self, text: str) -> float:
        s = text.strip()
        special = _SPECIAL_FLOATS.get(s.lower())
        if special is not None:
            return special
        if not _float_pattern(self.decimal_separator, self.group_separator).fullmatch(s):
            raise ValueError(f"Invalid number literal for culture {self.name}: {text!r}")
        if self.group_separator:
            s = s.replace(self.group_separator, "")
        return float(s.replace(self.decimal_separator, "."))

    def format_float(self, value: float) -> str:
        text = repr(float(value))
        if text in ("inf", "-inf", "nan"):
            return text
        return text.replace(".", self.decimal_separator)

    # Dates

    def parse_datetime(self, text: str) -> datetime:
        s = text.strip()
        for fmt in self.date_formats:
            try:
                return datetime.strptime(s, fmt)
            except ValueError:
                continue
        raise ValueError(f"Invalid date-time for culture {self.name}: {text!r}")

    def format_datetime(self, value: Union[datetime, date]) -> str:
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day)
        return value.strftime(self.datetime_format)

    # Enums

    def parse_enum(self, enum_type: Type[E], text: str, ignore_case: bool = True) -> E:
        """
        Resolve text to a member of enum_type.

        Matches the member name first (case-insensitively unless ignore_case
        is False), then falls back to the member's integer value.
        """
        s = text.strip()
        members = enum_type.__members__
        if s in members:
            return members[s]
        if ignore_case:
            folded = s.casefold()
            for name, member in members.items():
                if name.casefold() == folded:
                    return member
        if _INT_RE.fullmatch(s):
            try:
                return enum_type(int(s))
            except ValueError:
                pass
        raise ValueError(f"{text!r} is not a valid {enum_type.__name__}")

    def format_enum(self, value: Enum) -> str:
        return value.name


INVARIANT_CULTURE = ParsingCulture(name="invariant")

_CULTURES: Dict[str, ParsingCulture] = {}


def register_culture(culture: ParsingCulture) -> ParsingCulture:
    """Register a culture under its (case-insensitive) name and return it."""
    if not isinstance(culture, ParsingCulture):
        raise InvalidConfigurationError(f"Expected a ParsingCulture, got {type(culture).__name__}")
    _CULTURES[culture.name.lower()] = culture
    return culture


def get_culture(name: str) -> ParsingCulture:
    """
    Look up a registered culture by name.

    Raises:
        InvalidConfigurationError: If no culture has that name
    """
    culture = _CULTURES.get(name.lower()) if name else None
    if culture is None:
        raise InvalidConfigurationError(f"Unknown parsing culture: {name!r}")
    return culture


register_culture(INVARIANT_CULTURE)
register_culture(ParsingCulture(name="en-US"))
register_culture(ParsingCulture(
    name="it-IT",
    decimal_separator=",",
    group_separator=".",
    date_formats=("%d/%m/%Y %H:%M:%S", "%d/%m/%Y %H:%M", "%d/%m/%Y", "%Y-%m-%d"),
    datetime_format="%d/%m/%Y %H:%M:%S",
))
register_culture(ParsingCulture(
    name="de-DE",
    decimal_separator=",",
    group_separator=".",
    date_formats=("%d.%m.%Y %H:%M:%S", "%d.%m.%Y %H:%M", "%d.%m.%Y", "%Y-%m-%d"),
    datetime_format="%d.%m.%Y %H:%M:%S",
))
register_culture(ParsingCulture(
    name="fr-FR",
    decimal_separator=",",
    group_separator=" ",
    date_formats=("%d/%m/%Y %H:%M:%S", "%d/%m/%Y %H:%M", "%d/%m/%Y", "%Y-%m-%d"),
    datetime_format="%d/%m/%Y %H:%M:%S",
))


__all__ = [
    "ParsingCulture",
    "INVARIANT_CULTURE",
    "register_culture",
    "get_culture",
]
