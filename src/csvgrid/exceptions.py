"""
Error taxonomy for csvgrid.

Every failure raised by the package derives from CsvError, so callers can
catch the whole family at once, or discriminate by kind:

    InvalidConfigurationError   bad separator / line break / escape combination
    StructuralAccessError       the call itself violates a grid invariant
        IndexOutOfRangeError    positional access outside 0..N-1
        UnknownHeaderError      header lookup that matches no column
        InvalidHeaderError      duplicate header assignment
        NoColumnsError          row creation on a document with no columns
    OrphanError                 the row / column / cell was removed
    RowMappingError             a row could not be mapped to a record (or back)
"""


class CsvError(Exception):
    """Base class for all csvgrid errors."""
    pass


class InvalidConfigurationError(CsvError, ValueError):
    """Raised when a CsvFormat or ParsingCulture is inconsistent."""
    pass


class StructuralAccessError(CsvError):
    """Raised synchronously when a call violates a structural invariant."""
    pass


class IndexOutOfRangeError(StructuralAccessError, IndexError):
    """Raised on positional access outside the valid range."""
    pass


class UnknownHeaderError(StructuralAccessError, KeyError):
    """Raised when a header lookup matches no column."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class InvalidHeaderError(StructuralAccessError, ValueError):
    """Raised when assigning a header already used by another column."""
    pass


class NoColumnsError(StructuralAccessError):
    """Raised when creating a row in a document that has no columns."""
    pass


class OrphanError(CsvError):
    """
    Raised when operating on a row, column or cell removed from its document.

    Kept separate from StructuralAccessError so that callers can tell
    "never existed here" apart from "used to exist, was deleted".
    """
    pass


class RowMappingError(CsvError):
    """Raised when a row cannot be converted to a record, or vice versa."""
    pass


__all__ = [
    "CsvError",
    "InvalidConfigurationError",
    "StructuralAccessError",
    "IndexOutOfRangeError",
    "UnknownHeaderError",
    "InvalidHeaderError",
    "NoColumnsError",
    "OrphanError",
    "RowMappingError",
]
