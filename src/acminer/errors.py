# src/acminer/errors.py

from __future__ import annotations
from typing import Any, Optional

__all__ = [
    "AcminerError",
    "MissingCostMetadataError",
    "MalformedOccurrenceError",
    "PatternCodeError",
]


class AcminerError(Exception):
    """Base class for errors raised by acminer."""


class MissingCostMetadataError(AcminerError, KeyError):
    """
    A pattern has no entry in a cost side table (emulation blocks, use blocks).

    Raised instead of scoring the pattern as zero: a silent zero would move the
    pattern through the ranking without any warning.

    Attributes
    ----------
    code : PatternCode or None
        The pattern that was looked up. ``None`` when the whole table is missing.
    table : str
        Name of the side table, e.g. ``"emulatable"`` or ``"use_blocks"``.
    """

    def __init__(self, code: Optional[Any], table: str):
        self.code = code
        self.table = table
        if code is None:
            msg = f"no {table!r} side table was supplied"
        else:
            msg = f"pattern {code!r} has no entry in the {table!r} side table"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class MalformedOccurrenceError(AcminerError, ValueError):
    """An occurrence does not match its pattern, or an occurrence count is invalid."""


class PatternCodeError(AcminerError, ValueError):
    """A pattern string or code value cannot be parsed or decoded."""
