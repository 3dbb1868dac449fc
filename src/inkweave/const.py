"""
General use constants.
"""

from __future__ import annotations
from typing import Final

WHITESPACES: Final[frozenset[str]] = frozenset({" ", "\t", "\n", "\r", "\f"})
BINARY: Final[frozenset[str]] = frozenset({"0", "1"})
OCTAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7"})
DECIMAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7", "8", "9"})
HEXADECIMAL: Final[frozenset[str]] = DECIMAL | {"a", "b", "c", "d", "e", "f", "A", "B", "C", "D", "E", "F"}

GENERAL_ESCAPES: Final[dict[str, str]] = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
"""Escape sequences shared by most quoted string syntaxes. The escape character itself is not included."""

JSON_ESCAPES: Final[dict[str, str]] = GENERAL_ESCAPES | {
    '"': '"',
    "\\": "\\",
    "/": "/",
}
