"""
General purpose parsers, built only from the primitives and combinators.

Error values are `None` for "didn't match", or a message string once a parser has committed.
"""

from __future__ import annotations
from typing import Callable, Any

from collections.abc import Sequence, Set

import inkweave.const as const
from inkweave.main import Parser
from inkweave.primitive import unit, just, any_of
from inkweave.slice import Slice


def satisfy(predicate: Callable[[Any], bool]) -> Parser[Slice, Any, None]:
    """Consumes a single item that satisfies `predicate`."""
    return unit().filter(predicate)

def character(value: Any) -> Parser[Slice, Any, None]:
    """Consumes a single item equal to `value`."""
    return unit().filter(lambda c: c == value)

def recognize_input(predicate: Callable[[Any], bool]) -> Parser[Slice, Slice, None]:
    """Consumes one or more items while `predicate` holds. Outputs the consumed slice."""
    return (
        satisfy(predicate)
        .ignore()
        .many_with(1)
        .input()
        .ignore_err()
    )

def ws0() -> Parser[Slice, Slice, None]:
    """Zero or more whitespaces. Never fails."""
    return satisfy(lambda c: c in const.WHITESPACES).ignore().many().input()

def ws1() -> Parser[Slice, Slice, None]:
    """One or more whitespaces."""
    return recognize_input(lambda c: c in const.WHITESPACES)

def digits(alphabet: Set[str] = const.DECIMAL) -> Parser[Slice, Slice, None]:
    """One or more digits of the given alphabet."""
    return recognize_input(lambda c: c in alphabet)


def integer_number() -> Parser[Slice, int, str | None]:
    """
    An optionally negative integer.

    The base is interpreted from the prefix:
    - `0b`: Binary
    - `0o`: Octal
    - `0x`: Hexadecimal
    - none: Decimal
    """
    def prefixed(prefix: str, alphabet: Set[str], base: int, name: str) -> Parser[Slice, int, str | None]:
        return (
            just(prefix)
            .right(digits(alphabet).map_err(lambda _: f"Expected {name} digit after {prefix}.").expect())
            .map(lambda s: int(str(s), base=base))
        )

    magnitude = any_of([
        prefixed("0b", const.BINARY, 2, "a binary"),
        prefixed("0o", const.OCTAL, 8, "an octal"),
        prefixed("0x", const.HEXADECIMAL, 16, "a hexadecimal"),
        digits().map(lambda s: int(str(s))),
    ])
    return just("-").optional().then(magnitude).map(lambda r: -r[1] if r[0] else r[1])

def exponent() -> Parser[Slice, Slice, None]:
    """`e` or `E`, an optional sign, and decimal digits."""
    return (
        any_of([just("e"), just("E")])
        .then(any_of([just("-"), just("+")]).optional())
        .then(digits())
        .input()
    )

def float_number() -> Parser[Slice, float, None]:
    """
    An optionally negative decimal number with a fractional part, an exponent, or both.

    `1.5` `.5` `1e10` `-2.5E-3`
    """
    fraction = just(".").then(digits())
    mantissa = any_of([
        digits().then(any_of([fraction.then(exponent().optional()), exponent()])),
        fraction.then(exponent().optional()),
    ])
    return just("-").optional().then(mantissa).input().map(lambda s: float(str(s)))


def unicode_escape() -> Parser[Slice, str, str | None]:
    """The part after the escape character in `\\uXXXX`."""
    hex_digit = satisfy(lambda c: c in const.HEXADECIMAL)
    code = (
        hex_digit.many_with(4, 4)
        .input()
        .map(lambda s: chr(int(str(s), base=16)))
        .map_err(lambda _: "Expected 4 hexadecimal characters after unicode escape sequence.")
    )
    return just("u").right(code.expect())

def quoted_string(
    quote: str = '"',
    *,
    escape: str = "\\",
    custom_escapes: dict[str, str] = const.GENERAL_ESCAPES,
    advanced_escapes: Sequence[Parser[Slice, str, str | None]] = (),
) -> Parser[Slice, str, str | None]:
    """
    A quoted string with escape sequences. Outputs the unescaped contents.

    After an escape character, tries `custom_escapes`, then `advanced_escapes`, then takes the next character as-is.

    Once the opening quote matched, a missing closing quote is a fatal error.
    """
    simple = [just(sequence).map(lambda _, result=result: result) for sequence, result in custom_escapes.items()]
    anything = unit().map_err(lambda _: f"Expected a character to escape after `{escape}`.")
    escaped = just(escape).right(any_of([*simple, *advanced_escapes, anything]).expect())
    plain = satisfy(lambda c: c != quote and c != escape)
    closing = just(quote).map_err(lambda _: f"Expected closing quote `{quote}`.").expect()
    return (
        any_of([escaped, plain])
        .many()
        .map("".join)
        .surround(just(quote), closing)
    )
