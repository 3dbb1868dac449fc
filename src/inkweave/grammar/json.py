"""
A JSON parser that yields reasonable errors. The entry point is `element()`, or `parse_json()`.

JSON's grammar is defined at <https://json.org>.

Values are plain Python objects: `dict`, `list`, `str`, `float`, `True`, `False` and `None`.
"""

from __future__ import annotations
from typing import Any, Literal, Final

import inkweave.const as const
from inkweave import general
from inkweave.main import Parser
from inkweave.primitive import any_of, end, just as _just_any, recursive
from inkweave.slice import Slice


class Expected:
    """
    The error yielded by this parser.

    `kind`: Whether a `literal` or a whole `rule` was expected.
    `what`: The literal or the name of the rule.
    `detail`: An explanation, for rules that fail after committing.
    """

    def __init__(self, kind: Literal["literal", "rule"], what: str, detail: str | None = None) -> None:
        self.kind: Final[Literal["literal", "rule"]] = kind
        self.what: Final[str] = what
        self.detail: Final[str | None] = detail

    @classmethod
    def literal(cls, what: str) -> Expected:
        return cls("literal", what)

    @classmethod
    def rule(cls, what: str, detail: str | None = None) -> Expected:
        return cls("rule", what, detail)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expected):
            return NotImplemented
        return (self.kind, self.what, self.detail) == (other.kind, other.what, other.detail)

    def __hash__(self) -> int:
        return hash((self.kind, self.what, self.detail))

    def __repr__(self) -> str:
        shown = f"`{self.what}`" if self.kind == "literal" else self.what
        return f"<Expected {shown}>" if self.detail is None else f"<Expected {shown}: {self.detail}>"


def just(literal: str) -> Parser[Slice, str, Expected]:
    return _just_any(literal).map_err(lambda _: Expected.literal(literal))

def ws() -> Parser[Slice, Slice, Expected]:
    return general.ws0().map_err(lambda _: Expected.rule("whitespace"))

def string() -> Parser[Slice, str, Expected]:
    return (
        general.quoted_string(
            '"',
            custom_escapes=const.JSON_ESCAPES,
            advanced_escapes=(general.unicode_escape(),),
        )
        .map_err(lambda e: Expected.rule("string", e))
    )

def number() -> Parser[Slice, float, Expected]:
    """`-`, integer part, optional fraction, optional exponent."""
    return (
        just("-").optional()
        .then(general.digits())
        .then(just(".").then(general.digits()).optional())
        .then(general.exponent().optional())
        .input()
        .map(lambda s: float(str(s)))
        .map_err(lambda _: Expected.rule("number"))
    )


def _value(element: Parser[Slice, Any, Expected]) -> Parser[Slice, Any, Expected]:
    # `:` commits a member to having a value, and brackets commit to being closed
    member = (
        string()
        .surround(ws(), ws())
        .then(just(":").expect().right(element.expect()))
    )

    obj = (
        member
        .separate(just(","))
        .surround(just("{"), ws().right(just("}")).expect())
        .map(dict)
    )

    array = (
        element
        .separate(just(","))
        .surround(just("["), ws().right(just("]")).expect())
    )

    return any_of([
        obj,
        array,
        just("true").map(lambda _: True),
        just("false").map(lambda _: False),
        just("null").map(lambda _: None),
        string(),
        number(),
    ])

def value() -> Parser[Slice, Any, Expected]:
    """A JSON value, without surrounding whitespace."""
    return recursive(lambda this: _value(this.surround(ws(), ws())))

def element() -> Parser[Slice, Any, Expected]:
    """A JSON value, with surrounding whitespace."""
    return value().surround(ws(), ws())

def document() -> Parser[Slice, Any, Expected]:
    """An element that spans the whole input."""
    return element().left(end().map_err(lambda _: Expected.rule("end of input")).expect())

def parse_json(src: str | bytes) -> Any:
    """
    Parses a whole JSON document.

    Raises `inkweave.ParseError` with an `Expected` as the inner error on failure.
    """
    return document().parse(src)
