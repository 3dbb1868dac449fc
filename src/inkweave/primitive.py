"""
Leaf parsers. Every grammar bottoms out in these.

```
from inkweave.primitive import unit, just

character = lambda c: unit().filter(lambda d: c == d)
character("a").then(just("bc")).parse("abc")    # ("a", "bc")
```
"""

from __future__ import annotations
from typing import Any, Callable, TypeVar
from collections.abc import Iterable

from inkweave.main import Parser, Success, Error, Recover, ParseResult
from inkweave.slice import Slice


_T = TypeVar("_T")
_O = TypeVar("_O")
_E = TypeVar("_E")
_I = TypeVar("_I", bound=Slice)


def identity() -> Parser[Any, None, None]:
    """Matches nothing, always succeeds."""
    return Parser(lambda input, at: Success(None, at))

def unit() -> Parser[Slice[_T], _T, None]:
    """
    Consumes a single item of the input.

    A character for text, an element for sequences.

    Invalid UTF-8 in `bytes` input is a recoverable failure.
    """
    def inner(input: Slice[_T], at: int) -> ParseResult[_T, None]:
        try:
            first = input.index_from(at).first()
        except UnicodeDecodeError:
            return Error(None, Recover.RECOVERABLE, at)
        if first is None:
            return Error(None, Recover.RECOVERABLE, at)
        item, width = first
        return Success(item, at + width)
    return Parser(inner)

def just(expected: _T) -> Parser[Any, _T, None]:
    """
    Matches `expected` exactly. Outputs `expected`.

    For text, `expected` is a string. For sequences, a sequence of elements.
    """
    def inner(input: Slice, at: int) -> ParseResult[_T, None]:
        needle = input.coerce(expected)
        end = at + len(needle)
        if end <= len(input) and input.index_between(at, end) == needle:
            return Success(expected, end)
        return Error(None, Recover.RECOVERABLE, at)
    return Parser(inner)

def end() -> Parser[Any, None, None]:
    """Matches the end of the input."""
    def inner(input: Slice, at: int) -> ParseResult[None, None]:
        if at == len(input):
            return Success(None, at)
        return Error(None, Recover.RECOVERABLE, at)
    return Parser(inner)

def any_of(parsers: Iterable[Parser[_I, _O, _E]]) -> Parser[_I, _O, _E]:
    """
    Tries the parsers in order from the same offset. The first one that matches wins.

    A fatal failure is returned immediately. If all of them fail recoverably, returns the last failure.

    Same as `a.or_(b).or_(c)...`
    """
    parsers = tuple(parsers)
    if len(parsers) <= 0:
        raise ValueError("At least one parser required.")
    def inner(input: _I, at: int) -> ParseResult[_O, _E]:
        for parser in parsers:
            r = parser._run(input, at)
            if r or r.is_fatal():
                return r
        return r
    return Parser(inner)

def lazy(factory: Callable[[], Parser[_I, _O, _E]]) -> Parser[_I, _O, _E]:
    """
    Builds the parser with `factory` every time it runs.

    For grammars that refer to themselves:
    ```
    def element() -> Parser:
        return just("[").right(lazy(element).many()).left(just("]"))
    ```
    """
    return Parser(lambda input, at: factory()._run(input, at))

def recursive(build: Callable[[Parser[_I, _O, _E]], Parser[_I, _O, _E]]) -> Parser[_I, _O, _E]:
    """
    Builds a grammar that refers to itself.

    `build` gets a stand-in for the finished grammar and returns the grammar. The grammar is only built once.
    ```
    nested = recursive(lambda nested: just("[").right(nested.many()).left(just("]")))
    ```
    """
    grammar: Parser[_I, _O, _E] | None = None

    def inner(input: _I, at: int) -> ParseResult[_O, _E]:
        assert grammar is not None, "The grammar was run while it was being built."
        return grammar._run(input, at)

    grammar = build(Parser(inner))
    return grammar
