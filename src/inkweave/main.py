"""
The implementations of the main classes.
"""

from __future__ import annotations
from typing import overload, Any, Self, Literal, TypeVar, Generic, Final, Callable
from collections.abc import Iterator

import enum
import logging

from inkweave.slice import Slice, TextSlice, Utf8Slice, as_slice


_log = logging.getLogger(__name__)

_T = TypeVar("_T")
_I = TypeVar("_I", bound=Slice)
_O = TypeVar("_O")
_O1 = TypeVar("_O1")
_E = TypeVar("_E")
_E1 = TypeVar("_E1")
_OCovT = TypeVar("_OCovT", covariant=True)
_ECovT = TypeVar("_ECovT", covariant=True)



class Recover(enum.Enum):
    """Whether a failed parse may be backtracked out of."""

    RECOVERABLE = "recoverable"
    """This branch did not match. Alternatives may still be tried."""
    FATAL = "fatal"
    """The grammar committed to this branch. Alternation must not swallow the failure."""


class Error(Generic[_ECovT]):
    """
    Returned from a parser to indicate that it has failed.

    ```
    r = parser.parse_at(input, at)
    if r:
        ... # `r` is a `Success` object
    else:
        ... # `r` is an `Error` object
    ```

    Errors are never modified after creation. Use `map()` and `fatal()` to get transformed copies.
    """

    def __init__(self, inner: _ECovT, recover: Recover, at: int) -> None:
        """
        `inner`: The domain error. `None` for primitives that have nothing to say.
        `recover`: Whether alternatives may still be tried.
        `at`: The offset where the failure was detected.
        """
        self.inner: Final[_ECovT] = inner
        self.recover: Final[Recover] = recover
        self.at: Final[int] = at

    def is_fatal(self) -> bool:
        return self.recover is Recover.FATAL

    def is_recoverable(self) -> bool:
        return self.recover is Recover.RECOVERABLE

    def fatal(self) -> Error[_ECovT]:
        """Creates a copy of this error that can't be recovered from."""
        if self.recover is Recover.FATAL:
            return self
        return Error(self.inner, Recover.FATAL, self.at)

    def map(self, f: Callable[[_ECovT], _T]) -> Error[_T]:
        """Creates a copy of this error with the inner value transformed."""
        return Error(f(self.inner), self.recover, self.at)

    def __bool__(self) -> Literal[False]:
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Error):
            return NotImplemented
        return self.inner == other.inner and self.recover is other.recover and self.at == other.at

    def __hash__(self) -> int:
        return hash((self.recover, self.at))

    def __repr__(self) -> str:
        return f"<Error {self.recover.value} at {self.at}: {self.inner!r}>"


class Success(Generic[_OCovT]):
    """
    Returned from a parser to indicate that it has succeeded.

    Unpacks into `(output, at)`, and compares equal to that tuple.
    """

    def __init__(self, output: _OCovT, at: int) -> None:
        self.output: Final[_OCovT] = output
        self.at: Final[int] = at
        """The offset right after the consumed input."""

    def __bool__(self) -> Literal[True]:
        return True

    def __iter__(self) -> Iterator[Any]:
        yield self.output
        yield self.at

    def __eq__(self, other: object) -> bool:
        if isinstance(other, tuple):
            return (self.output, self.at) == other
        elif isinstance(other, Success):
            return self.output == other.output and self.at == other.at
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.output, self.at))

    def __repr__(self) -> str:
        return f"<Success ..{self.at} {{{self.output!r}}}>"


ParseResult = Success[_O] | Error[_E]


class RepetitionError(Generic[_ECovT]):
    """
    The inner error of `Parser.many_with()`.

    `count`: How many elements were parsed before stopping.
    `minimum`: The required number of elements.
    `inner`: The element's error that stopped the repetition. `None` if it stopped because the maximum was reached.
    """

    def __init__(self, count: int, minimum: int, inner: _ECovT | None = None) -> None:
        self.count: Final[int] = count
        self.minimum: Final[int] = minimum
        self.inner: Final[_ECovT | None] = inner

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RepetitionError):
            return NotImplemented
        return (self.count, self.minimum, self.inner) == (other.count, other.minimum, other.inner)

    def __hash__(self) -> int:
        return hash((self.count, self.minimum))

    def __repr__(self) -> str:
        return f"<RepetitionError {self.count}/{self.minimum} {{{self.inner!r}}}>"


class ParseError(Exception):
    """
    The exception that's raised by `Parser.parse()` when parsing fails.

    The failure itself is kept in `error`, unchanged.
    """

    def __init__(self, src: Slice, error: Error) -> None:
        """
        `src`: The input that was being parsed.
        `error`: The failure returned from the root parser.
        """
        super().__init__(f"{'Fatal' if error.is_fatal() else 'Failed'} parse at offset {error.at}: {error.inner!r}")
        self.src: Slice = src
        self.error: Error = error
        self.append_pos_note(error.at)

    @property
    def inner(self) -> Any:
        return self.error.inner

    @property
    def at(self) -> int:
        return self.error.at

    @property
    def recover(self) -> Recover:
        return self.error.recover

    def append_pos_note(self, pos: int, msg: str | None = None) -> Self:
        note: list[str] = [] if msg is None else [msg]

        if not isinstance(self.src, (TextSlice, Utf8Slice)):
            note.append(f"At position {pos}")
            self.add_note("\n".join(note))
            return self

        if isinstance(self.src, Utf8Slice):
            src = self.src.value().decode("utf-8", errors="replace")
            # byte offset -> character offset
            pos = len(self.src.index_to(min(pos, len(self.src))).value().decode("utf-8", errors="replace"))
        else:
            src = str(self.src)
        pos = min(pos, len(src))
        # should still work with CRLF
        line = src.count("\n", 0, pos) + 1
        column = pos - src.rfind("\n", 0, pos) # works even when rfind returns -1
        note.append(f"At position {pos} (line {line}, column {column})")

        lines = src.splitlines()
        if len(lines) > line-1:
            line_str = lines[line-1]
            if len(line_str) >= column-1:
                if column <= 20:
                    note.append(f"{line_str[:40]}\n{' '*(column-1)}^")
                else:
                    note.append(f"{line_str[(column-20):(column+20)]}\n{' '*19}^")
        self.add_note("\n".join(note))
        return self



class Parser(Generic[_I, _O, _E]):
    """
    A parsing function from `(input, offset)` to a `Success` or an `Error`.

    Parsers are immutable. Combinators return new parsers and never modify the ones they're given, so a parser can be reused in as many places (and threads) as needed.

    ```
    digit = unit().filter(str.isdigit)
    number = digit.many_with(1).input().map(lambda s: int(str(s)))
    number.parse("123")     # 123
    ```
    """

    def __init__(self, run: Callable[[_I, int], ParseResult[_O, _E]]) -> None:
        self._run: Final[Callable[[_I, int], ParseResult[_O, _E]]] = run

    def parse_at(self, input: _I | Any, at: int) -> ParseResult[_O, _E]:
        """
        Parses starting at an offset. Use this when calling a parser inside another parser.

        Doesn't roll back anything on failure. Backtracking is done by the combinators that need it.
        """
        return self._run(as_slice(input), at)

    def parse_result(self, input: _I | Any) -> ParseResult[_O, _E]:
        """Parses from the beginning. Returns the `Success` or `Error` as-is."""
        return self.parse_at(input, 0)

    def parse(self, input: _I | Any) -> _O:
        """
        Parses from the beginning and returns the output.

        Doesn't require all of the input to be consumed. End the grammar with `end()` for that.

        Raises `ParseError` on failure.
        """
        src = as_slice(input)
        r = self._run(src, 0)
        if not r:
            raise ParseError(src, r)
        return r.output

    def __or__(self, other: Parser[_I, _O, _E1]) -> Parser[_I, _O, _E1]:
        """Same as `or_()`."""
        return self.or_(other)

    def __repr__(self) -> str:
        return f"<Parser {getattr(self._run, '__qualname__', self._run)!s}>"

    # transforming

    def map(self, f: Callable[[_O], _O1]) -> Parser[_I, _O1, _E]:
        """Transforms the output."""
        def inner(input: _I, at: int) -> ParseResult[_O1, _E]:
            r = self._run(input, at)
            if not r:
                return r
            return Success(f(r.output), r.at)
        return Parser(inner)

    def map_err(self, f: Callable[[_E], _E1]) -> Parser[_I, _O, _E1]:
        """Transforms the inner value of the error. The offset and recoverability stay the same."""
        def inner(input: _I, at: int) -> ParseResult[_O, _E1]:
            r = self._run(input, at)
            if not r:
                return r.map(f)
            return r
        return Parser(inner)

    def flat_map(self, f: Callable[[_O], Parser[_I, _O1, _E]]) -> Parser[_I, _O1, _E]:
        """
        Chooses the next parser based on the output of this one.

        ```
        # a count, followed by that many items
        digit.map(int).flat_map(lambda n: unit().many_with(n, n))
        ```
        """
        def inner(input: _I, at: int) -> ParseResult[_O1, _E]:
            r = self._run(input, at)
            if not r:
                return r
            return f(r.output)._run(input, r.at)
        return Parser(inner)

    def filter(self, predicate: Callable[[_O], bool]) -> Parser[_I, _O, None]:
        """
        Fails if the output doesn't satisfy `predicate`.

        A rejected output is a recoverable failure at the starting offset, as if the parser never matched.
        """
        def inner(input: _I, at: int) -> ParseResult[_O, None]:
            r = self._run(input, at)
            if not r:
                return Error(None, r.recover, r.at)
            if not predicate(r.output):
                return Error(None, Recover.RECOVERABLE, at)
            return r
        return Parser(inner)

    def filter_map(self, f: Callable[[_O], _O1 | None]) -> Parser[_I, _O1, None]:
        """
        Transforms the output, failing when `f` returns `None`.

        Failures work the same as in `filter()`.
        """
        def inner(input: _I, at: int) -> ParseResult[_O1, None]:
            r = self._run(input, at)
            if not r:
                return Error(None, r.recover, r.at)
            if (output := f(r.output)) is None:
                return Error(None, Recover.RECOVERABLE, at)
            return Success(output, r.at)
        return Parser(inner)

    def expect(self) -> Parser[_I, _O, _E]:
        """
        Makes any failure fatal.

        Use this once the grammar has committed to a path, e.g. after an opening bracket, so that enclosing alternatives don't hide the real syntax error.
        """
        def inner(input: _I, at: int) -> ParseResult[_O, _E]:
            r = self._run(input, at)
            if not r:
                return r.fatal()
            return r
        return Parser(inner)

    def ignore(self) -> Parser[_I, None, _E]:
        """Drops the output."""
        return self.map(lambda _: None)

    def ignore_err(self) -> Parser[_I, _O, None]:
        """Drops the inner value of the error."""
        return self.map_err(lambda _: None)

    def with_span(self) -> Parser[_I, tuple[_O, tuple[int, int]], _E]:
        """Pairs the output with the `(start, end)` offsets of the consumed input."""
        def inner(input: _I, at: int) -> ParseResult[tuple[_O, tuple[int, int]], _E]:
            r = self._run(input, at)
            if not r:
                return r
            return Success((r.output, (at, r.at)), r.at)
        return Parser(inner)

    def input(self) -> Parser[_I, _I, _E]:
        """Replaces the output with the consumed slice of the input."""
        def inner(input: _I, at: int) -> ParseResult[_I, _E]:
            r = self._run(input, at)
            if not r:
                return r
            return Success(input.index_between(at, r.at), r.at)
        return Parser(inner)

    def debug(self, label: str) -> Parser[_I, _O, _E]:
        """Logs every attempt, match and failure of this parser at the `DEBUG` level."""
        def inner(input: _I, at: int) -> ParseResult[_O, _E]:
            _log.debug("%s: trying at %d", label, at)
            r = self._run(input, at)
            if r:
                _log.debug("%s: matched %d..%d -> %r", label, at, r.at, r.output)
            else:
                _log.debug("%s: failed (%s) at %d: %r", label, r.recover.value, r.at, r.inner)
            return r
        return Parser(inner)

    # alternation

    def or_(self, other: Parser[_I, _O, _E1]) -> Parser[_I, _O, _E1]:
        """
        Tries this parser. If it fails recoverably, tries `other` from the same offset.

        Fatal failures are returned without trying `other`.
        """
        def inner(input: _I, at: int) -> ParseResult[_O, _E1]:
            r = self._run(input, at)
            if r or r.is_fatal():
                return r
            return other._run(input, at)
        return Parser(inner)

    def optional(self) -> Parser[_I, _O | None, _E]:
        """
        Outputs `None` without consuming anything if this parser fails recoverably.

        Fatal failures are still returned.
        """
        def inner(input: _I, at: int) -> ParseResult[_O | None, _E]:
            r = self._run(input, at)
            if r or r.is_fatal():
                return r
            return Success(None, at)
        return Parser(inner)

    # sequencing

    def then(self, other: Parser[_I, _O1, _E]) -> Parser[_I, tuple[_O, _O1], _E]:
        """Parses this, then `other`. Outputs both as a tuple."""
        def inner(input: _I, at: int) -> ParseResult[tuple[_O, _O1], _E]:
            a = self._run(input, at)
            if not a:
                return a
            b = other._run(input, a.at)
            if not b:
                return b
            return Success((a.output, b.output), b.at)
        return Parser(inner)

    def left(self, other: Parser[_I, Any, _E]) -> Parser[_I, _O, _E]:
        """Parses this, then `other`. Keeps this parser's output."""
        def inner(input: _I, at: int) -> ParseResult[_O, _E]:
            a = self._run(input, at)
            if not a:
                return a
            b = other._run(input, a.at)
            if not b:
                return b
            return Success(a.output, b.at)
        return Parser(inner)

    def right(self, other: Parser[_I, _O1, _E]) -> Parser[_I, _O1, _E]:
        """Parses this, then `other`. Keeps `other`'s output."""
        def inner(input: _I, at: int) -> ParseResult[_O1, _E]:
            a = self._run(input, at)
            if not a:
                return a
            return other._run(input, a.at)
        return Parser(inner)

    def surround(self, left: Parser[_I, Any, _E], right: Parser[_I, Any, _E]) -> Parser[_I, _O, _E]:
        """Parses `left`, this, then `right`. Keeps this parser's output."""
        return left.right(self).left(right)

    # repetition

    def many(self) -> Parser[_I, list[_O], _E]:
        """
        Repeats this parser until it fails recoverably. Never fails recoverably itself.

        Fatal failures of an element are returned as-is.
        """
        return self.many_with().map_err(lambda e: e.inner)

    @overload
    def many_with(self, minimum: int = 0) -> Parser[_I, list[_O], RepetitionError[_E]]: ...
    @overload
    def many_with(self, minimum: int, maximum: int | None) -> Parser[_I, list[_O], RepetitionError[_E]]: ...

    def many_with(self, minimum: int = 0, maximum: int | None = None) -> Parser[_I, list[_O], RepetitionError[_E]]:
        """
        Repeats this parser until it fails recoverably, or until it matched `maximum` times.

        If it stopped before matching `minimum` times, fails recoverably at the offset where the repetition started.

        A fatal failure of an element is returned with a `RepetitionError` wrapped around its inner value.

        Without a `maximum`, an element that matches without consuming anything ends the repetition.
        """
        if minimum < 0:
            raise ValueError("The minimum can't be negative.")
        if maximum is not None and maximum < minimum:
            raise ValueError("The maximum can't be less than the minimum.")

        def inner(input: _I, at: int) -> ParseResult[list[_O], RepetitionError[_E]]:
            outputs: list[_O] = []
            pos = at
            stop_reason: _E | None = None
            while maximum is None or len(outputs) < maximum:
                r = self._run(input, pos)
                if not r:
                    if r.is_fatal():
                        return r.map(lambda e: RepetitionError(len(outputs), minimum, e))
                    stop_reason = r.inner
                    break
                outputs.append(r.output)
                if r.at == pos and maximum is None:
                    break
                pos = r.at
            if len(outputs) < minimum:
                return Error(RepetitionError(len(outputs), minimum, stop_reason), Recover.RECOVERABLE, at)
            return Success(outputs, pos)
        return Parser(inner)

    def separate(self, by: Parser[_I, Any, _E1], *, trailing: bool = False) -> Parser[_I, list[_O], _E | _E1]:
        """
        Parses zero or more of this parser, separated by `by`.

        A separator is only consumed if an element follows it, unless `trailing` is set.

        Fatal failures of either parser are returned as-is.
        """
        def inner(input: _I, at: int) -> ParseResult[list[_O], _E | _E1]:
            outputs: list[_O] = []
            r = self._run(input, at)
            if not r:
                return r if r.is_fatal() else Success(outputs, at)
            outputs.append(r.output)
            pos = r.at
            while True:
                sep = by._run(input, pos)
                if not sep:
                    if sep.is_fatal():
                        return sep
                    break
                r = self._run(input, sep.at)
                if not r:
                    if r.is_fatal():
                        return r
                    if trailing:
                        pos = sep.at
                    break
                outputs.append(r.output)
                if r.at == pos:
                    break
                pos = r.at
            return Success(outputs, pos)
        return Parser(inner)
