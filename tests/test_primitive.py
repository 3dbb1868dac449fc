"""Tests for the leaf parsers."""

from __future__ import annotations

import pytest

from inkweave import Error, Parser, Recover, Success
from inkweave.primitive import any_of, end, identity, just, lazy, recursive, unit


def scripted(result):
    """Helper: a parser that always returns `result` and counts its calls."""
    calls = []

    def run(input, at):
        calls.append(at)
        return result(at) if callable(result) else result

    return Parser(run), calls


class TestIdentity:
    def test_matches_nothing(self):
        assert identity().parse("hello, world") is None
        assert identity().parse_at("hello", 3) == (None, 3)

    def test_empty_input(self):
        assert identity().parse_at("", 0) == (None, 0)


class TestUnit:
    def test_str(self):
        assert unit().parse("hello, world") == "h"
        assert unit().parse_at("hello", 4) == ("o", 5)

    def test_sequence(self):
        assert unit().parse([1, 2, 3]) == 1
        assert unit().parse_at((1, 2, 3), 2) == (3, 3)

    def test_utf8_width(self):
        assert unit().parse_at("ñx".encode("utf-8"), 0) == ("ñ", 2)

    def test_end_of_input(self):
        r = unit().parse_at("ab", 2)
        assert not r
        assert r == Error(None, Recover.RECOVERABLE, 2)

    def test_invalid_utf8_fails(self):
        assert unit().parse_at(b"a\xff", 1) == Error(None, Recover.RECOVERABLE, 1)
        assert unit().parse_at(b"\xc3", 0) == Error(None, Recover.RECOVERABLE, 0)

    def test_valid_prefix_before_invalid_utf8(self):
        assert unit().many().parse_at(b"ab\xffc", 0) == (["a", "b"], 2)


class TestJust:
    def test_match(self):
        assert just("hello").parse_at("hello, world!", 0) == ("hello", 5)

    def test_match_at_offset(self):
        assert just("world").parse_at("hello, world!", 7) == ("world", 12)

    def test_mismatch_keeps_offset(self):
        assert just("world").parse_at("hello, world!", 6) == Error(None, Recover.RECOVERABLE, 6)

    def test_too_short(self):
        assert just("abc").parse_at("xab", 1) == Error(None, Recover.RECOVERABLE, 1)

    def test_empty_literal(self):
        assert just("").parse_at("abc", 3) == ("", 3)

    def test_sequence(self):
        assert just([1, 2]).parse_at([0, 1, 2, 3], 1) == ([1, 2], 3)
        assert not just([1, 3]).parse_at([0, 1, 2, 3], 1)

    def test_utf8_measures_bytes(self):
        assert just("ñ").parse_at("añb".encode("utf-8"), 1) == ("ñ", 3)

    @pytest.mark.parametrize("k", range(6))
    def test_matches_iff_prefix_equal(self, k):
        src = "abcabc"
        r = just("abc").parse_at(src, k)
        if src[k:k+3] == "abc":
            assert r == ("abc", k + 3)
        else:
            assert r == Error(None, Recover.RECOVERABLE, k)


class TestEnd:
    def test_at_end(self):
        assert end().parse_at("ab", 2) == (None, 2)
        assert end().parse("") is None

    def test_not_at_end(self):
        assert end().parse_at("ab", 1) == Error(None, Recover.RECOVERABLE, 1)


class TestAnyOf:
    def test_first_success_wins(self):
        p = any_of([just("a"), just("ab"), just("b")])
        assert p.parse_at("ab", 0) == ("a", 1)
        assert p.parse_at("ab", 1) == ("b", 2)

    def test_last_recoverable_error(self):
        p = any_of([
            just("a").map_err(lambda _: "first"),
            just("b").map_err(lambda _: "last"),
        ])
        assert p.parse_at("c", 0) == Error("last", Recover.RECOVERABLE, 0)

    def test_fatal_stops_alternation(self):
        fatal, _ = scripted(Error("fatal", Recover.FATAL, 0))
        after, calls = scripted(Success("never", 0))
        assert any_of([fatal, after]).parse_at("x", 0) == Error("fatal", Recover.FATAL, 0)
        assert calls == []

    def test_alternatives_start_at_same_offset(self):
        failing, _ = scripted(lambda at: Error(None, Recover.RECOVERABLE, at + 1))
        after, calls = scripted(lambda at: Success("ok", at))
        assert any_of([failing, after]).parse_at("xyz", 2) == ("ok", 2)
        assert calls == [2]

    def test_empty(self):
        with pytest.raises(ValueError):
            any_of([])

    def test_generator(self):
        p = any_of(just(c) for c in "ab")
        assert p.parse_at("b", 0) == ("b", 1)
        assert p.parse_at("a", 0) == ("a", 1)

    def test_empty_generator(self):
        with pytest.raises(ValueError):
            any_of(just(c) for c in "")


class TestRecursion:
    def test_recursive(self):
        nested = recursive(lambda nested: just("(").right(nested.many()).left(just(")")).map(len))
        assert nested.parse("(()())") == 2
        assert nested.parse_at("(()", 0) == Error(None, Recover.RECOVERABLE, 3)

    def test_lazy(self):
        def nested() -> Parser:
            return just("[").right(lazy(nested).many()).left(just("]")).map(len)

        assert nested().parse("[[][][[]]]") == 3
