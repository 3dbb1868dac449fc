"""Tests for the input slice views."""

from __future__ import annotations

import pytest

from inkweave.slice import ArraySlice, TextSlice, Utf8Slice, as_slice


def walk(s) -> list:
    """Helper: collect items by repeatedly taking `first()` and advancing by its width."""
    items = []
    at = 0
    while (first := s.index_from(at).first()) is not None:
        item, width = first
        items.append(item)
        at += width
    assert at == len(s)
    return items


class TestAsSlice:
    def test_str(self):
        assert isinstance(as_slice("abc"), TextSlice)

    def test_bytes(self):
        assert isinstance(as_slice(b"abc"), Utf8Slice)
        assert isinstance(as_slice(bytearray(b"abc")), Utf8Slice)

    def test_sequences(self):
        assert isinstance(as_slice([1, 2]), ArraySlice)
        assert isinstance(as_slice((1, 2)), ArraySlice)

    def test_slice_is_returned_as_is(self):
        s = TextSlice("abc")
        assert as_slice(s) is s

    def test_unsupported(self):
        with pytest.raises(TypeError):
            as_slice(42)


class TestTextSlice:
    def test_len_and_empty(self):
        s = TextSlice("hello")
        assert len(s) == 5
        assert not s.is_empty()
        assert TextSlice("").is_empty()

    def test_first(self):
        assert TextSlice("hé").first() == ("h", 1)
        assert TextSlice("").first() is None

    def test_views(self):
        s = TextSlice("hello, world")
        assert s.index_to(5) == "hello"
        assert s.index_from(7) == "world"
        assert s.index_between(5, 7) == ", "
        assert s.index_between(3, 3).is_empty()

    def test_views_share_data(self):
        src = "hello, world"
        s = TextSlice(src).index_from(7).index_to(3)
        assert s.data is src
        assert (s.start, s.stop) == (7, 10)
        assert str(s) == "wor"

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            TextSlice("abc").index_from(4)
        with pytest.raises(IndexError):
            TextSlice("abc").index_between(2, 1)

    def test_walk(self):
        assert walk(TextSlice("añb")) == ["a", "ñ", "b"]

    def test_equality_and_hash(self):
        a = TextSlice("xxabc").index_from(2)
        b = TextSlice("abc")
        assert a == b
        assert hash(a) == hash(b)
        assert a != "abcd"
        assert a != ["a", "b", "c"]


class TestUtf8Slice:
    def test_widths(self):
        s = Utf8Slice("aé€😀".encode("utf-8"))
        assert len(s) == 10
        assert s.first() == ("a", 1)
        assert s.index_from(1).first() == ("é", 2)
        assert s.index_from(3).first() == ("€", 3)
        assert s.index_from(6).first() == ("😀", 4)

    def test_walk(self):
        assert walk(Utf8Slice("añ€".encode("utf-8"))) == ["a", "ñ", "€"]

    def test_coerce_encodes_text(self):
        needle = Utf8Slice.coerce("ñ")
        assert len(needle) == 2

    def test_equality(self):
        s = Utf8Slice("xñy".encode("utf-8"))
        assert s.index_between(1, 3) == "ñ"
        assert s.index_between(1, 3) == "ñ".encode("utf-8")
        assert str(s) == "xñy"

    def test_mid_code_point(self):
        s = Utf8Slice("ñ".encode("utf-8"))
        with pytest.raises(UnicodeDecodeError):
            s.index_from(1).first()

    def test_code_point_cut_by_view(self):
        s = Utf8Slice("\u00f1".encode("utf-8"))
        with pytest.raises(UnicodeDecodeError):
            s.index_to(1).first()


class TestArraySlice:
    def test_first(self):
        s = ArraySlice([10, 20, 30])
        assert s.first() == (10, 1)
        assert s.index_from(3).first() is None

    def test_views(self):
        s = ArraySlice([1, 2, 3, 4])
        assert s.index_between(1, 3) == [2, 3]
        assert s.index_to(2) == (1, 2)
        assert s.index_from(2).value() == [3, 4]

    def test_walk(self):
        assert walk(ArraySlice(["a", "b"])) == ["a", "b"]

    def test_not_equal_to_text(self):
        assert ArraySlice(["a", "b"]) != "ab"
