"""
Views over indexable input.

Every parser takes a `Slice` and an offset. Sub-slicing a `Slice` creates a new view over the same underlying data, nothing is copied.

Offsets mean:
- `TextSlice`: code point index into a `str`
- `Utf8Slice`: byte offset into UTF-8 encoded `bytes`
- `ArraySlice`: element index into a sequence
"""

from __future__ import annotations
from typing import Any, Generic, Self, TypeVar, Final

from collections.abc import Sequence


_ItemT = TypeVar("_ItemT")
_ItemCovT = TypeVar("_ItemCovT", covariant=True)


class Slice(Generic[_ItemCovT]):
    """
    A borrowed view of `data[start:stop]`.

    Subclasses define what an item is (`first()`) and what the viewed data looks like when materialized (`value()`).
    """

    def __init__(self, data: Any, start: int = 0, stop: int | None = None) -> None:
        if stop is None:
            stop = len(data)
        if not 0 <= start <= stop <= len(data):
            raise IndexError(f"Invalid slice bounds {start}..{stop} for data of length {len(data)}.")
        self.data: Final = data
        """The underlying data. Shared between all views."""
        self.start: Final[int] = start
        self.stop: Final[int] = stop

    def __len__(self) -> int:
        return self.stop - self.start

    def is_empty(self) -> bool:
        return self.stop == self.start

    def first(self) -> tuple[_ItemCovT, int] | None:
        """
        The leading item and its width in offset units.

        Returns `None` exactly when the slice is empty.
        """
        raise NotImplementedError

    def value(self) -> Any:
        """Copies the viewed data out into a plain value."""
        return self.data[self.start:self.stop]

    @classmethod
    def coerce(cls, value: Any) -> Self:
        """Wraps a literal into a slice of this realization."""
        if isinstance(value, cls):
            return value
        return cls(value)

    def _view(self, n: int, o: int) -> Self:
        if not 0 <= n <= o <= len(self):
            raise IndexError(f"Invalid sub-slice {n}..{o} of a slice of length {len(self)}.")
        return type(self)(self.data, self.start + n, self.start + o)

    def index_to(self, n: int) -> Self:
        """`slice[..n]`"""
        return self._view(0, n)

    def index_from(self, n: int) -> Self:
        """`slice[n..]`"""
        return self._view(n, len(self))

    def index_between(self, n: int, o: int) -> Self:
        """`slice[n..o]`"""
        return self._view(n, o)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Slice):
            return type(other) is type(self) and len(other) == len(self) and self.value() == other.value()
        return self.value() == other

    def __hash__(self) -> int:
        return hash(self.value())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value()!r})"


class TextSlice(Slice[str]):
    """A view of a `str`. Items are one character strings, always 1 wide."""

    def first(self) -> tuple[str, int] | None:
        if self.start == self.stop:
            return None
        return (self.data[self.start], 1)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TextSlice):
            other = other.value()
        if isinstance(other, str):
            return len(other) == len(self) and self.data.startswith(other, self.start)
        return False

    def __hash__(self) -> int:
        return hash(self.value())

    def __str__(self) -> str:
        return self.value()


def _utf8_width(lead: int) -> int:
    if lead < 0x80:
        return 1
    elif lead >> 5 == 0b110:
        return 2
    elif lead >> 4 == 0b1110:
        return 3
    elif lead >> 3 == 0b11110:
        return 4
    # continuation byte or invalid lead byte
    raise UnicodeDecodeError("utf-8", bytes([lead]), 0, 1, "invalid start byte")


class Utf8Slice(Slice[str]):
    """
    A view of UTF-8 encoded `bytes`.

    Items are decoded code points (one character strings). The width of an item is its encoded length, 1 to 4 bytes.
    """

    def first(self) -> tuple[str, int] | None:
        if self.start == self.stop:
            return None
        width = _utf8_width(self.data[self.start])
        return (bytes(self.data[self.start:min(self.start+width, self.stop)]).decode("utf-8"), width)

    @classmethod
    def coerce(cls, value: Any) -> Utf8Slice:
        if isinstance(value, str):
            return cls(value.encode("utf-8"))
        return super().coerce(value)

    def value(self) -> bytes:
        return bytes(self.data[self.start:self.stop])

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Utf8Slice):
            other = other.value()
        elif isinstance(other, str):
            other = other.encode("utf-8")
        if isinstance(other, (bytes, bytearray)):
            return len(other) == len(self) and self.data.startswith(other, self.start)
        return False

    def __hash__(self) -> int:
        return hash(self.value())

    def __str__(self) -> str:
        return self.value().decode("utf-8")


class ArraySlice(Slice[_ItemT]):
    """A view of a sequence. Items are the elements themselves, always 1 wide."""

    def first(self) -> tuple[_ItemT, int] | None:
        if self.start == self.stop:
            return None
        return (self.data[self.start], 1)

    def value(self) -> list[_ItemT]:
        return [self.data[i] for i in range(self.start, self.stop)]

    def __iter__(self):
        for i in range(self.start, self.stop):
            yield self.data[i]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ArraySlice):
            return len(other) == len(self) and all(a == b for a, b in zip(self, other))
        if isinstance(other, Sequence) and not isinstance(other, (str, bytes, bytearray)):
            return len(other) == len(self) and all(a == b for a, b in zip(self, other))
        return False

    def __hash__(self) -> int:
        return hash(tuple(self))


def as_slice(data: Any) -> Slice:
    """
    Wraps raw input into the matching `Slice` realization.

    - `str` -> `TextSlice`
    - `bytes`, `bytearray` -> `Utf8Slice`
    - other sequences -> `ArraySlice`

    Slices are returned as-is.
    """
    if isinstance(data, Slice):
        return data
    elif isinstance(data, str):
        return TextSlice(data)
    elif isinstance(data, (bytes, bytearray)):
        return Utf8Slice(data)
    elif isinstance(data, Sequence):
        return ArraySlice(data)
    else:
        raise TypeError(f"Cannot parse a value of type `{type(data).__name__}`.")
