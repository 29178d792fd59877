from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar


T = TypeVar("T")
U = TypeVar("U")

_WHITESPACE = " \t\n\x0c\r"


@dataclass(frozen=True, slots=True)
class Position:
    """A span of the input line, as a 0-based start offset and a width."""

    start: int
    width: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.width < 0:
            raise ValueError(f"invalid position: start={self.start} width={self.width}")

    @property
    def end(self) -> int:
        return self.start + self.width

    @classmethod
    def from_span(cls, a: Position, b: Position) -> Position:
        """Smallest position covering both `a` and `b`."""
        start = min(a.start, b.start)
        return cls(start=start, width=max(a.end, b.end) - start)

    @classmethod
    def from_between(cls, a: Position, b: Position) -> Position:
        """The gap between two positions, used to point at a missing operator."""
        points = sorted((a.start, a.end, b.start, b.end))
        return cls(start=points[1], width=points[2] - points[1])

    def __str__(self) -> str:
        return f"{self.start}+{self.width}"


@dataclass(frozen=True, slots=True)
class Positioned(Generic[T]):
    """A value tagged with where it came from.

    Equality and hashing only look at the value, so the same variable name read at
    two places in a line collapses to one entry in a set.
    """

    value: T
    position: Position = field(compare=False)

    @classmethod
    def at(cls, value: T, start: int, width: int) -> Positioned[T]:
        return cls(value, Position(start, width))

    @classmethod
    def spanning(cls, value: T, a: Position, b: Position) -> Positioned[T]:
        return cls(value, Position.from_span(a, b))

    @classmethod
    def between(cls, value: T, a: Position, b: Position) -> Positioned[T]:
        return cls(value, Position.from_between(a, b))

    def map(self, fn: Callable[[T], U]) -> Positioned[U]:
        return Positioned(fn(self.value), self.position)

    def __str__(self) -> str:
        return str(self.value)


def trim(text: Positioned[str]) -> Positioned[str]:
    """Strip ASCII whitespace from both ends, keeping the position accurate."""
    stripped = text.value.strip(_WHITESPACE)
    if not stripped:
        return Positioned("", Position(text.position.start, 0))
    lead = len(text.value) - len(text.value.lstrip(_WHITESPACE))
    return Positioned.at(stripped, text.position.start + lead, len(stripped))


@dataclass(frozen=True, slots=True)
class MaybePositioned(Generic[T]):
    """Like `Positioned`, for values that can't always be attributed to the input."""

    value: T
    position: Position | None = None

    @classmethod
    def of(cls, item: Positioned[T]) -> MaybePositioned[T]:
        return cls(item.value, item.position)

    def __str__(self) -> str:
        return str(self.value)
