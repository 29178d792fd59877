from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from .spans import Position
from .tokens import BinaryOperator, FunctionName, UnaryOperator


@dataclass(frozen=True, slots=True)
class Number:
    value: Fraction
    position: Position


@dataclass(frozen=True, slots=True)
class Variable:
    name: str
    position: Position


@dataclass(frozen=True, slots=True)
class Unary:
    operator: UnaryOperator
    operator_position: Position
    operand: Node

    @property
    def position(self) -> Position:
        return Position.from_span(self.operator_position, self.operand.position)


@dataclass(frozen=True, slots=True)
class Binary:
    operator: BinaryOperator
    operator_position: Position
    left: Node
    right: Node

    @property
    def position(self) -> Position:
        return Position.from_span(
            self.operator_position,
            Position.from_span(self.left.position, self.right.position),
        )


@dataclass(frozen=True, slots=True)
class Function:
    """`max`/`min` call.

    `operands_position` covers the parenthesized argument list, or the single
    argument when the call was written without parentheses.
    """

    name: FunctionName
    name_position: Position
    operands: tuple[Node, ...]
    operands_position: Position

    @property
    def position(self) -> Position:
        return Position.from_span(self.name_position, self.operands_position)


@dataclass(frozen=True, slots=True)
class Parenthesized:
    # Only kept so errors can point at the parentheses; evaluates to `inner`.
    open_position: Position
    close_position: Position
    inner: Node

    @property
    def position(self) -> Position:
        return Position.from_span(self.open_position, self.close_position)


Node = Number | Variable | Unary | Binary | Function | Parenthesized
