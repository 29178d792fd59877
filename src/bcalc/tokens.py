from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Final


class BinaryOperator(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULUS = "%"
    EXPONENT = "^"

    def __str__(self) -> str:
        return f"{_OPERATOR_NAMES[self]} Operator ({self.value})"


class UnaryOperator(Enum):
    SQUARE_ROOT = "sqrt"
    NEGATE = "-"
    ABSOLUTE_VALUE = "abs"

    def __str__(self) -> str:
        return f"{_OPERATOR_NAMES[self]} Operator ({self.value})"


class FunctionName(Enum):
    MAX = "max"
    MIN = "min"

    def __str__(self) -> str:
        return f"{self.value.capitalize()} Function"


_OPERATOR_NAMES: Final[dict[Enum, str]] = {
    BinaryOperator.ADD: "Addition",
    BinaryOperator.SUBTRACT: "Subtraction",
    BinaryOperator.MULTIPLY: "Multiplication",
    BinaryOperator.DIVIDE: "Division",
    BinaryOperator.MODULUS: "Modulus",
    BinaryOperator.EXPONENT: "Exponentiation",
    UnaryOperator.SQUARE_ROOT: "Square Root",
    UnaryOperator.NEGATE: "Negation",
    UnaryOperator.ABSOLUTE_VALUE: "Absolute Value",
}


# Highest binding first. Operators in the same tier fold left to right.
PRECEDENCE_TIERS: Final[tuple[frozenset[BinaryOperator], ...]] = (
    frozenset({BinaryOperator.EXPONENT}),
    frozenset({BinaryOperator.MODULUS}),
    frozenset({BinaryOperator.MULTIPLY, BinaryOperator.DIVIDE}),
    frozenset({BinaryOperator.ADD, BinaryOperator.SUBTRACT}),
)


class TokenKind(str, Enum):
    VARIABLE = "VARIABLE"
    NUMBER = "NUMBER"
    BINARY_OPERATOR = "BINARY_OPERATOR"
    UNARY_OPERATOR = "UNARY_OPERATOR"
    FUNCTION = "FUNCTION"

    ASSIGNMENT = "="
    COMMA = ","
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"


@dataclass(frozen=True, slots=True)
class Token:
    """A lexical token.

    `value` depends on `kind`: the variable name (including `$`), a `Fraction` for
    numbers, or the operator / function enum member. Punctuation has no value.
    """

    kind: TokenKind
    value: str | Fraction | BinaryOperator | UnaryOperator | FunctionName | None = None

    def __str__(self) -> str:
        match self.kind:
            case TokenKind.VARIABLE:
                return f"Variable '{self.value}'"
            case TokenKind.NUMBER:
                return f"Number ({self.value})"
            case TokenKind.ASSIGNMENT:
                return "Assignment Operator (=)"
            case TokenKind.COMMA:
                return "Comma"
            case TokenKind.OPEN_PAREN:
                return "Open Parenthesis"
            case TokenKind.CLOSE_PAREN:
                return "Close Parenthesis"
        return str(self.value)

    def is_operator(self, op: BinaryOperator) -> bool:
        return self.kind is TokenKind.BINARY_OPERATOR and self.value is op


def variable(name: str) -> Token:
    return Token(TokenKind.VARIABLE, name)


def number(value: Fraction) -> Token:
    return Token(TokenKind.NUMBER, value)


def binary(op: BinaryOperator) -> Token:
    return Token(TokenKind.BINARY_OPERATOR, op)


ASSIGNMENT: Final = Token(TokenKind.ASSIGNMENT)
COMMA: Final = Token(TokenKind.COMMA)
OPEN_PAREN: Final = Token(TokenKind.OPEN_PAREN)
CLOSE_PAREN: Final = Token(TokenKind.CLOSE_PAREN)


SINGLE_CHAR_TOKENS: Final[dict[str, Token]] = {
    "+": binary(BinaryOperator.ADD),
    "-": binary(BinaryOperator.SUBTRACT),
    "*": binary(BinaryOperator.MULTIPLY),
    "/": binary(BinaryOperator.DIVIDE),
    "%": binary(BinaryOperator.MODULUS),
    "^": binary(BinaryOperator.EXPONENT),
    "(": OPEN_PAREN,
    ")": CLOSE_PAREN,
    "=": ASSIGNMENT,
    ",": COMMA,
}

KEYWORDS: Final[dict[str, Token]] = {
    "sqrt": Token(TokenKind.UNARY_OPERATOR, UnaryOperator.SQUARE_ROOT),
    "abs": Token(TokenKind.UNARY_OPERATOR, UnaryOperator.ABSOLUTE_VALUE),
    "max": Token(TokenKind.FUNCTION, FunctionName.MAX),
    "min": Token(TokenKind.FUNCTION, FunctionName.MIN),
}
