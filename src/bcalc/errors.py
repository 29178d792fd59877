from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .spans import Position


class CalculatorFailure(Exception):
    """Base class for everything the calculator raises on purpose."""


@dataclass(slots=True)
class InputError(CalculatorFailure):
    """The user's fault: bad syntax, unknown variable, division by zero, ...

    `position` points at the part of the input line to blame, when there is one.
    """

    message: str
    position: Position | None = None

    def __str__(self) -> str:
        return self.message

    def pointer(self, line: str) -> str:
        """Render `line` with a caret marker under the offending span."""
        if self.position is None:
            return line
        tail = "~" * max(self.position.width - 1, 0)
        return f"{line}\n{' ' * self.position.start}^{tail}"


class RuntimeFailure(CalculatorFailure):
    """Not the user's fault, e.g. a variable store that failed to save."""


class ParseErrorKind(str, Enum):
    NON_ASCII = "Non-ASCII data in input"
    INVALID_NUMBER = "Unable to parse number: '{}'"
    INVALID_VARIABLE = "Invalid variable name: '{}'"


class SyntaxErrorKind(str, Enum):
    NO_INPUT = "No input"
    UNEXPECTED_TOKEN = "Unexpected token encountered: {}"
    MISMATCHED_OPEN_PAREN = "Mismatched open parenthesis"
    MISMATCHED_CLOSE_PAREN = "Mismatched close parenthesis"
    EMPTY_PARENS = "Empty parentheses"
    MISSING_OPERAND = "{} is missing a required operand"
    COMMA_WITHOUT_OPERAND_BEFORE = "Comma must follow an operand"
    COMMA_WITHOUT_OPERAND_AFTER = "Comma must be followed by an operand"
    FUNCTION_WITHOUT_PARENS_OR_ARGUMENT = (
        "Functions without parentheses are assumed to have a single argument, "
        "but none was found for {}"
    )
    MISSING_OPERATOR = "Missing an operator between two consecutive operands"


class MathErrorKind(str, Enum):
    UNKNOWN_VARIABLE = "Unknown variable: {}"
    DIVISION_BY_ZERO = "Cannot divide by 0"
    FUNCTION_NEEDS_ARGUMENTS = "{} has no arguments but requires them"
    UNIMPLEMENTED = "Encountered operation that is not yet supported"
    IMAGINARY_RESULT = "Result would be an imaginary number"


class CapabilityKind(str, Enum):
    NO_VARIABLE_STORE = "Variable store unavailable"
    NO_DATABASE = "Database unavailable"


class _KindedInputError(InputError):
    def __init__(self, kind: Enum, position: Position | None = None, detail: object = "") -> None:
        super().__init__(message=kind.value.format(detail), position=position)
        self.kind = kind
        self.detail = detail


class ParseError(_KindedInputError):
    """Raised by the tokenizer."""

    kind: ParseErrorKind


class ExpressionSyntaxError(_KindedInputError):
    """Raised while building a syntax tree out of tokens."""

    kind: SyntaxErrorKind


class MathExecutionError(_KindedInputError):
    """Raised while evaluating a syntax tree."""

    kind: MathErrorKind


class MissingCapabilityError(_KindedInputError):
    """An operation needed a collaborator (e.g. a variable store) that wasn't supplied."""

    kind: CapabilityKind
