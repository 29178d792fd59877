from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Union

from . import ast
from .errors import ExpressionSyntaxError, SyntaxErrorKind
from .spans import Position, Positioned
from .tokens import (
    COMMA,
    PRECEDENCE_TIERS,
    BinaryOperator,
    FunctionName,
    Token,
    TokenKind,
    UnaryOperator,
)


logger = logging.getLogger(__name__)


class EndReason(Enum):
    COMMA = "comma"
    CLOSE_PAREN = "close paren"
    INPUT_EMPTY = "end of input"


@dataclass(frozen=True, slots=True)
class ExpressionEnd:
    """Why an expression stopped, and where (absent for end of input)."""

    reason: EndReason
    position: Position | None = None


# While reading an expression we keep a flat list alternating between operands
# (finished nodes) and binary operators, then fold it by precedence.
_Item = Union[ast.Node, Positioned[BinaryOperator]]


def _is_operator(item: _Item) -> bool:
    return isinstance(item, Positioned)


def _is_operand(item: _Item) -> bool:
    return not isinstance(item, Positioned)


def _fold_negations(items: list[_Item]) -> list[_Item]:
    """Turn `-` into negation wherever it can't be a subtraction.

    Scans from the right so a run like `---1` folds into nested negations.
    """
    pending = list(items)
    out: deque[_Item] = deque()
    while pending:
        item = pending.pop()
        if (
            _is_operand(item)
            and pending
            and _is_operator(pending[-1])
            and pending[-1].value is BinaryOperator.SUBTRACT
            and (len(pending) < 2 or _is_operator(pending[-2]))
        ):
            op = pending.pop()
            # Back onto `pending` so the next `-` to the left gets a look too.
            pending.append(ast.Unary(UnaryOperator.NEGATE, op.position, item))
        else:
            out.appendleft(item)
    return list(out)


def _reduce_tier(items: list[_Item], tier: frozenset[BinaryOperator]) -> list[_Item]:
    pending: deque[_Item] = deque(items)
    out: list[_Item] = []
    while pending:
        item = pending.popleft()
        if (
            _is_operand(item)
            and len(pending) >= 2
            and _is_operator(pending[0])
            and pending[0].value in tier
            and _is_operand(pending[1])
        ):
            op = pending.popleft()
            right = pending.popleft()
            pending.appendleft(ast.Binary(op.value, op.position, item, right))
        else:
            out.append(item)
    return out


def _single_operand(items: list[_Item]) -> ast.Node | None:
    if not items:
        return None
    first = items[0]
    if _is_operator(first):
        raise ExpressionSyntaxError(SyntaxErrorKind.MISSING_OPERAND, first.position, first.value)
    if len(items) == 1:
        return first

    second = items[1]
    if _is_operand(second):
        raise ExpressionSyntaxError(
            SyntaxErrorKind.MISSING_OPERATOR,
            Position.from_between(first.position, second.position),
        )
    if len(items) == 2 or _is_operator(items[2]):
        raise ExpressionSyntaxError(SyntaxErrorKind.MISSING_OPERAND, second.position, second.value)
    raise RuntimeError(f"{second.value!r} is missing from PRECEDENCE_TIERS")


@dataclass(slots=True)
class Parser:
    """Builds a syntax tree from tokens.

    Operands (numbers, variables, unary operations, parenthesized expressions and
    function calls) are read recursively. Binary operators are not: each expression
    is read flat and then reduced one precedence tier at a time.
    """

    tokens: deque[Positioned[Token]]

    @classmethod
    def for_tokens(cls, tokens: Iterable[Positioned[Token]]) -> "Parser":
        return cls(tokens=deque(tokens))

    def parse(self) -> tuple[Positioned[str] | None, ast.Node]:
        """Return the assignment target (if any) and the root node."""
        target = self._assignment_target()
        root, end = self._expression()
        if end.reason is EndReason.COMMA:
            raise ExpressionSyntaxError(SyntaxErrorKind.UNEXPECTED_TOKEN, end.position, COMMA)
        if end.reason is EndReason.CLOSE_PAREN:
            raise ExpressionSyntaxError(SyntaxErrorKind.MISMATCHED_CLOSE_PAREN, end.position)
        if root is None:
            raise ExpressionSyntaxError(SyntaxErrorKind.NO_INPUT, Position(0, 0))
        logger.debug("built tree %r (assigning to %s)", root, target)
        return target, root

    # Expressions ---------------------------------------------------------

    def _assignment_target(self) -> Positioned[str] | None:
        if (
            len(self.tokens) >= 2
            and self.tokens[0].value.kind is TokenKind.VARIABLE
            and self.tokens[1].value.kind is TokenKind.ASSIGNMENT
        ):
            var = self.tokens.popleft()
            self.tokens.popleft()
            return var.map(lambda t: t.value)
        return None

    def _expression(self) -> tuple[ast.Node | None, ExpressionEnd]:
        items: list[_Item] = []
        while True:
            item = self._operand_or_operator()
            if isinstance(item, ExpressionEnd):
                end = item
                break
            items.append(item)

        items = _fold_negations(items)
        for tier in PRECEDENCE_TIERS:
            items = _reduce_tier(items, tier)
        return _single_operand(items), end

    def _operand_or_operator(self) -> _Item | ExpressionEnd:
        if not self.tokens:
            return ExpressionEnd(EndReason.INPUT_EMPTY)
        tok = self.tokens.popleft()
        token, position = tok.value, tok.position

        match token.kind:
            case TokenKind.ASSIGNMENT:
                raise ExpressionSyntaxError(SyntaxErrorKind.UNEXPECTED_TOKEN, position, token)
            case TokenKind.COMMA:
                return ExpressionEnd(EndReason.COMMA, position)
            case TokenKind.CLOSE_PAREN:
                return ExpressionEnd(EndReason.CLOSE_PAREN, position)
            case TokenKind.BINARY_OPERATOR:
                return Positioned(token.value, position)
            case TokenKind.VARIABLE:
                return ast.Variable(token.value, position)
            case TokenKind.NUMBER:
                return ast.Number(token.value, position)
            case TokenKind.UNARY_OPERATOR:
                return self._unary(token.value, position)
            case TokenKind.OPEN_PAREN:
                return self._parenthesized(position)
            case TokenKind.FUNCTION:
                return self._function(token.value, position)
        raise RuntimeError(f"unhandled token kind: {token.kind!r}")

    # Operands ------------------------------------------------------------

    def _operand(self) -> ast.Node | ExpressionEnd:
        item = self._operand_or_operator()
        if not isinstance(item, Positioned):
            return item
        # Where an operand is required, `-` can only be negation.
        if item.value is BinaryOperator.SUBTRACT:
            return self._unary(UnaryOperator.NEGATE, item.position)
        raise ExpressionSyntaxError(SyntaxErrorKind.UNEXPECTED_TOKEN, item.position, item.value)

    def _unary(self, operator: UnaryOperator, position: Position) -> ast.Unary:
        operand = self._operand()
        if isinstance(operand, ExpressionEnd):
            raise ExpressionSyntaxError(SyntaxErrorKind.MISSING_OPERAND, position, operator)
        return ast.Unary(operator, position, operand)

    def _parenthesized(self, open_position: Position) -> ast.Parenthesized:
        node, end = self._expression()
        if end.reason is EndReason.CLOSE_PAREN:
            if node is None:
                raise ExpressionSyntaxError(
                    SyntaxErrorKind.EMPTY_PARENS,
                    Position.from_span(open_position, end.position),
                )
            return ast.Parenthesized(open_position, end.position, node)
        if end.reason is EndReason.COMMA:
            raise ExpressionSyntaxError(SyntaxErrorKind.UNEXPECTED_TOKEN, end.position, COMMA)
        raise ExpressionSyntaxError(SyntaxErrorKind.MISMATCHED_OPEN_PAREN, open_position)

    def _function(self, name: FunctionName, name_position: Position) -> ast.Function:
        # Argument count is checked when the function is evaluated, not here.
        if not self.tokens:
            raise ExpressionSyntaxError(
                SyntaxErrorKind.FUNCTION_WITHOUT_PARENS_OR_ARGUMENT, name_position, name
            )

        if self.tokens[0].value.kind is not TokenKind.OPEN_PAREN:
            # Without parentheses a function takes exactly one operand.
            operand = self._operand()
            if isinstance(operand, ExpressionEnd):
                raise ExpressionSyntaxError(
                    SyntaxErrorKind.FUNCTION_WITHOUT_PARENS_OR_ARGUMENT, name_position, name
                )
            return ast.Function(name, name_position, (operand,), operand.position)

        open_paren = self.tokens.popleft()
        operands: list[ast.Node] = []
        comma: Position | None = None
        while True:
            node, end = self._expression()
            if node is None and comma is not None:
                raise ExpressionSyntaxError(SyntaxErrorKind.COMMA_WITHOUT_OPERAND_AFTER, comma)
            if end.reason is EndReason.INPUT_EMPTY:
                raise ExpressionSyntaxError(
                    SyntaxErrorKind.MISMATCHED_OPEN_PAREN, open_paren.position
                )
            if node is None and end.reason is EndReason.COMMA:
                raise ExpressionSyntaxError(
                    SyntaxErrorKind.COMMA_WITHOUT_OPERAND_BEFORE, end.position
                )
            if node is not None:
                operands.append(node)
            if end.reason is EndReason.CLOSE_PAREN:
                close = end.position
                break
            comma = end.position

        return ast.Function(
            name,
            name_position,
            tuple(operands),
            Position.from_span(open_paren.position, close),
        )
