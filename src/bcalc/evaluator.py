from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from fractions import Fraction

from . import ast
from .errors import (
    CapabilityKind,
    InputError,
    MathErrorKind,
    MathExecutionError,
    MissingCapabilityError,
    RuntimeFailure,
)
from .operations import exponentiate
from .spans import Position
from .tokens import BinaryOperator, FunctionName, UnaryOperator
from .variables import VariableStore


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Evaluator:
    """Evaluates syntax tree nodes to exact values.

    `precision` and `radix` only matter for fractional exponents, which can't be
    computed exactly.
    """

    variables: VariableStore | None = None
    precision: int = 10
    radix: int = 10

    def evaluate(self, node: ast.Node) -> Fraction:
        match node:
            case ast.Number(value=value):
                return value
            case ast.Variable(name=name, position=position):
                return self._lookup(name, position)
            case ast.Unary(operator=op, operator_position=op_position, operand=operand):
                return self._unary(op, op_position, self.evaluate(operand))
            case ast.Binary(operator=op, operator_position=op_position, left=left, right=right):
                lhs = self.evaluate(left)
                rhs = self.evaluate(right)
                return self._binary(op, op_position, lhs, rhs)
            case ast.Function(name=name, name_position=name_position, operands=operands):
                values = [self.evaluate(operand) for operand in operands]
                return self._function(name, name_position, values)
            case ast.Parenthesized(inner=inner):
                return self.evaluate(inner)
        raise TypeError(f"not a syntax tree node: {node!r}")

    def assign(self, target: str, position: Position, value: Fraction, history_id: int | None) -> None:
        if self.variables is None:
            raise MissingCapabilityError(CapabilityKind.NO_VARIABLE_STORE, position)
        try:
            self.variables.update(target, value, history_id)
        except InputError:
            raise
        except Exception as exc:
            raise RuntimeFailure(f"failed to store variable {target}: {exc}") from exc
        logger.debug("assigned %s = %s (history id %s)", target, value, history_id)

    def _lookup(self, name: str, position: Position) -> Fraction:
        if self.variables is None:
            raise MissingCapabilityError(CapabilityKind.NO_VARIABLE_STORE, position)
        try:
            value = self.variables.get(name)
        except InputError:
            raise
        except Exception as exc:
            raise RuntimeFailure(f"failed to load variable {name}: {exc}") from exc
        if value is None:
            raise MathExecutionError(MathErrorKind.UNKNOWN_VARIABLE, position, name)
        return value

    def _unary(self, op: UnaryOperator, position: Position, operand: Fraction) -> Fraction:
        match op:
            case UnaryOperator.NEGATE:
                return -operand
            case UnaryOperator.ABSOLUTE_VALUE:
                return abs(operand)
            case UnaryOperator.SQUARE_ROOT:
                # TODO: route through exponentiate() once sqrt semantics are settled.
                raise MathExecutionError(MathErrorKind.UNIMPLEMENTED, position)
        raise TypeError(f"unknown unary operator: {op!r}")

    def _binary(self, op: BinaryOperator, position: Position, lhs: Fraction, rhs: Fraction) -> Fraction:
        match op:
            case BinaryOperator.ADD:
                return lhs + rhs
            case BinaryOperator.SUBTRACT:
                return lhs - rhs
            case BinaryOperator.MULTIPLY:
                return lhs * rhs
            case BinaryOperator.DIVIDE | BinaryOperator.MODULUS if rhs == 0:
                raise MathExecutionError(MathErrorKind.DIVISION_BY_ZERO, position)
            case BinaryOperator.DIVIDE:
                return lhs / rhs
            case BinaryOperator.MODULUS:
                # The remainder takes the sign of the dividend.
                return lhs - rhs * math.trunc(lhs / rhs)
            case BinaryOperator.EXPONENT:
                return self._power(position, lhs, rhs)
        raise TypeError(f"unknown binary operator: {op!r}")

    def _power(self, position: Position, base: Fraction, exponent: Fraction) -> Fraction:
        if exponent.denominator == 1:
            if base == 0 and exponent < 0:
                raise MathExecutionError(MathErrorKind.DIVISION_BY_ZERO, position)
            return base**exponent.numerator
        try:
            return exponentiate(base, exponent, self.precision, self.radix)
        except MathExecutionError as exc:
            if exc.position is None:
                exc.position = position
            raise

    def _function(self, name: FunctionName, position: Position, values: list[Fraction]) -> Fraction:
        if not values:
            raise MathExecutionError(MathErrorKind.FUNCTION_NEEDS_ARGUMENTS, position, name)
        match name:
            case FunctionName.MAX:
                return max(values)
            case FunctionName.MIN:
                return min(values)
        raise TypeError(f"unknown function: {name!r}")
