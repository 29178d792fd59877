from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Iterable

from . import ast
from .evaluator import Evaluator
from .parser import Parser
from .spans import Positioned
from .tokens import Token
from .variables import VariableStore


@dataclass(slots=True)
class SyntaxTree:
    """An expression, optionally assigned to a variable.

    A tree is executed once; executing it again raises `RuntimeError`.
    """

    root: ast.Node
    target: Positioned[str] | None = None
    _executed: bool = field(default=False, init=False, repr=False, compare=False)

    @classmethod
    def build(cls, tokens: Iterable[Positioned[Token]]) -> "SyntaxTree":
        target, root = Parser.for_tokens(tokens).parse()
        return cls(root=root, target=target)

    def execute(
        self,
        history_id: int | None = None,
        variables: VariableStore | None = None,
        *,
        precision: int = 10,
        radix: int = 10,
    ) -> Fraction:
        """Evaluate the tree and, for an assignment, store the result.

        The store is only written after the whole expression evaluated, so a
        failing line never leaves a half-done assignment behind.
        """
        if self._executed:
            raise RuntimeError("syntax tree has already been executed")
        self._executed = True

        evaluator = Evaluator(variables=variables, precision=precision, radix=radix)
        result = evaluator.evaluate(self.root)
        if self.target is not None:
            evaluator.assign(self.target.value, self.target.position, result, history_id)
        return result
