from __future__ import annotations

from .api import calculate
from .commands import CommandExecutor
from .errors import (
    CalculatorFailure,
    ExpressionSyntaxError,
    InputError,
    MathExecutionError,
    MissingCapabilityError,
    ParseError,
    RuntimeFailure,
)
from .lexer import Command, tokenize, tokenize_int_list, tokenize_variable_list
from .operations import exponentiate, render, render_fraction
from .settings import Settings
from .syntax_tree import SyntaxTree
from .variables import MemoryVariableStore, VariableStore

__all__ = [
    "CalculatorFailure",
    "Command",
    "CommandExecutor",
    "ExpressionSyntaxError",
    "InputError",
    "MathExecutionError",
    "MemoryVariableStore",
    "MissingCapabilityError",
    "ParseError",
    "RuntimeFailure",
    "Settings",
    "SyntaxTree",
    "VariableStore",
    "calculate",
    "exponentiate",
    "render",
    "render_fraction",
    "tokenize",
    "tokenize_int_list",
    "tokenize_variable_list",
]
