from __future__ import annotations

import logging

from .commands import CommandExecutor
from .lexer import Command, tokenize
from .settings import Settings
from .syntax_tree import SyntaxTree
from .tokens import TokenKind
from .variables import MemoryVariableStore


logger = logging.getLogger(__name__)

_DEFAULT_COMMANDS: CommandExecutor | None = None


def _get_commands() -> CommandExecutor:
    global _DEFAULT_COMMANDS
    if _DEFAULT_COMMANDS is None:
        _DEFAULT_COMMANDS = CommandExecutor.default()
    return _DEFAULT_COMMANDS


def calculate(
    line: str,
    settings: Settings,
    variables: MemoryVariableStore | None = None,
    history_id: int | None = None,
    commands: CommandExecutor | None = None,
) -> str:
    """Run one line of input and return what should be shown for it.

    A `/command` line may change `settings`. An expression is evaluated and its
    result rendered according to `settings`; an empty line gives "".
    Failures surface as `CalculatorFailure` subclasses.
    """
    parsed = tokenize(line, settings.radix)

    if isinstance(parsed, Command):
        result = (commands or _get_commands()).execute(parsed, settings, variables)
        if variables is not None:
            for name in result.touched:
                variables.touch(name, history_id)
        return result.output

    if variables is not None:
        referenced = {tok.value.value for tok in parsed if tok.value.kind is TokenKind.VARIABLE}
        for name in referenced:
            variables.touch(name, history_id)

    if not parsed:
        return ""

    tree = SyntaxTree.build(parsed)
    value = tree.execute(
        history_id,
        variables,
        precision=settings.working_precision,
        radix=settings.output_radix,
    )
    logger.debug("%r evaluated to %s", line, value)
    return settings.display(value)
