"""`/command` lines: querying and changing settings, managing variables."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from .errors import CapabilityKind, InputError, MissingCapabilityError
from .lexer import Command, tokenize_int_list, tokenize_variable_list
from .settings import MAX_PRECISION, MAX_RADIX, MIN_RADIX, Settings
from .spans import Position, Positioned, trim
from .variables import MemoryVariableStore


logger = logging.getLogger(__name__)

T = TypeVar("T")

DONE = "Done"


@dataclass(frozen=True, slots=True)
class CommandResult:
    output: str
    # Variables the command referenced, so the caller can mark them as used.
    touched: tuple[str, ...] = ()


@dataclass(slots=True)
class CommandContext:
    settings: Settings
    variables: MemoryVariableStore | None
    executor: "CommandExecutor"


@dataclass(frozen=True, slots=True)
class CommandDefinition:
    name: str
    short_help: str
    long_help: str
    run: Callable[[Positioned[str], CommandContext], CommandResult]
    aliases: tuple[str, ...] = ()


def _too_many(args: list[Positioned[int]]) -> InputError:
    return InputError("Too many arguments", Position.from_span(args[0].position, args[-1].position))


def _parse_bool(arguments: Positioned[str]) -> bool | None:
    text = arguments.value.strip().lower()
    if not text:
        return None
    if text in ("t", "true"):
        return True
    if text in ("f", "false"):
        return False
    raise InputError("Invalid argument", arguments.position)


def _parse_radix(arguments: Positioned[str]) -> int | None:
    args = _int_args(arguments)
    if not args:
        return None
    if len(args) > 1:
        raise _too_many(args)
    radix = args[0]
    if radix.value < MIN_RADIX:
        raise InputError(f"Radix cannot be less than {MIN_RADIX}", radix.position)
    if radix.value > MAX_RADIX:
        raise InputError(f"Radix cannot be greater than {MAX_RADIX}", radix.position)
    return radix.value


def _shift(position: Position, offset: int) -> Position:
    return Position(position.start + offset, position.width)


def _in_line(arguments: Positioned[str], parse: Callable[[str], list[Positioned[T]]]) -> list[Positioned[T]]:
    """Run a list tokenizer over the argument text, positioning results in the whole line.

    The tokenizer only sees the argument string, so the positions it reports
    (including those of its errors) are offsets into that string.
    """
    offset = arguments.position.start
    try:
        parsed = parse(arguments.value)
    except InputError as exc:
        if exc.position is not None:
            exc.position = _shift(exc.position, offset)
        raise
    return [Positioned(item.value, _shift(item.position, offset)) for item in parsed]


def _int_args(arguments: Positioned[str]) -> list[Positioned[int]]:
    return _in_line(arguments, lambda text: tokenize_int_list(text, 10))


def _help(arguments: Positioned[str], ctx: CommandContext) -> CommandResult:
    wanted = trim(arguments)
    executor = ctx.executor
    if not wanted.value:
        names = sorted(executor.commands)
        width = max(len(name) for name in names)
        lines = ["Available commands:"]
        lines += [f"  {name:<{width}} {executor.commands[name].short_help}" for name in names]
        return CommandResult("\n".join(lines))
    definition = executor.lookup(wanted)
    return CommandResult(definition.long_help)


def _radix(arguments: Positioned[str], ctx: CommandContext) -> CommandResult:
    radix = _parse_radix(arguments)
    if radix is None:
        return CommandResult(str(ctx.settings.radix))
    ctx.settings.radix = radix
    return CommandResult(DONE)


def _convert_to_radix(arguments: Positioned[str], ctx: CommandContext) -> CommandResult:
    # "none" would not survive the integer tokenizer, so check for it first.
    if arguments.value.strip().lower() == "none":
        ctx.settings.convert_to_radix = None
        return CommandResult(DONE)
    radix = _parse_radix(arguments)
    if radix is None:
        current = ctx.settings.convert_to_radix
        return CommandResult("None" if current is None else str(current))
    ctx.settings.convert_to_radix = radix
    return CommandResult(DONE)


def _precision(arguments: Positioned[str], ctx: CommandContext) -> CommandResult:
    settings = ctx.settings
    args = _int_args(arguments)
    if not args:
        return CommandResult(
            f"Precision = {settings.precision}\nExtra Precision = {settings.extra_precision}"
        )
    if len(args) > 2:
        raise _too_many(args)

    precision = args[0]
    if not 0 <= precision.value <= MAX_PRECISION:
        raise InputError(
            f"Precision must be between 0 and {MAX_PRECISION}", precision.position
        )
    extra = settings.extra_precision
    if len(args) == 2:
        if not 0 <= args[1].value <= MAX_PRECISION:
            raise InputError(f"Extra must be between 0 and {MAX_PRECISION}", args[1].position)
        extra = args[1].value
    if precision.value + extra > MAX_PRECISION:
        raise InputError(
            f"Sum of precision and extra must not exceed {MAX_PRECISION}",
            Position.from_span(args[0].position, args[-1].position),
        )

    settings.precision = precision.value
    settings.extra_precision = extra
    return CommandResult(DONE)


def _toggle(attr: str) -> Callable[[Positioned[str], CommandContext], CommandResult]:
    def run(arguments: Positioned[str], ctx: CommandContext) -> CommandResult:
        value = _parse_bool(arguments)
        if value is None:
            return CommandResult(str(getattr(ctx.settings, attr)).lower())
        setattr(ctx.settings, attr, value)
        return CommandResult(DONE)

    return run


def _purge_variables(arguments: Positioned[str], ctx: CommandContext) -> CommandResult:
    names = set(_in_line(arguments, tokenize_variable_list))
    if ctx.variables is None:
        raise MissingCapabilityError(CapabilityKind.NO_VARIABLE_STORE)
    for name in names:
        ctx.variables.purge(name.value)
    # Purged variables are gone, so there is nothing to report as touched.
    return CommandResult(DONE)


_BOOL_USAGE = (
    "If no value is provided, the current setting value is displayed.\n"
    "If a value is given, the setting value is updated.\n"
    'The value should be a boolean: "true", "false", "t" or "f".'
)

COMMANDS: tuple[CommandDefinition, ...] = (
    CommandDefinition(
        name="help",
        aliases=("h",),
        short_help="Gives help with commands",
        long_help=(
            "Usage: /help\n"
            "       /help command_name\n"
            "Alias: /h\n\n"
            "With no arguments, lists all the available commands. If a command is given as "
            "an argument, provides more detailed help with the specified command."
        ),
        run=_help,
    ),
    CommandDefinition(
        name="purgevar",
        short_help="Unsets variable(s)",
        long_help=(
            "Usage: /purgevar variable_name_1 [variable_name_2 [...]]\n\n"
            "Removes the variable(s) from the variable store."
        ),
        run=_purge_variables,
    ),
    CommandDefinition(
        name="radix",
        aliases=("r",),
        short_help="Retrieves or sets the current radix",
        long_help=(
            "Usage: /radix [value]\n\n"
            "Value represents the radix used to parse and output numbers.\n"
            "If no value is provided, the current setting value is displayed.\n"
            "If a value is given, the setting value is updated.\n"
            f"The value given should be an integer between {MIN_RADIX} and {MAX_RADIX} (inclusive)."
        ),
        run=_radix,
    ),
    CommandDefinition(
        name="converttoradix",
        aliases=("c",),
        short_help="Retrieves or sets the current output radix",
        long_help=(
            "Usage: /converttoradix [value]\n\n"
            "Value overrides the radix used to output numbers.\n"
            "If no value is provided, the current setting value is displayed.\n"
            "If a value is given, the setting value is updated.\n"
            f'The value given can be "none" or an integer between {MIN_RADIX} and {MAX_RADIX} '
            "(inclusive)."
        ),
        run=_convert_to_radix,
    ),
    CommandDefinition(
        name="precision",
        aliases=("p",),
        short_help="Retrieves or sets the current precision",
        long_help=(
            "Usage: /precision [value [extra]]\n\n"
            "The value is the maximum number of digits displayed after the decimal point.\n"
            "Extra is additional precision carried internally but not displayed. It only "
            "matters for operations that can't be done exactly, such as 2^(1/2).\n"
            f"value + extra must not exceed {MAX_PRECISION}."
        ),
        run=_precision,
    ),
    CommandDefinition(
        name="fractional",
        aliases=("f",),
        short_help="Retrieves or sets fractional display setting",
        long_help=(
            "Usage: /fractional [enabled]\n"
            "Alias: /f\n\n"
            "When enabled, non-integer numbers are output as fractions rather than decimals.\n"
            + _BOOL_USAGE
        ),
        run=_toggle("fractional"),
    ),
    CommandDefinition(
        name="upper",
        short_help="Retrieves or sets upper display setting",
        long_help=(
            "Usage: /upper [enabled]\n\n"
            "When enabled, digits above 9 are output in uppercase.\n" + _BOOL_USAGE
        ),
        run=_toggle("upper"),
    ),
    CommandDefinition(
        name="commas",
        short_help="Retrieves or sets comma display setting",
        long_help=(
            "Usage: /commas [enabled]\n\n"
            "When enabled, commas are used as thousands separators in output.\n" + _BOOL_USAGE
        ),
        run=_toggle("commas"),
    ),
)


@dataclass(slots=True)
class CommandExecutor:
    commands: dict[str, CommandDefinition] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "CommandExecutor":
        executor = cls()
        for definition in COMMANDS:
            executor.register(definition)
        return executor

    def register(self, definition: CommandDefinition) -> None:
        if definition.name in self.commands or definition.name in self.aliases:
            raise ValueError(f"duplicate command name: {definition.name}")
        for alias in definition.aliases:
            if alias in self.commands or alias in self.aliases or alias == definition.name:
                raise ValueError(f"duplicate command alias: {alias}")
        self.commands[definition.name] = definition
        for alias in definition.aliases:
            self.aliases[alias] = definition.name

    def lookup(self, name: Positioned[str]) -> CommandDefinition:
        definition = self.commands.get(self.aliases.get(name.value, name.value))
        if definition is None:
            raise InputError(f"No such command: '{name.value}'", name.position)
        return definition

    def execute(
        self,
        command: Command,
        settings: Settings,
        variables: MemoryVariableStore | None = None,
    ) -> CommandResult:
        definition = self.lookup(command.name)
        logger.debug("running /%s with %r", definition.name, command.arguments.value)
        ctx = CommandContext(settings=settings, variables=variables, executor=self)
        return definition.run(command.arguments, ctx)
