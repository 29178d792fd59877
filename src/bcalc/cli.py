"""Command-line entry point for bcalc."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import TextIO

from .api import calculate
from .commands import CommandExecutor
from .errors import CalculatorFailure, InputError
from .settings import MAX_PRECISION, MAX_RADIX, MIN_RADIX, Settings
from .variables import MemoryVariableStore


logger = logging.getLogger(__name__)

PROMPT = "# "


def _radix(text: str) -> int:
    value = int(text)
    if not MIN_RADIX <= value <= MAX_RADIX:
        raise argparse.ArgumentTypeError(f"radix must be between {MIN_RADIX} and {MAX_RADIX}")
    return value


def _precision(text: str) -> int:
    value = int(text)
    if not 0 <= value <= MAX_PRECISION:
        raise argparse.ArgumentTypeError(f"precision must be between 0 and {MAX_PRECISION}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bcalc", description="Arbitrary precision calculator")
    parser.add_argument("-r", "--radix", type=_radix, default=10, help="radix used to read and show numbers")
    parser.add_argument("-p", "--precision", type=_precision, default=10, help="digits shown after the point")
    parser.add_argument("--convert-to-radix", type=_radix, default=None, help="radix used to show results")
    parser.add_argument("--fractional", action="store_true", help="show results as fractions")
    parser.add_argument("--commas", action="store_true", help="group integer digits with commas")
    parser.add_argument("--upper", action="store_true", help="show digits above 9 in uppercase")
    parser.add_argument("-i", "--input", help="evaluate a single line and exit")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="logging level (logs go to stderr)",
    )
    return parser


def _report(exc: CalculatorFailure, line: str, out: TextIO) -> None:
    if isinstance(exc, InputError) and exc.position is not None:
        print(f"Error: {exc}\n{exc.pointer(line)}", file=out)
    else:
        print(f"Error: {exc}", file=out)


def run_line(
    line: str,
    settings: Settings,
    variables: MemoryVariableStore,
    history_id: int,
    commands: CommandExecutor,
    out: TextIO,
    err: TextIO | None = None,
) -> bool:
    """Evaluate one line, printing its output to `out` and any error to `err`.

    Errors go to `out` when no `err` is given. Returns whether the line succeeded.
    """
    try:
        output = calculate(line, settings, variables, history_id, commands)
    except CalculatorFailure as exc:
        logger.debug("line %d failed: %r", history_id, exc)
        _report(exc, line, out if err is None else err)
        return False
    if output:
        print(output, file=out)
    return True


def repl(
    settings: Settings,
    stdin: TextIO,
    out: TextIO,
    commands: CommandExecutor | None = None,
) -> int:
    variables = MemoryVariableStore()
    commands = commands or CommandExecutor.default()
    interactive = stdin.isatty()
    history_id = 0
    while True:
        if interactive:
            print(PROMPT, end="", file=out, flush=True)
        line = stdin.readline()
        if not line:
            break
        run_line(line.rstrip("\r\n"), settings, variables, history_id, commands, out)
        history_id += 1
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    settings = Settings(
        radix=args.radix,
        convert_to_radix=args.convert_to_radix,
        precision=args.precision,
        fractional=args.fractional,
        commas=args.commas,
        upper=args.upper,
    )

    if args.input is not None:
        ok = run_line(
            args.input,
            settings,
            MemoryVariableStore(),
            0,
            CommandExecutor.default(),
            sys.stdout,
            sys.stderr,
        )
        return 0 if ok else 1
    return repl(settings, sys.stdin, sys.stdout)


if __name__ == "__main__":
    raise SystemExit(main())
