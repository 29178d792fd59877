from __future__ import annotations

import logging
import string
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Final, cast

from .errors import InputError, ParseError, ParseErrorKind
from .spans import Position, Positioned
from .tokens import KEYWORDS, SINGLE_CHAR_TOKENS, BinaryOperator, Token, TokenKind, number, variable


logger = logging.getLogger(__name__)

WHITESPACE: Final = " \t\n\x0c\r"
_DIGITS: Final = string.digits + string.ascii_lowercase[:6]
_INT64_MAX: Final = 2**63 - 1


@dataclass(frozen=True, slots=True)
class Command:
    """A `/name args` line. Arguments are left raw for the command to interpret."""

    name: Positioned[str]
    arguments: Positioned[str]


@dataclass(slots=True)
class _Buffer:
    """Characters of a multi-character token (number, variable or keyword)."""

    radix: int
    tokens: list[Positioned[Token]] = field(default_factory=list)
    chars: list[str] = field(default_factory=list)

    def flush(self, stop: int) -> None:
        if not self.chars:
            return
        text = "".join(self.chars)
        start = stop - len(text)
        self.chars.clear()

        if text.startswith("$"):
            token = variable(text)
        elif text in KEYWORDS:
            token = KEYWORDS[text]
        else:
            token = number(_parse_number(text, self.radix, Position(start, len(text))))
        self.tokens.append(Positioned.at(token, start, len(text)))


def _parse_number(text: str, radix: int, position: Position) -> Fraction:
    # `_` separates digit groups. Only the first `.` is a decimal point; any later
    # one is left in and rejected as an invalid digit.
    digits: list[str] = []
    point: int | None = None
    for ch in text:
        if ch == "_":
            continue
        if ch == "." and point is None:
            point = len(digits)
            continue
        digits.append(ch)

    valid = _DIGITS[:radix]
    if not digits or any(ch.lower() not in valid for ch in digits):
        raise ParseError(ParseErrorKind.INVALID_NUMBER, position, text)

    numerator = int("".join(digits), radix)
    if point is None:
        return Fraction(numerator)
    return Fraction(numerator, radix ** (len(digits) - point))


def _check_ascii(src: str) -> None:
    for i, ch in enumerate(src):
        if not ch.isascii():
            raise ParseError(ParseErrorKind.NON_ASCII, Position(i, 1))


def _extract_command(src: str) -> Command | None:
    trimmed = src.lstrip(WHITESPACE)
    if not trimmed.startswith("/"):
        return None
    start = len(src) - len(trimmed)
    rest = trimmed[1:]

    split = next((i for i, ch in enumerate(rest) if ch in WHITESPACE), None)
    if split is None:
        return Command(
            name=Positioned.at(rest, start, len(trimmed)),
            arguments=Positioned.at("", start + len(trimmed), 0),
        )
    name = rest[:split]
    args = rest[split + 1 :]
    return Command(
        name=Positioned.at(name, start, 1 + len(name)),
        arguments=Positioned.at(args, len(src) - len(args), len(args)),
    )


def tokenize(src: str, radix: int = 10) -> Command | list[Positioned[Token]]:
    """Split a line of input into tokens, or recognize it as a command.

    Every `-` comes out as a subtraction operator; the tree builder decides which
    ones are really negation.
    """
    _check_ascii(src)

    command = _extract_command(src)
    if command is not None:
        logger.debug("command %r with arguments %r", command.name.value, command.arguments.value)
        return command

    buf = _Buffer(radix=radix)
    for i, ch in enumerate(src):
        if ch in WHITESPACE:
            buf.flush(i)
            continue
        token = SINGLE_CHAR_TOKENS.get(ch)
        if token is None:
            buf.chars.append(ch)
            continue
        buf.flush(i)
        buf.tokens.append(Positioned.at(token, i, 1))
    buf.flush(len(src))

    logger.debug("tokenized %d characters into %d tokens", len(src), len(buf.tokens))
    return buf.tokens


def _expect_tokens(src: str, radix: int, kind: ParseErrorKind) -> list[Positioned[Token]]:
    parsed = tokenize(src, radix)
    if isinstance(parsed, Command):
        raise ParseError(kind, parsed.name.position, f"/{parsed.name.value}")
    return parsed


def tokenize_variable_list(src: str) -> list[Positioned[str]]:
    """Parse a whitespace-separated list of `$names`."""
    # Radix is irrelevant to variable names; 10 keeps number errors readable.
    try:
        tokens = _expect_tokens(src, 10, ParseErrorKind.INVALID_VARIABLE)
    except ParseError as exc:
        if exc.kind is ParseErrorKind.INVALID_NUMBER:
            raise ParseError(ParseErrorKind.INVALID_VARIABLE, exc.position, exc.detail) from None
        raise

    names: list[Positioned[str]] = []
    for tok in tokens:
        if tok.value.kind is not TokenKind.VARIABLE:
            text = src[tok.position.start : tok.position.end]
            raise ParseError(ParseErrorKind.INVALID_VARIABLE, tok.position, text)
        names.append(tok.map(lambda t: t.value))
    return names


def tokenize_int_list(src: str, radix: int = 10) -> list[Positioned[int]]:
    """Parse a whitespace-separated list of signed 64-bit integers."""
    tokens = _expect_tokens(src, radix, ParseErrorKind.INVALID_NUMBER)

    values: list[Positioned[int]] = []
    sign: Position | None = None
    for tok in tokens:
        if tok.value.is_operator(BinaryOperator.SUBTRACT):
            if sign is not None:
                raise InputError("Two negative signs in a row", Position.from_span(sign, tok.position))
            sign = tok.position
            continue
        if tok.value.kind is not TokenKind.NUMBER:
            raise InputError(f"Expected integer, found {tok.value}", tok.position)

        # The NUMBER check above means the payload is a Fraction.
        value = cast(Fraction, tok.value.value)
        if value.denominator != 1:
            raise InputError(f"Expected an integer, found decimal: {value}", tok.position)
        if value.numerator > _INT64_MAX:
            raise InputError("Value must be representable as a 64-bit signed integer", tok.position)

        if sign is None:
            values.append(Positioned(value.numerator, tok.position))
        else:
            values.append(Positioned.spanning(-value.numerator, sign, tok.position))
            sign = None

    if sign is not None:
        raise InputError("Found negative sign without value", sign)
    return values
