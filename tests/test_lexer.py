from __future__ import annotations

from fractions import Fraction

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from bcalc import Command, InputError, ParseError, tokenize, tokenize_int_list, tokenize_variable_list
from bcalc.errors import ParseErrorKind
from bcalc.spans import Position
from bcalc.tokens import (
    ASSIGNMENT,
    CLOSE_PAREN,
    COMMA,
    KEYWORDS,
    OPEN_PAREN,
    SINGLE_CHAR_TOKENS,
    Token,
    number,
    variable,
)


_ATOMS = [
    "$var", "=", "1", ",", ".1", "(", ")", "+", "-", "*", "/", "%", "^",
    "sqrt", ",", "abs", ",", "max", ",", "min",
]


def _spans(src: str, radix: int = 10) -> list[tuple[Token, Position]]:
    out = tokenize(src, radix)
    assert not isinstance(out, Command)
    return [(tok.value, tok.position) for tok in out]


def test_all_tokens_without_spaces() -> None:
    assert _spans("".join(_ATOMS)) == [
        (variable("$var"), Position(0, 4)),
        (ASSIGNMENT, Position(4, 1)),
        (number(Fraction(1)), Position(5, 1)),
        (COMMA, Position(6, 1)),
        (number(Fraction(1, 10)), Position(7, 2)),
        (OPEN_PAREN, Position(9, 1)),
        (CLOSE_PAREN, Position(10, 1)),
        (SINGLE_CHAR_TOKENS["+"], Position(11, 1)),
        (SINGLE_CHAR_TOKENS["-"], Position(12, 1)),
        (SINGLE_CHAR_TOKENS["*"], Position(13, 1)),
        (SINGLE_CHAR_TOKENS["/"], Position(14, 1)),
        (SINGLE_CHAR_TOKENS["%"], Position(15, 1)),
        (SINGLE_CHAR_TOKENS["^"], Position(16, 1)),
        (KEYWORDS["sqrt"], Position(17, 4)),
        (COMMA, Position(21, 1)),
        (KEYWORDS["abs"], Position(22, 3)),
        (COMMA, Position(25, 1)),
        (KEYWORDS["max"], Position(26, 3)),
        (COMMA, Position(29, 1)),
        (KEYWORDS["min"], Position(30, 3)),
    ]


def test_all_tokens_with_spaces() -> None:
    got = _spans(" $var = , 1 1.1 ( ) + - * / % ^ sqrt abs max min ")
    starts = [p.start for _, p in got]
    assert starts == [1, 6, 8, 10, 12, 16, 18, 20, 22, 24, 26, 28, 30, 32, 37, 41, 45]
    assert got[4] == (number(Fraction(11, 10)), Position(12, 3))


@given(gaps=st.lists(st.integers(min_value=0, max_value=3), min_size=len(_ATOMS) + 1, max_size=len(_ATOMS) + 1))
@settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
def test_whitespace_only_shifts_spans(gaps: list[int]) -> None:
    base = _spans("".join(_ATOMS))
    src = "".join(" " * gap + atom for gap, atom in zip(gaps, _ATOMS)) + " " * gaps[-1]
    got = _spans(src)

    assert [tok for tok, _ in got] == [tok for tok, _ in base]
    shift = 0
    for i, ((_, before), (_, after)) in enumerate(zip(base, got)):
        shift += gaps[i]
        assert after == Position(before.start + shift, before.width)


@given(
    prefix=st.text(alphabet=st.characters(max_codepoint=127), max_size=20),
    bad=st.characters(min_codepoint=128),
    suffix=st.text(max_size=10),
    radix=st.integers(min_value=2, max_value=16),
)
@settings(max_examples=300)
def test_non_ascii_is_reported_at_first_offender(prefix: str, bad: str, suffix: str, radix: int) -> None:
    with pytest.raises(ParseError) as e:
        tokenize(prefix + bad + suffix, radix)
    assert e.value.kind is ParseErrorKind.NON_ASCII
    assert e.value.position == Position(len(prefix), 1)


def test_number_with_two_points_is_invalid() -> None:
    with pytest.raises(ParseError) as e:
        tokenize("1.1.1")
    assert e.value.kind is ParseErrorKind.INVALID_NUMBER
    assert e.value.position == Position(0, 5)
    assert str(e.value) == "Unable to parse number: '1.1.1'"


def test_hex_digits_either_case() -> None:
    assert _spans("0123456789ABCDEF", 16) == [(number(Fraction(81985529216486895)), Position(0, 16))]
    assert _spans("ff.8", 16) == [(number(Fraction(511, 2)), Position(0, 4))]


def test_digit_outside_radix() -> None:
    with pytest.raises(ParseError) as e:
        tokenize("9", 8)
    assert e.value.kind is ParseErrorKind.INVALID_NUMBER
    assert e.value.position == Position(0, 1)


def test_underscores_group_digits() -> None:
    assert _spans("1_000.5") == [(number(Fraction(2001, 2)), Position(0, 7))]


def test_unknown_word_is_invalid_number() -> None:
    with pytest.raises(ParseError) as e:
        tokenize("1 + foo")
    assert e.value.position == Position(4, 3)


def test_command_without_arguments() -> None:
    cmd = tokenize("/command")
    assert isinstance(cmd, Command)
    assert cmd.name.value == "command"
    assert cmd.name.position == Position(0, 8)
    assert cmd.arguments.value == ""
    assert cmd.arguments.position == Position(8, 0)


def test_command_with_arguments() -> None:
    cmd = tokenize("/command arg1 arg2")
    assert isinstance(cmd, Command)
    assert cmd.arguments.value == "arg1 arg2"
    assert cmd.arguments.position == Position(9, 9)


def test_command_with_surrounding_whitespace() -> None:
    cmd = tokenize("  /command     ")
    assert isinstance(cmd, Command)
    assert cmd.name.value == "command"
    assert cmd.name.position == Position(2, 8)
    assert cmd.arguments.value == "    "
    assert cmd.arguments.position == Position(11, 4)


def test_command_is_not_tokenized() -> None:
    # Arguments are left alone, even when they wouldn't tokenize.
    cmd = tokenize("/radix foo bar")
    assert isinstance(cmd, Command)
    assert cmd.arguments.value == "foo bar"


def test_variable_list() -> None:
    names = tokenize_variable_list("$var1 $var2 $var3")
    assert [n.value for n in names] == ["$var1", "$var2", "$var3"]
    assert [n.position for n in names] == [Position(0, 5), Position(6, 5), Position(12, 5)]
    assert tokenize_variable_list("") == []


def test_variable_list_rejects_other_tokens() -> None:
    with pytest.raises(ParseError) as e:
        tokenize_variable_list("$a 1")
    assert e.value.kind is ParseErrorKind.INVALID_VARIABLE
    assert e.value.position == Position(3, 1)
    assert str(e.value) == "Invalid variable name: '1'"

    with pytest.raises(ParseError) as e:
        tokenize_variable_list("$a foo")
    assert e.value.kind is ParseErrorKind.INVALID_VARIABLE
    assert e.value.position == Position(3, 3)

    with pytest.raises(ParseError) as e:
        tokenize_variable_list("/cmd")
    assert e.value.kind is ParseErrorKind.INVALID_VARIABLE
    assert e.value.position == Position(0, 4)


def test_int_list() -> None:
    ints = tokenize_int_list("-123 456 -789")
    assert [i.value for i in ints] == [-123, 456, -789]
    assert [i.position for i in ints] == [Position(0, 4), Position(5, 3), Position(9, 4)]
    assert [i.value for i in tokenize_int_list("ff 10", 16)] == [255, 16]


@pytest.mark.parametrize(
    ("src", "message", "position"),
    [
        ("--1", "Two negative signs in a row", Position(0, 2)),
        ("1.5", "Expected an integer, found decimal: 3/2", Position(0, 3)),
        ("1 -", "Found negative sign without value", Position(2, 1)),
        ("$x", "Expected integer, found Variable '$x'", Position(0, 2)),
        ("9223372036854775808", "Value must be representable as a 64-bit signed integer", Position(0, 19)),
    ],
)
def test_int_list_errors(src: str, message: str, position: Position) -> None:
    with pytest.raises(InputError) as e:
        tokenize_int_list(src)
    assert str(e.value) == message
    assert e.value.position == position


def test_int_list_accepts_int64_max() -> None:
    assert [i.value for i in tokenize_int_list("9223372036854775807")] == [2**63 - 1]
