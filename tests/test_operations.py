from __future__ import annotations

from fractions import Fraction

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from bcalc import MathExecutionError, Settings, calculate, exponentiate, render, render_fraction
from bcalc.errors import MathErrorKind
from bcalc.operations import to_radix_string


def evaluate_to_string(src: str, radix: int = 10, precision: int = 10, commas: bool = False, upper: bool = False) -> str:
    settings = Settings(convert_to_radix=radix, precision=precision, commas=commas, upper=upper)
    return calculate(src, settings)


@pytest.mark.parametrize(
    ("src", "precision", "expected"),
    [
        ("1234567890", 10, "1234567890"),
        ("0.01", 5, "0.01"),
        ("0.010001", 5, "0.01000"),
        ("0.010001", 6, "0.010001"),
        ("-12345.010001", 5, "-12345.01000"),
        ("0.0000049", 5, "0.00000"),
        ("0.000005", 5, "0.00001"),
        ("0.1", 0, "0"),
        ("1.1", 0, "1"),
        ("-1.1", 0, "-1"),
        ("1.5", 0, "2"),
        ("-1.5", 0, "-2"),
        ("-0.0000001", 5, "0.00000"),
        ("1/3", 10, "0.3333333333"),
        ("2/3", 3, "0.667"),
    ],
)
def test_decimal_rendering(src: str, precision: int, expected: str) -> None:
    assert evaluate_to_string(src, precision=precision) == expected


def test_hex_rendering() -> None:
    settings = Settings(radix=16)
    assert calculate("-1234567890ABCDEF", settings) == "-1234567890abcdef"
    settings.upper = True
    assert calculate("-1234567890ABCDEF.12A", settings) == "-1234567890ABCDEF.12A"


@pytest.mark.parametrize(
    ("src", "expected"),
    [
        ("123456789", "123,456,789"),
        ("1234567890", "1,234,567,890"),
        ("12345678901", "12,345,678,901"),
        ("-1234567890", "-1,234,567,890"),
        ("123", "123"),
        ("1234.5678", "1,234.5678"),
    ],
)
def test_commas(src: str, expected: str) -> None:
    assert evaluate_to_string(src, commas=True) == expected


@pytest.mark.parametrize(
    ("src", "expected"),
    [
        ("100^(1/2)", "10"),
        ("59049^(1/10)", "3"),
        ("9^10", "3486784401"),
        ("-3^9", "-19683"),
        ("-3^10", "59049"),
        ("2^(1/2)", "1.4142135624"),
        ("-2^(1/3)", "-1.2599210499"),
        ("-100^(7/3)", "-46415.8883361278"),
        ("-100^0", "1"),
        ("0^2", "0"),
        ("0^0", "1"),
        ("10^-2", "0.01"),
        ("1^(999/998)", "1"),
        ("4^(-1/2)", "0.5"),
        ("8^(2/3)", "4"),
        ("0.25^(1/2)", "0.5"),
        ("-0.001^(1/3)", "-0.1"),
        ("2.2500000000003^(1/2)", "1.5000000000"),
    ],
)
def test_exponentiation(src: str, expected: str) -> None:
    assert evaluate_to_string(src) == expected


def test_exponentiate_directly() -> None:
    assert exponentiate(Fraction(2), Fraction(10), 10, 10) == 1024
    assert exponentiate(Fraction(2), Fraction(-2), 10, 10) == Fraction(1, 4)
    assert exponentiate(Fraction(27), Fraction(1, 3), 10, 10) == 3
    with pytest.raises(MathExecutionError) as e:
        exponentiate(Fraction(-4), Fraction(1, 2), 10, 10)
    assert e.value.kind is MathErrorKind.IMAGINARY_RESULT
    assert e.value.position is None


@given(
    base=st.integers(min_value=-50, max_value=50),
    power=st.integers(min_value=0, max_value=20),
)
@settings(max_examples=200)
def test_integer_exponents_are_exact(base: int, power: int) -> None:
    assert exponentiate(Fraction(base), Fraction(power), 10, 10) == Fraction(base) ** power


@given(
    base=st.integers(min_value=2, max_value=10_000),
    degree=st.integers(min_value=2, max_value=5),
)
@settings(max_examples=100, deadline=None)
def test_roots_are_accurate(base: int, degree: int) -> None:
    root = exponentiate(Fraction(base), Fraction(1, degree), 10, 10)
    assert abs(float(root) - base ** (1 / degree)) < 1e-9


@given(
    numerator=st.integers(min_value=1, max_value=2000),
    denominator=st.integers(min_value=1, max_value=2000),
    degree=st.integers(min_value=2, max_value=6),
    precision=st.integers(min_value=0, max_value=6),
    radix=st.integers(min_value=2, max_value=16),
    negative=st.booleans(),
)
@settings(max_examples=300, deadline=None)
def test_roots_within_error_bound(
    numerator: int, denominator: int, degree: int, precision: int, radix: int, negative: bool
) -> None:
    magnitude = Fraction(numerator, denominator)
    negative = negative and degree % 2 == 1
    root = exponentiate(-magnitude if negative else magnitude, Fraction(1, degree), precision, radix)
    assert (root < 0) == negative

    # x^d is increasing for x >= 0, so these bracket the true root within the bound.
    max_error = Fraction(1, radix ** (precision + 1))
    assert max(abs(root) - max_error, 0) ** degree <= magnitude <= (abs(root) + max_error) ** degree


def test_small_radicand_root() -> None:
    root = exponentiate(Fraction(1, 257), Fraction(1, 4), 1, 2)
    assert (root - Fraction(1, 4)) ** 4 <= Fraction(1, 257) <= (root + Fraction(1, 4)) ** 4
    assert render(root, 2, 1) == "0.0"


@pytest.mark.parametrize("radicand", [n for n in range(2, 64) if round(n ** (1 / 3)) ** 3 != n])
def test_inexact_roots_render_padded(radicand: int) -> None:
    root = exponentiate(Fraction(radicand), Fraction(1, 3), 10, 2)
    assert root ** 3 != radicand
    _, _, frac = render(root, 2, 10).partition(".")
    assert len(frac) == 10


@given(
    numerator=st.integers(min_value=-(10**12), max_value=10**12),
    denominator=st.integers(min_value=1, max_value=10**6),
    precision=st.integers(min_value=0, max_value=12),
)
@settings(max_examples=300)
def test_render_rounds_to_nearest(numerator: int, denominator: int, precision: int) -> None:
    value = Fraction(numerator, denominator)
    out = render(value, 10, precision)

    if Fraction(out) == 0:
        assert not out.startswith("-")
    # Rounded half away from zero, so never off by more than half a unit in the last place.
    assert abs(Fraction(out) - value) <= Fraction(1, 2 * 10**precision)

    whole, _, frac = out.partition(".")
    exact = (value * 10**precision).denominator == 1
    if exact:
        assert not frac.endswith("0")
    else:
        assert len(frac) == precision


@given(
    value=st.integers(min_value=-(10**30), max_value=10**30),
    radix=st.integers(min_value=2, max_value=16),
    precision=st.integers(min_value=0, max_value=8),
)
@settings(max_examples=200)
def test_integers_render_without_point(value: int, radix: int, precision: int) -> None:
    out = render(Fraction(value), radix, precision)
    assert "." not in out
    assert int(out, radix) == value


@pytest.mark.parametrize("precision", [0, 1, 10, 255])
def test_zero(precision: int) -> None:
    assert render(Fraction(0), 10, precision) == "0"
    assert render(Fraction(0), 2, precision, commas=True) == "0"


def test_render_fraction() -> None:
    assert render_fraction(Fraction(1, 3)) == "1/3"
    assert render_fraction(Fraction(-5, 2)) == "-5/2"
    assert render_fraction(Fraction(7)) == "7"
    assert render_fraction(Fraction(255, 16), 16) == "ff/10"
    assert render_fraction(Fraction(1234567, 1000), commas=True, upper=True) == "1,234,567/1,000"


def test_to_radix_string() -> None:
    assert to_radix_string(0, 2) == "0"
    assert to_radix_string(10, 2) == "1010"
    assert to_radix_string(255, 16, upper=True) == "FF"
    with pytest.raises(ValueError):
        to_radix_string(-1, 10)
