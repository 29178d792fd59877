"""Arbitrary precision arithmetic that `Fraction` doesn't do on its own."""
from __future__ import annotations

import logging
import math
import string
from fractions import Fraction
from typing import Final

from .errors import MathErrorKind, MathExecutionError


logger = logging.getLogger(__name__)

_DIGITS: Final = string.digits + string.ascii_lowercase


def to_radix_string(value: int, radix: int, *, upper: bool = False) -> str:
    """Digits of a non-negative integer in `radix` (2..36)."""
    if value < 0:
        raise ValueError("to_radix_string() requires a non-negative value")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, d = divmod(value, radix)
        digits.append(_DIGITS[d])
    out = "".join(reversed(digits))
    return out.upper() if upper else out


def _group(digits: str) -> str:
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i : i + 3] for i in range(head, len(digits), 3)]
    return ",".join(groups)


def render(
    value: Fraction,
    radix: int = 10,
    precision: int = 10,
    commas: bool = False,
    upper: bool = False,
) -> str:
    """Render `value` as a (possibly fractional) positional number in `radix`.

    Trailing zeros after the point only appear when the value had to be rounded,
    to show that more digits exist:

        render(Fraction("0.01"), 10, 5)      == "0.01"
        render(Fraction("0.010001"), 10, 5)  == "0.01000"
    """
    # Split the sign off first, otherwise "-0.5" would lose it with an integer
    # part of 0. It also keeps the modulus below on non-negative numbers.
    sign = "-" if value < 0 else ""
    scale = radix**precision
    scaled = abs(value * scale)
    exact = scaled.denominator == 1
    # Half rounds away from zero.
    rounded = math.floor(scaled + Fraction(1, 2))
    if rounded == 0:
        sign = ""
    whole, frac = divmod(rounded, scale)

    frac_digits = ""
    if precision:
        frac_digits = to_radix_string(frac, radix, upper=upper).rjust(precision, "0")
        if exact:
            frac_digits = frac_digits.rstrip("0")

    whole_digits = to_radix_string(whole, radix, upper=upper)
    if commas:
        whole_digits = _group(whole_digits)

    if frac_digits:
        return f"{sign}{whole_digits}.{frac_digits}"
    return f"{sign}{whole_digits}"


def render_fraction(value: Fraction, radix: int = 10, commas: bool = False, upper: bool = False) -> str:
    """Render `value` exactly as `numerator/denominator` in `radix`."""

    def digits(n: int) -> str:
        out = to_radix_string(n, radix, upper=upper)
        return _group(out) if commas else out

    sign = "-" if value < 0 else ""
    out = sign + digits(abs(value.numerator))
    if value.denominator != 1:
        out += "/" + digits(value.denominator)
    return out


def exponentiate(base: Fraction, exponent: Fraction, precision: int, radix: int) -> Fraction:
    """Compute `base ** exponent`, exactly when the exponent is an integer.

    Otherwise `b^(n/d)` is computed as the `d`th root of `b^n` by Newton's method,
    accurate to `radix ** -(precision + 1)`. The extra digit keeps the last
    displayed digit from being wrong due to rounding.
    """
    if exponent < 0:
        if base == 0:
            raise MathExecutionError(MathErrorKind.DIVISION_BY_ZERO)
        base = 1 / base

    power = abs(exponent.numerator)
    degree = exponent.denominator
    radicand = base**power

    if degree == 1:
        return radicand
    if radicand < 0 and degree % 2 == 0:
        raise MathExecutionError(MathErrorKind.IMAGINARY_RESULT)

    # Odd roots of negative numbers are the negated roots of their magnitude.
    sign = -1 if radicand < 0 else 1
    magnitude = abs(radicand)
    scale = radix ** (precision + 1)
    max_error = Fraction(1, scale)

    if magnitude < 1:
        below = _fractional_root_floor(magnitude, degree, scale)
        if Fraction(below, scale) ** degree == magnitude:
            return sign * Fraction(below, scale)
        # One grid step above the root is already within max_error of it.
        x = Fraction(below + 1, scale)
    else:
        guess = _integer_root_guess(radicand, degree)
        if guess**degree == radicand:
            return Fraction(guess)
        x = Fraction(abs(guess) or 1)

    # With f(x) = x^d - r, a Newton step x - f(x)/f'(x) simplifies to
    # (r + (d - 1) * x^d) / (d * x^(d - 1)). From any positive x the step lands
    # at or above the root, and then r / step^(d - 1) is at or below it, so the
    # two bracket the root.
    #
    # Exact iterates grow about `degree` times longer each step, so they are
    # rounded up onto a grid finer than max_error / degree, staying above the
    # root. The step that meets the bound is returned unrounded.
    grid = scale * radix * degree
    steps = 0
    while True:
        step = (magnitude + (degree - 1) * x**degree) / (degree * x ** (degree - 1))
        steps += 1
        if step - magnitude / step ** (degree - 1) <= max_error:
            break
        x = Fraction(math.ceil(step * grid), grid)

    logger.debug("root of degree %d converged after %d Newton steps", degree, steps)
    return sign * step


def _fractional_root_floor(magnitude: Fraction, degree: int, scale: int) -> int:
    """Largest `k` with `(k / scale) ** degree <= magnitude`, for `0 <= magnitude < 1`."""
    # Compared as integers: k^d * denominator <= numerator * scale^d.
    numerator = magnitude.numerator * scale**degree
    denominator = magnitude.denominator
    lower, upper = 0, scale
    while upper - lower > 1:
        middle = (lower + upper) // 2
        if middle**degree * denominator <= numerator:
            lower = middle
        else:
            upper = middle
    return lower


def _integer_root_guess(radicand: Fraction, degree: int) -> int:
    """Binary search the integers between 0 and `radicand` for a rough root.

    Newton's method converges very slowly on large numbers from a bad start, so
    this gets it close first. The search follows whichever direction makes
    |x^d - r| shrink.
    """

    def error(x: int) -> Fraction:
        return abs(Fraction(x) ** degree - radicand)

    bound = int(radicand)
    lower, upper = (bound, 0) if radicand < 0 else (0, bound)

    guess = (upper - lower) // 2 + lower
    guess_error = error(guess)
    above_error = error(guess + 1)
    if above_error < guess_error:
        lower = guess + 1
        heading_up, last_error = True, above_error
    else:
        upper = guess
        heading_up, last_error = False, guess_error

    span = upper - lower
    while span > 1:
        guess = span // 2 + lower
        guess_error = error(guess)
        if heading_up == (guess_error < last_error):
            heading_up = True
            lower = guess
        else:
            heading_up = False
            upper = guess
        last_error = guess_error
        span = upper - lower

    if span == 0 or error(upper) < error(lower):
        return upper
    return lower
