from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from .operations import render, render_fraction


MIN_RADIX = 2
MAX_RADIX = 16
MAX_PRECISION = 255


@dataclass(slots=True)
class Settings:
    """How input is read and results are displayed."""

    radix: int = 10
    convert_to_radix: int | None = None
    precision: int = 10
    # Carried by inexact operations (roots) but not displayed.
    extra_precision: int = 0
    fractional: bool = False
    commas: bool = False
    upper: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for name, radix in (("radix", self.radix), ("convert_to_radix", self.convert_to_radix)):
            if radix is not None and not MIN_RADIX <= radix <= MAX_RADIX:
                raise ValueError(f"{name} must be between {MIN_RADIX} and {MAX_RADIX}, got {radix}")
        if self.precision < 0 or self.extra_precision < 0:
            raise ValueError("precision and extra precision must not be negative")
        if self.precision + self.extra_precision > MAX_PRECISION:
            raise ValueError(f"sum of precision and extra precision must not exceed {MAX_PRECISION}")

    @property
    def output_radix(self) -> int:
        return self.radix if self.convert_to_radix is None else self.convert_to_radix

    @property
    def working_precision(self) -> int:
        return self.precision + self.extra_precision

    def display(self, value: Fraction) -> str:
        if self.fractional:
            return render_fraction(value, self.output_radix, self.commas, self.upper)
        return render(value, self.output_radix, self.precision, self.commas, self.upper)
