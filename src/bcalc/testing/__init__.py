from __future__ import annotations

from .corpus import generate_expressions

__all__ = ["generate_expressions"]
