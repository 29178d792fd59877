from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from bcalc import Settings, calculate
from bcalc.testing import generate_expressions


def test_generated_corpus_matches_reference() -> None:
    cases = generate_expressions(seed=1, count=500)
    assert len(cases) == 500
    for src, expected in cases:
        assert calculate(src, Settings()) == str(expected), src


def test_generator_is_deterministic() -> None:
    assert generate_expressions(seed=7, count=20) == generate_expressions(seed=7, count=20)


@given(seed=st.integers(min_value=0, max_value=2**32))
@settings(max_examples=100, deadline=None)
def test_random_seeds_match_reference(seed: int) -> None:
    for src, expected in generate_expressions(seed=seed, count=5):
        assert calculate(src, Settings()) == str(expected), src
