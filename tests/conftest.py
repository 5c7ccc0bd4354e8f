"""Shared pytest fixtures for lrexpr tests."""

import pytest

from lrexpr import ExprEngine, NumericType, RandomSource


@pytest.fixture
def engine() -> ExprEngine:
    """Return a floating-point engine with a private random source."""
    return ExprEngine(rng=RandomSource(1234))


@pytest.fixture
def int_engine() -> ExprEngine:
    """Return an integer engine with a private random source."""
    return ExprEngine(NumericType.INT, rng=RandomSource(1234))
