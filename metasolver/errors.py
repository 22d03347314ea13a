"""Exceptions and warnings raised by the solver"""

from __future__ import annotations


class MetaSolverError(Exception):
    """Base class for every solver failure."""


class InvalidInputError(MetaSolverError, IndexError, ValueError):
    """Bad shape, out-of-range index or unsupported parameter."""


class InvalidChartError(InvalidInputError):
    """Winrate chart is empty, ragged, or holds values outside [0, 1]."""


class ConvergenceError(MetaSolverError, ArithmeticError):
    """Pivoting could not reach an optimal tableau for this payoff matrix."""


class NumericPrecisionWarning(RuntimeWarning):
    """A recovered value or strategy had to be nudged back onto [0, 1]."""
