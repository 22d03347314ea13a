"""Equilibrium win probabilities for multi-deck series"""

from .errors import (
    ConvergenceError,
    InvalidChartError,
    InvalidInputError,
    MetaSolverError,
    NumericPrecisionWarning,
)
from .linprog import GameSolution, solve_game_equilibrium, solve_game_value
from .solver import (
    EndCondition,
    SeriesSolver,
    series_matrix,
    solve_series,
    solve_series_equilibrium,
    solve_with_bans,
)
from .utils import extract_submatrix

__all__ = [
    "ConvergenceError",
    "EndCondition",
    "GameSolution",
    "InvalidChartError",
    "InvalidInputError",
    "MetaSolverError",
    "NumericPrecisionWarning",
    "SeriesSolver",
    "extract_submatrix",
    "series_matrix",
    "solve_game_equilibrium",
    "solve_game_value",
    "solve_series",
    "solve_series_equilibrium",
    "solve_with_bans",
]
