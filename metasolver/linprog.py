"""Zero-sum matrix game solving: tableau pivoting plus LP reference backends"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np
from ortools.linear_solver import pywraplp
from scipy.optimize import linprog

from . import config, stats
from .errors import ConvergenceError, NumericPrecisionWarning
from .tableau import (
    Tableau,
    build_tableau,
    entering_column,
    leaving_row,
    pivot,
    read_strategies,
    read_value,
)
from .utils import as_matrix, saddle_point


@dataclass(frozen=True, eq=False)
class GameSolution:
    """Equilibrium of a zero-sum game, from the row (maximizing) player's side.

    Attributes:
        value:           Expected payoff to the row player under optimal play.
        row_strategy:    Mixed strategy over rows.
        column_strategy: Mixed strategy over columns.
    """

    value: float
    row_strategy: np.ndarray
    column_strategy: np.ndarray

    def support(self, eps: float = config.PROBABILITY_TOLERANCE) -> tuple[list[int], list[int]]:
        """Rows and columns played with probability above eps."""
        rows = [int(i) for i in np.flatnonzero(self.row_strategy > eps)]
        cols = [int(j) for j in np.flatnonzero(self.column_strategy > eps)]
        return rows, cols


def _payoff(matrix) -> np.ndarray:
    payoffMatrix = as_matrix(matrix)
    if not bool(np.all(np.isfinite(payoffMatrix))):
        raise ConvergenceError("payoff matrix contains NaN or infinite entries")
    return payoffMatrix


def _pivot_to_optimum(payoffMatrix: np.ndarray, max_pivots: Optional[int] = None) -> Tableau:
    numRows, numCols = payoffMatrix.shape
    if max_pivots is None:
        max_pivots = config.PIVOT_LIMIT_FACTOR * (numRows + numCols)

    tableau = build_tableau(payoffMatrix)
    for _ in range(max_pivots):
        q = entering_column(tableau)
        if q is None:
            if not tableau.corner > 0:
                raise ConvergenceError(f"optimal tableau has non-positive objective {tableau.corner!r}")
            return tableau
        p = leaving_row(tableau, q, config.EPSILON)
        if p is None:
            raise ConvergenceError(f"no pivot row for column {q}; payoff matrix is degenerate")
        tableau = pivot(tableau, p, q)
        stats.pivots += 1

    if entering_column(tableau) is None and tableau.corner > 0:
        return tableau
    raise ConvergenceError(f"pivoting did not terminate within {max_pivots} pivots "
                           f"for a {numRows}x{numCols} matrix")


def _warn(message: str) -> None:
    stats.precision_warnings += 1
    warnings.warn(message, NumericPrecisionWarning, stacklevel=3)


def _tidy_value(value: float, payoffMatrix: np.ndarray, tol: float) -> float:
    lo = float(np.min(payoffMatrix))
    hi = float(np.max(payoffMatrix))
    if value < lo - tol or value > hi + tol:
        raise ConvergenceError(f"recovered value {value!r} outside payoff range [{lo}, {hi}]")
    if not lo <= value <= hi:
        clamped = min(max(value, lo), hi)
        _warn(f"game value {value!r} clamped to {clamped!r}")
        return clamped
    # Winrate boundaries: a value that is almost certain becomes certain.
    for bound in (0.0, 1.0):
        if value != bound and abs(value - bound) <= tol and lo <= bound <= hi:
            _warn(f"game value {value!r} snapped to {bound!r}")
            return bound
    return value


def _tidy_strategy(probs: np.ndarray, tol: float, player: str) -> np.ndarray:
    if bool(np.any(probs < -tol)) or bool(np.any(probs > 1.0 + tol)):
        raise ConvergenceError(f"{player} strategy is not a distribution: {probs}")
    if abs(float(np.sum(probs)) - 1.0) > tol:
        raise ConvergenceError(f"{player} strategy sums to {float(np.sum(probs))!r}")

    to_zero = (probs != 0.0) & (probs <= tol)
    to_one = (probs != 1.0) & (probs >= 1.0 - tol)
    if bool(np.any(to_zero | to_one)):
        _warn(f"{player} strategy entries {probs[to_zero | to_one]} snapped to 0 or 1")
        probs = np.where(to_zero, 0.0, np.where(to_one, 1.0, probs))
        total = float(np.sum(probs))
        if total != 1.0:
            probs = probs / total
    probs.setflags(write=False)
    return probs


def _unit(size: int, index: int) -> np.ndarray:
    out = np.zeros(size, dtype=np.float64)
    out[index] = 1.0
    out.setflags(write=False)
    return out


def solve_game_value(matrix, *, max_pivots: Optional[int] = None) -> float:
    """Value of the zero-sum game with payoff matrix (row player maximizes)."""
    payoffMatrix = _payoff(matrix)
    stats.games_solved += 1

    saddle = saddle_point(payoffMatrix)
    if saddle is not None:
        stats.saddle_shortcuts += 1
        return saddle[2]

    tableau = _pivot_to_optimum(payoffMatrix, max_pivots)
    return _tidy_value(read_value(tableau), payoffMatrix, config.PROBABILITY_TOLERANCE)


def solve_game_equilibrium(matrix, *, max_pivots: Optional[int] = None) -> GameSolution:
    """Value and optimal mixed strategies of both players."""
    payoffMatrix = _payoff(matrix)
    numRows, numCols = payoffMatrix.shape
    stats.games_solved += 1

    saddle = saddle_point(payoffMatrix)
    if saddle is not None:
        stats.saddle_shortcuts += 1
        i, j, value = saddle
        return GameSolution(value, _unit(numRows, i), _unit(numCols, j))

    tableau = _pivot_to_optimum(payoffMatrix, max_pivots)
    tol = config.PROBABILITY_TOLERANCE
    value = _tidy_value(read_value(tableau), payoffMatrix, tol)
    x, y = read_strategies(tableau)
    return GameSolution(value, _tidy_strategy(x, tol, "row"), _tidy_strategy(y, tol, "column"))


# Reference LP backends, used to cross-check the pivoting solver.


def build_glop_solver(numRows, numCols):
    """
    Fresh GLOP maximin model for a numRows x numCols game, or None when
    OR-Tools cannot create the backend. Column constraints start empty and
    are filled in by the caller.
    """
    solver = pywraplp.Solver.CreateSolver('GLOP')
    if not solver:
        return None
    solver.p = [solver.NumVar(0, solver.infinity(), f'p_{i}') for i in range(numRows)]
    solver.v = solver.NumVar(-solver.infinity(), solver.infinity(), 'v')
    solver.constraints = [solver.Constraint(0, solver.infinity()) for _ in range(numCols)]
    prob_constraint = solver.Constraint(1, 1)
    for p_i in solver.p:
        prob_constraint.SetCoefficient(p_i, 1)
    objective = solver.Objective()
    objective.SetCoefficient(solver.v, 1)
    objective.SetMaximization()
    return solver


def solve_lp_scipy(matrix) -> tuple[Optional[np.ndarray], Optional[float]]:
    """
    Row player's maximin strategy and value through SciPy's HiGHS driver.

    Variables are (x_1..x_m, v); maximize v subject to x.M[:, j] >= v for
    every column and sum(x) == 1.
    """
    payoffMatrix = _payoff(matrix)
    numRows, numCols = payoffMatrix.shape
    c = np.zeros(numRows + 1)
    c[-1] = -1.0
    A_ub = np.hstack([-payoffMatrix.T, np.ones((numCols, 1))])
    b_ub = np.zeros(numCols)
    A_eq = np.append(np.ones(numRows), 0.0)[np.newaxis, :]
    bounds = [(0, None)] * numRows + [(None, None)]

    res = linprog(c, A_ub=A_ub, b_ub=b_ub, A_eq=A_eq, b_eq=[1.0],
                  bounds=bounds, method='highs')
    if not res.success:
        return None, None
    return res.x[:-1], float(-res.fun)


def solve_lp_reference(matrix) -> tuple[Optional[np.ndarray], Optional[float]]:
    """Row player's maximin strategy and value: OR-Tools GLOP, SciPy on failure."""
    payoffMatrix = _payoff(matrix)
    numRows, numCols = payoffMatrix.shape
    solver = build_glop_solver(numRows, numCols)
    if solver is None:
        stats.ortools_fails += 1
        return solve_lp_scipy(payoffMatrix)

    for j, constraint in enumerate(solver.constraints):
        for i in range(numRows):
            constraint.SetCoefficient(solver.p[i], float(payoffMatrix[i, j]))
        constraint.SetCoefficient(solver.v, -1)

    if solver.Solve() != pywraplp.Solver.OPTIMAL:
        stats.ortools_fails += 1
        return solve_lp_scipy(payoffMatrix)
    probabilities = np.array([p_i.solution_value() for p_i in solver.p])
    return probabilities, solver.v.solution_value()


def reference_equilibrium(matrix) -> Optional[GameSolution]:
    """Both players' strategies from two reference LP solves (the column player's on -M^T)."""
    payoffMatrix = _payoff(matrix)
    row_probs, value = solve_lp_reference(payoffMatrix)
    col_probs, _neg_value = solve_lp_reference(-payoffMatrix.T)
    if row_probs is None or col_probs is None:
        return None
    return GameSolution(float(value), np.asarray(row_probs), np.asarray(col_probs))


def best_counterplay(matrix, p: np.ndarray) -> tuple[float, int]:
    """
    Find the column player's best pure reply to the row strategy p.

    Args:
        matrix: The game's payoff matrix
        p: Probability distribution for row player's strategy

    Returns:
        (row player's expected payoff against that reply, reply column)
    """
    payoffMatrix = as_matrix(matrix)
    ev_cols = np.asarray(p, dtype=np.float64) @ payoffMatrix
    worst_col = int(np.argmin(ev_cols))
    return float(ev_cols[worst_col]), worst_col


def exploitability(matrix, solution: GameSolution) -> float:
    """
    How far either side could move the payoff away from solution.value by
    deviating alone. Zero (up to rounding) for an exact equilibrium.
    """
    payoffMatrix = as_matrix(matrix)
    row_floor, _ = best_counterplay(payoffMatrix, solution.row_strategy)
    col_ceiling = float(np.max(payoffMatrix @ np.asarray(solution.column_strategy, dtype=np.float64)))
    return max(solution.value - row_floor, col_ceiling - solution.value, 0.0)
