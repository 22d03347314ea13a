"""
Simplex tableau for two-player zero-sum matrix games.

Layout for an m x n payoff matrix (after shifting every payoff to >= 1):

    cells[:m, :n]   shifted payoffs
    cells[:m, n]    right hand side, starts at 1
    cells[m, :n]    objective row, starts at -1
    cells[m, n]     objective value, starts at 0

Every row and column carries a label saying which player's variable it
currently stands for. Pivoting swaps the label of the pivot row with the
label of the pivot column, so at the end the row player's weights are
read from the objective row and the column player's from the right hand
side.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .config import EPSILON


@dataclass(frozen=True)
class RowVariable:
    """Variable belonging to player 1 (the maximizing row player)."""
    index: int


@dataclass(frozen=True)
class ColumnVariable:
    """Variable belonging to player 2 (the minimizing column player)."""
    index: int


Label = Union[RowVariable, ColumnVariable]


@dataclass(frozen=True)
class Tableau:
    cells: np.ndarray
    row_labels: tuple[Label, ...]
    column_labels: tuple[Label, ...]
    shift: float

    @property
    def num_rows(self) -> int:
        return len(self.row_labels)

    @property
    def num_cols(self) -> int:
        return len(self.column_labels)

    @property
    def objective(self) -> np.ndarray:
        return self.cells[self.num_rows, :self.num_cols]

    @property
    def rhs(self) -> np.ndarray:
        return self.cells[:self.num_rows, self.num_cols]

    @property
    def corner(self) -> float:
        return float(self.cells[self.num_rows, self.num_cols])


def build_tableau(payoffMatrix: np.ndarray) -> Tableau:
    numRows, numCols = payoffMatrix.shape
    shift = float(np.min(payoffMatrix)) - 1.0

    cells = np.zeros((numRows + 1, numCols + 1), dtype=np.float64)
    cells[:numRows, :numCols] = payoffMatrix - shift
    cells[:numRows, numCols] = 1.0
    cells[numRows, :numCols] = -1.0

    cells.setflags(write=False)
    return Tableau(
        cells=cells,
        row_labels=tuple(RowVariable(i) for i in range(numRows)),
        column_labels=tuple(ColumnVariable(j) for j in range(numCols)),
        shift=shift,
    )


def entering_column(tableau: Tableau) -> Optional[int]:
    """First objective-row column with a negative entry, or None when optimal."""
    negative = np.flatnonzero(tableau.objective < 0)
    if negative.size == 0:
        return None
    return int(negative[0])


def leaving_row(tableau: Tableau, q: int, eps: float = EPSILON) -> Optional[int]:
    """
    Ratio test on column q.

    Rows with an entry above eps compete on entry / rhs, largest wins.
    A competing row whose rhs has dropped to <= 0 is taken on sight.
    """
    cells = tableau.cells
    rhs_col = tableau.num_cols
    p = None
    r = 0.0
    for i in range(tableau.num_rows):
        t1 = cells[i, q]
        if t1 > eps:
            t2 = cells[i, rhs_col]
            if t2 <= 0:
                return i
            if t1 > t2 * r:
                p = i
                r = t1 / t2
    return p


def pivot(tableau: Tableau, p: int, q: int) -> Tableau:
    """Exchange row p's variable with column q's, returning a new tableau."""
    cells = tableau.cells
    d = cells[p, q]
    col = cells[:, q].copy()
    prow = cells[p, :] / d

    out = cells - np.outer(col, prow)
    out[p, :] = prow
    out[:, q] = -col / d
    out[p, q] = 1.0 / d
    out.setflags(write=False)

    row_labels = list(tableau.row_labels)
    column_labels = list(tableau.column_labels)
    row_labels[p], column_labels[q] = column_labels[q], row_labels[p]
    return Tableau(
        cells=out,
        row_labels=tuple(row_labels),
        column_labels=tuple(column_labels),
        shift=tableau.shift,
    )


def read_value(tableau: Tableau) -> float:
    """Game value of a final tableau, shift undone."""
    return 1.0 / tableau.corner + tableau.shift


def read_strategies(tableau: Tableau) -> tuple[np.ndarray, np.ndarray]:
    """Mixed strategies of both players read off a final tableau."""
    v = 1.0 / tableau.corner
    x = np.zeros(tableau.num_rows, dtype=np.float64)
    y = np.zeros(tableau.num_cols, dtype=np.float64)

    objective = tableau.objective
    for j, label in enumerate(tableau.column_labels):
        if isinstance(label, RowVariable):
            x[label.index] = objective[j] * v

    rhs = tableau.rhs
    for i, label in enumerate(tableau.row_labels):
        if isinstance(label, ColumnVariable):
            y[label.index] = rhs[i] * v

    return x, y
