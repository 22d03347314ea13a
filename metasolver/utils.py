"""Utility functions for charts and payoff matrices"""

from __future__ import annotations

import operator
from typing import Optional

import numpy as np

from .config import SADDLE_TOLERANCE
from .errors import InvalidChartError, InvalidInputError


def as_matrix(matrix, error: type[InvalidInputError] = InvalidInputError) -> np.ndarray:
    """Copy a nested sequence or array into a fresh 2-D float64 array."""
    try:
        out = np.array(matrix, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise error(f"matrix is not rectangular or not numeric: {exc}") from exc
    if out.ndim != 2:
        raise error(f"matrix must be 2-D, got {out.ndim} dimension(s)")
    if out.shape[0] == 0 or out.shape[1] == 0:
        raise error(f"matrix must have at least one row and column, got shape {out.shape}")
    return out


def as_chart(chart) -> np.ndarray:
    """Validate a winrate chart: rectangular, non-empty, entries in [0, 1]."""
    out = as_matrix(chart, error=InvalidChartError)
    inside = (out >= 0.0) & (out <= 1.0)
    if not bool(np.all(inside)):
        i, j = (int(k) for k in np.argwhere(~inside)[0])
        raise InvalidChartError(f"winrate at ({i}, {j}) is {out[i, j]!r}, expected a value in [0, 1]")
    return out


def check_index(index, size: int, axis: str) -> int:
    try:
        index = operator.index(index)
    except TypeError as exc:
        raise InvalidInputError(f"{axis} index must be an integer, got {index!r}") from exc
    if not 0 <= index < size:
        raise InvalidInputError(f"{axis} index {index} out of range for {size} {axis}s")
    return index


def extract_submatrix(matrix,
                      exclude_row: Optional[int] = None,
                      exclude_column: Optional[int] = None) -> np.ndarray:
    """
    Return a copy of matrix without the given row and/or column.

    None leaves that dimension alone. Negative indices are rejected rather
    than wrapped around.
    """
    out = as_matrix(matrix)
    numRows, numCols = out.shape
    if exclude_row is not None:
        row = check_index(exclude_row, numRows, "row")
        out = np.delete(out, row, axis=0)
    if exclude_column is not None:
        column = check_index(exclude_column, numCols, "column")
        out = np.delete(out, column, axis=1)
    return out


def drop_index(labels: tuple[int, ...], position: int) -> tuple[int, ...]:
    """Returns labels without the entry at position"""
    return labels[:position] + labels[position + 1:]


def saddle_point(matrix: np.ndarray, tol: float = SADDLE_TOLERANCE) -> Optional[tuple[int, int, float]]:
    """
    Check for a pure strategy equilibrium.

    Returns (row, column, value) when the best row minimum meets the
    smallest column maximum, otherwise None.
    """
    row_mins = np.min(matrix, axis=1)
    col_maxs = np.max(matrix, axis=0)
    i = int(np.argmax(row_mins))
    j = int(np.argmin(col_maxs))
    if abs(row_mins[i] - col_maxs[j]) <= tol:
        return i, j, float(row_mins[i])
    return None
