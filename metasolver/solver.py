"""
Series solver: player 1's equilibrium chance of winning a deck series.

Each game both players pick one of their remaining decks at the same time;
the deck that wins its game leaves the pool. A player-1 win removes that
row of the chart, a loss removes the column. Every state is therefore a
subset of the original rows and columns, and the value of a state is the
value of the matrix game whose payoffs are the values of the states one
game further on.
"""

from __future__ import annotations

import operator
from enum import IntEnum
from typing import Optional

import numpy as np

from . import config, stats
from .errors import InvalidChartError
from .linprog import GameSolution, solve_game_equilibrium, solve_game_value
from .utils import as_chart, check_index, drop_index, extract_submatrix


class EndCondition(IntEnum):
    """When the series is decided."""

    FULL_ELIMINATION = 0
    """A side wins once it has no decks left (every deck must win a game)."""

    ONE_IN_RESERVE = 1
    """A side wins once it is down to its last deck."""


def as_end_condition(value) -> EndCondition:
    try:
        return EndCondition(operator.index(value))
    except (TypeError, ValueError) as exc:
        raise InvalidChartError(f"end condition must be 0 or 1, got {value!r}") from exc


StateKey = tuple[tuple[int, ...], tuple[int, ...]]


class SeriesSolver:
    """
    Memoized series recursion over one chart.

    States are keyed by the original row and column indices still in the
    pool, so identical sub-charts reached through different game orders
    are solved once. The memo lives on the instance; nothing is shared
    between solvers.
    """

    def __init__(self, chart, end_condition=config.DEFAULT_END_CONDITION) -> None:
        self.chart = as_chart(chart)
        self.chart.setflags(write=False)
        self.end_condition = as_end_condition(end_condition)

        numRows, numCols = self.chart.shape
        if self.end_condition == EndCondition.ONE_IN_RESERVE and min(numRows, numCols) < 2:
            raise InvalidChartError(
                f"a series decided at one deck left needs two or more decks per side, got {numRows}x{numCols}"
            )
        self._rows = tuple(range(numRows))
        self._cols = tuple(range(numCols))
        self._memo: dict[StateKey, float] = {}

    @property
    def states_solved(self) -> int:
        return len(self._memo)

    def value(self) -> float:
        """Player 1's probability of winning the series."""
        key = (self._rows, self._cols)
        if key in self._memo:
            return self._memo[key]
        return self._solve_state(self.chart, self._rows, self._cols)

    def value_without(self, row: Optional[int] = None, column: Optional[int] = None) -> float:
        """Series value with one of player 1's decks (row) and/or player 2's (column) out of the pool."""
        numRows, numCols = self.chart.shape
        if row is not None:
            row = check_index(row, numRows, "row")
        if column is not None:
            column = check_index(column, numCols, "column")
        return self._child(self.chart, self._rows, self._cols, row, column)

    def matrix(self) -> np.ndarray:
        """
        Payoff matrix of the first game: entry (i, j) is the series value
        if player 1 opens with deck i and player 2 with deck j.
        """
        chart, rows, cols = self.chart, self._rows, self._cols
        numRows, numCols = chart.shape

        if self.end_condition == EndCondition.FULL_ELIMINATION:
            if numRows == 1 and numCols == 1:
                return chart.copy()
            if numRows == 1:
                lose = self._column_removed_values(chart, rows, cols)
                return chart + (1.0 - chart) * lose[np.newaxis, :]
            if numCols == 1:
                win = self._row_removed_values(chart, rows, cols)
                return chart * win[:, np.newaxis]
        elif numRows == 2 and numCols == 2:
            return chart.copy()

        return self._continuation(chart, rows, cols)

    def equilibrium(self) -> GameSolution:
        """Opening deck strategies for both players and the series value."""
        return solve_game_equilibrium(self.matrix())

    def _child(self, chart: np.ndarray, rows: tuple[int, ...], cols: tuple[int, ...],
               exclude_row: Optional[int] = None, exclude_column: Optional[int] = None) -> float:
        child_rows = rows if exclude_row is None else drop_index(rows, exclude_row)
        child_cols = cols if exclude_column is None else drop_index(cols, exclude_column)
        key = (child_rows, child_cols)
        if key in self._memo:
            stats.memo_hits += 1
            return self._memo[key]
        sub = extract_submatrix(chart, exclude_row, exclude_column)
        return self._solve_state(sub, child_rows, child_cols)

    def _row_removed_values(self, chart, rows, cols) -> np.ndarray:
        return np.array([self._child(chart, rows, cols, exclude_row=i) for i in range(len(rows))])

    def _column_removed_values(self, chart, rows, cols) -> np.ndarray:
        return np.array([self._child(chart, rows, cols, exclude_column=j) for j in range(len(cols))])

    def _continuation(self, chart: np.ndarray, rows: tuple[int, ...], cols: tuple[int, ...]) -> np.ndarray:
        numRows, numCols = chart.shape
        reserve = self.end_condition == EndCondition.ONE_IN_RESERVE

        # Player 1 down to two decks: winning a game leaves one, which decides the series.
        if reserve and numRows == 2:
            lose = self._column_removed_values(chart, rows, cols)
            return chart + (1.0 - chart) * lose[np.newaxis, :]

        # Player 2 down to two decks: losing a game decides it the other way.
        if reserve and numCols == 2:
            win = self._row_removed_values(chart, rows, cols)
            return chart * win[:, np.newaxis]

        win = self._row_removed_values(chart, rows, cols)
        lose = self._column_removed_values(chart, rows, cols)
        return chart * win[:, np.newaxis] + (1.0 - chart) * lose[np.newaxis, :]

    def _solve_state(self, chart: np.ndarray, rows: tuple[int, ...], cols: tuple[int, ...]) -> float:
        stats.series_states += 1
        numRows, numCols = chart.shape

        if self.end_condition == EndCondition.FULL_ELIMINATION:
            if numRows == 1 and numCols == 1:
                value = float(chart[0, 0])
            elif numRows == 1:
                # Last deck for player 1: one win takes the series.
                c = float(chart[0, 0])
                value = c + (1.0 - c) * self._child(chart, rows, cols, exclude_column=0)
            elif numCols == 1:
                # Last deck for player 2: player 1 has to beat it with every deck.
                c = float(chart[0, 0])
                value = c * self._child(chart, rows, cols, exclude_row=0)
            else:
                value = solve_game_value(self._continuation(chart, rows, cols))
        elif numRows == 2 and numCols == 2:
            value = solve_game_value(chart)
        else:
            value = solve_game_value(self._continuation(chart, rows, cols))

        self._memo[(rows, cols)] = value
        return value


def solve_series(chart, end_condition=config.DEFAULT_END_CONDITION) -> float:
    """Player 1's equilibrium probability of winning the series described by chart."""
    return SeriesSolver(chart, end_condition).value()


def series_matrix(chart, end_condition=config.DEFAULT_END_CONDITION) -> np.ndarray:
    """First-game payoff matrix whose game value is the series value."""
    return SeriesSolver(chart, end_condition).matrix()


def solve_series_equilibrium(chart, end_condition=config.DEFAULT_END_CONDITION) -> GameSolution:
    """Series value together with each player's opening deck strategy."""
    return SeriesSolver(chart, end_condition).equilibrium()


def solve_with_bans(chart, end_condition=config.DEFAULT_END_CONDITION) -> GameSolution:
    """
    Solve a simultaneous ban phase followed by the series.

    Player 1 bans one of player 2's decks (a chart column) while player 2
    bans one of player 1's (a chart row). In the returned solution the
    row strategy is over the columns player 1 may ban and the column
    strategy over the rows player 2 may ban.
    """
    series = SeriesSolver(chart, end_condition)
    numRows, numCols = series.chart.shape
    smallest = 2 if series.end_condition == EndCondition.FULL_ELIMINATION else 3
    if min(numRows, numCols) < smallest:
        raise InvalidChartError(
            f"a ban phase needs {smallest} or more decks per side for this end condition, "
            f"got {numRows}x{numCols}"
        )

    bans = np.empty((numCols, numRows), dtype=np.float64)
    for banned_col in range(numCols):
        for banned_row in range(numRows):
            bans[banned_col, banned_row] = series.value_without(row=banned_row, column=banned_col)
    return solve_game_equilibrium(bans)
