from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from . import stats
from .errors import InvalidChartError, MetaSolverError
from .linprog import exploitability, reference_equilibrium, solve_game_equilibrium
from .solver import SeriesSolver, solve_with_bans
from .utils import as_chart


@dataclass(frozen=True)
class LabelledChart:
    chart: np.ndarray
    row_names: list[str]
    column_names: list[str]


def _default_names(prefix: str, count: int) -> list[str]:
    return [f"{prefix}{k + 1}" for k in range(count)]


def load_chart(path: Path) -> LabelledChart:
    """
    Read a winrate chart from CSV or JSON.

    CSV: header row holds player 2's deck names, first column player 1's.
    JSON: {"rows": [...], "columns": [...], "chart": [[...], ...]} or a
    bare nested list.
    """
    if path.suffix.lower() == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            if "chart" not in data:
                raise InvalidChartError(f"{path}: JSON object has no 'chart' entry")
            chart = as_chart(data["chart"])
            row_names = data.get("rows") or _default_names("A", chart.shape[0])
            column_names = data.get("columns") or _default_names("B", chart.shape[1])
        else:
            chart = as_chart(data)
            row_names = _default_names("A", chart.shape[0])
            column_names = _default_names("B", chart.shape[1])
    else:
        frame = pd.read_csv(path, index_col=0)
        try:
            values = frame.to_numpy(dtype=np.float64)
        except ValueError as exc:
            raise InvalidChartError(f"{path}: non-numeric winrate: {exc}") from exc
        chart = as_chart(values)
        row_names = [str(name) for name in frame.index]
        column_names = [str(name) for name in frame.columns]

    if len(row_names) != chart.shape[0] or len(column_names) != chart.shape[1]:
        raise InvalidChartError(
            f"{path}: {len(row_names)} row names and {len(column_names)} column names "
            f"for a {chart.shape[0]}x{chart.shape[1]} chart"
        )
    return LabelledChart(chart, [str(n) for n in row_names], [str(n) for n in column_names])


def format_strategy(names: Sequence[str], probs: np.ndarray, eps: float = 1e-9) -> list[str]:
    """One line per deck played with probability above eps, most likely first."""
    width = max((len(n) for n in names), default=0)
    order = sorted(range(len(names)), key=lambda k: -float(probs[k]))
    return [f"  {names[k]:<{width}s}  {float(probs[k]):.4f}" for k in order if probs[k] > eps]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Equilibrium win probability for a deck series.")
    parser.add_argument("chart", help="Winrate chart (.csv or .json), rows are player 1's decks")
    parser.add_argument("--end", type=int, choices=(0, 1), default=0,
                        help="0: decided when a side has no decks left, 1: when a side has one left")
    parser.add_argument("--strategies", action="store_true", help="Print opening deck strategies")
    parser.add_argument("--bans", action="store_true", help="Solve a simultaneous ban phase first")
    parser.add_argument("--check", action="store_true",
                        help="Cross-check the first game against the reference LP solver")
    parser.add_argument("--stats", action="store_true", help="Print solver counters")
    args = parser.parse_args(argv)

    path = Path(args.chart)
    if not path.exists():
        print(f"Chart file not found: {path}", file=sys.stderr)
        return 1

    try:
        t0 = time.perf_counter()
        labelled = load_chart(path)
        series = SeriesSolver(labelled.chart, args.end)
        value = series.value()
        t1 = time.perf_counter()

        print(f"Series win probability for player 1: {value:.6f}")
        print(f"Solved {series.states_solved} states in {t1 - t0:.3f}s")

        if args.strategies or args.check:
            first_game = series.matrix()
            solution = solve_game_equilibrium(first_game)
        if args.strategies:
            print("Player 1 opens with:")
            print("\n".join(format_strategy(labelled.row_names, solution.row_strategy)))
            print("Player 2 opens with:")
            print("\n".join(format_strategy(labelled.column_names, solution.column_strategy)))

        if args.check:
            reference = reference_equilibrium(first_game)
            if reference is None:
                print("Reference LP failed on the first game")
            else:
                print(f"Reference LP value: {reference.value:.6f} (diff {abs(reference.value - solution.value):.2e})")
            print(f"Exploitability of pivoting solution: {exploitability(first_game, solution):.2e}")

        if args.bans:
            bans = solve_with_bans(labelled.chart, args.end)
            print(f"Win probability after bans: {bans.value:.6f}")
            print("Player 1 bans:")
            print("\n".join(format_strategy(labelled.column_names, bans.row_strategy)))
            print("Player 2 bans:")
            print("\n".join(format_strategy(labelled.row_names, bans.column_strategy)))
    except (MetaSolverError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.stats:
        stats.print_stats()
    return 0
