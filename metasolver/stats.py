"""Diagnostic counters for the solvers"""

games_solved = 0
saddle_shortcuts = 0
pivots = 0
series_states = 0
memo_hits = 0
ortools_fails = 0
precision_warnings = 0


def reset_counters():
    """Reset all global counters"""
    global games_solved, saddle_shortcuts, pivots, series_states, memo_hits
    global ortools_fails, precision_warnings
    games_solved = 0
    saddle_shortcuts = 0
    pivots = 0
    series_states = 0
    memo_hits = 0
    ortools_fails = 0
    precision_warnings = 0


def snapshot() -> dict[str, int]:
    return {
        "games_solved": games_solved,
        "saddle_shortcuts": saddle_shortcuts,
        "pivots": pivots,
        "series_states": series_states,
        "memo_hits": memo_hits,
        "ortools_fails": ortools_fails,
        "precision_warnings": precision_warnings,
    }


def print_stats():
    """Print current statistics"""
    print(f"Games solved: {games_solved}")
    if games_solved > 0:
        print(f"Saddle shortcuts: {saddle_shortcuts} ({saddle_shortcuts / games_solved * 100:.1f}%)")
        print(f"Pivots: {pivots} ({pivots / games_solved:.2f} per game)")
    print(f"Series states: {series_states}")
    if series_states + memo_hits > 0:
        print(f"Memo hits: {memo_hits} ({memo_hits / (series_states + memo_hits) * 100:.1f}%)")
    print(f"Precision warnings: {precision_warnings}")
    print(f"OR-Tools failures: {ortools_fails}")
