"""Numeric settings shared by the game and series solvers"""

from __future__ import annotations

# Ratio test only considers tableau entries above this.
EPSILON = 1e-12

# Strategies must sum to 1 within this; also the snap distance for
# recovered probabilities that land just outside [0, 1].
PROBABILITY_TOLERANCE = 1e-9

# maximin == minimax check for the pure strategy shortcut.
SADDLE_TOLERANCE = 1e-10

# Pivot budget is PIVOT_LIMIT_FACTOR * (rows + columns).
PIVOT_LIMIT_FACTOR = 4

DEFAULT_END_CONDITION = 0
