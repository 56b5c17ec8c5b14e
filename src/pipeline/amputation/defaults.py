"""Default generators for patterns, frequencies, weights, types and odds.

Each generator is keyed on the (normalized) pattern matrix so that the
defaults always match its shape.
"""

import numpy as np

from .config import Mechanism, ScoreType

DEFAULT_ODDS = (1, 2, 3, 4)


def default_patterns(n):
    """Square matrix where pattern i amputes variable i only."""
    return 1 - np.eye(n, dtype=int)


def default_freq(patterns):
    """Every pattern occurs equally often."""
    n_patterns = len(patterns)
    return np.full(n_patterns, 1.0 / n_patterns)


def default_weights(patterns, mechanism):
    """
    Equal weights for the variables that drive the missingness.

    Parameters:
    - patterns: Normalized pattern matrix (0 = amputed, 1 = observed)
    - mechanism: Mechanism member

    Returns:
    - weights: float array with the shape of ``patterns``. Under MNAR the
      to-be-amputed variables get weight 1, otherwise the observed ones do.
    """
    patterns = np.asarray(patterns)
    weights = np.ones(patterns.shape, dtype=float)
    if mechanism is Mechanism.MNAR:
        weights[patterns == 1] = 0.0
    else:
        weights[patterns == 0] = 0.0
    return weights


def default_type(patterns):
    return [ScoreType.RIGHT] * len(patterns)


def default_odds(patterns):
    """Four quantile groups with odds 1, 2, 3 and 4 for every pattern."""
    return np.tile(np.array(DEFAULT_ODDS, dtype=float), (len(patterns), 1))
