"""Assignment of cases to missingness patterns."""

import logging

import numpy as np

from .exceptions import warn_diagnostic

logger = logging.getLogger(__name__)


def assign_candidates(n, freq, rng):
    """
    Draw one pattern per case with probabilities ``freq``.

    Parameters:
    - n: Number of cases
    - freq: Normalized frequency vector
    - rng: numpy Generator

    Returns:
    - P: int array of length ``n`` with 1-based pattern numbers
    """
    freq = np.asarray(freq, dtype=float)
    P = rng.choice(len(freq), size=n, replace=True, p=freq) + 1
    unused = unused_patterns(P, len(freq))
    if unused:
        warn_diagnostic(
            f"No records are assigned to patterns {', '.join(str(i) for i in unused)}. "
            f"These patterns will not be generated. Consider reducing the number of "
            f"patterns or increasing the dataset size."
        )
    logger.info(f"Assigned {n} cases to {len(freq) - len(unused)} pattern(s)")
    return P


def unused_patterns(P, n_patterns):
    """1-based numbers of the patterns without candidates."""
    counts = np.bincount(P, minlength=n_patterns + 1)[1:]
    return [i + 1 for i in np.flatnonzero(counts == 0)]
