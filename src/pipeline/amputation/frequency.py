"""Frequency normalization and cell-to-case proportion conversion."""

import logging

import numpy as np

from .exceptions import ConfigurationError, InfeasibleProportionError, warn_diagnostic

logger = logging.getLogger(__name__)

FREQ_FILLER = 0.2


def recalculate_freq(freq):
    """Rescale a non-negative frequency vector to sum to 1."""
    freq = np.asarray(freq, dtype=float)
    total = freq.sum()
    if total <= 0:
        raise ConfigurationError("Frequency vector should contain at least one positive value")
    return freq / total


def resolve_freq(freq, n_patterns):
    """
    Validate a user supplied frequency vector against the pattern count.

    Parameters:
    - freq: Relative frequency per pattern (any 1-d array-like)
    - n_patterns: Number of patterns the frequencies refer to

    Returns:
    - freq: float array of length ``n_patterns`` summing to 1
    """
    freq = np.asarray(freq, dtype=float)
    if freq.ndim != 1:
        freq = freq.ravel()
        warn_diagnostic("Frequency should be a vector")
    if np.isnan(freq).any():
        raise ConfigurationError("Frequency vector cannot contain missing values")
    if (freq < 0).any():
        raise ConfigurationError("Frequency vector can only contain non-negative values")
    if len(freq) != n_patterns:
        if len(freq) > n_patterns:
            freq = freq[:n_patterns]
        else:
            freq = np.concatenate([freq, np.full(n_patterns - len(freq), FREQ_FILLER)])
        warn_diagnostic(
            f"Length of vector with relative frequencies does not match #patterns "
            f"and is therefore changed to {freq.tolist()}"
        )
    if not np.isclose(freq.sum(), 1.0):
        new_freq = recalculate_freq(freq)
        warn_diagnostic(
            f"Frequency vector {freq.tolist()} does not sum to 1 and is rescaled to {new_freq.tolist()}"
        )
        freq = new_freq
    else:
        freq = recalculate_freq(freq)
    return freq


def recalculate_prop(prop, n, k, patterns, freq):
    """
    Convert a proportion of missing cells into a proportion of missing cases.

    The desired number of missing cells ``prop * n * k`` is shared between the
    patterns according to ``freq``; dividing each share by the number of
    amputed variables in the pattern gives the number of cases it needs.

    Parameters:
    - prop: Proportion of cells that should become missing
    - n: Number of cases
    - k: Number of variables
    - patterns: Normalized pattern matrix (no rows of merely ones)
    - freq: Normalized frequency vector

    Returns:
    - prop: Equivalent proportion of cases
    """
    patterns = np.asarray(patterns)
    miss = prop * n * k
    n_zeros = (patterns == 0).sum(axis=1)
    cases = miss * np.asarray(freq, dtype=float) / n_zeros
    if cases.sum() > n:
        raise InfeasibleProportionError(
            "Proportion of missing cells is too large in combination with the desired "
            "number of missing variables"
        )
    case_prop = cases.sum() / n
    logger.info(f"Proportion of missing cells {prop} corresponds to {case_prop:.4f} of the cases")
    return case_prop
