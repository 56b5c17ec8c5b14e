"""Weighted sum scores of the candidates of each pattern."""

import numpy as np


def scale(values):
    """Center and scale columns to mean 0 and sample standard deviation 1."""
    values = np.asarray(values, dtype=float)
    return (values - values.mean(axis=0)) / values.std(axis=0, ddof=1)


def standardize_candidates(candidates):
    """
    Standardize the candidates of one pattern column by column.

    Constant columns cannot be scaled and are only centered, which turns
    them into zeros. When every column is constant the candidates are left
    as they are.

    Note: when only some columns are constant the remaining columns are
    still standardized; the pattern is not left unstandardized as a whole.
    """
    if len(candidates) < 2:
        return candidates
    constant = np.all(candidates == candidates[0], axis=0)
    if constant.all():
        return candidates
    standardized = np.zeros(candidates.shape)
    standardized[:, ~constant] = scale(candidates[:, ~constant])
    return standardized


def sum_scores(P, data, weights, standardize=True):
    """
    Calculate the weighted sum score of every candidate.

    Parameters:
    - P: 1-based pattern number per case
    - data: Numeric data matrix (cases x variables)
    - weights: Weights matrix (patterns x variables)
    - standardize: Standardize the candidates of a pattern before weighting

    Returns:
    - scores: list with one array per pattern, in case order. A pattern
      without candidates gets ``array([0.])``.
    """
    data = np.asarray(data, dtype=float)
    weights = np.asarray(weights, dtype=float)
    return [_pattern_scores(data[P == i + 1], weights[i], standardize) for i in range(len(weights))]


def _pattern_scores(candidates, weights, standardize):
    if len(candidates) == 0:
        return np.zeros(1)
    if standardize:
        candidates = standardize_candidates(candidates)
    scores = candidates @ weights
    if len(scores) > 1 and len(np.unique(scores)) > 1:
        scores = scale(scores)
    return scores
