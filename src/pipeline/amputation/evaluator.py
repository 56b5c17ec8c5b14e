"""Evaluation of realized missingness.

This module measures what an amputation actually produced: the proportion
of incomplete cases and cells, the response patterns in the amputed data
and how well the sum scores separate amputed from kept candidates.
"""

import numpy as np
import pandas as pd
import logging

logger = logging.getLogger(__name__)

# ============================================================================
# NUMERICAL STABILITY FUNCTIONS
# ============================================================================

def stable_variance(values, ddof=0):
    """
    Compute variance with numerical stability using two-pass algorithm.

    Parameters:
    -----------
    values : array-like
        Array of values
    ddof : int
        Delta degrees of freedom (0 for population variance, 1 for sample)

    Returns:
    --------
    float : Variance value
    """
    values = np.asarray(values, dtype=float)
    values = values[~np.isnan(values)]
    if len(values) <= ddof:
        return 0.0
    mean = np.mean(values)
    return np.sum((values - mean) ** 2) / (len(values) - ddof)


def stable_std(values, ddof=0):
    return np.sqrt(stable_variance(values, ddof=ddof))

# ============================================================================
# REALIZED MISSINGNESS
# ============================================================================

def missing_case_proportion(amp):
    """Fraction of cases with at least one missing value."""
    mask = pd.DataFrame(amp).isna().to_numpy()
    return float(mask.any(axis=1).mean())


def missing_cell_proportion(amp):
    """Fraction of missing cells."""
    mask = pd.DataFrame(amp).isna().to_numpy()
    return float(mask.mean())


def missing_data_pattern(amp):
    """
    Tabulate the response patterns of an incomplete dataset.

    Parameters:
    -----------
    amp : DataFrame or 2-d array
        Data with missing values

    Returns:
    --------
    DataFrame : one row per distinct pattern (1 = observed, 0 = missing),
        a ``count`` column with the number of cases and ``n_missing`` with
        the number of missing variables, most frequent pattern first
    """
    frame = pd.DataFrame(amp)
    response = frame.notna().astype(int)
    columns = list(response.columns)
    reserved = [col for col in ('count', 'n_missing') if col in columns]
    if reserved:
        raise ValueError(f"Data columns {reserved} clash with the pattern table columns; rename them first")
    table = response.groupby(columns, sort=False).size().reset_index(name='count')
    table['n_missing'] = len(columns) - table[columns].sum(axis=1)
    table = table.sort_values(['count', 'n_missing'], ascending=[False, True], kind='mergesort')
    return table.reset_index(drop=True)


def incomplete_pattern_count(amp):
    """Number of distinct response patterns with at least one missing value."""
    mask = pd.DataFrame(amp).isna().to_numpy()
    incomplete = mask[mask.any(axis=1)]
    if len(incomplete) == 0:
        return 0
    return int(len(np.unique(incomplete, axis=0)))


def score_separation(result):
    """
    Mean sum score of amputed and kept candidates per pattern.

    Parameters:
    -----------
    result : AmputationResult
        Result of a run under MAR or MNAR

    Returns:
    --------
    DataFrame : columns pattern, n_candidates, n_amputed, mean_score_amputed,
        mean_score_kept
    """
    if result.scores is None or result.amp is None:
        raise ValueError("Score separation requires sum scores of an executed MAR or MNAR run")
    mask = pd.DataFrame(result.amp).isna().to_numpy()
    patterns = result.config.patterns.to_numpy()
    rows = []
    for i, scores in enumerate(result.scores):
        members = np.flatnonzero(result.candidates == i + 1)
        if len(members) == 0:
            continue
        amputed = mask[np.ix_(members, patterns[i] == 0)].all(axis=1)
        rows.append({
            'pattern': i + 1,
            'n_candidates': len(members),
            'n_amputed': int(amputed.sum()),
            'mean_score_amputed': float(np.mean(scores[amputed])) if amputed.any() else np.nan,
            'mean_score_kept': float(np.mean(scores[~amputed])) if (~amputed).any() else np.nan,
        })
    return pd.DataFrame(rows)


def evaluate_amputation(result):
    """
    Headline metrics of an executed amputation.

    Returns:
    --------
    dict : target proportion, realized case and cell proportions, number of
        distinct patterns and, for MAR/MNAR, the mean score gap between
        amputed and kept candidates
    """
    metrics = {
        'target_prop': float(result.config.prop),
        'case_prop': missing_case_proportion(result.amp),
        'cell_prop': missing_cell_proportion(result.amp),
        'n_patterns_realized': incomplete_pattern_count(result.amp),
        'score_gap': np.nan,
    }
    if result.scores is not None:
        separation = score_separation(result)
        gaps = (separation['mean_score_amputed'] - separation['mean_score_kept']).dropna()
        if len(gaps) > 0:
            metrics['score_gap'] = float(gaps.mean())
    logger.debug(f"Evaluation metrics: {metrics}")
    return metrics
