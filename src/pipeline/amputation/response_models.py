"""Models that turn sum scores into response indicators.

Every model returns, per pattern, an int array over the candidates of that
pattern (1 = observed, 0 = amputed), or None when the pattern has no
candidates.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np
from scipy.optimize import brentq
from scipy.special import expit

from .config import Mechanism, ScoreType
from .exceptions import warn_diagnostic

logger = logging.getLogger(__name__)

# Location of the MID and TAIL logistic curves relative to the mean score
MID_TAIL_OFFSET = 0.75

LOGISTIC_SHAPES = {
    ScoreType.RIGHT: lambda x: x - x.mean(),
    ScoreType.LEFT: lambda x: x.mean() - x,
    ScoreType.MID: lambda x: -np.abs(x - x.mean()) + MID_TAIL_OFFSET,
    ScoreType.TAIL: lambda x: np.abs(x - x.mean()) - MID_TAIL_OFFSET,
}


class ResponseModel(ABC):
    """Abstract base class for response models.

    Subclasses implement:
    - probabilities(i, scores, prop, n_candidates): missingness probability
      of each candidate of pattern ``i``
    - name: Property for descriptive name
    """

    def __init__(self, n_patterns):
        self.n_patterns = n_patterns

    def apply(self, P, scores, prop, rng):
        """
        Decide for every candidate whether it becomes incomplete.

        Parameters:
        - P: 1-based pattern number per case
        - scores: Sum scores per pattern, or None for MCAR
        - prop: Target proportion of amputed candidates
        - rng: numpy Generator

        Returns:
        - R: list with one response indicator (or None) per pattern
        """
        R = []
        for i in range(self.n_patterns):
            n_candidates = int(np.count_nonzero(P == i + 1))
            if n_candidates == 0:
                R.append(None)
                continue
            pattern_scores = None if scores is None else scores[i]
            probs = self.probabilities(i, pattern_scores, prop, n_candidates)
            R.append((rng.random(n_candidates) >= probs).astype(int))
        return R

    @abstractmethod
    def probabilities(self, i, scores, prop, n_candidates):
        pass

    @property
    @abstractmethod
    def name(self):
        pass


class MCARModel(ResponseModel):
    def probabilities(self, i, scores, prop, n_candidates):
        return np.full(n_candidates, prop)

    @property
    def name(self):
        return 'mcar'


class ContinuousLogisticModel(ResponseModel):
    """Logistic probabilities shaped LEFT, MID, TAIL or RIGHT per pattern."""

    def __init__(self, types):
        super().__init__(len(types))
        self.types = list(types)

    def probabilities(self, i, scores, prop, n_candidates):
        return logistic_probabilities(scores, round(prop, 3), self.types[i])

    @property
    def name(self):
        return 'continuous'


class DiscreteOddsModel(ResponseModel):
    """Quantile groups of the sum scores with relative odds of being amputed."""

    def __init__(self, odds):
        odds = np.asarray(odds, dtype=float)
        super().__init__(len(odds))
        self.odds = odds

    def probabilities(self, i, scores, prop, n_candidates):
        odds_row = self.odds[i][~np.isnan(self.odds[i])]
        case_odds = odds_row[quantile_groups(scores, len(odds_row))]
        factor = calibrate_odds(case_odds, prop, pattern=i + 1)
        return np.clip(factor * case_odds, 0.0, 1.0)

    @property
    def name(self):
        return 'discrete'


def select_model(config):
    """Response model for a resolved AmputationConfig."""
    if config.mechanism is Mechanism.MCAR:
        return MCARModel(config.n_patterns)
    if config.continuous:
        return ContinuousLogisticModel(config.types)
    return DiscreteOddsModel(config.odds)


# ============================================================================
# CONTINUOUS
# ============================================================================

def logistic_probabilities(scores, prop, score_type):
    """
    Logistic missingness probabilities with mean ``prop``.

    The curve is shifted horizontally by the solution of
    ``mean(expit(shape(scores) + shift)) == prop``.
    """
    scores = np.asarray(scores, dtype=float)
    if prop <= 0:
        return np.zeros(len(scores))
    if prop >= 1:
        return np.ones(len(scores))
    z = LOGISTIC_SHAPES[score_type](scores)
    return expit(z + solve_shift(z, prop))


def solve_shift(z, prop):
    def gap(shift):
        return expit(z + shift).mean() - prop

    lower, upper = -10.0, 10.0
    while gap(lower) > 0:
        lower *= 2
    while gap(upper) < 0:
        upper *= 2
    return brentq(gap, lower, upper)


# ============================================================================
# DISCRETE
# ============================================================================

def quantile_groups(scores, n_groups):
    """
    0-based quantile group of every score.

    Group boundaries are the quantiles at 0, 1/n_groups, ..., 1; a score
    equal to a boundary belongs to the higher group.
    """
    scores = np.asarray(scores, dtype=float)
    edges = np.quantile(scores, np.linspace(0, 1, n_groups + 1))
    return np.searchsorted(edges[1:-1], scores, side='right')


def calibrate_odds(case_odds, prop, pattern=None):
    """
    Scale factor ``c`` such that ``mean(clip(c * case_odds, 0, 1)) == prop``.

    Without clipping this is ``prop / mean(case_odds)``, which equals
    ``g * prop * odds / sum(odds)`` for equally sized groups. When some
    probabilities exceed 1 the factor is raised until the clipped mean
    reaches ``prop``; if even certainty for every case with positive odds
    falls short, the largest useful factor is returned with a diagnostic.
    """
    case_odds = np.asarray(case_odds, dtype=float)
    if prop <= 0:
        return 0.0
    if case_odds.mean() == 0:
        warn_diagnostic(f"Every candidate of pattern {pattern} has odds 0, no missing values are generated")
        return 0.0
    factor = prop / case_odds.mean()
    if (factor * case_odds).max() <= 1:
        return factor

    def gap(c):
        return np.clip(c * case_odds, 0.0, 1.0).mean() - prop

    upper = 1.0 / case_odds[case_odds > 0].min()
    if gap(upper) < 0:
        warn_diagnostic(
            f"Odds of pattern {pattern} cannot reach a proportion of {prop}; "
            f"every candidate with positive odds is amputed"
        )
        return upper
    return brentq(gap, factor, upper)
