"""Multivariate amputation of complete datasets."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd
from numpy.random import default_rng

from .candidates import assign_candidates
from .config import AmputationConfig, Mechanism
from .normalizer import check_data, coerce_numeric, resolve_configuration, resolve_mechanism
from .response_models import select_model
from .scores import sum_scores

logger = logging.getLogger(__name__)


@dataclass
class AmputationResult:
    """Outcome of ``amputate``.

    Attributes:
    - config: Resolved arguments
    - candidates: 1-based pattern number per case (all 0 when run=False)
    - scores: Sum scores per pattern, None for MCAR or run=False
    - amp: The input data with missing values injected, None when run=False
    - data: Numeric data used to calculate the sum scores
    """
    config: AmputationConfig
    candidates: np.ndarray
    scores: Optional[List[np.ndarray]]
    amp: Optional[object]
    data: pd.DataFrame

    @property
    def prop(self):
        return self.config.prop

    @property
    def patterns(self):
        return self.config.patterns

    @property
    def freq(self):
        return self.config.freq

    @property
    def weights(self):
        return self.config.weights

    @property
    def mechanism(self):
        return self.config.mechanism

    def missing_mask(self):
        """Boolean DataFrame, True where a value was amputed."""
        if self.amp is None:
            return None
        return pd.DataFrame(self.amp).isna()


def missing_mask(P, R, patterns):
    """
    Merge the per-pattern response indicators into a cell mask.

    Parameters:
    - P: 1-based pattern number per case
    - R: Response indicator (or None) per pattern, over its candidates
    - patterns: Pattern matrix (patterns x variables)

    Returns:
    - mask: bool array (cases x variables), True where a value is amputed
    """
    patterns = np.asarray(patterns)
    mask = np.zeros((len(P), patterns.shape[1]), dtype=bool)
    for i, response in enumerate(R):
        if response is None:
            continue
        rows = np.flatnonzero(P == i + 1)[response == 0]
        mask[np.ix_(rows, patterns[i] == 0)] = True
    return mask


def inject_missing(data, frame, mask):
    """Set the masked cells to missing in the original representation of the data."""
    amp = frame.mask(pd.DataFrame(mask, index=frame.index, columns=frame.columns))
    if isinstance(data, pd.DataFrame):
        return amp
    return amp.to_numpy()


def amputate(data, proportion=0.5, patterns=None, frequencies=None, mechanism="MAR",
             weights=None, standardize=True, continuous=True, type=None, odds=None,
             by_cases=True, run=True, rng=None, seed=None):
    """
    Generate multivariate missing data in a complete dataset.

    Cases are split over the missingness patterns according to
    ``frequencies``. Under MCAR every candidate is amputed with the same
    probability; under MAR and MNAR a weighted sum score per candidate
    decides its probability, either through a logistic curve
    (``continuous=True``) or through quantile groups with relative odds.

    Parameters:
    -----------
    data : DataFrame or 2-d array
        Complete dataset with at least two columns
    proportion : float
        Proportion of missingness in [0, 1], or a percentage in (1, 100]
    patterns : array-like, optional
        #patterns x #variables matrix (or flat vector read row by row),
        0 = amputed, 1 = observed. Default amputes one variable per pattern.
    frequencies : array-like, optional
        Relative frequency of every pattern. Default is equal frequencies.
    mechanism : {"MCAR", "MAR", "MNAR"}
    weights : array-like, optional
        #patterns x #variables weights for the sum scores
    standardize : bool
        Standardize the candidates of a pattern before weighting
    continuous : bool
        Use logistic (True) or odds based (False) probabilities
    type : str or list of str, optional
        LEFT, MID, TAIL or RIGHT, one for all patterns or one per pattern
    odds : array-like, optional
        Relative odds per quantile group, one row per pattern; NaN or None
        marks absent cells
    by_cases : bool
        Proportion refers to cases (True) or cells (False)
    run : bool
        When False only the resolved configuration is returned
    rng : numpy Generator, optional
        Random source; created from ``seed`` when omitted
    seed : int, optional

    Returns:
    --------
    AmputationResult

    Example:
    --------
    result = amputate(df, proportion=0.3, patterns=[0, 1, 1, 1], mechanism="MCAR", seed=1)
    result.amp
    """
    frame = check_data(data)
    mechanism = resolve_mechanism(mechanism)
    numeric = coerce_numeric(frame, mechanism)
    config = resolve_configuration(
        numeric, prop=proportion, patterns=patterns, freq=frequencies, mechanism=mechanism,
        weights=weights, standardize=standardize, continuous=continuous, type_=type,
        odds=odds, by_cases=by_cases,
    )
    n = len(numeric)
    if not run:
        return AmputationResult(config=config, candidates=np.zeros(n, dtype=int),
                                scores=None, amp=None, data=numeric)

    if rng is None:
        rng = default_rng(seed)
    logger.info(f"Amputing {n} cases with {config.n_patterns} pattern(s) under {config.mechanism.value}")

    P = assign_candidates(n, config.freq, rng)
    scores = None
    if config.mechanism is not Mechanism.MCAR:
        scores = sum_scores(P, numeric.to_numpy(dtype=float), config.weights, config.standardize)
    model = select_model(config)
    R = model.apply(P, scores, config.prop, rng)

    mask = missing_mask(P, R, config.patterns.to_numpy())
    amp = inject_missing(data, frame, mask)
    logger.info(f"Amputed {int(mask.any(axis=1).sum())} of {n} cases ({model.name} model)")
    return AmputationResult(config=config, candidates=P, scores=scores, amp=amp, data=numeric)
