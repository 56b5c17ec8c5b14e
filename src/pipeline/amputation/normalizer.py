"""Validation and normalization of the amputation arguments.

Everything in this module is deterministic: it runs before any random
number is drawn, so a failing call leaves no partial state behind.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd

from .config import AmputationConfig, Mechanism, ScoreType
from .defaults import default_freq, default_odds, default_patterns, default_type, default_weights
from .exceptions import ConfigurationError, DataError, warn_diagnostic
from .frequency import recalculate_freq, recalculate_prop, resolve_freq

logger = logging.getLogger(__name__)


@dataclass
class PatternCheck:
    """Patterns after removal of the rows that would not ampute anything."""
    patterns: np.ndarray
    freq: np.ndarray
    prop: float
    row_one: List[int]
    row_zero: List[int]


# ============================================================================
# DATA
# ============================================================================

def check_data(data):
    """
    Validate the complete dataset.

    Parameters:
    - data: DataFrame, 2-d array or anything ``pd.DataFrame`` accepts

    Returns:
    - frame: DataFrame view of the data
    """
    if data is None:
        raise DataError("Argument data is missing, with no default")
    frame = data if isinstance(data, pd.DataFrame) else pd.DataFrame(data)
    if frame.isna().to_numpy().any():
        raise DataError("Data cannot contain missing values")
    if frame.shape[1] < 2:
        raise DataError("Data should contain at least two columns")
    if frame.shape[0] == 0:
        raise DataError("Data should contain at least one row")
    return frame


def coerce_numeric(frame, mechanism):
    """
    Return a numeric copy of the data when sum scores will be needed.

    Non-numeric columns are parsed as numbers where possible and otherwise
    replaced by their category codes. Under MCAR no scores are computed and
    the data is returned unchanged.
    """
    non_numeric = [col for col in frame.columns if not pd.api.types.is_numeric_dtype(frame[col])]
    if not non_numeric or mechanism is Mechanism.MCAR:
        return frame.copy()

    numeric = frame.copy()
    for col in non_numeric:
        try:
            numeric[col] = pd.to_numeric(frame[col])
        except (TypeError, ValueError):
            numeric[col] = pd.Categorical(frame[col]).codes
    warn_diagnostic(
        f"Data is made numeric internally, because the calculation of weights requires "
        f"numeric data (columns: {[str(c) for c in non_numeric]})"
    )
    return numeric


# ============================================================================
# SCALARS AND FLAGS
# ============================================================================

def resolve_prop(prop):
    """Proportion in [0, 1]; values in (1, 100] are read as percentages."""
    try:
        prop = float(prop)
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"Proportion of missingness should be a number, got {prop!r}") from err
    if np.isnan(prop) or prop < 0 or prop > 100:
        raise ConfigurationError(
            "Proportion of missingness should be a value between 0 and 1 (for a proportion) "
            "or between 1 and 100 (for a percentage)"
        )
    if prop > 1:
        prop = prop / 100
    return prop


def _as_list(value, name):
    """Scalars become a one element list, sequences are flattened."""
    if isinstance(value, (list, tuple, np.ndarray, pd.Series)):
        values = list(np.ravel(value))
        if not values:
            raise ConfigurationError(f"{name} cannot be empty")
        return values
    return [value]


def resolve_mechanism(mechanism):
    values = _as_list(mechanism, "Mechanism")
    resolved = []
    for value in values:
        if isinstance(value, Mechanism):
            resolved.append(value)
            continue
        try:
            resolved.append(Mechanism(value))
        except ValueError as err:
            raise ConfigurationError("Mechanism should be either MCAR, MAR or MNAR") from err
    if len(resolved) > 1:
        warn_diagnostic("Mechanism should contain merely MCAR, MAR or MNAR. First element is used")
    return resolved[0]


def resolve_flag(value, name):
    """A single boolean; sequences fall back to their first element."""
    values = _as_list(value, name)
    if len(values) > 1:
        warn_diagnostic(f"{name} should contain merely True or False. First element is used")
    flag = values[0]
    if not isinstance(flag, (bool, np.bool_)):
        raise ConfigurationError(f"{name} should contain True or False")
    return bool(flag)


# ============================================================================
# PATTERNS
# ============================================================================

def _as_float_array(value, name):
    if isinstance(value, pd.DataFrame):
        value = value.to_numpy()
    try:
        return np.asarray(value, dtype=float)
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"{name} should only contain numbers") from err


def reshape_patterns(patterns, k):
    """
    Turn the pattern argument into a #patterns x #variables matrix.

    A flat vector is read row by row; its length must be a multiple of the
    number of variables.
    """
    if patterns is None:
        return default_patterns(k)
    patterns = _as_float_array(patterns, "Patterns")
    if patterns.ndim == 1:
        if len(patterns) == 0 or len(patterns) % k != 0:
            raise ConfigurationError("Length of pattern vector does not match #variables")
        patterns = patterns.reshape(-1, k)
    elif patterns.ndim != 2:
        raise ConfigurationError("Patterns should be a vector or a matrix")
    if patterns.shape[0] == 0:
        raise ConfigurationError("Patterns should contain at least one pattern")
    if patterns.shape[1] != k:
        raise ConfigurationError(
            f"Patterns have {patterns.shape[1]} columns but the data has {k} variables"
        )
    if patterns.shape[0] == 1 and np.all(patterns == 1):
        raise ConfigurationError(
            "One pattern with merely ones results in no amputation at all, the procedure is therefore stopped"
        )
    return patterns


def check_patterns(patterns, freq, prop):
    """
    Drop patterns with merely ones and flag patterns with merely zeros.

    The frequency mass of a dropped pattern leaves the proportion of
    missingness: ``prop`` becomes ``(1 - dropped mass) * prop`` and the
    remaining frequencies are rescaled to sum to 1.
    """
    for h, row in enumerate(patterns, start=1):
        if not np.isin(row, (0, 1)).all():
            raise ConfigurationError(
                f"Argument patterns can only contain 0 and 1, pattern {h} contains another element"
            )

    row_one = [h for h, row in enumerate(patterns) if np.all(row == 1)]
    if len(row_one) == len(patterns):
        raise ConfigurationError("Every pattern contains merely ones, no amputation is possible")
    if row_one:
        prop_one = freq[row_one].sum()
        new_prop = (1 - prop_one) * prop
        warn_diagnostic(
            f"Proportion of missingness has changed from {prop} to {new_prop} "
            f"because of pattern(s) with merely ones"
        )
        prop = new_prop
        freq = recalculate_freq(np.delete(freq, row_one))
        patterns = np.delete(patterns, row_one, axis=0)
        warn_diagnostic("Frequency vector and patterns matrix have changed because of pattern(s) with merely ones")

    row_zero = [h for h, row in enumerate(patterns) if np.all(row == 0)]
    return PatternCheck(patterns=patterns.astype(int), freq=freq, prop=prop,
                        row_one=row_one, row_zero=row_zero)


# ============================================================================
# WEIGHTS, TYPES AND ODDS
# ============================================================================

def resolve_weights(weights, patterns, mechanism, row_one):
    """
    Weights matrix matching the normalized patterns.

    Weights given for the original patterns lose the rows of the dropped
    all-ones patterns.
    """
    if weights is None:
        return default_weights(patterns, mechanism)
    k = patterns.shape[1]
    weights = _as_float_array(weights, "Weights")
    if weights.ndim == 1:
        if len(weights) == 0 or len(weights) % k != 0:
            raise ConfigurationError("Length of weight vector does not match #variables")
        weights = weights.reshape(-1, k)
    elif weights.ndim != 2:
        raise ConfigurationError("Weights matrix should be a matrix")
    if np.isnan(weights).any():
        raise ConfigurationError("Weights matrix cannot contain missing values")
    if weights.shape[1] != k:
        raise ConfigurationError("The objects patterns and weights are not matching")
    if len(weights) != len(patterns) and row_one and len(weights) == len(patterns) + len(row_one):
        weights = np.delete(weights, row_one, axis=0)
    if len(weights) != len(patterns):
        raise ConfigurationError("The objects patterns and weights are not matching")
    return weights


def _parse_type(value):
    if isinstance(value, ScoreType):
        return value
    try:
        return ScoreType(value)
    except ValueError as err:
        raise ConfigurationError("Type should contain LEFT, MID, TAIL or RIGHT") from err


def resolve_type(type_, n_original, n_patterns, row_one):
    """One ScoreType per normalized pattern."""
    if type_ is None:
        return default_type(range(n_patterns))
    if isinstance(type_, np.ndarray) and type_.ndim > 1:
        warn_diagnostic("Type should be a vector of strings")
    tokens = [_parse_type(t) for t in _as_list(type_, "Type")]
    if len(tokens) not in (1, n_original, n_patterns):
        tokens = tokens[:1]
        warn_diagnostic(
            "Type should either have length 1 or length equal to #patterns, "
            "first element is used for all patterns"
        )
    if len(tokens) == 1:
        return tokens * n_patterns
    if len(tokens) != n_patterns:
        tokens = [t for h, t in enumerate(tokens) if h not in row_one]
    return tokens


def as_odds_matrix(odds):
    """
    Odds as a float matrix; ragged rows are padded with NaN.

    A flat sequence of numbers is returned as a 1-d array.
    """
    if isinstance(odds, pd.DataFrame):
        odds = odds.to_numpy()
    # Rows may be ragged, so the input is not converted to an array as a whole
    if not isinstance(odds, (list, tuple, np.ndarray)) or (isinstance(odds, np.ndarray) and odds.ndim == 0):
        raise ConfigurationError("Odds matrix should be a matrix")
    rows = list(odds)
    try:
        if all(np.ndim(row) == 0 for row in rows):
            return np.array([np.nan if v is None else v for v in rows], dtype=float)
        rows = [[np.nan if v is None else v for v in np.ravel(row)] for row in rows]
        width = max(len(row) for row in rows)
        matrix = np.full((len(rows), width), np.nan)
        for h, row in enumerate(rows):
            matrix[h, :len(row)] = np.asarray(row, dtype=float)
    except (TypeError, ValueError) as err:
        raise ConfigurationError("Odds matrix should only contain numbers") from err
    return matrix


def resolve_odds(odds, n_original, n_patterns, row_one):
    """Odds matrix with one row per normalized pattern."""
    if odds is None:
        return default_odds(range(n_patterns))
    odds = as_odds_matrix(odds)
    if odds.ndim == 1:
        if n_patterns == 1:
            odds = odds.reshape(1, -1)
        else:
            raise ConfigurationError("Odds matrix should be a matrix")
    if np.any(~np.isnan(odds) & (odds < 0)):
        raise ConfigurationError("Odds matrix can only have non-negative values")
    if len(odds) not in (n_original, n_patterns):
        raise ConfigurationError("The objects patterns and odds are not matching")
    if len(odds) != n_patterns:
        odds = np.delete(odds, row_one, axis=0)
    for h, row in enumerate(odds, start=1):
        if np.isnan(row).all():
            raise ConfigurationError(f"Odds for pattern {h} contain no values")
    return odds


# ============================================================================
# FULL RESOLUTION
# ============================================================================

def resolve_configuration(data, prop=0.5, patterns=None, freq=None, mechanism=Mechanism.MAR,
                          weights=None, standardize=True, continuous=True, type_=None,
                          odds=None, by_cases=True):
    """
    Resolve every amputation argument into an AmputationConfig.

    Parameters:
    - data: Checked DataFrame; only its shape and column names are used
    - prop, patterns, freq, mechanism, weights, standardize, continuous,
      type_, odds, by_cases: see ``amputate``

    Returns:
    - config: AmputationConfig
    """
    n, k = data.shape
    prop = resolve_prop(prop)
    mechanism = resolve_mechanism(mechanism)
    standardize = resolve_flag(standardize, "Standardize")
    by_cases = resolve_flag(by_cases, "By cases")

    pattern_matrix = reshape_patterns(patterns, k)
    n_original = len(pattern_matrix)
    if freq is None:
        freq = default_freq(pattern_matrix)
    freq = resolve_freq(freq, n_original)

    checked = check_patterns(pattern_matrix, freq, prop)
    pattern_matrix, freq, prop = checked.patterns, checked.freq, checked.prop
    n_patterns = len(pattern_matrix)

    if not by_cases:
        prop = recalculate_prop(prop=prop, n=n, k=k, patterns=pattern_matrix, freq=freq)

    if checked.row_zero and mechanism is Mechanism.MAR:
        raise ConfigurationError(
            "Patterns object contains merely zeros and this kind of pattern is not possible "
            "when mechanism is MAR"
        )
    if mechanism is Mechanism.MCAR and weights is not None:
        weights = None
        warn_diagnostic("Weights matrix is not used when mechanism is MCAR")
    if mechanism is Mechanism.MCAR and odds is not None:
        odds = None
        warn_diagnostic("Odds matrix is not used when mechanism is MCAR")
    weight_matrix = resolve_weights(weights, pattern_matrix, mechanism, checked.row_one)

    continuous = resolve_flag(continuous, "Continuous")
    if continuous and odds is not None:
        odds = None
        warn_diagnostic("Odds matrix is not used when continuous probabilities (continuous=True) are specified")
    if not continuous and type_ is not None:
        type_ = None
        warn_diagnostic("Type is not used when discrete probabilities (continuous=False) are specified")
    types = resolve_type(type_, n_original, n_patterns, checked.row_one)
    odds_matrix = resolve_odds(odds, n_original, n_patterns, checked.row_one)

    columns = data.columns
    config = AmputationConfig(
        patterns=pd.DataFrame(pattern_matrix, columns=columns),
        freq=freq,
        mechanism=mechanism,
        weights=pd.DataFrame(weight_matrix, columns=columns),
        continuous=continuous,
        types=types,
        odds=odds_matrix,
        prop=prop,
        standardize=standardize,
        by_cases=by_cases,
    )
    logger.info(
        f"Resolved configuration: {n_patterns} pattern(s), mechanism={mechanism.value}, "
        f"continuous={continuous}, prop={prop:.4f}"
    )
    return config
