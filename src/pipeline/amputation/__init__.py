"""Multivariate amputation: generate missing values in complete datasets.

This package splits the cases of a complete dataset over user defined
missingness patterns and makes candidates incomplete under an MCAR, MAR or
MNAR mechanism, for the evaluation of imputation methods.

Basic Usage
-----------
>>> from src.pipeline.amputation import amputate, generate_data
>>> from numpy.random import default_rng
>>>
>>> data, _ = generate_data(n=200, p=4, continuous_pct=1.0, integer_pct=0.0)
>>> result = amputate(data, proportion=0.3, mechanism="MAR", rng=default_rng(1))
>>> result.amp.isna().mean()

Modules
-------
exceptions : Error taxonomy and diagnostics
config : Mechanism/ScoreType enums, resolved configuration, study config loading
defaults : Default patterns, frequencies, weights, types and odds
normalizer : Argument validation and normalization
frequency : Frequency and proportion resolution
candidates : Assignment of cases to patterns
scores : Weighted sum scores
response_models : MCAR, discrete (odds) and continuous (logistic) models
ampute : amputate() and the result object
data_generators : Complete data generation
evaluator : Realized missingness metrics
simulator : Repeated-run studies
"""

from .exceptions import (
    AmputationError,
    ConfigurationError,
    InfeasibleProportionError,
    DataError,
    AmputationWarning
)
from .config import Mechanism, ScoreType, AmputationConfig, load_config
from .defaults import (
    default_patterns,
    default_freq,
    default_weights,
    default_type,
    default_odds
)
from .normalizer import resolve_configuration
from .frequency import recalculate_freq, recalculate_prop
from .candidates import assign_candidates
from .scores import sum_scores
from .response_models import (
    ResponseModel,
    MCARModel,
    DiscreteOddsModel,
    ContinuousLogisticModel,
    select_model
)
from .ampute import amputate, AmputationResult
from .data_generators import generate_data
from .evaluator import (
    missing_case_proportion,
    missing_cell_proportion,
    missing_data_pattern,
    score_separation,
    evaluate_amputation
)
from .simulator import AmputationStudy

__version__ = '1.0.0'

__all__ = [
    # Errors and diagnostics
    'AmputationError',
    'ConfigurationError',
    'InfeasibleProportionError',
    'DataError',
    'AmputationWarning',

    # Configuration
    'Mechanism',
    'ScoreType',
    'AmputationConfig',
    'load_config',

    # Defaults
    'default_patterns',
    'default_freq',
    'default_weights',
    'default_type',
    'default_odds',

    # Pipeline stages
    'resolve_configuration',
    'recalculate_freq',
    'recalculate_prop',
    'assign_candidates',
    'sum_scores',

    # Response models
    'ResponseModel',
    'MCARModel',
    'DiscreteOddsModel',
    'ContinuousLogisticModel',
    'select_model',

    # Amputation
    'amputate',
    'AmputationResult',

    # Data, evaluation and studies
    'generate_data',
    'missing_case_proportion',
    'missing_cell_proportion',
    'missing_data_pattern',
    'score_separation',
    'evaluate_amputation',
    'AmputationStudy',
]
