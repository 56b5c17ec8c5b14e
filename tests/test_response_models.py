import pytest
import numpy as np
import pandas as pd
import sys
import os
from numpy.random import default_rng

# Add parent directory to path to import from src
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.pipeline.amputation.config import ScoreType
from src.pipeline.amputation.exceptions import AmputationWarning
from src.pipeline.amputation.normalizer import resolve_configuration
from src.pipeline.amputation.response_models import (
    MCARModel, DiscreteOddsModel, ContinuousLogisticModel, select_model,
    calibrate_odds, logistic_probabilities, quantile_groups
)

SCORES = np.linspace(-2, 2, 101)


# ----------------------------------------------------------------------
# Discrete model
# ----------------------------------------------------------------------
def test_quantile_groups_split_scores_evenly():
    groups = quantile_groups(np.arange(8), 4)
    np.testing.assert_array_equal(groups, [0, 0, 1, 1, 2, 2, 3, 3])


def test_boundary_score_belongs_to_higher_group():
    groups = quantile_groups(np.arange(5), 2)
    np.testing.assert_array_equal(groups, [0, 0, 1, 1, 1])


def test_calibration_without_clipping():
    case_odds = np.repeat([1.0, 2.0, 3.0, 4.0], 25)
    factor = calibrate_odds(case_odds, 0.25)
    assert factor == pytest.approx(0.1)
    assert np.mean(factor * case_odds) == pytest.approx(0.25)


def test_calibration_with_clipping_reaches_target():
    case_odds = np.repeat([1.0, 1.0, 1.0, 10.0], 25)
    factor = calibrate_odds(case_odds, 0.5)
    probs = np.clip(factor * case_odds, 0, 1)
    assert probs.max() == 1.0
    assert probs.mean() == pytest.approx(0.5)


def test_unreachable_proportion_amputes_every_positive_odds_case():
    case_odds = np.repeat([0.0, 0.0, 0.0, 1.0], 25)
    with pytest.warns(AmputationWarning, match="cannot reach"):
        factor = calibrate_odds(case_odds, 0.5, pattern=1)
    np.testing.assert_array_equal(np.clip(factor * case_odds, 0, 1), case_odds)


def test_higher_odds_groups_are_more_likely_missing():
    model = DiscreteOddsModel([[1, 2, 3, 4]])
    probs = model.probabilities(0, SCORES, 0.3, len(SCORES))
    assert np.all(np.diff(probs) >= 0)
    assert probs[-1] == pytest.approx(4 * probs[0])


def test_discrete_model_realizes_proportion_over_runs():
    """The realized proportion converges to the target across seeded runs."""
    n = 2000
    P = np.ones(n, dtype=int)
    model = DiscreteOddsModel([[1, 2, 3, 4]])
    realized = []
    for seed in range(50):
        rng = default_rng(seed)
        scores = [rng.normal(size=n)]
        R = model.apply(P, scores, 0.3, rng)
        realized.append(np.mean(R[0] == 0))
    assert np.mean(realized) == pytest.approx(0.3, abs=0.01)


# ----------------------------------------------------------------------
# Continuous model
# ----------------------------------------------------------------------
@pytest.mark.parametrize("score_type", list(ScoreType))
@pytest.mark.parametrize("prop", [0.1, 0.5, 0.8])
def test_logistic_probabilities_have_target_mean(score_type, prop):
    probs = logistic_probabilities(SCORES, prop, score_type)
    assert probs.mean() == pytest.approx(prop, abs=1e-8)


def test_logistic_shapes():
    right = logistic_probabilities(SCORES, 0.5, ScoreType.RIGHT)
    left = logistic_probabilities(SCORES, 0.5, ScoreType.LEFT)
    mid = logistic_probabilities(SCORES, 0.5, ScoreType.MID)
    tail = logistic_probabilities(SCORES, 0.5, ScoreType.TAIL)

    assert np.all(np.diff(right) > 0)
    assert np.all(np.diff(left) < 0)
    np.testing.assert_allclose(right, left[::-1])
    assert mid[50] > mid[0] and mid[50] > mid[-1]
    assert tail[50] < tail[0] and tail[50] < tail[-1]


def test_logistic_extreme_proportions():
    np.testing.assert_array_equal(logistic_probabilities(SCORES, 0.0, ScoreType.RIGHT), 0.0)
    np.testing.assert_array_equal(logistic_probabilities(SCORES, 1.0, ScoreType.MID), 1.0)


def test_single_candidate_gets_target_probability():
    probs = logistic_probabilities(np.array([3.7]), 0.3, ScoreType.RIGHT)
    assert probs[0] == pytest.approx(0.3)


def test_right_type_amputes_high_scores():
    n = 5000
    rng = default_rng(11)
    scores = rng.normal(size=n)
    model = ContinuousLogisticModel([ScoreType.RIGHT])
    R = model.apply(np.ones(n, dtype=int), [scores], 0.5, rng)[0]
    assert scores[R == 0].mean() > scores[R == 1].mean()


# ----------------------------------------------------------------------
# Model selection and shapes
# ----------------------------------------------------------------------
def test_pattern_without_candidates_gets_no_indicator():
    P = np.array([1, 1, 1, 3])
    R = MCARModel(3).apply(P, None, 0.5, default_rng(0))
    assert R[1] is None
    assert len(R[0]) == 3 and len(R[2]) == 1
    assert set(np.unique(np.concatenate([R[0], R[2]]))) <= {0, 1}


@pytest.mark.parametrize("kwargs, expected", [
    (dict(mechanism="MCAR"), MCARModel),
    (dict(mechanism="MAR", continuous=True), ContinuousLogisticModel),
    (dict(mechanism="MNAR", continuous=False), DiscreteOddsModel),
])
def test_select_model(kwargs, expected):
    frame = pd.DataFrame(np.eye(3), columns=['A', 'B', 'C'])
    model = select_model(resolve_configuration(frame, **kwargs))
    assert isinstance(model, expected)
    assert model.n_patterns == 3
