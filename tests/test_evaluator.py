import pytest
import numpy as np
import pandas as pd
import sys
import os
from numpy.random import default_rng

# Add parent directory to path to import from src
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.pipeline.amputation import amputate, generate_data, AmputationStudy
from src.pipeline.amputation.evaluator import (
    stable_variance, stable_std, missing_case_proportion, missing_cell_proportion,
    missing_data_pattern, score_separation, evaluate_amputation
)


@pytest.fixture
def incomplete():
    return pd.DataFrame({
        'A': [1.0, 2.0, 3.0, np.nan, np.nan, np.nan],
        'B': [1.0, 2.0, 3.0, 4.0, 5.0, np.nan],
    })


@pytest.fixture(scope="module")
def data():
    frame, _ = generate_data(n=1000, p=4, continuous_pct=1.0, integer_pct=0.0, rng=default_rng(21))
    return frame


# ----------------------------------------------------------------------
# Numerical helpers
# ----------------------------------------------------------------------
def test_stable_variance_matches_numpy():
    values = default_rng(0).normal(loc=1e6, size=500)
    assert stable_variance(values) == pytest.approx(np.var(values))
    assert stable_variance(values, ddof=1) == pytest.approx(np.var(values, ddof=1))
    assert stable_std(values, ddof=1) == pytest.approx(np.std(values, ddof=1))


def test_stable_variance_ignores_nan_and_short_input():
    assert stable_variance([1.0, np.nan, 3.0]) == pytest.approx(1.0)
    assert stable_variance([2.0], ddof=1) == 0.0


# ----------------------------------------------------------------------
# Realized missingness
# ----------------------------------------------------------------------
def test_missing_proportions(incomplete):
    assert missing_case_proportion(incomplete) == pytest.approx(0.5)
    assert missing_cell_proportion(incomplete) == pytest.approx(4 / 12)


def test_missing_data_pattern(incomplete):
    table = missing_data_pattern(incomplete)
    assert list(table.columns) == ['A', 'B', 'count', 'n_missing']
    assert table['count'].tolist() == [3, 2, 1]
    assert table['n_missing'].tolist() == [0, 1, 2]
    assert table[['A', 'B']].to_numpy().tolist() == [[1, 1], [0, 1], [0, 0]]


def test_missing_data_pattern_of_amputed_data(data):
    result = amputate(data, proportion=0.4, patterns=[[0, 1, 1, 1], [0, 0, 1, 1]], rng=default_rng(22))
    table = missing_data_pattern(result.amp)
    assert table['count'].sum() == len(data)
    amputed = table[table['n_missing'] > 0]
    assert set(map(tuple, amputed[list(data.columns)].to_numpy())) <= {(0, 1, 1, 1), (0, 0, 1, 1)}


# ----------------------------------------------------------------------
# Score separation and evaluation
# ----------------------------------------------------------------------
def test_score_separation_requires_scores(data):
    result = amputate(data, mechanism="MCAR", rng=default_rng(23))
    with pytest.raises(ValueError):
        score_separation(result)


def test_score_separation_right_type(data):
    result = amputate(data, proportion=0.5, type="RIGHT", rng=default_rng(24))
    separation = score_separation(result)
    assert separation['pattern'].tolist() == [1, 2, 3, 4]
    assert separation['n_candidates'].sum() == len(data)
    assert (separation['mean_score_amputed'] > separation['mean_score_kept']).all()


def test_evaluate_amputation(data):
    result = amputate(data, proportion=0.3, mechanism="MAR", rng=default_rng(25))
    metrics = evaluate_amputation(result)
    assert set(metrics) == {'target_prop', 'case_prop', 'cell_prop', 'n_patterns_realized', 'score_gap'}
    assert metrics['target_prop'] == pytest.approx(0.3)
    assert metrics['case_prop'] == pytest.approx(0.3, abs=0.06)
    assert metrics['cell_prop'] == pytest.approx(metrics['case_prop'] / 4)
    assert metrics['n_patterns_realized'] == 4
    assert metrics['score_gap'] > 0


def test_evaluate_mcar_has_no_score_gap(data):
    metrics = evaluate_amputation(amputate(data, mechanism="MCAR", rng=default_rng(26)))
    assert np.isnan(metrics['score_gap'])


# ----------------------------------------------------------------------
# Studies
# ----------------------------------------------------------------------
SCENARIOS = {
    'mcar': {'proportion': 0.3, 'mechanism': 'MCAR'},
    'mar_right': {'proportion': 0.5, 'mechanism': 'MAR', 'type': 'RIGHT'},
}


def test_study_runs_every_scenario():
    study = AmputationStudy(n=200, p=4, num_runs=3, seed=1)
    results = study.run_all(SCENARIOS)
    assert len(results) == 6
    assert results['scenario'].tolist() == ['mcar'] * 3 + ['mar_right'] * 3
    assert results['run_idx'].tolist() == [0, 1, 2] * 2

    summary = AmputationStudy.summarize(results)
    assert summary['scenario'].tolist() == ['mcar', 'mar_right']
    assert 'case_prop_std_runs' in summary.columns
    assert summary.loc[summary['scenario'] == 'mar_right', 'score_gap'].iloc[0] > 0


def test_study_is_reproducible():
    first = AmputationStudy(n=100, p=3, num_runs=2, seed=7).run_all(SCENARIOS)
    second = AmputationStudy(n=100, p=3, num_runs=2, seed=7).run_all(SCENARIOS)
    pd.testing.assert_frame_equal(first, second)


def test_study_rejects_invalid_settings():
    with pytest.raises(ValueError, match="continuous_pct"):
        AmputationStudy(continuous_pct=0.8, integer_pct=0.5)
    with pytest.raises(ValueError, match="num_runs"):
        AmputationStudy(num_runs=0)


def test_missing_data_pattern_rejects_clashing_columns():
    frame = pd.DataFrame({'count': [1.0, np.nan], 'B': [1.0, 2.0]})
    with pytest.raises(ValueError, match="clash"):
        missing_data_pattern(frame)


def test_evaluate_amputation_with_clashing_column_names(data):
    renamed = data.rename(columns={'X1': 'count', 'X2': 'n_missing'})
    result = amputate(renamed, proportion=0.3, mechanism="MCAR", rng=default_rng(27))
    metrics = evaluate_amputation(result)
    assert metrics['n_patterns_realized'] == 4
