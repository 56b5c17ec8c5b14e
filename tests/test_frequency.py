import pytest
import numpy as np
import sys
import os

# Add parent directory to path to import from src
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.pipeline.amputation.exceptions import (
    AmputationWarning, ConfigurationError, InfeasibleProportionError
)
from src.pipeline.amputation.frequency import recalculate_freq, recalculate_prop, resolve_freq

PATTERNS = np.array([[0, 1, 1, 1], [0, 0, 1, 1]])


def test_recalculate_freq_sums_to_one():
    freq = recalculate_freq([1, 1, 2])
    np.testing.assert_allclose(freq, [0.25, 0.25, 0.5])
    assert freq.sum() == pytest.approx(1.0)


def test_zero_frequencies_are_rejected():
    with pytest.raises(ConfigurationError):
        recalculate_freq([0, 0])


def test_frequency_not_summing_to_one_is_rescaled():
    with pytest.warns(AmputationWarning, match="does not sum to 1"):
        freq = resolve_freq([2, 2], 2)
    np.testing.assert_allclose(freq, [0.5, 0.5])


def test_long_frequency_vector_is_truncated():
    with pytest.warns(AmputationWarning, match="does not match #patterns"):
        freq = resolve_freq([0.5, 0.3, 0.2], 2)
    assert len(freq) == 2
    np.testing.assert_allclose(freq, [0.625, 0.375])


def test_short_frequency_vector_is_padded():
    with pytest.warns(AmputationWarning, match="does not match #patterns"):
        freq = resolve_freq([0.6], 3)
    np.testing.assert_allclose(freq, [0.6, 0.2, 0.2])


def test_negative_frequencies_are_rejected():
    with pytest.raises(ConfigurationError, match="non-negative"):
        resolve_freq([0.5, -0.5, 1.0], 3)


def test_cell_proportion_is_converted_to_cases():
    # 40 missing cells: 20 for the first pattern (1 zero), 20 for the second (2 zeros)
    prop = recalculate_prop(prop=0.1, n=100, k=4, patterns=PATTERNS, freq=np.array([0.5, 0.5]))
    assert prop == pytest.approx(0.3)


def test_infeasible_cell_proportion_fails():
    with pytest.raises(InfeasibleProportionError):
        recalculate_prop(prop=0.5, n=100, k=4, patterns=PATTERNS[:1], freq=np.array([1.0]))


def test_cell_proportion_conversion_is_monotonic():
    freq = np.array([0.3, 0.7])
    case_props = [
        recalculate_prop(prop=prop, n=200, k=4, patterns=PATTERNS, freq=freq)
        for prop in np.linspace(0, 0.3, 31)
    ]
    assert np.all(np.diff(case_props) >= 0)
