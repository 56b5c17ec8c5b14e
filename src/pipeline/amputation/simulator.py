"""Amputation study orchestration."""

import logging

import pandas as pd
from numpy.random import default_rng

from .ampute import amputate
from .data_generators import generate_data
from .evaluator import evaluate_amputation, stable_std

logger = logging.getLogger(__name__)

METRIC_COLS = ['case_prop', 'cell_prop', 'n_patterns_realized', 'score_gap']


class AmputationStudy:
    """
    Repeat amputation scenarios on freshly generated complete data.

    A scenario is a dict of ``amputate`` keyword arguments (proportion,
    mechanism, continuous, type, ...). Each run draws its data and its
    amputation from child generators spawned from the study generator.
    """

    def __init__(self, n=500, p=4, num_runs=10, continuous_pct=1.0, integer_pct=0.0,
                 correlation=0.5, rng=None, seed=None):
        if rng is not None:
            self.rng = rng
        else:
            self.rng = default_rng(seed)
        self.n = n
        self.p = p
        self.num_runs = num_runs
        self.continuous_pct = continuous_pct
        self.integer_pct = integer_pct
        self.correlation = correlation
        self.seed = seed

        if self.continuous_pct + self.integer_pct > 1:
            raise ValueError(f"continuous_pct + integer_pct must be <= 1. Got {self.continuous_pct} + {self.integer_pct} = {self.continuous_pct + self.integer_pct}.")
        if self.num_runs < 1:
            raise ValueError(f"num_runs must be at least 1. Got {self.num_runs}.")

    def run_scenario(self, scenario, rng):
        """Generate one complete dataset, ampute it and evaluate the result."""
        data_rng, amp_rng = rng.spawn(2)
        data, _ = generate_data(
            n=self.n, p=self.p, continuous_pct=self.continuous_pct, integer_pct=self.integer_pct,
            correlation=self.correlation, rng=data_rng
        )
        result = amputate(data, rng=amp_rng, **scenario)
        return evaluate_amputation(result)

    def run_all(self, scenarios):
        """
        Run every scenario ``num_runs`` times.

        Parameters:
        - scenarios: dict mapping a scenario name to ``amputate`` keyword arguments

        Returns:
        - results: DataFrame with one row per scenario and run
        """
        rows = []
        for name, scenario in scenarios.items():
            for run_idx, run_rng in enumerate(self.rng.spawn(self.num_runs)):
                metrics = self.run_scenario(scenario, run_rng)
                metrics.update({'scenario': name, 'run_idx': run_idx})
                rows.append(metrics)
            logger.info(f"Finished scenario {name} ({self.num_runs} runs)")
        return pd.DataFrame(rows)

    @staticmethod
    def summarize(results):
        """Mean and across-run standard deviation of every metric per scenario."""
        grouped = results.groupby('scenario', sort=False)
        means = grouped[['target_prop'] + METRIC_COLS].mean()
        stds = grouped[METRIC_COLS].agg(lambda col: stable_std(col, ddof=1))
        stds = stds.rename(columns={col: f'{col}_std_runs' for col in METRIC_COLS})
        return pd.concat([means, stds], axis=1).reset_index()
