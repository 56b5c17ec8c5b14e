"""Configuration objects for amputation runs."""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class Mechanism(Enum):
    MCAR = "MCAR"    # Missing Completely At Random
    MAR = "MAR"      # Missing At Random
    MNAR = "MNAR"    # Missing Not At Random


class ScoreType(Enum):
    LEFT = "LEFT"      # low sum scores are likely to be amputed
    MID = "MID"        # central sum scores
    TAIL = "TAIL"      # extreme sum scores on both sides
    RIGHT = "RIGHT"    # high sum scores


@dataclass
class AmputationConfig:
    """Resolved arguments of one amputation run.

    Matrices are labelled with the column names of the amputed data, one row
    per pattern. Odds rows are padded with NaN when the number of quantile
    groups differs between patterns.
    """
    patterns: pd.DataFrame
    freq: np.ndarray
    mechanism: Mechanism
    weights: pd.DataFrame
    continuous: bool
    types: List[ScoreType]
    odds: np.ndarray
    prop: float
    standardize: bool = True
    by_cases: bool = True

    @property
    def n_patterns(self) -> int:
        return len(self.patterns)

    def as_kwargs(self) -> Dict[str, Any]:
        """Arguments that reproduce this configuration when passed to ``amputate``.

        Arguments the run would discard (weights and odds under MCAR, odds
        for the logistic model, types for the odds model) are left out.
        The proportion is already expressed in cases.
        """
        kwargs = {
            'proportion': self.prop,
            'patterns': self.patterns.to_numpy(),
            'frequencies': self.freq.copy(),
            'mechanism': self.mechanism.value,
            'standardize': self.standardize,
            'continuous': self.continuous,
            'by_cases': True,
        }
        if self.mechanism is not Mechanism.MCAR:
            kwargs['weights'] = self.weights.to_numpy()
        if self.continuous:
            kwargs['type'] = [t.value for t in self.types]
        elif self.mechanism is not Mechanism.MCAR:
            kwargs['odds'] = self.odds.copy()
        return kwargs

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable view, absent odds cells become None."""
        odds = [[None if np.isnan(v) else float(v) for v in row] for row in self.odds]
        return {
            'columns': [str(c) for c in self.patterns.columns],
            'patterns': self.patterns.to_numpy().astype(int).tolist(),
            'freq': [float(f) for f in self.freq],
            'mechanism': self.mechanism.value,
            'weights': self.weights.to_numpy().astype(float).tolist(),
            'continuous': self.continuous,
            'types': [t.value for t in self.types],
            'odds': odds,
            'prop': float(self.prop),
            'standardize': self.standardize,
            'by_cases': self.by_cases,
        }


REQUIRED_STUDY_KEYS = ['n', 'p', 'num_runs', 'prop', 'mechanism', 'continuous', 'type', 'seed']
GRID_PARAMS = ['n', 'p', 'prop', 'mechanism', 'continuous', 'type']


def load_config(config_path):
    """
    Load an amputation study configuration from a JSON file.

    Parameters:
    -----------
    config_path : str or Path
        Path to the JSON configuration file

    Returns:
    --------
    dict : Configuration dictionary with study parameters

    Example JSON structure:
    {
        "n": [200],
        "p": [4],
        "num_runs": 10,
        "prop": [0.3, 0.5],
        "mechanism": ["MCAR", "MAR", "MNAR"],
        "continuous": [true, false],
        "type": ["RIGHT"],
        "by_cases": true,
        "correlation": 0.5,
        "seed": 123
    }
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = json.load(f)

    missing_keys = [key for key in REQUIRED_STUDY_KEYS if key not in config]
    if missing_keys:
        raise ValueError(f"Missing required configuration keys: {missing_keys}")

    for param in GRID_PARAMS:
        if not isinstance(config[param], list):
            config[param] = [config[param]]

    config.setdefault('by_cases', True)
    config.setdefault('correlation', 0.5)

    logger.info(f"Loaded configuration from {config_path}")
    return config
