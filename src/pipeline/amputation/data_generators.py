"""Complete data generation for amputation studies."""

import numpy as np
import pandas as pd
from numpy.random import default_rng


def generate_data(n=1000, p=5, continuous_pct=0.4, integer_pct=0.4, correlation=0.5, rng=None):
    """
    Generate a complete dataset with correlated covariates of mixed types.

    Parameters:
    - n: Sample size
    - p: Number of covariates
    - continuous_pct: Proportion of continuous covariates
    - integer_pct: Proportion of integer covariates
    - correlation: Pairwise correlation of the latent normal variables
    - rng: numpy Generator

    Returns:
    - data: DataFrame with columns X1..Xp
    - covariates: List of covariate names
    """
    if rng is None:
        rng = default_rng(123)
    if continuous_pct + integer_pct > 1:
        raise ValueError(f"continuous_pct + integer_pct must be <= 1. Got {continuous_pct} + {integer_pct}.")
    if not (-1 / max(p - 1, 1) < correlation < 1):
        raise ValueError(f"correlation must keep the covariance matrix positive definite. Got {correlation}.")

    num_continuous = int(p * continuous_pct)
    num_integer = int(p * integer_pct)

    # Compound symmetry gives every pair the same correlation
    cov = np.full((p, p), correlation)
    np.fill_diagonal(cov, 1.0)
    latent = rng.multivariate_normal(np.zeros(p), cov, size=n)

    data = {}
    covariates = []
    for i in range(p):
        name = f'X{i+1}'
        z = latent[:, i]
        if i < num_continuous:
            data[name] = z
        elif i < num_continuous + num_integer:
            data[name] = np.round(z).astype(int)
        else:
            data[name] = (z > 0).astype(int)
        covariates.append(name)

    return pd.DataFrame(data), covariates
