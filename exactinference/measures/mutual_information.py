"""
Linear-Gaussian (conditional) mutual information between multivariate
time series.
"""

import numpy as np
from typing import Optional, Tuple

from .core import MeasureStats, check_inputs, decompose_information
from ..significance.testing import significance


def mvmi(X: np.ndarray,
         Y: np.ndarray,
         W: Optional[np.ndarray] = None,
         test: str = 'exact',
         surrogates: int = 5000,
         variance_estimator: str = 'bartlett',
         seed: Optional[int] = None) -> Tuple[float, float, MeasureStats]:
    """
    Mutual information I(X; Y | W) with a significance test.

    Parameters
    ----------
    X : np.ndarray, shape (T,) or (T, dx)
        First time series (columns are series)
    Y : np.ndarray, shape (T,) or (T, dy)
        Second time series
    W : np.ndarray or None
        Conditioning time series
    test : {'exact', 'asymptotic'}, default 'exact'
        Exact (finite-sample) test or likelihood-ratio chi-squared test
    surrogates : int, default 5000
        Monte-Carlo sample size for multivariate exact null distributions
    variance_estimator : {'bartlett', 'none'}, default 'bartlett'
        Autocorrelation correction of the exact test; 'none' assumes
        independent samples
    seed : int or None
        Seed for the Monte-Carlo null distribution

    Returns
    -------
    measure : float
        Conditional mutual information in nats
    p_value : float
        p-value of the requested test
    stats : MeasureStats
        Statistics for re-testing with ``significance``
    """
    X, Y, W = check_inputs(X, Y, W)

    r, n_covariates, bartlett = decompose_information(X, Y, W)
    stats = MeasureStats(
        measure_type='mi',
        n_samples=X.shape[0],
        dim_x=X.shape[1],
        dim_y=Y.shape[1],
        dim_w=W.shape[1],
        r=r,
        n_covariates=n_covariates,
        bartlett=bartlett,
    )

    measure = stats.information
    p_value = significance(measure, stats, test=test,
                           variance_estimator=variance_estimator,
                           surrogates=surrogates, seed=seed)
    return measure, p_value, stats
