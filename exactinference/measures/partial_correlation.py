"""
Partial correlation between two univariate time series.
"""

import numpy as np
from typing import Optional, Tuple

from .core import MeasureStats, check_inputs, decompose_information
from ..significance.testing import significance


def pcorr(X: np.ndarray,
          Y: np.ndarray,
          W: Optional[np.ndarray] = None,
          test: str = 'exact',
          surrogates: int = 5000,
          variance_estimator: str = 'bartlett',
          seed: Optional[int] = None) -> Tuple[float, float, MeasureStats]:
    """
    Partial correlation of X and Y given W, with a two-sided test of r = 0.

    Returns
    -------
    measure : float
        Signed partial correlation
    p_value : float
        p-value of the requested test
    stats : MeasureStats
        Statistics for re-testing with ``significance``
    """
    X, Y, W = check_inputs(X, Y, W)
    if X.shape[1] != 1 or Y.shape[1] != 1:
        raise ValueError("Partial correlation is defined for univariate X and Y "
                         f"(got {X.shape[1]} and {Y.shape[1]} columns); use mvmi instead")

    r, n_covariates, bartlett = decompose_information(X, Y, W)
    stats = MeasureStats(
        measure_type='pcorr',
        n_samples=X.shape[0],
        dim_x=1,
        dim_y=1,
        dim_w=W.shape[1],
        r=r,
        n_covariates=n_covariates,
        bartlett=bartlett,
    )

    measure = float(r[0])
    p_value = significance(measure, stats, test=test,
                           variance_estimator=variance_estimator,
                           surrogates=surrogates, seed=seed)
    return measure, p_value, stats
