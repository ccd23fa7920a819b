"""
Granger causality between multivariate time series.

Granger causality from Y to X given W is the conditional mutual
information between the present of X and the past of Y, given the past
of X and W:

    F(Y -> X | W) = I(X_t ; Y_{t-1..t-q} | X_{t-1..t-p}, W_{t-1..t-p})

so the same exact and asymptotic tests apply once the lag embeddings are
built.
"""

import numpy as np
from typing import Optional, Tuple, Union

from .core import MeasureStats, check_inputs, decompose_information, embed
from .parameters import parse_order, select_order
from ..significance.testing import significance


def resolve_orders(X: np.ndarray,
                   Y: np.ndarray,
                   W: np.ndarray,
                   p: Union[int, str] = 'auto',
                   q: Union[int, str] = 'auto',
                   max_order: int = 20,
                   criterion: str = 'bic') -> Tuple[int, int]:
    """
    Turn 'auto' embedding orders into integers.

    p is chosen from the autoregression of X (with W); q from the
    autoregression of Y on its own past, independently of X.
    """
    p = parse_order(p)
    q = parse_order(q)

    if p == 'auto':
        p, _ = select_order(X, max_order=max_order, criterion=criterion, W=W)
    if q == 'auto':
        q, _ = select_order(Y, max_order=max_order, criterion=criterion)

    return p, q


def mvgc(X: np.ndarray,
         Y: np.ndarray,
         W: Optional[np.ndarray] = None,
         p: Union[int, str] = 'auto',
         q: Union[int, str] = 'auto',
         test: str = 'exact',
         surrogates: int = 5000,
         variance_estimator: str = 'bartlett',
         max_order: int = 20,
         criterion: str = 'bic',
         seed: Optional[int] = None) -> Tuple[float, float, MeasureStats]:
    """
    Granger causality from Y to X (conditional on W) with a significance test.

    Parameters
    ----------
    X : np.ndarray, shape (T,) or (T, dx)
        Target time series
    Y : np.ndarray, shape (T,) or (T, dy)
        Source time series
    W : np.ndarray or None
        Conditioning time series
    p, q : int, str, default 'auto'
        Target and source embedding orders; ints, numeric strings or 'auto'
    test : {'exact', 'asymptotic'}, default 'exact'
        Significance test
    surrogates : int, default 5000
        Monte-Carlo sample size for multi-term exact null distributions
    variance_estimator : {'bartlett', 'none'}, default 'bartlett'
        Autocorrelation correction of the exact test
    max_order : int, default 20
        Largest order considered by 'auto'
    criterion : {'aic', 'bic', 'hqic'}, default 'bic'
        Order selection criterion
    seed : int or None
        Seed for the Monte-Carlo null distribution

    Returns
    -------
    measure : float
        Granger causality in nats
    p_value : float
        p-value of the requested test
    stats : MeasureStats
        Statistics for re-testing with ``significance``
    """
    X, Y, W = check_inputs(X, Y, W)
    p, q = resolve_orders(X, Y, W, p=p, q=q, max_order=max_order, criterion=criterion)

    n_skip = max(p, q)
    if X.shape[0] - n_skip < 4:
        raise ValueError(f"Too few samples ({X.shape[0]}) for embedding orders p={p}, q={q}")

    target = X[n_skip:]
    source = embed(Y, q, n_skip)
    conditioning = np.column_stack([embed(X, p, n_skip), embed(W, p, n_skip)])

    r, n_covariates, bartlett = decompose_information(target, source, conditioning)
    stats = MeasureStats(
        measure_type='gc',
        n_samples=target.shape[0],
        dim_x=target.shape[1],
        dim_y=source.shape[1],
        dim_w=conditioning.shape[1],
        r=r,
        n_covariates=n_covariates,
        bartlett=bartlett,
        p=p,
        q=q,
    )

    measure = stats.information
    p_value = significance(measure, stats, test=test,
                           variance_estimator=variance_estimator,
                           surrogates=surrogates, seed=seed)
    return measure, p_value, stats
