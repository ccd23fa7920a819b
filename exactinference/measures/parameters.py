"""
Model-order selection for Granger causality embeddings.

Implements the two-step procedure used when embedding orders are 'auto':
1. Find p, the autoregressive order of the target X (with the same lags
   of the conditioning block W), minimising an information criterion
2. Find q, the autoregressive order of the source Y on its own history

q is selected without looking at X. All candidate orders of one series are
fitted on the same samples so their criteria are comparable.
"""

import numpy as np
import pandas as pd
from typing import Optional, Tuple, Union

from .core import as_2d, embed, residualize

CRITERIA = ('aic', 'bic', 'hqic')


def information_criterion(resid: np.ndarray,
                          n_params: int,
                          criterion: str = 'bic') -> float:
    """
    Gaussian information criterion of a (multi-output) regression.

    Parameters
    ----------
    resid : np.ndarray, shape (N, d)
        Residuals of the fitted model
    n_params : int
        Number of estimated coefficients (all outputs)
    criterion : {'aic', 'bic', 'hqic'}, default 'bic'
        Penalty to apply

    Returns
    -------
    float
        N log det(Sigma) + penalty
    """
    resid = as_2d(resid)
    n = resid.shape[0]
    sigma = np.atleast_2d(resid.T @ resid / n)
    sign, logdet = np.linalg.slogdet(sigma)
    if sign <= 0:
        return np.inf

    if criterion == 'aic':
        penalty = 2.0 * n_params
    elif criterion == 'bic':
        penalty = np.log(n) * n_params
    elif criterion == 'hqic':
        penalty = 2.0 * np.log(np.log(n)) * n_params
    else:
        raise ValueError(f"Unknown criterion: {criterion}. Available: {list(CRITERIA)}")

    return n * logdet + penalty


def _fit_criterion(target: np.ndarray, design: np.ndarray, criterion: str) -> float:
    resid = np.column_stack([residualize(target[:, i], design)
                             for i in range(target.shape[1])])
    n_params = target.shape[1] * (design.shape[1] + 1)
    return information_criterion(resid, n_params, criterion)


def select_order(X: np.ndarray,
                 max_order: int = 20,
                 criterion: str = 'bic',
                 W: Optional[np.ndarray] = None,
                 verbose: bool = False) -> Tuple[int, pd.DataFrame]:
    """
    Select an autoregressive order by minimising an information criterion.

    Candidate orders 1..max_order regress X on its own lags (and W lagged
    by the same order). ``max_order`` is lowered to what the sample
    supports when the series is short.

    Parameters
    ----------
    X : np.ndarray, shape (T,) or (T, dx)
        Series whose order is selected
    max_order : int, default 20
        Largest order to try (candidates are 1..max_order)
    criterion : {'aic', 'bic', 'hqic'}, default 'bic'
        Information criterion
    W : np.ndarray or None
        Conditioning series
    verbose : bool, default False
        Print selection details

    Returns
    -------
    order : int
        Selected order
    order_df : pd.DataFrame
        Criterion value for every candidate order
    """
    X = as_2d(X)
    T = X.shape[0]
    W = as_2d(W, n_rows=T)
    if criterion not in CRITERIA:
        raise ValueError(f"Unknown criterion: {criterion}. Available: {list(CRITERIA)}")
    if max_order < 1:
        raise ValueError("max_order must be at least 1")

    # Keep at least 3 * max_order + 2 samples after skipping max_order
    supported = (T - 2) // 4
    if supported < 1:
        raise ValueError(f"Too few samples ({T}) to select an order")
    if max_order > supported:
        if verbose:
            print(f"  Warning: max_order lowered from {max_order} to {supported} for {T} samples")
        max_order = supported

    n_skip = max_order
    target = X[n_skip:]
    results = []
    for order in range(1, max_order + 1):
        design = np.column_stack([embed(X, order, n_skip), embed(W, order, n_skip)])
        results.append({'order': order, criterion: _fit_criterion(target, design, criterion)})

    order_df = pd.DataFrame(results)
    order_df_valid = order_df[np.isfinite(order_df[criterion])]

    if len(order_df_valid) == 0:
        if verbose:
            print("  Warning: All orders failed, using order=1")
        return 1, order_df

    best = int(order_df_valid.loc[order_df_valid[criterion].idxmin(), 'order'])

    if verbose:
        print(f"Found order = {best} with {criterion.upper()} = "
              f"{order_df_valid[criterion].min():.3f}")

    return best, order_df


def parse_order(order: Union[int, str, None]) -> Union[int, str]:
    """
    Normalise an embedding order: an int, a numeric string or 'auto'.
    """
    if order is None:
        return 'auto'
    if isinstance(order, str):
        if order.strip().lower() == 'auto':
            return 'auto'
        try:
            order = int(order)
        except ValueError:
            raise ValueError(f"Order must be an integer or 'auto', got {order!r}") from None
    order = int(order)
    if order < 1:
        raise ValueError(f"Order must be at least 1, got {order}")
    return order
