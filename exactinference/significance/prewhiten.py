"""
Prewhitening of time series by univariate autoregressive filtering.

Prewhitening is the classical remedy for autocorrelation before a
dependence test: every series is replaced by the innovations of its own
AR model, so that (ideally) only white noise is compared.
"""

import numpy as np
from typing import Optional, Tuple
from statsmodels.tsa.ar_model import AutoReg, ar_select_order


def _as_columns(x, n_rows: int) -> np.ndarray:
    if x is None:
        return np.zeros((n_rows, 0))
    x = np.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x[:, None]
    if x.size == 0:
        return np.zeros((n_rows, 0))
    return x


def fit_ar_residuals(x: np.ndarray,
                     max_order: int = 20,
                     criterion: str = 'bic') -> Tuple[np.ndarray, int]:
    """
    Innovations of a univariate AR model with order chosen by ``criterion``.

    Parameters
    ----------
    x : np.ndarray, shape (T,)
        Input series
    max_order : int, default 20
        Largest AR order to consider
    criterion : {'aic', 'bic', 'hqic'}, default 'bic'
        Information criterion for order selection

    Returns
    -------
    resid : np.ndarray, shape (T - order,)
        Residual (whitened) series
    order : int
        Selected AR order (0 means the series is only demeaned)
    """
    x = np.asarray(x, dtype=float)
    max_order = int(min(max_order, len(x) // 4))

    if max_order < 1 or np.std(x) == 0:
        return x - np.mean(x), 0

    selection = ar_select_order(x, maxlag=max_order, ic=criterion, trend='c')
    lags = selection.ar_lags
    order = int(max(lags)) if lags else 0

    if order == 0:
        return x - np.mean(x), 0

    fit = AutoReg(x, lags=order, trend='c').fit()
    return np.asarray(fit.resid), order


def prewhiten(X: np.ndarray,
              Y: np.ndarray,
              W: Optional[np.ndarray] = None,
              max_order: int = 20,
              criterion: str = 'bic') -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Prewhiten every column of X, Y and W with its own AR model.

    Residual series lose their first ``order`` samples; all outputs are
    trimmed to the length of the shortest one so they stay aligned in
    time.

    Returns
    -------
    X_pw, Y_pw, W_pw : np.ndarray
        Whitened blocks with a common number of rows; an empty W stays
        empty
    """
    X = _as_columns(X, 0)
    n = X.shape[0]
    Y = _as_columns(Y, n)
    W = _as_columns(W, n)
    if Y.shape[0] != n or W.shape[0] != n:
        raise ValueError(f"Sample counts differ: X={n}, Y={Y.shape[0]}, W={W.shape[0]}")

    whitened = []
    for block in (X, Y, W):
        whitened.append([fit_ar_residuals(block[:, i], max_order, criterion)[0]
                         for i in range(block.shape[1])])

    n_keep = min(len(resid) for cols in whitened for resid in cols)

    out = []
    for block, cols in zip((X, Y, W), whitened):
        if cols:
            out.append(np.column_stack([resid[-n_keep:] for resid in cols]))
        else:
            out.append(np.zeros((n_keep, 0)))

    return out[0], out[1], out[2]
