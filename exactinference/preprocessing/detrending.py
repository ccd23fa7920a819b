"""
Detrending of time series.

Removing trends before testing avoids global effects (slow drifts shared
across recordings) being mistaken for linear dependence.
"""

import numpy as np
import pandas as pd
from scipy import signal
from typing import Union

DETREND_TYPES = ('linear', 'constant', 'none')


def detrend_array(x: np.ndarray,
                  axis: int = 0,
                  type: str = 'linear') -> np.ndarray:
    """
    Detrend a numeric array along ``axis``.

    A column is a single time series when ``axis=0`` (the default), so a
    (T, d) array is detrended series by series. Empty arrays are returned
    unchanged.

    Parameters
    ----------
    x : np.ndarray
        Input data
    axis : int, default 0
        Time axis
    type : {'linear', 'constant', 'none'}, default 'linear'
        Remove a least-squares line, only the mean, or nothing

    Returns
    -------
    np.ndarray
        Detrended float array with the same shape as ``x``
    """
    if type not in DETREND_TYPES:
        raise ValueError(f"Unknown detrending method: {type}. Available: {list(DETREND_TYPES)}")
    x = np.asarray(x, dtype=float)
    if x.size == 0 or type == 'none':
        return x.copy()
    return signal.detrend(x, axis=axis, type=type)


def detrend_dataframe(df: Union[pd.DataFrame, np.ndarray],
                      method: str = 'linear') -> pd.DataFrame:
    """
    Detrend every column of a DataFrame (or 2-D array).

    Non-finite samples are skipped when fitting the trend (the line is
    fitted against the true sample index) and stay NaN in the output;
    columns with fewer than 3 finite samples are only demeaned.

    Parameters
    ----------
    df : pd.DataFrame or np.ndarray
        Input time series data (one series per column)
    method : {'linear', 'constant', 'none'}, default 'linear'
        Detrending method name

    Returns
    -------
    pd.DataFrame
        Detrended data
    """
    if method not in DETREND_TYPES:
        raise ValueError(f"Unknown detrending method: {method}. Available: {list(DETREND_TYPES)}")
    if not isinstance(df, pd.DataFrame):
        df = pd.DataFrame(np.asarray(df, dtype=float))

    t = np.arange(len(df), dtype=float)
    out = pd.DataFrame(index=df.index)
    for col in df.columns:
        y = pd.to_numeric(df[col], errors='coerce').to_numpy(dtype=float)
        ok = np.isfinite(y)
        result = y.copy()
        if method == 'linear' and ok.sum() >= 3:
            coef = np.polyfit(t[ok], y[ok], 1)
            result[ok] = y[ok] - np.polyval(coef, t[ok])
        elif method != 'none' and ok.any():
            result[ok] = y[ok] - y[ok].mean()
        result[~ok] = np.nan
        out[col] = result
    return out
