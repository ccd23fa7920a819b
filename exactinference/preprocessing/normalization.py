"""
Normalization of time series.

Z-scoring each recording puts regions and subjects on a common scale
before they are paired up in a trial.
"""

import numpy as np
from typing import Optional


class ZScoreNormalizer:
    """
    Z-score along a time axis: (x - mean) / std, with the sample std (ddof=1).

    Series with zero variance map to zeros.

    Parameters
    ----------
    axis : int, default 0
        Time axis
    """

    def __init__(self, axis: int = 0):
        self.axis = axis
        self.mean_: Optional[np.ndarray] = None
        self.std_: Optional[np.ndarray] = None

    def fit(self, x: np.ndarray) -> 'ZScoreNormalizer':
        x = np.asarray(x, dtype=float)
        self.mean_ = x.mean(axis=self.axis, keepdims=True)
        self.std_ = x.std(axis=self.axis, ddof=1, keepdims=True)
        return self

    def transform(self, x: np.ndarray) -> np.ndarray:
        if self.mean_ is None:
            raise ValueError("ZScoreNormalizer must be fitted before transform")
        x = np.asarray(x, dtype=float)
        safe = np.where(self.std_ > 0, self.std_, 1.0)
        return np.where(self.std_ > 0, (x - self.mean_) / safe, 0.0)

    def inverse_transform(self, z: np.ndarray) -> np.ndarray:
        if self.mean_ is None:
            raise ValueError("ZScoreNormalizer must be fitted before inverse_transform")
        return np.asarray(z, dtype=float) * self.std_ + self.mean_

    def fit_transform(self, x: np.ndarray) -> np.ndarray:
        return self.fit(x).transform(x)


def zscore_array(x: np.ndarray, axis: int = 0) -> np.ndarray:
    """Z-score an array along ``axis``; empty arrays are returned unchanged."""
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return x.copy()
    return ZScoreNormalizer(axis=axis).fit_transform(x)
