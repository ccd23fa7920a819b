"""
Core linear-Gaussian dependence machinery.

Every measure in this package is a (conditional) mutual information
between two blocks of columns, estimated by ordinary least squares with an
intercept. The chain rule splits it into one term per pair of columns,

    I(X; Y | W) = sum_ij  -1/2 log(1 - r_ij^2),

where r_ij is the sample partial correlation of X_i and Y_j given
{W, X_<i, Y_<j}. Each term has a known finite-sample null distribution
(a Beta law), which is what the exact test in ``significance`` relies on.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional, Tuple
from statsmodels.tsa.stattools import acf as statsmodels_acf

MEASURE_TYPES = ('mi', 'gc', 'pcorr')


@dataclass
class MeasureStats:
    """
    Sufficient statistics of a dependence measure for significance testing.

    Attributes
    ----------
    measure_type : {'mi', 'gc', 'pcorr'}
        Which measure produced the statistics
    n_samples : int
        Number of (aligned) samples the regressions used
    dim_x, dim_y, dim_w : int
        Column counts of the target, source and conditioning blocks as
        seen by the regressions (lag embeddings included)
    r : np.ndarray
        Partial correlation of every chain-rule term
    n_covariates : np.ndarray
        Size of every term's conditioning set (intercept excluded)
    bartlett : np.ndarray
        Bartlett variance factor of every term, sum_tau rho_a(tau) rho_b(tau)
    p, q : int or None
        Embedding orders (Granger causality only)
    """
    measure_type: str
    n_samples: int
    dim_x: int
    dim_y: int
    dim_w: int
    r: np.ndarray = field(default_factory=lambda: np.zeros(0))
    n_covariates: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=int))
    bartlett: np.ndarray = field(default_factory=lambda: np.zeros(0))
    p: Optional[int] = None
    q: Optional[int] = None

    def __post_init__(self):
        if self.measure_type not in MEASURE_TYPES:
            raise ValueError(f"Unknown measure type: {self.measure_type}. "
                             f"Available: {list(MEASURE_TYPES)}")

    @property
    def dof(self) -> int:
        """Degrees of freedom (number of chain-rule terms)."""
        return int(len(self.r))

    @property
    def terms(self) -> np.ndarray:
        """Information carried by each term, in nats."""
        return -0.5 * np.log1p(-np.minimum(self.r ** 2, 1.0 - 1e-15))

    @property
    def information(self) -> float:
        """Total (conditional) mutual information, in nats."""
        return float(np.sum(self.terms))


def as_2d(x, n_rows: Optional[int] = None) -> np.ndarray:
    """
    Coerce input to a float (T, d) array; rows are time.

    ``None`` becomes an empty (n_rows, 0) array and 1-D input a single
    column.
    """
    if x is None:
        if n_rows is None:
            raise ValueError("n_rows is required to build an empty block")
        return np.zeros((n_rows, 0))
    x = np.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x[:, None]
    if x.ndim != 2:
        raise ValueError(f"Expected a 1-D or 2-D array, got {x.ndim} dimensions")
    if n_rows is not None and x.size == 0 and x.shape[0] != n_rows:
        x = np.zeros((n_rows, 0))
    return x


def check_inputs(X, Y, W=None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Validate and align the three blocks of a dependence measure."""
    X = as_2d(X)
    Y = as_2d(Y)
    W = as_2d(W, n_rows=X.shape[0])

    if X.shape[1] == 0 or Y.shape[1] == 0:
        raise ValueError("X and Y must each have at least one column")
    if not (X.shape[0] == Y.shape[0] == W.shape[0]):
        raise ValueError(f"Sample counts differ: X={X.shape[0]}, "
                         f"Y={Y.shape[0]}, W={W.shape[0]}")
    for name, block in (('X', X), ('Y', Y), ('W', W)):
        if not np.all(np.isfinite(block)):
            raise ValueError(f"{name} contains NaN or infinite values")
    return X, Y, W


def residualize(y: np.ndarray, Z: np.ndarray) -> np.ndarray:
    """
    Residuals of the OLS regression of ``y`` on ``[1, Z]``.
    """
    y = np.asarray(y, dtype=float)
    n = y.shape[0]
    design = np.column_stack([np.ones(n), Z]) if Z.size else np.ones((n, 1))
    beta, *_ = np.linalg.lstsq(design, y, rcond=None)
    return y - design @ beta


def bartlett_factor(a: np.ndarray, b: np.ndarray) -> float:
    """
    Bartlett's variance factor for the sample correlation of two series.

    Under independence, var(r) ~= (1/N) * sum_tau rho_a(tau) rho_b(tau);
    the sum runs over all lags of both directions. White series give 1,
    and larger values mean fewer effective samples.
    """
    n = len(a)
    if n < 2:
        return 1.0
    rho_a = statsmodels_acf(a, nlags=n - 1, fft=True, missing='none')
    rho_b = statsmodels_acf(b, nlags=n - 1, fft=True, missing='none')
    if not (np.all(np.isfinite(rho_a)) and np.all(np.isfinite(rho_b))):
        # Constant residual: no information about the autocorrelation
        return 1.0
    return float(1.0 + 2.0 * np.sum(rho_a[1:] * rho_b[1:]))


def decompose_information(X: np.ndarray,
                          Y: np.ndarray,
                          W: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Chain-rule decomposition of I(X; Y | W) into partial correlations.

    Parameters
    ----------
    X, Y, W : np.ndarray, shape (N, dx), (N, dy), (N, dw)
        Aligned blocks (already validated)

    Returns
    -------
    r : np.ndarray, shape (dx * dy,)
        Partial correlation of X_i and Y_j given {W, X_<i, Y_<j}
    n_covariates : np.ndarray of int
        Size of each conditioning set
    bartlett : np.ndarray
        Bartlett factor of each pair of residual series
    """
    n, dx = X.shape
    dy = Y.shape[1]
    dw = W.shape[1]

    # Largest conditioning set needs at least three spare samples
    k_max = dw + dx - 1 + dy - 1
    if n < k_max + 4:
        raise ValueError(f"Too few samples ({n}) for {k_max + 1} regressors")

    r = np.zeros(dx * dy)
    n_covariates = np.zeros(dx * dy, dtype=int)
    bartlett = np.ones(dx * dy)

    term = 0
    for i in range(dx):
        for j in range(dy):
            Z = np.column_stack([W, X[:, :i], Y[:, :j]])
            a = residualize(X[:, i], Z)
            b = residualize(Y[:, j], Z)

            denom = np.sqrt(np.dot(a, a) * np.dot(b, b))
            r[term] = np.dot(a, b) / denom if denom > 0 else 0.0
            n_covariates[term] = Z.shape[1]
            bartlett[term] = bartlett_factor(a, b)
            term += 1

    return r, n_covariates, bartlett


def log_det_information(X, Y, W=None) -> float:
    """
    Conditional mutual information from residual covariance determinants.

    I(X; Y | W) = 1/2 [log det Sigma(X | W) - log det Sigma(X | Y, W)].
    Equal to the sum of the chain-rule terms; kept as an independent
    estimate for diagnostics.
    """
    X, Y, W = check_inputs(X, Y, W)
    resid_reduced = np.column_stack([residualize(X[:, i], W) for i in range(X.shape[1])])
    full = np.column_stack([Y, W])
    resid_full = np.column_stack([residualize(X[:, i], full) for i in range(X.shape[1])])

    _, logdet_reduced = np.linalg.slogdet(np.atleast_2d(np.cov(resid_reduced, rowvar=False)))
    _, logdet_full = np.linalg.slogdet(np.atleast_2d(np.cov(resid_full, rowvar=False)))
    return 0.5 * float(logdet_reduced - logdet_full)


def embed(x: np.ndarray, lags: int, n_skip: Optional[int] = None) -> np.ndarray:
    """
    Lagged design matrix of ``x``.

    Row t (t = 0 .. T - n_skip - 1) holds x[n_skip + t - 1], ...,
    x[n_skip + t - lags], so it aligns with the targets ``x[n_skip:]``.
    Columns are ordered lag-major: all series at lag 1, then lag 2, etc.

    Parameters
    ----------
    x : np.ndarray, shape (T,) or (T, d)
        Input series
    lags : int
        Number of lags (0 gives an empty matrix)
    n_skip : int or None
        Number of leading samples without a full history (default ``lags``)

    Returns
    -------
    np.ndarray, shape (T - n_skip, d * lags)
    """
    x = as_2d(x)
    T, d = x.shape
    n_skip = lags if n_skip is None else n_skip
    if lags < 0:
        raise ValueError("lags must be non-negative")
    if n_skip < lags:
        raise ValueError(f"n_skip ({n_skip}) must be at least lags ({lags})")
    if n_skip >= T:
        raise ValueError(f"n_skip ({n_skip}) leaves no samples out of {T}")
    if lags == 0:
        return np.zeros((T - n_skip, 0))
    return np.column_stack([x[n_skip - lag:T - lag] for lag in range(1, lags + 1)])
