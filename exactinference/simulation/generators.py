"""
Vector autoregressive (VAR(1)) process simulation with known ground truth.

The numerical evaluations draw three blocks X, Y and W from

    z_t = Phi z_{t-1} + eps_t,    eps_t ~ N(0, Sigma),

where Phi is block structured: each block is an independent AR(1) process
(or white noise), and an optional coupling lets the past of Y drive X.
Without coupling every dependence measure between X and Y is null, so
the rejection rate of a test is its false-positive rate.
"""

import numpy as np
from typing import Optional, Tuple

AR_COEFFICIENTS = {'x': 0.3, 'y': -0.8, 'w': 0.4}
COUPLING_COEFFICIENT = 0.2104


def build_var_coefficients(dim_x: int,
                           dim_y: int,
                           dim_w: int = 0,
                           ar: bool = True,
                           causal: bool = False,
                           coupling: float = COUPLING_COEFFICIENT) -> np.ndarray:
    """
    Block coefficient matrix Phi for the (X, Y, W) process.

    Parameters
    ----------
    dim_x, dim_y, dim_w : int
        Block dimensions
    ar : bool, default True
        Give every block its own AR(1) dynamics (0.3, -0.8 and 0.4 on the
        diagonals of X, Y and W); otherwise the blocks are white
    causal : bool, default False
        Add the coupling Phi_XY = coupling * I (Y drives X)
    coupling : float, default 0.2104
        Strength of the Y -> X coupling

    Returns
    -------
    np.ndarray, shape (M, M), M = dim_x + dim_y + dim_w
    """
    if dim_x < 1 or dim_y < 1 or dim_w < 0:
        raise ValueError(f"Invalid dimensions: dim_x={dim_x}, dim_y={dim_y}, dim_w={dim_w}")

    M = dim_x + dim_y + dim_w
    Phi = np.zeros((M, M))
    p_x, p_y, p_w = partition_indices(dim_x, dim_y, dim_w)

    if ar:
        Phi[p_x, p_x] = AR_COEFFICIENTS['x'] * np.eye(dim_x)
        Phi[p_y, p_y] = AR_COEFFICIENTS['y'] * np.eye(dim_y)
        Phi[p_w, p_w] = AR_COEFFICIENTS['w'] * np.eye(dim_w)

    if causal:
        Phi[p_x, p_y] = coupling * np.eye(dim_x, dim_y)

    return Phi


def partition_indices(dim_x: int, dim_y: int, dim_w: int = 0) -> Tuple[slice, slice, slice]:
    """Column slices of the X, Y and W blocks."""
    return (slice(0, dim_x),
            slice(dim_x, dim_x + dim_y),
            slice(dim_x + dim_y, dim_x + dim_y + dim_w))


def simulate_var(Phi: np.ndarray,
                 T: int,
                 rng: Optional[np.random.Generator] = None,
                 Sigma: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Simulate a VAR(1) process.

    Parameters
    ----------
    Phi : np.ndarray, shape (M, M)
        Coefficient matrix
    T : int
        Number of time points
    rng : np.random.Generator or None
        Random generator (a fresh unseeded one if None)
    Sigma : np.ndarray or None
        Covariance of the innovations eps_t (identity if None); must be
        positive definite

    Returns
    -------
    np.ndarray, shape (T, M)
        Simulated process, one column per series; z_0 = eps_0
    """
    Phi = np.atleast_2d(np.asarray(Phi, dtype=float))
    M = Phi.shape[0]
    if Phi.shape != (M, M):
        raise ValueError(f"Phi must be square, got shape {Phi.shape}")
    if T < 1:
        raise ValueError("T must be positive")

    rng = rng if rng is not None else np.random.default_rng()
    Z = rng.standard_normal((T, M))
    if Sigma is not None:
        Sigma = np.atleast_2d(np.asarray(Sigma, dtype=float))
        if Sigma.shape != (M, M):
            raise ValueError(f"Sigma must have shape {(M, M)}, got {Sigma.shape}")
        try:
            L = np.linalg.cholesky(Sigma)
        except np.linalg.LinAlgError:
            raise ValueError("Sigma must be a positive definite covariance matrix") from None
        Z = Z @ L.T
    for t in range(1, T):
        Z[t] = Phi @ Z[t - 1] + Z[t]

    return Z


def partition(Z: np.ndarray,
              dim_x: int,
              dim_y: int,
              dim_w: int = 0) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Split a simulated dataset into the series X, Y and conditional W.
    """
    if Z.shape[1] != dim_x + dim_y + dim_w:
        raise ValueError(f"Z has {Z.shape[1]} columns, expected {dim_x + dim_y + dim_w}")
    p_x, p_y, p_w = partition_indices(dim_x, dim_y, dim_w)
    return Z[:, p_x], Z[:, p_y], Z[:, p_w]


def is_stable(Phi: np.ndarray) -> bool:
    """True when every eigenvalue of Phi lies strictly inside the unit circle."""
    return bool(np.all(np.abs(np.linalg.eigvals(Phi)) < 1.0))


class VARSimulator:
    """
    Draw (X, Y, W) samples from a block VAR(1) process.

    Examples
    --------
    >>> sim = VARSimulator(dim_x=1, dim_y=1, ar=True)
    >>> X, Y, W = sim.sample(np.random.default_rng(0), T=500)
    """

    def __init__(self,
                 dim_x: int = 1,
                 dim_y: int = 1,
                 dim_w: int = 0,
                 ar: bool = True,
                 causal: bool = False,
                 Sigma: Optional[np.ndarray] = None):
        self.dim_x = dim_x
        self.dim_y = dim_y
        self.dim_w = dim_w
        self.Phi = build_var_coefficients(dim_x, dim_y, dim_w, ar=ar, causal=causal)
        self.Sigma = np.eye(self.Phi.shape[0]) if Sigma is None else np.asarray(Sigma, dtype=float)

    def sample(self, rng: np.random.Generator, T: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Draw T samples of the process, split into (X, Y, W)."""
        Z = simulate_var(self.Phi, T, rng=rng, Sigma=self.Sigma)
        return partition(Z, self.dim_x, self.dim_y, self.dim_w)
