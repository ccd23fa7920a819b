import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from exactinference.simulation import VARSimulator


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def white_pair(rng):
    """Two independent white-noise series of length 500."""
    return rng.standard_normal(500), rng.standard_normal(500)


@pytest.fixture
def correlated_pair(rng):
    x = rng.standard_normal(400)
    y = 0.6 * x + 0.8 * rng.standard_normal(400)
    return x, y


@pytest.fixture
def causal_process(rng):
    """AR blocks with Y driving X, T = 2000."""
    sim = VARSimulator(dim_x=1, dim_y=1, ar=True, causal=True)
    X, Y, _ = sim.sample(rng, 2000)
    return X, Y


@pytest.fixture
def hcp_like_data(rng):
    """Synthetic (regions, time, subjects) array of AR(1) series."""
    D, T, M = 10, 320, 6
    dat = np.zeros((D, T, M))
    noise = rng.standard_normal((D, T, M))
    dat[:, 0, :] = noise[:, 0, :]
    for t in range(1, T):
        dat[:, t, :] = 0.7 * dat[:, t - 1, :] + noise[:, t, :]
    return dat + np.linspace(0, 3, T)[None, :, None]
