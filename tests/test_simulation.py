"""VAR process simulation."""
import numpy as np
import pytest

from exactinference.simulation import (
    COUPLING_COEFFICIENT,
    VARSimulator,
    build_var_coefficients,
    is_stable,
    partition,
    simulate_var,
)


class TestCoefficients:

    def test_ar_blocks(self):
        Phi = build_var_coefficients(2, 1, 1, ar=True)
        assert np.allclose(np.diag(Phi), [0.3, 0.3, -0.8, 0.4])
        assert np.count_nonzero(Phi - np.diag(np.diag(Phi))) == 0

    def test_white(self):
        assert np.all(build_var_coefficients(1, 1, 2, ar=False) == 0)

    def test_coupling_is_y_to_x(self):
        Phi = build_var_coefficients(2, 2, ar=True, causal=True)
        assert np.allclose(Phi[:2, 2:], COUPLING_COEFFICIENT * np.eye(2))
        assert np.all(Phi[2:, :2] == 0)

    def test_stable(self):
        assert is_stable(build_var_coefficients(2, 2, 1, causal=True))
        assert not is_stable(np.array([[1.01]]))

    def test_invalid_dims(self):
        with pytest.raises(ValueError):
            build_var_coefficients(0, 1)


class TestSimulation:

    def test_shape_and_reproducibility(self):
        Phi = build_var_coefficients(1, 2, 1)
        a = simulate_var(Phi, 100, rng=np.random.default_rng(7))
        b = simulate_var(Phi, 100, rng=np.random.default_rng(7))
        assert a.shape == (100, 4)
        assert np.array_equal(a, b)

    def test_first_sample_is_innovation(self):
        Phi = build_var_coefficients(1, 1)
        Z = simulate_var(Phi, 10, rng=np.random.default_rng(3))
        eps = np.random.default_rng(3).standard_normal((10, 2))
        assert np.allclose(Z[0], eps[0])
        assert np.allclose(Z[1], Phi @ Z[0] + eps[1])

    def test_ar_coefficient_recovered(self):
        Phi = build_var_coefficients(1, 1)
        Z = simulate_var(Phi, 20000, rng=np.random.default_rng(0))
        y = Z[:, 1]
        rho = np.corrcoef(y[1:], y[:-1])[0, 1]
        assert rho == pytest.approx(-0.8, abs=0.02)

    def test_non_square(self):
        with pytest.raises(ValueError, match="square"):
            simulate_var(np.zeros((2, 3)), 10)

    def test_innovation_covariance(self):
        Sigma = np.array([[4.0, 1.0], [1.0, 1.0]])
        Z = simulate_var(np.zeros((2, 2)), 50000, rng=np.random.default_rng(1), Sigma=Sigma)
        assert np.allclose(np.cov(Z.T), Sigma, atol=0.1)

    def test_sigma_not_positive_definite(self):
        with pytest.raises(ValueError, match="positive definite"):
            simulate_var(np.zeros((2, 2)), 10, Sigma=np.array([[1.0, 2.0], [2.0, 1.0]]))

    def test_partition(self):
        Z = np.arange(20.0).reshape(5, 4)
        X, Y, W = partition(Z, 1, 2, 1)
        assert X.shape == (5, 1) and Y.shape == (5, 2) and W.shape == (5, 1)
        assert np.array_equal(Y[:, 0], Z[:, 1])
        with pytest.raises(ValueError):
            partition(Z, 1, 1, 1)


class TestSimulator:

    def test_sample_blocks(self, rng):
        X, Y, W = VARSimulator(dim_x=2, dim_y=1, dim_w=0).sample(rng, 64)
        assert X.shape == (64, 2)
        assert Y.shape == (64, 1)
        assert W.shape == (64, 0)

    def test_causal_lagged_correlation(self, rng):
        X, Y, _ = VARSimulator(causal=True).sample(rng, 20000)
        lagged = np.corrcoef(X[1:, 0], Y[:-1, 0])[0, 1]
        reverse = np.corrcoef(Y[1:, 0], X[:-1, 0])[0, 1]
        assert abs(lagged) > 0.1
        assert abs(lagged) > abs(reverse)
