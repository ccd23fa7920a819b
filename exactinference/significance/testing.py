"""
Exact and asymptotic significance tests for linear dependence measures.

Tests take the statistic and the ``MeasureStats`` a measure returns:

- 'asymptotic': the likelihood-ratio statistic 2 N I is chi-squared with
  one degree of freedom per chain-rule term.
- 'exact': every chain-rule term -1/2 log(1 - r^2) has r^2 ~ Beta(1/2,
  (N - 2 - k)/2) under the null, for N independent samples and k
  covariates. Autocorrelated samples are handled by replacing N with an
  effective sample size from Bartlett's formula. A single term has a
  closed-form p-value; sums of terms are calibrated by Monte Carlo.
"""

import numpy as np
from typing import Literal, Optional
from scipy import stats as sps

TESTS = ('exact', 'asymptotic')
VARIANCE_ESTIMATORS = ('bartlett', 'none')


def empirical_p(observed: float,
                surrogates: np.ndarray,
                tail: Literal["greater", "less", "two-sided"] = "greater") -> float:
    """
    Calculate empirical p-value from a null (surrogate) distribution.

    Parameters
    ----------
    observed : float
        Observed test statistic
    surrogates : np.ndarray
        Array of null test statistics
    tail : {'greater', 'less', 'two-sided'}, default 'greater'
        Type of test:
        - 'greater': Test if observed > surrogates (dependence)
        - 'less': Test if observed < surrogates
        - 'two-sided': Test if observed differs from surrogates

    Returns
    -------
    float
        Empirical p-value

    Notes
    -----
    Uses +1 trick: p = (k + 1) / (n + 1) to avoid p=0
    """
    surrogates = np.asarray(surrogates)
    n = len(surrogates)

    if tail == "greater":
        k = np.sum(surrogates >= observed)
    elif tail == "less":
        k = np.sum(surrogates <= observed)
    elif tail == "two-sided":
        med = np.median(surrogates)
        k = np.sum(np.abs(surrogates - med) >= np.abs(observed - med))
    else:
        raise ValueError("tail must be 'greater', 'less', or 'two-sided'")

    return (k + 1) / (n + 1)


def to_information(measure: float, stats) -> float:
    """Convert a measure to nats (partial correlations are signed r)."""
    if stats.measure_type == 'pcorr':
        r2 = min(float(measure) ** 2, 1.0 - 1e-15)
        return -0.5 * np.log1p(-r2)
    return float(measure)


def effective_samples(stats, variance_estimator: str = 'bartlett') -> np.ndarray:
    """
    Effective sample size of every chain-rule term.

    With 'none' every term sees all N samples. With 'bartlett' the sample
    size is divided by the Bartlett factor of the term's residuals,
    floored so that the null Beta law stays proper.
    """
    n = float(stats.n_samples)
    k = np.asarray(stats.n_covariates, dtype=float)

    if variance_estimator == 'none':
        n_eff = np.full(k.shape, n)
    elif variance_estimator == 'bartlett':
        factor = np.maximum(np.asarray(stats.bartlett, dtype=float), 1.0 / n)
        n_eff = n / factor
    else:
        raise ValueError(f"Unknown variance estimator: {variance_estimator}. "
                         f"Available: {list(VARIANCE_ESTIMATORS)}")

    return np.maximum(n_eff, k + 3.0)


def null_distribution(stats,
                      variance_estimator: str = 'bartlett',
                      surrogates: int = 5000,
                      seed: Optional[int] = None) -> np.ndarray:
    """
    Monte-Carlo sample of the exact null distribution of the total measure.

    Draws every term independently from its Beta law and sums the
    resulting information values.

    Returns
    -------
    np.ndarray, shape (surrogates,)
        Null draws of the measure, in nats
    """
    if surrogates < 1:
        raise ValueError("surrogates must be a positive integer")

    rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)
    n_eff = effective_samples(stats, variance_estimator)
    b = (n_eff - 2.0 - np.asarray(stats.n_covariates, dtype=float)) / 2.0

    draws = rng.beta(0.5, b, size=(surrogates, len(b)))
    draws = np.minimum(draws, 1.0 - 1e-15)
    return np.sum(-0.5 * np.log1p(-draws), axis=1)


def significance(measure: float,
                 stats,
                 test: str = 'exact',
                 variance_estimator: str = 'bartlett',
                 surrogates: int = 5000,
                 seed: Optional[int] = None) -> float:
    """
    p-value of a dependence measure under the chosen null model.

    Parameters
    ----------
    measure : float
        Statistic returned by ``mvmi``, ``mvgc`` or ``pcorr``
    stats : MeasureStats
        Statistics returned alongside the measure
    test : {'exact', 'asymptotic'}, default 'exact'
        Exact finite-sample test or likelihood-ratio chi-squared test
    variance_estimator : {'bartlett', 'none'}, default 'bartlett'
        Autocorrelation correction for the exact test. 'none' gives the
        classical finite-sample test for independent samples (the F-test
        when X is univariate)
    surrogates : int, default 5000
        Monte-Carlo sample size when no closed form is available
    seed : int, np.random.Generator or None
        Randomness for the Monte-Carlo null

    Returns
    -------
    float
        p-value in [0, 1]
    """
    if test not in TESTS:
        raise ValueError(f"Unknown test: {test}. Available: {list(TESTS)}")
    if variance_estimator not in VARIANCE_ESTIMATORS:
        raise ValueError(f"Unknown variance estimator: {variance_estimator}. "
                         f"Available: {list(VARIANCE_ESTIMATORS)}")

    info = max(to_information(measure, stats), 0.0)
    dof = stats.dof
    n = stats.n_samples

    if test == 'asymptotic':
        return float(sps.chi2.sf(2.0 * n * info, dof))

    if variance_estimator == 'none' and stats.dim_x == 1:
        # 1 - R^2 of the full regression is Beta((N - k - 1)/2, dof/2)
        k_full = int(np.max(stats.n_covariates)) + 1
        a = (n - k_full - 1) / 2.0
        if a <= 0:
            raise ValueError(f"Too few samples ({n}) for {k_full} regressors")
        return float(sps.beta.cdf(np.exp(-2.0 * info), a, dof / 2.0))

    n_eff = effective_samples(stats, variance_estimator)
    b = (n_eff - 2.0 - np.asarray(stats.n_covariates, dtype=float)) / 2.0

    if dof == 1:
        r2 = -np.expm1(-2.0 * info)
        return float(sps.beta.sf(r2, 0.5, b[0]))

    null = null_distribution(stats, variance_estimator=variance_estimator,
                             surrogates=surrogates, seed=seed)
    return float(empirical_p(info, null, tail="greater"))
