"""
Significance testing for linear dependence measures.

This module provides exact (finite-sample, autocorrelation-corrected) and
asymptotic tests, Monte-Carlo null distributions and prewhitening.
"""

from .testing import (
    empirical_p,
    to_information,
    effective_samples,
    null_distribution,
    significance,
)

from .prewhiten import (
    fit_ar_residuals,
    prewhiten,
)

__all__ = [
    # Testing
    'empirical_p',
    'to_information',
    'effective_samples',
    'null_distribution',
    'significance',
    # Prewhitening
    'fit_ar_residuals',
    'prewhiten',
]
