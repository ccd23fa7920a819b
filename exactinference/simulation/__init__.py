"""
Synthetic data with known ground truth for validating dependence tests.
"""

from .generators import (
    AR_COEFFICIENTS,
    COUPLING_COEFFICIENT,
    build_var_coefficients,
    partition_indices,
    simulate_var,
    partition,
    is_stable,
    VARSimulator,
)

__all__ = [
    'AR_COEFFICIENTS',
    'COUPLING_COEFFICIENT',
    'build_var_coefficients',
    'partition_indices',
    'simulate_var',
    'partition',
    'is_stable',
    'VARSimulator',
]
