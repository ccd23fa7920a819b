"""
Preprocessing module for dependence testing on time series.

This module provides detrending, normalization and digital filtering used
to prepare simulated and recorded signals before testing.
"""

from .normalization import (
    ZScoreNormalizer,
    zscore_array,
)

from .detrending import (
    DETREND_TYPES,
    detrend_array,
    detrend_dataframe,
)

from .filtering import (
    FILTER_KINDS,
    FilterDesign,
    normalise_cutoff,
    design_filter,
    apply_filter,
    trim_boundary,
)

__all__ = [
    # Normalization
    'ZScoreNormalizer',
    'zscore_array',
    # Detrending
    'DETREND_TYPES',
    'detrend_array',
    'detrend_dataframe',
    # Filtering
    'FILTER_KINDS',
    'FilterDesign',
    'normalise_cutoff',
    'design_filter',
    'apply_filter',
    'trim_boundary',
]
