"""
Linear dependence measures for multiple time series.

This module provides:
- Conditional mutual information (mvmi)
- Granger causality with automatic embedding orders (mvgc)
- Partial correlation (pcorr)

Each measure returns the statistic, its p-value and a ``MeasureStats``
record that ``significance`` can re-test under another null model.
"""

from .core import (
    MeasureStats,
    check_inputs,
    decompose_information,
    log_det_information,
    bartlett_factor,
    embed,
)

from .parameters import (
    information_criterion,
    select_order,
    parse_order,
)

from .mutual_information import mvmi
from .granger import mvgc, resolve_orders
from .partial_correlation import pcorr

__all__ = [
    # Core functions
    'MeasureStats',
    'check_inputs',
    'decompose_information',
    'log_det_information',
    'bartlett_factor',
    'embed',
    # Order selection
    'information_criterion',
    'select_order',
    'parse_order',
    # Measures
    'mvmi',
    'mvgc',
    'resolve_orders',
    'pcorr',
]
