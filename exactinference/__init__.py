"""
exactinference: Exact inference of linear dependence between multiple
autocorrelated time series.

This package provides standardized tools for:
- Preprocessing time series (detrending, normalization, filtering)
- Dependence measures (mutual information, Granger causality, partial correlation)
- Exact and asymptotic significance tests, prewhitening
- Monte-Carlo experiments reproducing the paper's evaluations
"""

__version__ = "0.1.0"

# Import main modules for convenient access
from . import preprocessing
from . import measures
from . import significance
from . import simulation
from . import experiments

# Import key functions for direct access
from .preprocessing import (
    design_filter,
    apply_filter,
    detrend_array,
    zscore_array,
)

from .measures import (
    mvmi,
    mvgc,
    pcorr,
    MeasureStats,
)

from .significance import (
    prewhiten,
    empirical_p,
)

from .simulation import (
    VARSimulator,
    simulate_var,
)

from .experiments import (
    ExperimentConfig,
    HCPConfig,
    run_numerical_evaluation,
    run_hcp_case_study,
)

__all__ = [
    'preprocessing',
    'measures',
    'significance',
    'simulation',
    'experiments',
    # Preprocessing
    'design_filter',
    'apply_filter',
    'detrend_array',
    'zscore_array',
    # Measures
    'mvmi',
    'mvgc',
    'pcorr',
    'MeasureStats',
    # Significance
    'prewhiten',
    'empirical_p',
    # Simulation
    'VARSimulator',
    'simulate_var',
    # Experiments
    'ExperimentConfig',
    'HCPConfig',
    'run_numerical_evaluation',
    'run_hcp_case_study',
]
