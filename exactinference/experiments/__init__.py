"""
Experiment drivers reproducing the numerical evaluations and the HCP
case study.

This module provides:
- Figure presets and configuration dataclasses
- Seeded, parallel Monte-Carlo trial workflow
- False-positive-rate summaries and plots
"""

from .parameters import (
    FIGURE_OPTIONS,
    FILTER_ORDERS,
    HCP_TESTS,
    ExperimentConfig,
    HCPConfig,
    get_configuration,
    find_figure,
    resolve_configuration,
)

from .workflow import (
    run_trials,
    NumericalTrial,
    HCPTrial,
)

from .analysis import (
    TEST_LABELS,
    collect_pvalues,
    false_positive_rate,
    fpr_table,
    fpr_curve,
    print_fpr_summary,
    plot_fpr_curves,
    save_figure,
    save_results,
)

from .numerical import run_numerical_evaluation
from .hcp import hcp_filter, run_hcp_case_study

__all__ = [
    # Configuration
    'FIGURE_OPTIONS',
    'FILTER_ORDERS',
    'HCP_TESTS',
    'ExperimentConfig',
    'HCPConfig',
    'get_configuration',
    'find_figure',
    'resolve_configuration',
    # Workflow
    'run_trials',
    'NumericalTrial',
    'HCPTrial',
    # Analysis
    'TEST_LABELS',
    'collect_pvalues',
    'false_positive_rate',
    'fpr_table',
    'fpr_curve',
    'print_fpr_summary',
    'plot_fpr_curves',
    'save_figure',
    'save_results',
    # Drivers
    'run_numerical_evaluation',
    'hcp_filter',
    'run_hcp_case_study',
]
