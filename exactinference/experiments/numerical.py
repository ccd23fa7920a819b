"""
Numerical evaluations: false-positive rates of dependence tests on
simulated autocorrelated time series.
"""

import matplotlib.pyplot as plt
import pandas as pd
from pathlib import Path
from typing import Mapping, Optional, Tuple, Union

from ..preprocessing import design_filter
from .analysis import collect_pvalues, plot_fpr_curves, print_fpr_summary, save_figure, save_results
from .parameters import ExperimentConfig, resolve_configuration
from .workflow import NumericalTrial, run_trials

# Low-pass cutoff of the simulation filters (normalised, Nyquist = 1)
SIMULATION_CUTOFF = 0.5


def describe_tests(univariate: bool):
    """Print the tests that a run of this dimensionality reports."""
    if univariate:
        print("The simulated time series are univariate, so we have the following tests available:")
        print("\t1. The exact test")
        print("\t2a. The asymptotic LR (chi-2) test")
        print("\t2b. The asymptotic LR (chi-2) test [with prewhitened time series]")
        print("\t3a. The F-test")
        print("\t3b. The F-test [with prewhitened time series]")
    else:
        print("The simulated time series are multivariate, so we have the following tests available:")
        print("\t1. The exact test")
        print("\t2. The asymptotic LR (chi-2) test")


def run_numerical_evaluation(figure_or_config: Union[str, ExperimentConfig, Mapping],
                             which_exp: Optional[int] = None,
                             output_file: Optional[Union[str, Path]] = None,
                             plot_results: bool = True,
                             figure_file: Optional[Union[str, Path]] = None,
                             n_jobs: int = 1,
                             verbose: bool = True,
                             overrides: Optional[Mapping] = None) -> Tuple[ExperimentConfig, pd.DataFrame]:
    """
    Run the simulations of one numerical evaluation.

    Parameters
    ----------
    figure_or_config : str, ExperimentConfig or mapping
        A panel label ('1a' .. '7b') or user-supplied parameters
    which_exp : int or None
        Filter-order variant of a panel (see FILTER_ORDERS)
    output_file : str, Path or None
        Where to save the p-values ('.mat' or CSV)
    plot_results : bool, default True
        Plot the FPR curves
    figure_file : str, Path or None
        Save the plot here (implies plotting)
    n_jobs : int, default 1
        Worker processes for the trials
    verbose : bool, default True
        Print progress
    overrides : mapping or None
        Parameters replacing those of the resolved configuration

    Returns
    -------
    config : ExperimentConfig
    pvals : pd.DataFrame
        One row per trial: measure and p-value of every test
    """
    config = resolve_configuration(figure_or_config, which_exp=which_exp)
    if overrides:
        config = config.replace(**overrides)

    if verbose:
        if isinstance(figure_or_config, str):
            print(f"Performing numerical simulations from Fig. {figure_or_config}.")
        else:
            print("User-supplied configuration.")
        print("Using the following params:")
        print(config.describe())
        describe_tests(config.univariate)

    design = None
    if config.to_filter > 0 and config.filter_order > 0:
        design = design_filter(config.to_filter, config.filter_order, cutoff=SIMULATION_CUTOFF)

    if verbose:
        print("Running simulations...")

    trial = NumericalTrial(config, design)
    results = run_trials(trial, config.R, seed=config.seed, n_jobs=n_jobs,
                         verbose=verbose, desc="Simulations")
    pvals = collect_pvalues(results)

    if output_file is not None:
        save_results(output_file, config.to_dict(), pvals)

    if verbose:
        print_fpr_summary(pvals, config.alpha)

    if plot_results or figure_file is not None:
        ax = plot_fpr_curves(pvals, title=f"{config.measure_name}, T={config.T}")
        if figure_file is not None:
            save_figure(ax.figure, figure_file)
        if plot_results and figure_file is None:
            plt.show()

    return config, pvals
