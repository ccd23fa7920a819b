"""
Human Connectome Project case study.

Pairs of BOLD series from different subjects cannot be dependent, so
every rejection is a false positive. The experiment samples such pairs,
band-pass filters them, and compares the FPR of the exact test with the
F-test or the LR test.
"""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from ..datasets import (
    DEFAULT_HCP_PATH,
    ensure_hcp_data,
    high_autocorrelation_regions,
    load_hcp_data,
    normalise_subjects,
)
from ..preprocessing import FilterDesign, design_filter
from .analysis import collect_pvalues, plot_fpr_curves, print_fpr_summary, save_figure, save_results
from .parameters import HCPConfig
from .workflow import HCPTrial, run_trials


def hcp_filter(config: HCPConfig) -> Optional[FilterDesign]:
    """
    Band-pass filter of the case study.

    The pass band is normalised by half of ``sample_time``, as in the
    published pipeline.
    """
    if config.to_filter == 0:
        if config.verbose:
            print("Warning: No filtering selected")
        return None
    return design_filter(config.to_filter, config.filter_order,
                         cutoff=config.passband, sample_rate=config.sample_time)


def run_hcp_case_study(config: Optional[HCPConfig] = None,
                       datafile: Union[str, Path] = DEFAULT_HCP_PATH,
                       dat: Optional[np.ndarray] = None,
                       prompt: bool = True,
                       input_fn: Callable[[str], str] = input,
                       output_file: Optional[Union[str, Path]] = None,
                       plot_results: bool = True,
                       figure_file: Optional[Union[str, Path]] = None,
                       n_jobs: int = 1) -> Optional[Tuple[pd.Series, pd.DataFrame]]:
    """
    Run the HCP case study.

    Parameters
    ----------
    config : HCPConfig or None
        Experiment parameters (defaults: GC with optimal embedding)
    datafile : str or Path
        Location of hcp_rsfMRI.mat (downloaded if missing)
    dat : np.ndarray or None
        Pre-loaded (regions, time, subjects) array; skips the data file
    prompt, input_fn
        Download confirmation (see ``ensure_hcp_data``)
    output_file : str, Path or None
        Where to save the p-values
    plot_results : bool, default True
        Plot the FPR curves
    figure_file : str, Path or None
        Save the plot here
    n_jobs : int, default 1
        Worker processes for the trials

    Returns
    -------
    (measure, pvals) or None
        Per-trial measures and p-values; None if the download was declined
    """
    config = config or HCPConfig()
    verbose = config.verbose

    if dat is None:
        path = ensure_hcp_data(datafile, prompt=prompt, input_fn=input_fn)
        if path is None:
            return None
        if verbose:
            print("Loading data...")
        dat = load_hcp_data(path)
        if verbose:
            print("Done.")

    if verbose:
        print("Normalising and detrending...")
    dat = normalise_subjects(dat)

    start, stop = config.seq
    if stop > dat.shape[1]:
        raise ValueError(f"seq stop ({stop}) exceeds the {dat.shape[1]} available samples")

    regions = None
    if config.only_high_ac_regions:
        regions = high_autocorrelation_regions(dat, config.high_ac_quantile)

    design = hcp_filter(config)

    if verbose:
        print("Running experiments...")
    trial = HCPTrial(dat, config, design, regions=regions)
    results = run_trials(trial, config.R, seed=config.seed, n_jobs=n_jobs,
                         verbose=verbose, desc="HCP trials")
    pvals = collect_pvalues(results)
    measure = pvals['measure']

    if output_file is not None:
        save_results(output_file, config.to_dict(), pvals)

    labels = {'lr': config.comparison_label}
    if verbose:
        print_fpr_summary(pvals, config.alpha, labels=labels)

    if plot_results or figure_file is not None:
        styles = {'lr': dict(color=(1.0, 0.0, 0.0), linestyle='-')}
        ax = plot_fpr_curves(pvals, labels=labels, styles=styles,
                             title=f"HCP test {config.which_test}")
        if figure_file is not None:
            save_figure(ax.figure, figure_file)
        if plot_results and figure_file is None:
            plt.show()

    return measure, pvals
