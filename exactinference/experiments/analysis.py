"""
Analysis and visualisation of Monte-Carlo p-values.

Under the null hypothesis a calibrated test has uniformly distributed
p-values, so the empirical CDF of the p-values (the FPR curve) should lie
on the diagonal; curves above the diagonal mean inflated false-positive
rates.
"""

import json
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path
from scipy import io as sio
from typing import Dict, List, Mapping, Optional, Tuple, Union

TEST_LABELS = {
    'exact': 'Exact test',
    'lr': 'LR test',
    'lr_pw': 'PW LR test',
    'f': 'F-test',
    'f_pw': 'PW F-test',
}

COL_LR = (1.0, 0.0, 0.0)
COL_E = (0.0, 0.0, 0.0)

TEST_STYLES = {
    'exact': dict(color=COL_E, linestyle='-'),
    'lr': dict(color=COL_LR, linestyle='--'),
    'lr_pw': dict(color=COL_LR, linestyle='-.'),
    'f': dict(color=COL_LR, linestyle='-'),
    'f_pw': dict(color=COL_LR, linestyle=':'),
}

PVALUE_COLUMNS = list(TEST_LABELS)


def collect_pvalues(results: List[Dict]) -> pd.DataFrame:
    """
    Arrange per-trial result dicts into a DataFrame (one row per trial).

    Columns are ordered measure first, then p-values in the canonical
    order exact, lr, lr_pw, f, f_pw.
    """
    df = pd.DataFrame(results)
    df.index.name = 'trial'
    ordered = [c for c in ('measure', 'measure_pw') if c in df.columns]
    ordered += [c for c in PVALUE_COLUMNS if c in df.columns]
    ordered += [c for c in df.columns if c not in ordered]
    return df[ordered]


def pvalue_columns(pvals: pd.DataFrame) -> List[str]:
    """Columns of ``pvals`` that hold p-values of a known test."""
    return [c for c in PVALUE_COLUMNS if c in pvals.columns]


def false_positive_rate(pvals: Union[np.ndarray, pd.Series], alpha: float = 0.05) -> float:
    """Fraction of p-values at or below ``alpha``."""
    pvals = np.asarray(pvals, dtype=float)
    if pvals.size == 0:
        return np.nan
    return float(np.mean(pvals <= alpha))


def fpr_table(pvals: pd.DataFrame, alpha: float = 0.05,
              labels: Optional[Mapping[str, str]] = None) -> pd.DataFrame:
    """
    False-positive rate of every test at level ``alpha``.

    Returns
    -------
    pd.DataFrame
        Columns: test, label, fpr
    """
    labels = {**TEST_LABELS, **(labels or {})}
    rows = [{'test': col, 'label': labels.get(col, col),
             'fpr': false_positive_rate(pvals[col], alpha)}
            for col in pvalue_columns(pvals)]
    return pd.DataFrame(rows, columns=['test', 'label', 'fpr'])


def fpr_curve(pvals: Union[np.ndarray, pd.Series]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Empirical FPR curve: sorted p-values against linspace(0, 1, R).
    """
    pvals = np.sort(np.asarray(pvals, dtype=float))
    return pvals, np.linspace(0, 1, len(pvals))


def print_fpr_summary(pvals: pd.DataFrame, alpha: float = 0.05,
                      labels: Optional[Mapping[str, str]] = None) -> pd.DataFrame:
    """Print the FPR of every test at ``alpha`` and return the table."""
    table = fpr_table(pvals, alpha, labels)
    print("\n" + "="*70)
    print(f"FALSE-POSITIVE RATES ({len(pvals)} trials)")
    print("="*70)
    for _, row in table.iterrows():
        print(f"{row['label']} FPR at {alpha * 100:g}% significance: {row['fpr']:.3g}")
    return table


def plot_fpr_curves(pvals: pd.DataFrame,
                    ax: Optional[plt.Axes] = None,
                    labels: Optional[Mapping[str, str]] = None,
                    styles: Optional[Mapping[str, Dict]] = None,
                    title: Optional[str] = None) -> plt.Axes:
    """
    Plot the empirical FPR curve of every test against the nominal level.

    Parameters
    ----------
    pvals : pd.DataFrame
        One column per test (see ``TEST_LABELS``)
    ax : plt.Axes or None
        Axes to draw on (a new figure if None)
    labels, styles : mapping or None
        Per-test overrides of legend labels and line styles
    title : str or None
        Axes title

    Returns
    -------
    plt.Axes
    """
    labels = {**TEST_LABELS, **(labels or {})}
    styles = {**TEST_STYLES, **(styles or {})}

    if ax is None:
        _, ax = plt.subplots(figsize=(5, 4))

    ax.plot([0, 1], [0, 1], 'k:', linewidth=0.8)
    for col in pvalue_columns(pvals):
        x, y = fpr_curve(pvals[col].dropna())
        ax.plot(x, y, linewidth=1, label=labels.get(col, col),
                **styles.get(col, {}))

    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_xlabel('Significance level')
    ax.set_ylabel('False-positive rate')
    if title:
        ax.set_title(title)
    ax.legend(loc='best')
    sns.despine(ax=ax)
    return ax


def save_figure(fig: plt.Figure, path: Union[str, Path]) -> Path:
    """Save a figure (format from the suffix, e.g. .pdf, .png, .pgf)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches='tight')
    return path


def save_results(path: Union[str, Path], config: Mapping, pvals: pd.DataFrame) -> Path:
    """
    Save a configuration and its p-values.

    A '.mat' path stores ``config`` and one ``pvals_<test>`` vector per
    test (MATLAB compatible); any other suffix writes the p-values as CSV
    and the configuration to a JSON side-car (``<name>.json``).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    config = dict(config)

    if path.suffix == '.mat':
        mdict = {'config': {k: ('' if v is None else v) for k, v in config.items()}}
        for col in pvals.columns:
            key = col if col.startswith('measure') else f'pvals_{col}'
            mdict[key] = pvals[col].to_numpy(dtype=float)
        sio.savemat(path, mdict)
    else:
        pvals.to_csv(path)
        with open(path.with_suffix('.json'), 'w') as f:
            json.dump(config, f, indent=2, default=str)

    return path
