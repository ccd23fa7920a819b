"""
Monte-Carlo trial workflow.

Implements embarrassingly parallel trials with:
- One independent random stream per trial (spawned from a single seed),
  so results do not depend on the number of worker processes
- Parallel processing across trials (multiprocessing)
- Simulated trials (VAR process -> filter -> detrend -> tests)
- HCP trials (random subjects/regions -> filter -> trim -> tests)
"""

import numpy as np
import multiprocessing
from tqdm import tqdm
from typing import Callable, Dict, List, Optional

from ..measures import mvgc, mvmi, pcorr
from ..preprocessing import FilterDesign, apply_filter, detrend_array, trim_boundary
from ..significance import prewhiten, significance
from ..simulation import VARSimulator

# Trial function installed in every worker process by the pool initializer
_WORKER_TRIAL = None


def _init_worker(trial_fn):
    global _WORKER_TRIAL
    _WORKER_TRIAL = trial_fn


def _run_trial_wrapper(args):
    """
    Run one trial inside a worker process.

    This function must be at module level (not nested) to be picklable
    for multiprocessing.

    Parameters
    ----------
    args : tuple
        (seed_sequence, r)

    Returns
    -------
    tuple
        (r, result dict)
    """
    seed_seq, r = args
    rng = np.random.default_rng(seed_seq)
    return r, _WORKER_TRIAL(rng, r)


def run_trials(trial_fn: Callable[[np.random.Generator, int], Dict],
               R: int,
               seed: Optional[int] = None,
               n_jobs: int = 1,
               verbose: bool = True,
               progress_every: int = 10,
               desc: str = "Trials") -> List[Dict]:
    """
    Run R independent trials, optionally in parallel.

    Parameters
    ----------
    trial_fn : callable
        ``trial_fn(rng, r)`` returning a dict for trial r. Must be
        picklable when ``n_jobs > 1``
    R : int
        Number of trials
    seed : int or None
        Root seed; trial r uses the r-th child of SeedSequence(seed)
    n_jobs : int, default 1
        Number of worker processes (-1 for all cores)
    verbose : bool, default True
        Show a progress bar and a line every ``progress_every`` runs
    progress_every : int, default 10
        Reporting interval
    desc : str
        Progress bar label

    Returns
    -------
    list of dict
        Trial results in trial order
    """
    if R < 1:
        raise ValueError("R must be positive")

    children = np.random.SeedSequence(seed).spawn(R)
    args_list = [(child, r) for r, child in enumerate(children)]
    results: List[Optional[Dict]] = [None] * R

    if n_jobs == -1:
        n_jobs = multiprocessing.cpu_count()

    with tqdm(total=R, desc=desc, disable=not verbose) as pbar:
        if n_jobs is None or n_jobs <= 1:
            completed = ((r, trial_fn(np.random.default_rng(child), r)) for child, r in args_list)
            for count, (r, result) in enumerate(completed, start=1):
                results[r] = result
                _report(pbar, count, R, verbose, progress_every)
        else:
            with multiprocessing.Pool(processes=n_jobs,
                                      initializer=_init_worker,
                                      initargs=(trial_fn,)) as pool:
                for count, (r, result) in enumerate(
                        pool.imap_unordered(_run_trial_wrapper, args_list), start=1):
                    results[r] = result
                    _report(pbar, count, R, verbose, progress_every)

    return results


def _report(pbar, count: int, R: int, verbose: bool, progress_every: int):
    pbar.update(1)
    if verbose and progress_every and count % progress_every == 0:
        tqdm.write(f"Completed run {count}/{R}.")


def _compute_measure(X, Y, W, is_pc, is_granger, p, q, **kwargs):
    if is_pc:
        return pcorr(X, Y, W, **kwargs)
    if is_granger:
        return mvgc(X, Y, W, p=p, q=q, **kwargs)
    return mvmi(X, Y, W, **kwargs)


class NumericalTrial:
    """
    One simulated trial of a numerical evaluation.

    Simulates (X, Y, W), filters every block to induce autocorrelation
    (if a filter is given), detrends, and tests with the exact test and
    the asymptotic LR test. Univariate experiments additionally run the
    F-test and the prewhitened F- and LR tests.
    """

    def __init__(self, config, design: Optional[FilterDesign] = None):
        self.config = config
        self.design = design
        self.simulator = VARSimulator(dim_x=config.dim_x, dim_y=config.dim_y,
                                      dim_w=config.dim_w, ar=config.ar,
                                      causal=config.causal)

    def measure(self, X, Y, W, **kwargs):
        c = self.config
        return _compute_measure(X, Y, W, c.is_pc, c.is_granger, c.p, c.q, **kwargs)

    def __call__(self, rng: np.random.Generator, r: int) -> Dict:
        c = self.config
        X, Y, W = self.simulator.sample(rng, c.T)

        X = detrend_array(apply_filter(self.design, X))
        Y = detrend_array(apply_filter(self.design, Y))
        W = detrend_array(apply_filter(self.design, W))

        measure, p_exact, stats = self.measure(X, Y, W, test='exact',
                                               surrogates=c.surrogates, seed=rng)
        result = {
            'measure': measure,
            'exact': p_exact,
            'lr': significance(measure, stats, test='asymptotic'),
        }

        if c.univariate:
            result['f'] = significance(measure, stats, test='exact', variance_estimator='none')

            X_pw, Y_pw, W_pw = prewhiten(X, Y, W)
            measure_pw, p_f_pw, stats_pw = self.measure(X_pw, Y_pw, W_pw, test='exact',
                                                        variance_estimator='none')
            result['measure_pw'] = measure_pw
            result['f_pw'] = p_f_pw
            result['lr_pw'] = significance(measure_pw, stats_pw, test='asymptotic')

        return result


class HCPTrial:
    """
    One trial of the HCP case study.

    Draws subjects and regions without replacement, pairs them into the
    series X and Y (column k of X is region ds[k, 0] of subject ss[k, 0]),
    filters, trims the boundary samples and tests with the exact test and
    the comparison test (F-test or LR test).
    """

    def __init__(self, dat: np.ndarray, config, design: Optional[FilterDesign] = None,
                 regions: Optional[np.ndarray] = None):
        self.dat = dat
        self.config = config
        self.design = design
        self.regions = np.arange(dat.shape[0]) if regions is None else np.asarray(regions)

    def sample(self, rng: np.random.Generator):
        dims = self.config.dims
        n_subjects = self.dat.shape[2]
        if len(self.regions) < 2 * dims or n_subjects < 2 * dims:
            raise ValueError(f"Need at least {2 * dims} regions and subjects to sample from")

        ss = rng.choice(n_subjects, size=2 * dims, replace=False).reshape((dims, 2), order='F')
        ds = rng.choice(self.regions, size=2 * dims, replace=False).reshape((dims, 2), order='F')

        X = np.column_stack([self.dat[ds[k, 0], :, ss[k, 0]] for k in range(dims)])
        Y = np.column_stack([self.dat[ds[k, 1], :, ss[k, 1]] for k in range(dims)])
        return X, Y

    def __call__(self, rng: np.random.Generator, r: int) -> Dict:
        c = self.config
        X, Y = self.sample(rng)

        start, stop = c.seq
        X = trim_boundary(apply_filter(self.design, X), start, stop)
        Y = trim_boundary(apply_filter(self.design, Y), start, stop)

        measure, p_exact, stats = _compute_measure(X, Y, None, False, c.is_granger, c.p, c.q,
                                                   test='exact', surrogates=c.surrogates,
                                                   seed=rng)
        if c.f_test:
            p_compare = significance(measure, stats, test='exact', variance_estimator='none')
        else:
            p_compare = significance(measure, stats, test='asymptotic')

        return {'measure': measure, 'exact': p_exact, 'lr': p_compare}
