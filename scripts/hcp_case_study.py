"""
Run the Human Connectome Project case study.

Which experiment (--test):
  1: MI
  2: MI with MV dim 2
  3: GC, optimal embedding
  4: GC, high embedding (p = q = 100)
  5: GC with MV dim 2 (not in paper)
  6: GC, optimal target embedding, one source lag

Examples
--------
    python scripts/hcp_case_study.py --test 3
    python scripts/hcp_case_study.py --test 1 --lr --trials 200 --jobs 8 -o out/hcp_mi.mat
"""

import argparse

from exactinference.datasets import DEFAULT_HCP_PATH
from exactinference.experiments import HCPConfig, run_hcp_case_study


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0],
                                     formatter_class=argparse.RawDescriptionHelpFormatter,
                                     epilog=__doc__.split("\n\n", 1)[1])
    parser.add_argument('--test', type=int, default=3, choices=range(1, 7),
                        help="Which HCP experiment to reproduce")
    parser.add_argument('--lr', action='store_true',
                        help="Compare against the asymptotic LR test instead of the F-test")
    parser.add_argument('--data', default=str(DEFAULT_HCP_PATH), help="Path of hcp_rsfMRI.mat")
    parser.add_argument('--yes', action='store_true', help="Download the data without asking")
    parser.add_argument('--trials', type=int, default=1000, help="Number of trials R")
    parser.add_argument('--surrogates', type=int, default=5000, help="Monte-Carlo sample size")
    parser.add_argument('--alpha', type=float, default=0.05)
    parser.add_argument('--filter', type=int, choices=(0, 1, 2), default=2,
                        help="0 none, 1 FIR, 2 IIR")
    parser.add_argument('--high-ac', action='store_true',
                        help="Only sample the most autocorrelated regions")
    parser.add_argument('--seed', type=int, default=1)
    parser.add_argument('--jobs', type=int, default=1, help="Worker processes (-1 for all cores)")
    parser.add_argument('-o', '--output', default=None, help="Save p-values (.mat or .csv)")
    parser.add_argument('--figure-file', default=None, help="Save the FPR plot")
    parser.add_argument('--no-plot', action='store_true')
    parser.add_argument('--quiet', action='store_true')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    config = HCPConfig(which_test=args.test,
                       f_test=not args.lr,
                       R=args.trials,
                       surrogates=args.surrogates,
                       alpha=args.alpha,
                       to_filter=args.filter,
                       only_high_ac_regions=args.high_ac,
                       seed=args.seed,
                       verbose=not args.quiet)

    run_hcp_case_study(config,
                       datafile=args.data,
                       prompt=not args.yes,
                       output_file=args.output,
                       plot_results=not args.no_plot,
                       figure_file=args.figure_file,
                       n_jobs=args.jobs)


if __name__ == '__main__':
    main()
