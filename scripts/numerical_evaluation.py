"""
Run a numerical evaluation from the paper (or a custom configuration).

Examples
--------
    python scripts/numerical_evaluation.py 5b
    python scripts/numerical_evaluation.py 3a --which-exp 2 --trials 200 --jobs 4
    python scripts/numerical_evaluation.py custom --granger --dim-x 2 --dim-y 2 -o out/gc.mat
"""

import argparse

from exactinference.experiments import ExperimentConfig, run_numerical_evaluation
from exactinference.experiments.parameters import FIGURE_OPTIONS


def parse_args(argv=None):
    figures = [o for row in FIGURE_OPTIONS for o in row]
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument('figure', help=f"Figure panel ({', '.join(figures)}) or 'custom'")
    parser.add_argument('--which-exp', type=int, default=None,
                        help="Filter-order variant of the panel")
    parser.add_argument('-o', '--output', default=None, help="Save p-values (.mat or .csv)")
    parser.add_argument('--figure-file', default=None, help="Save the FPR plot")
    parser.add_argument('--no-plot', action='store_true', help="Do not plot results")
    parser.add_argument('--jobs', type=int, default=1, help="Worker processes (-1 for all cores)")
    parser.add_argument('--quiet', action='store_true', help="Suppress progress output")

    custom = parser.add_argument_group('custom configuration / overrides')
    custom.add_argument('--trials', type=int, default=None, help="Number of trials R")
    custom.add_argument('--length', type=int, default=None, help="Series length T")
    custom.add_argument('--seed', type=int, default=None)
    custom.add_argument('--alpha', type=float, default=None)
    custom.add_argument('--granger', action='store_true')
    custom.add_argument('--pcorr', action='store_true')
    custom.add_argument('--dim-x', type=int, default=1)
    custom.add_argument('--dim-y', type=int, default=1)
    custom.add_argument('--dim-w', type=int, default=0)
    custom.add_argument('--white', action='store_true', help="Spectrally white process")
    custom.add_argument('--causal', action='store_true')
    custom.add_argument('--filter', type=int, choices=(0, 1, 2), default=2,
                        help="0 none, 1 FIR, 2 IIR")
    custom.add_argument('--filter-order', type=int, default=8)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    if args.figure == 'custom':
        config = ExperimentConfig(is_pc=args.pcorr, is_granger=args.granger,
                                  dim_x=args.dim_x, dim_y=args.dim_y, dim_w=args.dim_w,
                                  ar=not args.white, causal=args.causal,
                                  to_filter=args.filter, filter_order=args.filter_order)
        figure_or_config = config
    else:
        figure_or_config = args.figure

    overrides = {k: v for k, v in (('R', args.trials), ('T', args.length),
                                   ('seed', args.seed), ('alpha', args.alpha)) if v is not None}

    run_numerical_evaluation(figure_or_config,
                             which_exp=args.which_exp,
                             overrides=overrides,
                             output_file=args.output,
                             plot_results=not args.no_plot,
                             figure_file=args.figure_file,
                             n_jobs=args.jobs,
                             verbose=not args.quiet)


if __name__ == '__main__':
    main()
