"""Experiment configurations, trial workflow, analysis and drivers."""
import json
import runpy
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from scipy import io as sio

from exactinference.experiments import (
    FIGURE_OPTIONS,
    ExperimentConfig,
    HCPConfig,
    HCPTrial,
    NumericalTrial,
    collect_pvalues,
    false_positive_rate,
    find_figure,
    fpr_curve,
    fpr_table,
    get_configuration,
    hcp_filter,
    plot_fpr_curves,
    resolve_configuration,
    run_hcp_case_study,
    run_numerical_evaluation,
    run_trials,
    save_results,
)
from exactinference.preprocessing import design_filter

SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "scripts"


class TestExperimentConfig:

    def test_every_panel_builds(self):
        for fig, row in enumerate(FIGURE_OPTIONS, start=1):
            for subfig, label in enumerate(row, start=1):
                config = get_configuration(fig, subfig)
                assert isinstance(config, ExperimentConfig)
                assert find_figure(label) == (fig, subfig)

    def test_panel_contents(self):
        assert get_configuration(1, 1).ar is False
        assert get_configuration(2, 2).dim_x == 2
        assert get_configuration(3, 2).is_granger
        assert get_configuration(6, 1).is_pc
        assert get_configuration(7, 1).causal

    def test_which_exp_sets_filter_order(self):
        assert get_configuration(1, 2, which_exp=3).filter_order == 8
        unfiltered = get_configuration(1, 2, which_exp=0)
        assert unfiltered.filter_order == 0
        assert unfiltered.to_filter == 0

    @pytest.mark.parametrize("args", [(0, 1), (8, 1), (1, 3), (1, 1, 9)])
    def test_out_of_range(self, args):
        with pytest.raises(ValueError):
            get_configuration(*args)

    def test_resolve(self):
        assert resolve_configuration('5B').dim_w == 1
        assert resolve_configuration({'T': 100, 'R': 3}).T == 100
        config = ExperimentConfig(R=2)
        assert resolve_configuration(config) is config
        with pytest.raises(ValueError, match="Unknown figure"):
            resolve_configuration('9z')
        with pytest.raises(ValueError):
            resolve_configuration(42)

    def test_validation(self):
        with pytest.raises(ValueError):
            ExperimentConfig(is_pc=True, dim_x=2)
        with pytest.raises(ValueError):
            ExperimentConfig(is_pc=True, is_granger=True)
        with pytest.raises(ValueError):
            ExperimentConfig(alpha=1.5)
        with pytest.raises(ValueError):
            ExperimentConfig(to_filter=3)

    def test_replace_and_describe(self):
        config = ExperimentConfig().replace(T=64)
        assert config.T == 64
        assert 'filter_order' in config.describe()
        assert config.to_dict()['T'] == 64


class TestHCPConfig:

    def test_defaults(self):
        config = HCPConfig(verbose=False)
        assert config.is_granger
        assert config.filter_order == 4
        assert HCPConfig(to_filter=1, verbose=False).filter_order == 8

    def test_high_embedding(self):
        config = HCPConfig(which_test=4, verbose=False)
        assert (config.p, config.q) == (100, 100)

    def test_multivariate_f_test_falls_back(self, capsys):
        config = HCPConfig(which_test=2)
        assert config.f_test is False
        assert config.comparison_label == 'LR test'
        assert "Using LR test instead" in capsys.readouterr().out

    def test_invalid_test(self):
        with pytest.raises(ValueError):
            HCPConfig(which_test=7)

    def test_to_dict(self):
        out = HCPConfig.from_test(6, verbose=False).to_dict()
        assert out['q'] == 1
        assert out['dims'] == 1
        assert 'verbose' not in out

    def test_filter(self):
        config = HCPConfig(verbose=False)
        design = hcp_filter(config)
        assert design.btype == 'bandpass'
        assert np.allclose(design.cutoff, np.array(config.passband) / (config.sample_time / 2))
        assert hcp_filter(HCPConfig(to_filter=0, verbose=False)) is None


def small_trial(**kwargs):
    config = ExperimentConfig(T=200, R=4, surrogates=200, **kwargs)
    design = design_filter(config.to_filter, config.filter_order, cutoff=0.5)
    return NumericalTrial(config, design)


class TestRunTrials:

    def test_reproducible(self):
        trial = small_trial()
        a = run_trials(trial, 4, seed=5, verbose=False)
        b = run_trials(trial, 4, seed=5, verbose=False)
        assert [r['exact'] for r in a] == [r['exact'] for r in b]

    def test_parallel_matches_serial(self):
        trial = small_trial(dim_x=2, dim_y=2)
        serial = run_trials(trial, 4, seed=11, n_jobs=1, verbose=False)
        parallel = run_trials(trial, 4, seed=11, n_jobs=2, verbose=False)
        assert pd.DataFrame(serial).equals(pd.DataFrame(parallel))

    def test_progress_lines(self, capsys):
        run_trials(small_trial(), 4, seed=0, verbose=True, progress_every=2)
        out = capsys.readouterr()
        assert "Completed run 2/4." in out.out + out.err
        assert "Completed run 4/4." in out.out + out.err

    def test_invalid_R(self):
        with pytest.raises(ValueError):
            run_trials(small_trial(), 0)


class TestNumericalTrial:

    def test_univariate_tests(self, rng):
        result = small_trial()(rng, 0)
        assert set(result) == {'measure', 'exact', 'lr', 'f', 'measure_pw', 'f_pw', 'lr_pw'}
        assert all(0 <= result[k] <= 1 for k in ('exact', 'lr', 'f', 'f_pw', 'lr_pw'))

    def test_multivariate_tests(self, rng):
        result = small_trial(dim_x=2, dim_y=2)(rng, 0)
        assert set(result) == {'measure', 'exact', 'lr'}

    def test_partial_correlation_with_conditioning(self, rng):
        trial = small_trial(is_pc=True, dim_w=1)
        result = trial(rng, 0)
        assert -1 <= result['measure'] <= 1

    @pytest.mark.parametrize("label", ['1b', '2b', '3b'])
    def test_exact_test_holds_nominal_fpr(self, label):
        # 300 trials: binomial sd around 0.05 is about 0.013
        config = resolve_configuration(label).replace(R=300, surrogates=500, seed=7)
        trial = NumericalTrial(config, design_filter(config.to_filter, config.filter_order,
                                                     cutoff=0.5))
        pvals = collect_pvalues(run_trials(trial, config.R, seed=config.seed,
                                           n_jobs=2, verbose=False))
        table = fpr_table(pvals, alpha=config.alpha).set_index('test')['fpr']
        assert table['exact'] <= 0.085
        if config.univariate:
            assert table['exact'] < table['f']

    def test_short_series_with_selected_orders(self):
        config = get_configuration(3, 2).replace(T=100, R=2, surrogates=100)
        _, pvals = run_numerical_evaluation(config, plot_results=False, verbose=False)
        assert len(pvals) == 2
        assert pvals[['exact', 'f_pw', 'lr_pw']].notna().all().all()


class TestAnalysis:

    def test_collect_orders_columns(self):
        pvals = collect_pvalues([{'lr': 0.1, 'exact': 0.2, 'measure': 0.01}] * 3)
        assert list(pvals.columns) == ['measure', 'exact', 'lr']
        assert pvals.index.name == 'trial'

    def test_fpr(self):
        assert false_positive_rate([0.01, 0.04, 0.5, 0.9]) == 0.5
        assert np.isnan(false_positive_rate([]))
        table = fpr_table(pd.DataFrame({'exact': [0.01, 0.5], 'f': [0.01, 0.02]}))
        assert table.set_index('test')['fpr'].to_dict() == {'exact': 0.5, 'f': 1.0}

    def test_fpr_curve(self):
        x, y = fpr_curve(np.array([0.9, 0.1, 0.5]))
        assert np.array_equal(x, [0.1, 0.5, 0.9])
        assert np.array_equal(y, [0.0, 0.5, 1.0])

    def test_plot(self, rng):
        pvals = pd.DataFrame({'exact': rng.uniform(size=30), 'lr': rng.uniform(size=30)})
        ax = plot_fpr_curves(pvals, title='test')
        # Diagonal plus one curve per test
        assert len(ax.lines) == 3
        assert ax.get_title() == 'test'
        plt.close(ax.figure)

    def test_save_csv(self, tmp_path):
        pvals = pd.DataFrame({'measure': [0.1, 0.2], 'exact': [0.3, 0.4]})
        path = save_results(tmp_path / 'out' / 'res.csv', {'T': 10, 'p': 'auto'}, pvals)
        loaded = pd.read_csv(path, index_col=0)
        assert np.allclose(loaded['exact'], [0.3, 0.4])
        with open(tmp_path / 'out' / 'res.json') as f:
            assert json.load(f) == {'T': 10, 'p': 'auto'}


class TestNumericalEvaluation:

    def test_run_and_save_mat(self, tmp_path):
        config = dict(T=200, R=3, surrogates=100, to_filter=1, filter_order=4)
        out = tmp_path / 'sim.mat'
        config, pvals = run_numerical_evaluation(config, output_file=out,
                                                 plot_results=False, verbose=False)
        assert len(pvals) == 3
        contents = sio.loadmat(out)
        assert contents['pvals_exact'].size == 3
        assert 'pvals_f_pw' in contents
        assert 'config' in contents

    def test_granger_panel_with_figure(self, tmp_path):
        config = get_configuration(3, 2).replace(T=200, R=2, surrogates=100)
        figure = tmp_path / 'fpr.png'
        _, pvals = run_numerical_evaluation(config, figure_file=figure,
                                            plot_results=False, verbose=False)
        assert figure.exists()
        assert {'exact', 'lr', 'f', 'f_pw', 'lr_pw'} <= set(pvals.columns)
        plt.close('all')

    def test_verbose_summary(self, capsys):
        run_numerical_evaluation(dict(T=100, R=2, surrogates=50, dim_x=2, dim_y=2),
                                 plot_results=False, verbose=True)
        out = capsys.readouterr().out
        assert "User-supplied configuration." in out
        assert "multivariate" in out
        assert "Exact test FPR at 5% significance" in out

    def test_overrides_keep_figure_banner(self, capsys):
        config, pvals = run_numerical_evaluation('1a', overrides=dict(R=2, T=100),
                                                 plot_results=False, verbose=True)
        assert (config.R, config.T) == (2, 100)
        assert len(pvals) == 2
        out = capsys.readouterr().out
        assert "Performing numerical simulations from Fig. 1a." in out
        assert "User-supplied configuration." not in out

    def test_script_overrides(self, capsys):
        script = runpy.run_path(str(SCRIPTS_DIR / 'numerical_evaluation.py'))
        script['main'](['1a', '--trials', '2', '--length', '100', '--no-plot'])
        out = capsys.readouterr().out
        assert "Performing numerical simulations from Fig. 1a." in out
        assert "T: 100\n" in out


class TestHCP:

    def test_sampling_pairs_distinct_regions_and_subjects(self, rng):
        D, T, M = 8, 20, 5
        dat = (100 * np.arange(D)[:, None, None] + np.arange(M)[None, None, :]) * np.ones((D, T, M))
        trial = HCPTrial(dat, HCPConfig(which_test=2, verbose=False))
        X, Y = trial.sample(rng)
        codes = np.r_[X[0], Y[0]].astype(int)
        assert X.shape == (T, 2) and Y.shape == (T, 2)
        assert len(set(codes // 100)) == 4
        assert len(set(codes % 100)) == 4

    def test_sampling_needs_enough_regions(self, rng):
        trial = HCPTrial(np.zeros((3, 10, 10)), HCPConfig(which_test=2, verbose=False))
        with pytest.raises(ValueError, match="at least 4"):
            trial.sample(rng)

    @pytest.mark.parametrize("which_test", [1, 2, 3, 6])
    def test_case_study(self, hcp_like_data, which_test):
        config = HCPConfig(which_test=which_test, R=3, surrogates=100, seq=(50, 300),
                           verbose=False)
        measure, pvals = run_hcp_case_study(config, dat=hcp_like_data, plot_results=False)
        assert len(measure) == 3
        assert list(pvals.columns) == ['measure', 'exact', 'lr']
        assert pvals[['exact', 'lr']].apply(lambda s: s.between(0, 1).all()).all()

    def test_high_ac_regions_and_output(self, hcp_like_data, tmp_path):
        config = HCPConfig(which_test=1, R=2, surrogates=50, seq=(50, 300),
                           only_high_ac_regions=True, verbose=False)
        out = tmp_path / 'hcp.mat'
        run_hcp_case_study(config, dat=hcp_like_data, output_file=out, plot_results=False)
        assert 'pvals_lr' in sio.loadmat(out)

    def test_seq_too_long(self, hcp_like_data):
        config = HCPConfig(which_test=1, R=2, verbose=False)
        with pytest.raises(ValueError, match="seq stop"):
            run_hcp_case_study(config, dat=hcp_like_data, plot_results=False)

    def test_declined_download(self, tmp_path, capsys):
        result = run_hcp_case_study(HCPConfig(R=1, verbose=False),
                                    datafile=tmp_path / 'missing.mat',
                                    input_fn=lambda _: 'n', plot_results=False)
        assert result is None
        assert "exiting" in capsys.readouterr().out
