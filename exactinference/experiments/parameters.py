"""
Experiment configurations for the numerical evaluations and the HCP case study.

Figure presets follow the layout of the paper: figures 1-7, each with
panels (a) and (b). A preset fixes the measure (MI, GC or partial
correlation), the dimensions of X, Y and W, whether the generating process
is autoregressive, and the filter used to raise the autocorrelation.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

FIGURE_OPTIONS = [
    ['1a', '1b'],
    ['2a', '2b'],
    ['3a', '3b'],
    ['4a', '4b'],
    ['5a', '5b'],
    ['6a', '6b'],
    ['7a', '7b'],
]

# Filter orders swept by ``which_exp``
FILTER_ORDERS = (0, 2, 4, 8, 16)

FILTER_NAMES = {0: 'none', 1: 'FIR', 2: 'IIR (Butterworth)'}


@dataclass
class ExperimentConfig:
    """
    Parameters of one numerical evaluation.

    Attributes
    ----------
    is_pc : bool
        Test partial correlation (univariate X and Y only)
    is_granger : bool
        Test Granger causality from Y to X; otherwise mutual information
    p, q : int or str
        Granger causality embedding orders ('auto' for BIC selection)
    dim_x, dim_y, dim_w : int
        Dimensions of X, Y and the conditional W
    ar : bool
        Autoregressive (True) or spectrally white (False) generating process
    causal : bool
        Include a causal influence from Y to X
    to_filter : int
        0 none, 1 FIR, 2 IIR (Butterworth)
    filter_order : int
        Order of the low-pass filter (cutoff at half Nyquist)
    T : int
        Length of every simulated series
    R : int
        Number of Monte-Carlo trials
    alpha : float
        Nominal significance level
    seed : int
        Seed of the trial random streams
    surrogates : int
        Monte-Carlo sample size of multivariate exact null distributions
    """
    is_pc: bool = False
    is_granger: bool = False
    p: Union[int, str] = 'auto'
    q: Union[int, str] = 'auto'
    dim_x: int = 1
    dim_y: int = 1
    dim_w: int = 0
    ar: bool = True
    causal: bool = False
    to_filter: int = 2
    filter_order: int = 8
    T: int = 512
    R: int = 1000
    alpha: float = 0.05
    seed: int = 1
    surrogates: int = 5000

    def __post_init__(self):
        if self.T < 1 or self.R < 1:
            raise ValueError(f"T and R must be positive (got T={self.T}, R={self.R})")
        if not 0 < self.alpha < 1:
            raise ValueError(f"alpha must lie in (0, 1), got {self.alpha}")
        if self.to_filter not in FILTER_NAMES:
            raise ValueError(f"to_filter must be one of {list(FILTER_NAMES)}, got {self.to_filter}")
        if self.dim_x < 1 or self.dim_y < 1 or self.dim_w < 0:
            raise ValueError("dim_x and dim_y must be positive and dim_w non-negative")
        if self.is_pc and not self.univariate:
            raise ValueError("Partial correlation needs univariate X and Y")
        if self.is_pc and self.is_granger:
            raise ValueError("Choose either partial correlation or Granger causality")

    @property
    def univariate(self) -> bool:
        return self.dim_x == 1 and self.dim_y == 1

    @property
    def measure_name(self) -> str:
        if self.is_pc:
            return 'partial correlation'
        return 'Granger causality' if self.is_granger else 'mutual information'

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    def replace(self, **changes) -> 'ExperimentConfig':
        return dataclasses.replace(self, **changes)

    def describe(self) -> str:
        """Multi-line, human readable listing of the parameters."""
        width = max(len(name) for name in self.to_dict())
        return "\n".join(f"  {name:>{width}}: {value}" for name, value in self.to_dict().items())


# Panel presets (only the fields that differ from ExperimentConfig defaults)
_FIGURE_PRESETS: Dict[str, Dict[str, Any]] = {
    # Mutual information between univariate series
    '1a': dict(ar=False),
    '1b': dict(ar=True),
    # Mutual information between bivariate series
    '2a': dict(ar=False, dim_x=2, dim_y=2),
    '2b': dict(ar=True, dim_x=2, dim_y=2),
    # Granger causality between univariate series
    '3a': dict(is_granger=True, ar=False),
    '3b': dict(is_granger=True, ar=True),
    # Granger causality between bivariate series
    '4a': dict(is_granger=True, ar=False, dim_x=2, dim_y=2),
    '4b': dict(is_granger=True, ar=True, dim_x=2, dim_y=2),
    # Conditional measures, FIR filtered
    '5a': dict(dim_w=1, to_filter=1),
    '5b': dict(is_granger=True, dim_w=1, to_filter=1),
    # Partial correlation
    '6a': dict(is_pc=True),
    '6b': dict(is_pc=True, dim_w=1, to_filter=1),
    # Causal coupling (statistical power rather than FPR)
    '7a': dict(is_granger=True, causal=True, to_filter=0, filter_order=0),
    '7b': dict(causal=True, to_filter=0, filter_order=0),
}


def get_configuration(fig: int,
                      subfig: int,
                      which_exp: Optional[int] = None) -> ExperimentConfig:
    """
    Configuration reproducing one panel of the paper.

    Parameters
    ----------
    fig : int
        Figure number, 1-7
    subfig : int
        Panel, 1 for (a) and 2 for (b)
    which_exp : int or None
        Index into FILTER_ORDERS overriding the panel's filter order

    Returns
    -------
    ExperimentConfig
    """
    if not 1 <= fig <= len(FIGURE_OPTIONS):
        raise ValueError(f"fig must be in 1..{len(FIGURE_OPTIONS)}, got {fig}")
    if subfig not in (1, 2):
        raise ValueError(f"subfig must be 1 or 2, got {subfig}")

    label = FIGURE_OPTIONS[fig - 1][subfig - 1]
    config = ExperimentConfig(**_FIGURE_PRESETS[label])

    if which_exp is not None:
        if not 0 <= which_exp < len(FILTER_ORDERS):
            raise ValueError(f"which_exp must be in 0..{len(FILTER_ORDERS) - 1}, got {which_exp}")
        order = FILTER_ORDERS[which_exp]
        config = config.replace(filter_order=order,
                                to_filter=config.to_filter if order > 0 else 0)

    return config


def find_figure(label: str) -> Optional[Tuple[int, int]]:
    """(fig, subfig) of a panel label like '5b', or None if unknown."""
    for i, row in enumerate(FIGURE_OPTIONS):
        for j, option in enumerate(row):
            if option == label.strip().lower():
                return i + 1, j + 1
    return None


def resolve_configuration(figure_or_config: Union[str, ExperimentConfig, Mapping],
                          which_exp: Optional[int] = None) -> ExperimentConfig:
    """
    Build a configuration from a figure label, a config or a mapping.
    """
    if isinstance(figure_or_config, ExperimentConfig):
        return figure_or_config
    if isinstance(figure_or_config, Mapping):
        return ExperimentConfig(**dict(figure_or_config))
    if isinstance(figure_or_config, str):
        found = find_figure(figure_or_config)
        if found is None:
            options = [o for row in FIGURE_OPTIONS for o in row]
            raise ValueError(f"Unknown figure: {figure_or_config}. Available: {options}")
        return get_configuration(*found, which_exp=which_exp)
    raise ValueError(f"Unknown input: expected a figure label, ExperimentConfig or mapping, "
                     f"got {type(figure_or_config).__name__}")


# HCP experiments: which_test -> (is_granger, dims, p, q)
HCP_TESTS = {
    1: dict(is_granger=False, dims=1),
    2: dict(is_granger=False, dims=2),
    3: dict(is_granger=True, dims=1, p='auto', q='auto'),
    4: dict(is_granger=True, dims=1, p=100, q=100),
    5: dict(is_granger=True, dims=2, p='auto', q='auto'),
    6: dict(is_granger=True, dims=1, p='auto', q=1),
}


@dataclass
class HCPConfig:
    """
    Parameters of the Human Connectome Project case study.

    Attributes
    ----------
    which_test : int
        1 MI, 2 MI with 2-D series, 3 GC with optimal embedding,
        4 GC with high embedding (p = q = 100), 5 GC with 2-D series,
        6 GC with optimal target embedding and one source lag
    f_test : bool
        Compare against the F-test (univariate only) instead of the LR test
    R : int
        Number of trials
    surrogates : int
        Monte-Carlo sample size of the exact test
    alpha : float
        Significance level
    seq : tuple of int
        Samples kept after filtering (start, stop), 0-based half open
    to_filter : int
        0 none, 1 FIR, 2 IIR (Butterworth)
    passband : tuple of float
        Pass band in Hz
    sample_time : float
        Repetition time of the BOLD acquisition (s)
    filter_order : int or None
        Filter order (8 for FIR, 4 for IIR when None)
    seed : int
        Seed of the trial random streams
    only_high_ac_regions : bool
        Restrict sampling to the most autocorrelated regions
    high_ac_quantile : float
        Lag-1 autocorrelation quantile defining "most autocorrelated"
    """
    which_test: int = 3
    f_test: bool = True
    R: int = 1000
    surrogates: int = 5000
    alpha: float = 0.05
    seq: Tuple[int, int] = (200, 1000)
    to_filter: int = 2
    passband: Tuple[float, float] = (0.01, 0.08)
    sample_time: float = 0.72
    filter_order: Optional[int] = None
    seed: int = 1
    only_high_ac_regions: bool = False
    high_ac_quantile: float = 0.75
    verbose: bool = field(default=True, repr=False)

    def __post_init__(self):
        if self.which_test not in HCP_TESTS:
            raise ValueError(f"which_test must be one of {list(HCP_TESTS)}, got {self.which_test}")
        if self.to_filter not in FILTER_NAMES:
            raise ValueError(f"to_filter must be one of {list(FILTER_NAMES)}, got {self.to_filter}")
        if self.R < 1:
            raise ValueError("R must be positive")
        if not 0 < self.alpha < 1:
            raise ValueError(f"alpha must lie in (0, 1), got {self.alpha}")
        self.seq = tuple(self.seq)
        if self.filter_order is None:
            self.filter_order = 8 if self.to_filter == 1 else 4
        if self.f_test and self.dims > 1:
            if self.verbose:
                print("Warning: No known finite-sample distribution for F-tests "
                      "with multivariate models. Using LR test instead.")
            self.f_test = False

    @property
    def is_granger(self) -> bool:
        return HCP_TESTS[self.which_test]['is_granger']

    @property
    def dims(self) -> int:
        return HCP_TESTS[self.which_test]['dims']

    @property
    def p(self) -> Union[int, str]:
        return HCP_TESTS[self.which_test].get('p', 'auto')

    @property
    def q(self) -> Union[int, str]:
        return HCP_TESTS[self.which_test].get('q', 'auto')

    @property
    def comparison_label(self) -> str:
        return 'Standard F-test' if self.f_test else 'LR test'

    def to_dict(self) -> Dict[str, Any]:
        out = dataclasses.asdict(self)
        out.pop('verbose')
        out.update(is_granger=self.is_granger, dims=self.dims, p=self.p, q=self.q)
        return out

    @classmethod
    def from_test(cls, which_test: int, **kwargs) -> 'HCPConfig':
        return cls(which_test=which_test, **kwargs)
