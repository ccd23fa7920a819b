"""
Human Connectome Project (HCP) resting-state fMRI data.

The case study uses BOLD time series of cortical regions for many
subjects, stored as a single MATLAB file with the array ``dat`` of shape
(regions, time, subjects) and published on figshare.
"""

import numpy as np
import requests
from pathlib import Path
from scipy import io as sio
from statsmodels.tsa.stattools import acf
from tqdm import tqdm
from typing import Callable, Optional, Union

from .preprocessing import detrend_array, zscore_array

HCP_ARTICLE_URL = "https://figshare.com/articles/hcp_rsfMRI_mat/12084636"
HCP_DOWNLOAD_URL = "https://ndownloader.figshare.com/files/22217589"
DEFAULT_HCP_PATH = Path("data") / "hcp_rsfMRI.mat"
HCP_VARIABLE = "dat"


def download_file(url: str,
                  path: Union[str, Path],
                  chunk_size: int = 1 << 20,
                  timeout: float = 60.0,
                  verbose: bool = True) -> Path:
    """
    Stream a file from ``url`` to ``path``.

    HTTP errors propagate; a partially written file is removed.

    Returns
    -------
    Path
        The written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            total = int(response.headers.get('content-length', 0)) or None
            with open(path, 'wb') as f, tqdm(total=total, unit='B', unit_scale=True,
                                              desc=path.name, disable=not verbose) as pbar:
                for chunk in response.iter_content(chunk_size=chunk_size):
                    f.write(chunk)
                    pbar.update(len(chunk))
    except BaseException:
        path.unlink(missing_ok=True)
        raise

    return path


def ensure_hcp_data(path: Union[str, Path] = DEFAULT_HCP_PATH,
                    prompt: bool = True,
                    input_fn: Callable[[str], str] = input,
                    url: str = HCP_DOWNLOAD_URL) -> Optional[Path]:
    """
    Make sure the HCP data file exists, offering to download it.

    Parameters
    ----------
    path : str or Path
        Expected location of hcp_rsfMRI.mat
    prompt : bool, default True
        Ask before downloading; False downloads straight away
    input_fn : callable, default input
        Function used to read the reply (replaceable for testing)
    url : str
        Download location

    Returns
    -------
    Path or None
        Path of the data file, or None if the user declined the download
    """
    path = Path(path)
    if path.exists():
        return path

    print(f"HCP data not found in the expected location: {path}.")
    print(f"You can download it here: {HCP_ARTICLE_URL}")

    if prompt:
        reply = input_fn("Do you want me to download it now? Y/N [Y]: ").strip()
        if not reply:
            reply = 'Y'
        if reply.upper() != 'Y':
            print("OK, exiting program now.")
            return None

    print("OK, getting it now. This may take a while...")
    out = download_file(url, path)
    print(f"Done. Human Connectome Project rsfMRI data downloaded from figshare to:\n{out.resolve()}")
    return out


def load_hcp_data(path: Union[str, Path] = DEFAULT_HCP_PATH,
                  variable: str = HCP_VARIABLE) -> np.ndarray:
    """
    Load the (regions, time, subjects) BOLD array from a .mat file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"HCP data file not found: {path}")

    contents = sio.loadmat(path, variable_names=[variable])
    if variable not in contents:
        raise KeyError(f"Variable '{variable}' not found in {path}")

    dat = np.asarray(contents[variable], dtype=float)
    if dat.ndim == 2:
        dat = dat[:, :, None]
    if dat.ndim != 3:
        raise ValueError(f"Expected a (regions, time, subjects) array, got shape {dat.shape}")
    return dat


def normalise_subjects(dat: np.ndarray) -> np.ndarray:
    """
    Linearly detrend and z-score every region of every subject over time.

    Without this, global effects (trends, scanner drift) dominate the
    dependence between regions.
    """
    dat = np.asarray(dat, dtype=float)
    return zscore_array(detrend_array(dat, axis=1), axis=1)


def lag1_autocorrelation(dat: np.ndarray) -> np.ndarray:
    """Lag-1 autocorrelation of every (region, subject) series, shape (regions, subjects)."""
    dat = np.asarray(dat, dtype=float)
    ac = np.zeros((dat.shape[0], dat.shape[2]))
    for d in range(dat.shape[0]):
        for m in range(dat.shape[2]):
            series = dat[d, :, m]
            # Constant series have no defined autocorrelation
            if np.ptp(series) > 0:
                ac[d, m] = acf(series, nlags=1, fft=False)[1]
    return ac


def high_autocorrelation_regions(dat: np.ndarray, quantile: float = 0.75) -> np.ndarray:
    """
    Regions whose mean lag-1 autocorrelation (across subjects) is at or
    above the given quantile.
    """
    if not 0 <= quantile < 1:
        raise ValueError(f"quantile must lie in [0, 1), got {quantile}")
    mean_ac = lag1_autocorrelation(dat).mean(axis=1)
    return np.flatnonzero(mean_ac >= np.quantile(mean_ac, quantile))
