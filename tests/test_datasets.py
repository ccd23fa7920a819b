"""HCP data download, loading and preparation."""
import numpy as np
import pytest
import requests
from scipy import io as sio
from statsmodels.tsa.stattools import acf

from exactinference import datasets
from exactinference.datasets import (
    download_file,
    ensure_hcp_data,
    high_autocorrelation_regions,
    lag1_autocorrelation,
    load_hcp_data,
    normalise_subjects,
)


class FakeResponse:

    def __init__(self, chunks, status=200, fail_after=None):
        self.chunks = chunks
        self.status = status
        self.fail_after = fail_after
        self.headers = {'content-length': str(sum(len(c) for c in chunks))}

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Error")

    def iter_content(self, chunk_size=1):
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i >= self.fail_after:
                raise requests.ConnectionError("connection reset")
            yield chunk

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def install(response):
        def get(url, stream=False, timeout=None):
            calls.append(url)
            return response
        monkeypatch.setattr(datasets.requests, 'get', get)
        return calls

    return install


class TestDownload:

    def test_writes_chunks(self, tmp_path, fake_get):
        calls = fake_get(FakeResponse([b'abc', b'def']))
        path = download_file('http://example.org/f', tmp_path / 'sub' / 'f.bin', verbose=False)
        assert path.read_bytes() == b'abcdef'
        assert calls == ['http://example.org/f']

    def test_http_error(self, tmp_path, fake_get):
        fake_get(FakeResponse([], status=404))
        with pytest.raises(requests.HTTPError):
            download_file('http://example.org/f', tmp_path / 'f.bin', verbose=False)
        assert not (tmp_path / 'f.bin').exists()

    def test_partial_file_removed(self, tmp_path, fake_get):
        fake_get(FakeResponse([b'abc', b'def'], fail_after=1))
        with pytest.raises(requests.ConnectionError):
            download_file('http://example.org/f', tmp_path / 'f.bin', verbose=False)
        assert not (tmp_path / 'f.bin').exists()


class TestEnsureData:

    def test_existing_file(self, tmp_path):
        path = tmp_path / 'hcp.mat'
        path.write_bytes(b'')
        assert ensure_hcp_data(path, input_fn=lambda _: pytest.fail("prompted")) == path

    def test_declined(self, tmp_path, capsys):
        assert ensure_hcp_data(tmp_path / 'hcp.mat', input_fn=lambda _: 'n') is None
        out = capsys.readouterr().out
        assert "not found" in out
        assert "figshare.com" in out

    @pytest.mark.parametrize("reply", ['', 'y', 'Y'])
    def test_accepted(self, tmp_path, monkeypatch, reply):
        requested = []

        def fake_download(url, path):
            requested.append(url)
            path.write_bytes(b'data')
            return path

        monkeypatch.setattr(datasets, 'download_file', fake_download)
        out = ensure_hcp_data(tmp_path / 'hcp.mat', input_fn=lambda _: reply, url='http://x')
        assert out.read_bytes() == b'data'
        assert requested == ['http://x']

    def test_no_prompt(self, tmp_path, monkeypatch):
        def fake_download(url, path):
            path.write_bytes(b'')
            return path

        monkeypatch.setattr(datasets, 'download_file', fake_download)
        out = ensure_hcp_data(tmp_path / 'hcp.mat', prompt=False,
                              input_fn=lambda _: pytest.fail("prompted"))
        assert out == tmp_path / 'hcp.mat'


class TestLoad:

    def test_roundtrip(self, tmp_path, hcp_like_data):
        path = tmp_path / 'hcp.mat'
        sio.savemat(path, {'dat': hcp_like_data})
        dat = load_hcp_data(path)
        assert dat.shape == hcp_like_data.shape
        assert np.allclose(dat, hcp_like_data)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_hcp_data(tmp_path / 'nope.mat')

    def test_missing_variable(self, tmp_path):
        path = tmp_path / 'other.mat'
        sio.savemat(path, {'other': np.zeros(3)})
        with pytest.raises(KeyError):
            load_hcp_data(path)


class TestPreparation:

    def test_normalise_subjects(self, hcp_like_data):
        dat = normalise_subjects(hcp_like_data)
        assert dat.shape == hcp_like_data.shape
        assert np.allclose(dat.mean(axis=1), 0.0, atol=1e-10)
        assert np.allclose(dat.std(axis=1, ddof=1), 1.0)

    def test_lag1_autocorrelation(self, hcp_like_data):
        ac = lag1_autocorrelation(normalise_subjects(hcp_like_data))
        assert ac.shape == (10, 6)
        assert np.all((ac > 0.4) & (ac < 0.95))

    def test_lag1_autocorrelation_matches_statsmodels(self, hcp_like_data):
        ac = lag1_autocorrelation(hcp_like_data)
        assert ac[3, 2] == pytest.approx(acf(hcp_like_data[3, :, 2], nlags=1)[1])

    def test_lag1_autocorrelation_constant_series(self):
        dat = np.ones((2, 50, 3))
        assert np.array_equal(lag1_autocorrelation(dat), np.zeros((2, 3)))

    def test_high_autocorrelation_regions(self, rng):
        D, T, M = 6, 400, 3
        dat = rng.standard_normal((D, T, M))
        # Make regions 4 and 5 strongly autocorrelated
        for t in range(1, T):
            dat[4:, t, :] += 0.9 * dat[4:, t - 1, :]
        regions = high_autocorrelation_regions(dat, quantile=0.7)
        assert set(regions) == {4, 5}

    def test_invalid_quantile(self, hcp_like_data):
        with pytest.raises(ValueError):
            high_autocorrelation_regions(hcp_like_data, quantile=1.0)
