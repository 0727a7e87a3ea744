"""Stress tests for python_logcorr: numerical stability, edge cases, concurrency."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from python_logcorr import (
    CovarianceParametrization,
    NonConvergenceError,
    corr_to_logcorr,
    decode,
    encode,
    logcorr_to_corr,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _equicorrelation(n, rho):
    R = np.full((n, n), rho)
    np.fill_diagonal(R, 1.0)
    return R


def _ar1_corr(n, phi):
    idx = np.arange(n)
    return phi ** np.abs(idx[:, None] - idx[None, :])


# ---------------------------------------------------------------------------
# Dimension
# ---------------------------------------------------------------------------

class TestLargeDimensions:
    @pytest.mark.parametrize("n", [10, 20, 40])
    def test_roundtrip(self, make_cov, n):
        cov = make_cov(n, seed=n)
        theta = encode(cov)
        assert len(theta) == n * (n + 1) // 2
        cov2, n_iter = decode(theta, n, tol=1e-11)
        np.testing.assert_allclose(cov2, cov, atol=1e-8)
        assert n_iter < 1000

    def test_ar1_structure(self):
        R = _ar1_corr(15, 0.7)
        R2, _ = logcorr_to_corr(corr_to_logcorr(R), 15, tol=1e-12)
        np.testing.assert_allclose(R2, R, atol=1e-9)


# ---------------------------------------------------------------------------
# Near-singular and extreme correlations
# ---------------------------------------------------------------------------

class TestExtremeCorrelations:
    @pytest.mark.parametrize("rho", [0.99, 0.999, -0.99])
    def test_strong_2x2(self, rho):
        R = np.array([[1.0, rho], [rho, 1.0]])
        gamma = corr_to_logcorr(R)
        np.testing.assert_allclose(gamma[0], np.arctanh(rho), atol=1e-9)
        R2, _ = logcorr_to_corr(gamma, 2, tol=1e-12)
        np.testing.assert_allclose(R2, R, atol=1e-10)

    @pytest.mark.parametrize("rho", [0.5, 0.8, 0.9])
    def test_equicorrelation(self, rho):
        R = _equicorrelation(5, rho)
        R2, n_iter = logcorr_to_corr(corr_to_logcorr(R), 5, tol=1e-12)
        np.testing.assert_allclose(R2, R, atol=1e-9)
        assert n_iter > 0

    def test_negative_equicorrelation(self):
        # Smallest admissible common correlation for n=4 is -1/3
        R = _equicorrelation(4, -0.3)
        R2, _ = logcorr_to_corr(corr_to_logcorr(R), 4, tol=1e-12)
        np.testing.assert_allclose(R2, R, atol=1e-9)

    def test_large_parameters_still_valid(self):
        gamma = np.array([2.0, -1.5, 1.2, 1.8, -2.0, 0.5])
        R, _ = logcorr_to_corr(gamma, 4, tol=1e-10)
        assert np.all(np.linalg.eigvalsh(R) > 0)
        np.testing.assert_array_equal(np.diag(R), 1.0)

    def test_extreme_input_with_low_cap_fails_cleanly(self):
        gamma = np.array([200.0, -150.0, 300.0])
        with pytest.raises(NonConvergenceError):
            logcorr_to_corr(gamma, 3, tol=1e-14, max_iter=5)


# ---------------------------------------------------------------------------
# Scale
# ---------------------------------------------------------------------------

class TestScale:
    @pytest.mark.parametrize("scale", [1e-4, 1e-2, 1e2, 1e4])
    def test_roundtrip_relative(self, make_cov, scale):
        cov = make_cov(4, seed=3, scale=scale)
        cov2, _ = decode(encode(cov), 4, tol=1e-12)
        np.testing.assert_allclose(cov2, cov, rtol=1e-8, atol=1e-8 * scale**2)

    def test_correlation_part_scale_free(self, make_cov):
        cov = make_cov(3, seed=4)
        np.testing.assert_allclose(
            encode(cov)[3:], encode(1e6 * cov)[3:], atol=1e-12
        )


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

class TestConcurrency:
    def test_shared_parametrization_across_threads(self, make_cov):
        p = CovarianceParametrization(6, tol=1e-10)
        thetas = [p.encode(make_cov(6, seed=s)) for s in range(16)]
        expected = [p.decode_with_iterations(t) for t in thetas]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(p.decode_with_iterations, thetas * 4))

        for i, (cov, n_iter) in enumerate(results):
            exp_cov, exp_iter = expected[i % len(thetas)]
            np.testing.assert_allclose(cov, exp_cov, atol=1e-14)
            assert n_iter == exp_iter

    def test_inputs_never_mutated(self, make_cov):
        theta = encode(make_cov(3, seed=8))
        before = theta.copy()
        decode(theta, 3)
        np.testing.assert_array_equal(theta, before)
