"""Shared test fixtures for python_logcorr tests."""

import numpy as np
import pandas as pd
import pytest


def random_cov(n, seed=0, scale=1.0):
    """Well-conditioned random covariance matrix with heterogeneous variances."""
    rng = np.random.default_rng(seed)
    A = rng.standard_normal((n, n))
    S = A @ A.T / n + 0.5 * np.eye(n)
    sd = scale * rng.uniform(0.5, 2.0, size=n)
    cov = (sd[:, None] * S) * sd[None, :]
    return (cov + cov.T) / 2


@pytest.fixture
def make_cov():
    """Factory for random covariance matrices: make_cov(n, seed=0, scale=1.0)."""
    return random_cov


@pytest.fixture
def cov_2x2():
    """The 2x2 example covariance used throughout the documentation."""
    return np.array([[0.7, 0.3], [0.3, 0.6]])


@pytest.fixture
def corr_3x3():
    return np.array([
        [1.0, 0.3, 0.1],
        [0.3, 1.0, 0.5],
        [0.1, 0.5, 1.0],
    ])


@pytest.fixture
def cov_frame():
    """Labelled 3x3 covariance matrix."""
    names = ["growth", "inflation", "rates"]
    cov = random_cov(3, seed=7)
    return pd.DataFrame(cov, index=names, columns=names)
