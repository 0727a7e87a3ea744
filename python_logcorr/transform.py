"""Covariance matrix <-> unconstrained parameter vector.

A d×d covariance matrix Sigma is written as D R D, with D the diagonal of
standard deviations and R the correlation matrix. The parameter vector is::

    theta = [sd_1, ..., sd_d, gamma_1, ..., gamma_{d(d-1)/2}]

where gamma holds the off-diagonal entries of log(R) (see
``python_logcorr.logcorr``). Its length is d + d(d-1)/2 = d(d+1)/2, the
number of free entries of a symmetric matrix.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numpy.typing import NDArray

from python_logcorr._vecl import _check_dim, n_params, offdiag_indices
from python_logcorr.decompose import corr_to_cov, cov_to_corr
from python_logcorr.exceptions import ShapeError
from python_logcorr.logcorr import (
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    _check_max_iter,
    _check_tol,
    _inverse_mapping,
    corr_to_logcorr,
)


def encode(cov: NDArray) -> NDArray:
    """Map a covariance matrix to its parameter vector.

    Parameters
    ----------
    cov : array of shape (d, d)
        Symmetric positive-definite covariance matrix. Positive
        definiteness is assumed, not checked.

    Returns
    -------
    theta : array of shape (d + d*(d-1)/2,)
        Standard deviations followed by the off-diagonal of log(corr).
    """
    sd, corr = cov_to_corr(cov)
    gamma = corr_to_logcorr(corr)
    return np.concatenate([sd, gamma])


def _split(theta: NDArray, n: int) -> tuple[NDArray, NDArray]:
    theta = np.asarray(theta, dtype=float)
    k = n_params(n)
    if theta.ndim != 1 or len(theta) != k:
        raise ShapeError(
            f"Parameter vector for n={n} must be a 1-D array of length {k}, "
            f"got shape {theta.shape}"
        )
    return theta[:n], theta[n:]


def decode(
    theta: NDArray,
    n: int,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
) -> tuple[NDArray, int]:
    """Map a parameter vector back to a covariance matrix.

    Parameters
    ----------
    theta : array of shape (n + n*(n-1)/2,)
        Parameter vector as returned by ``encode``.
    n : int
        Dimension of the covariance matrix.
    tol : float
        Convergence tolerance of the inverse correlation mapping.
    max_iter : int
        Iteration cap of the inverse correlation mapping.

    Returns
    -------
    cov : array of shape (n, n)
        Covariance matrix.
    n_iter : int
        Iterations used by the inverse correlation mapping.
    """
    tol = _check_tol(tol)
    max_iter = _check_max_iter(max_iter)
    return _decode(theta, n, tol, max_iter)


def _decode(theta: NDArray, n: int, tol: float, max_iter: int) -> tuple[NDArray, int]:
    n = _check_dim(n)
    sd, gamma = _split(theta, n)
    corr, n_iter = _inverse_mapping(gamma, n, tol, max_iter)
    return corr_to_cov(sd, corr), n_iter


def decode_batch(
    thetas: NDArray,
    n: int,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
    n_jobs: int = 1,
) -> tuple[NDArray, NDArray]:
    """Decode several parameter vectors.

    Parameters
    ----------
    thetas : array of shape (m, n + n*(n-1)/2)
        One parameter vector per row.
    n : int
        Dimension of the covariance matrices.
    tol, max_iter
        Passed to ``decode``.
    n_jobs : int
        Number of threads. Use 1 for sequential (default) or -1 to use all
        available CPU cores. Each call is independent, so threads share no
        state; the eigensolver releases the GIL.

    Returns
    -------
    covs : array of shape (m, n, n)
    n_iters : int array of shape (m,)

    Raises
    ------
    The first error raised by any row; no partial results are returned.
    """
    n = _check_dim(n)
    thetas = np.asarray(thetas, dtype=float)
    k = n_params(n)
    if thetas.ndim != 2 or thetas.shape[1] != k:
        raise ShapeError(
            f"thetas for n={n} must have shape (m, {k}), got {thetas.shape}"
        )
    tol = _check_tol(tol)
    max_iter = _check_max_iter(max_iter)

    if n_jobs == -1:
        n_jobs = os.cpu_count() or 1
    elif n_jobs < 1:
        n_jobs = 1

    def _one(theta: NDArray) -> tuple[NDArray, int]:
        return _decode(theta, n, tol, max_iter)

    if n_jobs > 1 and len(thetas) > 1:
        with ThreadPoolExecutor(max_workers=n_jobs) as pool:
            results = list(pool.map(_one, thetas))
    else:
        results = [_one(theta) for theta in thetas]

    covs = np.empty((len(thetas), n, n))
    n_iters = np.zeros(len(thetas), dtype=int)
    for i, (cov, it) in enumerate(results):
        covs[i] = cov
        n_iters[i] = it
    return covs, n_iters


class CovarianceParametrization:
    """Unconstrained parametrization of d×d covariance matrices.

    Bundles the dimension and the inverse-mapping settings so an objective
    function can call ``decode(theta)`` on every evaluation. Instances hold
    only immutable configuration and are safe to share between threads.

    Parameters
    ----------
    dim : int
        Dimension of the covariance matrix.
    tol : float
        Convergence tolerance of the inverse correlation mapping.
    max_iter : int
        Iteration cap of the inverse correlation mapping.

    Examples
    --------
    >>> p = CovarianceParametrization(2)
    >>> cov = np.array([[0.7, 0.3], [0.3, 0.6]])
    >>> theta = p.encode(cov)
    >>> np.allclose(p.decode(theta), cov)
    True
    """

    def __init__(
        self,
        dim: int,
        tol: float = DEFAULT_TOL,
        max_iter: int = DEFAULT_MAX_ITER,
    ) -> None:
        self._dim = _check_dim(dim)
        self._tol = _check_tol(tol)
        self._max_iter = _check_max_iter(max_iter)

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def tol(self) -> float:
        return self._tol

    @property
    def max_iter(self) -> int:
        return self._max_iter

    @property
    def n_params(self) -> int:
        """Length of the parameter vector."""
        return n_params(self._dim)

    def encode(self, cov: NDArray) -> NDArray:
        cov = np.asarray(cov, dtype=float)
        if cov.shape != (self._dim, self._dim):
            raise ShapeError(
                f"cov must have shape ({self._dim}, {self._dim}), got {cov.shape}"
            )
        return encode(cov)

    def decode(self, theta: NDArray) -> NDArray:
        """Covariance matrix for ``theta``."""
        return self.decode_with_iterations(theta)[0]

    def decode_with_iterations(self, theta: NDArray) -> tuple[NDArray, int]:
        """Covariance matrix for ``theta`` and the iterations used."""
        return _decode(theta, self._dim, self._tol, self._max_iter)

    def start_params(self, cov: NDArray | None = None) -> NDArray:
        """Starting vector for an optimizer.

        Unit standard deviations and zero correlations when ``cov`` is None,
        otherwise ``encode(cov)``.
        """
        if cov is not None:
            return self.encode(cov)
        return np.concatenate([np.ones(self._dim), np.zeros(self.n_params - self._dim)])

    def param_names(self, names: list[str] | None = None) -> list[str]:
        """Labels for the entries of the parameter vector.

        ``names`` defaults to ``x0, x1, ...``.
        """
        from python_logcorr.labeled import param_names

        if names is None:
            names = [f"x{i}" for i in range(self._dim)]
        if len(names) != self._dim:
            raise ShapeError(f"Expected {self._dim} names, got {len(names)}")
        return param_names(names)

    def offdiag_indices(self) -> tuple[NDArray, NDArray]:
        """(row, col) of each correlation parameter, in parameter order."""
        return offdiag_indices(self._dim)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(dim={self._dim}, tol={self._tol:g}, "
            f"max_iter={self._max_iter})"
        )
