"""Log-correlation parametrization of correlation matrices.

Based on Archakov & Hansen (2021), "A New Parametrization of Correlation
Matrices", Econometrica 89(4). A d×d correlation matrix C is parametrized by
the d(d-1)/2 off-diagonal entries of log(C). Any real vector of that length
maps to exactly one correlation matrix, so an optimizer can move freely in
R^{d(d-1)/2} without positive-definiteness constraints.

The diagonal of log(C) is not a free parameter: it is the unique vector x
for which exp(A[x]) has a unit diagonal, where A[x] is the symmetric matrix
with the given off-diagonal and diagonal x. It is found by the fixed-point
iteration

    x_{k+1} = x_k - log(diag(exp(A[x_k])))

which converges for every real off-diagonal vector. Each step costs one
symmetric eigendecomposition.
"""

from __future__ import annotations

import math
import warnings

import numpy as np
from numpy.typing import NDArray

from python_logcorr._linalg import _validate_array, _reassemble, sym_eig, sym_logm
from python_logcorr._vecl import _check_dim, offdiag_indices, vecl
from python_logcorr.exceptions import (
    InvalidToleranceError,
    InvalidToleranceWarning,
    NonConvergenceError,
    ShapeError,
)

DEFAULT_TOL = 1e-9
DEFAULT_MAX_ITER = 1000
TOL_BAND = (1e-14, 1e-4)

# Largest accepted relative rounding error of the recovered log(C), about
# n * eps * lambda_max / lambda_min.
_ROUNDING_LIMIT = math.sqrt(np.finfo(float).eps)


def _check_tol(tol: float, stacklevel: int = 3) -> float:
    """Validate a convergence tolerance.

    Non-positive or non-finite values are rejected. Values outside
    ``TOL_BAND`` are accepted with a warning: below the band the criterion
    may be unreachable in double precision (ending in NonConvergenceError),
    above it the off-diagonal of the result is only accurate to about ``tol``.

    ``stacklevel`` is counted from this function, so the default points the
    warning at whoever called the public function that called it.
    """
    if isinstance(tol, bool) or not isinstance(tol, (int, float, np.floating, np.integer)):
        raise TypeError(f"tol must be a number, got {type(tol).__name__}")
    tol = float(tol)
    if not math.isfinite(tol) or tol <= 0:
        raise InvalidToleranceError(f"tol must be a finite positive number, got {tol}")
    lo, hi = TOL_BAND
    if not lo <= tol <= hi:
        warnings.warn(
            f"tol={tol:g} is outside the recommended range [{lo:g}, {hi:g}]. "
            f"Convergence or accuracy of the inverse mapping may degrade.",
            InvalidToleranceWarning,
            stacklevel=stacklevel,
        )
    return tol


def _check_max_iter(max_iter: int) -> int:
    if isinstance(max_iter, bool) or not isinstance(max_iter, (int, np.integer)):
        raise TypeError(f"max_iter must be an integer, got {type(max_iter).__name__}")
    if max_iter < 1:
        raise ValueError(f"max_iter must be >= 1, got {max_iter}")
    return int(max_iter)


def corr_to_logcorr(corr: NDArray) -> NDArray:
    """Map a correlation matrix to the off-diagonal entries of its logarithm.

    Parameters
    ----------
    corr : array of shape (d, d)
        Positive-definite correlation matrix.

    Returns
    -------
    gamma : array of shape (d*(d-1)/2,)
        Strict lower triangle of log(corr), in scan order.

    Raises
    ------
    ShapeError
        If ``corr`` is not square.
    DomainError
        If ``corr`` has a non-positive eigenvalue.
    """
    corr = np.asarray(corr, dtype=float)
    if corr.ndim != 2 or corr.shape[0] != corr.shape[1] or corr.shape[0] == 0:
        raise ShapeError(f"corr must be a non-empty square matrix, got shape {corr.shape}")
    _validate_array(corr, "corr")
    return vecl(sym_logm(corr))


def logcorr_to_corr(
    gamma: NDArray,
    n: int,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
) -> tuple[NDArray, int]:
    """Reconstruct a correlation matrix from the off-diagonal of its logarithm.

    Parameters
    ----------
    gamma : array of shape (n*(n-1)/2,)
        Off-diagonal entries of log(C), in scan order.
    n : int
        Dimension of the correlation matrix.
    tol : float
        Stop once every diagonal entry of exp(A) is within ``tol`` of one.
        Recommended range is ``TOL_BAND``.
    max_iter : int
        Iteration cap.

    Returns
    -------
    corr : array of shape (n, n)
        Correlation matrix, symmetric with an exact unit diagonal.
    n_iter : int
        Number of diagonal updates performed before convergence.

    Raises
    ------
    ShapeError
        If ``len(gamma) != n*(n-1)/2``.
    NonConvergenceError
        If the diagonal does not reach ``tol`` within ``max_iter`` iterations,
        the iteration overflows, or the result is too ill-conditioned for
        its logarithm to reproduce ``gamma`` in double precision.
    """
    tol = _check_tol(tol)
    max_iter = _check_max_iter(max_iter)
    return _inverse_mapping(gamma, n, tol, max_iter)


def _inverse_mapping(gamma: NDArray, n: int, tol: float, max_iter: int) -> tuple[NDArray, int]:
    # tol and max_iter are already validated by the caller
    n = _check_dim(n)
    gamma = np.asarray(gamma, dtype=float)
    m = n * (n - 1) // 2
    if gamma.ndim != 1 or len(gamma) != m:
        raise ShapeError(
            f"gamma for n={n} must be a 1-D array of length {m}, got shape {gamma.shape}"
        )
    _validate_array(gamma, "gamma")

    if n == 1:
        return np.ones((1, 1)), 0

    # Only the lower triangle is read by the eigensolver
    rows, cols = offdiag_indices(n)
    A = np.zeros((n, n))
    A[rows, cols] = gamma
    diag_idx = np.diag_indices(n)
    x = np.zeros(n)

    max_error = math.inf
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        for k in range(max_iter):
            w, Q = sym_eig(A)
            ew = np.exp(w)
            # diag(Q diag(e^w) Q') without building the full matrix
            d = (Q * Q) @ ew
            if not np.all(np.isfinite(d)) or np.any(d <= 0):
                raise NonConvergenceError(
                    f"Inverse mapping overflowed at iteration {k}; the "
                    f"off-diagonal values (max |gamma| = {np.max(np.abs(gamma)):.3g}) "
                    f"are too extreme to represent in double precision",
                    n_iter=k,
                    max_error=math.inf,
                )
            max_error = float(np.max(np.abs(d - 1.0)))
            if max_error < tol:
                rounding = n * np.finfo(float).eps * np.exp(w[-1] - w[0])
                if not rounding <= _ROUNDING_LIMIT:
                    raise NonConvergenceError(
                        f"Inverse mapping reached tol at iteration {k}, but the "
                        f"result is too ill-conditioned (eigenvalue ratio "
                        f"{np.exp(w[0] - w[-1]):.3g}) for its logarithm to "
                        f"reproduce gamma (max |gamma| = {np.max(np.abs(gamma)):.3g}) "
                        f"in double precision",
                        n_iter=k,
                        max_error=max_error,
                    )
                corr = _reassemble(Q, ew)
                np.fill_diagonal(corr, 1.0)
                return corr, k
            x = x - np.log(d)
            A[diag_idx] = x

    raise NonConvergenceError(
        f"Inverse mapping did not converge after {max_iter} iterations "
        f"(max |diag - 1| = {max_error:.3g}, tol = {tol:g}). Increase max_iter, "
        f"loosen tol, or check that gamma comes from a valid correlation matrix.",
        n_iter=max_iter,
        max_error=max_error,
    )
