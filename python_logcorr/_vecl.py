"""Vectorization of the strict lower triangle of a symmetric matrix.

The off-diagonal part of a d×d symmetric matrix has d(d-1)/2 free entries.
They are listed column by column down the strict lower triangle::

    (1,0), (2,0), ..., (d-1,0), (2,1), ..., (d-1,d-2)

which is also the row-major order of the strict upper triangle. Every
function that reads or writes a parameter vector goes through
``offdiag_indices`` so the forward and inverse mappings always agree.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from python_logcorr.exceptions import ShapeError


def _check_dim(n: int) -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise TypeError(f"n must be an integer, got {type(n).__name__}")
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    return int(n)


def n_offdiag(n: int) -> int:
    """Number of strict lower-triangular entries of an n×n matrix."""
    n = _check_dim(n)
    return n * (n - 1) // 2


def n_params(n: int) -> int:
    """Length of the parameter vector for an n×n covariance matrix."""
    n = _check_dim(n)
    return n + n * (n - 1) // 2


def dim_from_n_params(k: int) -> int:
    """Recover n from a parameter vector length k = n(n+1)/2.

    Raises
    ------
    ShapeError
        If ``k`` is not a triangular number.
    """
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise TypeError(f"k must be an integer, got {type(k).__name__}")
    # n(n+1)/2 = k  =>  n = (sqrt(8k + 1) - 1) / 2
    n = (math.isqrt(8 * int(k) + 1) - 1) // 2 if k >= 0 else 0
    if n < 1 or n * (n + 1) // 2 != k:
        raise ShapeError(
            f"A parameter vector of length {k} does not correspond to any "
            f"covariance dimension; valid lengths are n(n+1)/2 (1, 3, 6, 10, ...)"
        )
    return n


def offdiag_indices(n: int) -> tuple[NDArray, NDArray]:
    """Row and column indices of the strict lower triangle in scan order."""
    n = _check_dim(n)
    cols, rows = np.triu_indices(n, k=1)
    return rows, cols


def vecl(A: NDArray) -> NDArray:
    """Strict lower-triangular entries of a square matrix, in scan order."""
    A = np.asarray(A, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ShapeError(f"Expected a square matrix, got shape {A.shape}")
    rows, cols = offdiag_indices(A.shape[0])
    return A[rows, cols].copy()


def unvecl(v: NDArray, n: int, diag: float | NDArray = 0.0) -> NDArray:
    """Build the symmetric n×n matrix with off-diagonal ``v`` and diagonal ``diag``."""
    n = _check_dim(n)
    v = np.asarray(v, dtype=float)
    if v.ndim != 1 or len(v) != n * (n - 1) // 2:
        raise ShapeError(
            f"Off-diagonal vector for n={n} must have length {n * (n - 1) // 2}, "
            f"got shape {v.shape}"
        )
    rows, cols = offdiag_indices(n)
    A = np.zeros((n, n))
    A[rows, cols] = v
    A[cols, rows] = v
    A[np.diag_indices(n)] = diag
    return A
