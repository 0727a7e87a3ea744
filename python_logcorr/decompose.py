"""Split a covariance matrix into standard deviations and correlations, and back.

Python counterparts of MATLAB's ``cov2corr``/``corr2cov``:

    Sigma = D R D,    D = diag(sd),    sd_i = sqrt(Sigma_ii)
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from python_logcorr._linalg import _validate_array
from python_logcorr.exceptions import DomainError, ShapeError, SymmetryError

SYMMETRY_TOL = 1e-10


def _as_square(M: NDArray, name: str) -> NDArray:
    M = np.asarray(M, dtype=float)
    if M.ndim != 2 or M.shape[0] != M.shape[1]:
        raise ShapeError(f"{name} must be a square matrix, got shape {M.shape}")
    if M.shape[0] == 0:
        raise ShapeError(f"{name} must not be empty")
    _validate_array(M, name)
    return M


def _check_symmetric(M: NDArray, name: str) -> None:
    """Raise SymmetryError if M differs from M' beyond a scale-relative tolerance."""
    asym = np.max(np.abs(M - M.T))
    bound = SYMMETRY_TOL * max(1.0, float(np.max(np.abs(M))))
    if asym > bound:
        raise SymmetryError(
            f"{name} is not symmetric: max |M[i,j] - M[j,i]| = {asym:.3g} "
            f"exceeds tolerance {bound:.3g}"
        )


def cov_to_corr(cov: NDArray) -> tuple[NDArray, NDArray]:
    """Convert a covariance matrix to standard deviations and a correlation matrix.

    Positive definiteness is not checked; that is the caller's job.

    Parameters
    ----------
    cov : array of shape (n, n)
        Symmetric covariance matrix.

    Returns
    -------
    sd : array of shape (n,)
        Standard deviations, ``sqrt(diag(cov))``.
    corr : array of shape (n, n)
        Correlation matrix with an exact unit diagonal.

    Raises
    ------
    ShapeError
        If ``cov`` is not square.
    SymmetryError
        If ``cov`` is not symmetric within tolerance.
    DomainError
        If a variance on the diagonal is not strictly positive.
    """
    cov = _as_square(cov, "cov")
    _check_symmetric(cov, "cov")

    variances = np.diag(cov)
    if np.any(variances <= 0):
        bad = np.flatnonzero(variances <= 0).tolist()
        raise DomainError(
            f"cov has non-positive variance(s) at diagonal position(s) {bad}; "
            f"a covariance matrix must be positive definite"
        )
    sd = np.sqrt(variances)
    corr = cov / np.outer(sd, sd)
    corr = (corr + corr.T) / 2
    # Exact ones on the diagonal (no floating-point drift)
    np.fill_diagonal(corr, 1.0)
    return sd, corr


def corr_to_cov(sd: NDArray, corr: NDArray) -> NDArray:
    """Combine standard deviations and a correlation matrix into a covariance.

    Parameters
    ----------
    sd : array of shape (n,)
        Standard deviations.
    corr : array of shape (n, n)
        Symmetric correlation matrix.

    Returns
    -------
    cov : array of shape (n, n)
        ``cov[i, j] = sd[i] * sd[j] * corr[i, j]``.
    """
    sd = np.asarray(sd, dtype=float)
    corr = _as_square(corr, "corr")
    if sd.ndim != 1 or len(sd) != corr.shape[0]:
        raise ShapeError(
            f"sd must be a 1-D array of length {corr.shape[0]} to match corr, "
            f"got shape {sd.shape}"
        )
    _validate_array(sd, "sd")
    _check_symmetric(corr, "corr")

    cov = (sd[:, None] * corr) * sd[None, :]
    return (cov + cov.T) / 2
