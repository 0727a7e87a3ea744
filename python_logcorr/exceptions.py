"""Exceptions and warnings raised by the log-correlation parametrization."""

from __future__ import annotations

import numpy as np


class ParametrizationError(ValueError):
    """Base class for errors raised while encoding or decoding a covariance."""


class ShapeError(ParametrizationError):
    """Dimension mismatch between a matrix, a vector and the declared size."""


class SymmetryError(ParametrizationError):
    """Matrix is not symmetric within tolerance."""


class DomainError(ParametrizationError, np.linalg.LinAlgError):
    """Eigenvalue or variance is non-positive where positivity is required."""


class InvalidToleranceError(ParametrizationError):
    """Convergence tolerance is not a finite positive number."""


class InvalidToleranceWarning(UserWarning):
    """Convergence tolerance is outside the recommended band."""


class NonConvergenceError(ParametrizationError):
    """The inverse mapping hit its iteration cap without meeting ``tol``.

    Parameters
    ----------
    message : str
        Error message.
    n_iter : int
        Number of iterations performed before giving up.
    max_error : float
        Largest deviation of the reconstructed diagonal from one at the
        last iteration (``inf`` if the iteration overflowed).
    """

    def __init__(self, message: str, n_iter: int, max_error: float) -> None:
        super().__init__(message)
        self.n_iter = n_iter
        self.max_error = max_error
