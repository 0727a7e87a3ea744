"""Matrix functions of symmetric matrices via eigendecomposition.

For a real symmetric A = Q diag(w) Q', any scalar function f extends to
f(A) = Q diag(f(w)) Q'. The eigenvalues are real and Q is orthogonal, so
this is both cheaper and better conditioned than a general-purpose
``scipy.linalg.logm``/``expm``.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
import scipy.linalg
from numpy.typing import NDArray

from python_logcorr.exceptions import DomainError


def _validate_array(arr: NDArray, name: str) -> None:
    """Check an array for NaN and Inf values."""
    if np.any(np.isnan(arr)):
        n_nan = int(np.sum(np.isnan(arr)))
        raise ValueError(
            f"{name} contains {n_nan} NaN value(s). "
            f"Check the values passed in before encoding or decoding."
        )
    if np.any(np.isinf(arr)):
        n_inf = int(np.sum(np.isinf(arr)))
        raise ValueError(
            f"{name} contains {n_inf} infinite value(s). "
            f"Check for overflow or division by zero upstream."
        )


def sym_eig(A: NDArray) -> tuple[NDArray, NDArray]:
    """Eigenvalues (ascending) and orthonormal eigenvectors of symmetric A.

    Only the lower triangle of ``A`` is read. The caller guarantees that
    ``A`` is finite.
    """
    return scipy.linalg.eigh(A, lower=True, check_finite=False)


def _reassemble(Q: NDArray, fw: NDArray) -> NDArray:
    # Q @ diag(fw) @ Q.T without forming the diagonal matrix
    F = (Q * fw) @ Q.T
    return (F + F.T) / 2


def sym_funm(A: NDArray, func: Callable[[NDArray], NDArray]) -> NDArray:
    """Apply ``func`` to the eigenvalues of symmetric A."""
    w, Q = sym_eig(A)
    return _reassemble(Q, func(w))


def sym_logm(A: NDArray) -> NDArray:
    """Matrix logarithm of a symmetric positive-definite matrix.

    Raises
    ------
    DomainError
        If any eigenvalue of ``A`` is not strictly positive.
    """
    w, Q = sym_eig(A)
    if np.any(w <= 0):
        raise DomainError(
            f"Matrix logarithm requires a positive-definite matrix; smallest "
            f"eigenvalue is {w[0]:.6g}"
        )
    return _reassemble(Q, np.log(w))


def sym_expm(A: NDArray) -> NDArray:
    """Matrix exponential of a symmetric matrix."""
    return sym_funm(A, np.exp)
