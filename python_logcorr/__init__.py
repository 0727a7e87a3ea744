"""python_logcorr: unconstrained parametrization of covariance matrices.

Implements the log-correlation parametrization of Archakov & Hansen (2021).
A covariance matrix is split into standard deviations and a correlation
matrix; the correlation matrix is represented by the off-diagonal entries of
its matrix logarithm. Every real vector of the right length decodes to a
valid covariance matrix, so covariance structures can be estimated with
unconstrained optimizers.

Basic usage::

    import numpy as np
    from python_logcorr import encode, decode

    cov = np.array([[0.7, 0.3], [0.3, 0.6]])
    theta = encode(cov)                 # [sd_1, sd_2, gamma_21]
    cov2, n_iter = decode(theta, 2, tol=1e-9)
"""

from python_logcorr._vecl import (
    dim_from_n_params,
    n_offdiag,
    n_params,
    offdiag_indices,
    unvecl,
    vecl,
)
from python_logcorr.decompose import SYMMETRY_TOL, corr_to_cov, cov_to_corr
from python_logcorr.exceptions import (
    DomainError,
    InvalidToleranceError,
    InvalidToleranceWarning,
    NonConvergenceError,
    ParametrizationError,
    ShapeError,
    SymmetryError,
)
from python_logcorr.labeled import decode_frame, encode_frame, param_names
from python_logcorr.logcorr import (
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    TOL_BAND,
    corr_to_logcorr,
    logcorr_to_corr,
)
from python_logcorr.transform import (
    CovarianceParametrization,
    decode,
    decode_batch,
    encode,
)

__version__ = "0.1.0"

__all__ = [
    "encode",
    "decode",
    "decode_batch",
    "CovarianceParametrization",
    "cov_to_corr",
    "corr_to_cov",
    "corr_to_logcorr",
    "logcorr_to_corr",
    "encode_frame",
    "decode_frame",
    "param_names",
    "n_params",
    "n_offdiag",
    "dim_from_n_params",
    "offdiag_indices",
    "vecl",
    "unvecl",
    "ParametrizationError",
    "ShapeError",
    "SymmetryError",
    "DomainError",
    "InvalidToleranceError",
    "InvalidToleranceWarning",
    "NonConvergenceError",
    "DEFAULT_TOL",
    "DEFAULT_MAX_ITER",
    "TOL_BAND",
    "SYMMETRY_TOL",
]
