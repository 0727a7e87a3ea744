"""Labelled (pandas) front end for encode/decode."""

from __future__ import annotations

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from python_logcorr._vecl import offdiag_indices
from python_logcorr.exceptions import ShapeError
from python_logcorr.logcorr import DEFAULT_MAX_ITER, DEFAULT_TOL, _check_max_iter, _check_tol
from python_logcorr.transform import _decode, encode


def param_names(names: list[str]) -> list[str]:
    """Labels for a parameter vector over variables ``names``.

    >>> param_names(["a", "b", "c"])
    ['sd[a]', 'sd[b]', 'sd[c]', 'logcorr[b,a]', 'logcorr[c,a]', 'logcorr[c,b]']
    """
    names = [str(name) for name in names]
    if not names:
        raise ShapeError("names must not be empty")
    if len(set(names)) != len(names):
        raise ValueError(f"names must be unique, got {names}")
    rows, cols = offdiag_indices(len(names))
    labels = [f"sd[{name}]" for name in names]
    labels += [f"logcorr[{names[i]},{names[j]}]" for i, j in zip(rows, cols)]
    return labels


def encode_frame(cov: pd.DataFrame) -> pd.Series:
    """Encode a labelled covariance matrix.

    Parameters
    ----------
    cov : DataFrame
        Square covariance matrix whose index and columns hold the same
        variable names in the same order.

    Returns
    -------
    Series
        Parameter vector indexed by ``param_names(cov.columns)``. The original
        column labels are kept in ``attrs["names"]`` so ``decode_frame`` can
        restore them unchanged.
    """
    if not isinstance(cov, pd.DataFrame):
        raise TypeError(f"cov must be a pandas DataFrame, got {type(cov).__name__}")
    if list(cov.index) != list(cov.columns):
        raise ValueError(
            f"cov index and columns must match; got index {list(cov.index)} "
            f"and columns {list(cov.columns)}"
        )
    theta = encode(cov.to_numpy(dtype=float))
    params = pd.Series(theta, index=param_names(list(cov.columns)), name="params")
    params.attrs["names"] = list(cov.columns)
    return params


def decode_frame(
    theta: pd.Series | NDArray,
    names: list[str] | None = None,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
) -> tuple[pd.DataFrame, int]:
    """Decode a parameter vector into a labelled covariance matrix.

    Parameters
    ----------
    theta : Series or array
        Parameter vector. A Series produced by ``encode_frame`` carries its
        own labels, in which case ``names`` may be omitted. The names come
        from ``attrs["names"]`` when present, otherwise they are parsed from
        the ``sd[...]`` labels and are strings.
    names : list of str, optional
        Variable names. Required when ``theta`` is a plain array.
    tol, max_iter
        Passed to ``decode``.

    Returns
    -------
    cov : DataFrame
    n_iter : int
    """
    tol = _check_tol(tol)
    max_iter = _check_max_iter(max_iter)
    if names is None:
        if not isinstance(theta, pd.Series):
            raise ValueError("names must be given when theta is not a pandas Series")
        names = theta.attrs.get("names")
        if names is None:
            names = [
                label[len("sd["):-1] for label in theta.index if str(label).startswith("sd[")
            ]
    names = list(names)
    if isinstance(theta, pd.Series):
        expected = param_names(names)
        if list(theta.index) != expected:
            raise ValueError(
                f"theta labels do not match names {names}; expected {expected}"
            )
    values = np.asarray(theta, dtype=float)
    cov, n_iter = _decode(values, len(names), tol, max_iter)
    return pd.DataFrame(cov, index=names, columns=names), n_iter
