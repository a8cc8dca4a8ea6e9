"""
_utils.py
=========
General-purpose helpers for cactusnet.

These are standalone functions that don't depend on the main classes.
"""

import math

import numpy as np

from cactusnet._errors import InputFormatError


def round5(x: float) -> float:
    """
    Round to 5 decimal places, halves rounded up.

    This is the fixed formatting convention for output edge weights.  Python's
    built-in ``round`` rounds halves to even and is not used here.

    Examples
    --------
    >>> round5(0.333333)
    0.33333
    >>> round5(1.000006)
    1.00001
    >>> round5(2.0)
    2.0
    """
    return math.floor(x * 1e5 + 0.5) / 1e5


def format_weight(x: float) -> str:
    """
    Format a weight with 10 decimals, then trim trailing zeros and a bare '.'.

    Examples
    --------
    >>> format_weight(2.0)
    '2'
    >>> format_weight(0.125)
    '0.125'
    >>> format_weight(1.23456)
    '1.23456'
    """
    s = f"{x:.10f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


def as_distance_matrix(D) -> np.ndarray:
    """
    Return a fresh float64 copy of *D*, checking that it is square and 2-D.

    The copy is never aliased with the caller's array.  Symmetry, the zero
    diagonal and the triangle inequality are the caller's responsibility.

    Raises
    ------
    InputFormatError
        If *D* is not a square two-dimensional numeric array.
    """
    try:
        arr = np.array(D, dtype=np.float64, copy=True)
    except (TypeError, ValueError) as exc:
        raise InputFormatError(f"distance matrix is not numeric: {exc}") from exc
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise InputFormatError(
            f"distance matrix must be square and two-dimensional, got shape {arr.shape}"
        )
    return arr
