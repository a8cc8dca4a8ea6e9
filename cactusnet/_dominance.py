"""
_dominance.py
=============
Two-hop domination test shared by K-minus construction and edge pruning.

A pair ``(x, y)`` is *dominated* inside a vertex subset P when some
``z in P \\ {x, y}`` gives a two-hop path no longer than the direct distance:

    D[x,z] + D[z,y] <= D[x,y] + epsilon,   with both legs non-zero.

``strict=True`` requires both legs to be strictly positive (the pruning
rule); ``strict=False`` only requires them to be non-zero (the K-minus rule).
The two agree on any non-negative matrix.

The scan is O(m^3) for m members and is dispatched to the numba kernel when
the 'cpu-parallel' backend is selected.
"""

import logging
from typing import Iterable

import numpy as np

from cactusnet._backend import import_cpu_kernels, select_backend


logger = logging.getLogger(__name__)


def dominance_mask(
    D: np.ndarray,
    members: Iterable[int],
    epsilon: float,
    strict: bool = False,
    backend: str = "best",
) -> np.ndarray:
    """
    Return the symmetric boolean domination mask over *members*.

    Parameters
    ----------
    D : ndarray (n, n)
        Distance matrix.
    members : iterable of int
        Vertex subset.  It is sorted ascending; row/column ``a`` of the result
        refers to the a-th smallest member.
    epsilon : float
        Domination tolerance.
    strict : bool
        Leg test ``> 0`` if True, ``!= 0`` if False.
    backend : str
        'python', 'cpu-parallel' or 'best'.

    Returns
    -------
    ndarray[bool] (m, m)
        ``mask[a, b]`` is True iff pair (members[a], members[b]) is dominated.
        The diagonal is False.
    """
    idx = np.asarray(sorted(set(int(v) for v in members)), dtype=np.int64)
    m = idx.shape[0]
    out = np.zeros((m, m), dtype=np.bool_)
    if m < 3:
        return out

    D = np.ascontiguousarray(D, dtype=np.float64)
    resolved = select_backend(backend)

    if resolved == "cpu-parallel":
        _, kernel = import_cpu_kernels()
        kernel(D, idx, float(epsilon), bool(strict), out)
        return out

    return _dominance_mask_numpy(D, idx, float(epsilon), bool(strict))


def _dominance_mask_numpy(
    D: np.ndarray, idx: np.ndarray, epsilon: float, strict: bool
) -> np.ndarray:
    """Vectorised reference implementation (one row of pairs at a time)."""
    S = D[np.ix_(idx, idx)]
    legs = S > 0.0 if strict else S != 0.0
    m = S.shape[0]
    out = np.zeros((m, m), dtype=np.bool_)

    for a in range(m - 1):
        # total[b, c] = D[x, z_c] + D[z_c, y_b]
        total = S[a][None, :] + S.T
        valid = legs[a][None, :] & legs.T
        valid[:, a] = False
        np.fill_diagonal(valid, False)
        bound = S[a][:, None] + epsilon
        out[a] = np.any(valid & (total <= bound), axis=1)

    # only pairs a < b are authoritative; mirror them
    out = np.triu(out, k=1)
    return out | out.T
