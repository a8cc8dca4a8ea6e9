"""
_kernels.py
===========
CPU-accelerated dominance kernel using Numba.

This module contains ONLY numba-accelerated code and should not import other
project modules to avoid import-time complications.  It is imported lazily
through ``_backend.import_cpu_kernels``; if numba is missing the import fails
and the 'cpu-parallel' backend is simply reported as unavailable.

Exported Functions
------------------
_dominance_mask_njit : njit function
    Parallel two-hop domination test over every pair of a vertex subset.

Notes
-----
- cache=True persists compiled binary to disk for faster subsequent runs
- The outer loop over the first pair member runs in parallel via prange.
  Thread ``a`` writes only ``out[a, b]`` and ``out[b, a]`` for ``b > a``,
  so no two threads touch the same cell.
"""

from numba import njit, prange


@njit(parallel=True, cache=True)
def _dominance_mask_njit(D, members, epsilon, strict, out):
    """
    Numba-compiled dominance kernel.

    Pair ``(x, y)`` of *members* is dominated when some third member ``z``
    satisfies ``D[x,z] + D[z,y] <= D[x,y] + epsilon`` with both legs
    non-zero (``strict=False``) or strictly positive (``strict=True``).

    Parameters
    ----------
    D : float64[n, n]
        Distance matrix.
    members : int64[m]
        Distinct vertex indices into D.
    epsilon : float
        Domination tolerance.
    strict : bool
        Leg test: ``> 0`` if True, ``!= 0`` if False.
    out : bool[m, m]
        Output mask, indexed by position in *members*.  The diagonal is
        left untouched.
    """
    m = members.shape[0]
    for a in prange(m):
        x = members[a]
        for b in range(a + 1, m):
            y = members[b]
            bound = D[x, y] + epsilon
            dominated = False
            for c in range(m):
                if c == a or c == b:
                    continue
                z = members[c]
                dxz = D[x, z]
                dzy = D[z, y]
                if strict:
                    legs_ok = dxz > 0.0 and dzy > 0.0
                else:
                    legs_ok = dxz != 0.0 and dzy != 0.0
                if legs_ok and dxz + dzy <= bound:
                    dominated = True
                    break
            out[a, b] = dominated
            out[b, a] = dominated
