"""
_matrix.py
==========
Distance-matrix growth and the shadow merger.

A *shadow* is a vertex that coincides with an earlier one: zero mutual
distance and an identical distance row (both within ``min_distance``).
Shadows are removed from the matrix and the scaffold, and every vertex set
that refers to old indices is re-indexed to match.

Index stability
---------------
Vertex indices are positions in the current matrix, so they shift down
whenever rows are removed.  Every shrink must be paired with
``reindex_set`` on all bookkeeping sets.
"""

from bisect import bisect_right
from typing import Iterable, List, Set

import numpy as np

from cactusnet._graph import WeightedGraph


def pad_matrix_by_one(D: np.ndarray) -> np.ndarray:
    """Return a new (n+1, n+1) matrix with *D* in the top-left block, zeros elsewhere."""
    n = D.shape[0]
    R = np.zeros((n + 1, n + 1), dtype=np.float64)
    R[:n, :n] = D
    return R


def find_shadows(D: np.ndarray, min_distance: float) -> List[int]:
    """
    Return the shadow vertices of *D* in ascending order.

    Vertex ``j`` is a shadow of an earlier, non-shadow vertex ``i`` when
    ``|D[i,j]| <= min_distance`` and ``|D[i,k] - D[j,k]| <= min_distance``
    for every column ``k``.  Each vertex is matched to at most one earlier
    vertex.

    Examples
    --------
    >>> D = np.array([[0., 0., 3.], [0., 0., 3.], [3., 3., 0.]])
    >>> find_shadows(D, 1e-12)
    [1]
    """
    n = D.shape[0]
    removed = np.zeros(n, dtype=bool)
    shadows = []
    for j in range(n):
        for i in range(j):
            if removed[i] or abs(D[i, j]) > min_distance:
                continue
            if np.all(np.abs(D[i] - D[j]) <= min_distance):
                removed[j] = True
                shadows.append(j)
                break
    return shadows


def shrink_matrix(D: np.ndarray, shadows: Iterable[int]) -> np.ndarray:
    """Return a copy of *D* without the rows and columns listed in *shadows*."""
    keep = _kept_indices(D.shape[0], shadows)
    return D[np.ix_(keep, keep)].copy()


def shrink_graph(n_before: int, g: WeightedGraph, shadows: Iterable[int]) -> WeightedGraph:
    """
    Rebuild *g* on ``n_before - len(shadows)`` vertices with old indices remapped.

    Edges with a removed endpoint are dropped; weights are kept.
    """
    shadows = sorted(set(shadows))
    if not shadows:
        return g.copy()
    keep = _kept_indices(n_before, shadows)
    old_to_new = {old: new for new, old in enumerate(keep)}

    shrunk = WeightedGraph(len(keep))
    for edge in g.list_edges():
        u = old_to_new.get(edge.u)
        v = old_to_new.get(edge.v)
        if u is not None and v is not None:
            shrunk.put_edge(u, v, g.weight(edge))
    return shrunk


def reindex_set(vertices: Iterable[int], shadows: Iterable[int]) -> Set[int]:
    """
    Shift every vertex down by the number of removed indices at or below it.

    Examples
    --------
    >>> sorted(reindex_set({0, 1, 3, 5}, [2, 4]))
    [0, 1, 2, 3]
    """
    removed = sorted(set(shadows))
    return {v - bisect_right(removed, v) for v in vertices}


def _kept_indices(n: int, shadows: Iterable[int]) -> List[int]:
    gone = set(shadows)
    return [i for i in range(n) if i not in gone]
