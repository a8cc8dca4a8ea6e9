"""
_slack.py
=========
Slack evaluation and auxiliary-vertex insertion.

For a vertex x and a reference pair (y, z) the slack is the Gromov product

    s(x; y, z) = (D[x,y] + D[x,z] - D[y,z]) / 2

i.e. how far x sits off a geodesic between y and z.  If the smallest slack of
x over all reference pairs is positive, a new auxiliary point at distance s
from x, on the way to y and z, can absorb it.

Public API
----------
  slack_and_pair(V, x, D) -> SlackResult
  insert_auxiliaries(D, V, V_aux=()) -> AuxResult
"""

import logging
from typing import Iterable, NamedTuple, Set

import numpy as np

from cactusnet._logging import log_auxiliary_accepted, log_auxiliary_rejected
from cactusnet._matrix import pad_matrix_by_one


logger = logging.getLogger(__name__)


class SlackResult(NamedTuple):
    """Minimal non-negative slack of a vertex and the pair attaining it (-1 if none)."""

    slack: float
    y: int
    z: int


class AuxResult(NamedTuple):
    """Possibly grown matrix and the auxiliary vertices known after insertion."""

    D: np.ndarray
    aux: Set[int]


def slack_and_pair(V: Iterable[int], x: int, D: np.ndarray) -> SlackResult:
    """
    Return the pair ``(y, z)`` from ``V \\ {x}`` minimising ``s(x; y, z)``.

    Pairs are scanned in ascending (y, z) order and the first minimum wins.
    The reported slack is truncated at zero.  With fewer than two other
    vertices the result is ``SlackResult(0.0, -1, -1)``.

    Parameters
    ----------
    V : iterable of int
        Candidate reference vertices (x itself is skipped if present).
    x : int
        Vertex whose slack is computed.
    D : ndarray (n, n)
        Distance matrix.

    Examples
    --------
    >>> D = np.array([[0., 2., 2.], [2., 0., 2.], [2., 2., 0.]])
    >>> slack_and_pair({0, 1, 2}, 0, D)
    SlackResult(slack=1.0, y=1, z=2)
    """
    others = np.array(sorted(v for v in set(V) if v != x), dtype=np.int64)
    m = others.shape[0]
    if m < 2:
        return SlackResult(0.0, -1, -1)

    dx = D[x, others]
    values = (dx[:, None] + dx[None, :] - D[np.ix_(others, others)]) / 2.0
    values[np.tril_indices(m)] = np.inf

    # argmin scans row-major, i.e. in (y, z) order, and returns the first minimum
    flat = int(np.argmin(values))
    a, b = divmod(flat, m)
    best = float(values[a, b])
    return SlackResult(max(0.0, best), int(others[a]), int(others[b]))


def insert_auxiliaries(
    D: np.ndarray, V: Iterable[int], V_aux: Iterable[int] = ()
) -> AuxResult:
    """
    Add one auxiliary vertex per vertex of *V* whose slack is positive.

    For each x in V (ascending), with ``s, y, z = slack_and_pair(V, x, D)``
    and ``s > 0``, the candidate ``aux`` gets

        d(x, aux) = s
        d(y, aux) = max(D[y,x] - s, 0)
        d(z, aux) = max(D[z,x] - s, 0)
        d(a, aux) = max(D[a,x] - d(x,aux), D[a,y] - d(y,aux), D[a,z] - d(z,aux), 0)

    for every other current vertex a.  The candidate is rejected if
    ``d(y, aux)`` or ``d(z, aux)`` is zero, or if it lies at distance zero
    from a vertex of ``V`` or of the auxiliary set.  Accepted candidates
    grow the matrix by one row/column immediately, so later vertices of the
    same pass see them.

    Parameters
    ----------
    D : ndarray (n, n)
        Distance matrix; not modified.
    V : iterable of int
        Active vertices.
    V_aux : iterable of int
        Auxiliary vertices already known in this round.

    Returns
    -------
    AuxResult
        The (possibly grown) copy of D and the updated auxiliary set.
    """
    V = set(V)
    current = np.array(D, dtype=np.float64, copy=True)
    aux_set = set(V_aux)

    for x in sorted(V):
        slack, y, z = slack_and_pair(V, x, current)
        if slack <= 0:
            continue

        d_x = slack
        d_y = max(0.0, float(current[y, x]) - d_x)
        d_z = max(0.0, float(current[z, x]) - d_x)
        # aux would coincide with y or z
        if d_y == 0.0 or d_z == 0.0:
            continue

        n = current.shape[0]
        others = np.array(
            sorted((set(range(n)) | aux_set) - {x, y, z}), dtype=np.int64
        )
        d_others = np.maximum(
            np.maximum(
                np.maximum(current[others, x] - d_x, current[others, y] - d_y),
                current[others, z] - d_z,
            ),
            0.0,
        )

        named = V | aux_set
        collision = next(
            (int(a) for a, d in zip(others, d_others) if d == 0.0 and int(a) in named),
            None,
        )
        if collision is not None:
            log_auxiliary_rejected(x, y, z, collision)
            continue

        aux = n
        grown = pad_matrix_by_one(current)
        grown[x, aux] = grown[aux, x] = d_x
        grown[y, aux] = grown[aux, y] = d_y
        grown[z, aux] = grown[aux, z] = d_z
        grown[others, aux] = d_others
        grown[aux, others] = d_others

        current = grown
        aux_set.add(aux)
        log_auxiliary_accepted(x, y, z, slack, aux)

    return AuxResult(current, aux_set)
