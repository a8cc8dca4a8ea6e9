"""
_extend.py
==========
Distance-matrix extension: the fixed-point driver around compactification.

One extension round (``extend_once``) prepares the high-degree
neighbourhoods of a vertex set in the scaffold, compactifies each of them
(possibly adding auxiliary vertices to D), merges shadow vertices, and
re-indexes the bookkeeping sets to the shrunken matrix.

``calculate_extended_matrix`` runs a round on the original taxa, a round on
every current vertex, and then further rounds on vertices that appeared since
the previous round, until none appear.
"""

import logging
from typing import Iterable, NamedTuple, Optional, Set

import numpy as np

from cactusnet._compactify import compactify, prepare_neighborhoods
from cactusnet._config import RealizerConfig
from cactusnet._errors import ConvergenceError
from cactusnet._graph import WeightedGraph, complete_graph
from cactusnet._logging import (
    log_extension_round,
    log_extension_summary,
    log_neighborhoods,
)
from cactusnet._matrix import find_shadows, reindex_set, shrink_graph, shrink_matrix
from cactusnet._utils import as_distance_matrix


logger = logging.getLogger(__name__)


class ExtendResult(NamedTuple):
    D: np.ndarray
    existing: Set[int]
    compacted: Set[int]
    scaffold: WeightedGraph
    vertices: Set[int]


class ExtendedMatrix(NamedTuple):
    """Final product of the extension phase."""

    D: np.ndarray
    scaffold: WeightedGraph
    taxa: Set[int]
    existing: Set[int]
    compacted: Set[int]


def extend_once(
    D: np.ndarray,
    V: Iterable[int],
    existing: Iterable[int],
    compacted: Iterable[int],
    scaffold: WeightedGraph,
    config: Optional[RealizerConfig] = None,
    round_index: int = 0,
    label: str = "",
) -> ExtendResult:
    """
    Run one extension round seeded with the vertex set *V*.

    Parameters
    ----------
    D : ndarray (n, n)
        Current distance matrix; not modified.
    V : iterable of int
        Vertices whose neighbourhoods are processed.  Added to *existing*.
    existing, compacted : iterable of int
        Bookkeeping sets carried between rounds.
    scaffold : WeightedGraph
        Current scaffold; not modified.
    config : RealizerConfig, optional
    round_index, label
        Only used for log output.

    Returns
    -------
    ExtendResult
        New matrix, re-indexed ``existing``, ``compacted`` and ``vertices``
        (the re-indexed V), and the re-indexed scaffold.
    """
    if config is None:
        config = RealizerConfig()

    V = set(V)
    existing = set(existing) | V
    n_before = D.shape[0]

    prep = prepare_neighborhoods(V, scaffold)
    log_neighborhoods([tuple(sorted(h)) for h in prep.subsets], len(V))

    current = D
    comp = set(compacted)
    scaff = prep.pruned
    for hood in prep.subsets:
        current, comp, scaff = compactify(current, hood, comp, scaff, config)

    n_grown = current.shape[0]
    shadows = find_shadows(current, config.min_distance)
    shrunk = shrink_matrix(current, shadows)
    scaff = shrink_graph(n_grown, scaff, shadows)

    log_extension_round(round_index, label, len(V), n_before, n_grown, shadows)

    return ExtendResult(
        shrunk,
        reindex_set(existing, shadows),
        reindex_set(comp, shadows),
        scaff,
        reindex_set(V, shadows),
    )


def calculate_extended_matrix(
    D0, config: Optional[RealizerConfig] = None
) -> ExtendedMatrix:
    """
    Extend *D0* with auxiliary vertices until no new vertex appears.

    The scaffold starts as the unweighted complete graph on the taxa.

    Parameters
    ----------
    D0 : array-like (n, n)
        Symmetric, non-negative distance matrix with zero diagonal.  It is
        copied, never modified.
    config : RealizerConfig, optional

    Returns
    -------
    ExtendedMatrix
        Indices ``0..n-1`` of the result are the original taxa in input
        order; higher indices are auxiliary vertices.

    Raises
    ------
    ConvergenceError
        If more than ``config.max_rounds`` rounds would be needed.
    """
    if config is None:
        config = RealizerConfig()

    D = as_distance_matrix(D0)
    n = D.shape[0]
    taxa = set(range(n))
    scaffold = complete_graph(n)
    existing: Set[int] = set()
    compacted: Set[int] = set()
    rounds = 0

    def next_round(vertices, label):
        nonlocal D, existing, compacted, scaffold, rounds
        if rounds >= config.max_rounds:
            raise ConvergenceError(
                f"matrix extension did not converge within {config.max_rounds} "
                f"rounds ({D.shape[0]} vertices, {len(vertices)} pending)"
            )
        rounds += 1
        result = extend_once(
            D, vertices, existing, compacted, scaffold, config,
            round_index=rounds, label=label,
        )
        D, existing, compacted, scaffold = (
            result.D, result.existing, result.compacted, result.scaffold,
        )

    next_round(taxa, "taxa")
    next_round(set(range(D.shape[0])), "all")
    while True:
        new_vertices = set(range(D.shape[0])) - existing
        if not new_vertices:
            break
        next_round(new_vertices, "new")

    log_extension_summary(n, D.shape[0], rounds)
    return ExtendedMatrix(D, scaffold, taxa, existing, compacted)
