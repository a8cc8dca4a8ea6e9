"""
_realizer.py
============
Final realization: complete graph on the extended matrix, pruned of every
edge that a two-hop path realizes at least as well.

Public API
----------
  build_complete(D) -> WeightedGraph
  prune_redundant_edges(D, g, epsilon) -> WeightedGraph
  CactusRealizer(config=None, **options)
      .extend(D) -> ExtendedMatrix
      .run(D)    -> WeightedGraph
  realize(D, config=None, **options) -> WeightedGraph

Output contract
---------------
Vertices ``0..n-1`` of the returned graph are the input taxa in input order
(unless two taxa coincide exactly and one was merged away as a shadow);
vertices ``>= n`` are auxiliary and carry no label.
"""

import logging
from typing import Optional

import numpy as np

from cactusnet._backend import get_available_backends, select_backend
from cactusnet._config import DEFAULT_EPSILON, RealizerConfig
from cactusnet._dominance import dominance_mask
from cactusnet._errors import InvalidArgumentError
from cactusnet._extend import ExtendedMatrix, calculate_extended_matrix
from cactusnet._graph import WeightedGraph
from cactusnet._logging import log_backend_selection, log_prune_summary
from cactusnet._utils import as_distance_matrix, round5


logger = logging.getLogger(__name__)


# ======================================================================== #
# Complete graph -> prune                                                   #
# ======================================================================== #


def build_complete(D) -> WeightedGraph:
    """
    Return the complete graph on *D* with weights ``round5(D[i, j])``.

    Examples
    --------
    >>> g = build_complete([[0, 1, 2], [1, 0, 1], [2, 1, 0]])
    >>> [(e.u, e.v, g.weight(e)) for e in g.list_edges()]
    [(0, 1, 1.0), (0, 2, 2.0), (1, 2, 1.0)]
    """
    D = np.asarray(D, dtype=np.float64)
    n = D.shape[0]
    graph = WeightedGraph(n)
    for i in range(n):
        for j in range(i + 1, n):
            graph.put_edge(i, j, round5(float(D[i, j])))
    return graph


def prune_redundant_edges(
    D,
    g: WeightedGraph,
    epsilon: float = DEFAULT_EPSILON,
    backend: str = "best",
) -> WeightedGraph:
    """
    Return a copy of *g* without the edges dominated by a two-hop path.

    Edge ``(i, j)`` is redundant if some ``k not in {i, j}`` has
    ``D[i,k] > 0``, ``D[k,j] > 0`` and ``D[i,k] + D[k,j] <= D[i,j] + epsilon``.
    Every test reads D only, so the result does not depend on the order in
    which edges are examined.  O(n^3).

    Raises
    ------
    InvalidArgumentError
        If *g* has an edge outside the vertex range of *D*.
    """
    D = np.asarray(D, dtype=np.float64)
    n = D.shape[0]
    pruned = g.copy()
    edges = g.list_edges()
    if any(edge.v >= n for edge in edges):
        raise InvalidArgumentError(
            f"graph has edges outside the {n}x{n} distance matrix"
        )

    dominated = dominance_mask(D, range(n), epsilon, strict=True, backend=backend)
    for edge in edges:
        if dominated[edge.u, edge.v]:
            pruned.remove_edge(edge.u, edge.v)
    return pruned


# ======================================================================== #
# Orchestrator                                                              #
# ======================================================================== #


class CactusRealizer:
    """
    Realize a distance matrix as a weighted graph.

    The pipeline is: extend the matrix with auxiliary vertices
    (:func:`calculate_extended_matrix`), build the complete graph on the
    extended matrix, then prune dominated edges.

    Parameters
    ----------
    config : RealizerConfig, optional
        Tolerances, safety bounds and backend.  Defaults to RealizerConfig().
    **options
        Field overrides applied on top of *config* (e.g. ``epsilon=1e-6``).

    Examples
    --------
    >>> D = [[0, 2, 2, 2], [2, 0, 2, 2], [2, 2, 0, 2], [2, 2, 2, 0]]
    >>> g = CactusRealizer().run(D)
    >>> [(e.u, e.v, g.weight(e)) for e in g.list_edges()]
    [(0, 4, 1.0), (1, 4, 1.0), (2, 4, 1.0), (3, 4, 1.0)]
    """

    def __init__(self, config: Optional[RealizerConfig] = None, **options) -> None:
        if config is None:
            config = RealizerConfig()
        self.config = config.with_options(**options)

    def extend(self, D) -> ExtendedMatrix:
        """Run only the extension phase and return its full result."""
        return calculate_extended_matrix(D, self.config)

    def run(self, D) -> WeightedGraph:
        """Extend *D*, then build and prune the complete graph on the result."""
        D = as_distance_matrix(D)
        log_backend_selection(get_available_backends(), select_backend(self.config.backend))

        extended = self.extend(D).D
        graph = build_complete(extended)
        before = graph.number_of_edges()
        graph = prune_redundant_edges(
            extended, graph, self.config.epsilon, backend=self.config.backend
        )
        log_prune_summary(before, graph.number_of_edges())
        return graph

    def __repr__(self) -> str:
        return f"CactusRealizer({self.config!r})"


def realize(D, config: Optional[RealizerConfig] = None, **options) -> WeightedGraph:
    """Convenience wrapper for ``CactusRealizer(config, **options).run(D)``."""
    return CactusRealizer(config, **options).run(D)
