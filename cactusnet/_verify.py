"""
_verify.py
==========
Check that a realized graph reproduces the input distances.

Shortest paths are computed with networkx (Dijkstra from every taxon).
This is a collaborator for tests and the CLI ``--verify`` flag; the
realization engine itself never calls it.
"""

import math
from typing import List, Optional, Tuple

import networkx as nx

from cactusnet._errors import InvalidArgumentError
from cactusnet._graph import WeightedGraph
from cactusnet._logging import log_verification
from cactusnet._utils import as_distance_matrix


Mismatch = Tuple[int, int, float, float]


def to_networkx(graph: WeightedGraph) -> nx.Graph:
    """Return a ``networkx.Graph`` with nodes ``0..n-1`` and a 'weight' per edge."""
    G = nx.Graph()
    G.add_nodes_from(range(graph.n))
    for edge in graph.list_edges():
        G.add_edge(edge.u, edge.v, weight=graph.weight(edge))
    return G


def shortest_path_matrix(graph: WeightedGraph, n_taxa: Optional[int] = None):
    """
    Return shortest-path distances among the first *n_taxa* vertices.

    Unreachable pairs are ``inf``.  The result is a list of lists.
    """
    n = graph.n if n_taxa is None else n_taxa
    if n > graph.n:
        raise InvalidArgumentError(
            f"graph has {graph.n} vertices, cannot check {n} taxa"
        )
    G = to_networkx(graph)
    rows = []
    for i in range(n):
        lengths = nx.single_source_dijkstra_path_length(G, i, weight="weight")
        rows.append([float(lengths.get(j, math.inf)) for j in range(n)])
    return rows


def check_pairwise_distances(
    graph: WeightedGraph, D, tolerance: float = 1e-6
) -> List[Mismatch]:
    """
    Compare graph shortest-path distances with *D* on the taxa of *D*.

    Parameters
    ----------
    graph : WeightedGraph
        Realized graph; vertices ``0..len(D)-1`` must be the taxa.
    D : array-like (n, n)
        Input distance matrix.
    tolerance : float
        Allowed absolute difference.

    Returns
    -------
    list of (i, j, expected, observed)
        One entry per pair ``i < j`` whose distances differ by more than
        *tolerance*.  Empty when the graph realizes D.
    """
    D = as_distance_matrix(D)
    n = D.shape[0]
    observed = shortest_path_matrix(graph, n)

    mismatches = []
    for i in range(n):
        for j in range(i + 1, n):
            expected = float(D[i, j])
            got = observed[i][j]
            if not abs(got - expected) <= tolerance:
                mismatches.append((i, j, expected, got))

    log_verification(mismatches, n * (n - 1) // 2)
    return mismatches
