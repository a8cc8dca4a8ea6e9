"""
_compactify.py
==============
Local compactification of vertex neighbourhoods.

Terminology
-----------
K-minus
    Graph on an active vertex subset P keeping only the pairs that are not
    dominated by a two-hop path through another member of P.
graph piece
    Edges of K-minus incident to vertices of K-minus degree <= 2.  Those
    vertices are *compacted* (finalized) and their edges move into the
    scaffold.
scaffold
    Global graph accumulating every locally finalized edge.  It carries
    topology only; all weights are 1.0.

Public API
----------
  build_graph_piece(D, V, V_aux, compacted, epsilon) -> GraphPiece
  handle_post_build(processed, compacted, previous_size, k_minus, scaffold)
      -> PostBuildResult
  prepare_neighborhoods(V, graph) -> Neighborhoods
  compactify(D, V_initial, compacted, scaffold, config) -> CompactResult

Every function returns fresh sets and graphs; none of the arguments is
modified.
"""

import logging
from collections import deque
from itertools import combinations
from typing import FrozenSet, Iterable, List, NamedTuple, Optional, Set

import numpy as np

from cactusnet._config import RealizerConfig
from cactusnet._dominance import dominance_mask
from cactusnet._errors import ConvergenceError
from cactusnet._graph import WeightedGraph
from cactusnet._logging import log_worklist_step
from cactusnet._slack import insert_auxiliaries


logger = logging.getLogger(__name__)


# ======================================================================== #
# Result types                                                              #
# ======================================================================== #


class GraphPiece(NamedTuple):
    graph_piece: WeightedGraph
    k_minus: WeightedGraph
    processed: Set[int]
    compacted: Set[int]
    previous_size: int


class PostBuildResult(NamedTuple):
    compacted: Set[int]
    k_minus: WeightedGraph
    scaffold: WeightedGraph
    stop: bool


class Neighborhoods(NamedTuple):
    subsets: List[FrozenSet[int]]
    pruned: WeightedGraph


class CompactResult(NamedTuple):
    D: np.ndarray
    compacted: Set[int]
    scaffold: WeightedGraph


# ======================================================================== #
# Local compactifier                                                        #
# ======================================================================== #


def build_graph_piece(
    D: np.ndarray,
    V: Iterable[int],
    V_aux: Iterable[int],
    compacted: Iterable[int],
    epsilon: float,
    backend: str = "best",
) -> GraphPiece:
    """
    Build K-minus on ``P = V | V_aux`` and finalize its low-degree vertices.

    Every vertex of P with K-minus degree <= 2 joins the compacted set and,
    if it has any K-minus edges, those edges are copied into the graph piece.
    Afterwards all K-minus edges touching a compacted vertex are removed.

    Returns
    -------
    GraphPiece
        ``previous_size`` is the size of *compacted* before this call, used
        by :func:`handle_post_build` to detect a stalled round.
    """
    processed = set(V) | set(V_aux)
    members = sorted(processed)
    n = D.shape[0]

    dominated = dominance_mask(D, members, epsilon, strict=False, backend=backend)
    k_minus = WeightedGraph(n)
    for a, b in combinations(range(len(members)), 2):
        if not dominated[a, b]:
            k_minus.add_edge(members[a], members[b])

    compacted_out = set(compacted)
    previous_size = len(compacted_out)

    graph_piece = WeightedGraph(n)
    for x in members:
        if k_minus.degree(x) <= 2:
            compacted_out.add(x)
            for nb in sorted(k_minus.neighbors(x)):
                graph_piece.add_edge(x, nb)

    for v in sorted(compacted_out):
        for nb in k_minus.neighbors(v):
            k_minus.remove_edge(v, nb)

    return GraphPiece(graph_piece, k_minus, processed, compacted_out, previous_size)


def handle_post_build(
    processed: Set[int],
    compacted: Set[int],
    previous_size: int,
    k_minus: WeightedGraph,
    scaffold: WeightedGraph,
) -> PostBuildResult:
    """
    Resolve a round in which no vertex was newly compacted.

    If *compacted* grew, nothing changes.  Otherwise, with
    ``T = processed - compacted``:

    - T non-empty: all of *processed* is marked compacted and every K-minus
      edge inside T moves into the scaffold as-is.
    - T empty: ``stop`` is set; the subset has no residual work.
    """
    compacted = set(compacted)
    k_minus = k_minus.copy()
    scaffold = scaffold.copy()
    stop = False

    if len(compacted) == previous_size:
        remaining = processed - compacted
        if remaining:
            compacted |= processed
            for x, y in combinations(sorted(remaining), 2):
                if k_minus.has_edge(x, y):
                    k_minus.remove_edge(x, y)
                    scaffold.add_edge(x, y)
        else:
            stop = True

    return PostBuildResult(compacted, k_minus, scaffold, stop)


# ======================================================================== #
# Compactification engine                                                   #
# ======================================================================== #


def prepare_neighborhoods(V: Iterable[int], graph: WeightedGraph) -> Neighborhoods:
    """
    Collect the closed neighbourhoods of high-degree vertices and clear them.

    For every x in V with degree >= 3 in *graph*, ``{x} | neighbors(x)`` is
    one subset to compactify, and all edges with both endpoints inside it
    are deleted from a working copy.  Degrees are always read from the
    unmodified *graph*.

    Returns
    -------
    Neighborhoods
        Distinct subsets in ascending order of their sorted members, and the
        pruned working copy.
    """
    pruned = graph.copy()
    found = set()

    for x in sorted(V):
        if graph.degree(x) <= 2:
            continue
        hood = frozenset(graph.neighbors(x) | {x})
        found.add(hood)
        for y, z in combinations(sorted(hood), 2):
            pruned.remove_edge(y, z)

    subsets = sorted(found, key=lambda s: sorted(s))
    return Neighborhoods(subsets, pruned)


def compactify(
    D: np.ndarray,
    V_initial: Iterable[int],
    compacted: Iterable[int],
    scaffold: WeightedGraph,
    config: Optional[RealizerConfig] = None,
) -> CompactResult:
    """
    Run the compactification worklist seeded with *V_initial*.

    Each dequeued subset goes through auxiliary insertion (which may grow
    D), K-minus construction and post-build handling.  Unless the subset is
    finished, single-edge components of the residual K-minus move to the
    scaffold, components of size >= 3 are queued again, and every other
    vertex of residual degree <= 2 is marked compacted.

    Raises
    ------
    ConvergenceError
        If more than ``config.max_worklist`` subsets are dequeued.
    """
    if config is None:
        config = RealizerConfig()

    queue = deque([set(V_initial)])
    current = np.array(D, dtype=np.float64, copy=True)
    comp = set(compacted)
    scaff = scaffold.copy()
    steps = 0

    while queue:
        steps += 1
        if steps > config.max_worklist:
            raise ConvergenceError(
                f"compactification did not converge within {config.max_worklist} "
                f"worklist steps ({current.shape[0]} vertices)"
            )
        active = queue.popleft()

        current, aux = insert_auxiliaries(current, active)
        log_worklist_step(steps, active, len(aux), len(queue))

        piece = build_graph_piece(
            current, active, aux, comp, config.epsilon, backend=config.backend
        )
        scaff = scaff.ensure_nodes(current.shape[0])
        for edge in piece.graph_piece.list_edges():
            scaff.add_edge(edge.u, edge.v)

        post = handle_post_build(
            piece.processed, piece.compacted, piece.previous_size, piece.k_minus, scaff
        )
        comp = post.compacted
        scaff = post.scaffold
        if post.stop:
            continue

        k_minus = post.k_minus
        components = k_minus.connected_components()
        for cc in components:
            if len(cc) == 2:
                x, y = sorted(cc)
                if k_minus.has_edge(x, y):
                    k_minus.remove_edge(x, y)
                    scaff.add_edge(x, y)

        nontrivial = [cc for cc in components if len(cc) >= 3]
        queue.extend(nontrivial)

        in_nontrivial = set().union(*nontrivial)
        for v in range(current.shape[0]):
            if v not in in_nontrivial and k_minus.degree(v) <= 2:
                comp.add(v)

    return CompactResult(current, comp, scaff)
