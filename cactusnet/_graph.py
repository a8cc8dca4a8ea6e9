"""
_graph.py
=========
Undirected, optionally weighted graph over the implicit vertex set 0..n-1.

Public API
----------
  UEdge(u, v)
      Canonical unordered edge key, stored as (min, max).  Self-loops raise
      InvalidArgumentError.  Ordered lexicographically by (u, v).

  WeightedGraph(n)
      Edge-centric graph: a dict mapping UEdge -> float weight, plus a vertex
      capacity ``n`` that is independent of which edges exist (isolated
      vertices are allowed and form singleton components).

  complete_graph(n)
      The unweighted complete graph K_n (every weight 1.0).

Design notes
------------
Edges are the primary storage.  A neighbour index is kept alongside so that
``degree`` and ``neighbors`` do not rescan the whole edge map; it is always
rebuilt from the edge map and never exposed.

``list_edges`` returns edges sorted by (u, v).  Every consumer that iterates
edges relies on this order for deterministic output.
"""

from collections import deque
from typing import Dict, Iterator, List, NamedTuple, Optional, Set

from cactusnet._errors import InvalidArgumentError


# ======================================================================== #
# Edge key                                                                  #
# ======================================================================== #


class _EdgePair(NamedTuple):
    u: int
    v: int


class UEdge(_EdgePair):
    """
    Unordered edge ``{u, v}`` stored as ``(min(u, v), max(u, v))``.

    Being a tuple, UEdge hashes and compares by value, and the natural tuple
    ordering is exactly the lexicographic (u, v) order.

    Examples
    --------
    >>> UEdge(3, 1) == UEdge(1, 3)
    True
    >>> UEdge(3, 1)
    UEdge(u=1, v=3)
    """

    __slots__ = ()

    def __new__(cls, u: int, v: int):
        u = int(u)
        v = int(v)
        if u == v:
            raise InvalidArgumentError(f"self-loop not allowed: ({u}, {v})")
        if u > v:
            u, v = v, u
        return super().__new__(cls, u, v)

    def __repr__(self) -> str:
        return f"UEdge(u={self.u}, v={self.v})"


# ======================================================================== #
# Graph                                                                     #
# ======================================================================== #


class WeightedGraph:
    """
    Undirected graph on vertices ``0..n-1`` with a weight per edge.

    Attributes
    ----------
    n : int   Vertex capacity.  Every stored edge has both endpoints < n.
    """

    def __init__(self, n: int) -> None:
        n = int(n)
        if n < 0:
            raise InvalidArgumentError(f"vertex count must be non-negative, got {n}")
        self.n: int = n
        self._weights: Dict[UEdge, float] = {}
        self._adjacency: Dict[int, Set[int]] = {}

    # ------------------------------------------------------------------ #
    # Mutation                                                             #
    # ------------------------------------------------------------------ #

    def put_edge(self, i: int, j: int, weight: float) -> UEdge:
        """Insert or replace edge ``{i, j}`` with *weight*."""
        edge = UEdge(i, j)
        if edge.v >= self.n:
            raise InvalidArgumentError(
                f"edge {tuple(edge)} out of range for graph with {self.n} vertices"
            )
        self._weights[edge] = float(weight)
        self._adjacency.setdefault(edge.u, set()).add(edge.v)
        self._adjacency.setdefault(edge.v, set()).add(edge.u)
        return edge

    def add_edge(self, i: int, j: int) -> UEdge:
        """Insert edge ``{i, j}`` with weight 1.0 (topology only)."""
        return self.put_edge(i, j, 1.0)

    def remove_edge(self, i: int, j: int) -> None:
        """Remove edge ``{i, j}`` if present; absent edges are ignored."""
        edge = UEdge(i, j)
        if self._weights.pop(edge, None) is None:
            return
        self._adjacency[edge.u].discard(edge.v)
        self._adjacency[edge.v].discard(edge.u)

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    def has_edge(self, i: int, j: int) -> bool:
        return UEdge(i, j) in self._weights

    def get_weight(self, i: int, j: int) -> Optional[float]:
        """Return the weight of ``{i, j}``, or None if the edge is absent."""
        return self._weights.get(UEdge(i, j))

    def weight(self, edge: UEdge) -> float:
        """Return the weight of a stored edge (KeyError if absent)."""
        return self._weights[edge]

    def neighbors(self, v: int) -> Set[int]:
        """Return a fresh set with the open neighbourhood of *v*."""
        return set(self._adjacency.get(v, ()))

    def degree(self, v: int) -> int:
        return len(self._adjacency.get(v, ()))

    def number_of_edges(self) -> int:
        return len(self._weights)

    def list_edges(self) -> List[UEdge]:
        """Return all edges sorted by (u, v)."""
        return sorted(self._weights)

    def node_list(self) -> List[int]:
        """Return the sorted list of vertices incident to at least one edge."""
        return sorted(v for v, nbrs in self._adjacency.items() if nbrs)

    def connected_components(self) -> List[Set[int]]:
        """
        Return the connected components under the current edges.

        Every vertex in ``0..n-1`` belongs to exactly one component; isolated
        vertices form singletons.  Components are listed in order of their
        smallest vertex.
        """
        seen = [False] * self.n
        components: List[Set[int]] = []
        for source in range(self.n):
            if seen[source]:
                continue
            component = set()
            queue = deque([source])
            seen[source] = True
            while queue:
                u = queue.popleft()
                component.add(u)
                for w in sorted(self._adjacency.get(u, ())):
                    if not seen[w]:
                        seen[w] = True
                        queue.append(w)
            components.append(component)
        return components

    # ------------------------------------------------------------------ #
    # Copies                                                               #
    # ------------------------------------------------------------------ #

    def copy(self) -> "WeightedGraph":
        """Return an independent copy with the same capacity and edges."""
        return self.resized(self.n)

    def resized(self, n: int) -> "WeightedGraph":
        """
        Return a copy with vertex capacity *n*.

        Raises InvalidArgumentError if an existing edge would fall outside
        the new capacity.
        """
        g = WeightedGraph(n)
        for edge, w in self._weights.items():
            g.put_edge(edge.u, edge.v, w)
        return g

    def ensure_nodes(self, required_n: int) -> "WeightedGraph":
        """Return ``self`` if it already holds *required_n* vertices, else a grown copy."""
        if self.n >= required_n:
            return self
        return self.resized(required_n)

    # ------------------------------------------------------------------ #
    # Dunder helpers                                                       #
    # ------------------------------------------------------------------ #

    def __iter__(self) -> Iterator[UEdge]:
        return iter(self.list_edges())

    def __len__(self) -> int:
        return len(self._weights)

    def __contains__(self, edge) -> bool:
        return UEdge(*edge) in self._weights

    def __eq__(self, other) -> bool:
        if not isinstance(other, WeightedGraph):
            return NotImplemented
        return self.n == other.n and self._weights == other._weights

    def __repr__(self) -> str:
        return f"WeightedGraph(n={self.n}, edges={len(self._weights)})"


def complete_graph(n: int) -> WeightedGraph:
    """Return the unweighted complete graph on ``n`` vertices."""
    g = WeightedGraph(n)
    for i in range(n):
        for j in range(i + 1, n):
            g.add_edge(i, j)
    return g
