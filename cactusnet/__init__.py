"""
cactusnet
=========

Realize a metric as a weighted network.

Given a symmetric, non-negative distance matrix over n taxa, *cactusnet*
builds a weighted undirected graph whose vertices ``0..n-1`` are the taxa
(plus auxiliary vertices numbered from n) and whose shortest-path
distances between taxa reproduce the input.  Tree-like data yields a
tree; data with cyclic structure yields a graph with cycles.

The matrix is first extended with auxiliary vertices by repeated local
compactification of vertex neighbourhoods; the complete graph on the
extended matrix is then pruned of every edge that a two-hop path
realizes at least as well.

Main Classes
------------
CactusRealizer : Run the full pipeline with a given configuration
RealizerConfig : Tolerances, safety bounds and backend choice
WeightedGraph : Undirected weighted graph used for scaffolds and results
UEdge : Canonical undirected edge ``(min, max)``

Pipeline Functions
------------------
realize : One-shot ``CactusRealizer(...).run(D)``
calculate_extended_matrix : Extension phase only
build_complete, prune_redundant_edges : Final realization phase
slack_and_pair, insert_auxiliaries : Slack and auxiliary vertices
find_shadows, reindex_set : Shadow merging

I/O and Verification
--------------------
read_distance_csv, write_distance_csv : Distance-matrix CSV files
write_edge_list, read_edge_list : ``u, v, weight`` edge lists
check_pairwise_distances, to_networkx : Shortest-path verification

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
suppress_warnings : Suppress specific warnings
use_backend : Force specific computational backend

Backend Information
-------------------
get_available_backends : Query available computational backends
get_backend_info : Get comprehensive backend status
check_numba_available : Check if numba is available

Examples
--------
Basic usage:

>>> from cactusnet import realize
>>> D = [[0, 2, 2, 2], [2, 0, 2, 2], [2, 2, 0, 2], [2, 2, 2, 0]]
>>> g = realize(D)
>>> [(e.u, e.v, g.weight(e)) for e in g.list_edges()]
[(0, 4, 1.0), (1, 4, 1.0), (2, 4, 1.0), (3, 4, 1.0)]

With context managers:

>>> from cactusnet import quiet, use_backend
>>> with quiet(), use_backend('python'):
...     g = realize(D)
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes
from ._realizer import CactusRealizer, realize, build_complete, prune_redundant_edges
from ._config import RealizerConfig
from ._graph import WeightedGraph, UEdge, complete_graph
from ._extend import ExtendedMatrix, calculate_extended_matrix, extend_once

# Algorithm building blocks
from ._slack import slack_and_pair, insert_auxiliaries
from ._matrix import find_shadows, reindex_set, shrink_matrix, shrink_graph
from ._compactify import (
    build_graph_piece,
    handle_post_build,
    prepare_neighborhoods,
    compactify,
)

# Errors
from ._errors import (
    CactusError,
    InputFormatError,
    InvalidArgumentError,
    ConvergenceError,
    ToleranceWarning,
)

# I/O and verification
from ._io import read_distance_csv, write_distance_csv, write_edge_list, read_edge_list
from ._utils import format_weight, round5
from ._verify import check_pairwise_distances, to_networkx

# Context managers (user-facing utilities)
from ._context import (
    suppress_logger,
    quiet,
    suppress_warnings,
    use_backend,
)

# Backend information (useful for checking capabilities)
from ._backend import (
    get_available_backends,
    get_backend_info,
    check_numba_available,
)

# Public API
__all__ = [
    # Main classes
    "CactusRealizer",
    "RealizerConfig",
    "WeightedGraph",
    "UEdge",
    "ExtendedMatrix",
    # Pipeline
    "realize",
    "calculate_extended_matrix",
    "extend_once",
    "build_complete",
    "prune_redundant_edges",
    "complete_graph",
    "slack_and_pair",
    "insert_auxiliaries",
    "find_shadows",
    "reindex_set",
    "shrink_matrix",
    "shrink_graph",
    "build_graph_piece",
    "handle_post_build",
    "prepare_neighborhoods",
    "compactify",
    # Errors
    "CactusError",
    "InputFormatError",
    "InvalidArgumentError",
    "ConvergenceError",
    "ToleranceWarning",
    # I/O and verification
    "read_distance_csv",
    "write_distance_csv",
    "write_edge_list",
    "read_edge_list",
    "format_weight",
    "round5",
    "check_pairwise_distances",
    "to_networkx",
    # Context managers
    "suppress_logger",
    "quiet",
    "suppress_warnings",
    "use_backend",
    # Backend information
    "get_available_backends",
    "get_backend_info",
    "check_numba_available",
    # Version info
    "__version__",
]
