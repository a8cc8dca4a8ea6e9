"""
_io.py
======
Text formats for distance matrices and realized graphs.

Distance matrix (CSV)
---------------------
    n
    d00,d01,...,d0(n-1)
    ...
    d(n-1)0,...,d(n-1)(n-1)

Lines starting with '#' and blank lines are ignored.

Edge list
---------
    # u, v, weight
    0, 4, 2
    1, 4, 3
    ...

Edges are written in (u, v) order with weights formatted by
:func:`cactusnet._utils.format_weight`.
"""

import sys
from contextlib import contextmanager
from typing import List, Optional

import numpy as np

from cactusnet._errors import InputFormatError
from cactusnet._graph import WeightedGraph
from cactusnet._utils import format_weight


EDGE_LIST_HEADER = "# u, v, weight"


@contextmanager
def _open_text(target, mode: str):
    """Yield a text stream for a path or pass an already-open stream through."""
    if hasattr(target, "read" if "r" in mode else "write"):
        yield target
    else:
        with open(target, mode, encoding="utf-8", newline="") as fh:
            yield fh


def _content_lines(fh) -> List[str]:
    lines = (line.strip() for line in fh)
    return [line for line in lines if line and not line.startswith("#")]


# ======================================================================== #
# Distance matrices                                                         #
# ======================================================================== #


def read_distance_csv(source) -> np.ndarray:
    """
    Read an ``n x n`` distance matrix in the CSV format described above.

    Parameters
    ----------
    source : str | os.PathLike | text stream

    Returns
    -------
    ndarray[float64] (n, n)

    Raises
    ------
    InputFormatError
        Empty input, a bad size line, the wrong number of rows, the wrong
        number of tokens in a row, or a non-numeric token.
    """
    with _open_text(source, "r") as fh:
        lines = _content_lines(fh)

    if not lines:
        raise InputFormatError("Input file is empty")
    try:
        n = int(lines[0])
    except ValueError:
        raise InputFormatError(
            f"First line must be the matrix size, got {lines[0]!r}"
        ) from None
    if n < 0:
        raise InputFormatError(f"Matrix size must be non-negative, got {n}")
    if len(lines) != n + 1:
        raise InputFormatError(
            f"Input file has wrong number of lines: expected {n} rows, "
            f"got {len(lines) - 1}"
        )

    D = np.zeros((n, n), dtype=np.float64)
    for i, line in enumerate(lines[1:]):
        tokens = line.split(",")
        if len(tokens) != n:
            raise InputFormatError(
                f"Input line {i + 1} has wrong number of tokens: "
                f"expected {n}, got {len(tokens)}"
            )
        try:
            D[i] = [float(token) for token in tokens]
        except ValueError as exc:
            raise InputFormatError(f"Input line {i + 1}: {exc}") from None
    return D


def write_distance_csv(D, target) -> None:
    """Write *D* in the CSV format read by :func:`read_distance_csv`."""
    D = np.asarray(D, dtype=np.float64)
    with _open_text(target, "w") as fh:
        fh.write(f"{D.shape[0]}\n")
        for row in D:
            fh.write(",".join(format_weight(float(x)) for x in row) + "\n")


# ======================================================================== #
# Edge lists                                                                #
# ======================================================================== #


def write_edge_list(graph: WeightedGraph, target=None) -> None:
    """
    Write *graph* as ``u, v, weight`` lines.

    Parameters
    ----------
    graph : WeightedGraph
    target : path, text stream, or None
        None writes to ``sys.stdout``.
    """
    if target is None:
        target = sys.stdout
    with _open_text(target, "w") as fh:
        fh.write(EDGE_LIST_HEADER + "\n")
        for edge in graph.list_edges():
            fh.write(f"{edge.u}, {edge.v}, {format_weight(graph.weight(edge))}\n")


def read_edge_list(source, n: Optional[int] = None) -> WeightedGraph:
    """
    Read a graph written by :func:`write_edge_list`.

    Parameters
    ----------
    source : path or text stream
    n : int, optional
        Vertex capacity; defaults to one more than the largest endpoint.
    """
    with _open_text(source, "r") as fh:
        lines = _content_lines(fh)

    triples = []
    for lineno, line in enumerate(lines, start=1):
        tokens = [t.strip() for t in line.split(",")]
        if len(tokens) != 3:
            raise InputFormatError(
                f"Edge line {lineno} must have 3 fields, got {len(tokens)}"
            )
        try:
            triples.append((int(tokens[0]), int(tokens[1]), float(tokens[2])))
        except ValueError as exc:
            raise InputFormatError(f"Edge line {lineno}: {exc}") from None

    if n is None:
        n = 1 + max((max(u, v) for u, v, _ in triples), default=-1)
    graph = WeightedGraph(n)
    for u, v, w in triples:
        graph.put_edge(u, v, w)
    return graph
