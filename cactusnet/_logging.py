"""
_logging.py
===========
Logging functions for cactusnet.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

Every logger lives under the 'cactusnet' namespace, so

    logging.getLogger('cactusnet').setLevel(logging.WARNING)

silences the INFO summaries of the whole package.
"""

import logging
from typing import List, Sequence, Set, Tuple


logger = logging.getLogger(__name__)


# ============================================================================ #
# Backend Logging
# ============================================================================ #


def log_backend_selection(backends_available: List[str], resolved: str) -> None:
    """
    Log which dominance backends exist and which one this run uses.

    Parameters
    ----------
    backends_available : List[str]
        Available backends in preference order.
    resolved : str
        Backend chosen for this run.
    """
    logger.debug("Available backends: %s", ", ".join(backends_available))
    if "cpu-parallel" not in backends_available:
        logger.debug("  cpu-parallel: unavailable (numba not installed)")
    logger.info("Dominance backend: %s", resolved)


# ============================================================================ #
# Auxiliary Vertex Logging
# ============================================================================ #


def log_auxiliary_accepted(x: int, y: int, z: int, slack: float, aux: int) -> None:
    logger.debug(
        "Auxiliary vertex %d added for x=%d (pair %d,%d), slack %.6g",
        aux, x, y, z, slack,
    )


def log_auxiliary_rejected(x: int, y: int, z: int, collides_with: int) -> None:
    logger.debug(
        "Auxiliary candidate for x=%d (pair %d,%d) rejected: coincides with vertex %d",
        x, y, z, collides_with,
    )


# ============================================================================ #
# Extension Round Logging
# ============================================================================ #


def log_neighborhoods(neighborhoods: Sequence[Tuple[int, ...]], n_vertices: int) -> None:
    """
    Log the neighbourhoods queued for compactification in one round.

    Parameters
    ----------
    neighborhoods : sequence of tuples
        Sorted vertex tuples, one per neighbourhood.
    n_vertices : int
        Number of vertices whose neighbourhoods were inspected.
    """
    logger.debug(
        "Prepared %d neighbourhood(s) from %d vertices", len(neighborhoods), n_vertices
    )
    for hood in neighborhoods:
        logger.debug("  neighbourhood %s", list(hood))


def log_worklist_step(step: int, active: Set[int], n_aux: int, queue_len: int) -> None:
    logger.debug(
        "Worklist step %d: %d active vertices, %d auxiliary, %d queued",
        step, len(active), n_aux, queue_len,
    )


def log_extension_round(
    round_index: int,
    label: str,
    n_processed: int,
    n_before: int,
    n_after_growth: int,
    shadows: List[int],
) -> None:
    """
    Log one extension round.

    Parameters
    ----------
    round_index : int
        1-based round counter.
    label : str
        Which driver stage ran the round ('taxa', 'all', 'new').
    n_processed : int
        Size of the vertex set the round was seeded with.
    n_before : int
        Matrix size when the round started.
    n_after_growth : int
        Matrix size after compactification, before shadows were merged.
    shadows : List[int]
        Shadow vertices removed at the end of the round.
    """
    n_added = n_after_growth - n_before
    logger.info(
        "Round %d (%s): %d vertices processed, %d auxiliary added, "
        "%d shadow(s) merged, matrix size %d",
        round_index, label, n_processed, n_added, len(shadows),
        n_after_growth - len(shadows),
    )
    if shadows:
        logger.debug("  shadow vertices: %s", shadows)


def log_extension_summary(n_taxa: int, n_final: int, rounds: int) -> None:
    logger.info(
        "Extended matrix: %d taxa -> %d vertices (%d auxiliary) after %d round(s)",
        n_taxa, n_final, n_final - n_taxa, rounds,
    )


# ============================================================================ #
# Realization Logging
# ============================================================================ #


def log_prune_summary(before: int, after: int) -> None:
    """Log how many complete-graph edges the pruning step removed."""
    logger.info("Pruned %d of %d edges (kept %d)", before - after, before, after)


def log_verification(mismatches: Sequence[tuple], n_pairs: int) -> None:
    """
    Log the outcome of a pairwise-distance check.

    Parameters
    ----------
    mismatches : sequence of (i, j, expected, observed)
        Pairs whose realized distance differs from the input.
    n_pairs : int
        Number of taxon pairs checked.
    """
    if not mismatches:
        logger.info("Verified %d taxon pair distances: all realized", n_pairs)
        return

    logger.warning(
        "%d of %d taxon pair distances are not realized", len(mismatches), n_pairs
    )
    for i, j, expected, observed in mismatches[:10]:
        logger.warning("  d(%d,%d): expected %.6g, graph gives %.6g", i, j, expected, observed)
    if len(mismatches) > 10:
        logger.warning("  ... %d more", len(mismatches) - 10)
