"""Command-line interface for cactusnet."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cactusnet._backend import get_available_backends
from cactusnet._config import RealizerConfig
from cactusnet._context import suppress_warnings
from cactusnet._errors import CactusError, ToleranceWarning
from cactusnet._io import read_distance_csv, write_edge_list
from cactusnet._realizer import CactusRealizer
from cactusnet._verify import check_pairwise_distances

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cactusnet",
        description=(
            "Realize a distance matrix as a weighted network whose "
            "shortest-path distances between taxa match the input."
        ),
    )
    parser.add_argument("input", type=Path, help="Distance matrix CSV (first line: n)")
    parser.add_argument(
        "output",
        type=Path,
        nargs="?",
        default=None,
        help="Edge list output file (default: stdout)",
    )
    parser.add_argument(
        "--epsilon",
        type=float,
        default=None,
        help="Domination tolerance (default: $CACTUS_EPSILON or 1e-12)",
    )
    parser.add_argument(
        "--min-distance",
        type=float,
        default=None,
        help="Shadow-merge threshold (default: $CACTUS_MIN_DISTANCE or 1e-12)",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        default=None,
        help="Abort if the extension needs more rounds than this",
    )
    parser.add_argument(
        "--backend",
        choices=["best", "python", "cpu-parallel"],
        default=None,
        help="Dominance-scan backend (default: best)",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Check the result with shortest paths; exit 1 on any mismatch",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    verbosity.add_argument(
        "--quiet", "-q", action="store_true", help="Only log errors"
    )
    return parser


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)
    logging.getLogger("cactusnet").setLevel(level)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``cactusnet`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``,
            ``sys.argv`` is used.

    Returns:
        Process exit code: 0 on success, 1 on an input, convergence or
        verification failure.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    if args.backend is not None and args.backend != "best":
        if args.backend not in get_available_backends():
            parser.error(f"backend '{args.backend}' is not available")

    try:
        # a bad tolerance is already reported through the logger
        with suppress_warnings(ToleranceWarning):
            config = RealizerConfig.from_env(
                epsilon=args.epsilon,
                min_distance=args.min_distance,
                max_rounds=args.max_rounds,
                backend=args.backend,
            )
        D = read_distance_csv(args.input)
        logger.info("Read %dx%d distance matrix from %s", D.shape[0], D.shape[0], args.input)

        graph = CactusRealizer(config).run(D)

        if args.output is None:
            write_edge_list(graph, sys.stdout)
        else:
            write_edge_list(graph, args.output)
            logger.info("Wrote %d edges to %s", graph.number_of_edges(), args.output)

        if args.verify and check_pairwise_distances(graph, D):
            print("Error: realized graph does not reproduce the input distances",
                  file=sys.stderr)
            return 1
    except (CactusError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
