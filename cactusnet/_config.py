"""
_config.py
==========
Run-level configuration for the realization engine.

The tolerances are explicit values threaded into every function that reads
them; there is no module-level mutable tolerance state.

Environment variables
---------------------
``RealizerConfig.from_env()`` reads:

  CACTUS_EPSILON        domination / triangle-tightness tolerance
  CACTUS_MIN_DISTANCE   near-zero tolerance for shadow detection

A value that cannot be parsed as a float is ignored: the default is used and
a ToleranceWarning is emitted.
"""

import logging
import math
import os
import warnings
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from cactusnet._errors import InvalidArgumentError, ToleranceWarning


logger = logging.getLogger(__name__)


DEFAULT_EPSILON = 1e-12
DEFAULT_MIN_DISTANCE = 1e-12
DEFAULT_MAX_ROUNDS = 1000
DEFAULT_MAX_WORKLIST = 100_000

ENV_EPSILON = "CACTUS_EPSILON"
ENV_MIN_DISTANCE = "CACTUS_MIN_DISTANCE"


@dataclass(frozen=True)
class RealizerConfig:
    """
    Tolerances, safety bounds and backend choice for one realization run.

    Attributes
    ----------
    epsilon : float
        Slack allowed in ``D[i,k] + D[k,j] <= D[i,j] + epsilon`` domination
        tests.  1e-12 is faithful to exact input; noisy real data usually
        wants 1e-6 or 1e-7.
    min_distance : float
        Distances with absolute value at most this are treated as zero when
        detecting shadow vertices.
    max_rounds : int
        Maximum number of extension rounds in the fixed-point loop.
    max_worklist : int
        Maximum number of vertex subsets one compactification may dequeue.
    backend : str
        Backend for the dominance scans: 'python', 'cpu-parallel' or 'best'.
    """

    epsilon: float = DEFAULT_EPSILON
    min_distance: float = DEFAULT_MIN_DISTANCE
    max_rounds: int = DEFAULT_MAX_ROUNDS
    max_worklist: int = DEFAULT_MAX_WORKLIST
    backend: str = "best"

    def __post_init__(self) -> None:
        for name in ("epsilon", "min_distance"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or math.isnan(value) or value < 0:
                raise InvalidArgumentError(
                    f"{name} must be a non-negative number, got {value!r}"
                )
        for name in ("max_rounds", "max_worklist"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise InvalidArgumentError(
                    f"{name} must be a positive integer, got {value!r}"
                )

    def with_options(self, **changes) -> "RealizerConfig":
        """Return a copy with the given fields replaced (None values are ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides
    ) -> "RealizerConfig":
        """
        Build a config from ``CACTUS_EPSILON`` / ``CACTUS_MIN_DISTANCE``.

        Parameters
        ----------
        environ : mapping, optional
            Source of variables; defaults to ``os.environ``.
        **overrides
            Explicit field values that win over the environment.
        """
        if environ is None:
            environ = os.environ
        epsilon = parse_tolerance(environ.get(ENV_EPSILON), DEFAULT_EPSILON, ENV_EPSILON)
        min_distance = parse_tolerance(
            environ.get(ENV_MIN_DISTANCE), DEFAULT_MIN_DISTANCE, ENV_MIN_DISTANCE
        )
        base = cls(epsilon=epsilon, min_distance=min_distance)
        return base.with_options(**overrides)


def parse_tolerance(raw: Optional[str], default: float, name: str) -> float:
    """
    Parse a tolerance string, falling back to *default* on bad input.

    Examples
    --------
    >>> parse_tolerance("1e-6", 1e-12, "CACTUS_EPSILON")
    1e-06
    >>> parse_tolerance(None, 1e-12, "CACTUS_EPSILON")
    1e-12
    """
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if math.isnan(value) or value < 0:
        message = f"Ignoring invalid {name}={raw!r}; using default {default:g}"
        logger.warning(message)
        warnings.warn(message, ToleranceWarning, stacklevel=3)
        return default
    return value
