"""
_context.py
===========
Scoped overrides for a realization run.

  suppress_logger(name, level)   raise one logger's threshold
  quiet(level)                   the same for the whole 'cactusnet' tree
  suppress_warnings(category)    drop a warning category, e.g. the
                                 ToleranceWarning the CLI already logs
  use_backend(name)              pin the dominance-scan backend

The previous state comes back when the block exits, also on error.
"""

import logging
import warnings
from contextlib import contextmanager
from typing import Optional, Type


# Set by use_backend, read by _backend.select_backend
_backend_override = None


# ============================================================================ #
# Logging
# ============================================================================ #


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Set *logger_name* to *level* for the duration of the block.

    Parameters
    ----------
    logger_name : str
        For example 'cactusnet._extend' (round summaries) or
        'cactusnet._compactify' (worklist debug lines).
    level : int, default logging.CRITICAL

    Examples
    --------
    >>> # Hide the per-round summaries but keep the prune summary
    >>> with suppress_logger('cactusnet._extend'):
    ...     graph = realize(D)
    """
    logger = logging.getLogger(logger_name)
    saved = logger.level
    logger.setLevel(level)
    try:
        yield
    finally:
        logger.setLevel(saved)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Silence the whole package below *level*.

    >>> with quiet(logging.WARNING):
    ...     graph = realize(D)
    """
    with suppress_logger("cactusnet", level):
        yield


# ============================================================================ #
# Warnings
# ============================================================================ #


@contextmanager
def suppress_warnings(category: Optional[Type[Warning]] = None):
    """
    Ignore warnings of *category* (every warning if None) inside the block.

    The command-line entry point wraps configuration loading in this; a
    rejected tolerance still reaches the log.

    Examples
    --------
    >>> from cactusnet import ToleranceWarning
    >>> with suppress_warnings(ToleranceWarning):
    ...     config = RealizerConfig.from_env()
    """
    with warnings.catch_warnings():
        if category is None:
            warnings.simplefilter("ignore")
        else:
            warnings.filterwarnings("ignore", category=category)
        yield


# ============================================================================ #
# Backend
# ============================================================================ #


@contextmanager
def use_backend(backend: str):
    """
    Pin the backend used by the K-minus and pruning dominance scans.

    The name is checked on entry with ``resolve_backend``, so an unavailable
    backend raises ``ValueError`` before the block runs.  'best' is stored
    as given and resolved at each scan.

    Examples
    --------
    >>> with use_backend('python'):
    ...     graph = realize(D)

    Notes
    -----
    The override is module state and is shared by every thread.  Use
    ``RealizerConfig(backend=...)`` for per-run selection in threaded code.
    """
    global _backend_override

    from cactusnet._backend import resolve_backend

    resolve_backend(backend)
    saved = _backend_override
    _backend_override = backend
    try:
        yield
    finally:
        _backend_override = saved


def get_backend_override() -> Optional[str]:
    """Backend pinned by an enclosing ``use_backend`` block, or None."""
    return _backend_override
