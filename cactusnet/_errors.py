"""
_errors.py
==========
Exception and warning types raised by cactusnet.

All errors derive from a standard built-in so callers that do not care
about the distinction can catch ``ValueError`` / ``RuntimeError`` as usual.
"""


class CactusError(Exception):
    """Base class for every error raised deliberately by cactusnet."""


class InputFormatError(CactusError, ValueError):
    """
    A distance matrix could not be read or has the wrong shape.

    Raised before any algorithmic work starts: empty input, wrong number of
    rows, wrong number of tokens in a row, non-numeric tokens, or an array
    that is not square and two-dimensional.
    """


class InvalidArgumentError(CactusError, ValueError):
    """
    An argument violates a structural precondition.

    Examples: a self-loop edge ``(i, i)``, a negative vertex count, an edge
    endpoint outside ``0..n-1``, or a negative tolerance.
    """


class ConvergenceError(CactusError, RuntimeError):
    """
    The extension loop exceeded its configured safety bound.

    The matrix extension is a greedy fixed-point iteration with no proof of
    termination for arbitrary inputs; ``RealizerConfig.max_rounds`` and
    ``RealizerConfig.max_worklist`` cap it.  No partial result is returned.
    """


class ToleranceWarning(UserWarning):
    """A tolerance setting could not be parsed and the default was used."""
