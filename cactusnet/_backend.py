"""
_backend.py
===========
Backend detection and selection for the dominance scans.

Two backends compute the same dominance masks:

  'python'        vectorised numpy reference implementation (always available)
  'cpu-parallel'  numba-compiled parallel kernel (requires numba)

Functions in this module have NO side effects - they only query system state.
Logging is done by the calling code, not here.
"""

from typing import List, Optional, Tuple


# ============================================================================ #
# Backend Detection (No Side Effects)
# ============================================================================ #


def check_numba_available() -> bool:
    """
    Check if numba is available for CPU parallelization.

    Returns
    -------
    bool
        True if numba can be imported, False otherwise.
    """
    try:
        import numba  # noqa: F401

        return True
    except ImportError:
        return False


def get_available_backends() -> List[str]:
    """
    Get list of available execution backends.

    Returns
    -------
    list[str]
        Available backends in preference order; always includes 'python',
        and 'cpu-parallel' when the numba kernels import cleanly.

    Examples
    --------
    >>> get_available_backends()
    ['python']  # No numba installed

    >>> get_available_backends()
    ['python', 'cpu-parallel']  # Numba installed
    """
    backends = ["python"]

    kernels_ok, _ = import_cpu_kernels()
    if kernels_ok:
        backends.append("cpu-parallel")

    return backends


def get_best_backend() -> str:
    """
    Get the most optimized available backend.

    Returns
    -------
    str
        'cpu-parallel' if available, otherwise 'python'.
    """
    backends = get_available_backends()
    # List is in preference order, last is best
    return backends[-1]


def resolve_backend(backend: str) -> str:
    """
    Resolve a backend name (possibly "best") to an actual backend.

    Parameters
    ----------
    backend : str
        'best', 'python' or 'cpu-parallel'.

    Returns
    -------
    str
        Resolved backend name.

    Raises
    ------
    ValueError
        If requested backend is not available.
    """
    if backend == "best":
        return get_best_backend()

    available = get_available_backends()
    if backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )

    return backend


def select_backend(requested: str = "best") -> str:
    """
    Resolve the backend for one call, honouring an active ``use_backend`` block.

    An override set with :func:`cactusnet.use_backend` wins over *requested*.
    """
    from cactusnet._context import get_backend_override

    override = get_backend_override()
    return resolve_backend(override if override is not None else requested)


# ============================================================================ #
# Kernel Import Helpers
# ============================================================================ #


def import_cpu_kernels() -> Tuple[bool, Optional[object]]:
    """
    Try to import the numba dominance kernel from _kernels.

    Returns
    -------
    tuple
        (success, dominance_kernel)
        - success: Whether import succeeded
        - dominance_kernel: _dominance_mask_njit function or None
    """
    try:
        from cactusnet._kernels import _dominance_mask_njit

        return (True, _dominance_mask_njit)
    except ImportError:
        return (False, None)


def get_backend_info() -> dict:
    """
    Get comprehensive backend information.

    Returns
    -------
    dict
        Dictionary with keys:
        - 'numba_available': bool
        - 'backends': list[str]
        - 'best_backend': str
        - 'cpu_kernels_available': bool

    Examples
    --------
    >>> info = get_backend_info()
    >>> info['backends']
    ['python', 'cpu-parallel']
    """
    cpu_kernels_ok, _ = import_cpu_kernels()
    return {
        "numba_available": check_numba_available(),
        "backends": get_available_backends(),
        "best_backend": get_best_backend(),
        "cpu_kernels_available": cpu_kernels_ok,
    }
