"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
numba
    Applied to tests that compile or call the numba dominance kernel.
    These are skipped automatically when numba cannot be imported; select
    them alone with ``-m numba``.

slow
    Applied to randomized property tests over larger point sets.
    Deselect with ``-m "not slow"``.

Warning filters
---------------
NumbaPerformanceWarning messages are filtered out during tests. Parallel
kernels launched on the tiny matrices used here are expected to report
poor utilization.
"""

import pytest
import warnings


def pytest_configure(config):
    """
    Configure pytest before test collection begins.

    This runs before any test module is imported, so the numba warning
    filter is in place before the kernel is compiled.
    """
    config.addinivalue_line(
        "markers",
        "numba: requires the numba cpu-parallel dominance kernel",
    )
    config.addinivalue_line(
        "markers",
        "slow: randomized property tests on larger inputs",
    )

    try:
        from numba.core.errors import NumbaPerformanceWarning
        warnings.filterwarnings('ignore', category=NumbaPerformanceWarning)
    except ImportError:
        # Numba not available, no warnings to suppress
        pass


def pytest_collection_modifyitems(config, items):
    """Skip numba-marked tests when the cpu-parallel backend is unavailable."""
    from cactusnet._backend import get_available_backends

    if "cpu-parallel" in get_available_backends():
        return
    skip = pytest.mark.skip(reason="numba cpu-parallel backend not available")
    for item in items:
        if "numba" in item.keywords:
            item.add_marker(skip)


def pytest_unconfigure(config):
    """Restore default warning behavior."""
    warnings.resetwarnings()
