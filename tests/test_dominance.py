"""
tests/test_dominance.py
=======================
Dominance-mask correctness and backend agreement.

Validation layers
-----------------
1. Reference check  (TestPythonBackend)
   The numpy backend is compared against a direct triple loop that spells
   out the domination rule

       D[x,z] + D[z,y] <= D[x,y] + epsilon,   legs > 0 (strict) / != 0

   over every (x, y, z) of the member subset.

2. Backend agreement  (TestBackendAgreement)
   [pytest.mark.numba, skipped without numba]
   python and cpu-parallel masks must be identical for random metrics,
   random subsets, both leg rules and several tolerances.
"""

import os
import sys
from itertools import combinations

import numpy as np
import pytest

# ── Path setup ──────────────────────────────────────────────────────────────
_HERE = os.path.dirname(__file__)
_ROOT = os.path.dirname(_HERE)

sys.path.insert(0, _ROOT)

from cactusnet._dominance import dominance_mask


# ======================================================================== #
# Helpers                                                                   #
# ======================================================================== #


def reference_mask(D, members, epsilon, strict):
    members = sorted(set(members))
    m = len(members)
    out = np.zeros((m, m), dtype=bool)
    for a, b in combinations(range(m), 2):
        x, y = members[a], members[b]
        for c in range(m):
            if c in (a, b):
                continue
            z = members[c]
            if strict:
                legs = D[x, z] > 0 and D[z, y] > 0
            else:
                legs = D[x, z] != 0 and D[z, y] != 0
            if legs and D[x, z] + D[z, y] <= D[x, y] + epsilon:
                out[a, b] = out[b, a] = True
                break
    return out


def euclidean_matrix(points):
    diff = points[:, None, :] - points[None, :, :]
    return np.sqrt((diff ** 2).sum(axis=-1))


def grid_matrix(side):
    """Manhattan distances on a side x side grid: many exact ties."""
    coords = np.array([(i, j) for i in range(side) for j in range(side)], dtype=float)
    return np.abs(coords[:, None, :] - coords[None, :, :]).sum(axis=-1)


# ======================================================================== #
# Fixtures                                                                  #
# ======================================================================== #


@pytest.fixture(scope="module")
def random_metrics():
    rng = np.random.default_rng(20240611)
    mats = [euclidean_matrix(rng.random((n, 2)) * 10) for n in (3, 5, 8, 13)]
    mats.append(grid_matrix(3))
    mats.append(grid_matrix(4))
    return mats


@pytest.fixture(scope="module")
def line5():
    pos = np.array([0.0, 1.0, 3.0, 6.0, 10.0])
    return np.abs(pos[:, None] - pos[None, :])


# ======================================================================== #
# 1. Python backend                                                         #
# ======================================================================== #


class TestPythonBackend:
    def test_fewer_than_three_members(self, line5):
        for members in ([], [2], [0, 4]):
            mask = dominance_mask(line5, members, 1e-12, backend="python")
            assert mask.shape == (len(members), len(members))
            assert not mask.any()

    def test_line_dominates_all_but_neighbours(self, line5):
        mask = dominance_mask(line5, range(5), 1e-12, backend="python")
        for a, b in combinations(range(5), 2):
            assert mask[a, b] == (b - a > 1)

    def test_symmetric_with_false_diagonal(self, line5):
        mask = dominance_mask(line5, range(5), 1e-12, backend="python")
        np.testing.assert_array_equal(mask, mask.T)
        assert not np.diag(mask).any()

    def test_members_sorted_and_deduplicated(self, line5):
        a = dominance_mask(line5, [4, 0, 2, 2], 1e-12, backend="python")
        b = dominance_mask(line5, [0, 2, 4], 1e-12, backend="python")
        np.testing.assert_array_equal(a, b)
        assert a[0, 2] and not a[0, 1]

    def test_epsilon_widens_domination(self):
        # 1 + 1 = 2 > 1.9 exactly, but within 0.2
        D = np.array([[0.0, 1.0, 1.9], [1.0, 0.0, 1.0], [1.9, 1.0, 0.0]])
        assert not dominance_mask(D, range(3), 1e-12, backend="python")[0, 2]
        assert dominance_mask(D, range(3), 0.2, backend="python")[0, 2]

    def test_zero_leg_never_dominates(self):
        # vertex 1 coincides with 0; the path 0-1-2 has a zero leg
        D = np.array([[0.0, 0.0, 3.0], [0.0, 0.0, 3.0], [3.0, 3.0, 0.0]])
        for strict in (True, False):
            mask = dominance_mask(D, range(3), 1e-12, strict=strict, backend="python")
            assert not mask.any()

    def test_strict_and_nonstrict_differ_on_negative_legs(self):
        D = np.array([[0.0, 5.0, -1.0], [5.0, 0.0, 1.0], [-1.0, 1.0, 0.0]])
        assert dominance_mask(D, range(3), 1e-12, strict=False, backend="python")[0, 1]
        assert not dominance_mask(D, range(3), 1e-12, strict=True, backend="python")[0, 1]

    @pytest.mark.parametrize("strict", [True, False])
    @pytest.mark.parametrize("epsilon", [1e-12, 1e-6, 0.5])
    def test_matches_reference(self, random_metrics, strict, epsilon):
        rng = np.random.default_rng(7)
        for D in random_metrics:
            n = D.shape[0]
            subsets = [range(n), rng.choice(n, size=max(3, n // 2), replace=False)]
            for members in subsets:
                got = dominance_mask(D, members, epsilon, strict=strict, backend="python")
                expected = reference_mask(D, members, epsilon, strict)
                np.testing.assert_array_equal(got, expected)


# ======================================================================== #
# 2. Backend agreement                                                      #
# ======================================================================== #


@pytest.mark.numba
class TestBackendAgreement:
    @pytest.mark.parametrize("strict", [True, False])
    @pytest.mark.parametrize("epsilon", [1e-12, 1e-6, 0.5])
    def test_python_vs_cpu_parallel(self, random_metrics, strict, epsilon):
        rng = np.random.default_rng(11)
        for D in random_metrics:
            n = D.shape[0]
            subsets = [range(n), rng.choice(n, size=max(3, n // 2), replace=False)]
            for members in subsets:
                py = dominance_mask(D, members, epsilon, strict=strict, backend="python")
                cpu = dominance_mask(
                    D, members, epsilon, strict=strict, backend="cpu-parallel"
                )
                np.testing.assert_array_equal(py, cpu)

    def test_cpu_parallel_fewer_than_three(self, line5):
        mask = dominance_mask(line5, [1, 3], 1e-12, backend="cpu-parallel")
        assert mask.shape == (2, 2) and not mask.any()

    def test_non_contiguous_input(self, line5):
        big = np.zeros((10, 10))
        big[::2, ::2] = line5
        view = big[::2, ::2]
        py = dominance_mask(view, range(5), 1e-12, backend="python")
        cpu = dominance_mask(view, range(5), 1e-12, backend="cpu-parallel")
        np.testing.assert_array_equal(py, cpu)
