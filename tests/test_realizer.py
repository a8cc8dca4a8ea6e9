"""
tests/test_realizer.py
======================
End-to-end realization and the complete-graph / pruning phase.

Scenarios
---------
A  tree4 (exact tree metric, one internal edge):
     result has 6 vertices and 5 edges
       (0,4,2) (1,4,3) (2,5,3) (3,5,3) (4,5,2)
B  equidistant4 (four points at mutual distance 2):
     result is a star on 5 vertices, centre 4, every weight 1
   triangle (three points at mutual distance 2): the triangle itself, since
     no vertex of the starting K3 has degree >= 3
   square (unit 4-cycle): the cycle itself, no auxiliary vertex

Pruning properties
------------------
- completeness: build_complete on n x n gives n(n-1)/2 edges, weights
  round5(D[i,j])
- soundness: no surviving edge is dominated by a two-hop path
- idempotence: pruning an already-pruned graph removes nothing
- shortest paths of the pruned complete graph equal D for a metric D
"""

import logging
import os
import sys
from itertools import combinations

import numpy as np
import pytest

# ── Path setup ──────────────────────────────────────────────────────────────
_HERE = os.path.dirname(__file__)
_ROOT = os.path.dirname(_HERE)

sys.path.insert(0, _ROOT)

from cactusnet._config import RealizerConfig
from cactusnet._errors import ConvergenceError, InputFormatError, InvalidArgumentError
from cactusnet._graph import UEdge, WeightedGraph
from cactusnet._realizer import (
    CactusRealizer,
    build_complete,
    prune_redundant_edges,
    realize,
)
from cactusnet._utils import round5
from cactusnet._verify import check_pairwise_distances, shortest_path_matrix


# ======================================================================== #
# Helpers                                                                   #
# ======================================================================== #


def weighted_edges(g):
    return [(e.u, e.v, g.weight(e)) for e in g.list_edges()]


def euclidean_matrix(points):
    diff = points[:, None, :] - points[None, :, :]
    return np.sqrt((diff ** 2).sum(axis=-1))


def is_dominated(D, i, j, epsilon=1e-12):
    n = D.shape[0]
    return any(
        D[i, k] > 0 and D[k, j] > 0 and D[i, k] + D[k, j] <= D[i, j] + epsilon
        for k in range(n)
        if k not in (i, j)
    )


# ======================================================================== #
# Fixtures                                                                  #
# ======================================================================== #


@pytest.fixture(scope="module")
def tree4():
    return np.array(
        [
            [0.0, 5.0, 7.0, 7.0],
            [5.0, 0.0, 8.0, 8.0],
            [7.0, 8.0, 0.0, 6.0],
            [7.0, 8.0, 6.0, 0.0],
        ]
    )


@pytest.fixture(scope="module")
def equidistant4():
    D = np.full((4, 4), 2.0)
    np.fill_diagonal(D, 0.0)
    return D


@pytest.fixture(scope="module")
def square():
    return np.array(
        [
            [0.0, 1.0, 2.0, 1.0],
            [1.0, 0.0, 1.0, 2.0],
            [2.0, 1.0, 0.0, 1.0],
            [1.0, 2.0, 1.0, 0.0],
        ]
    )


@pytest.fixture(scope="module")
def random_plane_metrics():
    rng = np.random.default_rng(42)
    return [euclidean_matrix(rng.random((n, 2)) * 100) for n in (4, 7, 12, 20)]


@pytest.fixture(scope="module")
def grid_metric():
    """Manhattan metric on a 4x4 grid; the pruned graph is the grid graph."""
    coords = np.array([(i, j) for i in range(4) for j in range(4)], dtype=float)
    return np.abs(coords[:, None, :] - coords[None, :, :]).sum(axis=-1)


# ======================================================================== #
# 1. build_complete                                                         #
# ======================================================================== #


class TestBuildComplete:
    @pytest.mark.parametrize("n", [0, 1, 2, 5, 12])
    def test_edge_count(self, n):
        D = np.ones((n, n)) - np.eye(n)
        assert build_complete(D).number_of_edges() == n * (n - 1) // 2

    def test_weights_rounded(self, random_plane_metrics):
        D = random_plane_metrics[2]
        g = build_complete(D)
        for i, j in combinations(range(D.shape[0]), 2):
            assert g.get_weight(i, j) == round5(D[i, j])

    def test_weights_rounded_to_five_places(self):
        D = np.array([[0.0, 0.333333], [0.333333, 0.0]])
        assert build_complete(D).get_weight(0, 1) == 0.33333

    def test_capacity(self, tree4):
        assert build_complete(tree4).n == 4


# ======================================================================== #
# 2. prune_redundant_edges                                                  #
# ======================================================================== #


class TestPrune:
    def test_line_becomes_path(self):
        pos = np.array([0.0, 2.0, 3.0, 7.0])
        D = np.abs(pos[:, None] - pos[None, :])
        pruned = prune_redundant_edges(D, build_complete(D))
        assert weighted_edges(pruned) == [(0, 1, 2.0), (1, 2, 1.0), (2, 3, 4.0)]

    def test_general_position_keeps_everything(self, random_plane_metrics):
        for D in random_plane_metrics:
            g = build_complete(D)
            pruned = prune_redundant_edges(D, g)
            n = D.shape[0]
            assert pruned.number_of_edges() == n * (n - 1) // 2

    def test_soundness(self, grid_metric, random_plane_metrics):
        for D in [grid_metric] + random_plane_metrics:
            pruned = prune_redundant_edges(D, build_complete(D))
            for e in pruned:
                assert not is_dominated(D, e.u, e.v)

    def test_grid_graph(self, grid_metric):
        pruned = prune_redundant_edges(grid_metric, build_complete(grid_metric))
        assert pruned.number_of_edges() == 24
        assert all(pruned.weight(e) == 1.0 for e in pruned)

    def test_idempotent(self, grid_metric, tree4):
        for D in (grid_metric, tree4):
            once = prune_redundant_edges(D, build_complete(D))
            twice = prune_redundant_edges(D, once)
            assert twice == once

    def test_shortest_paths_preserved(self, grid_metric):
        pruned = prune_redundant_edges(grid_metric, build_complete(grid_metric))
        np.testing.assert_allclose(shortest_path_matrix(pruned), grid_metric)

    def test_input_graph_not_modified(self, grid_metric):
        g = build_complete(grid_metric)
        prune_redundant_edges(grid_metric, g)
        assert g.number_of_edges() == 16 * 15 // 2

    def test_edge_outside_matrix_raises(self, tree4):
        g = WeightedGraph(6)
        g.add_edge(0, 5)
        with pytest.raises(InvalidArgumentError):
            prune_redundant_edges(tree4, g)

    def test_only_existing_edges_considered(self, tree4):
        g = WeightedGraph(4)
        g.put_edge(0, 1, 5.0)
        pruned = prune_redundant_edges(tree4, g)
        assert pruned.list_edges() == [UEdge(0, 1)]

    @pytest.mark.parametrize("backend", ["python", "best"])
    def test_backend_argument(self, grid_metric, backend):
        pruned = prune_redundant_edges(
            grid_metric, build_complete(grid_metric), backend=backend
        )
        assert pruned.number_of_edges() == 24

    @pytest.mark.slow
    @pytest.mark.parametrize("seed", range(5))
    def test_random_lattice_metrics(self, seed):
        # integer L1 distances: every removed edge is replaced by a path of
        # exactly the same length
        rng = np.random.default_rng(seed)
        points = np.unique(rng.integers(0, 6, size=(40, 3)), axis=0)
        D = np.abs(points[:, None, :] - points[None, :, :]).sum(axis=-1).astype(float)
        once = prune_redundant_edges(D, build_complete(D))
        for e in once:
            assert not is_dominated(D, e.u, e.v)
        assert prune_redundant_edges(D, once) == once
        np.testing.assert_array_equal(shortest_path_matrix(once), D)


# ======================================================================== #
# 3. End-to-end scenarios                                                 #
# ======================================================================== #


class TestScenarios:
    def test_scenario_a_tree(self, tree4):
        g = realize(tree4)
        assert g.n == 6
        assert weighted_edges(g) == [
            (0, 4, 2.0), (1, 4, 3.0), (2, 5, 3.0), (3, 5, 3.0), (4, 5, 2.0)
        ]

    def test_scenario_a_realizes_input(self, tree4):
        assert check_pairwise_distances(realize(tree4), tree4) == []

    def test_scenario_b_single_auxiliary(self, equidistant4):
        g = realize(equidistant4)
        assert g.n == 5
        assert weighted_edges(g) == [(i, 4, 1.0) for i in range(4)]
        assert check_pairwise_distances(g, equidistant4) == []

    def test_triangle_stays_a_triangle(self):
        D = [[0, 2, 2], [2, 0, 2], [2, 2, 0]]
        g = realize(D)
        assert g.n == 3
        assert weighted_edges(g) == [(0, 1, 2.0), (0, 2, 2.0), (1, 2, 2.0)]
        assert check_pairwise_distances(g, D) == []

    def test_square_stays_a_cycle(self, square):
        g = realize(square)
        assert g.n == 4
        assert weighted_edges(g) == [
            (0, 1, 1.0), (0, 3, 1.0), (1, 2, 1.0), (2, 3, 1.0)
        ]
        assert check_pairwise_distances(g, square) == []

    def test_taxa_keep_input_indices(self, tree4):
        g = realize(tree4)
        assert {0, 1, 2, 3} <= set(g.node_list())

    def test_deterministic(self, tree4):
        assert realize(tree4) == realize(tree4)

    @pytest.mark.parametrize("n", [0, 1])
    def test_trivial_inputs(self, n):
        g = realize(np.zeros((n, n)))
        assert g.n == n
        assert g.number_of_edges() == 0

    def test_two_taxa(self):
        g = realize([[0.0, 3.5], [3.5, 0.0]])
        assert weighted_edges(g) == [(0, 1, 3.5)]

    def test_malformed_matrix_raises(self):
        with pytest.raises(InputFormatError):
            realize([[0.0, 1.0, 2.0]])


class TestLatticeScenarios:
    """Seeded integer L1 metrics run through the whole pipeline."""

    @pytest.fixture(scope="class", params=range(6))
    def lattice(self, request):
        rng = np.random.default_rng(request.param)
        points = np.unique(rng.integers(0, 4, size=(7, 2)), axis=0)
        return np.abs(points[:, None, :] - points[None, :, :]).sum(axis=-1).astype(float)

    def test_taxa_block_preserved(self, lattice):
        ext = CactusRealizer().extend(lattice)
        n = lattice.shape[0]
        np.testing.assert_array_equal(ext.D[:n, :n], lattice)
        assert ext.taxa == set(range(n))
        assert set(range(ext.D.shape[0])) <= ext.existing

    def test_extended_matrix_symmetric(self, lattice):
        D = CactusRealizer().extend(lattice).D
        np.testing.assert_array_equal(D, D.T)
        assert not np.diag(D).any()
        off = D[~np.eye(D.shape[0], dtype=bool)]
        assert (off > 0).all()

    def test_graph_connected_and_undominated(self, lattice):
        ext = CactusRealizer().extend(lattice)
        g = realize(lattice)
        assert g.n == ext.D.shape[0]
        assert len(g.connected_components()) == 1
        for e in g:
            assert g.weight(e) == round5(ext.D[e.u, e.v])
            assert not is_dominated(ext.D, e.u, e.v)

    def test_deterministic(self, lattice):
        assert realize(lattice) == realize(lattice)

    @pytest.mark.numba
    def test_backends_agree(self, lattice):
        assert realize(lattice, backend="python") == realize(
            lattice, backend="cpu-parallel"
        )


# ======================================================================== #
# 4. CactusRealizer facade                                                  #
# ======================================================================== #


class TestCactusRealizer:
    def test_default_config(self):
        assert CactusRealizer().config == RealizerConfig()

    def test_options_override_config(self):
        r = CactusRealizer(RealizerConfig(epsilon=1e-6), max_rounds=5)
        assert r.config.epsilon == 1e-6
        assert r.config.max_rounds == 5

    def test_none_options_ignored(self):
        r = CactusRealizer(epsilon=None)
        assert r.config.epsilon == RealizerConfig().epsilon

    def test_extend_exposes_extended_matrix(self, tree4):
        ext = CactusRealizer().extend(tree4)
        assert ext.D.shape == (6, 6)
        assert ext.taxa == {0, 1, 2, 3}

    def test_run_logs_prune_summary(self, tree4, caplog):
        with caplog.at_level(logging.INFO, logger="cactusnet"):
            CactusRealizer().run(tree4)
        messages = [r.getMessage() for r in caplog.records]
        assert "Pruned 10 of 15 edges (kept 5)" in messages
        assert any(m.startswith("Dominance backend:") for m in messages)

    def test_convergence_bound_propagates(self, tree4):
        with pytest.raises(ConvergenceError):
            CactusRealizer(max_rounds=1).run(tree4)

    def test_python_backend_matches_default(self, tree4, equidistant4):
        for D in (tree4, equidistant4):
            assert CactusRealizer(backend="python").run(D) == realize(D)

    def test_repr(self):
        assert repr(CactusRealizer()).startswith("CactusRealizer(RealizerConfig(")
