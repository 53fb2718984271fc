import logging

import numpy as np
import pytest

from layerthermal.analysis.finite_elements.wedge6 import Wedge6
from layerthermal.analysis.model import Model
from layerthermal.analysis.node import Node
from layerthermal.config import SolverSettings
from layerthermal.model.catalog import default_device_layers
from layerthermal.model.layers import Dimensions, Layer, Position
from layerthermal.pre.mesh import generate_swept_mesh
from layerthermal.solvers.boundary import find_boundary_nodes
from layerthermal.solvers.results import FailureKind, SolveFailedError, SolveStatus
from layerthermal.solvers.solver import Solver, solve_steady_state_heat

EPS = 1e-6


class TestFindBoundaryNodes:

    def test_min_is_high_max_is_low(self):
        coords = np.array([[0.0, 0, 0], [5.0, 0, 0], [10.0, 0, 0], [0.0005, 1, 0], [9.9995, 1, 0]])
        boundary = find_boundary_nodes(coords, tolerance=1e-3)
        assert boundary.high.tolist() == [0, 3]
        assert boundary.low.tolist() == [2, 4]

    def test_other_axis(self):
        coords = np.array([[0.0, -1.0, 0], [0.0, 0.0, 0], [0.0, 1.0, 0]])
        boundary = find_boundary_nodes(coords, axis=1)
        assert boundary.high.tolist() == [0]
        assert boundary.low.tolist() == [2]

    def test_flat_mesh_puts_nodes_in_high_set_only(self):
        coords = np.zeros((3, 3))
        boundary = find_boundary_nodes(coords)
        assert boundary.high.tolist() == [0, 1, 2]
        assert boundary.low.size == 0

    def test_empty(self):
        boundary = find_boundary_nodes(np.empty((0, 3)))
        assert boundary.high.size == 0 and boundary.low.size == 0


class TestSteadyStateSolve:

    def test_single_slab_example(self, slab):
        mesh = generate_swept_mesh([slab], density=50)
        result = solve_steady_state_heat(mesh, high_temp=100.0, low_temp=0.0)

        assert result.status is SolveStatus.OK
        assert result.ok and not result.failures
        assert result.temperatures.shape == (18,)

        x = mesh.node_coordinates[:, 0]
        t = result.temperatures
        np.testing.assert_allclose(t[result.boundary.high], 100.0, atol=EPS)
        np.testing.assert_allclose(t[result.boundary.low], 0.0, atol=EPS)
        assert set(result.boundary.high.tolist()) == set(np.flatnonzero(x == -50.0).tolist())
        assert set(result.boundary.low.tolist()) == set(np.flatnonzero(x == 50.0).tolist())

        # monotonically non-increasing along x
        order = np.argsort(x, kind="stable")
        steps = np.diff(x[order]) > 0
        assert np.all(np.diff(t[order])[steps] <= EPS)

    def test_linear_field_is_reproduced(self):
        bottom = Layer("Bottom", Dimensions(20, 10, 20), Position(0, 5, 0))
        top = Layer("Top", Dimensions(20, 10, 20), Position(0, 15, 0))
        mesh = generate_swept_mesh([bottom, top], density=10)

        result = solve_steady_state_heat(mesh, high_temp=100.0, low_temp=0.0)

        x = mesh.node_coordinates[:, 0]
        np.testing.assert_allclose(result.temperatures, 50.0 - 5.0 * x, atol=EPS)

    def test_temperatures_written_to_nodes(self, slab):
        mesh = generate_swept_mesh([slab], density=50)
        model = Model(mesh)
        result = Solver(model).solve(high_temp=80.0, low_temp=20.0)

        np.testing.assert_array_equal(model.t_global, result.temperatures)
        assert [node.current_temperature for node in mesh.nodes] == pytest.approx(result.temperatures.tolist())
        assert model.k_global.shape == (18, 18)
        assert model.f_global.shape == (18,)

    def test_global_matrix_is_symmetric(self, slab):
        mesh = generate_swept_mesh([slab], density=25)
        model = Model(mesh)
        Solver(model).solve(high_temp=1.0, low_temp=0.0)
        k = model.k_global.toarray()
        np.testing.assert_allclose(k, k.T, rtol=1e-12, atol=1e-9)

    def test_dense_and_sparse_solvers_agree(self):
        layers = default_device_layers()
        mesh = generate_swept_mesh(layers, density=5)
        sparse = solve_steady_state_heat(mesh, 100.0, 0.0, SolverSettings(linear_solver="sparse"))
        dense = solve_steady_state_heat(mesh, 100.0, 0.0, SolverSettings(linear_solver="dense"))

        assert sparse.status is SolveStatus.OK
        assert dense.status is SolveStatus.OK
        np.testing.assert_allclose(dense.temperatures, sparse.temperatures, atol=1e-6)

    def test_parallel_assembly_matches_serial(self):
        mesh = generate_swept_mesh(default_device_layers(), density=10)
        model = Model(mesh)
        serial = Solver(model).assemble_global_conductivity_matrix().conductivity_matrix()
        parallel = Solver(model, SolverSettings(n_workers=3)).assemble_global_conductivity_matrix().conductivity_matrix()
        np.testing.assert_allclose(parallel.toarray(), serial.toarray(), atol=1e-9)

    def test_default_stack_stays_within_bounds(self):
        mesh = generate_swept_mesh(default_device_layers(), density=5)
        result = solve_steady_state_heat(mesh, high_temp=100.0, low_temp=0.0)
        assert result.status is SolveStatus.OK
        assert result.temperatures.min() >= -EPS
        assert result.temperatures.max() <= 100.0 + EPS

    def test_boundary_axis_setting(self):
        column = Layer("Column", Dimensions(20, 40, 20), Position(0, 0, 0))
        mesh = generate_swept_mesh([column], density=10)
        result = solve_steady_state_heat(mesh, 10.0, 0.0, SolverSettings(boundary_axis=1))

        y = mesh.node_coordinates[:, 1]
        np.testing.assert_allclose(result.temperatures[y == -20.0], 10.0, atol=EPS)
        np.testing.assert_allclose(result.temperatures[y == 20.0], 0.0, atol=EPS)


class TestRecoverableFailures:

    def test_isolated_node_falls_back_to_midpoint(self, slab, caplog):
        caplog.set_level(logging.WARNING, logger="layerthermal")
        mesh = generate_swept_mesh([slab], density=50)
        mesh.add_node(Node(index=mesh.number_of_nodes, coords=[0.0, 100.0, 0.0]))

        result = solve_steady_state_heat(mesh, high_temp=100.0, low_temp=20.0)

        assert result.status is SolveStatus.FALLBACK
        np.testing.assert_array_equal(result.temperatures, np.full(19, 60.0))
        assert [f.kind for f in result.failures] == [FailureKind.SINGULAR_SYSTEM]
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    def test_floating_layer_falls_back_to_midpoint(self):
        # At a cell size of 10 the metal lines do not share nodes with the oxide.
        mesh = generate_swept_mesh(default_device_layers(), density=10)
        result = solve_steady_state_heat(mesh, high_temp=100.0, low_temp=0.0)

        assert result.status is SolveStatus.FALLBACK
        np.testing.assert_array_equal(result.temperatures, 50.0)

    def test_degenerate_element_is_skipped(self, slab, caplog):
        caplog.set_level(logging.WARNING, logger="layerthermal")
        mesh = generate_swept_mesh([slab], density=10)
        original = mesh.elements[100]
        n = original.nodes
        mesh.elements[100] = Wedge6(
            index=original.id, tag=original.tag, nodes=[n[0], n[2], n[1], n[3], n[5], n[4]]
        )

        result = solve_steady_state_heat(mesh, high_temp=100.0, low_temp=0.0)

        assert result.status is SolveStatus.DEGRADED
        assert result.degenerate_elements == (original.id,)
        assert result.failures[0].kind is FailureKind.DEGENERATE_ELEMENT
        assert np.all(np.isfinite(result.temperatures))
        np.testing.assert_allclose(result.temperatures[result.boundary.high], 100.0, atol=EPS)
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_raise_for_failures(self, slab):
        mesh = generate_swept_mesh([slab], density=50)
        mesh.add_node(Node(index=mesh.number_of_nodes, coords=[0.0, 100.0, 0.0]))
        result = solve_steady_state_heat(mesh, high_temp=1.0, low_temp=0.0)
        with pytest.raises(SolveFailedError):
            result.raise_for_failures()

    def test_raise_for_failures_passes_when_ok(self, slab):
        result = solve_steady_state_heat(generate_swept_mesh([slab], density=50), 1.0, 0.0)
        result.raise_for_failures()


class TestSolverSettings:

    @pytest.mark.parametrize("kwargs", [
        {"linear_solver": "cg"},
        {"boundary_axis": 3},
        {"penalty": 0.0},
        {"n_workers": 0},
    ])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ValueError):
            SolverSettings(**kwargs)
