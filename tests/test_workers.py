from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from layerthermal.controller.workers import prepare_simulation_model, run_simulation, submit_simulation
from layerthermal.model.layers import Dimensions, InvalidLayerGeometryError, Layer
from layerthermal.solvers.results import SolveStatus


class TestWorkers:

    def test_prepare_simulation_model(self, slab):
        model = prepare_simulation_model([slab], density=50)
        assert model.number_of_nodes == 18
        assert model.number_of_elements == 8
        assert model.number_of_equations == 18

    def test_run_simulation_reports_progress(self, slab):
        calls = []
        simulation = run_simulation(
            [slab], high_temp=100.0, low_temp=0.0, density=50,
            progress=lambda percent, message: calls.append(percent),
        )

        assert calls == [0, 40, 100]
        assert simulation.solve.status is SolveStatus.OK
        assert simulation.mesh.number_of_nodes == simulation.solve.temperatures.size

    def test_submit_simulation(self, slab):
        layers = [slab]
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = submit_simulation(executor, layers, high_temp=10.0, low_temp=0.0, density=50)
            layers.clear()
            simulation = future.result(timeout=60)

        assert simulation.solve.ok
        np.testing.assert_allclose(simulation.solve.temperatures[simulation.solve.boundary.high], 10.0, atol=1e-6)

    def test_invalid_layer_propagates_through_future(self):
        broken = Layer("Broken", Dimensions(0, 10, 10))
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = submit_simulation(executor, [broken], high_temp=1.0, low_temp=0.0)
            with pytest.raises(InvalidLayerGeometryError):
                future.result(timeout=60)

    def test_layer_thinner_than_weld_tolerance_is_rejected(self):
        thin = Layer("Thin", Dimensions(10, 1e-5, 10))
        with pytest.raises(InvalidLayerGeometryError):
            run_simulation([thin], high_temp=100.0, low_temp=0.0, density=10)
