import meshio
import numpy as np
import pytest

from layerthermal.model.io import IOManager
from layerthermal.pre.mesh import generate_swept_mesh
from layerthermal.solvers.results import SolveStatus
from layerthermal.solvers.solver import solve_steady_state_heat


@pytest.fixture
def solved_slab(slab):
    mesh = generate_swept_mesh([slab], density=50)
    return mesh, solve_steady_state_heat(mesh, high_temp=100.0, low_temp=0.0)


class TestProjectFile:

    def test_round_trip(self, tmp_path, slab, solved_slab):
        mesh, result = solved_slab
        path = str(tmp_path / "project.h5")

        IOManager.save_project(path, [slab], density=50, mesh=mesh, result=result)
        data = IOManager.load_project(path)

        assert data.layers == [slab]
        assert data.density == 50.0
        np.testing.assert_array_equal(data.node_coordinates, mesh.node_coordinates)
        np.testing.assert_array_equal(data.connectivity, mesh.connectivity)
        np.testing.assert_array_equal(data.layer_indices, mesh.layer_indices)
        np.testing.assert_array_equal(data.temperatures, result.temperatures)
        assert data.status is SolveStatus.OK

    def test_geometry_only(self, tmp_path, slab):
        path = str(tmp_path / "geometry.h5")
        IOManager.save_project(path, [slab])
        data = IOManager.load_project(path)

        assert data.layers == [slab]
        assert data.node_coordinates is None
        assert data.temperatures is None and data.status is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            IOManager.load_project(str(tmp_path / "missing.h5"))

    def test_not_hdf5(self, tmp_path):
        path = tmp_path / "layers.h5"
        path.write_text("not an hdf5 file")
        with pytest.raises(ValueError):
            IOManager.load_project(str(path))


class TestVtuExport:

    def test_export(self, tmp_path, solved_slab):
        mesh, result = solved_slab
        path = str(tmp_path / "result.vtu")

        assert IOManager.export_results_to_vtu(path, mesh, result.temperatures) == path

        grid = meshio.read(path)
        np.testing.assert_allclose(grid.points, mesh.node_coordinates)
        assert grid.cells[0].type == "wedge"
        np.testing.assert_array_equal(grid.cells[0].data, mesh.connectivity)
        np.testing.assert_allclose(grid.point_data["temperature"], result.temperatures)

    def test_wrong_temperature_count(self, tmp_path, solved_slab):
        mesh, _ = solved_slab
        with pytest.raises(ValueError):
            IOManager.export_results_to_vtu(str(tmp_path / "bad.vtu"), mesh, np.zeros(3))

    def test_empty_mesh(self, tmp_path):
        with pytest.raises(ValueError):
            IOManager.export_results_to_vtu(str(tmp_path / "empty.vtu"), generate_swept_mesh([]))
