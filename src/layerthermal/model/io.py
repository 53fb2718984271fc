"""
Input/Output Manager (HDF5, VTU)
Handles saving and loading analysis projects to .h5 files and exporting
temperature fields for external viewers (ParaView).
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib.metadata import version, PackageNotFoundError
from typing import TYPE_CHECKING, Optional

import h5py
import meshio
import numpy as np

from layerthermal.config import DEFAULT_MESH_DENSITY
from layerthermal.model.layers import Layer
from layerthermal.solvers.results import SolveStatus

if TYPE_CHECKING:
    import numpy.typing as npt

    from layerthermal.pre.mesh import Mesh
    from layerthermal.solvers.results import SolveResult

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("layerthermal")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


@dataclass
class ProjectData:
    """Content of a project file."""
    layers: list[Layer]
    density: float
    node_coordinates: Optional[npt.NDArray[np.float64]] = None
    connectivity: Optional[npt.NDArray[np.int64]] = None
    layer_indices: Optional[npt.NDArray[np.int64]] = None
    temperatures: Optional[npt.NDArray[np.float64]] = None
    status: Optional[SolveStatus] = None
    version: str = APP_VERSION


class IOManager:

    @staticmethod
    def save_project(
        filepath: str,
        layers: list[Layer],
        density: float = DEFAULT_MESH_DENSITY,
        mesh: Optional[Mesh] = None,
        result: Optional[SolveResult] = None,
    ) -> None:
        logger.info(f"Saving project to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION

                # --- 1. SAVE LAYERS ---
                grp_geo = f.create_group("geometry")
                grp_geo.attrs["layers_json"] = json.dumps([layer.to_dict() for layer in layers])
                grp_geo.attrs["density"] = float(density)

                # --- 2. SAVE MESH ---
                if mesh is not None:
                    grp_mesh = f.create_group("mesh")
                    grp_mesh.create_dataset("nodes", data=mesh.node_coordinates, compression="gzip")
                    grp_mesh.create_dataset("elements", data=mesh.connectivity, compression="gzip")
                    grp_mesh.create_dataset("layer_indices", data=mesh.layer_indices, compression="gzip")
                    logger.debug(f"Saved mesh ({mesh.number_of_nodes} nodes, {mesh.number_of_elements} elements).")

                # --- 3. SAVE RESULTS ---
                if result is not None:
                    grp_res = f.create_group("results")
                    grp_res.attrs["status"] = result.status.value
                    grp_res.create_dataset("temperatures", data=result.temperatures, compression="gzip")
                    logger.debug(f"Saved temperature field ({result.temperatures.size} values).")

            logger.info(f"Project saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save project: {e}")
            raise e

    @staticmethod
    def load_project(filepath: str) -> ProjectData:
        logger.info(f"Loading project from: {filepath}")
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Project file not found: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                grp_geo = f["geometry"]
                layers = [Layer.from_dict(record) for record in json.loads(grp_geo.attrs["layers_json"])]
                data = ProjectData(
                    layers=layers,
                    density=float(grp_geo.attrs.get("density", DEFAULT_MESH_DENSITY)),
                    version=str(f.attrs.get("version", "unknown")),
                )

                if "mesh" in f:
                    data.node_coordinates = np.array(f["mesh/nodes"], dtype=np.float64)
                    data.connectivity = np.array(f["mesh/elements"], dtype=np.int64)
                    data.layer_indices = np.array(f["mesh/layer_indices"], dtype=np.int64)
                    logger.debug(f"Loaded mesh with {len(data.node_coordinates)} nodes.")

                if "results" in f:
                    data.temperatures = np.array(f["results/temperatures"], dtype=np.float64)
                    data.status = SolveStatus(f["results"].attrs["status"])
                    logger.debug(f"Loaded temperature field ({data.temperatures.size} values).")

            logger.info(f"Project loaded from: {filepath}")
            return data

        except Exception as e:
            logger.exception(f"Failed to load project: {e}")
            raise e

    # ---- EXPORT HELPERS ----
    @staticmethod
    def export_results_to_vtu(
        filepath: str,
        mesh: Mesh,
        temperatures: Optional[npt.NDArray[np.float64]] = None,
    ) -> str:
        """
        Export the wedge mesh (and optionally the temperature field) as an unstructured grid.

        Returns:
            The path written.
        """
        if mesh.number_of_elements == 0:
            raise ValueError("No mesh to export.")

        point_data = {}
        if temperatures is not None:
            temperatures = np.asarray(temperatures, dtype=np.float64)
            if temperatures.shape != (mesh.number_of_nodes,):
                raise ValueError(
                    f"Expected {mesh.number_of_nodes} temperatures, got array of shape {temperatures.shape}."
                )
            point_data["temperature"] = temperatures

        grid = meshio.Mesh(
            points=mesh.node_coordinates,
            cells=[("wedge", mesh.connectivity)],
            point_data=point_data,
            cell_data={"layer": [mesh.layer_indices]},
        )

        try:
            grid.write(filepath)
        except Exception as e:
            logger.exception("Failed to export results")
            raise e

        logger.info(f"Export complete. Load '{filepath}' in ParaView.")
        return filepath
