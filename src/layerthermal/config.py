"""
Configuration & Path Management
===============================
This module serves as the central registry for resource paths, numerical
constants and solver settings.

Exports:
    ASSETS_PATH (str): Absolute path to the bundled assets directory.
    DEFAULT_LAYERS_PATH (str): Absolute path to the default layer catalog.
    SolverSettings: Tunable parameters of a single steady-state solve.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to a resource shipped inside the package.
    """
    # config.py is in src/layerthermal/
    package_root: Path = Path(__file__).parent
    return os.path.join(str(package_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_LAYERS_PATH: str = os.path.join(ASSETS_PATH, "device_layers.json")

DEFAULT_MESH_DENSITY: float = 10.0  # Target in-plane cell size
WELD_DECIMALS: int = 4  # Coordinates equal after rounding to this many decimals share a node

THERMAL_CONDUCTIVITY: float = 1.0
PENALTY: float = 1e12
BOUNDARY_TOLERANCE: float = 1e-3

LINEAR_SOLVERS: tuple[str, ...] = ("sparse", "dense")


@dataclass
class SolverSettings:
    """
    Parameters controlling assembly, boundary conditions and the linear solve.

    Attributes:
        penalty: Penalty coefficient added to constrained diagonal entries.
        boundary_tolerance: Distance from the extreme coordinate still counted as boundary.
        boundary_axis: Axis (0=x, 1=y, 2=z) along which the two fixed faces are searched.
        linear_solver: "sparse" (scipy.sparse.linalg.spsolve) or "dense" (scipy.linalg.solve).
        n_workers: Number of threads computing element matrices (1 = serial).
    """
    penalty: float = PENALTY
    boundary_tolerance: float = BOUNDARY_TOLERANCE
    boundary_axis: int = 0
    linear_solver: str = "sparse"
    n_workers: int = 1

    def __post_init__(self) -> None:
        if self.linear_solver not in LINEAR_SOLVERS:
            raise ValueError(f"Unsupported linear solver: {self.linear_solver!r}. "
                             f"'linear_solver' must be one of {LINEAR_SOLVERS}.")
        if self.boundary_axis not in (0, 1, 2):
            raise ValueError(f"Unsupported boundary axis: {self.boundary_axis}. "
                             f"'boundary_axis' must be 0, 1 or 2.")
        if self.penalty <= 0.0:
            raise ValueError(f"Penalty must be positive, got {self.penalty}.")
        if self.n_workers < 1:
            raise ValueError(f"'n_workers' must be at least 1, got {self.n_workers}.")
