"""Swept wedge meshing and steady-state heat conduction for stacked device layers."""
from layerthermal.analysis.finite_elements.wedge6 import ElementStiffness, Wedge6, element_stiffness
from layerthermal.analysis.model import Model
from layerthermal.analysis.node import Node
from layerthermal.config import SolverSettings
from layerthermal.controller.workers import SimulationResult, run_simulation, submit_simulation
from layerthermal.model.catalog import default_device_layers, load_layers, save_layers
from layerthermal.model.layers import Dimensions, InvalidLayerGeometryError, Layer, Position
from layerthermal.pre.mesh import Mesh, NodeRegistry, generate_swept_mesh
from layerthermal.pre.triangulation import triangulate_polygon
from layerthermal.solvers.boundary import BoundaryNodes, find_boundary_nodes
from layerthermal.solvers.results import (
    FailureKind,
    RecoverableFailure,
    SolveFailedError,
    SolveResult,
    SolveStatus,
)
from layerthermal.solvers.solver import Solver, solve_steady_state_heat

__all__ = [
    "BoundaryNodes",
    "Dimensions",
    "ElementStiffness",
    "FailureKind",
    "InvalidLayerGeometryError",
    "Layer",
    "Mesh",
    "Model",
    "Node",
    "NodeRegistry",
    "Position",
    "RecoverableFailure",
    "SimulationResult",
    "SolveFailedError",
    "SolveResult",
    "SolveStatus",
    "Solver",
    "SolverSettings",
    "Wedge6",
    "default_device_layers",
    "element_stiffness",
    "find_boundary_nodes",
    "generate_swept_mesh",
    "load_layers",
    "run_simulation",
    "save_layers",
    "solve_steady_state_heat",
    "submit_simulation",
    "triangulate_polygon",
]
