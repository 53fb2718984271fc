"""
Background Workers
==================
Runs the whole pipeline (mesh generation, assembly, solve) as one unit of work.

Classes:
    SimulationResult: Mesh plus solve outcome.

Functions:
    prepare_simulation_model: Builds the mesh and the analysis model.
    run_simulation: Runs the pipeline synchronously.
    submit_simulation: Runs the pipeline on an executor so a UI thread is never blocked.
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from layerthermal.analysis.model import Model
from layerthermal.config import DEFAULT_MESH_DENSITY, SolverSettings
from layerthermal.model.layers import Layer
from layerthermal.pre.mesh import Mesh
from layerthermal.solvers.results import SolveResult
from layerthermal.solvers.solver import Solver

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


@dataclass
class SimulationResult:
    mesh: Mesh
    solve: SolveResult


def prepare_simulation_model(layers: Iterable[Layer], density: float = DEFAULT_MESH_DENSITY) -> Model:
    """
    Generates the mesh and prepares the FEA model.
    """
    logger.info("Initializing FEA Model...")
    mesh = Mesh.from_layers(layers, density=density)
    return Model(mesh=mesh)


def run_simulation(
    layers: Iterable[Layer],
    high_temp: float,
    low_temp: float,
    density: float = DEFAULT_MESH_DENSITY,
    settings: Optional[SolverSettings] = None,
    progress: Optional[ProgressCallback] = None,
) -> SimulationResult:
    """
    Mesh the layers and solve the steady-state problem.

    Args:
        layers: Layers in stacking order.
        high_temp: Temperature of the minimum-coordinate face.
        low_temp: Temperature of the maximum-coordinate face.
        density: Target in-plane cell size.
        settings: Solver options.
        progress: Optional ``progress(percent, message)`` callback.

    Returns:
        The mesh and the solve outcome.
    """
    def report(percent: int, message: str) -> None:
        logger.info(message)
        if progress is not None:
            progress(percent, message)

    report(0, "Generating mesh...")
    model = prepare_simulation_model(layers, density=density)

    report(40, f"Solving {model.number_of_equations} equations...")
    result = Solver(model, settings=settings).solve(high_temp=high_temp, low_temp=low_temp)

    report(100, f"Finished with status '{result.status.value}'.")
    return SimulationResult(mesh=model.mesh, solve=result)


def submit_simulation(
    executor: Executor,
    layers: Iterable[Layer],
    high_temp: float,
    low_temp: float,
    density: float = DEFAULT_MESH_DENSITY,
    settings: Optional[SolverSettings] = None,
    progress: Optional[ProgressCallback] = None,
) -> Future[SimulationResult]:
    """
    Submit :func:`run_simulation` to an executor.

    The layers are copied into a list before submission so the caller may keep
    mutating its own container. There is no cancellation once started; discard
    the future's result instead.
    """
    layers = list(layers)
    return executor.submit(
        run_simulation,
        layers,
        high_temp,
        low_temp,
        density=density,
        settings=settings,
        progress=progress,
    )
