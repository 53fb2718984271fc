from __future__ import annotations

import logging
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Sequence

import numpy as np
import scipy as sp

from layerthermal.analysis.model import Model
from layerthermal.config import SolverSettings
from layerthermal.solvers.assembly import AssemblyContext
from layerthermal.solvers.boundary import BoundaryNodes, find_boundary_nodes
from layerthermal.solvers.results import FailureKind, RecoverableFailure, SolveResult, SolveStatus

if TYPE_CHECKING:
    import numpy.typing as npt

    from layerthermal.analysis.finite_elements.wedge6 import Wedge6
    from layerthermal.pre.mesh import Mesh

logger = logging.getLogger(__name__)

spsolve = sp.sparse.linalg.spsolve


class Solver:
    """
    Steady-state heat conduction solver.

    Every call to :meth:`solve` builds a fresh global system, so one solver can be
    reused for several boundary temperatures.
    """

    def __init__(
        self,
        model: Model,
        settings: SolverSettings | None = None,
    ) -> None:
        """
        Initialize the solver with a model.

        Args:
            model: The model to be solved.
            settings: Penalty, boundary detection and linear solver options.
        """
        self.model = model
        self.settings = settings or SolverSettings()

    @property
    def _dense(self) -> bool:
        return self.settings.linear_solver == "dense"

    def _assemble_partial(self, elements: Sequence[Wedge6]) -> AssemblyContext:
        """Accumulate a subset of elements into a context of its own."""
        context = AssemblyContext(self.model.number_of_equations, dense=self._dense)
        for element in elements:
            k_e = element.stiffness()
            if not k_e.valid:
                context.mark_invalid(element.id)
                continue
            context.add_element_matrix(element.global_dofs, k_e.matrix)
        return context

    def assemble_global_conductivity_matrix(self) -> AssemblyContext:
        """
        Assemble the global conductivity matrix [K] for the model.

        With ``n_workers > 1`` element matrices are computed in a thread pool, each
        worker filling a partial context; the partial contexts are merged at the end.

        Returns:
            The context holding [K] and a zero load vector.
        """
        elements = self.model.mesh.elements
        n_workers = min(self.settings.n_workers, max(1, len(elements)))

        if n_workers == 1:
            return self._assemble_partial(elements)

        chunks = [elements[i::n_workers] for i in range(n_workers)]
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            partials = list(executor.map(self._assemble_partial, chunks))

        context = partials[0]
        for partial in partials[1:]:
            context.merge(partial)
        context.invalid_elements.sort()
        return context

    def apply_boundary_conditions(
        self,
        context: AssemblyContext,
        high_temp: float,
        low_temp: float,
    ) -> BoundaryNodes:
        """
        Fix the temperature of the two extreme faces with the penalty method.

        Args:
            context: Context holding the assembled system.
            high_temp: Temperature at the minimum-coordinate face.
            low_temp: Temperature at the maximum-coordinate face.

        Returns:
            The constrained node sets.
        """
        boundary = find_boundary_nodes(
            self.model.mesh.node_coordinates,
            tolerance=self.settings.boundary_tolerance,
            axis=self.settings.boundary_axis,
        )
        context.add_penalty(boundary.high, self.settings.penalty, high_temp)
        context.add_penalty(boundary.low, self.settings.penalty, low_temp)

        logger.debug(f"Boundary nodes: {boundary.high.size} high, {boundary.low.size} low.")
        return boundary

    def check_constrained_components(
        self,
        k_global: sp.sparse.csr_matrix | npt.NDArray[np.float64],
        boundary: BoundaryNodes,
    ) -> None:
        """
        Make sure every connected part of the mesh touches a fixed-temperature face.

        A part without a constrained node only has its temperature defined up to a
        constant, so [K] is singular even if the factorization does not notice.

        Raises:
            np.linalg.LinAlgError: If some nodes are not connected to a constrained node.
        """
        if self.model.number_of_equations == 0:
            return

        graph = sp.sparse.csr_matrix(k_global)
        graph.eliminate_zeros()
        n_components, labels = sp.sparse.csgraph.connected_components(graph, directed=False)

        constrained = np.zeros(n_components, dtype=bool)
        constrained[labels[boundary.high]] = True
        constrained[labels[boundary.low]] = True

        floating = ~constrained[labels]
        if floating.any():
            n_floating = int(np.unique(labels[floating]).size)
            raise np.linalg.LinAlgError(
                f"{int(floating.sum())} node(s) in {n_floating} part(s) of the mesh are not connected "
                f"to a fixed-temperature face."
            )

    def _solve_linear_system(
        self,
        k_global: sp.sparse.csr_matrix | npt.NDArray[np.float64],
        f_global: npt.NDArray[np.float64],
    ) -> npt.NDArray[np.float64]:
        """
        Solve [K]{T} = {F} with a general (non-symmetric capable) direct solver.

        Raises:
            np.linalg.LinAlgError: If the system is singular or the result is not finite.
        """
        if self.model.number_of_equations == 0:
            return np.empty(0, dtype=np.float64)

        with warnings.catch_warnings():
            warnings.simplefilter("error", sp.sparse.linalg.MatrixRankWarning)
            try:
                if self._dense:
                    t = sp.linalg.solve(np.asarray(k_global), f_global, assume_a="gen")
                else:
                    t = spsolve(k_global.tocsc(), f_global)
            except (sp.sparse.linalg.MatrixRankWarning, RuntimeError) as e:
                raise np.linalg.LinAlgError(str(e)) from e

        t = np.asarray(t, dtype=np.float64).ravel()
        if not np.all(np.isfinite(t)):
            raise np.linalg.LinAlgError("Solution contains non-finite values.")
        return t

    def solve(self, high_temp: float, low_temp: float) -> SolveResult:
        """
        Solve the steady-state problem with two fixed-temperature faces.

        Degenerate elements are skipped with a warning. If the linear system cannot
        be solved, every node gets ``(high_temp + low_temp) / 2`` and the failure is
        reported in the result instead of being raised.

        Args:
            high_temp: Temperature imposed on the nodes at the minimum coordinate.
            low_temp: Temperature imposed on the nodes at the maximum coordinate.

        Returns:
            The temperature field and the recoverable failures met on the way.
        """
        neq = self.model.number_of_equations
        failures: list[RecoverableFailure] = []

        context = self.assemble_global_conductivity_matrix()
        if context.invalid_elements:
            failures.append(RecoverableFailure(
                kind=FailureKind.DEGENERATE_ELEMENT,
                message=f"{len(context.invalid_elements)} element(s) with non-positive Jacobian determinant skipped.",
                element_ids=tuple(context.invalid_elements),
            ))
            logger.warning(failures[-1].message)

        boundary = self.apply_boundary_conditions(context, high_temp=high_temp, low_temp=low_temp)

        k_global = context.conductivity_matrix()
        f_global = context.f_global
        self.model.k_global = k_global
        self.model.f_global = f_global

        try:
            self.check_constrained_components(k_global, boundary)
            temperatures = self._solve_linear_system(k_global, f_global)
            status = SolveStatus.DEGRADED if failures else SolveStatus.OK
            logger.info(f"Solver finished successfully ({neq} equations).")
        except (np.linalg.LinAlgError, ValueError) as e:
            logger.error(f"Failed to solve the linear system: {e}")
            failures.append(RecoverableFailure(
                kind=FailureKind.SINGULAR_SYSTEM,
                message=f"Linear solve failed ({e}); uniform midpoint temperature returned.",
            ))
            temperatures = np.full((neq,), (high_temp + low_temp) / 2, dtype=np.float64)
            status = SolveStatus.FALLBACK

        self.model.assign_temperatures(temperatures)
        return SolveResult(temperatures=temperatures, status=status, failures=failures, boundary=boundary)


def solve_steady_state_heat(
    mesh: Mesh,
    high_temp: float,
    low_temp: float,
    settings: SolverSettings | None = None,
) -> SolveResult:
    """Assemble and solve the steady-state heat problem on ``mesh``. See :meth:`Solver.solve`."""
    return Solver(Model(mesh), settings=settings).solve(high_temp=high_temp, low_temp=low_temp)
