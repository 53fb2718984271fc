from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import scipy as sp

if TYPE_CHECKING:
    import numpy.typing as npt

    from layerthermal.pre.mesh import Mesh


class Model:
    """
    Class represent the entire heat conduction model.

    This class encapsulates the mesh and the global system of the last solve.
    """
    def __init__(self, mesh: Mesh) -> None:
        """Initialize the Model object."""
        self.mesh = mesh

        self.n_dof_per_node: int = 1  # Number of degrees of freedom per node (1 for temperature)

        self.k_global: sp.sparse.csr_matrix | npt.NDArray[np.float64] = sp.sparse.csr_matrix((0, 0), dtype=np.float64)
        self.f_global: npt.NDArray[np.float64] = np.empty(0, dtype=np.float64)
        self.t_global: npt.NDArray[np.float64] = np.empty(0, dtype=np.float64)  # Global temperature vector

    @property
    def number_of_nodes(self) -> int:
        """Return the number of nodes in the model."""
        return len(self.mesh.nodes)

    @property
    def number_of_elements(self) -> int:
        """Return the number of elements in the model."""
        return len(self.mesh.elements)

    @property
    def number_of_equations(self) -> int:
        """Return the total number of equations in the model."""
        return self.number_of_nodes * self.n_dof_per_node

    def assign_temperatures(self, temperatures: npt.NDArray[np.float64]) -> None:
        """Store the solved field on the model and on every node."""
        self.t_global = np.asarray(temperatures, dtype=np.float64).copy()
        for i, node in enumerate(self.mesh.nodes):
            node.current_temperature = float(self.t_global[i])
