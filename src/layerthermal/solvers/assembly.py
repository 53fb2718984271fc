"""
Global system accumulation.

An :class:`AssemblyContext` owns the global conductivity matrix and load vector
of exactly one solve. Element matrices are scatter-added into it; contexts
filled independently (e.g. one per worker thread) are combined with
:meth:`AssemblyContext.merge` before the matrix is reduced to its final form.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np
import scipy as sp

from layerthermal.utils import assemble_subarray_at_indices

if TYPE_CHECKING:
    import numpy.typing as npt


class AssemblyContext:
    def __init__(self, n_equations: int, dense: bool = False) -> None:
        """
        Args:
            n_equations: Size of the global system.
            dense: Accumulate into a dense (n x n) array instead of sparse COO triplets.
        """
        self.n_equations = n_equations
        self.dense = dense

        self.f_global: npt.NDArray[np.float64] = np.zeros((n_equations,), dtype=np.float64)
        self.invalid_elements: list[int] = []

        self._k_dense: npt.NDArray[np.float64] | None = None
        self._rows: list[npt.NDArray[np.int64]] = []
        self._cols: list[npt.NDArray[np.int64]] = []
        self._data: list[npt.NDArray[np.float64]] = []

        if dense:
            self._k_dense = np.zeros((n_equations, n_equations), dtype=np.float64)

    def add_element_matrix(self, dofs: npt.NDArray[np.int64], k_e: npt.NDArray[np.float64]) -> None:
        """Scatter-add a local (n x n) matrix at the rows/columns ``dofs``."""
        if self._k_dense is not None:
            assemble_subarray_at_indices(self._k_dense, k_e, dofs)
            return

        n_dofs = len(dofs)
        self._rows.append(np.repeat(dofs, n_dofs))
        self._cols.append(np.tile(dofs, n_dofs))
        self._data.append(np.asarray(k_e, dtype=np.float64).ravel(order="C"))

    def add_penalty(self, dofs: Sequence[int] | npt.NDArray[np.int64], penalty: float, value: float) -> None:
        """
        Enforce ``T[dof] = value`` approximately by the penalty method.

        Adds ``penalty`` to each diagonal entry and ``penalty * value`` to the load vector.
        """
        dofs = np.asarray(dofs, dtype=np.int64)
        if dofs.size == 0:
            return

        np.add.at(self.f_global, dofs, penalty * value)

        if self._k_dense is not None:
            np.add.at(self._k_dense, (dofs, dofs), penalty)
        else:
            self._rows.append(dofs)
            self._cols.append(dofs)
            self._data.append(np.full(dofs.size, penalty, dtype=np.float64))

    def mark_invalid(self, element_id: int) -> None:
        self.invalid_elements.append(element_id)

    def merge(self, other: AssemblyContext) -> AssemblyContext:
        """Fold another partial context into this one and return self."""
        if other.n_equations != self.n_equations or other.dense != self.dense:
            raise ValueError("Cannot merge assembly contexts of different size or storage.")

        self.f_global += other.f_global
        self.invalid_elements.extend(other.invalid_elements)

        if self._k_dense is not None:
            self._k_dense += other._k_dense
        else:
            self._rows.extend(other._rows)
            self._cols.extend(other._cols)
            self._data.extend(other._data)
        return self

    def conductivity_matrix(self) -> sp.sparse.csr_matrix | npt.NDArray[np.float64]:
        """
        Reduce the accumulated entries to the global matrix.

        Returns:
            Dense array in dense mode, otherwise a CSR matrix (duplicates summed).
        """
        if self._k_dense is not None:
            return self._k_dense

        n = self.n_equations
        if not self._data:
            return sp.sparse.csr_matrix((n, n), dtype=np.float64)

        # COO tolerates duplicates; .tocsr() sums them
        return sp.sparse.coo_matrix(
            (
                np.concatenate(self._data),
                (np.concatenate(self._rows), np.concatenate(self._cols)),
            ),
            shape=(n, n),
        ).tocsr()
