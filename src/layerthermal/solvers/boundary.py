from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from layerthermal.config import BOUNDARY_TOLERANCE

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class BoundaryNodes:
    """Node indices of the two fixed-temperature faces."""
    high: npt.NDArray[np.int64]
    low: npt.NDArray[np.int64]


def find_boundary_nodes(
    coords: npt.NDArray[np.float64],
    tolerance: float = BOUNDARY_TOLERANCE,
    axis: int = 0,
) -> BoundaryNodes:
    """
    Find the nodes on the two extreme faces along one axis.

    Nodes within ``tolerance`` of the minimum coordinate form the "high" set,
    nodes within ``tolerance`` of the maximum form the "low" set. A node that
    qualifies for both (zero extent along the axis) is put in the "high" set only.

    Args:
        coords: (n_nodes, 3) nodal coordinates.
        tolerance: Distance from the extreme value still counted as boundary.
        axis: 0 for x, 1 for y, 2 for z.

    Returns:
        The high and low node index sets.
    """
    coords = np.asarray(coords, dtype=np.float64)
    if coords.size == 0:
        empty = np.empty(0, dtype=np.int64)
        return BoundaryNodes(high=empty, low=empty.copy())

    values = coords[:, axis]
    at_min = np.abs(values - values.min()) < tolerance
    at_max = (np.abs(values - values.max()) < tolerance) & ~at_min

    return BoundaryNodes(
        high=np.flatnonzero(at_min).astype(np.int64),
        low=np.flatnonzero(at_max).astype(np.int64),
    )
