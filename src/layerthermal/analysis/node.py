from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


class Node:
    """
    Represents a mesh node of the heat conduction model.
    """
    def __init__(
        self,
        index: int,
        coords: list[float] | tuple[float, float, float] | npt.NDArray[np.float64],
    ) -> None:
        """
        Initialize the node with coordinates.

        Args:
            index: Global index of the node, assigned on first creation.
            coords: Coordinates of the node in the global system [X, Y, Z].
        """
        self.coords = np.array(coords, dtype=np.float64)
        self.uid = index
        self.current_temperature: float | None = None

    def __repr__(self) -> str:
        """String representation of the node."""
        return f"{self.__class__.__name__}(id={self.uid}, coords={self.coords})"

    @property
    def x(self) -> float:
        """X-coordinate of the node."""
        return self.coords[0]

    @property
    def y(self) -> float:
        """Y-coordinate of the node."""
        return self.coords[1]

    @property
    def z(self) -> float:
        """Z-coordinate of the node."""
        return self.coords[2]
