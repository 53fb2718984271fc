from __future__ import annotations

from abc import ABC, abstractmethod

from typing import TYPE_CHECKING

import numpy as np

from layerthermal.config import THERMAL_CONDUCTIVITY

if TYPE_CHECKING:
    import numpy.typing as npt
    from layerthermal.analysis.node import Node
    from layerthermal.model.layers import Color


class FiniteElement(ABC):
    """
    Abstract base class for solid finite elements in heat conduction analysis.
    """

    def __init__(
        self,
        index: int,
        tag: str,
        nodes: list[Node],
        n_integration_points: int,
        color: Color | None = None,
        conductivity: float = THERMAL_CONDUCTIVITY,
    ) -> None:
        """
        Initialize the finite element with an index and a tag.

        Args:
            index: Element index.
            tag: Element tag (name of the originating layer).
            nodes: List of nodes.
            n_integration_points: Number of integration points for numerical integration.
            color: Display color of the originating layer. Not used by the analysis.
            conductivity: Isotropic thermal conductivity of the element.
        """
        self.id = index
        self.tag = tag
        self.nodes = nodes
        self.n_integration_points = n_integration_points
        self.color = color
        self.conductivity = conductivity
        self.global_dofs: npt.NDArray[np.int64] = np.array([node.uid for node in nodes], dtype=np.int64)

        self.coords: npt.NDArray[np.float64] = np.ascontiguousarray(
            [node.coords for node in nodes], dtype=np.float64
        )

    def __repr__(self) -> str:
        """String representation of the finite element."""
        return f"{self.__class__.__name__}(id={self.id}, tag='{self.tag}', nodes={self.global_dofs.tolist()})"

    @property
    def number_of_nodes(self) -> int:
        """Number of nodes in the finite element."""
        return len(self.nodes)

    @staticmethod
    @abstractmethod
    def shape_functions(iso_coords: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Calculate the shape function at given local coordinates."""
        pass

    @property
    @abstractmethod
    def volume(self) -> float:
        """Calculate the volume of the finite element."""
        pass

    @property
    @abstractmethod
    def jacobian_determinant(self) -> float:
        """Determinant of the Jacobian matrix of the element."""
        pass

    @abstractmethod
    def get_integration_scheme(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Get the integration scheme for the finite element.

        Returns:
            Tuple of Gauss points and weights for numerical integration.
        """
        pass

    @property
    @abstractmethod
    def jacobian_matrix(self) -> npt.NDArray[np.float64]:
        """Calculate the Jacobian matrix for the element.

        Returns:
            Jacobian matrix of the element.
        """
        pass

    @property
    @abstractmethod
    def b_matrix(self) -> npt.NDArray[np.float64]:
        """Calculate the [B] matrix for the finite element."""
        pass

    @abstractmethod
    def get_conductivity_matrix(self) -> npt.NDArray[np.float64]:
        """
        Calculate the conductivity matrix [K] for the finite element.

        Returns:
            Conductivity matrix for the element.
        """
        pass
