from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

import numpy as np
import numba as nb

from layerthermal.analysis.finite_elements.finite_element import FiniteElement
import layerthermal.analysis.gauss as gauss
from layerthermal.config import THERMAL_CONDUCTIVITY

if TYPE_CHECKING:
    import numpy.typing as npt
    from layerthermal.analysis.node import Node
    from layerthermal.model.layers import Color

logger = logging.getLogger(__name__)


# Node order: bottom triangle (0, 1, 2), top triangle (3, 4, 5); node i and i + 3 are vertically aligned.
# B_N = [
#   [dN1/dksi,  ..., dN6/dksi ],
#   [dN1/deta,  ..., dN6/deta ],
#   [dN1/dzeta, ..., dN6/dzeta]
# ] evaluated at the centroid (ksi=1/3, eta=1/3, zeta=0)
B_N = np.array([
    [-0.5, 0.5, 0.0, -0.5, 0.5, 0.0],
    [-0.5, 0.0, 0.5, -0.5, 0.0, 0.5],
    [-1.0/6.0, -1.0/6.0, -1.0/6.0, 1.0/6.0, 1.0/6.0, 1.0/6.0],
])

# Relative det(J) threshold below which an element counts as degenerate
DEGENERATE_RTOL = 1e-12


class ElementStiffness(NamedTuple):
    """Local conductivity matrix of one wedge together with its Jacobian determinant."""
    matrix: npt.NDArray[np.float64]
    det_j: float
    valid: bool


@nb.jit(cache=True, fastmath=True)
def _det3(j: npt.NDArray[np.float64]) -> float:
    """Determinant of a 3×3 matrix by cofactor expansion along the first row."""
    return (
        j[0, 0] * (j[1, 1] * j[2, 2] - j[1, 2] * j[2, 1])
        - j[0, 1] * (j[1, 0] * j[2, 2] - j[1, 2] * j[2, 0])
        + j[0, 2] * (j[1, 0] * j[2, 1] - j[1, 1] * j[2, 0])
    )


@nb.jit(cache=True, fastmath=True)
def _inv3(j: npt.NDArray[np.float64], det: float) -> npt.NDArray[np.float64]:
    """
    Inverse of a 3×3 matrix from its adjugate.

    Args:
        j: (3, 3) matrix.
        det: Its determinant, non-zero.

    Returns:
        (3, 3) inverse matrix.
    """
    inv = np.empty((3, 3), dtype=np.float64)
    inv[0, 0] = (j[1, 1] * j[2, 2] - j[1, 2] * j[2, 1]) / det
    inv[0, 1] = (j[0, 2] * j[2, 1] - j[0, 1] * j[2, 2]) / det
    inv[0, 2] = (j[0, 1] * j[1, 2] - j[0, 2] * j[1, 1]) / det
    inv[1, 0] = (j[1, 2] * j[2, 0] - j[1, 0] * j[2, 2]) / det
    inv[1, 1] = (j[0, 0] * j[2, 2] - j[0, 2] * j[2, 0]) / det
    inv[1, 2] = (j[0, 2] * j[1, 0] - j[0, 0] * j[1, 2]) / det
    inv[2, 0] = (j[1, 0] * j[2, 1] - j[1, 1] * j[2, 0]) / det
    inv[2, 1] = (j[0, 1] * j[2, 0] - j[0, 0] * j[2, 1]) / det
    inv[2, 2] = (j[0, 0] * j[1, 1] - j[0, 1] * j[1, 0]) / det
    return inv


@nb.jit(cache=True, fastmath=True)
def _wedge6_B_and_detJ(coords: npt.NDArray[np.float64]) -> tuple[npt.NDArray[np.float64], float, bool]:
    """
    Build the B matrix and det(J) of a Wedge6 element at its centroid.

    The element is degenerate when det(J) <= DEGENERATE_RTOL * max|J|**3, i.e. not
    positive relative to its own size.

    Args:
        coords: (6, 3) array of nodal coordinates in bottom-then-top order.

    Returns:
        B: (3, 6) array of shape function derivatives in physical space.
           All zeros for degenerate elements.
        detJ: Signed Jacobian determinant.
        valid: False for inverted or degenerate elements.
    """
    # J = B_N @ coords
    J = np.zeros((3, 3), dtype=np.float64)
    for a in range(3):
        for b in range(3):
            s = 0.0
            for n in range(6):
                s += B_N[a, n] * coords[n, b]
            J[a, b] = s

    detJ = _det3(J)
    B = np.zeros((3, 6), dtype=np.float64)
    scale = np.abs(J).max()
    if detJ <= 0.0 or detJ <= DEGENERATE_RTOL * scale * scale * scale:
        return B, detJ, False

    # B = inv(J) @ B_N
    inv = _inv3(J, detJ)
    for a in range(3):
        for n in range(6):
            B[a, n] = inv[a, 0] * B_N[0, n] + inv[a, 1] * B_N[1, n] + inv[a, 2] * B_N[2, n]

    return B, detJ, True


def element_stiffness(
    coords: npt.ArrayLike,
    conductivity: float = THERMAL_CONDUCTIVITY,
    element_id: int | None = None,
) -> ElementStiffness:
    """
    Calculate the conductivity matrix of a six-node wedge.

    [K] = [B]ᵀ [B] * k * det(J) * w, single point rule at the centroid.

    Elements whose det(J) is not positive relative to their size are inverted or
    degenerate. They get a zero matrix and a warning is logged, so the assembled
    system is weaker but the solve goes on.

    Args:
        coords: (6, 3) nodal coordinates, bottom triangle then top triangle.
        conductivity: Isotropic thermal conductivity.
        element_id: Index used in the warning message.

    Returns:
        The (6, 6) matrix, the signed Jacobian determinant and a validity flag.
    """
    xyz = np.ascontiguousarray(coords, dtype=np.float64)
    if xyz.shape != (6, 3):
        raise ValueError(f"Wedge6 needs (6, 3) nodal coordinates, got shape {xyz.shape}.")

    B, detJ, valid = _wedge6_B_and_detJ(xyz)
    if not valid:
        label = f"Element {element_id}" if element_id is not None else "Element"
        logger.warning(
            f"{label}: invalid geometry (det(J) = {detJ:.6g}, inverted or degenerate). Contributes zero stiffness."
        )
        return ElementStiffness(np.zeros((6, 6), dtype=np.float64), float(detJ), False)

    _, weights = gauss.gauss_points_weights_wedge(1)
    k_e = (B.T @ B) * (conductivity * detJ * float(weights[0]))
    return ElementStiffness(k_e, float(detJ), True)


class Wedge6(FiniteElement):
    """
    Represents a six-node linear triangular prism (wedge) element.
    """
    def __init__(
        self,
        index: int,
        tag: str,
        nodes: list[Node],
        color: Color | None = None,
        conductivity: float = THERMAL_CONDUCTIVITY,
        layer_index: int = -1,
    ) -> None:
        """
        Initialize the Wedge6 element.

        Args:
            index: Element index.
            tag: Element tag.
            nodes: Six nodes, bottom triangle then top triangle.
            color: Display color of the originating layer.
            conductivity: Isotropic thermal conductivity.
            layer_index: Position of the originating layer in the input list.
        """
        if len(nodes) != 6:
            raise ValueError(f"Wedge6 requires exactly 6 nodes, got {len(nodes)}.")

        super().__init__(
            index=index,
            tag=tag,
            nodes=nodes,
            n_integration_points=1,
            color=color,
            conductivity=conductivity,
        )
        self.layer_index = layer_index

        self._B, self._detJ, self._valid = _wedge6_B_and_detJ(self.coords)
        self._gp, self._w = gauss.gauss_points_weights_wedge(self.n_integration_points)

    @staticmethod
    def shape_functions(iso_coords: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Calculate the shape functions for the Wedge6 element.

        Args:
            iso_coords: Natural coordinates [ksi, eta, zeta].

        Returns:
            Shape function values at the given coordinates ``[[N1, ..., N6]]``.
        """
        ksi, eta, zeta = iso_coords
        tri = np.array([1.0 - ksi - eta, ksi, eta])
        return np.array([np.concatenate((tri * (1.0 - zeta) / 2.0, tri * (1.0 + zeta) / 2.0))])

    @staticmethod
    def natural_derivatives(iso_coords: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Derivatives of the shape functions with respect to (ksi, eta, zeta).

        Returns:
            (3, 6) matrix. At the centroid this equals ``B_N``.
        """
        ksi, eta, zeta = iso_coords
        tri = np.array([1.0 - ksi - eta, ksi, eta])
        d_tri_d_ksi = np.array([-1.0, 1.0, 0.0])
        d_tri_d_eta = np.array([-1.0, 0.0, 1.0])
        lower, upper = (1.0 - zeta) / 2.0, (1.0 + zeta) / 2.0
        return np.array([
            np.concatenate((d_tri_d_ksi * lower, d_tri_d_ksi * upper)),
            np.concatenate((d_tri_d_eta * lower, d_tri_d_eta * upper)),
            np.concatenate((-tri / 2.0, tri / 2.0)),
        ])

    @property
    def volume(self) -> float:
        """
        Volume of the element from the one-point rule.

        Exact for right prisms (top triangle a vertical translation of the bottom one).
        Returns 0.0 for invalid elements.
        """
        if not self._valid:
            return 0.0
        return float(self._detJ * self._w.sum())

    @property
    def jacobian_matrix(self) -> npt.NDArray[np.float64]:
        """
        Calculate the Jacobian matrix for the Wedge6 element at the centroid.

        Returns:
            (3, 3) Jacobian matrix of the element.
        """
        return B_N @ self.coords

    @property
    def b_matrix(self) -> npt.NDArray[np.float64]:
        """
        The [B] matrix of the Wedge6 element at the centroid.

        [B] = ∇[N] = [J]⁻¹ [B_N]

        Returns:
            (3, 6) B matrix, zeros for invalid elements.
        """
        return self._B

    @property
    def jacobian_determinant(self) -> float:
        """
        Signed Jacobian determinant at the centroid.

        Returns:
            det(J)
        """
        return float(self._detJ)

    @property
    def is_valid(self) -> bool:
        """True unless the element is inverted or degenerate."""
        return bool(self._valid)

    def get_integration_scheme(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Return cached integration points and weights for the one-point wedge rule.

        Returns:
            Tuple of integration points and weights.
        """
        return self._gp, self._w

    def stiffness(self) -> ElementStiffness:
        """Local conductivity matrix and its validity."""
        return element_stiffness(self.coords, conductivity=self.conductivity, element_id=self.id)

    def get_conductivity_matrix(self) -> npt.NDArray[np.float64]:
        """
        Calculate element conductivity matrix [K] = Bᵀ B * k * det(J) * w.

        Returns:
            (6, 6) conductivity matrix for Wedge6.
        """
        return self.stiffness().matrix
