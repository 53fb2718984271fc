from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def gauss_points_weights_wedge(n_points: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Generate integration points and weights for a wedge (triangular prism).

    Points are given as natural coordinates (ksi, eta, zeta) where (ksi, eta) live on
    the unit triangle (0,0), (1,0), (0,1) and zeta runs from -1 (bottom) to +1 (top).
    The reference wedge has volume 1 (triangle area 1/2 times height 2).

    Args:
        n_points: Number of integration points.

    Raises:
        ValueError: If `n_points` is not 1.

    Returns:
        A tuple containing the integration points and weights.
    """
    if n_points == 1:
        return np.array([[1.0/3.0, 1.0/3.0, 0.0]]), np.array([1.0])
    else:
        raise ValueError(f"Unsupported number of Gauss points: {n_points}. "
                         f"'n_points' must be 1.")
