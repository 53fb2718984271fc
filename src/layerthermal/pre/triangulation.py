"""
Polygon triangulation (ear clipping) for layer footprints.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import mapbox_earcut as earcut
import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def triangulate_polygon(
    vertices: Sequence[float] | npt.NDArray[np.float64],
    hole_indices: Sequence[int] | None = None,
    dim: int = 2,
) -> npt.NDArray[np.int64]:
    """
    Triangulate a simple polygon with optional holes.

    Args:
        vertices: Flat vertex coordinates ``[x0, y0, x1, y1, ...]`` of the outer ring
            followed by the hole rings.
        hole_indices: Vertex index at which each hole ring starts.
        dim: Number of coordinates per vertex. Only the first two are used.

    Raises:
        ValueError: If ``dim < 2``, the coordinate count is not a multiple of ``dim``
            or a hole index is out of range.

    Returns:
        (n_triangles, 3) array of vertex indices. Triangles are counter-clockwise
        in the (first, second) coordinate plane.
    """
    if dim < 2:
        raise ValueError(f"Unsupported dimension: {dim}. 'dim' must be at least 2.")

    flat = np.asarray(vertices, dtype=np.float64).ravel()
    if flat.size % dim:
        raise ValueError(f"{flat.size} coordinates cannot be split into {dim}-dimensional vertices.")

    points = np.ascontiguousarray(flat.reshape(-1, dim)[:, :2])
    n_vertices = points.shape[0]

    starts = list(hole_indices or [])
    if any(s <= 0 or s >= n_vertices for s in starts) or starts != sorted(starts):
        raise ValueError(f"Invalid hole indices {starts} for {n_vertices} vertices.")

    # earcut expects the end index of every ring, the last one being the vertex count
    ring_ends = np.array(starts + [n_vertices], dtype=np.uint32)

    indices = earcut.triangulate_float64(points, ring_ends)
    return np.asarray(indices, dtype=np.int64).reshape(-1, 3)
