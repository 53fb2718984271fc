"""
Swept Mesh Generation
=====================
Turns a list of rectangular layers into a conforming mesh of six-node wedges.

Every layer footprint (x-z plane) is split into a regular grid of rectangular
cells, each cell is triangulated and every triangle is swept from the bottom
to the top face of the layer. Nodes are shared through a spatial hash so that
neighbouring cells and abutting layers are welded together.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np

from layerthermal.analysis.node import Node
from layerthermal.analysis.finite_elements.wedge6 import Wedge6
from layerthermal.config import DEFAULT_MESH_DENSITY, WELD_DECIMALS
from layerthermal.model.layers import InvalidLayerGeometryError, Layer, validate_layers
from layerthermal.pre.triangulation import triangulate_polygon
from layerthermal.utils import round_half_up, weld_key

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Spatial hash of mesh nodes.

    Maps integer keys ``round(coord * 10**decimals)`` to nodes. Nodes are only
    ever appended; the index of a node is its creation order.
    """
    def __init__(self, decimals: int = WELD_DECIMALS):
        self.decimals = decimals
        self.nodes: list[Node] = []
        self._lookup: dict[tuple[int, ...], Node] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    def get_or_create(self, x: float, y: float, z: float) -> Node:
        key = weld_key((x, y, z), self.decimals)
        node = self._lookup.get(key)
        if node is None:
            node = Node(index=len(self.nodes), coords=[x, y, z])
            self.nodes.append(node)
            self._lookup[key] = node
        return node

    def get(self, x: float, y: float, z: float) -> Node:
        key = weld_key((x, y, z), self.decimals)
        if key in self._lookup:
            return self._lookup[key]
        else:
            raise KeyError(f"No node at ({x}, {y}, {z}).")


def grid_divisions(length: float, density: float) -> int:
    """Number of equal cells along one footprint edge: ``max(1, round(length / density))``."""
    return max(1, round_half_up(length / density))


class Mesh:
    def __init__(
        self,
        nodes: list[Node],
        elements: list[Wedge6],
        layers: Sequence[Layer] = (),
    ) -> None:
        """
        Initialize the Mesh class.

        Args:
            nodes: Nodes ordered by index.
            elements: Wedge elements.
            layers: Layers the mesh was generated from, in input order.
        """
        self.nodes = sorted(nodes, key=lambda node: node.uid)
        self.elements = elements
        self.layers = list(layers)

    @classmethod
    def from_layers(
        cls,
        layers: Iterable[Layer],
        density: float = DEFAULT_MESH_DENSITY,
        weld_decimals: int = WELD_DECIMALS,
    ) -> Mesh:
        """Generate a swept wedge mesh from layers. See :func:`generate_swept_mesh`."""
        layers = validate_layers(layers)
        if not density > 0.0:
            raise InvalidLayerGeometryError(f"Mesh density must be positive, got {density}.")

        weld_tolerance = 10.0 ** -weld_decimals
        grids = []
        for layer in layers:
            dim = layer.dimensions
            num_div_x = grid_divisions(dim.w, density)
            num_div_z = grid_divisions(dim.d, density)
            step_x = dim.w / num_div_x
            step_z = dim.d / num_div_z
            if min(dim.h, step_x, step_z) <= weld_tolerance:
                raise InvalidLayerGeometryError(
                    f"Layer '{layer.name}' is finer than the weld tolerance {weld_tolerance:g} "
                    f"(height {dim.h:g}, cell {step_x:g} x {step_z:g}); its nodes would merge."
                )
            grids.append((num_div_x, num_div_z, step_x, step_z))

        registry = NodeRegistry(decimals=weld_decimals)
        elements: list[Wedge6] = []

        for layer_index, (layer, (num_div_x, num_div_z, step_x, step_z)) in enumerate(zip(layers, grids)):
            y_bottom, y_top = layer.y_bottom, layer.y_top

            n_before = len(elements)
            for i in range(num_div_x):
                for j in range(num_div_z):
                    x0 = layer.x_min + i * step_x
                    z0 = layer.z_min + j * step_z
                    x1 = x0 + step_x
                    z1 = z0 + step_z

                    corners = [(x0, z0), (x1, z0), (x1, z1), (x0, z1)]
                    triangles = triangulate_polygon([c for p in corners for c in p], dim=2)

                    bottom = [registry.get_or_create(x, y_bottom, z) for x, z in corners]
                    top = [registry.get_or_create(x, y_top, z) for x, z in corners]

                    for i1, i2, i3 in triangles:
                        # Triangulator output is counter-clockwise in (x, z); taking (i1, i3, i2)
                        # gives det(J) > 0 with the bottom face first.
                        element = Wedge6(
                            index=len(elements),
                            tag=layer.name,
                            nodes=[bottom[i1], bottom[i3], bottom[i2], top[i1], top[i3], top[i2]],
                            color=layer.color,
                            layer_index=layer_index,
                        )
                        elements.append(element)

            logger.debug(
                f"Layer '{layer.name}': {num_div_x} x {num_div_z} cells, {len(elements) - n_before} elements."
            )

        logger.info(f"Generated swept mesh: {len(registry)} nodes, {len(elements)} elements, {len(layers)} layers.")
        return cls(nodes=registry.nodes, elements=elements, layers=layers)

    @property
    def number_of_nodes(self) -> int:
        return len(self.nodes)

    @property
    def number_of_elements(self) -> int:
        return len(self.elements)

    @property
    def node_coordinates(self) -> npt.NDArray[np.float64]:
        """(n_nodes, 3) array of coordinates, row i belongs to node i."""
        if not self.nodes:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([node.coords for node in self.nodes], dtype=np.float64)

    @property
    def connectivity(self) -> npt.NDArray[np.int64]:
        """(n_elements, 6) array of node indices."""
        if not self.elements:
            return np.empty((0, 6), dtype=np.int64)
        return np.array([element.global_dofs for element in self.elements], dtype=np.int64)

    @property
    def element_colors(self) -> list:
        return [element.color for element in self.elements]

    @property
    def layer_indices(self) -> npt.NDArray[np.int64]:
        """Index of the originating layer for every element."""
        return np.array([element.layer_index for element in self.elements], dtype=np.int64)

    def elements_by_layer(self) -> dict[str, list[Wedge6]]:
        """Group elements by the name of their layer."""
        groups: dict[str, list[Wedge6]] = defaultdict(list)
        for element in self.elements:
            groups[element.tag].append(element)
        return dict(groups)

    def add_node(self, node: Node) -> None:
        """Add a node to the mesh."""
        self.nodes.append(node)

    def add_element(self, element: Wedge6) -> None:
        """Add an element to the mesh."""
        self.elements.append(element)


def generate_swept_mesh(
    layers: Iterable[Layer],
    density: float = DEFAULT_MESH_DENSITY,
    weld_decimals: int = WELD_DECIMALS,
) -> Mesh:
    """
    Convert rectangular layers into a welded mesh of six-node wedges.

    Each layer footprint is divided into ``max(1, round(w / density))`` by
    ``max(1, round(d / density))`` equal cells, two wedges per cell.

    Args:
        layers: Layers in stacking order.
        density: Target in-plane cell size.
        weld_decimals: Coordinates equal after rounding to this many decimals share a node.

    Raises:
        InvalidLayerGeometryError: If a layer has non-positive dimensions, the density is not positive
            or a layer height or cell size is within the weld tolerance.

    Returns:
        The generated mesh.
    """
    return Mesh.from_layers(layers, density=density, weld_decimals=weld_decimals)
