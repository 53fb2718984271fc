"""
Layer Definitions (Data Model)
==============================
A device cross-section is described as an ordered list of axis-aligned
rectangular prisms. Each prism is one material layer.

Classes:
    Dimensions: Width (x), height (y) and depth (z) of a layer.
    Position: Center point of a layer.
    Layer: Immutable layer record.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Union

Color = Union[int, str]


class InvalidLayerGeometryError(ValueError):
    """Raised when a layer cannot be meshed (non-positive or non-finite geometry)."""


@dataclass(frozen=True)
class Dimensions:
    w: float
    h: float
    d: float


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class Layer:
    """
    A rectangular material layer.

    The layer spans ``position ± dimensions / 2`` along each axis. ``y`` is the
    stacking (vertical) direction; the footprint lies in the x-z plane.
    """
    name: str
    dimensions: Dimensions
    position: Position = field(default_factory=Position)
    color: Color = 0x888888

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Layer:
        """Create a layer from ``{name, color, dimensions:{w,h,d}, position:{x,y,z}}``."""
        try:
            dims = data["dimensions"]
            pos = data.get("position", {})
            return cls(
                name=str(data["name"]),
                color=data.get("color", 0x888888),
                dimensions=Dimensions(w=float(dims["w"]), h=float(dims["h"]), d=float(dims["d"])),
                position=Position(
                    x=float(pos.get("x", 0.0)),
                    y=float(pos.get("y", 0.0)),
                    z=float(pos.get("z", 0.0)),
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidLayerGeometryError(f"Malformed layer record {data!r}: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "color": self.color,
            "dimensions": {"w": self.dimensions.w, "h": self.dimensions.h, "d": self.dimensions.d},
            "position": {"x": self.position.x, "y": self.position.y, "z": self.position.z},
        }

    @property
    def x_min(self) -> float:
        return self.position.x - self.dimensions.w / 2

    @property
    def x_max(self) -> float:
        return self.position.x + self.dimensions.w / 2

    @property
    def y_bottom(self) -> float:
        return self.position.y - self.dimensions.h / 2

    @property
    def y_top(self) -> float:
        return self.position.y + self.dimensions.h / 2

    @property
    def z_min(self) -> float:
        return self.position.z - self.dimensions.d / 2

    @property
    def z_max(self) -> float:
        return self.position.z + self.dimensions.d / 2

    def validate(self) -> None:
        """
        Check that the layer describes a real, finite box.

        Raises:
            InvalidLayerGeometryError: If any dimension is non-positive or any value is not finite.
        """
        dims = (self.dimensions.w, self.dimensions.h, self.dimensions.d)
        pos = (self.position.x, self.position.y, self.position.z)
        if not all(math.isfinite(v) for v in dims + pos):
            raise InvalidLayerGeometryError(f"Layer '{self.name}' has non-finite geometry: {dims=}, {pos=}")
        if min(dims) <= 0.0:
            raise InvalidLayerGeometryError(
                f"Layer '{self.name}' must have positive width, height and depth, got {dims}."
            )


def validate_layers(layers: Iterable[Layer]) -> list[Layer]:
    """Validate every layer and return them as a list (input order preserved)."""
    checked = []
    for layer in layers:
        layer.validate()
        checked.append(layer)
    return checked
