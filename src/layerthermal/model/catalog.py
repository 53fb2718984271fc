"""
Layer Catalog
=============
The default device stack and helpers to read and write layer lists as JSON.
"""
from __future__ import annotations

import json
import logging
import os

from layerthermal.config import DEFAULT_LAYERS_PATH
from layerthermal.model.layers import Dimensions, InvalidLayerGeometryError, Layer, Position

logger = logging.getLogger(__name__)


def default_device_layers() -> list[Layer]:
    """Substrate, oxide and two metal lines of the demo device."""
    return [
        Layer("Substrate (Si)", Dimensions(w=100, h=20, d=100), Position(x=0, y=-10, z=0), color=0x888888),
        Layer("Oxide (SiO2)", Dimensions(w=80, h=10, d=80), Position(x=0, y=5, z=0), color=0x00AAFF),
        Layer("Metal 1 (W)", Dimensions(w=10, h=15, d=60), Position(x=-20, y=17.5, z=0), color=0xCCCCCC),
        Layer("Metal 2 (Cu)", Dimensions(w=10, h=15, d=60), Position(x=20, y=17.5, z=0), color=0xFFAA00),
    ]


def load_layers(filepath: str = DEFAULT_LAYERS_PATH) -> list[Layer]:
    """
    Read a layer list from a JSON file.

    The file holds either a list of layer records or ``{"layers": [...]}``.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidLayerGeometryError: If a record is malformed.
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Layer file not found: {filepath}")

    logger.info(f"Loading layers from: {filepath}")
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    records = data.get("layers") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise InvalidLayerGeometryError(f"File '{filepath}' does not contain a list of layers.")

    layers = [Layer.from_dict(record) for record in records]
    logger.debug(f"Loaded {len(layers)} layers.")
    return layers


def save_layers(filepath: str, layers: list[Layer]) -> None:
    """Write a layer list as ``{"layers": [...]}`` JSON."""
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump({"layers": [layer.to_dict() for layer in layers]}, f, indent=2)
    logger.info(f"Saved {len(layers)} layers to: {filepath}")
