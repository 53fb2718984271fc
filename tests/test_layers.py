import json

import pytest

from layerthermal.config import DEFAULT_LAYERS_PATH
from layerthermal.model.catalog import default_device_layers, load_layers, save_layers
from layerthermal.model.layers import Dimensions, InvalidLayerGeometryError, Layer, Position, validate_layers


class TestLayer:

    def test_extents(self):
        layer = Layer("Oxide", Dimensions(w=80, h=10, d=60), Position(x=5, y=5, z=-10))
        assert layer.x_min == -35 and layer.x_max == 45
        assert layer.y_bottom == 0 and layer.y_top == 10
        assert layer.z_min == -40 and layer.z_max == 20

    def test_dict_round_trip(self):
        layer = Layer("Metal 1 (W)", Dimensions(10, 15, 60), Position(-20, 17.5, 0), color=0xCCCCCC)
        assert Layer.from_dict(layer.to_dict()) == layer

    def test_from_dict_defaults_position(self):
        layer = Layer.from_dict({"name": "A", "dimensions": {"w": 1, "h": 2, "d": 3}})
        assert layer.position == Position(0.0, 0.0, 0.0)

    def test_from_dict_non_numeric_dimension(self):
        with pytest.raises(InvalidLayerGeometryError):
            Layer.from_dict({"name": "A", "dimensions": {"w": "abc", "h": 2, "d": 3}})

    def test_from_dict_missing_dimensions(self):
        with pytest.raises(InvalidLayerGeometryError):
            Layer.from_dict({"name": "A"})

    @pytest.mark.parametrize("dims", [(0, 1, 1), (1, -1, 1), (1, 1, 0)])
    def test_non_positive_dimensions_rejected(self, dims):
        layer = Layer("Bad", Dimensions(*dims))
        with pytest.raises(InvalidLayerGeometryError):
            layer.validate()

    def test_non_finite_geometry_rejected(self):
        layer = Layer("Bad", Dimensions(1, 1, 1), Position(float("nan"), 0, 0))
        with pytest.raises(InvalidLayerGeometryError):
            validate_layers([layer])

    def test_layers_are_immutable(self, slab):
        with pytest.raises(AttributeError):
            slab.name = "other"


class TestCatalog:

    def test_default_stack(self):
        layers = default_device_layers()
        assert [layer.name for layer in layers] == [
            "Substrate (Si)", "Oxide (SiO2)", "Metal 1 (W)", "Metal 2 (Cu)"
        ]
        validate_layers(layers)

    def test_bundled_file_matches_default_stack(self):
        assert load_layers(DEFAULT_LAYERS_PATH) == default_device_layers()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "layers.json"
        save_layers(str(path), default_device_layers())
        assert load_layers(str(path)) == default_device_layers()

    def test_load_plain_list(self, tmp_path, slab):
        path = tmp_path / "layers.json"
        path.write_text(json.dumps([slab.to_dict()]))
        assert load_layers(str(path)) == [slab]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_layers(str(tmp_path / "missing.json"))

    def test_load_wrong_shape(self, tmp_path):
        path = tmp_path / "layers.json"
        path.write_text(json.dumps({"layers": 3}))
        with pytest.raises(InvalidLayerGeometryError):
            load_layers(str(path))
