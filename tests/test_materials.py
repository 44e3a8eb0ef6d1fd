"""Tests for materials."""

import pytest

from blockray.vec3 import Color
from blockray.textures import SolidColor
from blockray.materials import Material, PRESETS
from blockray.errors import MaterialError


class TestMaterial:
    """Test Material construction and validation."""

    def test_defaults(self, matte):
        assert matte.albedo == 1.0
        assert matte.reflectivity == 0.0
        assert matte.transparency == 0.0
        assert matte.local_weight == 1.0

    def test_is_immutable(self, matte):
        with pytest.raises(AttributeError):
            matte.albedo = 0.1

    def test_local_weight(self):
        mat = Material(SolidColor(Color(1, 1, 1)), reflectivity=0.1, transparency=0.55)
        assert mat.local_weight == pytest.approx(0.35)

    @pytest.mark.parametrize("kwargs", [
        {'specular_coefficient': 0.0},
        {'refraction_index': 0.0},
        {'reflectivity': 1.5},
        {'transparency': -0.1},
    ])
    def test_invalid_coefficients(self, kwargs):
        with pytest.raises(MaterialError):
            Material(SolidColor(Color(1, 1, 1)), **kwargs)

    def test_overfull_mix_is_allowed_with_warning(self, caplog):
        mat = Material(SolidColor(Color(1, 1, 1)), reflectivity=0.8, transparency=0.5)
        assert mat.local_weight < 0
        assert "exceeds 1" in caplog.text

    @pytest.mark.parametrize("name", sorted(PRESETS))
    def test_presets(self, name):
        texture = SolidColor(Color(1, 1, 1))
        mat = Material.preset(name, texture)
        assert mat.texture is texture
        assert mat.albedo == PRESETS[name][0]

    def test_water_preset_is_transparent(self):
        water = Material.preset('water', SolidColor(Color(0, 0, 1)))
        assert water.transparency == 0.55
        assert water.reflectivity == 0.1

    def test_unknown_preset(self):
        with pytest.raises(MaterialError):
            Material.preset('lava', SolidColor(Color(1, 0, 0)))
