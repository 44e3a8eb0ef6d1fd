"""Tests for the point light."""

import pytest
from blockray.vec3 import Vec3, Point3, Color
from blockray.lights import PointLight


class TestPointLight:
    """Test PointLight."""

    def test_defaults(self):
        light = PointLight(Point3(0, 5, 6))
        assert light.intensity == 1.0
        assert light.color == Color(1, 1, 1)

    def test_direction_from_is_unit(self):
        light = PointLight(Point3(0, 10, 0), 2.0)
        direction = light.direction_from(Point3(0, 0, 0))
        assert direction == Vec3(0, 1, 0)

    def test_direction_from_oblique_point(self):
        light = PointLight(Point3(3, 4, 0))
        direction = light.direction_from(Point3(0, 0, 0))
        assert direction == Vec3(0.6, 0.8, 0)

    @pytest.mark.parametrize("intensity", [0.0, -1.0])
    def test_non_positive_intensity_rejected(self, intensity):
        with pytest.raises(ValueError):
            PointLight(Point3(0, 0, 0), intensity)

    def test_is_immutable(self):
        light = PointLight(Point3(0, 0, 0))
        with pytest.raises(AttributeError):
            light.intensity = 3.0
