"""Tests for the scene container and its ray queries."""

import pytest
from blockray.vec3 import Vec3, Point3
from blockray.ray import Ray
from blockray.shapes import Sphere, Cube
from blockray.scene import Scene, FAR_DISTANCE


class TestSceneContainer:
    """Test Scene bookkeeping."""

    def test_empty(self):
        scene = Scene()
        assert len(scene) == 0

    def test_add_keeps_order(self):
        a = Sphere(Point3(0, 0, 0), 1.0)
        b = Cube(Point3(3, 0, 0), 1.0)
        scene = Scene([a])
        scene.add(b)
        assert list(scene) == [a, b]

    def test_rejects_non_primitives(self):
        with pytest.raises(TypeError):
            Scene().add("cube")

    def test_clear(self):
        scene = Scene([Sphere(Point3(0, 0, 0), 1.0)])
        scene.clear()
        assert len(scene) == 0


class TestNearestHit:
    """Test Scene.nearest_hit()."""

    def test_empty_scene_misses(self):
        primitive, hit = Scene().nearest_hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert primitive is None
        assert hit.hit is False

    def test_picks_closest_regardless_of_order(self):
        far = Cube(Point3(0, 0, -10), 1.0)
        near = Sphere(Point3(0, 0, -4), 1.0)
        scene = Scene([far, near])

        primitive, hit = scene.nearest_hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert primitive is near
        assert abs(hit.distance - 3.0) < 1e-9

    def test_tie_goes_to_first(self):
        first = Cube(Point3(0, 0, -5), 2.0)
        second = Cube(Point3(0, 0, -5), 2.0)
        scene = Scene([first, second])

        primitive, _ = scene.nearest_hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert primitive is first

    def test_ignores_hits_beyond_far_distance(self):
        scene = Scene([Sphere(Point3(0, 0, -(FAR_DISTANCE + 10)), 1.0)])
        primitive, hit = scene.nearest_hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert primitive is None
        assert not hit.hit

    def test_query_has_no_side_effects(self):
        scene = Scene([Cube(Point3(0, 0, -5), 2.0)])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        first = scene.nearest_hit(ray)
        second = scene.nearest_hit(ray)
        assert first[0] is second[0]
        assert first[1].distance == second[1].distance
        assert len(scene) == 1


class TestOccluded:
    """Test shadow-ray occlusion queries."""

    def test_blocker_before_light(self):
        blocker = Cube(Point3(0, 3, 0), 1.0)
        scene = Scene([blocker])
        # Light 6 units up; the blocker sits halfway
        assert scene.occluded(Point3(0, 0, 0), Vec3(0, 6, 0))

    def test_blocker_beyond_light(self):
        scene = Scene([Cube(Point3(0, 10, 0), 1.0)])
        assert not scene.occluded(Point3(0, 0, 0), Vec3(0, 6, 0))

    def test_excluded_primitive_is_skipped(self):
        blocker = Cube(Point3(0, 3, 0), 1.0)
        scene = Scene([blocker])
        assert not scene.occluded(Point3(0, 0, 0), Vec3(0, 6, 0), excluded=blocker)

    def test_blocker_off_axis(self):
        scene = Scene([Sphere(Point3(5, 3, 0), 1.0)])
        assert not scene.occluded(Point3(0, 0, 0), Vec3(0, 6, 0))
