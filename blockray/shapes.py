"""
Geometric primitives for the ray tracer.

The primitive set is closed: a scene holds spheres and axis-aligned cubes
only. Both expose ``intersect(ray)`` and return an :class:`Intersection`;
callers that hold an arbitrary primitive go through :func:`intersect`, which
dispatches on the concrete type.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple, Type, Union, TYPE_CHECKING
import math

from .errors import GeometryError
from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


# Rays closer than this to parallel with a cube face never hit it
PARALLEL_EPSILON = 1e-6
# Slack on the cube extent test so edge and corner hits are not lost
EXTENT_EPSILON = 1e-6


@dataclass
class Intersection:
    """Result of a ray-primitive test.

    When ``hit`` is False every other field is meaningless.

    Attributes:
        hit: Whether the ray meets the primitive at t >= 0
        distance: Ray parameter of the hit (inf on a miss)
        point: The intersection point in world space
        normal: Unit surface normal, always facing against the ray
        u, v: Surface coordinates in [0, 1] for texture lookup
        front_face: True if the ray arrived from outside the primitive
    """
    hit: bool
    distance: float = math.inf
    point: Point3 = field(default_factory=Vec3)
    normal: Vec3 = field(default_factory=Vec3)
    u: float = 0.0
    v: float = 0.0
    front_face: bool = True

    @classmethod
    def miss(cls) -> 'Intersection':
        return cls(hit=False)

    @property
    def uv(self) -> Tuple[float, float]:
        return self.u, self.v


class Sphere:
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Optional[Material] = None):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (> 0)
            material: Material for shading
        """
        if not radius > 0:
            raise GeometryError(f"Sphere radius must be positive, got {radius}")
        self.center = center
        self.radius = radius
        self.material = material

    def intersect(self, ray: Ray) -> Intersection:
        """Test ray-sphere intersection using the quadratic formula.

        (P-C)·(P-C) = r² with P = O + tD expands to
        t²(D·D) + 2t(D·(O-C)) + (O-C)·(O-C) - r² = 0.
        The smallest non-negative root wins, so a ray starting inside the
        sphere hits the far wall.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        if a == 0:
            return Intersection.miss()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return Intersection.miss()

        sqrtd = math.sqrt(discriminant)

        root = (-half_b - sqrtd) / a
        if root < 0:
            root = (-half_b + sqrtd) / a
            if root < 0:
                return Intersection.miss()

        point = ray.at(root)
        outward_normal = (point - self.center) / self.radius
        u, v = self._get_sphere_uv(outward_normal)

        front_face = ray.direction.dot(outward_normal) < 0
        return Intersection(
            hit=True,
            distance=root,
            point=point,
            normal=outward_normal if front_face else -outward_normal,
            u=u,
            v=v,
            front_face=front_face,
        )

    @staticmethod
    def _get_sphere_uv(p: Vec3) -> Tuple[float, float]:
        """Longitude/latitude coordinates for a point on the unit sphere.

        u: angle around the Y axis from X=-1, in [0, 1]
        v: angle from Y=-1 to Y=+1, in [0, 1]
        """
        theta = math.acos(max(-1.0, min(1.0, -p.y)))
        phi = math.atan2(-p.z, p.x) + math.pi

        return phi / (2 * math.pi), theta / math.pi

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Cube:
    """An axis-aligned cube defined by center and side length."""

    def __init__(self, center: Point3, side: float, material: Optional[Material] = None):
        """Create a cube.

        Args:
            center: Center point of the cube
            side: Edge length (> 0)
            material: Material for shading
        """
        if not side > 0:
            raise GeometryError(f"Cube side must be positive, got {side}")
        self.center = center
        self.side = side
        self.half = side / 2.0
        self.material = material

    def intersect(self, ray: Ray) -> Intersection:
        """Test the ray against the six face planes of the cube.

        A face candidate is accepted when its hit point lies inside the cube
        on all three axes; the nearest accepted candidate wins.
        """
        origin = ray.origin
        direction = ray.direction
        center = self.center
        half = self.half

        t_near = math.inf
        best_axis = -1
        best_sign = 0.0

        for axis in range(3):
            d = direction[axis]
            if abs(d) <= PARALLEL_EPSILON:
                continue
            for sign in (1.0, -1.0):
                t = (center[axis] + sign * half - origin[axis]) / d
                if t < 0 or t >= t_near:
                    continue
                point = ray.at(t)
                if (abs(point.x - center.x) <= half + EXTENT_EPSILON and
                        abs(point.y - center.y) <= half + EXTENT_EPSILON and
                        abs(point.z - center.z) <= half + EXTENT_EPSILON):
                    t_near = t
                    best_axis = axis
                    best_sign = sign

        if best_axis < 0:
            return Intersection.miss()

        outward = [0.0, 0.0, 0.0]
        outward[best_axis] = best_sign
        outward_normal = Vec3(*outward)

        front_face = outward_normal.dot(direction) <= 0
        normal = outward_normal if front_face else -outward_normal

        point = ray.at(t_near)
        u, v = self._face_uv(point, normal)
        return Intersection(
            hit=True,
            distance=t_near,
            point=point,
            normal=normal,
            u=u,
            v=v,
            front_face=front_face,
        )

    def _face_uv(self, point: Point3, normal: Vec3) -> Tuple[float, float]:
        """Face-local texture coordinates.

        The flips line the block textures up so their seams meet on the
        neighbouring faces; both faces of an axis share one orientation.
        """
        side = self.side
        fx = (point.x - (self.center.x - self.half)) / side
        fy = (point.y - (self.center.y - self.half)) / side
        fz = (point.z - (self.center.z - self.half)) / side

        if abs(normal.x) > 0.5:
            u, v = 1.0 - fz, 1.0 - fy
        elif abs(normal.y) > 0.5:
            u, v = fx, fz
        else:
            u, v = 1.0 - fx, 1.0 - fy

        return _unit(u), _unit(v)

    def __repr__(self) -> str:
        return f"Cube(center={self.center}, side={self.side})"


def _unit(value: float) -> float:
    return max(0.0, min(1.0, value))


Primitive = Union[Sphere, Cube]

_INTERSECTORS: Dict[Type, Callable[[Primitive, Ray], Intersection]] = {
    Sphere: Sphere.intersect,
    Cube: Cube.intersect,
}


def is_primitive(obj: object) -> bool:
    """True for the primitive types a scene can hold."""
    return type(obj) in _INTERSECTORS


def intersect(primitive: Primitive, ray: Ray) -> Intersection:
    """Intersect any scene primitive with a ray."""
    try:
        intersector = _INTERSECTORS[type(primitive)]
    except KeyError:
        raise TypeError(f"Not a scene primitive: {type(primitive).__name__}") from None
    return intersector(primitive, ray)
