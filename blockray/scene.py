"""
Scene container and ray queries.

The scene is a flat, ordered list of primitives searched linearly. Queries
never modify it, so any number of render threads may query it at once as
long as nobody edits it mid-frame (see ``RenderContext.editing``).
"""

from __future__ import annotations
from typing import Iterable, Iterator, List, Optional, Tuple

from .ray import Ray
from .shapes import Intersection, Primitive, intersect, is_primitive
from .vec3 import Point3, Vec3

# Starting "closest so far" distance. Finite so that a hit farther away than
# any real scene extent still reads as no hit.
FAR_DISTANCE = 99999.0


class Scene:
    """An ordered collection of primitives."""

    def __init__(self, primitives: Optional[Iterable[Primitive]] = None):
        self.primitives: List[Primitive] = []
        if primitives is not None:
            self.extend(primitives)

    def add(self, primitive: Primitive) -> None:
        """Append a primitive to the scene."""
        if not is_primitive(primitive):
            raise TypeError(f"Scene only holds spheres and cubes, got {type(primitive).__name__}")
        self.primitives.append(primitive)

    def extend(self, primitives: Iterable[Primitive]) -> None:
        for primitive in primitives:
            self.add(primitive)

    def clear(self) -> None:
        """Remove all primitives."""
        self.primitives.clear()

    def __len__(self) -> int:
        return len(self.primitives)

    def __iter__(self) -> Iterator[Primitive]:
        return iter(self.primitives)

    def nearest_hit(self, ray: Ray) -> Tuple[Optional[Primitive], Intersection]:
        """Find the closest primitive along a ray.

        Returns:
            (primitive, intersection), or (None, a miss) when nothing is hit
            closer than FAR_DISTANCE. On equal distances the earlier
            primitive wins.
        """
        closest = FAR_DISTANCE
        hit_primitive: Optional[Primitive] = None
        hit = Intersection.miss()

        for primitive in self.primitives:
            candidate = intersect(primitive, ray)
            if candidate.hit and candidate.distance < closest:
                closest = candidate.distance
                hit_primitive = primitive
                hit = candidate

        return hit_primitive, hit

    def occluded(
        self,
        origin: Point3,
        direction: Vec3,
        excluded: Optional[Primitive] = None,
        max_distance: float = 1.0,
    ) -> bool:
        """Check whether anything but ``excluded`` blocks a shadow ray.

        The ray is ``origin + t * direction``; a blocker counts when it is
        hit at t < max_distance.
        """
        ray = Ray(origin, direction)
        for primitive in self.primitives:
            if primitive is excluded:
                continue
            candidate = intersect(primitive, ray)
            if candidate.hit and candidate.distance < max_distance:
                return True
        return False

    def __repr__(self) -> str:
        return f"Scene({len(self.primitives)} primitives)"
