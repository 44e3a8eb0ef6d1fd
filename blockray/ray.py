"""
Ray class for representing rays in 3D space.

Ray(t) = origin + t * direction
"""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """A ray with origin and direction.

    Primary, reflected and refracted rays carry unit directions, so t is a
    distance. Shadow rays carry the unnormalized vector to the light, which
    puts the light itself at t = 1.
    """

    __slots__ = ('origin', 'direction')

    def __init__(self, origin: Point3, direction: Vec3):
        self.origin = origin
        self.direction = direction

    def at(self, t: float) -> Point3:
        """Get the point along the ray at parameter t."""
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
