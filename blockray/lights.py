"""
Light source for the ray tracer.

Scenes are lit by a single point light. It has no falloff: the shading
formula scales every contribution by the raw intensity.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .vec3 import Vec3, Point3, Color


@dataclass(frozen=True)
class PointLight:
    """A point light source.

    Attributes:
        position: Position of the light
        intensity: Brightness multiplier (> 0)
        color: Color of the specular highlight
    """
    position: Point3
    intensity: float = 1.0
    color: Color = field(default_factory=lambda: Color(1, 1, 1))

    def __post_init__(self):
        if not self.intensity > 0:
            raise ValueError(f"Light intensity must be positive, got {self.intensity}")

    def direction_from(self, point: Point3) -> Vec3:
        """Unit direction from a surface point towards the light."""
        return (self.position - point).normalize()
