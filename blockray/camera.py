"""
Camera module for generating primary rays.

A pinhole camera described by position, look-at target and an up hint.
Field of view and resolution are passed per frame, so one camera can drive
renders of any size.
"""

from __future__ import annotations
import math
from typing import Tuple

from .errors import CameraError
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A look-at pinhole camera."""

    def __init__(
        self,
        position: Point3,
        target: Point3,
        up: Vec3 = Vec3(0, 1, 0),
    ):
        """Create a camera.

        Args:
            position: Camera position in world space
            target: Point the camera is looking at
            up: World up hint (need not be unit length)
        """
        self.position = position
        self.target = target
        self.up = up

    def basis(self) -> Tuple[Vec3, Vec3, Vec3]:
        """Compute the orthonormal camera basis.

        Returns:
            (forward, right, up) unit vectors

        Raises:
            CameraError: if the target sits on the camera or forward is
                parallel to the up hint
        """
        forward = (self.target - self.position).normalize()
        if forward.near_zero():
            raise CameraError(f"Camera target {self.target} coincides with its position")

        right = forward.cross(self.up)
        if right.near_zero():
            raise CameraError(f"Camera forward {forward} is parallel to up {self.up}")
        right = right.normalize()
        up = right.cross(forward).normalize()
        return forward, right, up

    def ray_direction(self, x: int, y: int, width: int, height: int, fov: float) -> Vec3:
        """Direction of the primary ray through a pixel center.

        Args:
            x: Pixel column (0 = left)
            y: Pixel row (0 = top)
            width: Framebuffer width in pixels
            height: Framebuffer height in pixels
            fov: Vertical field of view in degrees

        Returns:
            Unit world-space direction
        """
        return self.pixel_direction(self.basis(), x, y, width, height, fov)

    def get_ray(self, x: int, y: int, width: int, height: int, fov: float) -> Ray:
        """Primary ray from the camera through a pixel center."""
        return Ray(self.position, self.ray_direction(x, y, width, height, fov))

    @staticmethod
    def pixel_direction(
        basis: Tuple[Vec3, Vec3, Vec3],
        x: int, y: int, width: int, height: int, fov: float
    ) -> Vec3:
        """Same as ray_direction, for a basis computed once per frame."""
        forward, right, up = basis
        scale = math.tan(math.radians(fov) / 2.0)
        aspect_ratio = width / height

        screen_x = (2.0 * (x + 0.5)) / width - 1.0
        screen_y = -(2.0 * (y + 0.5)) / height + 1.0
        screen_x *= aspect_ratio * scale
        screen_y *= scale

        return (forward + right * screen_x + up * screen_y).normalize()

    def __repr__(self) -> str:
        return f"Camera(position={self.position}, target={self.target}, up={self.up})"
