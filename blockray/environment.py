"""
Backgrounds for rays that leave the scene.

Implements:
- Six-face cube-map skybox with nearest-texel lookup
- Solid color and gradient backgrounds for scenes without sky images
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Tuple, Union
import logging

from .errors import SkyboxProjectionError
from .textures import ImageTexture
from .vec3 import Vec3, Color

logger = logging.getLogger(__name__)

FACES = ('+x', '-x', '+y', '-y', '+z', '-z')

# Image file for each face inside a skybox directory
FACE_FILES: Dict[str, str] = {
    '+x': 'right.png',
    '-x': 'back.png',
    '+y': 'top.png',
    '-y': 'bottom.png',
    '+z': 'front.png',
    '-z': 'left.png',
}


class Environment(ABC):
    """Abstract base class for backgrounds."""

    @abstractmethod
    def sample(self, direction: Vec3) -> Color:
        """Get the background color seen along a direction.

        Args:
            direction: The direction to sample (unit length)

        Returns:
            Color value from the environment
        """
        pass


class SolidColorEnvironment(Environment):
    """A solid color background."""

    def __init__(self, color: Color = Color(0, 0, 0)):
        self.color = color

    def sample(self, direction: Vec3) -> Color:
        return self.color


class GradientEnvironment(Environment):
    """A vertical gradient background (simple sky)."""

    def __init__(
        self,
        horizon_color: Color = Color(1, 1, 1),
        zenith_color: Color = Color(0.5, 0.7, 1.0),
        ground_color: Optional[Color] = None
    ):
        """Create a gradient environment.

        Args:
            horizon_color: Color at the horizon
            zenith_color: Color at the top of the sky
            ground_color: Color below horizon (defaults to darker horizon)
        """
        self.horizon_color = horizon_color
        self.zenith_color = zenith_color
        self.ground_color = ground_color if ground_color else horizon_color * 0.5

    def sample(self, direction: Vec3) -> Color:
        t = max(-1.0, min(1.0, direction.normalize().y))

        if t >= 0:
            return self.horizon_color * (1 - t) + self.zenith_color * t
        t = -t
        return self.horizon_color * (1 - t) + self.ground_color * t


class CubeMapSkybox(Environment):
    """Cube-map skybox built from six face images."""

    def __init__(self, faces: Dict[str, ImageTexture]):
        """Create a skybox.

        Args:
            faces: One image per face, keyed '+x', '-x', '+y', '-y', '+z', '-z'
        """
        missing = [face for face in FACES if face not in faces]
        if missing:
            raise ValueError(f"Skybox is missing faces: {', '.join(missing)}")
        self.faces = {face: faces[face] for face in FACES}

    @staticmethod
    def project(direction: Vec3) -> Tuple[str, float, float]:
        """Project a direction onto the cube.

        The dominant axis picks the face pair and its sign picks the face;
        the two remaining components, divided by the dominant one, give the
        face-local coordinates.

        Returns:
            (face, u, v) with u, v in [0, 1]
        """
        x, y, z = direction.x, direction.y, direction.z
        abs_x, abs_y, abs_z = abs(x), abs(y), abs(z)

        if abs_x >= abs_y and abs_x >= abs_z:
            face = '+x' if x > 0 else '-x'
            u, v = -z / abs_x, -y / abs_x
        elif abs_y >= abs_x and abs_y >= abs_z:
            face = '+y' if y > 0 else '-y'
            u, v = x / abs_y, z / abs_y
        else:
            face = '+z' if z > 0 else '-z'
            u, v = x / abs_z, -y / abs_z

        return face, u * 0.5 + 0.5, v * 0.5 + 0.5

    def sample(self, direction: Vec3) -> Color:
        if not direction.is_finite() or direction.length_squared() == 0:
            raise SkyboxProjectionError(f"Cannot project direction {direction} onto the skybox")

        face, u, v = self.project(direction)
        texture = self.faces[face]
        i = self._texel_index(u, texture.width)
        j = self._texel_index(v, texture.height)

        if i is None or j is None:
            raise SkyboxProjectionError(
                f"Texture coordinates out of bounds on face {face}: u={u}, v={v}"
            )
        return texture.texel(i, j)

    @staticmethod
    def _texel_index(coord: float, size: int) -> Optional[int]:
        if not 0.0 <= coord <= 1.0:
            return None
        # coord == 1 sits on the far edge of the face; it belongs to the last texel
        return min(int(coord * size), size - 1)


def load_skybox(directory: Union[str, Path], gamma: float = 2.2) -> CubeMapSkybox:
    """Load the six skybox faces from a directory.

    Args:
        directory: Folder holding right/back/top/bottom/front/left .png
        gamma: Gamma for converting the face images to linear color

    Returns:
        CubeMapSkybox instance
    """
    directory = Path(directory)
    faces = {
        face: ImageTexture.from_file(directory / filename, gamma=gamma)
        for face, filename in FACE_FILES.items()
    }
    logger.info("Loaded skybox from %s", directory)
    return CubeMapSkybox(faces)
