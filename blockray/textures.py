"""
Texture system for surface colors.

Implements:
- Solid color textures
- Image textures (from files or in-memory arrays)
- UV checker textures for procedural blocks

Every texture answers ``value(u, v)`` with a linear RGB color. Pixel
encodings (palette, grayscale, RGBA, 16-bit) are normalized once at load
time, so the shading code never sees them.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union
import logging
import math

import numpy as np
from PIL import Image

from .vec3 import Color

logger = logging.getLogger(__name__)


class Texture(ABC):
    """Abstract base class for textures."""

    @abstractmethod
    def value(self, u: float, v: float) -> Color:
        """Get the texture color at the given UV coordinates.

        Args:
            u: Horizontal texture coordinate [0, 1]
            v: Vertical texture coordinate [0, 1], 0 at the top image row

        Returns:
            Color at this location
        """
        pass


class SolidColor(Texture):
    """A solid color texture."""

    def __init__(self, color: Color):
        self.color = color

    @classmethod
    def from_rgb(cls, r: float, g: float, b: float) -> 'SolidColor':
        return cls(Color(r, g, b))

    def value(self, u: float, v: float) -> Color:
        return self.color

    def __repr__(self) -> str:
        return f"SolidColor({self.color})"


class ImageTexture(Texture):
    """A texture backed by an RGB image held as a float array."""

    def __init__(self, data: np.ndarray, name: str = '<array>'):
        """Wrap an already decoded image.

        Args:
            data: Array of shape (height, width, 3) with values in [0, 1]
            name: Label used in log messages and repr
        """
        data = np.asarray(data, dtype=np.float64)
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Texture data must have shape (h, w, 3), got {data.shape}")
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise ValueError(f"Texture {name} is empty")
        self._data = data
        self._height, self._width = data.shape[:2]
        self.name = name

    @classmethod
    def from_file(cls, filename: Union[str, Path], gamma: float = 2.2) -> 'ImageTexture':
        """Load a texture from an image file.

        Args:
            filename: Path to the image file
            gamma: Gamma for converting sRGB to linear (1.0 keeps raw values)
        """
        path = Path(filename)
        if not path.exists():
            raise FileNotFoundError(f"Texture file not found: {filename}")

        with Image.open(path) as img:
            rgb = img.convert('RGB')
            data = np.array(rgb, dtype=np.float64) / 255.0

        if gamma != 1.0:
            data = np.power(data, gamma)

        logger.debug("Loaded texture %s (%dx%d)", path, data.shape[1], data.shape[0])
        return cls(data, name=str(path))

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def texel(self, i: int, j: int) -> Color:
        """Return the color of pixel column i, row j (row 0 is the top)."""
        pixel = self._data[j, i]
        return Color(pixel[0], pixel[1], pixel[2])

    def value(self, u: float, v: float) -> Color:
        # Clamp UV coordinates; NaN falls back to the first texel
        u = 0.0 if math.isnan(u) else max(0.0, min(1.0, u))
        v = 0.0 if math.isnan(v) else max(0.0, min(1.0, v))

        i = int(u * (self._width - 1))
        j = int(v * (self._height - 1))
        return self.texel(i, j)

    def __repr__(self) -> str:
        return f"ImageTexture({self.name!r}, {self._width}x{self._height})"


class CheckerTexture(Texture):
    """A checker pattern in UV space."""

    def __init__(self, cells: int, even: Texture, odd: Texture):
        """Create a checker texture.

        Args:
            cells: Number of checker cells along each UV axis
            even: Texture for even cells
            odd: Texture for odd cells
        """
        if cells <= 0:
            raise ValueError("Checker cell count must be positive")
        self.cells = cells
        self.even = even
        self.odd = odd

    @classmethod
    def from_colors(cls, cells: int, c1: Color, c2: Color) -> 'CheckerTexture':
        return cls(cells, SolidColor(c1), SolidColor(c2))

    def value(self, u: float, v: float) -> Color:
        i = min(int(u * self.cells), self.cells - 1)
        j = min(int(v * self.cells), self.cells - 1)

        if (i + j) % 2 == 0:
            return self.even.value(u, v)
        return self.odd.value(u, v)
