"""
Surface materials for the Phong-style shading model.

A material is a fixed set of reflectance coefficients plus the texture that
provides the diffuse color. Materials are shared by many primitives and
never change once a scene is built.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict
import logging

from .errors import MaterialError
from .textures import Texture

logger = logging.getLogger(__name__)


# Coefficient sets for the block types of the voxel scenes:
# (albedo, specular_albedo, specular_coefficient, reflectivity, transparency, refraction_index)
PRESETS: Dict[str, tuple] = {
    'wood': (0.5, 0.04, 50.0, 0.02, 0.0, 1.54),
    'stone': (0.6, 0.1, 10.0, 0.05, 0.0, 1.54),
    'gold': (1.5, 0.4, 200.0, 0.4, 0.0, 0.47),
    'water': (0.9, 0.95, 1000.0, 0.1, 0.55, 1.0),
    'dirt': (0.5, 0.05, 10.0, 0.05, 0.0, 1.54),
}


@dataclass(frozen=True)
class Material:
    """Reflectance coefficients and diffuse texture of a surface.

    Attributes:
        texture: Diffuse color source sampled at the hit UV
        albedo: Weight of direct diffuse light
        specular_albedo: Weight of the specular highlight
        specular_coefficient: Phong exponent (> 0)
        reflectivity: Share of the color taken from the mirror ray [0, 1]
        transparency: Share of the color taken from the refracted ray [0, 1]
        refraction_index: Index of refraction (> 0)
    """
    texture: Texture
    albedo: float = 0.5
    specular_albedo: float = 0.0
    specular_coefficient: float = 1.0
    reflectivity: float = 0.0
    transparency: float = 0.0
    refraction_index: float = 1.0

    def __post_init__(self):
        if self.specular_coefficient <= 0:
            raise MaterialError(f"specular_coefficient must be > 0, got {self.specular_coefficient}")
        if self.refraction_index <= 0:
            raise MaterialError(f"refraction_index must be > 0, got {self.refraction_index}")
        if not 0.0 <= self.reflectivity <= 1.0:
            raise MaterialError(f"reflectivity must be in [0, 1], got {self.reflectivity}")
        if not 0.0 <= self.transparency <= 1.0:
            raise MaterialError(f"transparency must be in [0, 1], got {self.transparency}")
        if self.reflectivity + self.transparency > 1.0:
            # Allowed, but the local (diffuse + specular) term gets a negative weight
            logger.warning(
                "reflectivity + transparency = %.3f exceeds 1 for %r",
                self.reflectivity + self.transparency, self.texture,
            )

    @property
    def local_weight(self) -> float:
        """Weight of the direct lighting term in the final mix."""
        return 1.0 - self.reflectivity - self.transparency

    @classmethod
    def preset(cls, name: str, texture: Texture) -> 'Material':
        """Build one of the named block materials around a texture."""
        try:
            coefficients = PRESETS[name]
        except KeyError:
            raise MaterialError(
                f"Unknown material preset: {name} (expected one of {', '.join(sorted(PRESETS))})"
            ) from None
        albedo, spec_albedo, spec_coeff, reflectivity, transparency, ior = coefficients
        return cls(
            texture=texture,
            albedo=albedo,
            specular_albedo=spec_albedo,
            specular_coefficient=spec_coeff,
            reflectivity=reflectivity,
            transparency=transparency,
            refraction_index=ior,
        )
