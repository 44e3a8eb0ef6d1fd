"""
Renderer module - the heart of the ray tracer.

Implements:
- Recursive Whitted-style shading (Phong lighting, hard shadows,
  mirror reflection, refraction) with a fixed recursion limit
- Tile-based multi-threaded frame rendering into a framebuffer sink
- A render context that keeps scene edits out of in-flight frames
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Callable, Iterator, List, Optional, Protocol, Tuple
import logging
import os
import threading
import time

import numpy as np

from .camera import Camera
from .environment import Environment
from .lights import PointLight
from .ray import Ray
from .scene import Scene
from .shapes import Intersection, Primitive
from .vec3 import Vec3, Color

logger = logging.getLogger(__name__)

BLACK = Color(0, 0, 0)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 500
    height: int = 300
    fov: float = 60.0  # vertical, degrees
    max_recursion: int = 4
    bias: float = 1e-4
    shadow_intensity: float = 0.5
    tile_size: int = 32
    num_threads: int = 0  # 0 = auto-detect
    gamma: float = 2.2

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Resolution must be positive, got {self.width}x{self.height}")
        if self.max_recursion < 0:
            raise ValueError("max_recursion must be >= 0")
        if self.tile_size <= 0:
            raise ValueError("tile_size must be positive")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4


class PixelSink(Protocol):
    """Anything that accepts one color per pixel."""

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        ...


class Framebuffer:
    """HDR framebuffer backed by a (height, width, 3) float array."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.data = np.zeros((height, width, 3), dtype=np.float64)

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        self.data[y, x] = color.to_array()

    def get_pixel(self, x: int, y: int) -> Color:
        return Color.from_array(self.data[y, x].copy())

    def to_ldr(self, gamma: float = 2.2) -> np.ndarray:
        """Convert to 8-bit with gamma correction.

        Args:
            gamma: Display gamma (1.0 writes linear values)

        Returns:
            LDR image as uint8 array
        """
        corrected = np.power(np.clip(self.data, 0, None), 1.0 / gamma)
        return np.clip(corrected * 255, 0, 255).astype(np.uint8)

    def save(self, filename: str, gamma: float = 2.2) -> None:
        """Save as an 8-bit image (format from the file extension)."""
        from PIL import Image as PILImage

        PILImage.fromarray(self.to_ldr(gamma), 'RGB').save(filename)


class Renderer:
    """Whitted-style ray tracer over a scene, one light and a skybox."""

    def __init__(
        self,
        scene: Scene,
        light: PointLight,
        skybox: Environment,
        settings: Optional[RenderSettings] = None
    ):
        """Create a renderer.

        Args:
            scene: Primitives to trace against
            light: The single point light
            skybox: Background sampled by rays that escape the scene
            settings: Render configuration (uses defaults if None)
        """
        self.scene = scene
        self.light = light
        self.skybox = skybox
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def cast_shadow(self, point: Vec3, to_light: Vec3, excluded: Optional[Primitive]) -> float:
        """Shadow factor for a surface point.

        Args:
            point: Surface point, already pushed off the surface
            to_light: Unnormalized vector from the point to the light
            excluded: The primitive being shaded

        Returns:
            settings.shadow_intensity when another primitive sits between
            the point and the light, 1.0 otherwise
        """
        origin = point + to_light.normalize() * self.settings.bias
        if self.scene.occluded(origin, to_light, excluded, max_distance=1.0):
            return self.settings.shadow_intensity
        return 1.0

    def cast_ray(self, ray: Ray, depth: int = 0) -> Color:
        """Compute the color seen along a ray.

        Args:
            ray: The ray to trace (unit direction)
            depth: Number of reflection/refraction bounces already taken

        Returns:
            The computed color for this ray
        """
        primitive, hit = self.scene.nearest_hit(ray)

        if primitive is None or depth >= self.settings.max_recursion:
            return self.skybox.sample(ray.direction)

        material = primitive.material
        bias = self.settings.bias
        light = self.light

        light_dir = light.direction_from(hit.point)
        view_dir = (ray.origin - hit.point).normalize()
        reflect_dir = (-light_dir).reflect(hit.normal)

        shadow = self.cast_shadow(hit.point + hit.normal * bias, light.position - hit.point, primitive)

        diffuse_intensity = max(0.0, hit.normal.dot(light_dir))
        specular_intensity = max(0.0, view_dir.dot(reflect_dir)) ** material.specular_coefficient

        texture_color = material.texture.value(hit.u, hit.v)
        diffuse = texture_color * (light.intensity * diffuse_intensity * material.albedo * shadow)
        specular = light.color * (light.intensity * specular_intensity * material.specular_albedo * shadow)

        reflected = BLACK
        if material.reflectivity > 0:
            # Follows the light's mirror direction, the same one the highlight uses
            reflected = self.cast_ray(Ray(hit.point + hit.normal * bias, reflect_dir), depth + 1)

        refracted = BLACK
        if material.transparency > 0:
            refracted = self.cast_ray(self._refracted_ray(ray, hit, material.refraction_index), depth + 1)

        local = _finite(diffuse + specular) * material.local_weight
        return (
            local
            + _finite(reflected) * material.reflectivity
            + _finite(refracted) * material.transparency
        )

    def _refracted_ray(self, ray: Ray, hit: Intersection, refraction_index: float) -> Ray:
        """Continue a ray through a transparent surface.

        The hit normal always faces the incoming ray, so a ray leaving the
        primitive (back face) swaps the index ratio: entering uses
        1 / refraction_index, leaving uses refraction_index. Under total internal
        reflection the ray is mirrored back to the side it came from.
        """
        bias = self.settings.bias
        eta_ratio = 1.0 / refraction_index if hit.front_face else refraction_index

        direction = ray.direction.refract(hit.normal, eta_ratio)
        if direction.near_zero():
            mirror_dir = ray.direction.reflect(hit.normal).normalize()
            return Ray(hit.point + hit.normal * bias, mirror_dir)
        return Ray(hit.point - hit.normal * bias, direction.normalize())

    def render(self, camera: Camera, sink: Optional[PixelSink] = None) -> PixelSink:
        """Render one frame.

        Every pixel is traced exactly once and written to ``sink`` with
        ``set_pixel(x, y, color)``. Pixels are independent, so tiles run
        concurrently and never write the same cell.

        Args:
            camera: The camera to render from
            sink: Pixel destination (a new Framebuffer if None)

        Returns:
            The sink that received the pixels
        """
        width = self.settings.width
        height = self.settings.height
        fov = self.settings.fov
        if sink is None:
            sink = Framebuffer(width, height)

        # Validates the camera before any work is scheduled
        basis = camera.basis()

        tiles = self._generate_tiles(width, height)
        total_tiles = len(tiles)
        completed_tiles = [0]
        progress_lock = threading.Lock()

        def render_tile(tile: Tuple[int, int, int, int]) -> None:
            x0, y0, x1, y1 = tile
            for y in range(y0, y1):
                for x in range(x0, x1):
                    direction = Camera.pixel_direction(basis, x, y, width, height, fov)
                    sink.set_pixel(x, y, self.cast_ray(Ray(camera.position, direction)))

            if self._progress_callback:
                with progress_lock:
                    completed_tiles[0] += 1
                    done = completed_tiles[0]
                self._progress_callback(done / total_tiles)

        start = time.perf_counter()
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                # list() re-raises the first error from any tile
                list(executor.map(render_tile, tiles))
        else:
            for tile in tiles:
                render_tile(tile)

        logger.debug(
            "Rendered %dx%d frame (%d primitives) in %.3fs",
            width, height, len(self.scene), time.perf_counter() - start,
        )
        return sink

    def _generate_tiles(self, width: int, height: int) -> List[Tuple[int, int, int, int]]:
        """Split the frame into tiles as (x0, y0, x1, y1) tuples."""
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles


def _finite(color: Color) -> Color:
    """Drop a contribution that picked up NaN or infinity."""
    return color if color.is_finite() else BLACK


def render_frame(
    camera: Camera,
    scene: Scene,
    light: PointLight,
    skybox: Environment,
    width: int,
    height: int,
    fov: float,
    sink: Optional[PixelSink] = None,
    settings: Optional[RenderSettings] = None,
) -> PixelSink:
    """Render one frame of a scene.

    Args:
        camera: Camera to render from
        scene: Primitives to trace against
        light: The point light
        skybox: Background for escaping rays
        width, height: Framebuffer size in pixels
        fov: Vertical field of view in degrees
        sink: Pixel destination (a new Framebuffer if None)
        settings: Remaining render options; width/height/fov above win

    Returns:
        The sink holding one color per pixel
    """
    base = settings if settings else RenderSettings()
    frame_settings = replace(base, width=width, height=height, fov=fov)
    return Renderer(scene, light, skybox, frame_settings).render(camera, sink)


class RenderContext:
    """Owns everything a frame needs and serializes edits against renders.

    ``render()`` holds the context lock for the whole pass and
    ``editing()`` takes the same lock, so a scene change made through
    ``editing()`` lands either before or after a frame, never inside one.
    """

    def __init__(
        self,
        scene: Scene,
        light: PointLight,
        skybox: Environment,
        camera: Camera,
        settings: Optional[RenderSettings] = None
    ):
        self.scene = scene
        self.light = light
        self.skybox = skybox
        self.camera = camera
        self.settings = settings if settings else RenderSettings()
        self._lock = threading.RLock()

    @contextmanager
    def editing(self) -> Iterator['RenderContext']:
        """Hold off render passes while the scene is modified."""
        with self._lock:
            yield self

    def render(
        self,
        sink: Optional[PixelSink] = None,
        progress_callback: Optional[Callable[[float], None]] = None
    ) -> PixelSink:
        """Render a frame with the context's camera and settings."""
        with self._lock:
            renderer = Renderer(self.scene, self.light, self.skybox, self.settings)
            if progress_callback:
                renderer.set_progress_callback(progress_callback)
            return renderer.render(self.camera, sink)
