"""
Scene description language parser.

Reads YAML (or JSON) scene files into a ready-to-render ``RenderContext``.

Example scene file:
```yaml
camera:
  position: [0, 5, 6]
  target: [0, 0, 0]
  up: [0, 1, 0]

render:
  width: 500
  height: 300
  fov: 60
  max_recursion: 4

light:
  position: [0, 5, 6]
  intensity: 1.5
  color: [1, 1, 1]

skybox:
  directory: textures/sky     # or: color: [0.5, 0.7, 1.0]

textures:
  dirt: dirt.png
  grass:
    checker: 4
    colors: [[0.3, 0.6, 0.2], [0.25, 0.5, 0.15]]

materials:
  dirt:
    texture: dirt
    preset: dirt
  glass:
    texture: {color: [0.9, 0.9, 1.0]}
    albedo: 0.1
    transparency: 0.8
    refraction_index: 1.5

objects:
  - type: cube
    center: [0, 0, 0]
    side: 1
    material: dirt
  - type: sphere
    center: [0, 2, 0]
    radius: 0.5
    material: glass
```
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging

import yaml

from .camera import Camera
from .environment import Environment, GradientEnvironment, SolidColorEnvironment, load_skybox
from .errors import ConfigurationError
from .lights import PointLight
from .materials import Material
from .renderer import RenderContext, RenderSettings
from .scene import Scene
from .shapes import Cube, Sphere
from .textures import CheckerTexture, ImageTexture, SolidColor, Texture
from .vec3 import Vec3, Color

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, base_dir: Union[str, Path, None] = None):
        """Create a parser.

        Args:
            base_dir: Directory that relative texture and skybox paths are
                resolved against (current directory if None)
        """
        self.base_dir = Path(base_dir) if base_dir is not None else Path('.')
        self.textures: Dict[str, Texture] = {}
        self.materials: Dict[str, Material] = {}
        self.scene = Scene()
        self.settings = RenderSettings()

    def parse_file(self, filepath: Union[str, Path]) -> RenderContext:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            RenderContext holding the scene, light, skybox, camera and settings
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()
        self.base_dir = path.parent

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file {filepath} must contain a mapping")

        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> RenderContext:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            RenderContext for the described scene
        """
        try:
            if 'render' in data:
                self._parse_settings(data['render'])

            # Textures before materials, materials before objects
            self._parse_textures(data.get('textures', {}))
            self._parse_materials(data.get('materials', {}))
            self._parse_objects(data.get('objects', []))

            light = self._parse_light(data.get('light', {}))
            skybox = self._parse_skybox(data.get('skybox'))
            camera = self._parse_camera(data.get('camera', {}))
        except (ConfigurationError, ValueError, TypeError) as e:
            raise SceneParseError(str(e)) from e

        logger.info(
            "Parsed scene: %d primitives, %d materials, %d textures",
            len(self.scene), len(self.materials), len(self.textures),
        )
        return RenderContext(self.scene, light, skybox, camera, self.settings)

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from a list or an x/y/z mapping."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Vec3(
                float(data.get('x', 0)),
                float(data.get('y', 0)),
                float(data.get('z', 0))
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from a list, r/g/b mapping or '#rrggbb' string."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Color(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0))
            )
        elif isinstance(data, str):
            if data.startswith('#') and len(data) == 7:
                r = int(data[1:3], 16) / 255.0
                g = int(data[3:5], 16) / 255.0
                b = int(data[5:7], 16) / 255.0
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _resolve(self, path: str) -> Path:
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = self.base_dir / resolved
        return resolved

    def _build_texture(self, tex_data: Any) -> Texture:
        """Build a texture from a path, a color, or a checker definition."""
        if isinstance(tex_data, str) and not tex_data.startswith('#'):
            path = self._resolve(tex_data)
            if not path.exists():
                raise SceneParseError(f"Texture file not found: {path}")
            return ImageTexture.from_file(path, gamma=self.settings.gamma)

        if isinstance(tex_data, dict):
            if 'image' in tex_data:
                path = self._resolve(tex_data['image'])
                if not path.exists():
                    raise SceneParseError(f"Texture file not found: {path}")
                gamma = float(tex_data.get('gamma', self.settings.gamma))
                return ImageTexture.from_file(path, gamma=gamma)
            if 'checker' in tex_data:
                colors = tex_data.get('colors', [[1, 1, 1], [0, 0, 0]])
                if len(colors) != 2:
                    raise SceneParseError("Checker texture needs exactly two colors")
                return CheckerTexture.from_colors(
                    int(tex_data['checker']),
                    self._parse_color(colors[0]),
                    self._parse_color(colors[1]),
                )
            if 'color' in tex_data:
                return SolidColor(self._parse_color(tex_data['color']))

        return SolidColor(self._parse_color(tex_data))

    def _parse_textures(self, textures_data: Dict[str, Any]) -> None:
        """Parse textures section."""
        for name, tex_data in textures_data.items():
            self.textures[name] = self._build_texture(tex_data)

    def _get_texture(self, tex_ref: Any) -> Texture:
        """Get a texture by name or inline definition."""
        if tex_ref is None:
            raise SceneParseError("Material is missing a texture")
        if isinstance(tex_ref, str) and tex_ref in self.textures:
            return self.textures[tex_ref]
        return self._build_texture(tex_ref)

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        texture = self._get_texture(mat_data.get('texture'))

        if 'preset' in mat_data:
            return Material.preset(str(mat_data['preset']), texture)

        return Material(
            texture=texture,
            albedo=float(mat_data.get('albedo', 0.5)),
            specular_albedo=float(mat_data.get('specular_albedo', 0.0)),
            specular_coefficient=float(mat_data.get('specular_coefficient', 1.0)),
            reflectivity=float(mat_data.get('reflectivity', 0.0)),
            transparency=float(mat_data.get('transparency', 0.0)),
            refraction_index=float(mat_data.get('refraction_index', 1.0)),
        )

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            obj_type = obj_data.get('type', 'cube').lower()
            material = self._get_material(obj_data.get('material'))
            center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))

            if obj_type == 'cube':
                self.scene.add(Cube(center, float(obj_data.get('side', 1.0)), material))

            elif obj_type == 'sphere':
                self.scene.add(Sphere(center, float(obj_data.get('radius', 1.0)), material))

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_light(self, light_data: Dict[str, Any]) -> PointLight:
        """Parse light section."""
        return PointLight(
            position=self._parse_vec3(light_data.get('position', [0, 5, 6])),
            intensity=float(light_data.get('intensity', 1.0)),
            color=self._parse_color(light_data.get('color', [1, 1, 1])),
        )

    def _parse_skybox(self, sky_data: Optional[Dict[str, Any]]) -> Environment:
        """Parse skybox section; a gradient sky when absent."""
        if sky_data is None:
            return GradientEnvironment()
        if 'directory' in sky_data:
            directory = self._resolve(sky_data['directory'])
            gamma = float(sky_data.get('gamma', self.settings.gamma))
            try:
                return load_skybox(directory, gamma=gamma)
            except FileNotFoundError as e:
                raise SceneParseError(str(e)) from e
        if 'color' in sky_data:
            return SolidColorEnvironment(self._parse_color(sky_data['color']))
        if 'zenith' in sky_data or 'horizon' in sky_data:
            return GradientEnvironment(
                horizon_color=self._parse_color(sky_data.get('horizon', [1, 1, 1])),
                zenith_color=self._parse_color(sky_data.get('zenith', [0.5, 0.7, 1.0])),
            )
        raise SceneParseError(f"Cannot parse skybox from: {sky_data}")

    def _parse_camera(self, camera_data: Dict[str, Any]) -> Camera:
        """Parse camera section."""
        camera = Camera(
            position=self._parse_vec3(camera_data.get('position', [0, 5, 6])),
            target=self._parse_vec3(camera_data.get('target', [0, 0, 0])),
            up=self._parse_vec3(camera_data.get('up', [0, 1, 0])),
        )
        # Reject a degenerate basis at load time rather than on the first frame
        camera.basis()
        return camera

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        self.settings = RenderSettings(
            width=int(settings_data.get('width', 500)),
            height=int(settings_data.get('height', 300)),
            fov=float(settings_data.get('fov', 60.0)),
            max_recursion=int(settings_data.get('max_recursion', 4)),
            bias=float(settings_data.get('bias', 1e-4)),
            shadow_intensity=float(settings_data.get('shadow_intensity', 0.5)),
            tile_size=int(settings_data.get('tile_size', 32)),
            num_threads=int(settings_data.get('threads', 0)),
            gamma=float(settings_data.get('gamma', 2.2)),
        )


def load_scene(filepath: Union[str, Path]) -> RenderContext:
    """Convenience function to load a scene file."""
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any], base_dir: Union[str, Path, None] = None) -> RenderContext:
    """Convenience function to parse a scene from a dictionary."""
    parser = SceneParser(base_dir)
    return parser.parse_dict(data)
