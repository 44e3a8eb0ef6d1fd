"""
blockray - A recursive ray tracer for block worlds

Renders scenes of axis-aligned cubes and spheres lit by one point light:
- Phong-style direct lighting with hard shadows
- Mirror reflection and refraction up to a fixed bounce depth
- Textured surfaces with per-face cube UVs
- Cube-map skybox for rays that leave the scene
- Multi-threaded tile rendering
"""

__version__ = "0.1.0"
__author__ = "blockray Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .errors import (
    ConfigurationError, GeometryError, MaterialError, CameraError, SkyboxProjectionError
)
from .shapes import Intersection, Sphere, Cube, Primitive, intersect
from .textures import Texture, SolidColor, ImageTexture, CheckerTexture
from .materials import Material, PRESETS
from .lights import PointLight
from .scene import Scene
from .camera import Camera
from .environment import (
    Environment, SolidColorEnvironment, GradientEnvironment, CubeMapSkybox, load_skybox
)
from .renderer import (
    RenderSettings, Renderer, Framebuffer, RenderContext, render_frame
)
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
