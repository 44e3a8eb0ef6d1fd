"""Tests for scene file parsing."""

import pytest
import json
import numpy as np
from PIL import Image

from blockray.vec3 import Vec3, Point3, Color
from blockray.shapes import Cube, Sphere
from blockray.textures import ImageTexture, CheckerTexture
from blockray.environment import CubeMapSkybox, GradientEnvironment, SolidColorEnvironment
from blockray.renderer import RenderContext
from blockray.scene_parser import SceneParseError, load_scene, parse_scene


MINIMAL = {
    'materials': {
        'stone': {'texture': [0.5, 0.5, 0.5], 'preset': 'stone'},
    },
    'objects': [
        {'type': 'cube', 'center': [0, 0, 0], 'side': 1, 'material': 'stone'},
    ],
}

SCENE_YAML = """
camera:
  position: [0, 5, 6]
  target: [0, 0, 0]
render:
  width: 40
  height: 30
  fov: 45
  max_recursion: 2
  threads: 1
light:
  position: [1, 8, 2]
  intensity: 1.5
skybox:
  color: "#336699"
materials:
  water:
    texture: {color: [0.1, 0.2, 0.8]}
    preset: water
objects:
  - type: sphere
    center: [0, 1, 0]
    radius: 0.5
    material: water
  - type: cube
    center: {x: 2, y: 0, z: -1}
    material:
      texture: {checker: 2, colors: [[1, 1, 1], [0, 0, 0]]}
      albedo: 0.8
"""


class TestParseDict:
    """Test building a render context from a dictionary."""

    def test_minimal_scene(self):
        context = parse_scene(MINIMAL)
        assert isinstance(context, RenderContext)
        assert len(context.scene) == 1
        cube = list(context.scene)[0]
        assert isinstance(cube, Cube)
        assert cube.side == 1.0
        assert cube.material.albedo == 0.6

    def test_defaults(self):
        context = parse_scene(MINIMAL)
        assert context.camera.position == Point3(0, 5, 6)
        assert context.light.position == Point3(0, 5, 6)
        assert isinstance(context.skybox, GradientEnvironment)
        assert context.settings.max_recursion == 4

    def test_materials_are_shared(self):
        data = dict(MINIMAL, objects=[
            {'type': 'cube', 'center': [0, 0, 0], 'material': 'stone'},
            {'type': 'cube', 'center': [1, 0, 0], 'material': 'stone'},
        ])
        first, second = parse_scene(data).scene
        assert first.material is second.material

    def test_named_textures(self):
        data = {
            'textures': {'grass': {'checker': 4, 'colors': ['#00ff00', '#008000']}},
            'materials': {'grass': {'texture': 'grass', 'preset': 'dirt'}},
            'objects': [{'type': 'cube', 'material': 'grass'}],
        }
        cube = list(parse_scene(data).scene)[0]
        assert isinstance(cube.material.texture, CheckerTexture)

    def test_color_skybox(self):
        context = parse_scene(dict(MINIMAL, skybox={'color': [0.1, 0.2, 0.3]}))
        assert isinstance(context.skybox, SolidColorEnvironment)
        assert context.skybox.color == Color(0.1, 0.2, 0.3)

    @pytest.mark.parametrize("data, message", [
        ({'objects': [{'type': 'cube', 'material': 'lava'}]}, "Unknown material"),
        ({'materials': {'m': {'texture': [1, 1, 1]}},
          'objects': [{'type': 'torus', 'material': 'm'}]}, "Unknown object type"),
        ({'materials': {'m': {'texture': [1, 1, 1], 'preset': 'marble'}}}, "Unknown material preset"),
        ({'materials': {'m': {'preset': 'wood'}}}, "missing a texture"),
        ({'materials': {'m': {'texture': [1, 1]}}}, "3 components"),
    ])
    def test_invalid_scene(self, data, message):
        with pytest.raises(SceneParseError, match=message):
            parse_scene(data)

    def test_degenerate_geometry(self):
        data = dict(MINIMAL, objects=[{'type': 'sphere', 'radius': 0, 'material': 'stone'}])
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_degenerate_camera(self):
        data = dict(MINIMAL, camera={'position': [0, 3, 0], 'target': [0, 0, 0]})
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_bad_material_coefficients(self):
        data = {'materials': {'m': {'texture': [1, 1, 1], 'reflectivity': 2.0}}}
        with pytest.raises(SceneParseError):
            parse_scene(data)


class TestSceneFiles:
    """Test loading scene files from disk."""

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(SCENE_YAML)
        context = load_scene(path)

        assert context.settings.width == 40
        assert context.settings.height == 30
        assert context.settings.fov == 45.0
        assert context.settings.num_threads == 1
        assert context.light.intensity == 1.5
        assert context.skybox.color == Color(0x33 / 255, 0x66 / 255, 0x99 / 255)

        sphere, cube = context.scene
        assert isinstance(sphere, Sphere)
        assert sphere.material.transparency == 0.55
        assert cube.center == Point3(2, 0, -1)
        assert cube.material.albedo == 0.8

    def test_json_file(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps(MINIMAL))
        assert len(load_scene(path).scene) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneParseError):
            load_scene(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("objects: [unclosed\n")
        with pytest.raises(SceneParseError):
            load_scene(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(SceneParseError):
            load_scene(path)

    def test_image_texture_relative_to_scene(self, tmp_path):
        Image.new('RGB', (2, 2), (255, 255, 255)).save(tmp_path / "snow.png")
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({
            'materials': {'snow': {'texture': {'image': 'snow.png', 'gamma': 1.0}}},
            'objects': [{'type': 'cube', 'material': 'snow'}],
        }))

        cube = list(load_scene(path).scene)[0]
        assert isinstance(cube.material.texture, ImageTexture)
        assert cube.material.texture.value(0.5, 0.5) == Color(1, 1, 1)

    def test_missing_texture_file(self, tmp_path):
        with pytest.raises(SceneParseError, match="not found"):
            parse_scene({'textures': {'t': 'missing.png'}}, base_dir=tmp_path)

    def test_skybox_directory(self, face_dir):
        context = parse_scene(dict(MINIMAL, skybox={'directory': '.', 'gamma': 1.0}), base_dir=face_dir)
        assert isinstance(context.skybox, CubeMapSkybox)
        assert context.skybox.sample(Vec3(0, 1, 0)) == Color(1, 1, 1)

    def test_skybox_directory_missing_face(self, face_dir):
        (face_dir / 'front.png').unlink()
        with pytest.raises(SceneParseError):
            parse_scene(dict(MINIMAL, skybox={'directory': str(face_dir)}))

    def test_parsed_scene_renders(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(SCENE_YAML.replace("width: 40", "width: 4").replace("height: 30", "height: 3"))
        image = load_scene(path).render()
        assert image.data.shape == (3, 4, 3)
        assert np.all(np.isfinite(image.data))
