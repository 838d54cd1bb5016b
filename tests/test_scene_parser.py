"""Tests for scene description parsing."""

import pytest
import json
import math
from rayforge.vec3 import Vec3, Point3, Color
from rayforge.camera import CameraConfigurationError
from rayforge.shapes import Sphere, Plane
from rayforge.mesh import Mesh
from rayforge.lights import PointLight, DirectionalLight
from rayforge.shaders import FlatShader, PhongShader, ReflectiveShader
from rayforge.scene_parser import SceneParser, SceneParseError, load_scene, parse_scene


SCENE_YAML = """
camera:
  position: [0, 0, 5]
  look_at: [0, 0, 0]
  up: [0, 1, 0]
  focal_distance: 1
  field_of_view: 90
  resolution: [4, 2]

render:
  enable_shadows: false
  recursion_depth_limit: 5
  ambient_intensity: 0.25
  threads: 2

background: "#336699"

shaders:
  red:
    type: phong
    diffuse: [1, 0, 0]
  mirror:
    type: reflective
    shader: red
    reflectivity: 0.5

objects:
  - type: plane
    point: [0, -1, 0]
    normal: [0, 1, 0]
    shader: red
  - type: sphere
    center: {x: 1, y: 2, z: 3}
    radius: 0.5
    shader: mirror
  - type: triangle
    vertices: [[-1, -1, 0], [1, -1, 0], [0, 1, 0]]
    shader: {type: flat, color: [0, 1, 0]}
  - type: mesh
    file: quad.obj
    scale: 2

lights:
  - type: point
    position: [0, 10, 0]
    brightness: 100
  - type: directional
    direction: [0, -1, 0]
    color: [1, 0.5, 0.5]
"""

QUAD_OBJ = "v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n"


@pytest.fixture
def scene_file(tmp_path):
    (tmp_path / "quad.obj").write_text(QUAD_OBJ)
    path = tmp_path / "scene.yaml"
    path.write_text(SCENE_YAML)
    return path


class TestSceneFile:
    """Test loading complete scene files."""

    def test_load_counts(self, scene_file):
        world = load_scene(scene_file)
        assert len(world.objects) == 4
        assert len(world.lights) == 2

    def test_object_types(self, scene_file):
        world = load_scene(scene_file)
        plane, sphere, triangle, mesh = world.objects

        assert isinstance(plane, Plane)
        assert isinstance(sphere, Sphere)
        assert sphere.center == Point3(1, 2, 3)
        assert isinstance(triangle, Mesh)
        assert triangle.number_parts == 1
        assert isinstance(mesh, Mesh)
        assert mesh.number_parts == 2
        assert mesh.vertices[2] == Point3(2, 2, 0)

    def test_shaders_resolved(self, scene_file):
        world = load_scene(scene_file)
        plane, sphere, triangle, mesh = world.objects

        assert isinstance(plane.material_shader, PhongShader)
        assert plane.material_shader.color_ambient == Color(1, 0, 0)
        assert isinstance(sphere.material_shader, ReflectiveShader)
        assert sphere.material_shader.shader is plane.material_shader
        assert isinstance(triangle.material_shader, FlatShader)
        assert mesh.material_shader is None

    def test_settings(self, scene_file):
        settings = load_scene(scene_file).settings
        assert not settings.enable_shadows
        assert settings.recursion_depth_limit == 5
        assert settings.ambient_intensity == 0.25
        assert settings.num_threads == 2

    def test_camera(self, scene_file):
        camera = load_scene(scene_file).camera
        assert camera.number_pixels == (4, 2)
        assert camera.position == Point3(0, 0, 5)
        width, height = camera.image_size
        assert abs(width - 2.0) < 1e-9
        assert abs(height - 1.0) < 1e-9

    def test_background_hex_color(self, scene_file):
        background = load_scene(scene_file).background_shader
        assert background.color == Color(0x33 / 255, 0x66 / 255, 0x99 / 255)

    def test_lights(self, scene_file):
        point, directional = load_scene(scene_file).lights
        assert isinstance(point, PointLight)
        assert point.brightness == 100
        assert isinstance(directional, DirectionalLight)
        assert directional.color == Color(1, 0.5, 0.5)

    def test_renders(self, scene_file):
        colors = load_scene(scene_file).render()
        assert colors.shape == (2, 4, 3)

    def test_json_scene(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({
            "camera": {"resolution": [2, 2]},
            "objects": [{"type": "sphere", "radius": 2}],
        }))
        world = load_scene(path)
        assert len(world.objects) == 1
        assert world.camera.number_pixels == (2, 2)


class TestSceneErrors:
    """Test that malformed scenes are reported."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneParseError):
            load_scene(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("camera: [unclosed\n")
        with pytest.raises(SceneParseError):
            load_scene(path)

    def test_top_level_not_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(SceneParseError):
            load_scene(path)

    def test_missing_mesh_file(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text("objects:\n  - type: mesh\n    file: nowhere.obj\n")
        with pytest.raises(FileNotFoundError):
            load_scene(path)

    @pytest.mark.parametrize("data", [
        {"objects": [{"type": "torus"}]},
        {"lights": [{"type": "area"}]},
        {"shaders": {"x": {"type": "toon"}}},
        {"shaders": {"x": {"type": "reflective"}}},
        {"objects": [{"type": "sphere", "shader": "undefined"}]},
        {"objects": [{"type": "triangle", "vertices": [[0, 0, 0], [1, 0, 0]]}]},
        {"camera": {"resolution": [0, 10]}},
        {"camera": {"position": [1, 2]}},
        {"background": "red"},
        {"render": {"recursion_depth_limit": -1}},
        {"render": [1, 2]},
        {"camera": "front"},
        {"shaders": ["red"]},
        {"shaders": {"x": "flat"}},
        {"objects": {"type": "sphere"}},
        {"objects": ["sphere"]},
        {"objects": [None]},
        {"lights": "point"},
        {"lights": [["point"]]},
    ])
    def test_invalid_sections(self, data):
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_degenerate_camera(self):
        with pytest.raises(CameraConfigurationError):
            parse_scene({"camera": {"position": [0, 5, 0], "look_at": [0, 0, 0], "up": [0, 1, 0]}})


class TestSceneDefaults:
    """Test defaults for omitted sections."""

    def test_empty_scene(self):
        world = SceneParser().parse_dict({})
        assert world.objects == []
        assert world.camera.number_pixels == (640, 480)
        assert world.background_shader.color == Color(0, 0, 0)

    def test_empty_sections(self):
        world = parse_scene({"render": None, "camera": {"resolution": [2, 2]},
                             "shaders": None, "objects": None, "lights": None})
        assert world.settings.enable_shadows
        assert world.objects == []
        assert world.lights == []

    def test_field_of_view_in_degrees(self):
        world = parse_scene({"camera": {"field_of_view": 60, "resolution": [1, 1]}})
        width, _ = world.camera.image_size
        assert abs(width - 2 * math.tan(math.radians(30))) < 1e-9
