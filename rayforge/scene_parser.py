"""
Scene description parser.

Supports a YAML (or JSON) scene description with:
- Camera configuration
- Render settings
- Background color
- Named shaders
- Objects (planes, spheres, triangles and OBJ meshes) with shaders
- Lights

Example scene file:
```yaml
camera:
  position: [0, 1, 6]
  look_at: [0, 0, 0]
  up: [0, 1, 0]
  focal_distance: 1
  field_of_view: 70      # degrees
  resolution: [320, 240]

render:
  enable_shadows: true
  recursion_depth_limit: 3
  ambient_intensity: 0.2

background: [0.05, 0.05, 0.1]

shaders:
  red:
    type: phong
    ambient: [1, 0, 0]
    diffuse: [1, 0, 0]
    specular: [1, 1, 1]
    specular_power: 50
  mirror:
    type: reflective
    shader: red
    reflectivity: 0.6

objects:
  - type: plane
    point: [0, -1, 0]
    normal: [0, 1, 0]
    shader: red
  - type: mesh
    file: bunny.obj     # relative to the scene file
    shader: mirror

lights:
  - type: point
    position: [0, 10, 5]
    color: [1, 1, 1]
    brightness: 200
```
"""

from __future__ import annotations
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .vec3 import Vec3, Color
from .camera import Camera
from .shapes import Plane, Sphere
from .mesh import Mesh
from .obj_loader import read_obj
from .shaders import Shader, FlatShader, PhongShader, ReflectiveShader
from .lights import PointLight, DirectionalLight
from .render_world import RenderWorld, RenderSettings

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, base_dir: Optional[Path] = None):
        """Create a parser.

        Args:
            base_dir: Directory that relative mesh paths resolve against
        """
        self.base_dir = base_dir if base_dir else Path.cwd()
        self.shaders: Dict[str, Shader] = {}
        self.world: Optional[RenderWorld] = None

    def parse_file(self, filepath: Union[str, Path]) -> RenderWorld:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            The populated render world

        Raises:
            SceneParseError: If the file is missing or malformed
            FileNotFoundError: If a referenced mesh file is missing
        """
        path = Path(filepath)
        if not path.is_file():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()
        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise SceneParseError(f"Cannot parse scene file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file {filepath} does not contain a mapping")

        self.base_dir = path.parent
        logger.info("Parsing scene %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> RenderWorld:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            The populated render world
        """
        settings = self._parse_settings(self._mapping(data.get('render'), 'render'))
        camera = self._parse_camera(self._mapping(data.get('camera'), 'camera'))
        self.world = RenderWorld(camera, settings)

        if 'background' in data:
            self.world.background_shader = FlatShader(self._parse_color(data['background']))

        # Shaders first (objects reference them)
        self._parse_shaders(self._mapping(data.get('shaders'), 'shaders'))
        self._parse_objects(self._entries(data.get('objects'), 'objects'))
        self._parse_lights(self._entries(data.get('lights'), 'lights'))

        return self.world

    def _mapping(self, value: Any, what: str) -> Dict[str, Any]:
        """A mapping section or entry; a missing (None) value reads as empty."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise SceneParseError(f"'{what}' must be a mapping, got {type(value).__name__}")
        return value

    def _entries(self, value: Any, what: str) -> List[Dict[str, Any]]:
        """A list section whose entries are all mappings."""
        if value is None:
            return []
        if not isinstance(value, list):
            raise SceneParseError(f"'{what}' must be a list, got {type(value).__name__}")
        for entry in value:
            if not isinstance(entry, dict):
                raise SceneParseError(f"Each '{what}' entry must be a mapping, got {entry!r}")
        return value

    def _type_name(self, data: Dict[str, Any], default: str) -> str:
        return str(data.get('type', default)).lower()

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3.from_iterable(data)
        elif isinstance(data, dict):
            return Vec3(
                float(data.get('x', 0)),
                float(data.get('y', 0)),
                float(data.get('z', 0))
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color.from_iterable(data)
        elif isinstance(data, dict):
            return Color(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0))
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#') and len(data) == 7:
                r = int(data[1:3], 16) / 255.0
                g = int(data[3:5], 16) / 255.0
                b = int(data[5:7], 16) / 255.0
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_settings(self, settings_data: Dict[str, Any]) -> RenderSettings:
        """Parse render settings section."""
        try:
            return RenderSettings(
                disable_hierarchy=bool(settings_data.get('disable_hierarchy', False)),
                enable_shadows=bool(settings_data.get('enable_shadows', True)),
                recursion_depth_limit=int(settings_data.get('recursion_depth_limit', 3)),
                ambient_intensity=float(settings_data.get('ambient_intensity', 0.0)),
                ambient_color=self._parse_color(settings_data.get('ambient_color', [1, 1, 1])),
                num_threads=int(settings_data.get('threads', 1)),
                max_leaf_size=int(settings_data.get('max_leaf_size', 4)),
            )
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid render settings: {e}") from e

    def _parse_camera(self, camera_data: Dict[str, Any]) -> Camera:
        """Parse camera section.

        The field of view is given in degrees; the aspect ratio follows
        from the resolution.
        """
        position = self._parse_vec3(camera_data.get('position', [0, 0, 5]))
        look_at = self._parse_vec3(camera_data.get('look_at', [0, 0, 0]))
        up = self._parse_vec3(camera_data.get('up', [0, 1, 0]))
        focal_distance = float(camera_data.get('focal_distance', 1.0))
        field_of_view = float(camera_data.get('field_of_view', 70.0))

        resolution = camera_data.get('resolution', [640, 480])
        if not isinstance(resolution, (list, tuple)) or len(resolution) != 2:
            raise SceneParseError(f"Resolution must be [width, height], got {resolution}")
        width, height = int(resolution[0]), int(resolution[1])
        if width <= 0 or height <= 0:
            raise SceneParseError(f"Resolution must be positive, got {width}x{height}")

        camera = Camera()
        camera.position_and_aim(position, look_at, up)
        camera.focus(focal_distance, width / height, math.radians(field_of_view))
        camera.set_resolution((width, height))
        return camera

    def _parse_shader(self, name: str, shader_data: Dict[str, Any]) -> Shader:
        shader_type = self._type_name(shader_data, 'phong')

        if shader_type == 'flat':
            return FlatShader(self._parse_color(shader_data.get('color', [1, 1, 1])))

        elif shader_type == 'phong':
            diffuse = self._parse_color(shader_data.get('diffuse', [0.8, 0.8, 0.8]))
            return PhongShader(
                color_ambient=self._parse_color(shader_data.get('ambient', list(diffuse))),
                color_diffuse=diffuse,
                color_specular=self._parse_color(shader_data.get('specular', [1, 1, 1])),
                specular_power=float(shader_data.get('specular_power', 50)),
            )

        elif shader_type == 'reflective':
            inner = self._get_shader(shader_data.get('shader'))
            if inner is None:
                raise SceneParseError(f"Reflective shader '{name}' needs an inner shader")
            return ReflectiveShader(inner, float(shader_data.get('reflectivity', 0.5)))

        raise SceneParseError(f"Unknown shader type: {shader_type}")

    def _parse_shaders(self, shaders_data: Dict[str, Any]) -> None:
        """Parse shaders section. Shaders may refer to earlier ones by name."""
        for name, shader_data in shaders_data.items():
            self.shaders[name] = self._parse_shader(name, self._mapping(shader_data, f"shader '{name}'"))

    def _get_shader(self, shader_ref: Any) -> Optional[Shader]:
        """Get a shader by name or inline definition."""
        if shader_ref is None:
            return None
        if isinstance(shader_ref, str):
            if shader_ref not in self.shaders:
                raise SceneParseError(f"Unknown shader: {shader_ref}")
            return self.shaders[shader_ref]
        elif isinstance(shader_ref, dict):
            return self._parse_shader('<inline>', shader_ref)
        else:
            raise SceneParseError(f"Invalid shader reference: {shader_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            obj_type = self._type_name(obj_data, 'sphere')
            shader = self._get_shader(obj_data.get('shader'))

            if obj_type == 'sphere':
                center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                radius = float(obj_data.get('radius', 1.0))
                self.world.add_object(Sphere(center, radius, shader))

            elif obj_type == 'plane':
                point = self._parse_vec3(obj_data.get('point', [0, 0, 0]))
                normal = self._parse_vec3(obj_data.get('normal', [0, 1, 0]))
                self.world.add_object(Plane(point, normal, shader))

            elif obj_type == 'triangle':
                vertices = obj_data.get('vertices')
                if not isinstance(vertices, list) or len(vertices) != 3:
                    raise SceneParseError("Triangle needs exactly three vertices")
                mesh = Mesh(shader)
                for vertex in vertices:
                    mesh.add_vertex(self._parse_vec3(vertex))
                mesh.add_triangle(0, 1, 2)
                self.world.add_object(mesh)

            elif obj_type == 'mesh':
                if 'file' not in obj_data:
                    raise SceneParseError("Mesh object needs a 'file'")
                path = self.base_dir / obj_data['file']
                scale = float(obj_data.get('scale', 1.0))
                self.world.add_object(read_obj(path, Mesh(shader), scale))

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_lights(self, lights_data: list) -> None:
        """Parse lights section."""
        for light_data in lights_data:
            light_type = self._type_name(light_data, 'point')
            color = self._parse_color(light_data.get('color', [1, 1, 1]))
            brightness = float(light_data.get('brightness', 1.0))

            if light_type == 'point':
                position = self._parse_vec3(light_data.get('position', [0, 5, 0]))
                self.world.add_light(PointLight(position, color, brightness))

            elif light_type == 'directional':
                direction = self._parse_vec3(light_data.get('direction', [0, -1, 0]))
                self.world.add_light(DirectionalLight(direction, color, brightness))

            else:
                raise SceneParseError(f"Unknown light type: {light_type}")


def load_scene(filepath: Union[str, Path]) -> RenderWorld:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        The populated render world
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any], base_dir: Optional[Path] = None) -> RenderWorld:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary
        base_dir: Directory that relative mesh paths resolve against

    Returns:
        The populated render world
    """
    parser = SceneParser(base_dir)
    return parser.parse_dict(data)
