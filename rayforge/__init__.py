"""
RayForge - A Python Whitted-style Ray Tracer

A compact ray tracing core with support for:
- Pinhole camera with an owned pixel buffer
- Planes, spheres and triangle meshes (OBJ import)
- Bounding volume hierarchy over every object part
- Recursive ray casting with shadows and mirror reflection
- Phong, flat and reflective shaders
- YAML/JSON scene descriptions and PNG output
"""

__version__ = "0.1.0"
__author__ = "RayForge Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .box import Box
from .shapes import Hit, NO_INTERSECTION, SceneObject, Plane, Sphere, small_t
from .mesh import Mesh, weight_tolerance
from .camera import Camera, CameraConfigurationError, pixel_color
from .hierarchy import Hierarchy, HierarchyNode, Entry
from .lights import Light, LightSample, PointLight, DirectionalLight
from .shaders import Shader, FlatShader, PhongShader, ReflectiveShader
from .render_world import RenderWorld, RenderSettings
from .obj_loader import OBJLoader, read_obj, get_mesh_stats
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .image_output import to_image, save_image
