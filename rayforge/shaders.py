"""
Surface shaders.

A shader turns a hit (point, normal, incoming ray) into a color. Shaders
receive the render world so that they can query lights, cast shadow rays
and spawn recursive reflection rays.

Implements:
- Flat (constant color, also used for backgrounds)
- Phong (ambient + diffuse + specular, with shadows)
- Reflective (mirror bounce blended over another shader)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .vec3 import Vec3, Point3, Color
from .ray import Ray

if TYPE_CHECKING:
    from .render_world import RenderWorld


class Shader(ABC):
    """Abstract base class for shaders."""

    @abstractmethod
    def shade_surface(
        self,
        world: RenderWorld,
        ray: Ray,
        point: Point3,
        normal: Vec3,
        recursion_depth: int,
    ) -> Color:
        """Compute the color seen along the ray at a surface point.

        Args:
            world: The world being rendered
            ray: The ray that hit the surface
            point: Hit point
            normal: Unit surface normal as reported by the object
            recursion_depth: Depth of the ray (primary rays are depth 1)

        Returns:
            Linear color contribution
        """


class FlatShader(Shader):
    """Returns the same color everywhere."""

    def __init__(self, color: Color):
        self.color = color

    def shade_surface(self, world, ray, point, normal, recursion_depth) -> Color:
        return self.color

    def __repr__(self) -> str:
        return f"FlatShader({self.color})"


class PhongShader(Shader):
    """Phong reflection model.

    color = ambient * world ambient + Σ over visible lights of
            diffuse * I * max(n·l, 0) + specular * I * max(r·v, 0)^power
    """

    def __init__(
        self,
        color_ambient: Color,
        color_diffuse: Color,
        color_specular: Color,
        specular_power: float = 50.0,
    ):
        self.color_ambient = color_ambient
        self.color_diffuse = color_diffuse
        self.color_specular = color_specular
        self.specular_power = specular_power

    def shade_surface(self, world, ray, point, normal, recursion_depth) -> Color:
        settings = world.settings

        # Light both sides of a surface
        if normal.dot(ray.direction) > 0:
            normal = -normal

        color = self.color_ambient * settings.ambient_color * settings.ambient_intensity
        view = -ray.direction

        for light in world.lights:
            sample = light.sample(point)
            n_dot_l = normal.dot(sample.direction)
            if n_dot_l <= 0:
                continue

            if not world.light_visible(point, sample):
                continue

            color = color + self.color_diffuse * sample.intensity * n_dot_l

            reflected = (-sample.direction).reflect(normal)
            r_dot_v = max(reflected.dot(view), 0.0)
            if r_dot_v > 0:
                color = color + self.color_specular * sample.intensity * (r_dot_v ** self.specular_power)

        return color


class ReflectiveShader(Shader):
    """Blends another shader with a recursively traced mirror reflection."""

    def __init__(self, shader: Shader, reflectivity: float):
        """Create a reflective shader.

        Args:
            shader: Shader for the non-mirror part of the surface
            reflectivity: Fraction of the color taken from the reflection, in [0, 1]
        """
        self.shader = shader
        self.reflectivity = min(max(reflectivity, 0.0), 1.0)

    def shade_surface(self, world, ray, point, normal, recursion_depth) -> Color:
        color = self.shader.shade_surface(world, ray, point, normal, recursion_depth)
        color = color * (1.0 - self.reflectivity)

        if self.reflectivity > 0:
            reflected_ray = Ray(point, ray.direction.reflect(normal))
            reflected = world.cast_ray(reflected_ray, recursion_depth + 1)
            color = color + reflected * self.reflectivity

        return color
