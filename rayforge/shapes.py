"""
Intersectable objects for the ray tracer.

Every object implements the SceneObject capability: it owns one or more
"parts" (indivisible intersectable pieces, e.g. one triangle of a mesh) and
answers intersection, normal and bounding-box queries per part. Misses are
reported with the NO_INTERSECTION sentinel rather than exceptions.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray
from .box import Box

if TYPE_CHECKING:
    from .shaders import Shader

# Hits closer than this are ignored so that rays spawned at a surface do not
# re-hit that surface through floating point error.
small_t = 1e-4


@dataclass(frozen=True)
class Hit:
    """Result of testing a ray against a part of an object.

    Attributes:
        object: The object that was hit (None for a miss)
        dist: Distance along the ray to the hit point
        part: Index of the part of the object that was hit
    """
    object: Optional[SceneObject]
    dist: float
    part: int

    def __bool__(self) -> bool:
        return self.object is not None


NO_INTERSECTION = Hit(None, math.inf, -1)


class SceneObject(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    def __init__(self, material_shader: Optional[Shader] = None):
        self.material_shader = material_shader
        self.number_parts = 1

    @abstractmethod
    def intersection(self, ray: Ray, part: int) -> Hit:
        """Test if the ray hits the given part of this object.

        Returns:
            A Hit with dist > small_t, or NO_INTERSECTION
        """

    @abstractmethod
    def normal(self, point: Point3, part: int) -> Vec3:
        """Unit surface normal of the given part at the given point."""

    @abstractmethod
    def bounding_box(self, part: int) -> Box:
        """Box enclosing the given part."""


class Plane(SceneObject):
    """An infinite plane defined by a point and normal."""

    def __init__(self, point: Point3, normal: Vec3, material_shader: Optional[Shader] = None):
        """Create a plane.

        Args:
            point: Any point on the plane
            normal: The plane's normal vector (will be normalized)
            material_shader: Shader used when the plane is hit
        """
        super().__init__(material_shader)
        self.x1 = point
        self.plane_normal = normal.normalize()

    def intersection(self, ray: Ray, part: int) -> Hit:
        """Solve dot(endpoint + t * direction - x1, normal) = 0 for t."""
        denom = self.plane_normal.dot(ray.direction)

        # Ray is parallel to plane (or the normal is degenerate)
        if abs(denom) < 1e-12:
            return NO_INTERSECTION

        t = (self.x1 - ray.endpoint).dot(self.plane_normal) / denom

        if t > small_t:
            return Hit(self, t, part)
        return NO_INTERSECTION

    def normal(self, point: Point3, part: int) -> Vec3:
        return self.plane_normal

    def bounding_box(self, part: int) -> Box:
        """Planes are infinite, so the box covers everything."""
        return Box.full()

    def __repr__(self) -> str:
        return f"Plane(point={self.x1}, normal={self.plane_normal})"


class Sphere(SceneObject):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material_shader: Optional[Shader] = None):
        super().__init__(material_shader)
        self.center = center
        self.radius = radius

    def intersection(self, ray: Ray, part: int) -> Hit:
        """Test ray-sphere intersection using the quadratic formula.

        With a unit direction the equation |O + tD - C|² = r² reduces to
        t² + 2t(D·(O-C)) + |O-C|² - r² = 0.
        """
        oc = ray.endpoint - self.center
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - c
        if discriminant < 0:
            return NO_INTERSECTION

        sqrtd = math.sqrt(discriminant)

        # Nearest root first, then the far one if we start inside
        for root in (-half_b - sqrtd, -half_b + sqrtd):
            if root > small_t:
                return Hit(self, root, part)
        return NO_INTERSECTION

    def normal(self, point: Point3, part: int) -> Vec3:
        return (point - self.center).normalize()

    def bounding_box(self, part: int) -> Box:
        r_vec = Vec3(abs(self.radius), abs(self.radius), abs(self.radius))
        return Box(self.center - r_vec, self.center + r_vec)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"
