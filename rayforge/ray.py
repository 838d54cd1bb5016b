"""
Ray class for representing rays in 3D space.

A ray is defined by an endpoint and a unit direction vector.
Ray(t) = endpoint + t * direction
"""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """A ray with an endpoint and a normalized direction.

    The parametric form is: P(t) = endpoint + t * direction
    where t >= 0 represents points along the ray. Because the direction
    is unit length, t is the distance travelled from the endpoint.
    """

    __slots__ = ('endpoint', 'direction')

    def __init__(self, endpoint: Point3, direction: Vec3):
        """Create a ray.

        Args:
            endpoint: The starting point of the ray
            direction: Direction of travel; normalized here
        """
        self.endpoint = endpoint
        self.direction = direction.normalize()

    def point(self, t: float) -> Point3:
        """Get the point along the ray at distance t."""
        return self.endpoint + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(endpoint={self.endpoint}, direction={self.direction})"
