"""
Light sources for the ray tracer.

Implements:
- Point lights (inverse square falloff)
- Directional lights (sun)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import math

from .vec3 import Vec3, Point3, Color


@dataclass
class LightSample:
    """Illumination arriving at a point from one light."""
    direction: Vec3       # Unit direction from the point to the light
    distance: float       # Distance to the light (inf for directional)
    intensity: Color      # Light color/intensity arriving at the point


class Light(ABC):
    """Abstract base class for light sources."""

    def __init__(self, color: Color, brightness: float = 1.0):
        self.color = color
        self.brightness = brightness

    @abstractmethod
    def sample(self, point: Point3) -> LightSample:
        """Describe the light arriving at a given point.

        Args:
            point: The point being illuminated

        Returns:
            LightSample with direction, distance and intensity
        """


class PointLight(Light):
    """A point light source.

    Point lights emit light equally in all directions from a single point,
    spreading their brightness over a sphere of area 4πd².
    """

    def __init__(self, position: Point3, color: Color, brightness: float = 1.0):
        """Create a point light.

        Args:
            position: Position of the light
            color: Color of the light
            brightness: Brightness multiplier
        """
        super().__init__(color, brightness)
        self.position = position

    def sample(self, point: Point3) -> LightSample:
        to_light = self.position - point
        distance = to_light.length()
        if distance == 0:
            return LightSample(Vec3(0, 0, 0), 0.0, Color(0, 0, 0))

        intensity = self.color * (self.brightness / (4 * math.pi * distance * distance))
        return LightSample(
            direction=to_light / distance,
            distance=distance,
            intensity=intensity,
        )

    def __repr__(self) -> str:
        return f"PointLight(position={self.position}, brightness={self.brightness})"


class DirectionalLight(Light):
    """A directional light (like the sun).

    Directional lights have parallel rays and no falloff.
    """

    def __init__(self, direction: Vec3, color: Color, brightness: float = 1.0):
        """Create a directional light.

        Args:
            direction: Direction the light travels in
            color: Color of the light
            brightness: Brightness multiplier
        """
        super().__init__(color, brightness)
        self.direction = direction.normalize()

    def sample(self, point: Point3) -> LightSample:
        return LightSample(
            direction=-self.direction,  # Direction TO the light
            distance=math.inf,          # Infinitely far
            intensity=self.color * self.brightness,
        )

    def __repr__(self) -> str:
        return f"DirectionalLight(direction={self.direction}, brightness={self.brightness})"
