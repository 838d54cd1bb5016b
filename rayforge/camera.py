"""
Camera module for generating primary rays.

The camera is a pinhole: a position, a right-handed orthonormal basis
(look, horizontal, vertical) and a film plane at the focal distance along
the look vector. Pixels are cells of the film plane; pixel (0, 0) is the
lower-left cell. The camera also owns the pixel buffer the renderer fills.
"""

from __future__ import annotations
import math
from typing import Tuple
import numpy as np

from .vec3 import Vec3, Point3, Color


class CameraConfigurationError(ValueError):
    """The camera was given parameters that do not define a valid view."""
    pass


def pixel_color(color: Color) -> np.ndarray:
    """Convert a linear color to an 8-bit RGB pixel, clamping to [0, 1]."""
    return (color.clamp(0.0, 1.0).to_array() * 255).astype(np.uint8)


class Camera:
    """A pinhole camera with a film plane and an owned pixel buffer."""

    def __init__(self):
        self.position = Point3(0, 0, 0)
        self.look_vector = Vec3(0, 0, -1)
        self.horizontal_vector = Vec3(1, 0, 0)
        self.vertical_vector = Vec3(0, 1, 0)

        self.film_position = Point3(0, 0, -1)
        self.image_size = np.zeros(2)
        self.number_pixels = (0, 0)
        self.pixel_size = np.zeros(2)
        self.min = np.zeros(2)
        self.max = np.zeros(2)
        self.colors = np.zeros((0, 0, 3), dtype=np.uint8)

    def position_and_aim(self, position: Point3, look_at_point: Point3, pseudo_up_vector: Vec3) -> None:
        """Place the camera and build its basis.

        Args:
            position: Camera position in world space
            look_at_point: Point the camera is looking at
            pseudo_up_vector: Rough up direction; must not be parallel to the view

        Raises:
            CameraConfigurationError: If the basis would be degenerate
        """
        look = look_at_point - position
        if look.near_zero():
            raise CameraConfigurationError(
                f"Camera position {position} coincides with look-at point"
            )
        look = look.normalize()

        horizontal = look.cross(pseudo_up_vector.normalize())
        if horizontal.near_zero(1e-12):
            raise CameraConfigurationError(
                f"Up vector {pseudo_up_vector} is parallel to the view direction {look}"
            )

        self.position = position
        self.look_vector = look
        self.horizontal_vector = horizontal.normalize()
        self.vertical_vector = self.horizontal_vector.cross(self.look_vector).normalize()

    def focus(self, focal_distance: float, aspect_ratio: float, field_of_view: float) -> None:
        """Place the film plane and size the image.

        Args:
            focal_distance: Distance from the camera to the film plane
            aspect_ratio: Width / height of the image
            field_of_view: Horizontal field of view in radians
        """
        if focal_distance <= 0 or aspect_ratio <= 0:
            raise CameraConfigurationError(
                "Focal distance and aspect ratio must be positive"
            )
        if not 0 < field_of_view < math.pi:
            raise CameraConfigurationError(
                f"Field of view must be in (0, pi) radians, got {field_of_view}"
            )

        self.film_position = self.position + self.look_vector * focal_distance
        width = 2.0 * focal_distance * math.tan(0.5 * field_of_view)
        height = width / aspect_ratio
        self.image_size = np.array([width, height])

    def set_resolution(self, number_pixels: Tuple[int, int]) -> None:
        """Allocate a fresh pixel buffer of cols x rows pixels.

        Any previous buffer is discarded.
        """
        cols, rows = number_pixels
        if cols <= 0 or rows <= 0:
            raise CameraConfigurationError(
                f"Resolution must be positive, got {cols}x{rows}"
            )
        self.number_pixels = (int(cols), int(rows))
        self.colors = np.zeros((rows, cols, 3), dtype=np.uint8)
        self.min = -0.5 * self.image_size
        self.max = 0.5 * self.image_size
        self.pixel_size = self.image_size / np.array([cols, rows], dtype=np.float64)

    def cell_center(self, pixel_index: Tuple[int, int]) -> np.ndarray:
        """Film-plane coordinates of the center of a pixel's cell."""
        return self.min + (np.asarray(pixel_index, dtype=np.float64) + 0.5) * self.pixel_size

    def world_position(self, pixel_index: Tuple[int, int]) -> Point3:
        """World-space point at the center of the given pixel.

        The index must lie inside the resolution; it is not checked.
        """
        cx, cy = self.cell_center(pixel_index)
        return (
            self.film_position
            + self.horizontal_vector * cx
            + self.vertical_vector * cy
        )

    def set_pixel(self, pixel_index: Tuple[int, int], color: np.ndarray) -> None:
        i, j = pixel_index
        self.colors[j, i] = color

    def get_pixel(self, pixel_index: Tuple[int, int]) -> np.ndarray:
        i, j = pixel_index
        return self.colors[j, i]

    def __repr__(self) -> str:
        return (
            f"Camera(position={self.position}, look={self.look_vector}, "
            f"resolution={self.number_pixels[0]}x{self.number_pixels[1]})"
        )
