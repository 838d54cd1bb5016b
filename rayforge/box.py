"""
Axis-aligned bounding boxes.

Boxes are the keys of the acceleration hierarchy. A box starts out empty
(lo > hi on every axis) and only grows through `include_point` or `union`.
"""

from __future__ import annotations
import sys
from typing import Optional
import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray

_BIG = sys.float_info.max


class Box:
    """Axis-Aligned Bounding Box stored as two numpy corners."""

    __slots__ = ('lo', 'hi')

    def __init__(self, lo: Optional[Point3] = None, hi: Optional[Point3] = None):
        """Create a box from corner points, or an empty box if none are given.

        Args:
            lo: Corner with smallest x, y, z values
            hi: Corner with largest x, y, z values
        """
        if lo is None or hi is None:
            self.make_empty()
        else:
            self.lo = lo.to_array()
            self.hi = hi.to_array()

    @classmethod
    def full(cls) -> Box:
        """A box covering all of space (used by unbounded primitives)."""
        box = cls()
        box.make_full()
        return box

    @classmethod
    def around_points(cls, *points: Point3) -> Box:
        box = cls()
        for p in points:
            box.include_point(p)
        return box

    def make_empty(self) -> None:
        self.lo = np.full(3, _BIG)
        self.hi = np.full(3, -_BIG)

    def make_full(self) -> None:
        self.lo = np.full(3, -_BIG)
        self.hi = np.full(3, _BIG)

    def is_empty(self) -> bool:
        return bool(np.any(self.lo > self.hi))

    def include_point(self, point: Point3) -> None:
        """Grow the box so that it contains the point."""
        p = point.to_array()
        self.lo = np.minimum(self.lo, p)
        self.hi = np.maximum(self.hi, p)

    def union(self, other: Box) -> Box:
        """Return the smallest box containing both boxes."""
        result = Box.__new__(Box)
        result.lo = np.minimum(self.lo, other.lo)
        result.hi = np.maximum(self.hi, other.hi)
        return result

    def padded(self, relative: float, absolute: float) -> Box:
        """Return a copy grown on every axis by relative * extent + absolute.

        Empty boxes stay empty and unbounded axes stay unbounded.
        """
        if self.is_empty():
            return Box()
        with np.errstate(over='ignore'):
            extent = self.hi - self.lo
        extent = np.where(np.isfinite(extent), extent, 0.0)
        pad = extent * relative + absolute
        result = Box.__new__(Box)
        result.lo = self.lo - pad
        result.hi = self.hi + pad
        return result

    def center(self) -> Point3:
        return Vec3.from_array((self.lo * 0.5) + (self.hi * 0.5))

    @property
    def minimum(self) -> Point3:
        return Vec3.from_array(self.lo.copy())

    @property
    def maximum(self) -> Point3:
        return Vec3.from_array(self.hi.copy())

    def intersection(self, ray: Ray) -> Optional[float]:
        """Test the ray against the box using the slab method.

        Returns:
            The distance at which the ray enters the box (0 if the endpoint
            is inside), or None if the ray misses. Empty boxes never hit.
        """
        if self.is_empty():
            return None

        origin = ray.endpoint.to_array().tolist()
        direction = ray.direction.to_array().tolist()
        lo = self.lo.tolist()
        hi = self.hi.tolist()
        t_near = 0.0
        t_far = float('inf')

        for i in range(3):
            if direction[i] == 0.0:
                # Parallel to this slab: inside it or never
                if origin[i] < lo[i] or origin[i] > hi[i]:
                    return None
                continue

            inv_d = 1.0 / direction[i]
            t0 = (lo[i] - origin[i]) * inv_d
            t1 = (hi[i] - origin[i]) * inv_d

            if inv_d < 0:
                t0, t1 = t1, t0

            t_near = max(t0, t_near)
            t_far = min(t1, t_far)

            # Strict so that flat boxes (a triangle in an axis plane) still hit
            if t_far < t_near:
                return None

        return t_near

    def __repr__(self) -> str:
        if self.is_empty():
            return "Box(empty)"
        return f"Box(lo={tuple(self.lo)}, hi={tuple(self.hi)})"
