"""
Three-component vectors.

One class serves for positions, directions and linear RGB colors; the
`Point3` and `Color` names are aliases that document intent at call sites.
Components live in a float64 numpy array and every operation returns a new
vector, so vectors can be shared freely between objects and threads.
"""

from __future__ import annotations
from typing import Iterable, Iterator, Union
import numpy as np

Operand = Union["Vec3", float]


def _values(operand: Operand):
    """Array of a vector operand, or the scalar itself for broadcasting."""
    return operand._data if isinstance(operand, Vec3) else operand


class Vec3:
    """An immutable 3D vector backed by a numpy array."""

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Wrap a length-3 array without copying it."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> Vec3:
        """Build a vector from any three numbers, e.g. a list read from a file.

        Raises:
            ValueError: If there are not exactly three values
        """
        x, y, z = values
        return cls(float(x), float(y), float(z))

    x = property(lambda self: float(self._data[0]))
    y = property(lambda self: float(self._data[1]))
    z = property(lambda self: float(self._data[2]))

    # Color channel names
    r = x
    g = y
    b = z

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def __repr__(self) -> str:
        return "Vec3({:.4f}, {:.4f}, {:.4f})".format(*self._data)

    def __eq__(self, other: object) -> bool:
        """Component-wise comparison within numpy's default tolerance."""
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    __hash__ = None

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    def __add__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data + _values(other))

    def __sub__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data - _values(other))

    def __mul__(self, other: Operand) -> Vec3:
        # Vector * vector is component-wise, which is how colors combine
        return Vec3.from_array(self._data * _values(other))

    __rmul__ = __mul__

    def __truediv__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data / _values(other))

    def dot(self, other: Vec3) -> float:
        return float(self._data @ other._data)

    def cross(self, other: Vec3) -> Vec3:
        """Right-handed cross product."""
        return Vec3.from_array(np.cross(self._data, other._data))

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return float(np.sqrt(self.length_squared()))

    def normalize(self) -> Vec3:
        """Unit vector in the same direction.

        The zero vector has no direction and is returned unchanged; callers
        that need a usable direction test `near_zero()` first.
        """
        length = self.length()
        if length == 0:
            return Vec3()
        return self / length

    def reflect(self, normal: Vec3) -> Vec3:
        """Mirror this direction about a unit normal: d - 2(d.n)n."""
        return self - normal * (2.0 * self.dot(normal))

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """True if every component is smaller than epsilon in magnitude."""
        return bool((np.abs(self._data) < epsilon).all())

    def clamp(self, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        return Vec3.from_array(np.clip(self._data, min_val, max_val))

    def to_array(self) -> np.ndarray:
        """A copy of the components as a numpy array."""
        return self._data.copy()


Point3 = Vec3
Color = Vec3
