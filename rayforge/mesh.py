"""
Triangle meshes.

A mesh owns an ordered vertex list and an ordered list of triangles, each a
triple of 0-based vertex indices. Every triangle is one part of the mesh.
"""

from __future__ import annotations
from typing import List, Optional, Tuple, TYPE_CHECKING

from .vec3 import Vec3, Point3
from .ray import Ray
from .box import Box
from .shapes import SceneObject, Plane, Hit, NO_INTERSECTION

if TYPE_CHECKING:
    from .shaders import Shader

# A ray hits a triangle if it hits the triangle's plane with barycentric
# weights all greater than -weight_tolerance. The slack closes the cracks
# that would otherwise let rays slip between adjoining triangles.
weight_tolerance = 1e-4


class Mesh(SceneObject):
    """A triangle mesh with one part per triangle."""

    def __init__(self, material_shader: Optional[Shader] = None):
        super().__init__(material_shader)
        self.vertices: List[Point3] = []
        self.triangles: List[Tuple[int, int, int]] = []
        self.box = Box()
        self.number_parts = 0

    @classmethod
    def read_obj(cls, filename: str, material_shader: Optional[Shader] = None) -> Mesh:
        """Read a mesh from a Wavefront OBJ file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        from .obj_loader import read_obj
        return read_obj(filename, cls(material_shader))

    def add_vertex(self, vertex: Point3) -> int:
        """Append a vertex, growing the mesh box. Returns its index."""
        self.vertices.append(vertex)
        self.box.include_point(vertex)
        return len(self.vertices) - 1

    def add_triangle(self, i: int, j: int, k: int) -> int:
        """Append a triangle over existing vertices. Returns its part index."""
        for index in (i, j, k):
            if not 0 <= index < len(self.vertices):
                raise ValueError(
                    f"Triangle vertex index {index} out of range "
                    f"(mesh has {len(self.vertices)} vertices)"
                )
        self.triangles.append((i, j, k))
        self.number_parts = len(self.triangles)
        return self.number_parts - 1

    def triangle_vertices(self, tri: int) -> Tuple[Point3, Point3, Point3]:
        a, b, c = self.triangles[tri]
        return self.vertices[a], self.vertices[b], self.vertices[c]

    def intersection(self, ray: Ray, part: int) -> Hit:
        dist = self.intersect_triangle(ray, part)
        if dist is None:
            return NO_INTERSECTION
        return Hit(self, dist, part)

    def normal(self, point: Point3, part: int) -> Vec3:
        """Face normal of the triangle; not flipped toward the viewer."""
        v0, v1, v2 = self.triangle_vertices(part)
        return (v1 - v0).cross(v2 - v0).normalize()

    def barycentric_weights(
        self, ray: Ray, tri: int, point: Point3
    ) -> Optional[Tuple[float, float, float]]:
        """Barycentric weights (w0, w1, w2) of a point in the triangle.

        w1 scales the edge v1-v0 and w2 the edge v2-v0. The weights are
        solved with the ray direction as the third axis, sharing the
        denominator dot(cross(d, v1-v0), v2-v0).

        Returns:
            The weights, or None when the denominator is zero
        """
        v0, v1, v2 = self.triangle_vertices(tri)
        e1 = v1 - v0
        e2 = v2 - v0
        d = ray.direction

        d_cross_e1 = d.cross(e1)
        denom = d_cross_e1.dot(e2)
        if denom == 0:
            return None

        offset = point - v0
        w2 = d_cross_e1.dot(offset) / denom
        w1 = e2.cross(d).dot(offset) / denom
        return 1.0 - w1 - w2, w1, w2

    def intersect_triangle(self, ray: Ray, tri: int) -> Optional[float]:
        """Distance to the triangle along the ray, or None on a miss.

        The ray is first intersected with the triangle's plane; that
        distance is the one reported. The plane point is then accepted if
        all three barycentric weights exceed -weight_tolerance.
        """
        v0 = self.vertices[self.triangles[tri][0]]
        face_normal = self.normal(v0, tri)

        # Zero-area triangle
        if face_normal.near_zero():
            return None

        plane_hit = Plane(v0, face_normal).intersection(ray, tri)
        if not plane_hit:
            return None

        weights = self.barycentric_weights(ray, tri, ray.point(plane_hit.dist))
        if weights is None:
            return None

        if all(w > -weight_tolerance for w in weights):
            return plane_hit.dist
        return None

    def bounding_box(self, part: int) -> Box:
        """Tight box around only the triangle with index part."""
        return Box.around_points(*self.triangle_vertices(part))

    def __repr__(self) -> str:
        return f"Mesh(vertices={len(self.vertices)}, triangles={len(self.triangles)})"
