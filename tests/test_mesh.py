"""Tests for triangle meshes."""

import pytest
from rayforge.vec3 import Vec3, Point3
from rayforge.ray import Ray
from rayforge.mesh import Mesh, weight_tolerance
from rayforge.shapes import NO_INTERSECTION


def make_triangle(v0, v1, v2):
    mesh = Mesh()
    for v in (v0, v1, v2):
        mesh.add_vertex(v)
    mesh.add_triangle(0, 1, 2)
    return mesh


@pytest.fixture
def unit_triangle():
    return make_triangle(Point3(0, 0, 0), Point3(1, 0, 0), Point3(0, 1, 0))


class TestMeshConstruction:
    """Test building meshes."""

    def test_empty_mesh(self):
        mesh = Mesh()
        assert mesh.number_parts == 0
        assert mesh.box.is_empty()

    def test_parts_follow_triangles(self):
        mesh = Mesh()
        for v in (Point3(0, 0, 0), Point3(1, 0, 0), Point3(0, 1, 0), Point3(1, 1, 0)):
            mesh.add_vertex(v)
        assert mesh.add_triangle(0, 1, 2) == 0
        assert mesh.add_triangle(1, 3, 2) == 1
        assert mesh.number_parts == 2

    def test_box_grows_with_vertices(self):
        mesh = Mesh()
        mesh.add_vertex(Point3(-1, 0, 2))
        mesh.add_vertex(Point3(3, -2, 0))
        assert mesh.box.minimum == Point3(-1, -2, 0)
        assert mesh.box.maximum == Point3(3, 0, 2)

    def test_bad_index_rejected(self):
        mesh = Mesh()
        mesh.add_vertex(Point3(0, 0, 0))
        with pytest.raises(ValueError):
            mesh.add_triangle(0, 1, 2)


class TestTriangleIntersection:
    """Test ray-triangle intersection."""

    def test_hit_inside(self, unit_triangle):
        ray = Ray(Point3(0.25, 0.25, 1), Vec3(0, 0, -1))
        hit = unit_triangle.intersection(ray, 0)

        assert hit
        assert hit.object is unit_triangle
        assert hit.part == 0
        assert abs(hit.dist - 1.0) < 1e-9

    def test_hit_from_back_side(self, unit_triangle):
        ray = Ray(Point3(0.25, 0.25, -2), Vec3(0, 0, 1))
        hit = unit_triangle.intersection(ray, 0)
        assert hit
        assert abs(hit.dist - 2.0) < 1e-9

    def test_hit_just_outside_edge_within_tolerance(self, unit_triangle):
        ray = Ray(Point3(-0.00003, -0.00002, 1), Vec3(0, 0, -1))
        hit = unit_triangle.intersection(ray, 0)
        assert hit
        assert abs(hit.dist - 1.0) < 1e-9

    def test_miss_outside_tolerance(self, unit_triangle):
        ray = Ray(Point3(-0.01, 0, 1), Vec3(0, 0, -1))
        assert unit_triangle.intersection(ray, 0) is NO_INTERSECTION

    def test_miss_past_far_vertex(self, unit_triangle):
        ray = Ray(Point3(0.6, 0.6, 1), Vec3(0, 0, -1))
        assert not unit_triangle.intersection(ray, 0)

    def test_miss_when_triangle_behind_endpoint(self, unit_triangle):
        ray = Ray(Point3(0.25, 0.25, -1), Vec3(0, 0, -1))
        assert not unit_triangle.intersection(ray, 0)

    def test_parallel_ray_misses(self, unit_triangle):
        ray = Ray(Point3(-1, 0.25, 0), Vec3(1, 0, 0))
        assert not unit_triangle.intersection(ray, 0)

    def test_degenerate_triangle_misses(self):
        mesh = make_triangle(Point3(0, 0, 0), Point3(1, 1, 1), Point3(2, 2, 2))
        ray = Ray(Point3(1, 1, 5), Vec3(0, 0, -1))
        assert not mesh.intersection(ray, 0)

    def test_oblique_hit_distance(self, unit_triangle):
        ray = Ray(Point3(0.2, 0.2, 1), Vec3(0.1, 0.1, -1))
        hit = unit_triangle.intersection(ray, 0)
        expected = Vec3(0.1, 0.1, 1).length()
        assert hit
        assert abs(hit.dist - expected) < 1e-9


class TestBarycentricWeights:
    """Test barycentric weights of plane points."""

    def test_weights_sum_to_one(self, unit_triangle):
        ray = Ray(Point3(0.2, 0.3, 1), Vec3(0, 0, -1))
        w0, w1, w2 = unit_triangle.barycentric_weights(ray, 0, Point3(0.2, 0.3, 0))
        assert abs(w0 + w1 + w2 - 1.0) < 1e-12
        assert abs(w1 - 0.2) < 1e-12
        assert abs(w2 - 0.3) < 1e-12

    def test_vertex_weights(self, unit_triangle):
        ray = Ray(Point3(1, 0, 1), Vec3(0, 0, -1))
        w0, w1, w2 = unit_triangle.barycentric_weights(ray, 0, Point3(1, 0, 0))
        assert abs(w0) < 1e-12
        assert abs(w1 - 1.0) < 1e-12
        assert abs(w2) < 1e-12

    def test_tolerance_applies_to_all_weights(self, unit_triangle):
        # Just beyond the hypotenuse, w0 is slightly negative
        offset = weight_tolerance / 4
        ray = Ray(Point3(0.5 + offset, 0.5 + offset, 1), Vec3(0, 0, -1))
        assert unit_triangle.intersection(ray, 0)


class TestMeshGeometry:
    """Test normals and boxes."""

    def test_normal_follows_winding(self, unit_triangle):
        assert unit_triangle.normal(Point3(0.1, 0.1, 0), 0) == Vec3(0, 0, 1)

    def test_reversed_winding_flips_normal(self):
        mesh = make_triangle(Point3(0, 0, 0), Point3(0, 1, 0), Point3(1, 0, 0))
        assert mesh.normal(Point3(0.1, 0.1, 0), 0) == Vec3(0, 0, -1)

    def test_bounding_box_is_tight_per_triangle(self):
        mesh = Mesh()
        for v in (Point3(0, 0, 0), Point3(1, 0, 0), Point3(0, 1, 0), Point3(5, 5, 5)):
            mesh.add_vertex(v)
        mesh.add_triangle(0, 1, 2)
        mesh.add_triangle(1, 3, 2)

        box = mesh.bounding_box(0)
        assert box.minimum == Point3(0, 0, 0)
        assert box.maximum == Point3(1, 1, 0)
        assert mesh.bounding_box(1).maximum == Point3(5, 5, 5)
