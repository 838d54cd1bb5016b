"""Tests for geometric shapes."""

import pytest
import math
from rayforge.vec3 import Vec3, Point3, Color
from rayforge.ray import Ray
from rayforge.shapes import Sphere, Plane, Hit, NO_INTERSECTION, small_t
from rayforge.shaders import FlatShader


class TestHit:
    """Test the Hit record."""

    def test_no_intersection_is_falsy(self):
        assert not NO_INTERSECTION
        assert NO_INTERSECTION.object is None
        assert NO_INTERSECTION.dist == math.inf

    def test_hit_is_truthy(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        assert Hit(sphere, 2.0, 0)


class TestSphere:
    """Test Sphere class."""

    def test_creation(self):
        center = Point3(0, 0, 0)
        sphere = Sphere(center, 1.0)
        assert sphere.center == center
        assert sphere.radius == 1.0
        assert sphere.number_parts == 1

    def test_hit_through_center(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hit = sphere.intersection(ray, 0)

        assert hit
        assert hit.object is sphere
        assert hit.part == 0
        assert abs(hit.dist - 4.0) < 1e-6  # Hits at z=-1

    def test_hit_from_inside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        hit = sphere.intersection(ray, 0)

        assert hit
        assert abs(hit.dist - 1.0) < 1e-6

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 5, -5), Vec3(0, 0, 1))  # Ray passes above sphere
        assert sphere.intersection(ray, 0) is NO_INTERSECTION

    def test_behind_ray(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))  # Ray points away from sphere
        assert not sphere.intersection(ray, 0)

    def test_ignores_hit_at_endpoint(self):
        # Ray leaving the surface must not re-hit it at t ~ 0
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, 1), Vec3(0, 0, 1))
        assert not sphere.intersection(ray, 0)

    def test_normal(self):
        sphere = Sphere(Point3(1, 0, 0), 2.0)
        assert sphere.normal(Point3(1, 2, 0), 0) == Vec3(0, 1, 0)

    def test_bounding_box(self):
        sphere = Sphere(Point3(1, 2, 3), 0.5)
        box = sphere.bounding_box(0)
        assert box.minimum == Point3(0.5, 1.5, 2.5)
        assert box.maximum == Point3(1.5, 2.5, 3.5)

    def test_with_shader(self):
        shader = FlatShader(Color(1, 0, 0))
        sphere = Sphere(Point3(0, 0, 0), 1.0, shader)
        assert sphere.material_shader is shader


class TestPlane:
    """Test Plane class."""

    def test_hit(self):
        plane = Plane(Point3(0, -1, 0), Vec3(0, 1, 0))
        ray = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        hit = plane.intersection(ray, 0)

        assert hit
        assert abs(hit.dist - 2.0) < 1e-6

    def test_hit_from_behind(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        ray = Ray(Point3(0, -3, 0), Vec3(0, 1, 0))
        hit = plane.intersection(ray, 0)

        assert hit
        assert abs(hit.dist - 3.0) < 1e-6

    def test_parallel_miss(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        ray = Ray(Point3(0, 1, 0), Vec3(1, 0, 0))
        assert plane.intersection(ray, 0) is NO_INTERSECTION

    def test_pointing_away_miss(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        ray = Ray(Point3(0, 1, 0), Vec3(0, 1, 0))
        assert not plane.intersection(ray, 0)

    def test_endpoint_on_plane_miss(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        ray = Ray(Point3(0, small_t / 2, 0), Vec3(0, -1, 0))
        assert not plane.intersection(ray, 0)

    def test_normal_is_unit(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 3, 0))
        assert plane.normal(Point3(5, 0, 5), 0) == Vec3(0, 1, 0)

    def test_bounding_box_is_unbounded(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        ray = Ray(Point3(100, 50, -30), Vec3(1, 2, 3))
        assert plane.bounding_box(0).intersection(ray) is not None
