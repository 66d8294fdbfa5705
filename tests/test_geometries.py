import math

import numpy as np
import pytest

from voxel_tracer import (Cylinder, Plane, Point, Polygon, Ray, Sphere, Triangle,
                          Tube, Vector)


def _points(geo_points):
    return None if geo_points is None else [gp.point for gp in geo_points]


# ---------------------------------------------------------------------------
# Plane
# ---------------------------------------------------------------------------

def test_plane_normal_is_unit():
    plane = Plane(Point(0, 0, 1), Vector(0, 0, 2))
    assert plane.normal() == Vector(0, 0, 1)
    plane = Plane(Point(1, 0, 0), Point(0, 1, 0), Point(0, 0, 1))
    n = plane.normal()
    assert n.length() == pytest.approx(1.0)
    assert n.dot(Point(0, 1, 0) - Point(1, 0, 0)) == pytest.approx(0.0)
    assert n.dot(Point(0, 0, 1) - Point(1, 0, 0)) == pytest.approx(0.0)


def test_plane_invalid_points():
    with pytest.raises(ValueError):
        Plane(Point(1, 0, 0), Point(2, 0, 0), Point(3, 0, 0))
    with pytest.raises(ValueError):
        Plane(Point(1, 0, 0), Point(1, 0, 0), Point(0, 1, 0))


def test_plane_intersections():
    plane = Plane(Point(0, 0, 1), Vector(0, 0, 1))
    assert plane.bounding_box is None
    assert plane.find_intersections(Ray(Point.ZERO, Vector(1, 0, 1))) == [Point(1, 0, 1)]
    # parallel, starting on the plane, pointing away
    assert plane.find_intersections(Ray(Point.ZERO, Vector(1, 0, 0))) is None
    assert plane.find_intersections(Ray(Point(1, 1, 1), Vector(0, 1, 1))) is None
    assert plane.find_intersections(Ray(Point(0, 0, 2), Vector(0, 0, 1))) is None
    # beyond max_distance
    assert plane.find_geo_intersections(Ray(Point.ZERO, Vector(0, 0, 1)), 0.5) is None


# ---------------------------------------------------------------------------
# Polygon / Triangle
# ---------------------------------------------------------------------------

def test_polygon_valid_and_normal():
    poly = Polygon(Point(0, 0, 1), Point(1, 0, 0), Point(0, 1, 0), Point(-1, 1, 1))
    n = poly.normal(Point(0, 0, 1))
    assert n.length() == pytest.approx(1.0)
    s = 1 / math.sqrt(3)
    assert n == Vector(s, s, s) or n == Vector(-s, -s, -s)
    for a, b in zip(poly.vertices, poly.vertices[1:]):
        assert n.dot(b - a) == pytest.approx(0.0)


@pytest.mark.parametrize("vertices", [
    # wrong vertex order
    [(0, 0, 1), (0, 1, 0), (1, 0, 0), (-1, 1, 1)],
    # last vertex out of plane
    [(0, 0, 1), (1, 0, 0), (0, 1, 0), (0, 2, 2)],
    # concave
    [(0, 0, 1), (1, 0, 0), (0, 1, 0), (0.5, 0.25, 0.5)],
    # vertex on a side
    [(0, 0, 1), (1, 0, 0), (0, 1, 0), (0, 0.5, 0.5)],
    # last vertex repeats the first
    [(0, 0, 1), (1, 0, 0), (0, 1, 0), (0, 0, 1)],
    # co-located vertices
    [(0, 0, 1), (1, 0, 0), (0, 1, 0), (0, 1, 0)],
    # too few vertices
    [(0, 0, 1), (1, 0, 0)],
])
def test_polygon_invalid(vertices):
    with pytest.raises(ValueError):
        Polygon(*(Point(*v) for v in vertices))


def test_polygon_intersections():
    square = Polygon(Point(1, 0, 0), Point(0, 0, 0), Point(0, 1, 0), Point(1, 1, 0))
    up = Vector(0, 0, 1)
    assert square.find_intersections(Ray(Point(0.5, 0.5, -1), up)) == [Point(0.5, 0.5, 0)]
    # outside, against an edge, against a vertex, on an edge's continuation
    assert square.find_intersections(Ray(Point(2, 0.5, -1), up)) is None
    assert square.find_intersections(Ray(Point(1, 0.5, -1), up)) is None
    assert square.find_intersections(Ray(Point(1, 1, -1), up)) is None
    assert square.find_intersections(Ray(Point(2, 0, -1), up)) is None
    box = square.bounding_box
    assert np.allclose(box.minimum, [0, 0, 0])
    assert np.allclose(box.maximum, [1, 1, 0])


def test_triangle():
    tri = Triangle(Point(0, 0, 0), Point(2, 0, 0), Point(0, 2, 0))
    down = Vector(0, 0, -1)
    assert tri.find_intersections(Ray(Point(0.5, 0.5, 1), down)) == [Point(0.5, 0.5, 0)]
    assert tri.find_intersections(Ray(Point(1.5, 1.5, 1), down)) is None
    assert tri.normal(Point(0.5, 0.5, 0)) in (Vector(0, 0, 1), Vector(0, 0, -1))


# ---------------------------------------------------------------------------
# Sphere
# ---------------------------------------------------------------------------

def test_sphere_normal():
    sphere = Sphere(Point(1, 0, 0), 1)
    assert sphere.normal(Point(2, 0, 0)) == Vector(1, 0, 0)
    assert sphere.normal(Point(1, 0, 1)) == Vector(0, 0, 1)


def test_sphere_intersections():
    sphere = Sphere(Point(1, 0, 0), 1)
    x = Vector(1, 0, 0)
    assert sphere.find_intersections(Ray(Point(-1, 0, 0), x)) == [Point(0, 0, 0), Point(2, 0, 0)]
    assert sphere.find_intersections(Ray(Point(-1, 0, 0), Vector(1, 1, 0))) is None
    # from inside, from the center, after the sphere
    assert sphere.find_intersections(Ray(Point(0.5, 0, 0), x)) == [Point(2, 0, 0)]
    assert sphere.find_intersections(Ray(Point(1, 0, 0), Vector(0, 0, 1))) == [Point(1, 0, 1)]
    assert sphere.find_intersections(Ray(Point(3, 0, 0), x)) is None
    # tangent
    assert sphere.find_intersections(Ray(Point(1, 1, -1), Vector(0, 0, 1))) is None
    hits = sphere.find_geo_intersections(Ray(Point(-1, 0, 0), x), 1.5)
    assert _points(hits) == [Point(0, 0, 0)]
    assert all(gp.geometry is sphere for gp in hits)


def test_sphere_invalid_and_box():
    with pytest.raises(ValueError):
        Sphere(Point.ZERO, 0)
    box = Sphere(Point(1, 2, 3), 2).bounding_box
    assert np.allclose(box.minimum, [-1, 0, 1])
    assert np.allclose(box.maximum, [3, 4, 5])


# ---------------------------------------------------------------------------
# Tube
# ---------------------------------------------------------------------------

@pytest.fixture
def tube():
    return Tube(Ray(Point(-1, 0, 0), Vector(1, 0, 0)), 1)


def test_tube_normal(tube):
    assert tube.normal(Point(2, 0, 1)) == Vector(0, 0, 1)
    # point level with the axis origin
    assert tube.normal(Point(-1, 1, 0)) == Vector(0, 1, 0)


def test_tube_crossing(tube):
    hits = tube.find_intersections(Ray(Point(-1, 2, -1), Vector(1, -1, 1)))
    assert hits == [Point(0, 1, 0), Point(1, 0, 1)]

    z = math.sqrt(0.75)
    hits = tube.find_intersections(Ray(Point(1, 0.5, -2), Vector(0, 0, 1)))
    assert hits == [Point(1, 0.5, -z), Point(1, 0.5, z)]


def test_tube_misses(tube):
    assert tube.bounding_box is None
    # tangent
    assert tube.find_intersections(Ray(Point(1, -1, -2), Vector(0, 0, 1))) is None
    # parallel to the axis
    assert tube.find_intersections(Ray(Point(0, 0.5, 0), Vector(1, 0, 0))) is None
    # pointing away
    assert tube.find_intersections(Ray(Point(1, 0, 2), Vector(0, 0, 1))) is None


def test_tube_invalid_radius():
    with pytest.raises(ValueError):
        Tube(Ray(Point.ZERO, Vector(1, 0, 0)), -1)


# ---------------------------------------------------------------------------
# Cylinder
# ---------------------------------------------------------------------------

@pytest.fixture
def cylinder():
    return Cylinder(Ray(Point.ZERO, Vector(0, 0, 1)), 1, 2)


def test_cylinder_normals(cylinder):
    assert cylinder.normal(Point(1, 0, 1)) == Vector(1, 0, 0)
    assert cylinder.normal(Point(0.5, 0, 2)) == Vector(0, 0, 1)
    assert cylinder.normal(Point(0.5, 0, 0)) == Vector(0, 0, 1)
    assert cylinder.normal(Point(0, 0, 0)) == Vector(0, 0, 1)


def test_cylinder_axis_parallel_ray(cylinder):
    hits = cylinder.find_intersections(Ray(Point(0.5, 0, -1), Vector(0, 0, 1)))
    assert hits == [Point(0.5, 0, 0), Point(0.5, 0, 2)]


def test_cylinder_side_and_cap(cylinder):
    hits = cylinder.find_intersections(Ray(Point(-2, 0, 1), Vector(1, 0, 0)))
    assert hits == [Point(-1, 0, 1), Point(1, 0, 1)]

    hits = cylinder.find_intersections(Ray(Point(-2, 0, 0.5), Vector(1, 0, 1)))
    assert hits == [Point(-1, 0, 1.5), Point(-0.5, 0, 2)]


def test_cylinder_misses(cylinder):
    assert cylinder.find_intersections(Ray(Point(-2, 0, 3), Vector(1, 0, 0))) is None
    assert cylinder.find_intersections(Ray(Point(2, 0, -1), Vector(0, 0, 1))) is None


def test_cylinder_box_and_validation(cylinder):
    box = cylinder.bounding_box
    assert np.allclose(box.minimum, [-1, -1, 0])
    assert np.allclose(box.maximum, [1, 1, 2])
    with pytest.raises(ValueError):
        Cylinder(Ray(Point.ZERO, Vector(0, 0, 1)), 1, 0)
