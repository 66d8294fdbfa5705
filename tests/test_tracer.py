import numpy as np
import pytest

from voxel_tracer import (AmbientLight, BeamSampler, DirectionalLight, GeoPoint,
                          Geometries, Material, Point, PointLight, Polygon, Ray,
                          RegularGridTracer, Scene, SimpleRayTracer, Sphere, Vector)
from voxel_tracer.tracer import MAX_CALC_COLOR_LEVEL


@pytest.fixture(params=[SimpleRayTracer, RegularGridTracer])
def tracer_class(request):
    return request.param


def test_miss_returns_background(tracer_class):
    scene = Scene("empty", geometries=Geometries(Sphere(Point(0, 0, -10), 1)),
                  background=(1, 2, 3))
    tracer = tracer_class(scene)
    color = tracer.trace(Ray(Point.ZERO, Vector(0, 0, 1)))
    assert np.allclose(color, [1, 2, 3])


def test_diffuse_closed_form(lit_sphere_scene, tracer_class):
    tracer = tracer_class(lit_sphere_scene)
    color = tracer.trace(Ray(Point(0, 0, 5), Vector(0, 0, -1)))
    # emission + 100 * kd * |l.n| + ambient
    assert np.allclose(color, [65, 55, 55])


def test_specular_highlight():
    sphere = Sphere(Point.ZERO, 1, material=Material(ks=0.5, shininess=10))
    scene = Scene("highlight", geometries=Geometries(sphere),
                  lights=[PointLight((100, 100, 100), Point(0, 0, 10))])
    color = SimpleRayTracer(scene).trace(Ray(Point(0, 0, 5), Vector(0, 0, -1)))
    assert np.allclose(color, [50, 50, 50])


def test_unlit_side_gets_no_light():
    sphere = Sphere(Point.ZERO, 1, material=Material(kd=1))
    scene = Scene("back", geometries=Geometries(sphere),
                  lights=[DirectionalLight((100, 100, 100), Vector(0, 0, -1))])
    color = SimpleRayTracer(scene).trace(Ray(Point(0, 0, -5), Vector(0, 0, 1)))
    assert np.allclose(color, [0, 0, 0])


@pytest.mark.parametrize("kt, expected", [
    (0.0, [15, 5, 5]),
    # both walls of the occluder attenuate: 0.5 * 0.5
    (0.5, [27.5, 17.5, 17.5]),
])
def test_occluder_transparency(lit_sphere_scene, tracer_class, kt, expected):
    occluder = Sphere(Point(0, 0, 5), 1, material=Material(kt=kt))
    lit_sphere_scene.geometries.add(occluder)
    tracer = tracer_class(lit_sphere_scene)
    target = lit_sphere_scene.geometries.intersectables[0]
    gp = GeoPoint(target, Point(0, 0, 1))
    color = tracer.shade(gp, Ray(Point(0, 3, 3), Vector(0, -3, -2)))
    assert np.allclose(color, expected)


def test_mirror_reflects_background(tracer_class):
    mirror = Sphere(Point.ZERO, 1, material=Material(kr=1))
    scene = Scene("mirror", geometries=Geometries(mirror), background=(7, 8, 9))
    color = tracer_class(scene).trace(Ray(Point(0, 0, 5), Vector(0, 0, -1)))
    assert np.allclose(color, [7, 8, 9])


def test_facing_mirrors_stop_at_max_level(tracer_class):
    material = Material(kr=1)
    scene = Scene("hall of mirrors",
                  geometries=Geometries(Sphere(Point(0, 0, 0), 1, emission=(1, 2, 3), material=material),
                                        Sphere(Point(0, 0, 4), 1, emission=(1, 2, 3), material=material)))
    color = tracer_class(scene).trace(Ray(Point(0, 0, 2), Vector(0, 0, -1)))
    assert np.allclose(color, np.array([1, 2, 3]) * MAX_CALC_COLOR_LEVEL)


def test_refraction_sees_through(tracer_class):
    glass = Polygon(Point(-1, -1, 0), Point(1, -1, 0), Point(1, 1, 0), Point(-1, 1, 0),
                    material=Material(kt=0.5))
    back = Sphere(Point(0, 0, -5), 1, emission=(100, 40, 20))
    scene = Scene("window", geometries=Geometries(glass, back))
    color = tracer_class(scene).trace(Ray(Point(0, 0, 5), Vector(0, 0, -1)))
    assert np.allclose(color, [50, 20, 10])


def test_negligible_contribution_is_cut(tracer_class):
    glass = Polygon(Point(-1, -1, 0), Point(1, -1, 0), Point(1, 1, 0), Point(-1, 1, 0),
                    material=Material(kt=0.0005))
    back = Sphere(Point(0, 0, -5), 1, emission=(1e6, 0, 0))
    scene = Scene("dim window", geometries=Geometries(glass, back))
    color = tracer_class(scene).trace(Ray(Point(0, 0, 5), Vector(0, 0, -1)))
    assert np.allclose(color, [0, 0, 0])


def _penumbra_scene(radius):
    floor = Polygon(Point(-5, -5, 0), Point(5, -5, 0), Point(5, 5, 0), Point(-5, 5, 0),
                    material=Material(kd=1))
    blocker = Sphere(Point(0, 0, 5), 0.5)
    light = PointLight((100, 100, 100), Point(0, 0, 10), radius=radius)
    return floor, Scene("penumbra", geometries=Geometries(floor, blocker), lights=[light])


def test_soft_shadow_is_partial(tracer_class):
    floor, scene = _penumbra_scene(radius=2)
    gp = GeoPoint(floor, Point.ZERO)
    ray = Ray(Point(0, 3, 3), Vector(0, -1, -1))

    hard = tracer_class(scene).shade(gp, ray)
    soft = tracer_class(scene, BeamSampler(9)).shade(gp, ray)
    assert np.allclose(hard, [0, 0, 0])
    assert np.all(soft > 0)
    assert np.all(soft < 100)


def test_point_light_without_radius_ignores_sampler():
    floor, scene = _penumbra_scene(radius=0)
    gp = GeoPoint(floor, Point(3, 0, 0))
    ray = Ray(Point(3, 3, 3), Vector(0, -1, -1))
    hard = SimpleRayTracer(scene).shade(gp, ray)
    sampled = SimpleRayTracer(scene, BeamSampler(9)).shade(gp, ray)
    assert np.allclose(hard, sampled)
    assert np.all(hard > 0)
