"""Shared fixtures: a lattice of separated spheres and a small lit scene."""

import matplotlib

matplotlib.use("Agg")

import pytest

from voxel_tracer import (AmbientLight, Geometries, Material, Point, PointLight,
                          Scene, Sphere)


@pytest.fixture
def sphere_lattice():
    """27 spheres of radius 0.6 centered on the odd points of [0, 6]^3."""
    spheres = [Sphere(Point(2 * i + 1, 2 * j + 1, 2 * k + 1), 0.6,
                      emission=(10 * i, 10 * j, 10 * k),
                      material=Material(kd=0.4, ks=0.3, kr=0.2 * (i == 1),
                                        kt=0.3 * (k == 2), shininess=20))
               for i in range(3) for j in range(3) for k in range(3)]
    return Geometries(*spheres)


@pytest.fixture
def lattice_scene(sphere_lattice):
    return Scene("lattice",
                 geometries=sphere_lattice,
                 lights=[PointLight((200, 180, 160), Point(3, 8, 9), kl=0.05)],
                 ambient_light=AmbientLight((20, 20, 20), 0.1),
                 background=(5, 5, 30))


@pytest.fixture
def lit_sphere_scene():
    """Unit sphere at the origin lit from straight above."""
    sphere = Sphere(Point(0, 0, 0), 1, emission=(10, 0, 0), material=Material(kd=0.5))
    return Scene("lit sphere",
                 geometries=Geometries(sphere),
                 lights=[PointLight((100, 100, 100), Point(0, 0, 10))],
                 ambient_light=AmbientLight((5, 5, 5)))
