"""
Analytic shapes: plane, polygon, triangle, sphere, tube and cylinder.

Every shape returns its hits in the order they occur along the ray and
``None`` when there are none in ``(0, max_distance)``.
"""
from __future__ import annotations

import math
from typing import List, Optional

import numpy as np

from ._core import _convex_polygon_contains, _solve_quadratic
from .intersectable import BoundingBox, GeoPoint, Geometry
from .primitives import EPSILON, Point, Vector, align_zero, is_zero
from .ray import Ray


def _before(t: float, max_distance: float) -> bool:
    return align_zero(t - max_distance) < 0


class Plane(Geometry):
    """Infinite plane through ``q`` with unit ``normal``."""

    def __init__(self, q: Point, normal: Vector = None, third: Point = None, **kwargs):
        """
        ``Plane(q, normal)`` or ``Plane(a, b, c)`` through three points.

        Three collinear or coincident points raise ``ValueError``.
        """
        super().__init__(**kwargs)
        if isinstance(normal, Vector) and third is None:
            self.q = q
            self._normal = normal.normalize()
        elif isinstance(normal, Point) and isinstance(third, Point):
            self.q = q
            self._normal = (normal - q).cross(third - q).normalize()
        else:
            raise ValueError("a plane needs a point and a normal, or three points")

    def normal(self, point: Point = None) -> Vector:
        return self._normal

    def _find_geo_intersections(self, ray, max_distance):
        p0 = ray.origin
        if self.q == p0:
            return None
        n = self._normal.xyz
        n_qp0 = align_zero(float(n @ (self.q.xyz - p0.xyz)))
        if n_qp0 == 0:
            return None
        nv = align_zero(float(n @ ray.direction.xyz))
        if nv == 0:
            return None
        t = align_zero(n_qp0 / nv)
        if t <= 0 or not _before(t, max_distance):
            return None
        return [GeoPoint(self, ray.point_at(t))]


class Polygon(Geometry):
    """
    Convex planar polygon given by its vertices in edge order.

    Raises ``ValueError`` for fewer than three vertices, coincident or
    collinear consecutive vertices, vertices outside the plane of the first
    three, or vertices that are out of order or form a concave outline.
    """

    def __init__(self, *vertices: Point, **kwargs):
        super().__init__(**kwargs)
        if len(vertices) < 3:
            raise ValueError("a polygon can't have less than 3 vertices")
        self.vertices = tuple(vertices)
        self._plane = Plane(vertices[0], vertices[1], vertices[2])
        self._xyz = np.array([v.xyz for v in vertices], dtype=np.float64)
        self._box = BoundingBox.around(self._xyz)
        if len(vertices) == 3:
            return

        n = self._plane.normal()
        # Coincident consecutive vertices fail in the subtraction, collinear
        # ones in the cross product (both would be zero vectors).
        edge1 = vertices[-1] - vertices[-2]
        edge2 = vertices[0] - vertices[-1]
        positive = edge1.cross(edge2).dot(n) > 0
        for i in range(1, len(vertices)):
            if not is_zero(float(n.xyz @ (vertices[i].xyz - vertices[0].xyz))):
                raise ValueError("all vertices of a polygon must lie in the same plane")
            edge1 = edge2
            edge2 = vertices[i] - vertices[i - 1]
            if positive != (edge1.cross(edge2).dot(n) > 0):
                raise ValueError("vertices must be ordered and the polygon must be convex")

    @property
    def bounding_box(self):
        return self._box

    def normal(self, point: Point = None) -> Vector:
        return self._plane.normal()

    def _find_geo_intersections(self, ray, max_distance):
        hits = self._plane.find_geo_intersections(ray, max_distance)
        if hits is None:
            return None
        if not _convex_polygon_contains(self._xyz, ray.origin.xyz,
                                        ray.direction.xyz, EPSILON):
            return None
        return [GeoPoint(self, hits[0].point)]


class Triangle(Polygon):
    def __init__(self, a: Point, b: Point, c: Point, **kwargs):
        super().__init__(a, b, c, **kwargs)


class Sphere(Geometry):
    def __init__(self, center: Point, radius: float, **kwargs):
        super().__init__(**kwargs)
        if radius <= 0:
            raise ValueError("sphere radius must be positive")
        self.center = center
        self.radius = float(radius)
        self._box = BoundingBox(center.xyz - self.radius, center.xyz + self.radius)

    @property
    def bounding_box(self):
        return self._box

    def normal(self, point: Point) -> Vector:
        return (point - self.center).normalize()

    def _find_geo_intersections(self, ray, max_distance):
        p0 = ray.origin
        v = ray.direction
        if p0 == self.center:
            if not _before(self.radius, max_distance):
                return None
            return [GeoPoint(self, ray.point_at(self.radius))]

        u = self.center.xyz - p0.xyz
        tm = float(v.xyz @ u)
        d2 = float(u @ u) - tm * tm
        th2 = align_zero(self.radius * self.radius - d2)
        if th2 <= 0:
            return None
        th = math.sqrt(th2)
        t2 = align_zero(tm + th)
        if t2 <= 0:
            return None
        t1 = align_zero(tm - th)
        result = [GeoPoint(self, ray.point_at(t))
                  for t in (t1, t2) if t > 0 and _before(t, max_distance)]
        return result or None


class Tube(Geometry):
    """Infinite cylinder of ``radius`` around the ``axis`` ray."""

    def __init__(self, axis: Ray, radius: float, **kwargs):
        super().__init__(**kwargs)
        if radius <= 0:
            raise ValueError("tube radius must be positive")
        self.axis = axis
        self.radius = float(radius)
        self.radius_squared = self.radius * self.radius

    def normal(self, point: Point) -> Vector:
        o = self.axis.origin
        va = self.axis.direction
        t = float(va.xyz @ (point.xyz - o.xyz))
        center = o if is_zero(t) else o + va.scale(t)
        return (point - center).normalize()

    def _tube_hits(self, ray: Ray, max_distance: float) -> List[float]:
        va = self.axis.direction.xyz
        v = ray.direction.xyz
        dp = ray.origin.xyz - self.axis.origin.xyz
        # Components perpendicular to the axis
        v_perp = v - (v @ va) * va
        dp_perp = dp - (dp @ va) * va

        a = float(v_perp @ v_perp)
        b = 2.0 * float(v_perp @ dp_perp)
        c = float(dp_perp @ dp_perp) - self.radius_squared
        t1, t2, ok = _solve_quadratic(a, b, c, EPSILON)
        if not ok:
            return []
        t1 = align_zero(t1)
        t2 = align_zero(t2)
        return [t for t in (t1, t2) if t > 0 and _before(t, max_distance)]

    def _find_geo_intersections(self, ray, max_distance):
        ts = self._tube_hits(ray, max_distance)
        if not ts:
            return None
        return [GeoPoint(self, ray.point_at(t)) for t in ts]


class Cylinder(Tube):
    """Tube segment of ``height`` along the axis ray, closed by two caps."""

    def __init__(self, axis: Ray, radius: float, height: float, **kwargs):
        super().__init__(axis, radius, **kwargs)
        if height <= 0:
            raise ValueError("cylinder height must be positive")
        self.height = float(height)
        va = axis.direction
        self._bottom_center = axis.origin
        self._top_center = axis.origin + va.scale(self.height)
        self._bottom = Plane(self._bottom_center, va)
        self._top = Plane(self._top_center, va)

        # Per axis the disc reaches r * sqrt(1 - d_k^2) past the cap centers.
        ends = np.array([self._bottom_center.xyz, self._top_center.xyz])
        reach = self.radius * np.sqrt(np.clip(1.0 - va.xyz ** 2, 0.0, 1.0))
        self._box = BoundingBox(ends.min(axis=0) - reach, ends.max(axis=0) + reach)

    @property
    def bounding_box(self):
        return self._box

    def normal(self, point: Point) -> Vector:
        va = self.axis.direction
        if point == self._bottom_center:
            return va
        t = float(va.xyz @ (point.xyz - self._bottom_center.xyz))
        if is_zero(t) or is_zero(t - self.height):
            return va
        return super().normal(point)

    def _cap_hit(self, cap: Plane, center: Point, ray: Ray,
                 max_distance: float) -> Optional[GeoPoint]:
        hits = cap.find_geo_intersections(ray, max_distance)
        if hits is None:
            return None
        p = hits[0].point
        if p.distance(center) < self.radius:
            return GeoPoint(self, p)
        return None

    def _find_geo_intersections(self, ray, max_distance):
        h2 = self.height * self.height
        result = []
        for t in self._tube_hits(ray, max_distance):
            p = ray.point_at(t)
            d_bottom = p.distance_squared(self._bottom_center)
            d_top = p.distance_squared(self._top_center)
            # on a rim: the cap test below owns (and rejects) these points
            if (is_zero(math.sqrt(d_bottom) - self.radius)
                    or is_zero(math.sqrt(d_top) - self.radius)):
                continue
            if (align_zero(d_bottom - self.radius_squared) < h2
                    and align_zero(d_top - self.radius_squared) < h2):
                result.append(GeoPoint(self, p))
        if len(result) == 2:
            return result

        for cap, center in ((self._bottom, self._bottom_center),
                            (self._top, self._top_center)):
            gp = self._cap_hit(cap, center, ray, max_distance)
            if gp is not None:
                result.append(gp)
        if not result:
            return None
        result.sort(key=lambda gp: ray.origin.distance_squared(gp.point))
        return result[:2]
