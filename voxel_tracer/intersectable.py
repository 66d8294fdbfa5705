"""
Intersection contract shared by every shape and by the composite container.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Optional

import numpy as np

from .primitives import BLACK, Material, Point, Triple, Vector, triple
from .ray import Ray


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box given by its min and max corners."""

    minimum: np.ndarray
    maximum: np.ndarray

    @classmethod
    def around(cls, points: np.ndarray) -> "BoundingBox":
        pts = np.asarray(points, dtype=np.float64)
        return cls(pts.min(axis=0), pts.max(axis=0))

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(np.minimum(self.minimum, other.minimum),
                           np.maximum(self.maximum, other.maximum))

    def overlaps(self, other: "BoundingBox") -> bool:
        """Closed-interval overlap on all three axes."""
        return bool(np.all(self.minimum <= other.maximum)
                    and np.all(self.maximum >= other.minimum))


class GeoPoint:
    """A hit point together with the geometry it lies on."""

    __slots__ = ("geometry", "point")

    def __init__(self, geometry: "Geometry", point: Point):
        self.geometry = geometry
        self.point = point

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeoPoint):
            return NotImplemented
        return self.geometry is other.geometry and self.point == other.point

    __hash__ = None

    def __repr__(self) -> str:
        return f"GeoPoint({type(self.geometry).__name__}, {self.point!r})"


class Intersectable(ABC):
    """Anything a ray can be intersected with."""

    @property
    def bounding_box(self) -> Optional[BoundingBox]:
        """``None`` for geometry of infinite extent."""
        return None

    def find_geo_intersections(self, ray: Ray,
                               max_distance: float = math.inf) -> Optional[List[GeoPoint]]:
        """
        Hits strictly between the ray origin and *max_distance*, or ``None``.
        """
        return self._find_geo_intersections(ray, max_distance)

    def find_intersections(self, ray: Ray) -> Optional[List[Point]]:
        geo_points = self.find_geo_intersections(ray)
        return None if geo_points is None else [gp.point for gp in geo_points]

    @abstractmethod
    def _find_geo_intersections(self, ray: Ray,
                                max_distance: float) -> Optional[List[GeoPoint]]:
        ...


class Geometry(Intersectable):
    """A single surface with emission and material."""

    def __init__(self, *, emission: Triple = BLACK, material: Optional[Material] = None):
        self.emission = triple(emission)
        self.material = material if material is not None else Material()

    @abstractmethod
    def normal(self, point: Point) -> Vector:
        """Unit normal of the surface at *point*."""


class Geometries(Intersectable):
    """Ordered collection of intersectables behind one intersection call."""

    def __init__(self, *intersectables: Intersectable):
        self._items: List[Intersectable] = []
        self._box: Optional[BoundingBox] = None
        self._bounded = True
        self.add(*intersectables)

    def add(self, *intersectables: Intersectable) -> "Geometries":
        for item in intersectables:
            self._items.append(item)
            box = item.bounding_box
            if box is None:
                self._bounded = False
            elif self._box is None:
                self._box = box
            else:
                self._box = self._box.union(box)
        return self

    @property
    def intersectables(self) -> tuple:
        return tuple(self._items)

    @property
    def bounding_box(self) -> Optional[BoundingBox]:
        return self._box if self._bounded else None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Intersectable]:
        return iter(self._items)

    def _find_geo_intersections(self, ray: Ray,
                                max_distance: float) -> Optional[List[GeoPoint]]:
        result = None
        for item in self._items:
            geo_points = item.find_geo_intersections(ray, max_distance)
            if geo_points is not None:
                if result is None:
                    result = list(geo_points)
                else:
                    result.extend(geo_points)
        return result
