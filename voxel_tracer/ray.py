"""
Ray class: an origin and a unit direction, with closest-hit helpers.
"""
from typing import List, Optional, TYPE_CHECKING

from .primitives import Point, Vector, is_zero

if TYPE_CHECKING:
    from .intersectable import GeoPoint

# Distance a secondary ray origin is pushed off the surface it starts on.
DELTA = 0.1


class Ray:
    def __init__(self, origin: Point, direction: Vector, normal: Optional[Vector] = None):
        """
        Build a ray; the direction is always normalized.

        When *normal* is given the origin is moved ``DELTA`` along it, to the
        side the direction points to, so the ray cannot hit the surface it
        leaves from.
        """
        if normal is not None:
            nv = normal.dot(direction)
            if not is_zero(nv):
                origin = origin + normal.scale(DELTA if nv > 0 else -DELTA)
        self.origin = origin
        self.direction = direction.normalize()

    def point_at(self, t: float) -> Point:
        if is_zero(t):
            return self.origin
        return self.origin + self.direction.scale(t)

    def closest_point(self, points: Optional[List[Point]]) -> Optional[Point]:
        if not points:
            return None
        return min(points, key=self.origin.distance_squared)

    def closest_geo_point(self, geo_points: Optional[List["GeoPoint"]]) -> Optional["GeoPoint"]:
        """Nearest hit to the origin; the first one wins on ties."""
        if not geo_points:
            return None
        return min(geo_points, key=lambda gp: self.origin.distance_squared(gp.point))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ray):
            return NotImplemented
        return self.origin == other.origin and self.direction == other.direction

    __hash__ = None

    def __repr__(self) -> str:
        return f"Ray({self.origin!r} -> {self.direction!r})"
