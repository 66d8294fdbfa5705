"""
Light sources.

Every light source answers three questions for a surface point: how strong
it is there, from which direction it arrives (pointing from the light to the
point) and how far away it is.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod

import numpy as np

from .primitives import BLACK, Point, Triple, Vector, triple


class Light:
    def __init__(self, intensity: Triple):
        self.intensity = triple(intensity)


class AmbientLight(Light):
    """Uniform light added to every hit, ``ia * ka``."""

    def __init__(self, ia: Triple = BLACK, ka: Triple = 1.0):
        super().__init__(triple(ia) * triple(ka))


class LightSource(Light, ABC):
    #: radius of the emitting disc used for soft shadows, 0 for a hard shadow
    radius = 0.0

    @abstractmethod
    def intensity_at(self, point: Point) -> np.ndarray:
        ...

    @abstractmethod
    def direction_at(self, point: Point) -> Vector:
        ...

    @abstractmethod
    def distance_to(self, point: Point) -> float:
        ...


class DirectionalLight(LightSource):
    def __init__(self, intensity: Triple, direction: Vector):
        super().__init__(intensity)
        self.direction = direction.normalize()

    def intensity_at(self, point):
        return self.intensity

    def direction_at(self, point):
        return self.direction

    def distance_to(self, point):
        return math.inf


class PointLight(LightSource):
    """
    Omni-directional light with ``1 / (kc + kl*d + kq*d^2)`` falloff.
    """

    def __init__(self, intensity: Triple, position: Point, *,
                 kc: float = 1.0, kl: float = 0.0, kq: float = 0.0,
                 radius: float = 0.0):
        super().__init__(intensity)
        if radius < 0:
            raise ValueError("light radius must not be negative")
        self.position = position
        self.kc = kc
        self.kl = kl
        self.kq = kq
        self.radius = float(radius)

    def intensity_at(self, point):
        d2 = point.distance_squared(self.position)
        return self.intensity / (self.kc + self.kl * math.sqrt(d2) + self.kq * d2)

    def direction_at(self, point):
        return (point - self.position).normalize()

    def distance_to(self, point):
        return point.distance(self.position)


class SpotLight(PointLight):
    """Point light scaled by ``max(0, direction . l) ** narrow_beam``."""

    def __init__(self, intensity: Triple, position: Point, direction: Vector, *,
                 narrow_beam: float = 1.0, **kwargs):
        super().__init__(intensity, position, **kwargs)
        self.direction = direction.normalize()
        self.narrow_beam = narrow_beam

    def intensity_at(self, point):
        cos = self.direction.dot(self.direction_at(point))
        if cos <= 0:
            return np.zeros(3)
        return super().intensity_at(point) * cos ** self.narrow_beam
