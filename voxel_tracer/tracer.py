"""
Recursive Whitted-style illumination: local shading, shadows, reflection and
refraction.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from .intersectable import GeoPoint
from .lights import DirectionalLight, LightSource
from .primitives import BLACK, ONE, Material, Vector, align_zero
from .ray import Ray
from .sampler import BeamSampler
from .scene import Scene

logger = logging.getLogger(__name__)

# Recursion depth of the first hit; level 1 gets no secondary rays.
MAX_CALC_COLOR_LEVEL = 10
# Attenuation under which a contribution is not worth tracing.
MIN_CALC_COLOR_K = 0.001


def _negligible(k: np.ndarray) -> bool:
    return bool(np.all(k < MIN_CALC_COLOR_K))


class RayTracerBase(ABC):
    def __init__(self, scene: Scene):
        self.scene = scene

    @abstractmethod
    def trace(self, ray: Ray) -> np.ndarray:
        """Color seen along *ray*."""


class SimpleRayTracer(RayTracerBase):
    """
    Ray tracer over the scene's flat geometry container.

    With a *sampler*, point and spot lights that have a non-zero radius cast
    soft shadows: their contribution is averaged over a beam of shadow rays.
    """

    def __init__(self, scene: Scene, sampler: Optional[BeamSampler] = None):
        super().__init__(scene)
        self.sampler = sampler
        logger.debug("%s ready for scene %r (%d lights, soft shadows %s)",
                     type(self).__name__, scene.name, len(scene.lights),
                     "on" if sampler is not None else "off")

    # ------------------------------------------------------------------
    # Intersection queries (the grid tracer overrides these two)
    # ------------------------------------------------------------------
    def closest_intersection(self, ray: Ray) -> Optional[GeoPoint]:
        return ray.closest_geo_point(self.scene.geometries.find_geo_intersections(ray))

    def occluders(self, ray: Ray, max_distance: float) -> Optional[List[GeoPoint]]:
        return self.scene.geometries.find_geo_intersections(ray, max_distance)

    # ------------------------------------------------------------------
    # Shading
    # ------------------------------------------------------------------
    def trace(self, ray: Ray) -> np.ndarray:
        gp = self.closest_intersection(ray)
        return self.scene.background.copy() if gp is None else self.shade(gp, ray)

    def shade(self, gp: GeoPoint, ray: Ray) -> np.ndarray:
        return (self._calc_color(gp, ray, MAX_CALC_COLOR_LEVEL, ONE)
                + self.scene.ambient_light.intensity)

    def _calc_color(self, gp: GeoPoint, ray: Ray, level: int, k: np.ndarray) -> np.ndarray:
        color = self._local_effects(gp, ray, k)
        if level == 1:
            return color
        return color + self._global_effects(gp, ray, level, k)

    def _beam(self, gp: GeoPoint, light: LightSource, l: Vector) -> List[Vector]:
        if (self.sampler is None or isinstance(light, DirectionalLight)
                or light.radius <= 0):
            return [-l]
        return self.sampler.beam(gp.point, light.distance_to(gp.point), light.radius, l)

    def _local_effects(self, gp: GeoPoint, ray: Ray, k: np.ndarray) -> np.ndarray:
        n = gp.geometry.normal(gp.point)
        v = ray.direction
        nv = align_zero(n.dot(v))
        if nv == 0:
            return BLACK.copy()

        material = gp.geometry.material
        color = gp.geometry.emission.copy()
        for light in self.scene.lights:
            l = light.direction_at(gp.point)
            beam = self._beam(gp, light, l)
            if not beam:
                continue
            beam_color = np.zeros(3)
            for sample in beam:
                l2 = -sample.normalize()
                ln = align_zero(l2.dot(n))
                if ln * nv <= 0:
                    continue
                ktr = self._transparency(gp, light, l2, n)
                if _negligible(ktr * k):
                    continue
                il = light.intensity_at(gp.point) * ktr
                beam_color += il * (self._diffusive(material, ln)
                                    + self._specular(material, n, l2, ln, v))
            color += beam_color / len(beam)
        return color

    @staticmethod
    def _diffusive(material: Material, ln: float) -> np.ndarray:
        return material.kd * abs(ln)

    @staticmethod
    def _specular(material: Material, n: Vector, l: Vector, ln: float,
                  v: Vector) -> np.ndarray:
        r = l.xyz - n.xyz * (2 * ln)
        minus_vr = align_zero(-float(v.xyz @ r))
        if minus_vr <= 0:
            return np.zeros(3)
        return material.ks * minus_vr ** material.shininess

    def _global_effects(self, gp: GeoPoint, ray: Ray, level: int,
                        k: np.ndarray) -> np.ndarray:
        material = gp.geometry.material
        n = gp.geometry.normal(gp.point)
        v = ray.direction
        refracted = Ray(gp.point, v, n)
        color = self._global_effect(refracted, material.kt, level, k)
        vn = v.dot(n)
        if align_zero(vn) != 0:
            reflected = Ray(gp.point, v - n.scale(2 * vn), n)
            color = color + self._global_effect(reflected, material.kr, level, k)
        return color

    def _global_effect(self, ray: Ray, kx: np.ndarray, level: int,
                       k: np.ndarray) -> np.ndarray:
        kkx = kx * k
        if _negligible(kkx):
            return BLACK.copy()
        gp = self.closest_intersection(ray)
        if gp is None:
            return self.scene.background * kx
        return self._calc_color(gp, ray, level - 1, kkx) * kx

    def _transparency(self, gp: GeoPoint, light: LightSource, l: Vector,
                      n: Vector) -> np.ndarray:
        """Product of ``kt`` of everything between the point and the light."""
        shadow_ray = Ray(gp.point, -l, n)
        hits = self.occluders(shadow_ray, light.distance_to(gp.point))
        ktr = ONE.copy()
        if hits is None:
            return ktr
        for hit in hits:
            ktr *= hit.geometry.material.kt
        return ktr
