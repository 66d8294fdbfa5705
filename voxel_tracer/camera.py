"""
Pinhole camera: view plane geometry, per-pixel rays and the render loop.
"""
from __future__ import annotations

import copy
import logging
import math
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

import numpy as np

from . import config
from .image import ImageWriter
from .primitives import BLACK, EPSILON, Point, Triple, Vector, align_zero, is_zero, triple
from .ray import Ray
from .tracer import RayTracerBase

logger = logging.getLogger(__name__)

# Cores left free when the thread count is picked automatically.
SPARE_THREADS = 2


def _parallel(a: Vector, b: Vector) -> bool:
    return bool(np.all(np.abs(np.cross(a.xyz, b.xyz)) < EPSILON))


class PixelCounter:
    """
    Hands out pixels in row-major order to any number of threads and logs
    progress every *interval* percent.
    """

    def __init__(self, ny: int, nx: int, interval: float = 0.0):
        self.ny = ny
        self.nx = nx
        self.total = ny * nx
        self.interval = interval
        self._next = 0
        self._done = 0
        self._last_reported = 0.0
        self._lock = threading.Lock()

    def next_pixel(self) -> Optional[Tuple[int, int]]:
        """``(row, col)`` of the next unclaimed pixel, ``None`` when all are taken."""
        with self._lock:
            if self._next >= self.total:
                return None
            index = self._next
            self._next += 1
        return divmod(index, self.nx)

    def pixel_done(self) -> None:
        with self._lock:
            self._done += 1
            if self.interval <= 0:
                return
            percent = 100.0 * self._done / self.total
            if percent - self._last_reported >= self.interval or self._done == self.total:
                self._last_reported = percent
                logger.info("rendered %.1f%% (%d/%d pixels)", percent, self._done, self.total)

    @property
    def done(self) -> int:
        return self._done


class Camera:
    def __init__(self):
        self.location: Point = Point.ZERO
        self.v_to: Optional[Vector] = None
        self.v_up: Optional[Vector] = None
        self.v_right: Optional[Vector] = None
        self.width = 0.0
        self.height = 0.0
        self.distance = 0.0
        self.vp_center: Optional[Point] = None
        self.image_writer: Optional[ImageWriter] = None
        self.ray_tracer: Optional[RayTracerBase] = None
        self.threads = config.THREADS
        self.print_interval = 0.0
        self.fallback_color = BLACK.copy()

    @staticmethod
    def builder() -> "CameraBuilder":
        return CameraBuilder(Camera())

    def construct_ray(self, nx: int, ny: int, j: int, i: int) -> Ray:
        """Ray from the camera through the center of pixel (column *j*, row *i*)."""
        ry = self.height / ny
        rx = self.width / nx
        yi = -(i - (ny - 1) / 2.0) * ry
        xj = (j - (nx - 1) / 2.0) * rx

        p_ij = self.vp_center
        if not is_zero(xj):
            p_ij = p_ij + self.v_right.scale(xj)
        if not is_zero(yi):
            p_ij = p_ij + self.v_up.scale(yi)
        return Ray(self.location, p_ij - self.location)

    def rotate(self, angle_degrees: float) -> "Camera":
        """Roll the camera around its view direction."""
        theta = math.radians(angle_degrees)
        cos = align_zero(math.cos(theta))
        sin = align_zero(math.sin(theta))
        right = self.v_right.xyz * cos + self.v_up.xyz * sin
        up = self.v_up.xyz * cos - self.v_right.xyz * sin
        self.v_right = Vector(right).normalize()
        self.v_up = Vector(up).normalize()
        return self

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _cast_ray(self, nx: int, ny: int, j: int, i: int) -> None:
        try:
            color = self.ray_tracer.trace(self.construct_ray(nx, ny, j, i))
        except Exception:
            logger.exception("failed to trace pixel (%d, %d)", j, i)
            color = self.fallback_color
        self.image_writer.write_pixel(j, i, color)

    def _worker(self, counter: PixelCounter) -> None:
        nx, ny = self.image_writer.nx, self.image_writer.ny
        while True:
            pixel = counter.next_pixel()
            if pixel is None:
                return
            i, j = pixel
            self._cast_ray(nx, ny, j, i)
            counter.pixel_done()

    def render_image(self) -> "Camera":
        nx, ny = self.image_writer.nx, self.image_writer.ny
        counter = PixelCounter(ny, nx, self.print_interval)
        logger.info("rendering %s at %dx%d with %s", self.image_writer.name, nx, ny,
                    f"{self.threads} threads" if self.threads else "a single thread")
        if self.threads == 0:
            self._worker(counter)
        else:
            with ThreadPoolExecutor(max_workers=self.threads) as pool:
                futures = [pool.submit(self._worker, counter) for _ in range(self.threads)]
                for future in futures:
                    future.result()
        logger.info("finished %s: %d pixels", self.image_writer.name, counter.done)
        return self

    def print_grid(self, interval: int, color: Triple) -> "Camera":
        rgb = triple(color)
        for i in range(self.image_writer.ny):
            for j in range(self.image_writer.nx):
                if i % interval == 0 or j % interval == 0:
                    self.image_writer.write_pixel(j, i, rgb)
        return self

    def write_to_image(self):
        return self.image_writer.write_to_image()


class CameraBuilder:
    """
    Collects camera settings; ``build()`` validates them and returns a copy,
    so one builder can produce several cameras.
    """

    def __init__(self, camera: Camera):
        self._camera = camera

    def location(self, p: Point) -> "CameraBuilder":
        self._camera.location = p
        return self

    def direction(self, v_to: Vector, v_up: Vector) -> "CameraBuilder":
        if not is_zero(v_to.dot(v_up)):
            raise ValueError("camera vectors must be orthogonal to each other")
        self._camera.v_to = v_to.normalize()
        self._camera.v_up = v_up.normalize()
        self._camera.v_right = v_to.cross(v_up).normalize()
        return self

    def look_at(self, target: Point, v_up: Vector = Vector.Y) -> "CameraBuilder":
        """Aim at *target*; *v_up* is re-orthogonalized against the view direction."""
        cam = self._camera
        if cam.location == target:
            v_to = Vector(0.0, 0.0, -1.0)
        else:
            v_to = (target - cam.location).normalize()
        if _parallel(v_to, v_up):
            v_up = Vector.Y if _parallel(v_to, Vector.Z) else Vector.Z
        cam.v_to = v_to
        cam.v_right = v_to.cross(v_up).normalize()
        cam.v_up = cam.v_right.cross(v_to).normalize()
        return self

    def vp_size(self, width: float, height: float) -> "CameraBuilder":
        if align_zero(width) <= 0 or align_zero(height) <= 0:
            raise ValueError("view plane width and height must be greater than 0")
        self._camera.width = float(width)
        self._camera.height = float(height)
        return self

    def vp_distance(self, distance: float) -> "CameraBuilder":
        if align_zero(distance) <= 0:
            raise ValueError("view plane distance must be greater than 0")
        self._camera.distance = float(distance)
        return self

    def image_writer(self, writer: ImageWriter) -> "CameraBuilder":
        self._camera.image_writer = writer
        return self

    def ray_tracer(self, tracer: RayTracerBase) -> "CameraBuilder":
        self._camera.ray_tracer = tracer
        return self

    def multithreading(self, threads: int) -> "CameraBuilder":
        """0 renders serially, -1 uses all cores but ``SPARE_THREADS``."""
        if threads < -1:
            raise ValueError("multithreading must be -1 or higher")
        if threads == -1:
            threads = max(1, (os.cpu_count() or 1) - SPARE_THREADS)
        self._camera.threads = threads
        return self

    def debug_print(self, interval: float) -> "CameraBuilder":
        self._camera.print_interval = float(interval)
        return self

    def fallback_color(self, color: Triple) -> "CameraBuilder":
        self._camera.fallback_color = triple(color)
        return self

    def build(self) -> Camera:
        cam = self._camera
        missing = []
        if align_zero(cam.width) <= 0:
            missing.append("width")
        if align_zero(cam.height) <= 0:
            missing.append("height")
        if align_zero(cam.distance) <= 0:
            missing.append("distance")
        if cam.v_to is None:
            missing.append("v_to")
        if cam.v_up is None:
            missing.append("v_up")
        if cam.image_writer is None:
            missing.append("image_writer")
        if cam.ray_tracer is None:
            missing.append("ray_tracer")
        if missing:
            raise ValueError("missing render resource: " + ", ".join(missing))

        if not is_zero(cam.v_to.dot(cam.v_up)):
            raise ValueError("camera vectors must be orthogonal to each other")
        if cam.v_right is None:
            cam.v_right = cam.v_to.cross(cam.v_up).normalize()
        cam.vp_center = cam.location + cam.v_to.scale(cam.distance)
        built = copy.copy(cam)
        built.fallback_color = np.array(cam.fallback_color)
        return built
