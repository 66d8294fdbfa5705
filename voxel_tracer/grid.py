"""
Uniform grid acceleration structure and the tracer that uses it.
"""
import logging
from typing import Generator, List, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401

from . import config
from ._core import _closest_divisor, _dda, _ray_aabb_intersect
from .intersectable import GeoPoint, Geometries, Intersectable
from .primitives import EPSILON, Point
from .ray import Ray
from .sampler import BeamSampler
from .scene import Scene
from .tracer import SimpleRayTracer

logger = logging.getLogger(__name__)

# Default cells-per-shape density of the resolution heuristic.
DEFAULT_DENSITY = config.GRID_DENSITY


class UnboundedGeometryError(ValueError):
    """The scene holds geometry without a finite bounding box."""


class Voxel:
    """One grid cell and the shapes overlapping it."""

    __slots__ = ("minimum", "maximum", "geometries")

    def __init__(self, minimum: np.ndarray, maximum: np.ndarray):
        self.minimum = minimum
        self.maximum = maximum
        self.geometries: Optional[Geometries] = None

    def add(self, item: Intersectable) -> None:
        if self.geometries is None:
            self.geometries = Geometries()
        self.geometries.add(item)

    def contains_point(self, point: Point) -> bool:
        return bool(np.all(point.xyz <= self.maximum + EPSILON)
                    and np.all(point.xyz >= self.minimum - EPSILON))

    def closest_intersection(self, ray: Ray) -> Optional[GeoPoint]:
        return ray.closest_geo_point(self.geometries.find_geo_intersections(ray))


def traverse_cells(
    entry: np.ndarray,
    direction: np.ndarray,
    grid_shape: Tuple[int, int, int],
    cell_size: np.ndarray,
    grid_min: np.ndarray,
) -> Generator[Tuple[int, int, int], None, None]:
    """
    Yield ``(ix, iy, iz)`` for each cell crossed from the in-grid *entry* point.
    """
    p = np.asarray(entry, dtype=np.float64)
    d = np.asarray(direction, dtype=np.float64)
    shape = np.asarray(grid_shape, dtype=np.int64)

    # Every step moves one axis by one cell: sum(shape) bounds the walk.
    max_vox = int(shape.sum()) + 3
    buf_ix = np.empty((max_vox, 3), dtype=np.int64)
    count = _dda(p, d,
                 np.asarray(grid_min, dtype=np.float64),
                 np.asarray(cell_size, dtype=np.float64),
                 shape,
                 buf_ix)
    for i in range(count):
        yield int(buf_ix[i, 0]), int(buf_ix[i, 1]), int(buf_ix[i, 2])


class UniformGrid:
    """
    Axis-aligned 3-D grid of voxels over the bounding box of a scene.

    The box is widened to integer coordinates and each axis is split into a
    number of cells that divides its integer extent, so all cells have the
    same integer size.
    """

    def __init__(self, geometries: Geometries, density: float = DEFAULT_DENSITY):
        box = geometries.bounding_box
        if box is None:
            raise UnboundedGeometryError("cannot use a uniform grid on unbounded geometry")

        self.grid_min = np.floor(box.minimum).astype(np.int64)
        grid_max = np.ceil(box.maximum).astype(np.int64)
        self.grid_max = np.maximum(grid_max, self.grid_min + 1)
        extent = self.grid_max - self.grid_min

        # 1) Resolution heuristic, snapped to divisors of the extents
        n = len(geometries)
        formula = float(np.cbrt(density * n / float(np.prod(extent))))
        estimate = np.floor(extent * formula + 0.5).astype(np.int64)
        self.shape = tuple(int(_closest_divisor(int(e), int(est)))
                           for e, est in zip(extent, estimate))
        self.cell_size = extent // np.array(self.shape, dtype=np.int64)

        # 2) Cells, with boxes computed from their indices
        self._axis_min = [self.grid_min[k] + np.arange(self.shape[k]) * self.cell_size[k]
                          for k in range(3)]
        self._axis_max = [m + self.cell_size[k] for k, m in enumerate(self._axis_min)]
        self.cells = np.empty(self.shape, dtype=object)
        for i, j, k in np.ndindex(*self.shape):
            lo = np.array([self._axis_min[0][i], self._axis_min[1][j],
                           self._axis_min[2][k]], dtype=np.float64)
            self.cells[i, j, k] = Voxel(lo, lo + self.cell_size)

        # 3) Shapes into every overlapping cell
        for item in geometries:
            self._insert(item)

        self._min_f = self.grid_min.astype(np.float64)
        self._max_f = self.grid_max.astype(np.float64)
        self._cell_f = self.cell_size.astype(np.float64)

        occupancy = self.occupancy()
        logger.info(
            "uniform grid %s over [%s, %s], cell size %s: %d shapes, "
            "%d of %d cells occupied, %.2f refs per occupied cell",
            "x".join(map(str, self.shape)), self.grid_min.tolist(),
            self.grid_max.tolist(), self.cell_size.tolist(), n,
            int(np.count_nonzero(occupancy)), occupancy.size,
            float(occupancy.sum()) / max(1, int(np.count_nonzero(occupancy))),
        )

    # ---------------------------------------------------------------------
    # Construction
    # ---------------------------------------------------------------------
    def _insert(self, item: Intersectable) -> None:
        box = item.bounding_box
        if box is None:
            raise UnboundedGeometryError(f"{type(item).__name__} has no bounding box")
        # Cells are separable per axis: overlap on all three axes is the
        # product of the per-axis interval tests.
        hits = [np.flatnonzero((box.minimum[k] <= self._axis_max[k])
                               & (box.maximum[k] >= self._axis_min[k]))
                for k in range(3)]
        for i in hits[0]:
            for j in hits[1]:
                for k in hits[2]:
                    self.cells[i, j, k].add(item)

    # ---------------------------------------------------------------------
    # Analytics
    # ---------------------------------------------------------------------
    def occupancy(self) -> np.ndarray:
        """Number of shape references held by each cell."""
        counts = np.zeros(self.shape, dtype=np.int64)
        for index in np.ndindex(*self.shape):
            geometries = self.cells[index].geometries
            if geometries is not None:
                counts[index] = len(geometries)
        return counts

    def entry_point(self, ray: Ray) -> Optional[Point]:
        """
        First point of the ray inside the grid, or ``None`` on a miss.
        """
        o = ray.origin.xyz
        d = ray.direction.xyz
        t_enter, t_exit = _ray_aabb_intersect(o, d, self._min_f, self._max_f)
        if t_enter > t_exit or t_exit < 0.0:
            return None
        if t_enter <= 0.0:
            return ray.origin
        # Clamp rounding noise back onto the box surface.
        return Point(np.clip(o + d * t_enter, self._min_f, self._max_f))

    # ---------------------------------------------------------------------
    # Traversal
    # ---------------------------------------------------------------------
    def traverse(self, ray: Ray) -> Generator[Tuple[int, int, int], None, None]:
        """Yield ``(ix, iy, iz)`` for each cell the ray crosses, in order."""
        entry = self.entry_point(ray)
        if entry is None:
            return
        yield from self._walk(entry, ray)

    def _walk(self, entry: Point, ray: Ray):
        return traverse_cells(entry.xyz, ray.direction.xyz, self.shape,
                              self._cell_f, self._min_f)

    def closest_intersection(self, ray: Ray) -> Optional[GeoPoint]:
        """
        Nearest hit along the ray.

        A hit found in a cell may lie in a cell further along the ray; it is
        only accepted once the walk reaches a cell that contains it, unless a
        nearer hit inside that cell turns up first.
        """
        origin = ray.origin
        provisional = None
        for index in self.traverse(ray):
            voxel = self.cells[index]
            if voxel.geometries is None:
                continue
            if provisional is not None and voxel.contains_point(provisional.point):
                closest = voxel.closest_intersection(ray)
                if (closest is not None and voxel.contains_point(closest.point)
                        and origin.distance_squared(closest.point)
                        <= origin.distance_squared(provisional.point)):
                    return closest
                return provisional
            closest = voxel.closest_intersection(ray)
            if closest is None:
                continue
            if voxel.contains_point(closest.point):
                return closest
            if (provisional is None
                    or origin.distance_squared(closest.point)
                    <= origin.distance_squared(provisional.point)):
                provisional = closest
        # Only reached when rounding put the hit just outside its last cell.
        return provisional

    def shapes_along(self, ray: Ray) -> Optional[Geometries]:
        """
        Every shape referenced by a cell the ray crosses, each listed once.
        """
        entry = self.entry_point(ray)
        if entry is None:
            return None
        seen = set()
        shapes = Geometries()
        for index in self._walk(entry, ray):
            geometries = self.cells[index].geometries
            if geometries is None:
                continue
            for item in geometries:
                if id(item) not in seen:
                    seen.add(id(item))
                    shapes.add(item)
        return shapes

    # ---------------------------------------------------------------------
    # Visualization
    # ---------------------------------------------------------------------
    def plot(
        self,
        ax: Optional[Axes3D] = None,
        cmap: str = 'viridis',
        edgecolor: str = 'k',
        set_limits: bool = True,
        show: bool = True,
    ) -> Axes3D:
        """Plot occupied voxels in 3D, colored by how many shapes they hold."""
        counts = self.occupancy()
        mask = counts > 0
        nx, ny, nz = self.shape

        xs = self.grid_min[0] + np.arange(nx + 1) * self.cell_size[0]
        ys = self.grid_min[1] + np.arange(ny + 1) * self.cell_size[1]
        zs = self.grid_min[2] + np.arange(nz + 1) * self.cell_size[2]
        xv, yv, zv = np.meshgrid(xs, ys, zs, indexing='ij')

        if ax is None:
            fig = plt.figure()
            ax = fig.add_subplot(111, projection='3d')

        norm = counts / counts.max() if counts.max() > 0 else counts.astype(float)
        facecolors = plt.get_cmap(cmap)(norm)
        ax.voxels(xv, yv, zv, mask, facecolors=facecolors, edgecolor=edgecolor)

        if set_limits:
            ax.set_xlim(self.grid_min[0], self.grid_max[0])
            ax.set_ylim(self.grid_min[1], self.grid_max[1])
            ax.set_zlim(self.grid_min[2], self.grid_max[2])

        if show:
            plt.show()
        return ax


def build_grid(scene: Scene, density: float = DEFAULT_DENSITY) -> UniformGrid:
    """Grid over the scene geometry; fails on unbounded shapes."""
    return UniformGrid(scene.geometries, density)


class RegularGridTracer(SimpleRayTracer):
    """
    Tracer whose nearest-hit and shadow queries walk a uniform grid.
    """

    def __init__(self, scene: Scene, sampler: Optional[BeamSampler] = None,
                 density: float = DEFAULT_DENSITY):
        super().__init__(scene, sampler)
        self.grid = build_grid(scene, density)

    def closest_intersection(self, ray: Ray) -> Optional[GeoPoint]:
        return self.grid.closest_intersection(ray)

    def occluders(self, ray: Ray, max_distance: float) -> Optional[List[GeoPoint]]:
        shapes = self.grid.shapes_along(ray)
        if shapes is None:
            return None
        return shapes.find_geo_intersections(ray, max_distance)
