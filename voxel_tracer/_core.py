"""
Low-level NumPy+Numba helpers for quadratic roots, convex polygon containment,
the ray/box slab test and 3D DDA grid marching.
"""
import math
import numpy as np
from numba import njit, int64, float64
from typing import Tuple

# fastmath without the no-NaN / no-Inf assumptions: the DDA relies on +inf
# for axes the ray never crosses.
_FASTMATH = {"nsz", "arcp", "contract", "afn", "reassoc"}


@njit(cache=True, fastmath=_FASTMATH)
def _align_zero(x: float, eps: float) -> float:
    return 0.0 if abs(x) < eps else x


@njit(cache=True, fastmath=_FASTMATH)
def _solve_quadratic(a: float, b: float, c: float,
                     eps: float) -> Tuple[float, float, bool]:
    """
    Roots of ``a t^2 + b t + c = 0`` as ``(t_low, t_high, ok)``.

    A (near) zero discriminant counts as no solution: a tangent ray grazes
    the surface without entering it.
    """
    if abs(a) < eps:
        return math.inf, math.inf, False
    disc = _align_zero(b * b - 4.0 * a * c, eps)
    if disc <= 0.0:
        return math.inf, math.inf, False
    sq = math.sqrt(disc)
    t0 = (-b - sq) / (2.0 * a)
    t1 = (-b + sq) / (2.0 * a)
    if t0 > t1:
        t0, t1 = t1, t0
    return t0, t1, True


@njit(cache=True, fastmath=_FASTMATH)
def _convex_polygon_contains(vertices: np.ndarray, o: np.ndarray,
                             d: np.ndarray, eps: float) -> bool:
    """
    Sign test of a ray against the side planes of a convex polygon.

    For every edge the plane through the ray origin and the edge gets a
    normal ``(vi - o) x (vi+1 - o)``; the ray passes through the polygon
    interior iff ``d . normal`` has the same non-zero sign for every edge.
    A zero projection (ray through an edge or a vertex) counts as outside.
    """
    n = vertices.shape[0]
    first = 0.0
    for i in range(n):
        j = (i + 1) % n
        ax = vertices[i, 0] - o[0]
        ay = vertices[i, 1] - o[1]
        az = vertices[i, 2] - o[2]
        bx = vertices[j, 0] - o[0]
        by = vertices[j, 1] - o[1]
        bz = vertices[j, 2] - o[2]
        cx = ay * bz - az * by
        cy = az * bx - ax * bz
        cz = ax * by - ay * bx
        norm = math.sqrt(cx * cx + cy * cy + cz * cz)
        if norm < eps:
            return False
        s = _align_zero((d[0] * cx + d[1] * cy + d[2] * cz) / norm, eps)
        if i == 0:
            first = s
            if first == 0.0:
                return False
        if first * s <= 0.0:
            return False
    return True


@njit(cache=True)
def _closest_divisor(size: int64, estimate: int64) -> int64:
    """Divisor of *size* nearest to *estimate*; ties go to the lower one."""
    if estimate <= 0:
        return 1
    if estimate >= size:
        return size
    lower = estimate
    upper = estimate
    while lower > 0 and size % lower != 0:
        lower -= 1
    while size % upper != 0:
        upper += 1
    if lower == 0:
        return upper
    if estimate - lower <= upper - estimate:
        return lower
    return upper


@njit(cache=True, fastmath=_FASTMATH)
def _ray_aabb_intersect(o: np.ndarray, d: np.ndarray,
                        bmin: np.ndarray, bmax: np.ndarray) -> Tuple[float, float]:
    """
    Closed slab test returning (t_near, t_far) or (inf, -inf) on miss.

    Touching an edge or a corner of the box counts as a hit. An axis the ray
    runs parallel to only requires the origin to lie inside that slab.
    """
    t0 = -math.inf
    t1 = math.inf
    for k in range(3):
        if d[k] == 0.0:
            if o[k] < bmin[k] or o[k] > bmax[k]:
                return math.inf, -math.inf
            continue
        inv = 1.0 / d[k]
        tn = (bmin[k] - o[k]) * inv
        tf = (bmax[k] - o[k]) * inv
        if tn > tf:
            tn, tf = tf, tn
        if tn > t0:
            t0 = tn
        if tf < t1:
            t1 = tf
        if t0 > t1:
            return math.inf, -math.inf
    return t0, t1


@njit(cache=True, nogil=True, fastmath=_FASTMATH)
def _dda(p: np.ndarray, d: np.ndarray,
         grid_min: np.ndarray,
         cell_size: np.ndarray,
         grid_shape: np.ndarray,
         out_ix: np.ndarray) -> int:
    """
    Incremental grid march starting at the in-grid point *p*.

    Fills ``out_ix`` with visited cell indices in visiting order and returns
    their count. Ties between axes step X before Y before Z.
    """
    # 1) Initial voxel
    ix = np.empty(3, dtype=int64)
    rel = np.empty(3, dtype=float64)
    for k in range(3):
        rel[k] = p[k] - grid_min[k]
        idx = int(rel[k] / cell_size[k])
        if idx < 0:
            idx = 0
        elif idx >= grid_shape[k]:
            idx = grid_shape[k] - 1
        ix[k] = idx

    # 2) Per-axis step, next boundary and delta-t
    step = np.empty(3, dtype=int64)
    t_next = np.empty(3, dtype=float64)
    dt = np.empty(3, dtype=float64)
    for k in range(3):
        if d[k] > 0.0:
            step[k] = 1
            t_next[k] = ((ix[k] + 1.0) * cell_size[k] - rel[k]) / d[k]
            dt[k] = cell_size[k] / d[k]
        elif d[k] < 0.0:
            step[k] = -1
            t_next[k] = (ix[k] * cell_size[k] - rel[k]) / d[k]
            dt[k] = -cell_size[k] / d[k]
        else:
            step[k] = 0
            t_next[k] = math.inf
            dt[k] = math.inf

    # 3) Walk the grid
    count = 0
    while count < out_ix.shape[0]:
        out_ix[count, 0] = ix[0]
        out_ix[count, 1] = ix[1]
        out_ix[count, 2] = ix[2]
        count += 1

        if t_next[0] <= t_next[1] and t_next[0] <= t_next[2]:
            axis = 0
        elif t_next[1] <= t_next[2]:
            axis = 1
        else:
            axis = 2
        if step[axis] == 0:
            break
        t_next[axis] += dt[axis]
        ix[axis] += step[axis]
        if ix[axis] < 0 or ix[axis] >= grid_shape[axis]:
            break                                # left the grid
    return count
