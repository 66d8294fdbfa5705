"""
Deterministic beam sampler for soft shadows.

The sample layout is computed once per sampler from the grid size alone, so
``beam`` is a pure function of its arguments and can be shared by all render
threads.
"""
from __future__ import annotations

from typing import List

import numpy as np

from . import config
from .primitives import Point, Vector

# Plastic-number (R2) sequence: low-discrepancy jitter keyed on sample index.
_R2_A1 = 0.7548776662466927
_R2_A2 = 0.5698402909980532


def _disk_offsets(grid_size: int) -> np.ndarray:
    """Jittered cell centers of a ``grid_size``^2 grid clipped to the unit disk."""
    cell = 2.0 / grid_size
    idx = np.arange(grid_size * grid_size)
    jitter_x = np.modf(0.5 + _R2_A1 * idx)[0] - 0.5
    jitter_y = np.modf(0.5 + _R2_A2 * idx)[0] - 0.5
    xs = -1.0 + (idx % grid_size + 0.5 + 0.5 * jitter_x) * cell
    ys = -1.0 + (idx // grid_size + 0.5 + 0.5 * jitter_y) * cell
    offsets = np.column_stack([xs, ys])
    offsets = offsets[np.einsum("ij,ij->i", offsets, offsets) <= 1.0]
    # The nominal direction always comes first.
    return np.vstack([np.zeros((1, 2)), offsets])


class BeamSampler:
    def __init__(self, grid_size: int = config.BEAM_SIZE):
        if grid_size < 1:
            raise ValueError("grid_size must be at least 1")
        self.grid_size = grid_size
        self._offsets = _disk_offsets(grid_size) if grid_size > 1 else np.zeros((1, 2))

    def __len__(self) -> int:
        return len(self._offsets)

    def beam(self, point: Point, distance: float, radius: float,
             direction: Vector) -> List[Vector]:
        """
        Vectors from *point* to samples of a disc of *radius* around the light.

        The light sits at ``point - direction * distance``; the disc is
        perpendicular to *direction*.
        """
        light = point.xyz - direction.xyz * distance
        helper = Vector.Y if abs(direction.xyz[0]) > 0.9 else Vector.X
        u = direction.cross(helper).normalize().xyz
        w = np.cross(direction.xyz, u)
        samples = light + radius * (self._offsets[:, :1] * u + self._offsets[:, 1:] * w)
        beam = []
        for sample in samples - point.xyz:
            if np.any(np.abs(sample) > 0.0):
                beam.append(Vector(sample))
        return beam
