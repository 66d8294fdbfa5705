"""
Pixel buffer that is saved as a PNG with matplotlib.
"""
import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
import matplotlib.pyplot as plt

from . import config

logger = logging.getLogger(__name__)


class ImageWriter:
    """
    ``ny`` rows by ``nx`` columns of RGB colors on a 0-255 scale.

    Colors may exceed the range while rendering; they are clamped only when
    the image is written.
    """

    def __init__(self, name: str, nx: int, ny: int,
                 directory: Optional[Union[str, Path]] = None):
        if nx <= 0 or ny <= 0:
            raise ValueError("image resolution must be positive")
        self.name = name
        self.nx = nx
        self.ny = ny
        self.directory = Path(directory) if directory is not None else config.OUTPUT_DIR
        self.pixels = np.zeros((ny, nx, 3), dtype=np.float64)

    @property
    def path(self) -> Path:
        return self.directory / f"{self.name}.png"

    def write_pixel(self, j: int, i: int, color: np.ndarray) -> None:
        """Set column *j* of row *i*."""
        self.pixels[i, j] = color

    def to_rgb8(self) -> np.ndarray:
        return np.clip(self.pixels, 0.0, 255.0).astype(np.uint8)

    def write_to_image(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path
        plt.imsave(path, self.to_rgb8())
        logger.info("wrote %dx%d image to %s", self.nx, self.ny, path)
        return path
