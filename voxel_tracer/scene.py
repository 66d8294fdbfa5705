"""
Scene record consumed by the tracers.
"""
from dataclasses import dataclass, field
from typing import List

import numpy as np

from .intersectable import Geometries
from .lights import AmbientLight, LightSource
from .primitives import BLACK, triple


@dataclass
class Scene:
    name: str
    geometries: Geometries = field(default_factory=Geometries)
    lights: List[LightSource] = field(default_factory=list)
    ambient_light: AmbientLight = field(default_factory=AmbientLight)
    background: np.ndarray = field(default_factory=BLACK.copy)

    def __post_init__(self):
        self.background = triple(self.background)
