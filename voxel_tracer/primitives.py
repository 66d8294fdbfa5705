"""
Points, vectors, colors and materials.

Points and vectors wrap a ``float64`` array of three components. Colors and
attenuation factors are plain ``numpy`` arrays of shape ``(3,)`` so they can
be multiplied component-wise without any wrapper.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence, Union

import numpy as np

EPSILON = 1e-10

Triple = Union[float, Sequence[float], np.ndarray]


def is_zero(x: float) -> bool:
    return abs(x) < EPSILON


def align_zero(x: float) -> float:
    """Snap values within EPSILON of zero to exactly zero."""
    return 0.0 if abs(x) < EPSILON else x


def triple(value: Triple) -> np.ndarray:
    """Broadcast a scalar or a 3-sequence into a new float64 array."""
    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim == 0:
        return np.full(3, float(arr), dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"expected a scalar or 3 components, got shape {arr.shape}")
    return arr.copy()


def color(r: float, g: float, b: float) -> np.ndarray:
    return np.array([r, g, b], dtype=np.float64)


BLACK = np.zeros(3, dtype=np.float64)
ONE = np.ones(3, dtype=np.float64)


class Point:
    """A location in 3D space."""

    __slots__ = ("xyz",)

    ZERO: "Point"

    def __init__(self, x: Union[float, Iterable[float]], y: float = None, z: float = None):
        if y is None and z is None:
            xyz = np.array(x, dtype=np.float64)
        else:
            xyz = np.array((x, y, z), dtype=np.float64)
        if xyz.shape != (3,):
            raise ValueError(f"a point needs exactly 3 coordinates, got shape {xyz.shape}")
        self.xyz = xyz

    @property
    def x(self) -> float:
        return float(self.xyz[0])

    @property
    def y(self) -> float:
        return float(self.xyz[1])

    @property
    def z(self) -> float:
        return float(self.xyz[2])

    def __sub__(self, other: "Point") -> "Vector":
        return Vector(self.xyz - other.xyz)

    def __add__(self, v: "Vector") -> "Point":
        return Point(self.xyz + v.xyz)

    def distance_squared(self, other: "Point") -> float:
        diff = self.xyz - other.xyz
        return float(diff @ diff)

    def distance(self, other: "Point") -> float:
        return math.sqrt(self.distance_squared(other))

    def __iter__(self) -> Iterator[float]:
        return iter(self.xyz.tolist())

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return bool(np.all(np.abs(self.xyz - other.xyz) < EPSILON))

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.x!r}, {self.y!r}, {self.z!r})"


class Vector(Point):
    """A non-zero direction in 3D space."""

    __slots__ = ()

    X: "Vector"
    Y: "Vector"
    Z: "Vector"

    def __init__(self, x: Union[float, Iterable[float]], y: float = None, z: float = None):
        super().__init__(x, y, z)
        if np.all(np.abs(self.xyz) < EPSILON):
            raise ValueError("cannot create a zero vector")

    def __add__(self, v: "Vector") -> "Vector":
        return Vector(self.xyz + v.xyz)

    def __neg__(self) -> "Vector":
        return Vector(-self.xyz)

    def scale(self, factor: float) -> "Vector":
        return Vector(self.xyz * factor)

    __mul__ = scale
    __rmul__ = scale

    def dot(self, v: "Vector") -> float:
        return float(self.xyz @ v.xyz)

    def cross(self, v: "Vector") -> "Vector":
        return Vector(np.cross(self.xyz, v.xyz))

    def length_squared(self) -> float:
        return float(self.xyz @ self.xyz)

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalize(self) -> "Vector":
        return Vector(self.xyz / self.length())


Point.ZERO = Point(0.0, 0.0, 0.0)
Vector.X = Vector(1.0, 0.0, 0.0)
Vector.Y = Vector(0.0, 1.0, 0.0)
Vector.Z = Vector(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Material:
    """
    Surface response of a geometry.

    ``kd``/``ks`` weight the diffuse and specular terms, ``kr``/``kt`` the
    reflected and transmitted rays. Scalars are broadcast to all three
    channels.
    """

    kd: np.ndarray = field(default_factory=BLACK.copy)
    ks: np.ndarray = field(default_factory=BLACK.copy)
    kr: np.ndarray = field(default_factory=BLACK.copy)
    kt: np.ndarray = field(default_factory=BLACK.copy)
    shininess: int = 0

    def __post_init__(self):
        for name in ("kd", "ks", "kr", "kt"):
            object.__setattr__(self, name, triple(getattr(self, name)))
        if self.shininess < 0:
            raise ValueError("shininess must not be negative")
