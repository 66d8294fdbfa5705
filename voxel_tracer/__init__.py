"""
CPU ray tracer with analytic shapes, a uniform-grid accelerator and
recursive Whitted illumination with soft shadows.
"""
from .primitives import BLACK, Material, Point, Vector, color
from .ray import Ray
from .intersectable import BoundingBox, GeoPoint, Geometries, Geometry, Intersectable
from .geometries import Cylinder, Plane, Polygon, Sphere, Triangle, Tube
from .lights import AmbientLight, DirectionalLight, PointLight, SpotLight
from .sampler import BeamSampler
from .scene import Scene
from .tracer import SimpleRayTracer
from .grid import RegularGridTracer, UnboundedGeometryError, UniformGrid, Voxel, build_grid, traverse_cells
from .image import ImageWriter
from .camera import Camera
from .logging_config import setup_logging

__version__ = "0.1.0"

__all__ = [
    "BLACK", "Material", "Point", "Vector", "color", "Ray",
    "BoundingBox", "GeoPoint", "Geometries", "Geometry", "Intersectable",
    "Cylinder", "Plane", "Polygon", "Sphere", "Triangle", "Tube",
    "AmbientLight", "DirectionalLight", "PointLight", "SpotLight",
    "BeamSampler", "Scene", "SimpleRayTracer",
    "RegularGridTracer", "UnboundedGeometryError", "UniformGrid", "Voxel",
    "build_grid", "traverse_cells", "ImageWriter", "Camera", "setup_logging",
]
