"""
Scene geometry: surfaces, intersection records and ready-made worlds.
"""
import math
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, NamedTuple, Optional

from .errors import InvalidConfigurationError
from .materials import Dielectric, Lambertian, Material, Metal
from .ray import Ray
from .vec3 import Vec3, dot, frozen, vec3


class Hit(NamedTuple):
    """
    Intersection of a ray with a surface.

    ``normal`` is unit length and points out of the surface. ``material``
    belongs to the surface that was hit.
    """
    t: float
    point: Vec3
    normal: Vec3
    material: Material


class Surface(ABC):
    """
    Anything a ray can hit.
    """
    material: Material

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[Hit]:
        """
        Intersect ``ray`` with the surface over the open range (t_min, t_max).

        Parameters
        ----------
        ray : Ray
            The ray to test
        t_min : float
            Lower bound of the accepted ray parameter (exclusive)
        t_max : float
            Upper bound of the accepted ray parameter (exclusive)

        Returns
        -------
        Optional[Hit]
            The intersection record, or None on a miss
        """
        raise NotImplementedError


class Sphere(Surface):
    """
    Sphere primitive owning its material.
    """
    def __init__(self, center: Vec3, radius: float, material: Material) -> None:
        """
        Initialize a sphere.

        Parameters
        ----------
        center : Vec3
            Center of the sphere [x, y, z]
        radius : float
            Radius, must be positive
        material : Material
            Material shading every point of the sphere
        """
        if not radius > 0:
            raise InvalidConfigurationError(f"sphere radius must be positive, got {radius}")
        self.center = frozen(center)
        self.radius = float(radius)
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[Hit]:
        # Half-b form of the quadratic a*t^2 + 2*b*t + c = 0
        oc = ray.origin - self.center
        a = dot(ray.direction, ray.direction)
        b = dot(oc, ray.direction)
        c = dot(oc, oc) - self.radius * self.radius
        discriminant = b * b - a * c

        # Tangent rays count as misses
        if discriminant <= 0:
            return None

        # Only the nearer root is considered; a ray starting inside the
        # sphere therefore misses it.
        t = (-b - math.sqrt(discriminant)) / a
        if not t_min < t < t_max:
            return None

        point = ray.point_at(t)
        normal = (point - self.center) / self.radius
        return Hit(t, point, normal, self.material)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center.tolist()}, radius={self.radius}, material={self.material!r})"


class Scene:
    """
    Container for renderable objects in the scene.

    The scene is built once and never modified while a render is running,
    so worker threads share it without locking.
    """
    def __init__(self, surfaces: Iterable[Surface] = ()) -> None:
        self.surfaces: List[Surface] = list(surfaces)

    def add(self, surface: Surface) -> None:
        self.surfaces.append(surface)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[Hit]:
        """
        Find the nearest intersection of ``ray`` with any surface.

        Parameters
        ----------
        ray : Ray
            The ray to test
        t_min : float
            Lower bound of the accepted ray parameter
        t_max : float
            Upper bound of the accepted ray parameter

        Returns
        -------
        Optional[Hit]
            The closest hit over all surfaces, or None
        """
        closest = None
        closest_so_far = t_max
        for surface in self.surfaces:
            hit = surface.hit(ray, t_min, closest_so_far)
            if hit is not None:
                closest = hit
                closest_so_far = hit.t
        return closest

    def __len__(self) -> int:
        return len(self.surfaces)

    def __iter__(self) -> Iterator[Surface]:
        return iter(self.surfaces)


def create_scene(include_glass: bool = False) -> Scene:
    """
    Build the default world: three spheres resting on a giant ground sphere.

    Parameters
    ----------
    include_glass : bool, optional
        Add a glass sphere in front of the middle sphere, by default False

    Returns
    -------
    Scene
        The populated scene
    """
    scene = Scene([
        # Middle sphere
        Sphere(vec3(0.0, 0.0, -1.0), 0.5, Lambertian(vec3(0.8, 0.3, 0.3))),
        # Right sphere
        Sphere(vec3(1.5, 0.2, -1.5), 0.7, Metal(vec3(0.6, 0.6, 0.9))),
        # Left sphere
        Sphere(vec3(-1.0, 0.0, -1.0), 0.3, Metal(vec3(0.9, 0.9, 0.9))),
        # Ground
        Sphere(vec3(0.0, -100.5, -1.0), 100.0, Lambertian(vec3(0.3, 0.3, 0.3))),
    ])
    if include_glass:
        scene.add(Sphere(vec3(-0.45, -0.3, -0.45), 0.2, Dielectric(1.5)))
    return scene


def create_two_sphere_scene() -> Scene:
    """Single diffuse sphere on a diffuse ground, both with albedo 0.5."""
    return Scene([
        Sphere(vec3(0.0, 0.0, -1.0), 0.5, Lambertian(vec3(0.5, 0.5, 0.5))),
        Sphere(vec3(0.0, -100.5, -1.0), 100.0, Lambertian(vec3(0.5, 0.5, 0.5))),
    ])
