"""
Surface materials and their scattering rules.

Every material answers one question: given the ray that arrived at a hit
point, where does the light go next, how much of it survives, and does the
path continue at all.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from .errors import InvalidConfigurationError, SamplingError
from .ray import Ray
from .vec3 import (
    DTYPE, Vec3, dot, frozen, length, normalize, reflect, refract, schlick,
    squared_length,
)

if TYPE_CHECKING:
    from .world import Hit

# Acceptance rate of the unit-ball rejection sampler is pi/6 (~52%), so this
# cap is only reached by a broken random source.
MAX_REJECTION_ATTEMPTS = 1000

WHITE = frozen([1.0, 1.0, 1.0])


class ScatterResult(NamedTuple):
    scattered: Ray
    attenuation: Vec3
    continues: bool


def random_in_unit_sphere(rng: np.random.Generator,
                          max_attempts: int = MAX_REJECTION_ATTEMPTS) -> Vec3:
    """
    Draw a point uniformly from the open unit ball by rejection sampling.

    Parameters
    ----------
    rng : np.random.Generator
        Random source owned by the calling worker
    max_attempts : int, optional
        Number of candidates to try before giving up, by default 1000

    Returns
    -------
    Vec3
        A vector with squared length strictly below 1

    Raises
    ------
    SamplingError
        If every candidate was rejected
    """
    for _ in range(max_attempts):
        p = (2.0 * np.asarray(rng.random(3), dtype=DTYPE) - 1.0).astype(DTYPE)
        if squared_length(p) < 1.0:
            return p
    raise SamplingError(
        f"no point inside the unit sphere after {max_attempts} draws"
    )


class Material(ABC):
    """
    Base class for scattering behaviour. Subclasses are immutable.
    """
    @abstractmethod
    def scatter(self, ray_in: Ray, hit: "Hit", rng: np.random.Generator) -> ScatterResult:
        """
        Compute the scattered ray for a ray hitting this material.

        Parameters
        ----------
        ray_in : Ray
            The incoming ray
        hit : Hit
            Intersection record of ``ray_in`` with a surface using this material
        rng : np.random.Generator
            Random source owned by the calling worker

        Returns
        -------
        ScatterResult
            Scattered ray, attenuation color and whether transport continues
        """
        raise NotImplementedError


class Lambertian(Material):
    """Ideal diffuse reflector."""

    def __init__(self, albedo: Vec3) -> None:
        self.albedo = frozen(albedo)

    def scatter(self, ray_in: Ray, hit: "Hit", rng: np.random.Generator) -> ScatterResult:
        target = hit.point + hit.normal + random_in_unit_sphere(rng)
        return ScatterResult(Ray(hit.point, target - hit.point), self.albedo, True)

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo.tolist()})"


class Metal(Material):
    """Perfect mirror tinted by its albedo."""

    def __init__(self, albedo: Vec3) -> None:
        self.albedo = frozen(albedo)

    def scatter(self, ray_in: Ray, hit: "Hit", rng: np.random.Generator) -> ScatterResult:
        reflected = reflect(normalize(ray_in.direction), hit.normal)
        # Rays mirrored into the surface are absorbed
        continues = dot(reflected, hit.normal) > 0
        return ScatterResult(Ray(hit.point, reflected), self.albedo, continues)

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo.tolist()})"


class Dielectric(Material):
    """
    Clear refractive material such as glass or water.

    Each scatter picks reflection or refraction at random, weighted by
    Schlick's approximation of the Fresnel reflectance. No energy is lost.
    """

    def __init__(self, refractive_index: float) -> None:
        if not refractive_index > 0:
            raise InvalidConfigurationError(
                f"refractive index must be positive, got {refractive_index}"
            )
        self.refractive_index = float(refractive_index)

    def scatter(self, ray_in: Ray, hit: "Hit", rng: np.random.Generator) -> ScatterResult:
        direction = ray_in.direction
        ri = self.refractive_index
        reflected = reflect(direction, hit.normal)

        d_dot_n = dot(direction, hit.normal)
        # Travelling along the normal means leaving the medium
        if d_dot_n > 0:
            outward_normal = -hit.normal
            ni_over_nt = ri
            cosine = ri * d_dot_n / length(direction)
        else:
            outward_normal = hit.normal
            ni_over_nt = 1.0 / ri
            cosine = -d_dot_n / length(direction)

        refracted = refract(direction, outward_normal, ni_over_nt)
        if refracted is not None:
            reflect_prob = schlick(cosine, ri)
        else:
            reflect_prob = 1.0

        draw = rng.random()
        if refracted is None or draw < reflect_prob:
            # Total internal reflection also ends up here
            scattered = Ray(hit.point, reflected)
        else:
            scattered = Ray(hit.point, refracted)
        return ScatterResult(scattered, WHITE, True)

    def __repr__(self) -> str:
        return f"Dielectric(refractive_index={self.refractive_index})"
