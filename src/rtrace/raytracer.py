"""
Radiance estimation: follow a light path backwards from the camera.
"""
import math

import numpy as np

from .ray import Ray
from .vec3 import Vec3, frozen, normalize
from .world import Scene

# Bounce budget; a path reaching it is treated as absorbed
MAX_DEPTH = 50

# Minimum hit distance, keeps scattered rays from re-hitting their origin
# surface ("shadow acne")
T_MIN = 0.001

WHITE = frozen([1.0, 1.0, 1.0])
SKY_COLOR = frozen([0.5, 0.7, 1.0])
BLACK = frozen([0.0, 0.0, 0.0])


def background(ray: Ray) -> Vec3:
    """
    Shade a ray that escaped the scene with a vertical sky gradient.

    Parameters
    ----------
    ray : Ray
        The escaping ray

    Returns
    -------
    Vec3
        White at the horizon blending to pale blue straight up
    """
    unit_direction = normalize(ray.direction)
    t = 0.5 * (float(unit_direction[1]) + 1.0)
    return ((1.0 - t) * WHITE + t * SKY_COLOR).astype(np.float32)


def trace(ray: Ray, scene: Scene, rng: np.random.Generator,
          max_depth: int = MAX_DEPTH, t_min: float = T_MIN) -> Vec3:
    """
    Estimate the radiance arriving along ``ray``.

    The path is followed iteratively: every bounce multiplies the running
    attenuation by the material's attenuation, and the path ends when it
    escapes to the sky, is absorbed, or exhausts the bounce budget.

    Parameters
    ----------
    ray : Ray
        Primary (camera) ray
    scene : Scene
        The scene to trace against
    rng : np.random.Generator
        Random source owned by the calling worker
    max_depth : int, optional
        Number of bounces allowed before the path is absorbed, by default 50
    t_min : float, optional
        Minimum accepted hit distance, by default 0.001

    Returns
    -------
    Vec3
        Linear RGB color for the ray
    """
    throughput = WHITE
    for depth in range(max_depth + 1):
        hit = scene.hit(ray, t_min, math.inf)
        if hit is None:
            return (throughput * background(ray)).astype(np.float32)

        result = hit.material.scatter(ray, hit, rng)
        if depth >= max_depth or not result.continues:
            break
        throughput = throughput * result.attenuation
        ray = result.scattered
    return BLACK.copy()
