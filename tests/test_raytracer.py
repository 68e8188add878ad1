import numpy as np
import pytest

from rtrace.materials import Lambertian, Material, Metal, ScatterResult
from rtrace.ray import Ray
from rtrace.raytracer import SKY_COLOR, background, trace
from rtrace.vec3 import vec3
from rtrace.world import Scene, Sphere


class CountingMirror(Material):
    """Bounces every ray straight back and counts the bounces."""

    def __init__(self):
        self.calls = 0

    def scatter(self, ray_in, hit, rng):
        self.calls += 1
        return ScatterResult(Ray(hit.point, -ray_in.direction), vec3(0.9, 0.9, 0.9), True)


class Absorber(Material):
    def scatter(self, ray_in, hit, rng):
        return ScatterResult(Ray(hit.point, hit.normal), vec3(1, 1, 1), False)


def test_background_straight_up_is_sky():
    assert np.allclose(background(Ray(vec3(0, 0, 0), vec3(0, 1, 0))), SKY_COLOR)


def test_background_horizon_is_midway():
    color = background(Ray(vec3(0, 0, 0), vec3(1, 0, 0)))
    assert np.allclose(color, [0.75, 0.85, 1.0], atol=1e-6)


def test_background_straight_down_is_white():
    assert np.allclose(background(Ray(vec3(0, 0, 0), vec3(0, -5, 0))), [1, 1, 1])


@pytest.mark.parametrize("direction", [(0, 1, 0), (1, 0, 0), (0.3, -0.4, -1.0)])
def test_trace_miss_returns_background(direction, rng):
    ray = Ray(vec3(0, 0, 0), vec3(*direction))
    assert np.allclose(trace(ray, Scene(), rng), background(ray))


def test_trace_absorbed_ray_is_black(rng):
    scene = Scene([Sphere(vec3(0, 0, -2), 1.0, Absorber())])
    ray = Ray(vec3(0, 0, 0), vec3(0, 0, -1))
    assert np.allclose(trace(ray, scene, rng), [0, 0, 0])


def test_trace_zero_depth_budget_absorbs_any_hit(rng, two_sphere_scene):
    ray = Ray(vec3(0, 0, 0), vec3(0, 0, -1))
    assert np.allclose(trace(ray, two_sphere_scene, rng, max_depth=0), [0, 0, 0])


def test_trace_one_bounce_mirror_attenuates_background(rng):
    mirror = Metal(vec3(0.5, 0.5, 0.5))
    scene = Scene([Sphere(vec3(0, 0, -2), 1.0, mirror)])
    ray = Ray(vec3(0, 0, 0), vec3(0, 0, -1))
    reflected = Ray(vec3(0, 0, -1), vec3(0, 0, 1))
    expected = 0.5 * background(reflected)
    assert np.allclose(trace(ray, scene, rng), expected, atol=1e-6)


def test_trace_depth_cap_bounds_bounces(rng):
    material = CountingMirror()
    # Two facing spheres keep bouncing the ray between them
    scene = Scene([
        Sphere(vec3(0, 0, -3), 1.0, material),
        Sphere(vec3(0, 0, 3), 1.0, material),
    ])
    color = trace(Ray(vec3(0, 0, 0), vec3(0, 0, -1)), scene, rng, max_depth=7)
    assert np.allclose(color, [0, 0, 0])
    assert material.calls == 8


def test_trace_diffuse_scene_is_bounded(rng, two_sphere_scene):
    ray = Ray(vec3(0, 0, 0), vec3(0, -0.2, -1))
    for _ in range(50):
        color = trace(ray, two_sphere_scene, rng)
        assert (color >= 0).all()
        assert (color <= 1).all()


def test_trace_uses_lambertian_albedo(rng):
    # Ground plane approximation: a huge sphere below the camera
    albedo = vec3(0.2, 0.4, 0.6)
    scene = Scene([Sphere(vec3(0, -1000.5, 0), 1000.0, Lambertian(albedo))])
    color = trace(Ray(vec3(0, 0, 0), vec3(0, -1, 0)), scene, rng)
    # One bounce to the sky; the sky is at most white
    assert (color <= albedo + 1e-6).all()
    assert (color > 0).all()
