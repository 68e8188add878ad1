"""
rtrace - A Monte Carlo sphere ray tracer with a threaded scanline renderer.
"""

from .camera import Camera
from .errors import InvalidConfigurationError, RenderError, RtraceError, SamplingError
from .materials import Dielectric, Lambertian, Material, Metal, ScatterResult
from .ray import Ray
from .raytracer import background, trace
from .renderer import (
    FrameBuffer, RenderJob, RenderResult, RenderSettings, render_image,
    render_parallel, start_render,
)
from .world import Hit, Scene, Sphere, create_scene, create_two_sphere_scene

__all__ = [
    "Camera",
    "InvalidConfigurationError", "RenderError", "RtraceError", "SamplingError",
    "Dielectric", "Lambertian", "Material", "Metal", "ScatterResult",
    "Ray", "background", "trace",
    "FrameBuffer", "RenderJob", "RenderResult", "RenderSettings",
    "render_image", "render_parallel", "start_render",
    "Hit", "Scene", "Sphere", "create_scene", "create_two_sphere_scene",
]
