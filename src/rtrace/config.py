"""
Render configuration.
"""
import logging
import os
from typing import Mapping, Optional

from .camera import Camera
from .errors import InvalidConfigurationError
from .raytracer import MAX_DEPTH, T_MIN
from .renderer import RenderSettings
from .vec3 import vec3
from .world import Scene, create_scene

# Environment variable -> (attribute, parser)
ENV_OVERRIDES = {
    "RTRACE_WIDTH": ("width", int),
    "RTRACE_HEIGHT": ("height", int),
    "RTRACE_SAMPLES": ("samples", int),
    "RTRACE_THREADS": ("num_threads", int),
    "RTRACE_SEED": ("seed", int),
}


class RenderConfig:
    def __init__(self) -> None:
        self.width = 400
        self.height = 200
        self.samples = 100
        self.num_threads = os.cpu_count() or 4
        self.max_depth = MAX_DEPTH
        self.t_min = T_MIN
        self.seed: Optional[int] = None

        self.eye = vec3(0.0, 0.0, 0.0)
        self.target = vec3(0.0, 0.0, -1.0)
        self.up = vec3(0.0, 1.0, 0.0)
        self.vfov = 90.0
        self.include_glass = False

        self.target_fps = 60
        self.output_path: Optional[str] = None
        self.log_level = logging.INFO

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RenderConfig":
        """
        Build a config with defaults overridden by ``RTRACE_*`` variables.

        Parameters
        ----------
        environ : Optional[Mapping[str, str]], optional
            Variables to read, by default ``os.environ``

        Returns
        -------
        RenderConfig
            The resulting configuration

        Raises
        ------
        InvalidConfigurationError
            If a variable is not a valid integer
        """
        environ = os.environ if environ is None else environ
        config = cls()
        for name, (attribute, parse) in ENV_OVERRIDES.items():
            raw = environ.get(name)
            if raw is None or raw == "":
                continue
            try:
                setattr(config, attribute, parse(raw))
            except ValueError as exc:
                raise InvalidConfigurationError(f"{name}={raw!r} is not a valid integer") from exc
        return config

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def render_settings(self) -> RenderSettings:
        return RenderSettings(
            width=self.width,
            height=self.height,
            samples=self.samples,
            num_threads=self.num_threads,
            max_depth=self.max_depth,
            t_min=self.t_min,
        )

    def build_camera(self) -> Camera:
        if self.height <= 0:
            raise InvalidConfigurationError(f"image height must be positive, got {self.height}")
        return Camera(self.eye, self.target, self.up, self.vfov, self.aspect)

    def build_scene(self) -> Scene:
        return create_scene(include_glass=self.include_glass)
