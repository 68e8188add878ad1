"""
Pinhole camera mapping image-plane coordinates to primary rays.
"""
import math

import numpy as np

from .errors import InvalidConfigurationError
from .ray import Ray
from .vec3 import Vec3, as_vec3, cross, frozen, length, normalize, vec3

# Basis vectors shorter than this are treated as degenerate
_EPSILON = 1e-8


class Camera:
    """
    Look-at camera with a vertical field of view.
    """
    def __init__(self, eye: Vec3, target: Vec3, up: Vec3, vfov: float, aspect: float) -> None:
        """
        Derive the image plane from the viewing parameters.

        Parameters
        ----------
        eye : Vec3
            Camera position [x, y, z]
        target : Vec3
            Point the camera looks at
        up : Vec3
            Hint for the camera's up direction; must not be parallel to the
            view direction
        vfov : float
            Vertical field of view in degrees, in (0, 180)
        aspect : float
            Image width divided by image height

        Raises
        ------
        InvalidConfigurationError
            If the parameters produce a degenerate camera basis
        """
        if not 0.0 < vfov < 180.0:
            raise InvalidConfigurationError(f"vertical field of view must be in (0, 180), got {vfov}")
        if not aspect > 0.0:
            raise InvalidConfigurationError(f"aspect ratio must be positive, got {aspect}")

        eye = as_vec3(eye)
        target = as_vec3(target)
        up = as_vec3(up)

        theta = vfov * math.pi / 180.0
        half_height = math.tan(theta / 2.0)
        half_width = aspect * half_height

        view = eye - target
        if length(view) < _EPSILON:
            raise InvalidConfigurationError("camera eye and target coincide")
        w = normalize(view)

        side = cross(up, w)
        if length(side) < _EPSILON:
            raise InvalidConfigurationError("camera up vector is parallel to the view direction")
        u = normalize(side)
        v = cross(w, u)

        self.origin = frozen(eye)
        self.lower_left_corner = frozen(eye - half_width * u - half_height * v - w)
        self.horizontal = frozen(2.0 * half_width * u)
        self.vertical = frozen(2.0 * half_height * v)

    @classmethod
    def default(cls) -> "Camera":
        """Camera at the origin looking down -z with a 2:1 image and 90 degree fov."""
        return cls(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0), vec3(0.0, 1.0, 0.0), 90.0, 2.0)

    def get_ray(self, s: float, t: float) -> Ray:
        """
        Primary ray through the image-plane point (s, t).

        Parameters
        ----------
        s : float
            Horizontal coordinate, 0 at the left edge and 1 at the right
        t : float
            Vertical coordinate, 0 at the bottom edge and 1 at the top

        Returns
        -------
        Ray
            Ray from the camera origin through the image plane
        """
        direction = self.lower_left_corner + s * self.horizontal + t * self.vertical - self.origin
        return Ray(self.origin, direction.astype(np.float32))
