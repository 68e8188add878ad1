"""
Parametric rays.
"""
from .vec3 import Vec3, as_vec3


class Ray:
    """
    Representation of a ray with origin and direction.
    """
    __slots__ = ("origin", "direction")

    def __init__(self, origin: Vec3, direction: Vec3) -> None:
        """
        Initialize a ray with origin and direction.

        Parameters
        ----------
        origin : Vec3
            The origin point of the ray [x, y, z]
        direction : Vec3
            The direction of the ray [dx, dy, dz]; not required to be
            unit length
        """
        self.origin = as_vec3(origin)
        self.direction = as_vec3(direction)

    def point_at(self, t: float) -> Vec3:
        """Point reached after travelling ``t`` direction lengths."""
        return self.origin + t * self.direction

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin.tolist()}, direction={self.direction.tolist()})"
