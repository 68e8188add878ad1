"""
Vector algebra on float32 3-vectors.

Points, directions and colors are all plain ``numpy`` arrays of shape (3,).
"""
import math
from typing import Optional

import numpy as np

Vec3 = np.ndarray

DTYPE = np.float32


def vec3(x: float, y: float, z: float) -> Vec3:
    """
    Build a float32 vector from three components.

    Parameters
    ----------
    x : float
        First component (x / red)
    y : float
        Second component (y / green)
    z : float
        Third component (z / blue)

    Returns
    -------
    Vec3
        Array of shape (3,) with dtype float32
    """
    return np.array([x, y, z], dtype=DTYPE)


def as_vec3(value) -> Vec3:
    """Coerce any 3-sequence into a float32 vector."""
    arr = np.asarray(value, dtype=DTYPE)
    if arr.shape != (3,):
        raise ValueError(f"expected 3 components, got shape {arr.shape}")
    return arr


def frozen(value) -> Vec3:
    """Return a read-only float32 copy of ``value``."""
    arr = np.array(value, dtype=DTYPE)
    if arr.shape != (3,):
        raise ValueError(f"expected 3 components, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


def dot(a: Vec3, b: Vec3) -> float:
    return float(np.dot(a, b))


def cross(a: Vec3, b: Vec3) -> Vec3:
    return np.cross(a, b).astype(DTYPE)


def squared_length(v: Vec3) -> float:
    return float(np.dot(v, v))


def length(v: Vec3) -> float:
    return math.sqrt(squared_length(v))


def normalize(v: Vec3) -> Vec3:
    """
    Scale a vector to unit length.

    A zero vector cannot be normalized; the caller is expected to guard
    against it (see ``Camera``), otherwise the result is NaN.
    """
    return (v / np.float32(length(v))).astype(DTYPE)


def reflect(v: Vec3, n: Vec3) -> Vec3:
    """Mirror ``v`` about the plane with unit normal ``n``."""
    return (v - 2.0 * dot(v, n) * n).astype(DTYPE)


def refract(v: Vec3, n: Vec3, ni_over_nt: float) -> Optional[Vec3]:
    """
    Bend ``v`` through an interface with Snell's law.

    Parameters
    ----------
    v : Vec3
        Incoming direction, any length
    n : Vec3
        Unit normal on the side the ray arrives from
    ni_over_nt : float
        Ratio of refractive indices (incident over transmitted)

    Returns
    -------
    Optional[Vec3]
        The refracted direction, or None under total internal reflection
    """
    uv = normalize(v)
    dt = dot(uv, n)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1.0 - dt * dt)
    if discriminant > 0:
        return (ni_over_nt * (uv - n * dt) - n * math.sqrt(discriminant)).astype(DTYPE)
    return None


def schlick(cosine: float, refractive_index: float) -> float:
    """Schlick's approximation of Fresnel reflectance."""
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * math.pow(1.0 - cosine, 5)
