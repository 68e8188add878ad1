"""
Plain-text PPM (P3) image output.
"""
import logging
import os
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)


def format_ppm(image: np.ndarray) -> str:
    """
    Serialize an RGB image as P3 text.

    Parameters
    ----------
    image : np.ndarray
        uint8 array of shape (height, width, 3), top row first

    Returns
    -------
    str
        Header lines ``P3``, ``<width> <height>``, ``255`` followed by one
        ``r g b`` line per pixel, row-major from the top row
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"expected an image of shape (height, width, 3), got {image.shape}")
    height, width, _ = image.shape
    lines = ["P3", f"{width} {height}", "255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in image.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(path: Union[str, os.PathLike], image: np.ndarray) -> None:
    """Write ``image`` to ``path`` in P3 format."""
    with open(path, "w", encoding="ascii") as fh:
        fh.write(format_ppm(image))
    logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], path)
