"""
Writing rendered pixel buffers to image files.

The camera stores row 0 at the bottom of the film; image files store the
top row first, so rows are flipped on the way out.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image

from .camera import Camera

logger = logging.getLogger(__name__)


def to_image(camera: Camera) -> Image.Image:
    """Convert the camera's pixel buffer to an RGB image, top row first."""
    return Image.fromarray(np.ascontiguousarray(np.flipud(camera.colors)))


def save_image(camera: Camera, filename: Union[str, Path]) -> Path:
    """Save the camera's pixel buffer to a file.

    Args:
        camera: Camera holding a rendered buffer
        filename: Output filename (extension determines format)

    Returns:
        The path written
    """
    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    to_image(camera).save(path)
    logger.info("Saved %dx%d image to %s", camera.number_pixels[0], camera.number_pixels[1], path)
    return path
