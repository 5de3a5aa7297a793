"""Image export utilities.

Converts the sensor's display colors into image arrays, flat RGBA buffers
and PNG files (via Pillow).

Example:
    >>> from pathlight.preview.export import save_png
    >>> tracer.render_pass()
    >>> save_png(tracer.sensor, "box.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from pathlight.core.sensor import Sensor


def sensor_to_image(sensor: Sensor) -> npt.NDArray[np.uint8]:
    """Display colors as an image array of shape (height, width, 3).

    Row 0 is the top of the image.
    """
    dims = sensor.dimensions
    return sensor.colors().reshape(dims.height, dims.width, 3)


def to_rgba_buffer(sensor: Sensor) -> bytes:
    """Display colors as flat RGBA bytes (alpha 255), row-major, top row first."""
    image = sensor_to_image(sensor)
    alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([image, alpha], axis=2).tobytes()


def save_png(sensor: Sensor, filepath: str) -> None:
    """Save the sensor's display colors as an 8-bit RGB PNG.

    Args:
        sensor: The sensor to export.
        filepath: Output file path (should end in .png).
    """
    PILImage.fromarray(sensor_to_image(sensor)).save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating | np.integer],
    image_b: npt.NDArray[np.floating | np.integer],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
