"""Pixel sinks the tracer writes display colors into."""

from typing import Protocol

import numpy as np
import numpy.typing as npt

# Bytes per pixel in RGBA buffers
RGBA_STRIDE = 4


class Screen(Protocol):
    """Anything that accepts 8-bit pixel writes by raster index."""

    def write(self, index: int, r: int, g: int, b: int) -> None: ...


def write_rgba(buffer, index: int, r: int, g: int, b: int) -> None:
    """Store one pixel into a flat RGBA buffer (alpha 255).

    Args:
        buffer: A writable byte buffer (bytearray, memoryview or uint8 array)
            of 4 bytes per pixel, row-major, top row first.
        index: Raster index.
    """
    offset = index * RGBA_STRIDE
    buffer[offset] = r
    buffer[offset + 1] = g
    buffer[offset + 2] = b
    buffer[offset + 3] = 255


class PixelBufferScreen:
    """Screen backed by a flat RGBA byte buffer.

    Unwritten pixels are transparent black.

    Attributes:
        width: Pixels per row.
        height: Number of rows.
        buffer: The RGBA bytes.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.buffer = bytearray(width * height * RGBA_STRIDE)

    def write(self, index: int, r: int, g: int, b: int) -> None:
        write_rgba(self.buffer, index, r, g, b)

    def as_array(self) -> npt.NDArray[np.uint8]:
        """View the buffer as an array of shape (height, width, 4)."""
        return np.frombuffer(self.buffer, dtype=np.uint8).reshape(self.height, self.width, RGBA_STRIDE)
