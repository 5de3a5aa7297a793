"""Exposure buffer and tone mapping.

The sensor keeps, per pixel, the running sum of radiance samples and the
number of samples taken. Display colors are derived on demand: the mean
radiance is scaled by 1/255, gamma encoded, clamped to 1 and scaled back to
8 bits. Reading a color never changes the buffer.

Pixels are addressed by raster index (row-major, top row first).

Example:
    >>> from pathlight.core.sensor import Sensor, SensorDimensions
    >>> sensor = Sensor(SensorDimensions(4, 3), gamma=2.2)
    >>> sensor.add_sample(5, (255.0, 0.0, 0.0))
    >>> sensor.color_at(5)
    (255, 0, 0)
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt


@dataclass(frozen=True)
class SensorDimensions:
    """Width and height of the raster.

    Attributes:
        width: Pixels per row.
        height: Number of rows.
    """

    width: int
    height: int

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pixel_for_index(self, index: int) -> tuple[int, int]:
        """Map a raster index to (x, y), wrapping modulo the pixel count."""
        index %= self.pixel_count
        return index % self.width, index // self.width

    def index_for_pixel(self, x: int, y: int) -> int:
        """Map (x, y) to its raster index.

        Raises:
            ValueError: If the pixel lies outside the raster.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} raster")
        return y * self.width + x


def tone_map(mean: npt.NDArray[np.float64], gamma: float) -> npt.NDArray[np.uint8]:
    """Convert mean radiance to 8-bit display values.

    Computes min((mean / 255)^(1/gamma), 1) * 255, truncated. Negative
    inputs map to 0.

    Args:
        mean: Array of mean radiance values, any shape.
        gamma: Display gamma.

    Returns:
        Array of the same shape with dtype uint8.
    """
    normalized = np.clip(mean / 255.0, 0.0, None)
    encoded = np.minimum(np.power(normalized, 1.0 / gamma), 1.0)
    return (encoded * 255.0).astype(np.uint8)


class Sensor:
    """Per-pixel radiance accumulator.

    Attributes:
        dimensions: Raster size.
        gamma: Display gamma used by color_at() and colors().
    """

    def __init__(self, dimensions: SensorDimensions, gamma: float = 2.2) -> None:
        if gamma <= 0.0:
            raise ValueError(f"gamma must be positive, got {gamma}")
        self.dimensions = dimensions
        self.gamma = gamma
        self._sums = np.zeros((dimensions.pixel_count, 3), dtype=np.float64)
        self._counts = np.zeros(dimensions.pixel_count, dtype=np.uint32)

    @property
    def total_samples(self) -> int:
        """Number of samples accumulated across all pixels."""
        return int(self._counts.sum(dtype=np.uint64))

    def reset(self) -> None:
        """Discard every accumulated sample."""
        self._sums.fill(0.0)
        self._counts.fill(0)

    def add_sample(self, index: int, color) -> None:
        """Accumulate one radiance sample into a pixel.

        Args:
            index: Raster index.
            color: Radiance (r, g, b).
        """
        self._sums[index] += color
        self._counts[index] += 1

    def add_samples(self, indices: npt.NDArray[np.integer], colors: npt.NDArray[np.float64]) -> None:
        """Accumulate a batch of samples, in order.

        Indices may repeat; every occurrence counts.

        Args:
            indices: Raster indices, shape (n,).
            colors: Radiance samples, shape (n, 3).
        """
        np.add.at(self._sums, indices, colors)
        np.add.at(self._counts, indices, 1)

    def sample_count(self, index: int) -> int:
        """Number of samples accumulated into a pixel."""
        return int(self._counts[index])

    def mean(self) -> npt.NDArray[np.float64]:
        """Mean radiance per pixel, shape (pixel_count, 3); 0 where unsampled."""
        counts = self._counts.astype(np.float64)[:, None]
        return np.divide(self._sums, counts, out=np.zeros_like(self._sums), where=counts > 0)

    def color_at(self, index: int) -> tuple[int, int, int]:
        """Display color of a pixel.

        Returns (0, 0, 0) for a pixel with no samples.
        """
        count = self._counts[index]
        if count == 0:
            return (0, 0, 0)
        r, g, b = tone_map(self._sums[index] / float(count), self.gamma)
        return int(r), int(g), int(b)

    def colors(self) -> npt.NDArray[np.uint8]:
        """Display colors of every pixel, shape (pixel_count, 3)."""
        return tone_map(self.mean(), self.gamma)

    def colors_at(self, indices: npt.NDArray[np.integer]) -> npt.NDArray[np.uint8]:
        """Display colors of the given pixels, shape (n, 3).

        Matches color_at() for each index, without tone-mapping the whole raster.
        """
        counts = self._counts[indices].astype(np.float64)[:, None]
        sums = self._sums[indices]
        mean = np.divide(sums, counts, out=np.zeros_like(sums), where=counts > 0)
        return tone_map(mean, self.gamma)
