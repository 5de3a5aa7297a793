"""Render settings."""

from dataclasses import dataclass

# Largest supported image side
MAX_RESOLUTION = 4096


@dataclass
class RenderSettings:
    """Configuration for a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        bounces: Maximum path segments per sample.
        gamma: Display gamma applied by the sensor.
        lanes: Number of raster lanes traced in parallel per batch.
        samples_per_lane: Consecutive pixels each lane traces per batch.
        queue_size: Capacity of the producer/consumer batch queue.
        strata: Sub-pixel strata per side; each sample averages strata^2
            jittered sub-samples.
    """

    width: int
    height: int
    bounces: int = 6
    gamma: float = 2.2
    lanes: int = 10
    samples_per_lane: int = 10
    queue_size: int = 64
    strata: int = 1

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if not 0 < value <= MAX_RESOLUTION:
                raise ValueError(f"{name} must be in [1, {MAX_RESOLUTION}], got {value}")
        for name in ("bounces", "lanes", "samples_per_lane", "queue_size", "strata"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}")
        if self.gamma <= 0.0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height
