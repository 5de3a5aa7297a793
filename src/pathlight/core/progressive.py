"""Progressive renderer for whole-image sample accumulation.

ProgressiveRenderer wraps a Tracer for batch workflows: each pass adds one
sample to every pixel, and the image refines as passes accumulate.

Example:
    >>> from pathlight.core.progressive import ProgressiveRenderer
    >>> renderer = ProgressiveRenderer(tracer)
    >>> renderer.render(64, callback=lambda done, total: print(done, total))
    >>> renderer.save_image("spheres.png")
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from pathlight.core.tracer import Tracer
from pathlight.preview.export import save_png, sensor_to_image

# Callback receives (completed_passes, target_passes)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Accumulate full-image passes into a tracer's sensor.

    Attributes:
        tracer: The wrapped tracer.
    """

    def __init__(self, tracer: Tracer) -> None:
        self.tracer = tracer
        self._passes = 0

    @property
    def width(self) -> int:
        return self.tracer.dimensions.width

    @property
    def height(self) -> int:
        return self.tracer.dimensions.height

    @property
    def pass_count(self) -> int:
        """Number of completed passes since the last reset."""
        return self._passes

    def reset(self) -> None:
        """Discard all accumulated samples."""
        self.tracer.sensor.reset()
        self._passes = 0

    def render(self, num_passes: int = 1, callback: ProgressCallback | None = None) -> None:
        """Add passes, calling back after each one.

        Args:
            num_passes: Passes to add.
            callback: Optional callback receiving (completed, target).
        """
        for done, target in self.render_progressive(num_passes):
            if callback is not None:
                callback(done, target)

    def render_progressive(self, num_passes: int = 1) -> Generator[tuple[int, int], None, None]:
        """Add passes, yielding (completed, target) after each one."""
        if num_passes <= 0:
            return

        target = self._passes + num_passes
        while self._passes < target:
            self.tracer.render_pass()
            self._passes += 1
            yield (self._passes, target)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Display colors of shape (height, width, 3)."""
        return sensor_to_image(self.tracer.sensor)

    def save_image(self, filepath: str) -> None:
        """Save the current image as a PNG."""
        save_png(self.tracer.sensor, filepath)

    def __repr__(self) -> str:
        return f"ProgressiveRenderer(width={self.width}, height={self.height}, passes={self.pass_count})"
