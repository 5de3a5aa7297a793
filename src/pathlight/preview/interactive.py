"""Interactive preview window using Taichi GGUI.

WindowScreen is a Screen: the tracer writes display colors into its pixel
buffer, and show_frame() uploads the buffer to a GGUI canvas.
run_interactive() drives a ParallelTracer's background producer and drains
its queue into the window until the window closes.

Example:
    >>> from pathlight.preview.interactive import WindowScreen, run_interactive
    >>> screen = WindowScreen(320, 240, title="spheres")
    >>> run_interactive(ParallelTracer(tracer), screen)
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

if TYPE_CHECKING:
    from pathlight.core.parallel import ParallelTracer

logger = logging.getLogger(__name__)


class WindowScreen:
    """A Screen that presents its pixels in a GGUI window.

    The window is created lazily on the first show_frame(), so the screen
    can be written to (and inspected) without a display.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        pixels: Display colors, shape (height, width, 3), row 0 at the top.
    """

    def __init__(self, width: int, height: int, *, title: str = "pathlight") -> None:
        self.width = width
        self.height = height
        self._title = title
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None
        # Taichi fields use (x, y) indexing with the origin at the bottom-left
        self._display_image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

    def write(self, index: int, r: int, g: int, b: int) -> None:
        y, x = divmod(index, self.width)
        self.pixels[y, x] = (r, g, b)

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(name=self._title, res=(self.width, self.height), vsync=True)
        self._canvas = self._window.get_canvas()

    def is_running(self) -> bool:
        """Whether the window is still open."""
        self._initialize_window()
        return self._window.running

    def show_frame(self) -> None:
        """Upload the pixel buffer and present one frame."""
        self._initialize_window()
        image = np.flipud(self.pixels).astype(np.float32) / 255.0
        self._display_image.from_numpy(np.ascontiguousarray(np.transpose(image, (1, 0, 2))))
        self._canvas.set_image(self._display_image)
        self._window.show()

    def close(self) -> None:
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        if os.name == "nt":
            return True
        if os.uname().sysname == "Darwin":
            return not (os.environ.get("SSH_CONNECTION") and not os.environ.get("DISPLAY"))
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))


def run_interactive(parallel: ParallelTracer, screen: WindowScreen, max_frames: int | None = None) -> int:
    """Render into a window until it closes.

    Starts the background producer, and every frame drains the batches
    queued so far into the screen before presenting it.

    Args:
        parallel: The parallel tracer to drive.
        screen: The window screen to present.
        max_frames: Stop after this many frames (None runs until closed).

    Returns:
        The number of samples applied.
    """
    applied = 0
    frames = 0
    parallel.start()
    try:
        while screen.is_running() and (max_frames is None or frames < max_frames):
            applied += parallel.drain(screen)
            screen.show_frame()
            frames += 1
    finally:
        parallel.stop()
    logger.info(f"Preview closed after {frames} frames, {applied} samples")
    return applied
