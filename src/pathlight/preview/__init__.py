"""Pixel sinks, image export and the interactive preview window.

Components:
    screen: Screen protocol and the flat RGBA PixelBufferScreen
    export: Image arrays, RGBA buffers and PNG export (Pillow)
    interactive: Taichi GGUI WindowScreen and the preview loop

Import interactive directly; it creates Taichi fields.
"""

from .export import compute_rmse, save_png, sensor_to_image, to_rgba_buffer
from .screen import PixelBufferScreen, Screen, write_rgba

__all__ = [
    "Screen",
    "PixelBufferScreen",
    "write_rgba",
    "save_png",
    "sensor_to_image",
    "to_rgba_buffer",
    "compute_rmse",
]
