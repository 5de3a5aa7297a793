"""Path tracing integrator.

Each sample follows one light path backwards from the camera:

1. a jittered thin-lens camera ray is generated for the pixel
2. at every hit the surface emission, weighted by the path throughput, is
   added to the radiance, then the material scatters the path and the
   throughput is multiplied by the event's weight
3. a ray that escapes adds the background radiance and ends the path
4. the path also ends when its throughput becomes exactly zero (absorption,
   total internal reflection, degenerate densities) or after ``bounces``
   segments

Paths start from the exact hit point; the intersection bias keeps them from
re-hitting the surface they leave.

The Tracer feeds one sample per update() into its Sensor and writes the
pixel's display color to a screen, walking the raster in order and wrapping.

Example:
    >>> from pathlight import runtime
    >>> runtime.init(arch="cpu", seed=1)
    >>> from pathlight.core.settings import RenderSettings
    >>> from pathlight.core.tracer import Tracer
    >>> from pathlight.scene.presets import load_scene
    >>> tracer = Tracer(load_scene("box"), RenderSettings(width=64, height=64))
    >>> tracer.render_pass()
    >>> tracer.sensor.color_at(0)
"""

import logging
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathlight.camera.thin_lens import get_ray
from pathlight.core.ray import is_zero, vec3
from pathlight.core.sensor import Sensor, SensorDimensions
from pathlight.core.settings import RenderSettings
from pathlight.materials.bsdf import scatter
from pathlight.materials.material import get_material_emission
from pathlight.preview.screen import Screen, write_rgba
from pathlight.scene.intersection import background, intersect_scene
from pathlight.scene.manager import Scene

logger = logging.getLogger(__name__)


# =============================================================================
# Path Tracing (Taichi)
# =============================================================================


@ti.func
def trace_path(origin: vec3, direction: vec3, bounces: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        origin: Ray origin.
        direction: Unit ray direction.
        bounces: Maximum number of path segments.

    Returns:
        The radiance estimate (RGB).
    """
    ray_origin = origin
    ray_direction = direction
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(bounces):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction)

            if rec.hit == 0:
                radiance += throughput * background(ray_direction)
                active = 0
            else:
                radiance += throughput * get_material_emission(rec.material_id)

                new_direction, weight, _event = scatter(
                    rec.material_id,
                    -ray_direction,
                    rec.point,
                    rec.normal,
                    rec.t,
                    ti.random(ti.f64),
                    ti.random(ti.f64),
                    ti.random(ti.f64),
                    ti.random(ti.f64),
                    ti.random(ti.f64),
                )
                throughput *= weight
                ray_origin = rec.point
                ray_direction = new_direction

                if is_zero(throughput):
                    active = 0

    return radiance


@ti.func
def sanitize(color: vec3) -> vec3:
    """Replace NaN, infinite and negative components with zero."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]) or result[c] < 0.0:
            result[c] = 0.0
    return result


@ti.func
def sample_pixel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    bounces: ti.i32,
    strata: ti.i32,
) -> vec3:
    """One radiance sample for a pixel.

    With strata > 1 the pixel is split into a strata x strata grid, one
    jittered path is traced per cell and the results are averaged.
    """
    total = vec3(0.0, 0.0, 0.0)
    for sx in range(strata):
        for sy in range(strata):
            jitter_x = (ti.cast(sx, ti.f64) + ti.random(ti.f64)) / strata
            jitter_y = (ti.cast(sy, ti.f64) + ti.random(ti.f64)) / strata
            ray = get_ray(
                x,
                y,
                width,
                height,
                jitter_x,
                jitter_y,
                ti.random(ti.f64),
                ti.random(ti.f64),
            )
            total += trace_path(ray.origin, ray.direction, bounces)
    return sanitize(total / ti.cast(strata * strata, ti.f64))


@ti.kernel
def _trace_lanes(
    starts: ti.types.ndarray(dtype=ti.i32, ndim=1),
    per_lane: ti.i32,
    width: ti.i32,
    height: ti.i32,
    bounces: ti.i32,
    strata: ti.i32,
    indices: ti.types.ndarray(dtype=ti.i32, ndim=1),
    radiance: ti.types.ndarray(dtype=ti.f64, ndim=2),
):
    """Trace per_lane consecutive pixels from every lane start, in parallel.

    Results land in lane-major order: slot lane * per_lane + k holds the
    k-th pixel of the lane.
    """
    total = width * height
    for lane, k in ti.ndrange(starts.shape[0], per_lane):
        index = (starts[lane] + k) % total
        color = sample_pixel(index % width, index // width, width, height, bounces, strata)
        slot = lane * per_lane + k
        indices[slot] = index
        for c in ti.static(range(3)):
            radiance[slot, c] = color[c]


# =============================================================================
# Tracer
# =============================================================================


class Tracer:
    """Incremental per-pixel integrator.

    Attributes:
        scene: The scene being rendered.
        settings: Render settings.
        dimensions: Raster size.
        sensor: The exposure buffer samples are accumulated into.
    """

    def __init__(self, scene: Scene, settings: RenderSettings) -> None:
        """Create a tracer for a scene.

        Args:
            scene: A scene with a camera.
            settings: Render settings.

        Raises:
            RuntimeError: If the scene has no camera.
        """
        if scene.camera is None:
            raise RuntimeError("Scene has no camera; call scene.set_camera() first")
        self.scene = scene
        self.settings = settings
        self.dimensions = SensorDimensions(settings.width, settings.height)
        self.sensor = Sensor(self.dimensions, settings.gamma)
        self._cursor = 0

    @property
    def cursor(self) -> int:
        """Raster index of the next pixel update() will sample."""
        return self._cursor

    def trace(
        self, starts: Sequence[int], per_lane: int
    ) -> tuple[npt.NDArray[np.int32], npt.NDArray[np.float64]]:
        """Trace a batch of samples without accumulating them.

        Args:
            starts: Raster index where each lane begins (wrapped modulo the
                pixel count).
            per_lane: Consecutive pixels traced per lane.

        Returns:
            A tuple (indices, radiance) with shapes (n,) and (n, 3), in lane
            order, where n = len(starts) * per_lane.
        """
        pixel_count = self.dimensions.pixel_count
        lane_starts = np.asarray(starts, dtype=np.int64) % pixel_count
        count = len(lane_starts) * per_lane
        indices = np.zeros(count, dtype=np.int32)
        radiance = np.zeros((count, 3), dtype=np.float64)
        _trace_lanes(
            lane_starts.astype(np.int32),
            per_lane,
            self.dimensions.width,
            self.dimensions.height,
            self.settings.bounces,
            self.settings.strata,
            indices,
            radiance,
        )
        return indices, radiance

    def _advance(self) -> tuple[int, tuple[int, int, int]]:
        index = self._cursor
        _, radiance = self.trace([index], 1)
        self.sensor.add_sample(index, radiance[0])
        self._cursor = (index + 1) % self.dimensions.pixel_count
        return index, self.sensor.color_at(index)

    def update(self, screen: Screen | None = None) -> int:
        """Sample the next pixel and write its display color.

        Args:
            screen: Optional sink for the updated pixel.

        Returns:
            The raster index that was sampled.
        """
        index, (r, g, b) = self._advance()
        if screen is not None:
            screen.write(index, r, g, b)
        return index

    def update_buffer(self, data) -> int:
        """Sample the next pixel and store it into a flat RGBA buffer.

        Args:
            data: Writable buffer of width * height * 4 bytes.

        Returns:
            The raster index that was sampled.
        """
        index, (r, g, b) = self._advance()
        write_rgba(data, index, r, g, b)
        return index

    def render_pass(self, screen: Screen | None = None) -> None:
        """Add one sample to every pixel in a single parallel launch.

        The update() cursor is not moved.

        Args:
            screen: Optional sink; every pixel is written after the pass.
        """
        pixel_count = self.dimensions.pixel_count
        indices, radiance = self.trace(np.arange(pixel_count), 1)
        self.sensor.add_samples(indices, radiance)
        if screen is not None:
            colors = self.sensor.colors()
            for index in range(pixel_count):
                r, g, b = colors[index]
                screen.write(index, int(r), int(g), int(b))
        logger.debug(f"Render pass complete: {self.sensor.total_samples} samples total")
