"""Thin-lens camera model for depth-of-field ray generation.

The camera models a physical sensor behind a thin lens:

- the sensor (``sensor`` meters tall) sits ``image_distance`` behind the
  lens, where 1 / image_distance = 1 / focal_length - 1 / focus
- the lens aperture has diameter focal_length / f_stop
- every ray leaves a random point on the aperture disk toward the point of
  the focus plane (``focus`` meters in front of the lens) that the jittered
  sensor point images to

The camera looks down -z in its own frame. Orientation is applied as a
pitch rotation (about -x, positive looks down) followed by a yaw rotation
(about -y, positive turns right), both in degrees.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathlight.camera.thin_lens import ThinLensCamera, setup_camera
    >>> setup_camera(ThinLensCamera(position=(0.0, 0.0, 7.0)))
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import Ray, angle_axis, make_ray, vec3

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        position: Lens center in world space (x, y, z).
        sensor: Sensor height in meters (35mm film is 0.024).
        focal_length: Lens focal length in meters.
        focus: Distance from the lens to the plane in focus, in meters.
        f_stop: Aperture f-number; larger values give more depth of field.
        yaw: Rotation about the vertical axis in degrees.
        pitch: Downward tilt in degrees.
    """

    position: tuple[float, float, float]
    sensor: float = 0.024
    focal_length: float = 0.040
    focus: float = 15.0
    f_stop: float = 1.4
    yaw: float = 0.0
    pitch: float = 0.0

    def __post_init__(self):
        if self.sensor <= 0.0:
            raise ValueError(f"Camera sensor size must be positive, got {self.sensor}")
        if self.focal_length <= 0.0:
            raise ValueError(f"Camera focal_length must be positive, got {self.focal_length}")
        if self.focus <= self.focal_length:
            raise ValueError(
                f"Camera focus ({self.focus}) must be farther than the focal length ({self.focal_length})"
            )
        if self.f_stop <= 0.0:
            raise ValueError(f"Camera f_stop must be positive, got {self.f_stop}")

    @property
    def aperture(self) -> float:
        """Aperture diameter."""
        return self.focal_length / self.f_stop

    @property
    def object_distance(self) -> float:
        """Signed position of the focus plane along the view axis (negative)."""
        return -self.focus

    @property
    def image_distance(self) -> float:
        """Lens-to-sensor distance from the thin-lens equation."""
        return 1.0 / (1.0 / self.focal_length - 1.0 / self.focus)

    def ray(
        self,
        pixel_x: int,
        pixel_y: int,
        width: int,
        height: int,
        jitter: tuple[float, float] = (0.5, 0.5),
        lens: tuple[float, float] = (0.0, 0.0),
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Generate one ray through this camera.

        Uploads this camera to the camera fields first, then behaves like
        camera_ray().

        Returns:
            A tuple (origin, direction).
        """
        setup_camera(self)
        return camera_ray(pixel_x, pixel_y, width, height, jitter, lens)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThinLensCamera":
        values = dict(data)
        values["position"] = tuple(float(c) for c in values["position"])
        return cls(**values)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f64, shape=())
_sensor_size = ti.field(dtype=ti.f64, shape=())
_image_distance = ti.field(dtype=ti.f64, shape=())
_object_distance = ti.field(dtype=ti.f64, shape=())
_aperture_radius = ti.field(dtype=ti.f64, shape=())
_yaw = ti.field(dtype=ti.f64, shape=())
_pitch = ti.field(dtype=ti.f64, shape=())


def setup_camera(camera: ThinLensCamera) -> None:
    """Upload a camera configuration to the Taichi fields.

    Must be called before rendering and whenever the camera changes.

    Args:
        camera: Camera configuration.
    """
    _camera_position[None] = camera.position
    _sensor_size[None] = camera.sensor
    _image_distance[None] = camera.image_distance
    _object_distance[None] = camera.object_distance
    _aperture_radius[None] = camera.aperture / 2.0
    _yaw[None] = camera.yaw
    _pitch[None] = camera.pitch

    logger.debug(
        f"Camera set up at {camera.position}: image_distance={camera.image_distance:.6f}, "
        f"aperture={camera.aperture:.6f}"
    )


def get_camera_info() -> dict[str, float]:
    """Get the derived camera state for debugging."""
    return {
        "sensor": float(_sensor_size[None]),
        "image_distance": float(_image_distance[None]),
        "object_distance": float(_object_distance[None]),
        "aperture_radius": float(_aperture_radius[None]),
        "yaw": float(_yaw[None]),
        "pitch": float(_pitch[None]),
    }


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def _orient(v: vec3) -> vec3:
    """Rotate a camera-space vector by pitch, then yaw."""
    pitched = angle_axis(v, _pitch[None], vec3(-1.0, 0.0, 0.0))
    return angle_axis(pitched, _yaw[None], vec3(0.0, -1.0, 0.0))


@ti.func
def get_ray(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    jitter_x: ti.f64,
    jitter_y: ti.f64,
    lens_u: ti.f64,
    lens_v: ti.f64,
) -> Ray:
    """Generate a camera ray for a pixel.

    Args:
        pixel_x: Column, 0 at the left edge.
        pixel_y: Row, 0 at the top edge.
        width: Image width in pixels.
        height: Image height in pixels.
        jitter_x: Sub-pixel offset in [0, 1).
        jitter_y: Sub-pixel offset in [0, 1).
        lens_u: Uniform selecting the radius on the aperture disk.
        lens_v: Uniform selecting the angle on the aperture disk.

    Returns:
        A Ray with unit direction.
    """
    aspect = ti.cast(width, ti.f64) / ti.cast(height, ti.f64)
    vx = ((ti.cast(pixel_x, ti.f64) + jitter_x) / width - 0.5) * aspect
    vy = (ti.cast(pixel_y, ti.f64) + jitter_y) / height - 0.5

    sensor = _sensor_size[None]
    sensor_point = vec3(-vx * sensor, vy * sensor, _image_distance[None])

    # The ray through the lens center is undeviated; where it meets the
    # focus plane every ray from this sensor point converges
    chief = tm.normalize(-sensor_point)
    focus_point = chief * (_object_distance[None] / chief.z)

    r_max = _aperture_radius[None]
    r = ti.sqrt(lens_u * r_max * r_max)
    angle = 2.0 * tm.pi * lens_v
    aperture_point = vec3(r * ti.cos(angle), r * ti.sin(angle), 0.0)

    direction = _orient(tm.normalize(focus_point - aperture_point))
    # Rays leave from the aperture point, not the lens center
    origin = _camera_position[None] + _orient(aperture_point)
    return make_ray(origin, tm.normalize(direction))


# =============================================================================
# Python-side ray query
# =============================================================================

_query_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f64, shape=())


@ti.kernel
def _camera_ray_query(
    px: ti.i32,
    py: ti.i32,
    width: ti.i32,
    height: ti.i32,
    jx: ti.f64,
    jy: ti.f64,
    lu: ti.f64,
    lv: ti.f64,
):
    ray = get_ray(px, py, width, height, jx, jy, lu, lv)
    _query_origin[None] = ray.origin
    _query_direction[None] = ray.direction


def camera_ray(
    pixel_x: int,
    pixel_y: int,
    width: int,
    height: int,
    jitter: tuple[float, float] = (0.5, 0.5),
    lens: tuple[float, float] = (0.0, 0.0),
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Generate one camera ray from Python with explicit random offsets.

    Args:
        pixel_x: Column.
        pixel_y: Row.
        width: Image width.
        height: Image height.
        jitter: Sub-pixel offsets; (0.5, 0.5) is the pixel center.
        lens: Aperture uniforms; (0, 0) is the lens center.

    Returns:
        A tuple (origin, direction).
    """
    _camera_ray_query(pixel_x, pixel_y, width, height, jitter[0], jitter[1], lens[0], lens[1])
    o = _query_origin[None]
    d = _query_direction[None]
    return (float(o[0]), float(o[1]), float(o[2])), (float(d[0]), float(d[1]), float(d[2]))
