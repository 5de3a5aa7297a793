"""Taichi runtime initialization for the path tracer.

All geometry and radiance math runs in 64-bit floating point, so Taichi
must be initialized with ``default_fp=ti.f64`` before any module that
declares fields is imported. The random seed passed here seeds Taichi's
per-thread generators, which makes renders reproducible for a given
backend and launch configuration.

Example:
    >>> from pathlight import runtime
    >>> runtime.init(arch="cpu", seed=7)
    >>> from pathlight.scene.presets import load_scene  # safe after init
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)

# Architecture names accepted by init()
_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
}

_initialized = False


def init(arch: str = "cpu", seed: int = 0, debug: bool = False) -> None:
    """Initialize Taichi for 64-bit rendering.

    Args:
        arch: Backend name ("cpu", "gpu", "cuda" or "vulkan"). The backend
            must support 64-bit floats.
        seed: Seed for Taichi's per-thread random number generators.
        debug: Enable Taichi's debug mode (bounds checks).

    Raises:
        ValueError: If the architecture name is unknown.
    """
    global _initialized

    if arch not in _ARCHES:
        raise ValueError(f"Unknown Taichi arch '{arch}'. Expected one of {sorted(_ARCHES)}")

    ti.init(arch=_ARCHES[arch], default_fp=ti.f64, random_seed=seed, debug=debug)
    _initialized = True
    logger.info(f"Taichi initialized: arch={arch}, seed={seed}, default_fp=f64")


def is_initialized() -> bool:
    """Return True once init() has been called in this process."""
    return _initialized
