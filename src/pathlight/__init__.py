"""Monte Carlo path tracer built on Taichi.

This package estimates per-pixel radiance by tracing random light paths
through scenes of spheres, with:
- Thin-lens camera with depth of field
- A blended material model (glossy reflection, refraction, absorption,
  diffuse scattering with light sampling)
- Progressive accumulation into a gamma-corrected exposure buffer
- Lane-partitioned parallel sampling with a producer/consumer queue

Subpackages:
    core: Vector utilities, the integrator, the sensor and parallel sampling
    geometry: Sphere primitive and intersection
    materials: Material model, sampling strategies and scattering
    scene: Scene storage, management and named presets
    camera: Thin-lens camera
    preview: Screens, image export and the preview window

Call pathlight.runtime.init() before importing modules that declare Taichi
fields.
"""

__version__ = "0.1.0"
