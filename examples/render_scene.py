#!/usr/bin/env python3
"""Render a named scene to a PNG.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene NAME        Scene to render: box or spheres (default: box)
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 400)
    --passes PASSES     Samples per pixel (default: 64)
    --bounces BOUNCES   Maximum path segments (default: 6)
    --strata N          Sub-pixel strata per side (default: 1)
    --seed SEED         Random seed (default: 0)
    --arch ARCH         Taichi backend (default: cpu)
    --output OUTPUT     Output file path (default: <scene>.png)
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --scene spheres --width 320 --height 240 --passes 32
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a named scene to a PNG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", type=str, default="box", help="Scene name (default: box)")
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--height", type=int, default=400, help="Image height in pixels (default: 400)")
    parser.add_argument("--passes", type=int, default=64, help="Samples per pixel (default: 64)")
    parser.add_argument("--bounces", type=int, default=6, help="Maximum path segments (default: 6)")
    parser.add_argument("--strata", type=int, default=1, help="Sub-pixel strata per side (default: 1)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--arch", type=str, default="cpu", help="Taichi backend (default: cpu)")
    parser.add_argument("--output", type=str, default=None, help="Output file path (default: <scene>.png)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_scene(
    scene_name: str,
    width: int,
    height: int,
    passes: int,
    bounces: int,
    strata: int,
    output_path: str,
    quiet: bool = False,
) -> Path:
    """Render a named scene and save it.

    Raises:
        ValueError: If the scene name is unknown.
    """
    # Lazy imports: Taichi must be initialized first
    from pathlight.core.progressive import ProgressiveRenderer
    from pathlight.core.settings import RenderSettings
    from pathlight.core.tracer import Tracer
    from pathlight.scene.presets import available_scenes, load_scene

    scene = load_scene(scene_name)
    if scene is None:
        raise ValueError(f"Unknown scene '{scene_name}'. Available: {', '.join(available_scenes())}")

    if not quiet:
        print(f"Rendering '{scene_name}' ({width}x{height}, {passes} passes, {bounces} bounces)...")

    settings = RenderSettings(width=width, height=height, bounces=bounces, strata=strata)
    renderer = ProgressiveRenderer(Tracer(scene, settings))

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            rate = current / elapsed if elapsed > 0 else 0
            print(f"\r  Progress: {current}/{target} passes - {rate:.2f} passes/s", end="", flush=True)

    renderer.render(passes, callback=progress_callback)

    if not quiet:
        print()

    output_file = Path(output_path)
    renderer.save_image(str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    from pathlight import runtime

    try:
        runtime.init(arch=args.arch, seed=args.seed)
        render_scene(
            scene_name=args.scene,
            width=args.width,
            height=args.height,
            passes=args.passes,
            bounces=args.bounces,
            strata=args.strata,
            output_path=args.output or f"{args.scene}.png",
            quiet=args.quiet,
        )
        return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
