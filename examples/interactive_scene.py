#!/usr/bin/env python3
"""Render a named scene into a live preview window.

Samples are produced on a background thread in lane batches and drained
into the window every frame until it is closed.

Usage:
    python -m examples.interactive_scene [--scene NAME] [--width W] [--height H]

Example:
    python -m examples.interactive_scene --scene spheres --width 640 --height 480
"""

from __future__ import annotations

import argparse
import logging
import sys


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Render a named scene into a preview window.")
    parser.add_argument("--scene", type=str, default="spheres", help="Scene name (default: spheres)")
    parser.add_argument("--width", type=int, default=640, help="Window width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=480, help="Window height in pixels (default: 480)")
    parser.add_argument("--bounces", type=int, default=6, help="Maximum path segments (default: 6)")
    parser.add_argument("--lanes", type=int, default=10, help="Parallel raster lanes (default: 10)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument("--arch", type=str, default="cpu", help="Taichi backend (default: cpu)")
    return parser.parse_args()


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.INFO)

    from pathlight import runtime

    runtime.init(arch=args.arch, seed=args.seed)

    from pathlight.core.parallel import ParallelTracer
    from pathlight.core.settings import RenderSettings
    from pathlight.core.tracer import Tracer
    from pathlight.preview.interactive import WindowScreen, run_interactive
    from pathlight.scene.presets import available_scenes, load_scene

    if not WindowScreen.is_display_available():
        print("Error: no display available for the preview window", file=sys.stderr)
        return 1

    scene = load_scene(args.scene)
    if scene is None:
        print(f"Error: unknown scene '{args.scene}'. Available: {', '.join(available_scenes())}", file=sys.stderr)
        return 1

    settings = RenderSettings(width=args.width, height=args.height, bounces=args.bounces, lanes=args.lanes)
    tracer = Tracer(scene, settings)
    screen = WindowScreen(args.width, args.height, title=f"pathlight - {args.scene}")

    samples = run_interactive(ParallelTracer(tracer), screen)
    print(f"Applied {samples} samples")
    return 0


if __name__ == "__main__":
    sys.exit(main())
