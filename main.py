#!/usr/bin/env python3
"""
blockray - A recursive ray tracer for block worlds

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

from blockray.vec3 import Vec3, Color, Point3
from blockray.camera import Camera
from blockray.shapes import Cube
from blockray.scene import Scene
from blockray.materials import Material
from blockray.textures import CheckerTexture, SolidColor
from blockray.lights import PointLight
from blockray.environment import GradientEnvironment, load_skybox
from blockray.renderer import RenderContext, RenderSettings
from blockray.scene_parser import SceneParseError, load_scene
from blockray.errors import ConfigurationError


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the command line."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(name)s [%(levelname)s] %(message)s",
        stream=sys.stdout,
    )


def create_block_materials() -> dict:
    """Procedurally textured stand-ins for the block textures."""
    return {
        'dirt': Material.preset('dirt', CheckerTexture.from_colors(
            4, Color(0.45, 0.30, 0.18), Color(0.38, 0.25, 0.15))),
        'stone': Material.preset('stone', CheckerTexture.from_colors(
            4, Color(0.50, 0.50, 0.50), Color(0.42, 0.42, 0.42))),
        'wood': Material.preset('wood', CheckerTexture.from_colors(
            2, Color(0.62, 0.45, 0.25), Color(0.52, 0.37, 0.20))),
        'gold': Material.preset('gold', SolidColor(Color(0.95, 0.78, 0.25))),
        'water': Material.preset('water', SolidColor(Color(0.20, 0.35, 0.80))),
    }


def create_voxel_scene() -> Scene:
    """Create the block-world demo: a ground slab with a pond, a gold pillar and a wooden hut."""
    m = create_block_materials()
    scene = Scene()

    # Ground slab, columns x = -4..4, rows z = 0..-4; column x = -1 is a trench
    ground = {
        -4: ['dirt', 'stone', 'stone', 'stone', 'dirt'],
        -3: ['dirt', 'stone', 'water', 'stone', 'dirt'],
        -2: ['dirt', 'stone', 'stone', 'stone', 'dirt'],
        -1: ['dirt', None, None, 'dirt', 'dirt'],
        0: ['dirt'] * 5,
        1: ['dirt'] * 5,
        2: ['dirt'] * 5,
        3: ['dirt'] * 5,
        4: ['dirt'] * 5,
    }
    for x, row in ground.items():
        for i, name in enumerate(row):
            if name is not None:
                scene.add(Cube(Point3(x, 0, -i), 1.0, m[name]))

    # Pond bed and the gold blocks in the trench
    scene.add(Cube(Point3(-3, -1, -2), 1.0, m['stone']))
    scene.add(Cube(Point3(-1, -1, -1), 1.0, m['gold']))
    scene.add(Cube(Point3(-1, -1, -2), 1.0, m['gold']))

    # Gold pillar
    scene.add(Cube(Point3(-2, 1, -4), 1.0, m['gold']))
    scene.add(Cube(Point3(-2, 2, -4), 1.0, m['gold']))

    # Wooden hut: four corner posts, a roof ring and two side beams
    for x in (1, 3):
        for z in (-1, -3):
            for y in (1, 2, 3):
                scene.add(Cube(Point3(x, y, z), 1.0, m['wood']))
    scene.add(Cube(Point3(1, 3, -2), 1.0, m['wood']))
    scene.add(Cube(Point3(3, 3, -2), 1.0, m['wood']))
    for z in (-1, -2, -3):
        scene.add(Cube(Point3(2, 3, z), 1.0, m['wood']))

    return scene


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='blockray - A recursive ray tracer for block worlds',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.png
  python main.py --skybox assets/textures --width 1000 --height 600
  python main.py --scene scenes/island.yaml --output island.png
        '''
    )

    parser.add_argument('--scene', type=str, default=None,
                        help='Scene file (YAML or JSON); renders the built-in block world if omitted')
    parser.add_argument('--width', type=int, default=None, help='Image width (default: 500)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 300)')
    parser.add_argument('--fov', type=float, default=None, help='Vertical field of view in degrees (default: 60)')
    parser.add_argument('--depth', type=int, default=None, help='Max reflection/refraction depth (default: 4)')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--skybox', type=str, default=None,
                        help='Directory with right/back/top/bottom/front/left.png sky faces')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--log-level', type=str, default='WARNING', help='Logging level (default: WARNING)')

    args = parser.parse_args()
    setup_logging(args.log_level)

    print("=" * 60)
    print("blockray Ray Tracer")
    print("=" * 60)

    try:
        if args.scene:
            print(f"\nLoading scene: {args.scene}")
            context = load_scene(args.scene)
        else:
            print("\nCreating scene: block world")
            context = RenderContext(
                scene=create_voxel_scene(),
                light=PointLight(Point3(0, 5, 6), 1.5, Color(1, 1, 1)),
                skybox=GradientEnvironment(),
                camera=Camera(Point3(0, 5, 6), Point3(0, 0, 0), Vec3(0, 4, 0)),
                settings=RenderSettings(),
            )

        if args.skybox:
            context.skybox = load_skybox(args.skybox, gamma=context.settings.gamma)
    except (SceneParseError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    overrides = {
        name: value for name, value in (
            ('width', args.width),
            ('height', args.height),
            ('fov', args.fov),
            ('max_recursion', args.depth),
            ('num_threads', args.threads),
        ) if value is not None
    }
    try:
        context.settings = replace(context.settings, **overrides)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    settings = context.settings

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Field of view: {settings.fov}")
    print(f"  Max Depth: {settings.max_recursion}")
    print(f"  Threads: {settings.num_threads}")
    print(f"  Objects in scene: {len(context.scene)}")

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    print("\nRendering...")
    start_time = time.time()

    try:
        framebuffer = context.render(progress_callback=progress_callback)
    except ConfigurationError as e:
        print(f"\nRender aborted: {e}", file=sys.stderr)
        return 1

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Primary rays per second: {(settings.width * settings.height) / elapsed:.0f}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\nSaving to: {args.output}")
    framebuffer.save(args.output, gamma=settings.gamma)

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
