#!/usr/bin/env python3
"""
RayForge - A Python Whitted-style Ray Tracer

Main entry point for rendering scenes.
"""

import argparse
import dataclasses
import logging
import math
import sys
import time
from pathlib import Path

from rayforge.vec3 import Vec3, Color, Point3
from rayforge.camera import Camera, CameraConfigurationError
from rayforge.shapes import Plane, Sphere
from rayforge.mesh import Mesh
from rayforge.shaders import FlatShader, PhongShader, ReflectiveShader
from rayforge.lights import PointLight
from rayforge.render_world import RenderWorld, RenderSettings
from rayforge.scene_parser import SceneParseError, load_scene
from rayforge.image_output import save_image

logger = logging.getLogger("rayforge")


def create_demo_scene(width: int, height: int) -> RenderWorld:
    """Create a demo scene: a floor, two spheres and a reflective tetrahedron."""
    camera = Camera()
    camera.position_and_aim(Point3(0, 1.5, 6), Point3(0, 0.5, 0), Vec3(0, 1, 0))
    camera.focus(1.0, width / height, math.radians(70))
    camera.set_resolution((width, height))

    world = RenderWorld(camera, RenderSettings(ambient_intensity=0.2))
    world.background_shader = FlatShader(Color(0.1, 0.1, 0.2))

    gray = PhongShader(Color(0.5, 0.5, 0.5), Color(0.5, 0.5, 0.5), Color(0, 0, 0), 1)
    red = PhongShader(Color(1, 0, 0), Color(1, 0, 0), Color(1, 1, 1), 50)
    blue = PhongShader(Color(0, 0, 1), Color(0, 0, 1), Color(1, 1, 1), 50)
    mirror = ReflectiveShader(PhongShader(Color(1, 1, 1), Color(1, 1, 1), Color(1, 1, 1), 50), 0.7)

    world.add_object(Plane(Point3(0, -1.01, 0), Vec3(0, 1, 0), gray))
    world.add_object(Sphere(Point3(-2, 0, 0), 1.0, red))
    world.add_object(Sphere(Point3(2, 0, -1), 1.0, blue))

    tetrahedron = Mesh(mirror)
    for vertex in (Point3(0, -1, 1), Point3(1, -1, -1), Point3(-1, -1, -1), Point3(0, 1.2, 0)):
        tetrahedron.add_vertex(vertex)
    for face in ((0, 1, 3), (1, 2, 3), (2, 0, 3), (0, 2, 1)):
        tetrahedron.add_triangle(*face)
    world.add_object(tetrahedron)

    world.add_light(PointLight(Point3(0, 6, 6), Color(1, 1, 1), 400))
    world.add_light(PointLight(Point3(-6, 4, 2), Color(1, 1, 1), 150))
    return world


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='RayForge - A Python Whitted-style Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.png
  python main.py scenes/bunny.yaml --output bunny.png
  python main.py scenes/bunny.yaml --no-hierarchy --no-shadows
        '''
    )

    parser.add_argument('scene', nargs='?', help='Scene file (YAML or JSON); demo scene if omitted')
    parser.add_argument('--output', '-o', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--width', type=int, default=320, help='Demo scene width (default: 320)')
    parser.add_argument('--height', type=int, default=240, help='Demo scene height (default: 240)')
    parser.add_argument('--depth', type=int, default=None, help='Recursion depth limit')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--no-hierarchy', action='store_true', help='Disable the acceleration hierarchy')
    parser.add_argument('--no-shadows', action='store_true', help='Disable shadow rays')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    # Load everything before any rendering starts; failures here are fatal
    try:
        if args.scene:
            world = load_scene(args.scene)
        else:
            world = create_demo_scene(args.width, args.height)

        overrides = {}
        if args.depth is not None:
            overrides['recursion_depth_limit'] = args.depth
        if args.threads is not None:
            overrides['num_threads'] = args.threads
        if args.no_hierarchy:
            overrides['disable_hierarchy'] = True
        if args.no_shadows:
            overrides['enable_shadows'] = False
        if overrides:
            world.settings = dataclasses.replace(world.settings, **overrides)

    except (SceneParseError, CameraConfigurationError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    cols, rows = world.camera.number_pixels
    logger.info("Scene: %s", args.scene or 'demo')
    logger.info("  Resolution: %dx%d", cols, rows)
    logger.info("  Objects: %d, Lights: %d", len(world.objects), len(world.lights))
    logger.info("  Recursion depth limit: %d", world.settings.recursion_depth_limit)

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct >= last_progress[0] + 10:
            last_progress[0] = pct
            logger.info("Rendering: %d%%", pct)

    world.set_progress_callback(progress_callback)

    start_time = time.time()
    world.render()
    elapsed = time.time() - start_time
    logger.info("Render completed in %.2f seconds", elapsed)

    save_image(world.camera, Path(args.output))
    return 0


if __name__ == '__main__':
    sys.exit(main())
