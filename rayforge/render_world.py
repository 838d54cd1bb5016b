"""
Render world - the heart of the ray tracer.

Owns the scene (objects, lights, camera, background) and implements:
- Closest-intersection search, by linear scan or through the hierarchy
- Recursive ray casting with shadow queries and a depth limit
- The per-pixel render loop, optionally spread across a thread pool
"""

from __future__ import annotations
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera, CameraConfigurationError, pixel_color
from .shapes import SceneObject, Hit, NO_INTERSECTION, small_t
from .hierarchy import Hierarchy
from .lights import Light, LightSample
from .shaders import Shader, FlatShader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderSettings:
    """Configuration for a render pass.

    Attributes:
        disable_hierarchy: Search every part of every object instead of the hierarchy
        enable_shadows: Cast shadow rays toward lights
        recursion_depth_limit: Deepest ray evaluated; primary rays have depth 1
        ambient_intensity: Scale of the ambient term
        ambient_color: Color of the ambient light
        num_threads: Render threads (0 = auto-detect)
        max_leaf_size: Maximum entries per hierarchy leaf
    """
    disable_hierarchy: bool = False
    enable_shadows: bool = True
    recursion_depth_limit: int = 3
    ambient_intensity: float = 0.0
    ambient_color: Color = field(default_factory=lambda: Color(1.0, 1.0, 1.0))
    num_threads: int = 1
    max_leaf_size: int = 4

    def __post_init__(self):
        if self.recursion_depth_limit < 0:
            raise ValueError(
                f"recursion_depth_limit must be >= 0, got {self.recursion_depth_limit}"
            )
        if self.num_threads < 0:
            raise ValueError(f"num_threads must be >= 0, got {self.num_threads}")
        if self.max_leaf_size < 1:
            raise ValueError(f"max_leaf_size must be >= 1, got {self.max_leaf_size}")
        if self.num_threads == 0:
            object.__setattr__(self, 'num_threads', os.cpu_count() or 4)


class RenderWorld:
    """A scene plus everything needed to render it."""

    def __init__(self, camera: Optional[Camera] = None, settings: Optional[RenderSettings] = None):
        """Create an empty world.

        Args:
            camera: The camera to render from (a default camera if None)
            settings: Render configuration (uses defaults if None)
        """
        self.camera = camera if camera else Camera()
        self.settings = settings if settings else RenderSettings()
        self.objects: List[SceneObject] = []
        self.lights: List[Light] = []
        self.background_shader: Shader = FlatShader(Color(0, 0, 0))
        self.hierarchy = Hierarchy(self.settings.max_leaf_size)
        self._hierarchy_ready = False
        self._progress_callback: Optional[Callable[[float], None]] = None

    def add_object(self, obj: SceneObject) -> int:
        """Add an object. Returns its index, used by hierarchy entries."""
        self.objects.append(obj)
        self._hierarchy_ready = False
        return len(self.objects) - 1

    def add_light(self, light: Light) -> None:
        self.lights.append(light)

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def initialize_hierarchy(self) -> None:
        """Rebuild the hierarchy with one entry for each part of each object."""
        self.hierarchy = Hierarchy(self.settings.max_leaf_size)
        for index, obj in enumerate(self.objects):
            for part in range(obj.number_parts):
                self.hierarchy.add_entry(obj.bounding_box(part), index, part)

        self.hierarchy.reorder_entries()
        self.hierarchy.build_tree()
        self._hierarchy_ready = True

    def closest_intersection(self, ray: Ray) -> Hit:
        """Find the closest hit with dist > small_t.

        Uses the hierarchy unless it is disabled in the settings. Both
        paths report the same hit.

        Returns:
            The closest Hit, or NO_INTERSECTION
        """
        if self.settings.disable_hierarchy:
            return self.brute_force_intersection(ray)

        if not self._hierarchy_ready:
            self.initialize_hierarchy()
        return self.hierarchy.closest_intersection(ray, self.objects)

    def brute_force_intersection(self, ray: Ray) -> Hit:
        """Test every part of every object and keep the nearest hit."""
        closest = NO_INTERSECTION

        for obj in self.objects:
            for part in range(obj.number_parts):
                hit = obj.intersection(ray, part)
                # Strict comparison keeps the first of equally distant hits
                if hit and small_t < hit.dist < closest.dist:
                    closest = hit

        return closest

    def light_visible(self, point, sample: LightSample) -> bool:
        """Whether light arriving at point along sample is unoccluded.

        Always true when shadows are disabled.
        """
        if not self.settings.enable_shadows:
            return True

        shadow_ray = Ray(point, sample.direction)
        blocker = self.closest_intersection(shadow_ray)
        return not (blocker and blocker.dist < sample.distance)

    def cast_ray(self, ray: Ray, recursion_depth: int) -> Color:
        """Color seen along a ray.

        Args:
            ray: The ray to trace
            recursion_depth: Depth of this ray; primary rays are depth 1

        Returns:
            Black beyond the depth limit, the background on a miss,
            otherwise the hit object's shading
        """
        if recursion_depth > self.settings.recursion_depth_limit:
            return Color(0, 0, 0)

        hit = self.closest_intersection(ray)

        if not hit:
            return self.background_shader.shade_surface(
                self, ray, ray.endpoint, -ray.direction, recursion_depth
            )

        point = ray.point(hit.dist)
        normal = hit.object.normal(point, hit.part)
        shader = hit.object.material_shader or self.background_shader
        return shader.shade_surface(self, ray, point, normal, recursion_depth)

    def render_pixel(self, pixel_index: Tuple[int, int]) -> None:
        """Trace the primary ray of one pixel and store its color."""
        target = self.camera.world_position(pixel_index)
        ray = Ray(self.camera.position, target - self.camera.position)
        color = self.cast_ray(ray, 1)
        self.camera.set_pixel(pixel_index, pixel_color(color))

    def render(self) -> np.ndarray:
        """Render every pixel once into the camera's buffer.

        Returns:
            The camera's pixel buffer, shape (rows, cols, 3), row 0 at the bottom

        Raises:
            CameraConfigurationError: If the camera has no resolution
        """
        cols, rows = self.camera.number_pixels
        if cols <= 0 or rows <= 0:
            raise CameraConfigurationError("Camera resolution has not been set")

        if not self.settings.disable_hierarchy:
            self.initialize_hierarchy()

        logger.info(
            "Rendering %dx%d with %d objects, %d lights (hierarchy %s, %d threads)",
            cols, rows, len(self.objects), len(self.lights),
            "off" if self.settings.disable_hierarchy else "on",
            self.settings.num_threads,
        )

        completed_rows = [0]
        lock = threading.Lock()

        def render_row(j: int) -> None:
            for i in range(cols):
                self.render_pixel((i, j))

            # Callbacks run one at a time and see progress in increasing order
            with lock:
                completed_rows[0] += 1
                if self._progress_callback:
                    self._progress_callback(completed_rows[0] / rows)

        # Pixels are independent and each row is written by exactly one task
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                list(executor.map(render_row, range(rows)))
        else:
            for j in range(rows):
                render_row(j)

        return self.camera.colors
