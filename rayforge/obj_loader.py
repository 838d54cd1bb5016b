"""
OBJ file loader for importing triangle meshes.

Supports:
- Vertices (v)
- Faces (f) with fan triangulation of polygons
- v, v/vt, v/vt/vn and v//vn face syntax (only positions are used)
- Negative (relative) indices

Other records (vt, vn, usemtl, o, g, ...) are ignored.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .vec3 import Point3
from .mesh import Mesh

logger = logging.getLogger(__name__)


class OBJLoader:
    """Loader for Wavefront OBJ files."""

    def __init__(self, scale: float = 1.0):
        self.scale = scale
        self.skipped_lines = 0

    def load(self, filename: Union[str, Path], mesh: Optional[Mesh] = None) -> Mesh:
        """Load an OBJ file into a mesh.

        Args:
            filename: Path to the OBJ file
            mesh: Mesh to fill (a new one if None)

        Returns:
            The mesh, with one part per triangle

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(filename)
        if not path.is_file():
            raise FileNotFoundError(f"OBJ file not found: {filename}")

        if mesh is None:
            mesh = Mesh()
        self.skipped_lines = 0

        with open(path, 'r') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()

                # Skip empty lines and comments
                if not line or line.startswith('#'):
                    continue

                parts = line.split()
                cmd = parts[0]

                try:
                    if cmd == 'v':
                        x, y, z = float(parts[1]), float(parts[2]), float(parts[3])
                        mesh.add_vertex(Point3(x * self.scale, y * self.scale, z * self.scale))

                    elif cmd == 'f':
                        indices = self._parse_face(parts[1:], len(mesh.vertices))
                        self._add_face(mesh, indices)

                except (ValueError, IndexError):
                    self.skipped_lines += 1
                    logger.warning("Skipping malformed line %d of %s: %s", line_num, path, line)
                    continue

        logger.info(
            "Loaded %s: %d vertices, %d triangles",
            path, len(mesh.vertices), len(mesh.triangles)
        )
        return mesh

    def _parse_face(self, face_parts: List[str], vertex_count: int) -> List[int]:
        """Parse face position indices into 0-based indices."""
        if len(face_parts) < 3:
            raise ValueError("Face needs at least three vertices")

        indices = []
        for part in face_parts:
            # Position index (required, 1-indexed)
            pos_idx = int(part.split('/')[0])
            if pos_idx < 0:
                pos_idx = vertex_count + pos_idx + 1
            # Checked before triangulating so a bad face adds no triangles
            if not 1 <= pos_idx <= vertex_count:
                raise ValueError(f"Face index {part} out of range ({vertex_count} vertices)")
            indices.append(pos_idx - 1)
        return indices

    def _add_face(self, mesh: Mesh, indices: List[int]) -> None:
        """Triangulate a face (fan triangulation for convex polygons)."""
        i0 = indices[0]
        for k in range(1, len(indices) - 1):
            mesh.add_triangle(i0, indices[k], indices[k + 1])


def read_obj(filename: Union[str, Path], mesh: Optional[Mesh] = None, scale: float = 1.0) -> Mesh:
    """Convenience function to load an OBJ file.

    Args:
        filename: Path to the OBJ file
        mesh: Mesh to fill (a new one if None)
        scale: Scale factor for the vertex positions

    Returns:
        The loaded mesh
    """
    return OBJLoader(scale).load(filename, mesh)


def get_mesh_stats(mesh: Mesh) -> Dict[str, object]:
    """Get statistics about a loaded mesh.

    Returns:
        Dictionary with mesh statistics
    """
    if mesh.box.is_empty():
        min_pt = max_pt = Point3(0, 0, 0)
    else:
        min_pt, max_pt = mesh.box.minimum, mesh.box.maximum
    size = max_pt - min_pt

    return {
        'vertex_count': len(mesh.vertices),
        'triangle_count': len(mesh.triangles),
        'bounds_min': (min_pt.x, min_pt.y, min_pt.z),
        'bounds_max': (max_pt.x, max_pt.y, max_pt.z),
        'size': (size.x, size.y, size.z),
    }
