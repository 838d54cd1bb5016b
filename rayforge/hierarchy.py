"""
Bounding volume hierarchy over the parts of all objects in a scene.

The hierarchy holds one entry per (object, part) pair. Entries are first
reordered so that neighbours in the list are neighbours in space, then a
binary tree is built over contiguous ranges of the reordered list: every
leaf owns at most `max_leaf_size` entries and every interior box is the
union of its children's boxes.

Entries refer to objects by their index in the world's object list, so the
hierarchy never owns geometry. It is built once per render pass and is
read-only afterwards, which makes it safe to share between render threads.

Searching the hierarchy must report the same closest hit as testing every
part of every object; only the amount of work differs.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging
import math
import numpy as np

from .ray import Ray
from .box import Box
from .shapes import SceneObject, Hit, NO_INTERSECTION, small_t

logger = logging.getLogger(__name__)

# Entry boxes are grown by this fraction of their extent (plus small_t) so
# that hits accepted just outside a triangle's edge still fall inside them.
box_padding = 1e-3

HitKey = Tuple[float, int, int]


@dataclass
class Entry:
    """One part of one object, keyed by its bounding box."""
    box: Box
    object_index: int
    part: int


class HierarchyNode:
    """A node of the hierarchy tree.

    Leaves own the entry range [start, end); interior nodes have two
    children covering the two halves of their range.
    """

    __slots__ = ('box', 'start', 'end', 'left', 'right')

    def __init__(self, box: Box, start: int, end: int,
                 left: Optional[HierarchyNode] = None,
                 right: Optional[HierarchyNode] = None):
        self.box = box
        self.start = start
        self.end = end
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.left is None

    def __repr__(self) -> str:
        kind = "Leaf" if self.is_leaf else "Node"
        return f"{kind}([{self.start}, {self.end}), box={self.box})"


def _split(start: int, end: int) -> int:
    return start + (end - start) // 2


class Hierarchy:
    """Bounding Volume Hierarchy acceleration structure."""

    def __init__(self, max_leaf_size: int = 4):
        """Create an empty hierarchy.

        Args:
            max_leaf_size: Maximum entries per leaf node
        """
        if max_leaf_size < 1:
            raise ValueError(f"max_leaf_size must be at least 1, got {max_leaf_size}")
        self.max_leaf_size = max_leaf_size
        self.entries: List[Entry] = []
        self.root: Optional[HierarchyNode] = None

    def add_entry(self, box: Box, object_index: int, part: int) -> None:
        self.entries.append(Entry(box.padded(box_padding, small_t), object_index, part))

    def reorder_entries(self) -> None:
        """Sort entries so that entries close in the list are close in space.

        Each range is sorted by box center along the longest axis of its
        centers and split at the median, recursively, using the same split
        points that build_tree uses. The result is deterministic.
        """
        if not self.entries:
            return
        centers = np.array([entry.box.center().to_array() for entry in self.entries])
        order = list(range(len(self.entries)))
        self._reorder(order, centers, 0, len(order))
        self.entries = [self.entries[k] for k in order]

    def _reorder(self, order: List[int], centers: np.ndarray, start: int, end: int) -> None:
        if end - start <= self.max_leaf_size:
            return

        span_centers = centers[order[start:end]]
        extent = span_centers.max(axis=0) - span_centers.min(axis=0)
        axis = int(np.argmax(extent))

        order[start:end] = sorted(order[start:end], key=lambda k: centers[k][axis])

        mid = _split(start, end)
        self._reorder(order, centers, start, mid)
        self._reorder(order, centers, mid, end)

    def build_tree(self) -> None:
        """Build the tree over the (already reordered) entries."""
        if not self.entries:
            self.root = None
            return
        self.root = self._build(0, len(self.entries))
        logger.debug("Built hierarchy over %d entries", len(self.entries))

    def _build(self, start: int, end: int) -> HierarchyNode:
        if end - start <= self.max_leaf_size:
            box = Box()
            for entry in self.entries[start:end]:
                box = box.union(entry.box)
            return HierarchyNode(box, start, end)

        mid = _split(start, end)
        left = self._build(start, mid)
        right = self._build(mid, end)
        return HierarchyNode(left.box.union(right.box), start, end, left, right)

    def intersection_candidates(self, ray: Ray) -> List[int]:
        """Indices of all entries in leaves whose boxes the ray enters."""
        candidates: List[int] = []
        if self.root is not None:
            self._collect(self.root, ray, candidates)
        return candidates

    def _collect(self, node: HierarchyNode, ray: Ray, candidates: List[int]) -> None:
        if node.box.intersection(ray) is None:
            return
        if node.is_leaf:
            candidates.extend(range(node.start, node.end))
            return
        self._collect(node.left, ray, candidates)
        self._collect(node.right, ray, candidates)

    def closest_intersection(self, ray: Ray, objects: Sequence[SceneObject]) -> Hit:
        """Find the closest hit with dist > small_t, or NO_INTERSECTION.

        Children are visited nearest box first and a subtree is skipped once
        its box starts beyond the best hit found so far. Equal distances are
        broken by (object index, part), matching a linear scan in order.
        """
        if self.root is None:
            return NO_INTERSECTION

        t_root = self.root.box.intersection(ray)
        if t_root is None:
            return NO_INTERSECTION

        best, _ = self._closest(self.root, t_root, ray, objects,
                                (NO_INTERSECTION, (math.inf, -1, -1)))
        return best

    def _closest(
        self,
        node: HierarchyNode,
        t_near: float,
        ray: Ray,
        objects: Sequence[SceneObject],
        best: Tuple[Hit, HitKey],
    ) -> Tuple[Hit, HitKey]:
        if t_near > best[1][0]:
            return best

        if node.is_leaf:
            for entry in self.entries[node.start:node.end]:
                hit = objects[entry.object_index].intersection(ray, entry.part)
                if not hit or hit.dist <= small_t:
                    continue
                key = (hit.dist, entry.object_index, entry.part)
                if key < best[1]:
                    best = (hit, key)
            return best

        children = []
        for child in (node.left, node.right):
            t_child = child.box.intersection(ray)
            if t_child is not None:
                children.append((t_child, child))
        children.sort(key=lambda item: item[0])

        for t_child, child in children:
            best = self._closest(child, t_child, ray, objects, best)
        return best

    def __len__(self) -> int:
        """Return the number of entries in the hierarchy."""
        return len(self.entries)
