"""
Tree Module

Builds the flat octree consumed by the Ewald real-space traversal.
"""

import logging
from collections import deque
from typing import List, Optional, Tuple
import numpy as np
from dataclasses import dataclass

from .body import Body
from .cell import Cell

logger = logging.getLogger(__name__)


@dataclass
class TreeConfig:
    """Configuration for tree construction."""
    ncrit: int = 16                  # Maximum bodies per leaf (adaptive refinement)
    max_depth: int = 10              # Maximum tree depth
    center: Optional[np.ndarray] = None  # Root box center (bounding box if None)
    size: Optional[float] = None         # Root box side length (bounding box if None)
    max_radius: Optional[float] = None   # Maximum leaf radius (no limit if None)

    def __post_init__(self):
        """Validate configuration."""
        if self.max_depth < 0:
            raise ValueError("Max depth must be non-negative")
        if self.ncrit <= 0:
            raise ValueError("Ncrit must be positive")
        if self.size is not None and self.size <= 0:
            raise ValueError("Root box size must be positive")
        if self.max_radius is not None and self.max_radius <= 0:
            raise ValueError("Max radius must be positive")
        if self.center is not None:
            self.center = np.asarray(self.center, dtype=np.float64)
            if self.center.shape != (3,):
                raise ValueError("Root box center must have 3 components")


class Tree:
    """
    Adaptive octree stored as a flat, breadth-first list of cells.

    The root is cells[0], the children of every cell are contiguous in
    the list, and self.bodies is reordered so that every cell owns a
    contiguous range of it.
    """

    def __init__(self, bodies: List[Body], config: Optional[TreeConfig] = None):
        """
        Initialize the tree with bodies.

        Args:
            bodies: Bodies to organize in the tree (the list is not modified)
            config: Tree configuration parameters
        """
        if config is None:
            config = TreeConfig()

        self.config = config
        self.bodies: List[Body] = list(bodies)
        self.cells: List[Cell] = []
        self.leaves: List[Cell] = []

        if self.bodies:
            self._build_tree()

    @property
    def root(self) -> Optional[Cell]:
        """Return the root cell."""
        return self.cells[0] if self.cells else None

    def _compute_bounding_box(self) -> Tuple[np.ndarray, float]:
        """
        Compute the cubic root box for all bodies.

        Returns:
            Tuple of (center, size)
        """
        if self.config.center is not None and self.config.size is not None:
            return self.config.center, float(self.config.size)

        positions = np.array([b.position for b in self.bodies])
        min_coords = np.min(positions, axis=0)
        max_coords = np.max(positions, axis=0)

        center = (min_coords + max_coords) / 2.0
        size = np.max(max_coords - min_coords)

        # Add small padding to avoid boundary issues
        size = max(size * 1.01, 1e-12)

        if self.config.center is not None:
            center = self.config.center
        if self.config.size is not None:
            size = float(self.config.size)
        return center, size

    def _build_tree(self):
        """Build the flat cell list breadth first."""
        center, size = self._compute_bounding_box()
        positions = np.array([b.position for b in self.bodies])
        order = np.arange(len(self.bodies))

        root = Cell(center=center, level=0, body=0, nbody=len(self.bodies))
        self.cells = [root]

        # Each entry: (cell index, half side length of the cell box)
        queue = deque([(0, size / 2.0)])
        while queue:
            icell, half = queue.popleft()
            cell = self.cells[icell]
            if cell.level >= self.config.max_depth:
                continue
            if not self._needs_split(cell, positions[order[cell.body:cell.body + cell.nbody]]):
                continue
            self._subdivide_cell(icell, half, positions, order)
            for ichild in cell.child_range():
                queue.append((ichild, half / 2.0))

        self.bodies = [self.bodies[i] for i in order]
        self._finalize_cells(positions[order])

        logger.debug("Built tree with %d cells, %d leaves, depth %d",
                     len(self.cells), len(self.leaves), self.get_max_level())

    def _needs_split(self, cell: Cell, X: np.ndarray) -> bool:
        """Check the body count and, if limited, the radius of a cell."""
        if cell.nbody > self.config.ncrit:
            return True
        if self.config.max_radius is None:
            return False
        return _radius(cell.center, X) > self.config.max_radius

    def _subdivide_cell(self, icell: int, half: float,
                        positions: np.ndarray, order: np.ndarray):
        """
        Split a cell into its non-empty octants.

        The body range of the cell in `order` is sorted by octant so that
        every child owns a contiguous sub-range.
        """
        cell = self.cells[icell]
        begin, end = cell.body, cell.body + cell.nbody
        index = order[begin:end]

        above = positions[index] >= cell.center
        octant = above[:, 0] * 1 + above[:, 1] * 2 + above[:, 2] * 4
        sort = np.argsort(octant, kind='stable')
        order[begin:end] = index[sort]
        counts = np.bincount(octant, minlength=8)

        cell.ichild = len(self.cells)
        offset = begin
        for i in range(8):
            if counts[i] == 0:
                continue
            sign = np.array([(i >> d) & 1 for d in range(3)]) * 2 - 1
            child = Cell(
                center=cell.center + sign * half / 2.0,
                level=cell.level + 1,
                body=offset,
                nbody=int(counts[i]),
                parent=icell,
            )
            self.cells.append(child)
            offset += int(counts[i])
        cell.nchild = len(self.cells) - cell.ichild

    def _finalize_cells(self, positions: np.ndarray):
        """Attach the body container, compute radii and tag leaf bodies."""
        self.leaves = []
        for cell in self.cells:
            cell.bodies = self.bodies
            cell.radius = _radius(cell.center, positions[cell.body:cell.body + cell.nbody])
            if cell.is_leaf:
                self.leaves.append(cell)
        self.tag_bodies()

    def tag_bodies(self):
        """Set the icell of every body to the index of its leaf."""
        for icell, cell in enumerate(self.cells):
            if cell.is_leaf:
                for body in cell.get_bodies():
                    body.icell = icell

    def get_max_level(self) -> int:
        """Return the maximum tree level."""
        return max((cell.level for cell in self.cells), default=0)

    def get_cells_at_level(self, level: int) -> List[Cell]:
        """Get all cells at a specific level."""
        return [cell for cell in self.cells if cell.level == level]

    def get_statistics(self) -> dict:
        """
        Compute and return tree statistics.

        Returns:
            Dictionary with tree statistics
        """
        nbodies = [leaf.nbody for leaf in self.leaves]

        return {
            'num_bodies': len(self.bodies),
            'num_cells': len(self.cells),
            'num_leaves': len(self.leaves),
            'max_depth': self.get_max_level(),
            'avg_bodies_per_leaf': np.mean(nbodies) if nbodies else 0.0,
            'max_bodies_per_leaf': max(nbodies, default=0),
            'max_leaf_radius': max((leaf.radius for leaf in self.leaves), default=0.0),
        }

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (f"Tree(N={stats['num_bodies']}, "
                f"cells={stats['num_cells']}, "
                f"leaves={stats['num_leaves']}, "
                f"depth={stats['max_depth']})")


def _radius(center: np.ndarray, X: np.ndarray) -> float:
    """Largest distance of the points X from center."""
    return float(np.max(np.linalg.norm(X - center, axis=1)))
