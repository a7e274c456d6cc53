"""
Cell Module

Represents a cell of the flat, hierarchically linked tree consumed by the
Ewald real-space traversal.
"""

from typing import List, Optional
import numpy as np
from dataclasses import dataclass, field
from enum import Enum

from .body import Body


class CellType(Enum):
    """Type of cell in the tree."""
    ROOT = "root"
    INTERNAL = "internal"
    LEAF = "leaf"


@dataclass
class Cell:
    """
    Represents a cell in the hierarchical tree decomposition.

    Cells live in a flat list. Children of a cell occupy the contiguous
    index range [ichild, ichild + nchild) of that list, and the bodies of
    a cell occupy the contiguous range [body, body + nbody) of the body
    container the cell refers to.

    Attributes:
        center: Geometric center of the cell
        radius: Radius around the center bounding every body in the subtree
        level: Tree level (0 = root)
        body: Index of the first body of the cell
        nbody: Number of bodies in the cell
        ichild: Index of the first child cell
        nchild: Number of child cells (0 for leaves)
        parent: Index of the parent cell (None for root)
        bodies: Body container indexed by the body range
    """
    center: np.ndarray
    radius: float = 0.0
    level: int = 0
    body: int = 0
    nbody: int = 0
    ichild: int = 0
    nchild: int = 0
    parent: Optional[int] = None
    bodies: List[Body] = field(default_factory=list, repr=False)

    def __post_init__(self):
        """Validate and initialize cell properties."""
        self.center = np.asarray(self.center, dtype=np.float64)

    @property
    def is_leaf(self) -> bool:
        """Check if this is a leaf cell."""
        return self.nchild == 0

    @property
    def is_root(self) -> bool:
        """Check if this is the root cell."""
        return self.parent is None

    @property
    def cell_type(self) -> CellType:
        """Return the type of this cell."""
        if self.is_root:
            return CellType.ROOT
        if self.is_leaf:
            return CellType.LEAF
        return CellType.INTERNAL

    def get_bodies(self) -> List[Body]:
        """Return the bodies in the body range of this cell."""
        return self.bodies[self.body:self.body + self.nbody]

    def child_range(self) -> range:
        """Return the indices of the children in the flat cell list."""
        return range(self.ichild, self.ichild + self.nchild)

    def periodic_offset(self, other: 'Cell', cycle: np.ndarray):
        """
        Compute the minimum-image separation to another cell.

        Args:
            other: Source cell
            cycle: Periodic box lengths

        Returns:
            Tuple (dX, Xperiodic) where dX is the center-to-center vector
            wrapped into [-cycle/2, cycle/2] and Xperiodic is the image
            offset that the wrap applied to the source.
        """
        diff = self.center - other.center
        dX = diff - cycle * np.round(diff / cycle)
        return dX, diff - dX

    def __repr__(self) -> str:
        type_str = self.cell_type.value
        return (f"Cell({type_str}, level={self.level}, center={self.center}, "
                f"R={self.radius:.3f}, n={self.nbody})")
