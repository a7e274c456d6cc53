"""
Body Module

Represents a single body of the periodic system with position, charge and
the target accumulator filled by the Ewald passes.
"""

from typing import List
import numpy as np
from dataclasses import dataclass, field


# Owning-cell tag of a body that has not been placed in a tree yet
UNASSIGNED_CELL = -1


@dataclass
class Body:
    """
    Represents a body in the periodic N-body system.

    Attributes:
        position: Body coordinates (x, y, z)
        charge: Source strength/charge of the body
        trg: Target accumulator [potential, fx, fy, fz]
        ibody: Stable original index of the body
        icell: Index of the owning leaf cell
        weight: Algorithm weight (used for load balancing)
    """
    position: np.ndarray
    charge: float
    trg: np.ndarray = field(default_factory=lambda: np.zeros(4))
    ibody: int = 0
    icell: int = UNASSIGNED_CELL
    weight: float = 1.0

    def __post_init__(self):
        """Validate body properties after initialization."""
        self.position = np.asarray(self.position, dtype=np.float64)
        self.trg = np.asarray(self.trg, dtype=np.float64)
        if self.position.shape != (3,):
            raise ValueError("Body position must have 3 components")
        if self.trg.shape != (4,):
            raise ValueError("Body target must have 4 components")

    @property
    def potential(self) -> float:
        """Return the accumulated potential."""
        return self.trg[0]

    @property
    def force(self) -> np.ndarray:
        """Return the accumulated force components (view into trg)."""
        return self.trg[1:]

    def distance_to(self, other: 'Body') -> float:
        """Compute Euclidean distance to another body (no periodic wrap)."""
        return np.linalg.norm(self.position - other.position)

    def __repr__(self) -> str:
        return f"Body(id={self.ibody}, pos={self.position}, q={self.charge:.3f})"


def get_sources(bodies: List[Body]) -> np.ndarray:
    """
    Pack body positions and charges into an (N, 4) source array.

    Columns 0-2 hold the position, column 3 the charge.
    """
    jbodies = np.zeros((len(bodies), 4))
    for b, body in enumerate(bodies):
        jbodies[b, :3] = body.position
        jbodies[b, 3] = body.charge
    return jbodies


def get_targets(bodies: List[Body]) -> np.ndarray:
    """Copy body accumulators into an (N, 4) target array."""
    if not bodies:
        return np.zeros((0, 4))
    return np.array([body.trg for body in bodies])


def set_targets(bodies: List[Body], ibodies: np.ndarray):
    """Write an (N, 4) target array back into the body accumulators."""
    for body, trg in zip(bodies, ibodies):
        body.trg[:] = trg
