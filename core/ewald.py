"""
Main Ewald Module

Implements Ewald summation for periodic 1/r interactions: the tree-pruned
real-space sum, the reciprocal-space wave sum, the self term and the
dipole correction.
"""

import logging
from typing import List, Optional, Union, Sequence
import numpy as np
from dataclasses import dataclass

from .body import Body, UNASSIGNED_CELL, get_sources, get_targets, set_targets
from .cell import Cell
from .tree import Tree, TreeConfig
from .wave import Waves, init_waves
from .operators import P2P, DFT, IDFT, WaveScaling
from .timer import Timer
from ..kernels import EwaldRealKernel

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class EwaldConfig:
    """Immutable parameters of the Ewald summation."""
    ksize: int                   # Radius of the wave sphere in fundamental wave numbers
    alpha: float                 # Real/reciprocal splitting parameter
    sigma: float                 # Normalization of the reciprocal sum
    cutoff: float                # Real-space truncation radius
    cycle: Union[float, Sequence[float], np.ndarray]  # Periodic box lengths

    def __post_init__(self):
        """Validate configuration."""
        cycle = np.asarray(self.cycle, dtype=np.float64)
        if cycle.ndim == 0:
            cycle = np.full(3, float(cycle))
        if cycle.shape != (3,):
            raise ValueError("Cycle must be a scalar or have 3 components")
        cycle.setflags(write=False)
        object.__setattr__(self, 'cycle', cycle)

        if int(self.ksize) != self.ksize or self.ksize < 0:
            raise ValueError("Ksize must be a non-negative integer")
        object.__setattr__(self, 'ksize', int(self.ksize))
        if self.alpha <= 0:
            raise ValueError("Alpha must be positive")
        if self.sigma <= 0:
            raise ValueError("Sigma must be positive")
        if self.cutoff <= 0:
            raise ValueError("Cutoff must be positive")
        if np.any(cycle <= 0):
            raise ValueError("Cycle lengths must be positive")
        if self.cutoff >= np.min(cycle) / 2:
            raise ValueError("Cutoff must be smaller than half the shortest cycle")

    @property
    def volume(self) -> float:
        """Volume of the periodic cell."""
        return float(np.prod(self.cycle))


class Ewald:
    """
    Ewald summation over a periodic cell.

    Passes must run in this order on a given set of bodies, each one
    completing before the next starts since they add into the same
    accumulators: init_target, real_part, self_term, wave_part,
    dipole_correction. compute() runs the whole sequence.
    """

    def __init__(self, ksize: int, alpha: float, sigma: float, cutoff: float,
                 cycle: Union[float, Sequence[float], np.ndarray],
                 chunk_size: int = 256, timer: Optional[Timer] = None):
        """
        Initialize the Ewald summation.

        Args:
            ksize: Radius of the wave sphere in fundamental wave numbers
            alpha: Splitting parameter
            sigma: Normalization of the reciprocal sum (1/(4 pi) for Coulomb units)
            cutoff: Real-space cutoff radius
            cycle: Periodic box lengths (scalar for a cubic box)
            chunk_size: Bodies per block in the wave transforms
            timer: Instrumentation hook (a fresh Timer if None)
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")

        self.config = EwaldConfig(ksize, alpha, sigma, cutoff, cycle)
        self.timer = timer if timer is not None else Timer()

        self.kernel = EwaldRealKernel(self.alpha)
        self.p2p = P2P(self.kernel, self.cutoff)
        self.dft = DFT(self.cycle, chunk_size)
        self.wave_scaling = WaveScaling(self.alpha, self.sigma, self.cycle)
        self.idft = IDFT(self.cycle, chunk_size)

    @classmethod
    def from_config(cls, config: EwaldConfig, **kwargs) -> 'Ewald':
        """Create an Ewald summation from an existing configuration."""
        return cls(config.ksize, config.alpha, config.sigma, config.cutoff,
                   config.cycle, **kwargs)

    @property
    def ksize(self) -> int:
        return self.config.ksize

    @property
    def alpha(self) -> float:
        return self.config.alpha

    @property
    def sigma(self) -> float:
        return self.config.sigma

    @property
    def cutoff(self) -> float:
        return self.config.cutoff

    @property
    def cycle(self) -> np.ndarray:
        return self.config.cycle

    @property
    def image_bound(self) -> float:
        """Largest radius sum of a leaf pair that one image offset covers exactly."""
        return float(np.min(self.cycle)) / 2 - self.cutoff

    def _neighbor(self, Ci: Cell, Cj: Cell, jcells: List[Cell]) -> int:
        """
        Accumulate real-space interactions of target leaf Ci with the subtree Cj.

        The source subtree is skipped when its bounding sphere, taken at
        the minimum image of its center, cannot reach any body of Ci
        within the cutoff. A leaf pair shares one image offset, so both
        leaves must be small enough that no pair within the cutoff needs
        a different image.

        Returns:
            Number of body pairs that interacted

        Raises:
            ValueError: If a visited leaf pair is too large for one image offset
        """
        dX, Xperiodic = Ci.periodic_offset(Cj, self.cycle)
        R = np.sqrt(np.dot(dX, dX))
        if R - Ci.radius - Cj.radius >= np.sqrt(3) * self.cutoff:
            return 0

        count = 0
        if Cj.is_leaf:
            if Ci.radius + Cj.radius > self.image_bound:
                raise ValueError(
                    f"Leaf radii {Ci.radius:.4g} + {Cj.radius:.4g} exceed "
                    f"{self.image_bound:.4g}; refine the tree (see Ewald.build_tree)")
            count += self.p2p.apply(Ci, Cj, Xperiodic)
        for ichild in Cj.child_range():
            count += self._neighbor(Ci, jcells[ichild], jcells)
        return count

    def real_part(self, cells: List[Cell], jcells: List[Cell]):
        """
        Ewald real part.

        Args:
            cells: Flat target cell list; every leaf is a target
            jcells: Flat source cell list with the root at index 0

        Raises:
            ValueError: If the leaves are too coarse for the periodic image search
        """
        self.timer.start("Ewald real part")
        count = 0
        if jcells:
            Cj = jcells[0]
            for Ci in cells:
                if Ci.is_leaf:
                    count += self._neighbor(Ci, Cj, jcells)
        logger.debug("Ewald real part: %d pair interactions", count)
        self.timer.stop("Ewald real part")

    def self_term(self, bodies: List[Body]):
        """Subtract the self term of the real part from every body."""
        for body in bodies:
            body.trg[0] -= 2 / np.sqrt(np.pi) * body.charge * self.alpha

    def init_waves(self) -> Waves:
        """Initialize the wave set."""
        return init_waves(self.ksize)

    def wave_part(self, ibodies: np.ndarray, jbodies: np.ndarray, num_bodies: int):
        """
        Ewald wave part.

        Args:
            ibodies: Target array (N x 4), contributions are added in place
            jbodies: Source array (N x 4) of positions and charges
            num_bodies: Number of bodies
        """
        self.timer.start("Ewald wave part")
        waves = self.init_waves()
        self.dft.apply(waves, jbodies, num_bodies)
        self.wave_scaling.apply(waves)
        self.idft.apply(waves, ibodies, jbodies, num_bodies)
        logger.debug("Ewald wave part: %d waves, %d bodies", len(waves), num_bodies)
        self.timer.stop("Ewald wave part")

    def get_dipole(self, bodies: List[Body], x0: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Get dipole of entire system.

        Args:
            bodies: Bodies of the system
            x0: Reference origin (origin if None)

        Returns:
            Dipole vector sum_b (x_b - x0) * q_b
        """
        if x0 is None:
            x0 = np.zeros(3)
        dipole = np.zeros(3)
        for body in bodies:
            dipole += (body.position - x0) * body.charge
        return dipole

    def dipole_correction(self, bodies: List[Body], dipole: np.ndarray,
                          num_bodies: int, cycle: np.ndarray):
        """
        Dipole correction.

        Args:
            bodies: Local bodies to correct
            dipole: Dipole of the whole system
            num_bodies: Global number of bodies
            cycle: Periodic box lengths
        """
        cycle = np.broadcast_to(np.asarray(cycle, dtype=np.float64), (3,))
        coef = 4 * np.pi / (3 * cycle[0] * cycle[1] * cycle[2])
        norm = np.dot(dipole, dipole)
        for body in bodies:
            body.trg[0] -= coef * norm / num_bodies / body.charge
            body.trg[1:] -= coef * dipole

    def init_target(self, bodies: List[Body]):
        """Initialize target values."""
        for b, body in enumerate(bodies):
            body.trg[:] = 0
            body.ibody = b
            body.icell = UNASSIGNED_CELL
            body.weight = 1

    def build_tree(self, bodies: List[Body], ncrit: int = 16) -> Tree:
        """
        Build an octree over the periodic cell whose leaves are fine enough
        for the real part.
        """
        config = TreeConfig(ncrit=ncrit, center=self.cycle / 2,
                            size=float(np.max(self.cycle)),
                            max_radius=self.image_bound / 2)
        return Tree(bodies, config)

    def compute(self, bodies: List[Body], tree: Optional[Tree] = None,
                x0: Optional[np.ndarray] = None,
                num_bodies: Optional[int] = None) -> np.ndarray:
        """
        Compute potential and force of all bodies.

        Args:
            bodies: Bodies of the system
            tree: Tree over the bodies (build_tree(bodies) if None); its leaf
                tags are re-applied after the targets are reset
            x0: Reference origin for the dipole (origin if None)
            num_bodies: Global number of bodies (len(bodies) if None)

        Returns:
            Target array (N x 4) in the order of `bodies`
        """
        self.init_target(bodies)
        if tree is None:
            tree = self.build_tree(bodies)
        else:
            tree.tag_bodies()

        self.real_part(tree.cells, tree.cells)
        self.self_term(bodies)

        ibodies = get_targets(bodies)
        jbodies = get_sources(bodies)
        self.wave_part(ibodies, jbodies, len(bodies))
        set_targets(bodies, ibodies)

        dipole = self.get_dipole(bodies, x0)
        if num_bodies is None:
            num_bodies = len(bodies)
        self.dipole_correction(bodies, dipole, num_bodies, self.cycle)

        return get_targets(bodies)

    def energy(self, bodies: List[Body]) -> float:
        """Total energy sum_b q_b * potential_b / 2."""
        return 0.5 * sum(body.charge * body.trg[0] for body in bodies)
