"""
Operators Module

Implements the Ewald operators: the real-space P2P kernel and the
reciprocal-space forward transform, wave scaling and inverse transform.
"""

from abc import ABC, abstractmethod
import numpy as np

from .cell import Cell
from .wave import Waves
from ..kernels import EwaldRealKernel


class Operator(ABC):
    """
    Abstract base class for Ewald operators.

    All operators implement a common interface for applying
    the operation to cells, waves or body arrays.
    """

    @abstractmethod
    def apply(self, *args, **kwargs):
        """Apply the operator."""
        pass


class P2P(Operator):
    """
    Body-to-body (P2P) operator for the Ewald real-space sum.

    Accumulates the screened interaction of every source body of a leaf
    into every target body of another leaf, for one periodic image of the
    source. Pairs at zero distance or beyond the cutoff are skipped.
    Only the target accumulators are updated.

    Complexity: O(Ni * Nj) per leaf pair
    """

    def __init__(self, kernel: EwaldRealKernel, cutoff: float):
        self.kernel = kernel
        self.cutoff = cutoff

    def apply(self, Ci: Cell, Cj: Cell, Xperiodic: np.ndarray) -> int:
        """
        Apply P2P operator between two leaf cells.

        Args:
            Ci: Target leaf cell
            Cj: Source leaf cell
            Xperiodic: Offset of the source image (subtracted from target - source)

        Returns:
            Number of body pairs that interacted
        """
        targets = Ci.get_bodies()
        sources = Cj.get_bodies()
        if not targets or not sources:
            return 0

        Xi = np.array([b.position for b in targets])
        Xj = np.array([b.position for b in sources])
        qj = np.array([b.charge for b in sources])

        dX = Xi[:, None, :] - Xj[None, :, :] - Xperiodic
        R2 = np.sum(dX * dX, axis=-1)
        mask = (R2 > 0) & (R2 < self.cutoff * self.cutoff)
        if not mask.any():
            return 0

        rows, cols = np.nonzero(mask)
        dX = dX[rows, cols]
        potential, factor = self.kernel.evaluate(dX, R2[rows, cols])
        q = qj[cols]

        ni = len(targets)
        trg = np.zeros((ni, 4))
        trg[:, 0] = np.bincount(rows, weights=q * potential, minlength=ni)
        force = -dX * (q * factor)[:, None]
        for d in range(3):
            trg[:, d + 1] = np.bincount(rows, weights=force[:, d], minlength=ni)

        for body, contrib in zip(targets, trg):
            body.trg += contrib

        return len(rows)


class DFT(Operator):
    """
    Forward transform from body charges to wave amplitudes.

    REAL_w = sum_b q_b cos(theta_bw), IMAG_w = sum_b q_b sin(theta_bw)
    with theta_bw = sum_d K_wd * x_bd * 2*pi / cycle_d.

    Vectorized across waves; bodies are processed in chunks to bound the
    size of the phase matrix.
    """

    def __init__(self, cycle: np.ndarray, chunk_size: int = 256):
        self.cycle = cycle
        self.chunk_size = chunk_size

    def apply(self, waves: Waves, jbodies: np.ndarray, num_bodies: int):
        """
        Apply forward transform.

        Args:
            waves: Wave set, amplitudes overwritten
            jbodies: Source array (N x 4) of positions and charges
            num_bodies: Number of bodies to transform
        """
        waves.zero()
        kvec = waves.wave_vectors(self.cycle)
        X = jbodies[:num_bodies, :3]
        q = jbodies[:num_bodies, 3]

        for begin in range(0, num_bodies, self.chunk_size):
            end = min(begin + self.chunk_size, num_bodies)
            th = X[begin:end] @ kvec.T
            waves.real += q[begin:end] @ np.cos(th)
            waves.imag += q[begin:end] @ np.sin(th)


class WaveScaling(Operator):
    """
    Applies the Gaussian-damped reciprocal-space kernel to the amplitudes.

    factor(K) = 2 / (sigma * Vol) * exp(-K^2 / (4 alpha^2)) / K^2
    """

    def __init__(self, alpha: float, sigma: float, cycle: np.ndarray):
        self.alpha = alpha
        self.sigma = sigma
        self.cycle = cycle

    def factors(self, waves: Waves) -> np.ndarray:
        """Compute the per-wave scaling factors."""
        coef = 2 / self.sigma / np.prod(self.cycle)
        coef2 = 1 / (4 * self.alpha * self.alpha)
        K = waves.wave_vectors(self.cycle)
        K2 = np.sum(K * K, axis=1)
        return coef * np.exp(-K2 * coef2) / K2

    def apply(self, waves: Waves):
        """Scale the wave amplitudes in place."""
        waves.scale(self.factors(waves))


class IDFT(Operator):
    """
    Inverse transform from scaled wave amplitudes to body potential and force.

    For every body:
        potential += sum_w REAL_w cos(theta) + IMAG_w sin(theta)
        force_d   -= sum_w (REAL_w sin(theta) - IMAG_w cos(theta)) K_wd * 2*pi/cycle_d

    Vectorized across waves; bodies are processed in chunks.
    """

    def __init__(self, cycle: np.ndarray, chunk_size: int = 256):
        self.cycle = cycle
        self.chunk_size = chunk_size

    def apply(self, waves: Waves, ibodies: np.ndarray, jbodies: np.ndarray,
              num_bodies: int):
        """
        Apply inverse transform.

        Args:
            waves: Scaled wave set
            ibodies: Target array (N x 4), contributions are added in place
            jbodies: Source array (N x 4) providing the body positions
            num_bodies: Number of bodies to evaluate
        """
        scale = 2 * np.pi / self.cycle
        kvec = waves.wave_vectors(self.cycle)
        X = jbodies[:num_bodies, :3]

        for begin in range(0, num_bodies, self.chunk_size):
            end = min(begin + self.chunk_size, num_bodies)
            th = X[begin:end] @ kvec.T
            cos_th = np.cos(th)
            sin_th = np.sin(th)

            trg = np.zeros((end - begin, 4))
            trg[:, 0] = cos_th @ waves.real + sin_th @ waves.imag
            dtmp = sin_th * waves.real - cos_th * waves.imag
            trg[:, 1:] = -(dtmp @ waves.K) * scale
            ibodies[begin:end] += trg
