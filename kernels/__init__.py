"""
Ewald Kernels Module

Kernel functions used by the Ewald real-space sum.
"""

import numpy as np
from abc import ABC, abstractmethod
from scipy.special import erfc


class Kernel(ABC):
    """Abstract base class for kernel functions."""

    @abstractmethod
    def __call__(self, x: np.ndarray, y: np.ndarray) -> float:
        """
        Evaluate kernel G(x, y).

        Args:
            x: Target point coordinates
            y: Source point coordinates

        Returns:
            Kernel value
        """
        pass

    @abstractmethod
    def gradient(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """
        Compute gradient of kernel with respect to target point.

        Args:
            x: Target point coordinates
            y: Source point coordinates

        Returns:
            Gradient vector
        """
        pass


class EwaldRealKernel(Kernel):
    """
    Screened Coulomb kernel of the Ewald real-space sum.

    G(x, y) = erfc(alpha * r) / r,    r = |x - y|

    The gradient with respect to x is

    -(x - y) * alpha^3 * (2/sqrt(pi) * exp(-(alpha r)^2) / (alpha r)^2
                          + erfc(alpha r) / (alpha r)^3)
    """

    def __init__(self, alpha: float):
        """
        Initialize the screened kernel.

        Args:
            alpha: Ewald splitting parameter
        """
        if alpha <= 0:
            raise ValueError("Alpha must be positive")
        self.alpha = alpha

    def evaluate(self, dX: np.ndarray, R2: np.ndarray):
        """
        Vectorized potential and gradient factor.

        Args:
            dX: Separation vectors x - y, shape (..., 3)
            R2: Squared separations, shape (...), all strictly positive

        Returns:
            Tuple (potential, factor) with potential = erfc(alpha r) / r and
            gradient = -dX * factor[..., None]
        """
        alpha = self.alpha
        R2s = R2 * alpha * alpha
        Rs = np.sqrt(R2s)
        invRs = 1.0 / Rs
        invR2s = invRs * invRs
        invR3s = invR2s * invRs
        erfc_Rs = erfc(Rs)
        potential = erfc_Rs * invRs * alpha
        factor = (2.0 / np.sqrt(np.pi) * np.exp(-R2s) * invR2s + erfc_Rs * invR3s)
        factor *= alpha * alpha * alpha
        return potential, factor

    def __call__(self, x: np.ndarray, y: np.ndarray) -> float:
        """Evaluate the screened kernel."""
        dX = np.asarray(x, dtype=np.float64) - np.asarray(y, dtype=np.float64)
        R2 = np.dot(dX, dX)

        if R2 == 0:
            return 0.0  # Self-interaction

        potential, _ = self.evaluate(dX, R2)
        return float(potential)

    def gradient(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Compute gradient of the screened kernel."""
        dX = np.asarray(x, dtype=np.float64) - np.asarray(y, dtype=np.float64)
        R2 = np.dot(dX, dX)

        if R2 == 0:
            return np.zeros_like(dX)

        _, factor = self.evaluate(dX, R2)
        return -dX * factor
