"""
Wave Module

Defines the reciprocal-space wave set of the Ewald summation.
"""

import numpy as np


class Waves:
    """
    Set of reciprocal-space modes with complex amplitudes.

    Stored as a structure of arrays: K holds the integer wave indices
    (nwaves x 3), real and imag hold the amplitude. The physical wave
    vector of mode w is K[w] * 2*pi / cycle.
    """

    def __init__(self, K: np.ndarray):
        """
        Initialize the wave set with zero amplitudes.

        Args:
            K: Integer wave indices (nwaves x 3)
        """
        self.K = np.asarray(K, dtype=np.int64).reshape(-1, 3)
        self.real = np.zeros(len(self.K))
        self.imag = np.zeros(len(self.K))

    def __len__(self) -> int:
        return len(self.K)

    def zero(self):
        """Reset all amplitudes to zero."""
        self.real[:] = 0.0
        self.imag[:] = 0.0

    def scale(self, factor: np.ndarray):
        """Multiply every amplitude by its per-wave factor in place."""
        self.real *= factor
        self.imag *= factor

    def wave_vectors(self, cycle: np.ndarray) -> np.ndarray:
        """Return the physical wave vectors K * 2*pi / cycle."""
        return self.K * (2 * np.pi / cycle)

    def __repr__(self) -> str:
        return f"Waves(n={len(self)})"


def init_waves(ksize: int) -> Waves:
    """
    Enumerate the half-space wave indices within the sphere |k| <= ksize.

    Only one member of every +/-k pair is generated and k = 0 is
    excluded: l >= 0; m >= 0 when l == 0; n >= 1 when l == m == 0.

    Args:
        ksize: Radius of the wave sphere in units of the fundamental wave number

    Returns:
        Waves with zero amplitudes
    """
    kmax = ksize
    kmaxsq = ksize * ksize
    K = []
    for l in range(0, kmax + 1):
        mmin = 0 if l == 0 else -kmax
        for m in range(mmin, kmax + 1):
            nmin = 1 if l == 0 and m == 0 else -kmax
            for n in range(nmin, kmax + 1):
                if l * l + m * m + n * n <= kmaxsq:
                    K.append((l, m, n))
    return Waves(np.array(K, dtype=np.int64).reshape(-1, 3))
