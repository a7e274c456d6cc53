"""
Ewald Summation Implementation

Computes electrostatic (1/r) potentials and forces of bodies under
periodic boundary conditions by splitting the lattice sum into:
- A real-space sum with a screened kernel, truncated at a cutoff and
  pruned with a spatial tree using the minimum-image convention
- A reciprocal-space sum over a half-space set of wave vectors, via
  explicit forward and inverse transforms
- A self term and a net-dipole correction
"""

from ewald.core import (
    Body,
    Cell,
    CellType,
    Tree,
    TreeConfig,
    Waves,
    init_waves,
    P2P,
    DFT,
    WaveScaling,
    IDFT,
    Timer,
    Ewald,
    EwaldConfig,
)
from ewald.kernels import (
    Kernel,
    EwaldRealKernel,
)

__version__ = '0.1.0'

__all__ = [
    # Core classes
    'Body',
    'Cell',
    'CellType',
    'Tree',
    'TreeConfig',
    'Waves',
    'init_waves',
    'P2P',
    'DFT',
    'WaveScaling',
    'IDFT',
    'Timer',
    'Ewald',
    'EwaldConfig',
    # Kernels
    'Kernel',
    'EwaldRealKernel',
]
