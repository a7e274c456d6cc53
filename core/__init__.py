"""
Ewald Core Module

This module contains the data structures, operators and the main
summation class of the Ewald implementation.
"""

from .body import Body, UNASSIGNED_CELL, get_sources, get_targets, set_targets
from .cell import Cell, CellType
from .tree import Tree, TreeConfig
from .wave import Waves, init_waves
from .operators import Operator, P2P, DFT, WaveScaling, IDFT
from .timer import Timer
from .ewald import Ewald, EwaldConfig

__all__ = [
    'Body',
    'UNASSIGNED_CELL',
    'get_sources',
    'get_targets',
    'set_targets',
    'Cell',
    'CellType',
    'Tree',
    'TreeConfig',
    'Waves',
    'init_waves',
    'Operator',
    'P2P',
    'DFT',
    'WaveScaling',
    'IDFT',
    'Timer',
    'Ewald',
    'EwaldConfig',
]
