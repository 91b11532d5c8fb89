"""
BILAYERtools Grid Module

Provides the coarse-graining lattice: GridField containers, the particle Binner
and the empty-cell interpolator.
"""

# Import main classes
from .operations import GridField, Binner

# Import core functions for advanced users
from .core_functions import (
    bin_axis_core,
    accumulate_cells_core,
    interpolate_empty_core,
    normalize_cells_np_core,
)

# Define public API
__all__ = [
    'GridField',
    'Binner',
    # Core functions for advanced use
    'bin_axis_core',
    'accumulate_cells_core',
    'interpolate_empty_core',
    'normalize_cells_np_core',
]
