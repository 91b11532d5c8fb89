"""
BILAYERtools Membrane Module

Provides the per-frame membrane chain (lipid wrapping, leaflet assignment,
height binning, surface normals, tilt and director binning) and the driver that
runs it over a trajectory.
"""

# Import main classes
from .operations import (
    SpectraConfig,
    LipidFrame,
    MembraneSpectra,
    compute_spectra,
)

# Import core functions for advanced users
from .core_functions import (
    wrap_lipids_core,
    direct_fourier_sums_core,
    director_np_core,
    leaflet_np_core,
    fix_stray_lipids_np_core,
    tilt_histogram_np_core,
)

# Define public API
__all__ = [
    'SpectraConfig',
    'LipidFrame',
    'MembraneSpectra',
    'compute_spectra',
    # Core functions for advanced use
    'wrap_lipids_core',
    'direct_fourier_sums_core',
    'director_np_core',
    'leaflet_np_core',
    'fix_stray_lipids_np_core',
    'tilt_histogram_np_core',
]
