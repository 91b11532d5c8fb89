"""
BILAYERtools Spectral Analysis Module

Provides the lattice spectral operations of the membrane pipeline: pre-planned
real-to-complex transforms, Hermitian full-plane reconstruction, Fourier-space
derivatives, parallel/perpendicular decomposition and degeneracy-class radial
averaging.
"""

# Import main classes
from .operations import SpectralOperations
from .utils import FFTWPlanCache

# Import core functions for advanced users
from .core_functions import (
    compute_wave_vectors_core,
    compute_wave_directions_core,
    compute_class_index_core,
    full_array_core,
    derivative_spectra_core,
    decompose_par_perp_core,
    class_average_np_core,
)

# Define public API
__all__ = [
    'SpectralOperations',
    'FFTWPlanCache',
    # Core functions for advanced use
    'compute_wave_vectors_core',
    'compute_wave_directions_core',
    'compute_class_index_core',
    'full_array_core',
    'derivative_spectra_core',
    'decompose_par_perp_core',
    'class_average_np_core',
]
