"""
BILAYERtools Statistics Module

Accumulates the per-frame membrane spectra over a trajectory and finalizes them
into radially averaged, unit-scaled spectra with error bars.
"""

# Import main classes
from .operations import FrameAccumulator, FrameDiagnostics, SpectraResults

# Import core functions for advanced users
from .core_functions import (
    power_spectrum_np_core,
    cross_spectrum_imag_np_core,
    cross_spectrum_real_np_core,
    standard_deviation_np_core,
)

# Define public API
__all__ = [
    'FrameAccumulator',
    'FrameDiagnostics',
    'SpectraResults',
    # Core functions for advanced use
    'power_spectrum_np_core',
    'cross_spectrum_imag_np_core',
    'cross_spectrum_real_np_core',
    'standard_deviation_np_core',
]
