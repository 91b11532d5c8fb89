"""
BILAYERtools: Fourier spectra of lipid bilayer height, thickness, tilt and
director fluctuations from coarse-grained trajectories.
"""

__version__ = "0.1.0"

from .exceptions import (
    BilayerSpectraError,
    ConfigurationError,
    TrajectoryParseError,
    InvariantViolationError,
    DataQualityWarning,
)
from .funcs.membrane import SpectraConfig, MembraneSpectra, compute_spectra
from .funcs.statistics import FrameAccumulator, SpectraResults
from .io import LipidTrajectory

__all__ = [
    'BilayerSpectraError',
    'ConfigurationError',
    'TrajectoryParseError',
    'InvariantViolationError',
    'DataQualityWarning',
    'SpectraConfig',
    'MembraneSpectra',
    'compute_spectra',
    'FrameAccumulator',
    'SpectraResults',
    'LipidTrajectory',
]
