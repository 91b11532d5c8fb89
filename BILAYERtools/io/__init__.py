"""
BILAYERtools I/O Module

Length-checked readers for the box and lipid coordinate streams and writers for
the finalized spectra.
"""

from .read_trajectory import (
    DEFAULT_PATHS,
    default_paths,
    read_scalar_stream,
    read_box_dimensions,
    read_lipid_coordinates,
    LipidTrajectory,
)
from .write_spectra import (
    write_spectra_dump,
    write_qdata,
    write_time_series,
    write_spectra_hdf5,
    format_report,
)

__all__ = [
    'DEFAULT_PATHS',
    'default_paths',
    'read_scalar_stream',
    'read_box_dimensions',
    'read_lipid_coordinates',
    'LipidTrajectory',
    'write_spectra_dump',
    'write_qdata',
    'write_time_series',
    'write_spectra_hdf5',
    'format_report',
]
