"""
    BILAYERtools Grid Operations Module

    Lattice containers for coarse-grained membrane fields, the binner that maps
    particle positions into lattice cells, and the nearest-neighbour
    interpolation of empty cells.

"""

import warnings
import numpy as np
from .constants import *
from .core_functions import *
from ...exceptions import DataQualityWarning


class GridField:
    """
    A stack of ncomp real fields on an N x N periodic lattice with a shared
    per-cell occupancy count.

    values is contiguous (ncomp, N, N) float64 and counts is (N, N) int64, so
    both can be handed directly to the FFT plans and the Numba kernels.
    """

    def __init__(
        self,
        ngrid : int,
        ncomp : int = 1) -> None:
        self.ngrid = ngrid
        self.ncomp = ncomp
        self.values = np.zeros((ncomp, ngrid, ngrid), dtype=np.float64)
        self.counts = np.zeros((ngrid, ngrid), dtype=np.int64)


    @property
    def flat(self) -> np.ndarray:
        """Row-major 1D layout of each component, (ncomp, N*N) view."""
        return self.values.reshape(self.ncomp, self.ngrid * self.ngrid)


    def __getitem__(self, comp):
        return self.values[comp]


    def reset(self) -> None:
        """Zero the values and the occupancy before a new frame."""
        self.values.fill(0.0)
        self.counts.fill(0)


    def accumulate(
        self,
        ix : np.ndarray,
        iy : np.ndarray,
        weights : np.ndarray,
        mask : np.ndarray = None) -> None:
        """
        Add per-particle weights (ncomp, n) to the cells (ix, iy).
        """
        weights = np.ascontiguousarray(weights, dtype=np.float64)
        if weights.ndim == 1:
            weights = weights[np.newaxis, :]
        if mask is None:
            mask = np.ones(ix.shape[0], dtype=np.bool_)
        accumulate_cells_core(
            self.values,
            self.counts,
            np.ascontiguousarray(ix, dtype=np.int64),
            np.ascontiguousarray(iy, dtype=np.int64),
            weights,
            np.ascontiguousarray(mask, dtype=np.bool_))


    def normalize(self) -> None:
        """Divide every occupied cell by its occupancy."""
        normalize_cells_np_core(self.values, self.counts)


    def interpolate_empty(
        self,
        field_name : str = "field") -> int:
        """
        Fill empty cells from their four periodic neighbours.

        Returns:
            n_empty (int): number of empty cells with an empty neighbour.
        """
        out, n_empty, n_nonfinite = interpolate_empty_core(self.values, self.counts)
        self.values[...] = out
        if n_nonfinite:
            warnings.warn(
                f"{field_name}: {n_nonfinite} empty cell(s) with no occupied "
                "neighbour were left non-finite",
                DataQualityWarning,
                stacklevel=2)
        return n_empty


class Binner:
    """
    Maps continuous, periodic-wrapped particle positions in [0, Lx) x [0, Ly)
    to lattice cells (floor(x/dlx), floor(y/dly)).
    """

    def __init__(
        self,
        ngrid : int) -> None:
        self.ngrid = ngrid


    def cell_indices(
        self,
        x : np.ndarray,
        y : np.ndarray,
        lx : float,
        ly : float) -> tuple:
        """
        Cell indices of every particle.

        A coordinate exactly at the box edge is clamped to N - 1. Any other
        out-of-range index is reported with a DataQualityWarning and the
        particle is marked invalid.

        Returns:
            ix, iy (np.ndarray): int64 cell indices.
            valid (np.ndarray): bool mask of particles inside the lattice.
        """
        ix, status_x = bin_axis_core(
            np.ascontiguousarray(x, dtype=np.float64), float(lx), self.ngrid)
        iy, status_y = bin_axis_core(
            np.ascontiguousarray(y, dtype=np.float64), float(ly), self.ngrid)

        valid = (status_x != OUT_OF_RANGE) & (status_y != OUT_OF_RANGE)
        for k in np.flatnonzero(~valid):
            warnings.warn(
                f"lipid {k}: cell index ({ix[k]}, {iy[k]}) outside [0, {self.ngrid}) "
                f"for x= {x[k]} y= {y[k]} lx= {lx} ly= {ly}",
                DataQualityWarning,
                stacklevel=2)
        return ix, iy, valid
