"""
Core Numba JIT compiled functions for binning particles onto the lattice
and filling empty lattice cells.
"""
import numpy as np
from numba import njit
from .constants import *

##########################################################################################
# Core numba JIT functions for binning
##########################################################################################

@njit(sig_bin_axis, cache=True)
def bin_axis_core(
    coords : np.ndarray,
    box_length : float,
    ngrid : int) -> tuple:
    """
    Cell index floor(x / dx) along one axis, dx = L / N, with a status code per
    particle. A coordinate exactly equal to L is clamped to N - 1; anything
    else outside [0, N) is flagged OUT_OF_RANGE and left as computed.
    """
    n = coords.shape[0]
    dx = box_length / ngrid
    index = np.empty(n, dtype=np.int64)
    status = np.zeros(n, dtype=np.int64)
    for k in range(n):
        idx = int(np.floor(coords[k] / dx))
        if idx > ngrid - 1 and coords[k] == box_length:
            idx = ngrid - 1
            status[k] = CLAMPED
        elif idx > ngrid - 1 or idx < 0:
            status[k] = OUT_OF_RANGE
        index[k] = idx
    return index, status


@njit(sig_accumulate, cache=True)
def accumulate_cells_core(
    values : np.ndarray,
    counts : np.ndarray,
    ix : np.ndarray,
    iy : np.ndarray,
    weights : np.ndarray,
    mask : np.ndarray) -> None:
    """
    Add each selected particle's weights to its cell and increment the cell
    occupancy. Serial, since particles collide on cells.
    """
    ncomp = values.shape[N_COMP]
    for k in range(ix.shape[0]):
        if not mask[k]:
            continue
        i = ix[k]
        j = iy[k]
        counts[i, j] += 1
        for c in range(ncomp):
            values[c, i, j] += weights[c, k]

##########################################################################################
# Core numba JIT functions for interpolation
##########################################################################################

@njit(cache=True, error_model='numpy')
def interpolate_empty_core(
    values : np.ndarray,
    counts : np.ndarray) -> tuple:
    """
    Replace every empty cell with the occupancy-weighted average of its four
    periodic nearest neighbours, read from the un-interpolated field.

    An empty cell whose neighbours are all empty gets 0/0 = NaN.

    Returns:
        out (np.ndarray): interpolated copy of values (ncomp, N, N)
        n_empty (int): empty cells with at least one empty neighbour
        n_nonfinite (int): cells left non-finite
    """
    ncomp, nx, ny = values.shape
    out = values.copy()
    n_empty = 0
    n_nonfinite = 0
    for i in range(nx):
        i1 = i - 1 if i > 0 else nx - 1
        i2 = i + 1 if i < nx - 1 else 0
        for j in range(ny):
            if counts[i, j] != 0:
                continue
            j1 = j - 1 if j > 0 else ny - 1
            j2 = j + 1 if j < ny - 1 else 0

            if counts[i1, j] == 0 or counts[i2, j] == 0 or \
                    counts[i, j1] == 0 or counts[i, j2] == 0:
                n_empty += 1

            nn = counts[i, j1] + counts[i, j2] + counts[i1, j] + counts[i2, j]
            finite = True
            for c in range(ncomp):
                s = (counts[i, j1] * values[c, i, j1] + counts[i, j2] * values[c, i, j2]
                     + counts[i1, j] * values[c, i1, j] + counts[i2, j] * values[c, i2, j])
                out[c, i, j] = s / nn
                if not np.isfinite(out[c, i, j]):
                    finite = False
            if not finite:
                n_nonfinite += 1
    return out, n_empty, n_nonfinite


def normalize_cells_np_core(
    values : np.ndarray,
    counts : np.ndarray) -> np.ndarray:
    """
    Divide every occupied cell by its occupancy; empty cells are untouched.
    """
    occupied = counts > 0
    values[:, occupied] /= counts[occupied]
    return values
