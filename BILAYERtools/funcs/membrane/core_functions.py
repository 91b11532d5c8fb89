"""
Core functions for preparing the lipids of one frame: periodic wrapping,
directors and leaflet assignment, stray-lipid correction, direct-space number
density sums and the tilt magnitude histogram.
"""
import numpy as np
from numba import njit, prange
from .constants import *

##########################################################################################
# Core numba JIT functions for lipid preprocessing
##########################################################################################

@njit(sig_wrap, cache=True)
def wrap_lipids_core(
    head : np.ndarray,
    tail : np.ndarray,
    lx : float,
    ly : float,
    lx_av : float,
    ly_av : float) -> None:
    """
    Shift every head into [0, Lx) x [0, Ly) with at most one box length per
    axis, carrying its tail along, then unwrap tails that sit more than half an
    average box length away from their head.
    """
    box = (lx, ly)
    box_av = (lx_av, ly_av)
    for i in range(head.shape[0]):
        for d in range(2):
            if head[i, d] >= box[d]:
                head[i, d] -= box[d]
                tail[i, d] -= box[d]
            if head[i, d] < 0.0:
                head[i, d] += box[d]
                tail[i, d] += box[d]

        for d in range(2):
            if abs(head[i, d] - tail[i, d]) > UNWRAP_FRACTION * box_av[d]:
                if head[i, d] > tail[i, d]:
                    tail[i, d] += box[d]
                else:
                    tail[i, d] -= box[d]


@njit(sig_direct_sums, parallel=True, cache=True)
def direct_fourier_sums_core(
    x : np.ndarray,
    y : np.ndarray,
    weights : np.ndarray,
    q : np.ndarray,
    two_pi_lx : float,
    two_pi_ly : float) -> np.ndarray:
    """
    sum_k w[s, k] exp(-i q.r_k) on every lattice wavevector.
    Shape: (nsum, N, N)
    """
    nsum, nl = weights.shape
    _, nx, ny = q.shape
    out = np.zeros((nsum, nx, ny), dtype=np.complex128)
    for i in prange(nx):
        for j in range(ny):
            qx = q[X, i, j] * two_pi_lx
            qy = q[Y, i, j] * two_pi_ly
            for k in range(nl):
                phase = qx * x[k] + qy * y[k]
                c = np.cos(phase)
                s = np.sin(phase)
                for w in range(nsum):
                    out[w, i, j] += complex(weights[w, k] * c, -weights[w, k] * s)
    return out

##########################################################################################
# Core numpy functions for lipid preprocessing
##########################################################################################

def director_np_core(
    head : np.ndarray,
    tail : np.ndarray) -> np.ndarray:
    """
    Unit head-to-tail vector of every lipid, (nl, 3).
    """
    director = tail - head
    director /= np.sqrt(np.sum(director * director, axis=1))[:, np.newaxis]
    return director


def leaflet_np_core(
    director : np.ndarray,
    cut_angle_cos : float) -> tuple:
    """
    Leaflet label of every lipid (TOP when the director points down, BOTTOM
    when it points up, 0 otherwise) and whether it lies within the tilt cutoff.
    """
    dir_z = director[:, Z]
    leaflet = np.zeros(dir_z.shape[0], dtype=np.int64)
    leaflet[dir_z < 0] = TOP
    leaflet[dir_z > 0] = BOTTOM
    good = np.abs(dir_z) > cut_angle_cos
    return leaflet, good


def fix_stray_lipids_np_core(
    head : np.ndarray,
    tail : np.ndarray,
    leaflet : np.ndarray,
    lz : float) -> tuple:
    """
    Move lipids carried into the periodic image of the opposite leaflet back by
    one box height. The leaflet means are taken before any lipid is moved.

    Returns:
        z1avg, z2avg (float): uncorrected mean head height per leaflet
        nswu, nswd (int): lipids moved up (top leaflet) and down (bottom)
    """
    top = leaflet == TOP
    bottom = leaflet == BOTTOM
    z1avg = head[top, Z].mean() if top.any() else 0.0
    z2avg = head[bottom, Z].mean() if bottom.any() else 0.0
    zbox = STRAY_FRACTION * lz

    up = top & (np.abs(head[:, Z] - z1avg) > zbox)
    down = bottom & (np.abs(head[:, Z] - z2avg) > zbox)
    head[up, Z] += lz
    tail[up, Z] += lz
    head[down, Z] -= lz
    tail[down, Z] -= lz
    return z1avg, z2avg, int(up.sum()), int(down.sum())


def tilt_histogram_np_core(
    tilt : np.ndarray,
    nbins : int) -> np.ndarray:
    """
    Counts of floor(nbins |m|) for per-lipid tilt vectors (3, n) with |m| < 1.
    """
    magnitude = np.sqrt(np.sum(tilt * tilt, axis=0))
    magnitude = magnitude[magnitude < 1.0]
    return np.bincount(np.floor(nbins * magnitude).astype(np.int64), minlength=nbins)[:nbins]
