"""
Core Numba JIT compiled functions for lattice spectral analysis.
These are the performance-critical numerical kernels.
"""
import numpy as np
from numba import njit, prange
from .constants import *

##########################################################################################
# Core numba JIT functions for wavevector bookkeeping
##########################################################################################

@njit(sig_wave_vectors, cache=True)
def compute_wave_vectors_core(
    ngrid : int) -> np.ndarray:
    """
    Signed integer wavevector of every lattice site in FFT ordering,
    q = i for i < N/2 and i - N otherwise.
    Shape: (2, N, N)
    """
    nhalf = ngrid // 2
    q = np.empty((2, ngrid, ngrid), dtype=np.int64)
    for i in range(ngrid):
        qi = i if i < nhalf else i - ngrid
        for j in range(ngrid):
            qj = j if j < nhalf else j - ngrid
            q[X, i, j] = qi
            q[Y, i, j] = qj
    return q


@njit(sig_wave_directions, cache=True)
def compute_wave_directions_core(
    q : np.ndarray) -> tuple:
    """
    Unit wavevector direction (cos, sin) per site; both are zero at q = 0
    where the direction is undefined.
    """
    _, nx, ny = q.shape
    cosq = np.zeros((nx, ny), dtype=np.float64)
    sinq = np.zeros((nx, ny), dtype=np.float64)
    for i in range(nx):
        for j in range(ny):
            if i == 0 and j == 0:
                continue
            qx = float(q[X, i, j])
            qy = float(q[Y, i, j])
            inv_mag = 1.0 / np.sqrt(qx*qx + qy*qy)
            cosq[i, j] = qx * inv_mag
            sinq[i, j] = qy * inv_mag
    return cosq, sinq


@njit(sig_class_index, cache=True)
def compute_class_index_core(
    ngrid : int,
    include_nyquist : bool) -> np.ndarray:
    """
    Degeneracy class of every lattice site.

    Each site is folded to (f(i), f(j)) with f(i) = i for i < N/2 and N - i
    otherwise, and keyed by the unordered pair (lo, hi). Classes are numbered
    row-major over 0 <= a1 <= a2 < M, with M = N/2 (+1 when Nyquist classes are
    kept). Sites whose pair falls outside that range get -1.
    """
    nhalf = ngrid // 2
    m = nhalf + 1 if include_nyquist else nhalf
    class_index = np.full((ngrid, ngrid), -1, dtype=np.int64)
    for b1 in range(ngrid):
        f1 = b1 if b1 < nhalf else ngrid - b1
        for b2 in range(ngrid):
            f2 = b2 if b2 < nhalf else ngrid - b2
            lo = min(f1, f2)
            hi = max(f1, f2)
            if hi < m:
                # classes preceding row lo: sum_{k<lo} (m - k)
                class_index[b1, b2] = lo * m - (lo * (lo - 1)) // 2 + (hi - lo)
    return class_index

##########################################################################################
# Core numba JIT functions for spectral operations
##########################################################################################

@njit(sig_full_array, parallel=True, cache=True)
def full_array_core(
    half : np.ndarray,
    factor : float) -> np.ndarray:
    """
    Rebuild the full (N, N) spectrum of a real field from its (N, N/2+1)
    half-plane transform using h_{-q} = conj(h_q) = h_{N-q}, scaled by factor.
    Shape: (nfield, N, N//2+1) -> (nfield, N, N)
    """
    nfield, ngrid, _ = half.shape
    nhalf = ngrid // 2
    out = np.empty((nfield, ngrid, ngrid), dtype=np.complex128)
    for f in range(nfield):
        for a in prange(ngrid):
            for b in range(ngrid):
                if a == 0:
                    # top row
                    if b <= nhalf:
                        out[f, a, b] = half[f, a, b] * factor
                    else:
                        out[f, a, b] = half[f, a, ngrid - b].conjugate() * factor
                elif b == 0:
                    # leftmost column
                    out[f, a, b] = half[f, a, b] * factor
                elif b <= nhalf:
                    out[f, a, b] = half[f, a, b] * factor
                else:
                    out[f, a, b] = half[f, ngrid - a, ngrid - b].conjugate() * factor
    return out


@njit(sig_derivative, parallel=True, cache=True)
def derivative_spectra_core(
    half : np.ndarray,
    q : np.ndarray,
    two_pi_lx : float,
    two_pi_ly : float) -> tuple:
    """
    Multiply half-plane spectra by i*qx*2pi/Lx and i*qy*2pi/Ly.
    The Nyquist row/column (index N/2) gets a zero derivative wavevector.
    Shape: (nfield, N, N//2+1)
    """
    nfield, ngrid, ncol = half.shape
    nhalf = ngrid // 2
    dx = np.empty_like(half)
    dy = np.empty_like(half)
    for f in range(nfield):
        for i in prange(ngrid):
            for j in range(ncol):
                qi = q[X, i, j]
                qj = q[Y, i, j]
                # aliased between -N/2 and N/2
                if i == nhalf:
                    qi = 0
                if j == nhalf:
                    qj = 0
                re = half[f, i, j].real
                im = half[f, i, j].imag
                kx = qi * two_pi_lx
                ky = qj * two_pi_ly
                dx[f, i, j] = complex(-kx * im, kx * re)
                dy[f, i, j] = complex(-ky * im, ky * re)
    return dx, dy


@njit(sig_decompose, parallel=True, cache=True)
def decompose_par_perp_core(
    field_x : np.ndarray,
    field_y : np.ndarray,
    cosq : np.ndarray,
    sinq : np.ndarray) -> tuple:
    """
    Project full-plane vector spectra onto the directions parallel and
    perpendicular to q. Both projections are zero at q = 0.
    Shape: (nfield, N, N)
    """
    nfield, ngrid, _ = field_x.shape
    par = np.empty_like(field_x)
    perp = np.empty_like(field_x)
    for f in range(nfield):
        for i in prange(ngrid):
            for j in range(ngrid):
                if i == 0 and j == 0:
                    par[f, i, j] = 0j
                    perp[f, i, j] = 0j
                    continue
                c = cosq[i, j]
                s = sinq[i, j]
                par[f, i, j] = field_x[f, i, j] * c + field_y[f, i, j] * s
                perp[f, i, j] = -field_x[f, i, j] * s + field_y[f, i, j] * c
    return par, perp


def class_average_np_core(
    field : np.ndarray,
    class_index : np.ndarray,
    n_classes : int) -> np.ndarray:
    """
    Mean of field over each degeneracy class (sites with index -1 are skipped).
    """
    mask = class_index >= 0
    idx = class_index[mask]
    sums = np.bincount(idx, weights=field[mask], minlength=n_classes)
    counts = np.bincount(idx, minlength=n_classes)
    return sums / counts
