"""
Type signatures and constants for the lattice spectral functions.
Centralizes all Numba type definitions.
"""
from numba import types
import numpy as np

##############################################################################
# Global constants
##############################################################################

TwoPi = 2.0 * np.pi  # 2 * pi constant
X, Y = 0, 1  # coordinate / wavevector component indices
N_FIELDS, X_GRID, Y_GRID = 0, 1, 2  # stacked field dimensions (nfield, N, N)
DEFAULT_FFT_THREADS = 1  # threads handed to a single FFTW plan
DEFAULT_MAX_PLANS = 10   # plans kept alive in the plan cache


##############################################################################
# Type signatures for Numba functions
##############################################################################

# Integer wavevector map (2, N, N)
sig_wave_vectors = types.int64[:,:,:](
    types.int64
    )

# Unit wavevector directions (cos, sin)
sig_wave_directions = types.UniTuple(types.float64[:,:], 2)(
    types.int64[:,:,:]
    )

# Hermitian expansion of a stack of half-plane spectra
sig_full_array = types.complex128[:,:,:](
    types.complex128[:,:,:],   # half-plane spectra (nfield, N, N//2+1)
    types.float64              # L / N^2 scale factor
    )

# Fourier derivative of a stack of half-plane spectra
sig_derivative = types.UniTuple(types.complex128[:,:,:], 2)(
    types.complex128[:,:,:],   # half-plane spectra (nfield, N, N//2+1)
    types.int64[:,:,:],        # integer wavevector map (2, N, N)
    types.float64,             # 2 pi / Lx
    types.float64              # 2 pi / Ly
    )

# Parallel / perpendicular decomposition
sig_decompose = types.UniTuple(types.complex128[:,:,:], 2)(
    types.complex128[:,:,:],   # x component spectra (nfield, N, N)
    types.complex128[:,:,:],   # y component spectra (nfield, N, N)
    types.float64[:,:],        # cos(theta_q)
    types.float64[:,:]         # sin(theta_q)
    )

# Degeneracy class index map
sig_class_index = types.int64[:,:](
    types.int64,               # N
    types.boolean              # include Nyquist classes
    )
