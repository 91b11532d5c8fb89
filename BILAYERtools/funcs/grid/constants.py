"""
Type signatures and constants for lattice binning functions.
Centralizes all Numba type definitions.
"""
from numba import types

##############################################################################
# Global constants
##############################################################################

N_COMP, X_GRID, Y_GRID = 0, 1, 2  # grid field dimensions (ncomp, N, N)
IN_RANGE, CLAMPED, OUT_OF_RANGE = 0, 1, 2  # bin index status codes


##############################################################################
# Type signatures for Numba functions
##############################################################################

# Scatter-add of particle weights into cells
sig_accumulate = types.void(
    types.float64[:,:,:],   # values (ncomp, N, N), updated in place
    types.int64[:,:],       # occupancy (N, N), updated in place
    types.int64[:],         # cell x index per particle
    types.int64[:],         # cell y index per particle
    types.float64[:,:],     # weights (ncomp, nparticles)
    types.boolean[:]        # particles to accumulate
    )

# Cell index of each particle along one axis
sig_bin_axis = types.Tuple((types.int64[:], types.int64[:]))(
    types.float64[:],       # coordinates
    types.float64,          # box length
    types.int64             # N
    )
