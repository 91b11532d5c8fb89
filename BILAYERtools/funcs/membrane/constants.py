"""
Type signatures and constants for the per-frame membrane functions.
Centralizes all Numba type definitions.
"""
from numba import types
import numpy as np

##############################################################################
# Global constants
##############################################################################

X, Y, Z = 0, 1, 2  # coordinate indices
TOP, BOTTOM = 1, 2  # leaflet labels; 0 marks a lipid lying in the plane

DEFAULT_THICKNESS = 17.97264862   # reference monolayer thickness (A)
DEFAULT_PHI = 0.01588405482       # reference number density (A^-2)
DEFAULT_CUT_ANGLE = 90.0          # tilt cutoff angle (degrees)
DEFAULT_CUT_ANGLE_COS = np.cos(np.deg2rad(DEFAULT_CUT_ANGLE))

STRAY_FRACTION = 0.6   # fraction of Lz beyond which a lipid sits in the periodic image
UNWRAP_FRACTION = 0.5  # fraction of the average box length beyond which a tail is unwrapped

# order of the real fields transformed every frame
FRAME_FIELDS = ('h', 't', 't1x', 't1y',
                'dpx', 'dpy', 'dmx', 'dmy',
                'upx', 'upy', 'umx', 'umy')
VECTOR_FIELDS = ('dp', 'dm', 'up', 'um')

# per-cell tilt grid components
TILT_X, TILT_Y, DIR_X, DIR_Y = 0, 1, 2, 3
N_TILT_COMP = 4


##############################################################################
# Type signatures for Numba functions
##############################################################################

# Periodic wrapping of head beads and unwrapping of tail beads, in place
sig_wrap = types.void(
    types.float64[:,:],     # head positions (nl, 3)
    types.float64[:,:],     # tail positions (nl, 3)
    types.float64,          # Lx
    types.float64,          # Ly
    types.float64,          # trajectory-averaged Lx
    types.float64           # trajectory-averaged Ly
    )

# Direct Fourier sums of weighted point sets over the full lattice
sig_direct_sums = types.complex128[:,:,:](
    types.float64[:],       # x positions (nl,)
    types.float64[:],       # y positions (nl,)
    types.float64[:,:],     # weights (nsum, nl)
    types.int64[:,:,:],     # integer wavevector map (2, N, N)
    types.float64,          # 2 pi / Lx
    types.float64           # 2 pi / Ly
    )
