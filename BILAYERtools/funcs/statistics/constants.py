"""
Constants for spectra accumulation and reporting.
"""

##############################################################################
# Reporting scale factors
##############################################################################

# Spectra are reported in nm units. h = z1 + z2 and t = z1 - z2 (and the
# symmetric / antisymmetric tilt and director fields) carry a factor of two,
# hence the extra factor of four.
HEIGHT_SCALE = 40000.0   # |h_q|^2, |t_q|^2 : 4 * (A^4 -> nm^4)
TILT_SCALE = 400.0       # |dm_q|^2, |um_q|^2, ... : 4 * (A^2 -> nm^2)
LEAFLET_TILT_SCALE = 100.0  # single leaflet |m_q|^2 : A^2 -> nm^2
CROSS_SCALE = 4000.0     # Im<h dm*>, Im<t dp*> : 4 * (A^3 -> nm^3)
Q_SCALE = 10.0           # |q| : 1/A -> 1/nm
EDHOLM_SCALE = 10000.0   # Edholm height spectrum : A^4 -> nm^4

TILT_HIST_BINS = 100     # tilt magnitude histogram over [0, 1)
REFERENCE_TOLERANCE = 0.001  # input vs measured thickness / density

##############################################################################
# Accumulated quantities
##############################################################################

# per-site running sums over frames, all (N, N)
SPECTRA_KEYS = (
    'hq2', 'tq2', 'hq4',
    't1xq2', 't1yq2',
    'dpq2', 'dmq2', 'upq2', 'umq2',
    'dpparq2', 'dpperq2', 'dmparq2', 'dmperq2',
    'upparq2', 'upperq2', 'umparq2', 'umperq2',
    'umparq4', 'umperq4',
    'hdmpar', 'tdppar',
    'dum_par', 'dup_par',
)

# direct-space number density sums, only in area mode
AREA_KEYS = ('rhoSigq2', 'rhoDelq2', 'hq2Ed')

# real-space maps accumulated per frame
MAP_KEYS = ('occupancy_top', 'occupancy_bottom', 'director_diff_x', 'director_diff_y')

# scalars accumulated per frame
SCALAR_KEYS = ('t0', 'tq0', 'phi0', 'z1sq', 'z2sq', 'dot_cum',
               'empty_tot', 'nswu', 'nswd')

# per-frame class-averaged spectra
TIME_SERIES_KEYS = ('hq2', 'umparq2', 'umperq2')

# column order of the sorted q table
QDATA_COLUMNS = ('10*q2_uniq_ny', 'umparq2_uniq', 'umperq2_uniq', 'hq2_uniq',
                 'tq2_uniq', 'dpparq2_uniq', 'dpperq2_uniq', 'dmparq2_uniq',
                 'dmperq2_uniq')

# reporting scale of every finalized spectrum
SPECTRUM_SCALES = {
    'hq2': HEIGHT_SCALE,
    'tq2': HEIGHT_SCALE,
    't1xq2': LEAFLET_TILT_SCALE,
    't1yq2': LEAFLET_TILT_SCALE,
    'dpq2': TILT_SCALE,
    'dmq2': TILT_SCALE,
    'upq2': TILT_SCALE,
    'umq2': TILT_SCALE,
    'dpparq2': TILT_SCALE,
    'dpperq2': TILT_SCALE,
    'dmparq2': TILT_SCALE,
    'dmperq2': TILT_SCALE,
    'upparq2': TILT_SCALE,
    'upperq2': TILT_SCALE,
    'umparq2': TILT_SCALE,
    'umperq2': TILT_SCALE,
    'hdmpar': CROSS_SCALE,
    'tdppar': CROSS_SCALE,
    'dum_par': TILT_SCALE,
    'dup_par': TILT_SCALE,
}

# (parallel, perpendicular, total) spectra whose q = 0 entries are split evenly
PAR_PERP_TOTALS = (
    ('dpparq2', 'dpperq2', 'dpq2'),
    ('dmparq2', 'dmperq2', 'dmq2'),
    ('upparq2', 'upperq2', 'upq2'),
    ('umparq2', 'umperq2', 'umq2'),
)

# spectra with error bars: (second moment, first moment, scale)
ERROR_BARS = {
    'hq2': ('hq4', 'hq2', HEIGHT_SCALE),
    'umparq2': ('umparq4', 'umparq2', TILT_SCALE),
    'umperq2': ('umperq4', 'umperq2', TILT_SCALE),
}
