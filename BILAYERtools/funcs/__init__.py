"""
BILAYERtools numerical functions: lattice binning (grid), lattice spectral
operations (spectral), the per-frame membrane chain (membrane) and spectra
accumulation (statistics).
"""
