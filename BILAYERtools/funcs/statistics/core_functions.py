import numpy as np
from .constants import *

##########################################################################################
# Core numpy functions for spectra accumulation
##########################################################################################


def power_spectrum_np_core(
    *fields : np.ndarray) -> np.ndarray:
    """
    Summed squared magnitude of one or more complex spectra,
    sum_i Re(f_i)^2 + Im(f_i)^2.
    """
    out = np.zeros(fields[0].shape, dtype=np.float64)
    for field in fields:
        out += field.real * field.real + field.imag * field.imag
    return out


def cross_spectrum_imag_np_core(
    field1 : np.ndarray,
    field2 : np.ndarray) -> np.ndarray:
    """
    Im(field1 * conj(field2)) = Re(f2) Im(f1) - Im(f2) Re(f1).
    """
    return field2.real * field1.imag - field2.imag * field1.real


def cross_spectrum_real_np_core(
    field1 : np.ndarray,
    field2 : np.ndarray) -> np.ndarray:
    """
    Re(field1 * conj(field2)).
    """
    return field1.real * field2.real + field1.imag * field2.imag


def standard_deviation_np_core(
    second_moment : np.ndarray,
    first_moment : np.ndarray,
    nframes : int) -> np.ndarray:
    """
    sqrt(<X^2> - <X>^2) from running sums of X^2 and X.
    """
    return np.sqrt(second_moment / nframes - (first_moment / nframes)**2)
