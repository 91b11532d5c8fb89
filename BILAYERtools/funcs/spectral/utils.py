"""
Utility functions for lattice spectral analysis including FFT plan caching.
"""
import numpy as np
from .constants import *

pyfftw_import = False
try:
    import pyfftw
    pyfftw_import = True
except ImportError:
    print("pyfftw not installed, using numpy's fft")

rfftn = np.fft.rfftn
irfftn = np.fft.irfftn


class FFTWPlanCache:
    """
    Cache of real-to-complex / complex-to-real plans, one per (N, N) lattice
    and direction.

    A plan is measured once for a lattice and then reused for every frame and
    every field; stacks of fields are run through it one field at a time, so
    only the aligned buffer contents change between calls. Both directions are
    unnormalized.
    """

    def __init__(self,
                 max_plans=DEFAULT_MAX_PLANS,
                 threads=DEFAULT_FFT_THREADS):
        self.plans = {}
        self.max_plans = max_plans
        self.threads = threads
        self.enabled = pyfftw_import


    def get_fft_plan(self,
                     shape,
                     forward=True):
        """Get or create an FFTW plan for a real-space lattice shape (N, N)."""

        if not self.enabled:
            return None

        key = (tuple(shape), forward)

        if key in self.plans:
            return self.plans[key]

        if len(self.plans) >= self.max_plans:
            # Remove oldest plan
            oldest_key = next(iter(self.plans))
            del self.plans[oldest_key]

        axes = (-2, -1)
        half_shape = list(shape)
        half_shape[-1] = shape[-1] // 2 + 1

        if forward:
            input_array = pyfftw.empty_aligned(shape, dtype='float64')
            output_array = pyfftw.empty_aligned(half_shape, dtype='complex128')
            plan = pyfftw.FFTW(input_array, output_array, axes=axes,
                               direction='FFTW_FORWARD',
                               flags=['FFTW_MEASURE'], threads=self.threads)
        else:
            input_array = pyfftw.empty_aligned(half_shape, dtype='complex128')
            output_array = pyfftw.empty_aligned(shape, dtype='float64')
            plan = pyfftw.FFTW(input_array, output_array, axes=axes,
                               direction='FFTW_BACKWARD',
                               flags=['FFTW_MEASURE'], threads=self.threads)

        self.plans[key] = plan
        return plan


    def execute_fft(self,
                    data,
                    shape,
                    forward=True):
        """
        Execute an unnormalized transform using the cached plan if available.

        Args:
            data: real field (..., N, N) when forward, half-plane spectrum
                  (..., N, N//2+1) otherwise.
            shape: real-space shape (..., N, N).
        """
        plan = self.get_fft_plan(shape[-2:], forward)

        if plan is None:
            if forward:
                return rfftn(data, axes=(-2, -1))
            return irfftn(data, s=shape[-2:], axes=(-2, -1), norm='forward')

        out = np.empty(data.shape[:-2] + plan.output_array.shape,
                       dtype=plan.output_array.dtype)
        for idx in np.ndindex(data.shape[:-2]):
            # Copy data to aligned array
            plan.input_array[:] = data[idx]
            # execute() skips pyfftw's inverse normalisation
            plan.execute()
            out[idx] = plan.output_array

        return out


def ensure_float64(field, field_name="field"):
    """Utility to convert arrays to contiguous float64 with consistent messaging."""
    if field.dtype != np.float64:
        print(f"Converting {field.dtype} {field_name} to float64 for the FFT plans")
    return np.ascontiguousarray(field, dtype=np.float64)


def ensure_stack(field, expected_ndim=2):
    """Promote a single lattice field to a one-element stack (1, ...)."""
    if field.ndim == expected_ndim:
        return field[np.newaxis, ...], True
    return field, False


def validate_field_shape(field, ngrid, field_name="field"):
    """Validate the trailing axes of field are an (N, N) lattice."""
    if field.shape[-2:] != (ngrid, ngrid):
        raise ValueError(f"{field_name} should end in ({ngrid}, {ngrid}) lattice axes")
