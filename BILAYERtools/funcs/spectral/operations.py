"""
    BILAYERtools: Lattice Spectral Functions

    Main functions for transforming real N x N lattice fields, rebuilding their
    full Hermitian spectra, differentiating in Fourier space, decomposing vector
    spectra relative to the wavevector, and radially averaging over degeneracy
    classes of |q|.

    The lattice wavevector map, its unit directions and the degeneracy class
    maps are built once per lattice size and reused for every frame; only the
    physical scale 2 pi / L changes between frames.
"""

## ###############################################################
## IMPORTS
## ###############################################################

import numpy as np
from .core_functions import *
from .utils import *
from ...exceptions import InvariantViolationError

class SpectralOperations():


    def __init__(
        self,
        ngrid : int,
        cache_plans : bool = True,
        fft_threads : int = DEFAULT_FFT_THREADS):
        """
        Initialize the lattice bookkeeping and the FFT plan cache.

        Args:
            ngrid (int): lattice size N (even).
            cache_plans (bool): If True, use FFTW plan caching. Default is True, since
                the same lattice is transformed many times per frame and the
                planning cost is paid only once.
            fft_threads (int): threads per FFTW plan.

        """
        self.ngrid = int(ngrid)
        self.fft_cache = FFTWPlanCache(threads=fft_threads) if cache_plans else None
        self.q = compute_wave_vectors_core(self.ngrid)
        self.cosq, self.sinq = compute_wave_directions_core(self.q)
        self._class_index = {}


    def _do_fft(
        self,
        data,
        forward=True) -> np.ndarray:
        """
        Helper to use cached FFT plans if available.
        """
        if forward:
            shape = data.shape
        else:
            shape = data.shape[:-2] + (self.ngrid, self.ngrid)
        if self.fft_cache is not None:
            return self.fft_cache.execute_fft(
                data,
                shape,
                forward)
        if forward:
            return rfftn(
                data,
                axes=(-2, -1))
        return irfftn(
            data,
            s=(self.ngrid, self.ngrid),
            axes=(-2, -1),
            norm='forward')


    def forward(
        self,
        field : np.ndarray,
        field_name : str = "field") -> np.ndarray:
        """
        Unnormalized real-to-complex transform of one (N, N) field or a stack
        (nfield, N, N), giving half-plane spectra (..., N, N//2+1).
        """
        validate_field_shape(field, self.ngrid, field_name=field_name)
        field = ensure_float64(field, field_name=field_name)
        return self._do_fft(field, forward=True)


    def inverse(
        self,
        spectrum : np.ndarray) -> np.ndarray:
        """
        Unnormalized complex-to-real transform of half-plane spectra. The caller
        scales by 1/(N*N) (or an equivalent physical factor).
        """
        spectrum = np.ascontiguousarray(spectrum, dtype=np.complex128)
        return self._do_fft(spectrum, forward=False)


    def full_array(
        self,
        half : np.ndarray,
        lxy : float) -> np.ndarray:
        """
        Full (N, N) complex spectrum from a half-plane spectrum, scaled by
        lxy / N^2 so that the result is a physically normalized Fourier
        coefficient.

        Args:
            half (np.ndarray): (N, N//2+1) or (nfield, N, N//2+1) half-plane spectra.
            lxy (float): physical length scale, sqrt(Lx * Ly).

        Returns:
            np.ndarray: (N, N) or (nfield, N, N) complex spectra.
        """
        half, single = ensure_stack(np.ascontiguousarray(half, dtype=np.complex128))
        factor = lxy / (self.ngrid * self.ngrid)
        out = full_array_core(half, factor)
        return out[0] if single else out


    def derivative_spectra(
        self,
        half : np.ndarray,
        lx : float,
        ly : float) -> tuple:
        """
        Half-plane spectra of d/dx and d/dy, i.e. half * i*q with the
        Nyquist derivative wavevector set to zero.
        """
        half, single = ensure_stack(np.ascontiguousarray(half, dtype=np.complex128))
        dx, dy = derivative_spectra_core(
            half,
            self.q,
            TwoPi / lx,
            TwoPi / ly)
        if single:
            return dx[0], dy[0]
        return dx, dy


    def derivative(
        self,
        half : np.ndarray,
        lx : float,
        ly : float) -> tuple:
        """
        Real-space x and y derivatives of the field(s) whose raw half-plane
        spectra are given.

        The unnormalized inverse transforms of the derivative spectra are
        scaled by 1/Lx and 1/Ly, following f(r) = (1/L) sum_q f_q exp(i q.r)
        on raw spectra. The result is N^2/L times the derivative of the field.
        """
        dx_half, dy_half = self.derivative_spectra(half, lx, ly)
        dfdx = self.inverse(dx_half) / lx
        dfdy = self.inverse(dy_half) / ly
        return dfdx, dfdy


    def decompose(
        self,
        field_x : np.ndarray,
        field_y : np.ndarray) -> tuple:
        """
        Parallel and perpendicular components of full-plane vector spectra:

            par  =  x cos(theta_q) + y sin(theta_q)
            perp = -x sin(theta_q) + y cos(theta_q)

        with both set to zero at q = 0.
        """
        field_x, single = ensure_stack(np.ascontiguousarray(field_x, dtype=np.complex128))
        field_y, _ = ensure_stack(np.ascontiguousarray(field_y, dtype=np.complex128))
        par, perp = decompose_par_perp_core(
            field_x,
            field_y,
            self.cosq,
            self.sinq)
        if single:
            return par[0], perp[0]
        return par, perp


    def n_classes(
        self,
        include_nyquist : bool = False) -> int:
        """
        Number of degeneracy classes: N(N+2)/8 without Nyquist,
        (N+4)(N+2)/8 with it.
        """
        N = self.ngrid
        if include_nyquist:
            return (N + 4) * (N + 2) // 8
        return N * (N + 2) // 8


    def class_index(
        self,
        include_nyquist : bool = False) -> np.ndarray:
        """
        Degeneracy class of every lattice site (-1 for sites outside every
        class), built once per Nyquist mode and checked against the closed-form
        class count.
        """
        key = bool(include_nyquist)
        if key not in self._class_index:
            class_index = compute_class_index_core(self.ngrid, key)
            n_expected = self.n_classes(key)
            n_found = np.unique(class_index[class_index >= 0]).size
            if n_found != n_expected:
                raise InvariantViolationError(
                    f"found {n_found} degeneracy classes, expected {n_expected} "
                    f"for N={self.ngrid} (include_nyquist={key})")
            self._class_index[key] = class_index
        return self._class_index[key]


    def qav(
        self,
        field : np.ndarray,
        include_nyquist : bool = False) -> np.ndarray:
        """
        Radially average a real (N, N) field over the degeneracy classes of |q|.

        Entry k is the arithmetic mean of all sites in class k, with classes in
        row-major order of the folded component pair (a1, a2), a1 <= a2.

        Args:
            field (np.ndarray): (N, N) real field in FFT ordering.
            include_nyquist (bool): keep classes touching the Nyquist frequency.

        Returns:
            np.ndarray: 1D class-averaged profile.
        """
        validate_field_shape(field, self.ngrid)
        return class_average_np_core(
            np.asarray(field, dtype=np.float64),
            self.class_index(include_nyquist),
            self.n_classes(include_nyquist))


    def q_magnitude(
        self,
        lx : float,
        ly : float) -> np.ndarray:
        """
        Physical |q| = 2 pi sqrt((qx/Lx)^2 + (qy/Ly)^2) of every site.

        The integer qx^2 + qy^2 is recomputed independently of the stored
        wavevector map; any disagreement is an internal invariant violation.
        """
        N = self.ngrid
        m = np.rint(np.fft.fftfreq(N, d=1.0 / N)).astype(np.int64)
        q2_check = m[:, None]**2 + m[None, :]**2
        q2 = self.q[X]**2 + self.q[Y]**2
        if not np.array_equal(q2, q2_check):
            raise InvariantViolationError(
                "The values of q have been improperly accessed")
        return TwoPi * np.sqrt((self.q[X] / lx)**2 + (self.q[Y] / ly)**2)
