"""
    BILAYERtools: Spectra Accumulation

    Running per-site sums of the membrane spectra over frames, the associative
    merge used by frame-parallel runs, and the finalization into radially
    averaged, unit-scaled spectra.

"""

## ###############################################################
## IMPORTS
## ###############################################################

import warnings
from dataclasses import dataclass, field
import numpy as np
from .constants import *
from .core_functions import *
from ...exceptions import DataQualityWarning


@dataclass
class FrameDiagnostics:
    """Per-frame bookkeeping printed while the trajectory is processed."""

    frame: int
    lx: float
    ly: float
    zavg: float
    z1avg: float
    z2avg: float
    t0: float
    nt1: int
    nt2: int
    nl1: int
    nl2: int
    empty: int

    def format(self) -> str:
        return (f"{self.frame + 1}  {self.lx:g}  {self.ly:g}  {self.zavg:g}  "
                f"{self.z1avg:g}  {self.z2avg:g}  {self.t0:g}  {self.nt1}  "
                f"{self.nt2}  {self.nl1}  {self.nl2}  {self.empty}")


@dataclass
class SpectraResults:
    """
    Finalized output of a run.

    q_uniq / q_uniq_ny are the class-averaged |q| (nm^-1) with and without the
    Nyquist classes; every entry of spectra and errors is indexed like
    q_uniq_ny. time_series holds one (nframes, n_classes) array per quantity,
    rows ordered by frame_numbers.
    """

    ngrid: int
    nframes: int
    nlipids: int
    q_uniq: np.ndarray
    q_uniq_ny: np.ndarray
    spectra: dict
    errors: dict
    maps: dict
    tilt_histogram: np.ndarray
    frame_numbers: np.ndarray
    time_series: dict
    summary: dict
    diagnostics: list = field(default_factory=list)

    def q_order(self) -> np.ndarray:
        """Indices of the non-Nyquist classes in ascending |q| (stable for ties)."""
        return np.argsort(self.q_uniq_ny, kind='stable')


class FrameAccumulator:
    """
    Per-site running sums of all per-frame spectra.

    Only plain arrays, dicts and numbers are held, so an accumulator can be
    returned from a joblib worker and merged into another one.
    """

    def __init__(
        self,
        ngrid : int,
        nlipids : int,
        area : bool = False) -> None:
        self.ngrid = ngrid
        self.nlipids = nlipids
        self.area = area
        shape = (ngrid, ngrid)
        self.spectra = {key: np.zeros(shape, dtype=np.float64) for key in SPECTRA_KEYS}
        self.area_spectra = {key: np.zeros(shape, dtype=np.float64) for key in AREA_KEYS} \
            if area else {}
        self.maps = {key: np.zeros(shape, dtype=np.float64) for key in MAP_KEYS}
        self.scalars = dict.fromkeys(SCALAR_KEYS, 0.0)
        self.tilt_histogram = np.zeros(TILT_HIST_BINS, dtype=np.int64)
        self.nframes = 0
        self.time_series = {}
        self.diagnostics = {}


    def add_spectra(
        self,
        fields : dict) -> dict:
        """
        Add one frame of full-plane complex spectra.

        Args:
            fields (dict): 'h', 't', 't1x', 't1y', the x/y components
                'dpx' ... 'umy' and the projections 'dppar', 'dpper', 'dmpar',
                'dmper', 'uppar', 'upper', 'umpar', 'umper', each (N, N) complex.

        Returns:
            dict: this frame's |h|^2, |um_par|^2 and |um_perp|^2 per site.
        """
        acc = self.spectra

        hq2 = power_spectrum_np_core(fields['h'])
        acc['hq2'] += hq2
        acc['hq4'] += hq2 * hq2
        acc['tq2'] += power_spectrum_np_core(fields['t'])

        acc['t1xq2'] += power_spectrum_np_core(fields['t1x'])
        acc['t1yq2'] += power_spectrum_np_core(fields['t1y'])

        for base in ('dp', 'dm', 'up', 'um'):
            acc[base + 'q2'] += power_spectrum_np_core(fields[base + 'x'], fields[base + 'y'])
            for comp in ('par', 'per'):
                name = base + comp
                if name in ('umpar', 'umper'):
                    continue
                acc[name + 'q2'] += power_spectrum_np_core(fields[name])

        umparq2 = power_spectrum_np_core(fields['umpar'])
        umperq2 = power_spectrum_np_core(fields['umper'])
        acc['umparq2'] += umparq2
        acc['umperq2'] += umperq2
        acc['umparq4'] += umparq2 * umparq2
        acc['umperq4'] += umperq2 * umperq2

        # imaginary parts of the height/thickness-tilt cross correlations;
        # the real parts vanish on average
        acc['hdmpar'] += cross_spectrum_imag_np_core(fields['h'], fields['dmpar'])
        acc['tdppar'] += cross_spectrum_imag_np_core(fields['t'], fields['dppar'])

        acc['dum_par'] += cross_spectrum_real_np_core(fields['dmpar'], fields['umpar'])
        acc['dup_par'] += cross_spectrum_real_np_core(fields['dppar'], fields['uppar'])

        return {'hq2': hq2, 'umparq2': umparq2, 'umperq2': umperq2}


    def add_area_spectra(
        self,
        psi_top : np.ndarray,
        psi_bottom : np.ndarray,
        h_direct : np.ndarray) -> None:
        """
        Add one frame of direct-space number density and height spectra.
        """
        if not self.area:
            raise ValueError("accumulator was created without area spectra")
        self.area_spectra['rhoSigq2'] += power_spectrum_np_core(psi_bottom + psi_top)
        self.area_spectra['rhoDelq2'] += power_spectrum_np_core(psi_bottom - psi_top)
        self.area_spectra['hq2Ed'] += power_spectrum_np_core(h_direct)


    def add_maps(
        self,
        maps : dict) -> None:
        """Add real-space (N, N) maps keyed like MAP_KEYS."""
        for key in MAP_KEYS:
            self.maps[key] += maps[key]


    def add_scalars(
        self,
        **values) -> None:
        for key, value in values.items():
            if key not in self.scalars:
                raise KeyError(f"unknown accumulated scalar '{key}'")
            self.scalars[key] += value


    def add_tilt_histogram(
        self,
        counts : np.ndarray) -> None:
        self.tilt_histogram += counts


    def add_time_series(
        self,
        frame_index : int,
        hq2 : np.ndarray,
        umparq2 : np.ndarray,
        umperq2 : np.ndarray) -> None:
        """Store the class-averaged spectra of one frame."""
        self.time_series[frame_index] = (hq2, umparq2, umperq2)


    def end_frame(
        self,
        frame_index : int,
        diagnostics : FrameDiagnostics = None) -> None:
        """Count a completed frame."""
        self.nframes += 1
        if diagnostics is not None:
            self.diagnostics[frame_index] = diagnostics


    def merge(
        self,
        other : "FrameAccumulator") -> "FrameAccumulator":
        """
        Add the sums of another accumulator into this one. Addition is
        elementwise, so merging is associative and independent of how frames
        were split between accumulators.
        """
        if other.ngrid != self.ngrid or other.area != self.area:
            raise ValueError(
                f"cannot merge accumulators of N={other.ngrid} (area={other.area}) "
                f"into N={self.ngrid} (area={self.area})")
        for key in SPECTRA_KEYS:
            self.spectra[key] += other.spectra[key]
        for key in self.area_spectra:
            self.area_spectra[key] += other.area_spectra[key]
        for key in MAP_KEYS:
            self.maps[key] += other.maps[key]
        for key in SCALAR_KEYS:
            self.scalars[key] += other.scalars[key]
        self.tilt_histogram += other.tilt_histogram
        self.nframes += other.nframes
        self.time_series.update(other.time_series)
        self.diagnostics.update(other.diagnostics)
        return self


    def finalize(
        self,
        spectral,
        lx_av : float,
        ly_av : float,
        thickness : float,
        phi : float) -> SpectraResults:
        """
        Radially average and scale all accumulated spectra.

        Args:
            spectral (SpectralOperations): lattice operations for this N.
            lx_av, ly_av (float): box lengths averaged over the trajectory.
            thickness (float): reference monolayer thickness (A).
            phi (float): reference number density (A^-2).

        Returns:
            SpectraResults
        """
        nframes = self.nframes
        if nframes == 0:
            raise ValueError("no frames have been accumulated")
        ngrid = self.ngrid
        scalars = self.scalars

        q_site = spectral.q_magnitude(lx_av, ly_av)
        q_uniq = spectral.qav(q_site, include_nyquist=True) * Q_SCALE
        q_uniq_ny = spectral.qav(q_site) * Q_SCALE

        means = {key: spectral.qav(self.spectra[key]) for key in SPECTRA_KEYS}

        errors = {}
        for name, (second, first, scale) in ERROR_BARS.items():
            errors[name] = standard_deviation_np_core(
                means[second], means[first], nframes) / scale

        # q = 0 entries; up/um par/perp take half of upq2/umq2, where the
        # legacy NIHCode output halved dpq2/dmq2
        means['tq2'][0] = scalars['tq0'] / float(ngrid)**4
        for par, perp, total in PAR_PERP_TOTALS:
            means[par][0] = 0.5 * means[total][0]
            means[perp][0] = 0.5 * means[total][0]
        means['dum_par'][0] *= 0.5
        means['dup_par'][0] *= 0.5

        spectra = {key: means[key] / scale / nframes
                   for key, scale in SPECTRUM_SCALES.items()}

        summary = {
            'lx_av': lx_av,
            'ly_av': ly_av,
            'empty_tot': int(scalars['empty_tot']),
            'nswu': int(scalars['nswu']),
            'nswd': int(scalars['nswd']),
            'z1sq': scalars['z1sq'] / nframes,
            'z2sq': scalars['z2sq'] / nframes,
            'phi0': scalars['phi0'] / nframes,
            't0': scalars['t0'] / nframes,
            'dot_nN': scalars['dot_cum'] / (nframes * self.nlipids),
        }

        if self.area:
            rho_sig = spectral.qav(self.area_spectra['rhoSigq2'])
            rho_del = spectral.qav(self.area_spectra['rhoDelq2'])
            hq2_ed = spectral.qav(self.area_spectra['hq2Ed'])
            spectra['rhoSigq2'] = rho_sig / TILT_SCALE / nframes / phi**2
            spectra['rhoDelq2'] = rho_del / TILT_SCALE / nframes / phi**2
            # number-density contribution to the direct-space height spectrum
            srho = ((self.nlipids // 2) / phi**2
                    * (scalars['z1sq'] + scalars['z2sq']) / (2 * nframes)
                    * (rho_sig / 4 / nframes / (lx_av * ly_av)))
            spectra['hq2_Edholm'] = ((hq2_ed / (2 * nframes * self.nlipids) - srho)
                                     / summary['phi0'] / EDHOLM_SCALE)

        if abs(thickness - summary['t0']) > REFERENCE_TOLERANCE:
            warnings.warn(
                f"input thickness {thickness} differs from the measured {summary['t0']}; "
                "the q=0 point will not be accurate",
                DataQualityWarning,
                stacklevel=2)
        if abs(phi - summary['phi0']) > REFERENCE_TOLERANCE:
            warnings.warn(
                f"input number density {phi} differs from the measured {summary['phi0']}; "
                "the q=0 point will not be accurate",
                DataQualityWarning,
                stacklevel=2)

        frames = sorted(self.time_series)
        n_classes = q_uniq_ny.size
        time_series = {}
        for k, key in enumerate(TIME_SERIES_KEYS):
            if frames:
                time_series[key] = np.array([self.time_series[f][k] for f in frames])
            else:
                time_series[key] = np.zeros((0, n_classes))

        return SpectraResults(
            ngrid=ngrid,
            nframes=nframes,
            nlipids=self.nlipids,
            q_uniq=q_uniq,
            q_uniq_ny=q_uniq_ny,
            spectra=spectra,
            errors=errors,
            maps={key: value / nframes for key, value in self.maps.items()},
            tilt_histogram=self.tilt_histogram.copy(),
            frame_numbers=np.array(frames, dtype=np.int64) + 1,
            time_series=time_series,
            summary=summary,
            diagnostics=[self.diagnostics[f] for f in sorted(self.diagnostics)])
