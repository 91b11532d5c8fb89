"""
    BILAYERtools: Membrane Spectra

    The per-frame chain that turns head and tail bead positions of a two-leaflet
    lipid membrane into Fourier spectra of the height, thickness, tilt and
    director fields, and the driver that runs it over a trajectory.

    Per frame:
        1. wrap heads into the box and fix lipids carried across it in z,
        2. bin head heights per leaflet and fill empty cells,
        3. build the leaflet surface normals from Fourier derivatives,
        4. bin per-lipid tilt and director vectors,
        5. transform, expand and decompose all fields, and accumulate the
           power and cross spectra.

"""

## ###############################################################
## IMPORTS
## ###############################################################

from dataclasses import dataclass
import numpy as np
from joblib import Parallel, delayed, cpu_count
from .constants import *
from .core_functions import *
from ..grid import GridField, Binner
from ..spectral import SpectralOperations
from ..spectral.constants import TwoPi, DEFAULT_FFT_THREADS
from ..statistics import FrameAccumulator, FrameDiagnostics, SpectraResults
from ..statistics.constants import HEIGHT_SCALE, TILT_SCALE, TILT_HIST_BINS
from ...exceptions import ConfigurationError


@dataclass
class SpectraConfig:
    """Run parameters of a spectra calculation."""

    ngrid: int
    nlipids: int
    nframes: int
    thickness: float = DEFAULT_THICKNESS
    phi: float = DEFAULT_PHI
    calc_tilt: bool = True
    cut_angle_cos: float = DEFAULT_CUT_ANGLE_COS
    area: bool = False
    area_tail: bool = False
    verbose: bool = True

    def validate(self) -> "SpectraConfig":
        """Reject missing sizes before any array is allocated."""
        for name, label in (("ngrid", "Grid"),
                            ("nlipids", "Lipids per frame"),
                            ("nframes", "Number of frames")):
            value = getattr(self, name)
            if not value or value < 0:
                raise ConfigurationError(
                    name,
                    f"{label} must be specified (got {value!r}). "
                    "Try `bilayer-spectra --help` for more info.")
        return self

    def describe(self) -> str:
        """Parameter echo printed at the start of a run."""
        return "\n".join([
            "\tParameters used:-",
            f"\t\tnframes   = {self.nframes}",
            f"\t\tngrid     = {self.ngrid}",
            f"\t\tnlipids   = {self.nlipids}",
            f"\t\tphi       = {self.phi}",
            f"\t\tthickness = {self.thickness}",
            f"\t\tnormal    = {not self.calc_tilt}",
            f"\t\tarea      = {self.area}"])


@dataclass
class LipidFrame:
    """Lipids of one frame after wrapping, leaflet assignment and stray fixes."""

    head: np.ndarray
    tail: np.ndarray
    director: np.ndarray
    leaflet: np.ndarray
    good: np.ndarray
    zavg: float
    z1avg: float
    z2avg: float
    nl1: int
    nl2: int
    nswu: int
    nswd: int

    @property
    def top(self) -> np.ndarray:
        return self.leaflet == TOP

    @property
    def bottom(self) -> np.ndarray:
        return self.leaflet == BOTTOM


class MembraneSpectra():


    def __init__(
        self,
        config : SpectraConfig,
        lx_av : float,
        ly_av : float,
        cache_plans : bool = True,
        fft_threads : int = DEFAULT_FFT_THREADS):
        """
        Allocate the lattice fields, FFT plans and accumulator for one run.

        Args:
            config (SpectraConfig): run parameters.
            lx_av, ly_av (float): box lengths averaged over the whole trajectory,
                used for tail unwrapping and for the physical |q|.
            cache_plans (bool): use cached FFTW plans when pyfftw is available.
            fft_threads (int): threads per FFTW plan.
        """
        self.config = config.validate()
        self.ngrid = config.ngrid
        self.lx_av = float(lx_av)
        self.ly_av = float(ly_av)

        self.spectral = SpectralOperations(
            self.ngrid,
            cache_plans=cache_plans,
            fft_threads=fft_threads)
        self.binner = Binner(self.ngrid)

        # head heights per leaflet, good lipids only
        self.top_height = GridField(self.ngrid)
        self.bottom_height = GridField(self.ngrid)
        # (tilt x, tilt y, director x, director y) per leaflet, all lipids
        self.top_tilt = GridField(self.ngrid, N_TILT_COMP)
        self.bottom_tilt = GridField(self.ngrid, N_TILT_COMP)

        self.accumulator = FrameAccumulator(
            self.ngrid,
            config.nlipids,
            area=config.area)


    def prepare_lipids(
        self,
        head : np.ndarray,
        tail : np.ndarray,
        lx : float,
        ly : float,
        lz : float) -> LipidFrame:
        """
        Wrap, assign leaflets and fix stray lipids. The inputs are not modified.
        """
        head = np.array(head, dtype=np.float64, order='C')
        tail = np.array(tail, dtype=np.float64, order='C')
        wrap_lipids_core(head, tail, float(lx), float(ly), self.lx_av, self.ly_av)

        director = director_np_core(head, tail)
        leaflet, good = leaflet_np_core(director, self.config.cut_angle_cos)
        z1avg, z2avg, nswu, nswd = fix_stray_lipids_np_core(head, tail, leaflet, lz)

        return LipidFrame(
            head=head,
            tail=tail,
            director=director,
            leaflet=leaflet,
            good=good,
            zavg=float(head[:, Z].mean()),
            z1avg=z1avg,
            z2avg=z2avg,
            nl1=int(np.count_nonzero(leaflet == TOP)),
            nl2=int(np.count_nonzero(leaflet == BOTTOM)),
            nswu=nswu,
            nswd=nswd)


    def number_density(
        self,
        lipids : LipidFrame,
        lx : float,
        ly : float) -> tuple:
        """
        Direct-space Fourier sums of the leaflet number densities and of the
        lipid heights, over the full N x N lattice.

        Returns:
            psi_top, psi_bottom (np.ndarray): (1/L) sum_k exp(-i q.r_k) over the
                good lipids of each leaflet, with the q = 0 mode replaced by
                nl/L - phi0 L, L = sqrt(Lx Ly).
            h_direct (np.ndarray): sum_k (z_k - zavg) exp(-i q.r_k) over all lipids.
        """
        source = lipids.tail if self.config.area_tail else lipids.head
        weights = np.stack([
            (lipids.top & lipids.good).astype(np.float64),
            (lipids.bottom & lipids.good).astype(np.float64),
            lipids.head[:, Z] - lipids.zavg])
        sums = direct_fourier_sums_core(
            np.ascontiguousarray(source[:, X]),
            np.ascontiguousarray(source[:, Y]),
            weights,
            self.spectral.q,
            TwoPi / lx,
            TwoPi / ly)

        lxy = np.sqrt(lx * ly)
        psi_top = sums[0] / lxy
        psi_bottom = sums[1] / lxy
        psi_top[0, 0] = lipids.nl1 / lxy - self.config.phi * lxy
        psi_bottom[0, 0] = lipids.nl2 / lxy - self.config.phi * lxy
        return psi_top, psi_bottom, sums[2]


    def bin_heights(
        self,
        lipids : LipidFrame,
        ix : np.ndarray,
        iy : np.ndarray,
        valid : np.ndarray) -> tuple:
        """
        Mean head height above zavg of the good lipids in every cell, per
        leaflet, with empty cells interpolated.

        Returns:
            z1, z2 (np.ndarray): (N, N) top and bottom leaflet heights
            z1sq, z2sq (float): mean squared height of the good lipids per leaflet
            empty (int): empty cells with an empty neighbour, both leaflets
        """
        dz = lipids.head[:, Z] - lipids.zavg
        top = lipids.top & lipids.good
        bottom = lipids.bottom & lipids.good

        z1sq = np.sum(dz[top]**2) / lipids.nl1 if lipids.nl1 else 0.0
        z2sq = np.sum(dz[bottom]**2) / lipids.nl2 if lipids.nl2 else 0.0

        empty = 0
        for grid, mask, name in ((self.top_height, top, "top leaflet height"),
                                 (self.bottom_height, bottom, "bottom leaflet height")):
            grid.reset()
            grid.accumulate(ix, iy, dz, mask & valid)
            grid.normalize()
            empty += grid.interpolate_empty(field_name=name)

        return self.top_height[0].copy(), self.bottom_height[0].copy(), z1sq, z2sq, empty


    def surface_normals(
        self,
        z1 : np.ndarray,
        z2 : np.ndarray,
        lx : float,
        ly : float) -> tuple:
        """
        Leaflet normals from the spectral gradients of the height fields:

            N1 = ( dz1/dx,  dz1/dy, -1) g1
            N2 = (-dz2/dx, -dz2/dy,  1) g2

        with g = 1/sqrt(1 + |grad z|^2) for unit normals, g = 1 otherwise.

        Returns:
            norm1, norm2 (np.ndarray): (3, N, N) each.
        """
        half = self.spectral.forward(np.stack([z1, z2]), field_name="leaflet heights")
        dzdx, dzdy = self.spectral.derivative(half, lx, ly)

        if self.config.calc_tilt:
            g = 1.0 / np.sqrt(1.0 + dzdx**2 + dzdy**2)
        else:
            g = np.ones_like(dzdx)

        norm1 = np.stack([dzdx[0] * g[0], dzdy[0] * g[0], -g[0]])
        norm2 = np.stack([-dzdx[1] * g[1], -dzdy[1] * g[1], g[1]])
        return norm1, norm2


    def bin_tilt(
        self,
        lipids : LipidFrame,
        ix : np.ndarray,
        iy : np.ndarray,
        valid : np.ndarray,
        norm1 : np.ndarray,
        norm2 : np.ndarray) -> dict:
        """
        Bin the per-lipid tilt m = n - N (unit-normal mode) or m = -N
        (surface-normal mode) and the director n of every lipid in its leaflet,
        using the normal of the lipid's own cell.

        Returns:
            dict: 'm1', 'm2', 'n1', 'n2' as (2, N, N) x/y fields, 'dot' the
            summed n.N, 'nt1', 'nt2' the binned lipid counts and 'hist' the
            top leaflet tilt magnitude histogram.
        """
        calc_tilt = 1.0 if self.config.calc_tilt else 0.0
        out = {'dot': 0.0}

        for label, grid, normals, suffix in ((TOP, self.top_tilt, norm1, '1'),
                                             (BOTTOM, self.bottom_tilt, norm2, '2')):
            mask = (lipids.leaflet == label) & valid
            director = lipids.director[mask].T
            cell_normal = normals[:, ix[mask], iy[mask]]

            out['dot'] += float(np.sum(director * cell_normal))
            tilt = director * calc_tilt - cell_normal

            weights = np.empty((N_TILT_COMP, tilt.shape[1]))
            weights[TILT_X] = tilt[X]
            weights[TILT_Y] = tilt[Y]
            weights[DIR_X] = director[X]
            weights[DIR_Y] = director[Y]

            grid.reset()
            grid.accumulate(ix[mask], iy[mask], weights)
            grid.normalize()
            grid.interpolate_empty(field_name=f"leaflet {suffix} tilt")

            out['m' + suffix] = grid.values[TILT_X:TILT_Y + 1].copy()
            out['n' + suffix] = grid.values[DIR_X:DIR_Y + 1].copy()
            out['nt' + suffix] = int(mask.sum())
            if label == TOP:
                out['hist'] = tilt_histogram_np_core(tilt, TILT_HIST_BINS)

        return out


    def process_frame(
        self,
        head : np.ndarray,
        tail : np.ndarray,
        lx : float,
        ly : float,
        lz : float,
        frame_index : int = None) -> FrameDiagnostics:
        """
        Run the full chain on one frame and add it to the accumulator.

        Args:
            head, tail (np.ndarray): (nl, 3) bead positions.
            lx, ly, lz (float): box lengths of this frame.
            frame_index (int): position of the frame in the trajectory; defaults
                to the number of frames processed so far.

        Returns:
            FrameDiagnostics
        """
        cfg = self.config
        acc = self.accumulator
        spectral = self.spectral
        if frame_index is None:
            frame_index = acc.nframes
        lx, ly, lz = float(lx), float(ly), float(lz)

        lipids = self.prepare_lipids(head, tail, lx, ly, lz)
        phi0_frame = 0.5 * (lipids.nl1 + lipids.nl2) / (lx * ly)

        if cfg.area:
            acc.add_area_spectra(*self.number_density(lipids, lx, ly))

        ix, iy, valid = self.binner.cell_indices(
            lipids.head[:, X], lipids.head[:, Y], lx, ly)

        z1, z2, z1sq, z2sq, empty = self.bin_heights(lipids, ix, iy, valid)
        h = z1 + z2
        t = z1 - z2
        t0_frame = 0.5 * t.mean()
        tq0_frame = (lx * np.sum(t - 2.0 * cfg.thickness))**2

        norm1, norm2 = self.surface_normals(z1, z2, lx, ly)
        tilt = self.bin_tilt(lipids, ix, iy, valid, norm1, norm2)
        m1, m2, n1, n2 = tilt['m1'], tilt['m2'], tilt['n1'], tilt['n2']

        real = np.stack([h, t, m1[X], m1[Y],
                         *(m1 + m2), *(m1 - m2),
                         *(n1 + n2), *(n1 - n2)])
        full = spectral.full_array(
            spectral.forward(real, field_name="frame fields"),
            np.sqrt(lx * ly))
        fields = dict(zip(FRAME_FIELDS, full))

        par, perp = spectral.decompose(
            np.stack([fields[name + 'x'] for name in VECTOR_FIELDS]),
            np.stack([fields[name + 'y'] for name in VECTOR_FIELDS]))
        for k, name in enumerate(VECTOR_FIELDS):
            fields[name + 'par'] = par[k]
            fields[name + 'per'] = perp[k]

        powers = acc.add_spectra(fields)
        acc.add_time_series(
            frame_index,
            spectral.qav(powers['hq2']) / HEIGHT_SCALE,
            spectral.qav(powers['umparq2']) / TILT_SCALE,
            spectral.qav(powers['umperq2']) / TILT_SCALE)

        acc.add_maps({
            'occupancy_top': self.top_height.counts,
            'occupancy_bottom': self.bottom_height.counts,
            'director_diff_x': n1[X] - n2[X],
            'director_diff_y': n1[Y] - n2[Y]})
        acc.add_tilt_histogram(tilt['hist'])
        acc.add_scalars(
            t0=t0_frame,
            tq0=tq0_frame,
            phi0=phi0_frame,
            z1sq=z1sq,
            z2sq=z2sq,
            dot_cum=tilt['dot'],
            empty_tot=empty,
            nswu=lipids.nswu,
            nswd=lipids.nswd)

        diagnostics = FrameDiagnostics(
            frame=frame_index,
            lx=lx,
            ly=ly,
            zavg=lipids.zavg,
            z1avg=lipids.z1avg,
            z2avg=lipids.z2avg,
            t0=t0_frame,
            nt1=tilt['nt1'],
            nt2=tilt['nt2'],
            nl1=lipids.nl1,
            nl2=lipids.nl2,
            empty=empty)
        acc.end_frame(frame_index, diagnostics)
        if cfg.verbose:
            print(diagnostics.format())
        return diagnostics


    def run(
        self,
        trajectory,
        n_jobs : int = 1) -> SpectraResults:
        """
        Process every frame of a trajectory and finalize the spectra.

        With n_jobs > 1 the frames are split into contiguous blocks, each block
        is processed by a joblib worker with its own pipeline, and the worker
        accumulators are merged in block order.

        Args:
            trajectory (LipidTrajectory): box lengths and bead positions.
            n_jobs (int): number of joblib workers.

        Returns:
            SpectraResults
        """
        nframes = min(self.config.nframes, trajectory.nframes)

        if n_jobs == 1 or nframes < 2:
            for i in range(nframes):
                self.process_frame(*trajectory.frame(i), frame_index=i)
        else:
            n_workers = cpu_count() if n_jobs < 0 else n_jobs
            n_blocks = min(n_workers, nframes)
            blocks = np.array_split(np.arange(nframes), n_blocks)
            accumulators = Parallel(n_jobs=n_jobs)(
                delayed(_process_block)(
                    self.config,
                    self.lx_av,
                    self.ly_av,
                    trajectory.head[block],
                    trajectory.tail[block],
                    trajectory.lx[block],
                    trajectory.ly[block],
                    trajectory.lz[block],
                    block) for block in blocks)
            for accumulator in accumulators:
                self.accumulator.merge(accumulator)

        return self.finalize()


    def finalize(self) -> SpectraResults:
        return self.accumulator.finalize(
            self.spectral,
            self.lx_av,
            self.ly_av,
            self.config.thickness,
            self.config.phi)


def _process_block(
    config : SpectraConfig,
    lx_av : float,
    ly_av : float,
    head : np.ndarray,
    tail : np.ndarray,
    lx : np.ndarray,
    ly : np.ndarray,
    lz : np.ndarray,
    frame_indices : np.ndarray) -> FrameAccumulator:
    """Worker body: a private pipeline over one contiguous block of frames."""
    pipeline = MembraneSpectra(config, lx_av, ly_av)
    for k, frame_index in enumerate(frame_indices):
        pipeline.process_frame(
            head[k], tail[k], lx[k], ly[k], lz[k],
            frame_index=int(frame_index))
    return pipeline.accumulator


def compute_spectra(
    trajectory,
    config : SpectraConfig,
    n_jobs : int = 1,
    cache_plans : bool = True) -> SpectraResults:
    """
    Convenience wrapper: build a pipeline for a trajectory and run it.
    """
    pipeline = MembraneSpectra(
        config,
        trajectory.lx_av,
        trajectory.ly_av,
        cache_plans=cache_plans)
    return pipeline.run(trajectory, n_jobs=n_jobs)
