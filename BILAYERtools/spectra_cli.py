#!/usr/bin/env python3
"""
Command line front end: read a lipid trajectory, compute the membrane spectra
and write the report and the optional output files.

    bilayer-spectra -f FRAMES -g GRID -l LIPIDS [-p PHI] [-t THICKNESS]
                    [-q QDATA] [-n] [--area] [--jobs N] [--hdf5 PATH]
                    [--spectra PATH] [--quiet]

Input locations default to ./boxsize{X,Y,Z}.out and ./Lipid{X,Y,Z}.out and are
overridden by the WBCELLX/Y/Z and WBLIPIDX/Y/Z environment variables.
"""

import sys
import argparse
from .exceptions import BilayerSpectraError
from .funcs.membrane import SpectraConfig, MembraneSpectra
from .funcs.membrane.constants import DEFAULT_PHI, DEFAULT_THICKNESS
from .io import (
    LipidTrajectory,
    default_paths,
    format_report,
    write_qdata,
    write_time_series,
    write_spectra_dump,
    write_spectra_hdf5,
)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog='bilayer-spectra',
        description='Fourier spectra of lipid bilayer height, thickness, tilt and director fluctuations')
    ap.add_argument('-f',
                    '--frames',
                    required=False,
                    default=0,
                    help='number of frames to be analyzed (required)',
                    type=int)
    ap.add_argument('-g',
                    '--grid',
                    required=False,
                    default=0,
                    help='number of FFT grid points (required, even; ca. boxX/12 is a reasonable choice)',
                    type=int)
    ap.add_argument('-l',
                    '--lipids',
                    required=False,
                    default=0,
                    help='number of lipids per frame (required)',
                    type=int)
    ap.add_argument('-p',
                    '--phi',
                    required=False,
                    default=DEFAULT_PHI,
                    help='lipid number density used for the q=0 mode',
                    type=float)
    ap.add_argument('-t',
                    '--thickness',
                    required=False,
                    default=DEFAULT_THICKNESS,
                    help='monolayer thickness used for the q=0 mode',
                    type=float)
    ap.add_argument('-q',
                    '--qdata',
                    required=False,
                    default=None,
                    help='file to write the q-sorted spectra to; also writes the hq/pa/pe time series',
                    type=str)
    ap.add_argument('-n',
                    '--normal',
                    action="store_true",
                    help='surface normal fluctuation spectra instead of tilt')
    ap.add_argument('--area',
                    action="store_true",
                    help='also compute the number density spectra')
    ap.add_argument('--area-tail',
                    action="store_true",
                    help='use tail instead of head positions for the number density')
    ap.add_argument('--jobs',
                    required=False,
                    default=1,
                    help='number of joblib workers to split the frames over',
                    type=int)
    ap.add_argument('--hdf5',
                    required=False,
                    default=None,
                    help='HDF5 file to save all spectra to',
                    type=str)
    ap.add_argument('--spectra',
                    required=False,
                    default=None,
                    help='file to dump the main spectra to, one quantity per line',
                    type=str)
    ap.add_argument('--quiet',
                    action="store_true",
                    help='do not print a line per frame')
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = SpectraConfig(
        ngrid=args.grid,
        nlipids=args.lipids,
        nframes=args.frames,
        thickness=args.thickness,
        phi=args.phi,
        calc_tilt=not args.normal,
        area=args.area,
        area_tail=args.area_tail,
        verbose=not args.quiet)

    try:
        config.validate()
        print()
        print(config.describe())
        if args.qdata:
            print(f"\n\tData will be written to {args.qdata}")
        print()

        trajectory = LipidTrajectory.from_files(config, default_paths())
        pipeline = MembraneSpectra(config, trajectory.lx_av, trajectory.ly_av)
        results = pipeline.run(trajectory, n_jobs=args.jobs)
    except (BilayerSpectraError, OSError) as e:
        print(f"\n{e}\n", file=sys.stderr)
        return 1

    print(format_report(results))

    if args.spectra:
        write_spectra_dump(args.spectra, results)
    if args.qdata:
        write_qdata(args.qdata, results)
        write_time_series(args.qdata, results)
    if args.hdf5:
        write_spectra_hdf5(args.hdf5, results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
