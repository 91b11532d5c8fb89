"""
Writers for finalized membrane spectra: the q-sorted table, per-frame time
series, the one-line-per-quantity spectra dump, an HDF5 archive and the console
report.
"""

import os
import numpy as np
from ..funcs.statistics.constants import QDATA_COLUMNS

# rows of the spectra dump after |q|
DUMP_ROWS = ('hq2', 'tq2', 'dmparq2', 'dpparq2', 'dmperq2', 'dpperq2',
             'hdmpar', 'tdppar', 't1xq2', 'umparq2', 'upparq2', 'umperq2',
             'upperq2')

# (file prefix, time-series key)
TIME_SERIES_FILES = (('hq', 'hq2'), ('pa', 'umparq2'), ('pe', 'umperq2'))

# (report label, spectrum key)
REPORT_SPECTRA = (
    ("hq2", 'hq2'),
    ("tq2", 'tq2'),
    ("t1xq2", 't1xq2'),
    ("t1yq2", 't1yq2'),
    ("dpq2", 'dpq2'),
    ("dmq2", 'dmq2'),
    ("dpparq2", 'dpparq2'),
    ("dpperq2", 'dpperq2'),
    ("dmparq2", 'dmparq2'),
    ("dmperq2", 'dmperq2'),
    ("Im(hdmpar)", 'hdmpar'),
    ("Im(tdppar)", 'tdppar'),
    ("umparq2", 'umparq2'),
    ("umperq2", 'umperq2'),
    ("upparq2", 'upparq2'),
    ("upperq2", 'upperq2'),
    ("Real(dum_par)", 'dum_par'),
    ("Real(dup_par)", 'dup_par'),
    ("rhoSigq2", 'rhoSigq2'),
    ("rhoDelq2", 'rhoDelq2'),
    ("hq2_Edholm", 'hq2_Edholm'),
)


def _format_row(values) -> str:
    return ", ".join(f"{v:g}" for v in values)


def write_spectra_dump(path, results) -> None:
    """
    One line per quantity: |q| (nm^-1) then the scaled spectra of DUMP_ROWS,
    all in class order.
    """
    rows = [results.q_uniq_ny] + [results.spectra[key] for key in DUMP_ROWS]
    with open(path, "w") as fp:
        for row in rows:
            fp.write(" ".join(f"{v:g}" for v in row) + "\n")


def write_qdata(path, results) -> None:
    """
    Table of the main spectra, one row per non-Nyquist class, sorted by |q|.
    """
    order = results.q_order()
    table = np.column_stack(
        [results.q_uniq_ny[order]]
        + [results.spectra[name.replace('_uniq', '')][order] for name in QDATA_COLUMNS[1:]])
    header = " ".join(f"{name:>16s}" for name in QDATA_COLUMNS)
    np.savetxt(path, table, fmt="%16.8f", delimiter=" ", header=header, comments="")


def write_time_series(path, results) -> list:
    """
    Per-frame class-averaged spectra next to path, in files named
    hq<name>, pa<name> and pe<name>. Each row is the frame number followed by
    the values in ascending |q|.

    Returns:
        list: the paths written.
    """
    directory, name = os.path.split(path)
    order = results.q_order()
    written = []
    for prefix, key in TIME_SERIES_FILES:
        out_path = os.path.join(directory, prefix + name)
        series = results.time_series[key]
        with open(out_path, "w") as fp:
            for frame_number, row in zip(results.frame_numbers, series):
                fp.write(f"{float(frame_number):7.1f}  ")
                fp.write("".join(f"{v:10.6f}  " for v in row[order]))
                fp.write("\n")
        written.append(out_path)
    return written


def write_spectra_hdf5(path, results, compression="gzip") -> None:
    """
    Save every finalized spectrum, error bar, map and time series to HDF5.
    """
    try:
        import h5py
    except ImportError:
        raise ImportError("h5py required for saving. Install with: pip install h5py")

    with h5py.File(path, "w") as f:
        f.create_dataset("q_uniq", data=results.q_uniq)
        f.create_dataset("q_uniq_ny", data=results.q_uniq_ny)
        f.create_dataset("tilt_histogram", data=results.tilt_histogram)
        f.create_dataset("frame_numbers", data=results.frame_numbers)

        for group_name, content in (("spectra", results.spectra),
                                    ("errors", results.errors),
                                    ("maps", results.maps),
                                    ("time_series", results.time_series)):
            group = f.create_group(group_name)
            for key, value in content.items():
                group.create_dataset(key, data=value, compression=compression)

        meta = f.create_group("metadata")
        meta.attrs["ngrid"] = results.ngrid
        meta.attrs["nframes"] = results.nframes
        meta.attrs["nlipids"] = results.nlipids
        for key, value in results.summary.items():
            meta.attrs[key] = value

    print(f"Spectra saved to {path}")


def format_report(results) -> str:
    """Console report of all spectra, error bars and run averages."""
    lines = ["q2=", _format_row(results.q_uniq), ""]
    lines += ["q2_tilt=", _format_row(results.q_uniq_ny), ""]

    for label, key in REPORT_SPECTRA:
        if key in results.spectra:
            lines += [f"{label}=", _format_row(results.spectra[key]), ""]

    lines.append("__________ *error bars* ____________")
    for key, value in results.errors.items():
        lines += [f"sqrt(var({key}))=", _format_row(value), ""]

    lines += ["tmag", " ".join(str(c) for c in results.tilt_histogram), ""]

    s = results.summary
    lines += [
        f"Average Box Size= {s['lx_av']:g} x {s['ly_av']:g} Angstroms",
        f"Total Number of Neighboring Empty Patches= {s['empty_tot']}",
        f"Swap count, upper {s['nswu']}  lower {s['nswd']}",
        f"<z1^2>= {s['z1sq']:g} Angstroms^2",
        f"<z2^2>= {s['z2sq']:g} Angstroms^2",
        f"Average Number Density= {s['phi0']:.10g} Angstroms^(-2)",
        f"Average monolayer thickness= {s['t0']:.10g} Angstroms",
        f"Average (n.N) = {s['dot_nN']:.10g}",
    ]
    return "\n".join(lines)
