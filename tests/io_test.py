#!/usr/bin/env python3
import numpy as np
import pytest
from BILAYERtools.exceptions import TrajectoryParseError
from BILAYERtools.funcs.statistics import SpectraResults
from BILAYERtools.funcs.statistics.constants import SPECTRUM_SCALES
from BILAYERtools.io import (
    LipidTrajectory,
    default_paths,
    read_scalar_stream,
    write_qdata,
    write_time_series,
    write_spectra_dump,
    write_spectra_hdf5,
    format_report,
)


def make_results():
    q = np.array([0.0, 2.0, 1.0])
    spectra = {key: np.array([1.0, 2.0, 3.0]) * (k + 1)
               for k, key in enumerate(SPECTRUM_SCALES)}
    return SpectraResults(
        ngrid=4,
        nframes=2,
        nlipids=32,
        q_uniq=np.array([0.0, 2.0, 1.0, 3.0, 4.0, 5.0]),
        q_uniq_ny=q,
        spectra=spectra,
        errors={'hq2': np.zeros(3)},
        maps={'occupancy_top': np.ones((4, 4))},
        tilt_histogram=np.zeros(100, dtype=np.int64),
        frame_numbers=np.array([1, 2]),
        time_series={key: np.array([[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]])
                     for key in ('hq2', 'umparq2', 'umperq2')},
        summary={'lx_av': 40.0, 'ly_av': 40.0, 'empty_tot': 0, 'nswu': 0,
                 'nswd': 0, 'z1sq': 1.0, 'z2sq': 1.0, 'phi0': 0.01,
                 't0': 20.0, 'dot_nN': 1.0})


def test_read_scalar_stream(tmp_path):
    path = tmp_path / "box.out"
    path.write_text("1.5 2.5\n3.5\n4.5")
    assert np.allclose(read_scalar_stream(str(path), 3), [1.5, 2.5, 3.5])


def test_short_stream_raises(tmp_path):
    path = tmp_path / "box.out"
    path.write_text("1.0\n2.0\n")
    with pytest.raises(TrajectoryParseError) as excinfo:
        read_scalar_stream(str(path), 3)
    assert excinfo.value.expected == 3 and excinfo.value.found == 2


def test_malformed_token_raises(tmp_path):
    path = tmp_path / "box.out"
    path.write_text("1.0 abc 3.0\n")
    with pytest.raises(TrajectoryParseError):
        read_scalar_stream(str(path), 3)


def test_default_paths_from_environment():
    paths = default_paths({"WBCELLX": "/data/x.out"})
    assert paths["WBCELLX"] == "/data/x.out"
    assert paths["WBLIPIDZ"] == "./LipidZ.out"


def test_trajectory_from_files(tmp_path, bilayer_factory, stream_writer):
    original = bilayer_factory(nframes=2, amplitude=0.5)
    paths = stream_writer(tmp_path, original)

    class Config:
        nframes = 2
        nlipids = 32

    trajectory = LipidTrajectory.from_files(Config, paths)
    assert trajectory.nframes == 2 and trajectory.nlipids == 32
    assert np.allclose(trajectory.head, original.head)
    assert np.allclose(trajectory.tail, original.tail)
    assert trajectory.lx_av == pytest.approx(40.0)


def test_trajectory_rejects_inconsistent_shapes():
    with pytest.raises(ValueError):
        LipidTrajectory(np.ones(2), np.ones(2), np.ones(2),
                        np.zeros((3, 4, 3)), np.zeros((3, 4, 3)))


def test_write_qdata_sorted_by_q(tmp_path):
    path = tmp_path / "qdata.dat"
    write_qdata(str(path), make_results())
    lines = path.read_text().splitlines()

    header = lines[0].split()
    assert header[0] == "10*q2_uniq_ny" and header[3] == "hq2_uniq"
    assert len(lines[0]) == 9 * 16 + 8
    table = np.loadtxt(str(path), skiprows=1)
    assert np.array_equal(table[:, 0], [0.0, 1.0, 2.0])
    # hq2 is the first spectrum: (1, 2, 3) reordered with q
    assert np.allclose(table[:, 3], [1.0, 3.0, 2.0])
    assert lines[1].startswith("      0.00000000 ")


def test_write_time_series(tmp_path):
    written = write_time_series(str(tmp_path / "q.dat"), make_results())
    assert [p.split("/")[-1] for p in written] == ["hqq.dat", "paq.dat", "peq.dat"]

    lines = (tmp_path / "hqq.dat").read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("    1.0  ")
    # columns in ascending q: q = (0, 2, 1) -> (0.1, 0.3, 0.2)
    assert [float(v) for v in lines[0].split()[1:]] == [0.1, 0.3, 0.2]


def test_write_spectra_dump(tmp_path):
    path = tmp_path / "spectra.dat"
    write_spectra_dump(str(path), make_results())
    rows = [line.split() for line in path.read_text().splitlines()]
    assert len(rows) == 14
    assert [float(v) for v in rows[0]] == [0.0, 2.0, 1.0]


def test_write_spectra_hdf5(tmp_path):
    h5py = pytest.importorskip("h5py")
    path = tmp_path / "spectra.h5"
    results = make_results()
    write_spectra_hdf5(str(path), results)

    with h5py.File(str(path), "r") as f:
        assert np.allclose(f["spectra/hq2"][:], results.spectra["hq2"])
        assert np.allclose(f["q_uniq_ny"][:], results.q_uniq_ny)
        assert f["metadata"].attrs["ngrid"] == 4
        assert f["time_series/umperq2"].shape == (2, 3)


def test_format_report():
    report = format_report(make_results())
    assert "hq2=" in report
    assert "Average monolayer thickness= 20 Angstroms" in report
    assert "sqrt(var(hq2))=" in report
