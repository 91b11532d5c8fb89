#!/usr/bin/env python3
import numpy as np
import pytest
from BILAYERtools.exceptions import DataQualityWarning
from BILAYERtools.funcs.spectral import SpectralOperations
from BILAYERtools.funcs.statistics import FrameAccumulator
from BILAYERtools.funcs.statistics.constants import (
    SPECTRA_KEYS,
    HEIGHT_SCALE,
    TILT_SCALE,
)

N = 4
FIELD_NAMES = ('h', 't', 't1x', 't1y', 'dpx', 'dpy', 'dmx', 'dmy',
               'upx', 'upy', 'umx', 'umy')


def random_fields(ops, rng):
    shape = (N, N)
    fields = {name: rng.standard_normal(shape) + 1j * rng.standard_normal(shape)
              for name in FIELD_NAMES}
    for base in ('dp', 'dm', 'up', 'um'):
        fields[base + 'par'], fields[base + 'per'] = ops.decompose(
            fields[base + 'x'], fields[base + 'y'])
    return fields


def add_frame(acc, ops, fields, frame_index, t0=20.0, phi0=0.01):
    powers = acc.add_spectra(fields)
    acc.add_time_series(frame_index,
                        ops.qav(powers['hq2']) / HEIGHT_SCALE,
                        ops.qav(powers['umparq2']) / TILT_SCALE,
                        ops.qav(powers['umperq2']) / TILT_SCALE)
    acc.add_scalars(t0=t0, phi0=phi0, tq0=1.0, dot_cum=acc.nlipids)
    acc.end_frame(frame_index)


def test_merge_matches_sequential():
    ops = SpectralOperations(N, cache_plans=False)
    rng = np.random.default_rng(5)
    frames = [random_fields(ops, rng) for _ in range(5)]

    sequential = FrameAccumulator(N, 10)
    for k, fields in enumerate(frames):
        add_frame(sequential, ops, fields, k)

    first, second = FrameAccumulator(N, 10), FrameAccumulator(N, 10)
    for k, fields in enumerate(frames):
        add_frame(first if k < 2 else second, ops, fields, k)
    merged = first.merge(second)

    assert merged.nframes == sequential.nframes == 5
    for key in SPECTRA_KEYS:
        assert np.allclose(merged.spectra[key], sequential.spectra[key]), f"{key} differs after merge"
    assert sorted(merged.time_series) == list(range(5))

    a = merged.finalize(ops, 40.0, 40.0, 20.0, 0.01)
    b = sequential.finalize(ops, 40.0, 40.0, 20.0, 0.01)
    for key in b.spectra:
        assert np.allclose(a.spectra[key], b.spectra[key])
    assert np.allclose(a.time_series['hq2'], b.time_series['hq2'])
    print("Merge passed.")


def test_merge_rejects_other_lattice():
    with pytest.raises(ValueError):
        FrameAccumulator(4, 10).merge(FrameAccumulator(8, 10))


def test_finalize_zero_wavevector_entries():
    ops = SpectralOperations(N, cache_plans=False)
    rng = np.random.default_rng(6)
    acc = FrameAccumulator(N, 10)
    for k in range(3):
        add_frame(acc, ops, random_fields(ops, rng), k)

    raw_dum = ops.qav(acc.spectra['dum_par'])[0]
    results = acc.finalize(ops, 40.0, 40.0, 20.0, 0.01)
    spectra = results.spectra

    for par, perp, total in (('dpparq2', 'dpperq2', 'dpq2'),
                             ('dmparq2', 'dmperq2', 'dmq2'),
                             ('upparq2', 'upperq2', 'upq2'),
                             ('umparq2', 'umperq2', 'umq2')):
        assert spectra[par][0] == pytest.approx(0.5 * spectra[total][0])
        assert spectra[perp][0] == pytest.approx(0.5 * spectra[total][0])

    # tq0 accumulated 1.0 per frame
    assert spectra['tq2'][0] == pytest.approx(3.0 / N**4 / HEIGHT_SCALE / 3)
    assert spectra['dum_par'][0] == pytest.approx(0.5 * raw_dum / TILT_SCALE / 3)
    assert results.q_uniq_ny.size == 3 and results.q_uniq.size == 6
    assert results.summary['dot_nN'] == pytest.approx(1.0)


def test_error_bar_of_single_site_class():
    ops = SpectralOperations(N, cache_plans=False)
    rng = np.random.default_rng(7)
    acc = FrameAccumulator(N, 10)
    for k, amplitude in enumerate((1.0, 3.0)):
        fields = random_fields(ops, rng)
        fields['h'] = np.zeros((N, N), dtype=np.complex128)
        fields['h'][0, 0] = amplitude
        add_frame(acc, ops, fields, k)

    results = acc.finalize(ops, 40.0, 40.0, 20.0, 0.01)

    # |h0|^2 = 1, 9: mean 5, mean square 41
    assert results.errors['hq2'][0] == pytest.approx(4.0 / HEIGHT_SCALE)
    assert results.spectra['hq2'][0] == pytest.approx(5.0 / HEIGHT_SCALE)


def test_reference_mismatch_warns():
    ops = SpectralOperations(N, cache_plans=False)
    acc = FrameAccumulator(N, 10)
    add_frame(acc, ops, random_fields(ops, np.random.default_rng(8)), 0, t0=18.5)

    with pytest.warns(DataQualityWarning):
        acc.finalize(ops, 40.0, 40.0, 20.0, 0.01)


def test_finalize_without_frames_raises():
    ops = SpectralOperations(N, cache_plans=False)
    with pytest.raises(ValueError):
        FrameAccumulator(N, 10).finalize(ops, 40.0, 40.0, 20.0, 0.01)


def test_area_spectra_require_area_mode():
    zeros = np.zeros((N, N), dtype=np.complex128)
    with pytest.raises(ValueError):
        FrameAccumulator(N, 10).add_area_spectra(zeros, zeros, zeros)
