#!/usr/bin/env python3
import numpy as np
import pytest
from BILAYERtools.funcs.spectral import SpectralOperations
from BILAYERtools.funcs.spectral.utils import FFTWPlanCache


def test_full_array_hermitian_symmetry():
    N, lxy = 8, 3.5
    rng = np.random.default_rng(1)
    field = rng.standard_normal((N, N))
    ops = SpectralOperations(N, cache_plans=False)

    half = ops.forward(field)
    full = ops.full_array(half, lxy)

    # the expanded plane is the complete transform with the L / N^2 scale
    assert np.allclose(full, np.fft.fft2(field) * lxy / N**2), "Full plane mismatch!"
    for i in range(1, N):
        for j in range(N):
            assert np.isclose(full[(N - i) % N, (N - j) % N], np.conj(full[i, j])), \
                f"Hermitian symmetry broken at ({i}, {j})"
    # top row copies the half plane directly up to the Nyquist column
    assert np.allclose(full[0, :N // 2 + 1], half[0] * lxy / N**2)
    print("Hermitian symmetry passed.")


def test_full_array_stack_matches_single():
    N = 8
    rng = np.random.default_rng(2)
    fields = rng.standard_normal((3, N, N))
    ops = SpectralOperations(N, cache_plans=False)

    stacked = ops.full_array(ops.forward(fields), 2.0)
    for k in range(3):
        single = ops.full_array(ops.forward(fields[k]), 2.0)
        assert np.allclose(stacked[k], single)


def test_round_trip_single_cell():
    N = 8
    field = np.zeros((N, N))
    field[3, 5] = 7.25
    ops = SpectralOperations(N, cache_plans=False)

    recovered = ops.inverse(ops.forward(field)) / (N * N)
    assert np.allclose(recovered, field, rtol=1e-4, atol=1e-12), "Round trip failed!"
    print("Round trip passed.")


def test_plan_cache_matches_numpy():
    N = 8
    rng = np.random.default_rng(3)
    field = rng.standard_normal((2, N, N))
    cached = SpectralOperations(N, cache_plans=True)
    plain = SpectralOperations(N, cache_plans=False)

    for _ in range(2):
        half = cached.forward(field)
        assert np.allclose(half, plain.forward(field))
        assert np.allclose(cached.inverse(half), plain.inverse(half))


def test_plan_cache_one_plan_per_lattice():
    N = 8
    ops = SpectralOperations(N, cache_plans=True)
    if not ops.fft_cache.enabled:
        pytest.skip("pyfftw not installed")
    rng = np.random.default_rng(4)
    plain = SpectralOperations(N, cache_plans=False)

    for nfield in (2, 12, 1):
        field = rng.standard_normal((nfield, N, N))
        half = ops.forward(field)
        assert np.allclose(half, plain.forward(field))
        assert np.allclose(ops.inverse(half), plain.inverse(half))
    assert sorted(ops.fft_cache.plans, key=str) == [((N, N), False), ((N, N), True)]


def test_plan_cache_evicts_oldest_plan():
    cache = FFTWPlanCache(max_plans=1)
    if not cache.enabled:
        pytest.skip("pyfftw not installed")
    cache.get_fft_plan((4, 4), True)
    cache.get_fft_plan((8, 8), True)
    assert list(cache.plans) == [((8, 8), True)]


@pytest.mark.parametrize("N, expected, expected_nyquist", [(4, 3, 6), (8, 10, 15), (12, 21, 28)])
def test_degeneracy_class_count(N, expected, expected_nyquist):
    ops = SpectralOperations(N, cache_plans=False)
    assert ops.n_classes() == expected
    assert ops.n_classes(include_nyquist=True) == expected_nyquist

    index = ops.class_index()
    assert np.unique(index[index >= 0]).size == expected
    index = ops.class_index(include_nyquist=True)
    assert np.unique(index[index >= 0]).size == expected_nyquist
    # every site belongs to a class once Nyquist classes are kept
    assert np.all(index >= 0)


def test_qav_isotropic_field_is_exact():
    N = 8
    ops = SpectralOperations(N, cache_plans=False)
    q2 = (ops.q[0]**2 + ops.q[1]**2).astype(np.float64)

    for include_nyquist in (False, True):
        m = N // 2 + 1 if include_nyquist else N // 2
        expected = [lo * lo + hi * hi for lo in range(m) for hi in range(lo, m)]
        averaged = ops.qav(q2, include_nyquist=include_nyquist)
        assert np.array_equal(averaged, np.array(expected, dtype=np.float64)), \
            f"isotropic average differs (include_nyquist={include_nyquist})"
    print("Isotropic radial average passed.")


def test_decompose_is_a_rotation():
    N = 8
    rng = np.random.default_rng(4)
    fx = rng.standard_normal((N, N)) + 1j * rng.standard_normal((N, N))
    fy = rng.standard_normal((N, N)) + 1j * rng.standard_normal((N, N))
    ops = SpectralOperations(N, cache_plans=False)

    par, perp = ops.decompose(fx, fy)
    energy_in = np.abs(fx)**2 + np.abs(fy)**2
    energy_out = np.abs(par)**2 + np.abs(perp)**2

    mask = np.ones((N, N), dtype=bool)
    mask[0, 0] = False
    assert np.allclose(energy_in[mask], energy_out[mask]), "Rotation is not energy preserving!"
    assert par[0, 0] == 0 and perp[0, 0] == 0, "Projections must vanish at q = 0"


def test_decompose_along_axes():
    N = 4
    ops = SpectralOperations(N, cache_plans=False)
    fx = np.ones((N, N), dtype=np.complex128)
    fy = np.zeros((N, N), dtype=np.complex128)

    par, perp = ops.decompose(fx, fy)
    # q along x: x component is fully parallel
    assert np.isclose(par[1, 0], 1.0) and np.isclose(perp[1, 0], 0.0)
    # q along y: x component is fully perpendicular
    assert np.isclose(par[0, 1], 0.0) and np.isclose(perp[0, 1], -1.0)


def test_constant_field_end_to_end():
    N, amplitude = 4, 2.5
    ops = SpectralOperations(N, cache_plans=False)
    field = np.full((N, N), amplitude)

    full = ops.full_array(ops.forward(field), 1.0)
    power = np.abs(full)**2
    assert np.allclose(ops.qav(power), [amplitude**2, 0.0, 0.0]), "Constant field spectrum wrong!"
    print("Constant field end-to-end passed.")


def test_derivative_of_sine():
    N, lx, ly = 8, 3.0, 5.0
    ops = SpectralOperations(N, cache_plans=False)
    i = np.arange(N)
    along_x = np.repeat(np.sin(2 * np.pi * i / N)[:, None], N, axis=1)
    along_y = np.repeat(np.sin(2 * np.pi * i / N)[None, :], N, axis=0)

    dfdx, dfdy = ops.derivative(ops.forward(np.stack([along_x, along_y])), lx, ly)

    # raw spectra: the derivative carries a factor N^2 / L
    expected_x = (N**2 / lx) * (2 * np.pi / lx) * np.repeat(np.cos(2 * np.pi * i / N)[:, None], N, axis=1)
    expected_y = (N**2 / ly) * (2 * np.pi / ly) * np.repeat(np.cos(2 * np.pi * i / N)[None, :], N, axis=0)
    assert np.allclose(dfdx[0], expected_x), "x derivative wrong!"
    assert np.allclose(dfdy[0], 0.0, atol=1e-10)
    assert np.allclose(dfdx[1], 0.0, atol=1e-10)
    assert np.allclose(dfdy[1], expected_y), "y derivative must use Ly!"


def test_derivative_is_scaled_inverse_of_derivative_spectra():
    N, lx, ly = 8, 3.0, 5.0
    ops = SpectralOperations(N, cache_plans=False)
    i = np.arange(N)
    field = np.repeat(np.sin(2 * np.pi * i / N)[:, None], N, axis=1)
    half = ops.forward(field)

    dfdx, dfdy = ops.derivative(half, lx, ly)
    dx_half, dy_half = ops.derivative_spectra(half, lx, ly)

    assert np.allclose(dfdx, ops.inverse(dx_half) / lx), "x derivative not scaled by 1/Lx"
    assert np.allclose(dfdy, ops.inverse(dy_half) / ly), "y derivative not scaled by 1/Ly"
    assert np.max(dfdx) == pytest.approx(N**2 / lx * 2 * np.pi / lx)


def test_derivative_drops_nyquist_mode():
    N = 8
    ops = SpectralOperations(N, cache_plans=False)
    i = np.arange(N)
    nyquist = np.repeat(np.cos(np.pi * i)[:, None], N, axis=1)

    dfdx, dfdy = ops.derivative(ops.forward(nyquist), 1.0, 1.0)
    assert np.allclose(dfdx, 0.0, atol=1e-10)
    assert np.allclose(dfdy, 0.0, atol=1e-10)


def test_q_magnitude():
    N, lx, ly = 4, 10.0, 20.0
    ops = SpectralOperations(N, cache_plans=False)
    q = ops.q_magnitude(lx, ly)

    assert q[0, 0] == 0.0
    assert np.isclose(q[1, 0], 2 * np.pi / lx)
    assert np.isclose(q[0, 3], 2 * np.pi / ly)
    assert np.isclose(q[2, 2], 2 * np.pi * np.sqrt((2 / lx)**2 + (2 / ly)**2))


def test_nonfinite_values_propagate():
    N = 4
    ops = SpectralOperations(N, cache_plans=False)
    field = np.zeros((N, N))
    field[1, 2] = np.nan

    full = ops.full_array(ops.forward(field), 1.0)
    assert not np.all(np.isfinite(full))
