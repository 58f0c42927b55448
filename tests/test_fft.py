from __future__ import annotations

import numpy as _np
import pytest

from stridenum import array, fft, from_numpy, zeros
from stridenum.errors import DimensionMismatch, UnsupportedSize


def _as_complex(result) -> _np.ndarray:
    pairs = _np.asarray(result)
    return pairs[:, 0] + 1j * pairs[:, 1]


def test_impulse_has_flat_spectrum(ctx):
    result = fft.fft(array([1.0, 0.0, 0.0, 0.0]), ctx=ctx)
    assert result.shape == (4, 2)
    assert result.to_list() == [[1.0, 0.0]] * 4


def test_fft_matches_numpy(ctx, rng):
    signal = rng.standard_normal(16)
    _np.testing.assert_allclose(_as_complex(fft.fft(from_numpy(signal), ctx=ctx)), _np.fft.fft(signal), atol=1e-10)


def test_fft_accepts_interleaved_complex_input(ctx, rng):
    pairs = rng.standard_normal((8, 2))
    expected = _np.fft.fft(pairs[:, 0] + 1j * pairs[:, 1])
    _np.testing.assert_allclose(_as_complex(fft.fft(from_numpy(pairs), ctx=ctx)), expected, atol=1e-10)


def test_ifft_inverts_fft(ctx, rng):
    signal = rng.standard_normal(64)
    restored = _np.asarray(fft.ifft(fft.fft(from_numpy(signal), ctx=ctx), ctx=ctx))
    _np.testing.assert_allclose(restored[:, 0], signal, atol=1e-9)
    _np.testing.assert_allclose(restored[:, 1], 0.0, atol=1e-9)


@pytest.mark.parametrize("length", [0, 6, 12])
def test_fft_requires_power_of_two(ctx, length):
    with pytest.raises(UnsupportedSize):
        fft.fft(zeros((length,)), ctx=ctx)


def test_ifft_requires_pairs(ctx):
    with pytest.raises(DimensionMismatch):
        fft.ifft(zeros((4,)), ctx=ctx)
    with pytest.raises(DimensionMismatch):
        fft.fft(zeros((4, 3)), ctx=ctx)


def test_rfft_keeps_non_negative_bins(ctx, rng):
    signal = rng.standard_normal(8)
    result = fft.rfft(from_numpy(signal), ctx=ctx)
    assert result.shape == (5, 2)
    _np.testing.assert_allclose(_as_complex(result), _np.fft.rfft(signal), atol=1e-10)


def test_irfft_reconstructs_real_signal(ctx, rng):
    signal = rng.standard_normal(8)
    restored = fft.irfft(fft.rfft(from_numpy(signal), ctx=ctx), ctx=ctx)
    assert restored.shape == (8,)
    _np.testing.assert_allclose(_np.asarray(restored), signal, atol=1e-10)


def test_irfft_rejects_non_power_of_two_output(ctx):
    with pytest.raises(UnsupportedSize):
        fft.irfft(zeros((4, 2)), n=6, ctx=ctx)


@pytest.mark.parametrize("size", [2, 8, 16])
def test_irfft_output_length_matches_numpy(ctx, rng, size):
    signal = rng.standard_normal(4)
    spectrum = fft.rfft(from_numpy(signal), ctx=ctx)
    restored = fft.irfft(spectrum, n=size, ctx=ctx)
    assert restored.shape == (size,)
    _np.testing.assert_allclose(_np.asarray(restored), _np.fft.irfft(_np.fft.rfft(signal), n=size), atol=1e-10)


def _as_complex_grid(result) -> _np.ndarray:
    pairs = _np.asarray(result)
    return pairs[..., 0] + 1j * pairs[..., 1]


def test_fft2_matches_numpy(ctx, rng):
    grid = rng.standard_normal((4, 8))
    result = fft.fft2(from_numpy(grid), ctx=ctx)
    assert result.shape == (4, 8, 2)
    _np.testing.assert_allclose(_as_complex_grid(result), _np.fft.fft2(grid), atol=1e-10)


def test_fft2_accepts_complex_grid(ctx, rng):
    pairs = rng.standard_normal((2, 4, 2))
    expected = _np.fft.fft2(pairs[..., 0] + 1j * pairs[..., 1])
    _np.testing.assert_allclose(_as_complex_grid(fft.fft2(from_numpy(pairs), ctx=ctx)), expected, atol=1e-10)


def test_ifft2_inverts_fft2(ctx, rng):
    grid = rng.standard_normal((8, 4))
    restored = _np.asarray(fft.ifft2(fft.fft2(from_numpy(grid), ctx=ctx), ctx=ctx))
    _np.testing.assert_allclose(restored[..., 0], grid, atol=1e-9)
    _np.testing.assert_allclose(restored[..., 1], 0.0, atol=1e-9)


@pytest.mark.parametrize("shape", [(3, 4), (4, 6), (0, 4)])
def test_fft2_requires_power_of_two_axes(ctx, shape):
    with pytest.raises(UnsupportedSize):
        fft.fft2(zeros(shape), ctx=ctx)
    with pytest.raises(UnsupportedSize):
        fft.ifft2(zeros(shape + (2,)), ctx=ctx)


def test_two_dimensional_transforms_check_rank(ctx):
    with pytest.raises(DimensionMismatch):
        fft.fft2(zeros((4,)), ctx=ctx)
    with pytest.raises(DimensionMismatch):
        fft.ifft2(zeros((4, 4)), ctx=ctx)
