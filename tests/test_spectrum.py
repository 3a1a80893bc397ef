import numpy as np
import pytest

from spectrolab.dsp_engine.framing import iter_frames
from spectrolab.dsp_engine.spectrum import DB_EPSILON, SpectrumEngine
from spectrolab.dsp_engine.transforms import (
    TRANSFORM_BACKENDS,
    get_transform,
    naive_dft,
    naive_full_dft,
    naive_inverse_dft,
    numpy_rfft,
    scipy_rfft,
)
from spectrolab.dsp_engine.windows import generate_window
from spectrolab.errors import InvalidParameter, LengthMismatch, TransformFailure

from conftest import sine


def test_naive_dft_of_impulses():
    np.testing.assert_allclose(naive_full_dft([1, 0, 0, 0, 0, 0, 0, 0]), np.ones(8), atol=1e-12)

    result = naive_full_dft([0, 1, 0, 0, 0, 0, 0, 0])
    expected = np.exp(-2j * np.pi * np.arange(8) / 8)
    np.testing.assert_allclose(result, expected, atol=1e-12)
    np.testing.assert_allclose(np.round(result[1], 3), 0.707 - 0.707j)


def test_naive_inverse_recovers_input():
    x = np.array([0.0, 1.0, 0.0, 0.0, -2.0, 0.5, 0.0, 3.0])
    np.testing.assert_allclose(naive_inverse_dft(naive_full_dft(x)), x, atol=1e-10)
    np.testing.assert_allclose(naive_inverse_dft(np.eye(8)[0]), np.full(8, 0.125), atol=1e-12)


@pytest.mark.parametrize("n", [1, 2, 7, 16, 400])
def test_fast_backends_agree_with_reference(n):
    x = np.random.default_rng(n).standard_normal(n)
    reference = naive_dft(x)
    assert reference.shape == (n // 2 + 1,)
    np.testing.assert_allclose(numpy_rfft(x), reference, atol=1e-8)
    np.testing.assert_allclose(scipy_rfft(x), reference, atol=1e-8)


def test_get_transform_by_name():
    for name, fn in TRANSFORM_BACKENDS.items():
        assert get_transform(name.upper()) is fn
    with pytest.raises(InvalidParameter):
        get_transform("fftw")


def test_zero_frame_gives_zero_magnitudes():
    window = generate_window("hann", 64)
    zeros = np.zeros(64, dtype=np.int16)

    mags = SpectrumEngine().analyze(zeros, window)
    assert mags.shape == (33,)
    np.testing.assert_array_equal(mags, 0.0)

    db = SpectrumEngine(use_db=True).analyze(zeros, window)
    np.testing.assert_allclose(db, 20.0 * np.log10(DB_EPSILON))
    assert db[0] == pytest.approx(-200.0)


def test_output_length_is_one_sided():
    for n in (1, 2, 9, 256):
        mags = SpectrumEngine().analyze(np.ones(n, dtype=np.int16), generate_window("hann", n))
        assert mags.shape == (n // 2 + 1,)


def test_full_scale_dc_with_rectangular_window():
    n = 32
    frame = np.full(n, 16384, dtype=np.int16)
    mags = SpectrumEngine().analyze(frame, generate_window("rectangular", n))
    assert mags[0] == pytest.approx(n * 0.5)
    np.testing.assert_allclose(mags[1:], 0.0, atol=1e-9)


def test_accepts_frame_objects_and_reference_transform():
    samples = sine(1000.0, 8000, 64)
    window = generate_window("hann", 64)
    frame = next(iter_frames(samples, 64, 64))
    fast = SpectrumEngine().analyze(frame, window)
    slow = SpectrumEngine(transform=naive_dft).analyze(frame, window)
    np.testing.assert_allclose(fast, slow, atol=1e-8)
    # 1000 Hz at 8 kHz with 64 points lands on bin 8
    assert int(np.argmax(fast)) == 8


def test_length_mismatch():
    with pytest.raises(LengthMismatch):
        SpectrumEngine().analyze(np.zeros(16, dtype=np.int16), generate_window("hann", 32))


def test_transform_exceptions_become_transform_failure():
    def broken(samples):
        raise MemoryError("plan allocation failed")

    with pytest.raises(TransformFailure) as info:
        SpectrumEngine(transform=broken).analyze(np.zeros(8, dtype=np.int16), generate_window("hann", 8))
    assert isinstance(info.value.__cause__, MemoryError)


def test_wrong_length_transform_output_is_transform_failure():
    def full_spectrum(samples):
        return np.fft.fft(samples)

    with pytest.raises(TransformFailure):
        SpectrumEngine(transform=full_spectrum).analyze(np.zeros(8, dtype=np.int16), generate_window("hann", 8))
