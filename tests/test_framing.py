import numpy as np
import pytest

from spectrolab.dsp_engine.framing import frame_count, iter_frames
from spectrolab.errors import InvalidParameter


@pytest.mark.parametrize(
    "n, window, hop",
    [(100, 10, 5), (100, 10, 10), (100, 10, 3), (100, 100, 7), (101, 16, 16), (50, 1, 1), (64, 8, 20)],
)
def test_frame_count_and_offsets(n, window, hop):
    samples = np.arange(n, dtype=np.int16)
    frames = list(iter_frames(samples, window, hop))
    expected = (n - window) // hop + 1
    assert len(frames) == expected == frame_count(n, window, hop)
    for k, frame in enumerate(frames):
        assert frame.index == k
        assert frame.offset == k * hop
        assert len(frame) == window
        np.testing.assert_array_equal(frame.samples, samples[k * hop : k * hop + window])


def test_frames_are_views_not_copies():
    samples = np.arange(32, dtype=np.int16)
    for frame in iter_frames(samples, 8, 4):
        assert np.shares_memory(frame.samples, samples)
        assert not frame.samples.flags.writeable


def test_window_longer_than_signal_yields_nothing():
    assert list(iter_frames(np.zeros(10, dtype=np.int16), 11, 1)) == []
    assert frame_count(10, 11, 1) == 0


def test_iteration_is_restartable():
    samples = np.arange(40, dtype=np.int16)
    first = [(f.offset, f.samples.tolist()) for f in iter_frames(samples, 8, 3)]
    second = [(f.offset, f.samples.tolist()) for f in iter_frames(samples, 8, 3)]
    assert first == second


def test_frames_are_lazy():
    frames = iter_frames(np.arange(1000, dtype=np.int16), 10, 1)
    first = next(frames)
    assert first.offset == 0
    assert next(frames).offset == 1


@pytest.mark.parametrize("window, hop", [(0, 1), (1, 0), (-3, 2), (4, -1), (2.0, 1), (4, True)])
def test_bad_parameters_are_rejected_eagerly(window, hop):
    with pytest.raises(InvalidParameter):
        iter_frames(np.arange(10, dtype=np.int16), window, hop)


def test_pad_tail_adds_one_zero_padded_frame():
    samples = np.arange(1, 11, dtype=np.int16)
    frames = list(iter_frames(samples, 4, 3, pad_tail=True))
    # the frame at 6 already ends at the last sample, so nothing is padded
    assert [f.offset for f in frames] == [0, 3, 6]
    assert frame_count(10, 4, 3, pad_tail=True) == 3

    frames = list(iter_frames(samples, 4, 4, pad_tail=True))
    assert [f.offset for f in frames] == [0, 4, 8]
    np.testing.assert_array_equal(frames[-1].samples, [9, 10, 0, 0])
    assert not np.shares_memory(frames[-1].samples, samples)


def test_pad_tail_covers_short_signal():
    frames = list(iter_frames(np.array([5, 6], dtype=np.int16), 4, 2, pad_tail=True))
    assert len(frames) == 1
    np.testing.assert_array_equal(frames[0].samples, [5, 6, 0, 0])
    assert frame_count(0, 4, 2, pad_tail=True) == 0


@pytest.mark.parametrize("n, window, hop", [(10, 4, 5), (10, 4, 6), (10, 2, 5), (12, 3, 4), (9, 4, 5)])
def test_pad_tail_never_starts_past_the_signal(n, window, hop):
    samples = np.arange(1, n + 1, dtype=np.int16)
    frames = list(iter_frames(samples, window, hop, pad_tail=True))
    assert len(frames) == frame_count(n, window, hop, pad_tail=True)
    for frame in frames:
        assert frame.offset < n
        assert np.any(frame.samples != 0)


def test_pad_tail_with_hop_longer_than_window():
    frames = list(iter_frames(np.arange(1, 11, dtype=np.int16), 4, 5, pad_tail=True))
    assert [f.offset for f in frames] == [0, 5]
    assert frame_count(10, 4, 5, pad_tail=True) == 2

    frames = list(iter_frames(np.arange(1, 12, dtype=np.int16), 4, 5, pad_tail=True))
    assert [f.offset for f in frames] == [0, 5, 10]
    np.testing.assert_array_equal(frames[-1].samples, [11, 0, 0, 0])
