"""Overlapping frame segmentation.

Frames are numpy views into the sample array, never copies, except for the
optional zero-padded tail frame.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

from spectrolab.errors import InvalidParameter


@dataclass(frozen=True)
class Frame:
  index: int
  offset: int
  samples: np.ndarray

  def __len__(self) -> int:
    return int(self.samples.shape[0])


def _check_positive(name: str, value: int) -> None:
  if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
    raise InvalidParameter(f"{name} must be a positive integer, got {value!r}")


def frame_count(n_samples: int, window_length: int, hop_size: int, pad_tail: bool = False) -> int:
  """Number of frames :func:`iter_frames` yields for these parameters."""

  _check_positive("window_length", window_length)
  _check_positive("hop_size", hop_size)
  full = 0 if window_length > n_samples else (n_samples - window_length) // hop_size + 1
  if not pad_tail or n_samples <= 0:
    return full
  if full == 0:
    return 1
  # one padded frame, only if samples remain past the last full frame and
  # the next start still falls inside the signal
  last_end = (full - 1) * hop_size + window_length
  if last_end < n_samples and full * hop_size < n_samples:
    return full + 1
  return full


def iter_frames(
  samples: np.ndarray,
  window_length: int,
  hop_size: int,
  pad_tail: bool = False,
) -> Iterator[Frame]:
  """Yield frames starting at ``0, hop_size, 2 * hop_size, ...``.

  A window longer than the signal yields nothing. Without ``pad_tail`` the
  samples after the last full frame are dropped; with it, one zero-padded
  frame is added when its start still lies inside the signal.
  """

  x = np.asarray(samples)
  total = frame_count(x.shape[0], window_length, hop_size, pad_tail=pad_tail)
  # parameters are validated eagerly above, frames are produced lazily below
  return _generate(x, total, int(window_length), int(hop_size))


def _generate(x: np.ndarray, total: int, window_length: int, hop_size: int) -> Iterator[Frame]:
  n = x.shape[0]
  for index in range(total):
    offset = index * hop_size
    end = offset + window_length
    if end <= n:
      view = x[offset:end]
      view.flags.writeable = False
    else:
      view = np.zeros(window_length, dtype=x.dtype)
      view[: n - offset] = x[offset:]
      view.flags.writeable = False
    yield Frame(index=index, offset=offset, samples=view)
