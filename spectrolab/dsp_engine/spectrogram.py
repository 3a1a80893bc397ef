"""Spectrogram assembly.

Windows the whole signal frame by frame and stacks the magnitude rows into
a ``[time_bins, frequency_bins]`` matrix. Rows are written into a
pre-allocated array by frame index, so the optional thread pool cannot
reorder them.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from time import perf_counter
from typing import Optional

import numpy as np

from spectrolab.dsp_engine.framing import Frame, frame_count, iter_frames
from spectrolab.dsp_engine.spectrum import SpectrumEngine
from spectrolab.dsp_engine.transforms import Transform, numpy_rfft
from spectrolab.dsp_engine.wav import SampleBuffer
from spectrolab.dsp_engine.windows import generate_window
from spectrolab.errors import InsufficientSamples, InvalidParameter
from spectrolab.units import Mapping, Scale, Unit

logger = logging.getLogger("spectrolab.spectrogram")


@dataclass(frozen=True)
class AxisMetadata:
  sample_rate: int
  window_length: int
  hop_size: int

  @property
  def seconds_per_time_bin(self) -> float:
    return self.hop_size / float(self.sample_rate)

  @property
  def hz_per_frequency_bin(self) -> float:
    return self.sample_rate / float(self.window_length)

  def time_of(self, time_bin: int) -> float:
    return time_bin * self.seconds_per_time_bin

  def frequency_of(self, frequency_bin: int) -> float:
    return frequency_bin * self.hz_per_frequency_bin


@dataclass(frozen=True)
class Spectrogram:
  """Read-only magnitude matrix plus the metadata to place it on axes."""

  matrix: np.ndarray
  axes: AxisMetadata
  n_samples: int
  use_db: bool = False

  @property
  def time_bins(self) -> int:
    return int(self.matrix.shape[0])

  @property
  def frequency_bins(self) -> int:
    return int(self.matrix.shape[1])

  def times(self) -> np.ndarray:
    return np.arange(self.time_bins) * self.axes.seconds_per_time_bin

  def frequencies(self) -> np.ndarray:
    return np.arange(self.frequency_bins) * self.axes.hz_per_frequency_bin

  def peak_frequencies(self) -> np.ndarray:
    """Frequency in Hz of the strongest bin in each time bin."""
    return np.argmax(self.matrix, axis=1) * self.axes.hz_per_frequency_bin

  def normalized_columns(self) -> np.ndarray:
    """Scale every time bin by its own strongest bin.

    Linear rows end up in ``[0, 1]`` (silent rows stay zero); dB rows are
    shifted so that their maximum sits at 0 dB.
    """

    peaks = self.matrix.max(axis=1, keepdims=True)
    if self.use_db:
      out = self.matrix - peaks
    else:
      out = np.zeros_like(self.matrix)
      np.divide(self.matrix, peaks, out=out, where=peaks > 0.0)
    out.flags.writeable = False
    return out

  def time_scale(self) -> Scale:
    return Scale(Unit.SECOND, 0.0, self.n_samples / float(self.axes.sample_rate), Mapping.LINEAR)

  def frequency_scale(self, mapping: Mapping = Mapping.LINEAR, unit: Unit = Unit.HZ) -> Scale:
    return Scale(unit, 0.0, self.axes.sample_rate / 2.0, mapping)


@dataclass
class SpectrogramBuilder:
  window_kind: str = "hann"
  window_length: int = 1024
  hop_size: int = 512
  use_db: bool = False
  transform: Transform = field(default=numpy_rfft)
  workers: int = 1
  pad_tail: bool = False

  def build(self, samples: SampleBuffer | np.ndarray, sample_rate: Optional[int] = None) -> Spectrogram:
    """Analyse every frame of ``samples`` in order.

    ``sample_rate`` may be omitted when ``samples`` is a SampleBuffer.

    Raises:
      InvalidParameter: bad sample rate, window or hop
      InsufficientSamples: the signal is shorter than one window
      TransformFailure: the transform backend failed on some frame
    """
    if isinstance(samples, SampleBuffer):
      sr = samples.sample_rate if sample_rate is None else sample_rate
      x = samples.samples
    else:
      sr = sample_rate
      x = np.asarray(samples)

    if sr is None or isinstance(sr, bool) or not isinstance(sr, (int, np.integer)) or sr <= 0:
      raise InvalidParameter(f"sample_rate must be a positive integer, got {sr!r}")
    if x.ndim != 1:
      raise InvalidParameter(f"Expected a single channel of samples, got shape {x.shape}")
    if self.workers < 1:
      raise InvalidParameter(f"workers must be >= 1, got {self.workers}")

    window = generate_window(self.window_kind, self.window_length)
    n_frames = frame_count(x.shape[0], self.window_length, self.hop_size, pad_tail=self.pad_tail)
    if n_frames == 0:
      raise InsufficientSamples(
        f"signal has {x.shape[0]} samples, too short for a {self.window_length}-sample window"
      )

    engine = SpectrumEngine(transform=self.transform, use_db=self.use_db)
    matrix = np.empty((n_frames, self.window_length // 2 + 1), dtype=np.float64)
    frames = iter_frames(x, self.window_length, self.hop_size, pad_tail=self.pad_tail)

    def _analyze_into(frame: Frame) -> None:
      matrix[frame.index] = engine.analyze(frame, window)

    t0 = perf_counter()
    if self.workers == 1:
      for frame in frames:
        _analyze_into(frame)
    else:
      with ThreadPoolExecutor(max_workers=self.workers) as pool:
        # list() re-raises the first worker exception
        list(pool.map(_analyze_into, frames))
    matrix.flags.writeable = False

    axes = AxisMetadata(sample_rate=int(sr), window_length=self.window_length, hop_size=self.hop_size)
    logger.info(
      "[SPECTRO] %s window=%d hop=%d -> %d x %d (%.1f ms/bin, %.2f Hz/bin) in %.1f ms",
      self.window_kind,
      self.window_length,
      self.hop_size,
      n_frames,
      matrix.shape[1],
      axes.seconds_per_time_bin * 1000.0,
      axes.hz_per_frequency_bin,
      (perf_counter() - t0) * 1000.0,
    )
    return Spectrogram(matrix=matrix, axes=axes, n_samples=int(x.shape[0]), use_db=self.use_db)


def build_spectrogram(
  samples: SampleBuffer | np.ndarray,
  sample_rate: int,
  window_kind: str = "hann",
  window_length: int = 1024,
  hop_size: int = 512,
  use_db: bool = False,
  *,
  transform: Optional[Transform] = None,
  workers: int = 1,
  pad_tail: bool = False,
) -> Spectrogram:
  builder = SpectrogramBuilder(
    window_kind=window_kind,
    window_length=window_length,
    hop_size=hop_size,
    use_db=use_db,
    transform=transform or numpy_rfft,
    workers=workers,
    pad_tail=pad_tail,
  )
  return builder.build(samples, sample_rate)
