"""Per-frame magnitude spectrum."""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from spectrolab.dsp_engine.framing import Frame
from spectrolab.dsp_engine.transforms import Transform, numpy_rfft
from spectrolab.dsp_engine.wav import SAMPLE_SCALE
from spectrolab.errors import LengthMismatch, TransformFailure

DB_EPSILON = 1e-10


@dataclass
class SpectrumEngine:
  transform: Transform = field(default=numpy_rfft)
  use_db: bool = False
  epsilon: float = DB_EPSILON

  def analyze(self, frame: Frame | np.ndarray, window: np.ndarray) -> np.ndarray:
    """Return ``N // 2 + 1`` magnitudes (or dB values) in ascending frequency.

    Args:
      frame: a Frame or raw int16 samples of length N
      window: N window coefficients
    """
    samples = frame.samples if isinstance(frame, Frame) else np.asarray(frame)
    n = samples.shape[0]
    if window.shape[0] != n:
      raise LengthMismatch(f"frame has {n} samples but window has {window.shape[0]} coefficients")

    tapered = (samples.astype(np.float64) / SAMPLE_SCALE) * window

    try:
      spectrum = np.asarray(self.transform(tapered))
    except Exception as exc:
      raise TransformFailure(f"transform failed on a {n}-point frame: {exc}") from exc

    expected = n // 2 + 1
    if spectrum.shape != (expected,):
      raise TransformFailure(
        f"transform returned shape {spectrum.shape} for a {n}-point frame, expected ({expected},)"
      )

    magnitude = np.sqrt(spectrum.real ** 2 + spectrum.imag ** 2)
    if self.use_db:
      return 20.0 * np.log10(magnitude + self.epsilon)
    return magnitude
