"""Spectrogram analysis engine for SpectroLab.

This package contains the building blocks of the analysis pipeline:
strict WAV decoding, window functions, framing, the transform backends,
per-frame spectra and spectrogram assembly.
"""
from .framing import Frame, frame_count, iter_frames
from .spectrogram import AxisMetadata, Spectrogram, SpectrogramBuilder, build_spectrogram
from .spectrum import SpectrumEngine
from .transforms import Transform, get_transform
from .wav import AudioFormat, SampleBuffer, decode_wav, encode_wav
from .windows import WINDOW_KINDS, generate_window

__all__ = [
  "AudioFormat",
  "AxisMetadata",
  "Frame",
  "SampleBuffer",
  "Spectrogram",
  "SpectrogramBuilder",
  "SpectrumEngine",
  "Transform",
  "WINDOW_KINDS",
  "build_spectrogram",
  "decode_wav",
  "encode_wav",
  "frame_count",
  "generate_window",
  "get_transform",
  "iter_frames",
]
